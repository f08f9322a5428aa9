from app import settings  # load .env
from fastapi import FastAPI, Request, Header, HTTPException
from contextlib import asynccontextmanager

from app.cache.redis_client import get_redis
from app.cache.store import RedisIdentityStore
from app.discord.api import DiscordClient
from app.github.events import EventRouter
from app.github.models import decode_event
from app.logger import get_logger
from app.security.webhook_verify import verify_signature
from app.sync.comments import CommentDispatcher
from app.sync.issues import IssueDispatcher
from app.sync.locks import KeyedLock


logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Validate critical configuration early
    config = settings.load_sync_config()

    store = RedisIdentityStore(get_redis())
    discord = DiscordClient(settings.DISCORD_TOKEN)
    locks = KeyedLock()

    app.state.config = config
    app.state.router = EventRouter(
        IssueDispatcher(config, store, discord, locks),
        CommentDispatcher(config, store, discord, locks),
    )

    if not config.webhook_secret:
        logger.warning("GITHUB_WEBHOOK_SECRET is not set, signatures are not verified")

    logger.info(
        "Mirroring %s into channel %s with labels: %s",
        config.repository,
        config.channel_id,
        sorted(config.watched_labels),
    )

    try:
        yield
    finally:
        await discord.aclose()
        logger.info("Discord client closed")


app = FastAPI(lifespan=lifespan)


@app.post("/webhook")
async def github_webhook(
    request: Request,
    x_hub_signature_256: str | None = Header(None),
    x_github_event: str | None = Header(None),
):
    body = await request.body()
    config = request.app.state.config

    if config.webhook_secret:
        if not x_hub_signature_256:
            raise HTTPException(status_code=401, detail="Missing signature header")

        if not verify_signature(body, x_hub_signature_256, config.webhook_secret):
            raise HTTPException(status_code=401, detail="Invalid signature")

    if not x_github_event:
        raise HTTPException(status_code=400, detail="Missing GitHub event header")

    if x_github_event == "ping":
        return {"status": "pong"}

    payload = await request.json()
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Payload is not a JSON object")

    logger.info("Received GitHub event: %s", x_github_event)

    event = decode_event(x_github_event, payload)

    expected = config.repository
    if event.repository and event.repository.lower() != expected.lower():
        logger.info("Ignoring event for %s (mirroring %s)", event.repository, expected)
        return {"status": "ignored"}

    await request.app.state.router.route(event)
    return {"status": "ok"}


# 👇 This makes `python -m app.main` work
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )
