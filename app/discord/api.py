import httpx
from typing import Any, Optional

from app.logger import get_logger


DISCORD_API = "https://discord.com/api/v10"

logger = get_logger("threadhook.discord.api")


class DiscordError(Exception):
    """
    Raised when a Discord API call fails (network error or non-2xx response).
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DiscordUnavailable(DiscordError):
    """
    Raised when the channel/message is gone or the bot lost access.
    """
    pass


def _snowflake(data: Any, endpoint: str) -> int:
    try:
        return int(data["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise DiscordError(f"Response from {endpoint} has no id") from exc


class DiscordClient:
    """
    Minimal Discord REST client covering what the thread mirror needs.

    Every method raises DiscordError on failure; callers decide whether the
    failure abandons their action.
    """

    def __init__(self, token: str, http: Optional[httpx.AsyncClient] = None):
        self._headers = {
            "Authorization": f"Bot {token}",
            "Content-Type": "application/json",
        }
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=DISCORD_API, timeout=10.0)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict] = None,
    ) -> Any:
        try:
            response = await self._http.request(
                method,
                endpoint,
                headers=self._headers,
                json=json,
            )
        except httpx.HTTPError as exc:
            logger.warning("Discord request failed: %s %s (%s)", method, endpoint, exc)
            raise DiscordError(f"{method} {endpoint} failed: {exc}") from exc

        status = response.status_code

        if status in (401, 403, 404):
            logger.warning("Discord resource unavailable (%s): %s", status, endpoint)
            raise DiscordUnavailable(
                f"Discord resource unavailable: {endpoint}", status
            )

        if status >= 400:
            logger.warning(
                "Discord API error %s for %s: %s", status, endpoint, response.text
            )
            raise DiscordError(f"Discord API error {status}: {endpoint}", status)

        if status == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            logger.exception("Failed to decode JSON response from %s", endpoint)
            raise DiscordError(f"Invalid JSON from {endpoint}", status) from exc

    # =========================================================
    # Messages
    # =========================================================

    async def send_message(self, channel_id: int, content: str) -> int:
        data = await self._request(
            "POST",
            f"/channels/{channel_id}/messages",
            {"content": content},
        )
        message_id = _snowflake(data, "send_message")
        logger.debug("Sent message %s to %s", message_id, channel_id)
        return message_id

    async def edit_message(self, channel_id: int, message_id: int, content: str) -> None:
        await self._request(
            "PATCH",
            f"/channels/{channel_id}/messages/{message_id}",
            {"content": content},
        )

    async def delete_message(self, channel_id: int, message_id: int) -> None:
        await self._request(
            "DELETE",
            f"/channels/{channel_id}/messages/{message_id}",
        )

    # =========================================================
    # Threads
    # =========================================================

    async def create_thread(self, parent_channel_id: int, message_id: int, name: str) -> int:
        data = await self._request(
            "POST",
            f"/channels/{parent_channel_id}/messages/{message_id}/threads",
            {"name": name},
        )
        thread_id = _snowflake(data, "create_thread")
        logger.debug("Started thread: %s(%s)", data.get("name"), thread_id)
        return thread_id

    async def rename_thread(self, thread_id: int, name: str) -> None:
        await self._request(
            "PATCH",
            f"/channels/{thread_id}",
            {"name": name},
        )

    async def delete_thread(self, thread_id: int) -> None:
        await self._request("DELETE", f"/channels/{thread_id}")

    async def join_thread(self, thread_id: int) -> None:
        await self._request(
            "PUT",
            f"/channels/{thread_id}/thread-members/@me",
        )
