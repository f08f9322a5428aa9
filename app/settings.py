import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from app.sync.labels import parse_label_list

load_dotenv()

# === Raw environment values ===

GITHUB_WEBHOOK_SECRET = os.getenv("GITHUB_WEBHOOK_SECRET")

# Mirrored repository
GITHUB_OWNER = os.getenv("GITHUB_OWNER")
GITHUB_REPO = os.getenv("GITHUB_REPO")

# Discord bot
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
DISCORD_CHANNEL_ID = os.getenv("DISCORD_CHANNEL_ID")

# Comma-separated, e.g. "bug, help wanted"
WATCHED_LABELS = os.getenv("WATCHED_LABELS", "")

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Unset keeps thread/message mappings forever
MAPPING_TTL_SECONDS = os.getenv("MAPPING_TTL_SECONDS")


@dataclass(frozen=True)
class SyncConfig:
    """
    Read-only settings shared by the dispatchers for the process lifetime.
    """
    repository: str
    channel_id: int
    watched_labels: frozenset
    mapping_ttl: Optional[int] = None
    # None disables webhook signature checks
    webhook_secret: Optional[str] = None


def validate_settings() -> None:
    """
    Validate required bot configuration.

    Raises RuntimeError if required values are missing or invalid.
    """
    if not GITHUB_OWNER:
        raise RuntimeError("GITHUB_OWNER is not set")

    if not GITHUB_REPO:
        raise RuntimeError("GITHUB_REPO is not set")

    if not DISCORD_TOKEN:
        raise RuntimeError("DISCORD_TOKEN is not set")

    if not DISCORD_CHANNEL_ID:
        raise RuntimeError("DISCORD_CHANNEL_ID is not set")

    if not DISCORD_CHANNEL_ID.strip().isdigit():
        raise RuntimeError(
            f"DISCORD_CHANNEL_ID is not a channel id: {DISCORD_CHANNEL_ID}"
        )

    if not parse_label_list(WATCHED_LABELS):
        raise RuntimeError("WATCHED_LABELS is not set")

    if MAPPING_TTL_SECONDS and not MAPPING_TTL_SECONDS.strip().isdigit():
        raise RuntimeError(
            f"MAPPING_TTL_SECONDS is not a number of seconds: {MAPPING_TTL_SECONDS}"
        )


def load_sync_config() -> SyncConfig:
    validate_settings()

    ttl = int(MAPPING_TTL_SECONDS) if MAPPING_TTL_SECONDS else None

    return SyncConfig(
        repository=f"{GITHUB_OWNER}/{GITHUB_REPO}",
        channel_id=int(DISCORD_CHANNEL_ID),
        watched_labels=parse_label_list(WATCHED_LABELS),
        mapping_ttl=ttl or None,
        webhook_secret=GITHUB_WEBHOOK_SECRET or None,
    )
