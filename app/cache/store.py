from typing import Optional, Protocol

import redis

from app.cache.keys import (
    thread_key,
    anchor_message_key,
    comment_message_key,
)
from app.logger import get_logger


logger = get_logger("threadhook.cache.store")


class StoreError(Exception):
    """
    Raised when the mapping store cannot be read or written.
    """
    pass


class IdentityStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ...


# =========================================================
# Redis backend
# =========================================================

class RedisIdentityStore:
    def __init__(self, client: redis.Redis):
        self._redis = client

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._redis.get(key)
        except redis.RedisError as exc:
            logger.exception("Failed to read mapping: %s", key)
            raise StoreError(f"Failed to read {key}") from exc

        return _as_str(value)

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            self._redis.set(key, value, ex=ttl)
        except redis.RedisError as exc:
            logger.exception("Failed to write mapping: %s", key)
            raise StoreError(f"Failed to write {key}") from exc


# =========================================================
# Utility
# =========================================================

def _as_str(x):
    return x.decode() if isinstance(x, bytes) else x


def _get_id(store: IdentityStore, key: str) -> Optional[int]:
    raw = store.get(key)
    if raw is None:
        return None

    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric mapping %s=%r", key, raw)
        return None


def _set_id(store: IdentityStore, key: str, value: int, ttl: Optional[int]):
    store.set(key, str(value), ttl)


# =========================================================
# Issue ↔ thread mapping
# =========================================================

def get_thread_id(store: IdentityStore, issue_id: int) -> Optional[int]:
    return _get_id(store, thread_key(issue_id))


def set_thread_id(store: IdentityStore, issue_id: int, thread_id: int, ttl: Optional[int] = None):
    _set_id(store, thread_key(issue_id), thread_id, ttl)


def get_anchor_message_id(store: IdentityStore, issue_id: int) -> Optional[int]:
    return _get_id(store, anchor_message_key(issue_id))


def set_anchor_message_id(store: IdentityStore, issue_id: int, message_id: int, ttl: Optional[int] = None):
    _set_id(store, anchor_message_key(issue_id), message_id, ttl)


# =========================================================
# Comment ↔ message mapping
# =========================================================

def get_comment_message_id(store: IdentityStore, comment_id: int) -> Optional[int]:
    return _get_id(store, comment_message_key(comment_id))


def set_comment_message_id(store: IdentityStore, comment_id: int, message_id: int, ttl: Optional[int] = None):
    _set_id(store, comment_message_key(comment_id), message_id, ttl)
