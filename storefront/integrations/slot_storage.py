"""Durable key-value slots backing the carts (memory or Redis)."""
from __future__ import annotations

from typing import Any, Protocol

import redis

from storefront.core.exceptions import PersistenceWriteError
from storefront.core.logging_config import logger


class SlotStorage(Protocol):
    """Minimal key-value port used by the cart store."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemorySlotStorage:
    """Process-local slots; used in tests and when Redis is not configured."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class RedisSlotStorage:
    """Slots persisted in Redis, optionally expiring after ``ttl_seconds``."""

    KEY_PREFIX = "storefront:slot:"

    def __init__(
        self,
        redis_url: str,
        *,
        ttl_seconds: int = 0,
        namespace: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._redis_url = redis_url
        self._ttl_seconds = int(ttl_seconds or 0)
        self._namespace = namespace
        self._client = client if client is not None else self._init_client()

    def _init_client(self) -> Any:
        client = redis.from_url(
            self._redis_url,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        logger.info("Redis slot storage enabled")
        return client

    def _key(self, key: str) -> str:
        if self._namespace:
            return f"{self.KEY_PREFIX}{self._namespace}:{key}"
        return f"{self.KEY_PREFIX}{key}"

    def get(self, key: str) -> bytes | None:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as exc:
            logger.warning("Redis slot read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, str):
            return raw.encode("utf-8")
        return bytes(raw)

    def set(self, key: str, value: bytes) -> None:
        try:
            if self._ttl_seconds > 0:
                self._client.setex(self._key(key), self._ttl_seconds, value)
            else:
                self._client.set(self._key(key), value)
        except redis.RedisError as exc:
            raise PersistenceWriteError(key, exc) from exc
