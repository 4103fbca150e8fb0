"""Redis service for checkpoint and preference storage."""

from __future__ import annotations

import logging
import ssl
from typing import Any

import redis.asyncio as redis

from tandem.config.settings import get_settings

logger = logging.getLogger(__name__)


class RedisService:
    """Thin async Redis wrapper; every call degrades to a no-op when Redis is unreachable."""

    def __init__(self, redis_url: str | None = None, client: redis.Redis | None = None) -> None:
        self._redis_url = redis_url or get_settings().redis_url
        self._client = client
        self._unavailable = False

    @staticmethod
    def _tls_kwargs(redis_url: str) -> dict[str, Any]:
        """Build TLS keyword arguments when using rediss:// URLs."""
        if not redis_url.startswith("rediss://"):
            return {}
        ssl_ctx = ssl.create_default_context()
        ssl_ctx.check_hostname = True
        ssl_ctx.verify_mode = ssl.CERT_REQUIRED
        return {"ssl": ssl_ctx}

    async def _ensure_async_client(self) -> redis.Redis | None:
        """Get or create the async client; None once a connection attempt failed."""
        if self._client is None and not self._unavailable:
            try:
                client = redis.from_url(  # type: ignore[no-untyped-call]
                    self._redis_url,
                    decode_responses=True,
                    **self._tls_kwargs(self._redis_url),
                )
                await client.ping()
                self._client = client
            except (redis.ConnectionError, redis.TimeoutError, OSError) as e:
                logger.warning("redis_unavailable error=%s", type(e).__name__)
                self._unavailable = True
        return self._client

    @property
    def available(self) -> bool:
        return self._client is not None

    async def get(self, key: str) -> str | None:
        """Get raw value by key."""
        client = await self._ensure_async_client()
        if client is None:
            return None
        result = await client.get(key)
        return str(result) if result is not None else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Store a serialized value with optional TTL (seconds). A single SET/SETEX, so it is atomic."""
        client = await self._ensure_async_client()
        if client is None:
            return False
        if ttl:
            return bool(await client.setex(key, ttl, value))
        return bool(await client.set(key, value))

    async def delete(self, key: str) -> bool:
        client = await self._ensure_async_client()
        if client is None:
            return False
        return bool(await client.delete(key))

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["RedisService"]
