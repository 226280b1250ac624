"""Redis credential store — resolves session tokens to user ids."""

from __future__ import annotations

import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

from files_manager.config import settings

logger = logging.getLogger(__name__)


class CredentialStore:
    """Owns the Redis client; also shared with the job queue."""

    KEY_PREFIX = "auth_"

    def __init__(self, url: str | None = None, client: Redis | None = None):
        self._url = url or settings.redis_url
        self._client = client

    async def connect(self) -> None:
        if self._client is None:
            self._client = Redis.from_url(
                self._url,
                decode_responses=True,
                health_check_interval=30,
            )
        try:
            await self._client.ping()
            logger.info("Redis connection established")
        except RedisError as e:
            logger.error("Redis connection error: %s", e)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    async def is_alive(self) -> bool:
        """Liveness check for health probes."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("CredentialStore not connected — call connect() first")
        return self._client

    async def get_user_id(self, token: str | None) -> str | None:
        """Look up `auth_<token>`; expiry is managed by the login flow."""
        if not token:
            return None
        value = await self.client.get(f"{self.KEY_PREFIX}{token}")
        return value or None
