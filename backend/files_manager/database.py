"""MongoDB metadata store — async client handle with explicit lifecycle."""

from __future__ import annotations

import logging

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from files_manager.config import settings

logger = logging.getLogger(__name__)


class MetadataStore:
    """Owns the MongoDB client; services receive this handle, not a global."""

    def __init__(
        self,
        uri: str | None = None,
        database: str | None = None,
        timeout_ms: int | None = None,
    ):
        self._uri = uri or settings.mongo_uri
        self._database = database or settings.db_database
        self._timeout_ms = timeout_ms or settings.db_timeout_ms
        self._client: AsyncMongoClient | None = None
        self._db: AsyncDatabase | None = None

    async def connect(self) -> None:
        """Create the client and verify the server answers.

        An unreachable server is logged, not raised: the driver reconnects
        on its own and /status reports the outage.
        """
        if self._client is not None:
            return
        self._client = AsyncMongoClient(self._uri, serverSelectionTimeoutMS=self._timeout_ms)
        self._db = self._client[self._database]
        try:
            await self._client.admin.command("ping")
            await self.files.create_index([("userId", ASCENDING), ("parentId", ASCENDING)])
            logger.info("Connected to MongoDB database: %s", self._database)
        except PyMongoError as e:
            logger.error("MongoDB connection error: %s", e)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")

    async def is_alive(self) -> bool:
        """Liveness check for health probes."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError:
            return False

    @property
    def db(self) -> AsyncDatabase:
        if self._db is None:
            raise RuntimeError("MetadataStore not connected — call connect() first")
        return self._db

    @property
    def files(self) -> AsyncCollection:
        return self.db["files"]

    @property
    def users(self) -> AsyncCollection:
        return self.db["users"]

    async def nb_users(self) -> int:
        return await self.users.count_documents({})

    async def nb_files(self) -> int:
        return await self.files.count_documents({})
