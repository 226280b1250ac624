"""Local-disk content store for uploaded bytes and thumbnail derivatives."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from files_manager.config import settings

logger = logging.getLogger(__name__)


class FileStorageService:
    """Writes originals under `folder_path` using generated names.

    File names never derive from user input, so uploads cannot collide or
    escape the storage root.
    """

    def __init__(self, base_path: str | Path | None = None):
        self.base_path = Path(base_path or settings.folder_path)

    def ensure_root(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    async def save(self, file_bytes: bytes) -> str:
        """Save bytes under a fresh uuid4 name. Returns the absolute path."""
        self.ensure_root()
        file_path = self.base_path / str(uuid.uuid4())
        async with aiofiles.open(file_path, "wb") as f:
            await f.write(file_bytes)
        logger.debug("Stored %d bytes at %s", len(file_bytes), file_path)
        return str(file_path)

    async def read(self, storage_path: str) -> bytes:
        async with aiofiles.open(storage_path, "rb") as f:
            return await f.read()

    async def write(self, storage_path: str, file_bytes: bytes) -> None:
        """Overwrite a file at an existing path (used for derivatives)."""
        async with aiofiles.open(storage_path, "wb") as f:
            await f.write(file_bytes)

    async def exists(self, storage_path: str | None) -> bool:
        if not storage_path:
            return False
        return await aiofiles.os.path.isfile(storage_path)

    @staticmethod
    def derivative_path(storage_path: str, width: int | str) -> str:
        return f"{storage_path}_{width}"
