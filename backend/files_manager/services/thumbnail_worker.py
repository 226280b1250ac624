"""Thumbnail worker — builds resized derivatives for uploaded images."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from files_manager.config import settings
from files_manager.errors import JobError
from files_manager.models.file_record import FileRecord, parse_object_id
from files_manager.utils.thumbnails import make_thumbnail

if TYPE_CHECKING:
    from files_manager.database import MetadataStore
    from files_manager.services.file_storage import FileStorageService

logger = logging.getLogger(__name__)


class ThumbnailWorker:
    """Handles `{fileId, userId}` jobs from the thumbnail queue.

    Each width is generated and written independently: a failing width is
    logged and skipped, and the job still succeeds. Re-running a job
    overwrites the same derivative files.
    """

    def __init__(
        self,
        metadata_store: MetadataStore,
        storage: FileStorageService,
        widths: tuple[int, ...] | None = None,
    ):
        self._db = metadata_store
        self._storage = storage
        self._widths = tuple(widths or settings.thumbnail_widths)

    async def process(self, job: dict[str, Any]) -> None:
        file_id = job.get("fileId")
        user_id = job.get("userId")

        if not file_id:
            raise JobError("Missing fileId")
        if not user_id:
            raise JobError("Missing userId")

        record = await self._find_record(file_id, user_id)
        if record is None or not record.local_path:
            raise JobError("File not found")

        try:
            source = await self._storage.read(record.local_path)
        except OSError as e:
            # Same outcome as every width failing: logged, job not failed.
            logger.error("Cannot read original for %s: %s", file_id, e)
            return

        for width in self._widths:
            try:
                thumbnail = await asyncio.to_thread(make_thumbnail, source, width)
                path = self._storage.derivative_path(record.local_path, width)
                await self._storage.write(path, thumbnail)
                logger.debug("Thumbnail %d written for %s", width, record.id)
            except Exception as e:
                logger.error("Error generating thumbnail %d for %s: %s", width, file_id, e)

    async def _find_record(self, file_id: str, user_id: str) -> FileRecord | None:
        oid = parse_object_id(file_id)
        owner = parse_object_id(user_id)
        if oid is None or owner is None:
            return None
        doc = await self._db.files.find_one({"_id": oid, "userId": owner})
        return FileRecord.from_document(doc) if doc else None
