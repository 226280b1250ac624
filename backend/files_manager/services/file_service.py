"""Upload/query service — folder hierarchy, visibility and content access."""

from __future__ import annotations

import base64
import logging
import mimetypes
import re
from typing import TYPE_CHECKING, Any

from bson import ObjectId
from pymongo import ReturnDocument
from redis.exceptions import RedisError

from files_manager.config import settings
from files_manager.errors import (
    FolderHasNoContent,
    InvalidParent,
    MissingField,
    NotFound,
)
from files_manager.models.file_record import (
    ROOT_PARENT,
    FileRecord,
    FileType,
    is_root_parent,
    parse_object_id,
)

if TYPE_CHECKING:
    from files_manager.database import MetadataStore
    from files_manager.services.file_storage import FileStorageService
    from files_manager.services.job_queue import JobQueue

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

_NON_BASE64 = re.compile(r"[^A-Za-z0-9+/]")


def decode_payload(data: str) -> bytes:
    """Decode base64 upload data leniently; never raises.

    Characters outside the alphabet are skipped, url-safe digits are
    accepted, and a dangling single character is dropped.
    """
    compact = _NON_BASE64.sub("", data.replace("-", "+").replace("_", "/"))
    if len(compact) % 4 == 1:
        compact = compact[:-1]
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact)


class FileService:
    """Every operation is one or two direct calls against the stores.

    Ownership and visibility failures are reported as NotFound so the
    existence of another user's private file is never revealed.
    """

    def __init__(
        self,
        metadata_store: MetadataStore,
        storage: FileStorageService,
        queue: JobQueue | None = None,
        page_size: int | None = None,
        widths: tuple[int, ...] | None = None,
    ):
        self._db = metadata_store
        self._storage = storage
        self._queue = queue
        self._page_size = page_size or settings.page_size
        self._sizes = {str(w) for w in (widths or settings.thumbnail_widths)}

    async def create(
        self,
        user_id: ObjectId,
        name: str | None,
        type: str | None,
        parent_id: Any = ROOT_PARENT,
        is_public: bool = False,
        data: str | None = None,
    ) -> FileRecord:
        if not name:
            raise MissingField("Missing name")
        try:
            file_type = FileType(type)
        except ValueError:
            raise MissingField("Missing type")
        if not data and file_type != FileType.FOLDER:
            raise MissingField("Missing data")

        parent = ROOT_PARENT
        if not is_root_parent(parent_id):
            parent = await self._resolve_parent(parent_id)

        record = FileRecord(
            user_id=user_id,
            name=name,
            type=file_type,
            is_public=bool(is_public),
            parent_id=parent,
        )

        if file_type != FileType.FOLDER:
            content = decode_payload(data)
            record.local_path = await self._storage.save(content)

        result = await self._db.files.insert_one(record.to_document())
        record.id = result.inserted_id
        logger.info("Created %s %s for user %s", file_type.value, record.id, user_id)

        if file_type == FileType.IMAGE:
            await self._enqueue_thumbnails(record)

        return record

    async def get(self, user_id: ObjectId, file_id: Any) -> FileRecord:
        oid = parse_object_id(file_id)
        if oid is None:
            raise NotFound()
        doc = await self._db.files.find_one({"_id": oid, "userId": user_id})
        if not doc:
            raise NotFound()
        return FileRecord.from_document(doc)

    async def list_files(
        self,
        user_id: ObjectId,
        parent_id: Any = ROOT_PARENT,
        page: int = 0,
    ) -> list[FileRecord]:
        if is_root_parent(parent_id):
            parent: ObjectId | int = ROOT_PARENT
        else:
            parent = parse_object_id(parent_id)
            if parent is None:
                return []

        page = max(page, 0)
        cursor = await self._db.files.aggregate([
            {"$match": {"userId": user_id, "parentId": parent}},
            {"$skip": page * self._page_size},
            {"$limit": self._page_size},
        ])
        docs = await cursor.to_list()
        return [FileRecord.from_document(doc) for doc in docs]

    async def set_visibility(self, user_id: ObjectId, file_id: Any, is_public: bool) -> FileRecord:
        oid = parse_object_id(file_id)
        if oid is None:
            raise NotFound()
        doc = await self._db.files.find_one_and_update(
            {"_id": oid, "userId": user_id},
            {"$set": {"isPublic": is_public}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFound()
        return FileRecord.from_document(doc)

    async def download(
        self,
        file_id: Any,
        requester_id: ObjectId | None = None,
        size: str | None = None,
    ) -> tuple[bytes, str]:
        """Return (content, mime type) for a public or owned record."""
        oid = parse_object_id(file_id)
        if oid is None:
            raise NotFound()
        doc = await self._db.files.find_one({"_id": oid})
        if not doc:
            raise NotFound()
        record = FileRecord.from_document(doc)

        if not record.is_public and (requester_id is None or requester_id != record.user_id):
            raise NotFound()
        if record.is_folder:
            raise FolderHasNoContent()

        path = record.local_path
        if path and size is not None and str(size) in self._sizes:
            path = self._storage.derivative_path(path, size)

        if not await self._storage.exists(path):
            raise NotFound()

        mime_type = mimetypes.guess_type(record.name)[0] or DEFAULT_MIME_TYPE
        return await self._storage.read(path), mime_type

    async def _resolve_parent(self, parent_id: Any) -> ObjectId:
        oid = parse_object_id(parent_id)
        if oid is None:
            raise InvalidParent("Parent not found")
        parent = await self._db.files.find_one({"_id": oid})
        if not parent:
            raise InvalidParent("Parent not found")
        if parent.get("type") != FileType.FOLDER.value:
            raise InvalidParent("Parent is not a folder")
        return oid

    async def _enqueue_thumbnails(self, record: FileRecord) -> None:
        """Best-effort: the upload succeeds even if the job is never queued."""
        if self._queue is None:
            return
        try:
            await self._queue.enqueue({"userId": str(record.user_id), "fileId": str(record.id)})
        except RedisError as e:
            logger.warning("Thumbnail job for %s not enqueued: %s", record.id, e)
