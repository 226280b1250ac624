"""File record — metadata document stored in the `files` collection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from bson import ObjectId

# Sentinel stored in parentId for records without an enclosing folder.
ROOT_PARENT = 0


class FileType(str, Enum):
    FOLDER = "folder"
    FILE = "file"
    IMAGE = "image"


def parse_object_id(value: Any) -> ObjectId | None:
    """Return an ObjectId for a 24-hex string (or ObjectId), else None.

    Every lookup goes through here, so a malformed identifier behaves
    exactly like an identifier that matches nothing.
    """
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def is_root_parent(value: Any) -> bool:
    return value in (ROOT_PARENT, "0", None, "")


@dataclass
class FileRecord:
    user_id: ObjectId
    name: str
    type: FileType
    is_public: bool = False
    parent_id: ObjectId | int = ROOT_PARENT
    local_path: str | None = None
    id: ObjectId | None = None

    @property
    def is_folder(self) -> bool:
        return self.type == FileType.FOLDER

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> FileRecord:
        return cls(
            id=doc.get("_id"),
            user_id=doc["userId"],
            name=doc["name"],
            type=FileType(doc["type"]),
            is_public=bool(doc.get("isPublic", False)),
            parent_id=doc.get("parentId", ROOT_PARENT),
            local_path=doc.get("localPath"),
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "userId": self.user_id,
            "name": self.name,
            "type": self.type.value,
            "isPublic": self.is_public,
            "parentId": self.parent_id,
        }
        if self.local_path is not None:
            doc["localPath"] = self.local_path
        if self.id is not None:
            doc["_id"] = self.id
        return doc

    def to_dict(self) -> dict[str, Any]:
        """Canonical client representation; never exposes localPath."""
        return {
            "id": str(self.id) if self.id is not None else None,
            "userId": str(self.user_id),
            "name": self.name,
            "type": self.type.value,
            "isPublic": self.is_public,
            "parentId": ROOT_PARENT if is_root_parent(self.parent_id) else str(self.parent_id),
        }

    def __repr__(self) -> str:
        return f"<FileRecord(id={self.id}, type='{self.type.value}', name='{self.name}')>"
