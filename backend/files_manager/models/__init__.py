"""Document models for the files manager."""

from files_manager.models.file_record import (
    ROOT_PARENT,
    FileRecord,
    FileType,
    is_root_parent,
    parse_object_id,
)

__all__ = [
    "ROOT_PARENT",
    "FileRecord",
    "FileType",
    "is_root_parent",
    "parse_object_id",
]
