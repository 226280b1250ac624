"""File routes — upload, browse, publish and download."""

from __future__ import annotations

import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query, Response, status

from files_manager.api.deps import (
    get_current_user_id,
    get_current_user_id_optional,
    get_file_service,
)
from files_manager.schemas.files import FileCreate, FileResponse
from files_manager.services.file_service import FileService

logger = logging.getLogger(__name__)
router = APIRouter()


def _page_number(page: Optional[str]) -> int:
    """Unparseable or negative pages read as the first page."""
    try:
        return max(int(page or 0), 0)
    except ValueError:
        return 0


@router.post("", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    body: FileCreate,
    user_id: ObjectId = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
):
    """Create a folder, or store a base64 file/image."""
    record = await files.create(
        user_id,
        name=body.name,
        type=body.type,
        parent_id=body.parent_id,
        is_public=body.is_public,
        data=body.data,
    )
    return record.to_dict()


@router.get("", response_model=list[FileResponse])
async def list_files(
    parent_id: str = Query("0", alias="parentId"),
    page: Optional[str] = Query(None),
    user_id: ObjectId = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
):
    """List the caller's records under a folder, 20 per page."""
    records = await files.list_files(user_id, parent_id=parent_id, page=_page_number(page))
    return [record.to_dict() for record in records]


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    file_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
):
    record = await files.get(user_id, file_id)
    return record.to_dict()


@router.put("/{file_id}/publish", response_model=FileResponse)
async def publish_file(
    file_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
):
    record = await files.set_visibility(user_id, file_id, True)
    return record.to_dict()


@router.put("/{file_id}/unpublish", response_model=FileResponse)
async def unpublish_file(
    file_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    files: FileService = Depends(get_file_service),
):
    record = await files.set_visibility(user_id, file_id, False)
    return record.to_dict()


@router.get("/{file_id}/data")
async def get_file_data(
    file_id: str,
    size: Optional[str] = Query(None),
    user_id: Optional[ObjectId] = Depends(get_current_user_id_optional),
    files: FileService = Depends(get_file_service),
):
    """
    Download content.

    Private files answer 404 unless X-Token belongs to the owner.
    `size` = 500, 250 or 100 selects a thumbnail of an image.
    """
    content, mime_type = await files.download(file_id, requester_id=user_id, size=size)
    return Response(content=content, media_type=mime_type)
