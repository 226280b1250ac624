"""FastAPI dependency injection — services and X-Token auth."""

from __future__ import annotations

import logging
from typing import Optional

from bson import ObjectId
from fastapi import Depends, Header, Request

from files_manager.errors import Unauthorized
from files_manager.models.file_record import parse_object_id
from files_manager.services import Services
from files_manager.services.file_service import FileService

logger = logging.getLogger(__name__)


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return services


def get_file_service(services: Services = Depends(get_services)) -> FileService:
    return services.files


async def _resolve_token(services: Services, token: Optional[str]) -> ObjectId | None:
    user_id = await services.credential_store.get_user_id(token)
    if user_id is None:
        return None
    owner = parse_object_id(user_id)
    if owner is None:
        logger.warning("Credential store holds a malformed user id for a token")
    return owner


async def get_current_user_id(
    x_token: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> ObjectId:
    """Resolve X-Token through the credential store, else 401."""
    user_id = await _resolve_token(services, x_token)
    if user_id is None:
        raise Unauthorized()
    return user_id


async def get_current_user_id_optional(
    x_token: Optional[str] = Header(default=None),
    services: Services = Depends(get_services),
) -> Optional[ObjectId]:
    """Return the user id if a valid token was sent, else None."""
    return await _resolve_token(services, x_token)
