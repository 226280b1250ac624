"""Domain errors and their HTTP mapping."""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FilesManagerError(Exception):
    """Base class for errors that end a request with a JSON error body."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(FilesManagerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ValidationError(FilesManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class MissingField(ValidationError):
    """A required upload field (name, type, data) is absent or invalid."""


class InvalidParent(ValidationError):
    """parentId does not reference an existing folder."""

    default_message = "Parent not found"


class NotFound(FilesManagerError):
    """Absent, not owned and malformed identifiers all map here."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class FolderHasNoContent(FilesManagerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "A folder doesn't have content"


class JobError(Exception):
    """A thumbnail job cannot be processed; the queue records it as failed."""


async def handle_files_manager_error(request: Request, exc: FilesManagerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies/queries become a 400 in the same {"error": ...} shape."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        loc = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"Invalid {loc}" if loc else message
    logger.debug("Request validation failed on %s: %s", request.url.path, errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def handle_store_error(request: Request, exc: Exception) -> JSONResponse:
    """Redis/MongoDB failures during a request become a JSON 500."""
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=FilesManagerError.status_code,
        content={"error": FilesManagerError.default_message},
    )
