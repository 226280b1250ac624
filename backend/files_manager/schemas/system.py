"""Status and health schemas."""

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Liveness of the external stores."""
    redis: bool
    db: bool


class StatsResponse(BaseModel):
    users: int
    files: int


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    service: str = "files-manager"
