"""Health, status and stats endpoints."""

import asyncio

from fastapi import APIRouter, Depends

from files_manager import __version__
from files_manager.api.deps import get_services
from files_manager.schemas.system import HealthResponse, StatsResponse, StatusResponse
from files_manager.services import Services

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight process check. Does not touch the stores."""
    return HealthResponse(version=__version__)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}


@router.get("/status", response_model=StatusResponse)
async def status(services: Services = Depends(get_services)):
    """Liveness of Redis and MongoDB, for health probes."""
    redis_ok, db_ok = await asyncio.gather(
        services.credential_store.is_alive(),
        services.metadata_store.is_alive(),
    )
    return StatusResponse(redis=redis_ok, db=db_ok)


@router.get("/stats", response_model=StatsResponse)
async def stats(services: Services = Depends(get_services)):
    """Number of users and file records."""
    users, files = await asyncio.gather(
        services.metadata_store.nb_users(),
        services.metadata_store.nb_files(),
    )
    return StatsResponse(users=users, files=files)
