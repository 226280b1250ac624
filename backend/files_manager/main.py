"""Files manager FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError
from redis.exceptions import RedisError

from files_manager import __version__
from files_manager.config import Settings, settings as default_settings
from files_manager.errors import (
    FilesManagerError,
    handle_files_manager_error,
    handle_request_validation_error,
    handle_store_error,
)
from files_manager.services import init_services, shutdown_services
from files_manager.utils.log import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # === STARTUP ===
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)

    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = await init_services(settings)

    if settings.run_worker_in_process:
        app.state.services.queue.start()
        logger.info("Thumbnail worker running inside the API process")

    logger.info("files-manager v%s started, listening on %s:%s", __version__, settings.host, settings.port)

    try:
        yield
    finally:
        # === SHUTDOWN ===
        if owns_services:
            await shutdown_services(app.state.services)
            app.state.services = None
        elif settings.run_worker_in_process:
            await app.state.services.queue.stop()
        logger.info("files-manager shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory. Services are attached to app.state at startup."""
    from files_manager.api.routes import api_router

    settings = settings or default_settings

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )
    app.state.settings = settings
    app.state.services = None

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FilesManagerError, handle_files_manager_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(PyMongoError, handle_store_error)
    app.add_exception_handler(RedisError, handle_store_error)

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "files_manager.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_level=default_settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
