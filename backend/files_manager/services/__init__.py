"""Business logic services — explicitly constructed and injected.

`init_services()` connects the store clients once at startup and hands the
same handles to every service; `shutdown_services()` reverses it. The
container lives on `app.state` (API) or in the worker's main coroutine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from files_manager.cache import CredentialStore
from files_manager.config import Settings, settings as default_settings
from files_manager.database import MetadataStore
from files_manager.services.file_service import FileService
from files_manager.services.file_storage import FileStorageService
from files_manager.services.job_queue import JobQueue
from files_manager.services.thumbnail_worker import ThumbnailWorker

logger = logging.getLogger(__name__)


@dataclass
class Services:
    metadata_store: MetadataStore
    credential_store: CredentialStore
    storage: FileStorageService
    queue: JobQueue
    files: FileService
    thumbnails: ThumbnailWorker


def build_services(
    metadata_store: MetadataStore,
    credential_store: CredentialStore,
    storage: FileStorageService,
    settings: Settings | None = None,
) -> Services:
    """Wire services around already-constructed client handles."""
    settings = settings or default_settings
    queue = JobQueue(
        credential_store.client,
        name=settings.queue_name,
        poll_timeout=settings.queue_poll_timeout,
    )
    thumbnails = ThumbnailWorker(metadata_store, storage, widths=settings.thumbnail_widths)
    queue.register_handler(thumbnails.process)
    return Services(
        metadata_store=metadata_store,
        credential_store=credential_store,
        storage=storage,
        queue=queue,
        files=FileService(
            metadata_store,
            storage,
            queue,
            page_size=settings.page_size,
            widths=settings.thumbnail_widths,
        ),
        thumbnails=thumbnails,
    )


async def init_services(settings: Settings | None = None) -> Services:
    """Connect Mongo and Redis, prepare the content root, build services."""
    settings = settings or default_settings

    metadata_store = MetadataStore(
        uri=settings.mongo_uri,
        database=settings.db_database,
        timeout_ms=settings.db_timeout_ms,
    )
    credential_store = CredentialStore(url=settings.redis_url)
    await metadata_store.connect()
    await credential_store.connect()

    storage = FileStorageService(settings.folder_path)
    storage.ensure_root()

    services = build_services(metadata_store, credential_store, storage, settings)
    logger.info("Services initialized (content root %s)", storage.base_path)
    return services


async def shutdown_services(services: Services | None) -> None:
    """Stop the consumer loop if running and close both clients."""
    if services is None:
        return
    await services.queue.stop()
    await services.credential_store.close()
    await services.metadata_store.close()
