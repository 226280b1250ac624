"""Thumbnail worker process.

Usage:
    python -m files_manager.worker
    files-manager-worker

Consumes the thumbnail queue until SIGINT/SIGTERM. Several worker
processes may run against the same queue.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from files_manager.config import Settings, settings as default_settings
from files_manager.services import init_services, shutdown_services
from files_manager.utils.log import setup_logging

logger = logging.getLogger(__name__)


async def run_worker(settings: Settings | None = None) -> None:
    settings = settings or default_settings
    services = await init_services(settings)

    loop = asyncio.get_running_loop()
    consumer = asyncio.create_task(services.queue.run_forever())
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, consumer.cancel)
        except NotImplementedError:
            pass  # Windows: KeyboardInterrupt ends asyncio.run instead

    logger.info("Worker started on queue %s", services.queue.name)
    try:
        await consumer
    except asyncio.CancelledError:
        logger.info("Worker stopping")
    finally:
        await shutdown_services(services)


def main() -> None:
    setup_logging(default_settings.log_level)
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
