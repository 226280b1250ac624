"""Redis list job queue — at-least-once delivery with a failed list.

Layout (for queue name `fileQueue`):
    fileQueue             pending jobs, LPUSH in / pop from the right
    fileQueue:processing  jobs handed to a worker and not yet finished
    fileQueue:failed      jobs whose handler raised, with the error text

A job moves atomically from pending to processing (BLMOVE) and is removed
from processing only after its handler returns or fails. Jobs left in
processing by a crashed or stopped worker are moved back on the next start,
so a job may run more than once; handlers must be idempotent.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from redis.asyncio import Redis
from redis.exceptions import RedisError

from files_manager.config import settings

logger = logging.getLogger(__name__)

JobHandler = Callable[[dict[str, Any]], Awaitable[None]]


class JobQueue:
    """Single job type queue; one handler, one job at a time per process."""

    ERROR_BACKOFF = 1.0  # seconds after a Redis error in the loop

    def __init__(
        self,
        redis_client: Redis,
        name: str | None = None,
        poll_timeout: float | None = None,
    ):
        self._redis = redis_client
        self.name = name or settings.queue_name
        self.processing_key = f"{self.name}:processing"
        self.failed_key = f"{self.name}:failed"
        self._poll_timeout = poll_timeout if poll_timeout is not None else settings.queue_poll_timeout
        self._handler: JobHandler | None = None
        self._task: asyncio.Task | None = None
        self._running = False

    async def enqueue(self, payload: dict[str, Any]) -> None:
        await self._redis.lpush(self.name, json.dumps(payload))
        logger.info("Enqueued job on %s: %s", self.name, payload)

    def register_handler(self, handler: JobHandler) -> None:
        self._handler = handler

    async def recover_processing(self) -> int:
        """Requeue jobs a previous worker took but never finished."""
        recovered = 0
        while await self._redis.lmove(self.processing_key, self.name, "RIGHT", "RIGHT"):
            recovered += 1
        if recovered:
            logger.warning("Recovered %d unfinished job(s) on %s", recovered, self.name)
        return recovered

    async def process_next(self, timeout: float | None = None) -> bool:
        """Wait for one job and run it. Returns False if none arrived."""
        if self._handler is None:
            raise RuntimeError("No job handler registered")

        wait = self._poll_timeout if timeout is None else timeout
        raw = await self._redis.blmove(self.name, self.processing_key, wait, "RIGHT", "LEFT")
        if raw is None:
            return False

        try:
            payload = json.loads(raw)
            await self._handler(payload)
            logger.info("Job completed on %s: %s", self.name, payload)
        except asyncio.CancelledError:
            # Stays in processing; recover_processing() requeues it.
            logger.warning("Job interrupted on %s, left in %s: %s", self.name, self.processing_key, raw)
            raise
        except Exception as e:
            logger.error("Job failed on %s: %s (%s)", self.name, e, raw)
            await self._redis.lpush(
                self.failed_key,
                json.dumps({
                    "job": raw,
                    "error": str(e) or type(e).__name__,
                    "failedAt": datetime.now(timezone.utc).isoformat(),
                }),
            )
        await self._redis.lrem(self.processing_key, 1, raw)
        return True

    async def pending_count(self) -> int:
        return await self._redis.llen(self.name)

    async def failed_count(self) -> int:
        return await self._redis.llen(self.failed_key)

    def start(self) -> None:
        """Run the consumer loop as a background task of the current loop."""
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self.run_forever())
        logger.info("Job queue consumer started on %s", self.name)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Job queue consumer stopped on %s", self.name)

    async def run_forever(self) -> None:
        """Consume jobs until stop() is called or the task is cancelled."""
        self._running = True
        try:
            await self.recover_processing()
        except RedisError as e:
            logger.error("Could not recover processing jobs: %s", e)

        while self._running:
            try:
                await self.process_next()
            except RedisError as e:
                logger.error("Job queue error on %s: %s", self.name, e)
                try:
                    await asyncio.sleep(self.ERROR_BACKOFF)
                except asyncio.CancelledError:
                    break
