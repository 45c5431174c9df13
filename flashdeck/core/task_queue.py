from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from flashdeck.core.config import settings
from flashdeck.core.logging import get_logger


JobCallable = Callable[[], Awaitable[None]]

logger = get_logger(__name__)


class BackgroundQueue:
    """Simple in-process async job queue with fixed concurrency."""

    def __init__(self, *, concurrency: int = 2) -> None:
        self.concurrency = max(1, int(concurrency))
        self._queue: asyncio.Queue[JobCallable] | None = None
        self._workers: list[asyncio.Task[None]] = []
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    async def _worker(self, idx: int) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                await job()
            except Exception:  # noqa: BLE001
                # Keep the worker alive; the job owns its own error reporting
                logger.exception("[queue] Worker %s job failed", idx)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        # Bind the queue to the running loop (lifespan or test loop)
        self._queue = asyncio.Queue()
        for i in range(self.concurrency):
            self._workers.append(asyncio.create_task(self._worker(i)))

    async def stop(self) -> None:
        # Drain queue and cancel workers
        if not self._started:
            return
        assert self._queue is not None
        await self._queue.join()
        for t in self._workers:
            t.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()
        self._started = False

    def enqueue(self, fn: JobCallable) -> None:
        if not self._started or self._queue is None:
            raise RuntimeError("BackgroundQueue is not started")
        self._queue.put_nowait(fn)

    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0


# Progress writes from study sessions go through this queue
queue = BackgroundQueue(concurrency=settings.study.queue_concurrency)
