"""In-process work queue for detached indexing jobs."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

JobHandler = Callable[[str, str], Awaitable[Any]]


class JobQueue:
    """Runs submitted jobs on a fixed pool of worker tasks.

    ``submit`` only enqueues, so the caller never waits for a job. Jobs
    are not persisted: anything still queued when the queue stops is lost
    and has to be triggered again.
    """

    def __init__(self, handler: JobHandler, workers: int = 2) -> None:
        self._handler = handler
        self._workers = max(1, workers)
        self._queue: asyncio.Queue[tuple[str, str]] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(n), name=f"index-worker-{n}")
            for n in range(self._workers)
        ]
        logger.info("Job queue started", workers=self._workers)

    def submit(self, repo_id: str, repo_url: str) -> None:
        self._queue.put_nowait((repo_id, repo_url))
        logger.info("Job queued", repo_id=repo_id, pending=self._queue.qsize())

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Job queue stopped", dropped=self._queue.qsize())

    async def _worker(self, number: int) -> None:
        while True:
            repo_id, repo_url = await self._queue.get()
            try:
                await self._handler(repo_id, repo_url)
            except Exception:
                logger.exception("Indexing job crashed", repo_id=repo_id, worker=number)
            finally:
                self._queue.task_done()
