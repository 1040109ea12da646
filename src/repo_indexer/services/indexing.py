"""Indexing service."""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from repo_indexer.core.exceptions import RepositoryNotFoundError
from repo_indexer.core.models.job import JobReport
from repo_indexer.core.models.repository import (
    IndexingProgress,
    RepositoryRecord,
)
from repo_indexer.core.models.search import SearchHit
from repo_indexer.github.url_parser import require_github_url
from repo_indexer.pipelines.indexation import IndexationPipeline
from repo_indexer.services.admission import AdmissionDecision, AdmissionGuard
from repo_indexer.services.jobs import JobQueue

logger = structlog.get_logger(__name__)


class IndexingService:
    """Entry points for starting, running and observing indexing jobs.

    ``start_indexing`` returns as soon as the record exists and the job is
    queued. ``run_job`` performs the job and is safe to call more than once
    for the same repository.
    """

    def __init__(
        self,
        pipeline: IndexationPipeline,
        status_store,
        search_index,
        github,
        job_workers: int = 2,
        quick_info_timeout: float = 10.0,
        cache_ttl_hours: int = 24,
        popular_threshold: int = 1000,
        cleanup: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._store = status_store
        self._search = search_index
        self._github = github
        self._guard = AdmissionGuard(status_store)
        self._jobs = JobQueue(self.run_job, workers=job_workers)
        self._quick_info_timeout = quick_info_timeout
        self._cache_ttl_hours = cache_ttl_hours
        self._popular_threshold = popular_threshold
        self._cleanup = cleanup

    @property
    def jobs(self) -> JobQueue:
        return self._jobs

    async def start(self) -> None:
        """Start the background workers."""
        await self._jobs.start()

    async def close(self) -> None:
        await self._jobs.stop()
        if self._cleanup is not None:
            await self._cleanup()

    async def start_indexing(self, repo_url: str) -> RepositoryRecord:
        """Create a pending record for ``repo_url`` and queue its job."""
        ref = require_github_url(repo_url)

        stars = 0
        description = None
        try:
            info = await asyncio.wait_for(
                self._github.fetch_repository_info(repo_url),
                timeout=self._quick_info_timeout,
            )
            stars = info.stars
            description = info.description
        except Exception as e:
            logger.warning("Quick repository info unavailable", repo_url=repo_url, error=str(e))

        record = RepositoryRecord(
            repo_url=repo_url,
            repo_name=ref.repo,
            repo_owner=ref.owner,
            repo_description=description,
            repo_stars=stars,
            cache_ttl_hours=self._cache_ttl_hours,
            is_popular=stars > self._popular_threshold,
        )
        record = await self._store.create_repository(record)

        self._jobs.submit(record.id, repo_url)
        logger.info("Indexing started", repo_id=record.id, repo_url=repo_url)
        return record

    async def enqueue(self, repo_id: str, repo_url: str) -> AdmissionDecision:
        """Queue a job for an existing record if the admission check allows it."""
        decision = await self._guard.should_start(repo_id)
        if decision.current is None:
            raise RepositoryNotFoundError(
                f"Repository not found: {repo_id}",
                details={"repo_id": repo_id},
            )
        if decision.proceed:
            self._jobs.submit(repo_id, repo_url)
        return decision

    async def run_job(self, repo_id: str, repo_url: str) -> JobReport:
        """Admit, claim and run the indexing job for one repository."""
        decision = await self._guard.should_start(repo_id)
        current = decision.current
        if current is None:
            raise RepositoryNotFoundError(
                f"Repository not found: {repo_id}",
                details={"repo_id": repo_id},
            )
        if not decision.proceed:
            return self._skipped(repo_id, decision.reason, current)

        if not await self._store.claim_for_indexing(repo_id, current.version):
            # Another invocation got there between the check and the claim
            current = await self._store.read_status(repo_id) or current
            logger.info("Lost indexing claim", repo_id=repo_id, status=current.status.value)
            return self._skipped(repo_id, "Indexing already in progress", current)

        return await self._pipeline.run(repo_id, repo_url)

    @staticmethod
    def _skipped(repo_id: str, reason: str, current: IndexingProgress) -> JobReport:
        return JobReport(
            repo_id=repo_id,
            status=current.status,
            message=reason,
            started=False,
            total_files=current.total_files,
            indexed_files=current.indexed_files,
        )

    async def get_repository(self, repo_id: str) -> RepositoryRecord:
        record = await self._store.get_repository(repo_id)
        if record is None:
            raise RepositoryNotFoundError(
                f"Repository not found: {repo_id}",
                details={"repo_id": repo_id},
            )
        return record

    async def get_status(self, repo_id: str) -> IndexingProgress:
        progress = await self._store.read_status(repo_id)
        if progress is None:
            raise RepositoryNotFoundError(
                f"Repository not found: {repo_id}",
                details={"repo_id": repo_id},
            )
        return progress

    async def search(self, repo_id: str, query: str, limit: int = 10) -> list[SearchHit]:
        await self.get_status(repo_id)
        return await self._search.search(repo_id, query, limit=limit)
