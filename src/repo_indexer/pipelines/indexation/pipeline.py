"""Main indexation pipeline."""

import asyncio
import re
from contextlib import suppress
from dataclasses import dataclass, field

import structlog

from repo_indexer.core.exceptions import (
    IndexingError,
    InsightsError,
    MetadataFetchError,
    MetadataTimeoutError,
    NoFilesIndexedError,
    RepoIndexerError,
)
from repo_indexer.core.models.file import IndexedFile
from repo_indexer.core.models.job import FileOutcome, JobReport
from repo_indexer.core.models.repository import (
    IndexedRepository,
    IndexStatus,
    Insights,
    RepositoryMetadata,
)
from repo_indexer.github.limiter import ConcurrencyLimiter
from repo_indexer.github.url_parser import parse_github_url
from repo_indexer.insights.generator import InsightsGenerator
from repo_indexer.utils.file_tree import count_files, flatten_files
from repo_indexer.utils.languages import language_from_path

logger = structlog.get_logger(__name__)

README_RE = re.compile(r"^readme(\.md|\.rst|\.txt)?$", re.IGNORECASE)

FILE_PROGRESS_START = 40
FILE_PROGRESS_SPAN = 50
FILE_PROGRESS_CAP = 90


def compute_file_progress(indexed: int, total: int) -> int:
    """Progress while files are being indexed, within [40, 90]."""
    if total <= 0:
        return FILE_PROGRESS_START
    return min(FILE_PROGRESS_START + (indexed * FILE_PROGRESS_SPAN) // total, FILE_PROGRESS_CAP)


def find_readme(paths: list[str]) -> str | None:
    """First path whose base name is a README."""
    for path in paths:
        if README_RE.match(path.rsplit("/", 1)[-1]):
            return path
    return None


@dataclass
class _JobState:
    repo_id: str
    total_files: int = 0
    indexed_files: int = 0
    last_progress: int = FILE_PROGRESS_START
    last_reported_indexed: int = 0
    failed_files: list[str] = field(default_factory=list)
    progress_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class IndexationPipeline:
    """Drives one repository from URL to a searchable, summarized corpus.

    Stages, with the progress each one reports:
    1. Initialize the search index (7%)
    2. Fetch repository metadata from GitHub (8-15%)
    3. Count files (20-30%)
    4. Index the repository document (40%)
    5. Fetch and index every file through the concurrency limiter (40-90%)
    6. Generate insights from the README or the file layout (92%)
    7. Verify at least one file was indexed, then complete (100%)

    Per-file failures are tallied and skipped. Insights and intermediate
    status writes never fail the job. Everything else marks the record
    failed with the error's message.
    """

    def __init__(
        self,
        status_store,
        search_index,
        github,
        insights: InsightsGenerator | None = None,
        concurrency: int = 8,
        metadata_timeout: float = 30.0,
        status_write_timeout: float = 15.0,
        fetch_heartbeat_delay: float = 2.0,
        progress_update_every: int = 2,
        popular_threshold: int = 1000,
    ) -> None:
        self._store = status_store
        self._search = search_index
        self._github = github
        self._insights = insights
        self._metadata_timeout = metadata_timeout
        self._status_write_timeout = status_write_timeout
        self._fetch_heartbeat_delay = fetch_heartbeat_delay
        self._progress_every = max(1, progress_update_every)
        self._popular_threshold = popular_threshold
        self.limiter = ConcurrencyLimiter(concurrency)

    async def run(self, repo_id: str, repo_url: str) -> JobReport:
        """Run the whole job. Never raises for job failures; see the report."""
        state = _JobState(repo_id=repo_id)
        logger.info("Indexing repository", repo_id=repo_id, repo_url=repo_url)
        try:
            await self._run_stages(state, repo_url)
        except Exception as e:
            return await self._fail(state, e)

        logger.info(
            "Repository indexed",
            repo_id=repo_id,
            indexed=state.indexed_files,
            total=state.total_files,
            failed=len(state.failed_files),
        )
        return JobReport(
            repo_id=repo_id,
            status=IndexStatus.COMPLETED,
            message="Repository ready!",
            total_files=state.total_files,
            indexed_files=state.indexed_files,
            failed_files=state.failed_files,
        )

    async def _run_stages(self, state: _JobState, repo_url: str) -> None:
        repo_id = state.repo_id

        # 1. Search index
        await self._report(repo_id, 7, "Initializing search engine connection...")
        try:
            await self._search.ensure_index_ready()
        except Exception as e:
            raise IndexingError(f"Search index initialization failed: {e}") from e

        # 2. Metadata
        await self._report(repo_id, 8, "Preparing to fetch repository data...")
        await self._report(repo_id, 10, "Connecting to GitHub API...")
        metadata = await self._fetch_metadata(repo_id, repo_url)
        await self._report(repo_id, 15, "Repository data received, processing...")
        await self._refresh_record(repo_id, metadata)

        # 3. Structure
        await self._report(repo_id, 20, "Analyzing repository structure...")
        state.total_files = count_files(metadata.files)
        await self._report(
            repo_id,
            30,
            f"Found {state.total_files} files to index...",
            total_files=state.total_files,
            indexed_files=0,
        )
        if state.total_files == 0:
            raise NoFilesIndexedError(details={"repo_id": repo_id})

        ref = parse_github_url(repo_url)
        owner = ref.owner if ref else metadata.owner
        repo = ref.repo if ref else metadata.name

        # 4. Repository document
        await self._index_repository_document(repo_id, repo_url, owner, metadata)
        await self._report(repo_id, 40, "Building search index...")

        # 5. Files
        paths = flatten_files(metadata.files)
        await self._index_files(state, owner, repo, paths)

        # 6. Insights
        await self._report(repo_id, 92, "Generating repository insights...")
        await self._generate_insights(repo_id, metadata.name, owner, repo, paths)

        # 7. Verify and complete
        if state.indexed_files == 0:
            raise NoFilesIndexedError(details={"repo_id": repo_id, "attempted": len(paths)})
        await self._smoke_test(repo_id)

        await self._store.write_status(
            repo_id,
            IndexStatus.COMPLETED,
            100,
            "Repository ready!",
            total_files=state.total_files,
            indexed_files=state.indexed_files,
        )

    # --- Progress ---

    async def _report(
        self,
        repo_id: str,
        progress: int,
        message: str,
        total_files: int | None = None,
        indexed_files: int | None = None,
    ) -> bool:
        """Write intermediate progress; failures are logged and dropped."""
        try:
            await asyncio.wait_for(
                self._store.write_status(
                    repo_id,
                    IndexStatus.INDEXING,
                    progress,
                    message,
                    total_files=total_files,
                    indexed_files=indexed_files,
                ),
                timeout=self._status_write_timeout,
            )
        except Exception as e:
            logger.warning(
                "Status update failed (non-fatal)",
                repo_id=repo_id,
                progress=progress,
                error=str(e) or type(e).__name__,
            )
            return False
        logger.debug("Progress", repo_id=repo_id, progress=progress, message=message)
        return True

    async def _report_file_progress(self, state: _JobState, force: bool = False) -> None:
        """Report file progress every few files, or with ``force`` whenever the count changed."""
        indexed = state.indexed_files
        if not force and indexed % self._progress_every != 0 and indexed != state.total_files:
            return
        async with state.progress_lock:
            # Re-read under the lock so persisted counts never go backwards
            indexed = state.indexed_files
            if force and indexed == state.last_reported_indexed:
                return
            state.last_reported_indexed = indexed
            progress = max(compute_file_progress(indexed, state.total_files), state.last_progress)
            state.last_progress = progress
            await self._report(
                state.repo_id,
                progress,
                f"Indexing files... {indexed}/{state.total_files}",
                total_files=state.total_files,
                indexed_files=indexed,
            )

    # --- Stages ---

    async def _heartbeat(self, repo_id: str) -> None:
        await asyncio.sleep(self._fetch_heartbeat_delay)
        await self._report(repo_id, 12, "Fetching repository data from GitHub...")

    async def _fetch_metadata(self, repo_id: str, repo_url: str) -> RepositoryMetadata:
        heartbeat = asyncio.create_task(self._heartbeat(repo_id))
        try:
            metadata = await asyncio.wait_for(
                self._github.fetch_repository_metadata(repo_url),
                timeout=self._metadata_timeout,
            )
        except asyncio.TimeoutError as e:
            raise MetadataTimeoutError(
                f"GitHub API timeout after {self._metadata_timeout:g} seconds",
                details={"repo_url": repo_url},
            ) from e
        except Exception as e:
            raise MetadataFetchError(
                f"GitHub API error: {e}",
                details={"repo_url": repo_url},
            ) from e
        finally:
            if not heartbeat.done():
                heartbeat.cancel()
            with suppress(asyncio.CancelledError):
                await heartbeat

        logger.info(
            "Fetched repository metadata",
            repo_id=repo_id,
            name=metadata.name,
            stars=metadata.stars,
            languages=len(metadata.languages),
        )
        return metadata

    async def _refresh_record(self, repo_id: str, metadata: RepositoryMetadata) -> None:
        try:
            await self._store.update_metadata(repo_id, metadata, self._popular_threshold)
        except Exception as e:
            logger.warning("Could not refresh repository record", repo_id=repo_id, error=str(e))

    async def _index_repository_document(
        self,
        repo_id: str,
        repo_url: str,
        owner: str,
        metadata: RepositoryMetadata,
    ) -> None:
        doc = IndexedRepository(
            id=repo_id,
            repo_url=repo_url,
            repo_name=metadata.name,
            repo_owner=owner,
            repo_description=metadata.description,
            repo_stars=metadata.stars,
            repo_language=metadata.languages[0] if metadata.languages else None,
            repo_languages=metadata.languages,
            repo_default_branch=metadata.default_branch,
            is_popular=metadata.stars > self._popular_threshold,
        )
        try:
            await self._search.upsert_repository_document(doc)
        except Exception as e:
            raise IndexingError(f"Search index error: {e}") from e
        logger.info("Indexed repository document", repo_id=repo_id)

    async def _index_files(self, state: _JobState, owner: str, repo: str, paths: list[str]) -> None:
        outcomes = await asyncio.gather(
            *(self._index_file(state, owner, repo, path) for path in paths)
        )
        state.failed_files = [outcome.path for outcome in outcomes if not outcome.indexed]
        # Failures skip the per-file report, so the final count may not be persisted yet
        await self._report_file_progress(state, force=True)
        logger.info(
            "File indexing finished",
            repo_id=state.repo_id,
            indexed=state.indexed_files,
            failed=len(state.failed_files),
        )

    async def _index_file(self, state: _JobState, owner: str, repo: str, path: str) -> FileOutcome:
        try:
            fetched = await self.limiter.run(
                lambda: self._github.fetch_file_content(owner, repo, path)
            )
            if not fetched.success:
                logger.info(
                    "Using placeholder content",
                    repo_id=state.repo_id,
                    path=path,
                    reason=fetched.failure.value if fetched.failure else "empty",
                )
            doc = IndexedFile.build(
                state.repo_id,
                path,
                fetched.content_or_placeholder(),
                language_from_path(path),
            )
            await self._search.upsert_file_document(doc)
        except Exception as e:
            logger.error(
                "Failed to index file",
                repo_id=state.repo_id,
                path=path,
                error=str(e) or type(e).__name__,
            )
            return FileOutcome(path=path, indexed=False, error=str(e) or type(e).__name__)

        state.indexed_files += 1
        await self._report_file_progress(state)
        return FileOutcome(path=path, indexed=True)

    async def _generate_insights(
        self,
        repo_id: str,
        repo_name: str,
        owner: str,
        repo: str,
        paths: list[str],
    ) -> None:
        if self._insights is None:
            logger.info("Insights disabled, skipping", repo_id=repo_id)
            return
        try:
            readme = find_readme(paths)
            if readme is not None:
                try:
                    await self._insights_from_readme(repo_id, repo_name, owner, repo, readme, paths)
                    return
                except Exception as e:
                    logger.warning(
                        "README-based insights failed, falling back to structure analysis",
                        repo_id=repo_id,
                        readme=readme,
                        error=str(e),
                    )
            else:
                logger.info("No README found, using structure analysis", repo_id=repo_id)

            summary = await self._insights.from_structure(repo_name, paths)
            await self._store.write_insights(repo_id, Insights(summary=summary or None))
        except Exception as e:
            logger.warning("Failed to generate insights (non-fatal)", repo_id=repo_id, error=str(e))

    async def _insights_from_readme(
        self,
        repo_id: str,
        repo_name: str,
        owner: str,
        repo: str,
        readme: str,
        paths: list[str],
    ) -> None:
        fetched = await self.limiter.run(
            lambda: self._github.fetch_file_content(owner, repo, readme)
        )
        if not fetched.success:
            raise InsightsError(
                "Could not fetch README content",
                details={"path": readme, "failure": fetched.failure},
            )
        insights = await self._insights.from_readme(repo_name, fetched.content, paths)
        await self._store.write_insights(repo_id, insights)

    async def _smoke_test(self, repo_id: str) -> None:
        try:
            hits = await self._search.search(repo_id, "test")
            logger.info("Search smoke test attempted", repo_id=repo_id, results=len(hits))
        except Exception as e:
            logger.warning("Search smoke test failed (non-fatal)", repo_id=repo_id, error=str(e))

    # --- Failure ---

    async def _fail(self, state: _JobState, error: Exception) -> JobReport:
        message = str(error) or "Unknown error occurred during indexing"
        logger.error(
            "Indexing failed",
            repo_id=state.repo_id,
            error=message,
            exc_info=not isinstance(error, RepoIndexerError),
        )
        try:
            await self._store.write_status(
                state.repo_id,
                IndexStatus.FAILED,
                0,
                "Indexing failed",
                error_message=message,
            )
        except Exception as e:
            logger.error("Failed to persist failed status", repo_id=state.repo_id, error=str(e))

        return JobReport(
            repo_id=state.repo_id,
            status=IndexStatus.FAILED,
            message="Indexing failed",
            total_files=state.total_files,
            indexed_files=state.indexed_files,
            failed_files=state.failed_files,
            error=message,
        )
