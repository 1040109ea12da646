"""SQLite implementation of the durable repository store."""

import json
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog

from repo_indexer.core.exceptions import RepositoryNotFoundError
from repo_indexer.core.models.repository import (
    IndexingProgress,
    IndexStatus,
    Insights,
    RepositoryMetadata,
    RepositoryRecord,
)

logger = structlog.get_logger(__name__)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS repositories (
    id TEXT PRIMARY KEY,
    repo_url TEXT NOT NULL,
    repo_name TEXT NOT NULL,
    repo_owner TEXT NOT NULL,
    repo_description TEXT,
    repo_stars INTEGER DEFAULT 0,
    repo_language TEXT,
    repo_languages TEXT DEFAULT '[]',
    repo_default_branch TEXT DEFAULT 'main',
    index_status TEXT DEFAULT 'pending',
    index_progress INTEGER DEFAULT 0,
    status_message TEXT,
    total_files INTEGER DEFAULT 0,
    indexed_files INTEGER DEFAULT 0,
    error_message TEXT,
    status_version INTEGER DEFAULT 0,
    cache_ttl_hours INTEGER DEFAULT 24,
    is_popular INTEGER DEFAULT 0,
    repo_summary TEXT,
    quickstart TEXT,
    contribution_guide TEXT,
    created_at TEXT,
    updated_at TEXT,
    indexed_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_repositories_repo_url ON repositories(repo_url);
CREATE INDEX IF NOT EXISTS idx_repositories_index_status ON repositories(index_status);
"""

# Only pending or failed records can be claimed. The version check makes the
# claim a compare-and-swap on the snapshot the caller read, so any write
# since then makes it fail.
CLAIM_SQL = """
UPDATE repositories
SET index_status = 'indexing', index_progress = ?, status_message = ?,
    error_message = NULL, status_version = status_version + 1, updated_at = ?
WHERE id = ?
  AND status_version = ?
  AND index_status IN ('pending', 'failed')
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SqliteStatusStore:
    """Durable store for repository records and their indexing progress.

    Uses aiosqlite; all writes go through a single connection, so they are
    applied in the order they were issued. Status writes are last-write-wins
    and bump ``status_version``; only ``claim_for_indexing`` checks it.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Initialize the database and create tables."""
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(CREATE_TABLES_SQL)
        await self._db.commit()
        logger.info("SQLite status store initialized", db_path=self._db_path)

    async def _ensure_connected(self) -> aiosqlite.Connection:
        if self._db is None:
            await self.initialize()
        assert self._db is not None
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # --- Repository records ---

    async def create_repository(self, record: RepositoryRecord) -> RepositoryRecord:
        db = await self._ensure_connected()
        await db.execute(
            """INSERT INTO repositories
            (id, repo_url, repo_name, repo_owner, repo_description, repo_stars,
             repo_language, repo_languages, repo_default_branch, index_status,
             index_progress, status_message, total_files, indexed_files,
             error_message, status_version, cache_ttl_hours, is_popular, repo_summary,
             quickstart, contribution_guide, created_at, updated_at, indexed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                record.id,
                record.repo_url,
                record.repo_name,
                record.repo_owner,
                record.repo_description,
                record.repo_stars,
                record.repo_language,
                json.dumps(record.repo_languages),
                record.repo_default_branch,
                record.index_status.value,
                record.index_progress,
                record.status_message,
                record.total_files,
                record.indexed_files,
                record.error_message,
                record.status_version,
                record.cache_ttl_hours,
                int(record.is_popular),
                record.repo_summary,
                record.quickstart,
                record.contribution_guide,
                record.created_at.isoformat(),
                record.updated_at.isoformat(),
                record.indexed_at.isoformat() if record.indexed_at else None,
            ),
        )
        await db.commit()
        logger.info("Repository record created", repo_id=record.id, repo_url=record.repo_url)
        return record

    async def get_repository(self, repo_id: str) -> RepositoryRecord | None:
        db = await self._ensure_connected()
        cursor = await db.execute("SELECT * FROM repositories WHERE id = ?", (repo_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    async def list_repositories(self, limit: int = 100, offset: int = 0) -> list[RepositoryRecord]:
        db = await self._ensure_connected()
        cursor = await db.execute(
            "SELECT * FROM repositories ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def update_metadata(
        self,
        repo_id: str,
        metadata: RepositoryMetadata,
        popular_threshold: int = 1000,
    ) -> None:
        """Refresh the descriptive fields of a record from fetched metadata."""
        db = await self._ensure_connected()
        await db.execute(
            """UPDATE repositories
            SET repo_name = ?, repo_owner = ?, repo_description = ?, repo_stars = ?,
                repo_language = ?, repo_languages = ?, repo_default_branch = ?,
                is_popular = ?, updated_at = ?
            WHERE id = ?""",
            (
                metadata.name,
                metadata.owner,
                metadata.description,
                metadata.stars,
                metadata.languages[0] if metadata.languages else None,
                json.dumps(metadata.languages),
                metadata.default_branch,
                int(metadata.stars > popular_threshold),
                _now(),
                repo_id,
            ),
        )
        await db.commit()

    # --- Progress ---

    async def read_status(self, repo_id: str) -> IndexingProgress | None:
        db = await self._ensure_connected()
        cursor = await db.execute(
            """SELECT id, index_status, index_progress, status_message,
                      total_files, indexed_files, error_message, status_version
            FROM repositories WHERE id = ?""",
            (repo_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return IndexingProgress(
            repo_id=row["id"],
            status=IndexStatus(row["index_status"]),
            progress=row["index_progress"],
            message=row["status_message"],
            total_files=row["total_files"] or 0,
            indexed_files=row["indexed_files"] or 0,
            error_message=row["error_message"],
            version=row["status_version"] or 0,
        )

    async def write_status(
        self,
        repo_id: str,
        status: IndexStatus,
        progress: int,
        message: str,
        error_message: str | None = None,
        total_files: int | None = None,
        indexed_files: int | None = None,
    ) -> None:
        """Persist status and progress.

        ``total_files`` and ``indexed_files`` keep their stored values when
        passed as None. ``error_message`` is always overwritten.
        """
        db = await self._ensure_connected()
        now = _now()
        cursor = await db.execute(
            """UPDATE repositories
            SET index_status = ?, index_progress = ?, status_message = ?,
                error_message = ?,
                total_files = COALESCE(?, total_files),
                indexed_files = COALESCE(?, indexed_files),
                status_version = status_version + 1,
                updated_at = ?,
                indexed_at = CASE WHEN ? = 'completed' THEN ? ELSE indexed_at END
            WHERE id = ?""",
            (
                status.value,
                max(0, min(progress, 100)),
                message,
                error_message,
                total_files,
                indexed_files,
                now,
                status.value,
                now,
                repo_id,
            ),
        )
        await db.commit()
        if cursor.rowcount == 0:
            raise RepositoryNotFoundError(
                f"Repository not found: {repo_id}",
                details={"repo_id": repo_id},
            )

    async def claim_for_indexing(
        self,
        repo_id: str,
        expected_version: int,
        progress: int = 5,
        message: str = "Starting indexing process...",
    ) -> bool:
        """Atomically move a record to ``indexing``.

        ``expected_version`` is the ``version`` of the status snapshot the
        caller based its decision on. Returns False when the record changed
        since or is not ``pending`` or ``failed``.
        """
        db = await self._ensure_connected()
        cursor = await db.execute(
            CLAIM_SQL, (progress, message, _now(), repo_id, expected_version)
        )
        await db.commit()
        return cursor.rowcount == 1

    async def write_insights(self, repo_id: str, insights: Insights) -> None:
        db = await self._ensure_connected()
        await db.execute(
            """UPDATE repositories
            SET repo_summary = ?, quickstart = ?, contribution_guide = ?, updated_at = ?
            WHERE id = ?""",
            (
                insights.summary,
                insights.quickstart,
                insights.contribution_guide,
                _now(),
                repo_id,
            ),
        )
        await db.commit()

    # --- Helpers ---

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> RepositoryRecord:
        return RepositoryRecord(
            id=row["id"],
            repo_url=row["repo_url"],
            repo_name=row["repo_name"],
            repo_owner=row["repo_owner"],
            repo_description=row["repo_description"],
            repo_stars=row["repo_stars"] or 0,
            repo_language=row["repo_language"],
            repo_languages=json.loads(row["repo_languages"] or "[]"),
            repo_default_branch=row["repo_default_branch"] or "main",
            index_status=IndexStatus(row["index_status"]),
            index_progress=row["index_progress"] or 0,
            status_message=row["status_message"],
            total_files=row["total_files"] or 0,
            indexed_files=row["indexed_files"] or 0,
            error_message=row["error_message"],
            status_version=row["status_version"] or 0,
            cache_ttl_hours=row["cache_ttl_hours"] or 24,
            is_popular=bool(row["is_popular"]),
            repo_summary=row["repo_summary"],
            quickstart=row["quickstart"],
            contribution_guide=row["contribution_guide"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            indexed_at=(
                datetime.fromisoformat(row["indexed_at"]) if row["indexed_at"] else None
            ),
        )
