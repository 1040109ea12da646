"""SQLite FTS5 implementation of the search index."""

import asyncio
import json
import re
from pathlib import Path

import aiosqlite
import structlog

from repo_indexer.core.exceptions import SearchIndexError
from repo_indexer.core.models.file import IndexedFile
from repo_indexer.core.models.repository import IndexedRepository
from repo_indexer.core.models.search import SearchHit

logger = structlog.get_logger(__name__)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS repository_documents (
    id TEXT PRIMARY KEY,
    repo_url TEXT NOT NULL,
    repo_name TEXT NOT NULL,
    repo_owner TEXT NOT NULL,
    repo_description TEXT,
    repo_stars INTEGER DEFAULT 0,
    repo_language TEXT,
    repo_languages TEXT DEFAULT '[]',
    repo_default_branch TEXT,
    repo_updated_at TEXT,
    index_status TEXT,
    is_popular INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS file_documents (
    id TEXT PRIMARY KEY,
    repo_id TEXT NOT NULL,
    file_path TEXT NOT NULL,
    file_size INTEGER DEFAULT 0,
    file_language TEXT,
    file_type TEXT DEFAULT 'file'
);

CREATE INDEX IF NOT EXISTS idx_file_documents_repo_id ON file_documents(repo_id);

CREATE VIRTUAL TABLE IF NOT EXISTS file_documents_fts USING fts5(
    file_path,
    file_content,
    file_id UNINDEXED,
    repo_id UNINDEXED,
    tokenize = 'unicode61'
);
"""

SEARCH_SQL = """
SELECT f.id, f.repo_id, f.file_path, f.file_language,
       snippet(file_documents_fts, 1, '', '', '...', 24) AS snippet,
       bm25(file_documents_fts) AS rank
FROM file_documents_fts
JOIN file_documents f ON f.id = file_documents_fts.file_id
WHERE file_documents_fts MATCH ? AND file_documents_fts.repo_id = ?
ORDER BY rank
LIMIT ?
"""


def to_match_expression(query: str) -> str | None:
    """Turn free text into an FTS5 expression matching every word."""
    tokens = re.findall(r"\w+", query)
    if not tokens:
        return None
    return " ".join(f'"{token}"' for token in tokens)


class SqliteSearchIndex:
    """Full-text search over indexed repository files.

    Documents are keyed by repository and path, so writing the same file
    twice replaces it instead of duplicating it.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    async def ensure_index_ready(self) -> None:
        """Open the index and create its tables if needed."""
        if self._db is not None:
            return
        try:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self._db_path)
            self._db.row_factory = aiosqlite.Row
            await self._db.executescript(CREATE_TABLES_SQL)
            await self._db.commit()
        except (aiosqlite.Error, OSError) as e:
            self._db = None
            raise SearchIndexError(
                f"Could not open search index: {e}",
                details={"db_path": self._db_path},
            ) from e
        logger.info("SQLite search index initialized", db_path=self._db_path)

    async def _ensure_connected(self) -> aiosqlite.Connection:
        if self._db is None:
            await self.ensure_index_ready()
        assert self._db is not None
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    async def upsert_repository_document(self, doc: IndexedRepository) -> None:
        db = await self._ensure_connected()
        async with self._write_lock:
            try:
                await db.execute(
                    """INSERT OR REPLACE INTO repository_documents
                    (id, repo_url, repo_name, repo_owner, repo_description, repo_stars,
                     repo_language, repo_languages, repo_default_branch,
                     repo_updated_at, index_status, is_popular)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        doc.id,
                        doc.repo_url,
                        doc.repo_name,
                        doc.repo_owner,
                        doc.repo_description,
                        doc.repo_stars,
                        doc.repo_language,
                        json.dumps(doc.repo_languages),
                        doc.repo_default_branch,
                        doc.repo_updated_at.isoformat(),
                        doc.index_status.value,
                        int(doc.is_popular),
                    ),
                )
                await db.commit()
            except aiosqlite.Error as e:
                await db.rollback()
                raise SearchIndexError(
                    f"Failed to index repository document: {e}",
                    details={"repo_id": doc.id},
                ) from e

    async def upsert_file_document(self, doc: IndexedFile) -> None:
        db = await self._ensure_connected()
        async with self._write_lock:
            try:
                # One transaction: the metadata row and its text are written together
                await db.execute(
                    """INSERT OR REPLACE INTO file_documents
                    (id, repo_id, file_path, file_size, file_language, file_type)
                    VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        doc.id,
                        doc.repo_id,
                        doc.file_path,
                        doc.file_size,
                        doc.file_language,
                        doc.file_type,
                    ),
                )
                await db.execute(
                    "DELETE FROM file_documents_fts WHERE file_id = ?", (doc.id,)
                )
                await db.execute(
                    """INSERT INTO file_documents_fts (file_path, file_content, file_id, repo_id)
                    VALUES (?, ?, ?, ?)""",
                    (doc.file_path, doc.file_content, doc.id, doc.repo_id),
                )
                await db.commit()
            except aiosqlite.Error as e:
                await db.rollback()
                raise SearchIndexError(
                    f"Failed to index file document: {e}",
                    details={"repo_id": doc.repo_id, "file_path": doc.file_path},
                ) from e

    async def search(self, repo_id: str, query: str, limit: int = 10) -> list[SearchHit]:
        """Search a repository's files; best matches first."""
        expression = to_match_expression(query)
        if expression is None:
            return []
        db = await self._ensure_connected()
        try:
            cursor = await db.execute(SEARCH_SQL, (expression, repo_id, limit))
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise SearchIndexError(
                f"Search failed: {e}",
                details={"repo_id": repo_id, "query": query},
            ) from e
        return [
            SearchHit(
                file_id=row["id"],
                repo_id=row["repo_id"],
                file_path=row["file_path"],
                file_language=row["file_language"],
                snippet=row["snippet"] or "",
                # bm25() is lower-is-better
                score=-float(row["rank"]),
            )
            for row in rows
        ]

    async def count_files(self, repo_id: str) -> int:
        db = await self._ensure_connected()
        cursor = await db.execute(
            "SELECT COUNT(*) FROM file_documents WHERE repo_id = ?", (repo_id,)
        )
        row = await cursor.fetchone()
        return int(row[0]) if row else 0
