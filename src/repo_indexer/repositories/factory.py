"""Repository factory for creating storage instances."""

from typing import TYPE_CHECKING

import structlog

from repo_indexer.repositories.search.sqlite import SqliteSearchIndex
from repo_indexer.repositories.store.sqlite import SqliteStatusStore

if TYPE_CHECKING:
    from repo_indexer.config.settings import Settings

logger = structlog.get_logger(__name__)


class RepositoryFactory:
    """Creates and owns the durable store and the search index."""

    def __init__(self, settings: "Settings") -> None:
        self._settings = settings
        self._status_store: SqliteStatusStore | None = None
        self._search_index: SqliteSearchIndex | None = None

    async def get_status_store(self) -> SqliteStatusStore:
        """Get or create the durable status store."""
        if self._status_store is None:
            self._status_store = SqliteStatusStore(db_path=self._settings.sqlite_path)
            await self._status_store.initialize()
            logger.info("Status store created", db_path=self._settings.sqlite_path)
        return self._status_store

    async def get_search_index(self) -> SqliteSearchIndex:
        """Get or create the search index.

        The index is opened lazily by the pipeline's initialization step so
        that an unavailable index fails the job, not the application.
        """
        if self._search_index is None:
            self._search_index = SqliteSearchIndex(db_path=self._settings.search_index_path)
            logger.info("Search index created", db_path=self._settings.search_index_path)
        return self._search_index

    async def close(self) -> None:
        """Close all storage connections."""
        if self._status_store is not None:
            await self._status_store.close()
        if self._search_index is not None:
            await self._search_index.close()
        self._status_store = None
        self._search_index = None
