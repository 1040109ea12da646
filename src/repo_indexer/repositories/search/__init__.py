"""Search index for repository files."""

from repo_indexer.repositories.search.sqlite import SqliteSearchIndex

__all__ = ["SqliteSearchIndex"]
