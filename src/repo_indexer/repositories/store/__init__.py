"""Durable store for repository records."""

from repo_indexer.repositories.store.sqlite import SqliteStatusStore

__all__ = ["SqliteStatusStore"]
