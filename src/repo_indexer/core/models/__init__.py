"""Domain models for repo-indexer."""

from repo_indexer.core.models.file import (
    FetchFailure,
    FileContent,
    FileTreeNode,
    IndexedFile,
    file_document_id,
)
from repo_indexer.core.models.job import FileOutcome, JobReport
from repo_indexer.core.models.repository import (
    IndexedRepository,
    IndexingProgress,
    IndexStatus,
    Insights,
    RepositoryMetadata,
    RepositoryRecord,
)
from repo_indexer.core.models.search import SearchHit

__all__ = [
    "FetchFailure",
    "FileContent",
    "FileTreeNode",
    "IndexedFile",
    "file_document_id",
    "FileOutcome",
    "JobReport",
    "IndexedRepository",
    "IndexingProgress",
    "IndexStatus",
    "Insights",
    "RepositoryMetadata",
    "RepositoryRecord",
    "SearchHit",
]
