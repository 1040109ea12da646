"""Core domain models and exceptions for repo-indexer."""

from repo_indexer.core.exceptions import (
    ConfigurationError,
    IndexingError,
    InsightsError,
    InvalidRepositoryUrlError,
    MetadataFetchError,
    MetadataTimeoutError,
    NoFilesIndexedError,
    RepoIndexerError,
    RepositoryNotFoundError,
    SearchIndexError,
    StoreError,
    UpstreamError,
)
from repo_indexer.core.models import (
    FetchFailure,
    FileContent,
    FileOutcome,
    FileTreeNode,
    IndexedFile,
    IndexedRepository,
    IndexingProgress,
    IndexStatus,
    Insights,
    JobReport,
    RepositoryMetadata,
    RepositoryRecord,
    SearchHit,
)

__all__ = [
    # Models
    "FetchFailure",
    "FileContent",
    "FileOutcome",
    "FileTreeNode",
    "IndexedFile",
    "IndexedRepository",
    "IndexingProgress",
    "IndexStatus",
    "Insights",
    "JobReport",
    "RepositoryMetadata",
    "RepositoryRecord",
    "SearchHit",
    # Exceptions
    "RepoIndexerError",
    "ConfigurationError",
    "InvalidRepositoryUrlError",
    "RepositoryNotFoundError",
    "StoreError",
    "SearchIndexError",
    "UpstreamError",
    "MetadataFetchError",
    "MetadataTimeoutError",
    "InsightsError",
    "IndexingError",
    "NoFilesIndexedError",
]
