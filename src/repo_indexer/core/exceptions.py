"""Exception hierarchy for repo-indexer."""

from typing import Any


class RepoIndexerError(Exception):
    """Base exception for all repo-indexer errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(RepoIndexerError):
    """Invalid or missing configuration."""


class InvalidRepositoryUrlError(RepoIndexerError):
    """The given URL does not name a GitHub repository."""


class RepositoryNotFoundError(RepoIndexerError):
    """No repository record exists for the given identifier."""


class StoreError(RepoIndexerError):
    """A durable store operation failed."""


class SearchIndexError(RepoIndexerError):
    """A search index operation failed."""


class UpstreamError(RepoIndexerError):
    """The GitHub API returned an error or could not be reached."""


class MetadataFetchError(UpstreamError):
    """Repository metadata could not be fetched."""


class MetadataTimeoutError(MetadataFetchError):
    """Repository metadata was not fetched within the deadline."""


class InsightsError(RepoIndexerError):
    """The summarizer failed or returned an unusable response."""


class IndexingError(RepoIndexerError):
    """A failure that terminates the whole indexing job."""


class NoFilesIndexedError(IndexingError):
    """Not a single file made it into the search index."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("No files were successfully indexed", details=details)
