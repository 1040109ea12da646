"""Repository record and metadata models."""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from repo_indexer.core.models.file import FileTreeNode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IndexStatus(str, Enum):
    """Lifecycle of a repository's indexing job."""

    PENDING = "pending"
    INDEXING = "indexing"
    COMPLETED = "completed"
    FAILED = "failed"


class RepositoryRecord(BaseModel):
    """A repository submitted for indexing.

    The record is the only observable state of a job: the pipeline writes
    status and progress to it, the status endpoint reads it back.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    repo_url: str
    repo_name: str
    repo_owner: str
    repo_description: str | None = None
    repo_stars: int = 0
    repo_language: str | None = None
    repo_languages: list[str] = Field(default_factory=list)
    repo_default_branch: str = "main"

    # Indexing state
    index_status: IndexStatus = IndexStatus.PENDING
    index_progress: int = Field(default=0, ge=0, le=100)
    status_message: str | None = None
    total_files: int = 0
    indexed_files: int = 0
    error_message: str | None = None
    # Bumped on every status write; claims compare against it
    status_version: int = 0

    cache_ttl_hours: int = 24
    is_popular: bool = False

    # Insights
    repo_summary: str | None = None
    quickstart: str | None = None
    contribution_guide: str | None = None

    # Timestamps
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    indexed_at: datetime | None = None


class IndexingProgress(BaseModel):
    """Last known progress of a repository's job."""

    repo_id: str
    status: IndexStatus
    progress: int
    message: str | None = None
    total_files: int = 0
    indexed_files: int = 0
    error_message: str | None = None
    version: int = 0


class RepositoryMetadata(BaseModel):
    """What the GitHub API tells us about a repository."""

    name: str
    owner: str
    description: str | None = None
    stars: int = 0
    languages: list[str] = Field(default_factory=list)
    default_branch: str = "main"
    files: list[FileTreeNode] = Field(default_factory=list)


class IndexedRepository(BaseModel):
    """Repository-level document written to the search index."""

    id: str
    repo_url: str
    repo_name: str
    repo_owner: str
    repo_description: str | None = None
    repo_stars: int = 0
    repo_language: str | None = None
    repo_languages: list[str] = Field(default_factory=list)
    repo_default_branch: str = "main"
    repo_updated_at: datetime = Field(default_factory=_utcnow)
    index_status: IndexStatus = IndexStatus.INDEXING
    is_popular: bool = False


class Insights(BaseModel):
    """Narrative summary attached to a repository record."""

    summary: str | None = None
    quickstart: str | None = None
    contribution_guide: str | None = None
