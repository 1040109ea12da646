"""Job outcome models."""

from pydantic import BaseModel, Field

from repo_indexer.core.models.repository import IndexStatus


class FileOutcome(BaseModel):
    """Result of fetching and indexing a single file."""

    path: str
    indexed: bool
    error: str | None = None


class JobReport(BaseModel):
    """Terminal outcome of one invocation of the indexing job."""

    repo_id: str
    status: IndexStatus
    message: str
    started: bool = True
    total_files: int = 0
    indexed_files: int = 0
    failed_files: list[str] = Field(default_factory=list)
    error: str | None = None
