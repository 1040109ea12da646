"""File tree and indexed file models."""

from enum import Enum

from pydantic import BaseModel, Field

PLACEHOLDER_UNAVAILABLE = "// File: {path}\n// Content unavailable"
PLACEHOLDER_TOO_LARGE_OR_BINARY = (
    "// File: {path}\n// Content unavailable (file may be too large or binary)"
)


class FileTreeNode(BaseModel):
    """A file or directory in a repository tree.

    Only nodes tagged ``type == "file"`` with a path count as files.
    Anything else is walked for children and otherwise ignored.
    """

    type: str = ""
    path: str | None = None
    children: list["FileTreeNode"] = Field(default_factory=list)

    @property
    def is_file(self) -> bool:
        return self.type == "file" and bool(self.path)


FileTreeNode.model_rebuild()


class FetchFailure(str, Enum):
    """Why a file's content could not be retrieved."""

    NOT_FOUND = "not_found"
    TOO_LARGE = "too_large"
    BINARY = "binary"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"


class FileContent(BaseModel):
    """Result of fetching one file from the raw content source."""

    path: str
    content: str = ""
    failure: FetchFailure | None = None
    detail: str | None = None

    @property
    def success(self) -> bool:
        return self.failure is None and bool(self.content)

    def content_or_placeholder(self) -> str:
        """Return the content, or a comment stub naming the path."""
        if self.success:
            return self.content
        if self.failure in (None, FetchFailure.TOO_LARGE, FetchFailure.BINARY):
            return PLACEHOLDER_TOO_LARGE_OR_BINARY.format(path=self.path)
        return PLACEHOLDER_UNAVAILABLE.format(path=self.path)


def file_document_id(repo_id: str, file_path: str) -> str:
    """Stable search-document id for a file in a repository."""
    return f"{repo_id}:{file_path}"


class IndexedFile(BaseModel):
    """A file document written to the search index."""

    id: str
    repo_id: str
    file_path: str
    file_content: str
    file_size: int
    file_language: str = "unknown"
    file_type: str = "file"

    @classmethod
    def build(
        cls,
        repo_id: str,
        file_path: str,
        content: str,
        language: str | None,
    ) -> "IndexedFile":
        return cls(
            id=file_document_id(repo_id, file_path),
            repo_id=repo_id,
            file_path=file_path,
            file_content=content,
            file_size=len(content),
            file_language=language or "unknown",
        )
