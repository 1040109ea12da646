"""Search-related models."""

from pydantic import BaseModel


class SearchHit(BaseModel):
    """A file matching a search query."""

    file_id: str
    repo_id: str
    file_path: str
    file_language: str | None = None
    snippet: str = ""
    score: float = 0.0
