"""Indexing API endpoints."""

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from repo_indexer.api.dependencies import IndexingServiceDep
from repo_indexer.core.exceptions import InvalidRepositoryUrlError, RepositoryNotFoundError
from repo_indexer.core.models.repository import (
    IndexingProgress,
    IndexStatus,
    RepositoryRecord,
)
from repo_indexer.core.models.search import SearchHit

router = APIRouter(prefix="/repositories")


# --- Request/Response models ---

class IndexRepositoryRequest(BaseModel):
    """Request to index a GitHub repository."""

    repo_url: str = Field(..., min_length=1, max_length=1000)


class IndexRepositoryResponse(BaseModel):
    """Returned as soon as the job is queued."""

    success: bool = True
    repo_id: str
    message: str = "Indexing started"
    status: IndexStatus = IndexStatus.PENDING


class RunJobResponse(BaseModel):
    """Outcome of asking for a job to run for an existing record."""

    success: bool = True
    queued: bool
    message: str
    status: IndexStatus
    progress: int


def _not_found(repo_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Repository not found: {repo_id}",
    )


# --- Endpoints ---

@router.post(
    "",
    response_model=IndexRepositoryResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def index_repository(
    request: IndexRepositoryRequest,
    service: IndexingServiceDep,
) -> IndexRepositoryResponse:
    """Register a repository and start indexing it in the background."""
    try:
        record = await service.start_indexing(request.repo_url)
    except InvalidRepositoryUrlError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return IndexRepositoryResponse(repo_id=record.id, status=record.index_status)


@router.post(
    "/{repo_id}/index",
    response_model=RunJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def run_indexing_job(
    repo_id: str,
    request: IndexRepositoryRequest,
    service: IndexingServiceDep,
) -> RunJobResponse:
    """Queue the indexing job for an existing record.

    Safe to call repeatedly: completed or running jobs are reported, not
    started again.
    """
    try:
        decision = await service.enqueue(repo_id, request.repo_url)
    except RepositoryNotFoundError:
        raise _not_found(repo_id)

    current = decision.current
    return RunJobResponse(
        queued=decision.proceed,
        message="Indexing queued" if decision.proceed else decision.reason,
        status=current.status if current else IndexStatus.PENDING,
        progress=current.progress if current else 0,
    )


@router.get("/{repo_id}", response_model=RepositoryRecord)
async def get_repository(
    repo_id: str,
    service: IndexingServiceDep,
) -> RepositoryRecord:
    """Get the full repository record, including insights."""
    try:
        return await service.get_repository(repo_id)
    except RepositoryNotFoundError:
        raise _not_found(repo_id)


@router.get("/{repo_id}/status", response_model=IndexingProgress)
async def get_status(
    repo_id: str,
    service: IndexingServiceDep,
) -> IndexingProgress:
    """Last known progress. May drop to 0 if the job fails."""
    try:
        return await service.get_status(repo_id)
    except RepositoryNotFoundError:
        raise _not_found(repo_id)


@router.get("/{repo_id}/search", response_model=list[SearchHit])
async def search_repository(
    repo_id: str,
    service: IndexingServiceDep,
    q: str = Query(..., min_length=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> list[SearchHit]:
    """Full-text search over a repository's indexed files."""
    try:
        return await service.search(repo_id, q, limit=limit)
    except RepositoryNotFoundError:
        raise _not_found(repo_id)
