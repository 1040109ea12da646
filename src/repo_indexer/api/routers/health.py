"""Health check endpoint."""

from fastapi import APIRouter

from repo_indexer import __version__
from repo_indexer.api.dependencies import IndexingServiceDep

router = APIRouter()


@router.get("/health")
async def health(service: IndexingServiceDep) -> dict:
    """Liveness plus the state of the job queue."""
    return {
        "status": "ok",
        "version": __version__,
        "workers_running": service.jobs.running,
        "jobs_pending": service.jobs.pending,
    }
