"""Deciding whether an indexing job should start."""

import structlog
from pydantic import BaseModel

from repo_indexer.core.models.repository import IndexingProgress, IndexStatus

logger = structlog.get_logger(__name__)

# Past this progress an ``indexing`` record is considered owned by a live job
RUNNING_PROGRESS_THRESHOLD = 5


class AdmissionDecision(BaseModel):
    """Whether a job may start, and why not if it may not."""

    proceed: bool
    reason: str
    current: IndexingProgress | None = None


class AdmissionGuard:
    """Advisory check against double-starting a job.

    The check reads the persisted status and is not atomic; callers that
    go on to start a job must still claim the record with
    ``claim_for_indexing``, passing the ``version`` of the snapshot the
    decision was based on.
    """

    def __init__(self, status_store) -> None:
        self._store = status_store

    async def should_start(self, repo_id: str) -> AdmissionDecision:
        current = await self._store.read_status(repo_id)
        if current is None:
            return AdmissionDecision(proceed=False, reason="Repository not found")

        if current.status == IndexStatus.COMPLETED:
            logger.info("Repository already indexed", repo_id=repo_id)
            return AdmissionDecision(
                proceed=False, reason="Repository already indexed", current=current
            )

        if (
            current.status == IndexStatus.INDEXING
            and current.progress > RUNNING_PROGRESS_THRESHOLD
        ):
            logger.info(
                "Indexing already in progress", repo_id=repo_id, progress=current.progress
            )
            return AdmissionDecision(
                proceed=False, reason="Indexing already in progress", current=current
            )

        return AdmissionDecision(proceed=True, reason="Ready to index", current=current)
