"""Business logic services for repo-indexer."""

from repo_indexer.services.admission import AdmissionDecision, AdmissionGuard
from repo_indexer.services.factory import create_indexing_service
from repo_indexer.services.indexing import IndexingService
from repo_indexer.services.jobs import JobQueue

__all__ = [
    "AdmissionDecision",
    "AdmissionGuard",
    "IndexingService",
    "JobQueue",
    "create_indexing_service",
]
