"""Tests for the job admission guard."""

import pytest
from fakes import FakeStatusStore

from repo_indexer.core.models.repository import IndexStatus, RepositoryRecord
from repo_indexer.services.admission import AdmissionGuard


@pytest.mark.unit
class TestAdmissionGuard:
    """Tests for AdmissionGuard.should_start."""

    @pytest.mark.asyncio
    async def test_missing_repository(self, status_store: FakeStatusStore) -> None:
        decision = await AdmissionGuard(status_store).should_start("unknown")

        assert decision.proceed is False
        assert decision.reason == "Repository not found"
        assert decision.current is None

    @pytest.mark.asyncio
    async def test_pending_proceeds(
        self, status_store: FakeStatusStore, sample_record: RepositoryRecord
    ) -> None:
        decision = await AdmissionGuard(status_store).should_start(sample_record.id)

        assert decision.proceed is True
        assert decision.current is not None
        assert decision.current.status == IndexStatus.PENDING

    @pytest.mark.asyncio
    async def test_completed_is_rejected(
        self, status_store: FakeStatusStore, sample_record: RepositoryRecord
    ) -> None:
        sample_record.index_status = IndexStatus.COMPLETED
        sample_record.index_progress = 100

        decision = await AdmissionGuard(status_store).should_start(sample_record.id)

        assert decision.proceed is False
        assert decision.reason == "Repository already indexed"

    @pytest.mark.asyncio
    async def test_running_job_is_rejected(
        self, status_store: FakeStatusStore, sample_record: RepositoryRecord
    ) -> None:
        sample_record.index_status = IndexStatus.INDEXING
        sample_record.index_progress = 40

        decision = await AdmissionGuard(status_store).should_start(sample_record.id)

        assert decision.proceed is False
        assert decision.reason == "Indexing already in progress"
        assert decision.current is not None
        assert decision.current.progress == 40

    @pytest.mark.asyncio
    @pytest.mark.parametrize("progress", [0, 5])
    async def test_indexing_at_or_below_threshold_proceeds(
        self,
        status_store: FakeStatusStore,
        sample_record: RepositoryRecord,
        progress: int,
    ) -> None:
        sample_record.index_status = IndexStatus.INDEXING
        sample_record.index_progress = progress

        decision = await AdmissionGuard(status_store).should_start(sample_record.id)

        assert decision.proceed is True

    @pytest.mark.asyncio
    async def test_failed_can_be_retried(
        self, status_store: FakeStatusStore, sample_record: RepositoryRecord
    ) -> None:
        sample_record.index_status = IndexStatus.FAILED
        sample_record.error_message = "No files were successfully indexed"

        decision = await AdmissionGuard(status_store).should_start(sample_record.id)

        assert decision.proceed is True
