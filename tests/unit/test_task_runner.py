"""
Test suite for IngestionTaskRunner.

System role: Verification of background ingestion tracking
"""

import asyncio
import uuid

import pytest

from knowledge_center.core.document_processing import IngestionTaskRunner
from knowledge_center.core.exceptions import DocumentProcessingError
from knowledge_center.models import IngestionResult


async def _job(document_id: uuid.UUID, gate: asyncio.Event | None = None) -> IngestionResult:
    if gate is not None:
        await gate.wait()
    return IngestionResult(document_id=document_id, status="VECTORIZED", chunk_count=1)


async def _failing_job() -> IngestionResult:
    raise RuntimeError("database went away")


class TestSubmit:
    """Test suite for scheduling and tracking."""

    @pytest.mark.asyncio
    async def test_wait_returns_result(self) -> None:
        # Arrange
        runner = IngestionTaskRunner()
        document_id = uuid.uuid4()

        # Act
        runner.submit(document_id, _job(document_id))
        result = await runner.wait(document_id)

        # Assert
        assert result.status == "VECTORIZED"

    @pytest.mark.asyncio
    async def test_in_flight_tracks_running_tasks(self) -> None:
        runner = IngestionTaskRunner()
        document_id = uuid.uuid4()
        gate = asyncio.Event()

        runner.submit(document_id, _job(document_id, gate))
        assert runner.in_flight == [document_id]

        gate.set()
        await runner.wait_all()
        await asyncio.sleep(0)

        assert runner.in_flight == []

    @pytest.mark.asyncio
    async def test_rejects_second_submit_for_same_document(self) -> None:
        runner = IngestionTaskRunner()
        document_id = uuid.uuid4()
        gate = asyncio.Event()
        runner.submit(document_id, _job(document_id, gate))

        with pytest.raises(DocumentProcessingError):
            runner.submit(document_id, _job(document_id))

        gate.set()
        await runner.wait_all()

    @pytest.mark.asyncio
    async def test_wait_unknown_document_returns_none(self) -> None:
        runner = IngestionTaskRunner()

        assert await runner.wait(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_failures_are_returned_by_wait_all(self) -> None:
        runner = IngestionTaskRunner()
        runner.submit(uuid.uuid4(), _failing_job())

        results = await runner.wait_all()

        assert len(results) == 1
        assert isinstance(results[0], RuntimeError)

    @pytest.mark.asyncio
    async def test_wait_after_completion_returns_result(self) -> None:
        # Arrange
        runner = IngestionTaskRunner()
        document_id = uuid.uuid4()
        runner.submit(document_id, _job(document_id))
        await runner.wait_all()
        await asyncio.sleep(0)
        assert runner.in_flight == []

        # Act
        result = await runner.wait(document_id)

        # Assert
        assert result is not None
        assert result.document_id == document_id

    @pytest.mark.asyncio
    async def test_wait_after_failure_reraises(self) -> None:
        runner = IngestionTaskRunner()
        document_id = uuid.uuid4()
        runner.submit(document_id, _failing_job())
        await runner.wait_all()
        await asyncio.sleep(0)

        with pytest.raises(RuntimeError, match="database went away"):
            await runner.wait(document_id)

    @pytest.mark.asyncio
    async def test_finished_history_is_bounded(self) -> None:
        runner = IngestionTaskRunner(max_finished=2)
        document_ids = [uuid.uuid4() for _ in range(3)]
        for document_id in document_ids:
            runner.submit(document_id, _job(document_id))
            await runner.wait(document_id)
            await asyncio.sleep(0)

        assert await runner.wait(document_ids[0]) is None
        assert (await runner.wait(document_ids[2])).document_id == document_ids[2]


class TestShutdown:
    """Test suite for shutdown."""

    @pytest.mark.asyncio
    async def test_shutdown_waits_for_in_flight_work(self) -> None:
        runner = IngestionTaskRunner()
        document_id = uuid.uuid4()
        gate = asyncio.Event()
        task = runner.submit(document_id, _job(document_id, gate))
        asyncio.get_running_loop().call_later(0.01, gate.set)

        await runner.shutdown()

        assert task.done()
        assert not task.cancelled()

    @pytest.mark.asyncio
    async def test_submit_after_shutdown_fails(self) -> None:
        runner = IngestionTaskRunner()
        await runner.shutdown()

        with pytest.raises(RuntimeError):
            runner.submit(uuid.uuid4(), _job(uuid.uuid4()))
