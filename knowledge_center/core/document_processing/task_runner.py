"""
In-process background runner for ingestion jobs.

Uploads return as soon as their ingestion is submitted. The runner keeps
the asyncio task of every in-flight document so callers and tests can
await completion, and shutdown waits for all of them. The most recent
finished tasks are kept so a late wait() still sees the outcome. Tasks are never
cancelled; failures are logged and already reflected in document status.

Dependencies: asyncio
System role: Replaces fire-and-forget background processing
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Coroutine
from uuid import UUID

from knowledge_center.core.exceptions import DocumentProcessingError
from knowledge_center.models import IngestionResult

logger = logging.getLogger(__name__)


class IngestionTaskRunner:
    """Track one ingestion task per document."""

    def __init__(self, max_finished: int = 256) -> None:
        self._tasks: dict[UUID, asyncio.Task] = {}
        self._finished: OrderedDict[UUID, asyncio.Task] = OrderedDict()
        self._max_finished = max_finished
        self._closed = False

    @property
    def in_flight(self) -> list[UUID]:
        """Documents whose ingestion has not finished."""
        return [document_id for document_id, task in self._tasks.items() if not task.done()]

    def submit(
        self,
        document_id: UUID,
        job: Coroutine[Any, Any, IngestionResult],
    ) -> asyncio.Task:
        """
        Schedule an ingestion coroutine on the running loop.

        Args:
            document_id: Document being processed
            job: Ingestion coroutine

        Returns:
            asyncio.Task: The scheduled task

        Raises:
            RuntimeError: Runner is shut down
            DocumentProcessingError: Document already has a task in flight
        """
        if self._closed:
            job.close()
            raise RuntimeError("Ingestion runner is shut down")

        current = self._tasks.get(document_id)
        if current is not None and not current.done():
            job.close()
            raise DocumentProcessingError(
                "Document is already being processed", str(document_id)
            )

        task = asyncio.create_task(job, name=f"ingest-{document_id}")
        self._tasks[document_id] = task
        task.add_done_callback(lambda done: self._on_done(document_id, done))

        logger.info(
            f"{__name__}:submit - Ingestion scheduled",
            extra={"document_id": str(document_id), "in_flight": len(self.in_flight)},
        )
        return task

    async def wait(self, document_id: UUID) -> IngestionResult | None:
        """
        Wait for a document's ingestion.

        Finished ingestion is still reported while the task is among the
        most recent max_finished completions.

        Returns:
            IngestionResult, or None when the document has no known task

        Raises:
            Exception: Whatever the ingestion task raised
        """
        task = self._tasks.get(document_id) or self._finished.get(document_id)
        if task is None:
            return None
        return await task

    async def wait_all(self) -> list[IngestionResult | BaseException]:
        """Wait for every in-flight task; exceptions are returned, not raised."""
        tasks = list(self._tasks.values())
        if not tasks:
            return []
        return await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """Refuse new work and wait for in-flight ingestion to finish."""
        self._closed = True
        pending = self.in_flight
        if pending:
            logger.info(
                f"{__name__}:shutdown - Waiting for in-flight ingestion",
                extra={"in_flight": len(pending)},
            )
        await self.wait_all()

    def _on_done(self, document_id: UUID, task: asyncio.Task) -> None:
        if self._tasks.get(document_id) is task:
            del self._tasks[document_id]
        self._finished.pop(document_id, None)
        self._finished[document_id] = task
        while len(self._finished) > self._max_finished:
            self._finished.popitem(last=False)

        if task.cancelled():
            logger.warning(
                f"{__name__}:_on_done - Ingestion cancelled",
                extra={"document_id": str(document_id)},
            )
            return

        error = task.exception()
        if error is not None:
            logger.error(
                f"{__name__}:_on_done - Ingestion failed",
                exc_info=error,
                extra={"document_id": str(document_id), "error_type": type(error).__name__},
            )
            return

        result = task.result()
        logger.info(
            f"{__name__}:_on_done - Ingestion finished",
            extra={"document_id": str(document_id), "status": result.status},
        )
