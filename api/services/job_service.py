"""Job service for managing background jobs from the API."""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from redis.exceptions import RedisError

from api.config import get_settings
from api.exceptions import ExternalServiceError
from api.metrics import record_job_enqueued
from worker.queue import JobInfo, JobQueue, QueuePriority, get_job_queue
from worker.tasks import run_analysis_sync

logger = structlog.get_logger(__name__)


@contextmanager
def _queue_errors() -> Iterator[None]:
    """Re-raise Redis failures as ExternalServiceError (502)."""
    try:
        yield
    except RedisError as e:
        logger.error("job_queue_unavailable", error=str(e))
        raise ExternalServiceError("Redis", "job queue unavailable") from e


class JobService:
    """Service for managing background jobs."""

    def __init__(self, queue: JobQueue | None = None):
        self._queue = queue

    @property
    def queue(self) -> JobQueue:
        if self._queue is None:
            self._queue = get_job_queue()
        return self._queue

    def enqueue_analysis(
        self,
        payload: dict[str, Any],
        priority: QueuePriority = QueuePriority.DEFAULT,
    ) -> str:
        """
        Enqueue a theme analysis job.

        Args:
            payload: Analysis payload (see ``worker.tasks.analyze.run_analysis``)
            priority: Queue priority

        Returns:
            The job ID
        """
        with _queue_errors():
            job = self.queue.enqueue(
                run_analysis_sync,
                payload,
                priority=priority,
                job_id=f"analysis-{uuid.uuid4()}",
                job_timeout=get_settings().analysis_job_timeout,
                meta={
                    "theme_name": payload.get("theme_name"),
                    "store": payload.get("store"),
                    "sections": len(payload.get("section_files", {})),
                },
            )
        record_job_enqueued(priority.value)
        logger.info(
            "analysis_enqueued",
            job_id=job.id,
            theme=payload.get("theme_name"),
            priority=priority.value,
        )
        return job.id  # type: ignore[no-any-return]

    def enqueue_batch(
        self,
        payloads: list[dict[str, Any]],
        priority: QueuePriority = QueuePriority.DEFAULT,
    ) -> list[str]:
        """Enqueue one analysis job per payload, in order."""
        return [self.enqueue_analysis(payload, priority) for payload in payloads]

    def get_job_status(self, job_id: str) -> JobInfo | None:
        """Get status of a job by ID."""
        with _queue_errors():
            return self.queue.get_job_info(job_id)

    def cancel_job(self, job_id: str) -> bool:
        """Cancel a queued job."""
        with _queue_errors():
            return self.queue.cancel_job(job_id)

    def get_queue_stats(self) -> dict:
        """Get queue statistics."""
        with _queue_errors():
            return self.queue.get_queue_stats()


def get_job_service() -> JobService:
    """Dependency provider for the job service."""
    return JobService()
