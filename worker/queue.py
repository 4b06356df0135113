"""Job queue service for managing background analysis jobs."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from functools import lru_cache
from typing import Any

from redis import Redis
from rq import Queue
from rq.exceptions import NoSuchJobError
from rq.job import Job

from worker.redis import (
    JOB_RESULT_TTL,
    QUEUE_DEFAULT,
    QUEUE_HIGH,
    QUEUE_LOW,
    get_redis_connection_bytes,
)


class JobStatus(StrEnum):
    """RQ job status values."""

    QUEUED = "queued"
    STARTED = "started"
    DEFERRED = "deferred"
    FINISHED = "finished"
    STOPPED = "stopped"
    SCHEDULED = "scheduled"
    FAILED = "failed"
    CANCELED = "canceled"


class QueuePriority(StrEnum):
    """Queue priority levels."""

    HIGH = "high"
    DEFAULT = "default"
    LOW = "low"


CANCELLABLE_STATUSES = {JobStatus.QUEUED, JobStatus.DEFERRED, JobStatus.SCHEDULED}


@dataclass
class JobInfo:
    """Job information wrapper."""

    id: str
    status: JobStatus
    created_at: datetime | None
    started_at: datetime | None
    ended_at: datetime | None
    result: Any | None
    error: str | None
    meta: dict[str, Any]

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "result": self.result,
            "error": self.error,
            "meta": self.meta,
        }


def job_info_from(job: Job) -> JobInfo:
    status = JobStatus(job.get_status() or JobStatus.QUEUED)
    error = None
    if status == JobStatus.FAILED and job.exc_info:
        # Last line of the traceback is the exception itself
        error = str(job.exc_info).strip().splitlines()[-1]

    return JobInfo(
        id=job.id,
        status=status,
        created_at=job.created_at,
        started_at=job.started_at,
        ended_at=job.ended_at,
        result=job.return_value() if status == JobStatus.FINISHED else None,
        error=error,
        meta=job.meta or {},
    )


class JobQueue:
    """Service for managing RQ job queues."""

    def __init__(self, connection: Redis | None = None) -> None:
        self._conn = connection or get_redis_connection_bytes()
        self._queues = {
            QueuePriority.HIGH: Queue(QUEUE_HIGH, connection=self._conn),
            QueuePriority.DEFAULT: Queue(QUEUE_DEFAULT, connection=self._conn),
            QueuePriority.LOW: Queue(QUEUE_LOW, connection=self._conn),
        }

    def get_queue(self, priority: QueuePriority = QueuePriority.DEFAULT) -> Queue:
        return self._queues[priority]

    def enqueue(
        self,
        func: Any,
        *args: Any,
        priority: QueuePriority = QueuePriority.DEFAULT,
        job_id: str | None = None,
        job_timeout: int = 600,
        result_ttl: int = JOB_RESULT_TTL,
        meta: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Job:
        """
        Put ``func(*args, **kwargs)`` on the queue for ``priority``.

        A UUID job id is generated when none is given.
        """
        queue = self.get_queue(priority)
        return queue.enqueue(
            func,
            *args,
            job_id=job_id or str(uuid.uuid4()),
            job_timeout=job_timeout,
            result_ttl=result_ttl,
            meta=meta or {},
            **kwargs,
        )

    def get_job(self, job_id: str) -> Job | None:
        try:
            return Job.fetch(job_id, connection=self._conn)
        except NoSuchJobError:
            return None

    def get_job_info(self, job_id: str) -> JobInfo | None:
        job = self.get_job(job_id)
        if job is None:
            return None
        return job_info_from(job)

    def cancel_job(self, job_id: str) -> bool:
        """Cancel a job that has not started yet."""
        job = self.get_job(job_id)
        if job is None or not job_info_from(job).is_cancellable:
            return False
        job.cancel()
        return True

    def get_queue_stats(self) -> dict[str, Any]:
        """Get statistics for all queues."""
        stats = {}
        for priority, queue in self._queues.items():
            stats[priority.value] = {
                "name": queue.name,
                "count": len(queue),
                "started_jobs": queue.started_job_registry.count,
                "finished_jobs": queue.finished_job_registry.count,
                "failed_jobs": queue.failed_job_registry.count,
                "deferred_jobs": queue.deferred_job_registry.count,
                "scheduled_jobs": queue.scheduled_job_registry.count,
            }
        return stats


@lru_cache
def get_job_queue() -> JobQueue:
    """Shared JobQueue (Redis connects lazily on first command)."""
    return JobQueue()
