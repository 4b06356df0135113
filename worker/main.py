"""RQ Worker entrypoint.

Run with ``python -m worker.main``.
"""

import os
import platform

import structlog
from rq import SimpleWorker, Worker
from rq.job import Job

from api.config import get_settings
from api.logging import setup_logging
from api.sentry import init_sentry
from worker.redis import ALL_QUEUES, get_redis_connection_bytes

logger = structlog.get_logger(__name__)


def log_job_failure(job: Job, _exc_type: type, exc_value: Exception, _traceback: object) -> bool:
    """RQ exception handler; returning True keeps the default handling."""
    logger.error("job_failed", job_id=job.id, func=job.func_name, error=str(exc_value))
    return True


def run_worker() -> None:
    """Start the RQ worker."""
    settings = get_settings()
    setup_logging(component="worker")
    init_sentry()

    logger.info("worker_starting", env=settings.env, queues=ALL_QUEUES)

    # Use SimpleWorker on Windows (no os.fork() support)
    worker_class = SimpleWorker if platform.system() == "Windows" else Worker

    worker = worker_class(
        ALL_QUEUES,
        connection=get_redis_connection_bytes(),
        name=f"thememetrics-worker-{os.getpid()}",
        exception_handlers=[log_job_failure],
    )
    worker.work(with_scheduler=True, logging_level=settings.log_level)


if __name__ == "__main__":
    run_worker()
