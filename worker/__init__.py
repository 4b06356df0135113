"""ThemeMetrics - Worker Package."""

# Lazy imports to avoid requiring Redis/RQ at import time
# Use explicit imports when these are needed:
# from worker.queue import JobQueue, get_job_queue, JobInfo, JobStatus, QueuePriority
# from worker.redis import get_redis_connection_bytes, QUEUE_HIGH, QUEUE_DEFAULT, QUEUE_LOW

__all__ = [
    "JobQueue",
    "JobInfo",
    "JobStatus",
    "QueuePriority",
    "get_job_queue",
    "get_redis_connection_bytes",
    "QUEUE_HIGH",
    "QUEUE_DEFAULT",
    "QUEUE_LOW",
]


from typing import Any


def __getattr__(name: str) -> Any:
    """Lazy import for worker submodules."""
    if name in ("JobQueue", "JobInfo", "JobStatus", "QueuePriority", "get_job_queue"):
        from worker import queue

        return getattr(queue, name)
    elif name in ("get_redis_connection_bytes", "QUEUE_HIGH", "QUEUE_DEFAULT", "QUEUE_LOW"):
        from worker import redis

        return getattr(redis, name)
    raise AttributeError(f"module 'worker' has no attribute '{name}'")
