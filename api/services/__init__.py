"""Business logic services package."""

from api.services.job_service import JobService, get_job_service

__all__ = [
    "JobService",
    "get_job_service",
]
