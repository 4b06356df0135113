"""Job status endpoints."""

from typing import Any

from fastapi import APIRouter

from api.deps import JobServiceDep
from api.exceptions import ConflictError, NotFoundError
from api.schemas.responses import SuccessResponse

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "/{job_id}",
    response_model=SuccessResponse[dict[str, Any]],
    summary="Get job status",
)
async def get_job_status(
    job_id: str,
    job_service: JobServiceDep,
) -> SuccessResponse[dict[str, Any]]:
    """
    Get the status of a background analysis job.

    Returns job status, progress metadata, and the analysis once finished.
    """
    job_info = job_service.get_job_status(job_id)
    if not job_info:
        raise NotFoundError("Job", job_id)

    return SuccessResponse(data=job_info.to_dict())


@router.delete(
    "/{job_id}",
    response_model=SuccessResponse[dict[str, str]],
    summary="Cancel a job",
)
async def cancel_job(
    job_id: str,
    job_service: JobServiceDep,
) -> SuccessResponse[dict[str, str]]:
    """
    Cancel a queued background job.

    Only jobs in queued/deferred/scheduled status can be cancelled.
    """
    if not job_service.get_job_status(job_id):
        raise NotFoundError("Job", job_id)

    if not job_service.cancel_job(job_id):
        raise ConflictError("Job cannot be cancelled (already started or finished)")

    return SuccessResponse(data={"status": "cancelled", "job_id": job_id})


@router.get(
    "/",
    response_model=SuccessResponse[dict[str, Any]],
    summary="Get queue statistics",
)
async def get_queue_stats(job_service: JobServiceDep) -> SuccessResponse[dict[str, Any]]:
    """Get job counts in each state for every queue."""
    return SuccessResponse(data={"queues": job_service.get_queue_stats()})
