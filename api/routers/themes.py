"""Theme analysis endpoints."""

from typing import Any

from fastapi import APIRouter, status

from api.config import get_settings
from api.deps import JobServiceDep
from api.exceptions import ValidationError
from api.metrics import record_analysis
from api.schemas.responses import JobAccepted, SuccessResponse
from api.schemas.score import BatchAnalyzeRequest, ThemeAnalyzeRequest
from worker.tasks import run_analysis

router = APIRouter(prefix="/themes", tags=["themes"])


@router.post(
    "/analyze",
    response_model=SuccessResponse[dict[str, Any]],
    summary="Analyze a theme",
)
async def analyze(body: ThemeAnalyzeRequest) -> SuccessResponse[dict[str, Any]]:
    """
    Analyze raw section sources and return the full report.

    Runs in the request. When ``store`` is set and no vitals are
    supplied, Core Web Vitals are measured through PageSpeed first.
    """
    result = await run_analysis(body.to_payload())
    record_analysis("themes", result["score"]["overall"], result["vitals"] is not None)
    return SuccessResponse(data=result)


@router.post(
    "/batch",
    response_model=SuccessResponse[list[JobAccepted]],
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue several themes for analysis",
)
async def analyze_batch(
    body: BatchAnalyzeRequest,
    job_service: JobServiceDep,
) -> SuccessResponse[list[JobAccepted]]:
    """
    Queue one background analysis job per theme.

    Poll ``/v1/jobs/{job_id}`` for each returned job.
    """
    max_themes = get_settings().max_batch_themes
    if len(body.themes) > max_themes:
        raise ValidationError(
            f"A batch accepts at most {max_themes} themes",
            field="themes",
        )

    job_ids = job_service.enqueue_batch([t.to_payload() for t in body.themes], body.priority)
    return SuccessResponse(
        data=[
            JobAccepted(job_id=job_id, theme_name=theme.theme_name, store=theme.store)
            for job_id, theme in zip(job_ids, body.themes, strict=True)
        ],
        meta={"queued": len(job_ids), "priority": body.priority.value},
    )
