"""Score calculation and comparison endpoints."""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Path

from api.metrics import record_analysis
from api.schemas.responses import SuccessResponse
from api.schemas.score import CompareRequest, ScoreRequest
from worker.scoring.calculator import calculate_theme_score
from worker.scoring.delta import compare_scores
from worker.scoring.status import get_score_status

router = APIRouter(prefix="/scores", tags=["scores"])
logger = structlog.get_logger(__name__)


@router.post(
    "",
    response_model=SuccessResponse[dict[str, Any]],
    summary="Calculate a theme score",
)
async def calculate_score(body: ScoreRequest) -> SuccessResponse[dict[str, Any]]:
    """
    Calculate the ThemeMetrics score from pre-analyzed inputs.

    Vitals may be omitted; the speed dimension then falls back to a
    neutral Core Web Vitals score and leans on section load.
    """
    vitals, sections, theme, context = body.to_domain()
    breakdown = calculate_theme_score(vitals, sections, theme, context)
    record_analysis("scores", breakdown.overall, breakdown.has_vitals)

    return SuccessResponse(
        data={
            **breakdown.to_dict(),
            "status": get_score_status(breakdown.overall).to_dict(),
        },
        meta={"has_vitals": breakdown.has_vitals, "sections": len(sections)},
    )


@router.post(
    "/compare",
    response_model=SuccessResponse[dict[str, Any]],
    summary="Compare two theme scores",
)
async def compare(body: CompareRequest) -> SuccessResponse[dict[str, Any]]:
    """Score both inputs and report what changed between them."""
    previous = calculate_theme_score(*body.previous.to_domain())
    current = calculate_theme_score(*body.current.to_domain())
    delta = compare_scores(previous, current, body.previous_run_date, body.current_run_date)

    logger.info(
        "scores_compared",
        previous=previous.overall,
        current=current.overall,
        direction=delta.direction.value,
    )
    return SuccessResponse(
        data={
            "previous": previous.to_dict(),
            "current": current.to_dict(),
            "delta": delta.to_dict(),
        }
    )


@router.get(
    "/status/{score}",
    response_model=SuccessResponse[dict[str, Any]],
    summary="Get the status band for a score",
)
async def score_status(
    score: Annotated[float, Path(ge=0, le=100, description="Score in 0..100")],
) -> SuccessResponse[dict[str, Any]]:
    """Map a score to its display band (excellent, good, fair, needs-work)."""
    return SuccessResponse(data={"score": score, **get_score_status(score).to_dict()})
