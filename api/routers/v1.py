"""V1 API router - aggregates all versioned endpoints."""

from fastapi import APIRouter

from api.routers import jobs, scores, themes

router = APIRouter()

# Score endpoints
router.include_router(scores.router)

# Theme analysis endpoints
router.include_router(themes.router)

# Job endpoints
router.include_router(jobs.router)


@router.get("/")
async def v1_root() -> dict[str, str]:
    """V1 API root endpoint."""
    return {
        "version": "1",
        "status": "active",
    }
