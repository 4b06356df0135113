"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from api.config import get_settings
from api.metrics import get_metrics, get_metrics_content_type
from worker.redis import ping_redis

API_VERSION = "0.1.0"

router = APIRouter(tags=["Health"])
metrics_router = APIRouter(tags=["Health"])
logger = structlog.get_logger(__name__)

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status: healthy, degraded, unhealthy")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")


class DependencyCheck(BaseModel):
    """Individual dependency check result."""

    status: str = Field(..., description="Status: healthy, unhealthy")
    latency_ms: float | None = Field(None, description="Check latency in milliseconds")


class ReadyResponse(HealthResponse):
    """Readiness check response with dependency status."""

    checks: dict[str, DependencyCheck] = Field(..., description="Individual dependency checks")


class ApiInfoResponse(BaseModel):
    """API information response."""

    name: str
    version: str
    env: str
    pagespeed_enabled: bool
    docs: str | None


def _uptime() -> int:
    return int(time.time() - _server_start_time)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns healthy if the API is running. Does not check dependencies.
    Use /ready for the Redis check.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=API_VERSION,
        uptime_seconds=_uptime(),
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check() -> ReadyResponse:
    """
    Readiness check with dependency verification.

    Scoring runs in-process; only the job queue (Redis) is checked.
    """
    start = time.perf_counter()
    redis_ok = ping_redis()
    latency_ms = round((time.perf_counter() - start) * 1000, 2)

    if not redis_ok:
        logger.warning("redis_health_check_failed")

    return ReadyResponse(
        status="healthy" if redis_ok else "degraded",
        timestamp=datetime.now(UTC).isoformat(),
        version=API_VERSION,
        uptime_seconds=_uptime(),
        checks={
            "redis": DependencyCheck(
                status="healthy" if redis_ok else "unhealthy",
                latency_ms=latency_ms if redis_ok else None,
            )
        },
    )


@router.get("/", response_model=ApiInfoResponse)
async def root() -> ApiInfoResponse:
    """Root endpoint with API information."""
    settings = get_settings()
    return ApiInfoResponse(
        name="ThemeMetrics API",
        version=API_VERSION,
        env=settings.env,
        pagespeed_enabled=settings.pagespeed_enabled,
        docs="/docs" if settings.debug else None,
    )


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
