"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
REQUEST_COUNT = Counter(
    "thememetrics_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "thememetrics_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

REQUEST_IN_PROGRESS = Gauge(
    "thememetrics_http_requests_in_progress",
    "HTTP requests currently being processed",
    ["method", "endpoint"],
)

ERROR_COUNT = Counter(
    "thememetrics_errors_total",
    "Total application errors",
    ["error_type", "endpoint"],
)

# Analysis metrics
ANALYSES_TOTAL = Counter(
    "thememetrics_analyses_total",
    "Total theme analyses",
    ["source", "has_vitals"],
)

OVERALL_SCORE = Histogram(
    "thememetrics_overall_score",
    "Distribution of overall ThemeMetrics scores",
    buckets=[10, 20, 30, 40, 50, 60, 65, 70, 80, 90, 100],
)

PAGESPEED_REQUESTS = Counter(
    "thememetrics_pagespeed_requests_total",
    "PageSpeed measurements attempted",
    ["status"],
)

# Job metrics
JOBS_ENQUEUED = Counter(
    "thememetrics_jobs_enqueued_total",
    "Analysis jobs enqueued",
    ["priority"],
)

JOB_PROCESSING_TIME = Histogram(
    "thememetrics_job_processing_seconds",
    "Job processing time in seconds",
    ["job_type"],
    buckets=[0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
)

_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)
_NUMERIC_SEGMENT = re.compile(r"/\d+(/|$)")


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    metrics: bytes = generate_latest()
    return metrics


def get_metrics_content_type() -> str:
    content_type: str = CONTENT_TYPE_LATEST
    return content_type


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect request metrics."""

    EXCLUDE_PATHS = {"/metrics", "/api/health", "/api/ready", "/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        method = request.method
        endpoint = normalize_path(request.url.path)

        REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=str(response.status_code),
            ).inc()
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )
            return response

        except Exception as e:
            ERROR_COUNT.labels(error_type=type(e).__name__, endpoint=endpoint).inc()
            raise

        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()


def normalize_path(path: str) -> str:
    """Replace job IDs and numeric segments (scores) with placeholders."""
    path = _UUID_PATTERN.sub("{id}", path)
    return _NUMERIC_SEGMENT.sub(r"/{id}\1", path)


def record_analysis(source: str, overall: int, has_vitals: bool) -> None:
    """Record a completed analysis ("scores", "themes" or "job")."""
    ANALYSES_TOTAL.labels(source=source, has_vitals=str(has_vitals).lower()).inc()
    OVERALL_SCORE.observe(overall)


def record_pagespeed(success: bool) -> None:
    PAGESPEED_REQUESTS.labels(status="success" if success else "unavailable").inc()


def record_job_enqueued(priority: str) -> None:
    JOBS_ENQUEUED.labels(priority=priority).inc()


def record_job_duration(job_type: str, duration: float) -> None:
    JOB_PROCESSING_TIME.labels(job_type=job_type).observe(duration)
