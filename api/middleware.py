"""Custom middleware for the API."""

from __future__ import annotations

import time
import uuid
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog
from fastapi import Request, Response
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.exceptions import RateLimitError

# Type alias for call_next function
CallNext = Callable[[Request], Awaitable[Response]]

logger = structlog.get_logger(__name__)

# Set by the embedding storefront app; identifies the store and its plan
STORE_HEADER = "X-Shop-Domain"
PLAN_HEADER = "X-Store-Plan"


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""

    requests_per_minute: int = 20
    burst_size: int = 5  # Allow burst above limit


@dataclass
class RateLimitBucket:
    """Token bucket for rate limiting."""

    tokens: float = 0.0
    last_update: float = field(default_factory=time.time)
    initialized: bool = False


# API calls per minute by subscription plan
PLAN_RATE_LIMITS = {
    "free": RateLimitConfig(requests_per_minute=20),
    "starter": RateLimitConfig(requests_per_minute=60),
    "pro": RateLimitConfig(requests_per_minute=120),
    "agency": RateLimitConfig(requests_per_minute=300, burst_size=20),
}
DEFAULT_PLAN = "free"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request for tracing."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, component="api")
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log request/response details."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
            store=request.headers.get(STORE_HEADER),
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-store rate limiting using a token bucket."""

    EXCLUDE_PATHS = {"/api/health", "/api/ready", "/metrics", "/docs", "/openapi.json"}

    def __init__(self, app: Any, enabled: bool = True) -> None:
        super().__init__(app)
        self.enabled = enabled
        # In-memory buckets (per process)
        self._buckets: dict[str, RateLimitBucket] = defaultdict(RateLimitBucket)

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        if not self.enabled or request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        plan = self._get_plan(request)
        limits = PLAN_RATE_LIMITS[plan]
        store = request.headers.get(STORE_HEADER)
        identifier = f"store:{store}" if store else f"ip:{self._get_client_ip(request)}"

        allowed, retry_after = self._check_rate_limit(identifier, limits)
        if not allowed:
            logger.warning(
                "rate_limit_exceeded",
                identifier=identifier,
                plan=plan,
                path=request.url.path,
            )
            return self._rate_limit_response(retry_after)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limits.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(
            max(0, int(self._buckets[identifier].tokens))
        )
        return response

    def _check_rate_limit(self, identifier: str, config: RateLimitConfig) -> tuple[bool, int]:
        """Check if request is allowed. Returns (allowed, retry_after_seconds)."""
        now = time.time()
        bucket = self._buckets[identifier]
        capacity = config.requests_per_minute + config.burst_size

        if not bucket.initialized:
            bucket.tokens = capacity
            bucket.initialized = True

        elapsed = now - bucket.last_update
        refill_rate = config.requests_per_minute / 60.0  # tokens per second
        bucket.tokens = min(capacity, bucket.tokens + elapsed * refill_rate)
        bucket.last_update = now

        if bucket.tokens >= 1.0:
            bucket.tokens -= 1.0
            return True, 0

        retry_after = int((1.0 - bucket.tokens) / refill_rate) + 1
        return False, retry_after

    def _get_plan(self, request: Request) -> str:
        plan = request.headers.get(PLAN_HEADER, DEFAULT_PLAN).lower()
        return plan if plan in PLAN_RATE_LIMITS else DEFAULT_PLAN

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP, handling proxies."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ip: str = forwarded.split(",")[0].strip()
            return ip
        return request.client.host if request.client else "unknown"

    def _rate_limit_response(self, retry_after: int) -> ORJSONResponse:
        # Middleware runs outside the app exception handlers, so render directly
        error = RateLimitError("Too many requests. Please try again later.", retry_after)
        return ORJSONResponse(
            status_code=error.status_code,
            content=error.to_dict(),
            headers={"Retry-After": str(retry_after)},
        )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to API responses."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    }

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        for header, value in self.HEADERS.items():
            response.headers.setdefault(header, value)
        return response
