"""FastAPI application factory and main entrypoint."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from api.config import get_settings
from api.exceptions import ThemeMetricsError
from api.logging import setup_logging
from api.sentry import capture_exception, init_sentry

# Initialize logging
setup_logging()
logger = structlog.get_logger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info(
        "api_starting",
        env=settings.env,
        debug=settings.debug,
        version=API_VERSION,
        pagespeed_enabled=settings.pagespeed_enabled,
    )

    yield

    logger.info("api_stopping")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    init_sentry()

    app = FastAPI(
        title="ThemeMetrics",
        description="Performance and conversion scoring for storefront themes",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Middleware (order matters - first added = last executed)
    from api.metrics import MetricsMiddleware
    from api.middleware import (
        LoggingMiddleware,
        RateLimitMiddleware,
        RequestIDMiddleware,
        SecurityHeadersMiddleware,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        enabled=settings.rate_limit_enabled and not settings.is_test,
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # CORS must be last (first to process)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    register_exception_handlers(app)

    # Register routers
    from api.routers import health, v1

    app.include_router(health.router, prefix="/api")
    app.include_router(health.metrics_router)
    app.include_router(v1.router, prefix="/v1")

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(ThemeMetricsError)
    async def thememetrics_error_handler(
        request: Request, exc: ThemeMetricsError
    ) -> ORJSONResponse:
        """Handle custom ThemeMetrics exceptions."""
        logger.warning(
            "application_error",
            error_code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
        headers = None
        if exc.details.get("retry_after"):
            headers = {"Retry-After": str(exc.details["retry_after"])}
        return ORJSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle Pydantic validation errors."""
        errors = jsonable_encoder(exc.errors())
        first_error = errors[0] if errors else {"msg": "Validation error"}

        # Extract field path (drop the "body"/"path"/"query" prefix)
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])

        logger.warning(
            "validation_error",
            path=request.url.path,
            errors=errors,
        )
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": {
                    "code": "validation_error",
                    "message": first_error.get("msg", "Validation error"),
                    "field": field if field else None,
                    "details": {"errors": errors},
                }
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        """Handle unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
        )
        capture_exception(exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred",
                }
            },
        )


app = create_app()
