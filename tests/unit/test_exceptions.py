"""Tests for custom exceptions and error handling."""

import pytest
from fastapi import status
from httpx import AsyncClient

from api.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    ThemeMetricsError,
    ValidationError,
)


def test_thememetrics_error_base() -> None:
    """Test base ThemeMetricsError."""
    error = ThemeMetricsError(message="Test error", code="test_error")
    assert error.message == "Test error"
    assert error.code == "test_error"
    assert error.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert error.details == {}


def test_to_dict_envelope() -> None:
    """Test the error envelope omits empty details."""
    assert ThemeMetricsError("Boom", code="boom").to_dict() == {
        "error": {"code": "boom", "message": "Boom"}
    }
    assert ValidationError("Bad", field="themes").to_dict() == {
        "error": {"code": "validation_error", "message": "Bad", "details": {"field": "themes"}}
    }


def test_not_found_error() -> None:
    """Test NotFoundError."""
    error = NotFoundError("Job")
    assert error.message == "Job not found"
    assert error.code == "not_found"
    assert error.status_code == status.HTTP_404_NOT_FOUND

    error_with_id = NotFoundError("Job", "analysis-123")
    assert error_with_id.message == "Job with id 'analysis-123' not found"


def test_validation_error() -> None:
    """Test ValidationError."""
    error = ValidationError("Too many themes", field="themes")
    assert error.code == "validation_error"
    assert error.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert error.details == {"field": "themes"}


def test_conflict_error() -> None:
    """Test ConflictError."""
    error = ConflictError("Job already started")
    assert error.code == "conflict"
    assert error.status_code == status.HTTP_409_CONFLICT


def test_rate_limit_error() -> None:
    """Test RateLimitError."""
    error = RateLimitError()
    assert error.message == "Rate limit exceeded"
    assert error.code == "rate_limit_exceeded"
    assert error.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert error.details == {}

    assert RateLimitError(retry_after=30).details == {"retry_after": 30}


def test_external_service_error() -> None:
    """Test ExternalServiceError."""
    error = ExternalServiceError("PageSpeed", "quota exceeded")
    assert error.message == "PageSpeed: quota exceeded"
    assert error.status_code == status.HTTP_502_BAD_GATEWAY
    assert error.details == {"service": "PageSpeed"}


def test_errors_are_thememetrics_errors() -> None:
    for error in (NotFoundError("Job"), ConflictError("x"), RateLimitError()):
        assert isinstance(error, ThemeMetricsError)


@pytest.mark.asyncio
async def test_validation_error_response(client: AsyncClient) -> None:
    """Request validation errors use the error envelope with the failing field."""
    response = await client.post("/v1/scores", json={"sections": [{"type": "hero"}]})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "validation_error"
    assert error["field"] == "sections.0.name"


@pytest.mark.asyncio
async def test_not_found_response(client: AsyncClient) -> None:
    """Application errors render their code and message."""
    from unittest.mock import MagicMock

    from api.main import app
    from api.services.job_service import get_job_service

    service = MagicMock()
    service.get_job_status.return_value = None
    app.dependency_overrides[get_job_service] = lambda: service
    try:
        response = await client.get("/v1/jobs/missing")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 404
    assert response.json() == {
        "error": {"code": "not_found", "message": "Job with id 'missing' not found"}
    }
