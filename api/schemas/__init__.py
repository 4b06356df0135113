"""Pydantic schemas package."""

from api.schemas.responses import ErrorDetail, ErrorResponse, JobAccepted, SuccessResponse
from api.schemas.score import (
    BatchAnalyzeRequest,
    CompareRequest,
    CoreWebVitalsIn,
    ScoreRequest,
    SectionIn,
    ThemeAnalyzeRequest,
    ThemeDataIn,
)

__all__ = [
    "BatchAnalyzeRequest",
    "CompareRequest",
    "CoreWebVitalsIn",
    "ErrorDetail",
    "ErrorResponse",
    "JobAccepted",
    "ScoreRequest",
    "SectionIn",
    "SuccessResponse",
    "ThemeAnalyzeRequest",
    "ThemeDataIn",
]
