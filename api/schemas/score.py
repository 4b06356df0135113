"""Score, comparison and theme analysis request schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from worker.queue import QueuePriority
from worker.scoring.models import (
    BenchmarkContext,
    CoreWebVitals,
    SectionAnalysisData,
    ThemeData,
)


class CoreWebVitalsIn(BaseModel):
    """Measured Core Web Vitals. Negative values are clamped to zero."""

    lcp: float = Field(..., allow_inf_nan=False, description="Largest Contentful Paint (ms)")
    cls: float = Field(..., allow_inf_nan=False, description="Cumulative Layout Shift")
    fcp: float = Field(..., allow_inf_nan=False, description="First Contentful Paint (ms)")
    tbt: float = Field(..., allow_inf_nan=False, description="Total Blocking Time (ms)")
    inp: float | None = Field(None, allow_inf_nan=False, description="Interaction to Next Paint (ms)")

    def to_domain(self) -> CoreWebVitals:
        return CoreWebVitals(**self.model_dump())


class SectionIn(BaseModel):
    """Pre-computed analysis of one theme section."""

    name: str = Field(..., min_length=1, max_length=255)
    type: str = "custom"
    lines_of_code: int = 0
    complexity_score: float = Field(0, allow_inf_nan=False)
    has_video: bool = False
    has_animations: bool = False
    has_lazy_loading: bool = False
    has_responsive_images: bool = False
    has_preload: bool = False
    liquid_loops: int = 0
    liquid_assigns: int = 0
    liquid_conditions: int = 0
    liquid_captures: int = 0
    external_scripts: int = 0
    inline_styles: int = 0
    estimated_load_time_ms: int | None = None

    def to_domain(self) -> SectionAnalysisData:
        return SectionAnalysisData(**self.model_dump())


class ThemeDataIn(BaseModel):
    """Theme-level structure."""

    total_sections: int = 0
    snippets_count: int = 0
    has_translations: bool = False
    sections_above_fold: int = 0

    def to_domain(self) -> ThemeData:
        return ThemeData(**self.model_dump())


class BenchmarkContextIn(BaseModel):
    """Store context for revenue estimates."""

    monthly_revenue: float | None = Field(None, ge=0, allow_inf_nan=False)

    def to_domain(self) -> BenchmarkContext:
        return BenchmarkContext(**self.model_dump())


class ScoreRequest(BaseModel):
    """Inputs for a single score calculation."""

    vitals: CoreWebVitalsIn | None = None
    sections: list[SectionIn] = Field(default_factory=list)
    theme: ThemeDataIn = Field(default_factory=ThemeDataIn)
    context: BenchmarkContextIn | None = None

    def to_domain(
        self,
    ) -> tuple[CoreWebVitals | None, list[SectionAnalysisData], ThemeData, BenchmarkContext | None]:
        return (
            self.vitals.to_domain() if self.vitals else None,
            [s.to_domain() for s in self.sections],
            self.theme.to_domain(),
            self.context.to_domain() if self.context else None,
        )


class CompareRequest(BaseModel):
    """Two score inputs to compare, previous first."""

    previous: ScoreRequest
    current: ScoreRequest
    previous_run_date: datetime | None = None
    current_run_date: datetime | None = None


class ThemeAnalyzeRequest(BaseModel):
    """Raw theme sources to analyze."""

    theme_name: str | None = Field(None, max_length=255)
    store: str | None = Field(None, max_length=255, description="Store domain for PageSpeed")
    section_files: dict[str, str] = Field(
        ..., description="Section asset key -> Liquid source, in render order"
    )
    asset_keys: list[str] = Field(default_factory=list)
    vitals: CoreWebVitalsIn | None = None
    monthly_revenue: float | None = Field(None, ge=0, allow_inf_nan=False)
    sections_above_fold: int = Field(2, ge=0)

    @field_validator("store")
    @classmethod
    def normalize_store(cls, v: str | None) -> str | None:
        """Normalize store domain by removing protocol and trailing slash."""
        if v is None:
            return None
        v = v.lower().strip()
        for prefix in ["https://", "http://", "www."]:
            if v.startswith(prefix):
                v = v[len(prefix) :]
        return v.rstrip("/") or None

    def to_payload(self) -> dict[str, Any]:
        """Job payload understood by the analysis task."""
        return self.model_dump()


class BatchAnalyzeRequest(BaseModel):
    """Several themes queued for background analysis."""

    themes: list[ThemeAnalyzeRequest] = Field(..., min_length=1)
    priority: QueuePriority = QueuePriority.DEFAULT
