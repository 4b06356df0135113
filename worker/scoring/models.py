"""Value records for the ThemeMetrics score.

Inputs are plain dataclasses that clamp out-of-range numbers on
construction; outputs carry ``to_dict()`` for JSON serialization and
``show_the_math()`` for a readable breakdown.
"""

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


def _floor_zero(value: float, default: Any = 0) -> Any:
    """Clamp negatives to zero; NaN and infinities become ``default``."""
    if not math.isfinite(value):
        return default
    return value if value > 0 else 0


class VitalStatus(StrEnum):
    """Band of a single Core Web Vitals metric."""

    GOOD = "good"
    WARNING = "warning"
    POOR = "poor"


class IssueSeverity(StrEnum):
    """Severity of a code quality issue."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class CoreWebVitals:
    """Lab measurement of page-load quality."""

    lcp: float  # Largest Contentful Paint (ms)
    cls: float  # Cumulative Layout Shift (unitless)
    fcp: float  # First Contentful Paint (ms)
    tbt: float  # Total Blocking Time (ms)
    inp: float | None = None  # Interaction to Next Paint (ms)

    def __post_init__(self) -> None:
        # Unusable readings stay NaN so the measurement counts as incomplete
        self.lcp = _floor_zero(self.lcp, math.nan)
        self.cls = _floor_zero(self.cls, math.nan)
        self.fcp = _floor_zero(self.fcp, math.nan)
        self.tbt = _floor_zero(self.tbt, math.nan)
        if self.inp is not None:
            self.inp = _floor_zero(self.inp, None)

    @property
    def is_complete(self) -> bool:
        """True when LCP, CLS, FCP and TBT are all real numbers."""
        return all(math.isfinite(v) for v in (self.lcp, self.cls, self.fcp, self.tbt))

    def to_dict(self) -> dict:
        return {
            "lcp": self.lcp,
            "cls": self.cls,
            "fcp": self.fcp,
            "tbt": self.tbt,
            "inp": self.inp,
        }


@dataclass
class SectionAnalysisData:
    """Signals extracted from one theme section template."""

    name: str
    type: str = "custom"
    lines_of_code: int = 0
    complexity_score: float = 0  # 0-100, higher is worse
    has_video: bool = False
    has_animations: bool = False
    has_lazy_loading: bool = False
    has_responsive_images: bool = False
    has_preload: bool = False
    liquid_loops: int = 0
    liquid_assigns: int = 0
    liquid_conditions: int = 0
    external_scripts: int = 0
    inline_styles: int = 0
    liquid_captures: int = 0
    estimated_load_time_ms: int | None = None

    def __post_init__(self) -> None:
        self.lines_of_code = _floor_zero(self.lines_of_code)
        self.complexity_score = min(100, _floor_zero(self.complexity_score))
        self.liquid_loops = _floor_zero(self.liquid_loops)
        self.liquid_assigns = _floor_zero(self.liquid_assigns)
        self.liquid_conditions = _floor_zero(self.liquid_conditions)
        self.external_scripts = _floor_zero(self.external_scripts)
        self.inline_styles = _floor_zero(self.inline_styles)
        self.liquid_captures = _floor_zero(self.liquid_captures)
        if self.estimated_load_time_ms is not None:
            self.estimated_load_time_ms = _floor_zero(self.estimated_load_time_ms, None)

    @property
    def lowered_name(self) -> str:
        return self.name.lower()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "lines_of_code": self.lines_of_code,
            "complexity_score": self.complexity_score,
            "has_video": self.has_video,
            "has_animations": self.has_animations,
            "has_lazy_loading": self.has_lazy_loading,
            "has_responsive_images": self.has_responsive_images,
            "has_preload": self.has_preload,
            "liquid_loops": self.liquid_loops,
            "liquid_assigns": self.liquid_assigns,
            "liquid_conditions": self.liquid_conditions,
            "liquid_captures": self.liquid_captures,
            "external_scripts": self.external_scripts,
            "inline_styles": self.inline_styles,
            "estimated_load_time_ms": self.estimated_load_time_ms,
        }


@dataclass
class ThemeData:
    """Theme-level structure."""

    total_sections: int = 0
    snippets_count: int = 0
    has_translations: bool = False
    sections_above_fold: int = 0

    def __post_init__(self) -> None:
        self.total_sections = _floor_zero(self.total_sections)
        self.snippets_count = _floor_zero(self.snippets_count)
        self.sections_above_fold = _floor_zero(self.sections_above_fold)

    def to_dict(self) -> dict:
        return {
            "total_sections": self.total_sections,
            "snippets_count": self.snippets_count,
            "has_translations": self.has_translations,
            "sections_above_fold": self.sections_above_fold,
        }


@dataclass
class BenchmarkContext:
    """Optional store context used for revenue estimates."""

    monthly_revenue: float | None = None

    def __post_init__(self) -> None:
        if self.monthly_revenue is not None:
            self.monthly_revenue = _floor_zero(self.monthly_revenue, None)


# ----------------------------------------------------------------------------
# Output records
# ----------------------------------------------------------------------------


@dataclass
class MetricScore:
    """Normalized score for one Core Web Vitals metric."""

    value: float
    score: int  # 0-100
    status: VitalStatus

    def to_dict(self) -> dict:
        return {"value": self.value, "score": self.score, "status": self.status.value}


@dataclass
class SectionPenalty:
    """Load cost attributed to a section (or to the theme as a whole)."""

    section: str
    reason: str
    points: float

    def to_dict(self) -> dict:
        return {"section": self.section, "reason": self.reason, "points": round(self.points, 2)}


@dataclass
class QualityIssue:
    """A code quality violation found in a section."""

    section: str
    issue: str
    severity: IssueSeverity

    def to_dict(self) -> dict:
        return {"section": self.section, "issue": self.issue, "severity": self.severity.value}


@dataclass
class SpeedBreakdown:
    """Speed dimension (Core Web Vitals + section load impact)."""

    score: int
    core_web_vitals: int
    section_load: int
    details: dict[str, MetricScore] | None = None
    penalties: list[SectionPenalty] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "core_web_vitals": self.core_web_vitals,
            "section_load": self.section_load,
            "details": (
                {name: metric.to_dict() for name, metric in self.details.items()}
                if self.details is not None
                else None
            ),
            "penalties": [p.to_dict() for p in self.penalties],
            "recommendations": self.recommendations,
        }


@dataclass
class QualityBreakdown:
    """Quality dimension (Liquid code + best practices + architecture)."""

    score: int
    liquid_quality: int
    best_practices: int
    architecture: int
    issues: list[QualityIssue] = field(default_factory=list)
    issue_count: int = 0
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "liquid_quality": self.liquid_quality,
            "best_practices": self.best_practices,
            "architecture": self.architecture,
            "issues": [i.to_dict() for i in self.issues],
            "issue_count": self.issue_count,
            "recommendations": self.recommendations,
        }


@dataclass
class ConversionBreakdown:
    """Conversion dimension (e-commerce + mobile UX + revenue impact)."""

    score: int
    ecommerce: int
    mobile: int
    revenue_impact: int
    estimated_monthly_loss: int
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "ecommerce": self.ecommerce,
            "mobile": self.mobile,
            "revenue_impact": self.revenue_impact,
            "estimated_monthly_loss": self.estimated_monthly_loss,
            "recommendations": self.recommendations,
        }


@dataclass
class ScoreBreakdown:
    """Complete ThemeMetrics score with per-dimension breakdowns."""

    overall: int
    speed: SpeedBreakdown
    quality: QualityBreakdown
    conversion: ConversionBreakdown

    @property
    def has_vitals(self) -> bool:
        return self.speed.details is not None

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "speed": self.speed.to_dict(),
            "quality": self.quality.to_dict(),
            "conversion": self.conversion.to_dict(),
        }

    def show_the_math(self) -> str:
        """Generate human-readable calculation breakdown."""
        lines = [
            "=" * 60,
            "THEMEMETRICS SCORE BREAKDOWN",
            "=" * 60,
            "",
            f"Overall Score: {self.overall}/100",
            "",
            "-" * 60,
            "DIMENSIONS",
            "-" * 60,
            f"  Speed:      {self.speed.score}/100 "
            f"(Core Web Vitals {self.speed.core_web_vitals}, "
            f"Section Load {self.speed.section_load})",
            f"  Quality:    {self.quality.score}/100 "
            f"(Liquid {self.quality.liquid_quality}, "
            f"Best Practices {self.quality.best_practices}, "
            f"Architecture {self.quality.architecture})",
            f"  Conversion: {self.conversion.score}/100 "
            f"(E-Commerce {self.conversion.ecommerce}, "
            f"Mobile {self.conversion.mobile}, "
            f"Revenue Impact {self.conversion.revenue_impact})",
        ]

        if self.speed.details is not None:
            lines.extend(["", "-" * 60, "CORE WEB VITALS", "-" * 60])
            for name, metric in self.speed.details.items():
                lines.append(
                    f"  {name.upper()}: {metric.value} -> {metric.score}/100 ({metric.status.value})"
                )
        else:
            lines.extend(["", "Core Web Vitals: not measured (neutral fallback)"])

        if self.speed.penalties:
            lines.extend(["", "-" * 60, "LOAD PENALTIES", "-" * 60])
            for penalty in self.speed.penalties:
                lines.append(f"  -{penalty.points:.1f} {penalty.section}: {penalty.reason}")

        if self.quality.issues:
            lines.extend(["", "-" * 60, "CODE ISSUES", "-" * 60])
            for issue in self.quality.issues:
                lines.append(f"  [{issue.severity.value}] {issue.section}: {issue.issue}")

        lines.extend(
            [
                "",
                f"Estimated monthly revenue loss: ~{self.conversion.estimated_monthly_loss} "
                "(heuristic estimate)",
                "=" * 60,
            ]
        )
        return "\n".join(lines)
