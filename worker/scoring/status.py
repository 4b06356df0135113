"""Score status bands and metric display formatting."""

from dataclasses import dataclass
from enum import StrEnum


class ScoreStatus(StrEnum):
    """Band of an overall or dimension score."""

    EXCELLENT = "excellent"  # >= 80
    GOOD = "good"  # 65-79
    FAIR = "fair"  # 50-64
    NEEDS_WORK = "needs-work"  # < 50


# (lower bound inclusive, status); first match wins
STATUS_BANDS = [
    (80, ScoreStatus.EXCELLENT),
    (65, ScoreStatus.GOOD),
    (50, ScoreStatus.FAIR),
]

STATUS_ORDER = {
    ScoreStatus.NEEDS_WORK: 0,
    ScoreStatus.FAIR: 1,
    ScoreStatus.GOOD: 2,
    ScoreStatus.EXCELLENT: 3,
}


@dataclass(frozen=True)
class StatusInfo:
    status: ScoreStatus
    label: str
    color: str
    description: str

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "label": self.label,
            "color": self.color,
            "description": self.description,
        }


STATUS_INFO = {
    ScoreStatus.EXCELLENT: StatusInfo(
        status=ScoreStatus.EXCELLENT,
        label="Excellent",
        color="emerald",
        description="Your theme is very well optimized.",
    ),
    ScoreStatus.GOOD: StatusInfo(
        status=ScoreStatus.GOOD,
        label="Good",
        color="green",
        description="Solid performance with room for optimization.",
    ),
    ScoreStatus.FAIR: StatusInfo(
        status=ScoreStatus.FAIR,
        label="Fair",
        color="amber",
        description="Some areas need attention.",
    ),
    ScoreStatus.NEEDS_WORK: StatusInfo(
        status=ScoreStatus.NEEDS_WORK,
        label="Needs work",
        color="red",
        description="Significant problems are costing speed and conversions.",
    ),
}


def get_score_status(score: float) -> StatusInfo:
    """Map a score to its status band. Lower bounds are closed: 80 is excellent."""
    for lower_bound, status in STATUS_BANDS:
        if score >= lower_bound:
            return STATUS_INFO[status]
    return STATUS_INFO[ScoreStatus.NEEDS_WORK]


def format_metric_value(metric: str, value: float) -> str:
    """Format a raw metric value for display (``2.5s``, ``0.05``, ``300ms``)."""
    if metric in ("lcp", "fcp"):
        return f"{value / 1000:.1f}s"
    if metric == "cls":
        return f"{value:.2f}"
    if metric in ("tbt", "inp"):
        return f"{round(value)}ms"
    return str(value)
