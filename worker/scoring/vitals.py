"""Core Web Vitals normalization.

Maps raw lab metrics to 0-100 scores using the published
good / needs-improvement / poor cutoffs:

- good band: 100
- warning band: linear from 100 down to 50
- poor band: linear from 50 down to 0 across ``poor_span``
"""

from dataclasses import dataclass
from typing import Mapping

from worker.scoring.models import CoreWebVitals, MetricScore, VitalStatus
from worker.scoring.weights import round_score, weighted_sum


@dataclass(frozen=True)
class VitalThreshold:
    good: float  # upper bound of the good band (inclusive)
    poor: float  # upper bound of the warning band (inclusive)
    poor_span: float  # distance over which the poor band falls from 50 to 0


VITAL_THRESHOLDS: dict[str, VitalThreshold] = {
    "lcp": VitalThreshold(good=2500, poor=4000, poor_span=4000),
    "cls": VitalThreshold(good=0.1, poor=0.25, poor_span=0.25),
    "fcp": VitalThreshold(good=1800, poor=3000, poor_span=3000),
    "tbt": VitalThreshold(good=200, poor=600, poor_span=1000),
    # Reported when present, not part of the average
    "inp": VitalThreshold(good=200, poor=500, poor_span=500),
}


@dataclass
class CoreWebVitalsScore:
    """Normalized vitals: per-metric scores and their combined score."""

    score: int
    metrics: dict[str, MetricScore]

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "metrics": {name: m.to_dict() for name, m in self.metrics.items()},
        }


def score_metric(metric: str, value: float) -> MetricScore:
    """Score a single metric against its threshold bands."""
    threshold = VITAL_THRESHOLDS[metric]

    if value <= threshold.good:
        return MetricScore(value=value, score=100, status=VitalStatus.GOOD)

    if value <= threshold.poor:
        ratio = (value - threshold.good) / (threshold.poor - threshold.good)
        return MetricScore(
            value=value,
            score=round_score(100 - ratio * 50),
            status=VitalStatus.WARNING,
        )

    ratio = (value - threshold.poor) / threshold.poor_span
    return MetricScore(
        value=value,
        score=round_score(max(0.0, 50 - ratio * 50)),
        status=VitalStatus.POOR,
    )


def normalize_vitals(
    vitals: CoreWebVitals | None,
    weights: Mapping[str, float],
) -> CoreWebVitalsScore | None:
    """
    Normalize Core Web Vitals into per-metric and combined scores.

    Args:
        vitals: Measured vitals, or None when no measurement exists
        weights: Per-metric weights (lcp, cls, tbt, fcp)

    Returns:
        CoreWebVitalsScore, or None when there is no usable data
    """
    if vitals is None or not vitals.is_complete:
        return None

    metrics = {
        "lcp": score_metric("lcp", vitals.lcp),
        "cls": score_metric("cls", vitals.cls),
        "fcp": score_metric("fcp", vitals.fcp),
        "tbt": score_metric("tbt", vitals.tbt),
    }
    combined = round_score(
        weighted_sum({name: m.score for name, m in metrics.items()}, weights)
    )

    if vitals.inp is not None:
        metrics["inp"] = score_metric("inp", vitals.inp)

    return CoreWebVitalsScore(score=combined, metrics=metrics)
