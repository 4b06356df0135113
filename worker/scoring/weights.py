"""Weighting tables for the ThemeMetrics score.

All weights that combine sub-scores live here so they can be reviewed and
tested apart from the scoring logic. Each table sums to 1.0.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _table(**weights: float) -> Mapping[str, float]:
    return MappingProxyType(dict(weights))


# Score used for Core Web Vitals when no measurement exists yet
NEUTRAL_VITALS_SCORE = 50


@dataclass(frozen=True)
class ScoringWeights:
    """Fixed weight tables used by the score aggregator."""

    version: str = "1.0"

    overall: Mapping[str, float] = field(
        default_factory=lambda: _table(speed=0.40, quality=0.35, conversion=0.25)
    )
    speed: Mapping[str, float] = field(
        default_factory=lambda: _table(core_web_vitals=0.60, section_load=0.40)
    )
    # Used instead of ``speed`` when Core Web Vitals are absent
    speed_without_vitals: Mapping[str, float] = field(
        default_factory=lambda: _table(core_web_vitals=0.20, section_load=0.80)
    )
    quality: Mapping[str, float] = field(
        default_factory=lambda: _table(liquid_quality=0.50, best_practices=0.30, architecture=0.20)
    )
    conversion: Mapping[str, float] = field(
        default_factory=lambda: _table(ecommerce=0.50, mobile=0.30, revenue_impact=0.20)
    )
    # Equal weights: the vitals score is the unweighted average of its metrics
    vitals: Mapping[str, float] = field(
        default_factory=lambda: _table(lcp=0.25, cls=0.25, tbt=0.25, fcp=0.25)
    )

    def tables(self) -> dict[str, Mapping[str, float]]:
        return {
            "overall": self.overall,
            "speed": self.speed,
            "speed_without_vitals": self.speed_without_vitals,
            "quality": self.quality,
            "conversion": self.conversion,
            "vitals": self.vitals,
        }

    def validate(self) -> list[str]:
        """Return a list of problems; empty when every table sums to 1.0."""
        problems = []
        for name, table in self.tables().items():
            if any(weight < 0 for weight in table.values()):
                problems.append(f"{name}: negative weight")
            total = sum(table.values())
            if not math.isclose(total, 1.0, abs_tol=1e-9):
                problems.append(f"{name}: weights sum to {total:.3f}, expected 1.0")
        return problems

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            **{name: dict(table) for name, table in self.tables().items()},
        }


DEFAULT_WEIGHTS = ScoringWeights()


def weighted_sum(scores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Combine named scores with the matching weights."""
    return sum(scores[name] * weight for name, weight in weights.items())


def round_score(value: float) -> int:
    """Round half-up and clamp to the closed range [0, 100]."""
    return max(0, min(100, math.floor(value + 0.5)))
