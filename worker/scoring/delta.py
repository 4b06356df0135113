"""Delta comparison between ThemeMetrics score runs.

Tracks score changes between analyses, showing improvement/regression
per dimension and generating insights about progress.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from worker.scoring.models import ScoreBreakdown
from worker.scoring.status import STATUS_ORDER, get_score_status


class ChangeDirection(StrEnum):
    """Direction of score change."""

    IMPROVED = "improved"
    DECLINED = "declined"
    UNCHANGED = "unchanged"


class ChangeSignificance(StrEnum):
    """Significance level of a score change."""

    MAJOR = "major"  # >= 10 points
    MODERATE = "moderate"  # 5-9 points
    MINOR = "minor"  # 1-4 points
    NEGLIGIBLE = "negligible"  # < 1 point


DIMENSIONS = {
    "speed": "Speed",
    "quality": "Quality",
    "conversion": "Conversion",
}


@dataclass
class DimensionDelta:
    """Change in a single dimension between runs."""

    name: str
    display_name: str
    previous_score: int
    current_score: int
    score_delta: int
    direction: ChangeDirection
    significance: ChangeSignificance

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "previous_score": self.previous_score,
            "current_score": self.current_score,
            "score_delta": self.score_delta,
            "direction": self.direction.value,
            "significance": self.significance.value,
        }

    @property
    def delta_display(self) -> str:
        if self.score_delta == 0:
            return "="
        sign = "+" if self.score_delta > 0 else ""
        return f"{sign}{self.score_delta}"


@dataclass
class ScoreDelta:
    """Complete delta comparison between two runs."""

    previous_run_date: datetime | None = None
    current_run_date: datetime | None = None

    previous_overall: int = 0
    current_overall: int = 0
    overall_delta: int = 0
    direction: ChangeDirection = ChangeDirection.UNCHANGED
    significance: ChangeSignificance = ChangeSignificance.NEGLIGIBLE

    previous_status: str = ""
    current_status: str = ""
    status_improved: bool = False
    status_declined: bool = False

    dimension_deltas: list[DimensionDelta] = field(default_factory=list)
    dimensions_improved: int = 0
    dimensions_declined: int = 0

    biggest_gain: DimensionDelta | None = None
    biggest_loss: DimensionDelta | None = None

    # Positive means less revenue at risk than before
    monthly_loss_delta: int = 0

    insights: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    days_between_runs: int = 0

    def to_dict(self) -> dict:
        return {
            "previous_run_date": (
                self.previous_run_date.isoformat() if self.previous_run_date else None
            ),
            "current_run_date": (
                self.current_run_date.isoformat() if self.current_run_date else None
            ),
            "previous_overall": self.previous_overall,
            "current_overall": self.current_overall,
            "overall_delta": self.overall_delta,
            "direction": self.direction.value,
            "significance": self.significance.value,
            "previous_status": self.previous_status,
            "current_status": self.current_status,
            "status_improved": self.status_improved,
            "status_declined": self.status_declined,
            "dimension_deltas": [d.to_dict() for d in self.dimension_deltas],
            "dimensions_improved": self.dimensions_improved,
            "dimensions_declined": self.dimensions_declined,
            "biggest_gain": self.biggest_gain.to_dict() if self.biggest_gain else None,
            "biggest_loss": self.biggest_loss.to_dict() if self.biggest_loss else None,
            "monthly_loss_delta": self.monthly_loss_delta,
            "insights": self.insights,
            "warnings": self.warnings,
            "days_between_runs": self.days_between_runs,
        }

    def show_the_delta(self) -> str:
        """Generate human-readable delta summary."""
        sign = "+" if self.overall_delta > 0 else ""
        lines = [
            "=" * 60,
            "SCORE COMPARISON",
            "=" * 60,
            "",
            f"Overall: {self.previous_overall} -> {self.current_overall} ({sign}{self.overall_delta})",
            f"Status: {self.previous_status} -> {self.current_status}",
        ]

        if self.days_between_runs > 0:
            lines.append(f"Time between runs: {self.days_between_runs} days")

        lines.extend(["", "-" * 60, "DIMENSION CHANGES", "-" * 60])
        for delta in self.dimension_deltas:
            lines.append(
                f"  {delta.display_name}: {delta.previous_score} -> {delta.current_score} "
                f"({delta.delta_display})"
            )

        if self.insights:
            lines.extend(["", "-" * 60, "INSIGHTS", "-" * 60])
            lines.extend(f"  * {insight}" for insight in self.insights)

        if self.warnings:
            lines.extend(["", "-" * 60, "WARNINGS", "-" * 60])
            lines.extend(f"  ! {warning}" for warning in self.warnings)

        lines.extend(["", "=" * 60])
        return "\n".join(lines)


class ScoreDeltaCalculator:
    """Calculates delta between two ThemeMetrics score breakdowns."""

    def calculate(
        self,
        previous: ScoreBreakdown,
        current: ScoreBreakdown,
        previous_run_date: datetime | None = None,
        current_run_date: datetime | None = None,
    ) -> ScoreDelta:
        """
        Calculate delta between two score breakdowns.

        Args:
            previous: Breakdown from the previous analysis
            current: Breakdown from the current analysis
            previous_run_date: Optional timestamp of previous analysis
            current_run_date: Optional timestamp of current analysis

        Returns:
            ScoreDelta with complete comparison
        """
        result = ScoreDelta(
            previous_run_date=previous_run_date,
            current_run_date=current_run_date,
        )

        if previous_run_date and current_run_date:
            result.days_between_runs = (current_run_date - previous_run_date).days

        result.previous_overall = previous.overall
        result.current_overall = current.overall
        result.overall_delta = current.overall - previous.overall
        result.direction = self._get_direction(result.overall_delta)
        result.significance = self._get_significance(result.overall_delta)

        prev_status = get_score_status(previous.overall).status
        curr_status = get_score_status(current.overall).status
        result.previous_status = prev_status.value
        result.current_status = curr_status.value
        result.status_improved = STATUS_ORDER[curr_status] > STATUS_ORDER[prev_status]
        result.status_declined = STATUS_ORDER[curr_status] < STATUS_ORDER[prev_status]

        for name, display_name in DIMENSIONS.items():
            prev_score = getattr(previous, name).score
            curr_score = getattr(current, name).score
            delta = DimensionDelta(
                name=name,
                display_name=display_name,
                previous_score=prev_score,
                current_score=curr_score,
                score_delta=curr_score - prev_score,
                direction=self._get_direction(curr_score - prev_score),
                significance=self._get_significance(curr_score - prev_score),
            )
            result.dimension_deltas.append(delta)

            if delta.direction == ChangeDirection.IMPROVED:
                result.dimensions_improved += 1
            elif delta.direction == ChangeDirection.DECLINED:
                result.dimensions_declined += 1

        gains = [d for d in result.dimension_deltas if d.score_delta > 0]
        losses = [d for d in result.dimension_deltas if d.score_delta < 0]
        if gains:
            result.biggest_gain = max(gains, key=lambda d: d.score_delta)
        if losses:
            result.biggest_loss = min(losses, key=lambda d: d.score_delta)

        result.monthly_loss_delta = (
            previous.conversion.estimated_monthly_loss - current.conversion.estimated_monthly_loss
        )

        result.insights = self._generate_insights(result)
        result.warnings = self._generate_warnings(result, previous, current)
        return result

    def _get_direction(self, delta: float) -> ChangeDirection:
        if delta > 0:
            return ChangeDirection.IMPROVED
        elif delta < 0:
            return ChangeDirection.DECLINED
        return ChangeDirection.UNCHANGED

    def _get_significance(self, delta: float) -> ChangeSignificance:
        abs_delta = abs(delta)
        if abs_delta >= 10:
            return ChangeSignificance.MAJOR
        elif abs_delta >= 5:
            return ChangeSignificance.MODERATE
        elif abs_delta >= 1:
            return ChangeSignificance.MINOR
        return ChangeSignificance.NEGLIGIBLE

    def _generate_insights(self, delta: ScoreDelta) -> list[str]:
        insights = []

        if delta.direction == ChangeDirection.IMPROVED:
            if delta.significance == ChangeSignificance.MAJOR:
                insights.append(f"Major improvement: +{delta.overall_delta} points since last analysis.")
            else:
                insights.append(f"Score improved by {delta.overall_delta} points.")
        elif delta.direction == ChangeDirection.DECLINED:
            insights.append(f"Score declined by {abs(delta.overall_delta)} points.")
        else:
            insights.append("Score stable since last analysis.")

        if delta.status_improved:
            insights.append(f"Status improved from {delta.previous_status} to {delta.current_status}.")

        if delta.biggest_gain and delta.biggest_gain.score_delta >= 5:
            insights.append(
                f"Best improvement in {delta.biggest_gain.display_name}: "
                f"+{delta.biggest_gain.score_delta} points."
            )

        if delta.monthly_loss_delta > 0:
            insights.append(
                f"Estimated monthly revenue at risk dropped by ~{delta.monthly_loss_delta}."
            )

        return insights[:4]

    def _generate_warnings(
        self,
        delta: ScoreDelta,
        previous: ScoreBreakdown,
        current: ScoreBreakdown,
    ) -> list[str]:
        warnings = []

        if delta.biggest_loss and delta.biggest_loss.score_delta <= -10:
            warnings.append(
                f"Major regression in {delta.biggest_loss.display_name}: "
                f"{delta.biggest_loss.score_delta} points. Review recent theme changes."
            )

        if delta.status_declined:
            warnings.append(
                f"Status dropped from {delta.previous_status} to {delta.current_status}."
            )

        if previous.has_vitals != current.has_vitals:
            warnings.append(
                "Core Web Vitals were measured in only one of the runs. "
                "Speed scores are not directly comparable."
            )

        return warnings[:3]


def compare_scores(
    previous: ScoreBreakdown,
    current: ScoreBreakdown,
    previous_run_date: datetime | None = None,
    current_run_date: datetime | None = None,
) -> ScoreDelta:
    """Convenience function to compare two score breakdowns."""
    calculator = ScoreDeltaCalculator()
    return calculator.calculate(previous, current, previous_run_date, current_run_date)
