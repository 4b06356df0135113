"""ThemeMetrics score calculator.

Combines three dimensions into one 0-100 score:

- Speed (40%): Core Web Vitals + section load impact
- Quality (35%): Liquid code + best practices + architecture
- Conversion (25%): e-commerce elements + mobile UX + revenue impact

The calculation is pure: it reads only its arguments, never raises for
well-typed input, and returns the same breakdown for the same input.
"""

from collections.abc import Sequence

import structlog

from worker.scoring.architecture import calculate_architecture_score
from worker.scoring.conversion import (
    calculate_ecommerce_score,
    calculate_mobile_score,
    calculate_revenue_impact,
    estimate_monthly_loss,
    has_element,
)
from worker.scoring.models import (
    BenchmarkContext,
    ConversionBreakdown,
    CoreWebVitals,
    QualityBreakdown,
    ScoreBreakdown,
    SectionAnalysisData,
    SpeedBreakdown,
    ThemeData,
)
from worker.scoring.quality import (
    calculate_best_practices_score,
    calculate_liquid_quality_score,
)
from worker.scoring.section_load import calculate_section_load_score, fold_index
from worker.scoring.vitals import CoreWebVitalsScore, normalize_vitals
from worker.scoring.weights import (
    DEFAULT_WEIGHTS,
    NEUTRAL_VITALS_SCORE,
    ScoringWeights,
    round_score,
    weighted_sum,
)

logger = structlog.get_logger(__name__)

MAX_DIMENSION_RECOMMENDATIONS = 3


def _check_inputs(
    vitals: CoreWebVitals | None,
    sections: Sequence[SectionAnalysisData],
    theme: ThemeData,
    context: BenchmarkContext | None,
) -> None:
    """Fail fast on wrong argument shapes (stripped under ``python -O``)."""
    assert vitals is None or isinstance(vitals, CoreWebVitals), type(vitals)
    assert not isinstance(sections, (str, bytes)), "sections must be a sequence of sections"
    assert all(isinstance(s, SectionAnalysisData) for s in sections), "bad section record"
    assert isinstance(theme, ThemeData), type(theme)
    assert context is None or isinstance(context, BenchmarkContext), type(context)


class ThemeScoreCalculator:
    """Calculates the ThemeMetrics score with a full breakdown."""

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or DEFAULT_WEIGHTS

    def calculate(
        self,
        vitals: CoreWebVitals | None,
        sections: Sequence[SectionAnalysisData],
        theme: ThemeData,
        context: BenchmarkContext | None = None,
    ) -> ScoreBreakdown:
        """
        Calculate the score breakdown for one theme.

        Args:
            vitals: Measured Core Web Vitals, or None when not yet measured
            sections: Section analyses in render order
            theme: Theme-level structure
            context: Optional store context (monthly revenue)

        Returns:
            ScoreBreakdown with overall score and per-dimension details
        """
        _check_inputs(vitals, sections, theme, context)
        if vitals is not None and not vitals.is_complete:
            logger.warning("incomplete_vitals_ignored", vitals=vitals.to_dict())
            vitals = None
        sections = list(sections)
        context = context or BenchmarkContext()
        fold = fold_index(theme)

        vitals_score = normalize_vitals(vitals, self.weights.vitals)
        speed = self._calculate_speed(vitals_score, sections, theme)
        quality = self._calculate_quality(sections, theme, fold)
        conversion = self._calculate_conversion(vitals, sections, fold, context)

        overall = round_score(
            weighted_sum(
                {
                    "speed": speed.score,
                    "quality": quality.score,
                    "conversion": conversion.score,
                },
                self.weights.overall,
            )
        )

        logger.debug(
            "theme_score_calculated",
            overall=overall,
            speed=speed.score,
            quality=quality.score,
            conversion=conversion.score,
            sections=len(sections),
            has_vitals=vitals is not None,
        )

        return ScoreBreakdown(
            overall=overall,
            speed=speed,
            quality=quality,
            conversion=conversion,
        )

    def _calculate_speed(
        self,
        vitals_score: CoreWebVitalsScore | None,
        sections: list[SectionAnalysisData],
        theme: ThemeData,
    ) -> SpeedBreakdown:
        section_load = calculate_section_load_score(sections, theme)

        if vitals_score is None:
            cwv = NEUTRAL_VITALS_SCORE
            weights = self.weights.speed_without_vitals
            details = None
        else:
            cwv = vitals_score.score
            weights = self.weights.speed
            details = vitals_score.metrics

        score = round_score(
            weighted_sum({"core_web_vitals": cwv, "section_load": section_load.score}, weights)
        )

        recommendations: list[str] = []
        if vitals_score is None:
            recommendations.append(
                "Run a PageSpeed measurement to include real Core Web Vitals in the score"
            )
        else:
            if details["lcp"].score < 100:
                recommendations.append(
                    "Preload the hero image and serve it in a modern format to improve LCP"
                )
            if details["tbt"].score < 100:
                recommendations.append("Defer third-party scripts to reduce Total Blocking Time")
            if details["cls"].score < 100:
                recommendations.append(
                    "Reserve space for images and embeds to reduce layout shift"
                )
        if any("Video" in p.reason for p in section_load.penalties):
            recommendations.append("Replace autoplay videos with a poster image facade")
        if any(p.reason == "Missing lazy loading" for p in section_load.penalties):
            recommendations.append('Add loading="lazy" to images below the fold')

        return SpeedBreakdown(
            score=score,
            core_web_vitals=cwv,
            section_load=section_load.score,
            details=details,
            penalties=section_load.penalties,
            recommendations=recommendations[:MAX_DIMENSION_RECOMMENDATIONS],
        )

    def _calculate_quality(
        self,
        sections: list[SectionAnalysisData],
        theme: ThemeData,
        fold: int,
    ) -> QualityBreakdown:
        liquid = calculate_liquid_quality_score(sections, fold)
        best_practices = calculate_best_practices_score(sections)
        architecture = calculate_architecture_score(theme)

        score = round_score(
            weighted_sum(
                {
                    "liquid_quality": liquid.score,
                    "best_practices": best_practices,
                    "architecture": architecture,
                },
                self.weights.quality,
            )
        )

        recommendations: list[str] = []
        issue_texts = " ".join(i.issue for i in liquid.issues)
        if "loops" in issue_texts:
            recommendations.append("Move nested loops into snippets and use the limit: parameter")
        if "long file" in issue_texts.lower():
            recommendations.append("Split long section files into reusable snippets")
        if best_practices < 100:
            recommendations.append("Adopt lazy loading, srcset images and preload hints")
        if not theme.has_translations:
            recommendations.append("Move hard-coded text into locale files")

        return QualityBreakdown(
            score=score,
            liquid_quality=liquid.score,
            best_practices=best_practices,
            architecture=architecture,
            issues=liquid.top_issues,
            issue_count=len(liquid.issues),
            recommendations=recommendations[:MAX_DIMENSION_RECOMMENDATIONS],
        )

    def _calculate_conversion(
        self,
        vitals: CoreWebVitals | None,
        sections: list[SectionAnalysisData],
        fold: int,
        context: BenchmarkContext,
    ) -> ConversionBreakdown:
        ecommerce = calculate_ecommerce_score(sections)
        mobile = calculate_mobile_score(vitals, sections, fold)
        revenue = calculate_revenue_impact(vitals)

        score = round_score(
            weighted_sum(
                {"ecommerce": ecommerce, "mobile": mobile, "revenue_impact": revenue.score},
                self.weights.conversion,
            )
        )

        recommendations: list[str] = []
        if not has_element(sections, "product_grid"):
            recommendations.append("Add a product grid or featured collection to the homepage")
        if not has_element(sections, "testimonials"):
            recommendations.append("Show customer reviews or testimonials as social proof")
        if mobile < 80:
            recommendations.append("Optimize the mobile experience: lighter hero, srcset images")
        if revenue.conversion_loss > 0:
            recommendations.append(
                f"Load time costs an estimated {revenue.conversion_loss:.0%} of conversions"
            )

        return ConversionBreakdown(
            score=score,
            ecommerce=ecommerce,
            mobile=mobile,
            revenue_impact=revenue.score,
            estimated_monthly_loss=estimate_monthly_loss(score, context.monthly_revenue),
            recommendations=recommendations[:MAX_DIMENSION_RECOMMENDATIONS],
        )


def calculate_theme_score(
    vitals: CoreWebVitals | None,
    sections: Sequence[SectionAnalysisData],
    theme: ThemeData,
    context: BenchmarkContext | None = None,
    weights: ScoringWeights | None = None,
) -> ScoreBreakdown:
    """
    Convenience function to calculate the ThemeMetrics score.

    Args:
        vitals: Measured Core Web Vitals, or None
        sections: Section analyses in render order
        theme: Theme-level structure
        context: Optional store context
        weights: Optional custom weight tables

    Returns:
        ScoreBreakdown with full transparency
    """
    calculator = ThemeScoreCalculator(weights)
    return calculator.calculate(vitals, sections, theme, context)
