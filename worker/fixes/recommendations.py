"""Rule-based theme recommendations.

Each rule inspects one section (with the full section list for position
checks) or the theme as a whole and, when it matches, yields a
recommendation with a fix and an estimated monthly revenue impact.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from worker.extraction.sections import SECTION_BENCHMARKS, SectionType
from worker.scoring.models import SectionAnalysisData

# Assumed monthly revenue for ROI figures when the store does not report one
DEFAULT_MONTHLY_REVENUE = 10000


class RecommendationType(StrEnum):
    PERFORMANCE = "performance"
    UX = "ux"


class RecommendationSeverity(StrEnum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class Effort(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SEVERITY_ORDER = {
    RecommendationSeverity.CRITICAL: 0,
    RecommendationSeverity.WARNING: 1,
    RecommendationSeverity.INFO: 2,
}

EFFORT_SCORES = {Effort.LOW: 20, Effort.MEDIUM: 50, Effort.HIGH: 80}


@dataclass(frozen=True)
class RecommendationRule:
    """Static description of a recommendation."""

    id: str
    type: RecommendationType
    severity: RecommendationSeverity
    title: str
    description: str
    fix: str
    impact_multiplier: float  # share of monthly revenue (0.01 = 1%)
    effort: Effort


@dataclass
class Recommendation:
    """A rule that matched, with its revenue estimate."""

    rule: RecommendationRule
    estimated_revenue_impact: int
    section_name: str | None = None

    @property
    def id(self) -> str:
        return self.rule.id

    @property
    def severity(self) -> RecommendationSeverity:
        return self.rule.severity

    def to_dict(self) -> dict:
        return {
            "id": self.rule.id,
            "type": self.rule.type.value,
            "severity": self.rule.severity.value,
            "title": self.rule.title,
            "description": self.rule.description,
            "fix": self.rule.fix,
            "impact_multiplier": self.rule.impact_multiplier,
            "effort": self.rule.effort.value,
            "section_name": self.section_name,
            "estimated_revenue_impact": self.estimated_revenue_impact,
            "impact_score": calculate_impact_score(self.rule.impact_multiplier),
            "effort_score": get_effort_score(self.rule.effort),
        }


SectionCondition = Callable[[SectionAnalysisData, int, Sequence[SectionAnalysisData]], bool]
ThemeCondition = Callable[[Sequence[SectionAnalysisData]], bool]


def _load_time(section: SectionAnalysisData) -> int:
    return section.estimated_load_time_ms or 0


# ----------------------------------------------------------------------------
# Section rules
# ----------------------------------------------------------------------------

SECTION_RULES: list[tuple[SectionCondition, RecommendationRule]] = [
    # Hero / above the fold
    (
        lambda s, i, all_: s.type == SectionType.HERO and s.has_video,
        RecommendationRule(
            id="hero-video",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.CRITICAL,
            title="Hero section contains a video",
            description="Videos in the hero section delay First Contentful Paint and can "
            "reduce conversion rate by up to 2%.",
            fix='Replace the video with an optimized image (WebP, max 200KB) using fetchpriority="high".',
            impact_multiplier=0.018,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.HERO
        and _load_time(s) > SECTION_BENCHMARKS[SectionType.HERO].max_recommended,
        RecommendationRule(
            id="slow-hero",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.CRITICAL,
            title="Hero section is too slow",
            description="The hero section loads slower than recommended. Visitors may see "
            "an empty area on first load.",
            fix='Preload the hero image in <head>, use fetchpriority="high" and cap image width at 1920px.',
            impact_multiplier=0.015,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.HERO and not s.has_preload,
        RecommendationRule(
            id="hero-no-preload",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.CRITICAL,
            title="Hero image is not preloaded",
            description="The browser discovers the hero image late in parsing.",
            fix='Add <link rel="preload"> for the hero image in <head>.',
            impact_multiplier=0.012,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.HEADER and s.complexity_score > 60,
        RecommendationRule(
            id="header-too-complex",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.CRITICAL,
            title="Header is too complex",
            description="A complex header delays First Contentful Paint. Mega menus should load lazily.",
            fix="Load mega menu content on hover and reduce the initial HTML.",
            impact_multiplier=0.014,
            effort=Effort.MEDIUM,
        ),
    ),
    # Performance warnings
    (
        lambda s, i, all_: s.type == SectionType.INSTAGRAM,
        RecommendationRule(
            id="instagram-embed",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="Instagram feed embedded",
            description="Instagram embeds load about 1.5MB of external scripts and slow the "
            "page by 1-2 seconds.",
            fix="Replace the live feed with static optimized images linking to the profile.",
            impact_multiplier=0.012,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda s, i, all_: s.has_video and s.type != SectionType.HERO,
        RecommendationRule(
            id="video-autoplay",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="Video outside the hero section",
            description="Videos outside the hero load 2-5MB and block interactivity.",
            fix="Use a facade: show a poster image and load the video on click.",
            impact_multiplier=0.01,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda s, i, all_: s.complexity_score > 70,
        RecommendationRule(
            id="high-complexity",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="High code complexity",
            description="This section is highly complex (>70), which hurts server rendering "
            "and maintainability.",
            fix="Extract nested loops into snippets. Avoid loops inside loops.",
            impact_multiplier=0.008,
            effort=Effort.HIGH,
        ),
    ),
    (
        lambda s, i, all_: not s.has_responsive_images and s.lines_of_code > 30,
        RecommendationRule(
            id="no-responsive-images",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="No responsive images",
            description="Without srcset, mobile devices download images 5-10x larger than needed.",
            fix="Use image_tag with the widths: parameter to generate srcset automatically.",
            impact_multiplier=0.009,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.external_scripts > 2,
        RecommendationRule(
            id="many-external-scripts",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="Too many external scripts",
            description="This section loads several external scripts. Each one can block rendering.",
            fix="Load third-party scripts with async/defer or after user interaction.",
            impact_multiplier=0.007,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda s, i, all_: s.liquid_loops > 3,
        RecommendationRule(
            id="many-liquid-loops",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="Many Liquid loops",
            description="Nested loops increase server response time significantly.",
            fix="Combine loops where possible, use the limit: parameter and cache results in variables.",
            impact_multiplier=0.006,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda s, i, all_: s.has_animations and s.complexity_score > 50,
        RecommendationRule(
            id="heavy-animations",
            type=RecommendationType.UX,
            severity=RecommendationSeverity.WARNING,
            title="Heavy animations detected",
            description="Animations combined with complex markup can stutter on older devices.",
            fix="Limit animations to transform and opacity and respect prefers-reduced-motion.",
            impact_multiplier=0.005,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda s, i, all_: s.inline_styles > 5,
        RecommendationRule(
            id="inline-styles",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="Many inline styles",
            description="Inline styles inflate the HTML and cannot be cached.",
            fix="Move reusable styles into CSS classes.",
            impact_multiplier=0.003,
            effort=Effort.MEDIUM,
        ),
    ),
    # Optimization opportunities
    (
        lambda s, i, all_: i > 1 and not s.has_lazy_loading and s.lines_of_code > 20,
        RecommendationRule(
            id="missing-lazy-loading",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.INFO,
            title="Lazy loading missing",
            description="This section is below the fold and should load lazily.",
            fix='Add loading="lazy" to all <img> tags.',
            impact_multiplier=0.005,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.PRODUCT_GRID and i > 0 and not s.has_lazy_loading,
        RecommendationRule(
            id="product-grid-no-lazy",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.INFO,
            title="Product grid without lazy loading",
            description="Product grids often hold 8-12 images that all load immediately.",
            fix='Use loading="lazy" for product images. The first 4 can stay eager.',
            impact_multiplier=0.006,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.TESTIMONIALS and i > 2,
        RecommendationRule(
            id="testimonials-could-be-lazy",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.INFO,
            title="Testimonials could load later",
            description="Testimonials are rarely above the fold and can load on scroll.",
            fix="Use an Intersection Observer or native lazy loading.",
            impact_multiplier=0.003,
            effort=Effort.LOW,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.NEWSLETTER and s.complexity_score > 40,
        RecommendationRule(
            id="newsletter-form-heavy",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.INFO,
            title="Newsletter form is too complex",
            description="A newsletter form should be minimal. External services delay loading.",
            fix="Use the native newsletter form or defer Klaviyo/Mailchimp scripts.",
            impact_multiplier=0.004,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda s, i, all_: s.type == SectionType.FOOTER and _load_time(s) > 500,
        RecommendationRule(
            id="footer-too-heavy",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.INFO,
            title="Footer is too heavy",
            description="The footer loads slower than needed, often due to social widgets or large images.",
            fix="Remove social feeds from the footer and use SVG icons instead of images.",
            impact_multiplier=0.003,
            effort=Effort.LOW,
        ),
    ),
]


# ----------------------------------------------------------------------------
# Theme rules
# ----------------------------------------------------------------------------


def _no_above_fold_optimization(sections: Sequence[SectionAnalysisData]) -> bool:
    above, below = sections[:2], sections[2:]
    return (
        len(below) > 0
        and all(s.has_lazy_loading for s in above)
        and not any(s.has_lazy_loading for s in below)
    )


THEME_RULES: list[tuple[ThemeCondition, RecommendationRule]] = [
    (
        lambda sections: len(sections) > 12,
        RecommendationRule(
            id="too-many-sections",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.WARNING,
            title="Too many sections on the homepage",
            description="More than 12 sections slow the page considerably. Benchmark: 8 sections.",
            fix="Remove or merge less important sections and prioritize content that drives conversions.",
            impact_multiplier=0.01,
            effort=Effort.MEDIUM,
        ),
    ),
    (
        lambda sections: sum(_load_time(s) for s in sections) > 5000,
        RecommendationRule(
            id="high-total-load-time",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.CRITICAL,
            title="Total load time too high",
            description="Estimated total load time exceeds 5 seconds. 53% of mobile visitors "
            "leave pages that take longer than 3 seconds.",
            fix="Optimize the slowest sections and remove unnecessary external resources.",
            impact_multiplier=0.025,
            effort=Effort.HIGH,
        ),
    ),
    (
        _no_above_fold_optimization,
        RecommendationRule(
            id="no-above-fold-optimization",
            type=RecommendationType.PERFORMANCE,
            severity=RecommendationSeverity.INFO,
            title="Above-the-fold optimization recommended",
            description="Critical resources should load first while below-the-fold content loads lazily.",
            fix="Preload critical header and hero images and lazy-load every other image.",
            impact_multiplier=0.008,
            effort=Effort.MEDIUM,
        ),
    ),
]


def _revenue_impact(rule: RecommendationRule, monthly_revenue: float) -> int:
    return round(monthly_revenue * rule.impact_multiplier)


def generate_recommendations(
    sections: Sequence[SectionAnalysisData],
    monthly_revenue: float | None = None,
) -> list[Recommendation]:
    """
    Generate recommendations for a theme.

    Args:
        sections: Section analyses in render order
        monthly_revenue: Store revenue for ROI estimates (default 10,000)

    Returns:
        Recommendations sorted by severity, then estimated revenue impact
    """
    revenue = monthly_revenue if monthly_revenue else DEFAULT_MONTHLY_REVENUE
    recommendations: list[Recommendation] = []

    for index, section in enumerate(sections):
        for condition, rule in SECTION_RULES:
            if condition(section, index, sections):
                recommendations.append(
                    Recommendation(
                        rule=rule,
                        estimated_revenue_impact=_revenue_impact(rule, revenue),
                        section_name=section.name,
                    )
                )

    for condition, rule in THEME_RULES:
        if condition(sections):
            recommendations.append(
                Recommendation(rule=rule, estimated_revenue_impact=_revenue_impact(rule, revenue))
            )

    recommendations.sort(
        key=lambda r: (SEVERITY_ORDER[r.severity], -r.estimated_revenue_impact)
    )
    return recommendations


def get_effort_score(effort: Effort) -> int:
    return EFFORT_SCORES[effort]


def calculate_impact_score(impact_multiplier: float) -> int:
    """Map an impact multiplier to 0-100 (2.5% of revenue and above -> 100)."""
    return min(100, round(impact_multiplier * 4000))
