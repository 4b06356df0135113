"""E-commerce, mobile UX and revenue impact scoring."""

from collections.abc import Sequence
from dataclasses import dataclass

from worker.scoring.models import CoreWebVitals, SectionAnalysisData
from worker.scoring.weights import round_score

ECOMMERCE_BASE_SCORE = 70

# Conversion-relevant section kinds: (types, name keywords, bonus)
CONVERSION_ELEMENTS = {
    "hero": ({"hero"}, ("hero",), 10),
    "product_grid": ({"product_grid", "featured_collection"}, ("product",), 10),
    "testimonials": ({"testimonials"}, ("review", "testimonial"), 5),
    "newsletter": ({"newsletter"}, ("newsletter",), 5),
}
COMPLEX_HERO_THRESHOLD = 60
COMPLEX_HERO_PENALTY = 10

MOBILE_DEFAULT_SCORE = 70
VIDEO_ABOVE_FOLD_PENALTY = 15
LOW_RESPONSIVE_RATE = 0.5
LOW_RESPONSIVE_PENALTY = 10

# Industry benchmark: 7% conversion loss per second beyond 2s
BASELINE_LOAD_MS = 2000
CONVERSION_LOSS_PER_SECOND = 0.07
DEFAULT_LOAD_MS = 3000
# (conversion loss above, score); first match wins
REVENUE_IMPACT_BANDS = [(0.21, 30), (0.14, 50), (0.07, 70), (0.0, 85)]

DEFAULT_MONTHLY_REVENUE = 15000
# Share of monthly revenue at risk per conversion point below 100
REVENUE_LOSS_PER_POINT = 0.002


def has_element(sections: Sequence[SectionAnalysisData], element: str) -> bool:
    types, keywords, _ = CONVERSION_ELEMENTS[element]
    return any(
        s.type in types or any(kw in s.lowered_name for kw in keywords) for s in sections
    )


def find_hero(sections: Sequence[SectionAnalysisData]) -> SectionAnalysisData | None:
    types, keywords, _ = CONVERSION_ELEMENTS["hero"]
    for section in sections:
        if section.type in types or any(kw in section.lowered_name for kw in keywords):
            return section
    return None


def calculate_ecommerce_score(sections: Sequence[SectionAnalysisData]) -> int:
    """Reward conversion-relevant sections; penalize a slow hero."""
    score = ECOMMERCE_BASE_SCORE

    for element, (_, _, bonus) in CONVERSION_ELEMENTS.items():
        if has_element(sections, element):
            score += bonus

    hero = find_hero(sections)
    if hero is not None and hero.complexity_score > COMPLEX_HERO_THRESHOLD:
        score -= COMPLEX_HERO_PENALTY

    return round_score(score)


def calculate_mobile_score(
    vitals: CoreWebVitals | None,
    sections: Sequence[SectionAnalysisData],
    fold: int,
) -> int:
    """
    Score mobile experience.

    Mobile users are more sensitive to slow loading, so vitals are judged
    with tighter cutoffs than the speed dimension. Section patterns that
    hurt mobile (video above the fold, fixed-size images) are penalized too.
    """
    if vitals is None:
        score = MOBILE_DEFAULT_SCORE
    else:
        score = 100
        if vitals.lcp > 3000:
            score -= 20
        elif vitals.lcp > 2500:
            score -= 10

        if vitals.tbt > 400:
            score -= 15
        elif vitals.tbt > 200:
            score -= 8

        if vitals.cls > 0.15:
            score -= 15
        elif vitals.cls > 0.1:
            score -= 8

    if any(s.has_video for s in sections[:fold]):
        score -= VIDEO_ABOVE_FOLD_PENALTY

    if sections:
        responsive_rate = sum(1 for s in sections if s.has_responsive_images) / len(sections)
        if responsive_rate < LOW_RESPONSIVE_RATE:
            score -= LOW_RESPONSIVE_PENALTY

    return round_score(score)


@dataclass
class RevenueImpact:
    score: int
    conversion_loss: float  # fraction of conversions lost to load time


def calculate_revenue_impact(vitals: CoreWebVitals | None) -> RevenueImpact:
    """Score the conversion loss caused by load time beyond the baseline."""
    load_ms = vitals.lcp if vitals is not None else DEFAULT_LOAD_MS
    excess_seconds = max(0.0, load_ms - BASELINE_LOAD_MS) / 1000
    loss = excess_seconds * CONVERSION_LOSS_PER_SECOND

    score = 100
    for threshold, band_score in REVENUE_IMPACT_BANDS:
        if loss > threshold:
            score = band_score
            break

    return RevenueImpact(score=score, conversion_loss=loss)


def estimate_monthly_loss(conversion_score: int, monthly_revenue: float | None) -> int:
    """
    Rough monthly revenue at risk from conversion weaknesses.

    A fixed linear model, ``(100 - score) * revenue_per_point``. This is a
    heuristic for prioritization, not a forecast.
    """
    revenue = monthly_revenue if monthly_revenue else DEFAULT_MONTHLY_REVENUE
    revenue_per_point = revenue * REVENUE_LOSS_PER_POINT
    return max(0, round((100 - conversion_score) * revenue_per_point))
