"""Section load impact scoring.

Each section gets a load cost from its media, scripts, complexity and
Liquid constructs. Performance features (lazy loading, responsive images,
preload) earn credits that offset that section's cost only. Section
scores are combined with a weighted average where sections above the
fold count double, then theme-wide penalties apply.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from worker.scoring.models import SectionAnalysisData, SectionPenalty, ThemeData
from worker.scoring.weights import round_score

# Fixed load costs in points
SECTION_LOAD_PENALTIES = {
    "hero_video": 25,
    "video": 15,
    "social_embed": 15,
    "missing_lazy_loading": 10,
    "external_script": 4,
    "external_scripts_max": 12,
    "heavy_animations": 8,
}

# Cost per complexity point (0-100 complexity -> 0-25 points)
COMPLEXITY_COST_FACTOR = 0.25

# Lines of code beyond the free allowance cost 1 point per 100 lines
LINES_FREE = 200
LINES_PER_POINT = 100
LINES_COST_MAX = 10

# Liquid constructs: (free allowance, cost per extra occurrence)
LIQUID_COSTS = {
    "liquid_loops": (2, 3.0),
    "liquid_assigns": (10, 0.5),
    "liquid_conditions": (15, 0.5),
}
LIQUID_COST_MAX = 20

SECTION_LOAD_CREDITS = {
    "lazy_loading": 4,
    "responsive_images": 3,
    "preload": 3,
}

ABOVE_FOLD_WEIGHT = 2.0
BELOW_FOLD_WEIGHT = 1.0

# Assumed number of above-the-fold sections when the theme does not say
DEFAULT_FOLD_INDEX = 2

# Theme-wide section count penalties: (more than N sections, points)
SECTION_COUNT_PENALTIES = [(15, 10), (12, 5)]

EMPTY_SECTIONS_SCORE = 100

SOCIAL_KEYWORDS = ("instagram", "social")


def fold_index(theme: ThemeData | None) -> int:
    """Number of leading sections treated as above the fold."""
    if theme is not None and theme.sections_above_fold > 0:
        return theme.sections_above_fold
    return DEFAULT_FOLD_INDEX


def is_social_embed(section: SectionAnalysisData) -> bool:
    return section.type == "instagram" or any(
        keyword in section.lowered_name for keyword in SOCIAL_KEYWORDS
    )


def is_hero(section: SectionAnalysisData, index: int) -> bool:
    return index == 0 or section.type == "hero"


@dataclass
class SectionLoadResult:
    """Aggregated section load score with attributed penalties."""

    score: int
    section_scores: list[float] = field(default_factory=list)
    penalties: list[SectionPenalty] = field(default_factory=list)


def _liquid_cost(section: SectionAnalysisData) -> float:
    cost = 0.0
    for attr, (free, per_occurrence) in LIQUID_COSTS.items():
        cost += max(0, getattr(section, attr) - free) * per_occurrence
    return min(cost, LIQUID_COST_MAX)


def _section_cost(
    section: SectionAnalysisData,
    index: int,
    fold: int,
) -> tuple[float, list[SectionPenalty]]:
    """Load cost of one section and the penalties that explain it."""
    penalties: list[SectionPenalty] = []

    def penalize(reason: str, points: float) -> None:
        if points > 0:
            penalties.append(SectionPenalty(section=section.name, reason=reason, points=points))

    if section.has_video:
        if is_hero(section, index):
            penalize("Video in hero section (autoplay)", SECTION_LOAD_PENALTIES["hero_video"])
        else:
            penalize("Video without facade", SECTION_LOAD_PENALTIES["video"])

    if is_social_embed(section):
        penalize("External social media embed", SECTION_LOAD_PENALTIES["social_embed"])

    if index >= fold and not section.has_lazy_loading:
        penalize("Missing lazy loading", SECTION_LOAD_PENALTIES["missing_lazy_loading"])

    if section.external_scripts > 0:
        penalize(
            f"{section.external_scripts} external scripts",
            min(
                section.external_scripts * SECTION_LOAD_PENALTIES["external_script"],
                SECTION_LOAD_PENALTIES["external_scripts_max"],
            ),
        )

    if section.has_animations and section.complexity_score > 50:
        penalize("Heavy animations", SECTION_LOAD_PENALTIES["heavy_animations"])

    penalize(
        f"Code complexity ({section.complexity_score:.0f}/100)",
        section.complexity_score * COMPLEXITY_COST_FACTOR,
    )

    if section.lines_of_code > LINES_FREE:
        penalize(
            f"Large template ({section.lines_of_code} lines)",
            min((section.lines_of_code - LINES_FREE) / LINES_PER_POINT, LINES_COST_MAX),
        )

    penalize("Liquid render cost (loops, assigns, conditions)", _liquid_cost(section))

    return sum(p.points for p in penalties), penalties


def _section_credits(section: SectionAnalysisData) -> float:
    credits = 0.0
    if section.has_lazy_loading:
        credits += SECTION_LOAD_CREDITS["lazy_loading"]
    if section.has_responsive_images:
        credits += SECTION_LOAD_CREDITS["responsive_images"]
    if section.has_preload:
        credits += SECTION_LOAD_CREDITS["preload"]
    return credits


def calculate_section_load_score(
    sections: Sequence[SectionAnalysisData],
    theme: ThemeData | None = None,
) -> SectionLoadResult:
    """
    Score the load impact of a theme's sections.

    Args:
        sections: Sections in render order
        theme: Theme data (used for the above-the-fold count)

    Returns:
        SectionLoadResult with the 0-100 score and penalties
    """
    if not sections:
        return SectionLoadResult(score=EMPTY_SECTIONS_SCORE)

    fold = fold_index(theme)
    penalties: list[SectionPenalty] = []
    section_scores: list[float] = []
    weighted_total = 0.0
    weight_total = 0.0

    for index, section in enumerate(sections):
        cost, section_penalties = _section_cost(section, index, fold)
        penalties.extend(section_penalties)

        net_cost = max(0.0, cost - _section_credits(section))
        section_score = max(0.0, min(100.0, 100.0 - net_cost))
        section_scores.append(section_score)

        weight = ABOVE_FOLD_WEIGHT if index < fold else BELOW_FOLD_WEIGHT
        weighted_total += section_score * weight
        weight_total += weight

    score = weighted_total / weight_total

    for limit, points in SECTION_COUNT_PENALTIES:
        if len(sections) > limit:
            penalties.append(
                SectionPenalty(
                    section="Theme",
                    reason=f"Too many sections ({len(sections)})",
                    points=points,
                )
            )
            score -= points
            break

    return SectionLoadResult(
        score=round_score(score),
        section_scores=section_scores,
        penalties=penalties,
    )
