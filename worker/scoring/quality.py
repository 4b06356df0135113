"""Liquid code quality and best-practice adoption scoring."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from worker.scoring.models import IssueSeverity, QualityIssue, SectionAnalysisData
from worker.scoring.weights import round_score

# Section types that carry heavy media and should lazy load below the fold
MEDIA_SECTION_TYPES = {"video", "image_with_text", "instagram", "product_grid", "featured_collection"}

# Issues surfaced in the breakdown
MAX_QUALITY_ISSUES = 5

EMPTY_SECTIONS_SCORE = 100

_SEVERITY_ORDER = {IssueSeverity.HIGH: 0, IssueSeverity.MEDIUM: 1, IssueSeverity.LOW: 2}


@dataclass
class LiquidQualityResult:
    """Average section quality with every issue found."""

    score: int
    issues: list[QualityIssue] = field(default_factory=list)

    @property
    def top_issues(self) -> list[QualityIssue]:
        """Most severe issues first, capped for display."""
        ranked = sorted(self.issues, key=lambda i: _SEVERITY_ORDER[i.severity])
        return ranked[:MAX_QUALITY_ISSUES]


def _score_section(
    section: SectionAnalysisData,
    below_fold: bool,
) -> tuple[float, list[QualityIssue]]:
    score = 100.0
    issues: list[QualityIssue] = []

    def issue(text: str, severity: IssueSeverity) -> None:
        issues.append(QualityIssue(section=section.name, issue=text, severity=severity))

    # File length
    if section.lines_of_code > 400:
        score -= 20
        issue(f"Very long file ({section.lines_of_code} lines)", IssueSeverity.HIGH)
    elif section.lines_of_code > 200:
        score -= 10
        issue(f"Long file ({section.lines_of_code} lines)", IssueSeverity.MEDIUM)

    # Nested loops are approximated by many loops plus high complexity
    if section.liquid_loops > 3 and section.complexity_score > 60:
        score -= 25
        issue("Nested loops detected", IssueSeverity.HIGH)
    elif section.liquid_loops > 2:
        score -= 10
        issue(f"Many loops ({section.liquid_loops})", IssueSeverity.MEDIUM)

    if section.liquid_assigns > 20:
        score -= 15
        issue(f"Too many assigns ({section.liquid_assigns})", IssueSeverity.MEDIUM)
    elif section.liquid_assigns > 10:
        score -= 5

    if section.liquid_conditions > 25:
        score -= 10
        issue(f"Too many conditions ({section.liquid_conditions})", IssueSeverity.MEDIUM)
    elif section.liquid_conditions > 15:
        score -= 5

    if section.inline_styles > 5:
        score -= 10
        issue(f"Many inline styles ({section.inline_styles})", IssueSeverity.LOW)
    elif section.inline_styles > 0:
        score -= 3

    if section.complexity_score > 70:
        score -= 15
        issue("High code complexity", IssueSeverity.HIGH)
    elif section.complexity_score > 50:
        score -= 8
        issue("Moderate code complexity", IssueSeverity.MEDIUM)

    is_media = section.has_video or section.type in MEDIA_SECTION_TYPES
    if is_media and below_fold and not section.has_lazy_loading:
        score -= 10
        issue("Media section without lazy loading", IssueSeverity.MEDIUM)

    if section.external_scripts > 2:
        score -= 10
        issue(f"Too many external scripts ({section.external_scripts})", IssueSeverity.HIGH)
    elif section.external_scripts > 0:
        score -= 3

    return max(0.0, score), issues


def calculate_liquid_quality_score(
    sections: Sequence[SectionAnalysisData],
    fold: int,
) -> LiquidQualityResult:
    """
    Score Liquid code quality as the mean of per-section scores.

    Args:
        sections: Sections in render order
        fold: Number of leading sections above the fold

    Returns:
        LiquidQualityResult with score and all issues
    """
    if not sections:
        return LiquidQualityResult(score=EMPTY_SECTIONS_SCORE)

    total = 0.0
    issues: list[QualityIssue] = []
    for index, section in enumerate(sections):
        section_score, section_issues = _score_section(section, below_fold=index >= fold)
        total += section_score
        issues.extend(section_issues)

    return LiquidQualityResult(score=round_score(total / len(sections)), issues=issues)


def calculate_best_practices_score(sections: Sequence[SectionAnalysisData]) -> int:
    """Score adoption of lazy loading, responsive images and preload hints."""
    if not sections:
        return EMPTY_SECTIONS_SCORE

    total = len(sections)
    lazy_rate = sum(1 for s in sections if s.has_lazy_loading) / total
    responsive_rate = sum(1 for s in sections if s.has_responsive_images) / total
    with_preload = sum(1 for s in sections if s.has_preload)

    score = 100
    if lazy_rate < 0.5:
        score -= 20
    elif lazy_rate < 0.7:
        score -= 10

    if responsive_rate < 0.3:
        score -= 15
    elif responsive_rate < 0.5:
        score -= 8

    # Critical assets should be preloaded somewhere (usually the first section)
    if with_preload == 0:
        score -= 10

    return round_score(score)
