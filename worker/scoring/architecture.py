"""Theme architecture scoring from theme-level structure."""

from worker.scoring.models import ThemeData
from worker.scoring.weights import round_score

MIN_SNIPPETS = 3
GOOD_SNIPPETS = 5
SNIPPET_BONUS = 5

# Target band for homepage section count; outside it the score drops
MIN_SECTIONS = 3
SECTION_COUNT_PENALTIES = [(20, 15), (15, 8)]
TOO_FEW_SECTIONS_PENALTY = 10

MAX_SECTIONS_ABOVE_FOLD = 4


def calculate_architecture_score(theme: ThemeData) -> int:
    """
    Score structural best practices of a theme.

    Snippet reuse and translations are rewarded. Section count follows a
    U-shaped curve: too many sections add load complexity, too few miss
    conversion opportunities.
    """
    score = 100

    if theme.snippets_count < MIN_SNIPPETS:
        score -= 15
    elif theme.snippets_count >= GOOD_SNIPPETS:
        score += SNIPPET_BONUS

    if not theme.has_translations:
        score -= 10

    if theme.total_sections < MIN_SECTIONS:
        score -= TOO_FEW_SECTIONS_PENALTY
    else:
        for limit, points in SECTION_COUNT_PENALTIES:
            if theme.total_sections > limit:
                score -= points
                break

    if theme.sections_above_fold > MAX_SECTIONS_ABOVE_FOLD:
        score -= 10

    return round_score(score)
