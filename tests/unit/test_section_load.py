"""Tests for section load impact scoring."""

from worker.scoring.models import ThemeData
from worker.scoring.section_load import (
    DEFAULT_FOLD_INDEX,
    calculate_section_load_score,
    fold_index,
)


class TestFoldIndex:
    def test_theme_value_used(self):
        assert fold_index(ThemeData(sections_above_fold=3)) == 3

    def test_default_when_unset(self):
        assert fold_index(ThemeData()) == DEFAULT_FOLD_INDEX
        assert fold_index(None) == DEFAULT_FOLD_INDEX


class TestSectionLoadScore:
    """Tests for calculate_section_load_score."""

    def test_empty_sections_neutral(self):
        result = calculate_section_load_score([], ThemeData())
        assert result.score == 100
        assert result.penalties == []

    def test_light_section_full_score(self, make_section):
        section = make_section("hero", complexity_score=5, has_lazy_loading=True)
        result = calculate_section_load_score([section], ThemeData(sections_above_fold=1))
        # 1.25 complexity cost is covered by the lazy loading credit
        assert result.score == 100

    def test_hero_video_penalized_more_than_other_video(self, make_section):
        hero = calculate_section_load_score([make_section("a", has_video=True)])
        second = calculate_section_load_score(
            [make_section("a"), make_section("b", has_video=True)]
        )
        assert hero.section_scores[0] == 75
        assert second.section_scores[1] == 85

    def test_missing_lazy_loading_below_fold(self, make_section):
        sections = [make_section(f"s{n}") for n in range(3)]
        result = calculate_section_load_score(sections, ThemeData(sections_above_fold=2))
        assert result.section_scores == [100, 100, 90]
        reasons = [p.reason for p in result.penalties]
        assert reasons == ["Missing lazy loading"]

    def test_above_fold_counts_double(self, make_section):
        sections = [make_section("a"), make_section("b", has_lazy_loading=False)]
        result = calculate_section_load_score(sections, ThemeData(sections_above_fold=1))
        # (100 * 2 + 90 * 1) / 3
        assert result.score == 97

    def test_external_scripts_capped(self, make_section):
        result = calculate_section_load_score([make_section("a", external_scripts=10)])
        assert result.section_scores == [88]

    def test_social_embed(self, make_section):
        result = calculate_section_load_score([make_section("instagram-feed")])
        assert result.section_scores == [85]
        assert result.penalties[0].reason == "External social media embed"

    def test_credits_do_not_cross_sections(self, make_section):
        sections = [
            make_section("a", has_lazy_loading=True, has_responsive_images=True, has_preload=True),
            make_section("b", has_video=True),
        ]
        result = calculate_section_load_score(sections, ThemeData(sections_above_fold=2))
        assert result.section_scores == [100, 85]

    def test_too_many_sections_penalty(self, make_section):
        sections = [make_section(f"s{n}", has_lazy_loading=True) for n in range(16)]
        result = calculate_section_load_score(sections)
        assert result.score == 90
        assert result.penalties[-1].section == "Theme"

    def test_degraded_sections(self, degraded_theme):
        sections, theme = degraded_theme
        result = calculate_section_load_score(sections, theme)
        # (32.5 * 2 + 42.5 * 2 + 32.5 * 3) / 7
        assert result.score == 35

    def test_score_bounded(self, make_section):
        section = make_section(
            "instagram-video",
            has_video=True,
            complexity_score=100,
            external_scripts=10,
            lines_of_code=5000,
            liquid_loops=50,
            has_animations=True,
        )
        result = calculate_section_load_score([section])
        assert result.score == 0
