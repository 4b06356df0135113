"""Tests for e-commerce, mobile and revenue impact scoring."""

import pytest

from worker.scoring.conversion import (
    calculate_ecommerce_score,
    calculate_mobile_score,
    calculate_revenue_impact,
    estimate_monthly_loss,
    find_hero,
    has_element,
)
from worker.scoring.models import CoreWebVitals


class TestEcommerceScore:
    """Tests for calculate_ecommerce_score."""

    def test_base_score(self, make_section):
        assert calculate_ecommerce_score([make_section("rich-text")]) == 70

    def test_all_elements(self, make_section):
        sections = [
            make_section("slideshow", type="hero"),
            make_section("featured-products", type="product_grid"),
            make_section("customer-reviews"),
            make_section("newsletter"),
        ]
        assert calculate_ecommerce_score(sections) == 100

    def test_element_matched_by_name(self, make_section):
        assert has_element([make_section("Product-Recommendations")], "product_grid")
        assert has_element([make_section("testimonial-slider")], "testimonials")
        assert not has_element([make_section("footer")], "newsletter")

    def test_complex_hero_penalized(self, make_section):
        light = calculate_ecommerce_score([make_section("hero", complexity_score=30)])
        heavy = calculate_ecommerce_score([make_section("hero", complexity_score=80)])
        assert light == 80
        assert heavy == 70

    def test_find_hero(self, make_section):
        sections = [make_section("header"), make_section("banner", type="hero")]
        assert find_hero(sections).name == "banner"
        assert find_hero([make_section("footer")]) is None


class TestMobileScore:
    """Tests for calculate_mobile_score."""

    def test_without_vitals(self, make_section):
        section = make_section("a", has_responsive_images=True)
        assert calculate_mobile_score(None, [section], fold=2) == 70

    def test_good_vitals(self, good_vitals, make_section):
        section = make_section("a", has_responsive_images=True)
        assert calculate_mobile_score(good_vitals, [section], fold=2) == 100

    def test_poor_vitals(self, poor_vitals):
        assert calculate_mobile_score(poor_vitals, [], fold=2) == 50

    def test_tighter_than_speed_cutoffs(self, make_section):
        vitals = CoreWebVitals(lcp=2800, cls=0.12, fcp=1000, tbt=250)
        section = make_section("a", has_responsive_images=True)
        # -10 lcp, -8 tbt, -8 cls
        assert calculate_mobile_score(vitals, [section], fold=2) == 74

    def test_video_above_fold(self, good_vitals, make_section):
        sections = [
            make_section("a", has_video=True, has_responsive_images=True),
            make_section("b", has_responsive_images=True),
        ]
        assert calculate_mobile_score(good_vitals, sections, fold=1) == 85

    def test_video_below_fold_not_penalized(self, good_vitals, make_section):
        sections = [
            make_section("a", has_responsive_images=True),
            make_section("b", has_video=True, has_responsive_images=True),
        ]
        assert calculate_mobile_score(good_vitals, sections, fold=1) == 100

    def test_low_responsive_rate(self, good_vitals, make_section):
        sections = [make_section("a", has_responsive_images=True), make_section("b"), make_section("c")]
        assert calculate_mobile_score(good_vitals, sections, fold=2) == 90


class TestRevenueImpact:
    """Tests for calculate_revenue_impact."""

    def test_fast_site(self, good_vitals):
        impact = calculate_revenue_impact(good_vitals)
        assert impact.score == 100
        assert impact.conversion_loss == 0

    def test_slow_site(self, poor_vitals):
        impact = calculate_revenue_impact(poor_vitals)
        assert impact.conversion_loss == pytest.approx(0.28)
        assert impact.score == 30

    def test_moderate_delay(self):
        vitals = CoreWebVitals(lcp=3500, cls=0, fcp=1000, tbt=0)
        impact = calculate_revenue_impact(vitals)
        assert impact.conversion_loss == pytest.approx(0.105)
        assert impact.score == 70

    def test_without_vitals_assumes_three_seconds(self):
        impact = calculate_revenue_impact(None)
        assert impact.conversion_loss == pytest.approx(0.07)
        assert impact.score == 85


class TestMonthlyLoss:
    """Tests for estimate_monthly_loss."""

    def test_linear_model(self):
        # (100 - 80) * 10000 * 0.002
        assert estimate_monthly_loss(80, 10000) == 400

    def test_default_revenue(self):
        assert estimate_monthly_loss(90, None) == 300

    def test_perfect_score_no_loss(self):
        assert estimate_monthly_loss(100, 50000) == 0

    def test_never_negative(self):
        assert estimate_monthly_loss(120, 10000) == 0
