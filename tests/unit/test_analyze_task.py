"""Tests for the theme analysis pipeline."""

import threading
from unittest.mock import AsyncMock, MagicMock, patch

import orjson
import pytest

from worker.scoring.models import CoreWebVitals
from worker.tasks.analyze import (
    analyze_theme,
    format_vitals,
    run_analysis,
    run_analysis_sync,
    vitals_from_payload,
)


@pytest.fixture
def settings() -> MagicMock:
    settings = MagicMock()
    settings.pagespeed_enabled = True
    settings.pagespeed_api_key = "key"
    settings.pagespeed_strategy = "mobile"
    settings.pagespeed_timeout_seconds = 30.0
    settings.default_monthly_revenue = 10000.0
    return settings


class TestAnalyzeTheme:
    """Tests for the in-process analysis."""

    def test_report_shape(self, theme_files, theme_asset_keys):
        result = analyze_theme(theme_files, theme_asset_keys, theme_name="Dawn")

        assert set(result) == {
            "theme_name",
            "analyzed_at",
            "score",
            "status",
            "vitals",
            "vitals_display",
            "theme",
            "sections",
            "health_score",
            "problematic_sections",
            "total_load_time_ms",
            "recommendations",
        }
        assert result["theme_name"] == "Dawn"
        assert result["theme"]["snippets_count"] == 3
        assert [s["status"] for s in result["sections"]] == ["optimal"] * 3

    def test_json_serializable(self, theme_files):
        result = analyze_theme(theme_files, vitals=CoreWebVitals(lcp=2000, cls=0.1, fcp=1500, tbt=200))

        assert orjson.loads(orjson.dumps(result))["score"]["overall"] == result["score"]["overall"]

    def test_recommendations_for_fixture_theme(self, theme_files):
        result = analyze_theme(theme_files)

        rec_ids = [r["id"] for r in result["recommendations"]]
        assert "instagram-embed" in rec_ids
        assert "hero-no-preload" not in rec_ids

    def test_empty_theme(self):
        result = analyze_theme({})

        assert result["sections"] == []
        assert result["recommendations"] == []
        assert result["health_score"] == 100
        assert 0 <= result["score"]["overall"] <= 100

    def test_revenue_flows_into_estimates(self, theme_files):
        low = analyze_theme(theme_files, monthly_revenue=10000)
        high = analyze_theme(theme_files, monthly_revenue=100000)

        assert (
            high["score"]["conversion"]["estimated_monthly_loss"]
            > low["score"]["conversion"]["estimated_monthly_loss"]
        )
        assert (
            high["recommendations"][0]["estimated_revenue_impact"]
            > low["recommendations"][0]["estimated_revenue_impact"]
        )


class TestPayloadHelpers:
    def test_vitals_from_payload(self):
        vitals = vitals_from_payload({"lcp": 1000, "cls": 0.1, "fcp": 900, "tbt": 100})

        assert vitals == CoreWebVitals(lcp=1000, cls=0.1, fcp=900, tbt=100)

    def test_vitals_absent(self):
        assert vitals_from_payload(None) is None
        assert vitals_from_payload({}) is None

    def test_format_vitals(self):
        vitals = CoreWebVitals(lcp=2460, cls=0.051, fcp=1000, tbt=120.4)

        assert format_vitals(vitals) == {
            "lcp": "2.5s",
            "cls": "0.05",
            "fcp": "1.0s",
            "tbt": "120ms",
        }
        assert format_vitals(None) is None

    def test_unusable_vitals_reported_as_unmeasured(self, theme_files):
        vitals = CoreWebVitals(lcp=float("nan"), cls=0.05, fcp=1000, tbt=120)

        result = analyze_theme(theme_files, vitals=vitals)

        assert result["vitals"] is None
        assert result["vitals_display"] is None
        assert result["score"]["speed"]["details"] is None


class TestRunAnalysis:
    """Tests for the job payload entry point."""

    @pytest.mark.asyncio
    async def test_measures_vitals_for_store(self, settings, theme_files):
        measured = CoreWebVitals(lcp=1800, cls=0.05, fcp=1000, tbt=100)

        with (
            patch("worker.tasks.analyze.get_settings", return_value=settings),
            patch("worker.tasks.analyze.PageSpeedClient") as client_cls,
        ):
            client_cls.return_value.fetch_vitals = AsyncMock(return_value=measured)
            result = await run_analysis({"store": "my-shop", "section_files": theme_files})

        client_cls.return_value.fetch_vitals.assert_awaited_once_with("my-shop")
        assert client_cls.call_args.kwargs["api_key"] == "key"
        assert result["vitals"] == measured.to_dict()
        assert result["score"]["speed"]["details"] is not None

    @pytest.mark.asyncio
    async def test_supplied_vitals_skip_pagespeed(self, settings, theme_files):
        with (
            patch("worker.tasks.analyze.get_settings", return_value=settings),
            patch("worker.tasks.analyze.PageSpeedClient") as client_cls,
        ):
            result = await run_analysis(
                {
                    "store": "my-shop",
                    "section_files": theme_files,
                    "vitals": {"lcp": 1200, "cls": 0.02, "fcp": 800, "tbt": 50},
                }
            )

        client_cls.assert_not_called()
        assert result["vitals"]["lcp"] == 1200

    @pytest.mark.asyncio
    async def test_pagespeed_disabled(self, settings, theme_files):
        settings.pagespeed_enabled = False

        with (
            patch("worker.tasks.analyze.get_settings", return_value=settings),
            patch("worker.tasks.analyze.PageSpeedClient") as client_cls,
        ):
            result = await run_analysis({"store": "my-shop", "section_files": theme_files})

        client_cls.assert_not_called()
        assert result["vitals"] is None

    @pytest.mark.asyncio
    async def test_failed_measurement_falls_back(self, settings, theme_files):
        with (
            patch("worker.tasks.analyze.get_settings", return_value=settings),
            patch("worker.tasks.analyze.PageSpeedClient") as client_cls,
        ):
            client_cls.return_value.fetch_vitals = AsyncMock(return_value=None)
            result = await run_analysis({"store": "my-shop", "section_files": theme_files})

        assert result["vitals"] is None
        assert result["score"]["speed"]["details"] is None

    @pytest.mark.asyncio
    async def test_progress_saved_on_job(self, settings, theme_files):
        job = MagicMock()
        job.meta = {}

        with (
            patch("worker.tasks.analyze.get_settings", return_value=settings),
            patch("worker.tasks.analyze.get_current_job", return_value=job),
        ):
            await run_analysis({"section_files": theme_files})

        assert job.meta["step"] == "analyzing"
        assert job.meta["sections"] == 3
        job.save_meta.assert_called()

    @pytest.mark.asyncio
    async def test_analysis_runs_off_event_loop(self, settings, theme_files):
        loop_thread = threading.get_ident()
        seen: list[int] = []

        def fake_analyze(**kwargs):
            seen.append(threading.get_ident())
            return {"theme_name": kwargs["theme_name"]}

        with (
            patch("worker.tasks.analyze.get_settings", return_value=settings),
            patch("worker.tasks.analyze.analyze_theme", side_effect=fake_analyze),
        ):
            result = await run_analysis({"theme_name": "Dawn", "section_files": theme_files})

        assert result == {"theme_name": "Dawn"}
        assert seen and seen[0] != loop_thread


def test_run_analysis_sync(theme_files):
    job = MagicMock()
    job.id = "analysis-1"
    job.meta = {}

    with patch("worker.tasks.analyze.get_current_job", return_value=job):
        result = run_analysis_sync({"theme_name": "Dawn", "section_files": theme_files})

    assert result["theme_name"] == "Dawn"
    assert job.meta["step"] == "completed"
    assert job.meta["overall"] == result["score"]["overall"]
