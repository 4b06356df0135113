"""Theme analysis pipeline and background task."""

import asyncio
import time
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import structlog
from rq import get_current_job

from api.config import get_settings
from api.metrics import record_analysis, record_job_duration, record_pagespeed
from worker.crawler.pagespeed import PageSpeedClient
from worker.extraction.sections import (
    analyze_sections,
    build_theme_data,
    calculate_health_score,
    count_problematic_sections,
    get_section_status,
)
from worker.fixes.recommendations import generate_recommendations
from worker.scoring.calculator import calculate_theme_score
from worker.scoring.models import BenchmarkContext, CoreWebVitals
from worker.scoring.status import format_metric_value, get_score_status

logger = structlog.get_logger(__name__)

VITAL_METRICS = ("lcp", "cls", "fcp", "tbt", "inp")


def _update_job_progress(step: str, **meta: Any) -> None:
    job = get_current_job()
    if job is None:
        return
    job.meta["step"] = step
    job.meta.update(meta)
    job.save_meta()


def format_vitals(vitals: CoreWebVitals | None) -> dict[str, str] | None:
    if vitals is None:
        return None
    values = vitals.to_dict()
    return {
        metric: format_metric_value(metric, values[metric])
        for metric in VITAL_METRICS
        if values[metric] is not None
    }


def analyze_theme(
    section_files: dict[str, str],
    asset_keys: Iterable[str] = (),
    vitals: CoreWebVitals | None = None,
    monthly_revenue: float | None = None,
    sections_above_fold: int = 2,
    theme_name: str | None = None,
) -> dict[str, Any]:
    """
    Run the full analysis for one theme.

    Section analysis -> theme structure -> score -> recommendations.

    Args:
        section_files: Section asset key -> Liquid source, in render order
        asset_keys: All theme asset keys (for snippets and locales)
        vitals: Measured Core Web Vitals, or None
        monthly_revenue: Store revenue for loss and ROI estimates
        sections_above_fold: Leading sections visible without scrolling
        theme_name: Display name

    Returns:
        JSON-ready analysis dict
    """
    if vitals is not None and not vitals.is_complete:
        vitals = None
    sections = analyze_sections(section_files)
    theme = build_theme_data(asset_keys, sections, sections_above_fold)
    breakdown = calculate_theme_score(
        vitals,
        sections,
        theme,
        BenchmarkContext(monthly_revenue=monthly_revenue),
    )
    recommendations = generate_recommendations(sections, monthly_revenue)

    logger.info(
        "theme_analyzed",
        theme=theme_name,
        sections=len(sections),
        overall=breakdown.overall,
        recommendations=len(recommendations),
        has_vitals=vitals is not None,
    )

    return {
        "theme_name": theme_name,
        "analyzed_at": datetime.now(UTC).isoformat(),
        "score": breakdown.to_dict(),
        "status": get_score_status(breakdown.overall).to_dict(),
        "vitals": vitals.to_dict() if vitals is not None else None,
        "vitals_display": format_vitals(vitals),
        "theme": theme.to_dict(),
        "sections": [
            {**section.to_dict(), "status": get_section_status(section)} for section in sections
        ],
        "health_score": calculate_health_score(sections),
        "problematic_sections": count_problematic_sections(sections),
        "total_load_time_ms": sum(s.estimated_load_time_ms or 0 for s in sections),
        "recommendations": [r.to_dict() for r in recommendations],
    }


def vitals_from_payload(data: dict[str, Any] | None) -> CoreWebVitals | None:
    if not data:
        return None
    return CoreWebVitals(
        lcp=data["lcp"],
        cls=data["cls"],
        fcp=data["fcp"],
        tbt=data["tbt"],
        inp=data.get("inp"),
    )


async def run_analysis(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Analyze a theme described by a job payload.

    Measures Core Web Vitals through PageSpeed when the payload names a
    store and carries no vitals of its own.
    """
    settings = get_settings()
    vitals = vitals_from_payload(payload.get("vitals"))
    store = payload.get("store")

    if vitals is None and store and settings.pagespeed_enabled:
        _update_job_progress("measuring_vitals", store=store)
        client = PageSpeedClient(
            api_key=settings.pagespeed_api_key,
            strategy=settings.pagespeed_strategy,
            timeout=settings.pagespeed_timeout_seconds,
        )
        vitals = await client.fetch_vitals(store)
        record_pagespeed(vitals is not None)

    _update_job_progress("analyzing", sections=len(payload.get("section_files", {})))

    # Parsing is CPU-bound; keep it off the event loop
    return await asyncio.to_thread(
        analyze_theme,
        section_files=payload.get("section_files", {}),
        asset_keys=payload.get("asset_keys", []),
        vitals=vitals,
        monthly_revenue=payload.get("monthly_revenue") or settings.default_monthly_revenue,
        sections_above_fold=payload.get("sections_above_fold", 2),
        theme_name=payload.get("theme_name"),
    )


def run_analysis_sync(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Synchronous wrapper for the analysis task.

    This is the entry point for RQ which requires sync functions.
    """
    job = get_current_job()
    started = time.perf_counter()
    logger.info(
        "analysis_job_started",
        job_id=job.id if job else None,
        theme=payload.get("theme_name"),
        store=payload.get("store"),
    )

    result = asyncio.run(run_analysis(payload))

    duration = time.perf_counter() - started
    record_job_duration("analysis", duration)
    record_analysis("job", result["score"]["overall"], result["vitals"] is not None)
    _update_job_progress("completed", overall=result["score"]["overall"])
    logger.info(
        "analysis_job_completed",
        job_id=job.id if job else None,
        overall=result["score"]["overall"],
        duration_s=round(duration, 2),
    )
    return result
