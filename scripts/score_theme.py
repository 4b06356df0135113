#!/usr/bin/env python
"""Score a theme checked out on disk.

Reads ``sections/*.liquid`` (in name order, or the order given with
--order), counts snippets and locales, and prints the score breakdown.

Usage:
    python scripts/score_theme.py path/to/theme
    python scripts/score_theme.py path/to/theme --lcp 2100 --cls 0.05 --fcp 1200 --tbt 150
    python scripts/score_theme.py path/to/theme --store my-store --json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, ".")

from api.config import get_settings  # noqa: E402
from api.logging import setup_logging  # noqa: E402
from worker.crawler.pagespeed import fetch_core_web_vitals  # noqa: E402
from worker.extraction.sections import analyze_sections, build_theme_data  # noqa: E402
from worker.fixes.recommendations import generate_recommendations  # noqa: E402
from worker.scoring.calculator import calculate_theme_score  # noqa: E402
from worker.scoring.models import BenchmarkContext, CoreWebVitals  # noqa: E402
from worker.scoring.status import get_score_status  # noqa: E402
from worker.tasks.analyze import analyze_theme  # noqa: E402


def load_theme(root: Path, order: list[str] | None) -> tuple[dict[str, str], list[str]]:
    """Return (section sources in render order, all asset keys)."""
    asset_keys = sorted(
        path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file()
    )
    section_paths = sorted((root / "sections").glob("*.liquid"))
    if order:
        by_name = {path.stem: path for path in section_paths}
        section_paths = [by_name[name] for name in order if name in by_name]

    section_files = {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8", errors="replace")
        for path in section_paths
    }
    return section_files, asset_keys


def parse_vitals(args: argparse.Namespace) -> CoreWebVitals | None:
    values = (args.lcp, args.cls, args.fcp, args.tbt)
    if all(v is None for v in values):
        return None
    if any(v is None for v in values):
        raise SystemExit("--lcp, --cls, --fcp and --tbt must be given together")
    return CoreWebVitals(lcp=args.lcp, cls=args.cls, fcp=args.fcp, tbt=args.tbt, inp=args.inp)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Score a theme checked out on disk")
    parser.add_argument("theme_dir", type=Path, help="Theme root (contains sections/)")
    parser.add_argument("--order", type=str, help="Comma-separated section render order")
    parser.add_argument("--above-fold", type=int, default=2, help="Sections above the fold")
    parser.add_argument("--revenue", type=float, help="Monthly store revenue")
    parser.add_argument("--store", type=str, help="Store domain to measure with PageSpeed")
    parser.add_argument("--lcp", type=float)
    parser.add_argument("--cls", type=float)
    parser.add_argument("--fcp", type=float)
    parser.add_argument("--tbt", type=float)
    parser.add_argument("--inp", type=float)
    parser.add_argument("--json", action="store_true", help="Print the full JSON report")
    args = parser.parse_args()

    setup_logging(component="cli", log_level="WARNING")
    settings = get_settings()

    if not (args.theme_dir / "sections").is_dir():
        raise SystemExit(f"{args.theme_dir} has no sections/ directory")

    order = [name.strip() for name in args.order.split(",")] if args.order else None
    section_files, asset_keys = load_theme(args.theme_dir, order)

    vitals = parse_vitals(args)
    if vitals is None and args.store:
        vitals = await fetch_core_web_vitals(
            args.store,
            api_key=settings.pagespeed_api_key,
            strategy=settings.pagespeed_strategy,
        )
        if vitals is None:
            print("PageSpeed unavailable, scoring without vitals", file=sys.stderr)

    revenue = args.revenue or settings.default_monthly_revenue

    if args.json:
        report = analyze_theme(
            section_files,
            asset_keys,
            vitals=vitals,
            monthly_revenue=revenue,
            sections_above_fold=args.above_fold,
            theme_name=args.theme_dir.name,
        )
        print(json.dumps(report, indent=2))
        return

    sections = analyze_sections(section_files)
    theme = build_theme_data(asset_keys, sections, args.above_fold)
    breakdown = calculate_theme_score(
        vitals, sections, theme, BenchmarkContext(monthly_revenue=revenue)
    )
    print(breakdown.show_the_math())
    print(f"\nStatus: {get_score_status(breakdown.overall).label}")

    recommendations = generate_recommendations(sections, revenue)
    if recommendations:
        print("\nTop recommendations:")
        for rec in recommendations[:5]:
            target = f" [{rec.section_name}]" if rec.section_name else ""
            print(f"  - ({rec.rule.severity.value}) {rec.rule.title}{target}")


if __name__ == "__main__":
    asyncio.run(main())
