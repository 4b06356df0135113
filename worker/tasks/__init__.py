"""Background task definitions."""

from worker.tasks.analyze import analyze_theme, run_analysis, run_analysis_sync

__all__ = [
    "analyze_theme",
    "run_analysis",
    "run_analysis_sync",
]
