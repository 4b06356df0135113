"""Scoring package for the ThemeMetrics score."""

# Use explicit imports:
# from worker.scoring.calculator import ThemeScoreCalculator, calculate_theme_score
# from worker.scoring.models import CoreWebVitals, SectionAnalysisData, ThemeData
# from worker.scoring.status import get_score_status, format_metric_value
# from worker.scoring.delta import compare_scores

__all__ = [
    # Inputs and outputs
    "CoreWebVitals",
    "SectionAnalysisData",
    "ThemeData",
    "BenchmarkContext",
    "ScoreBreakdown",
    "SpeedBreakdown",
    "QualityBreakdown",
    "ConversionBreakdown",
    # Weights
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
    # Aggregator
    "ThemeScoreCalculator",
    "calculate_theme_score",
    # Status helpers
    "ScoreStatus",
    "StatusInfo",
    "get_score_status",
    "format_metric_value",
    # Delta comparison (run-over-run)
    "ScoreDeltaCalculator",
    "ScoreDelta",
    "DimensionDelta",
    "ChangeDirection",
    "ChangeSignificance",
    "compare_scores",
]
