"""Fix recommendations package."""

# Use explicit imports when needed:
# from worker.fixes.recommendations import generate_recommendations, Recommendation

__all__ = [
    "Recommendation",
    "RecommendationRule",
    "RecommendationSeverity",
    "RecommendationType",
    "Effort",
    "generate_recommendations",
]
