"""Theme source extraction package."""

# Lazy imports - use explicit imports when needed:
# from worker.extraction.sections import analyze_section, analyze_sections, build_theme_data

__all__ = [
    "SectionType",
    "analyze_section",
    "analyze_sections",
    "build_theme_data",
    "calculate_complexity_score",
    "estimate_load_time",
    "calculate_health_score",
    "get_section_status",
    "count_problematic_sections",
]
