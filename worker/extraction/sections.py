"""Liquid section template analysis.

Turns a theme section file (Liquid + HTML) into the signals the scoring
engine consumes. Liquid constructs are counted, not parsed; HTML elements
are read with BeautifulSoup.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

import structlog
from bs4 import BeautifulSoup

from worker.scoring.models import SectionAnalysisData, ThemeData

logger = structlog.get_logger(__name__)


class SectionType(StrEnum):
    """Kind of theme section."""

    HERO = "hero"
    PRODUCT_GRID = "product_grid"
    FEATURED_COLLECTION = "featured_collection"
    ANNOUNCEMENT = "announcement"
    NEWSLETTER = "newsletter"
    TESTIMONIALS = "testimonials"
    IMAGE_WITH_TEXT = "image_with_text"
    VIDEO = "video"
    INSTAGRAM = "instagram"
    FOOTER = "footer"
    HEADER = "header"
    CUSTOM = "custom"


# File name keywords per section type, checked in order
SECTION_TYPE_PATTERNS: dict[SectionType, list[str]] = {
    SectionType.HERO: ["hero", "banner", "slideshow", "slider", "main-banner", "image-banner"],
    SectionType.PRODUCT_GRID: [
        "product-grid",
        "collection-grid",
        "featured-products",
        "product-list",
        "collection-template",
    ],
    SectionType.FEATURED_COLLECTION: ["featured-collection", "collection-list", "collections-list"],
    SectionType.ANNOUNCEMENT: ["announcement", "notice", "alert-bar", "promo-bar"],
    SectionType.NEWSLETTER: ["newsletter", "subscribe", "email-signup", "mailing", "email-capture"],
    SectionType.TESTIMONIALS: ["testimonials", "reviews", "social-proof", "customer-reviews"],
    SectionType.IMAGE_WITH_TEXT: ["image-with-text", "image-text", "media-text", "text-with-image"],
    SectionType.VIDEO: ["video", "background-video"],
    SectionType.INSTAGRAM: ["instagram", "social-feed", "ig-feed", "social-media"],
    SectionType.FOOTER: ["footer"],
    SectionType.HEADER: ["header", "navigation", "nav", "main-menu"],
}

LIQUID_LOOP = re.compile(r"{%-?\s*for\b")
LIQUID_CONDITION = re.compile(r"{%-?\s*if\b")
LIQUID_ASSIGN = re.compile(r"{%-?\s*assign\b")
LIQUID_CAPTURE = re.compile(r"{%-?\s*capture\b")
LIQUID_IMAGE_OUTPUT = re.compile(r"\{\{[^}]*\|\s*image_url")
PRODUCT_LOOP = re.compile(r"for\s+product\s+in\b")
EXTERNAL_SRC = re.compile(r"^(https?:)?//")

VIDEO_MARKERS = ("<video", ".mp4", ".webm", "youtube", "vimeo", "video_url")
ANIMATION_MARKERS = ("animation", "@keyframes", "transition", "animate", "aos", "gsap", "motion")
LAZY_MARKERS = ('loading="lazy"', "loading='lazy'", "lazy-load", "lazyload", "data-src")
CAROUSEL_LIBRARIES = ("swiper", "slick", "flickity")

# Complexity contributions: (per occurrence, cap)
COMPLEXITY_LIQUID = {
    "loops": (5, 25),
    "conditions": (2, 15),
    "assigns": (1, 10),
    "captures": (3, 10),
}
COMPLEXITY_SCRIPTS = (8, 20)
# (more than N lines, points); first match wins
COMPLEXITY_LINES = [(500, 30), (200, 20), (100, 10), (50, 5)]

BASE_LOAD_TIME_MS = 100
LOAD_TIME_PER_COMPLEXITY_POINT = 8


@dataclass(frozen=True)
class SectionBenchmark:
    avg_load_time: int
    max_recommended: int


# Typical fashion-store load times per section type (ms)
SECTION_BENCHMARKS: dict[SectionType, SectionBenchmark] = {
    SectionType.HERO: SectionBenchmark(800, 1200),
    SectionType.PRODUCT_GRID: SectionBenchmark(600, 1000),
    SectionType.FEATURED_COLLECTION: SectionBenchmark(500, 800),
    SectionType.VIDEO: SectionBenchmark(2000, 2500),
    SectionType.NEWSLETTER: SectionBenchmark(200, 400),
    SectionType.TESTIMONIALS: SectionBenchmark(400, 600),
    SectionType.IMAGE_WITH_TEXT: SectionBenchmark(400, 600),
    SectionType.INSTAGRAM: SectionBenchmark(1500, 2000),
    SectionType.ANNOUNCEMENT: SectionBenchmark(100, 200),
    SectionType.HEADER: SectionBenchmark(300, 500),
    SectionType.FOOTER: SectionBenchmark(200, 400),
    SectionType.CUSTOM: SectionBenchmark(500, 800),
}

PROBLEMATIC_COMPLEXITY = 60


def section_name_from_path(filename: str) -> str:
    """``sections/hero-banner.liquid`` -> ``hero-banner``."""
    name = filename.rsplit("/", 1)[-1]
    return name.removesuffix(".liquid")


def classify_section_type(name: str, content: str) -> SectionType:
    """Classify by file name keywords first, then by content."""
    lowered = name.lower()
    for section_type, keywords in SECTION_TYPE_PATTERNS.items():
        if any(keyword in lowered for keyword in keywords):
            return section_type

    if any(marker in content for marker in ("video", ".mp4", "youtube", "vimeo")):
        return SectionType.VIDEO
    if any(
        marker in content for marker in ("product.price", "product.title", "collection.products")
    ):
        return SectionType.PRODUCT_GRID
    if "form" in content and any(
        marker in content for marker in ("newsletter", "email", "subscribe")
    ):
        return SectionType.NEWSLETTER
    if "instagram" in content or "social" in content:
        return SectionType.INSTAGRAM
    return SectionType.CUSTOM


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def calculate_complexity_score(content: str, soup: BeautifulSoup | None = None) -> int:
    """
    Estimate template complexity on a 0-100 scale (higher is worse).

    Counts lines, Liquid constructs and script tags, and adds fixed points
    for heavy media, embeds, animations and expensive CSS.
    """
    soup = soup if soup is not None else BeautifulSoup(content, "html.parser")
    score = 0

    lines = count_lines(content)
    for limit, points in COMPLEXITY_LINES:
        if lines > limit:
            score += points
            break

    counts = {
        "loops": len(LIQUID_LOOP.findall(content)),
        "conditions": len(LIQUID_CONDITION.findall(content)),
        "assigns": len(LIQUID_ASSIGN.findall(content)),
        "captures": len(LIQUID_CAPTURE.findall(content)),
    }
    for construct, (per_occurrence, cap) in COMPLEXITY_LIQUID.items():
        score += min(counts[construct] * per_occurrence, cap)

    per_script, script_cap = COMPLEXITY_SCRIPTS
    score += min(len(soup.find_all("script")) * per_script, script_cap)

    if "video" in content or ".mp4" in content:
        score += 15
    if "iframe" in content:
        score += 12
    if any(network in content for network in ("instagram", "twitter", "facebook")):
        score += 8
    if "animation" in content or "@keyframes" in content:
        score += 5
    if "transition" in content:
        score += 3
    if "backdrop-filter" in content or "filter:" in content:
        score += 3

    return min(100, score)


def count_external_scripts(soup: BeautifulSoup) -> int:
    return sum(
        1 for tag in soup.find_all("script", src=True) if EXTERNAL_SRC.match(tag["src"].strip())
    )


def count_inline_styles(soup: BeautifulSoup) -> int:
    return sum(1 for tag in soup.find_all(style=True) if tag["style"].strip())


def estimate_load_time(content: str, complexity_score: int, soup: BeautifulSoup | None = None) -> int:
    """Rough load time in milliseconds from complexity and heavy elements."""
    soup = soup if soup is not None else BeautifulSoup(content, "html.parser")
    load_time = BASE_LOAD_TIME_MS + complexity_score * LOAD_TIME_PER_COMPLEXITY_POINT

    if "video" in content or ".mp4" in content:
        load_time += 1500
    if "iframe" in content:
        load_time += 800
    if "youtube" in content or "vimeo" in content:
        load_time += 1200

    if any(library in content for library in CAROUSEL_LIBRARIES):
        load_time += 400
    if "slideshow" in content or "carousel" in content:
        load_time += 300

    images = len(LIQUID_IMAGE_OUTPUT.findall(content)) + len(soup.find_all("img"))
    load_time += images * 100
    load_time += count_external_scripts(soup) * 200
    load_time += len(PRODUCT_LOOP.findall(content)) * 150

    return load_time


def has_video(content: str) -> bool:
    return any(marker in content for marker in VIDEO_MARKERS)


def has_animations(content: str) -> bool:
    return any(marker in content for marker in ANIMATION_MARKERS)


def has_lazy_loading(content: str) -> bool:
    return any(marker in content for marker in LAZY_MARKERS)


def has_responsive_images(content: str, soup: BeautifulSoup) -> bool:
    if soup.find(srcset=True) is not None or "srcset" in content:
        return True
    return ("image_url" in content and "widths:" in content) or "sizes:" in content


def has_preload(content: str, soup: BeautifulSoup) -> bool:
    for link in soup.find_all("link", rel=True):
        if "preload" in link["rel"]:
            return True
    return soup.find(fetchpriority=True) is not None or "fetchpriority" in content


def analyze_section(filename: str, content: str) -> SectionAnalysisData:
    """
    Analyze one section template.

    Args:
        filename: Asset key or file name (``sections/hero.liquid``)
        content: Liquid source

    Returns:
        SectionAnalysisData for the scoring engine
    """
    name = section_name_from_path(filename)
    soup = BeautifulSoup(content, "html.parser")
    complexity = calculate_complexity_score(content, soup)

    return SectionAnalysisData(
        name=name,
        type=classify_section_type(name, content).value,
        lines_of_code=count_lines(content),
        complexity_score=complexity,
        has_video=has_video(content),
        has_animations=has_animations(content),
        has_lazy_loading=has_lazy_loading(content),
        has_responsive_images=has_responsive_images(content, soup),
        has_preload=has_preload(content, soup),
        liquid_loops=len(LIQUID_LOOP.findall(content)),
        liquid_assigns=len(LIQUID_ASSIGN.findall(content)),
        liquid_conditions=len(LIQUID_CONDITION.findall(content)),
        liquid_captures=len(LIQUID_CAPTURE.findall(content)),
        external_scripts=count_external_scripts(soup),
        inline_styles=count_inline_styles(soup),
        estimated_load_time_ms=estimate_load_time(content, complexity, soup),
    )


def analyze_sections(section_files: dict[str, str]) -> list[SectionAnalysisData]:
    """Analyze section files in the order given."""
    sections = [analyze_section(filename, content) for filename, content in section_files.items()]
    logger.debug("sections_analyzed", count=len(sections))
    return sections


def build_theme_data(
    asset_keys: Iterable[str],
    sections: Sequence[SectionAnalysisData],
    sections_above_fold: int = 2,
) -> ThemeData:
    """Derive theme-level structure from the theme's asset keys."""
    keys = list(asset_keys)
    snippets = sum(1 for key in keys if key.startswith("snippets/") and key.endswith(".liquid"))
    has_translations = any(key.startswith("locales/") for key in keys)

    return ThemeData(
        total_sections=len(sections),
        snippets_count=snippets,
        has_translations=has_translations,
        sections_above_fold=sections_above_fold,
    )


def calculate_health_score(sections: Sequence[SectionAnalysisData]) -> int:
    """
    Section health score (0-100), 100 for no sections.

    Starts at 100 and subtracts for average complexity, total load time,
    section count, a video hero, lazy-loading gaps below the first two
    sections and Instagram embeds.
    """
    if not sections:
        return 100

    score = 100.0
    avg_complexity = sum(s.complexity_score for s in sections) / len(sections)
    score -= avg_complexity * 0.3

    total_load_time = sum(s.estimated_load_time_ms or 0 for s in sections)
    if total_load_time > 5000:
        score -= 20
    elif total_load_time > 3000:
        score -= 10
    elif total_load_time > 2000:
        score -= 5

    if len(sections) > 15:
        score -= 15
    elif len(sections) > 12:
        score -= 10
    elif len(sections) > 10:
        score -= 5

    if any(s.type == SectionType.HERO and s.has_video for s in sections):
        score -= 15

    # First two sections assumed above the fold
    score -= sum(2 for s in sections[2:] if not s.has_lazy_loading)
    score -= sum(8 for s in sections if s.type == SectionType.INSTAGRAM)

    return max(0, round(score))


def get_section_status(section: SectionAnalysisData) -> str:
    """Compare a section's estimated load time to its type benchmark."""
    try:
        benchmark = SECTION_BENCHMARKS[SectionType(section.type)]
    except ValueError:
        benchmark = SECTION_BENCHMARKS[SectionType.CUSTOM]

    load_time = section.estimated_load_time_ms or 0
    if load_time <= benchmark.avg_load_time:
        return "optimal"
    elif load_time <= benchmark.max_recommended:
        return "warning"
    return "critical"


def count_problematic_sections(sections: Sequence[SectionAnalysisData]) -> int:
    """Sections that are over their load-time benchmark or overly complex."""
    return sum(
        1
        for s in sections
        if get_section_status(s) == "critical" or s.complexity_score > PROBLEMATIC_COMPLEXITY
    )
