"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment before any app code runs
os.environ["ENV"] = "test"
os.environ["REDIS_URL"] = "redis://localhost:6379/0"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAGESPEED_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""

from worker.scoring.models import CoreWebVitals, SectionAnalysisData, ThemeData  # noqa: E402


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    from api.config import get_settings

    get_settings.cache_clear()  # Use test env, not stale or .env values
    from api.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def mock_job_service() -> Generator[MagicMock, None, None]:
    """Replace the job service dependency; no Redis needed."""
    from api.main import app
    from api.services.job_service import get_job_service

    service = MagicMock()
    app.dependency_overrides[get_job_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_job_service, None)


@pytest.fixture
def make_section() -> Callable[..., SectionAnalysisData]:
    """Factory for section analyses with sensible defaults."""

    def _make(name: str = "section", **overrides: Any) -> SectionAnalysisData:
        return SectionAnalysisData(name=name, **overrides)

    return _make


@pytest.fixture
def good_vitals() -> CoreWebVitals:
    return CoreWebVitals(lcp=1200, cls=0.02, fcp=800, tbt=50)


@pytest.fixture
def poor_vitals() -> CoreWebVitals:
    return CoreWebVitals(lcp=6000, cls=0.4, fcp=4000, tbt=900)


@pytest.fixture
def perfect_theme() -> tuple[list[SectionAnalysisData], ThemeData]:
    """One light, well-optimized hero section."""
    sections = [
        SectionAnalysisData(
            name="hero-banner",
            type="hero",
            complexity_score=5,
            has_lazy_loading=True,
            has_responsive_images=True,
            liquid_loops=0,
        )
    ]
    theme = ThemeData(
        total_sections=1,
        snippets_count=3,
        has_translations=True,
        sections_above_fold=1,
    )
    return sections, theme


@pytest.fixture
def degraded_theme() -> tuple[list[SectionAnalysisData], ThemeData]:
    """Five complex video sections without lazy loading."""
    sections = [
        SectionAnalysisData(
            name=f"section-{n}",
            complexity_score=90,
            has_video=True,
            liquid_loops=10,
        )
        for n in range(1, 6)
    ]
    theme = ThemeData(total_sections=5)
    return sections, theme


@pytest.fixture
def score_payload() -> dict[str, Any]:
    """Request body for POST /v1/scores."""
    return {
        "vitals": {"lcp": 1200, "cls": 0.02, "fcp": 800, "tbt": 50},
        "sections": [
            {
                "name": "hero-banner",
                "type": "hero",
                "complexity_score": 5,
                "has_lazy_loading": True,
                "has_responsive_images": True,
            }
        ],
        "theme": {
            "total_sections": 1,
            "snippets_count": 3,
            "has_translations": True,
            "sections_above_fold": 1,
        },
    }


HERO_LIQUID = """\
<div class="hero">
  <link rel="preload" as="image" href="{{ section.settings.image | image_url: width: 1920 }}">
  <img
    src="{{ section.settings.image | image_url: width: 1200 }}"
    srcset="{{ section.settings.image | image_url: width: 600 }} 600w"
    fetchpriority="high"
    alt="{{ section.settings.heading }}"
  >
  {% if section.settings.heading != blank %}
    <h1>{{ section.settings.heading }}</h1>
  {% endif %}
</div>
"""

PRODUCT_GRID_LIQUID = """\
<div class="product-grid">
  {% for product in collection.products limit: 8 %}
    <img src="{{ product.featured_image | image_url: width: 400 }}" loading="lazy">
    <p>{{ product.title }} - {{ product.price | money }}</p>
  {% endfor %}
</div>
"""

INSTAGRAM_LIQUID = """\
<div class="instagram" style="padding: 20px">
  <script src="https://cdn.example.com/instafeed.js"></script>
  <script src="//widgets.example.com/embed.js"></script>
  <script>window.feed = true;</script>
</div>
"""


@pytest.fixture
def theme_files() -> dict[str, str]:
    """Section sources in render order."""
    return {
        "sections/hero-banner.liquid": HERO_LIQUID,
        "sections/featured-products.liquid": PRODUCT_GRID_LIQUID,
        "sections/instagram-feed.liquid": INSTAGRAM_LIQUID,
    }


@pytest.fixture
def theme_asset_keys() -> list[str]:
    return [
        "layout/theme.liquid",
        "sections/hero-banner.liquid",
        "sections/featured-products.liquid",
        "sections/instagram-feed.liquid",
        "snippets/price.liquid",
        "snippets/product-card.liquid",
        "snippets/icon.liquid",
        "locales/en.default.json",
    ]
