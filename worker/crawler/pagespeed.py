"""Core Web Vitals measurement via the PageSpeed Insights API.

Failures never propagate into the analysis pipeline: a missing key, an
API error, a malformed body or a network problem yields ``None`` (vitals not measured) and
the score falls back to its neutral vitals weighting.
"""

import math
from typing import Any

import httpx
import structlog

from worker.scoring.models import CoreWebVitals

logger = structlog.get_logger(__name__)

PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

# Lighthouse audit ids and the value used when an audit is missing
AUDIT_DEFAULTS = {
    "lcp": ("largest-contentful-paint", 3000.0),
    "cls": ("cumulative-layout-shift", 0.1),
    "fcp": ("first-contentful-paint", 2000.0),
    "tbt": ("total-blocking-time", 300.0),
}

# Field data (CrUX); lab runs have no INP
INP_FIELD_METRIC = "INTERACTION_TO_NEXT_PAINT"

STORE_DOMAIN_SUFFIX = ".myshopify.com"


def build_store_url(store: str) -> str:
    """
    Full storefront URL for a store reference.

    ``my-shop`` -> ``https://my-shop.myshopify.com``; domains
    (``my-shop.myshopify.com``, ``shop.example.com``) get ``https://``.
    """
    if "://" in store:
        return store
    if "." in store:
        return f"https://{store}"
    return f"https://{store}{STORE_DOMAIN_SUFFIX}"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def parse_pagespeed_response(data: Any) -> CoreWebVitals | None:
    """
    Map a PageSpeed v5 response body to CoreWebVitals.

    Returns None without audits. Missing or non-numeric audit values fall
    back to their defaults.
    """
    audits = _as_dict(_as_dict(_as_dict(data).get("lighthouseResult")).get("audits"))
    if not audits:
        return None

    values = {}
    for metric, (audit_id, default) in AUDIT_DEFAULTS.items():
        numeric = _as_number(_as_dict(audits.get(audit_id)).get("numericValue"))
        values[metric] = numeric if numeric is not None else default

    field_metrics = _as_dict(_as_dict(_as_dict(data).get("loadingExperience")).get("metrics"))
    inp = _as_number(_as_dict(field_metrics.get(INP_FIELD_METRIC)).get("percentile"))

    return CoreWebVitals(
        lcp=values["lcp"],
        cls=values["cls"],
        fcp=values["fcp"],
        tbt=values["tbt"],
        inp=inp,
    )


class PageSpeedClient:
    """Fetches lab Core Web Vitals for a storefront."""

    def __init__(
        self,
        api_key: str | None,
        strategy: str = "mobile",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.strategy = strategy
        self.timeout = timeout
        self._transport = transport

    async def fetch_vitals(self, store: str) -> CoreWebVitals | None:
        """
        Measure Core Web Vitals for a store.

        Args:
            store: Store domain, handle or full URL

        Returns:
            CoreWebVitals, or None when the measurement is unavailable
        """
        if not self.api_key:
            logger.warning("pagespeed_not_configured")
            return None

        url = build_store_url(store)
        params = {
            "url": url,
            "key": self.api_key,
            "strategy": self.strategy,
            "category": "performance",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(PAGESPEED_API_URL, params=params)

            if response.status_code >= 400:
                logger.warning("pagespeed_api_error", url=url, status_code=response.status_code)
                return None

            vitals = parse_pagespeed_response(response.json())

        except httpx.TimeoutException:
            logger.warning("pagespeed_timeout", url=url, timeout=self.timeout)
            return None

        except httpx.HTTPError as e:
            logger.warning("pagespeed_http_error", url=url, error=str(e))
            return None

        except ValueError as e:
            logger.warning("pagespeed_invalid_response", url=url, error=str(e))
            return None

        except Exception as e:
            logger.warning("pagespeed_error", url=url, error=str(e))
            return None

        if vitals is None:
            logger.warning("pagespeed_no_audits", url=url)
            return None

        logger.info(
            "pagespeed_measured",
            url=url,
            strategy=self.strategy,
            lcp=vitals.lcp,
            cls=vitals.cls,
            tbt=vitals.tbt,
        )
        return vitals


async def fetch_core_web_vitals(
    store: str,
    api_key: str | None,
    strategy: str = "mobile",
    timeout: float = 60.0,
) -> CoreWebVitals | None:
    """Convenience function to measure Core Web Vitals for a store."""
    client = PageSpeedClient(api_key=api_key, strategy=strategy, timeout=timeout)
    return await client.fetch_vitals(store)
