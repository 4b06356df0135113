"""Crawler package for storefront measurements."""

# Use explicit imports when needed:
# from worker.crawler.pagespeed import PageSpeedClient, fetch_core_web_vitals

__all__ = [
    "PageSpeedClient",
    "build_store_url",
    "parse_pagespeed_response",
    "fetch_core_web_vitals",
]
