"""Scraper system for searching retail sites.

This package provides:
- Base scraper class and the ScrapedItem data structure
- Utility modules for rate limiting, retries and price normalization
- Registry mapping source types to scraper instances
- Scheduler for periodic job runs
"""

from .base import BaseSiteScraper, ScrapedItem
from .registry import ScraperRegistry, build_scraper_registry

__all__ = [
    # Base classes
    "BaseSiteScraper",
    # Data structures
    "ScrapedItem",
    # Registry
    "ScraperRegistry",
    "build_scraper_registry",
]
