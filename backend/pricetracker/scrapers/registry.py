"""Registry mapping scraper types to configured scraper instances."""

from typing import Dict, List, Optional

import httpx
import structlog

from pricetracker.config import settings
from pricetracker.core.exceptions import ScraperNotRegisteredError
from pricetracker.models.enums import ScraperType
from pricetracker.scrapers.adapters import AmazonScraper, MediaMarktScraper, PCComponentesScraper
from pricetracker.scrapers.base import BaseSiteScraper
from pricetracker.scrapers.utils.rate_limiter import SourceRateLimiter


logger = structlog.get_logger(__name__)


class ScraperRegistry:
    """Lookup table from ScraperType to a ready-to-use scraper.

    Populated once at startup, then frozen. Lookups after that are
    read-only, so the registry can be shared by concurrent job runs.
    """

    def __init__(self):
        self._scrapers: Dict[ScraperType, BaseSiteScraper] = {}
        self._frozen = False

    def register(self, scraper_type: ScraperType, scraper: BaseSiteScraper) -> None:
        """Register a scraper for a source type.

        Raises:
            RuntimeError: If the registry is frozen
            ValueError: If a scraper is already registered for this type
        """
        if self._frozen:
            raise RuntimeError("Scraper registry is frozen")
        if scraper_type in self._scrapers:
            raise ValueError(f"Scraper already registered for {scraper_type.value}")

        self._scrapers[scraper_type] = scraper
        logger.info("scraper_registered", scraper_type=scraper_type.value, site=scraper.site_name)

    def freeze(self) -> None:
        """Reject further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, scraper_type: ScraperType) -> BaseSiteScraper:
        """Get the scraper for a source type.

        Raises:
            ScraperNotRegisteredError: If no scraper handles this type
        """
        scraper = self._scrapers.get(scraper_type)
        if scraper is None:
            raise ScraperNotRegisteredError(getattr(scraper_type, "value", str(scraper_type)))
        return scraper

    def list_all(self) -> List[BaseSiteScraper]:
        return list(self._scrapers.values())

    def has_scraper(self, scraper_type: ScraperType) -> bool:
        return scraper_type in self._scrapers


def build_scraper_registry(
    rate_limiter: Optional[SourceRateLimiter] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ScraperRegistry:
    """Create every bundled scraper and return a frozen registry.

    Args:
        rate_limiter: Shared limiter; built from settings when omitted
        transport: Optional httpx transport handed to every scraper

    Returns:
        Frozen ScraperRegistry
    """
    if rate_limiter is None:
        rate_limiter = SourceRateLimiter(
            rates=settings.SCRAPER_RATE_LIMITS,
            default_rate=settings.SCRAPER_DEFAULT_RATE,
        )

    common = {
        "rate_limiter": rate_limiter,
        "timeout": settings.SCRAPER_TIMEOUT_SECONDS,
        "max_attempts": settings.SCRAPER_MAX_ATTEMPTS,
        "retry_base_delay": settings.SCRAPER_RETRY_BASE_DELAY,
        "transport": transport,
    }

    registry = ScraperRegistry()
    for scraper in (
        AmazonScraper(**common),
        MediaMarktScraper(**common),
        PCComponentesScraper(api_url=settings.PCCOMPONENTES_API_URL, **common),
    ):
        registry.register(scraper.scraper_type, scraper)
    registry.freeze()

    logger.info("scraper_registry_built", scrapers=len(registry.list_all()))
    return registry
