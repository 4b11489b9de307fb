"""Base site scraper interface.

All site-specific scrapers should inherit from BaseSiteScraper
and implement the abstract methods defined here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional

import httpx
import structlog

from pricetracker.core.exceptions import ScraperError
from pricetracker.models.enums import ScraperType
from pricetracker.scrapers.utils.rate_limiter import SourceRateLimiter
from pricetracker.scrapers.utils.retry import TRANSIENT_FETCH_ERRORS, fetch_retrying


@dataclass
class ScrapedItem:
    """One search result as read from a retail site.

    Price and URL may be missing when the page did not expose them;
    such items are kept here and skipped later during unification.
    """

    name: str
    price: Optional[Decimal]
    url: Optional[str]
    image_url: Optional[str] = None
    in_stock: bool = True
    source_name: str = ""

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("name is required")
        if self.price is None:
            self.in_stock = False


class BaseSiteScraper(ABC):
    """Abstract base class for all site scrapers.

    ``scrape()`` is the single entry point: it waits on the source's rate
    limit, fetches with retry and parses the payload. Subclasses only
    implement ``fetch()`` (one HTTP round trip) and ``parse()``.
    """

    site_name: str = ""  # Must be overridden in subclass (e.g., "Amazon ES")
    scraper_type: ScraperType  # Must be overridden in subclass
    base_url: str = ""

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        rate_limiter: SourceRateLimiter,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = 3,
        retry_base_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the scraper.

        Args:
            rate_limiter: Shared per-source rate limiter
            timeout: Connect/read timeout in seconds for each request
            max_attempts: Fetch attempts before giving up
            retry_base_delay: First backoff delay in seconds, doubled per retry
            transport: Optional httpx transport (mock transports in tests)
        """
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.transport = transport
        self.logger = structlog.get_logger(__name__).bind(scraper=self.scraper_type.value)

    @property
    def rate_key(self) -> str:
        """Key under which this scraper's requests are rate limited."""
        return self.scraper_type.value

    async def scrape(self, keyword: str, category: Optional[str] = None) -> List[ScrapedItem]:
        """Search the site for a keyword.

        Args:
            keyword: Search term
            category: Optional category hint (recorded only, sites are searched by keyword)

        Returns:
            Parsed items. Empty if the site could not be fetched after retries.

        Raises:
            ScraperError: If parsing the fetched payload crashes
        """
        self.logger.info("scrape_started", keyword=keyword, category=category)

        try:
            payload = await fetch_retrying(self.max_attempts, self.retry_base_delay)(
                self._rate_limited_fetch, keyword
            )
        except TRANSIENT_FETCH_ERRORS as e:
            self.logger.error("scrape_failed", keyword=keyword, error=str(e))
            return []

        try:
            items = self.parse(payload)
        except Exception as e:
            raise ScraperError(self.site_name, str(e) or type(e).__name__) from e

        self.logger.info("scrape_complete", keyword=keyword, items=len(items))
        return items

    async def _rate_limited_fetch(self, keyword: str) -> Any:
        # Each attempt, retries included, consumes a permit
        await self.rate_limiter.acquire(self.rate_key)
        return await self.fetch(keyword)

    @abstractmethod
    async def fetch(self, keyword: str) -> Any:
        """Perform one request against the site's search.

        Returns:
            Raw payload (HTML text or decoded JSON)

        Raises:
            httpx.HTTPError: On network failures or non-2xx responses
        """
        pass

    @abstractmethod
    def parse(self, payload: Any) -> List[ScrapedItem]:
        """Extract items from a raw payload. Must not raise on malformed input."""
        pass

    def _client(self, **kwargs) -> httpx.AsyncClient:
        """Create a short-lived HTTP client with this scraper's timeout."""
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,
            **kwargs,
        )

    def _collect(self, raw_items: Iterable[Any], parse_one: Callable[[Any], Optional[ScrapedItem]]) -> List[ScrapedItem]:
        """Run a per-item parser, dropping items that fail or yield nothing."""
        items: List[ScrapedItem] = []
        for raw in raw_items:
            try:
                item = parse_one(raw)
            except (ValueError, TypeError, AttributeError, KeyError) as e:
                self.logger.debug("item_parse_failed", error=str(e))
                continue
            if item is not None:
                items.append(item)
        return items
