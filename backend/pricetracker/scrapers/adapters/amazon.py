"""Amazon ES search results scraper.

Reads the server-rendered search page at https://www.amazon.es/s?k=<keyword>.
"""

from decimal import Decimal
from typing import List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup, Tag

from pricetracker.models.enums import ScraperType
from pricetracker.scrapers.base import BaseSiteScraper, ScrapedItem
from pricetracker.scrapers.utils.normalizer import PriceNormalizer, to_absolute_url
from pricetracker.scrapers.utils.user_agents import get_random_user_agent


class AmazonScraper(BaseSiteScraper):
    """Scraper for Amazon Spain keyword search."""

    site_name = "Amazon ES"
    scraper_type = ScraperType.AMAZON
    base_url = "https://www.amazon.es"

    SEARCH_URL = "https://www.amazon.es/s?k="

    # Selectors
    RESULT_SELECTOR = "[data-component-type=s-search-result]"
    NAME_SELECTORS = ("h2 a span", "h2 span")
    LINK_SELECTORS = ("h2 a", "a:has(h2)")

    async def fetch(self, keyword: str) -> str:
        headers = {
            "User-Agent": get_random_user_agent(),
            "Accept-Language": "es-ES,es;q=0.9",
            "Accept": "text/html,application/xhtml+xml",
        }
        async with self._client(headers=headers) as client:
            response = await client.get(self.SEARCH_URL + quote_plus(keyword))
            response.raise_for_status()
            return response.text

    def parse(self, payload: str) -> List[ScrapedItem]:
        soup = BeautifulSoup(payload or "", "html.parser")
        results = soup.select(self.RESULT_SELECTOR)
        items = self._collect(results, self._parse_result)
        self.logger.debug("amazon_results_parsed", results=len(results), items=len(items))
        return items

    def _parse_result(self, result: Tag) -> Optional[ScrapedItem]:
        name_el = self._first(result, self.NAME_SELECTORS)
        if name_el is None:
            return None
        name = " ".join(name_el.get_text().split())
        if not name:
            return None

        link_el = self._first(result, self.LINK_SELECTORS)
        url = to_absolute_url(self.base_url, link_el.get("href")) if link_el is not None else None

        image_el = result.select_one(".s-image")
        image_url = image_el.get("src") if image_el is not None else None

        return ScrapedItem(
            name=name,
            price=self._extract_price(result),
            url=url,
            image_url=image_url or None,
            source_name=self.site_name,
        )

    @staticmethod
    def _first(result: Tag, selectors) -> Optional[Tag]:
        for selector in selectors:
            el = result.select_one(selector)
            if el is not None:
                return el
        return None

    @staticmethod
    def _extract_price(result: Tag) -> Optional[Decimal]:
        """Read the split whole/fraction price, falling back to the screen-reader text."""
        whole_el = result.select_one(".a-price .a-price-whole")
        if whole_el is not None:
            # The whole element also wraps the decimal separator span; only its own text counts
            whole = "".join(whole_el.find_all(string=True, recursive=False))
            fraction_el = result.select_one(".a-price .a-price-fraction")
            fraction = fraction_el.get_text(strip=True) if fraction_el is not None else None
            price = PriceNormalizer.from_parts(whole, fraction)
            if price is not None:
                return price

        offscreen_el = result.select_one(".a-price .a-offscreen")
        if offscreen_el is not None:
            return PriceNormalizer.parse_locale_price(offscreen_el.get_text())
        return None
