"""MediaMarkt ES search results scraper.

MediaMarkt renders results client-side, but embeds them as schema.org
JSON-LD (an ItemList of Product entries) in the search page.
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup

from pricetracker.models.enums import ScraperType
from pricetracker.scrapers.base import BaseSiteScraper, ScrapedItem
from pricetracker.scrapers.utils.normalizer import PriceNormalizer, to_absolute_url
from pricetracker.scrapers.utils.user_agents import DEFAULT_USER_AGENT


class MediaMarktScraper(BaseSiteScraper):
    """Scraper for MediaMarkt Spain keyword search."""

    site_name = "MediaMarkt ES"
    scraper_type = ScraperType.MEDIAMARKT
    base_url = "https://www.mediamarkt.es"

    SEARCH_URL = "https://www.mediamarkt.es/es/search.html?query="

    async def fetch(self, keyword: str) -> str:
        headers = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept-Language": "es-ES,es;q=0.9",
        }
        async with self._client(headers=headers) as client:
            response = await client.get(self.SEARCH_URL + quote_plus(keyword))
            response.raise_for_status()
            return response.text

    def parse(self, payload: str) -> List[ScrapedItem]:
        soup = BeautifulSoup(payload or "", "html.parser")

        for script in soup.select('script[type="application/ld+json"]'):
            try:
                data = json.loads(script.get_text(), parse_float=Decimal)
            except ValueError as e:
                self.logger.debug("jsonld_block_invalid", error=str(e))
                continue

            item_list = self._find_item_list(data)
            if item_list is not None:
                return self._parse_item_list(item_list)

        self.logger.warning("jsonld_item_list_missing")
        return []

    @staticmethod
    def _find_item_list(data: Any) -> Optional[Dict[str, Any]]:
        nodes = data if isinstance(data, list) else [data]
        for node in nodes:
            if isinstance(node, dict) and node.get("@type") == "ItemList":
                return node
        return None

    def _parse_item_list(self, item_list: Dict[str, Any]) -> List[ScrapedItem]:
        elements = item_list.get("itemListElement")
        if not isinstance(elements, list):
            return []
        return self._collect(elements, self._parse_element)

    def _parse_element(self, element: Any) -> Optional[ScrapedItem]:
        if not isinstance(element, dict):
            return None
        # ListItem wrappers carry the product under "item"
        product = element.get("item", element)
        if not isinstance(product, dict):
            return None

        name = product.get("name")
        if not isinstance(name, str) or not name.strip():
            return None

        url = product.get("url")
        return ScrapedItem(
            name=name.strip(),
            price=self._extract_price(product.get("offers")),
            url=to_absolute_url(self.base_url, url) if isinstance(url, str) else None,
            image_url=self._extract_image(product.get("image")),
            source_name=self.site_name,
        )

    @staticmethod
    def _extract_price(offers: Any) -> Optional[Decimal]:
        if isinstance(offers, list):
            offers = offers[0] if offers else None
        if not isinstance(offers, dict):
            return None
        return PriceNormalizer.parse_locale_price(offers.get("price"))

    @staticmethod
    def _extract_image(image: Any) -> Optional[str]:
        if isinstance(image, list):
            image = image[0] if image else None
        return image if isinstance(image, str) and image else None
