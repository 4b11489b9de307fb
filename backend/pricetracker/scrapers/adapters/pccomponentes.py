"""PCComponentes search API scraper.

Uses the JSON search endpoint behind the storefront. Prices come back as
strings with a comma decimal separator ("599,99").
"""

from typing import Any, Dict, List, Optional

import httpx

from pricetracker.models.enums import ScraperType
from pricetracker.scrapers.base import BaseSiteScraper, ScrapedItem
from pricetracker.scrapers.utils.normalizer import PriceNormalizer


class PCComponentesScraper(BaseSiteScraper):
    """Scraper for the PCComponentes product search API."""

    site_name = "PCComponentes"
    scraper_type = ScraperType.PCCOMPONENTES
    base_url = "https://www.pccomponentes.com"

    DEFAULT_API_URL = "https://www.pccomponentes.com/api/v1/search"
    PAGE_SIZE = 24

    def __init__(self, *args, api_url: str = DEFAULT_API_URL, **kwargs):
        super().__init__(*args, **kwargs)
        self.api_url = api_url

    async def fetch(self, keyword: str) -> Any:
        params = {"query": keyword, "perPage": self.PAGE_SIZE, "page": 1}
        async with self._client(headers={"Accept": "application/json"}) as client:
            response = await client.get(self.api_url, params=params)
            response.raise_for_status()
            try:
                return response.json()
            except ValueError as e:
                # An HTML challenge page instead of JSON counts as a failed fetch
                raise httpx.DecodingError(f"Invalid JSON from search API: {e}", request=response.request)

    def parse(self, payload: Any) -> List[ScrapedItem]:
        if not isinstance(payload, dict):
            self.logger.warning("search_response_unexpected", payload_type=type(payload).__name__)
            return []
        products = payload.get("data")
        if not isinstance(products, list):
            return []
        return self._collect(products, self._parse_product)

    def _parse_product(self, product: Dict[str, Any]) -> Optional[ScrapedItem]:
        if not isinstance(product, dict):
            return None
        name = product.get("name")
        if not isinstance(name, str) or not name.strip():
            return None

        slug = product.get("slug")
        photo = product.get("photo")
        return ScrapedItem(
            name=name.strip(),
            price=PriceNormalizer.parse_locale_price(product.get("price")),
            url=f"{self.base_url}/{slug}" if isinstance(slug, str) and slug else None,
            image_url=photo if isinstance(photo, str) and photo else None,
            source_name=self.site_name,
        )
