"""Read-only analytics over listings and price history."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import structlog
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pricetracker.core.exceptions import NotFoundError
from pricetracker.models.base import utcnow
from pricetracker.models.price_history import PriceHistory
from pricetracker.models.product import Product
from pricetracker.models.product_listing import ProductListing
from pricetracker.models.source import Source


logger = structlog.get_logger(__name__)

RATIO_QUANTUM = Decimal("0.0001")


@dataclass
class PriceChange:
    """Price movement of one listing over the analysis window."""

    product_id: uuid.UUID
    product_name: str
    listing_id: uuid.UUID
    source_name: str
    url: str
    previous_price: Decimal
    current_price: Decimal
    price_change: Decimal
    change_percentage: Decimal


@dataclass
class TrendingProduct:
    product_id: uuid.UUID
    product_name: str
    category: Optional[str]
    observation_count: int
    lowest_price: Optional[Decimal]


@dataclass
class ListingPrice:
    listing_id: uuid.UUID
    source_name: str
    current_price: Optional[Decimal]
    in_stock: Optional[bool]
    url: str
    last_scraped_at: Optional[datetime]


@dataclass
class PriceComparison:
    product_id: uuid.UUID
    product_name: str
    listings: List[ListingPrice] = field(default_factory=list)


def change_percentage(previous: Decimal, current: Decimal) -> Decimal:
    """Percentage change from previous to current.

    The ratio is rounded half-up to 4 decimal places before scaling, so the
    result always has two meaningful decimals (300 -> 200 gives -33.33).
    """
    ratio = ((current - previous) / previous).quantize(RATIO_QUANTUM, rounding=ROUND_HALF_UP)
    return ratio * 100


class AnalyticsService:
    """Answers price trend questions without modifying anything."""

    def __init__(self, db: AsyncSession):
        """Initialize analytics service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="analytics_service")

    async def get_top_price_drops(self, days: int = 7, limit: int = 10) -> List[PriceChange]:
        """Listings whose price fell the most (by percentage) in the last `days` days."""
        changes = [c for c in await self._price_changes(days) if c.price_change < 0]
        changes.sort(key=lambda c: c.change_percentage)
        return changes[:limit]

    async def get_top_price_increases(self, days: int = 7, limit: int = 10) -> List[PriceChange]:
        """Listings whose price rose the most (by percentage) in the last `days` days."""
        changes = [c for c in await self._price_changes(days) if c.price_change > 0]
        changes.sort(key=lambda c: c.change_percentage, reverse=True)
        return changes[:limit]

    async def _price_changes(self, days: int) -> List[PriceChange]:
        """Compare each priced listing against its oldest observation in the window.

        Listings without an observation in the window, or whose oldest
        observed price is zero, are left out.
        """
        since = utcnow() - timedelta(days=days)

        result = await self.db.execute(
            select(ProductListing, Product.name, Source.name)
            .join(Product, Product.id == ProductListing.product_id)
            .join(Source, Source.id == ProductListing.source_id)
            .where(ProductListing.current_price.is_not(None))
        )

        changes: List[PriceChange] = []
        for listing, product_name, source_name in result.all():
            oldest_result = await self.db.execute(
                select(PriceHistory.price)
                .where(
                    PriceHistory.listing_id == listing.id,
                    PriceHistory.observed_at >= since,
                )
                .order_by(PriceHistory.observed_at.asc())
                .limit(1)
            )
            oldest = oldest_result.scalar_one_or_none()
            if oldest is None or oldest == 0:
                continue

            changes.append(
                PriceChange(
                    product_id=listing.product_id,
                    product_name=product_name,
                    listing_id=listing.id,
                    source_name=source_name,
                    url=listing.url,
                    previous_price=oldest,
                    current_price=listing.current_price,
                    price_change=listing.current_price - oldest,
                    change_percentage=change_percentage(oldest, listing.current_price),
                )
            )

        self.logger.debug("price_changes_computed", days=days, listings=len(changes))
        return changes

    async def get_trending(self, limit: int = 10) -> List[TrendingProduct]:
        """Products with the most price observations.

        Deleted products are excluded. Each entry carries the lowest current
        price across the product's listings, or None if none is priced.
        """
        observations = func.count(PriceHistory.id).label("observations")
        result = await self.db.execute(
            select(Product.id, Product.name, Product.category, observations)
            .join(PriceHistory, PriceHistory.product_id == Product.id)
            .where(Product.deleted_at.is_(None))
            .group_by(Product.id, Product.name, Product.category)
            .order_by(desc(observations))
            .limit(limit)
        )
        rows = result.all()
        if not rows:
            return []

        price_result = await self.db.execute(
            select(ProductListing.product_id, func.min(ProductListing.current_price))
            .where(ProductListing.product_id.in_([row.id for row in rows]))
            .group_by(ProductListing.product_id)
        )
        lowest_prices = dict(price_result.all())

        return [
            TrendingProduct(
                product_id=row.id,
                product_name=row.name,
                category=row.category,
                observation_count=row.observations,
                lowest_price=lowest_prices.get(row.id),
            )
            for row in rows
        ]

    async def compare_product(self, product_id: uuid.UUID) -> PriceComparison:
        """All listings of a product, cheapest first.

        Raises:
            NotFoundError: If the product does not exist or has no listings
        """
        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)

        result = await self.db.execute(
            select(ProductListing, Source.name)
            .join(Source, Source.id == ProductListing.source_id)
            .where(ProductListing.product_id == product_id)
            .order_by(ProductListing.current_price.asc().nullslast())
        )
        rows = result.all()
        if not rows:
            raise NotFoundError("ProductListing", product_id)

        return PriceComparison(
            product_id=product.id,
            product_name=product.name,
            listings=[
                ListingPrice(
                    listing_id=listing.id,
                    source_name=source_name,
                    current_price=listing.current_price,
                    in_stock=listing.in_stock,
                    url=listing.url,
                    last_scraped_at=listing.last_scraped_at,
                )
                for listing, source_name in rows
            ],
        )
