"""Product unification: merges scraped items into the canonical catalogue.

Every scraped observation ends up as
- one canonical Product (matched by name across sites),
- one ProductListing per (product, source), carrying the latest price,
- one appended PriceHistory row.
"""

from decimal import Decimal
from typing import Dict, List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricetracker.models.base import utcnow
from pricetracker.models.price_history import PriceHistory
from pricetracker.models.product import Product
from pricetracker.models.product_listing import ProductListing
from pricetracker.models.source import Source
from pricetracker.scrapers.base import ScrapedItem
from pricetracker.services.alert_service import AlertService
from pricetracker.services.notifier import AlertNotifier, LogAlertNotifier


logger = structlog.get_logger(__name__)


class ProductUnificationService:
    """Persists scraper output, one unit of work per item.

    A failing item (constraint violation, lost race with a concurrent run)
    is logged and counted; it never rolls back items saved before it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Optional[AlertNotifier] = None,
    ):
        """Initialize unification service.

        Args:
            session_factory: Factory for per-item sessions
            notifier: Channel used when a new price triggers an alert
        """
        self.session_factory = session_factory
        self.notifier = notifier or LogAlertNotifier()
        self.logger = logger.bind(service="unification_service")

    async def save_results(self, items: List[ScrapedItem], source: Source) -> Dict[str, int]:
        """Unify scraped items into products, listings and price history.

        Items without a URL or price are skipped without touching the
        database. After each item commits, price alerts for its product
        are checked in a separate transaction.

        Args:
            items: Scraper output
            source: Source the items were scraped from

        Returns:
            Statistics dict: items_received, items_saved, items_skipped, errors
        """
        stats = {
            "items_received": len(items),
            "items_saved": 0,
            "items_skipped": 0,
            "errors": 0,
        }

        for item in items:
            if not item.url or item.price is None:
                stats["items_skipped"] += 1
                self.logger.debug("item_skipped_incomplete", name=item.name[:50], url=item.url)
                continue

            try:
                async with self.session_factory() as db:
                    async with db.begin():
                        listing = await self._unify_item(db, item, source.id)
                        product_id = listing.product_id
                stats["items_saved"] += 1
            except Exception as e:
                stats["errors"] += 1
                self.logger.error(
                    "item_unification_failed",
                    source=source.name,
                    name=item.name[:50],
                    url=item.url,
                    error=str(e),
                )
                continue

            await self._check_alerts(product_id, item.price)

        self.logger.info("unification_complete", source=source.name, **stats)
        return stats

    async def _unify_item(self, db: AsyncSession, item: ScrapedItem, source_id) -> ProductListing:
        """Resolve the listing for an item, update it and record history."""
        now = utcnow()

        # 1. Same URL seen before: reuse its listing
        listing = await self._find_listing_by_url(db, item.url)

        if listing is None:
            # 2. Match the canonical product by name, or create it
            product = await self._find_or_create_product(db, item)

            # 3. One listing per (product, source)
            result = await db.execute(
                select(ProductListing).where(
                    ProductListing.product_id == product.id,
                    ProductListing.source_id == source_id,
                )
            )
            listing = result.scalar_one_or_none()

            if listing is None:
                listing = ProductListing(
                    product_id=product.id,
                    source_id=source_id,
                    url=item.url,
                )
                db.add(listing)
                self.logger.debug("listing_created", product_id=str(product.id), url=item.url)
            else:
                listing.url = item.url

        listing.current_price = item.price
        listing.in_stock = item.in_stock
        listing.last_scraped_at = now
        await db.flush()

        db.add(
            PriceHistory(
                listing_id=listing.id,
                product_id=listing.product_id,
                price=item.price,
                in_stock=item.in_stock,
                observed_at=now,
            )
        )
        return listing

    @staticmethod
    async def _find_listing_by_url(db: AsyncSession, url: str) -> Optional[ProductListing]:
        result = await db.execute(select(ProductListing).where(ProductListing.url == url).limit(1))
        return result.scalar_one_or_none()

    async def _find_or_create_product(self, db: AsyncSession, item: ScrapedItem) -> Product:
        """Find a live product by case-insensitive exact name, creating one if absent."""
        result = await db.execute(
            select(Product)
            .where(
                func.lower(Product.name) == func.lower(item.name),
                Product.deleted_at.is_(None),
            )
            .order_by(Product.created_at)
            .limit(1)
        )
        product = result.scalar_one_or_none()
        if product is not None:
            return product

        product = Product(name=item.name, image_url=item.image_url)
        db.add(product)
        await db.flush()
        self.logger.info("product_created", product_id=str(product.id), name=item.name[:50])
        return product

    async def _check_alerts(self, product_id, price: Decimal) -> None:
        try:
            async with self.session_factory() as db:
                async with db.begin():
                    await AlertService(db, self.notifier).check_alerts(product_id, price)
        except Exception as e:
            # Alerts stay ACTIVE and are evaluated again on the next observation
            self.logger.error("alert_check_failed", product_id=str(product_id), error=str(e))
