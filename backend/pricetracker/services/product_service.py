"""Product service for managing the product catalogue.

Handles product CRUD with soft deletion and price-based search, and
reads price history for a product.
"""

from datetime import timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pricetracker.core.exceptions import NotFoundError
from pricetracker.models.base import utcnow
from pricetracker.models.price_history import PriceHistory
from pricetracker.models.product import Product
from pricetracker.models.product_listing import ProductListing

logger = structlog.get_logger(__name__)


class ProductService:
    """Service for managing products.

    Deleted products keep their rows (deleted_at is set) so listings and
    price history stay intact, but they are hidden from every lookup here.
    """

    def __init__(self, db: AsyncSession):
        """Initialize product service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="product_service")

    async def create_product(
        self,
        name: str,
        category: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Product:
        """Create a product."""
        product = Product(name=name, category=category, image_url=image_url)
        self.db.add(product)
        await self.db.flush()

        self.logger.info("product_created", product_id=str(product.id), name=name[:50])
        return product

    async def list_products(
        self,
        category: Optional[str] = None,
        keyword: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Product]:
        """List live products with filters.

        Args:
            category: Exact category match
            keyword: Case-insensitive substring of the name
            min_price: Some listing's current price is at least this
            max_price: Some listing's current price is at most this
            skip: Offset for pagination
            limit: Results per page

        Returns:
            Products ordered by name
        """
        query = select(Product).where(Product.deleted_at.is_(None))

        if category:
            query = query.where(Product.category == category)

        if keyword and keyword.strip():
            query = query.where(Product.name.ilike(f"%{keyword.strip()}%"))

        if min_price is not None or max_price is not None:
            priced = select(ProductListing.product_id).where(ProductListing.current_price.is_not(None))
            if min_price is not None:
                priced = priced.where(ProductListing.current_price >= min_price)
            if max_price is not None:
                priced = priced.where(ProductListing.current_price <= max_price)
            query = query.where(Product.id.in_(priced))

        query = query.order_by(Product.name).offset(skip).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_product(self, product_id: UUID) -> Product:
        """Get a live product by ID.

        Raises:
            NotFoundError: If the product does not exist or was deleted
        """
        product = await self.db.get(Product, product_id)
        if product is None or product.is_deleted:
            raise NotFoundError("Product", product_id)
        return product

    async def update_product(
        self,
        product_id: UUID,
        name: str,
        category: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Product:
        """Replace a product's editable fields.

        Raises:
            NotFoundError: If the product does not exist or was deleted
        """
        product = await self.get_product(product_id)
        product.name = name
        product.category = category
        product.image_url = image_url
        await self.db.flush()

        self.logger.info("product_updated", product_id=str(product_id))
        return product

    async def delete_product(self, product_id: UUID) -> None:
        """Soft-delete a product.

        Raises:
            NotFoundError: If the product does not exist or was already deleted
        """
        product = await self.get_product(product_id)
        product.deleted_at = utcnow()
        await self.db.flush()

        self.logger.info("product_deleted", product_id=str(product_id))

    async def get_price_history(self, product_id: UUID, days: int = 30) -> List[PriceHistory]:
        """Get price observations for a product within a time window.

        Args:
            product_id: Product UUID
            days: Number of days to look back (default: 30)

        Returns:
            List of PriceHistory records, ordered chronologically

        Raises:
            NotFoundError: If the product does not exist or was deleted
        """
        await self.get_product(product_id)
        cutoff = utcnow() - timedelta(days=days)

        result = await self.db.execute(
            select(PriceHistory)
            .where(
                PriceHistory.product_id == product_id,
                PriceHistory.observed_at >= cutoff,
            )
            .order_by(PriceHistory.observed_at.asc())
        )
        return list(result.scalars().all())
