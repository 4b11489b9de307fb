"""Listing model: one product as sold on one source."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pricetracker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ProductListing(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Where and at what price a product is sold on a source.

    At most one listing exists per (product, source) pair.
    """

    __tablename__ = "product_listings"

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    external_id: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    url: Mapped[str] = mapped_column(String(2000), nullable=False, index=True)

    current_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(5), nullable=False, default="EUR")
    in_stock: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    last_scraped_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("product_id", "source_id", name="uq_listing_product_source"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProductListing(id={self.id}, product_id={self.product_id}, "
            f"source_id={self.source_id}, price={self.current_price})>"
        )
