"""Price history tracking for listings."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from pricetracker.models.base import Base, UUIDPrimaryKeyMixin


class PriceHistory(UUIDPrimaryKeyMixin, Base):
    """Append-only price observation for a listing.

    product_id is denormalised from the listing so trending and per-product
    queries don't need a join. Rows are never updated or deleted.
    """

    __tablename__ = "price_history"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("product_listings.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    in_stock: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When this price was scraped",
    )

    __table_args__ = (
        Index("idx_price_history_listing_observed", "listing_id", "observed_at"),
    )

    def __repr__(self) -> str:
        return f"<PriceHistory(listing_id={self.listing_id}, price={self.price}, observed_at={self.observed_at})>"
