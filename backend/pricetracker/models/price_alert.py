"""PriceAlert model for user price notifications."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pricetracker.models.base import Base, UUIDPrimaryKeyMixin, utcnow
from pricetracker.models.enums import AlertStatus

if TYPE_CHECKING:
    from pricetracker.models.product import Product


class PriceAlert(UUIDPrimaryKeyMixin, Base):
    """A user's watch on a product price.

    Moves ACTIVE -> TRIGGERED once, when a scrape observes a price at or below
    target_price. Triggered alerts are never reactivated.
    """

    __tablename__ = "price_alerts"

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    target_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Alert when price drops to or below this",
    )
    status: Mapped[AlertStatus] = mapped_column(
        Enum(AlertStatus, native_enum=False, length=20),
        nullable=False,
        default=AlertStatus.ACTIVE,
    )
    triggered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    product: Mapped["Product"] = relationship()

    def __repr__(self) -> str:
        return f"<PriceAlert(email={self.user_email}, product={self.product_id}, target={self.target_price})>"
