"""Price alert service: subscriptions and trigger evaluation."""

import uuid
from decimal import Decimal
from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pricetracker.core.exceptions import NotFoundError
from pricetracker.models.base import utcnow
from pricetracker.models.enums import AlertStatus
from pricetracker.models.price_alert import PriceAlert
from pricetracker.models.product import Product
from pricetracker.services.notifier import AlertNotifier, LogAlertNotifier


logger = structlog.get_logger(__name__)


class AlertService:
    """Handles CRUD for price alerts and fires them when prices drop."""

    def __init__(self, db: AsyncSession, notifier: Optional[AlertNotifier] = None):
        self.db = db
        self.notifier = notifier or LogAlertNotifier()
        self.logger = logger.bind(service="alert_service")

    async def check_alerts(self, product_id: uuid.UUID, current_price: Decimal) -> List[PriceAlert]:
        """Trigger every active alert whose target the new price has reached.

        An alert fires when current_price <= target_price. Fired alerts move to
        TRIGGERED and are never evaluated again. Alerts above target are left
        untouched.

        Args:
            product_id: Product whose price was just observed
            current_price: Newly observed price

        Returns:
            Alerts triggered by this check
        """
        result = await self.db.execute(
            select(PriceAlert)
            .options(selectinload(PriceAlert.product))
            .where(
                PriceAlert.product_id == product_id,
                PriceAlert.status == AlertStatus.ACTIVE,
            )
        )
        alerts = list(result.scalars().all())

        triggered: List[PriceAlert] = []
        for alert in alerts:
            if current_price > alert.target_price:
                continue

            alert.status = AlertStatus.TRIGGERED
            alert.triggered_at = utcnow()
            await self.db.flush()

            await self.notifier.notify(alert, current_price)
            triggered.append(alert)

        if triggered:
            self.logger.info(
                "alerts_triggered",
                product_id=str(product_id),
                count=len(triggered),
                price=float(current_price),
            )
        return triggered

    async def create_alert(
        self,
        product_id: uuid.UUID,
        user_email: str,
        target_price: Decimal,
    ) -> PriceAlert:
        """Create a new ACTIVE alert for a product.

        Raises:
            NotFoundError: If the product does not exist or was deleted
        """
        product = await self.db.get(Product, product_id)
        if product is None or product.is_deleted:
            raise NotFoundError("Product", product_id)

        alert = PriceAlert(
            product_id=product_id,
            user_email=user_email,
            target_price=target_price,
            status=AlertStatus.ACTIVE,
        )
        alert.product = product
        self.db.add(alert)
        await self.db.flush()

        self.logger.info("alert_created", alert_id=str(alert.id), product_id=str(product_id))
        return alert

    async def get_user_alerts(self, user_email: str) -> List[PriceAlert]:
        """Get the active alerts of a subscriber, newest first."""
        result = await self.db.execute(
            select(PriceAlert)
            .options(selectinload(PriceAlert.product))
            .where(
                PriceAlert.user_email == user_email,
                PriceAlert.status == AlertStatus.ACTIVE,
            )
            .order_by(PriceAlert.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete_alert(self, alert_id: uuid.UUID) -> None:
        """Delete an alert.

        Raises:
            NotFoundError: If the alert does not exist
        """
        alert = await self.db.get(PriceAlert, alert_id)
        if alert is None:
            raise NotFoundError("PriceAlert", alert_id)

        await self.db.delete(alert)
        await self.db.flush()
        self.logger.info("alert_deleted", alert_id=str(alert_id))
