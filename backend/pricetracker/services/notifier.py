"""Alert notification channels."""

from abc import ABC, abstractmethod
from decimal import Decimal

import structlog

from pricetracker.models.price_alert import PriceAlert


logger = structlog.get_logger(__name__)


class AlertNotifier(ABC):
    """Delivers a triggered price alert to its subscriber."""

    @abstractmethod
    async def notify(self, alert: PriceAlert, current_price: Decimal) -> None:
        pass


class LogAlertNotifier(AlertNotifier):
    """Notifier that only writes a log event.

    Expects ``alert.product`` to be loaded.
    """

    async def notify(self, alert: PriceAlert, current_price: Decimal) -> None:
        logger.info(
            "price_alert_triggered",
            alert_id=str(alert.id),
            user_email=alert.user_email,
            product_id=str(alert.product_id),
            product_name=alert.product.name if alert.product else None,
            target_price=float(alert.target_price),
            current_price=float(current_price),
        )
