"""Tests for price alert evaluation, notification and CRUD."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from structlog.testing import capture_logs

from pricetracker.core.exceptions import NotFoundError
from pricetracker.models import AlertStatus, PriceAlert, Product
from pricetracker.services.alert_service import AlertService
from pricetracker.services.notifier import LogAlertNotifier


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.notify = AsyncMock()
    return mock


async def add_alert(db, product, target, email="ana@example.com", status=AlertStatus.ACTIVE) -> PriceAlert:
    alert = PriceAlert(
        product_id=product.id,
        user_email=email,
        target_price=Decimal(target),
        status=status,
    )
    db.add(alert)
    await db.commit()
    return alert


class TestCheckAlerts:
    """Tests for AlertService.check_alerts."""

    async def test_price_below_target_triggers(self, test_db, sample_product, notifier):
        alert = await add_alert(test_db, sample_product, "500.00")
        service = AlertService(test_db, notifier)

        triggered = await service.check_alerts(sample_product.id, Decimal("450.00"))

        assert [a.id for a in triggered] == [alert.id]
        assert alert.status == AlertStatus.TRIGGERED
        assert alert.triggered_at is not None
        notifier.notify.assert_awaited_once_with(alert, Decimal("450.00"))

    async def test_price_equal_to_target_triggers(self, test_db, sample_product, notifier):
        await add_alert(test_db, sample_product, "500.00")
        service = AlertService(test_db, notifier)

        triggered = await service.check_alerts(sample_product.id, Decimal("500.00"))

        assert len(triggered) == 1

    async def test_price_above_target_does_nothing(self, test_db, sample_product, notifier):
        alert = await add_alert(test_db, sample_product, "500.00")
        service = AlertService(test_db, notifier)

        triggered = await service.check_alerts(sample_product.id, Decimal("600.00"))

        assert triggered == []
        assert alert.status == AlertStatus.ACTIVE
        assert alert.triggered_at is None
        notifier.notify.assert_not_awaited()

    async def test_triggered_alerts_fire_once(self, test_db, sample_product, notifier):
        await add_alert(test_db, sample_product, "500.00")
        service = AlertService(test_db, notifier)

        await service.check_alerts(sample_product.id, Decimal("450.00"))
        await test_db.commit()
        second = await service.check_alerts(sample_product.id, Decimal("400.00"))

        assert second == []
        assert notifier.notify.await_count == 1

    async def test_only_alerts_for_the_product_are_checked(self, test_db, sample_product, notifier):
        other = Product(name="Razer DeathAdder V3")
        test_db.add(other)
        await test_db.commit()
        await add_alert(test_db, other, "500.00")
        service = AlertService(test_db, notifier)

        triggered = await service.check_alerts(sample_product.id, Decimal("10.00"))

        assert triggered == []

    async def test_mixed_targets(self, test_db, sample_product, notifier):
        low = await add_alert(test_db, sample_product, "300.00", email="low@example.com")
        high = await add_alert(test_db, sample_product, "500.00", email="high@example.com")
        service = AlertService(test_db, notifier)

        triggered = await service.check_alerts(sample_product.id, Decimal("450.00"))

        assert [a.id for a in triggered] == [high.id]
        assert low.status == AlertStatus.ACTIVE


class TestLogAlertNotifier:
    async def test_logs_trigger_event(self, test_db, sample_product):
        await add_alert(test_db, sample_product, "500.00")
        service = AlertService(test_db, LogAlertNotifier())

        with capture_logs() as logs:
            await service.check_alerts(sample_product.id, Decimal("450.00"))

        events = [log for log in logs if log["event"] == "price_alert_triggered"]
        assert len(events) == 1
        assert events[0]["user_email"] == "ana@example.com"
        assert events[0]["product_name"] == "Logitech MX Master 3S"
        assert events[0]["current_price"] == 450.0


class TestAlertCrud:
    """Tests for alert subscription management."""

    async def test_create_alert(self, test_db, sample_product):
        service = AlertService(test_db)

        alert = await service.create_alert(sample_product.id, "ana@example.com", Decimal("79.99"))

        assert alert.id is not None
        assert alert.status == AlertStatus.ACTIVE
        assert alert.target_price == Decimal("79.99")

    async def test_create_alert_for_missing_product(self, test_db):
        service = AlertService(test_db)

        with pytest.raises(NotFoundError):
            await service.create_alert(uuid4(), "ana@example.com", Decimal("79.99"))

    async def test_get_user_alerts_returns_active_only(self, test_db, sample_product):
        active = await add_alert(test_db, sample_product, "80.00")
        await add_alert(test_db, sample_product, "90.00", status=AlertStatus.TRIGGERED)
        await add_alert(test_db, sample_product, "70.00", email="other@example.com")
        service = AlertService(test_db)

        alerts = await service.get_user_alerts("ana@example.com")

        assert [a.id for a in alerts] == [active.id]

    async def test_delete_alert(self, test_db, sample_product):
        alert = await add_alert(test_db, sample_product, "80.00")
        service = AlertService(test_db)

        await service.delete_alert(alert.id)
        await test_db.commit()

        assert await test_db.get(PriceAlert, alert.id) is None

    async def test_delete_missing_alert(self, test_db):
        service = AlertService(test_db)

        with pytest.raises(NotFoundError):
            await service.delete_alert(uuid4())
