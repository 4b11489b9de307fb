"""Tests for product unification of scraped items."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from pricetracker.models import AlertStatus, PriceAlert, PriceHistory, Product, ProductListing
from pricetracker.models.base import utcnow
from pricetracker.scrapers.base import ScrapedItem
from pricetracker.services.unification_service import ProductUnificationService


def item(name, price="99.99", url="https://www.amazon.es/dp/B0B11LJ69K", **kwargs):
    return ScrapedItem(
        name=name,
        price=Decimal(price) if price is not None else None,
        url=url,
        **kwargs,
    )


async def count(session_factory, model) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


async def all_rows(session_factory, model):
    async with session_factory() as session:
        return list((await session.execute(select(model))).scalars().all())


class TestSaveResults:
    """Tests for ProductUnificationService.save_results."""

    async def test_new_item_creates_product_listing_and_history(self, session_factory, amazon_source):
        service = ProductUnificationService(session_factory)

        stats = await service.save_results(
            [item("Logitech MX Master 3S", image_url="https://example.com/mx.jpg")],
            amazon_source,
        )

        assert stats == {"items_received": 1, "items_saved": 1, "items_skipped": 0, "errors": 0}

        [product] = await all_rows(session_factory, Product)
        [listing] = await all_rows(session_factory, ProductListing)
        [history] = await all_rows(session_factory, PriceHistory)

        assert product.name == "Logitech MX Master 3S"
        assert product.image_url == "https://example.com/mx.jpg"
        assert listing.product_id == product.id
        assert listing.source_id == amazon_source.id
        assert listing.current_price == Decimal("99.99")
        assert listing.in_stock is True
        assert listing.last_scraped_at is not None
        assert history.listing_id == listing.id
        assert history.product_id == product.id
        assert history.price == Decimal("99.99")

    async def test_same_url_reuses_listing_and_appends_history(self, session_factory, amazon_source):
        service = ProductUnificationService(session_factory)

        await service.save_results([item("Logitech MX Master 3S", price="99.99")], amazon_source)
        await service.save_results([item("MX Master 3S (Grafito)", price="89.99")], amazon_source)

        assert await count(session_factory, Product) == 1
        [listing] = await all_rows(session_factory, ProductListing)
        assert listing.current_price == Decimal("89.99")

        prices = sorted(h.price for h in await all_rows(session_factory, PriceHistory))
        assert prices == [Decimal("89.99"), Decimal("99.99")]

    async def test_name_match_is_case_insensitive_across_sources(
        self, session_factory, amazon_source, pccomponentes_source
    ):
        service = ProductUnificationService(session_factory)

        await service.save_results([item("Logitech MX Master 3S")], amazon_source)
        await service.save_results(
            [item("LOGITECH mx master 3s", price="94.90", url="https://www.pccomponentes.com/logitech-mx-master-3s")],
            pccomponentes_source,
        )

        [product] = await all_rows(session_factory, Product)
        listings = await all_rows(session_factory, ProductListing)
        assert len(listings) == 2
        assert {l.source_id for l in listings} == {amazon_source.id, pccomponentes_source.id}
        assert all(l.product_id == product.id for l in listings)

    async def test_new_url_for_same_product_and_source_overwrites_url(self, session_factory, amazon_source):
        service = ProductUnificationService(session_factory)

        await service.save_results([item("Logitech MX Master 3S", url="https://www.amazon.es/dp/OLD")], amazon_source)
        await service.save_results([item("Logitech MX Master 3S", url="https://www.amazon.es/dp/NEW")], amazon_source)

        [listing] = await all_rows(session_factory, ProductListing)
        assert listing.url == "https://www.amazon.es/dp/NEW"
        assert await count(session_factory, PriceHistory) == 2

    async def test_deleted_products_are_not_matched(self, session_factory, amazon_source, pccomponentes_source):
        service = ProductUnificationService(session_factory)
        await service.save_results([item("Logitech MX Master 3S")], amazon_source)

        async with session_factory() as session:
            product = (await session.execute(select(Product))).scalar_one()
            product.deleted_at = utcnow()
            await session.commit()

        await service.save_results(
            [item("Logitech MX Master 3S", url="https://www.pccomponentes.com/mx")],
            pccomponentes_source,
        )

        assert await count(session_factory, Product) == 2

    async def test_incomplete_items_skip_persistence(self, amazon_source):
        session_factory = MagicMock()
        service = ProductUnificationService(session_factory)

        stats = await service.save_results(
            [item("Sin URL", url=None), item("Sin precio", price=None)],
            amazon_source,
        )

        assert stats == {"items_received": 2, "items_saved": 0, "items_skipped": 2, "errors": 0}
        session_factory.assert_not_called()

    async def test_failing_item_does_not_affect_others(self, session_factory, amazon_source):
        service = ProductUnificationService(session_factory)
        original = service._unify_item

        async def flaky(db, scraped, source_id):
            if scraped.name == "Broken":
                raise IntegrityError("INSERT INTO product_listings", {}, Exception("duplicate key"))
            return await original(db, scraped, source_id)

        service._unify_item = flaky

        stats = await service.save_results(
            [
                item("Logitech MX Master 3S", url="https://www.amazon.es/dp/A"),
                item("Broken", url="https://www.amazon.es/dp/B"),
                item("Razer DeathAdder V3", url="https://www.amazon.es/dp/C"),
            ],
            amazon_source,
        )

        assert stats["items_saved"] == 2
        assert stats["errors"] == 1
        names = {p.name for p in await all_rows(session_factory, Product)}
        assert names == {"Logitech MX Master 3S", "Razer DeathAdder V3"}


class TestAlertCheckAfterSave:
    """Alerts are evaluated against each saved price."""

    async def test_price_at_or_below_target_triggers_alert(self, session_factory, amazon_source, sample_product):
        async with session_factory() as session:
            session.add(PriceAlert(product_id=sample_product.id, user_email="ana@example.com", target_price=Decimal("500.00")))
            await session.commit()

        notifier = MagicMock()
        notifier.notify = AsyncMock()
        service = ProductUnificationService(session_factory, notifier=notifier)

        await service.save_results([item(sample_product.name, price="450.00")], amazon_source)

        notifier.notify.assert_awaited_once()
        alert, price = notifier.notify.await_args.args
        assert price == Decimal("450.00")
        assert alert.user_email == "ana@example.com"

        [stored] = await all_rows(session_factory, PriceAlert)
        assert stored.status == AlertStatus.TRIGGERED
        assert stored.triggered_at is not None

    async def test_alert_failure_keeps_saved_item(self, session_factory, amazon_source, sample_product):
        async with session_factory() as session:
            session.add(PriceAlert(product_id=sample_product.id, user_email="ana@example.com", target_price=Decimal("500.00")))
            await session.commit()

        notifier = MagicMock()
        notifier.notify = AsyncMock(side_effect=RuntimeError("smtp down"))
        service = ProductUnificationService(session_factory, notifier=notifier)

        stats = await service.save_results([item(sample_product.name, price="450.00")], amazon_source)

        assert stats["items_saved"] == 1
        assert await count(session_factory, PriceHistory) == 1
        [stored] = await all_rows(session_factory, PriceAlert)
        assert stored.status == AlertStatus.ACTIVE
