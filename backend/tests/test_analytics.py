"""Tests for price analytics."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from pricetracker.core.exceptions import NotFoundError
from pricetracker.models import PriceHistory, Product, ProductListing
from pricetracker.models.base import utcnow
from pricetracker.services.analytics_service import AnalyticsService, change_percentage


# ============================================================================
# HELPERS
# ============================================================================

async def add_listing(db, source, name, current, history, url=None):
    """Create a product with one listing and its price history.

    Args:
        history: (price, days_ago) pairs
    """
    product = Product(name=name)
    db.add(product)
    await db.flush()

    listing = ProductListing(
        product_id=product.id,
        source_id=source.id,
        url=url or f"https://www.amazon.es/dp/{name.replace(' ', '-')}",
        current_price=Decimal(current) if current is not None else None,
        in_stock=current is not None,
    )
    db.add(listing)
    await db.flush()

    now = utcnow()
    for price, days_ago in history:
        db.add(
            PriceHistory(
                listing_id=listing.id,
                product_id=product.id,
                price=Decimal(price),
                in_stock=True,
                observed_at=now - timedelta(days=days_ago),
            )
        )
    await db.commit()
    return product, listing


class TestChangePercentage:
    @pytest.mark.parametrize(
        "previous,current,expected",
        [
            ("300.00", "200.00", Decimal("-33.33")),
            ("200.00", "300.00", Decimal("50.00")),
            ("3.00", "2.00", Decimal("-33.33")),
            ("7.00", "8.00", Decimal("14.29")),
        ],
    )
    def test_ratio_rounded_half_up_to_four_places(self, previous, current, expected):
        assert change_percentage(Decimal(previous), Decimal(current)) == expected


class TestPriceMovements:
    """Tests for top price drops and increases."""

    async def test_price_drop_against_oldest_in_window(self, test_db, amazon_source):
        product, listing = await add_listing(
            test_db, amazon_source, "Monitor LG 27", "200.00",
            [("1000.00", 30), ("300.00", 5), ("250.00", 2)],
        )
        service = AnalyticsService(test_db)

        [drop] = await service.get_top_price_drops(days=7)

        assert drop.product_id == product.id
        assert drop.listing_id == listing.id
        assert drop.product_name == "Monitor LG 27"
        assert drop.source_name == "Amazon ES"
        assert drop.previous_price == Decimal("300.00")
        assert drop.current_price == Decimal("200.00")
        assert drop.price_change == Decimal("-100.00")
        assert drop.change_percentage == Decimal("-33.33")

    async def test_drops_sorted_and_limited(self, test_db, amazon_source):
        await add_listing(test_db, amazon_source, "Small drop", "90.00", [("100.00", 1)])
        await add_listing(test_db, amazon_source, "Big drop", "50.00", [("100.00", 1)])
        await add_listing(test_db, amazon_source, "Medium drop", "75.00", [("100.00", 1)])
        await add_listing(test_db, amazon_source, "Increase", "120.00", [("100.00", 1)])
        service = AnalyticsService(test_db)

        drops = await service.get_top_price_drops(days=7, limit=2)

        assert [d.product_name for d in drops] == ["Big drop", "Medium drop"]

    async def test_increases_sorted_descending(self, test_db, amazon_source):
        await add_listing(test_db, amazon_source, "Up 10", "110.00", [("100.00", 1)])
        await add_listing(test_db, amazon_source, "Up 50", "150.00", [("100.00", 1)])
        await add_listing(test_db, amazon_source, "Unchanged", "100.00", [("100.00", 1)])
        await add_listing(test_db, amazon_source, "Down", "80.00", [("100.00", 1)])
        service = AnalyticsService(test_db)

        increases = await service.get_top_price_increases(days=7)

        assert [i.product_name for i in increases] == ["Up 50", "Up 10"]
        assert increases[0].change_percentage == Decimal("50.00")

    async def test_listings_without_usable_history_are_excluded(self, test_db, amazon_source):
        await add_listing(test_db, amazon_source, "Zero oldest", "10.00", [("0.00", 1)])
        await add_listing(test_db, amazon_source, "Old history only", "10.00", [("100.00", 30)])
        await add_listing(test_db, amazon_source, "No history", "10.00", [])
        await add_listing(test_db, amazon_source, "No current price", None, [("100.00", 1)])
        service = AnalyticsService(test_db)

        assert await service.get_top_price_drops(days=7) == []
        assert await service.get_top_price_increases(days=7) == []


class TestTrending:
    """Tests for AnalyticsService.get_trending."""

    async def test_ordered_by_observation_count(self, test_db, amazon_source):
        await add_listing(test_db, amazon_source, "Two", "20.00", [("20.00", 1), ("21.00", 2)])
        await add_listing(test_db, amazon_source, "Three", "30.00", [("30.00", 1), ("31.00", 2), ("32.00", 3)])
        await add_listing(test_db, amazon_source, "One", "10.00", [("10.00", 1)])
        service = AnalyticsService(test_db)

        trending = await service.get_trending(limit=2)

        assert [(t.product_name, t.observation_count) for t in trending] == [("Three", 3), ("Two", 2)]
        assert trending[0].lowest_price == Decimal("30.00")

    async def test_lowest_price_across_listings(self, test_db, amazon_source, pccomponentes_source):
        product, _ = await add_listing(test_db, amazon_source, "Shared", "50.00", [("50.00", 1)])
        test_db.add(
            ProductListing(
                product_id=product.id,
                source_id=pccomponentes_source.id,
                url="https://www.pccomponentes.com/shared",
                current_price=Decimal("45.00"),
            )
        )
        await test_db.commit()
        service = AnalyticsService(test_db)

        [entry] = await service.get_trending()

        assert entry.lowest_price == Decimal("45.00")

    async def test_deleted_products_excluded(self, test_db, amazon_source):
        product, _ = await add_listing(test_db, amazon_source, "Gone", "10.00", [("10.00", 1)])
        product.deleted_at = utcnow()
        await test_db.commit()
        service = AnalyticsService(test_db)

        assert await service.get_trending() == []


class TestCompareProduct:
    """Tests for AnalyticsService.compare_product."""

    async def test_listings_ordered_by_price(self, test_db, amazon_source, pccomponentes_source):
        product, _ = await add_listing(test_db, amazon_source, "RTX 4070", "649.00", [])
        test_db.add(
            ProductListing(
                product_id=product.id,
                source_id=pccomponentes_source.id,
                url="https://www.pccomponentes.com/rtx-4070",
                current_price=Decimal("599.90"),
                in_stock=True,
            )
        )
        await test_db.commit()
        service = AnalyticsService(test_db)

        comparison = await service.compare_product(product.id)

        assert comparison.product_name == "RTX 4070"
        assert [(l.source_name, l.current_price) for l in comparison.listings] == [
            ("PCComponentes", Decimal("599.90")),
            ("Amazon ES", Decimal("649.00")),
        ]

    async def test_product_without_listings(self, test_db, sample_product):
        service = AnalyticsService(test_db)

        with pytest.raises(NotFoundError):
            await service.compare_product(sample_product.id)

    async def test_missing_product(self, test_db):
        service = AnalyticsService(test_db)

        with pytest.raises(NotFoundError):
            await service.compare_product(uuid4())
