"""Pytest configuration and shared fixtures."""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from pricetracker.db.session import build_engine, build_session_factory
from pricetracker.models import Base, Product, ProductListing, ScraperType, Source, SourceStatus
from pricetracker.scrapers.utils.rate_limiter import SourceRateLimiter


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# DATABASE
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create an in-memory SQLite database for testing."""
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the in-memory database."""
    return build_session_factory(test_engine)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """A single session for tests of session-scoped services."""
    async with session_factory() as session:
        yield session


# ============================================================================
# SAMPLE DATA
# ============================================================================

async def _add(session_factory, obj):
    async with session_factory() as session:
        session.add(obj)
        await session.commit()
    return obj


@pytest_asyncio.fixture
async def amazon_source(session_factory) -> Source:
    """Amazon ES source."""
    return await _add(
        session_factory,
        Source(
            name="Amazon ES",
            base_url="https://www.amazon.es",
            scraper_type=ScraperType.AMAZON,
            status=SourceStatus.ACTIVE,
        ),
    )


@pytest_asyncio.fixture
async def pccomponentes_source(session_factory) -> Source:
    """PCComponentes source."""
    return await _add(
        session_factory,
        Source(
            name="PCComponentes",
            base_url="https://www.pccomponentes.com",
            scraper_type=ScraperType.PCCOMPONENTES,
            status=SourceStatus.ACTIVE,
        ),
    )


@pytest_asyncio.fixture
async def sample_product(session_factory) -> Product:
    """A product with no listings."""
    return await _add(
        session_factory,
        Product(
            name="Logitech MX Master 3S",
            category="peripherals",
            image_url="https://example.com/mx.jpg",
        ),
    )


@pytest_asyncio.fixture
async def sample_listing(session_factory, sample_product, amazon_source) -> ProductListing:
    """Amazon listing of the sample product priced at 99.99."""
    return await _add(
        session_factory,
        ProductListing(
            product_id=sample_product.id,
            source_id=amazon_source.id,
            url="https://www.amazon.es/dp/B0B11LJ69K",
            current_price=Decimal("99.99"),
            in_stock=True,
        ),
    )


@pytest.fixture
def fast_rate_limiter() -> SourceRateLimiter:
    """Rate limiter that never makes tests wait noticeably."""
    return SourceRateLimiter(default_rate=1000.0)
