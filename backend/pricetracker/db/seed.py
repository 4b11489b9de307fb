"""Database seeding for development.

Populates the database with the retail sources the bundled scrapers know.
Run with: python -m pricetracker.db.seed
"""

import asyncio

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricetracker.models import ScraperType, Source, SourceStatus

logger = structlog.get_logger(__name__)


SOURCES_DATA = [
    {
        "name": "Amazon ES",
        "base_url": "https://www.amazon.es",
        "scraper_type": ScraperType.AMAZON,
    },
    {
        "name": "MediaMarkt ES",
        "base_url": "https://www.mediamarkt.es",
        "scraper_type": ScraperType.MEDIAMARKT,
    },
    {
        "name": "PCComponentes",
        "base_url": "https://www.pccomponentes.com",
        "scraper_type": ScraperType.PCCOMPONENTES,
    },
]


async def seed_sources(session_factory: async_sessionmaker[AsyncSession]) -> int:
    """Insert the default sources unless some already exist.

    Returns:
        Number of sources created
    """
    async with session_factory() as session:
        result = await session.execute(select(Source.id).limit(1))
        if result.scalar_one_or_none():
            logger.info("sources_already_seeded")
            return 0

        for data in SOURCES_DATA:
            session.add(Source(status=SourceStatus.ACTIVE, **data))
        await session.commit()

    logger.info("sources_seeded", count=len(SOURCES_DATA))
    return len(SOURCES_DATA)


async def main():
    """Run all seeding functions."""
    from pricetracker.db.session import async_session_factory, engine
    from pricetracker.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_sources(async_session_factory)


if __name__ == "__main__":
    asyncio.run(main())
