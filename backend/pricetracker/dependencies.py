"""FastAPI dependency injection providers."""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pricetracker.db.session import async_session_factory
from pricetracker.scrapers.registry import ScraperRegistry, build_scraper_registry
from pricetracker.services.job_service import ScrapingJobService
from pricetracker.services.unification_service import ProductUnificationService


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory used for per-request and per-item sessions.

    Tests override this to point the whole app at an in-memory database.
    """
    return async_session_factory


async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.

    Usage:
        @router.get("/products")
        async def list_products(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Product))
            return result.scalars().all()
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_scraper_registry(request: Request) -> ScraperRegistry:
    """Return the registry built at startup, building it on first use otherwise."""
    registry = getattr(request.app.state, "scraper_registry", None)
    if registry is None:
        registry = build_scraper_registry()
        request.app.state.scraper_registry = registry
    return registry


def get_job_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    registry: ScraperRegistry = Depends(get_scraper_registry),
) -> ScrapingJobService:
    """Build a job service wired to the shared registry."""
    return ScrapingJobService(
        session_factory=session_factory,
        registry=registry,
        unification=ProductUnificationService(session_factory),
    )
