"""Async engine and session factories.

Every unit of work (a request, a scraped item, an alert check) opens its
own session from ``async_session_factory``.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from pricetracker.config import settings


def build_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine, pooling connections only for server databases."""
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_size", 20)
        kwargs.setdefault("max_overflow", 10)
        kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(url, echo=echo, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; services return them to the API layer
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
async_session_factory = build_session_factory(engine)
