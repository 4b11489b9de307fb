"""Price Tracker Backend -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pricetracker.api.v1.router import api_v1_router
from pricetracker.config import settings
from pricetracker.core.exceptions import InvalidJobStateError, NotFoundError
from pricetracker.db.seed import seed_sources
from pricetracker.db.session import async_session_factory, engine
from pricetracker.models import Base
from pricetracker.schemas import ErrorDetail, ErrorResponse
from pricetracker.scrapers.registry import build_scraper_registry
from pricetracker.scrapers.scheduler import ScrapingScheduler
from pricetracker.services.job_service import ScrapingJobService
from pricetracker.services.unification_service import ProductUnificationService

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("Starting Price Tracker API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # Auto-create tables and default sources on startup
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables verified/created")

        created = await seed_sources(async_session_factory)
        if created:
            logger.info(f"Seeded {created} sources")
    except Exception as e:
        logger.error(f"Database init failed: {e}", exc_info=True)

    # Build the scraper registry once; it is read-only afterwards
    registry = build_scraper_registry()
    app.state.scraper_registry = registry
    logger.info(f"Registered scrapers: {[s.site_name for s in registry.list_all()]}")

    # Start scraping scheduler (only in non-test environments)
    scheduler = None
    if settings.ENVIRONMENT != "test" and settings.SCHEDULER_ENABLED:
        job_service = ScrapingJobService(
            session_factory=async_session_factory,
            registry=registry,
            unification=ProductUnificationService(async_session_factory),
        )
        scheduler = ScrapingScheduler(job_service, cron=settings.SCRAPING_CRON)
        scheduler.start()
    else:
        logger.info("Scheduler disabled")

    yield

    # Shutdown
    logger.info("Shutting down Price Tracker API server...")
    if scheduler:
        scheduler.stop()
    await engine.dispose()


app = FastAPI(
    title="Price Tracker API",
    description="Multi-retailer price tracking: scraping jobs, unified products, alerts and analytics",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(404, "not_found", exc.message)


@app.exception_handler(InvalidJobStateError)
async def invalid_job_state_handler(request: Request, exc: InvalidJobStateError):
    return _error_response(409, "invalid_job_state", exc.message)


# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Price Tracker API",
        "version": "0.1.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
    }
