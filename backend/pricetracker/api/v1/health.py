"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from pricetracker.dependencies import get_db, get_scraper_registry
from pricetracker.schemas import HealthCheckResponse
from pricetracker.scrapers.registry import ScraperRegistry

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: ScraperRegistry = Depends(get_scraper_registry),
):
    """Return service health status.

    Checks connectivity to the database and lists the registered scrapers.
    """
    services = {}

    # Check database connectivity
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    services["database"] = db_status

    scrapers = [scraper.scraper_type.value for scraper in registry.list_all()]
    services["scrapers"] = "ok" if scrapers else "error: none registered"

    overall_status = "ok" if all(s == "ok" for s in services.values()) else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        scrapers=scrapers,
        services=services,
    )
