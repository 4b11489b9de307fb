"""Price analytics API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pricetracker.dependencies import get_db
from pricetracker.schemas import (
    ApiResponse,
    PriceChangeResponse,
    PriceComparisonResponse,
    TrendingProductResponse,
)
from pricetracker.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/price-drops", response_model=ApiResponse)
async def get_price_drops(
    days: int = Query(7, ge=1, le=365, description="Look-back window in days"),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Biggest percentage price drops in the window."""
    drops = await AnalyticsService(db).get_top_price_drops(days=days, limit=limit)
    return ApiResponse(status="success", data=[PriceChangeResponse.model_validate(d) for d in drops])


@router.get("/price-increases", response_model=ApiResponse)
async def get_price_increases(
    days: int = Query(7, ge=1, le=365, description="Look-back window in days"),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Biggest percentage price increases in the window."""
    increases = await AnalyticsService(db).get_top_price_increases(days=days, limit=limit)
    return ApiResponse(status="success", data=[PriceChangeResponse.model_validate(i) for i in increases])


@router.get("/trending", response_model=ApiResponse)
async def get_trending(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Products with the most price observations."""
    trending = await AnalyticsService(db).get_trending(limit=limit)
    return ApiResponse(status="success", data=[TrendingProductResponse.model_validate(t) for t in trending])


@router.get("/compare", response_model=ApiResponse)
async def compare_product(
    product_id: UUID = Query(..., description="Product to compare across sources"),
    db: AsyncSession = Depends(get_db),
):
    """Current prices of a product on every source, cheapest first."""
    comparison = await AnalyticsService(db).compare_product(product_id)
    return ApiResponse(status="success", data=PriceComparisonResponse.model_validate(comparison))
