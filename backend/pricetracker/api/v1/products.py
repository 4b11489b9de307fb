"""Products API endpoints."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pricetracker.dependencies import get_db
from pricetracker.schemas import ApiResponse, PaginationMeta, PriceHistoryPoint, ProductRequest, ProductResponse
from pricetracker.services.product_service import ProductService

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    keyword: Optional[str] = Query(None, description="Case-insensitive name search"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Lowest listing price"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Highest listing price"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db),
):
    """List live products, optionally filtered by category, name and price."""
    service = ProductService(db)
    products = await service.list_products(
        category=category,
        keyword=keyword,
        min_price=min_price,
        max_price=max_price,
        skip=skip,
        limit=limit,
    )

    return ApiResponse(
        status="success",
        data=[ProductResponse.model_validate(p) for p in products],
        meta=PaginationMeta(skip=skip, limit=limit, count=len(products)),
    )


@router.post("", response_model=ApiResponse, status_code=201)
async def create_product(body: ProductRequest, db: AsyncSession = Depends(get_db)):
    """Create a product manually."""
    service = ProductService(db)
    product = await service.create_product(body.name, body.category, body.image_url)
    return ApiResponse(status="success", data=ProductResponse.model_validate(product))


@router.get("/{product_id}", response_model=ApiResponse)
async def get_product(product_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get product details by ID."""
    service = ProductService(db)
    product = await service.get_product(product_id)
    return ApiResponse(status="success", data=ProductResponse.model_validate(product))


@router.put("/{product_id}", response_model=ApiResponse)
async def update_product(product_id: UUID, body: ProductRequest, db: AsyncSession = Depends(get_db)):
    """Replace a product's name, category and image."""
    service = ProductService(db)
    product = await service.update_product(product_id, body.name, body.category, body.image_url)
    return ApiResponse(status="success", data=ProductResponse.model_validate(product))


@router.delete("/{product_id}", response_model=ApiResponse)
async def delete_product(product_id: UUID, db: AsyncSession = Depends(get_db)):
    """Soft-delete a product. Its listings and history are kept."""
    service = ProductService(db)
    await service.delete_product(product_id)
    return ApiResponse(status="success", data={"deleted": True})


@router.get("/{product_id}/price-history", response_model=ApiResponse)
async def get_price_history(
    product_id: UUID,
    days: int = Query(30, ge=1, le=365, description="Days of history to return"),
    db: AsyncSession = Depends(get_db),
):
    """Get price observations for a product, oldest first."""
    service = ProductService(db)
    history = await service.get_price_history(product_id, days=days)
    return ApiResponse(
        status="success",
        data=[PriceHistoryPoint.model_validate(h) for h in history],
    )
