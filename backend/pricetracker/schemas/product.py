"""Product Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PriceHistoryPoint(BaseModel):
    """Single price history data point."""

    model_config = ConfigDict(from_attributes=True)

    listing_id: UUID
    price: Decimal
    in_stock: Optional[bool] = None
    observed_at: datetime


class ProductRequest(BaseModel):
    """Create or replace a product."""

    name: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=1000)


class ProductResponse(BaseModel):
    """Product response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
