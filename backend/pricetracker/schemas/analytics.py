"""Analytics response schemas.

Built from the analytics service dataclasses via from_attributes.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PriceChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    product_name: str
    listing_id: UUID
    source_name: str
    url: str
    previous_price: Decimal
    current_price: Decimal
    price_change: Decimal
    change_percentage: float


class TrendingProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    product_name: str
    category: Optional[str] = None
    observation_count: int
    lowest_price: Optional[Decimal] = None


class ListingPriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    listing_id: UUID
    source_name: str
    current_price: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    url: str
    last_scraped_at: Optional[datetime] = None


class PriceComparisonResponse(BaseModel):
    """All listings of one product, cheapest first."""

    model_config = ConfigDict(from_attributes=True)

    product_id: UUID
    product_name: str
    listings: List[ListingPriceResponse]
