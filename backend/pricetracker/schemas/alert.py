"""Price alert Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pricetracker.models.enums import AlertStatus


class AlertCreateRequest(BaseModel):
    """Request to create a price alert."""
    product_id: UUID
    user_email: EmailStr
    target_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class AlertResponse(BaseModel):
    """Price alert response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    user_email: str
    target_price: Decimal
    status: AlertStatus
    triggered_at: Optional[datetime] = None
    created_at: datetime
