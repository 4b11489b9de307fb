"""Price alert API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from pricetracker.dependencies import get_db
from pricetracker.schemas.alert import AlertCreateRequest, AlertResponse
from pricetracker.schemas.common import ApiResponse
from pricetracker.services.alert_service import AlertService

router = APIRouter()


@router.get("", response_model=ApiResponse)
async def list_alerts(
    email: EmailStr = Query(..., description="Subscriber email"),
    db: AsyncSession = Depends(get_db),
):
    """Get all active price alerts for a subscriber."""
    service = AlertService(db)
    alerts = await service.get_user_alerts(email)

    return ApiResponse(
        status="success",
        data=[AlertResponse.model_validate(a).model_dump(mode="json") for a in alerts],
    )


@router.post("", response_model=ApiResponse, status_code=201)
async def create_alert(
    body: AlertCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Create a price alert for a product."""
    service = AlertService(db)
    alert = await service.create_alert(
        product_id=body.product_id,
        user_email=body.user_email,
        target_price=body.target_price,
    )

    return ApiResponse(
        status="success",
        data=AlertResponse.model_validate(alert).model_dump(mode="json"),
    )


@router.delete("/{alert_id}", response_model=ApiResponse)
async def delete_alert(
    alert_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete a price alert."""
    service = AlertService(db)
    await service.delete_alert(alert_id)

    return ApiResponse(status="success", data={"deleted": True})
