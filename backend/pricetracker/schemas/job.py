"""Scraping job Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from pricetracker.models.enums import JobStatus


class JobCreateRequest(BaseModel):
    """Request to queue a scraping job."""

    source_id: UUID
    search_keyword: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=100)


class JobResponse(BaseModel):
    """Scraping job response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    source_id: UUID
    search_keyword: str
    category: Optional[str] = None
    status: JobStatus
    items_found: Optional[int] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
