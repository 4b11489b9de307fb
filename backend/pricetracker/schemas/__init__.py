"""Pydantic schemas for the price tracker API.

All request/response models are defined here for easy import.
"""

from pricetracker.schemas.common import ApiResponse, ErrorDetail, ErrorResponse, PaginationMeta
from pricetracker.schemas.job import JobCreateRequest, JobResponse
from pricetracker.schemas.product import PriceHistoryPoint, ProductRequest, ProductResponse
from pricetracker.schemas.alert import AlertCreateRequest, AlertResponse
from pricetracker.schemas.analytics import (
    ListingPriceResponse,
    PriceChangeResponse,
    PriceComparisonResponse,
    TrendingProductResponse,
)
from pricetracker.schemas.health import HealthCheckResponse

__all__ = [
    # Common
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "PaginationMeta",
    # Job
    "JobCreateRequest",
    "JobResponse",
    # Product
    "PriceHistoryPoint",
    "ProductRequest",
    "ProductResponse",
    # Alert
    "AlertCreateRequest",
    "AlertResponse",
    # Analytics
    "ListingPriceResponse",
    "PriceChangeResponse",
    "PriceComparisonResponse",
    "TrendingProductResponse",
    # Health
    "HealthCheckResponse",
]
