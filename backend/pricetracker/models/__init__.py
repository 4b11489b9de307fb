"""SQLAlchemy models for the price tracker.

All models are imported here so Base.metadata knows every table.
"""

from pricetracker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from pricetracker.models.enums import AlertStatus, JobStatus, ScraperType, SourceStatus
from pricetracker.models.source import Source
from pricetracker.models.product import Product
from pricetracker.models.product_listing import ProductListing
from pricetracker.models.price_history import PriceHistory
from pricetracker.models.price_alert import PriceAlert
from pricetracker.models.scraping_job import ScrapingJob

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "AlertStatus",
    "JobStatus",
    "ScraperType",
    "SourceStatus",
    "Source",
    "Product",
    "ProductListing",
    "PriceHistory",
    "PriceAlert",
    "ScrapingJob",
]
