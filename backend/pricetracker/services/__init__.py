"""Services module for business logic and data operations.

This module contains the service classes of the price tracker: the job
runner, product unification, price alerts, analytics and the product
catalogue.
"""

from pricetracker.services.alert_service import AlertService
from pricetracker.services.analytics_service import AnalyticsService
from pricetracker.services.job_service import ScrapingJobService
from pricetracker.services.notifier import AlertNotifier, LogAlertNotifier
from pricetracker.services.product_service import ProductService
from pricetracker.services.unification_service import ProductUnificationService

__all__ = [
    "AlertNotifier",
    "AlertService",
    "AnalyticsService",
    "LogAlertNotifier",
    "ProductService",
    "ProductUnificationService",
    "ScrapingJobService",
]
