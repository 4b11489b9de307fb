"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from pricetracker.api.v1 import alerts, analytics, health, jobs, products

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_v1_router.include_router(products.router, prefix="/products", tags=["products"])
api_v1_router.include_router(alerts.router, prefix="/alerts", tags=["alerts"])
api_v1_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
