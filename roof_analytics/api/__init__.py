"""
API package initialization.

This package contains FastAPI router modules for the roofing analytics backend:
- analytics: Dashboard, analytics lists, predictive insights, batch processing,
  predictions, aggregates and event tracking
"""

from fastapi import APIRouter

from roof_analytics.api.analytics import router as analytics_router

# Create main API router
api_router = APIRouter()

api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])

__all__ = [
    "api_router",
    "analytics_router",
]
