"""
Backend API package initialization.

This package contains FastAPI router modules for the Meeting Analytics backend:
- analytics: overview, dimension breakdowns, pain points, industries, insights
- clients: CSV upload, client CRUD and filter metadata
- processing: LLM categorization of unprocessed clients
"""

from fastapi import APIRouter

# Import router modules
from backend.api.analytics import router as analytics_router
from backend.api.clients import router as clients_router
from backend.api.processing import router as processing_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(clients_router, prefix="/clients", tags=["clients"])
api_router.include_router(processing_router, prefix="/processing", tags=["processing"])

# Export all routers for selective imports
__all__ = [
    "api_router",
    "analytics_router",
    "clients_router",
    "processing_router",
]
