"""
FastAPI application entry point for the Meeting Analytics API.

This module wires the service together: logging, the database pool lifecycle,
CORS for the dashboard frontend, and the API routers under /api.

Routes:
- /api/analytics/*   dashboard aggregations and LLM insights
- /api/clients/*     CSV upload and client management
- /api/processing/*  LLM categorization of unprocessed clients
- /health, /         liveness and API information
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import __version__
from backend.api import api_router
from backend.core.config import get_settings
from backend.core.database import close_db, ensure_schema, init_db
from backend.core.logging import configure_logging

settings = get_settings()

# Configure logging
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize database connection pool
        - Create the clients table if enabled (create_schema_on_startup)

    On shutdown:
        - Close database connection pool
    """
    # Startup
    logger.info("Meeting Analytics API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
        if settings.create_schema_on_startup:
            await ensure_schema()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        # Continue startup; endpoints report database errors as 500

    yield

    # Shutdown
    logger.info("Meeting Analytics API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Meeting Analytics API",
    version=__version__,
    description=(
        "Sales meeting analytics backend. Ingests client meeting records, "
        "categorizes transcriptions with an LLM and serves conversion "
        "analytics and narrative insights to the dashboard."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer checks.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    return {
        "name": "Meeting Analytics API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
