"""Main FastAPI application for the discharge approval dashboard.

This module sets up the FastAPI application with all routes, middleware,
and configuration for the dashboard API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from discharge_desk import __version__
from discharge_desk.dashboard.api.middleware import setup_middleware
from discharge_desk.dashboard.api.routes import discharges, health
from discharge_desk.infrastructure.logging_config import setup_logging
from discharge_desk.infrastructure.settings import settings

setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"{settings.app_name} API starting up...")
    logger.info(f"Logging level: {settings.log_level}")
    yield
    logger.info(f"{settings.app_name} API shutting down...")


app = FastAPI(
    title="Discharge Desk API",
    description="Approve or reject pending patient discharges",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# CORS configuration
# In production, replace with specific origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)

setup_middleware(app)

app.include_router(health.router)
app.include_router(discharges.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Discharge Desk API",
        "version": __version__,
        "docs": "/api/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "discharge_desk.dashboard.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
