"""Health check models for dashboard API."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from discharge_desk import __version__


class StoreHealth(BaseModel):
    """Document store health status model.

    Attributes:
        status: Connection status
        type: Store type (memory or duckdb)
        response_time_ms: Store response time in milliseconds (optional)
    """
    status: Literal["connected", "disconnected"]
    type: str
    response_time_ms: float | None = Field(None, description="Store response time in milliseconds")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: Literal["healthy", "unhealthy"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Current UTC timestamp")
    version: str = Field(default=__version__, description="Application version")
    store: StoreHealth
