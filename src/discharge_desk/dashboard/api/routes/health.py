"""Health check endpoint for dashboard API."""

import logging
import time

from fastapi import APIRouter

from discharge_desk.dashboard.api.dependencies import StoreDep
from discharge_desk.dashboard.models.health import HealthResponse, StoreHealth
from discharge_desk.domain.ports import DocumentStorePort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

HEALTH_CHECK_PATH = "health/check"


def store_type_name(store: DocumentStorePort) -> str:
    return type(store).__name__.replace("DocumentStore", "").lower() or "unknown"


def check_store_health(store: DocumentStorePort) -> StoreHealth:
    """Check document store reachability with a single read."""
    store_type = store_type_name(store)
    start_time = time.time()
    result = store.get_document(HEALTH_CHECK_PATH)
    if result.is_success():
        response_time = (time.time() - start_time) * 1000
        return StoreHealth(status="connected", type=store_type, response_time_ms=round(response_time, 2))

    logger.warning(f"Store health check failed: {result.error}")
    return StoreHealth(status="disconnected", type=store_type, response_time_ms=None)


@router.get("/health", response_model=HealthResponse)
def health_check(store: StoreDep) -> HealthResponse:
    """Health check endpoint."""
    store_health = check_store_health(store)
    return HealthResponse(
        status="healthy" if store_health.status == "connected" else "unhealthy",
        store=store_health,
    )
