"""Health check endpoint: application metadata plus the state of the bookings file."""

import logging

from fastapi import APIRouter, Depends

from app.config import get_settings
from app.domain.exceptions import StoreError
from app.infrastructure.dependencies import get_booking_store
from app.infrastructure.storage.json_list_store import STORE_VERSION, JsonListStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(store: JsonListStore = Depends(get_booking_store)) -> dict:
    """Returns the application health status.

    A bookings file that cannot be read turns the status into ``degraded``
    instead of failing the check.
    """
    settings = get_settings()
    booking_store = {
        "path": str(store.path),
        "present": store.path.exists(),
        "format_version": STORE_VERSION,
    }
    try:
        booking_store["records"] = await store.count()
        health = "healthy"
    except StoreError as e:
        logger.warning("Health check could not read %s: %s", store.path, e)
        booking_store["error"] = str(e)
        health = "degraded"

    return {
        "status": health,
        "version": settings.app_version,
        "environment": settings.app_env,
        "booking_store": booking_store,
    }
