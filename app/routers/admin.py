# app/routers/admin.py
"""Admin analytics endpoints, gated by require_admin."""

from fastapi import APIRouter, Depends

from app.config import Settings
from app.dependencies import get_settings, require_admin
from app.exceptions import InternalError, NotFoundError
from app.services.analytics_service import build_dashboard, hourly_analytics
from app.store import ParkingStore, get_store
from app.utils.logger import get_logger
from app.utils.time_utils import iso

router = APIRouter()
logger = get_logger(__name__)

MAX_ANALYTICS_DAYS = 30


@router.get("/admin/dashboard", summary="Full analytics bundle")
def get_dashboard(
    claims=Depends(require_admin),
    store: ParkingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    view = store.snapshot()
    try:
        data = build_dashboard(view.devices, view.events, view.taken_at, settings)
    except Exception as e:
        logger.error(f"Error building dashboard data: {e}", exc_info=True)
        raise InternalError("Failed to fetch dashboard data") from e
    return {"success": True, "data": data, "timestamp": iso(view.taken_at)}


@router.get("/admin/hourly-analytics", summary="Per-hour breakdown over N days")
def get_hourly_analytics(
    days: int = 1,
    claims=Depends(require_admin),
    store: ParkingStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if not settings.EXTENDED_ANALYTICS:
        raise NotFoundError("Hourly analytics disabled")
    days = min(max(days, 1), MAX_ANALYTICS_DAYS)

    view = store.snapshot()
    try:
        data = hourly_analytics(view.events, view.taken_at, settings.LOCAL_UTC_OFFSET_HOURS, days)
    except Exception as e:
        logger.error(f"Error building hourly analytics: {e}", exc_info=True)
        raise InternalError("Failed to fetch hourly analytics") from e
    return {"success": True, "data": data, "timestamp": iso(view.taken_at)}
