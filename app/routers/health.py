# app/routers/health.py
"""Liveness check with current device / history counts."""

from fastapi import APIRouter, Depends

from app.store import ParkingStore, get_store
from app.utils.time_utils import iso, utc_now

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(store: ParkingStore = Depends(get_store)):
    devices, history = store.counts()
    return {
        "success": True,
        "status": "OK",
        "timestamp": iso(utc_now()),
        "connectedDevices": devices,
        "totalHistoryLogs": history,
    }
