# app/routers/parking.py
"""
Device-facing endpoints (no auth).
POST /parking-status: device report, detects slot transitions.
GET  /parking-status: latest snapshot for one device, or all devices.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from app.dependencies import client_ip
from app.exceptions import NotFoundError
from app.schemas.parking import ParkingReport
from app.store import ParkingStore, get_store
from app.utils.time_utils import iso, utc_now

router = APIRouter()


@router.post("/parking-status", summary="Device report with current slot states")
def update_parking_status(body: ParkingReport, request: Request, store: ParkingStore = Depends(get_store)):
    result = store.ingest(body.model_dump(), client_ip(request))
    snapshot = result.snapshot
    return {
        "success": True,
        "message": "Parking status updated successfully",
        "data": {
            "deviceId": snapshot.device_id,
            "availableSlots": snapshot.available_slots,
            "totalSlots": snapshot.total_slots,
            "transitions": len(result.transitions),
            "timestamp": iso(snapshot.last_update),
        },
    }


@router.get("/parking-status", summary="Latest snapshot(s)")
def get_parking_status(deviceId: Optional[str] = None, store: ParkingStore = Depends(get_store)):
    """With deviceId: that device's snapshot or 404. Without: every device."""
    if deviceId:
        snapshot = store.get_device(deviceId)
        if snapshot is None:
            raise NotFoundError("Device not found", extra={"deviceId": deviceId})
        return {"success": True, "data": snapshot.to_dict(), "timestamp": iso(utc_now())}

    devices = store.list_devices()
    return {
        "success": True,
        "data": [d.to_dict() for d in devices],
        "totalDevices": len(devices),
        "timestamp": iso(utc_now()),
    }
