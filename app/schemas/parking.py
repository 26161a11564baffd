# app/schemas/parking.py
"""
Device report body. Only shape-checked: `slots` accepts anything so that a
malformed value degrades to an empty report instead of a 400.
"""

from pydantic import BaseModel
from typing import Any, Optional


class ParkingReport(BaseModel):
    deviceId: Optional[str] = None
    timestamp: Any = None
    wifiStatus: Any = None
    slots: Any = None

    class Config:
        extra = "ignore"
