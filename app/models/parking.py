# app/models/parking.py
"""
In-memory parking records.
DeviceSnapshot is replaced wholesale on every report; TransitionEvent is
immutable once appended to the history log.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class Slot:
    id: Any                  # integer id within the device (1-based when derived)
    occupied: bool
    last_update: Any         # device-supplied value, or server time when absent

    def to_dict(self) -> dict:
        last = self.last_update.isoformat() if isinstance(self.last_update, datetime) else self.last_update
        return {"id": self.id, "occupied": self.occupied, "lastUpdate": last}


@dataclass(frozen=True)
class DeviceSnapshot:
    device_id: str
    slots: Tuple[Slot, ...]
    available_slots: int
    total_slots: int
    last_update: datetime
    timestamp: Any = None     # as reported by the device
    wifi_status: Any = None

    @property
    def occupied_slots(self) -> int:
        return self.total_slots - self.available_slots

    def find_slot(self, slot_id) -> Optional[Slot]:
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def to_dict(self) -> dict:
        return {
            "deviceId": self.device_id,
            "timestamp": self.timestamp,
            "wifiStatus": self.wifi_status,
            "slots": [s.to_dict() for s in self.slots],
            "availableSlots": self.available_slots,
            "totalSlots": self.total_slots,
            "lastUpdate": self.last_update.isoformat(),
        }

    def __repr__(self):
        return f"<DeviceSnapshot {self.device_id} {self.available_slots}/{self.total_slots} available>"


@dataclass(frozen=True)
class TransitionEvent:
    device_id: str
    slot_id: Any
    previous_state: bool     # True = occupied, False = available
    new_state: bool
    timestamp: datetime
    source_ip: Optional[str] = None
    duration: Optional[int] = None   # ms occupied; set only on occupied -> available

    @property
    def is_occupation(self) -> bool:
        return bool(self.new_state)

    @property
    def is_release(self) -> bool:
        return not self.new_state

    def __repr__(self):
        return (f"<TransitionEvent {self.device_id}/{self.slot_id} "
                f"{state_label(self.previous_state)}->{state_label(self.new_state)}>")


def state_label(occupied: bool) -> str:
    return "occupied" if occupied else "available"
