# app/store.py
"""
Single owner of mutable parking state: the device snapshot map and the
transition history, guarded together by one lock.

Writers (device reports) hold the lock for the whole detect → back-fill →
append → snapshot sequence. Readers take a consistent StoreView under the
lock and run aggregation on it afterwards, so a scan never sees a torn append.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Tuple

from fastapi import Request

from app.models.parking import DeviceSnapshot, TransitionEvent
from app.services.device_store import DeviceStateStore
from app.services.history_log import HistoryLog
from app.services.transition_detector import IngestResult, process_report
from app.utils.time_utils import utc_now


@dataclass(frozen=True)
class StoreView:
    devices: Tuple[DeviceSnapshot, ...]
    events: Tuple[TransitionEvent, ...]
    taken_at: datetime


class ParkingStore:
    def __init__(self, history_cap: int = 10000, clock: Callable[[], datetime] = utc_now):
        self._lock = threading.RLock()
        self._devices = DeviceStateStore()
        self._history = HistoryLog(cap=history_cap)
        self.clock = clock

    def ingest(self, report: dict, source_ip: Optional[str] = None) -> IngestResult:
        with self._lock:
            return process_report(report, source_ip, self._devices, self._history, self.clock())

    def get_device(self, device_id: str) -> Optional[DeviceSnapshot]:
        with self._lock:
            return self._devices.get(device_id)

    def list_devices(self) -> list:
        with self._lock:
            return self._devices.all()

    def snapshot(self) -> StoreView:
        with self._lock:
            return StoreView(
                devices=tuple(self._devices.all()),
                events=self._history.snapshot(),
                taken_at=self.clock(),
            )

    def counts(self) -> Tuple[int, int]:
        """(device count, history length)"""
        with self._lock:
            return len(self._devices), len(self._history)

    @property
    def history_cap(self) -> int:
        return self._history.cap


def get_store(request: Request) -> ParkingStore:
    """FastAPI dependency: the store attached to the running app."""
    return request.app.state.store
