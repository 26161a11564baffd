# app/services/device_store.py
"""Latest reported snapshot per device. Reports overwrite, never merge."""

from typing import Dict, List, Optional

from app.models.parking import DeviceSnapshot


class DeviceStateStore:
    def __init__(self):
        self._devices: Dict[str, DeviceSnapshot] = {}

    def get(self, device_id: str) -> Optional[DeviceSnapshot]:
        return self._devices.get(device_id)

    def put(self, snapshot: DeviceSnapshot) -> None:
        self._devices[snapshot.device_id] = snapshot

    def all(self) -> List[DeviceSnapshot]:
        return list(self._devices.values())

    def __contains__(self, device_id) -> bool:
        return device_id in self._devices

    def __len__(self) -> int:
        return len(self._devices)
