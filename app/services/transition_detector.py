# app/services/transition_detector.py
"""
Device report ingestion: normalise slots, diff against the previous snapshot,
back-fill occupied durations, append transitions and overwrite the snapshot.

Accepted slot formats:
  - objects:       [{"id": 1, "occupied": true, "lastUpdate": ...}, ...]
  - simple array:  [0, 1, 0]   (0 = available, anything else = occupied)

The first report for a device never produces transitions. Slot ids missing
from a new report are dropped from the snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from app.exceptions import ValidationError
from app.models.parking import DeviceSnapshot, Slot, TransitionEvent, state_label
from app.services.device_store import DeviceStateStore
from app.services.history_log import HistoryLog
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class IngestResult:
    snapshot: DeviceSnapshot
    transitions: List[TransitionEvent] = field(default_factory=list)


def normalize_slots(raw_slots: Any, now: datetime) -> List[Slot]:
    """
    Convert either accepted slot format into Slot records. Non-lists yield [].
    Slot ids are unique per report: a repeated id keeps its first position
    and takes the state of its last occurrence.
    """
    if not isinstance(raw_slots, (list, tuple)):
        return []

    by_id = {}
    for index, raw in enumerate(raw_slots):
        if isinstance(raw, dict):
            slot_id = raw.get("id")
            if not slot_id or not isinstance(slot_id, (int, str)):
                slot_id = index + 1
            slot = Slot(
                id=slot_id,
                occupied=bool(raw.get("occupied")),
                last_update=raw.get("lastUpdate") or now,
            )
        else:
            slot = Slot(id=index + 1, occupied=bool(raw), last_update=now)
        if slot.id in by_id:
            logger.warning(f"Duplicate slot id {slot.id} in report, keeping last occurrence")
        by_id[slot.id] = slot
    return list(by_id.values())


def _duration_ms(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


def _record_transition(history: HistoryLog, device_id: str, slot: Slot, previous: Slot,
                       now: datetime, source_ip: Optional[str]) -> TransitionEvent:
    duration = None
    if previous.occupied and not slot.occupied:
        # Must run before the append below so the lookup never sees this event
        last_occupied = history.find_last_occupied(device_id, slot.id)
        if last_occupied is not None:
            duration = _duration_ms(last_occupied.timestamp, now)

    event = TransitionEvent(
        device_id=device_id,
        slot_id=slot.id,
        previous_state=previous.occupied,
        new_state=slot.occupied,
        timestamp=now,
        source_ip=source_ip,
        duration=duration,
    )
    history.append(event)
    logger.info(
        f"Slot {slot.id} on device {device_id}: "
        f"{state_label(previous.occupied)} -> {state_label(slot.occupied)}"
        + (f" (occupied {duration // 60000} min)" if duration is not None else "")
    )
    return event


def process_report(report: dict, source_ip: Optional[str], devices: DeviceStateStore,
                   history: HistoryLog, now: datetime) -> IngestResult:
    """
    Apply one device report to the stores. Not thread-safe on its own:
    ParkingStore.ingest holds the lock around this call.
    """
    device_id = report.get("deviceId")
    if not device_id or not str(device_id).strip():
        raise ValidationError("Device ID is required")

    slots = normalize_slots(report.get("slots"), now)
    previous = devices.get(device_id)

    transitions = []
    if previous is not None:
        for slot in slots:
            prior = previous.find_slot(slot.id)
            if prior is not None and prior.occupied != slot.occupied:
                transitions.append(_record_transition(history, device_id, slot, prior, now, source_ip))

    available = sum(1 for s in slots if not s.occupied)
    snapshot = DeviceSnapshot(
        device_id=device_id,
        slots=tuple(slots),
        available_slots=available,
        total_slots=len(slots),
        last_update=now,
        timestamp=report.get("timestamp"),
        wifi_status=report.get("wifiStatus"),
    )
    devices.put(snapshot)

    logger.info(f"Parking status updated for device: {device_id} - {available}/{len(slots)} available")
    return IngestResult(snapshot=snapshot, transitions=transitions)
