# app/services/history_log.py
"""
Bounded, append-only log of slot transitions.

Oldest entries are evicted first once the cap is reached. The deque gives
O(1) append and front eviction. Callers are responsible for locking; see
ParkingStore.
"""

from collections import deque
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Sequence

from app.models.parking import TransitionEvent
from app.utils.logger import get_logger

logger = get_logger(__name__)


def events_since(events: Iterable[TransitionEvent], threshold: datetime) -> List[TransitionEvent]:
    """Events with timestamp >= threshold, in log order."""
    return [e for e in events if e.timestamp >= threshold]


def last_events(events: Sequence[TransitionEvent], n: int) -> List[TransitionEvent]:
    """The last n events, most recent first."""
    if n <= 0:
        return []
    return list(reversed(events[-n:]))


class HistoryLog:
    def __init__(self, cap: int = 10000):
        if cap < 1:
            raise ValueError("history cap must be >= 1")
        self.cap = cap
        self._events: deque = deque(maxlen=cap)
        self.evicted_total = 0

    def append(self, event: TransitionEvent) -> None:
        if len(self._events) == self.cap:
            self.evicted_total += 1
            if self.evicted_total == 1 or self.evicted_total % 1000 == 0:
                logger.info(f"History cap {self.cap} reached, evicted {self.evicted_total} oldest entries so far")
        self._events.append(event)

    def find_last_occupied(self, device_id: str, slot_id) -> Optional[TransitionEvent]:
        """Most recent event for (device_id, slot_id) with new_state == occupied."""
        for event in reversed(self._events):
            if event.device_id == device_id and event.slot_id == slot_id and event.new_state:
                return event
        return None

    def since(self, threshold: datetime) -> List[TransitionEvent]:
        return events_since(self._events, threshold)

    def last(self, n: int) -> List[TransitionEvent]:
        return last_events(tuple(self._events), n)

    def snapshot(self) -> tuple:
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[TransitionEvent]:
        return iter(tuple(self._events))
