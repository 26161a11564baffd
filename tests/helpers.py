# tests/helpers.py
"""Shared fixtures-as-functions for the test modules."""

from datetime import datetime, timedelta, timezone

from app.models.parking import TransitionEvent

T0 = datetime(2026, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=T0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_event(device_id="D1", slot_id=1, new_state=True, timestamp=T0, duration=None):
    return TransitionEvent(
        device_id=device_id,
        slot_id=slot_id,
        previous_state=not new_state,
        new_state=new_state,
        timestamp=timestamp,
        source_ip="10.0.0.1",
        duration=duration,
    )
