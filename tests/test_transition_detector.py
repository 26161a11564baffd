# tests/test_transition_detector.py
"""Unit tests for report ingestion and transition detection."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

import pytest
from app.exceptions import ValidationError
from app.services.transition_detector import normalize_slots
from app.store import ParkingStore
from helpers import FakeClock, T0


def report(device_id, slots, **extra):
    return {"deviceId": device_id, "slots": slots, **extra}


class TestNormalizeSlots:
    def test_object_form_keeps_ids(self):
        slots = normalize_slots([{"id": 7, "occupied": True, "lastUpdate": 123}], T0)
        assert slots[0].id == 7
        assert slots[0].occupied is True
        assert slots[0].last_update == 123

    def test_object_form_defaults_id_and_last_update(self):
        slots = normalize_slots([{"occupied": False}, {"occupied": True}], T0)
        assert [s.id for s in slots] == [1, 2]
        assert slots[0].last_update == T0

    def test_simple_array_form(self):
        slots = normalize_slots([0, 1, 0], T0)
        assert [s.id for s in slots] == [1, 2, 3]
        assert [s.occupied for s in slots] == [False, True, False]

    def test_simple_array_nonzero_values_are_occupied(self):
        slots = normalize_slots([0, 2, "0", 0.0, -1], T0)
        assert [s.occupied for s in slots] == [False, True, True, False, True]

    def test_repeated_id_keeps_last_state(self):
        slots = normalize_slots([{"id": 1, "occupied": True}, {"id": 2}, {"id": 1, "occupied": False}], T0)
        assert [s.id for s in slots] == [1, 2]
        assert slots[0].occupied is False

    @pytest.mark.parametrize("raw", [None, "0,1", 5, {"id": 1}])
    def test_non_sequence_yields_empty(self, raw):
        assert normalize_slots(raw, T0) == []


class TestTransitionDetector:
    def test_first_report_records_without_transitions(self):
        store = ParkingStore(clock=FakeClock())
        result = store.ingest(report("D1", [{"id": 1, "occupied": False}, {"id": 2, "occupied": True}]))

        assert result.snapshot.available_slots == 1
        assert result.snapshot.total_slots == 2
        assert result.transitions == []
        assert store.counts() == (1, 0)

    def test_second_report_emits_single_transition(self):
        store = ParkingStore(clock=FakeClock())
        store.ingest(report("D1", [{"id": 1, "occupied": False}, {"id": 2, "occupied": True}]))
        result = store.ingest(report("D1", [{"id": 1, "occupied": True}, {"id": 2, "occupied": True}]),
                              source_ip="192.168.1.20")

        assert len(result.transitions) == 1
        event = result.transitions[0]
        assert event.slot_id == 1
        assert event.previous_state is False
        assert event.new_state is True
        assert event.source_ip == "192.168.1.20"
        assert event.duration is None

    def test_simple_array_report(self):
        store = ParkingStore(clock=FakeClock())
        result = store.ingest(report("D2", [0, 1, 0]))
        snap = result.snapshot
        assert [s.id for s in snap.slots] == [1, 2, 3]
        assert snap.slots[1].occupied is True
        assert snap.available_slots == 2
        assert snap.total_slots == 3

    def test_unchanged_reports_add_no_history(self):
        store = ParkingStore(clock=FakeClock())
        for _ in range(5):
            store.ingest(report("D1", [0, 1, 1, 0]))
        assert store.counts() == (1, 0)

    def test_repeated_slot_id_reports_add_no_history(self):
        store = ParkingStore(clock=FakeClock())
        slots = [{"id": 1, "occupied": True}, {"id": 1, "occupied": False}]
        for _ in range(4):
            result = store.ingest(report("D1", slots))
        assert store.counts() == (1, 0)
        assert result.snapshot.total_slots == 1
        assert result.snapshot.slots[0].occupied is False

    def test_duration_backfilled_on_release(self):
        clock = FakeClock()
        store = ParkingStore(clock=clock)
        store.ingest(report("D1", [0]))
        clock.advance(minutes=1)
        store.ingest(report("D1", [1]))
        clock.advance(minutes=30)
        result = store.ingest(report("D1", [0]))

        release = result.transitions[0]
        assert release.previous_state is True and release.new_state is False
        assert release.duration == 30 * 60 * 1000

    def test_release_without_prior_occupation_has_no_duration(self):
        clock = FakeClock()
        store = ParkingStore(clock=clock)
        store.ingest(report("D1", [1]))      # occupied from the start, never logged
        clock.advance(minutes=10)
        result = store.ingest(report("D1", [0]))
        assert result.transitions[0].duration is None

    def test_transitions_alternate_per_slot(self):
        clock = FakeClock()
        store = ParkingStore(clock=clock)
        for state in [0, 1, 1, 0, 0, 1, 0]:
            store.ingest(report("D1", [state]))
            clock.advance(minutes=1)
        states = [e.new_state for e in store.snapshot().events]
        assert states == [True, False, True, False]

    def test_stale_slot_ids_are_dropped(self):
        store = ParkingStore(clock=FakeClock())
        store.ingest(report("D1", [{"id": 1, "occupied": True}, {"id": 2, "occupied": True}]))
        result = store.ingest(report("D1", [{"id": 1, "occupied": True}]))
        assert [s.id for s in result.snapshot.slots] == [1]
        assert store.get_device("D1").total_slots == 1

    def test_reappearing_slot_does_not_transition(self):
        store = ParkingStore(clock=FakeClock())
        store.ingest(report("D1", [{"id": 1, "occupied": True}, {"id": 2, "occupied": True}]))
        store.ingest(report("D1", [{"id": 1, "occupied": True}]))
        result = store.ingest(report("D1", [{"id": 1, "occupied": True}, {"id": 2, "occupied": False}]))
        assert result.transitions == []

    def test_malformed_slots_still_write_snapshot(self):
        store = ParkingStore(clock=FakeClock())
        result = store.ingest(report("D3", "garbage", wifiStatus="connected"))
        assert result.snapshot.total_slots == 0
        assert result.snapshot.available_slots == 0
        assert result.snapshot.slots == ()
        assert store.get_device("D3").wifi_status == "connected"

    @pytest.mark.parametrize("device_id", [None, "", "   "])
    def test_missing_device_id_rejected(self, device_id):
        store = ParkingStore(clock=FakeClock())
        with pytest.raises(ValidationError):
            store.ingest({"deviceId": device_id, "slots": [0]})
        assert store.counts() == (0, 0)

    def test_history_cap_applies_through_ingest(self):
        clock = FakeClock()
        store = ParkingStore(history_cap=3, clock=clock)
        for state in [0, 1, 0, 1, 0, 1]:
            store.ingest(report("D1", [state]))
            clock.advance(seconds=1)
        events = store.snapshot().events
        assert len(events) == 3
        assert [e.new_state for e in events] == [True, False, True]
        assert [(e.timestamp - T0).seconds for e in events] == [3, 4, 5]
