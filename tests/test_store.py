# tests/test_store.py
"""Concurrency tests for ParkingStore: parallel device reports and readers."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random
import threading
from app.store import ParkingStore

CAP = 500
WRITERS = 8
REPORTS_PER_WRITER = 200
SLOTS = 3


def assert_alternating(events):
    last_state = {}
    for e in events:
        assert e.previous_state != e.new_state
        key = (e.device_id, e.slot_id)
        if key in last_state:
            assert last_state[key] != e.new_state, f"repeated state for {key}"
        last_state[key] = e.new_state


def assert_releases_paired(events):
    seen_occupation = set()
    for e in events:
        key = (e.device_id, e.slot_id)
        if e.is_occupation:
            seen_occupation.add(key)
        elif key in seen_occupation:
            assert e.duration is not None and e.duration >= 0


class TestParkingStoreConcurrency:
    def test_parallel_reports_and_snapshots(self):
        store = ParkingStore(history_cap=CAP)
        errors = []
        done = threading.Event()

        def writer(seed):
            rng = random.Random(seed)
            try:
                for _ in range(REPORTS_PER_WRITER):
                    store.ingest({"deviceId": "D1", "slots": [rng.randint(0, 1) for _ in range(SLOTS)]})
            except Exception as e:
                errors.append(e)

        def reader():
            try:
                while not done.is_set():
                    view = store.snapshot()
                    assert len(view.events) <= CAP
                    assert_alternating(view.events)
            except Exception as e:
                errors.append(e)

        writers = [threading.Thread(target=writer, args=(i,)) for i in range(WRITERS)]
        readers = [threading.Thread(target=reader) for _ in range(2)]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        done.set()
        for t in readers:
            t.join()

        assert errors == []
        events = store.snapshot().events
        assert 0 < len(events) <= CAP
        assert_alternating(events)
        assert_releases_paired(events)

        device = store.get_device("D1")
        assert device.total_slots == SLOTS
        # the last event per slot matches the final snapshot
        final = {e.slot_id: e.new_state for e in events}
        for slot in device.slots:
            if slot.id in final:
                assert final[slot.id] == slot.occupied

    def test_parallel_devices_keep_separate_snapshots(self):
        store = ParkingStore(history_cap=CAP)

        def writer(device_id):
            for i in range(100):
                store.ingest({"deviceId": device_id, "slots": [i % 2, 1 - i % 2]})

        threads = [threading.Thread(target=writer, args=(f"D{n}",)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.counts() == (4, CAP)
        for n in range(4):
            device = store.get_device(f"D{n}")
            assert [s.occupied for s in device.slots] == [True, False]
        assert_alternating(store.snapshot().events)
