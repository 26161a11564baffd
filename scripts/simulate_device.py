"""
Simulate a parking sensor device posting reports to the backend.
Flips random slots between reports so the backend records transitions.

Usage:
  python scripts/simulate_device.py --device D1 --slots 6 --reports 20 --interval 2
  python scripts/simulate_device.py --format array   # send [0, 1, 0, ...] instead of objects
"""

import argparse
import random
import time
from datetime import datetime, timezone

import requests

BACKEND_URL = "http://localhost:3000/api/parking-status"


def build_payload(device_id, states, fmt, wifi):
    now = datetime.now(timezone.utc)
    if fmt == "array":
        slots = [1 if s else 0 for s in states]
    else:
        ms = int(now.timestamp() * 1000)
        slots = [{"id": i + 1, "occupied": s, "lastUpdate": ms} for i, s in enumerate(states)]
    return {"deviceId": device_id, "timestamp": now.isoformat(), "wifiStatus": wifi, "slots": slots}


def send(url, payload, source_ip=None):
    headers = {"X-Forwarded-For": source_ip} if source_ip else {}
    resp = requests.post(url, json=payload, headers=headers, timeout=10)
    body = resp.json()
    data = body.get("data", {})
    print(f"✅ {payload['deviceId']} → HTTP {resp.status_code}: "
          f"{data.get('availableSlots')}/{data.get('totalSlots')} available, "
          f"{data.get('transitions', 0)} transitions")
    return resp


def main():
    parser = argparse.ArgumentParser(description="Simulate a parking slot sensor device")
    parser.add_argument("--url", default=BACKEND_URL)
    parser.add_argument("--device", default="SIM-01")
    parser.add_argument("--slots", type=int, default=4)
    parser.add_argument("--reports", type=int, default=10)
    parser.add_argument("--interval", type=float, default=1.0)
    parser.add_argument("--flip-chance", type=float, default=0.3)
    parser.add_argument("--format", choices=["objects", "array"], default="objects")
    parser.add_argument("--ip", default=None, help="Value for X-Forwarded-For")
    args = parser.parse_args()

    states = [False] * args.slots
    for n in range(args.reports):
        if n:
            states = [(not s) if random.random() < args.flip_chance else s for s in states]
        payload = build_payload(args.device, states, args.format, wifi="connected")
        try:
            send(args.url, payload, args.ip)
        except requests.exceptions.ConnectionError:
            print(f"❌ Backend unreachable at {args.url}")
            return
        time.sleep(args.interval)


if __name__ == "__main__":
    main()
