# app/services/status_reporter.py
"""
Periodic status log. Every STATUS_LOG_INTERVAL_SECONDS, writes a summary of
connected devices, slot totals and history size. Read-only: it works from a
StoreView and never holds the store lock while logging.
"""

import asyncio
import time

from app.store import ParkingStore
from app.utils.logger import get_logger

logger = get_logger(__name__)


def log_status(store: ParkingStore, started_at: float) -> dict:
    view = store.snapshot()
    summary = {
        "devices": len(view.devices),
        "total_slots": sum(d.total_slots for d in view.devices),
        "occupied": sum(d.occupied_slots for d in view.devices),
        "history": len(view.events),
        "uptime_s": int(time.monotonic() - started_at),
    }
    logger.info(
        f"Parking system health | devices={summary['devices']} slots={summary['total_slots']} "
        f"occupied={summary['occupied']} history={summary['history']}/{store.history_cap} "
        f"uptime={summary['uptime_s']}s"
    )
    return summary


async def run_status_logger(store: ParkingStore, interval_seconds: int):
    """Runs until cancelled on shutdown."""
    started_at = time.monotonic()
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            # snapshot() takes a threading lock; keep it off the event loop
            await asyncio.to_thread(log_status, store, started_at)
        except Exception as e:
            logger.error(f"Status log failed: {e}", exc_info=True)
