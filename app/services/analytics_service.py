# app/services/analytics_service.py
"""
Read-side aggregation over a StoreView: occupancy summaries, per-slot usage,
recent changes, hourly/daily activity and peak hours.

Everything here is a pure function of the view and `now`; nothing is cached.
Hour and date buckets use fixed-offset civil time (see utils.time_utils).
"""

import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from app.config import Settings
from app.models.parking import DeviceSnapshot, TransitionEvent, state_label
from app.services.history_log import events_since, last_events
from app.utils.time_utils import iso, local_date, local_hour

DAY = timedelta(hours=24)
WEEK = timedelta(days=7)


def round_half_up(value: float) -> int:
    """Whole-number rounding, halves up."""
    return math.floor(value + 0.5)


def occupancy_rate(occupied: int, total: int) -> float:
    """Percent occupied, one decimal. 0 when there are no slots."""
    if total <= 0:
        return 0.0
    rate = round(occupied / total * 100, 1)
    return min(100.0, max(0.0, rate))


def current_status(devices: Iterable[DeviceSnapshot]) -> List[dict]:
    return [
        {
            "deviceId": d.device_id,
            "totalSlots": d.total_slots,
            "availableSlots": d.available_slots,
            "occupiedSlots": d.occupied_slots,
            "occupancyRate": occupancy_rate(d.occupied_slots, d.total_slots),
            "lastUpdate": iso(d.last_update),
            "wifiStatus": d.wifi_status,
            "slots": [s.to_dict() for s in d.slots],
        }
        for d in devices
    ]


def system_summary(devices: Sequence[DeviceSnapshot], events: Sequence[TransitionEvent],
                   now: datetime) -> dict:
    total = sum(d.total_slots for d in devices)
    occupied = sum(d.occupied_slots for d in devices)
    available = sum(d.available_slots for d in devices)
    return {
        "totalDevices": len(devices),
        "totalSlots": total,
        "totalOccupied": occupied,
        "totalAvailable": available,
        "overallOccupancyRate": occupancy_rate(occupied, total),
        "totalHistoryRecords": len(events),
        "last24hChanges": len(events_since(events, now - DAY)),
        "last7dChanges": len(events_since(events, now - WEEK)),
    }


def slot_usage_stats(devices: Iterable[DeviceSnapshot], events: Iterable[TransitionEvent],
                     now: datetime) -> Dict[str, dict]:
    """
    Per (device, slot) usage for slots present in the live snapshots.
    History for slots no longer reported is ignored.
    """
    stats: Dict[str, dict] = {}
    for device in devices:
        per_device = stats.setdefault(device.device_id, {})
        for slot in device.slots:
            per_device.setdefault(slot.id, {
                "slotId": slot.id,
                "totalOccupations": 0,
                "totalDuration": 0,
                "averageDuration": 0,
                "currentlyOccupied": slot.occupied,
                "last24hOccupations": 0,
                "last7dOccupations": 0,
            })

    since_day, since_week = now - DAY, now - WEEK
    for event in events:
        slot_stats = stats.get(event.device_id, {}).get(event.slot_id)
        if slot_stats is None:
            continue
        if event.is_occupation:
            slot_stats["totalOccupations"] += 1
            if event.timestamp >= since_day:
                slot_stats["last24hOccupations"] += 1
            if event.timestamp >= since_week:
                slot_stats["last7dOccupations"] += 1
        elif event.duration is not None:
            slot_stats["totalDuration"] += event.duration

    for per_device in stats.values():
        for slot_stats in per_device.values():
            if slot_stats["totalOccupations"] > 0:
                slot_stats["averageDuration"] = round_half_up(
                    slot_stats["totalDuration"] / slot_stats["totalOccupations"]
                )
    return stats


def recent_changes(events: Sequence[TransitionEvent], limit: int) -> List[dict]:
    """Last `limit` transitions, newest first. Durations in whole minutes."""
    return [
        {
            "deviceId": e.device_id,
            "slotId": e.slot_id,
            "change": state_label(e.new_state),
            "previousState": state_label(e.previous_state),
            "timestamp": iso(e.timestamp),
            "sourceIP": e.source_ip,
            "duration": round_half_up(e.duration / 60000) if e.duration is not None else None,
        }
        for e in last_events(events, limit)
    ]


def _empty_hours() -> Dict[int, dict]:
    return {hour: {"hour": hour, "occupations": 0, "releases": 0} for hour in range(24)}


def _bucket_by_hour(events: Iterable[TransitionEvent], offset_hours: int) -> Dict[int, dict]:
    buckets = _empty_hours()
    for event in events:
        bucket = buckets[local_hour(event.timestamp, offset_hours)]
        if event.is_occupation:
            bucket["occupations"] += 1
        else:
            bucket["releases"] += 1
    return buckets


def hourly_pattern(events: Sequence[TransitionEvent], now: datetime, offset_hours: int) -> List[dict]:
    """Activity per local hour-of-day over the last 24 hours. Always 24 rows."""
    buckets = _bucket_by_hour(events_since(events, now - DAY), offset_hours)
    pattern = []
    for hour in range(24):
        b = buckets[hour]
        pattern.append({**b, "netChange": b["occupations"] - b["releases"]})
    return pattern


def daily_pattern(events: Sequence[TransitionEvent], now: datetime, offset_hours: int,
                  days: int = 7) -> List[dict]:
    """Activity per local calendar date over the last `days` days, oldest first."""
    buckets: Dict[str, dict] = {}
    for i in range(days - 1, -1, -1):
        day = local_date(now - timedelta(days=i), offset_hours)
        buckets[day] = {"date": day, "occupations": 0, "releases": 0, "totalActivity": 0}

    for event in events_since(events, now - timedelta(days=days)):
        day = local_date(event.timestamp, offset_hours)
        bucket = buckets.setdefault(day, {"date": day, "occupations": 0, "releases": 0, "totalActivity": 0})
        if event.is_occupation:
            bucket["occupations"] += 1
        else:
            bucket["releases"] += 1
        bucket["totalActivity"] += 1

    return [buckets[day] for day in sorted(buckets)]


def peak_hours(hourly: Sequence[dict], top: int) -> List[dict]:
    """Top `top` hours by occupations + releases. Ties keep bucket order."""
    ranked = sorted(hourly, key=lambda b: b["occupations"] + b["releases"], reverse=True)
    return [
        {
            "hour": b["hour"],
            "label": f"{b['hour']:02d}:00",
            "occupations": b["occupations"],
            "releases": b["releases"],
            "totalActivity": b["occupations"] + b["releases"],
        }
        for b in ranked[:max(top, 0)]
    ]


def hourly_analytics(events: Sequence[TransitionEvent], now: datetime, offset_hours: int,
                     days: int) -> dict:
    """Per local hour-of-day breakdown over the last days*24 hours, with summary."""
    start = now - timedelta(hours=days * 24)
    buckets = _bucket_by_hour(events_since(events, start), offset_hours)

    hourly = []
    for hour in range(24):
        b = buckets[hour]
        activity = b["occupations"] + b["releases"]
        hourly.append({
            **b,
            "netChange": b["occupations"] - b["releases"],
            "totalActivity": activity,
            "averagePerDay": round(activity / days, 2),
        })

    total_occ = sum(b["occupations"] for b in hourly)
    total_rel = sum(b["releases"] for b in hourly)
    busiest: Optional[dict] = None
    quietest: Optional[dict] = None
    if total_occ + total_rel > 0:
        # max()/min() return the first extreme, i.e. the earliest hour on ties
        top = max(hourly, key=lambda b: b["totalActivity"])
        low = min(hourly, key=lambda b: b["totalActivity"])
        busiest = {"hour": top["hour"], "totalActivity": top["totalActivity"]}
        quietest = {"hour": low["hour"], "totalActivity": low["totalActivity"]}

    return {
        "period": {"days": days, "hours": days * 24, "from": iso(start), "to": iso(now)},
        "hourly": hourly,
        "summary": {
            "totalEvents": total_occ + total_rel,
            "totalOccupations": total_occ,
            "totalReleases": total_rel,
            "busiestHour": busiest,
            "quietestHour": quietest,
        },
    }


def build_dashboard(devices: Sequence[DeviceSnapshot], events: Sequence[TransitionEvent],
                    now: datetime, settings: Settings) -> dict:
    """Full admin bundle. Daily pattern only with EXTENDED_ANALYTICS."""
    offset = settings.LOCAL_UTC_OFFSET_HOURS
    hourly = hourly_pattern(events, now, offset)
    data = {
        "systemStats": system_summary(devices, events, now),
        "currentStatus": current_status(devices),
        "slotUsageStats": slot_usage_stats(devices, events, now),
        "recentChanges": recent_changes(events, settings.RECENT_CHANGES_LIMIT),
        "hourlyPattern": hourly,
        "peakHours": peak_hours(hourly, settings.PEAK_HOURS_LIMIT),
        "lastUpdated": iso(now),
    }
    if settings.EXTENDED_ANALYTICS:
        data["dailyPattern"] = daily_pattern(events, now, offset)
    return data
