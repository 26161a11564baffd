"""
Clock and civil-time helpers.

Local time is a fixed offset from UTC (WIB = UTC+7). There is no timezone
database lookup and no DST; bucketing depends on this staying plain
arithmetic.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_local(instant: datetime, offset_hours: int) -> datetime:
    """Shift a UTC instant into fixed-offset civil time (naive result)."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant + timedelta(hours=offset_hours)


def local_hour(instant: datetime, offset_hours: int) -> int:
    return to_local(instant, offset_hours).hour


def local_date(instant: datetime, offset_hours: int) -> str:
    return to_local(instant, offset_hours).strftime("%Y-%m-%d")


def iso(instant: datetime) -> str:
    return instant.isoformat()
