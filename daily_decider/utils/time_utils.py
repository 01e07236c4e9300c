"""
Time helpers shared by the temporal processor, the engine and the SQLite layer.

Timestamps cross module boundaries as epoch milliseconds (``int``); inside the
analysers they are ``datetime`` objects. Epoch values are resolved in a named
time zone because time-of-day buckets depend on the caller's wall clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

TimestampLike = Union[datetime, int, float, None]


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)


def now_ms() -> int:
    """Return the current time as integer epoch milliseconds."""
    return to_epoch_ms(utcnow())


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def get_zone(name: Optional[str]) -> tzinfo:
    """Return a ``tzinfo`` for an IANA zone name; ``None``/``"UTC"`` → UTC.

    Raises:
        zoneinfo.ZoneInfoNotFoundError: If ``name`` is not a known zone.
    """
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def resolve_timestamp(value: TimestampLike, time_zone: Optional[str] = None) -> datetime:
    """Turn a datetime, epoch-ms number or ``None`` into a wall-clock datetime.

    Datetimes are returned unchanged (naive ones keep their wall-clock
    reading). Numbers are epoch milliseconds, resolved in ``time_zone``.
    ``None`` means now, in ``time_zone``.

    Args:
        value:     The timestamp to resolve.
        time_zone: IANA zone name for epoch values; defaults to UTC.

    Returns:
        A ``datetime`` whose ``hour``/``weekday()``/``month`` are the local
        wall-clock values.
    """
    if isinstance(value, datetime):
        return value
    zone = get_zone(time_zone)
    if value is None:
        return datetime.now(tz=zone)
    return datetime.fromtimestamp(float(value) / 1000.0, tz=zone)


def age_days(then_ms: int, now: datetime) -> float:
    """Days elapsed from epoch-ms ``then_ms`` to ``now``; never negative."""
    delta_ms = to_epoch_ms(now) - then_ms
    return max(0.0, delta_ms / 86_400_000.0)


def date_range(start: date, days: int) -> list[date]:
    """Return ``days`` consecutive calendar dates beginning at ``start``.

    Raises:
        ValueError: If ``days < 1``.
    """
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}.")
    return [start + timedelta(days=i) for i in range(days)]
