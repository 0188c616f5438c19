from __future__ import annotations
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterator, Tuple
from zoneinfo import ZoneInfo


def zone(name: str) -> tzinfo:
    return ZoneInfo(name)


def inclusive_day_count(start: date, end: date) -> int:
    """Number of calendar days from start to end, counting both ends."""

    return (end - start).days + 1


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def local_instant(day: date, clock: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, clock).replace(tzinfo=tz).astimezone(timezone.utc)


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Treat naive datetimes as wall-clock time in ``tz``."""

    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_date(value: datetime, tz: tzinfo) -> date:
    return localize(value, tz).date()


def summer_bounds(year: int, start: Tuple[int, int], end: Tuple[int, int]) -> Tuple[date, date]:
    return date(year, *start), date(year, *end)


def in_summer(day: date, start: Tuple[int, int], end: Tuple[int, int]) -> bool:
    first, last = summer_bounds(day.year, start, end)
    return first <= day <= last


def to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_clock(value: str) -> time:
    return time.fromisoformat(value)


def local_hour_instant(day: date, hour: int, tz: tzinfo) -> datetime:
    """Instant of ``hour`` o'clock on ``day``; hour 24 is midnight of the next day."""

    wall = datetime.combine(day, time()) + timedelta(hours=hour)
    return wall.replace(tzinfo=tz).astimezone(timezone.utc)
