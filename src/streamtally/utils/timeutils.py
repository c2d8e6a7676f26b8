from datetime import datetime, timezone
from typing import Tuple


def parse_timestamp(value: str) -> datetime:
    """
    Parses an ISO-8601 string into an aware UTC datetime.
    Naive values (no offset) are read as UTC.
    """
    return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def months_between(earlier: datetime, later: datetime) -> int:
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=timezone.utc)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Half-open [start, next_start) span covering every instant of the month."""
    next_year, next_month = shift_month(year, month, 1)
    return month_start(year, month), month_start(next_year, next_month)
