from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from streamtally.utils.timeutils import as_utc, month_bounds, month_start, months_between, shift_month


logger = structlog.get_logger("analytics_engine")


ROYALTY_RATE_PER_MINUTE = 0.001
MIN_BILLABLE_MS = 10000
MS_PER_MINUTE = 60000
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class EnrichedEvent:
    user_id: str
    song_id: str
    timestamp: datetime
    duration_ms: int
    title: str
    artist: str
    release_date: str = ""

    def __post_init__(self):
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))


@dataclass(frozen=True)
class MonthSummary:
    year: int
    month: int
    top_song_title: str
    top_artist_name: str


@dataclass(frozen=True)
class TimelineReport:
    has_any_data: bool
    entries: Tuple[MonthSummary, ...] = ()


def _ranked(counts: Counter) -> List:
    # sorted() is stable and Counter keeps first-insertion order,
    # so equal counts rank in first-seen order
    return [key for key, _ in sorted(counts.items(), key=lambda item: -item[1])]


def _reference_now(events: Tuple[EnrichedEvent, ...]) -> Optional[datetime]:
    if not events:
        return None
    return max(event.timestamp for event in events)


def _oldest_offset(events: Tuple[EnrichedEvent, ...], now: datetime, months: int) -> int:
    """
    How many months back the window reaches, capped at the month of the
    earliest play: nothing older can match.
    """
    earliest = min(event.timestamp for event in events)
    return min(months - 1, months_between(earliest, now))


def top_songs(events: Iterable[EnrichedEvent], start: datetime, end: datetime, n: int) -> List[str]:
    """Most played song ids within [start, end], highest play count first."""
    start, end = as_utc(start), as_utc(end)
    if n <= 0 or start > end:
        return []

    counts: Counter = Counter()
    for event in events:
        if start <= event.timestamp <= end:
            counts[event.song_id] += 1

    result = _ranked(counts)[:n]
    logger.debug("top_songs_computed", distinct_songs=len(counts), returned=len(result))
    return result


def timeline(events: Iterable[EnrichedEvent], user_id: str, months: int) -> TimelineReport:
    """
    Top song and top artist of a user for each of the last `months` calendar
    months, oldest first. Months without plays are omitted.

    "Now" is the latest timestamp of the whole dataset, so results depend
    only on the snapshot, never on the wall clock.
    """
    events = tuple(events)
    now = _reference_now(events)
    if now is None or months <= 0:
        return TimelineReport(has_any_data=False)

    user_events = [event for event in events if event.user_id == user_id]

    entries = []
    for offset in range(_oldest_offset(events, now, months), -1, -1):
        year, month = shift_month(now.year, now.month, -offset)
        lower, upper = month_bounds(year, month)

        song_counts: Counter = Counter()
        artist_counts: Counter = Counter()
        titles: Dict[str, str] = {}

        for event in user_events:
            if lower <= event.timestamp < upper:
                song_counts[event.song_id] += 1
                artist_counts[event.artist] += 1
                titles.setdefault(event.song_id, event.title)

        if not song_counts:
            continue

        top_song = _ranked(song_counts)[0]
        entries.append(MonthSummary(
            year=year,
            month=month,
            top_song_title=titles[top_song],
            top_artist_name=_ranked(artist_counts)[0],
        ))

    logger.debug("timeline_computed", user_id=user_id, months=months, entries=len(entries))
    return TimelineReport(has_any_data=bool(entries), entries=tuple(entries))


def payout(
    events: Iterable[EnrichedEvent],
    artist_name: str,
    months: int,
    rate_per_minute: float = ROYALTY_RATE_PER_MINUTE,
    min_billable_ms: int = MIN_BILLABLE_MS,
) -> Decimal:
    """
    Royalty owed to an artist for billable streams since the start of the
    month `months - 1` months before the latest play in the dataset.
    """
    events = tuple(events)
    now = _reference_now(events)
    if now is None or months <= 0:
        return Decimal("0.00")

    window_start = month_start(*shift_month(now.year, now.month, -_oldest_offset(events, now, months)))
    wanted = artist_name.casefold()

    total_ms = sum(
        event.duration_ms
        for event in events
        if event.artist.casefold() == wanted
        and event.timestamp >= window_start
        and event.duration_ms > min_billable_ms
    )

    amount = (total_ms / MS_PER_MINUTE) * rate_per_minute
    logger.debug("payout_computed", artist=artist_name, window_start=window_start.isoformat(), total_ms=total_ms)
    return Decimal(repr(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
