from decimal import Decimal
from typing import Iterable, List

from streamtally.domains.analytics.engine import TimelineReport


def format_top_songs(song_ids: Iterable[str]) -> List[str]:
    return list(song_ids)


def format_timeline(report: TimelineReport, user_id: str, months: int) -> List[str]:
    if not report.has_any_data:
        return [f"No data found for user {user_id} in the last {months} months"]

    return [
        f"{entry.year}-{entry.month:02d}: Top Song - {entry.top_song_title}, Top Artist - {entry.top_artist_name}"
        for entry in report.entries
    ]


def format_payout(amount: Decimal) -> List[str]:
    return [f"${amount:.2f}"]
