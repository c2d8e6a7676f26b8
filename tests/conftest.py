"""Shared fixtures for building enriched play events."""

from __future__ import annotations

from typing import Callable

import pytest

from streamtally.domains.analytics.engine import EnrichedEvent
from streamtally.utils.timeutils import parse_timestamp


def build_event(
    ts: str,
    *,
    song_id: str = "song-1",
    user_id: str = "user-1",
    duration_ms: int = 180000,
    title: str | None = None,
    artist: str = "Artist",
) -> EnrichedEvent:
    return EnrichedEvent(
        user_id=user_id,
        song_id=song_id,
        timestamp=parse_timestamp(ts),
        duration_ms=duration_ms,
        title=title or f"Title {song_id}",
        artist=artist,
        release_date="2020-01-01",
    )


@pytest.fixture
def make_event() -> Callable[..., EnrichedEvent]:
    return build_event
