"""Unit tests for the per-user monthly listening timeline."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from streamtally.domains.analytics.engine import EnrichedEvent, MonthSummary, TimelineReport, timeline

pytestmark = pytest.mark.unit


def test_empty_months_are_omitted(make_event) -> None:
    """January and March have plays, February does not and is skipped."""

    events = [
        make_event("2025-01-10T12:00:00Z", song_id="s1", title="Jan Song", artist="Jan Artist"),
        make_event("2025-03-03T08:00:00Z", song_id="s2", title="Mar Song", artist="Mar Artist"),
    ]
    report = timeline(events, "user-1", 3)

    assert report.has_any_data is True
    assert report.entries == (
        MonthSummary(year=2025, month=1, top_song_title="Jan Song", top_artist_name="Jan Artist"),
        MonthSummary(year=2025, month=3, top_song_title="Mar Song", top_artist_name="Mar Artist"),
    )


def test_unknown_user_has_no_data(make_event) -> None:
    events = [make_event("2025-03-03", user_id="someone-else")]
    assert timeline(events, "user-1", 6) == TimelineReport(has_any_data=False, entries=())


def test_reference_month_comes_from_whole_dataset(make_event) -> None:
    """Another user's later play moves the window past this user's only month."""

    events = [
        make_event("2025-01-10", user_id="user-1"),
        make_event("2025-05-20", user_id="user-2"),
    ]
    report = timeline(events, "user-1", 3)
    assert report.has_any_data is False
    assert report.entries == ()

    assert timeline(events, "user-1", 5).has_any_data is True


def test_top_song_and_artist_by_play_count(make_event) -> None:
    events = [
        make_event("2025-03-01", song_id="a", title="Alpha", artist="X"),
        make_event("2025-03-02", song_id="b", title="Beta", artist="Y"),
        make_event("2025-03-03", song_id="c", title="Gamma", artist="Y"),
        make_event("2025-03-04", song_id="a", title="Alpha", artist="X"),
        make_event("2025-03-05", song_id="d", title="Delta", artist="Y"),
    ]
    (entry,) = timeline(events, "user-1", 1).entries
    assert entry.top_song_title == "Alpha"
    assert entry.top_artist_name == "Y"


def test_ties_pick_first_encountered(make_event) -> None:
    events = [
        make_event("2025-03-09", song_id="b", title="Beta", artist="Second"),
        make_event("2025-03-01", song_id="a", title="Alpha", artist="First"),
    ]
    (entry,) = timeline(events, "user-1", 1).entries
    assert entry.top_song_title == "Beta"
    assert entry.top_artist_name == "Second"


def test_month_boundaries_are_calendar_months_in_utc(make_event) -> None:
    events = [
        make_event("2025-02-28T23:59:59.999Z", song_id="feb", title="Feb Song"),
        make_event("2025-03-01T00:00:00Z", song_id="mar", title="Mar Song"),
    ]
    entries = timeline(events, "user-1", 2).entries
    assert [(e.year, e.month, e.top_song_title) for e in entries] == [
        (2025, 2, "Feb Song"),
        (2025, 3, "Mar Song"),
    ]


def test_window_wraps_across_year_end(make_event) -> None:
    events = [
        make_event("2024-11-15", title="Nov"),
        make_event("2024-12-15", title="Dec"),
        make_event("2025-01-15", title="Jan"),
    ]
    entries = timeline(events, "user-1", 2).entries
    assert [(e.year, e.month) for e in entries] == [(2024, 12), (2025, 1)]


def test_entries_are_chronological_unique_and_bounded(make_event) -> None:
    events = [
        make_event(f"2024-{month:02d}-10", song_id=f"s{month}")
        for month in (12, 3, 7, 1, 9, 5)
    ]
    entries = timeline(events, "user-1", 8).entries

    keys = [(e.year, e.month) for e in entries]
    assert len(entries) <= 8
    assert keys == sorted(keys)
    assert len(set(keys)) == len(keys)
    assert all((2024, 5) <= key <= (2024, 12) for key in keys)


@pytest.mark.parametrize("months", [0, -3])
def test_non_positive_months_has_no_data(make_event, months: int) -> None:
    events = [make_event("2025-03-03")]
    assert timeline(events, "user-1", months).has_any_data is False


def test_empty_dataset_has_no_data() -> None:
    assert timeline([], "user-1", 3) == TimelineReport(has_any_data=False)


def test_repeated_calls_are_identical(make_event) -> None:
    events = (make_event("2025-03-03"), make_event("2025-02-03"))
    assert timeline(events, "user-1", 3) == timeline(events, "user-1", 3)


def test_window_far_longer_than_the_dataset(make_event) -> None:
    """A window reaching back thousands of years only covers months with data."""

    events = [
        make_event("2024-11-02", title="Nov"),
        make_event("2025-03-10", title="Mar"),
    ]
    report = timeline(events, "user-1", 30000)
    assert [(e.year, e.month, e.top_song_title) for e in report.entries] == [
        (2024, 11, "Nov"),
        (2025, 3, "Mar"),
    ]


def test_naive_timestamps_are_read_as_utc() -> None:
    event = EnrichedEvent(
        user_id="user-1",
        song_id="s1",
        timestamp=datetime(2025, 3, 10, 12, 0),
        duration_ms=180000,
        title="Naive",
        artist="Clock",
    )
    assert event.timestamp == datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

    (entry,) = timeline([event], "user-1", 1).entries
    assert (entry.year, entry.month, entry.top_song_title) == (2025, 3, "Naive")


def test_offset_timestamps_are_bucketed_in_utc() -> None:
    """00:30 on April 1st at +02:00 is still March in UTC."""

    event = EnrichedEvent(
        user_id="user-1",
        song_id="s1",
        timestamp=datetime(2025, 4, 1, 0, 30, tzinfo=timezone(timedelta(hours=2))),
        duration_ms=180000,
        title="Late",
        artist="Clock",
    )
    (entry,) = timeline([event], "user-1", 1).entries
    assert (entry.year, entry.month) == (2025, 3)
