"""Tests for the reading statistics module."""
from bible_progress.core.ranges import BibleIndex, VerseRange
from bible_progress.core.statistics import (
    ReadingStats,
    compute_progress,
    compute_reading_stats,
    daily_goal_progress,
    daily_verse_counts,
    date_span,
    format_percent,
    monthly_totals,
    weekly_averages,
)
from bible_progress.journal.store import LogEntry


def _id(book: int, chapter: int, verse: int) -> int:
    return BibleIndex().encode(book, chapter, verse)


def _entry(day: str, start: int, end: int) -> LogEntry:
    return LogEntry(f"{day}-{start}", day, start, end, "2024-01-01T00:00:00+00:00", "2024-01-01T00:00:00+00:00")


COUNTS = {"2024-01-01": 10, "2024-01-02": 20, "2024-01-04": 5, "2024-01-05": 7}


def test_daily_counts_are_plain_sums() -> None:
    entries = [
        _entry("2024-01-01", _id(1, 1, 1), _id(1, 1, 10)),
        _entry("2024-01-01", _id(1, 1, 1), _id(1, 1, 10)),
        _entry("2024-01-02", _id(1, 1, 30), _id(1, 2, 2)),
    ]
    assert daily_verse_counts(entries) == {"2024-01-01": 20, "2024-01-02": 4}


def test_date_span_is_inclusive() -> None:
    assert date_span("2024-02-28", "2024-03-01") == ["2024-02-28", "2024-02-29", "2024-03-01"]
    assert date_span("2024-03-01", "2024-02-28") == []


def test_streaks_and_consistency() -> None:
    stats = compute_reading_stats(COUNTS, "2024-01-05")
    assert stats == ReadingStats(
        current_streak=2,
        longest_streak=2,
        days_with_reading=4,
        total_days=5,
        consistency=80,
    )


def test_missing_today_breaks_the_current_streak() -> None:
    stats = compute_reading_stats(COUNTS, "2024-01-06")
    assert stats.current_streak == 0
    assert stats.total_days == 6
    assert stats.consistency == 67


def test_no_readings_gives_zero_stats() -> None:
    assert compute_reading_stats({}, "2024-01-05") == ReadingStats()
    assert weekly_averages({}, "2024-01-05") == []
    assert monthly_totals({}, "2024-01-05") == []


def test_weekly_averages_start_on_sunday() -> None:
    weeks = weekly_averages(COUNTS, "2024-01-07")
    assert [(w.week_start, w.average) for w in weeks] == [("2023-12-31", 7), ("2024-01-07", 0)]


def test_weekly_average_rounds_half_up() -> None:
    weeks = weekly_averages({"2024-01-07": 5}, "2024-01-08")
    assert weeks[0].average == 3


def test_monthly_totals() -> None:
    months = monthly_totals({"2024-01-31": 5, "2024-02-01": 3}, "2024-02-02")
    assert [m.to_dict() for m in months] == [{"month": "2024-01", "total": 5}, {"month": "2024-02", "total": 3}]


def test_progress_and_forecast() -> None:
    ranges = [
        VerseRange(_id(1, 1, 1), _id(1, 1, 31)),
        VerseRange(_id(40, 1, 1), _id(40, 1, 25)),
        VerseRange(_id(1, 1, 1), _id(1, 1, 5)),
    ]
    p = compute_progress(ranges, daily_goal=86, today="2024-01-01")
    assert p.total_verses == 31102
    assert p.read_verses == 56
    assert p.remaining_verses == 31046
    assert p.days_remaining == 361
    assert p.forecast_date == "2024-12-27"
    assert (p.old_testament.read, p.old_testament.total) == (31, 23145)
    assert (p.new_testament.read, p.new_testament.total) == (25, 7957)
    assert p.to_dict()["percent"] == p.percent


def test_progress_with_no_goal_has_no_forecast() -> None:
    p = compute_progress([], daily_goal=0, today="2024-01-01")
    assert p.days_remaining == 0
    assert p.forecast_date is None
    assert p.percent == 0.0


def test_daily_goal_progress_is_capped() -> None:
    half = [_entry("2024-01-01", _id(1, 1, 1), _id(1, 2, 12))]
    assert daily_goal_progress(half, goal=86) == 50.0
    whole = [_entry("2024-01-01", _id(1, 1, 1), _id(1, 50, 26))]
    assert daily_goal_progress(whole, goal=86) == 100.0
    assert daily_goal_progress([], goal=86) == 0.0


def test_format_percent() -> None:
    assert format_percent(12.345) == "12.3%"
    assert format_percent(100.0, digits=0) == "100%"
