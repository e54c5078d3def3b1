"""
Reading statistics over a log of entries.

Provides per-day verse counts, streaks and consistency, weekly and monthly
aggregates, and overall progress with a completion forecast.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from bible_progress.core.coverage import Coverage
from bible_progress.core.ranges import BibleIndex, VerseRange
from bible_progress.journal.store import LogEntry


def _round(value: float) -> int:
    """Round half up (display rounding, not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _parse(iso: str) -> date:
    return date.fromisoformat(iso)


@dataclass(frozen=True)
class ReadingStats:
    current_streak: int = 0
    longest_streak: int = 0
    days_with_reading: int = 0
    total_days: int = 0
    consistency: int = 0

    def to_dict(self) -> dict:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "days_with_reading": self.days_with_reading,
            "total_days": self.total_days,
            "consistency": self.consistency,
        }


@dataclass(frozen=True)
class WeeklyAverage:
    week_start: str
    average: int

    def to_dict(self) -> dict:
        return {"week_start": self.week_start, "average": self.average}


@dataclass(frozen=True)
class MonthlyTotal:
    month: str
    total: int

    def to_dict(self) -> dict:
        return {"month": self.month, "total": self.total}


@dataclass(frozen=True)
class DivisionProgress:
    total: int
    read: int

    @property
    def percent(self) -> float:
        return (self.read / self.total) * 100 if self.total else 0.0

    def to_dict(self) -> dict:
        return {"total": self.total, "read": self.read, "percent": self.percent}


@dataclass(frozen=True)
class Progress:
    """Whole-canon progress and how long the rest takes at the daily goal."""

    total_verses: int
    read_verses: int
    old_testament: DivisionProgress
    new_testament: DivisionProgress
    daily_goal: int
    days_remaining: int
    forecast_date: Optional[str]

    @property
    def remaining_verses(self) -> int:
        return self.total_verses - self.read_verses

    @property
    def percent(self) -> float:
        return (self.read_verses / self.total_verses) * 100 if self.total_verses else 0.0

    def to_dict(self) -> dict:
        return {
            "total_verses": self.total_verses,
            "read_verses": self.read_verses,
            "remaining_verses": self.remaining_verses,
            "percent": self.percent,
            "old_testament": self.old_testament.to_dict(),
            "new_testament": self.new_testament.to_dict(),
            "daily_goal": self.daily_goal,
            "days_remaining": self.days_remaining,
            "forecast_date": self.forecast_date,
        }


def daily_verse_counts(entries: Iterable[LogEntry], index: Optional[BibleIndex] = None) -> Dict[str, int]:
    """
    Verses logged per date.

    Plain sums: re-reading the same passage on one day counts twice.
    """
    index = index or BibleIndex()
    counts: Dict[str, int] = {}
    for e in entries:
        counts[e.date] = counts.get(e.date, 0) + index.count_verses(e.start_verse_id, e.end_verse_id)
    return counts


def date_span(first: str, last: str) -> List[str]:
    """Every ISO date from ``first`` to ``last`` inclusive (empty if reversed)."""
    start = _parse(first)
    end = _parse(last)
    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]


def _reading_days(counts: Dict[str, int], today: str) -> List[str]:
    if not counts:
        return []
    return date_span(min(counts), today)


def compute_reading_stats(counts: Dict[str, int], today: str) -> ReadingStats:
    """
    Streaks and consistency from the first logged date through ``today``.

    The current streak counts back from ``today``; a day without reading
    today ends it at 0.
    """
    days = _reading_days(counts, today)
    if not days:
        return ReadingStats()

    read = [counts.get(d, 0) > 0 for d in days]

    longest = 0
    streak = 0
    for has_reading in read:
        streak = streak + 1 if has_reading else 0
        longest = max(longest, streak)

    current = 0
    for has_reading in reversed(read):
        if not has_reading:
            break
        current += 1

    days_with_reading = sum(read)
    return ReadingStats(
        current_streak=current,
        longest_streak=longest,
        days_with_reading=days_with_reading,
        total_days=len(days),
        consistency=_round(days_with_reading / len(days) * 100),
    )


def weekly_averages(counts: Dict[str, int], today: str) -> List[WeeklyAverage]:
    # Weeks start on Sunday; partial weeks average over the days present.
    weeks: Dict[str, List[int]] = {}
    for d in _reading_days(counts, today):
        day = _parse(d)
        sunday = day - timedelta(days=(day.weekday() + 1) % 7)
        weeks.setdefault(sunday.isoformat(), []).append(counts.get(d, 0))
    return [WeeklyAverage(week, _round(sum(v) / len(v))) for week, v in weeks.items()]


def monthly_totals(counts: Dict[str, int], today: str) -> List[MonthlyTotal]:
    months: Dict[str, int] = {}
    for d in _reading_days(counts, today):
        months[d[:7]] = months.get(d[:7], 0) + counts.get(d, 0)
    return [MonthlyTotal(month, total) for month, total in months.items()]


def _testament(coverage: Coverage, ranges: List[VerseRange], new_testament: bool) -> DivisionProgress:
    books = [b for b in coverage.index.canon.books if b.new_testament == new_testament]
    return DivisionProgress(
        total=sum(b.verse_total for b in books),
        read=sum(coverage.count_unique_book_verses(b.index, ranges) for b in books),
    )


def compute_progress(
    ranges: Iterable[VerseRange],
    coverage: Optional[Coverage] = None,
    daily_goal: int = 86,
    today: Optional[str] = None,
) -> Progress:
    coverage = coverage or Coverage()
    ranges = list(ranges)
    total = coverage.index.total_verse_count()
    read = coverage.count_unique_verses(ranges)
    remaining = total - read
    days_remaining = math.ceil(remaining / daily_goal) if daily_goal > 0 else 0

    forecast = None
    if today is not None and daily_goal > 0:
        forecast = (_parse(today) + timedelta(days=days_remaining)).isoformat()

    return Progress(
        total_verses=total,
        read_verses=read,
        old_testament=_testament(coverage, ranges, new_testament=False),
        new_testament=_testament(coverage, ranges, new_testament=True),
        daily_goal=daily_goal,
        days_remaining=days_remaining,
        forecast_date=forecast,
    )


def daily_goal_progress(entries_today: Iterable[LogEntry], index: Optional[BibleIndex] = None, goal: int = 86) -> float:
    """Percent of the daily goal met by today's entries, capped at 100."""
    if goal <= 0:
        return 0.0
    verses = sum(daily_verse_counts(entries_today, index).values())
    return min(verses / goal * 100, 100.0)


def format_percent(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}%"
