from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from bible_progress.core.coverage import Coverage
from bible_progress.core.ranges import VerseRange
from bible_progress.core.reference import format_range
from bible_progress.core.segments import Segmenter
from bible_progress.journal.store import LogEntry


@dataclass(frozen=True)
class Recommendation:
    title: str
    detail: str
    start: int
    end: int

    def to_dict(self) -> dict:
        return {"title": self.title, "detail": self.detail, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class Landmark:
    book_index: int
    chapter: int
    title: str
    detail: str


POPULAR_STARTING_POINTS: tuple[Landmark, ...] = (
    Landmark(1, 1, "Genesis 1", "The beginning"),
    Landmark(40, 1, "Matthew 1", "Start of the New Testament"),
    Landmark(19, 1, "Psalm 1", "The Psalms"),
    Landmark(20, 1, "Proverbs 1", "Wisdom literature"),
    Landmark(43, 1, "John 1", "Gospel of John"),
)


class Recommender:
    def __init__(self, segmenter: Optional[Segmenter] = None) -> None:
        self.segmenter = segmenter or Segmenter()
        self.coverage: Coverage = self.segmenter.coverage
        self.index = self.coverage.index

    def _display(self, start: int, end: int) -> str:
        return format_range(self.index, VerseRange(start, end))

    def continue_reading(self, entries: Sequence[LogEntry], ranges: Sequence[VerseRange]) -> Optional[Recommendation]:
        """Rest of the chapter after the most recently logged reading."""
        if not entries:
            return None
        latest = max(entries, key=lambda e: (e.date, e.created_at))

        next_id = self.index.next_verse(latest.end_verse_id, cross_books=True)
        if not next_id:
            return None

        # Consolidated ranges are ascending, so one pass can hop over consecutive reads.
        for r in self.coverage.consolidate(ranges):
            if r.start <= next_id <= r.end:
                next_id = self.index.next_verse(r.end, cross_books=True)
                if not next_id:
                    return None

        c = self.index.decode(next_id)
        chapter_end = self.index.last_of_chapter(c.book_index, c.chapter)
        return Recommendation(
            title="Pick up where you left off",
            detail=self._display(next_id, chapter_end),
            start=next_id,
            end=chapter_end,
        )

    def unread_gaps(self, ranges: Sequence[VerseRange], limit: int = 3) -> List[Recommendation]:
        """Largest unread stretches, each suggested one chapter at a time."""
        unread = [s for s in self.segmenter.segment_bible(ranges) if not s.read]
        unread.sort(key=lambda s: s.verse_count, reverse=True)

        out = []
        for seg in unread[:limit]:
            start = self.index.decode(seg.start)
            end = self.index.decode(seg.end)
            canon = self.index.canon
            if start.book_index != end.book_index:
                title = f"{canon.book_name(start.book_index)} through {canon.book_name(end.book_index)} is unread"
            elif seg.verse_count == canon.book_verse_count(start.book_index):
                title = f"{canon.book_name(start.book_index)} is unread"
            else:
                title = f"{self._display(seg.start, seg.end)} is unread"

            suggest_end = min(self.index.last_of_chapter(start.book_index, start.chapter), seg.end)
            out.append(
                Recommendation(
                    title=title,
                    detail=self._display(seg.start, suggest_end),
                    start=seg.start,
                    end=suggest_end,
                )
            )
        return out

    def popular_starting_points(self, ranges: Sequence[VerseRange]) -> List[Recommendation]:
        out = []
        for point in POPULAR_STARTING_POINTS:
            chapter_total = self.index.canon.verse_count(point.book_index, point.chapter)
            read = self.coverage.count_unique_chapter_verses(point.book_index, point.chapter, ranges)
            if read >= chapter_total:
                continue
            out.append(
                Recommendation(
                    title=point.title,
                    detail=point.detail,
                    start=self.index.first_of_chapter(point.book_index, point.chapter),
                    end=self.index.last_of_chapter(point.book_index, point.chapter),
                )
            )
        return out

    def recommend(
        self, entries: Sequence[LogEntry], ranges: Sequence[VerseRange], limit: int = 3
    ) -> List[Recommendation]:
        out: List[Recommendation] = []
        picked = self.continue_reading(entries, ranges)
        if picked is not None:
            out.append(picked)
        out.extend(self.unread_gaps(ranges, limit=limit))
        out.extend(self.popular_starting_points(ranges))
        return out
