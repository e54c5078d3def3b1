from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from bible_progress.core.coverage import Coverage
from bible_progress.core.ranges import VerseRange


@dataclass(frozen=True)
class Segment:
    start: int
    end: int
    read: bool
    verse_count: int

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "read": self.read,
            "verse_count": self.verse_count,
        }


class Segmenter:
    """Partition a verse window into alternating read/unread runs."""

    def __init__(self, coverage: Optional[Coverage] = None) -> None:
        self.coverage = coverage or Coverage()
        self.index = self.coverage.index

    def _make(self, start: int, end: int, read: bool) -> Segment:
        return Segment(start=start, end=end, read=read, verse_count=self.index.count_verses(start, end))

    def segment(self, window_start: int, window_end: int, ranges: Iterable[VerseRange]) -> List[Segment]:
        if window_start > window_end:
            raise ValueError("window_start must not be after window_end")

        inside = [r for r in ranges if r.end >= window_start and r.start <= window_end]
        clipped = [
            VerseRange(max(r.start, window_start), min(r.end, window_end))
            for r in self.coverage.consolidate(inside)
        ]
        if not clipped:
            return [self._make(window_start, window_end, False)]

        segments: List[Segment] = []
        first = clipped[0]
        if first.start != window_start:
            before = self.index.previous_verse(first.start, cross_books=True)
            segments.append(self._make(window_start, before, False))

        previous: Optional[VerseRange] = None
        for r in clipped:
            if previous is not None:
                for gap in self.coverage.gaps_between(previous.end, r.start):
                    segments.append(self._make(gap.start, gap.end, False))
            segments.append(self._make(r.start, r.end, True))
            previous = r

        last = clipped[-1]
        if last.end != window_end:
            after = self.index.next_verse(last.end, cross_books=True)
            segments.append(self._make(after, window_end, False))
        return segments

    def segment_bible(self, ranges: Iterable[VerseRange]) -> List[Segment]:
        by_book = self.coverage.group_by_book(self.coverage.consolidate(ranges))
        segments: List[Segment] = []
        for book in self.index.canon.books:
            segments.extend(
                self.segment(
                    self.index.first_of_book(book.index),
                    self.index.last_of_book(book.index),
                    by_book.get(book.index, []),
                )
            )
        return segments

    def segment_book(self, book_index: int, ranges: Iterable[VerseRange]) -> List[Segment]:
        return self.segment(
            self.index.first_of_book(book_index),
            self.index.last_of_book(book_index),
            self.coverage.filter_by_book(book_index, ranges),
        )

    def segment_book_chapter(self, book_index: int, chapter: int, ranges: Iterable[VerseRange]) -> List[Segment]:
        filtered = self.coverage.filter_by_book_chapter(book_index, chapter, ranges)
        cropped = [self.coverage.crop_to_book_chapter(book_index, chapter, r) for r in filtered]
        return self.segment(
            self.index.first_of_chapter(book_index, chapter),
            self.index.last_of_chapter(book_index, chapter),
            cropped,
        )
