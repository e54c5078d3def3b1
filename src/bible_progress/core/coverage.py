"""
Multi-range operations: sorting, consolidation, unique counting, filtering,
cropping and gap computation.

Inputs are never modified; every operation returns new ``VerseRange`` values.
"""
from __future__ import annotations

from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from bible_progress.core.ranges import BibleIndex, VerseRange


def compare_ranges(a: VerseRange, b: VerseRange) -> int:
    """Order two ranges by start verse only."""
    if a.start < b.start:
        return -1
    if a.start > b.start:
        return 1
    return 0


def sort_ranges(ranges: Iterable[VerseRange]) -> List[VerseRange]:
    return sorted(ranges, key=cmp_to_key(compare_ranges))


class Coverage:
    def __init__(self, index: Optional[BibleIndex] = None) -> None:
        self.index = index or BibleIndex()

    def _book_of(self, verse_id: int) -> int:
        return self.index.decode(verse_id).book_index

    def group_by_book(self, ranges: Iterable[VerseRange]) -> Dict[int, List[VerseRange]]:
        """Sorted ranges keyed by the book of their start, in book order."""
        groups: Dict[int, List[VerseRange]] = {}
        for r in sort_ranges(ranges):
            groups.setdefault(self._book_of(r.start), []).append(r)
        return dict(sorted(groups.items()))

    def consolidate(self, ranges: Iterable[VerseRange]) -> List[VerseRange]:
        """
        Merge overlapping or directly adjacent ranges.

        Returns the minimal set of disjoint, non-touching ranges covering the
        same verses, ordered by book then start.
        """
        result: List[VerseRange] = []
        for book_ranges in self.group_by_book(ranges).values():
            holding: Optional[VerseRange] = None
            for r in book_ranges:
                if holding is None:
                    holding = r
                    continue
                # At the end of a book nothing follows; later ranges are contained.
                reach = self.index.next_verse(holding.end) or holding.end
                if r.start <= reach:
                    if r.end > holding.end:
                        holding = VerseRange(holding.start, r.end)
                else:
                    result.append(holding)
                    holding = r
            if holding is not None:
                result.append(holding)
        return result

    def count_unique_verses(self, ranges: Iterable[VerseRange]) -> int:
        # Overlap-only sweep; touching ranges stay separate without changing the sum.
        total = 0
        last: Optional[VerseRange] = None
        for r in sort_ranges(ranges):
            if last is None:
                last = r
            elif r.start <= last.end:
                if r.end > last.end:
                    last = VerseRange(last.start, r.end)
            else:
                total += self.index.count_verses(last.start, last.end)
                last = r
        if last is not None:
            total += self.index.count_verses(last.start, last.end)
        return total

    def count_unique_book_verses(self, book_index: int, ranges: Iterable[VerseRange]) -> int:
        return self.count_unique_verses(self.filter_by_book(book_index, ranges))

    def count_unique_chapter_verses(self, book_index: int, chapter: int, ranges: Iterable[VerseRange]) -> int:
        filtered = self.filter_by_book_chapter(book_index, chapter, ranges)
        cropped = [self.crop_to_book_chapter(book_index, chapter, r) for r in filtered]
        return self.count_unique_verses(cropped)

    def filter_by_book(self, book_index: int, ranges: Iterable[VerseRange]) -> List[VerseRange]:
        return [r for r in ranges if self._book_of(r.start) == book_index]

    def filter_by_book_chapter(self, book_index: int, chapter: int, ranges: Iterable[VerseRange]) -> List[VerseRange]:
        out = []
        for r in ranges:
            s = self.index.decode(r.start)
            e = self.index.decode(r.end)
            if s.book_index == book_index and s.chapter <= chapter <= e.chapter:
                out.append(r)
        return out

    def crop_to_book_chapter(self, book_index: int, chapter: int, verse_range: VerseRange) -> VerseRange:
        s = self.index.decode(verse_range.start)
        e = self.index.decode(verse_range.end)
        start = verse_range.start
        end = verse_range.end
        if s.chapter < chapter:
            start = self.index.first_of_chapter(book_index, chapter)
        if e.chapter > chapter:
            end = self.index.last_of_chapter(book_index, chapter)
        return VerseRange(start, end)

    def split_by_book(self, start: int, end: int) -> List[VerseRange]:
        """Cut the closed span [start, end] into single-book ranges."""
        if start > end:
            raise ValueError("start must not be after end")
        first_book = self._book_of(start)
        last_book = self._book_of(end)
        if first_book == last_book:
            return [VerseRange(start, end)]
        out = [VerseRange(start, self.index.last_of_book(first_book))]
        for book_index in range(first_book + 1, last_book):
            out.append(VerseRange(self.index.first_of_book(book_index), self.index.last_of_book(book_index)))
        out.append(VerseRange(self.index.first_of_book(last_book), end))
        return out

    def gaps_between(self, start: int, end: int) -> List[VerseRange]:
        """
        Ranges covering every verse strictly between two ids.

        Raises ``ValueError`` unless ``start < end``. Adjacent ids give an
        empty list.
        """
        if start >= end:
            raise ValueError("start must be before end")
        first = self.index.next_verse(start, cross_books=True)
        if not first or first >= end:
            return []
        last = self.index.previous_verse(end, cross_books=True)
        return self.split_by_book(first, last)
