"""
Reference text <-> VerseRange.

Parsing tries a fixed table of structural patterns, most specific first,
against the whole (normalized) string. The outcome is one of:

- ``None`` when no pattern matches the text at all,
- ``UnknownBookError`` when the structure matched but the book is unknown,
- ``InvalidRangeError`` when the book is known but the range fails
  validation (missing chapter/verse, reversed order),
- a validated ``VerseRange``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from bible_progress.core.normalizer import Normalizer
from bible_progress.core.ranges import BibleIndex, VerseRange
from bible_progress.data.canon import Book


class VerseReferenceError(ValueError):
    """A reference that has the right shape but cannot be resolved."""

    reason = "invalid reference"

    def __init__(self, message: str, reference: str = "") -> None:
        super().__init__(message)
        self.reference = reference


class UnknownBookError(VerseReferenceError):
    reason = "unknown book"


class InvalidRangeError(VerseReferenceError):
    reason = "invalid range"


@dataclass(frozen=True)
class PartialReference:
    """What a pattern extracted; ``None`` fields are filled from the canon."""

    book: str
    start_chapter: int
    start_verse: Optional[int] = None
    end_chapter: Optional[int] = None
    end_verse: Optional[int] = None


_BOOK = r"(?P<book>(?:\d+\s*)?[\w\s'\-]+?)\.?"
_DASH = r"\s*-+\s*"
_COLON = r"\s*:\s*"


def _num(m: re.Match, group: str) -> int:
    return int(m.group(group))


def _chapter_verse_to_chapter_verse(m: re.Match) -> PartialReference:
    return PartialReference(m.group("book"), _num(m, "c1"), _num(m, "v1"), _num(m, "c2"), _num(m, "v2"))


def _chapter_verse_to_verse(m: re.Match) -> PartialReference:
    return PartialReference(m.group("book"), _num(m, "c1"), _num(m, "v1"), _num(m, "c1"), _num(m, "v2"))


def _chapter_to_chapter(m: re.Match) -> PartialReference:
    return PartialReference(m.group("book"), _num(m, "c1"), 1, _num(m, "c2"), None)


def _chapter_verse(m: re.Match) -> PartialReference:
    return PartialReference(m.group("book"), _num(m, "c1"), _num(m, "v1"), _num(m, "c1"), _num(m, "v1"))


def _chapter(m: re.Match) -> PartialReference:
    return PartialReference(m.group("book"), _num(m, "c1"), 1, _num(m, "c1"), None)


def _book(m: re.Match) -> PartialReference:
    return PartialReference(m.group("book"), 1, 1, None, None)


# Order matters: looser patterns would otherwise swallow longer references.
PATTERNS: Tuple[Tuple[str, re.Pattern, Callable[[re.Match], PartialReference]], ...] = (
    (
        "book_chapter_verse_to_chapter_verse",
        re.compile(rf"{_BOOK}\s+(?P<c1>\d+){_COLON}(?P<v1>\d+){_DASH}(?P<c2>\d+){_COLON}(?P<v2>\d+)"),
        _chapter_verse_to_chapter_verse,
    ),
    (
        "book_chapter_verse_to_verse",
        re.compile(rf"{_BOOK}\s+(?P<c1>\d+){_COLON}(?P<v1>\d+){_DASH}(?P<v2>\d+)"),
        _chapter_verse_to_verse,
    ),
    (
        "book_chapter_to_chapter",
        re.compile(rf"{_BOOK}\s+(?P<c1>\d+){_DASH}(?P<c2>\d+)"),
        _chapter_to_chapter,
    ),
    (
        "book_chapter_verse",
        re.compile(rf"{_BOOK}\s+(?P<c1>\d+){_COLON}(?P<v1>\d+)"),
        _chapter_verse,
    ),
    (
        "book_chapter",
        re.compile(rf"{_BOOK}\s+(?P<c1>\d+)"),
        _chapter,
    ),
    (
        "book",
        re.compile(_BOOK),
        _book,
    ),
)


def match_reference(text: str) -> Optional[PartialReference]:
    for _name, pattern, build in PATTERNS:
        m = pattern.fullmatch(text)
        if m:
            return build(m)
    return None


class ReferenceParser:
    def __init__(self, index: Optional[BibleIndex] = None, normalizer: Optional[Normalizer] = None) -> None:
        self.index = index or BibleIndex()
        self.canon = self.index.canon
        self.normalizer = normalizer or Normalizer()

    def _resolve_book(self, name: str, reference: str) -> Book:
        book = self.canon.find_book(name.strip())
        if book is None:
            raise UnknownBookError(f"Unknown book: {name.strip()}", reference=reference)
        return book

    def parse(self, text: str) -> Optional[VerseRange]:
        reference = self.normalizer.normalize(text)
        partial = match_reference(reference)
        if partial is None:
            return None

        book = self._resolve_book(partial.book, reference)
        end_chapter = partial.end_chapter if partial.end_chapter is not None else book.chapter_count
        end_verse = partial.end_verse
        if end_verse is None:
            end_verse = self.canon.verse_count(book.index, end_chapter)

        verse_range = VerseRange(
            start=self.index.encode(book.index, partial.start_chapter, partial.start_verse or 1),
            end=self.index.encode(book.index, end_chapter, end_verse),
        )
        if not self.index.validate(verse_range):
            raise InvalidRangeError(f"Invalid verse range: {reference}", reference=reference)
        return verse_range

    def format(self, verse_range: VerseRange) -> str:
        return format_range(self.index, verse_range)


def format_range(index: BibleIndex, verse_range: VerseRange) -> str:
    """Shortest readable form of a range; the whole canon formats as ''."""
    if not verse_range.start:
        return ""
    if verse_range.start == index.first_verse() and verse_range.end == index.last_verse():
        return ""

    canon = index.canon
    s = index.decode(verse_range.start)
    e = index.decode(verse_range.end)
    name = canon.book_name(s.book_index)

    if s.book_index != e.book_index:
        end_name = canon.book_name(e.book_index)
        return f"{name} {s.chapter}:{s.verse} - {end_name} {e.chapter}:{e.verse}"

    if verse_range.start == index.first_of_book(s.book_index) and verse_range.end == index.last_of_book(s.book_index):
        return name

    end_chapter_last = canon.verse_count(e.book_index, e.chapter)
    if s.chapter == e.chapter:
        if s.verse == 1 and e.verse == end_chapter_last:
            return f"{name} {s.chapter}"
        if s.verse == e.verse:
            return f"{name} {s.chapter}:{s.verse}"
        return f"{name} {s.chapter}:{s.verse}-{e.verse}"

    if s.verse == 1 and e.verse == end_chapter_last:
        return f"{name} {s.chapter}-{e.chapter}"
    return f"{name} {s.chapter}:{s.verse}-{e.chapter}:{e.verse}"
