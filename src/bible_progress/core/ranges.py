from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bible_progress.data.canon import Canon
from bible_progress.utils.verse_id import NONE_VERSE_ID, VerseCoord, VerseIdCodec


@dataclass(frozen=True)
class VerseRange:
    """Closed interval of verse ids; valid ranges stay inside one book."""

    start: int
    end: int

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


class BibleIndex:
    """Single-verse and single-range queries over a canon."""

    def __init__(self, canon: Optional[Canon] = None, codec: Optional[VerseIdCodec] = None) -> None:
        self.canon = canon or Canon.default()
        self.codec = codec or VerseIdCodec()

    def encode(self, book_index: int, chapter: int = 0, verse: int = 0) -> int:
        return self.codec.encode(book_index, chapter, verse)

    def decode(self, verse_id: int) -> VerseCoord:
        return self.codec.decode(verse_id)

    def exists(self, verse_id: int) -> bool:
        c = self.decode(verse_id)
        if c.chapter < 1 or c.verse < 1:
            return False
        return c.verse <= self.canon.verse_count(c.book_index, c.chapter)

    def validate(self, verse_range: VerseRange) -> bool:
        if not self.exists(verse_range.start) or not self.exists(verse_range.end):
            return False
        if verse_range.start > verse_range.end:
            return False
        return self.decode(verse_range.start).book_index == self.decode(verse_range.end).book_index

    def book_verse_count(self, book_index: int) -> int:
        return self.canon.book_verse_count(book_index)

    def total_verse_count(self) -> int:
        return self.canon.total_verse_count()

    def count_verses(self, start: int, end: int) -> int:
        s = self.decode(start)
        e = self.decode(end)

        if s.book_index != e.book_index:
            total = self.count_verses(start, self.last_of_book(s.book_index))
            for book_index in range(s.book_index + 1, e.book_index):
                total += self.canon.book_verse_count(book_index)
            total += self.count_verses(self.first_of_book(e.book_index), end)
            return total

        if s.chapter == e.chapter:
            return e.verse - s.verse + 1

        total = 0
        for chapter in range(s.chapter, e.chapter + 1):
            count = self.canon.verse_count(s.book_index, chapter)
            if chapter == s.chapter:
                total += count - (s.verse - 1)
            elif chapter == e.chapter:
                total += e.verse
            else:
                total += count
        return total

    def next_verse(self, verse_id: int, cross_books: bool = False) -> int:
        c = self.decode(verse_id)
        book, chapter, verse = c.book_index, c.chapter, c.verse
        if verse < self.canon.verse_count(book, chapter):
            verse += 1
        elif chapter < self.canon.chapter_count(book):
            chapter += 1
            verse = 1
        elif cross_books and 1 <= book < self.canon.book_count:
            book += 1
            chapter = 1
            verse = 1
        else:
            return NONE_VERSE_ID
        return self.encode(book, chapter, verse)

    def previous_verse(self, verse_id: int, cross_books: bool = False) -> int:
        c = self.decode(verse_id)
        book, chapter, verse = c.book_index, c.chapter, c.verse
        if verse > 1:
            verse -= 1
        elif chapter > 1:
            chapter -= 1
            verse = self.canon.verse_count(book, chapter)
        elif cross_books and 1 < book <= self.canon.book_count:
            book -= 1
            chapter = self.canon.chapter_count(book)
            verse = self.canon.verse_count(book, chapter)
        else:
            return NONE_VERSE_ID
        return self.encode(book, chapter, verse)

    def first_of_book(self, book_index: int) -> int:
        return self.encode(book_index, 1, 1)

    def last_of_book(self, book_index: int) -> int:
        return self.last_of_chapter(book_index, self.canon.chapter_count(book_index))

    def first_of_chapter(self, book_index: int, chapter: int) -> int:
        return self.encode(book_index, chapter, 1)

    def last_of_chapter(self, book_index: int, chapter: int) -> int:
        return self.encode(book_index, chapter, self.canon.verse_count(book_index, chapter))

    def first_verse(self) -> int:
        return self.first_of_book(1)

    def last_verse(self) -> int:
        return self.last_of_book(self.canon.book_count)
