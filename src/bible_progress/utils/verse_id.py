from __future__ import annotations

from dataclasses import dataclass


NONE_VERSE_ID = 0

_OFFSET = 100_000_000
_BOOK = 1_000_000
_CHAPTER = 1_000


@dataclass(frozen=True)
class VerseCoord:
    book_index: int
    chapter: int
    verse: int


class VerseIdCodec:
    """
    Canonical ID encoding:
      id = 100_000_000 + (book_index * 1_000_000) + (chapter * 1_000) + verse

    The offset keeps every real id non-zero so 0 can stand for "no verse".
    Fields are not validated; 0 is allowed for unset chapter/verse.
    """

    def encode(self, book_index: int, chapter: int = 0, verse: int = 0) -> int:
        return _OFFSET + (book_index * _BOOK) + (chapter * _CHAPTER) + verse

    def decode(self, verse_id: int) -> VerseCoord:
        rem = verse_id - _OFFSET
        book_index = rem // _BOOK
        rem -= book_index * _BOOK
        chapter = rem // _CHAPTER
        verse = rem - chapter * _CHAPTER
        return VerseCoord(book_index=book_index, chapter=chapter, verse=verse)
