from __future__ import annotations

import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional


DEFAULT_CANON_PATH = Path(__file__).with_name("canon.json")

_MAX_FIELD = 999


def _name_key(name: str) -> str:
    return re.sub(r"\s+", "", name).casefold()


@dataclass(frozen=True)
class Book:
    index: int
    name: str
    aliases: tuple[str, ...]
    verse_counts: tuple[int, ...]
    new_testament: bool = False

    @property
    def chapter_count(self) -> int:
        return len(self.verse_counts)

    @property
    def verse_total(self) -> int:
        return sum(self.verse_counts)


class Canon:
    """
    Read-only book/chapter/verse table.

    Build it once (``Canon.default()`` or ``Canon.from_path``) and hand it to
    the engine objects; nothing mutates it afterwards.
    """

    def __init__(self, books: list[Book]) -> None:
        ordered = sorted(books, key=lambda b: b.index)
        for expected, book in enumerate(ordered, start=1):
            if book.index != expected:
                raise ValueError(f"Book indexes must be contiguous from 1; got {book.index} at {expected}")
            if not book.verse_counts:
                raise ValueError(f"{book.name} has no chapters")
            if book.chapter_count > _MAX_FIELD:
                raise ValueError(f"{book.name} has more than {_MAX_FIELD} chapters")
            for chapter, count in enumerate(book.verse_counts, start=1):
                if not 1 <= count <= _MAX_FIELD:
                    raise ValueError(f"{book.name} {chapter} has an invalid verse count: {count}")
        self._books: tuple[Book, ...] = tuple(ordered)
        self._name_to_index: dict[str, int] = {}
        for b in self._books:
            self._name_to_index[_name_key(b.name)] = b.index
            for a in b.aliases:
                self._name_to_index[_name_key(a)] = b.index
        self._total = sum(b.verse_total for b in self._books)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Canon":
        books = [
            Book(
                index=int(b["index"]),
                name=str(b["name"]),
                aliases=tuple(str(x) for x in b.get("aliases", [])),
                verse_counts=tuple(int(x) for x in b["verses"]),
                new_testament=str(b.get("testament", "OT")).upper() == "NT",
            )
            for b in data["books"]
        ]
        return cls(books=books)

    @classmethod
    def from_path(cls, path: str | Path) -> "Canon":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)

    @classmethod
    @lru_cache(maxsize=1)
    def default(cls) -> "Canon":
        return cls.from_path(DEFAULT_CANON_PATH)

    @property
    def books(self) -> tuple[Book, ...]:
        return self._books

    @property
    def book_count(self) -> int:
        return len(self._books)

    def book(self, book_index: int) -> Optional[Book]:
        if 1 <= book_index <= len(self._books):
            return self._books[book_index - 1]
        return None

    def book_name(self, book_index: int) -> str:
        b = self.book(book_index)
        return b.name if b else ""

    def chapter_count(self, book_index: int) -> int:
        b = self.book(book_index)
        return b.chapter_count if b else 0

    def verse_count(self, book_index: int, chapter: int) -> int:
        # Missing books/chapters count as 0 verses.
        b = self.book(book_index)
        if b is None or not 1 <= chapter <= b.chapter_count:
            return 0
        return b.verse_counts[chapter - 1]

    def book_verse_count(self, book_index: int) -> int:
        b = self.book(book_index)
        return b.verse_total if b else 0

    def total_verse_count(self) -> int:
        return self._total

    def find_book(self, book_name: str) -> Optional[Book]:
        index = self._name_to_index.get(_name_key(book_name))
        return self.book(index) if index is not None else None

    def book_index(self, book_name: str) -> int:
        key = _name_key(book_name)
        if key in self._name_to_index:
            return self._name_to_index[key]
        raise KeyError(f"Unknown book name: {book_name!r}")
