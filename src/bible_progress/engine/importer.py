from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from bible_progress.core.ranges import VerseRange
from bible_progress.core.reference import InvalidRangeError, ReferenceParser, UnknownBookError
from bible_progress.journal.store import LogEntry
from bible_progress.utils.dates import is_valid_date


logger = logging.getLogger(__name__)

VALID = "valid"
DUPLICATE = "duplicate"
INVALID = "invalid"


@dataclass(frozen=True)
class ImportRow:
    line: int
    raw: str
    status: str
    date: Optional[str] = None
    reference: Optional[str] = None
    start_verse_id: Optional[int] = None
    end_verse_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def verse_range(self) -> Optional[VerseRange]:
        if self.start_verse_id is None or self.end_verse_id is None:
            return None
        return VerseRange(self.start_verse_id, self.end_verse_id)

    def to_dict(self) -> dict:
        return {
            "line": self.line,
            "raw": self.raw,
            "status": self.status,
            "date": self.date,
            "reference": self.reference,
            "start_verse_id": self.start_verse_id,
            "end_verse_id": self.end_verse_id,
            "error": self.error,
        }


@dataclass(frozen=True)
class ImportReport:
    rows: Tuple[ImportRow, ...]

    def _count(self, status: str) -> int:
        return sum(1 for r in self.rows if r.status == status)

    @property
    def valid(self) -> List[ImportRow]:
        return [r for r in self.rows if r.status == VALID]

    @property
    def valid_count(self) -> int:
        return self._count(VALID)

    @property
    def duplicate_count(self) -> int:
        return self._count(DUPLICATE)

    @property
    def invalid_count(self) -> int:
        return self._count(INVALID)

    def to_dict(self) -> dict:
        return {
            "total": len(self.rows),
            "valid": self.valid_count,
            "duplicate": self.duplicate_count,
            "invalid": self.invalid_count,
            "rows": [r.to_dict() for r in self.rows],
        }


def split_line(line: str) -> Tuple[str, str]:
    """``date,reference`` split on the first comma; references may contain commas."""
    head, sep, tail = line.partition(",")
    if not sep:
        return head.strip(), ""
    return head.strip(), tail.strip()


class Importer:
    """
    Classify ``date,reference`` lines against an existing log.

    Nothing is written here; callers persist ``report.valid`` themselves.
    """

    def __init__(self, parser: Optional[ReferenceParser] = None) -> None:
        self.parser = parser or ReferenceParser()

    def classify(self, lines: Iterable[str], existing: Iterable[LogEntry] = ()) -> ImportReport:
        seen: Set[Tuple[str, int, int]] = {e.key for e in existing}
        rows: List[ImportRow] = []

        # Line numbers count non-blank lines only.
        number = 0
        for line in lines:
            if not line.strip():
                continue
            number += 1
            row = self._classify_line(number, line.rstrip("\r\n"), seen)
            if row.status == VALID:
                seen.add((row.date, row.start_verse_id, row.end_verse_id))
            rows.append(row)

        report = ImportReport(rows=tuple(rows))
        logger.info(
            "Classified %d rows: %d valid, %d duplicate, %d invalid",
            len(rows),
            report.valid_count,
            report.duplicate_count,
            report.invalid_count,
        )
        return report

    def _classify_line(self, number: int, line: str, seen: Set[Tuple[str, int, int]]) -> ImportRow:
        day, reference = split_line(line)
        raw = f"{day},{reference}" if reference else day

        if not reference:
            return ImportRow(number, raw, INVALID, error="Missing verse range")
        if not is_valid_date(day):
            return ImportRow(number, raw, INVALID, reference=reference, error="Invalid date format")

        try:
            verse_range = self.parser.parse(reference)
        except UnknownBookError as e:
            return ImportRow(number, raw, INVALID, date=day, reference=reference, error=str(e))
        except InvalidRangeError:
            return ImportRow(number, raw, INVALID, date=day, reference=reference, error="Invalid verse range")

        if verse_range is None:
            return ImportRow(number, raw, INVALID, date=day, reference=reference, error="Could not parse verse range")

        status = DUPLICATE if (day, verse_range.start, verse_range.end) in seen else VALID
        logger.debug("Line %d: %s %s", number, status, reference)
        return ImportRow(
            number,
            raw,
            status,
            date=day,
            reference=reference,
            start_verse_id=verse_range.start,
            end_verse_id=verse_range.end,
        )
