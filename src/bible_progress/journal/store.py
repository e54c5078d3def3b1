from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from bible_progress.core.ranges import VerseRange


logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class LogEntry:
    id: str
    date: str
    start_verse_id: int
    end_verse_id: int
    created_at: str
    updated_at: str

    @classmethod
    def create(cls, date: str, verse_range: VerseRange) -> "LogEntry":
        stamp = _now()
        return cls(
            id=uuid.uuid4().hex,
            date=date,
            start_verse_id=verse_range.start,
            end_verse_id=verse_range.end,
            created_at=stamp,
            updated_at=stamp,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        created = str(data.get("created_at") or "")
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            start_verse_id=int(data["start_verse_id"]),
            end_verse_id=int(data["end_verse_id"]),
            created_at=created,
            updated_at=str(data.get("updated_at") or created),
        )

    @property
    def verse_range(self) -> VerseRange:
        return VerseRange(self.start_verse_id, self.end_verse_id)

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.date, self.start_verse_id, self.end_verse_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _newest_first(entries: Iterable[LogEntry]) -> List[LogEntry]:
    return sorted(entries, key=lambda e: (e.date, e.created_at), reverse=True)


def load_entries(path: Path) -> List[LogEntry]:
    if not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Invalid log format (expected list): {path}")
    return _newest_first(LogEntry.from_dict(row) for row in data)


def save_entries(path: Path, entries: Iterable[LogEntry]) -> None:
    rows = [e.to_dict() for e in _newest_first(entries)]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.debug("Saved %d log entries to %s", len(rows), path)


def add_entry(path: Path, date: str, verse_range: VerseRange) -> LogEntry:
    entry = LogEntry.create(date, verse_range)
    entries = load_entries(path)
    entries.append(entry)
    save_entries(path, entries)
    return entry


def add_entries(path: Path, rows: Iterable[tuple[str, VerseRange]]) -> List[LogEntry]:
    new = [LogEntry.create(date, r) for date, r in rows]
    if not new:
        return []
    entries = load_entries(path)
    entries.extend(new)
    save_entries(path, entries)
    logger.info("Added %d log entries to %s", len(new), path)
    return new


def update_entry(
    path: Path,
    entry_id: str,
    *,
    date: Optional[str] = None,
    verse_range: Optional[VerseRange] = None,
) -> LogEntry:
    entries = load_entries(path)
    for i, e in enumerate(entries):
        if e.id != entry_id:
            continue
        changes: Dict[str, Any] = {"updated_at": _now()}
        if date is not None:
            changes["date"] = date
        if verse_range is not None:
            changes["start_verse_id"] = verse_range.start
            changes["end_verse_id"] = verse_range.end
        entries[i] = replace(e, **changes)
        save_entries(path, entries)
        return entries[i]
    raise KeyError(f"No log entry with id {entry_id!r}")


def delete_entry(path: Path, entry_id: str) -> LogEntry:
    entries = load_entries(path)
    for e in entries:
        if e.id == entry_id:
            save_entries(path, [x for x in entries if x.id != entry_id])
            return e
    raise KeyError(f"No log entry with id {entry_id!r}")


def entries_on(entries: Iterable[LogEntry], date: str) -> List[LogEntry]:
    return [e for e in entries if e.date == date]


def entries_since(entries: Iterable[LogEntry], look_back_date: Optional[str]) -> List[LogEntry]:
    if not look_back_date:
        return list(entries)
    return [e for e in entries if e.date >= look_back_date]


def entry_ranges(entries: Iterable[LogEntry]) -> List[VerseRange]:
    return [e.verse_range for e in entries]
