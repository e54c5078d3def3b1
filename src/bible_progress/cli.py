from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

from tqdm import tqdm

from bible_progress.connectors.bible_apps import BibleApp, BibleVersion, reading_url
from bible_progress.core.coverage import Coverage
from bible_progress.core.ranges import BibleIndex, VerseRange
from bible_progress.core.recommendations import Recommender
from bible_progress.core.reference import ReferenceParser, VerseReferenceError, format_range
from bible_progress.core.segments import Segmenter
from bible_progress.core.statistics import (
    compute_progress,
    compute_reading_stats,
    daily_goal_progress,
    daily_verse_counts,
    format_percent,
    monthly_totals,
    weekly_averages,
)
from bible_progress.data.settings import UserSettings, load_settings, save_settings
from bible_progress.engine.importer import Importer
from bible_progress.journal.store import (
    add_entries,
    add_entry,
    delete_entry,
    entries_on,
    entries_since,
    entry_ranges,
    load_entries,
)
from bible_progress.utils.dates import is_valid_date


logger = logging.getLogger(__name__)

# Smaller imports finish too quickly for a progress bar to be useful.
_PROGRESS_BAR_MIN_LINES = 500


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _settings(args: argparse.Namespace) -> UserSettings:
    return load_settings(Path(args.settings))


def _log_path(args: argparse.Namespace, settings: UserSettings) -> Path:
    return Path(args.log or settings.log_path)


def _today(args: argparse.Namespace) -> str:
    return getattr(args, "today", None) or date.today().isoformat()


def _tracked_entries(args: argparse.Namespace, settings: UserSettings) -> list:
    """Entries on or after the look-back date; these are what count as read."""
    return entries_since(load_entries(_log_path(args, settings)), settings.look_back_date)


def _entry_view(entry, index: BibleIndex) -> dict:
    out = entry.to_dict()
    out["reference"] = format_range(index, entry.verse_range)
    return out


def cmd_parse(args: argparse.Namespace) -> int:
    parser = ReferenceParser()
    out = []
    for text in args.reference:
        r = parser.parse(text)
        if r is None:
            out.append({"input": text, "match": None})
            continue
        out.append(
            {
                "input": text,
                "match": {
                    **r.to_dict(),
                    "reference": parser.format(r),
                    "verse_count": parser.index.count_verses(r.start, r.end),
                },
            }
        )
    _print_json(out)
    return 0


def cmd_log(args: argparse.Namespace) -> int:
    settings = _settings(args)
    parser = ReferenceParser()
    verse_range = parser.parse(args.reference)
    if verse_range is None:
        raise VerseReferenceError(f"Could not parse verse range: {args.reference}", reference=args.reference)
    day = args.date or _today(args)
    if not is_valid_date(day):
        raise ValueError(f"Invalid date format: {day!r} (expected YYYY-MM-DD)")
    entry = add_entry(_log_path(args, settings), day, verse_range)
    print(f"Logged {parser.format(verse_range)} on {entry.date} ({entry.id})")
    return 0


def cmd_entries(args: argparse.Namespace) -> int:
    settings = _settings(args)
    entries = load_entries(_log_path(args, settings))
    if args.date:
        entries = entries_on(entries, args.date)
    if args.since:
        entries = entries_since(entries, args.since)
    index = BibleIndex()
    _print_json([_entry_view(e, index) for e in entries])
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    settings = _settings(args)
    entry = delete_entry(_log_path(args, settings), args.entry_id)
    print(f"Deleted {entry.id} ({format_range(BibleIndex(), entry.verse_range)} on {entry.date})")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log_path = _log_path(args, settings)
    lines = Path(args.file).read_text(encoding="utf-8").splitlines()

    progress = tqdm(
        lines,
        desc="Classifying",
        unit="line",
        disable=len(lines) < _PROGRESS_BAR_MIN_LINES,
    )
    report = Importer().classify(progress, existing=load_entries(log_path))

    imported = 0
    if not args.dry_run:
        imported = len(add_entries(log_path, [(r.date, r.verse_range) for r in report.valid]))

    summary = {
        "imported": imported,
        "skipped": report.duplicate_count,
        "invalid": report.invalid_count,
        "dry_run": bool(args.dry_run),
    }
    if args.show_rows:
        summary["rows"] = [r.to_dict() for r in report.rows]
    else:
        summary["errors"] = [r.to_dict() for r in report.rows if r.error]
    _print_json(summary)
    return 0


def cmd_progress(args: argparse.Namespace) -> int:
    settings = _settings(args)
    ranges = entry_ranges(_tracked_entries(args, settings))
    progress = compute_progress(ranges, Coverage(), settings.daily_verse_goal, _today(args))
    out = progress.to_dict()
    out["percent_display"] = format_percent(progress.percent)
    _print_json(out)
    return 0


def cmd_segments(args: argparse.Namespace) -> int:
    settings = _settings(args)
    ranges = entry_ranges(_tracked_entries(args, settings))
    segmenter = Segmenter()
    index = segmenter.index

    if args.book:
        book_index = index.canon.book_index(args.book)
        if args.chapter:
            segments = segmenter.segment_book_chapter(book_index, args.chapter, ranges)
        else:
            segments = segmenter.segment_book(book_index, ranges)
    else:
        segments = segmenter.segment_bible(ranges)

    _print_json([{**s.to_dict(), "reference": format_range(index, VerseRange(s.start, s.end))} for s in segments])
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    settings = _settings(args)
    entries = _tracked_entries(args, settings)
    recs = Recommender().recommend(entries, entry_ranges(entries), limit=args.limit)
    _print_json([r.to_dict() for r in recs])
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    settings = _settings(args)
    entries = _tracked_entries(args, settings)
    today = _today(args)
    index = BibleIndex()
    counts = daily_verse_counts(entries, index)
    goal = daily_goal_progress(entries_on(entries, today), index, settings.daily_verse_goal)
    _print_json(
        {
            "today": today,
            "daily_goal": settings.daily_verse_goal,
            "today_goal_percent": goal,
            "reading": compute_reading_stats(counts, today).to_dict(),
            "weekly": [w.to_dict() for w in weekly_averages(counts, today)],
            "monthly": [m.to_dict() for m in monthly_totals(counts, today)],
        }
    )
    return 0


def cmd_link(args: argparse.Namespace) -> int:
    settings = _settings(args)
    parser = ReferenceParser()
    verse_range = parser.parse(args.reference)
    if verse_range is None:
        raise VerseReferenceError(f"Could not parse verse range: {args.reference}", reference=args.reference)
    start = parser.index.decode(verse_range.start)
    app = BibleApp(args.app) if args.app else settings.bible_app
    version = BibleVersion(args.version) if args.version else settings.bible_version
    print(reading_url(app, version, start.book_index, start.chapter, parser.canon))
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    path = Path(args.settings)
    settings = load_settings(path)
    changes = {}
    if args.goal is not None:
        changes["daily_verse_goal"] = args.goal
    if args.look_back is not None:
        changes["look_back_date"] = args.look_back or None
    if args.app:
        changes["bible_app"] = args.app
    if args.version:
        changes["bible_version"] = args.version
    if changes:
        settings = UserSettings.from_dict({**settings.to_dict(), **changes})
        save_settings(path, settings)
    _print_json(settings.to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="bible-progress", description="Track Bible reading progress by verse range.")
    p.add_argument("--settings", default="settings.yaml", help="Path to settings.yaml.")
    p.add_argument("--log", default=None, help="Path to the reading log JSON (overrides settings).")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    s_parse = sub.add_parser("parse", help="Parse one or more references.")
    s_parse.add_argument("reference", nargs="+", help="Reference text, e.g. 'Genesis 1:1-10'.")
    s_parse.set_defaults(func=cmd_parse)

    s_log = sub.add_parser("log", help="Log a reading.")
    s_log.add_argument("reference", help="What was read, e.g. 'John 3'.")
    s_log.add_argument("--date", default=None, help="Reading date (YYYY-MM-DD); defaults to today.")
    s_log.set_defaults(func=cmd_log)

    s_entries = sub.add_parser("entries", help="List logged readings, newest first.")
    s_entries.add_argument("--date", default=None, help="Only entries on this date.")
    s_entries.add_argument("--since", default=None, help="Only entries on or after this date.")
    s_entries.set_defaults(func=cmd_entries)

    s_delete = sub.add_parser("delete", help="Delete a logged reading by id.")
    s_delete.add_argument("entry_id", help="Entry id as shown by 'entries'.")
    s_delete.set_defaults(func=cmd_delete)

    s_import = sub.add_parser("import", help="Import 'date,reference' lines from a CSV file.")
    s_import.add_argument("file", help="CSV file to import.")
    s_import.add_argument("--dry-run", action="store_true", help="Classify rows without saving.")
    s_import.add_argument("--show-rows", action="store_true", help="Print every row, not only errors.")
    s_import.set_defaults(func=cmd_import)

    s_progress = sub.add_parser("progress", help="Overall progress and completion forecast.")
    s_progress.add_argument("--today", default=None, help="Override today's date (YYYY-MM-DD).")
    s_progress.set_defaults(func=cmd_progress)

    s_seg = sub.add_parser("segments", help="Read/unread runs for the Bible, a book or a chapter.")
    s_seg.add_argument("--book", default=None, help="Book name or abbreviation.")
    s_seg.add_argument("--chapter", type=int, default=None, help="Chapter within --book.")
    s_seg.set_defaults(func=cmd_segments)

    s_suggest = sub.add_parser("suggest", help="Suggest what to read next.")
    s_suggest.add_argument("--limit", type=int, default=3, help="How many unread gaps to suggest.")
    s_suggest.set_defaults(func=cmd_suggest)

    s_stats = sub.add_parser("stats", help="Streaks, consistency and weekly/monthly totals.")
    s_stats.add_argument("--today", default=None, help="Override today's date (YYYY-MM-DD).")
    s_stats.set_defaults(func=cmd_stats)

    s_link = sub.add_parser("link", help="Print a URL that opens a chapter in a Bible app.")
    s_link.add_argument("reference", help="Reference; its first chapter is linked.")
    s_link.add_argument("--app", choices=[a.value for a in BibleApp], default=None)
    s_link.add_argument("--version", choices=[v.value for v in BibleVersion], default=None)
    s_link.set_defaults(func=cmd_link)

    s_settings = sub.add_parser("settings", help="Show or change settings.")
    s_settings.add_argument("--goal", type=int, default=None, help="Daily verse goal.")
    s_settings.add_argument("--look-back", default=None, help="Look-back date (YYYY-MM-DD); '' clears it.")
    s_settings.add_argument("--app", choices=[a.value for a in BibleApp], default=None)
    s_settings.add_argument("--version", choices=[v.value for v in BibleVersion], default=None)
    s_settings.set_defaults(func=cmd_settings)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd == "segments" and args.chapter is not None and not args.book:
        parser.error("segments: --chapter requires --book")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except VerseReferenceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (KeyError, ValueError) as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        msg = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"error: {msg}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
