import json

import pytest

from bible_progress.cli import main


def _run(capsys, tmp_path, *args: str) -> tuple:
    argv = ["--settings", str(tmp_path / "settings.yaml"), "--log", str(tmp_path / "log.json"), *args]
    code = main(argv)
    out, err = capsys.readouterr()
    return code, out, err


def test_parse_prints_json(capsys, tmp_path) -> None:
    code, out, _ = _run(capsys, tmp_path, "parse", "Psalm 23", "Genesis 1:")
    assert code == 0
    rows = json.loads(out)
    assert rows[0]["match"]["reference"] == "Psalms 23"
    assert rows[0]["match"]["verse_count"] == 6
    assert rows[1]["match"] is None


def test_unknown_book_is_a_user_error(capsys, tmp_path) -> None:
    code, _, err = _run(capsys, tmp_path, "parse", "Nonexistent 1:1")
    assert code == 1
    assert err.startswith("error: Unknown book")


def test_log_entries_delete(capsys, tmp_path) -> None:
    code, out, _ = _run(capsys, tmp_path, "log", "John 3", "--date", "2024-01-01")
    assert code == 0
    assert out.startswith("Logged John 3 on 2024-01-01")

    _, out, _ = _run(capsys, tmp_path, "entries")
    entries = json.loads(out)
    assert [e["reference"] for e in entries] == ["John 3"]

    code, out, _ = _run(capsys, tmp_path, "delete", entries[0]["id"])
    assert code == 0
    assert out.startswith("Deleted")

    code, _, err = _run(capsys, tmp_path, "delete", entries[0]["id"])
    assert code == 1
    assert "No log entry" in err


def test_import_then_progress(capsys, tmp_path) -> None:
    csv = tmp_path / "history.csv"
    csv.write_text("2024-01-01,Genesis 1\n2024-01-01,Genesis 1\n2024-01-02,Nope 3\n\n", encoding="utf-8")
    code, out, _ = _run(capsys, tmp_path, "import", str(csv))
    assert code == 0
    summary = json.loads(out)
    assert (summary["imported"], summary["skipped"], summary["invalid"]) == (1, 1, 1)

    _, out, _ = _run(capsys, tmp_path, "progress", "--today", "2024-01-02")
    progress = json.loads(out)
    assert progress["read_verses"] == 31
    assert progress["old_testament"]["read"] == 31


def test_import_dry_run_saves_nothing(capsys, tmp_path) -> None:
    csv = tmp_path / "history.csv"
    csv.write_text("2024-01-01,Genesis 1\n", encoding="utf-8")
    _run(capsys, tmp_path, "import", str(csv), "--dry-run")
    assert not (tmp_path / "log.json").exists()


def test_segments_suggest_stats_link(capsys, tmp_path) -> None:
    _run(capsys, tmp_path, "log", "Obadiah 1:1-10", "--date", "2024-01-01")

    _, out, _ = _run(capsys, tmp_path, "segments", "--book", "Obadiah")
    segments = json.loads(out)
    assert [(s["reference"], s["read"]) for s in segments] == [("Obadiah 1:1-10", True), ("Obadiah 1:11-21", False)]

    _, out, _ = _run(capsys, tmp_path, "suggest", "--limit", "1")
    assert json.loads(out)[0]["detail"] == "Obadiah 1:11-21"

    _, out, _ = _run(capsys, tmp_path, "stats", "--today", "2024-01-01")
    stats = json.loads(out)
    assert stats["reading"]["current_streak"] == 1

    _, out, _ = _run(capsys, tmp_path, "link", "Romans 8", "--app", "BIBLECOM", "--version", "KJV")
    assert out.strip() == "https://www.bible.com/bible/1/ROM.8.KJV"


def test_settings_command_saves_changes(capsys, tmp_path) -> None:
    code, out, _ = _run(capsys, tmp_path, "settings", "--goal", "120", "--app", "OLIVETREE")
    assert code == 0
    assert json.loads(out)["daily_verse_goal"] == 120

    _, out, _ = _run(capsys, tmp_path, "settings")
    shown = json.loads(out)
    assert shown["bible_app"] == "OLIVETREE"

    code, _, err = _run(capsys, tmp_path, "settings", "--goal", "0")
    assert code == 1
    assert err.startswith("error:")


def test_log_rejects_malformed_date(capsys, tmp_path) -> None:
    for bad in ("yesterday", "2024-1-5", "2024-02-30"):
        code, _, err = _run(capsys, tmp_path, "log", "John 3", "--date", bad)
        assert code == 1
        assert err.startswith("error: Invalid date format")
    assert not (tmp_path / "log.json").exists()

    _run(capsys, tmp_path, "log", "John 3", "--date", "2024-01-01")
    code, out, _ = _run(capsys, tmp_path, "stats", "--today", "2024-01-02")
    assert code == 0
    assert json.loads(out)["reading"]["longest_streak"] == 1


def test_segments_chapter_requires_book(capsys, tmp_path) -> None:
    with pytest.raises(SystemExit) as exc:
        _run(capsys, tmp_path, "segments", "--chapter", "3")
    assert exc.value.code == 2
    assert "--chapter requires --book" in capsys.readouterr().err
