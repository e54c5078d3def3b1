from bible_progress.core.ranges import BibleIndex, VerseRange
from bible_progress.core.recommendations import POPULAR_STARTING_POINTS, Recommender
from bible_progress.journal.store import LogEntry


def _id(book: int, chapter: int, verse: int) -> int:
    return BibleIndex().encode(book, chapter, verse)


def _entry(day: str, start: int, end: int, created_at: str = "2024-01-01T00:00:00+00:00") -> LogEntry:
    return LogEntry(
        id=f"{day}-{start}",
        date=day,
        start_verse_id=start,
        end_verse_id=end,
        created_at=created_at,
        updated_at=created_at,
    )


def _ranges(entries: list) -> list:
    return [e.verse_range for e in entries]


def _whole_books_except(skip: int) -> list:
    index = BibleIndex()
    return [
        VerseRange(index.first_of_book(b.index), index.last_of_book(b.index))
        for b in index.canon.books
        if b.index != skip
    ]


def test_continue_reading_suggests_rest_of_chapter() -> None:
    entries = [
        _entry("2024-01-01", _id(1, 1, 1), _id(1, 1, 10)),
        _entry("2024-01-02", _id(43, 3, 1), _id(43, 3, 5)),
    ]
    rec = Recommender().continue_reading(entries, _ranges(entries))
    assert rec is not None
    assert rec.title == "Pick up where you left off"
    assert (rec.start, rec.end) == (_id(43, 3, 6), _id(43, 3, 36))
    assert rec.detail == "John 3:6-36"


def test_continue_reading_skips_already_read_verses() -> None:
    entries = [
        _entry("2024-01-01", _id(1, 1, 11), _id(1, 1, 20)),
        _entry("2024-01-02", _id(1, 1, 1), _id(1, 1, 10)),
    ]
    rec = Recommender().continue_reading(entries, _ranges(entries))
    assert (rec.start, rec.end) == (_id(1, 1, 21), _id(1, 1, 31))


def test_continue_reading_breaks_date_ties_by_creation_time() -> None:
    entries = [
        _entry("2024-01-02", _id(1, 1, 1), _id(1, 1, 3), created_at="2024-01-02T08:00:00+00:00"),
        _entry("2024-01-02", _id(40, 1, 1), _id(40, 1, 3), created_at="2024-01-02T09:00:00+00:00"),
    ]
    rec = Recommender().continue_reading(entries, _ranges(entries))
    assert rec.start == _id(40, 1, 4)


def test_continue_reading_crosses_books_and_stops_at_canon_end() -> None:
    r = Recommender()
    entries = [_entry("2024-01-01", _id(1, 50, 1), _id(1, 50, 26))]
    rec = r.continue_reading(entries, _ranges(entries))
    assert rec.start == _id(2, 1, 1)

    entries = [_entry("2024-01-01", _id(66, 22, 1), _id(66, 22, 21))]
    assert r.continue_reading(entries, _ranges(entries)) is None
    assert r.continue_reading([], []) is None


def test_unread_gaps_prefers_the_largest_books() -> None:
    recs = Recommender().unread_gaps([], limit=3)
    assert [r.title for r in recs] == ["Psalms is unread", "Genesis is unread", "Jeremiah is unread"]
    assert recs[0].detail == "Psalms 1"
    assert (recs[0].start, recs[0].end) == (_id(19, 1, 1), _id(19, 1, 6))


def test_unread_gap_inside_a_book() -> None:
    ranges = _whole_books_except(1) + [
        VerseRange(_id(1, 1, 1), _id(1, 1, 4)),
        VerseRange(_id(1, 1, 11), _id(1, 50, 26)),
    ]
    recs = Recommender().unread_gaps(ranges)
    assert len(recs) == 1
    assert recs[0].title == "Genesis 1:5-10 is unread"
    assert (recs[0].start, recs[0].end) == (_id(1, 1, 5), _id(1, 1, 10))


def test_popular_starting_points_drop_finished_chapters() -> None:
    r = Recommender()
    assert len(r.popular_starting_points([])) == len(POPULAR_STARTING_POINTS)

    recs = r.popular_starting_points([VerseRange(_id(1, 1, 1), _id(1, 1, 31))])
    assert [x.title for x in recs] == ["Matthew 1", "Psalm 1", "Proverbs 1", "John 1"]

    partial = r.popular_starting_points([VerseRange(_id(1, 1, 1), _id(1, 1, 30))])
    assert partial[0].title == "Genesis 1"


def test_recommend_combines_in_order() -> None:
    entries = [_entry("2024-01-01", _id(1, 1, 1), _id(1, 1, 10))]
    recs = Recommender().recommend(entries, _ranges(entries), limit=2)
    assert recs[0].title == "Pick up where you left off"
    assert recs[1].title == "Psalms is unread"
    assert len(recs) == 1 + 2 + len(POPULAR_STARTING_POINTS)
    assert recs[-1].to_dict()["title"] == "John 1"
