from bible_progress.data.canon import Canon
from bible_progress.utils.verse_id import NONE_VERSE_ID, VerseCoord, VerseIdCodec


def test_encode_decode_roundtrip() -> None:
    codec = VerseIdCodec()
    vid = codec.encode(book_index=43, chapter=3, verse=16)
    assert vid == 143003016
    coord = codec.decode(vid)
    assert coord.book_index == 43
    assert coord.chapter == 3
    assert coord.verse == 16


def test_encode_defaults_leave_fields_unset() -> None:
    codec = VerseIdCodec()
    assert codec.encode(1) == 101000000
    assert codec.encode(66, 22) == 166022000
    assert codec.decode(101000000).chapter == 0


def test_ids_are_never_the_none_sentinel() -> None:
    codec = VerseIdCodec()
    assert codec.encode(1, 1, 1) != NONE_VERSE_ID
    assert codec.encode(1, 1, 1) < codec.encode(1, 1, 2) < codec.encode(1, 2, 1) < codec.encode(2, 1, 1)


def test_every_canon_verse_roundtrips() -> None:
    codec = VerseIdCodec()
    seen = set()
    for book in Canon.default().books:
        for chapter, verses in enumerate(book.verse_counts, start=1):
            for verse in range(1, verses + 1):
                vid = codec.encode(book.index, chapter, verse)
                assert codec.decode(vid) == VerseCoord(book.index, chapter, verse)
                seen.add(vid)
    assert len(seen) == 31102
