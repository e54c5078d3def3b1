from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional
from urllib.parse import quote

from bible_progress.data.canon import Canon


class BibleVersion(str, Enum):
    AMP = "AMP"
    KJV = "KJV"
    NKJV = "NKJV"
    NIV = "NIV"
    ESV = "ESV"
    NASB1995 = "NASB1995"
    NASB2020 = "NASB2020"
    NABRE = "NABRE"
    NLT = "NLT"
    TPT = "TPT"
    MSG = "MSG"


class BibleApp(str, Enum):
    YOUVERSIONAPP = "YOUVERSIONAPP"
    BIBLECOM = "BIBLECOM"
    BLUELETTERBIBLE = "BLUELETTERBIBLE"
    BIBLEGATEWAY = "BIBLEGATEWAY"
    OLIVETREE = "OLIVETREE"


DEFAULT_APP = BibleApp.BIBLEGATEWAY
DEFAULT_VERSION = BibleVersion.NASB2020


VERSION_LABELS: Dict[BibleVersion, str] = {
    BibleVersion.AMP: "Amplified Bible",
    BibleVersion.KJV: "King James Version",
    BibleVersion.NKJV: "New King James Version",
    BibleVersion.NIV: "New International Version",
    BibleVersion.ESV: "English Standard Version",
    BibleVersion.NASB1995: "NASB 1995",
    BibleVersion.NASB2020: "NASB 2020",
    BibleVersion.NABRE: "New American Bible",
    BibleVersion.NLT: "New Living Translation",
    BibleVersion.TPT: "The Passion Translation",
    BibleVersion.MSG: "The Message",
}

APP_LABELS: Dict[BibleApp, str] = {
    BibleApp.YOUVERSIONAPP: "YouVersion App",
    BibleApp.BIBLECOM: "Bible.com",
    BibleApp.BLUELETTERBIBLE: "Blue Letter Bible",
    BibleApp.BIBLEGATEWAY: "Bible Gateway",
    BibleApp.OLIVETREE: "Olive Tree",
}

BIBLE_COM_TRANSLATION_IDS: Dict[BibleVersion, int] = {
    BibleVersion.AMP: 1588,
    BibleVersion.KJV: 1,
    BibleVersion.NKJV: 114,
    BibleVersion.NIV: 111,
    BibleVersion.ESV: 59,
    BibleVersion.NASB1995: 100,
    BibleVersion.NASB2020: 2692,
    BibleVersion.NABRE: 463,
    BibleVersion.NLT: 116,
    BibleVersion.TPT: 1849,
    BibleVersion.MSG: 97,
}

# Blue Letter Bible has no NABRE, TPT or MSG; nearest available text is used.
BLUE_LETTER_BIBLE_VERSIONS: Dict[BibleVersion, str] = {
    BibleVersion.AMP: "amp",
    BibleVersion.KJV: "kjv",
    BibleVersion.NKJV: "nkjv",
    BibleVersion.NIV: "niv",
    BibleVersion.ESV: "esv",
    BibleVersion.NASB1995: "nasb95",
    BibleVersion.NASB2020: "nasb20",
    BibleVersion.NABRE: "nasb20",
    BibleVersion.NLT: "nlt",
    BibleVersion.TPT: "nlt",
    BibleVersion.MSG: "nlt",
}

BIBLE_GATEWAY_VERSIONS: Dict[BibleVersion, str] = {
    BibleVersion.AMP: "AMP",
    BibleVersion.KJV: "KJV",
    BibleVersion.NKJV: "NKJV",
    BibleVersion.NIV: "NIV",
    BibleVersion.ESV: "ESV",
    BibleVersion.NASB1995: "NASB1995",
    BibleVersion.NASB2020: "NASB",
    BibleVersion.NABRE: "NABRE",
    BibleVersion.NLT: "NLT",
    BibleVersion.TPT: "MSG",
    BibleVersion.MSG: "MSG",
}

# Book index -> USFM/OSIS code where the first three letters are wrong.
OSIS_OVERRIDES: Dict[int, str] = {
    7: "JDG",
    9: "1SA",
    10: "2SA",
    11: "1KI",
    12: "2KI",
    13: "1CH",
    14: "2CH",
    22: "SNG",
    26: "EZK",
    29: "JOL",
    34: "NAM",
    41: "MRK",
    43: "JHN",
    46: "1CO",
    47: "2CO",
    50: "PHP",
    52: "1TH",
    53: "2TH",
    54: "1TI",
    55: "2TI",
    57: "PHM",
    59: "JAS",
    60: "1PE",
    61: "2PE",
    62: "1JN",
    63: "2JN",
    64: "3JN",
}

BLUE_LETTER_BIBLE_BOOKS: tuple[str, ...] = (
    "Gen", "Exo", "Lev", "Num", "Deu", "Jos", "Jdg", "Rth",
    "1Sa", "2Sa", "1Ki", "2Ki", "1Ch", "2Ch", "Ezr", "Neh",
    "Est", "Job", "Psa", "Pro", "Ecc", "Sng", "Isa", "Jer",
    "Lam", "Eze", "Dan", "Hos", "Joe", "Amo", "Oba", "Jon",
    "Mic", "Nah", "Hab", "Zep", "Hag", "Zec", "Mal",
    "Mat", "Mar", "Luk", "Jhn", "Act", "Rom", "1Co", "2Co",
    "Gal", "Eph", "Phl", "Col", "1Th", "2Th", "1Ti", "2Ti",
    "Tit", "Phm", "Heb", "Jas", "1Pe", "2Pe", "1Jo", "2Jo",
    "3Jo", "Jde", "Rev",
)

# Characters encodeURI leaves alone.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"


def osis_code(book_index: int, canon: Optional[Canon] = None) -> str:
    if book_index in OSIS_OVERRIDES:
        return OSIS_OVERRIDES[book_index]
    canon = canon or Canon.default()
    return canon.book_name(book_index)[:3].upper()


def _youversion(version: BibleVersion, book_index: int, chapter: int, canon: Canon) -> str:
    return f"youversion://bible?reference={osis_code(book_index, canon)}.{chapter}.{version.value}"


def _bible_com(version: BibleVersion, book_index: int, chapter: int, canon: Canon) -> str:
    translation = BIBLE_COM_TRANSLATION_IDS[version]
    return f"https://www.bible.com/bible/{translation}/{osis_code(book_index, canon)}.{chapter}.{version.value}"


def _blue_letter_bible(version: BibleVersion, book_index: int, chapter: int, canon: Canon) -> str:
    book = BLUE_LETTER_BIBLE_BOOKS[book_index - 1]
    return f"https://www.blueletterbible.org/{BLUE_LETTER_BIBLE_VERSIONS[version]}/{book}/{chapter}/1"


def _bible_gateway(version: BibleVersion, book_index: int, chapter: int, canon: Canon) -> str:
    search = f"{canon.book_name(book_index)} {chapter}"
    url = f"https://www.biblegateway.com/passage/?version={BIBLE_GATEWAY_VERSIONS[version]}&search={search}"
    return quote(url, safe=_URI_SAFE)


def _olive_tree(version: BibleVersion, book_index: int, chapter: int, canon: Canon) -> str:
    return f"olivetree://bible/{book_index}.{chapter}.1"


URL_BUILDERS: Dict[BibleApp, Callable[[BibleVersion, int, int, Canon], str]] = {
    BibleApp.YOUVERSIONAPP: _youversion,
    BibleApp.BIBLECOM: _bible_com,
    BibleApp.BLUELETTERBIBLE: _blue_letter_bible,
    BibleApp.BIBLEGATEWAY: _bible_gateway,
    BibleApp.OLIVETREE: _olive_tree,
}


def reading_url(
    app: BibleApp,
    version: BibleVersion,
    book_index: int,
    chapter: int,
    canon: Optional[Canon] = None,
) -> str:
    """URL that opens ``chapter`` of a book in the chosen app and translation."""
    canon = canon or Canon.default()
    if canon.book(book_index) is None:
        raise ValueError(f"Unknown book index: {book_index}")
    return URL_BUILDERS[BibleApp(app)](BibleVersion(version), book_index, chapter, canon)
