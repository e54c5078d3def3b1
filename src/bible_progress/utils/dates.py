from __future__ import annotations

import re
from datetime import date


_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_valid_date(text: str) -> bool:
    """True for a real calendar date written exactly as YYYY-MM-DD."""
    if not _DATE_RE.fullmatch(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True
