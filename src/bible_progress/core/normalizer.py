from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


_DASHES = {
    "‐": "-",
    "‑": "-",
    "‒": "-",
    "–": "-",
    "—": "-",
    "―": "-",
    "−": "-",
}

_SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
}


@dataclass(frozen=True)
class NormalizationConfig:
    standardize_dashes: bool = True
    standardize_quotes: bool = True
    strip_quotes: bool = True
    collapse_whitespace: bool = True


class Normalizer:
    """Clean up a typed or imported reference before pattern matching."""

    def __init__(self, cfg: Optional[NormalizationConfig] = None) -> None:
        self.cfg = cfg or NormalizationConfig()

    def normalize(self, text: str) -> str:
        out = text
        if self.cfg.standardize_dashes:
            out = "".join(_DASHES.get(ch, ch) for ch in out)
        if self.cfg.standardize_quotes:
            out = "".join(_SMART_QUOTES.get(ch, ch) for ch in out)
        if self.cfg.strip_quotes:
            out = out.strip().strip("\"“”")
        if self.cfg.collapse_whitespace:
            out = re.sub(r"\s+", " ", out).strip()
        return out
