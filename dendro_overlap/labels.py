"""Label canonicalization shared by the parser, the aligner and the explanation extractor."""
from __future__ import annotations

import re
import unicodedata
from typing import Dict, Iterable, Optional

_QUOTES_RE = re.compile(r"^[\"'`]+|[\"'`]+$")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def normalize_label(value: Optional[str]) -> str:
    """Matching key for matrix labels: surrounding whitespace removed."""
    if value is None:
        return ""
    return str(value).strip()


def strip_diacritics(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def fold_text(value: Optional[str]) -> str:
    """Lowercase, accent-free, alphanumeric-only form used for fuzzy containment.

    >>> fold_text("  Ministerio de Economía y Finanzas! ")
    'ministerio de economia y finanzas'
    """
    if not value:
        return ""
    folded = strip_diacritics(value.lower())
    folded = _NON_ALNUM_RE.sub(" ", folded)
    return _WHITESPACE_RE.sub(" ", folded).strip()


def clean_unit_name(value: str) -> str:
    """Trim, drop wrapping quote characters and collapse inner whitespace."""
    cleaned = _QUOTES_RE.sub("", value.strip())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def build_label_index(labels: Iterable[Optional[str]]) -> Dict[str, int]:
    """Map normalized label -> position.

    Duplicated labels are not an error: the first occurrence wins and later
    ones become unreachable through the index.
    """
    index: Dict[str, int] = {}
    for position, label in enumerate(labels):
        index.setdefault(normalize_label(label), position)
    return index
