"""Recover which two entities a free-text overlap explanation talks about.

Explanations either carry explicit markers (``UNIDAD 1: <name> | UNIDAD 2:
<name>``) or mention the entities by name somewhere in the prose. Matrix
orientation is not guaranteed to match the prose, so captions use the names
found in the text when there are any.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from dendro_overlap.labels import clean_unit_name, fold_text

MIN_CATALOG_LABEL_LENGTH = 4

_UNIT_1_RE = re.compile(r"\b(?:UNIDAD|UNIT)\s*1\s*:\s*([^\n|.;]+)", re.IGNORECASE)
_UNIT_2_RE = re.compile(r"\b(?:UNIDAD|UNIT)\s*2\s*:\s*([^\n|.;]+)", re.IGNORECASE)


@dataclass(frozen=True)
class ExplanationUnits:
    unit1: str
    unit2: str


@dataclass(frozen=True)
class PairLabels:
    row_label: str
    col_label: str


def extract_units(text: Optional[str]) -> Optional[ExplanationUnits]:
    """Read the two structured unit markers, or None if either is absent."""
    if not text:
        return None
    normalized = text.replace("\r", " ")
    first = _UNIT_1_RE.search(normalized)
    second = _UNIT_2_RE.search(normalized)
    if first is None or second is None:
        return None
    unit1 = clean_unit_name(first.group(1))
    unit2 = clean_unit_name(second.group(1))
    if not unit1 or not unit2:
        return None
    return ExplanationUnits(unit1=unit1, unit2=unit2)


def infer_units_from_catalog(
    text: Optional[str], catalog: Sequence[str]
) -> Optional[ExplanationUnits]:
    """First two distinct catalog labels mentioned in the text, in text order.

    Labels shorter than four folded characters are ignored. Mentions at the
    same offset prefer the longer label.
    """
    folded_text = fold_text(text)
    if not folded_text:
        return None

    mentions = []
    for label in catalog:
        folded_label = fold_text(label)
        if len(folded_label) < MIN_CATALOG_LABEL_LENGTH:
            continue
        offset = folded_text.find(folded_label)
        if offset < 0:
            continue
        mentions.append((offset, -len(folded_label), label))
    mentions.sort(key=lambda item: (item[0], item[1]))

    unique: List[str] = []
    for _, _, label in mentions:
        if label not in unique:
            unique.append(label)
        if len(unique) == 2:
            return ExplanationUnits(unit1=unique[0], unit2=unique[1])
    return None


def extract_pair_labels(
    default_row: str,
    default_col: str,
    explanation: Optional[str],
    catalog: Optional[Sequence[str]] = None,
) -> PairLabels:
    """Caption for one matrix cell; falls back to the defaults, never raises."""
    units = extract_units(explanation)
    if units is None and catalog:
        units = infer_units_from_catalog(explanation, catalog)
    if units is None:
        return PairLabels(row_label=default_row, col_label=default_col)
    return PairLabels(row_label=units.unit1, col_label=units.unit2)
