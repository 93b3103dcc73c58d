"""Discover where labels live in an authored pairwise CSV grid.

Authored matrices do not always start their labels at column 0: some carry
a blank corner cell, others an extra id column before the row labels.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from dendro_overlap.labels import normalize_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixLayout:
    labels: List[str]  # Header cells from first_data_column onward, trimmed
    row_label_column: int
    first_data_column: int


def _first_data_row(rows: Sequence[Sequence[str]]) -> Optional[Sequence[str]]:
    for row in rows[1:]:
        if any(normalize_label(cell) for cell in row):
            return row
    return None


def _header_position(header: List[str], value: str) -> Optional[int]:
    for idx, cell in enumerate(header):
        if cell == value:
            return idx
    return None


def detect_layout(rows: Sequence[Sequence[str]]) -> MatrixLayout:
    """Locate the row-label column and the first data column of a raw grid."""
    if not rows:
        return MatrixLayout(labels=[], row_label_column=0, first_data_column=0)

    header = [normalize_label(cell) for cell in rows[0]]
    first_data_column = 1 if header and header[0] == "" else 0
    row_label_column = 0

    sample = _first_data_row(rows)
    if sample is not None:
        for col, cell in enumerate(sample):
            value = normalize_label(cell)
            if not value:
                continue
            header_idx = _header_position(header, value)
            if header_idx is not None:
                row_label_column = col
                first_data_column = header_idx
                break
        else:
            logger.debug("No row label matched a header cell; using default layout")

    return MatrixLayout(
        labels=header[first_data_column:],
        row_label_column=row_label_column,
        first_data_column=first_data_column,
    )
