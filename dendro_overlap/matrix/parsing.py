"""Parse score and explanation CSV matrices into label-indexed grids."""
from __future__ import annotations

import csv
import io
import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TypeVar, Union

import numpy as np

from dendro_overlap.errors import LoadError
from dendro_overlap.labels import normalize_label
from dendro_overlap.matrix.layout import MatrixLayout, detect_layout

logger = logging.getLogger(__name__)

T = TypeVar("T")

TextMatrix = List[List[str]]

# Optional sign, digits with one optional decimal mark, optional exponent
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)(?:[eE][+-]?\d+)?", re.ASCII)


@dataclass
class ParsedMatrix:
    """Square matrix indexed by ``labels`` in both axes."""

    labels: List[str]
    matrix: Union[np.ndarray, TextMatrix]
    layout: MatrixLayout
    aligned_by_order: bool

    @property
    def size(self) -> int:
        return len(self.labels)


def tokenize_csv(text: str, source: Optional[str] = None) -> List[List[str]]:
    """Split CSV text into rows of string cells (standard quoting rules).

    Reader failures (for example a cell over the csv field size limit) are
    raised as ``LoadError`` naming ``source``.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    try:
        rows = list(csv.reader(io.StringIO(text)))
    except csv.Error as exc:
        where = f" in {source}" if source else ""
        raise LoadError(f"Malformed CSV{where}: {exc}", source=source) from exc
    while rows and not any(cell.strip() for cell in rows[-1]):
        rows.pop()
    return rows


def parse_score_cell(value: Optional[str]) -> float:
    """Numeric cell with comma-decimal support. Anything unusable becomes NaN."""
    text = normalize_label(value)
    if not _DECIMAL_RE.fullmatch(text):
        return math.nan
    number = float(text.replace(",", "."))
    return number if math.isfinite(number) else math.nan


def parse_text_cell(value: Optional[str]) -> str:
    return normalize_label(value)


def _rows_aligned_by_order(
    data_rows: Sequence[Sequence[str]], layout: MatrixLayout
) -> bool:
    if len(data_rows) < len(layout.labels):
        return False
    col = layout.row_label_column
    for label, row in zip(layout.labels, data_rows):
        cell = row[col] if col < len(row) else ""
        if normalize_label(cell) != label:
            return False
    return True


def _read_grid(
    rows: Sequence[Sequence[str]],
    parse_cell: Callable[[Optional[str]], T],
    missing: T,
) -> tuple[MatrixLayout, List[List[T]], bool]:
    layout = detect_layout(rows)
    labels = layout.labels
    n = len(labels)
    data_rows = [row for row in rows[1:] if any(normalize_label(cell) for cell in row)]

    def read_row(row: Optional[Sequence[str]]) -> List[T]:
        if row is None:
            return [missing] * n
        values = []
        for j in range(n):
            col = layout.first_data_column + j
            values.append(parse_cell(row[col]) if col < len(row) else missing)
        return values

    aligned = _rows_aligned_by_order(data_rows, layout)
    if aligned:
        grid = [read_row(row) for row in data_rows[:n]]
    else:
        by_label = {}
        for row in data_rows:
            col = layout.row_label_column
            key = normalize_label(row[col]) if col < len(row) else ""
            if key:
                by_label.setdefault(key, row)
        grid = [read_row(by_label.get(label)) for label in labels]
        unmatched = sum(1 for label in labels if label not in by_label)
        if unmatched:
            logger.debug("%d of %d header labels have no matching row", unmatched, n)

    return layout, grid, aligned


def parse_score_rows(rows: Sequence[Sequence[str]]) -> ParsedMatrix:
    layout, grid, aligned = _read_grid(rows, parse_score_cell, math.nan)
    n = len(layout.labels)
    matrix = np.array(grid, dtype=np.float64) if n else np.zeros((0, 0), dtype=np.float64)
    return ParsedMatrix(labels=layout.labels, matrix=matrix, layout=layout, aligned_by_order=aligned)


def parse_explanation_rows(rows: Sequence[Sequence[str]]) -> ParsedMatrix:
    layout, grid, aligned = _read_grid(rows, parse_text_cell, "")
    return ParsedMatrix(labels=layout.labels, matrix=grid, layout=layout, aligned_by_order=aligned)


def parse_score_matrix(raw_text: str, source: Optional[str] = None) -> ParsedMatrix:
    """Parse a numeric overlap-score CSV. Bad cells become NaN."""
    parsed = parse_score_rows(tokenize_csv(raw_text, source=source))
    logger.info(
        "Parsed score matrix: %d labels (aligned_by_order=%s)", parsed.size, parsed.aligned_by_order
    )
    return parsed


def parse_explanation_matrix(raw_text: str, source: Optional[str] = None) -> ParsedMatrix:
    """Parse a free-text explanation CSV. Missing cells become ''."""
    parsed = parse_explanation_rows(tokenize_csv(raw_text, source=source))
    logger.info(
        "Parsed explanation matrix: %d labels (aligned_by_order=%s)",
        parsed.size,
        parsed.aligned_by_order,
    )
    return parsed
