"""Reindex a labeled square matrix onto a caller-supplied label ordering.

Alignment is total: the result is always ``len(target) x len(target)``.
Cells whose row or column label has no counterpart in the source get the
missing sentinel (NaN for scores, '' for explanations).
"""
from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from dendro_overlap.errors import AlignmentDegradation
from dendro_overlap.labels import build_label_index, normalize_label

logger = logging.getLogger(__name__)

TextMatrix = List[List[str]]
MatrixLike = Union[np.ndarray, Sequence[Sequence[Any]]]


def missing_labels(source_labels: Sequence[str], target_labels: Sequence[str]) -> List[str]:
    """Target labels with no counterpart in the source, in target order."""
    index = build_label_index(source_labels)
    return [label for label in target_labels if normalize_label(label) not in index]


def _resolve(source_labels: Sequence[str], target_labels: Sequence[str]) -> List[Optional[int]]:
    index = build_label_index(source_labels)
    return [index.get(normalize_label(label)) for label in target_labels]


def _cell(source: MatrixLike, row: int, col: int) -> Optional[Any]:
    """Fetch ``source[row][col]`` or None when the source is too small."""
    if isinstance(source, np.ndarray):
        if source.ndim != 2 or row >= source.shape[0] or col >= source.shape[1]:
            return None
        return source[row, col]
    if row >= len(source):
        return None
    values = source[row]
    if values is None or col >= len(values):
        return None
    return values[col]


def align_scores(
    source_labels: Sequence[str],
    source_matrix: MatrixLike,
    target_labels: Sequence[str],
) -> np.ndarray:
    """Numeric alignment; unmatched or non-finite cells are NaN."""
    positions = _resolve(source_labels, target_labels)
    n = len(target_labels)
    aligned = np.full((n, n), np.nan, dtype=np.float64)
    for i, src_row in enumerate(positions):
        if src_row is None:
            continue
        for j, src_col in enumerate(positions):
            if src_col is None:
                continue
            value = _cell(source_matrix, src_row, src_col)
            if value is None:
                continue
            try:
                number = float(value)
            except (TypeError, ValueError):
                continue
            if math.isfinite(number):
                aligned[i, j] = number
    return aligned


def align_explanations(
    source_labels: Sequence[str],
    source_matrix: MatrixLike,
    target_labels: Sequence[str],
) -> TextMatrix:
    """Textual alignment; unmatched cells are ''."""
    positions = _resolve(source_labels, target_labels)
    n = len(target_labels)
    aligned: TextMatrix = [[""] * n for _ in range(n)]
    for i, src_row in enumerate(positions):
        if src_row is None:
            continue
        for j, src_col in enumerate(positions):
            if src_col is None:
                continue
            value = _cell(source_matrix, src_row, src_col)
            if value is not None:
                aligned[i][j] = str(value)
    return aligned


def _is_textual(source_matrix: MatrixLike) -> bool:
    if isinstance(source_matrix, np.ndarray):
        return source_matrix.dtype.kind in ("U", "S", "O") and any(
            isinstance(value, str) for value in source_matrix.ravel()
        )
    for row in source_matrix:
        for value in row:
            return isinstance(value, str)
    return False


def align_by_labels(
    source_labels: Sequence[str],
    source_matrix: MatrixLike,
    target_labels: Sequence[str],
    textual: Optional[bool] = None,
) -> Union[np.ndarray, TextMatrix]:
    """Align a score or explanation matrix to ``target_labels``.

    ``textual`` picks the overload explicitly; when omitted it is inferred
    from the first cell of the source (an empty source aligns as numeric).
    """
    if textual is None:
        textual = _is_textual(source_matrix)
    if textual:
        return align_explanations(source_labels, source_matrix, target_labels)
    return align_scores(source_labels, source_matrix, target_labels)


def report_alignment(
    matrix_name: str,
    source_labels: Sequence[str],
    target_labels: Sequence[str],
) -> AlignmentDegradation:
    """Build the aggregate degradation record for one matrix and log it once."""
    report = AlignmentDegradation(
        matrix_name=matrix_name,
        missing_labels=missing_labels(source_labels, target_labels),
        total_labels=len(target_labels),
    )
    if report.is_degraded:
        logger.warning("Alignment incomplete for %s", report.summary())
    return report
