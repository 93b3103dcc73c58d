"""Mean-overlap ranking and per-unit peer lists over an aligned score matrix."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from dendro_overlap.explanation import PairLabels, extract_pair_labels

DEFAULT_RANKING_LIMIT = 10
DEFAULT_RELATED_LIMIT = 5
NO_EXPLANATION = "No explanation available."


@dataclass
class UnitAverage:
    idx: int
    label: str
    average: float
    cluster_id: Optional[int]


@dataclass
class PairScore:
    idx: int
    label: str
    score: float
    cluster_id: Optional[int]


@dataclass
class PairExplanation:
    row_idx: int
    col_idx: int
    row_label: str
    col_label: str
    score: Optional[float]
    explanation: str
    caption: PairLabels


def unit_label(labels: Sequence[str], idx: int) -> str:
    if 0 <= idx < len(labels) and labels[idx]:
        return labels[idx]
    return f"Unit {idx}"


def _effective_size(labels: Sequence[str], scores: np.ndarray) -> int:
    return min(len(labels), scores.shape[0])


def mean_overlap(scores: np.ndarray, idx: int, n: int) -> float:
    """Unweighted mean of finite off-diagonal values in row ``idx`` (0 if none)."""
    row = scores[idx, :n]
    mask = np.isfinite(row)
    mask[idx] = False
    if not mask.any():
        return 0.0
    return float(row[mask].mean())


def rank_by_mean_overlap(
    labels: Sequence[str],
    scores: np.ndarray,
    leaf_clusters: Optional[Dict[int, int]] = None,
    limit: int = DEFAULT_RANKING_LIMIT,
) -> List[UnitAverage]:
    """Units sorted by their mean overlap with every other unit, highest first."""
    clusters = leaf_clusters or {}
    n = _effective_size(labels, scores)
    rows = [
        UnitAverage(
            idx=i,
            label=unit_label(labels, i),
            average=mean_overlap(scores, i, n),
            cluster_id=clusters.get(i),
        )
        for i in range(n)
    ]
    rows.sort(key=lambda item: item.average, reverse=True)
    return rows[:limit]


def top_related(
    idx: int,
    labels: Sequence[str],
    scores: np.ndarray,
    leaf_clusters: Optional[Dict[int, int]] = None,
    limit: int = DEFAULT_RELATED_LIMIT,
) -> List[PairScore]:
    """Peers of unit ``idx`` with the highest finite scores."""
    clusters = leaf_clusters or {}
    n = _effective_size(labels, scores)
    if not 0 <= idx < n:
        return []
    peers = []
    for j in range(n):
        if j == idx:
            continue
        value = float(scores[idx, j])
        if not math.isfinite(value):
            continue
        peers.append(
            PairScore(idx=j, label=unit_label(labels, j), score=value, cluster_id=clusters.get(j))
        )
    peers.sort(key=lambda peer: peer.score, reverse=True)
    return peers[:limit]


def describe_pair(
    row_idx: int,
    col_idx: int,
    labels: Sequence[str],
    scores: Optional[np.ndarray],
    explanations: Optional[List[List[str]]],
    catalog: Optional[Sequence[str]] = None,
) -> PairExplanation:
    """Score, explanation text and caption for one cell."""
    score: Optional[float] = None
    if scores is not None and row_idx < scores.shape[0] and col_idx < scores.shape[1]:
        value = float(scores[row_idx, col_idx])
        score = value if math.isfinite(value) else None

    text = ""
    if explanations is not None and row_idx < len(explanations):
        row = explanations[row_idx]
        if col_idx < len(row):
            text = row[col_idx]
    text = text or NO_EXPLANATION

    row_label = unit_label(labels, row_idx)
    col_label = unit_label(labels, col_idx)
    return PairExplanation(
        row_idx=row_idx,
        col_idx=col_idx,
        row_label=row_label,
        col_label=col_label,
        score=score,
        explanation=text,
        caption=extract_pair_labels(row_label, col_label, text, catalog if catalog is not None else labels),
    )
