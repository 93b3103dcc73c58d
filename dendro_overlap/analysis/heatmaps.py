"""Sub-matrix views per cluster and the global score distribution."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from dendro_overlap.analysis.ranking import NO_EXPLANATION, unit_label
from dendro_overlap.tree.models import ClusterGroup


@dataclass
class ClusterHeatmap:
    cluster_id: int
    leaf_indices: List[int]
    labels: List[str]
    scores: np.ndarray  # (k, k), NaN where unknown
    explanations: List[List[str]]
    short_labels: List[str] = field(default_factory=list)  # axis ticks


@dataclass
class ScoredPair:
    row_idx: int
    col_idx: int
    row_label: str
    col_label: str
    explanation: str


@dataclass
class ScoreGroup:
    score: float
    score_text: str
    count: int = 0
    pairs: List[ScoredPair] = field(default_factory=list)


def compact_label(value: str, max_len: int = 28) -> str:
    """Shorten a label for an axis tick, ending in an ellipsis when cut."""
    if len(value) <= max_len:
        return value
    return value[: max_len - 1] + "…"


def _text_cell(explanations: Optional[List[List[str]]], row: int, col: int) -> str:
    if explanations is None or row >= len(explanations) or col >= len(explanations[row]):
        return ""
    return explanations[row][col]


def cluster_heatmap(
    group: ClusterGroup,
    labels: Sequence[str],
    scores: np.ndarray,
    explanations: Optional[List[List[str]]] = None,
) -> ClusterHeatmap:
    """Restrict the aligned matrices to the leaves of one cluster."""
    indices = [idx for idx in group.leaf_indices if idx < scores.shape[0]]
    sub_scores = scores[np.ix_(indices, indices)] if indices else np.zeros((0, 0))
    sub_explanations = [[_text_cell(explanations, r, c) for c in indices] for r in indices]
    sub_labels = [unit_label(labels, idx) for idx in indices]
    return ClusterHeatmap(
        cluster_id=group.cluster_id,
        leaf_indices=indices,
        labels=sub_labels,
        scores=sub_scores,
        explanations=sub_explanations,
        short_labels=[compact_label(label) for label in sub_labels],
    )


def _touches_keyword(label: str, keywords: Sequence[str]) -> bool:
    lowered = label.lower()
    return any(keyword in lowered for keyword in keywords)


def score_distribution(
    labels: Sequence[str],
    scores: np.ndarray,
    explanations: Optional[List[List[str]]] = None,
    priority_keywords: Sequence[str] = (),
) -> List[ScoreGroup]:
    """Group each unordered pair (upper triangle) by its score rounded to 2 decimals.

    Groups are returned highest score first. Inside a group, pairs where
    either label contains a priority keyword come first.
    """
    n = min(len(labels), scores.shape[0])
    keywords = [keyword.lower() for keyword in priority_keywords if keyword]
    groups: Dict[str, ScoreGroup] = {}
    for i in range(n):
        for j in range(i + 1, n):
            raw = float(scores[i, j])
            if not math.isfinite(raw):
                continue
            score = round(raw, 2)
            key = f"{score:.2f}"
            explanation = _text_cell(explanations, i, j)
            group = groups.setdefault(key, ScoreGroup(score=score, score_text=key))
            group.count += 1
            group.pairs.append(
                ScoredPair(
                    row_idx=i,
                    col_idx=j,
                    row_label=unit_label(labels, i),
                    col_label=unit_label(labels, j),
                    explanation=explanation or NO_EXPLANATION,
                )
            )

    if keywords:
        for group in groups.values():
            group.pairs.sort(
                key=lambda pair: 0
                if _touches_keyword(pair.row_label, keywords) or _touches_keyword(pair.col_label, keywords)
                else 1
            )
    return sorted(groups.values(), key=lambda group: group.score, reverse=True)
