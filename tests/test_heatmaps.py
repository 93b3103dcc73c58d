"""Tests for dendro_overlap/analysis/heatmaps.py - cluster sub-matrices and score groups."""
from __future__ import annotations

import numpy as np
import pytest

from dendro_overlap.analysis.heatmaps import cluster_heatmap, compact_label, score_distribution
from dendro_overlap.tree.models import ClusterGroup

NAN = float("nan")

LABELS = ["alpha", "beta", "gamma", "delta"]
SCORES = np.array([
    [1.0, 0.8, 0.2, 0.1],
    [0.8, 1.0, 0.3, NAN],
    [0.2, 0.3, 1.0, 0.8],
    [0.1, NAN, 0.8, 1.0],
])
EXPLANATIONS = [
    ["", "ab", "ag", ""],
    ["ba", "", "bg", ""],
    ["ga", "gb", "", "gd"],
    ["", "", "dg", ""],
]


@pytest.mark.unit
class TestClusterHeatmap:
    def test_sub_matrix(self):
        heatmap = cluster_heatmap(ClusterGroup(cluster_id=3, leaf_indices=[1, 3]), LABELS, SCORES, EXPLANATIONS)

        assert heatmap.cluster_id == 3
        assert heatmap.labels == ["beta", "delta"]
        assert heatmap.scores.shape == (2, 2)
        assert heatmap.scores[0, 0] == 1.0
        assert np.isnan(heatmap.scores[0, 1])
        assert heatmap.explanations == [["", ""], ["", ""]]

    def test_out_of_range_leaves_dropped(self):
        heatmap = cluster_heatmap(ClusterGroup(cluster_id=0, leaf_indices=[0, 2, 7]), LABELS, SCORES)
        assert heatmap.leaf_indices == [0, 2]
        assert heatmap.explanations == [["", ""], ["", ""]]
        assert heatmap.scores[0, 1] == pytest.approx(0.2)

    def test_short_labels_for_axis_ticks(self):
        long_name = "Department of Regional Health Services"
        heatmap = cluster_heatmap(ClusterGroup(cluster_id=0, leaf_indices=[0, 1]), ["alpha", long_name], SCORES)
        assert heatmap.labels == ["alpha", long_name]
        assert heatmap.short_labels == ["alpha", long_name[:27] + "\u2026"]


@pytest.mark.unit
class TestScoreDistribution:
    def test_groups_upper_triangle_by_rounded_score(self):
        groups = score_distribution(LABELS, SCORES, EXPLANATIONS)

        assert [g.score_text for g in groups] == ["0.80", "0.30", "0.20", "0.10"]
        top = groups[0]
        assert top.count == 2
        assert [(p.row_idx, p.col_idx) for p in top.pairs] == [(0, 1), (2, 3)]
        assert top.pairs[0].explanation == "ab"

    def test_missing_explanation_placeholder(self):
        groups = score_distribution(LABELS, SCORES, EXPLANATIONS)
        lowest = groups[-1]
        assert lowest.pairs[0].explanation == "No explanation available."

    def test_priority_keywords_first(self):
        groups = score_distribution(LABELS, SCORES, EXPLANATIONS, priority_keywords=["DELTA"])
        assert [(p.row_idx, p.col_idx) for p in groups[0].pairs] == [(2, 3), (0, 1)]

    def test_rounding_merges_close_scores(self):
        scores = np.array([[1.0, 0.801, 0.799], [0.801, 1.0, 0.5], [0.799, 0.5, 1.0]])
        groups = score_distribution(["a", "b", "c"], scores)
        assert groups[0].score_text == "0.80"
        assert groups[0].count == 2


@pytest.mark.unit
def test_compact_label():
    assert compact_label("short") == "short"
    long_label = "x" * 40
    assert compact_label(long_label) == "x" * 27 + "…"
    assert len(compact_label(long_label, max_len=10)) == 10
