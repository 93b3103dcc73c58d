"""Tests for dendro_overlap/tree/traversal.py - dendrogram tree navigation."""
from __future__ import annotations

import numpy as np
import pytest
from scipy.cluster.hierarchy import leaves_list

from dendro_overlap.tree.builder import build_dendrogram
from dendro_overlap.tree.traversal import (
    get_ancestors,
    get_dendrogram_id,
    get_node_idx,
    get_sibling,
    get_subtree_leaves,
    iter_preorder,
)


@pytest.fixture
def asymmetric(asymmetric_linkage, asymmetric_labels):
    return build_dendrogram(asymmetric_linkage, asymmetric_labels)


@pytest.mark.unit
class TestIds:
    def test_round_trip(self):
        assert get_dendrogram_id(7) == "d_7"
        assert get_node_idx("d_7") == 7

    def test_plain_integer(self):
        assert get_node_idx("12") == 12

    def test_garbage(self):
        with pytest.raises(ValueError):
            get_node_idx("d_x")


@pytest.mark.unit
class TestWalks:
    def test_preorder_is_parent_first_left_first(self, asymmetric):
        order = [node.id for node in iter_preorder(asymmetric.root)]
        assert order == [8, 6, 2, 5, 0, 1, 7, 3, 4]

    def test_leaf_order_matches_scipy(self, asymmetric, asymmetric_linkage):
        expected = leaves_list(np.asarray(asymmetric_linkage, dtype=float)).tolist()
        assert get_subtree_leaves(asymmetric.root) == expected

    def test_subtree_leaves(self, asymmetric):
        assert get_subtree_leaves(asymmetric.node(6)) == [2, 0, 1]
        assert get_subtree_leaves(asymmetric.node(3)) == [3]

    def test_deep_chain_does_not_recurse(self):
        n = 3000
        rows = [[0, 1, 1.0, 2]]
        for step in range(1, n - 1):
            rows.append([n + step - 1, step + 1, 1.0 + step, step + 2])
        labels = [str(i) for i in range(n)]
        dendrogram = build_dendrogram(rows, labels)
        assert len(list(iter_preorder(dendrogram.root))) == 2 * n - 1


@pytest.mark.unit
class TestRelations:
    def test_sibling(self, asymmetric):
        assert get_sibling(asymmetric.node(2)).id == 5
        assert get_sibling(asymmetric.node(7)).id == 6
        assert get_sibling(asymmetric.root) is None

    def test_ancestors(self, asymmetric):
        assert [node.id for node in get_ancestors(asymmetric.node(0))] == [5, 6, 8]
        assert get_ancestors(asymmetric.root) == []

