"""Tests for JSON serialization with NaN/Infinity handling and tree payloads."""
from __future__ import annotations

import json

import numpy as np
import pytest

from dendro_overlap.api.serialization import SafeJSONEncoder, safe_jsonify, serialize_tree
from dendro_overlap.tree.builder import build_dendrogram
from dendro_overlap.tree.clusters import assign_clusters


@pytest.mark.unit
class TestSafeJSONEncoder:
    def test_nan_and_infinity_become_null(self):
        data = {"values": [1.0, float("nan"), float("inf"), float("-inf")]}
        result = json.loads(SafeJSONEncoder().encode(data))
        assert result["values"] == [1.0, None, None, None]

    def test_numpy_values(self):
        data = {"matrix": np.array([[1.0, np.nan]]), "scalar": np.float64(0.5), "count": np.int64(3)}
        result = json.loads(SafeJSONEncoder().encode(data))
        assert result == {"matrix": [[1.0, None]], "scalar": 0.5, "count": 3}

    def test_safe_jsonify_status(self):
        response = safe_jsonify({"error": "x"}, status=503)
        assert response.status_code == 503
        assert response.mimetype == "application/json"
        assert json.loads(response.get_data(as_text=True)) == {"error": "x"}


@pytest.mark.unit
def test_serialize_tree_of_deep_chain():
    n = 2500
    rows = [[0, 1, 1.0, 2]]
    for step in range(1, n - 1):
        rows.append([n + step - 1, step + 1, 1.0 + step, step + 2])
    dendrogram = build_dendrogram(rows, [str(i) for i in range(n)])
    assign_clusters(dendrogram.root, 0.0)

    tree = serialize_tree(dendrogram.root)
    depth = 0
    node = tree
    while "children" in node:
        node = node["children"][0]
        depth += 1
    assert depth == n - 1
    assert node["name"] == "0"
