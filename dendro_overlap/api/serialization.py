"""Strict-JSON responses and payload shapes shared by the route modules."""
from __future__ import annotations

import json
import math
from dataclasses import asdict
from typing import Any, Dict, List, Optional

import numpy as np
from flask import Response

from dendro_overlap.tree.models import ClusterGroup, DendrogramStats, NodeDetails, TreeNode
from dendro_overlap.tree.traversal import get_dendrogram_id, iter_preorder


def _sanitize_json_value(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return _sanitize_json_value(value.tolist())
    if isinstance(value, np.generic):
        return _sanitize_json_value(value.item())
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    if isinstance(value, dict):
        return {k: _sanitize_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize_json_value(v) for v in value]
    return value


class SafeJSONEncoder(json.JSONEncoder):
    """JSON encoder that converts NaN/Infinity to null for strict JSON compliance."""

    def encode(self, o: Any) -> str:  # noqa: N802 - matches json.JSONEncoder API
        return super().encode(_sanitize_json_value(o))


def safe_jsonify(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON Response that is robust to NaN/Infinity without requiring app context."""

    data = SafeJSONEncoder().encode(payload)
    return Response(data, status=status, mimetype="application/json")


def error_response(message: str, status: int, **extra: Any) -> Response:
    payload: Dict[str, Any] = {"error": message}
    payload.update(extra)
    return safe_jsonify(payload, status=status)


def serialize_tree(root: TreeNode) -> Dict[str, Any]:
    """Nested node dicts keyed by ``d_<id>``.

    Built bottom-up from a reversed pre-order walk so deep chains do not
    hit the recursion limit while building.
    """
    built: Dict[int, Dict[str, Any]] = {}
    for node in reversed(list(iter_preorder(root))):
        entry: Dict[str, Any] = {
            "id": get_dendrogram_id(node.id),
            "nodeIndex": node.id,
            "distance": node.distance,
            "count": node.count,
            "clusterId": node.cluster_id,
            "isLeaf": node.is_leaf,
        }
        if node.is_leaf:
            entry["name"] = node.name
            if node.content is not None:
                entry["content"] = node.content
        else:
            entry["children"] = [built.pop(child.id) for child in node.children]
        built[node.id] = entry
    return built[root.id]


def serialize_stats(stats: DendrogramStats) -> Dict[str, Any]:
    return {
        "totalNodes": stats.total_nodes,
        "totalMerges": stats.total_merges,
        "maxDistance": stats.max_distance,
        "numClusters": stats.num_clusters,
        "currentThreshold": stats.current_threshold,
    }


def serialize_groups(groups: List[ClusterGroup], labels: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    result = []
    for group in groups:
        entry: Dict[str, Any] = {
            "clusterId": group.cluster_id,
            "leafIndices": list(group.leaf_indices),
            "size": group.size,
            "locked": group.locked,
        }
        if labels is not None:
            entry["labels"] = [labels[idx] for idx in group.leaf_indices if idx < len(labels)]
        result.append(entry)
    return result


def _optional_id(idx: Optional[int]) -> Optional[str]:
    return get_dendrogram_id(idx) if idx is not None else None


def serialize_details(details: NodeDetails) -> Dict[str, Any]:
    payload = asdict(details)
    return {
        "id": get_dendrogram_id(payload["id"]),
        "nodeIndex": payload["id"],
        "name": payload["name"],
        "content": payload["content"],
        "distance": payload["distance"],
        "clusterId": payload["cluster_id"],
        "isLeaf": payload["is_leaf"],
        "count": payload["count"],
        "leafLabels": payload["leaf_labels"],
        "parentId": _optional_id(payload["parent_id"]),
        "siblingId": _optional_id(payload["sibling_id"]),
        "ancestorIds": [get_dendrogram_id(idx) for idx in payload["ancestor_ids"]],
    }
