"""Flask routes for the dendrogram view: tree, clusters, node details, threshold."""
from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from dendro_overlap.api.routes._params import BadRequest, parse_threshold
from dendro_overlap.api.serialization import (
    error_response,
    safe_jsonify,
    serialize_details,
    serialize_groups,
    serialize_stats,
    serialize_tree,
)
from dendro_overlap.api.state import ViewState
from dendro_overlap.tree.clusters import node_details
from dendro_overlap.tree.traversal import get_node_idx

logger = logging.getLogger(__name__)

dendrogram_bp = Blueprint("dendrogram", __name__, url_prefix="/api/dendrogram")


def _state() -> ViewState:
    return current_app.config["VIEW_STATE"]


def _not_loaded():
    message = _state().load_error or "Dendrogram data is not loaded"
    return error_response(message, 503)


def _tree_payload(dataset, snapshot):
    return {
        "tree": serialize_tree(dataset.dendrogram.root),
        "clusterCount": snapshot.cluster_count,
        "threshold": snapshot.threshold,
        "stats": serialize_stats(snapshot.stats),
        "labels": list(dataset.labels),
        "pairwiseError": dataset.pairwise_error,
        "warnings": list(dataset.matrices.warnings) if dataset.matrices else [],
    }


@dendrogram_bp.route("", methods=["GET"])
def get_dendrogram():
    """Return the tree with cluster ids for the current threshold.

    ``?threshold=`` previews another cut for this response only; the shared
    threshold changes through ``POST /threshold``.
    """
    threshold = None
    raw = request.args.get("threshold")
    if raw is not None:
        try:
            threshold = parse_threshold(raw)
        except BadRequest as exc:
            return error_response(str(exc), 400)

    with _state().preview(threshold) as (dataset, snapshot):
        if dataset is None or snapshot is None:
            return _not_loaded()
        return safe_jsonify(_tree_payload(dataset, snapshot))


@dendrogram_bp.route("/clusters", methods=["GET"])
def get_clusters():
    with _state().read() as (dataset, snapshot):
        if dataset is None or snapshot is None:
            return _not_loaded()
        return safe_jsonify({
            "threshold": snapshot.threshold,
            "clusterCount": snapshot.cluster_count,
            "clusters": serialize_groups(snapshot.groups, dataset.labels),
        })


@dendrogram_bp.route("/nodes/<node_id>", methods=["GET"])
def get_node(node_id: str):
    """Detail card for one node, addressed as ``d_<idx>`` or a bare index."""
    try:
        idx = get_node_idx(node_id)
    except ValueError:
        return error_response(f"Invalid node id: {node_id}", 400)

    with _state().read() as (dataset, _snapshot):
        if dataset is None:
            return _not_loaded()
        node = dataset.dendrogram.node(idx)
        if node is None:
            return error_response(f"Node not found: {node_id}", 404)
        details = node_details(node, dataset.labels)
        return safe_jsonify(serialize_details(details))


@dendrogram_bp.route("/threshold", methods=["POST"])
def set_threshold():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Invalid JSON", 400)
    try:
        threshold = parse_threshold(data.get("threshold"))
    except BadRequest as exc:
        return error_response(str(exc), 400)

    state = _state()
    try:
        snapshot = state.set_threshold(threshold)
    except RuntimeError:
        return _not_loaded()
    logger.info("Threshold set to %.4f: %d clusters", threshold, snapshot.cluster_count)
    return safe_jsonify({
        "threshold": snapshot.threshold,
        "clusterCount": snapshot.cluster_count,
        "stats": serialize_stats(snapshot.stats),
    })


@dendrogram_bp.route("/reload", methods=["POST"])
def reload_dataset():
    """Reload all three artifacts from the configured sources."""
    state = _state()
    loader = current_app.config["DATASET_LOADER"]
    try:
        committed = state.load_with(loader.load)
    except Exception as exc:
        logger.warning("Reload failed: %s", exc)
        return error_response(str(exc), 503)

    dataset = state.dataset
    return safe_jsonify({
        "status": "ok" if committed else "stale",
        "leaves": dataset.dendrogram.n_leaves if dataset else 0,
        "pairwiseError": dataset.pairwise_error if dataset else None,
    })
