"""Flask routes over the aligned score and explanation matrices."""
from __future__ import annotations

import logging
from typing import List

from flask import Blueprint, current_app, request

from dendro_overlap.analysis.heatmaps import cluster_heatmap, score_distribution
from dendro_overlap.analysis.ranking import (
    DEFAULT_RANKING_LIMIT,
    DEFAULT_RELATED_LIMIT,
    describe_pair,
    rank_by_mean_overlap,
    top_related,
)
from dendro_overlap.api.routes._params import BadRequest, parse_index, parse_limit
from dendro_overlap.api.serialization import error_response, safe_jsonify
from dendro_overlap.api.state import ViewState

logger = logging.getLogger(__name__)

overlap_bp = Blueprint("overlap", __name__, url_prefix="/api/overlap")


class MatricesUnavailable(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _state() -> ViewState:
    return current_app.config["VIEW_STATE"]


def _priority_keywords() -> List[str]:
    if "PRIORITY_KEYWORDS" in current_app.config:
        return list(current_app.config["PRIORITY_KEYWORDS"])
    settings = getattr(current_app.config.get("DATASET_LOADER"), "settings", None)
    return list(getattr(settings, "priority_keywords", []) or [])


def _require_matrices(dataset):
    if dataset is None:
        raise MatricesUnavailable(_state().load_error or "Dendrogram data is not loaded")
    if dataset.matrices is None:
        raise MatricesUnavailable(dataset.pairwise_error or "Pairwise matrices are not loaded")
    return dataset.matrices


@overlap_bp.errorhandler(MatricesUnavailable)
def _handle_unavailable(exc: MatricesUnavailable):
    return error_response(exc.message, 503)


@overlap_bp.errorhandler(BadRequest)
def _handle_bad_request(exc: BadRequest):
    return error_response(str(exc), 400)


@overlap_bp.route("/ranking", methods=["GET"])
def get_ranking():
    """Units ranked by mean overlap with every other unit."""
    limit = parse_limit(request.args.get("limit"), DEFAULT_RANKING_LIMIT)
    with _state().read() as (dataset, snapshot):
        matrices = _require_matrices(dataset)
        leaf_clusters = snapshot.leaf_clusters if snapshot else None
        ranking = rank_by_mean_overlap(matrices.labels, matrices.scores, leaf_clusters, limit)
    return safe_jsonify({
        "ranking": [
            {"idx": row.idx, "label": row.label, "average": row.average, "clusterId": row.cluster_id}
            for row in ranking
        ],
        "warnings": list(matrices.warnings),
    })


@overlap_bp.route("/units/<int:idx>/related", methods=["GET"])
def get_related(idx: int):
    limit = parse_limit(request.args.get("limit"), DEFAULT_RELATED_LIMIT)
    with _state().read() as (dataset, snapshot):
        matrices = _require_matrices(dataset)
        if idx >= len(matrices.labels):
            return error_response(f"Unit index out of range: {idx}", 404)
        leaf_clusters = snapshot.leaf_clusters if snapshot else None
        peers = top_related(idx, matrices.labels, matrices.scores, leaf_clusters, limit)
    return safe_jsonify({
        "idx": idx,
        "label": matrices.labels[idx],
        "related": [
            {"idx": peer.idx, "label": peer.label, "score": peer.score, "clusterId": peer.cluster_id}
            for peer in peers
        ],
    })


@overlap_bp.route("/pair", methods=["GET"])
def get_pair():
    """Score, explanation and extracted unit names for one cell."""
    row = parse_index(request.args.get("row"), "row")
    col = parse_index(request.args.get("col"), "col")
    with _state().read() as (dataset, _snapshot):
        matrices = _require_matrices(dataset)
        n = len(matrices.labels)
        if row >= n or col >= n:
            return error_response(f"Pair ({row}, {col}) is outside a {n}x{n} matrix", 404)
        pair = describe_pair(row, col, matrices.labels, matrices.scores, matrices.explanations)
    return safe_jsonify({
        "row": pair.row_idx,
        "col": pair.col_idx,
        "rowLabel": pair.row_label,
        "colLabel": pair.col_label,
        "score": pair.score,
        "explanation": pair.explanation,
        "caption": {"rowLabel": pair.caption.row_label, "colLabel": pair.caption.col_label},
    })


@overlap_bp.route("/distribution", methods=["GET"])
def get_distribution():
    keywords = _priority_keywords()
    with _state().read() as (dataset, _snapshot):
        matrices = _require_matrices(dataset)
        groups = score_distribution(matrices.labels, matrices.scores, matrices.explanations, keywords)
    return safe_jsonify({
        "groups": [
            {
                "score": group.score,
                "scoreText": group.score_text,
                "count": group.count,
                "pairs": [
                    {
                        "row": pair.row_idx,
                        "col": pair.col_idx,
                        "rowLabel": pair.row_label,
                        "colLabel": pair.col_label,
                        "explanation": pair.explanation,
                    }
                    for pair in group.pairs
                ],
            }
            for group in groups
        ],
        "priorityKeywords": keywords,
    })


@overlap_bp.route("/clusters/<int:cluster_id>/heatmap", methods=["GET"])
def get_cluster_heatmap(cluster_id: int):
    """Sub-matrix for the leaves of one cluster at the current threshold."""
    with _state().read() as (dataset, snapshot):
        matrices = _require_matrices(dataset)
        group = next((g for g in snapshot.groups if g.cluster_id == cluster_id), None) if snapshot else None
        if group is None:
            return error_response(f"Cluster not found: {cluster_id}", 404)
        if group.locked:
            return error_response(f"Cluster {cluster_id} has a single leaf", 409, locked=True)
        heatmap = cluster_heatmap(group, matrices.labels, matrices.scores, matrices.explanations)
    return safe_jsonify({
        "clusterId": heatmap.cluster_id,
        "leafIndices": heatmap.leaf_indices,
        "labels": heatmap.labels,
        "shortLabels": heatmap.short_labels,
        "scores": heatmap.scores,
        "explanations": heatmap.explanations,
    })
