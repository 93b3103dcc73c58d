"""Core health check routes."""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

core_bp = Blueprint("core", __name__)


@core_bp.route("/health", methods=["GET"])
@core_bp.route("/api/health", methods=["GET"])
def health_check():
    """Simple health check with the load status of both views."""
    state = current_app.config["VIEW_STATE"]
    dataset = state.dataset
    return jsonify({
        "status": "ok",
        "service": "dendro-overlap",
        "treeLoaded": dataset is not None,
        "matricesLoaded": dataset is not None and dataset.matrices is not None,
        "loadError": state.load_error,
    })
