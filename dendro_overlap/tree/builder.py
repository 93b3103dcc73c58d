"""Build an explicit binary tree from a scipy-style linkage encoding.

Linkage row ``i`` merges two existing nodes into synthetic node ``n + i``,
where ``n`` is the number of leaves. Leaves keep ids ``0..n-1``.
"""
from __future__ import annotations

import logging
import math
from numbers import Real
from typing import Any, List, Optional, Sequence

import numpy as np
from scipy.cluster import hierarchy

from dendro_overlap.errors import StructuralError
from dendro_overlap.tree.models import Dendrogram, DendrogramData, LinkageStep, TreeNode

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_tree_payload(payload: Any) -> DendrogramData:
    """Check the shape of a decoded tree artifact before it reaches the builder."""
    if not isinstance(payload, dict):
        raise StructuralError("Tree data must be a JSON object with 'linkage' and 'labels'")

    linkage = payload.get("linkage")
    if not isinstance(linkage, list):
        raise StructuralError("Field 'linkage' is required and must be an array")

    labels = payload.get("labels")
    if not isinstance(labels, list):
        raise StructuralError("Field 'labels' is required and must be an array")
    for i, label in enumerate(labels):
        if not isinstance(label, str):
            raise StructuralError(f"Label {i} must be a string, got {type(label).__name__}")

    for i, row in enumerate(linkage):
        if not isinstance(row, (list, tuple)) or len(row) != 4:
            raise StructuralError(
                f"Linkage row {i} must have 4 values: [left, right, distance, count]"
            )
        if not all(_is_number(value) for value in row):
            raise StructuralError(f"Linkage row {i} must contain only numbers")

    contents = payload.get("contents")
    if contents is not None:
        if not isinstance(contents, list):
            raise StructuralError("Field 'contents' must be an array when present")
        if len(contents) != len(labels):
            raise StructuralError(
                f"Field 'contents' has {len(contents)} entries but there are {len(labels)} labels"
            )
        contents = [None if value is None else str(value) for value in contents]

    return DendrogramData(
        linkage=[[float(value) for value in row] for row in linkage],
        labels=list(labels),
        contents=contents,
    )


def validate_linkage(linkage: Any, n_leaves: int) -> np.ndarray:
    """Return linkage as an ``(n-1, 4)`` float array or raise StructuralError.

    Every merge must reference a leaf or a node produced by an earlier step,
    and no node may be merged twice.
    """
    if n_leaves < 1:
        raise StructuralError("At least one label is required to build a tree")

    rows = list(linkage) if linkage is not None else []
    expected = n_leaves - 1
    if len(rows) != expected:
        raise StructuralError(
            f"Linkage has {len(rows)} steps but {n_leaves} labels require {expected}"
        )
    if not rows:
        return np.zeros((0, 4), dtype=np.float64)

    for i, row in enumerate(rows):
        if not hasattr(row, "__len__") or len(row) != 4:
            raise StructuralError(f"Linkage row {i} must have 4 values: [left, right, distance, count]")
    try:
        matrix = np.asarray(rows, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise StructuralError(f"Linkage contains non-numeric values: {exc}") from exc

    consumed = set()
    for i, (left, right, distance, count) in enumerate(matrix):
        produced_so_far = n_leaves + i
        for side, ref in (("left", left), ("right", right)):
            if not math.isfinite(ref) or not float(ref).is_integer():
                raise StructuralError(f"Linkage row {i}: {side} id {ref!r} is not an integer")
            ref_id = int(ref)
            if ref_id < 0 or ref_id >= produced_so_far:
                raise StructuralError(
                    f"Linkage row {i}: {side} id {ref_id} does not refer to a leaf "
                    f"or an earlier merge (valid ids are 0..{produced_so_far - 1})"
                )
            if ref_id in consumed:
                raise StructuralError(f"Linkage row {i}: node {ref_id} was already merged")
            consumed.add(ref_id)
        if not math.isfinite(distance) or distance < 0:
            raise StructuralError(f"Linkage row {i}: distance {distance!r} must be finite and >= 0")
        if not math.isfinite(count) or count < 1:
            raise StructuralError(f"Linkage row {i}: count {count!r} must be >= 1")

    if not hierarchy.is_monotonic(matrix):
        logger.warning("Linkage is not monotonic; a merge below its children absorbs them at its own distance")
    return matrix


def build_dendrogram(
    linkage: Any,
    labels: Sequence[str],
    contents: Optional[Sequence[Optional[str]]] = None,
) -> Dendrogram:
    """Materialize every node and return the arena that owns them."""
    n = len(labels)
    matrix = validate_linkage(linkage, n)
    if contents is not None and len(contents) != n:
        raise StructuralError(f"Got {len(contents)} contents for {n} labels")

    nodes: List[TreeNode] = [
        TreeNode(
            id=i,
            name=labels[i],
            content=contents[i] if contents is not None else None,
        )
        for i in range(n)
    ]

    for i, row in enumerate(matrix):
        step = LinkageStep.from_row(row)
        left_node = nodes[step.left]
        right_node = nodes[step.right]
        merged = TreeNode(
            id=n + i,
            distance=step.distance,
            count=step.count,
            children=[left_node, right_node],
        )
        left_node.attach_parent(merged)
        right_node.attach_parent(merged)
        nodes.append(merged)

    logger.debug("Built dendrogram: %d leaves, %d merges", n, len(matrix))
    return Dendrogram(root=nodes[-1], nodes=nodes, n_leaves=n, labels=list(labels))


def build_tree(
    linkage: Any,
    labels: Sequence[str],
    contents: Optional[Sequence[Optional[str]]] = None,
) -> TreeNode:
    """Build the tree and return only its root.

    The caller must keep the root alive: parents are weak back references.
    """
    return build_dendrogram(linkage, labels, contents).root


def build_from_data(data: DendrogramData) -> Dendrogram:
    return build_dendrogram(data.linkage, data.labels, data.contents)
