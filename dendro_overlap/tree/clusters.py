"""Cut the dendrogram at a distance threshold and label every node with a cluster id."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from dendro_overlap.tree.models import (
    ClusterGroup,
    Dendrogram,
    DendrogramStats,
    NodeDetails,
    TreeNode,
)
from dendro_overlap.tree.traversal import (
    get_ancestors,
    get_sibling,
    get_subtree_leaves,
    iter_leaves,
    iter_preorder,
)

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_RATIO = 0.5


def is_cluster_root(node: TreeNode, threshold: float) -> bool:
    """A leaf, or a merge at or under the threshold, starts its own cluster."""
    return node.is_leaf or node.distance <= threshold


def _fill_subtree(node: TreeNode, cluster_id: int) -> None:
    for member in iter_preorder(node):
        member.cluster_id = cluster_id


def assign_clusters(root: TreeNode, threshold: float) -> int:
    """Label every node reachable from ``root`` and return the cluster count.

    Pre-order walk: the first node on each path that is a cluster root
    claims its whole subtree with the next id. Merges above the cut belong
    to no cluster and are reset to None. Ids are renumbered from 0 on every
    call.
    """
    next_id = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if is_cluster_root(node, threshold):
            _fill_subtree(node, next_id)
            next_id += 1
            continue
        node.cluster_id = None
        stack.extend(reversed(node.children))
    return next_id


def collect_leaf_clusters(root: TreeNode) -> List[ClusterGroup]:
    """Group leaf ids by cluster id, both ascending."""
    groups: Dict[int, List[int]] = {}
    for leaf in iter_leaves(root):
        if leaf.cluster_id is None:
            continue
        groups.setdefault(leaf.cluster_id, []).append(leaf.id)
    return [
        ClusterGroup(cluster_id=cid, leaf_indices=sorted(indices))
        for cid, indices in sorted(groups.items())
    ]


def leaf_cluster_map(root: Optional[TreeNode]) -> Dict[int, int]:
    """Leaf id -> cluster id."""
    if root is None:
        return {}
    return {
        leaf.id: leaf.cluster_id
        for leaf in iter_leaves(root)
        if leaf.cluster_id is not None
    }


def count_clusters(root: TreeNode) -> int:
    return len({node.cluster_id for node in iter_preorder(root) if node.cluster_id is not None})


def default_threshold(dendrogram: Dendrogram) -> float:
    """Initial cut: half of the highest merge distance."""
    return dendrogram.max_distance * DEFAULT_THRESHOLD_RATIO


def compute_stats(dendrogram: Dendrogram, threshold: float) -> DendrogramStats:
    return DendrogramStats(
        total_nodes=dendrogram.n_leaves,
        total_merges=dendrogram.n_merges,
        max_distance=dendrogram.max_distance,
        num_clusters=count_clusters(dendrogram.root),
        current_threshold=threshold,
    )


def node_details(node: TreeNode, labels: Optional[List[str]] = None) -> NodeDetails:
    cluster_id = node.cluster_id
    sibling = get_sibling(node)
    leaf_labels: List[str] = []
    if labels is not None:
        leaf_labels = [labels[idx] for idx in get_subtree_leaves(node) if idx < len(labels)]
    return NodeDetails(
        id=node.id,
        name=node.name or (f"Cluster {cluster_id}" if cluster_id is not None else f"Merge {node.id}"),
        content=node.content,
        distance=node.distance,
        cluster_id=cluster_id,
        is_leaf=node.is_leaf,
        count=node.count,
        leaf_labels=leaf_labels,
        parent_id=node.parent.id if node.parent is not None else None,
        sibling_id=sibling.id if sibling is not None else None,
        ancestor_ids=[ancestor.id for ancestor in get_ancestors(node)],
    )


def recluster(dendrogram: Dendrogram, threshold: float) -> int:
    """Reassign clusters on an existing tree (structure is reused)."""
    count = assign_clusters(dendrogram.root, threshold)
    logger.debug("Threshold %.4f -> %d clusters", threshold, count)
    return count
