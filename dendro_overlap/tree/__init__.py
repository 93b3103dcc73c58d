"""Dendrogram package: linkage-to-tree building and threshold clustering."""
from dendro_overlap.tree.models import (
    ClusterGroup,
    Dendrogram,
    DendrogramData,
    DendrogramStats,
    LinkageStep,
    NodeDetails,
    TreeNode,
)
from dendro_overlap.tree.builder import (
    build_dendrogram,
    build_from_data,
    build_tree,
    validate_linkage,
    validate_tree_payload,
)
from dendro_overlap.tree.clusters import (
    assign_clusters,
    collect_leaf_clusters,
    compute_stats,
    count_clusters,
    default_threshold,
    leaf_cluster_map,
    node_details,
    recluster,
)
