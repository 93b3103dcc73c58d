"""Tree traversal utilities for dendrogram navigation."""
from __future__ import annotations

from typing import Iterator, List, Optional

from dendro_overlap.tree.models import TreeNode


def get_dendrogram_id(node_idx: int) -> str:
    """Convert dendrogram node index to string ID."""
    return f"d_{node_idx}"


def get_node_idx(dendrogram_id: str) -> int:
    """Convert string ID back to node index. Plain integers are accepted too."""
    if dendrogram_id.startswith("d_"):
        return int(dendrogram_id[2:])
    return int(dendrogram_id)


def iter_preorder(root: TreeNode) -> Iterator[TreeNode]:
    """Yield nodes parent-first, left subtree before right subtree."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        # Reversed so the left child is visited first
        stack.extend(reversed(node.children))


def iter_leaves(root: TreeNode) -> Iterator[TreeNode]:
    """Yield leaves left to right (same order as scipy's ``leaves_list``)."""
    for node in iter_preorder(root):
        if node.is_leaf:
            yield node


def get_subtree_leaves(node: TreeNode) -> List[int]:
    """Get all leaf indices under this node."""
    return [leaf.id for leaf in iter_leaves(node)]


def get_sibling(node: TreeNode) -> Optional[TreeNode]:
    """Get the other child of this node's parent."""
    parent = node.parent
    if parent is None:
        return None
    left, right = parent.children
    return right if left is node else left


def get_ancestors(node: TreeNode) -> List[TreeNode]:
    """Parents from the closest one up to the root."""
    ancestors = []
    current = node.parent
    while current is not None:
        ancestors.append(current)
        current = current.parent
    return ancestors
