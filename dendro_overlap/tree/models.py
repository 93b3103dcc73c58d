"""Data models for the dendrogram tree."""
from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class LinkageStep:
    """One agglomerative merge: row of a scipy-style linkage matrix."""

    left: int
    right: int
    distance: float
    count: int

    @classmethod
    def from_row(cls, row: Sequence[float]) -> "LinkageStep":
        left, right, distance, count = row
        return cls(left=int(left), right=int(right), distance=float(distance), count=int(count))


@dataclass(eq=False)
class TreeNode:
    """A leaf (id < n) or an internal merge node (id = n + step)."""

    id: int
    distance: float = 0.0
    count: int = 1
    name: Optional[str] = None  # Leaf label
    content: Optional[str] = None  # Optional leaf text
    children: List["TreeNode"] = field(default_factory=list)
    cluster_id: Optional[int] = None
    _parent_ref: Optional["weakref.ReferenceType[TreeNode]"] = field(
        default=None, repr=False, compare=False
    )

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def parent(self) -> Optional["TreeNode"]:
        """Non-owning back reference to the merge node that consumed this one."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def attach_parent(self, parent: "TreeNode") -> None:
        self._parent_ref = weakref.ref(parent)


@dataclass
class DendrogramData:
    """Validated tree artifact: linkage rows, labels, optional leaf contents."""

    linkage: List[List[float]]
    labels: List[str]
    contents: Optional[List[str]] = None

    @property
    def n_leaves(self) -> int:
        return len(self.labels)


@dataclass
class Dendrogram:
    """Arena owning every node of a built tree, indexed by node id."""

    root: TreeNode
    nodes: List[TreeNode]
    n_leaves: int
    labels: List[str]

    @property
    def n_merges(self) -> int:
        return len(self.nodes) - self.n_leaves

    @property
    def max_distance(self) -> float:
        internal = self.nodes[self.n_leaves:]
        if not internal:
            return 0.0
        return max(node.distance for node in internal)

    @property
    def leaves(self) -> List[TreeNode]:
        return self.nodes[: self.n_leaves]

    def node(self, node_id: int) -> Optional[TreeNode]:
        if 0 <= node_id < len(self.nodes):
            return self.nodes[node_id]
        return None


@dataclass
class ClusterGroup:
    """Leaves sharing one cluster id at the current threshold."""

    cluster_id: int
    leaf_indices: List[int]

    @property
    def size(self) -> int:
        return len(self.leaf_indices)

    @property
    def locked(self) -> bool:
        """Single-leaf clusters cannot be shown as a heatmap."""
        return self.size <= 1


@dataclass
class DendrogramStats:
    """Summary numbers shown next to the tree."""

    total_nodes: int
    total_merges: int
    max_distance: float
    num_clusters: int
    current_threshold: float


@dataclass
class NodeDetails:
    """Detail card for a clicked node."""

    id: int
    name: str
    content: Optional[str]
    distance: float
    cluster_id: Optional[int]  # None for merges above the cut
    is_leaf: bool
    count: int = 1
    leaf_labels: List[str] = field(default_factory=list)
    parent_id: Optional[int] = None
    sibling_id: Optional[int] = None
    ancestor_ids: List[int] = field(default_factory=list)  # closest first

