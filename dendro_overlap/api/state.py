"""Service owning the current dataset, the cut threshold and derived cluster state."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from dendro_overlap.data.loader import Dataset
from dendro_overlap.tree.clusters import (
    collect_leaf_clusters,
    compute_stats,
    default_threshold,
    leaf_cluster_map,
    recluster,
)
from dendro_overlap.tree.models import ClusterGroup, DendrogramStats

logger = logging.getLogger(__name__)


@dataclass
class ClusterSnapshot:
    """Derived state for one (dataset, threshold) pair."""

    threshold: float
    cluster_count: int
    groups: List[ClusterGroup]
    leaf_clusters: Dict[int, int]
    stats: DendrogramStats


class ViewState:
    """Single coordinating context for loads and threshold changes.

    Loads are numbered: ``begin_load`` hands out a sequence number and
    ``commit_load`` ignores any result older than the newest one already
    committed, so a slow stale load cannot overwrite a newer dataset.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._dataset: Optional[Dataset] = None
        self._snapshot: Optional[ClusterSnapshot] = None
        self._load_error: Optional[str] = None
        self._issued_seq = 0
        self._committed_seq = 0

    @property
    def dataset(self) -> Optional[Dataset]:
        with self._lock:
            return self._dataset

    @property
    def snapshot(self) -> Optional[ClusterSnapshot]:
        with self._lock:
            return self._snapshot

    @property
    def load_error(self) -> Optional[str]:
        with self._lock:
            return self._load_error

    @contextmanager
    def read(self) -> Iterator[Tuple[Optional[Dataset], Optional[ClusterSnapshot]]]:
        """Hold the lock while a caller walks the tree so cluster ids stay consistent."""
        with self._lock:
            yield self._dataset, self._snapshot

    @contextmanager
    def preview(
        self, threshold: Optional[float] = None
    ) -> Iterator[Tuple[Optional[Dataset], Optional[ClusterSnapshot]]]:
        """Like ``read`` but with the tree cut at ``threshold`` for the scope only.

        The committed cut is reapplied to the tree on exit, so readers never
        observe the previewed cluster ids and the committed snapshot is untouched.
        """
        with self._lock:
            dataset, committed = self._dataset, self._snapshot
            if threshold is None or dataset is None or committed is None:
                yield dataset, committed
                return
            try:
                yield dataset, self._derive(dataset, threshold)
            finally:
                recluster(dataset.dendrogram, committed.threshold)

    def begin_load(self) -> int:
        with self._lock:
            self._issued_seq += 1
            return self._issued_seq

    def _is_stale(self, seq: int) -> bool:
        return seq < self._committed_seq

    def commit_load(self, seq: int, dataset: Dataset, threshold: Optional[float] = None) -> bool:
        """Install a freshly loaded dataset. Returns False for stale results."""
        with self._lock:
            if self._is_stale(seq):
                logger.info("Discarding stale load #%d (current #%d)", seq, self._committed_seq)
                return False
            self._committed_seq = seq
            self._dataset = dataset
            self._load_error = None
            cut = default_threshold(dataset.dendrogram) if threshold is None else threshold
            self._snapshot = self._derive(dataset, cut)
            logger.info(
                "Load #%d committed: %d leaves, threshold %.4f -> %d clusters",
                seq, dataset.dendrogram.n_leaves, cut, self._snapshot.cluster_count,
            )
            return True

    def fail_load(self, seq: int, message: str) -> bool:
        """Record a fatal tree load failure; clears any dataset (no cluster view)."""
        with self._lock:
            if self._is_stale(seq):
                return False
            self._committed_seq = seq
            self._dataset = None
            self._snapshot = None
            self._load_error = message
            logger.error("Load #%d failed: %s", seq, message)
            return True

    def set_threshold(self, threshold: float) -> ClusterSnapshot:
        """Recompute only the cluster assignment; the tree is reused."""
        with self._lock:
            if self._dataset is None:
                raise RuntimeError("No dataset loaded")
            self._snapshot = self._derive(self._dataset, threshold)
            return self._snapshot

    def load_with(self, load: Callable[[], Dataset]) -> bool:
        """Run ``load`` under a new sequence number and commit or record its failure."""
        seq = self.begin_load()
        try:
            dataset = load()
        except Exception as exc:
            logger.exception("Dataset load #%d raised", seq)
            self.fail_load(seq, str(exc))
            raise
        return self.commit_load(seq, dataset)

    @staticmethod
    def _derive(dataset: Dataset, threshold: float) -> ClusterSnapshot:
        dendrogram = dataset.dendrogram
        count = recluster(dendrogram, threshold)
        return ClusterSnapshot(
            threshold=threshold,
            cluster_count=count,
            groups=collect_leaf_clusters(dendrogram.root),
            leaf_clusters=leaf_cluster_map(dendrogram.root),
            stats=compute_stats(dendrogram, threshold),
        )
