"""Print cluster and overlap summaries for the configured dataset at one threshold."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dendro_overlap.analysis.ranking import rank_by_mean_overlap
from dendro_overlap.data.loader import DatasetLoader
from dendro_overlap.data.sample import sample_dataset
from dendro_overlap.errors import DendroError
from dendro_overlap.logging_utils import setup_logging
from dendro_overlap.tree.clusters import (
    collect_leaf_clusters,
    compute_stats,
    default_threshold,
    leaf_cluster_map,
    recluster,
)


def summarize(dataset, threshold=None, top: int = 10) -> None:
    dendrogram = dataset.dendrogram
    cut = default_threshold(dendrogram) if threshold is None else threshold
    recluster(dendrogram, cut)
    stats = compute_stats(dendrogram, cut)

    print(f"Leaves: {stats.total_nodes}  merges: {stats.total_merges}  max distance: {stats.max_distance:.4f}")
    print(f"Threshold {cut:.4f} -> {stats.num_clusters} clusters")
    for group in collect_leaf_clusters(dendrogram.root):
        names = ", ".join(dataset.labels[idx] for idx in group.leaf_indices)
        print(f"  [{group.cluster_id:>3}] ({group.size}) {names}")

    if dataset.matrices is None:
        print(f"\nNo pairwise matrices: {dataset.pairwise_error}")
        return

    for warning in dataset.matrices.warnings:
        print(f"warning: {warning}")
    print(f"\nTop {top} by mean overlap:")
    ranking = rank_by_mean_overlap(
        dataset.matrices.labels,
        dataset.matrices.scores,
        leaf_cluster_map(dendrogram.root),
        top,
    )
    for position, row in enumerate(ranking, start=1):
        print(f"  {position:>2}. {row.average:6.3f}  {row.label}  (cluster {row.cluster_id})")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--threshold", type=float, default=None, help="Cut distance (default: half the max merge)")
    parser.add_argument("--top", type=int, default=10, help="How many units to rank")
    parser.add_argument("--sample", action="store_true", help="Use the built-in sample tree")
    parser.add_argument("--quiet", action="store_true", help="No console logging")
    args = parser.parse_args()

    setup_logging(console_level=logging.WARNING, quiet=args.quiet)

    if args.sample:
        dataset = sample_dataset()
    else:
        try:
            dataset = DatasetLoader().load()
        except DendroError as exc:
            print(f"Could not load dataset: {exc}", file=sys.stderr)
            return 1

    summarize(dataset, args.threshold, args.top)
    return 0


if __name__ == "__main__":
    sys.exit(main())
