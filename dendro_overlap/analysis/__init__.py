"""Overlap analysis over aligned matrices: ranking, peers, heatmaps."""
from dendro_overlap.analysis.ranking import (
    NO_EXPLANATION,
    PairExplanation,
    PairScore,
    UnitAverage,
    describe_pair,
    mean_overlap,
    rank_by_mean_overlap,
    top_related,
)
from dendro_overlap.analysis.heatmaps import (
    ClusterHeatmap,
    ScoreGroup,
    ScoredPair,
    cluster_heatmap,
    compact_label,
    score_distribution,
)
