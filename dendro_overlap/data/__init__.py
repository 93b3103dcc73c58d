"""Artifact loading: tree JSON and pairwise CSV matrices."""
from dendro_overlap.data.loader import (
    Dataset,
    DatasetLoader,
    MatrixBundle,
    align_matrices,
    load_matrices,
    load_tree_data,
    parse_tree_text,
)
from dendro_overlap.data.sample import sample_dataset, sample_payload
