"""Built-in sample tree (8 documents, 7 merges) for demos and smoke tests."""
from __future__ import annotations

from dendro_overlap.data.loader import Dataset
from dendro_overlap.tree.builder import build_from_data, validate_tree_payload

SAMPLE_LABELS = [
    "Document A", "Document B", "Document C", "Document D",
    "Document E", "Document F", "Document G", "Document H",
]

SAMPLE_CONTENTS = [
    "First-quarter sales analysis",
    "Q1 sales report",
    "Digital marketing statistics",
    "2024 social media campaign",
    "Annual financial report",
    "Balance sheet and financial statements",
    "Human resources strategic plan",
    "Staff performance review",
]

# scipy-style rows: [left, right, distance, count]
SAMPLE_LINKAGE = [
    [0, 1, 0.15, 2],
    [2, 3, 0.22, 2],
    [4, 5, 0.18, 2],
    [6, 7, 0.25, 2],
    [8, 9, 0.35, 4],
    [10, 11, 0.42, 4],
    [12, 13, 0.68, 8],
]


def sample_payload() -> dict:
    return {
        "linkage": [list(row) for row in SAMPLE_LINKAGE],
        "labels": list(SAMPLE_LABELS),
        "contents": list(SAMPLE_CONTENTS),
    }


def sample_dataset() -> Dataset:
    tree_data = validate_tree_payload(sample_payload())
    return Dataset(
        tree_data=tree_data,
        dendrogram=build_from_data(tree_data),
        pairwise_error="The sample data has no pairwise matrices",
    )
