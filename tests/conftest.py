"""Shared pytest configuration and fixtures for the test suite.

This module centralizes:
- Path setup (eliminates sys.path hacks in individual test files)
- Pytest markers for test categorization (unit, integration, property)
- Small linkage fixtures and CSV texts
- A Flask app wired to an in-memory artifact reader
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict

import pytest


# ==============================================================================
# Path Setup - Ensures dendro_overlap/ is importable
# ==============================================================================

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# ==============================================================================
# Pytest Configuration
# ==============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "unit: Fast tests with no I/O (mocked dependencies)",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests hitting the file system or the Flask app",
    )
    config.addinivalue_line(
        "markers",
        "property: Hypothesis property-based tests",
    )


# ==============================================================================
# Linkage Fixtures
# ==============================================================================

# Simple 4-leaf dendrogram
#
#           6 (root, 2.0)
#          / \
#    (1.0)4   5(1.5)
#        / \ / \
#       0  1 2  3
#
SIMPLE_LINKAGE = [
    [0, 1, 1.0, 2],
    [2, 3, 1.5, 2],
    [4, 5, 2.0, 4],
]
SIMPLE_LABELS = ["alpha", "beta", "gamma", "delta"]

# Asymmetric 5-leaf dendrogram
#
#              8 (root, 3.0)
#            /   \
#      (1.0)6     7(2.0)
#          / \   / \
#         2   5 3   4
#            / \
#           0   1   (5 = 0.5)
#
ASYMMETRIC_LINKAGE = [
    [0, 1, 0.5, 2],
    [2, 5, 1.0, 3],
    [3, 4, 2.0, 2],
    [6, 7, 3.0, 5],
]
ASYMMETRIC_LABELS = ["a", "b", "c", "d", "e"]


@pytest.fixture
def simple_linkage():
    return [list(row) for row in SIMPLE_LINKAGE]


@pytest.fixture
def simple_labels():
    return list(SIMPLE_LABELS)


@pytest.fixture
def asymmetric_linkage():
    return [list(row) for row in ASYMMETRIC_LINKAGE]


@pytest.fixture
def asymmetric_labels():
    return list(ASYMMETRIC_LABELS)


# ==============================================================================
# Artifact Fixtures
# ==============================================================================

SCORES_CSV = (
    ",alpha,beta,gamma,delta\n"
    "alpha,1,\"0,8\",0.2,0.1\n"
    "beta,0.8,1,0.3,\n"
    "gamma,0.2,0.3,1,0.6\n"
    "delta,0.1,,0.6,1\n"
)

EXPLANATIONS_CSV = (
    ",alpha,beta,gamma,delta\n"
    "alpha,,UNIDAD 1: alpha | UNIDAD 2: beta,shared basics,\n"
    "beta,UNIDAD 1: beta | UNIDAD 2: alpha,,,\n"
    "gamma,shared basics,,,gamma and delta overlap\n"
    "delta,,,gamma and delta overlap,\n"
)


@pytest.fixture
def scores_csv() -> str:
    return SCORES_CSV


@pytest.fixture
def explanations_csv() -> str:
    return EXPLANATIONS_CSV


@pytest.fixture
def artifacts() -> Dict[str, str]:
    """In-memory artifacts keyed by location."""
    return {
        "tree.json": json.dumps({"linkage": SIMPLE_LINKAGE, "labels": SIMPLE_LABELS}),
        "scores.csv": SCORES_CSV,
        "explanations.csv": EXPLANATIONS_CSV,
    }


@pytest.fixture
def source_settings():
    from dendro_overlap.config import SourceSettings

    return SourceSettings(
        tree="tree.json",
        scores="scores.csv",
        explanations="explanations.csv",
        priority_keywords=["gamma"],
    )


@pytest.fixture
def fake_reader(artifacts):
    """Reader over the ``artifacts`` dict; unknown locations raise LoadError."""
    from dendro_overlap.errors import LoadError

    def read(location: str) -> str:
        if location not in artifacts:
            raise LoadError(f"Could not read {location}", source=location)
        return artifacts[location]

    return read


@pytest.fixture
def dataset_loader(source_settings, fake_reader):
    from dendro_overlap.data.loader import DatasetLoader

    return DatasetLoader(settings=source_settings, reader=fake_reader)


# ==============================================================================
# Flask Fixtures
# ==============================================================================

@pytest.fixture
def app(dataset_loader, tmp_path, monkeypatch):
    from dendro_overlap.api.server import create_app

    # api.log lands under the test's temp dir
    monkeypatch.chdir(tmp_path)
    application = create_app({"TESTING": True, "DATASET_LOADER": dataset_loader})
    return application


@pytest.fixture
def client(app):
    return app.test_client()

