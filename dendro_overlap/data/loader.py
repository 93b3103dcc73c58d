"""Load the tree artifact and the two pairwise matrices into one Dataset.

The three artifacts are fetched concurrently. The tree is required: any
failure there is fatal for the whole load. The matrices are optional: a
failure is recorded on the Dataset and the tree stays usable.
"""
from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from dendro_overlap.config import SourceSettings, get_source_settings
from dendro_overlap.data.sources import read_artifact
from dendro_overlap.errors import AlignmentDegradation, DendroError, LoadError
from dendro_overlap.matrix.align import align_explanations, align_scores, report_alignment
from dendro_overlap.matrix.parsing import ParsedMatrix, parse_explanation_matrix, parse_score_matrix
from dendro_overlap.tree.builder import build_from_data, validate_tree_payload
from dendro_overlap.tree.models import Dendrogram, DendrogramData

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]


@dataclass
class MatrixBundle:
    """Score and explanation matrices aligned to the canonical labels."""

    labels: List[str]
    scores: np.ndarray
    explanations: List[List[str]]
    degradations: List[AlignmentDegradation] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class Dataset:
    tree_data: DendrogramData
    dendrogram: Dendrogram
    matrices: Optional[MatrixBundle] = None
    pairwise_error: Optional[str] = None

    @property
    def labels(self) -> List[str]:
        return self.tree_data.labels


def parse_tree_text(text: str, source: Optional[str] = None) -> DendrogramData:
    """Decode and validate the tree JSON. Bad JSON is a LoadError."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LoadError(f"Tree data is not valid JSON: {exc}", source=source) from exc
    return validate_tree_payload(payload)


def load_tree_data(location: str, reader: Optional[Reader] = None) -> DendrogramData:
    read = reader or read_artifact
    return parse_tree_text(read(location), source=location)


def align_matrices(
    scores: ParsedMatrix,
    explanations: ParsedMatrix,
    canonical_labels: List[str],
) -> MatrixBundle:
    """Reindex both parsed matrices onto the canonical label order."""
    degradations = [
        report_alignment("scores", scores.labels, canonical_labels),
        report_alignment("explanations", explanations.labels, canonical_labels),
    ]
    warnings = [d.summary() for d in degradations if d.is_degraded]
    if scores.size != explanations.size:
        message = (
            f"Score and explanation matrices have different sizes "
            f"({scores.size} vs {explanations.size} labels)"
        )
        logger.warning(message)
        warnings.append(message)

    return MatrixBundle(
        labels=list(canonical_labels),
        scores=align_scores(scores.labels, scores.matrix, canonical_labels),
        explanations=align_explanations(explanations.labels, explanations.matrix, canonical_labels),
        degradations=degradations,
        warnings=warnings,
    )


def load_matrices(
    scores_location: str,
    explanations_location: str,
    canonical_labels: List[str],
    reader: Optional[Reader] = None,
) -> MatrixBundle:
    """Fetch both CSVs concurrently, parse and align them."""
    read = reader or read_artifact
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="matrix-load") as pool:
        scores_future = pool.submit(read, scores_location)
        explanations_future = pool.submit(read, explanations_location)
        scores_text = scores_future.result()
        explanations_text = explanations_future.result()
    return align_matrices(
        parse_score_matrix(scores_text, source=scores_location),
        parse_explanation_matrix(explanations_text, source=explanations_location),
        canonical_labels,
    )


class DatasetLoader:
    """Fetch all three artifacts concurrently and assemble a Dataset."""

    def __init__(self, settings: Optional[SourceSettings] = None, reader: Optional[Reader] = None) -> None:
        self.settings = settings or get_source_settings()
        self._reader = reader or (lambda location: read_artifact(location, self.settings.fetch_timeout))

    def load(self) -> Dataset:
        settings = self.settings
        logger.info("Loading dataset: tree=%s scores=%s explanations=%s",
                    settings.tree, settings.scores, settings.explanations)
        pool = ThreadPoolExecutor(max_workers=3, thread_name_prefix="artifact-load")
        tree_future = pool.submit(self._reader, settings.tree)
        scores_future = pool.submit(self._reader, settings.scores)
        explanations_future = pool.submit(self._reader, settings.explanations)

        # Tree failures propagate (LoadError / StructuralError) without waiting on the matrices
        try:
            tree_data = parse_tree_text(tree_future.result(), source=settings.tree)
            dendrogram = build_from_data(tree_data)
        except BaseException:
            pool.shutdown(wait=False, cancel_futures=True)
            raise

        dataset = Dataset(tree_data=tree_data, dendrogram=dendrogram)
        logger.info("Tree loaded: %d leaves, %d merges", dendrogram.n_leaves, dendrogram.n_merges)

        with pool:
            try:
                dataset.matrices = self._matrices_from(
                    scores_future, explanations_future, tree_data.labels, settings
                )
            except DendroError as exc:
                dataset.pairwise_error = str(exc)
                logger.warning("Pairwise matrices unavailable: %s", exc)
        return dataset

    @staticmethod
    def _matrices_from(
        scores_future: "Future[str]",
        explanations_future: "Future[str]",
        canonical_labels: List[str],
        settings: SourceSettings,
    ) -> MatrixBundle:
        scores_text = scores_future.result()
        explanations_text = explanations_future.result()
        bundle = align_matrices(
            parse_score_matrix(scores_text, source=settings.scores),
            parse_explanation_matrix(explanations_text, source=settings.explanations),
            canonical_labels,
        )
        logger.info("Matrices aligned to %d canonical labels", len(bundle.labels))
        return bundle
