"""Pairwise score / explanation matrices: layout detection, parsing, alignment."""
from dendro_overlap.matrix.layout import MatrixLayout, detect_layout
from dendro_overlap.matrix.parsing import (
    ParsedMatrix,
    parse_explanation_matrix,
    parse_score_cell,
    parse_score_matrix,
    tokenize_csv,
)
from dendro_overlap.matrix.align import (
    align_by_labels,
    align_explanations,
    align_scores,
    missing_labels,
    report_alignment,
)
