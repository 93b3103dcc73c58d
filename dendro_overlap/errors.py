"""Error taxonomy for tree construction, artifact loading and matrix alignment."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class DendroError(Exception):
    """Base class for every error raised by dendro_overlap."""


class StructuralError(DendroError, ValueError):
    """Malformed linkage or tree payload. Tree construction is aborted."""


class LoadError(DendroError):
    """An input artifact could not be fetched or parsed."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


@dataclass
class AlignmentDegradation:
    """Canonical labels that have no counterpart in a matrix (non-fatal)."""

    matrix_name: str
    missing_labels: List[str] = field(default_factory=list)
    total_labels: int = 0

    @property
    def is_degraded(self) -> bool:
        return bool(self.missing_labels)

    def summary(self) -> str:
        preview = ", ".join(self.missing_labels[:5])
        if len(self.missing_labels) > 5:
            preview += ", ..."
        return (
            f"{self.matrix_name}: {len(self.missing_labels)}/{self.total_labels} "
            f"labels without data ({preview})"
        )
