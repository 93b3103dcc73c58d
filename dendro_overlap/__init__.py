"""Dendrogram clustering and overlap-matrix alignment."""

__version__ = "0.1.0"
