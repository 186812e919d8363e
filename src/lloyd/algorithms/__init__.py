"""Clustering algorithms built on the step strategies."""

from .kmeans import ClusteringEngine

__all__ = [
    'ClusteringEngine'
]
