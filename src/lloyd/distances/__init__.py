"""Distance metrics for the clustering engine."""

from .euclidean import squared_distance, SquaredEuclideanDistance

__all__ = [
    'squared_distance',
    'SquaredEuclideanDistance'
]
