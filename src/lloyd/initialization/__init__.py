"""Initialization strategies for the clustering engine."""

from .bounding_box import (
    BoundingBoxInit,
    data_bounds,
    degenerate_dimensions,
    draw_uniform_in_bounds
)
from .from_previous import FixedCentersInit

__all__ = [
    'BoundingBoxInit',
    'FixedCentersInit',
    'data_bounds',
    'degenerate_dimensions',
    'draw_uniform_in_bounds'
]
