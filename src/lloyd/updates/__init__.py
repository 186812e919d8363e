"""Center update strategies for the clustering engine."""

from .mean import MeanUpdater
from .empty_cluster import (
    EmptyClusterPolicy,
    KeepCenter,
    ReinitializeCenter,
    get_empty_cluster_policy
)

__all__ = [
    'MeanUpdater',
    'EmptyClusterPolicy',
    'KeepCenter',
    'ReinitializeCenter',
    'get_empty_cluster_policy'
]
