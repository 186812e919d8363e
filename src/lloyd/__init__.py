"""
Lloyd: a k-means clustering engine on PyTorch tensors.

The engine partitions a flat collection of N-dimensional points into K
clusters by alternating two steps until no point changes cluster:
- assign every point to its nearest center (squared Euclidean distance)
- move every center to the mean of its assigned points

Example usage:
    >>> from lloyd import ClusteringEngine, run_until_stable
    >>>
    >>> engine = ClusteringEngine(random_state=0)
    >>> engine.load([0, 0, 0, 1, 10, 10, 10, 11], stride=2)
    8
    >>> engine.set_cluster_count(2)
    >>> engine.initialize(centers=[[0, 0], [10, 10]])
    >>> report = run_until_stable(engine)
    >>> engine.centers
    tensor([[ 0.0000,  0.5000],
            [10.0000, 10.5000]])
"""

__version__ = '0.1.0'

from .algorithms.kmeans import ClusteringEngine

from .base import (
    PointView,
    ClusterState,
    ClusteringError,
    InvalidArgument,
    PreconditionViolation,
    DegenerateInputWarning,
    EmptyClusterWarning
)

from .distances import squared_distance, SquaredEuclideanDistance
from .initialization import BoundingBoxInit, FixedCentersInit
from .assignments import NearestCenterAssignment, PartitionedAssignment
from .updates import MeanUpdater, KeepCenter, ReinitializeCenter

from .utils import (
    NoPointsMoved,
    ChangeInInertia,
    ConvergenceReport,
    run_until_stable,
    LoggingSink,
    StreamSink,
    RecordingSink
)

__all__ = [
    # Engine
    'ClusteringEngine',

    # Data structures
    'PointView',
    'ClusterState',

    # Errors
    'ClusteringError',
    'InvalidArgument',
    'PreconditionViolation',
    'DegenerateInputWarning',
    'EmptyClusterWarning',

    # Steps
    'squared_distance',
    'SquaredEuclideanDistance',
    'BoundingBoxInit',
    'FixedCentersInit',
    'NearestCenterAssignment',
    'PartitionedAssignment',
    'MeanUpdater',
    'KeepCenter',
    'ReinitializeCenter',

    # Driving and diagnostics
    'NoPointsMoved',
    'ChangeInInertia',
    'ConvergenceReport',
    'run_until_stable',
    'LoggingSink',
    'StreamSink',
    'RecordingSink',

    # Version
    '__version__'
]
