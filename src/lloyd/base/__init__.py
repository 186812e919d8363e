"""Base classes, data structures and errors for the clustering engine."""

from .interfaces import (
    DistanceMetric,
    InitializationStrategy,
    AssignmentStrategy,
    ParameterUpdater,
    ConvergenceCriterion
)

from .data_structures import (
    PointView,
    ClusterState
)

from .exceptions import (
    ClusteringError,
    InvalidArgument,
    PreconditionViolation,
    DegenerateInputWarning,
    EmptyClusterWarning
)

__all__ = [
    # Interfaces
    'DistanceMetric',
    'InitializationStrategy',
    'AssignmentStrategy',
    'ParameterUpdater',
    'ConvergenceCriterion',

    # Data structures
    'PointView',
    'ClusterState',

    # Errors
    'ClusteringError',
    'InvalidArgument',
    'PreconditionViolation',
    'DegenerateInputWarning',
    'EmptyClusterWarning'
]
