"""
Error and warning types raised by the clustering engine.

Errors are local to one engine instance and never terminate the process.
Non-fatal conditions (degenerate data, empty clusters) are reported through
``warnings.warn`` and resolved by a documented policy.
"""


class ClusteringError(Exception):
    """Base class for all errors raised by the engine."""


class InvalidArgument(ClusteringError, ValueError):
    """Bad input: empty data, zero stride, mismatched or non-divisible lengths."""


class PreconditionViolation(ClusteringError, RuntimeError):
    """Operation called before data or centers are established."""


class DegenerateInputWarning(UserWarning):
    """A dimension of the loaded data has zero width (min == max)."""


class EmptyClusterWarning(UserWarning):
    """A cluster had no assigned points during centroid recomputation."""
