"""Assignment strategies for the clustering engine."""

from .hard import NearestCenterAssignment
from .partitioned import PartitionedAssignment

__all__ = [
    'NearestCenterAssignment',
    'PartitionedAssignment'
]
