"""
Nearest-center assignment strategy.

Assigns each point to its nearest cluster center under squared Euclidean
distance.
"""

from typing import Optional, Tuple
import torch
from torch import Tensor

from ..base.interfaces import AssignmentStrategy, DistanceMetric
from ..base.exceptions import PreconditionViolation
from ..distances.euclidean import SquaredEuclideanDistance


class NearestCenterAssignment(AssignmentStrategy):
    """Hard (discrete) assignment to the nearest center.

    Every point is compared against every center; there is no pruning or
    approximate search. Ties go to the lowest center index.
    """

    def __init__(self, metric: Optional[DistanceMetric] = None):
        """
        Args:
            metric: Distance metric (default: squared Euclidean)
        """
        super().__init__()
        self.metric = metric if metric is not None else SquaredEuclideanDistance()

    def compute_assignments(self, points: Tensor, centers: Tensor,
                            **kwargs) -> Tuple[Tensor, Tensor]:
        """Assign each point to nearest center.

        Args:
            points: (n, d) data points
            centers: (K, d) cluster centers

        Returns:
            labels: (n,) tensor of center indices
            distances: (n,) squared distance to the chosen center
        """
        if centers.shape[0] == 0:
            raise PreconditionViolation("Cannot assign points without cluster centers")

        distances = self.metric.compute(points, centers)

        # argmin returns the first minimal index, so ties resolve to the lowest center
        labels = torch.argmin(distances, dim=1)
        min_distances = torch.gather(distances, 1, labels.unsqueeze(1)).squeeze(1)

        return labels, min_distances
