"""
Mean update strategy for centroid-based clustering.
"""

from typing import Optional, Tuple, Union
import warnings
import torch
from torch import Tensor

from ..base.interfaces import ParameterUpdater
from ..base.exceptions import EmptyClusterWarning, PreconditionViolation
from ..utils.validation import accumulator_dtype
from .empty_cluster import EmptyClusterPolicy, get_empty_cluster_policy


class MeanUpdater(ParameterUpdater):
    """Moves every center to the mean of the points assigned to it.

    Sums are accumulated per cluster in one pass over the points. Floating
    point data is accumulated in float64 and cast back; integer data uses
    truncating division.
    """

    def __init__(self, empty_cluster: Union[str, EmptyClusterPolicy] = 'keep'):
        """
        Args:
            empty_cluster: Policy for clusters with no points
                ('keep' or 'reinitialize')
        """
        self.empty_policy = get_empty_cluster_policy(empty_cluster)

    def update(self, points: Tensor, labels: Tensor, centers: Tensor,
               generator: Optional[torch.Generator] = None,
               **kwargs) -> Tuple[Tensor, Tensor]:
        """Recompute centers as cluster means.

        Args:
            points: (n, d) tensor of points
            labels: (n,) long tensor of assignments
            centers: (K, d) current centers
            generator: Optional random generator for the empty-cluster policy

        Returns:
            new_centers: (K, d) tensor
            counts: (K,) number of points per cluster
        """
        n_clusters, dimension = centers.shape

        counts = torch.bincount(labels, minlength=n_clusters)
        if counts.shape[0] > n_clusters:
            raise PreconditionViolation(f"Labels reference cluster {counts.shape[0] - 1}, "
                                        f"but only {n_clusters} centers exist")

        accum_dtype = accumulator_dtype(points.dtype, points.device)

        sums = torch.zeros((n_clusters, dimension), dtype=accum_dtype, device=points.device)
        sums.index_add_(0, labels, points.to(accum_dtype))

        new_centers = centers.clone()
        filled = counts > 0
        divisor = counts[filled].unsqueeze(1).to(accum_dtype)

        if points.is_floating_point():
            means = sums[filled] / divisor
        else:
            means = torch.div(sums[filled], divisor, rounding_mode='trunc')

        new_centers[filled] = means.to(centers.dtype)

        empty = torch.nonzero(~filled).flatten()
        if len(empty) > 0:
            warnings.warn(f"Clusters {empty.tolist()} have no assigned points; "
                          f"applying '{self.empty_policy.name}' policy",
                          EmptyClusterWarning)
            new_centers = self.empty_policy.resolve(new_centers, empty, points,
                                                    generator=generator)

        return new_centers, counts
