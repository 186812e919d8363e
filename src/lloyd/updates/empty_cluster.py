"""
Policies for clusters that end a round with no assigned points.

The mean of zero points is undefined, so centroid recomputation hands empty
clusters to one of these policies instead of dividing by zero.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union
import torch
from torch import Tensor

from ..base.exceptions import InvalidArgument
from ..initialization.bounding_box import data_bounds, draw_uniform_in_bounds


class EmptyClusterPolicy(ABC):
    """Decides where an empty cluster's center goes."""

    name: str = ''

    @abstractmethod
    def resolve(self, centers: Tensor, empty: Tensor, points: Tensor,
                generator: Optional[torch.Generator] = None) -> Tensor:
        """Return centers with the empty clusters handled.

        Args:
            centers: (K, d) centers after recomputation, may be modified in place
            empty: (m,) indices of clusters with no points
            points: (n, d) data points
            generator: Optional random generator

        Returns:
            (K, d) centers
        """
        pass


class KeepCenter(EmptyClusterPolicy):
    """Leave the center where it was."""

    name = 'keep'

    def resolve(self, centers: Tensor, empty: Tensor, points: Tensor,
                generator: Optional[torch.Generator] = None) -> Tensor:
        return centers


class ReinitializeCenter(EmptyClusterPolicy):
    """Redraw the center uniformly inside the data's bounding box."""

    name = 'reinitialize'

    def resolve(self, centers: Tensor, empty: Tensor, points: Tensor,
                generator: Optional[torch.Generator] = None) -> Tensor:
        lower, upper = data_bounds(points)
        centers[empty] = draw_uniform_in_bounds(lower, upper, len(empty),
                                                generator=generator).to(centers.dtype)
        return centers


EMPTY_CLUSTER_POLICIES = {
    KeepCenter.name: KeepCenter,
    ReinitializeCenter.name: ReinitializeCenter,
}


def get_empty_cluster_policy(policy: Union[str, EmptyClusterPolicy]) -> EmptyClusterPolicy:
    """Look up a policy by name, or pass an instance through."""
    if isinstance(policy, EmptyClusterPolicy):
        return policy

    if policy not in EMPTY_CLUSTER_POLICIES:
        raise InvalidArgument(f"Unknown empty cluster policy: {policy!r}. "
                              f"Expected one of {sorted(EMPTY_CLUSTER_POLICIES)}")

    return EMPTY_CLUSTER_POLICIES[policy]()
