"""
Read-only views of the engine state.

The engine stores points column-wise (coordinates, labels, distances) in
tensors. These dataclasses hand callers a snapshot they can inspect without
reaching into the engine's own buffers.
"""

from typing import Optional, List
import torch
from torch import Tensor
from dataclasses import dataclass


@dataclass(frozen=True)
class PointView:
    """One loaded point together with its current assignment."""

    index: int
    coordinates: Tensor     # (d,) copy of the point's coordinates
    cluster_index: int
    squared_distance: float

    @property
    def dimension(self) -> int:
        return self.coordinates.shape[0]

    def tolist(self) -> List[float]:
        return self.coordinates.tolist()


@dataclass
class ClusterState:
    """Snapshot of centers and assignments at a given point of the run."""

    centers: Tensor         # (K, d) cluster centers
    labels: Tensor          # (n,) cluster index per point
    distances: Tensor       # (n,) squared distance to assigned center
    cluster_sizes: Tensor   # (K,) number of points per cluster
    moved_count: Optional[int] = None
    inertia: Optional[float] = None

    def __post_init__(self):
        assert self.centers.dim() == 2
        assert self.labels.shape == self.distances.shape
        assert self.cluster_sizes.shape == (self.centers.shape[0],)

    @property
    def n_clusters(self) -> int:
        return self.centers.shape[0]

    @property
    def dimension(self) -> int:
        return self.centers.shape[1]

    @property
    def device(self) -> torch.device:
        """Device where tensors are stored."""
        return self.centers.device

    def to(self, device: torch.device) -> 'ClusterState':
        """Move all tensors to specified device."""
        return ClusterState(
            centers=self.centers.to(device),
            labels=self.labels.to(device),
            distances=self.distances.to(device),
            cluster_sizes=self.cluster_sizes.to(device),
            moved_count=self.moved_count,
            inertia=self.inertia
        )

    def empty_clusters(self) -> List[int]:
        """Indices of clusters with no assigned points."""
        return torch.nonzero(self.cluster_sizes == 0).flatten().tolist()
