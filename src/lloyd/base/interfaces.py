"""
Core interfaces for the clustering engine.

The engine composes one strategy per step of Lloyd's algorithm. This module
defines the abstract base classes those strategies implement, so alternative
initializations or a partitioned assignment step can be swapped in without
touching the engine.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple, Dict, Any
import torch
from torch import Tensor


class DistanceMetric(ABC):
    """Abstract base class for point-to-center distance computations."""

    @abstractmethod
    def compute(self, points: Tensor, centers: Tensor, **kwargs) -> Tensor:
        """Compute distances from every point to every center.

        Args:
            points: (n, d) tensor of points
            centers: (K, d) tensor of cluster centers
            **kwargs: Metric-specific parameters

        Returns:
            (n, K) tensor of distances
        """
        pass


class InitializationStrategy(ABC):
    """Abstract base class for cluster center initialization strategies."""

    @abstractmethod
    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Create starting centers.

        Args:
            points: (n, d) tensor of loaded points
            n_clusters: Number of centers to create
            generator: Optional random generator for reproducible draws
            **kwargs: Strategy-specific parameters

        Returns:
            (n_clusters, d) tensor of centers
        """
        pass


class AssignmentStrategy(ABC):
    """Abstract base class for point-to-cluster assignment strategies."""

    @abstractmethod
    def compute_assignments(self, points: Tensor, centers: Tensor,
                            **kwargs) -> Tuple[Tensor, Tensor]:
        """Assign every point to a center.

        Args:
            points: (n, d) tensor of points
            centers: (K, d) tensor of centers

        Returns:
            labels: (n,) long tensor of center indices
            distances: (n,) tensor of distances to the chosen center
        """
        pass

    def assign(self, points: Tensor, centers: Tensor,
               previous_labels: Tensor) -> Tuple[Tensor, Tensor, int]:
        """Assign points and count how many changed cluster.

        Args:
            points: (n, d) tensor of points
            centers: (K, d) tensor of centers
            previous_labels: (n,) labels before this pass

        Returns:
            labels, distances, and the number of points whose label changed
        """
        labels, distances = self.compute_assignments(points, centers)
        moved = int((labels != previous_labels).sum().item())
        return labels, distances, moved


class ParameterUpdater(ABC):
    """Abstract base class for center update strategies."""

    @abstractmethod
    def update(self, points: Tensor, labels: Tensor, centers: Tensor,
               generator: Optional[torch.Generator] = None,
               **kwargs) -> Tuple[Tensor, Tensor]:
        """Compute new centers from the current assignment.

        Args:
            points: (n, d) tensor of points
            labels: (n,) long tensor of assignments
            centers: (K, d) current centers
            generator: Optional random generator used by empty-cluster policies

        Returns:
            new_centers: (K, d) tensor
            counts: (K,) number of points per cluster
        """
        pass


class ConvergenceCriterion(ABC):
    """Abstract base class for convergence checking."""

    def __init__(self):
        self.history = []

    @abstractmethod
    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if the algorithm has converged.

        Args:
            current_state: Dictionary describing the round that just finished

        Returns:
            True if converged, False otherwise
        """
        pass

    def reset(self):
        """Reset convergence history."""
        self.history = []
