"""
Initialization from fixed centers.

Useful for warm starts or when you have good initial guesses.
"""

from typing import Optional, Union
import torch
from torch import Tensor
import numpy as np

from ..base.interfaces import InitializationStrategy
from ..base.data_structures import ClusterState
from ..utils.validation import validate_centers


class FixedCentersInit(InitializationStrategy):
    """Initialize from given cluster centers.

    Accepts either:
    - An array of shape (n_clusters, dimension) with initial centers
    - A ClusterState object from a previous run
    """

    def __init__(self, initial_state: Union[Tensor, np.ndarray, list, ClusterState]):
        """
        Args:
            initial_state: Previous solution or explicit centers
        """
        self.initial_state = initial_state

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize from the stored centers.

        Args:
            points: (n, d) data points (used for validation)
            n_clusters: Expected number of clusters
            generator: Ignored

        Returns:
            (n_clusters, d) tensor of centers

        Raises:
            InvalidArgument: If the stored centers do not match n_clusters
                or the data dimension
        """
        centers = self.initial_state
        if isinstance(centers, ClusterState):
            centers = centers.centers

        return validate_centers(centers, n_clusters, points.shape[1],
                                dtype=points.dtype, device=points.device)
