"""
Bounding-box initialization strategy.

Draws every center coordinate uniformly inside the range the loaded data
spans in that dimension.
"""

from typing import Optional, Tuple
import warnings
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..base.exceptions import InvalidArgument, DegenerateInputWarning


def data_bounds(points: Tensor) -> Tuple[Tensor, Tensor]:
    """Per-dimension minimum and maximum of the data.

    Args:
        points: (n, d) tensor with n >= 1

    Returns:
        lower: (d,) minimum of each dimension
        upper: (d,) maximum of each dimension
    """
    if points.dim() != 2 or points.shape[0] == 0:
        raise InvalidArgument("Bounds need a non-empty (n, d) tensor")

    return points.min(dim=0).values, points.max(dim=0).values


def degenerate_dimensions(lower: Tensor, upper: Tensor) -> Tensor:
    """Indices of dimensions whose bounds have zero width."""
    return torch.nonzero(upper == lower).flatten()


def draw_uniform_in_bounds(lower: Tensor, upper: Tensor, n_samples: int,
                           generator: Optional[torch.Generator] = None) -> Tensor:
    """Draw points uniformly in the box [lower, upper).

    Zero-width dimensions yield the constant bound value.

    Args:
        lower: (d,) lower bounds
        upper: (d,) upper bounds
        n_samples: Number of points to draw
        generator: Optional random generator

    Returns:
        (n_samples, d) tensor with the dtype and device of ``lower``
    """
    dimension = lower.shape[0]
    dtype = lower.dtype
    device = lower.device

    if dtype.is_floating_point:
        u = torch.rand(n_samples, dimension, generator=generator,
                       dtype=dtype, device=device)
        # upper - lower overflows for ranges wider than half the dtype's span
        samples = lower.unsqueeze(0) * (1 - u) + upper.unsqueeze(0) * u
        samples = torch.minimum(torch.maximum(samples, lower), upper)
    else:
        # randint needs scalar bounds, so integer data is drawn per dimension
        samples = torch.empty((n_samples, dimension), dtype=dtype, device=device)
        for j in range(dimension):
            low, high = int(lower[j]), int(upper[j])
            if high > low:
                samples[:, j] = torch.randint(low, high, (n_samples,), generator=generator,
                                              dtype=dtype, device=device)
            else:
                samples[:, j] = low

    # Collapse degenerate dimensions to the constant value
    degenerate = upper == lower
    if degenerate.any():
        samples[:, degenerate] = lower[degenerate]

    return samples


class BoundingBoxInit(InitializationStrategy):
    """Random initialization inside the data's bounding box.

    Algorithm:
    1. Scan all points once for the min and max of every dimension
    2. Draw each coordinate of each center uniformly in [min_d, max_d)

    Centers are not kept apart from each other; they may start arbitrarily
    close together, which can slow convergence.
    """

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Initialize cluster centers inside the bounding box.

        Args:
            points: (n, d) data points
            n_clusters: Number of clusters
            generator: Optional random generator

        Returns:
            (n_clusters, d) tensor of centers
        """
        lower, upper = data_bounds(points)

        degenerate = degenerate_dimensions(lower, upper)
        if len(degenerate) > 0:
            warnings.warn(f"Dimensions {degenerate.tolist()} have zero width; "
                          f"centers take the constant value there",
                          DegenerateInputWarning)

        return draw_uniform_in_bounds(lower, upper, n_clusters, generator=generator)
