"""
Squared Euclidean distance, the only metric the engine uses.

No square root is taken anywhere: nearest-center search only needs the
relative ordering of distances. Differences are squared in a widened dtype
(int64 or float64) so integer and float32 coordinates do not overflow.
"""

from typing import Union, Sequence
import torch
from torch import Tensor

from ..base.interfaces import DistanceMetric
from ..base.exceptions import InvalidArgument
from ..utils.validation import accumulator_dtype


def squared_distance(point_a: Union[Tensor, Sequence[float]],
                     point_b: Union[Tensor, Sequence[float]]) -> Tensor:
    """Sum of squared per-dimension differences between two points.

    Args:
        point_a: (d,) coordinates
        point_b: (d,) coordinates

    Returns:
        0-dim tensor holding the squared distance, int64 for integer
        coordinates and float64 otherwise

    Raises:
        InvalidArgument: If the points are not 1D or differ in length
    """
    a = torch.as_tensor(point_a)
    b = torch.as_tensor(point_b, device=a.device)

    if a.dim() != 1 or b.dim() != 1:
        raise InvalidArgument(f"Expected 1D points, got {a.dim()}D and {b.dim()}D")

    if a.shape[0] != b.shape[0]:
        raise InvalidArgument(f"Points differ in length: {a.shape[0]} != {b.shape[0]}")

    wide = accumulator_dtype(torch.promote_types(a.dtype, b.dtype), a.device)
    diff = a.to(wide) - b.to(wide)
    return torch.sum(diff * diff)


class SquaredEuclideanDistance(DistanceMetric):
    """Squared Euclidean distance metric.

    Computes ||x - c||² between every point x and every center c.
    """

    def compute(self, points: Tensor, centers: Tensor, **kwargs) -> Tensor:
        """Compute squared distances from points to centers.

        Args:
            points: (n, d) tensor of points
            centers: (K, d) tensor of centers

        Returns:
            (n, K) tensor of squared distances in the widened dtype
        """
        if points.dim() != 2 or centers.dim() != 2:
            raise InvalidArgument("Points and centers must be 2D tensors")

        if points.shape[1] != centers.shape[1]:
            raise InvalidArgument(f"Points have dimension {points.shape[1]}, "
                                  f"centers have dimension {centers.shape[1]}")

        wide = accumulator_dtype(points.dtype, points.device)

        # Direct differences keep the result exact; no ||x||² + ||c||² - 2x·c expansion
        diff = points.to(wide).unsqueeze(1) - centers.to(wide).unsqueeze(0)
        return torch.sum(diff * diff, dim=2)
