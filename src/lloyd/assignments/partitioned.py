"""
Partitioned nearest-center assignment.

Each point's nearest center is independent of every other point's, so the
point set can be split into contiguous chunks assigned on worker threads.
Workers only read the centers. Each returns its own moved count and the
partial counts are summed once every chunk has finished.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple
import logging
from torch import Tensor
import torch

from ..base.interfaces import DistanceMetric
from ..utils.device import get_worker_count
from .hard import NearestCenterAssignment

logger = logging.getLogger(__name__)


class PartitionedAssignment(NearestCenterAssignment):
    """Nearest-center assignment spread over a thread pool.

    Produces exactly the same labels, distances and moved count as
    NearestCenterAssignment.
    """

    def __init__(self, n_jobs: Optional[int] = -1,
                 metric: Optional[DistanceMetric] = None,
                 min_chunk_size: int = 1024):
        """
        Args:
            n_jobs: Worker count (-1 for one per logical processor)
            metric: Distance metric (default: squared Euclidean)
            min_chunk_size: Smallest number of points worth a worker
        """
        super().__init__(metric=metric)
        if min_chunk_size < 1:
            raise ValueError(f"min_chunk_size must be positive, got {min_chunk_size}")
        self.n_workers = get_worker_count(n_jobs)
        self.min_chunk_size = min_chunk_size

    def n_chunks(self, n_points: int) -> int:
        """Number of chunks the points are split into."""
        return max(1, min(self.n_workers, n_points // self.min_chunk_size))

    def _assign_chunk(self, points: Tensor, centers: Tensor,
                      previous_labels: Tensor) -> Tuple[Tensor, Tensor, int]:
        labels, distances = self.compute_assignments(points, centers)
        moved = int((labels != previous_labels).sum().item())
        return labels, distances, moved

    def assign(self, points: Tensor, centers: Tensor,
               previous_labels: Tensor) -> Tuple[Tensor, Tensor, int]:
        """Assign points chunk by chunk on a thread pool.

        Args:
            points: (n, d) tensor of points
            centers: (K, d) tensor of centers, read-only for the workers
            previous_labels: (n,) labels before this pass

        Returns:
            labels, distances, and the number of points whose label changed
        """
        n_chunks = self.n_chunks(points.shape[0])
        if n_chunks == 1:
            return self._assign_chunk(points, centers, previous_labels)

        logger.debug("Assigning %d points in %d chunks", points.shape[0], n_chunks)

        point_chunks = torch.tensor_split(points, n_chunks)
        label_chunks = torch.tensor_split(previous_labels, n_chunks)

        with ThreadPoolExecutor(max_workers=n_chunks) as pool:
            futures = [pool.submit(self._assign_chunk, chunk, centers, previous)
                       for chunk, previous in zip(point_chunks, label_chunks)]
            # Collected in submission order so chunks concatenate back in point order
            results = [future.result() for future in futures]

        labels = torch.cat([result[0] for result in results])
        distances = torch.cat([result[1] for result in results])
        moved = sum(result[2] for result in results)

        return labels, distances, moved
