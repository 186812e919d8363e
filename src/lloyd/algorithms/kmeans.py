"""
K-means clustering engine.

Owns a point set and a center set and exposes the steps of Lloyd's algorithm
as separate operations. The caller composes them:

    load -> initialize -> repeat(assign_round, recompute_centroids)

stopping when ``assign_round`` reports that no point moved. The engine holds
no loop of its own; ``lloyd.utils.convergence.run_until_stable`` is a ready
made driver.
"""

from typing import Optional, Union, Dict, Any, Tuple
import logging
import threading
import warnings
import torch
from torch import Tensor
import numpy as np

from ..base.interfaces import InitializationStrategy
from ..base.data_structures import PointView, ClusterState
from ..base.exceptions import InvalidArgument, PreconditionViolation
from ..initialization.bounding_box import BoundingBoxInit, data_bounds, degenerate_dimensions
from ..initialization.from_previous import FixedCentersInit
from ..assignments.hard import NearestCenterAssignment
from ..assignments.partitioned import PartitionedAssignment
from ..updates.mean import MeanUpdater
from ..updates.empty_cluster import EmptyClusterPolicy
from ..utils.device import parse_device, get_worker_count
from ..utils.diagnostics import DiagnosticSink
from ..utils.validation import (
    check_dtype, check_n_clusters, check_random_state,
    accumulator_dtype, max_representable, validate_flat_values
)

logger = logging.getLogger(__name__)

InitSpec = Union[str, InitializationStrategy, Tensor, np.ndarray, list]

_SETTABLE_PARAMS = ('n_clusters', 'init', 'empty_cluster', 'random_state',
                    'n_jobs', 'dtype', 'device', 'diagnostics')


class ClusteringEngine:
    """K-means over a flat collection of N-dimensional points.

    Points are stored column-wise: an (n, stride) coordinate tensor, an (n,)
    label tensor and an (n,) squared-distance tensor (int64 or float64, wide
    enough that squaring coordinates cannot overflow). Centers are a (K, stride)
    tensor. Every mutating operation runs under one re-entrant lock, so an
    engine shared between threads serializes its operations.

    Parameters
    ----------
    n_clusters : int, optional
        Number of clusters K. When omitted, ``load`` defaults K to the
        stride of the data. An explicit value survives later loads.
    init : str, InitializationStrategy or array-like, default='bounding-box'
        Initialization method:
        - 'bounding-box' : uniform draws inside the data's per-dimension range
        - InitializationStrategy instance : used as-is
        - array of shape (n_clusters, stride) : use as initial centers
    empty_cluster : str or EmptyClusterPolicy, default='keep'
        What recomputation does with a cluster that has no points:
        - 'keep' : leave its center unchanged
        - 'reinitialize' : redraw it inside the data's bounding box
    random_state : int or torch.Generator, optional
        Seed for reproducible initialization
    n_jobs : int, optional
        Worker threads for the assignment step (None or 1: sequential,
        -1: one per logical processor)
    dtype : torch.dtype, default=torch.float32
        Numeric element type of points and centers
    device : str or torch.device, optional
        Device for computation (default CPU)
    diagnostics : callable, optional
        Sink receiving ``(event, payload)`` for every step

    Attributes
    ----------
    stride : int
        Dimensionality of the loaded points (0 before ``load``)
    n_clusters : int
        Current number of clusters
    moved_count : int or None
        Points whose cluster changed in the last ``assign_round``
        (None before the first one)
    """

    def __init__(self,
                 n_clusters: Optional[int] = None,
                 init: InitSpec = 'bounding-box',
                 empty_cluster: Union[str, EmptyClusterPolicy] = 'keep',
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 n_jobs: Optional[int] = None,
                 dtype: torch.dtype = torch.float32,
                 device: Optional[Union[str, torch.device]] = None,
                 diagnostics: Optional[DiagnosticSink] = None):
        """Create an empty engine."""
        self.init = init
        self.empty_cluster = empty_cluster
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.dtype = check_dtype(dtype)
        self.device = parse_device(device)
        self.diagnostics = diagnostics

        self._lock = threading.RLock()
        self._generator = check_random_state(random_state, self.device)

        if n_clusters is None:
            self._n_clusters = 0
            self._n_clusters_fixed = False
        else:
            self._n_clusters = check_n_clusters(n_clusters)
            self._n_clusters_fixed = True

        self._reset_storage()
        self._create_components()

    @property
    def _distance_dtype(self) -> torch.dtype:
        return accumulator_dtype(self.dtype, self.device)

    def _reset_storage(self) -> None:
        self._stride = 0
        self._points = torch.empty((0, 0), dtype=self.dtype, device=self.device)
        self._labels = torch.empty(0, dtype=torch.long, device=self.device)
        self._distances = torch.empty(0, dtype=self._distance_dtype, device=self.device)
        self._centers = torch.empty((0, 0), dtype=self.dtype, device=self.device)
        self._moved_count: Optional[int] = None

    def _create_components(self) -> None:
        """Create the strategies for each step of the algorithm."""
        if isinstance(self.init, InitializationStrategy):
            self.initialization_strategy = self.init
        elif isinstance(self.init, str):
            if self.init != 'bounding-box':
                raise InvalidArgument(f"Unknown init method: {self.init}")
            self.initialization_strategy = BoundingBoxInit()
        else:
            self.initialization_strategy = FixedCentersInit(self.init)

        if get_worker_count(self.n_jobs) > 1:
            self.assignment_strategy = PartitionedAssignment(n_jobs=self.n_jobs)
        else:
            self.assignment_strategy = NearestCenterAssignment()

        self.update_strategy = MeanUpdater(empty_cluster=self.empty_cluster)

    def _emit(self, event: str, **payload: Any) -> None:
        if self.diagnostics is not None:
            self.diagnostics(event, payload)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def load(self, values, stride: int, length: Optional[int] = None) -> int:
        """Load a flat sequence of coordinates as points.

        Args:
            values: Flat sequence (list, numpy array or tensor), point after point
            stride: Number of coordinates per point
            length: Number of leading values to use (default: all)

        Returns:
            Number of coordinate values stored (point count * stride)

        Raises:
            InvalidArgument: Empty input, non-positive stride, or a length
                that exceeds the input or is not a multiple of stride. The
                engine is left unchanged.
        """
        points = validate_flat_values(values, stride, length=length,
                                      dtype=self.dtype, device=self.device)
        n_points, stride = points.shape

        with self._lock:
            self._points = points
            self._labels = torch.zeros(n_points, dtype=torch.long, device=self.device)
            self._distances = torch.full((n_points,), max_representable(self.dtype),
                                         dtype=self._distance_dtype, device=self.device)
            self._stride = stride
            self._centers = torch.empty((0, stride), dtype=self.dtype, device=self.device)
            self._moved_count = None

            if not self._n_clusters_fixed:
                self._n_clusters = stride

            logger.debug("Loaded %d points of dimension %d", n_points, stride)
            self._emit('loaded', n_points=n_points, stride=stride)

        return n_points * stride

    def set_cluster_count(self, n_clusters: int) -> None:
        """Set the number of clusters K.

        Takes effect at the next ``initialize``; until then assignment and
        recomputation refuse to run against centers of a different count.

        Raises:
            InvalidArgument: If n_clusters is not a positive int
        """
        n_clusters = check_n_clusters(n_clusters)

        with self._lock:
            self._n_clusters = n_clusters
            self._n_clusters_fixed = True

            n_centers = self._centers.shape[0]
            if n_centers and n_centers != n_clusters:
                logger.debug("n_clusters set to %d with %d centers; re-initialize before assigning",
                             n_clusters, n_centers)

    def initialize(self, centers=None) -> None:
        """Create the starting centers, replacing any existing ones.

        Args:
            centers: Optional (n_clusters, stride) array of explicit centers.
                Overrides the configured init strategy for this call.

        Raises:
            PreconditionViolation: If no data has been loaded
            InvalidArgument: If explicit centers have the wrong shape
        """
        with self._lock:
            if self._stride == 0:
                raise PreconditionViolation("No data loaded; call load() before initialize()")
            if self._n_clusters <= 0:
                raise PreconditionViolation("Number of clusters is not set")

            if centers is not None:
                strategy = FixedCentersInit(centers)
            else:
                strategy = self.initialization_strategy

            new_centers = strategy.initialize(self._points, self._n_clusters,
                                              generator=self._generator)
            new_centers = new_centers.to(dtype=self.dtype, device=self.device)

            if new_centers.shape != (self._n_clusters, self._stride):
                raise InvalidArgument(f"Initialization produced centers of shape "
                                      f"{tuple(new_centers.shape)}, expected "
                                      f"{(self._n_clusters, self._stride)}")

            self._centers = new_centers.clone()
            self._moved_count = None

            # Only the bounding-box draw collapses zero-width dimensions
            collapsed = []
            if isinstance(strategy, BoundingBoxInit):
                lower, upper = data_bounds(self._points)
                degenerate = degenerate_dimensions(lower, upper)
                collapsed = degenerate.tolist()
                if collapsed:
                    self._emit('degenerate_dimension', dimensions=collapsed,
                               values=lower[degenerate].tolist())

            n_distinct = torch.unique(self._centers, dim=0).shape[0]
            if n_distinct < self._n_clusters:
                warnings.warn(f"Only {n_distinct} of {self._n_clusters} initial centers are "
                              f"distinct; coincident centers can slow convergence")

            logger.debug("Initialized %d centers", self._n_clusters)
            self._emit('initialized', n_clusters=self._n_clusters,
                       centers=self._centers.clone(),
                       degenerate_dimensions=collapsed)

    def _require_centers(self, operation: str) -> None:
        if self._stride == 0:
            raise PreconditionViolation(f"No data loaded; call load() before {operation}()")

        n_centers = self._centers.shape[0]
        if n_centers == 0:
            raise PreconditionViolation(f"No cluster centers; call initialize() before {operation}()")

        if n_centers != self._n_clusters:
            raise PreconditionViolation(f"n_clusters is {self._n_clusters} but {n_centers} centers "
                                        f"exist; call initialize() before {operation}()")

    def assign_round(self) -> int:
        """Assign every point to its nearest center.

        Returns:
            Number of points whose cluster index changed

        Raises:
            PreconditionViolation: If there are no valid centers
        """
        with self._lock:
            self._require_centers('assign_round')

            labels, distances, moved = self.assignment_strategy.assign(
                self._points, self._centers, self._labels
            )

            self._labels = labels
            self._distances = distances.to(self._distance_dtype)
            self._moved_count = moved

            self._emit('assigned', moved_count=moved, inertia=self.inertia)
            return moved

    def recompute_centroids(self) -> None:
        """Move every center to the mean of its assigned points.

        Empty clusters are handled by the configured empty-cluster policy.

        Raises:
            PreconditionViolation: If there are no valid centers
        """
        with self._lock:
            self._require_centers('recompute_centroids')

            new_centers, counts = self.update_strategy.update(
                self._points, self._labels, self._centers, generator=self._generator
            )
            self._centers = new_centers

            empty = torch.nonzero(counts == 0).flatten().tolist()
            if empty:
                self._emit('empty_cluster', clusters=empty,
                           policy=self.update_strategy.empty_policy.name)

            self._emit('recomputed', cluster_sizes=counts.tolist())

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def stride(self) -> int:
        return self._stride

    @property
    def n_clusters(self) -> int:
        return self._n_clusters

    @property
    def n_points(self) -> int:
        return self._points.shape[0]

    def __len__(self) -> int:
        return self.n_points

    @property
    def moved_count(self) -> Optional[int]:
        """Points moved in the last assignment, None before the first."""
        return self._moved_count

    @property
    def is_initialized(self) -> bool:
        return self._centers.shape[0] > 0

    @property
    def points(self) -> Tensor:
        """(n, stride) copy of the point coordinates."""
        with self._lock:
            return self._points.clone()

    @property
    def labels(self) -> Tensor:
        """(n,) copy of the cluster index of every point."""
        with self._lock:
            return self._labels.clone()

    @property
    def distances(self) -> Tensor:
        """(n,) copy of each point's squared distance to its center."""
        with self._lock:
            return self._distances.clone()

    @property
    def centers(self) -> Tensor:
        """(K, stride) copy of the cluster centers."""
        with self._lock:
            return self._centers.clone()

    @property
    def inertia(self) -> Optional[float]:
        """Sum of squared distances to assigned centers, None before assignment."""
        with self._lock:
            if self._moved_count is None:
                return None
            return float(self._distances.sum().item())

    def point(self, index: int) -> PointView:
        """Coordinates and assignment of one point."""
        with self._lock:
            n_points = self.n_points
            if not -n_points <= index < n_points:
                raise IndexError(f"Point index {index} out of range for {n_points} points")
            if index < 0:
                index += n_points

            return PointView(
                index=index,
                coordinates=self._points[index].clone(),
                cluster_index=int(self._labels[index].item()),
                squared_distance=float(self._distances[index].item())
            )

    def center(self, index: int) -> Tensor:
        """(stride,) copy of one center."""
        with self._lock:
            n_centers = self._centers.shape[0]
            if not -n_centers <= index < n_centers:
                raise IndexError(f"Center index {index} out of range for {n_centers} centers")
            return self._centers[index].clone()

    def cluster_sizes(self) -> Tensor:
        """(K,) number of points currently labelled with each existing center."""
        with self._lock:
            n_centers = self._centers.shape[0]
            if n_centers == 0:
                return torch.zeros(0, dtype=torch.long, device=self.device)
            # Labels from before a re-initialization may exceed the new center count
            return torch.bincount(self._labels, minlength=n_centers)[:n_centers]

    def bounds(self) -> Tuple[Tensor, Tensor]:
        """Per-dimension minimum and maximum of the loaded data."""
        with self._lock:
            if self._stride == 0:
                raise PreconditionViolation("No data loaded")
            return data_bounds(self._points)

    def state(self) -> ClusterState:
        """Snapshot of centers and assignments."""
        with self._lock:
            return ClusterState(
                centers=self._centers.clone(),
                labels=self._labels.clone(),
                distances=self._distances.clone(),
                cluster_sizes=self.cluster_sizes(),
                moved_count=self._moved_count,
                inertia=self.inertia
            )

    # ------------------------------------------------------------------
    # Duplication and parameters
    # ------------------------------------------------------------------

    def clone(self) -> 'ClusteringEngine':
        """Deep copy of the engine: points, assignments, centers and RNG state.

        The diagnostic sink is shared with the copy, not duplicated.
        """
        with self._lock:
            other = ClusteringEngine.__new__(ClusteringEngine)
            other.init = self.init
            other.empty_cluster = self.empty_cluster
            other.random_state = self.random_state
            other.n_jobs = self.n_jobs
            other.dtype = self.dtype
            other.device = self.device
            other.diagnostics = self.diagnostics

            other._lock = threading.RLock()
            if self._generator is not None:
                other._generator = torch.Generator(device=self.device)
                other._generator.set_state(self._generator.get_state())
            else:
                other._generator = None

            other._n_clusters = self._n_clusters
            other._n_clusters_fixed = self._n_clusters_fixed
            other._stride = self._stride
            other._points = self._points.clone()
            other._labels = self._labels.clone()
            other._distances = self._distances.clone()
            other._centers = self._centers.clone()
            other._moved_count = self._moved_count

            other._create_components()
            return other

    def __copy__(self) -> 'ClusteringEngine':
        return self.clone()

    def __deepcopy__(self, memo) -> 'ClusteringEngine':
        return self.clone()

    def get_params(self) -> Dict[str, Any]:
        """Get parameters (sklearn compatibility)."""
        return {
            'n_clusters': self._n_clusters if self._n_clusters_fixed else None,
            'init': self.init,
            'empty_cluster': self.empty_cluster,
            'random_state': self.random_state,
            'n_jobs': self.n_jobs,
            'dtype': self.dtype,
            'device': self.device,
            'diagnostics': self.diagnostics
        }

    def set_params(self, **params) -> 'ClusteringEngine':
        """Set parameters (sklearn compatibility).

        ``n_clusters=None`` leaves K as it is, so the output of
        ``get_params()`` can always be passed back. dtype and device can only
        change while no data is loaded.
        """
        unknown = set(params) - set(_SETTABLE_PARAMS)
        if unknown:
            raise InvalidArgument(f"Unknown parameters: {sorted(unknown)}")

        if params.get('n_clusters', 0) is None:
            del params['n_clusters']
        if 'dtype' in params and check_dtype(params['dtype']) == self.dtype:
            del params['dtype']
        if 'device' in params and parse_device(params['device']) == self.device:
            del params['device']

        with self._lock:
            if ('dtype' in params or 'device' in params) and self._stride:
                raise PreconditionViolation("Cannot change dtype or device after data is loaded")

            if 'n_clusters' in params:
                self.set_cluster_count(params['n_clusters'])
            if 'dtype' in params:
                self.dtype = check_dtype(params['dtype'])
            if 'device' in params:
                self.device = parse_device(params['device'])
            if 'dtype' in params or 'device' in params:
                self._reset_storage()
            if 'random_state' in params or 'device' in params:
                self.random_state = params.get('random_state', self.random_state)
                self._generator = check_random_state(self.random_state, self.device)

            for key in ('init', 'empty_cluster', 'n_jobs', 'diagnostics'):
                if key in params:
                    setattr(self, key, params[key])

            self._create_components()
        return self

    def __repr__(self) -> str:
        return (f"ClusteringEngine(n_points={self.n_points}, stride={self._stride}, "
                f"n_clusters={self._n_clusters}, moved_count={self._moved_count})")
