# tests/test_initialization.py
"""
Center initialization.

Covers:
- Every center coordinate lies within the data's per-dimension bounds
- Seeded draws are reproducible
- Degenerate (constant) dimensions collapse to the constant value
- Fixed centers are validated and used verbatim
- Preconditions: no data loaded
"""

from __future__ import annotations

import warnings

import numpy as np
import pytest
import torch

from lloyd import (
    ClusteringEngine,
    BoundingBoxInit,
    FixedCentersInit,
    InvalidArgument,
    PreconditionViolation,
    DegenerateInputWarning,
)
from lloyd.initialization import data_bounds, draw_uniform_in_bounds

from data_gen import make_uniform_box


def test_centers_within_bounds(torch_device):
    flat = make_uniform_box([(30, 30), (50, 100), (100, 50), (25, 150), (10, 10)],
                            n_points=500, seed=3)
    engine = ClusteringEngine(n_clusters=8, random_state=11, device=torch_device)
    engine.load(flat, stride=5)
    engine.initialize()

    lower, upper = engine.bounds()
    centers = engine.centers

    assert centers.shape == (8, 5)
    assert (centers >= lower.unsqueeze(0)).all()
    assert (centers <= upper.unsqueeze(0)).all()


def test_seeded_initialization_is_reproducible(rng, torch_device):
    flat = rng.normal(size=300)

    def centers_for(seed):
        engine = ClusteringEngine(n_clusters=4, random_state=seed, device=torch_device)
        engine.load(flat, stride=3)
        engine.initialize()
        return engine.centers

    assert torch.equal(centers_for(5), centers_for(5))
    assert not torch.equal(centers_for(5), centers_for(6))


def test_generator_random_state(rng, torch_device):
    flat = rng.normal(size=40)
    g1 = torch.Generator().manual_seed(9)
    g2 = torch.Generator().manual_seed(9)

    e1 = ClusteringEngine(n_clusters=3, random_state=g1, device=torch_device)
    e2 = ClusteringEngine(n_clusters=3, random_state=g2, device=torch_device)
    e1.load(flat, stride=2)
    e2.load(flat, stride=2)
    e1.initialize()
    e2.initialize()

    assert torch.equal(e1.centers, e2.centers)


def test_degenerate_dimension_collapses_to_constant(torch_device):
    # Second dimension is constant 7.0
    flat = [0.0, 7.0, 4.0, 7.0, 9.0, 7.0]
    engine = ClusteringEngine(n_clusters=3, random_state=0, device=torch_device)
    engine.load(flat, stride=2)

    with pytest.warns(DegenerateInputWarning):
        engine.initialize()

    centers = engine.centers
    assert torch.isfinite(centers).all()
    assert (centers[:, 1] == 7.0).all()
    assert ((centers[:, 0] >= 0.0) & (centers[:, 0] <= 9.0)).all()


def test_all_dimensions_degenerate_integer_dtype(torch_device):
    engine = ClusteringEngine(n_clusters=2, dtype=torch.int32, device=torch_device)
    engine.load([3, 3, 3, 3], stride=2)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        engine.initialize()

    assert engine.centers.tolist() == [[3, 3], [3, 3]]


def test_integer_draws_within_bounds(torch_device):
    engine = ClusteringEngine(n_clusters=20, dtype=torch.int64, random_state=1,
                              device=torch_device)
    engine.load([0, 100, 10, 200, 5, 150], stride=2)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        engine.initialize()

    centers = engine.centers
    assert centers.dtype == torch.int64
    assert ((centers[:, 0] >= 0) & (centers[:, 0] < 10)).all()
    assert ((centers[:, 1] >= 100) & (centers[:, 1] < 200)).all()


def test_draw_uniform_in_bounds_half_open():
    lower = torch.tensor([0.0, -1.0], dtype=torch.float64)
    upper = torch.tensor([1.0, 1.0], dtype=torch.float64)
    samples = draw_uniform_in_bounds(lower, upper, 1000, generator=torch.Generator().manual_seed(0))

    assert samples.shape == (1000, 2)
    assert (samples >= lower).all()
    assert (samples < upper).all()


def test_data_bounds():
    points = torch.tensor([[1.0, 5.0], [-2.0, 3.0], [0.0, 8.0]])
    lower, upper = data_bounds(points)
    assert lower.tolist() == [-2.0, 3.0]
    assert upper.tolist() == [1.0, 8.0]


def test_bounding_box_strategy_directly(rng):
    points = torch.from_numpy(rng.uniform(-5, 5, size=(50, 3)))
    centers = BoundingBoxInit().initialize(points, 6, generator=torch.Generator().manual_seed(2))
    assert centers.shape == (6, 3)
    assert centers.dtype == points.dtype


def test_fixed_centers_used_verbatim(two_pairs, torch_device):
    engine = ClusteringEngine(n_clusters=2, device=torch_device)
    engine.load(two_pairs, stride=2)
    engine.initialize(centers=[[1.0, 2.0], [3.0, 4.0]])
    assert engine.centers.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_init_param_accepts_array(two_pairs, torch_device):
    init = np.array([[0.0, 0.0], [10.0, 10.0]])
    engine = ClusteringEngine(n_clusters=2, init=init, device=torch_device)
    engine.load(two_pairs, stride=2)
    engine.initialize()
    assert engine.centers.tolist() == [[0.0, 0.0], [10.0, 10.0]]


def test_init_param_accepts_strategy(two_pairs, torch_device):
    strategy = FixedCentersInit(torch.tensor([[5.0, 5.0], [6.0, 6.0]]))
    engine = ClusteringEngine(n_clusters=2, init=strategy, device=torch_device)
    engine.load(two_pairs, stride=2)
    engine.initialize()
    assert engine.initialization_strategy is strategy
    assert engine.centers.tolist() == [[5.0, 5.0], [6.0, 6.0]]


def test_unknown_init_name_rejected():
    with pytest.raises(InvalidArgument):
        ClusteringEngine(init="k-means++")


@pytest.mark.parametrize("centers", [
    [[0.0, 0.0]],                          # too few clusters
    [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]],    # wrong dimension
    [0.0, 0.0, 1.0, 1.0],                  # not 2D
])
def test_fixed_centers_shape_checked(two_pairs, centers, torch_device):
    engine = ClusteringEngine(n_clusters=2, device=torch_device)
    engine.load(two_pairs, stride=2)

    with pytest.raises(InvalidArgument):
        engine.initialize(centers=centers)

    assert not engine.is_initialized


def test_initialize_before_load_is_precondition_violation(torch_device):
    engine = ClusteringEngine(n_clusters=2, device=torch_device)
    with pytest.raises(PreconditionViolation):
        engine.initialize()


def test_coincident_centers_warn(two_pairs, torch_device):
    engine = ClusteringEngine(n_clusters=2, device=torch_device)
    engine.load(two_pairs, stride=2)
    with pytest.warns(UserWarning, match="distinct"):
        engine.initialize(centers=[[1.0, 1.0], [1.0, 1.0]])


def test_reinitialize_replaces_centers_and_resets_moved(two_pairs_engine):
    engine = two_pairs_engine
    engine.assign_round()
    assert engine.moved_count is not None

    engine.initialize(centers=[[1.0, 1.0], [9.0, 9.0]])

    assert engine.centers.tolist() == [[1.0, 1.0], [9.0, 9.0]]
    assert engine.moved_count is None


def test_wide_float_range_stays_finite(torch_device):
    engine = ClusteringEngine(n_clusters=4, random_state=0, device=torch_device)
    engine.load([-3e38, 3e38], stride=1)
    engine.initialize()

    centers = engine.centers
    lower, upper = engine.bounds()
    assert torch.isfinite(centers).all()
    assert (centers >= lower).all()
    assert (centers <= upper).all()

    engine.assign_round()
    assert torch.isfinite(engine.distances).all()


def test_draw_spanning_whole_float32_range():
    big = torch.finfo(torch.float32).max
    lower = torch.tensor([-big, 0.0])
    upper = torch.tensor([big, 1.0])

    samples = draw_uniform_in_bounds(lower, upper, 500, generator=torch.Generator().manual_seed(1))

    assert torch.isfinite(samples).all()
    assert (samples >= lower).all()
    assert (samples <= upper).all()
