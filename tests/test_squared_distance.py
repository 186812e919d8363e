# tests/test_squared_distance.py
"""
Squared-distance primitive and the (n, K) distance matrix.
"""

from __future__ import annotations

import numpy as np
import pytest
import torch

from lloyd import squared_distance, SquaredEuclideanDistance, InvalidArgument


def test_known_value():
    assert squared_distance([0.0, 0.0], [3.0, 4.0]).item() == 25.0


def test_no_square_root_taken():
    assert squared_distance([1.0], [3.0]).item() == 4.0


def test_symmetry_and_non_negativity(rng):
    points = torch.from_numpy(rng.normal(size=(20, 4)))
    for i in range(len(points)):
        for j in range(len(points)):
            d_ij = squared_distance(points[i], points[j]).item()
            d_ji = squared_distance(points[j], points[i]).item()
            assert d_ij == d_ji
            assert d_ij >= 0.0


def test_zero_iff_identical(rng):
    a = torch.from_numpy(rng.normal(size=3))
    b = a.clone()
    assert squared_distance(a, b).item() == 0.0

    b[2] += 1e-3
    assert squared_distance(a, b).item() > 0.0


def test_mismatched_lengths_rejected():
    with pytest.raises(InvalidArgument):
        squared_distance([1.0, 2.0], [1.0, 2.0, 3.0])


def test_non_flat_points_rejected():
    with pytest.raises(InvalidArgument):
        squared_distance([[1.0, 2.0]], [[1.0, 2.0]])


def test_matrix_matches_primitive(rng):
    points = torch.from_numpy(rng.normal(size=(7, 3)))
    centers = torch.from_numpy(rng.normal(size=(4, 3)))

    matrix = SquaredEuclideanDistance().compute(points, centers)

    assert matrix.shape == (7, 4)
    for i in range(7):
        for k in range(4):
            expected = squared_distance(points[i], centers[k])
            assert torch.isclose(matrix[i, k], expected, rtol=1e-12, atol=1e-12)


def test_matrix_dimension_mismatch_rejected():
    with pytest.raises(InvalidArgument):
        SquaredEuclideanDistance().compute(torch.zeros(3, 2), torch.zeros(2, 3))


def test_integer_points_widened_before_squaring():
    a = torch.tensor([0, 0], dtype=torch.int32)
    b = torch.tensor([100000, 0], dtype=torch.int32)

    result = squared_distance(a, b)

    assert result.dtype == torch.int64
    assert result.item() == 10 ** 10


def test_matrix_widens_integer_input():
    points = torch.tensor([[0], [100000]], dtype=torch.int32)
    centers = torch.tensor([[0], [60000]], dtype=torch.int32)

    matrix = SquaredEuclideanDistance().compute(points, centers)

    assert matrix.dtype == torch.int64
    assert matrix.tolist() == [[0, 60000 ** 2], [10 ** 10, 40000 ** 2]]
