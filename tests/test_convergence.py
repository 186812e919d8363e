# tests/test_convergence.py
"""
Convergence criteria and the round driver.

Covers:
- NoPointsMoved: zero moved count + patience
- ChangeInInertia: patience + relative tolerance handling
- run_until_stable: report contents, diagnostics, non-convergence warning
"""

from __future__ import annotations

import pytest

from lloyd import ClusteringEngine, run_until_stable
from lloyd.utils.convergence import NoPointsMoved, ChangeInInertia, ConvergenceReport
from lloyd.utils import RecordingSink

from data_gen import make_flat_blobs


def test_no_points_moved_patience():
    crit = NoPointsMoved(patience=2)

    assert crit.check({"iteration": 0, "moved_count": 5}) is False
    assert crit.check({"iteration": 1, "moved_count": 0}) is False  # stable_count = 1
    assert crit.check({"iteration": 2, "moved_count": 3}) is False  # reset
    assert crit.check({"iteration": 3, "moved_count": 0}) is False
    assert crit.check({"iteration": 4, "moved_count": 0}) is True

    assert [h["moved_count"] for h in crit.history] == [5, 0, 3, 0, 0]

    crit.reset()
    assert crit.history == []
    assert crit.check({"moved_count": 0}) is False


def test_no_points_moved_rejects_bad_patience():
    with pytest.raises(ValueError):
        NoPointsMoved(patience=0)


def test_change_in_inertia_patience_and_thresholds():
    crit = ChangeInInertia(rel_tol=1e-3, abs_tol=1e-12, patience=2)

    # Start at 100.0 (initializes prev ⇒ returns False)
    assert crit.check({"iteration": 0, "inertia": 100.0}) is False

    # Small relative change #1: 100.0 → 99.95  (rel=0.0005 < 1e-3)
    assert crit.check({"iteration": 1, "inertia": 99.95}) is False

    # Small relative change #2
    assert crit.check({"iteration": 2, "inertia": 99.90005}) is True


def test_run_until_stable_two_pairs(two_pairs_engine):
    sink = RecordingSink()
    two_pairs_engine.diagnostics = sink

    report = run_until_stable(two_pairs_engine)

    assert isinstance(report, ConvergenceReport)
    assert report.converged is True
    assert report.n_rounds == 2
    assert report.moved_counts == [2, 0]
    assert report.final_inertia == pytest.approx(1.0)

    rounds = sink.of("round")
    assert [r["round"] for r in rounds] == [0, 1]
    assert [r["moved_count"] for r in rounds] == [2, 0]


def test_run_until_stable_blobs(torch_device):
    flat, y = make_flat_blobs([[0, 0], [6, 0], [0, 6]], n_per=40, scale=0.3, seed=5)
    engine = ClusteringEngine(n_clusters=3, device=torch_device)
    engine.load(flat, stride=2)
    engine.initialize(centers=[[0.5, 0.5], [5.5, 0.5], [0.5, 5.5]])

    report = run_until_stable(engine, max_rounds=50)

    assert report.converged
    assert report.moved_counts[-1] == 0
    assert engine.labels.tolist() == y.tolist()


def test_run_until_stable_with_inertia_criterion(two_pairs_engine):
    report = run_until_stable(two_pairs_engine, criterion=ChangeInInertia(rel_tol=1e-6))
    assert report.converged
    assert report.inertias[-1] == pytest.approx(1.0)


def test_run_until_stable_warns_when_rounds_exhausted(two_pairs_engine):
    with pytest.warns(UserWarning, match="Failed to converge"):
        report = run_until_stable(two_pairs_engine, max_rounds=1)

    assert report.converged is False
    assert report.n_rounds == 1


def test_run_until_stable_rejects_bad_max_rounds(two_pairs_engine):
    with pytest.raises(ValueError):
        run_until_stable(two_pairs_engine, max_rounds=0)
