"""
Convergence criteria and the caller-level round driver.

The engine exposes single steps only. ``run_until_stable`` is the usual way
to drive it: repeat assignment and recomputation, reading the moved count
after every round, until no point changes cluster.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, TYPE_CHECKING
import warnings

from ..base.interfaces import ConvergenceCriterion

if TYPE_CHECKING:
    from ..algorithms.kmeans import ClusteringEngine


class NoPointsMoved(ConvergenceCriterion):
    """Convergence when an assignment pass moves no point."""

    def __init__(self, patience: int = 1):
        """
        Args:
            patience: Number of consecutive stable rounds required
        """
        super().__init__()
        if patience < 1:
            raise ValueError(f"patience must be >= 1, got {patience}")
        self.patience = patience
        self._stable_count = 0

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if the last assignment moved any point."""
        moved_count = current_state['moved_count']

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'moved_count': moved_count
        })

        if moved_count == 0:
            self._stable_count += 1
        else:
            self._stable_count = 0

        return self._stable_count >= self.patience

    def reset(self):
        super().reset()
        self._stable_count = 0


class ChangeInInertia(ConvergenceCriterion):
    """Convergence based on relative change in the sum of squared distances."""

    def __init__(self, rel_tol: float = 1e-4, abs_tol: float = 1e-8,
                 patience: int = 1):
        """
        Args:
            rel_tol: Relative tolerance for inertia change
            abs_tol: Absolute tolerance for inertia change
            patience: Number of iterations to wait before convergence
        """
        super().__init__()
        self.rel_tol = rel_tol
        self.abs_tol = abs_tol
        self.patience = patience
        self._prev_inertia = None
        self._stable_count = 0

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if inertia has stabilized."""
        current_inertia = current_state['inertia']

        if self._prev_inertia is None:
            self._prev_inertia = current_inertia
            return False

        abs_change = abs(current_inertia - self._prev_inertia)

        if abs(self._prev_inertia) > 1e-10:
            rel_change = abs_change / abs(self._prev_inertia)
        else:
            rel_change = abs_change

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'inertia': current_inertia,
            'abs_change': abs_change,
            'rel_change': rel_change
        })

        if abs_change < self.abs_tol or rel_change < self.rel_tol:
            self._stable_count += 1
            converged = self._stable_count >= self.patience
        else:
            self._stable_count = 0
            converged = False

        self._prev_inertia = current_inertia

        return converged

    def reset(self):
        super().reset()
        self._prev_inertia = None
        self._stable_count = 0


@dataclass
class ConvergenceReport:
    """Outcome of ``run_until_stable``."""

    converged: bool
    n_rounds: int
    moved_counts: List[int] = field(default_factory=list)
    inertias: List[float] = field(default_factory=list)

    @property
    def final_inertia(self) -> Optional[float]:
        return self.inertias[-1] if self.inertias else None


def run_until_stable(engine: 'ClusteringEngine',
                     max_rounds: int = 300,
                     criterion: Optional[ConvergenceCriterion] = None) -> ConvergenceReport:
    """Repeat assignment and recomputation until the criterion is met.

    The engine must already hold data and initialized centers.

    Args:
        engine: Loaded and initialized engine
        max_rounds: Upper bound on rounds
        criterion: Stop condition (default: NoPointsMoved())

    Returns:
        ConvergenceReport with per-round moved counts and inertias
    """
    if max_rounds < 1:
        raise ValueError(f"max_rounds must be >= 1, got {max_rounds}")

    if criterion is None:
        criterion = NoPointsMoved()
    criterion.reset()

    report = ConvergenceReport(converged=False, n_rounds=0)

    for iteration in range(max_rounds):
        moved_count = engine.assign_round()
        inertia = engine.inertia
        engine.recompute_centroids()

        report.n_rounds = iteration + 1
        report.moved_counts.append(moved_count)
        report.inertias.append(inertia)

        if engine.diagnostics is not None:
            engine.diagnostics('round', {
                'round': iteration,
                'moved_count': moved_count,
                'inertia': inertia
            })

        if criterion.check({'iteration': iteration,
                            'moved_count': moved_count,
                            'inertia': inertia}):
            report.converged = True
            break

    if not report.converged:
        warnings.warn(f"Failed to converge after {max_rounds} rounds")

    return report
