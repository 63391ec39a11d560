"""
MODI (modified distribution) optimizer with stepping-stone reallocation.

Profit-maximisation form of the classical transportation optimality test:

  Duals:        u_i + v_j = p_ij        for every basic cell (u_0 = 0)
  Opportunity:  d_ij = p_ij − u_i − v_j for every non-basic cell
  Optimal  ⇔   d_ij ≤ threshold         for all non-basic cells

While some d_ij is positive, the best cell enters the basis; a closed
row/column alternating loop through basic cells is found and θ units are
shifted around it (+ on even positions, − on odd positions), where θ is the
smallest quantity on a "−" position.

The optimizer is an explicit state machine:

  COMPUTE_DUALS → FIND_ENTERING → FIND_CYCLE → REALLOCATE → COMPUTE_DUALS …

ending in CONVERGED (no improving cell), STALLED (disconnected basis, no
loop, or θ ≤ 0) or ITERATION_LIMIT. A stall is not an error: the last
feasible allocation is returned.

Basic cells are those above BASIC_CELL_TOLERANCE, which sits below the
degeneracy epsilon so placeholder cells take part in the dual system.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from app.config import settings
from app.constants import OptimizerState, TERMINAL_STATES
from .exceptions import InvalidProblemError
from .initial_allocation import ensure_basic_solution

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


@dataclass
class Pivot:
    entering:    Cell
    opportunity: float
    theta:       float
    cycle:       List[Cell] = field(default_factory=list)


@dataclass
class OptimizationResult:
    allocation: np.ndarray
    state:      OptimizerState
    iterations: int
    u:          Optional[np.ndarray] = None
    v:          Optional[np.ndarray] = None
    pivots:     List[Pivot] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.state == OptimizerState.CONVERGED


def opportunity_matrix(profit: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """d_ij = p_ij − u_i − v_j for every cell (≈ 0 on basic cells)."""
    return profit - u[:, None] - v[None, :]


class MODIOptimizer:
    """
    Parameters
    ----------
    improvement_threshold : float  minimum opportunity for an entering cell
    basic_tolerance       : float  allocation above this is a basic cell
    max_iterations        : int    cap on improvement rounds
    max_dual_passes       : int    cap on u/v propagation sweeps
    max_cycle_length      : int    longest stepping-stone path explored
    epsilon               : float  placeholder quantity used to re-span the
                                   basis after a degenerate pivot

    All default to the values in app.config.settings.
    """

    def __init__(
        self,
        improvement_threshold: Optional[float] = None,
        basic_tolerance:       Optional[float] = None,
        max_iterations:        Optional[int]   = None,
        max_dual_passes:       Optional[int]   = None,
        max_cycle_length:      Optional[int]   = None,
        epsilon:               Optional[float] = None,
    ):
        self.epsilon = settings.DEGENERACY_EPSILON if epsilon is None else epsilon
        self.improvement_threshold = (
            settings.IMPROVEMENT_THRESHOLD if improvement_threshold is None else improvement_threshold
        )
        self.basic_tolerance = (
            settings.BASIC_CELL_TOLERANCE if basic_tolerance is None else basic_tolerance
        )
        self.max_iterations = settings.MAX_ITERATIONS if max_iterations is None else max_iterations
        self.max_dual_passes = settings.MAX_DUAL_PASSES if max_dual_passes is None else max_dual_passes
        self.max_cycle_length = (
            settings.MAX_CYCLE_LENGTH if max_cycle_length is None else max_cycle_length
        )

    # ── Public API ─────────────────────────────────────────────────────────

    def optimize(self, allocation: np.ndarray, profit: np.ndarray) -> OptimizationResult:
        """Improve `allocation` towards maximum profit. The input array is not modified."""
        solution = np.array(allocation, dtype=float, copy=True)
        if solution.shape != profit.shape:
            raise InvalidProblemError(
                f"Allocation shape {solution.shape} does not match profit shape {profit.shape}"
            )
        if solution.size == 0:
            return OptimizationResult(solution, OptimizerState.CONVERGED, 0)

        state = OptimizerState.COMPUTE_DUALS
        iterations = 0
        u = v = None
        entering: Optional[Cell] = None
        opportunity = 0.0
        cycle: Optional[List[Cell]] = None
        pivots: List[Pivot] = []

        while state not in TERMINAL_STATES:
            if state == OptimizerState.COMPUTE_DUALS:
                if iterations >= self.max_iterations:
                    logger.warning(f"MODI stopped at the iteration cap ({self.max_iterations})")
                    state = OptimizerState.ITERATION_LIMIT
                    continue
                iterations += 1
                duals = self.compute_duals(solution, profit)
                if duals is None:
                    logger.warning("MODI stalled: basis is disconnected, dual potentials undetermined")
                    state = OptimizerState.STALLED
                else:
                    u, v = duals
                    state = OptimizerState.FIND_ENTERING

            elif state == OptimizerState.FIND_ENTERING:
                found = self.find_entering(solution, profit, u, v)
                if found is None:
                    state = OptimizerState.CONVERGED
                else:
                    entering, opportunity = found
                    state = OptimizerState.FIND_CYCLE

            elif state == OptimizerState.FIND_CYCLE:
                cycle = self.find_cycle(solution, entering)
                if cycle is None:
                    logger.warning(f"MODI stalled: no stepping-stone loop through {entering}")
                    state = OptimizerState.STALLED
                else:
                    state = OptimizerState.REALLOCATE

            elif state == OptimizerState.REALLOCATE:
                theta = self.compute_theta(solution, cycle)
                if theta <= 0:
                    logger.warning(f"MODI stalled: non-positive theta on loop {cycle}")
                    state = OptimizerState.STALLED
                else:
                    self.reallocate(solution, cycle, theta)
                    self.restore_basis(solution)
                    pivots.append(Pivot(entering, opportunity, theta, list(cycle)))
                    logger.debug(
                        f"Pivot {len(pivots)}: enter {entering} "
                        f"(opportunity {opportunity:.4f}), shift θ={theta:g} over {len(cycle)} cells"
                    )
                    state = OptimizerState.COMPUTE_DUALS

        logger.info(
            f"MODI finished: state={state.value}, iterations={iterations}, pivots={len(pivots)}"
        )
        return OptimizationResult(solution, state, iterations, u, v, pivots)

    # ── States ─────────────────────────────────────────────────────────────

    def compute_duals(
        self, solution: np.ndarray, profit: np.ndarray
    ) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """
        Fixed-point propagation of u_i + v_j = p_ij over the basic cells.
        Returns None when some potential cannot be determined.
        """
        m, n = solution.shape
        u = np.full(m, np.nan)
        v = np.full(n, np.nan)
        u[0] = 0.0

        basic = [tuple(c) for c in np.argwhere(solution > self.basic_tolerance)]

        for _ in range(self.max_dual_passes):
            changed = False
            for i, j in basic:
                if not np.isnan(u[i]) and np.isnan(v[j]):
                    v[j] = profit[i, j] - u[i]
                    changed = True
                elif np.isnan(u[i]) and not np.isnan(v[j]):
                    u[i] = profit[i, j] - v[j]
                    changed = True
            if not changed:
                break

        if np.isnan(u).any() or np.isnan(v).any():
            return None
        return u, v

    def find_entering(
        self, solution: np.ndarray, profit: np.ndarray, u: np.ndarray, v: np.ndarray
    ) -> Optional[Tuple[Cell, float]]:
        """Non-basic cell with the largest opportunity above the threshold, row-major on ties."""
        delta = opportunity_matrix(profit, u, v)
        best: Optional[Cell] = None
        best_value = self.improvement_threshold
        m, n = solution.shape
        for i in range(m):
            for j in range(n):
                if solution[i, j] > self.basic_tolerance:
                    continue
                if delta[i, j] > best_value:
                    best_value = float(delta[i, j])
                    best = (i, j)
        if best is None:
            return None
        return best, best_value

    def find_cycle(self, solution: np.ndarray, start: Cell) -> Optional[List[Cell]]:
        """
        Depth-first search for a closed loop start → row move → column move → …
        → back to start, using basic cells only. Runs on an explicit stack;
        a cell already on the current path is never revisited and paths are
        capped at max_cycle_length cells.
        """
        m, n = solution.shape
        basic = solution > self.basic_tolerance
        start_col = start[1]

        # (path, next move is along the row)
        stack: List[Tuple[List[Cell], bool]] = [([start], True)]
        while stack:
            path, horizontal = stack.pop()
            ci, cj = path[-1]

            # A column move from here would land back on the start cell
            if not horizontal and len(path) >= 4 and cj == start_col:
                return path
            if len(path) >= self.max_cycle_length:
                continue

            if horizontal:
                moves = [(ci, j) for j in range(n) if j != cj and basic[ci, j]]
            else:
                moves = [(i, cj) for i in range(m) if i != ci and basic[i, cj]]

            on_path = set(path)
            for nxt in reversed(moves):
                if nxt not in on_path:
                    stack.append((path + [nxt], not horizontal))

        return None

    @staticmethod
    def compute_theta(solution: np.ndarray, cycle: List[Cell]) -> float:
        """Smallest quantity on the odd ("subtract") positions of the loop."""
        minus = [solution[i, j] for i, j in cycle[1::2]]
        return float(min(minus)) if minus else 0.0

    @staticmethod
    def reallocate(solution: np.ndarray, cycle: List[Cell], theta: float) -> None:
        for k, (i, j) in enumerate(cycle):
            if k % 2 == 0:
                solution[i, j] += theta
            else:
                solution[i, j] = max(0.0, solution[i, j] - theta)

    def restore_basis(self, solution: np.ndarray) -> List[Cell]:
        """
        A pivot where several "−" cells hit zero together drops more than one
        cell from the basis; top it back up to m + n − 1 placeholders.
        """
        basis = {tuple(c) for c in np.argwhere(solution > self.basic_tolerance)}
        return ensure_basic_solution(solution, basis, self.epsilon)
