"""
Initial feasible allocation — greedy maximum-profit method.

Each round picks the open route with the highest unit profit and ships as
much as the smaller of its remaining supply / demand allows. Routes touching
a fictional supplier or recipient are only considered once no genuine route
is left, so the balancing placeholders absorb whatever real entities cannot.

The MODI optimizer needs a basic feasible solution (exactly m + n - 1
occupied cells forming a spanning tree over rows and columns). When the
greedy pass closes a row and a column at the same time it produces fewer
cells; `ensure_basic_solution` tops the basis up with epsilon placeholders.
"""

import logging
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from app.config import settings
from app.schemas import Recipient, Supplier
from .exceptions import InvalidProblemError

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


class _DisjointSet:
    """Union-find over m row nodes followed by n column nodes."""

    def __init__(self, size: int):
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, x: int) -> int:
        while self.parent[x] != x:
            self.parent[x] = self.parent[self.parent[x]]
            x = self.parent[x]
        return x

    def union(self, a: int, b: int) -> bool:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        if self.rank[ra] < self.rank[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        if self.rank[ra] == self.rank[rb]:
            self.rank[ra] += 1
        return True


def _best_route(
    profit: np.ndarray,
    supply: np.ndarray,
    demand: np.ndarray,
    open_rows: List[bool],
    open_cols: List[bool],
    skip_rows: Sequence[bool],
    skip_cols: Sequence[bool],
) -> Optional[Cell]:
    """Row-major scan for the strictly greatest profit; first cell wins ties."""
    best: Optional[Cell] = None
    best_profit = -np.inf
    m, n = profit.shape
    for i in range(m):
        if not open_rows[i] or skip_rows[i] or supply[i] <= 0:
            continue
        for j in range(n):
            if not open_cols[j] or skip_cols[j] or demand[j] <= 0:
                continue
            if profit[i, j] > best_profit:
                best_profit = profit[i, j]
                best = (i, j)
    return best


def maximum_profit_allocation(
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
    profit: np.ndarray,
    epsilon: Optional[float] = None,
) -> np.ndarray:
    """
    Build the initial allocation for a balanced problem.

    Parameters
    ----------
    suppliers, recipients : balanced entity lists (rows / columns)
    profit  : (m x n) unit profit matrix
    epsilon : placeholder quantity for degeneracy repair
              (defaults to settings.DEGENERACY_EPSILON)

    Returns
    -------
    np.ndarray (m x n) allocation with m + n - 1 occupied cells
    whenever the rows and columns can be spanned.
    """
    m, n = len(suppliers), len(recipients)
    if profit.shape != (m, n):
        raise InvalidProblemError(
            f"Profit matrix shape {profit.shape} does not match {m} suppliers x {n} recipients"
        )

    allocation = np.zeros((m, n))
    supply = np.array([s.supply for s in suppliers], dtype=float)
    demand = np.array([r.demand for r in recipients], dtype=float)
    open_rows = [True] * m
    open_cols = [True] * n

    fictional_rows = [s.is_fictional for s in suppliers]
    fictional_cols = [r.is_fictional for r in recipients]
    no_skip_rows = [False] * m
    no_skip_cols = [False] * n

    allocated: Set[Cell] = set()

    while any(open_rows) and any(open_cols):
        cell = _best_route(profit, supply, demand, open_rows, open_cols,
                           fictional_rows, fictional_cols)
        if cell is None:
            # Only placeholder routes are left
            cell = _best_route(profit, supply, demand, open_rows, open_cols,
                               no_skip_rows, no_skip_cols)
        if cell is None:
            break

        i, j = cell
        quantity = min(supply[i], demand[j])
        allocation[i, j] = quantity
        allocated.add(cell)
        supply[i] -= quantity
        demand[j] -= quantity
        logger.debug(f"Greedy: {quantity:g} units on ({i}, {j}) at profit {profit[i, j]:g}")

        if supply[i] <= 0:
            open_rows[i] = False
        if demand[j] <= 0:
            open_cols[j] = False

    ensure_basic_solution(allocation, allocated, epsilon)
    return allocation


def ensure_basic_solution(
    allocation: np.ndarray,
    allocated: Optional[Set[Cell]] = None,
    epsilon: Optional[float] = None,
) -> List[Cell]:
    """
    Fill zero cells with `epsilon`, in row-major order, until the allocation
    has m + n - 1 occupied cells. A cell that would close a loop with the
    occupied cells is skipped, so the result is a spanning tree and every
    dual potential can be derived from it. Existing shipments are untouched.

    Mutates `allocation` in place and returns the cells that were filled.
    """
    epsilon = settings.DEGENERACY_EPSILON if epsilon is None else epsilon
    m, n = allocation.shape
    if allocated is None:
        allocated = {(i, j) for i in range(m) for j in range(n) if allocation[i, j] > 0}

    required = m + n - 1
    if len(allocated) >= required:
        return []

    components = _DisjointSet(m + n)
    for i, j in allocated:
        components.union(i, m + j)

    filled: List[Cell] = []
    for i in range(m):
        for j in range(n):
            if len(allocated) >= required:
                break
            if (i, j) in allocated or allocation[i, j] != 0:
                continue
            if not components.union(i, m + j):
                continue
            allocation[i, j] = epsilon
            allocated.add((i, j))
            filled.append((i, j))

    logger.debug(f"Degeneracy repair added {len(filled)} placeholder cell(s): {filled}")
    return filled


def settle_basic_solution(
    allocation: np.ndarray,
    supply: Sequence[float],
    demand: Sequence[float],
    basic_tolerance: Optional[float] = None,
) -> Optional[np.ndarray]:
    """
    Recompute the basic quantities of `allocation` from the true supply and
    demand, which strips the epsilon mass carried by placeholder cells.

    Works leaf-first on the spanning tree of basic cells: a row (column)
    with a single unresolved basic cell fixes that cell's quantity. Returns
    None when the basic cells do not form a spanning tree or the settled
    plan would go negative; the caller then keeps the unsettled allocation.
    """
    basic_tolerance = settings.BASIC_CELL_TOLERANCE if basic_tolerance is None else basic_tolerance
    m, n = allocation.shape
    basis = [tuple(c) for c in np.argwhere(allocation > basic_tolerance)]
    if len(basis) != m + n - 1:
        return None

    rem_supply = np.array(supply, dtype=float)
    rem_demand = np.array(demand, dtype=float)
    row_cells = {i: set() for i in range(m)}
    col_cells = {j: set() for j in range(n)}
    for i, j in basis:
        row_cells[i].add((i, j))
        col_cells[j].add((i, j))

    settled = np.zeros((m, n))
    resolved = 0
    progress = True
    while progress and resolved < len(basis):
        progress = False
        for i in range(m):
            if len(row_cells[i]) == 1:
                cell = row_cells[i].pop()
                j = cell[1]
                settled[cell] = rem_supply[i]
                rem_supply[i] = 0.0
                rem_demand[j] -= settled[cell]
                col_cells[j].discard(cell)
                resolved += 1
                progress = True
        for j in range(n):
            if len(col_cells[j]) == 1:
                cell = col_cells[j].pop()
                i = cell[0]
                settled[cell] = rem_demand[j]
                rem_demand[j] = 0.0
                rem_supply[i] -= settled[cell]
                row_cells[i].discard(cell)
                resolved += 1
                progress = True

    if resolved < len(basis):
        return None

    noise = 1e-9 * max(1.0, float(np.max(np.abs(allocation))))
    if (settled < -noise).any():
        return None
    settled[np.abs(settled) <= noise] = 0.0
    return settled
