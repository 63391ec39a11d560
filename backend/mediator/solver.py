"""
Mediator problem solver — entry points.

  solve(...)                   initial allocation + MODI refinement
  solve_mediator_problem(...)  balance → profit matrix → solve → totals

A mediator buys from suppliers at their selling price, pays transport and
sells to recipients at their purchase price; the allocation maximises the
total margin.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

import numpy as np

from app.constants import BalanceStatus, OptimizerState
from app.schemas import CostMatrix, Recipient, Supplier, parse_recipients, parse_suppliers
from .balancer import balance
from .initial_allocation import maximum_profit_allocation, settle_basic_solution
from .modi_optimizer import MODIOptimizer, OptimizationResult
from .profit_matrix import build_profit_matrix, routing_profit
from .totals import compute_totals

logger = logging.getLogger(__name__)


@dataclass
class MediatorSolution:
    allocation:          np.ndarray        # [supplier, recipient] over the balanced lists
    total_cost:          float
    total_income:        float
    total_profit:        float
    balanced_suppliers:  List[Supplier]
    balanced_recipients: List[Recipient]
    # Diagnostics
    profit_matrix:       Optional[np.ndarray] = None
    balance_status:      BalanceStatus = BalanceStatus.BALANCED
    balance_difference:  float = 0.0
    optimizer_state:     OptimizerState = OptimizerState.CONVERGED
    iterations:          int = 0
    runtime_seconds:     float = 0.0


def optimize_allocation(
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
    profit_matrix: np.ndarray,
    optimizer: Optional[MODIOptimizer] = None,
) -> OptimizationResult:
    """
    Greedy start followed by MODI; returns the full optimizer result.

    Fictional routes are valued at zero for the optimizer (see
    routing_profit), so the objective is exactly the real profit. The final
    plan is settled against the true supply / demand so that degeneracy
    placeholders do not leak into the returned quantities.
    """
    optimizer = optimizer or MODIOptimizer()
    profit = routing_profit(profit_matrix, suppliers, recipients)
    initial = maximum_profit_allocation(suppliers, recipients, profit, optimizer.epsilon)
    result = optimizer.optimize(initial, profit)

    settled = settle_basic_solution(
        result.allocation,
        [s.supply for s in suppliers],
        [r.demand for r in recipients],
        optimizer.basic_tolerance,
    )
    if settled is not None:
        result.allocation = settled
    else:
        logger.debug("Basis is not a spanning tree; returning the unsettled allocation")
    return result


def solve(
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
    profit_matrix: np.ndarray,
) -> np.ndarray:
    """Allocation matrix for an already balanced problem."""
    return optimize_allocation(suppliers, recipients, profit_matrix).allocation


def solve_mediator_problem(
    suppliers: Sequence[Union[Supplier, Mapping[str, Any]]],
    recipients: Sequence[Union[Recipient, Mapping[str, Any]]],
    costs: Optional[CostMatrix],
    optimizer: Optional[MODIOptimizer] = None,
) -> Optional[MediatorSolution]:
    """
    Full pipeline. Returns None when there is nothing to solve (no costs,
    no suppliers or no recipients). A missing cost for some route raises
    MissingCostEntryError; invalid records raise pydantic.ValidationError.
    """
    if not costs or not suppliers or not recipients:
        logger.warning(
            "Nothing to solve: costs, suppliers and recipients must all be provided"
        )
        return None

    t0 = time.time()
    problem = balance(parse_suppliers(suppliers), parse_recipients(recipients), costs)
    profit = build_profit_matrix(problem.suppliers, problem.recipients, problem.costs)
    result = optimize_allocation(problem.suppliers, problem.recipients, profit, optimizer)
    totals = compute_totals(result.allocation, problem.suppliers, problem.recipients, problem.costs)

    logger.info(
        f"Solved {len(problem.suppliers)}x{len(problem.recipients)} mediator problem: "
        f"profit={totals.total_profit:.2f} ({result.state.value})"
    )

    return MediatorSolution(
        allocation=result.allocation,
        total_cost=totals.total_cost,
        total_income=totals.total_income,
        total_profit=totals.total_profit,
        balanced_suppliers=problem.suppliers,
        balanced_recipients=problem.recipients,
        profit_matrix=profit,
        balance_status=problem.status,
        balance_difference=problem.difference,
        optimizer_state=result.state,
        iterations=result.iterations,
        runtime_seconds=round(time.time() - t0, 4),
    )
