"""
Mediator Transportation Solver

Allocates goods from suppliers to recipients so the mediator's total margin
is maximal:

  Unit profit:  p_ij = purchase_price_j − transport_ij − selling_price_i
  Objective:    max Σ p_ij · x_ij
  Subject to:   Σ_j x_ij = a_i (supply),  Σ_i x_ij = b_j (demand),  x_ij ≥ 0

Pipeline:
  balance             — fictional supplier / recipient closes the supply gap
  build_profit_matrix — p_ij for every route
  maximum_profit_allocation — greedy start + degeneracy repair
  MODIOptimizer       — dual potentials and stepping-stone pivots
  compute_totals      — cost, income and profit over real shipments
"""
from .balancer import BalancedProblem, balance
from .data_generator import ProblemGenerator
from .exceptions import InvalidProblemError, MediatorProblemError, MissingCostEntryError
from .initial_allocation import (
    ensure_basic_solution,
    maximum_profit_allocation,
    settle_basic_solution,
)
from .modi_optimizer import MODIOptimizer, OptimizationResult, Pivot, opportunity_matrix
from .profit_matrix import build_profit_matrix, routing_profit
from .reporting import allocation_frame, solution_summary
from .solver import MediatorSolution, optimize_allocation, solve, solve_mediator_problem
from .totals import FinancialTotals, compute_totals

__all__ = [
    "BalancedProblem",
    "balance",
    "ProblemGenerator",
    "InvalidProblemError",
    "MediatorProblemError",
    "MissingCostEntryError",
    "ensure_basic_solution",
    "maximum_profit_allocation",
    "settle_basic_solution",
    "MODIOptimizer",
    "OptimizationResult",
    "Pivot",
    "opportunity_matrix",
    "build_profit_matrix",
    "routing_profit",
    "allocation_frame",
    "solution_summary",
    "MediatorSolution",
    "optimize_allocation",
    "solve",
    "solve_mediator_problem",
    "FinancialTotals",
    "compute_totals",
]
