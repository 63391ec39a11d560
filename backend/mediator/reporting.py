"""
Tabular views of a solved mediator problem for the presentation layer.
Nothing here formats for display; it only reshapes the numbers.
"""
import logging
from typing import Any, Dict, Optional

import pandas as pd

from app.config import settings
from .solver import MediatorSolution

logger = logging.getLogger(__name__)

ROUTE_COLUMNS = [
    "supplier_id", "supplier_name", "recipient_id", "recipient_name",
    "is_fictional", "quantity", "unit_profit", "route_profit",
]


def allocation_frame(solution: MediatorSolution, tolerance: Optional[float] = None) -> pd.DataFrame:
    """One row per shipped route (placeholder-sized cells are dropped)."""
    tolerance = settings.REPORTING_TOLERANCE if tolerance is None else tolerance
    rows = []
    for i, supplier in enumerate(solution.balanced_suppliers):
        for j, recipient in enumerate(solution.balanced_recipients):
            quantity = float(solution.allocation[i, j])
            if quantity <= tolerance:
                continue
            unit_profit = (
                float(solution.profit_matrix[i, j]) if solution.profit_matrix is not None else float("nan")
            )
            fictional = supplier.is_fictional or recipient.is_fictional
            rows.append({
                "supplier_id": supplier.id,
                "supplier_name": supplier.name,
                "recipient_id": recipient.id,
                "recipient_name": recipient.name,
                "is_fictional": fictional,
                "quantity": quantity,
                "unit_profit": unit_profit,
                # unmet demand / unsold supply earns nothing
                "route_profit": 0.0 if fictional else quantity * unit_profit,
            })
    return pd.DataFrame(rows, columns=ROUTE_COLUMNS)


def solution_summary(solution: MediatorSolution) -> Dict[str, Any]:
    """JSON-friendly summary of totals, balancing and optimizer outcome."""
    routes = allocation_frame(solution)
    fictional = routes["is_fictional"].astype(bool)
    real = routes[~fictional]
    return {
        "total_cost": round(solution.total_cost, 4),
        "total_income": round(solution.total_income, 4),
        "total_profit": round(solution.total_profit, 4),
        "balance_status": solution.balance_status.value,
        "balance_difference": solution.balance_difference,
        "optimizer_state": solution.optimizer_state.value,
        "iterations": solution.iterations,
        "routes_used": int(len(real)),
        "quantity_shipped": float(real["quantity"].sum()),
        "unshipped_quantity": float(routes.loc[fictional, "quantity"].sum()),
        "allocation": solution.allocation.round(4).tolist(),
    }
