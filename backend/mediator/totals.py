import logging
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Sequence

import numpy as np

from app.config import settings
from app.schemas import CostMatrix, Recipient, Supplier
from .exceptions import InvalidProblemError
from .profit_matrix import lookup_cost

logger = logging.getLogger(__name__)


@dataclass
class FinancialTotals:
    total_cost:   float = 0.0
    total_income: float = 0.0
    total_profit: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def compute_totals(
    allocation: np.ndarray,
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
    costs: CostMatrix,
    tolerance: Optional[float] = None,
) -> FinancialTotals:
    """
    Aggregate money flows over real shipments.

    A cell counts only when its quantity exceeds `tolerance` (degeneracy
    placeholders are treated as zero) and neither its supplier nor its
    recipient is fictional:

      cost   += q · (transport cost + supplier selling price)
      income += q · recipient purchase price
      profit  = income − cost
    """
    tolerance = settings.REPORTING_TOLERANCE if tolerance is None else tolerance
    m, n = len(suppliers), len(recipients)
    if allocation.shape != (m, n):
        raise InvalidProblemError(
            f"Allocation shape {allocation.shape} does not match {m} suppliers x {n} recipients"
        )

    total_cost = 0.0
    total_income = 0.0
    for i, supplier in enumerate(suppliers):
        if supplier.is_fictional:
            continue
        for j, recipient in enumerate(recipients):
            if recipient.is_fictional:
                continue
            quantity = float(allocation[i, j])
            if quantity <= tolerance:
                continue
            transport = lookup_cost(costs, recipient, supplier)
            total_cost += quantity * (transport + supplier.selling_price)
            total_income += quantity * recipient.purchase_price

    return FinancialTotals(total_cost, total_income, total_income - total_cost)
