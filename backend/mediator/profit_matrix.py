import logging
from typing import Sequence

import numpy as np

from app.schemas import CostMatrix, Recipient, Supplier
from .exceptions import InvalidProblemError, MissingCostEntryError

logger = logging.getLogger(__name__)


def lookup_cost(costs: CostMatrix, recipient: Recipient, supplier: Supplier) -> float:
    """Transport cost for one route; raises instead of guessing a default."""
    try:
        return float(costs[recipient.id][supplier.id])
    except (KeyError, TypeError):
        raise MissingCostEntryError(recipient.id, supplier.id) from None


def build_profit_matrix(
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
    costs: CostMatrix,
) -> np.ndarray:
    """
    Unit profit for every (supplier, recipient) route.

    profit[i, j] = recipient_j.purchase_price
                   - transport_cost(recipient_j, supplier_i)
                   - supplier_i.selling_price

    Returns an (m x n) float array; entries may be negative.
    """
    m, n = len(suppliers), len(recipients)
    profit = np.zeros((m, n))

    for i, supplier in enumerate(suppliers):
        for j, recipient in enumerate(recipients):
            transport = lookup_cost(costs, recipient, supplier)
            profit[i, j] = recipient.purchase_price - transport - supplier.selling_price

    logger.debug(f"Built {m}x{n} profit matrix")
    return profit


def routing_profit(
    profit: np.ndarray,
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
) -> np.ndarray:
    """
    Copy of `profit` with every fictional route valued at zero.

    Shipments to or from a fictional entity are not real transactions. Left
    at their formula value (purchase price for a fictional supplier, minus the
    selling price for a fictional recipient) they add a constant to the
    objective and hide prices from the optimizer.
    """
    routed = np.array(profit, dtype=float, copy=True)
    if routed.shape != (len(suppliers), len(recipients)):
        raise InvalidProblemError(
            f"Profit matrix shape {routed.shape} does not match "
            f"{len(suppliers)} suppliers x {len(recipients)} recipients"
        )
    fictional_rows = [i for i, s in enumerate(suppliers) if s.is_fictional]
    fictional_cols = [j for j, r in enumerate(recipients) if r.is_fictional]
    if fictional_rows:
        routed[fictional_rows, :] = 0.0
    if fictional_cols:
        routed[:, fictional_cols] = 0.0
    return routed
