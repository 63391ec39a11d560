"""
Synthetic mediator-problem generator.

Produces reproducible supplier / recipient / cost records for demos and
property tests. Ids follow the data-entry convention s1..sm / r1..rn with
display names S1.. / R1...
"""

import numpy as np
from typing import List, Tuple

from app.schemas import CostMatrix, Recipient, Supplier


class ProblemGenerator:
    """
    Parameters
    ----------
    n_suppliers, n_recipients : int
        Problem size before balancing.
    seed : int
        Random seed.
    quantity_range : (int, int)
        Inclusive bounds for supply and demand.
    price_range : (int, int)
        Bounds for supplier selling prices; recipient purchase prices are
        drawn from the same range shifted up by its width so most routes
        earn a margin.
    cost_range : (int, int)
        Bounds for unit transport costs.
    balanced : bool
        Force total demand to equal total supply.
    """

    def __init__(
        self,
        n_suppliers: int = 3,
        n_recipients: int = 4,
        seed: int = 42,
        quantity_range: Tuple[int, int] = (5, 60),
        price_range: Tuple[int, int] = (5, 25),
        cost_range: Tuple[int, int] = (1, 12),
        balanced: bool = False,
    ):
        self.n_suppliers = n_suppliers
        self.n_recipients = n_recipients
        self.rng = np.random.default_rng(seed)
        self.quantity_range = quantity_range
        self.price_range = price_range
        self.cost_range = cost_range
        self.balanced = balanced

    def generate(self) -> Tuple[List[Supplier], List[Recipient], CostMatrix]:
        q_lo, q_hi = self.quantity_range
        p_lo, p_hi = self.price_range
        c_lo, c_hi = self.cost_range

        supply = self.rng.integers(q_lo, q_hi + 1, size=self.n_suppliers)
        demand = self.rng.integers(q_lo, q_hi + 1, size=self.n_recipients)
        if self.balanced and self.n_recipients:
            demand = self._rebalance(demand, int(supply.sum()))

        selling = self.rng.integers(p_lo, p_hi + 1, size=self.n_suppliers)
        width = p_hi - p_lo
        purchase = self.rng.integers(p_lo + width, p_hi + width + 1, size=self.n_recipients)
        transport = self.rng.integers(c_lo, c_hi + 1, size=(self.n_recipients, self.n_suppliers))

        suppliers = [
            Supplier(id=f"s{i + 1}", name=f"S{i + 1}",
                     supply=float(supply[i]), selling_price=float(selling[i]))
            for i in range(self.n_suppliers)
        ]
        recipients = [
            Recipient(id=f"r{j + 1}", name=f"R{j + 1}",
                      demand=float(demand[j]), purchase_price=float(purchase[j]))
            for j in range(self.n_recipients)
        ]
        costs: CostMatrix = {
            recipients[j].id: {
                suppliers[i].id: float(transport[j, i]) for i in range(self.n_suppliers)
            }
            for j in range(self.n_recipients)
        }
        return suppliers, recipients, costs

    def _rebalance(self, demand: np.ndarray, total_supply: int) -> np.ndarray:
        """Scale integer demand to sum exactly to total_supply."""
        if demand.sum() == 0:
            # Nothing to scale; split the supply evenly instead
            scaled = np.full(len(demand), total_supply // len(demand))
            scaled[-1] += total_supply - scaled.sum()
            return scaled
        weights = demand / demand.sum()
        scaled = np.floor(weights * total_supply).astype(int)
        scaled[-1] += total_supply - scaled.sum()
        return scaled
