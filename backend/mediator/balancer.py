"""
Supply / demand balancing.

A transportation problem is solvable by the stepping-stone machinery only
when total supply equals total demand. The gap is closed with a zero-price
fictional supplier (shortage) or fictional recipient (surplus) whose transport
costs are all zero.
"""

import copy
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from app.config import settings
from app.constants import (
    BalanceStatus,
    FICTIONAL_RECIPIENT_ID,
    FICTIONAL_RECIPIENT_NAME,
    FICTIONAL_SUPPLIER_ID,
    FICTIONAL_SUPPLIER_NAME,
)
from app.schemas import CostMatrix, Recipient, Supplier, parse_recipients, parse_suppliers
from .exceptions import InvalidProblemError

logger = logging.getLogger(__name__)


@dataclass
class BalancedProblem:
    suppliers:  List[Supplier]
    recipients: List[Recipient]
    costs:      CostMatrix
    status:     BalanceStatus = BalanceStatus.BALANCED
    difference: float = 0.0      # quantity carried by the fictional entity

    @property
    def total_supply(self) -> float:
        return sum(s.supply for s in self.suppliers)

    @property
    def total_demand(self) -> float:
        return sum(r.demand for r in self.recipients)


def balance(
    suppliers: Sequence[Supplier],
    recipients: Sequence[Recipient],
    costs: CostMatrix,
    tolerance: Optional[float] = None,
) -> BalancedProblem:
    """
    Return a balanced copy of the problem.

    The caller's lists and cost mapping are deep-copied, never modified.
    Calling this on an already balanced problem adds nothing.

    Raises InvalidProblemError for duplicate ids, for a caller record that
    claims a reserved fictional id or the fictional flag, and for a problem
    that already holds a placeholder on the side that is still short.
    """
    tolerance = settings.BALANCE_TOLERANCE if tolerance is None else tolerance

    suppliers = [s.model_copy(deep=True) for s in parse_suppliers(suppliers)]
    recipients = [r.model_copy(deep=True) for r in parse_recipients(recipients)]
    costs = copy.deepcopy(dict(costs))
    _check_identities(suppliers, recipients)

    total_supply = sum(s.supply for s in suppliers)
    total_demand = sum(r.demand for r in recipients)
    gap = total_demand - total_supply

    if gap > tolerance:
        if any(s.is_fictional for s in suppliers):
            raise InvalidProblemError(
                f"Problem already carries fictional supplier {FICTIONAL_SUPPLIER_ID!r} "
                f"but demand still exceeds supply by {gap:g}"
            )
        fictional = Supplier(
            id=FICTIONAL_SUPPLIER_ID,
            name=FICTIONAL_SUPPLIER_NAME,
            supply=gap,
            selling_price=0.0,
            is_fictional=True,
        )
        suppliers.append(fictional)
        for recipient in recipients:
            costs.setdefault(recipient.id, {})[fictional.id] = 0.0
        logger.info(
            f"Demand exceeds supply by {gap:g}, added fictional supplier {fictional.name}"
        )
        return BalancedProblem(suppliers, recipients, costs, BalanceStatus.FICTIONAL_SUPPLIER, gap)

    if -gap > tolerance:
        if any(r.is_fictional for r in recipients):
            raise InvalidProblemError(
                f"Problem already carries fictional recipient {FICTIONAL_RECIPIENT_ID!r} "
                f"but supply still exceeds demand by {-gap:g}"
            )
        fictional = Recipient(
            id=FICTIONAL_RECIPIENT_ID,
            name=FICTIONAL_RECIPIENT_NAME,
            demand=-gap,
            purchase_price=0.0,
            is_fictional=True,
        )
        recipients.append(fictional)
        costs[fictional.id] = {supplier.id: 0.0 for supplier in suppliers}
        logger.info(
            f"Supply exceeds demand by {-gap:g}, added fictional recipient {fictional.name}"
        )
        return BalancedProblem(suppliers, recipients, costs, BalanceStatus.FICTIONAL_RECIPIENT, -gap)

    logger.debug(f"Problem already balanced (supply={total_supply:g}, demand={total_demand:g})")
    return BalancedProblem(suppliers, recipients, costs)


def _check_identities(suppliers: Sequence[Supplier], recipients: Sequence[Recipient]) -> None:
    """
    Ids must be unique per side, and the fictional flag goes together with
    the reserved id. A record that breaks either rule would overwrite real
    transport costs or drop real shipments from the totals.
    """
    for kind, records, reserved in (
        ("supplier", suppliers, FICTIONAL_SUPPLIER_ID),
        ("recipient", recipients, FICTIONAL_RECIPIENT_ID),
    ):
        seen = set()
        for record in records:
            if record.id in seen:
                raise InvalidProblemError(f"Duplicate {kind} id {record.id!r}")
            seen.add(record.id)
            if record.id == reserved and not record.is_fictional:
                raise InvalidProblemError(
                    f"{kind.capitalize()} id {reserved!r} is reserved for the balancing placeholder"
                )
            if record.is_fictional and record.id != reserved:
                raise InvalidProblemError(
                    f"{kind.capitalize()} {record.id!r} is flagged fictional; "
                    f"only {reserved!r} may be"
                )
