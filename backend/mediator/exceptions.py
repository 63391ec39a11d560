"""
Error taxonomy for the mediator solver.

Only genuinely invalid input surfaces as an exception. Degenerate or
disconnected bases are not errors: the optimizer stops and hands back the
last feasible allocation with a STALLED state instead.
"""


class MediatorProblemError(Exception):
    """Base class for every error raised by the solver core."""


class MissingCostEntryError(MediatorProblemError, KeyError):
    """A (recipient, supplier) transport cost needed for the computation is absent."""

    def __init__(self, recipient_id: str, supplier_id: str):
        self.recipient_id = recipient_id
        self.supplier_id = supplier_id
        super().__init__(recipient_id, supplier_id)

    def __str__(self) -> str:
        return (
            f"No transport cost for recipient '{self.recipient_id}' "
            f"from supplier '{self.supplier_id}'"
        )


class InvalidProblemError(MediatorProblemError, ValueError):
    """Matrix shapes do not agree with the supplier / recipient lists."""
