from enum import Enum


class BalanceStatus(str, Enum):
    BALANCED = "balanced"
    FICTIONAL_SUPPLIER = "fictional_supplier"      # demand exceeded supply
    FICTIONAL_RECIPIENT = "fictional_recipient"    # supply exceeded demand


class OptimizerState(str, Enum):
    COMPUTE_DUALS = "compute_duals"
    FIND_ENTERING = "find_entering"
    FIND_CYCLE = "find_cycle"
    REALLOCATE = "reallocate"
    CONVERGED = "converged"
    STALLED = "stalled"
    ITERATION_LIMIT = "iteration_limit"


TERMINAL_STATES = (
    OptimizerState.CONVERGED,
    OptimizerState.STALLED,
    OptimizerState.ITERATION_LIMIT,
)


# Reserved identities for the balancing placeholders. Filtering never relies
# on these strings; entities carry an explicit is_fictional flag.
FICTIONAL_SUPPLIER_ID = "fictional_s"
FICTIONAL_SUPPLIER_NAME = "SF"
FICTIONAL_RECIPIENT_ID = "fictional_r"
FICTIONAL_RECIPIENT_NAME = "RF"
