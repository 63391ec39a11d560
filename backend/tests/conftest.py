from pathlib import Path
import sys

import pytest

# Put backend/ on the import path regardless of where pytest is launched
BACKEND = Path(__file__).resolve().parents[1]
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))

from app.schemas import Recipient, Supplier


@pytest.fixture
def single_route():
    """Scenario A: one supplier, one recipient, 2 profit per unit."""
    suppliers = [Supplier(id="s1", name="S1", supply=10, selling_price=2)]
    recipients = [Recipient(id="r1", name="R1", demand=10, purchase_price=5)]
    costs = {"r1": {"s1": 1}}
    return suppliers, recipients, costs


@pytest.fixture
def shortage_problem():
    """Scenario B: total supply 15 against demand 20."""
    suppliers = [
        Supplier(id="s1", name="S1", supply=10, selling_price=3),
        Supplier(id="s2", name="S2", supply=5, selling_price=4),
    ]
    recipients = [Recipient(id="r1", name="R1", demand=20, purchase_price=12)]
    costs = {"r1": {"s1": 2, "s2": 1}}
    return suppliers, recipients, costs


@pytest.fixture
def classic_problem():
    """
    2 suppliers x 3 recipients, surplus of 10 units.

    Unit profits:      r1  r2  r3
                  s1 [ 12   6   3 ]
                  s2 [ 10   9   5 ]
    """
    suppliers = [
        Supplier(id="s1", name="S1", supply=20, selling_price=10),
        Supplier(id="s2", name="S2", supply=30, selling_price=12),
    ]
    recipients = [
        Recipient(id="r1", name="R1", demand=10, purchase_price=30),
        Recipient(id="r2", name="R2", demand=28, purchase_price=25),
        Recipient(id="r3", name="R3", demand=2, purchase_price=20),
    ]
    costs = {
        "r1": {"s1": 8, "s2": 8},
        "r2": {"s1": 9, "s2": 4},
        "r3": {"s1": 7, "s2": 3},
    }
    return suppliers, recipients, costs
