import copy

import pytest

from app.constants import BalanceStatus, FICTIONAL_RECIPIENT_ID, FICTIONAL_SUPPLIER_ID
from app.schemas import Recipient, Supplier
from mediator.balancer import balance
from mediator.exceptions import InvalidProblemError


def test_balanced_problem_is_returned_without_fictional_entities(single_route):
    suppliers, recipients, costs = single_route

    problem = balance(suppliers, recipients, costs)

    assert problem.status == BalanceStatus.BALANCED
    assert problem.difference == 0.0
    assert len(problem.suppliers) == 1
    assert len(problem.recipients) == 1
    assert not any(s.is_fictional for s in problem.suppliers)
    assert problem.costs == {"r1": {"s1": 1}}


def test_shortage_adds_fictional_supplier(shortage_problem):
    suppliers, recipients, costs = shortage_problem

    problem = balance(suppliers, recipients, costs)

    assert problem.status == BalanceStatus.FICTIONAL_SUPPLIER
    assert problem.difference == pytest.approx(5)
    fictional = problem.suppliers[-1]
    assert fictional.is_fictional
    assert fictional.id == FICTIONAL_SUPPLIER_ID
    assert fictional.supply == pytest.approx(5)
    assert fictional.selling_price == 0
    assert problem.costs["r1"][FICTIONAL_SUPPLIER_ID] == 0
    assert problem.total_supply == pytest.approx(problem.total_demand)


def test_surplus_adds_fictional_recipient(classic_problem):
    suppliers, recipients, costs = classic_problem

    problem = balance(suppliers, recipients, costs)

    assert problem.status == BalanceStatus.FICTIONAL_RECIPIENT
    fictional = problem.recipients[-1]
    assert fictional.is_fictional
    assert fictional.id == FICTIONAL_RECIPIENT_ID
    assert fictional.demand == pytest.approx(10)
    assert fictional.purchase_price == 0
    assert problem.costs[FICTIONAL_RECIPIENT_ID] == {"s1": 0.0, "s2": 0.0}
    assert problem.total_supply == pytest.approx(problem.total_demand)


def test_missing_cost_row_is_created_for_fictional_supplier():
    suppliers = [Supplier(id="s1", name="S1", supply=1)]
    recipients = [
        Recipient(id="r1", name="R1", demand=2),
        Recipient(id="r2", name="R2", demand=2),
    ]
    costs = {"r1": {"s1": 3}}

    problem = balance(suppliers, recipients, costs)

    assert problem.costs["r2"] == {FICTIONAL_SUPPLIER_ID: 0.0}
    assert problem.costs["r1"] == {"s1": 3, FICTIONAL_SUPPLIER_ID: 0.0}


def test_inputs_are_not_mutated(classic_problem):
    suppliers, recipients, costs = classic_problem
    suppliers_before = list(suppliers)
    recipients_before = list(recipients)
    costs_before = copy.deepcopy(costs)

    balance(suppliers, recipients, costs)

    assert suppliers == suppliers_before
    assert recipients == recipients_before
    assert costs == costs_before


def test_rebalancing_is_a_no_op(shortage_problem):
    first = balance(*shortage_problem)

    second = balance(first.suppliers, first.recipients, first.costs)

    assert second.status == BalanceStatus.BALANCED
    assert len(second.suppliers) == len(first.suppliers)
    assert len(second.recipients) == len(first.recipients)
    assert second.costs == first.costs


def test_accepts_plain_dict_records():
    suppliers = [{"id": "s1", "name": "S1", "supply": 4, "sellingPrice": 1}]
    recipients = [{"id": "r1", "name": "R1", "demand": 6, "purchase_price": 9}]

    problem = balance(suppliers, recipients, {"r1": {"s1": 2}})

    assert isinstance(problem.suppliers[0], Supplier)
    assert problem.suppliers[0].selling_price == 1
    assert problem.recipients[0].purchase_price == 9
    assert problem.suppliers[-1].supply == pytest.approx(2)


def test_reserved_supplier_id_is_rejected():
    suppliers = [Supplier(id=FICTIONAL_SUPPLIER_ID, name="Genuine", supply=5, selling_price=1)]
    recipients = [Recipient(id="r1", name="R1", demand=10, purchase_price=10)]
    costs = {"r1": {FICTIONAL_SUPPLIER_ID: 4}}

    with pytest.raises(InvalidProblemError, match="reserved"):
        balance(suppliers, recipients, costs)

    # the caller's real cost is never overwritten
    assert costs == {"r1": {FICTIONAL_SUPPLIER_ID: 4}}


def test_reserved_recipient_id_is_rejected():
    suppliers = [Supplier(id="s1", name="S1", supply=10)]
    recipients = [Recipient(id=FICTIONAL_RECIPIENT_ID, name="Genuine", demand=5)]

    with pytest.raises(InvalidProblemError, match="reserved"):
        balance(suppliers, recipients, {FICTIONAL_RECIPIENT_ID: {"s1": 1}})


@pytest.mark.parametrize("flag_key", ["isFictional", "is_fictional"])
def test_caller_record_cannot_claim_fictional_flag(flag_key):
    suppliers = [{"id": "s1", "name": "S1", "supply": 5, flag_key: True}]
    recipients = [{"id": "r1", "name": "R1", "demand": 5, "purchasePrice": 10}]

    with pytest.raises(InvalidProblemError, match="flagged fictional"):
        balance(suppliers, recipients, {"r1": {"s1": 1}})


def test_duplicate_ids_are_rejected():
    suppliers = [
        Supplier(id="s1", name="S1", supply=5),
        Supplier(id="s1", name="S1 again", supply=5),
    ]
    recipients = [Recipient(id="r1", name="R1", demand=10)]

    with pytest.raises(InvalidProblemError, match="Duplicate"):
        balance(suppliers, recipients, {"r1": {"s1": 1}})


def test_second_placeholder_on_the_same_side_is_rejected(shortage_problem):
    first = balance(*shortage_problem)
    recipients = [r.model_copy(update={"demand": r.demand + 3}) for r in first.recipients]

    with pytest.raises(InvalidProblemError, match="already carries"):
        balance(first.suppliers, recipients, first.costs)
