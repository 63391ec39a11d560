import numpy as np
import pytest

from mediator.reporting import ROUTE_COLUMNS, allocation_frame, solution_summary
from mediator.solver import MediatorSolution, solve_mediator_problem


@pytest.fixture
def classic_solution(classic_problem):
    return solve_mediator_problem(*classic_problem)


def test_allocation_frame_lists_shipped_routes(classic_solution):
    frame = allocation_frame(classic_solution)

    assert list(frame.columns) == ROUTE_COLUMNS
    assert list(zip(frame["supplier_id"], frame["recipient_id"])) == [
        ("s1", "r1"), ("s1", "fictional_r"), ("s2", "r2"), ("s2", "r3"),
    ]
    assert frame["quantity"].tolist() == pytest.approx([10, 10, 28, 2])
    assert frame["is_fictional"].tolist() == [False, True, False, False]
    assert frame["route_profit"].tolist() == pytest.approx([120, 0, 252, 10])
    assert frame.loc[~frame["is_fictional"], "route_profit"].sum() == pytest.approx(
        classic_solution.total_profit
    )


def test_allocation_frame_is_empty_without_shipments(single_route):
    suppliers, recipients, _ = single_route
    solution = MediatorSolution(
        allocation=np.zeros((1, 1)),
        total_cost=0.0,
        total_income=0.0,
        total_profit=0.0,
        balanced_suppliers=suppliers,
        balanced_recipients=recipients,
    )

    frame = allocation_frame(solution)

    assert frame.empty
    assert list(frame.columns) == ROUTE_COLUMNS


def test_solution_summary(classic_solution):
    summary = solution_summary(classic_solution)

    assert summary["total_profit"] == pytest.approx(382)
    assert summary["total_cost"] == pytest.approx(658)
    assert summary["balance_status"] == "fictional_recipient"
    assert summary["optimizer_state"] == "converged"
    assert summary["routes_used"] == 3
    assert summary["quantity_shipped"] == pytest.approx(40)
    assert summary["unshipped_quantity"] == pytest.approx(10)
    assert summary["allocation"] == [[10.0, 0.0, 0.0, 10.0], [0.0, 28.0, 2.0, 0.0]]
