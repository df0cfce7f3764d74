from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.goals import average_monthly_savings, project_goal

TODAY = date(2025, 11, 20)


@pytest.fixture
def history(make_tx):
    # September saves 600, November saves 400, October has no activity
    return [
        make_tx("income", "1000", on=date(2025, 9, 1)),
        make_tx("expense", "400", on=date(2025, 9, 10)),
        make_tx("income", "500", on=date(2025, 11, 1)),
        make_tx("expense", "100", on=date(2025, 11, 2)),
    ]


def test_average_skips_inactive_months(history):
    assert average_monthly_savings(history) == Decimal("500")
    assert average_monthly_savings([]) == 0


def test_projection_rounds_months_up(history):
    projection = project_goal(history, Decimal("1200"), today=TODAY)
    assert projection.months_needed == 3
    assert projection.target_month == date(2026, 2, 1)
    assert projection.target_month_label == "February 2026"
    assert projection.to_dict()["target_month"] == "2026-02"


def test_projection_exact_multiple(history):
    assert project_goal(history, Decimal("1000"), today=TODAY).months_needed == 2


def test_no_projection_without_positive_savings(make_tx):
    losing = [make_tx("expense", "100", on=date(2025, 11, 1))]
    assert project_goal(losing, Decimal("1000"), today=TODAY) is None
    assert project_goal([], Decimal("1000"), today=TODAY) is None


def test_no_projection_for_non_positive_target(history):
    assert project_goal(history, Decimal("0"), today=TODAY) is None


def test_projection_dict_with_large_savings(make_tx):
    projection = project_goal([make_tx("income", "1E+27", on=date(2025, 11, 1))], Decimal("3E+27"), today=TODAY)
    assert projection.months_needed == 3
    assert projection.to_dict()["average_monthly_savings"] == Decimal("1E+27")
