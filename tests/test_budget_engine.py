from decimal import Decimal

from app.schemas.plan import ActivityData, PlanData
from app.services import budget_engine


def _activity(quantity, frequency, unit_cost, **extra):
    return ActivityData(
        activity="Salaries",
        quantity=quantity,
        frequency=frequency,
        unit_cost=unit_cost,
        **extra,
    )


def _plan(*activities):
    return PlanData(
        facility_name="BUTARO HOSPITAL",
        facility_type="Hospital",
        program="HIV",
        fiscal_year="FY 2024",
        activities=list(activities),
    )


def test_quarter_amount_is_product_of_inputs():
    assert budget_engine.quarter_amount(10, 1, 450000) == Decimal("4500000")


def test_quarter_amount_avoids_binary_float_rounding():
    assert budget_engine.quarter_amount(0.1, 3, 1) == Decimal("0.3")


def test_quarter_amounts_are_uniform():
    amounts = budget_engine.quarter_amounts(_activity(2, 3, 100))
    assert amounts == (Decimal("600"),) * 4


def test_total_budget_ignores_stored_quarter_amounts():
    activity = _activity(10, 1, 450000, amount_q1=Decimal("1"), annual_budget=Decimal("1"))
    assert budget_engine.total_budget(activity) == Decimal("18000000")


def test_zero_activity_costs_nothing():
    assert budget_engine.total_budget(_activity(0, 0, 0)) == Decimal("0")


def test_recompute_activity_returns_new_object():
    activity = _activity(10, 1, 450000)
    recomputed = budget_engine.recompute_activity(activity)

    assert recomputed is not activity
    assert activity.annual_budget == Decimal("0")
    assert recomputed.amount_q1 == recomputed.amount_q4 == Decimal("4500000")
    assert recomputed.annual_budget == Decimal("18000000")


def test_recompute_is_idempotent():
    once = budget_engine.recompute_activity(_activity(3, 2, 1250.5))
    twice = budget_engine.recompute_activity(once)
    assert once == twice


def test_plan_total_and_quarter_totals():
    plan = _plan(_activity(10, 1, 450000), _activity(2, 3, 100), _activity(0, 0, 0))

    assert budget_engine.plan_total(plan) == Decimal("18002400")
    totals = budget_engine.plan_quarter_totals(plan)
    assert list(totals) == ["Q1", "Q2", "Q3", "Q4"]
    assert set(totals.values()) == {Decimal("4500600")}


def test_recompute_plan_refreshes_general_total():
    plan = _plan(_activity(10, 1, 450000), _activity(1, 1, 1))
    recomputed = budget_engine.recompute_plan(plan)

    assert plan.general_total_budget == Decimal("0")
    assert recomputed.general_total_budget == Decimal("18000004")
    assert [a.annual_budget for a in recomputed.activities] == [Decimal("18000000"), Decimal("4")]


def test_empty_plan_total_is_zero():
    assert budget_engine.plan_total(_plan()) == Decimal("0")


def test_apply_to_row_updates_in_place():
    class Row:
        quantity = Decimal("5")
        frequency = Decimal("2")
        unit_cost = Decimal("10")

    row = Row()
    assert budget_engine.apply_to_row(row) == Decimal("400")
    assert (row.amount_q1, row.amount_q2, row.amount_q3, row.amount_q4) == (Decimal("100"),) * 4
