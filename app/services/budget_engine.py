"""
Budget Engine — quarterly amount and total arithmetic for plans.

All functions are pure: they read the costing fields of the objects they
are given and never touch the database or mutate their arguments.  Values
are handled as :class:`~decimal.Decimal`; floats are converted through
``str`` first so that binary rounding never enters a stored amount, and
recomputing with unchanged inputs always yields the identical result.

Costing rule
------------
Every quarter is costed the same way::

    amount_qN = quantity × frequency × unit_cost

There is no per-quarter quantity yet, so the four quarter amounts of an
activity are always equal.  Stored ``amount_q*`` values are treated as a
cache and ignored by :func:`total_budget`.

The engine does not validate.  Negative or non-finite inputs are rejected
upstream by ``app.services.plan_validation``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Protocol, Sequence

from app.utils.constants import QUARTERS

Number = Decimal | int | float | str


class CostedActivity(Protocol):
    quantity: Any
    frequency: Any
    unit_cost: Any


class CostedPlan(Protocol):
    activities: Sequence[Any]


def to_decimal(value: Number | None) -> Decimal:
    """Coerce *value* to ``Decimal``; ``None`` counts as zero."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quarter_amount(quantity: Number, frequency: Number, unit_cost: Number) -> Decimal:
    return to_decimal(quantity) * to_decimal(frequency) * to_decimal(unit_cost)


def quarter_amounts(activity: CostedActivity) -> tuple[Decimal, Decimal, Decimal, Decimal]:
    """Return ``(q1, q2, q3, q4)`` for *activity* under the uniform rule."""
    amount = quarter_amount(activity.quantity, activity.frequency, activity.unit_cost)
    return tuple(amount for _ in QUARTERS)  # type: ignore[return-value]


def total_budget(activity: CostedActivity) -> Decimal:
    return sum(quarter_amounts(activity), Decimal(0))


def plan_total(plan: CostedPlan) -> Decimal:
    return sum((total_budget(activity) for activity in plan.activities), Decimal(0))


def plan_quarter_totals(plan: CostedPlan) -> dict[str, Decimal]:
    """Sum each quarter across all activities, keyed ``"Q1"``..``"Q4"``."""
    totals = {quarter: Decimal(0) for quarter in QUARTERS}
    for activity in plan.activities:
        for quarter, amount in zip(QUARTERS, quarter_amounts(activity)):
            totals[quarter] += amount
    return totals


def recompute_activity(activity):
    """Return a copy of a pydantic activity with derived amounts refreshed."""
    q1, q2, q3, q4 = quarter_amounts(activity)
    return activity.model_copy(
        update={
            "quantity": to_decimal(activity.quantity),
            "frequency": to_decimal(activity.frequency),
            "unit_cost": to_decimal(activity.unit_cost),
            "amount_q1": q1,
            "amount_q2": q2,
            "amount_q3": q3,
            "amount_q4": q4,
            "annual_budget": q1 + q2 + q3 + q4,
        }
    )


def recompute_plan(plan):
    """Return a copy of a pydantic plan with every activity and the total refreshed."""
    activities = [recompute_activity(activity) for activity in plan.activities]
    return plan.model_copy(
        update={
            "activities": activities,
            "general_total_budget": sum(
                (activity.annual_budget for activity in activities), Decimal(0)
            ),
        }
    )


def apply_to_row(row: Any) -> Decimal:
    """Refresh the derived columns of an ORM activity row in place.

    Returns the row's new annual budget.
    """
    q1, q2, q3, q4 = quarter_amounts(row)
    row.amount_q1, row.amount_q2, row.amount_q3, row.amount_q4 = q1, q2, q3, q4
    row.annual_budget = q1 + q2 + q3 + q4
    return row.annual_budget
