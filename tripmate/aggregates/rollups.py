"""
Derived Aggregates

Read-only rollups computed from a Trip snapshot.

DESIGN DECISION: Nothing here is cached. Trips are personal-trip sized,
so recomputing on every read is cheap and there is no state to invalidate.
Every function is pure and tolerates dangling member ids.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from tripmate.models.trip import ExpenseCategory, Trip

ZERO = Decimal("0")


class TripAggregates(BaseModel):
    """Totals and per-member sums for one trip snapshot."""

    model_config = ConfigDict(frozen=True)

    total_contributions: Decimal
    total_expenses: Decimal
    balance: Decimal
    member_contributions: dict[str, Decimal]
    member_expenses: dict[str, Decimal]


class MemberBalance(BaseModel):
    """One member's position under the equal-share policy."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    name: str
    contributed: Decimal
    share: Decimal
    balance: Decimal


def compute_aggregates(trip: Trip) -> TripAggregates:
    """
    Compute totals and per-member rollups.

    - member_contributions: member id -> sum of that member's contributions
    - member_expenses: member id -> sum of expenses that member paid for
    """
    member_contributions: dict[str, Decimal] = {}
    for contribution in trip.contributions:
        member_contributions[contribution.member_id] = (
            member_contributions.get(contribution.member_id, ZERO) + contribution.amount
        )

    member_expenses: dict[str, Decimal] = {}
    for expense in trip.expenses:
        member_expenses[expense.paid_by] = (
            member_expenses.get(expense.paid_by, ZERO) + expense.amount
        )

    total_contributions = sum((c.amount for c in trip.contributions), ZERO)
    total_expenses = sum((e.amount for e in trip.expenses), ZERO)

    return TripAggregates(
        total_contributions=total_contributions,
        total_expenses=total_expenses,
        balance=total_contributions - total_expenses,
        member_contributions=member_contributions,
        member_expenses=member_expenses,
    )


def member_balances(
    trip: Trip,
    aggregates: Optional[TripAggregates] = None,
) -> list[MemberBalance]:
    """Each member's contribution, equal share and net balance, in member order."""
    aggregates = aggregates or compute_aggregates(trip)
    if not trip.members:
        return []

    share = aggregates.total_expenses / len(trip.members)
    balances = []
    for member in trip.members:
        contributed = aggregates.member_contributions.get(member.id, ZERO)
        balances.append(MemberBalance(
            member_id=member.id,
            name=member.name,
            contributed=contributed,
            share=share,
            balance=contributed - share,
        ))
    return balances


def expenses_by_category(trip: Trip) -> dict[ExpenseCategory, Decimal]:
    """Total spend per category, in order of first appearance."""
    totals: dict[ExpenseCategory, Decimal] = {}
    for expense in trip.expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def daily_spending(trip: Trip) -> list[tuple[date, Decimal]]:
    """Total spend per calendar day, oldest first."""
    totals: dict[date, Decimal] = {}
    for expense in trip.expenses:
        day = expense.date.date()
        totals[day] = totals.get(day, ZERO) + expense.amount
    return sorted(totals.items())


def balance_over_time(trip: Trip) -> list[tuple[date, Decimal]]:
    """
    Remaining kitty at the end of each day that had spending.

    Starts from total contributions and subtracts each day's spend.
    Empty when there are no expenses.
    """
    running = sum((c.amount for c in trip.contributions), ZERO)
    points = []
    for day, spent in daily_spending(trip):
        running -= spent
        points.append((day, running))
    return points


def packing_progress(trip: Trip) -> int:
    """Percentage of luggage items packed, rounded half up. 0 for an empty list."""
    total = len(trip.luggage)
    if total == 0:
        return 0
    packed = sum(1 for item in trip.luggage if item.packed)
    percent = Decimal(packed * 100) / Decimal(total)
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
