"""
Settlement Engine

Turns a trip into a list of "X pays Y amount" instructions so that,
once every instruction is carried out, each member has paid exactly
their equal share of the trip's total expenses.

ALGORITHM (greedy, equal-share):
1. No members or nothing spent -> nothing to settle
2. share = total_expenses / member_count
3. balance = member's contributions - share
4. Debtors (balance < 0) and creditors (balance > 0), each kept in member order
5. Each debtor, in order, pays creditors in order until the debt is cleared;
   a creditor that has been paid in full is skipped from then on

DESIGN DECISION: This is NOT a minimum-number-of-transfers solver.
Output is deterministic and follows member order; changing the algorithm
changes what users see for existing trips.

No rounding happens here. Callers format amounts for display.
"""

from decimal import Decimal
from typing import Mapping, Optional

from tripmate.aggregates import compute_aggregates
from tripmate.models.trip import Settlement, Trip

ZERO = Decimal("0")


def calculate_settlements(
    trip: Trip,
    total_expenses: Decimal,
    member_contributions: Mapping[str, Decimal],
    member_expenses: Optional[Mapping[str, Decimal]] = None,
) -> list[Settlement]:
    """
    Compute the ordered list of payments that settles the trip.

    Args:
        trip: The trip snapshot (members, in order, and their names)
        total_expenses: Sum of all expenses
        member_contributions: member id -> total contributed
        member_expenses: Accepted for call compatibility; who paid which
            expense does not affect the equal-share settlement

    Returns:
        Settlements grouped by debtor (member order), then by creditor
        in the order they were paid
    """
    if not trip.members or total_expenses == 0:
        return []

    per_person_share = total_expenses / len(trip.members)

    debtors: list[tuple[str, Decimal]] = []
    creditors: list[list] = []
    for member in trip.members:
        balance = member_contributions.get(member.id, ZERO) - per_person_share
        if balance < 0:
            debtors.append((member.id, -balance))
        elif balance > 0:
            creditors.append([member.id, balance])

    settlements = []
    creditor_index = 0
    for debtor_id, owed in debtors:
        remaining = owed
        while remaining > 0 and creditor_index < len(creditors):
            creditor_id, credit = creditors[creditor_index]
            payment = min(remaining, credit)

            settlements.append(Settlement(
                from_member=trip.member_name(debtor_id),
                to_member=trip.member_name(creditor_id),
                amount=payment,
            ))

            remaining -= payment
            creditors[creditor_index][1] = credit - payment
            if creditors[creditor_index][1] == 0:
                creditor_index += 1

    return settlements


def settle_trip(trip: Trip) -> list[Settlement]:
    """Compute aggregates for ``trip`` and settle it."""
    aggregates = compute_aggregates(trip)
    return calculate_settlements(
        trip,
        aggregates.total_expenses,
        aggregates.member_contributions,
        aggregates.member_expenses,
    )
