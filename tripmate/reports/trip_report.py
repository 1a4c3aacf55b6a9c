"""
Trip Report

Read-only report data for a trip, ready to be laid out by a renderer
(PDF, HTML, terminal). Every cell is already a display string.

Sections, in order:
1. Financial summary (collected, spent, remaining)
2. Contributions per member
3. Expense details
4. Settlement summary
5. Packing list
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from tripmate.aggregates import compute_aggregates
from tripmate.config import get_settings
from tripmate.models.trip import Settlement, Trip
from tripmate.settlement import calculate_settlements

MISSING_NAME = "N/A"
SETTLED_UP_TEXT = "Everyone is settled up!"

CONTRIBUTION_HEADERS = ("Member", "Amount Contributed")
EXPENSE_HEADERS = ("Date", "Title", "Category", "Amount", "Paid By")
SETTLEMENT_HEADERS = ("Who Owes", "Who Gets Paid", "Amount")
PACKING_HEADERS = ("Item", "Category", "Packed", "Added By")


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """
    Format money for display: ``$1,234.50``, ``-$5.00``.
    """
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    return f"{sign}{symbol}{abs(quantized):,.2f}"


class TripReport(BaseModel):
    """Report tables for one trip snapshot."""

    model_config = ConfigDict(frozen=True)

    title: str
    generated_on: date
    summary_rows: list[tuple[str, str]] = Field(default_factory=list)
    contribution_rows: list[tuple[str, ...]] = Field(default_factory=list)
    expense_rows: list[tuple[str, ...]] = Field(default_factory=list)
    settlement_rows: list[tuple[str, ...]] = Field(default_factory=list)
    packing_rows: list[tuple[str, ...]] = Field(default_factory=list)
    file_name: str


def report_file_name(trip: Trip) -> str:
    # Only the first space is replaced, matching existing report names.
    return f"{trip.name.replace(' ', '_', 1)}_Report.pdf"


def build_trip_report(
    trip: Trip,
    currency_symbol: Optional[str] = None,
    generated_on: Optional[date] = None,
) -> TripReport:
    """
    Build the full report for a trip.

    Names that no longer resolve to a member show as ``N/A``.
    """
    symbol = currency_symbol if currency_symbol is not None else get_settings().app.currency_symbol

    def money(amount: Decimal) -> str:
        return format_currency(amount, symbol)

    def name_of(member_id: str) -> str:
        return trip.member_name(member_id, default=MISSING_NAME)

    aggregates = compute_aggregates(trip)

    summary_rows = [
        ("Total Collected", money(aggregates.total_contributions)),
        ("Total Expenses", money(aggregates.total_expenses)),
        ("Remaining Balance", money(aggregates.balance)),
    ]

    contribution_rows = [
        (member.name, money(aggregates.member_contributions.get(member.id, Decimal("0"))))
        for member in trip.members
    ]

    expense_rows = [
        (
            expense.date.date().isoformat(),
            expense.title,
            expense.category.value,
            money(expense.amount),
            name_of(expense.paid_by),
        )
        for expense in trip.expenses
    ]

    settlements = calculate_settlements(
        trip,
        aggregates.total_expenses,
        aggregates.member_contributions,
        aggregates.member_expenses,
    )
    settlement_rows = [
        (s.from_member, s.to_member, money(s.amount)) for s in settlements
    ] or [(SETTLED_UP_TEXT, "", "")]

    packing_rows = [
        (
            item.name,
            item.category.value,
            "Yes" if item.packed else "No",
            name_of(item.added_by),
        )
        for item in trip.luggage
    ]

    return TripReport(
        title=f"Trip Report: {trip.name}",
        generated_on=generated_on or date.today(),
        summary_rows=summary_rows,
        contribution_rows=contribution_rows,
        expense_rows=expense_rows,
        settlement_rows=settlement_rows,
        packing_rows=packing_rows,
        file_name=report_file_name(trip),
    )


def settlement_share_text(
    trip: Trip,
    settlements: Sequence[Settlement],
    currency_symbol: Optional[str] = None,
) -> str:
    """Plain-text settlement summary for sharing in a chat app."""
    symbol = currency_symbol if currency_symbol is not None else get_settings().app.currency_symbol
    text = f"*Trip Settlement for {trip.name}*\n\n"
    if not settlements:
        return text + SETTLED_UP_TEXT
    for s in settlements:
        text += f"{s.from_member} owes {s.to_member} {format_currency(s.amount, symbol)}\n"
    return text
