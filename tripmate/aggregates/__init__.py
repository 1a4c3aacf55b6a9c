"""Derived aggregates package."""

from tripmate.aggregates.rollups import (
    MemberBalance,
    TripAggregates,
    balance_over_time,
    compute_aggregates,
    daily_spending,
    expenses_by_category,
    member_balances,
    packing_progress,
)

__all__ = [
    "MemberBalance",
    "TripAggregates",
    "balance_over_time",
    "compute_aggregates",
    "daily_spending",
    "expenses_by_category",
    "member_balances",
    "packing_progress",
]
