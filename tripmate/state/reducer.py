"""
Trip Reducer

``reduce_trip(state, action)`` is the only place a Trip changes.

GUARANTEES:
- Pure: the same (state, action) always gives the same next state
- Never mutates ``state``; changed collections are rebuilt as new tuples
- Never raises for a well-formed action
- Returns ``state`` itself (same object) when nothing changes, which is
  how the store tells a no-op apart from a real update

Input validation (non-empty names, positive amounts, keeping at least one
member) happens before dispatch, not here.
"""

from typing import Any

from tripmate.models.actions import (
    AddContribution,
    AddExpense,
    AddLuggage,
    AddMember,
    RemoveExpense,
    RemoveLuggage,
    RemoveMember,
    RenameTrip,
    ReplaceState,
    UpdateExpense,
    UpdateLuggage,
)
from tripmate.models.trip import Contribution, Trip


def _replace_by_id(items: tuple, replacement) -> tuple:
    return tuple(replacement if item.id == replacement.id else item for item in items)


def _without_id(items: tuple, item_id: str) -> tuple:
    return tuple(item for item in items if item.id != item_id)


def _add_contribution(state: Trip, action: AddContribution) -> Trip:
    contributions = state.contributions
    for index, contribution in enumerate(contributions):
        if contribution.member_id == action.member_id:
            merged = contribution.model_copy(
                update={"amount": contribution.amount + action.amount}
            )
            return state.model_copy(update={
                "contributions": contributions[:index] + (merged,) + contributions[index + 1:],
            })

    created = Contribution(
        id=action.contribution_id,
        member_id=action.member_id,
        amount=action.amount,
    )
    return state.model_copy(update={"contributions": contributions + (created,)})


def reduce_trip(state: Trip, action: Any) -> Trip:
    """
    Apply one action to a trip snapshot and return the next snapshot.

    Anything that is not a known action leaves the trip unchanged.
    """
    if isinstance(action, ReplaceState):
        return action.trip

    if isinstance(action, RenameTrip):
        return state.model_copy(update={"name": action.name})

    if isinstance(action, AddMember):
        if state.has_member_named(action.member.name):
            return state
        return state.model_copy(update={"members": state.members + (action.member,)})

    if isinstance(action, RemoveMember):
        # Expenses, luggage and contributions keep pointing at the removed id
        return state.model_copy(update={
            "members": _without_id(state.members, action.member_id),
        })

    if isinstance(action, AddLuggage):
        return state.model_copy(update={"luggage": state.luggage + (action.item,)})

    if isinstance(action, UpdateLuggage):
        return state.model_copy(update={
            "luggage": _replace_by_id(state.luggage, action.item),
        })

    if isinstance(action, RemoveLuggage):
        return state.model_copy(update={
            "luggage": _without_id(state.luggage, action.item_id),
        })

    if isinstance(action, AddExpense):
        return state.model_copy(update={"expenses": state.expenses + (action.expense,)})

    if isinstance(action, UpdateExpense):
        return state.model_copy(update={
            "expenses": _replace_by_id(state.expenses, action.expense),
        })

    if isinstance(action, RemoveExpense):
        return state.model_copy(update={
            "expenses": _without_id(state.expenses, action.expense_id),
        })

    if isinstance(action, AddContribution):
        return _add_contribution(state, action)

    return state
