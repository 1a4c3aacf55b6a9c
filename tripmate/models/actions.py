"""
Trip Mutation Actions

DESIGN DECISION: Actions are a closed set of tagged variants.
Each action is a frozen pydantic model with a literal ``type`` tag, and
``TripAction`` is the discriminated union of all of them. This gives:
1. Exhaustive handling in the reducer (one branch per variant)
2. Validation of untyped payloads at the boundary (``parse_action``)
3. Stable serialization for audit records

Adding an action means adding a model here AND a branch in the reducer.
"""

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tripmate.models.trip import Expense, LuggageItem, Member, Trip, new_id


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ReplaceState(_Action):
    """Swap in a whole trip (import, or an out-of-band storage update)."""
    type: Literal["ReplaceState"] = "ReplaceState"
    trip: Trip


class RenameTrip(_Action):
    type: Literal["RenameTrip"] = "RenameTrip"
    name: str


class AddMember(_Action):
    """Append a member unless one with the same name (any case) exists."""
    type: Literal["AddMember"] = "AddMember"
    member: Member


class RemoveMember(_Action):
    """
    Remove a member from the member list.

    Expenses, luggage and contributions that reference the member are
    left as they are.
    """
    type: Literal["RemoveMember"] = "RemoveMember"
    member_id: str = Field(..., alias="memberId")


class AddLuggage(_Action):
    type: Literal["AddLuggage"] = "AddLuggage"
    item: LuggageItem


class UpdateLuggage(_Action):
    type: Literal["UpdateLuggage"] = "UpdateLuggage"
    item: LuggageItem


class RemoveLuggage(_Action):
    type: Literal["RemoveLuggage"] = "RemoveLuggage"
    item_id: str = Field(..., alias="itemId")


class AddExpense(_Action):
    type: Literal["AddExpense"] = "AddExpense"
    expense: Expense


class UpdateExpense(_Action):
    type: Literal["UpdateExpense"] = "UpdateExpense"
    expense: Expense


class RemoveExpense(_Action):
    type: Literal["RemoveExpense"] = "RemoveExpense"
    expense_id: str = Field(..., alias="expenseId")


class AddContribution(_Action):
    """
    Add money to a member's contribution.

    Merges into the member's existing record when there is one.
    ``contribution_id`` is only used when a new record has to be created;
    it is fixed when the action is built so reducing is deterministic.
    """
    type: Literal["AddContribution"] = "AddContribution"
    member_id: str = Field(..., alias="memberId")
    amount: Decimal
    contribution_id: str = Field(
        default_factory=lambda: new_id("contr"),
        alias="contributionId",
    )


TripAction = Annotated[
    Union[
        ReplaceState,
        RenameTrip,
        AddMember,
        RemoveMember,
        AddLuggage,
        UpdateLuggage,
        RemoveLuggage,
        AddExpense,
        UpdateExpense,
        RemoveExpense,
        AddContribution,
    ],
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter[TripAction] = TypeAdapter(TripAction)


def parse_action(payload: Any) -> TripAction:
    """
    Validate an untyped action payload (e.g. ``{"type": "RenameTrip", "name": "Rome"}``).

    Raises:
        pydantic.ValidationError: unknown ``type`` or malformed fields
    """
    return _action_adapter.validate_python(payload)
