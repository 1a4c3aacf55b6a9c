"""
Core Data Models for Tripmate

These models define the schemas for all trip data flowing through the system.
They are designed to:
1. Be immutable - every update produces a new Trip snapshot
2. Serialize to the trip interchange format (camelCase keys, enum tokens)
3. Round-trip losslessly through storage and export/import

DESIGN DECISION: Every model is frozen and every child collection is a tuple.
A snapshot handed to a reader can never change underneath it.

Money is Decimal. In JSON it is written as a string so nothing is lost
on the way back in; plain JSON numbers are still accepted on import.
"""

import time
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class LuggageCategory(str, Enum):
    """
    Packing checklist categories.

    CRITICAL: The values are persisted and exported verbatim.
    Changing a token breaks import of existing trip files.
    """
    CLOTHES = "Clothes"
    TOILETRIES = "Toiletries"
    DOCUMENTS = "Documents"
    GADGETS = "Gadgets"
    MISC = "Misc"


class ExpenseCategory(str, Enum):
    """Expense categories. Values are persisted verbatim, like LuggageCategory."""
    FOOD = "Food"
    HOTEL = "Hotel"
    TRAVEL = "Travel"
    SHOPPING = "Shopping"
    ACTIVITIES = "Activities"
    MISC = "Misc"


UNKNOWN_MEMBER_NAME = "Unknown"


def new_id(prefix: str) -> str:
    """
    Generate a record id of the form ``<prefix>_<epoch-ms>_<suffix>``.

    The random suffix keeps ids unique when several records are
    created within the same millisecond.
    """
    return f"{prefix}_{int(time.time() * 1000)}_{uuid4().hex[:6]}"


class TripRecord(BaseModel):
    """Base for every trip record: frozen, alias-aware, tolerant of extra keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# TRIP CHILD RECORDS
# =============================================================================

class Member(TripRecord):
    """A person taking part in the trip."""

    id: str
    name: str


class LuggageItem(TripRecord):
    """One entry on the shared packing checklist."""

    id: str
    name: str
    category: LuggageCategory = LuggageCategory.MISC
    packed: bool = False
    added_by: str = Field(
        ...,
        alias="addedBy",
        description="Member id of whoever added the item"
    )


class Expense(TripRecord):
    """
    Money spent on behalf of the group.

    NOTE: The model accepts any amount. Positivity is checked by
    TripInputValidator before an expense is dispatched.
    """

    id: str
    title: str
    amount: Decimal
    category: ExpenseCategory = ExpenseCategory.MISC
    date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the expense happened (ISO-8601)"
    )
    notes: Optional[str] = None
    paid_by: str = Field(
        ...,
        alias="paidBy",
        description="Member id of whoever paid"
    )


class Contribution(TripRecord):
    """Money a member put into the shared trip kitty."""

    id: str
    member_id: str = Field(..., alias="memberId")
    amount: Decimal


# =============================================================================
# AGGREGATE ROOT
# =============================================================================

class Trip(TripRecord):
    """
    The aggregate root.

    The Trip is the sole unit of persistence and the sole input to the
    settlement engine. Collections keep insertion order; order matters for
    display and for settlement tie-breaks.
    """

    id: str
    name: str
    members: tuple[Member, ...] = ()
    luggage: tuple[LuggageItem, ...] = ()
    expenses: tuple[Expense, ...] = ()
    contributions: tuple[Contribution, ...] = ()

    def find_member(self, member_id: str) -> Optional[Member]:
        """Return the member with this id, or None if it was removed."""
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def member_name(self, member_id: str, default: str = UNKNOWN_MEMBER_NAME) -> str:
        """
        Resolve a member id to a display name.

        Removed members leave dangling ids behind on expenses, luggage
        and contributions; those resolve to ``default``.
        """
        member = self.find_member(member_id)
        return member.name if member else default

    def has_member_named(self, name: str) -> bool:
        """Case-insensitive member name lookup."""
        wanted = name.lower()
        return any(member.name.lower() == wanted for member in self.members)


class Settlement(TripRecord):
    """A single payment instruction: ``from_member`` pays ``to_member``."""

    from_member: str = Field(..., alias="from", description="Name of the payer")
    to_member: str = Field(..., alias="to", description="Name of the payee")
    amount: Decimal = Field(..., gt=0)


def create_initial_trip(
    name: str = "My Awesome Trip",
    seed_member_name: str = "Me",
    seed_contribution: Decimal = Decimal("500"),
) -> Trip:
    """
    Build the trip a brand new installation starts from.

    One member, and (unless ``seed_contribution`` is zero) one
    contribution for that member.
    """
    seed_member = Member(id="user_1", name=seed_member_name)
    contributions: tuple[Contribution, ...] = ()
    if seed_contribution:
        contributions = (
            Contribution(id="contr_1", member_id=seed_member.id, amount=seed_contribution),
        )
    return Trip(
        id=f"trip_{int(time.time() * 1000)}",
        name=name,
        members=(seed_member,),
        contributions=contributions,
    )
