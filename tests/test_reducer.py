"""Tests for the trip reducer."""

from decimal import Decimal

import pytest

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
from tripmate.models.trip import LuggageItem, Member, Trip
from tripmate.state import reduce_trip

from conftest import ALICE, BOB, CAROL, make_expense


class TestTripLevelActions:
    """Tests for ReplaceState and RenameTrip."""

    def test_replace_state_returns_trip_verbatim(self, trip):
        """Test ReplaceState hands back exactly the given trip."""
        other = Trip(id="trip_2", name="Porto", members=(CAROL,))
        assert reduce_trip(trip, ReplaceState(trip=other)) is other

    def test_rename_trip(self, trip):
        """Test RenameTrip only changes the name."""
        renamed = reduce_trip(trip, RenameTrip(name="Madeira"))
        assert renamed.name == "Madeira"
        assert renamed.members == trip.members
        assert trip.name == "Lisbon"

    def test_unknown_action_is_a_no_op(self, trip):
        """Test unrecognized actions return the same snapshot object."""
        assert reduce_trip(trip, {"type": "Nope"}) is trip
        assert reduce_trip(trip, None) is trip


class TestMemberActions:
    """Tests for AddMember and RemoveMember."""

    def test_add_member_appends(self, trip):
        """Test a new member goes to the end of the list."""
        updated = reduce_trip(trip, AddMember(member=CAROL))
        assert updated.members == (ALICE, BOB, CAROL)

    def test_add_member_duplicate_name_is_ignored(self, trip):
        """Test names are unique case-insensitively."""
        action = AddMember(member=Member(id="m_other", name="aLiCe"))
        assert reduce_trip(trip, action) is trip

    def test_remove_member_keeps_references(self, trip):
        """Test removing a member leaves their records on the trip."""
        updated = reduce_trip(trip, RemoveMember(member_id=ALICE.id))
        assert updated.members == (BOB,)
        assert updated.expenses == trip.expenses
        assert updated.luggage == trip.luggage
        assert updated.contributions == trip.contributions


class TestLuggageActions:
    """Tests for luggage actions."""

    def test_add_update_remove_luggage(self, trip):
        """Test the luggage list lifecycle."""
        item = LuggageItem(id="lug_2", name="Sunscreen", added_by=BOB.id)
        added = reduce_trip(trip, AddLuggage(item=item))
        assert added.luggage[-1] == item

        packed = item.model_copy(update={"packed": True})
        updated = reduce_trip(added, UpdateLuggage(item=packed))
        assert updated.luggage[-1].packed is True
        assert updated.luggage[0] == trip.luggage[0]

        removed = reduce_trip(updated, RemoveLuggage(item_id="lug_2"))
        assert removed.luggage == trip.luggage

    def test_update_unknown_item_changes_nothing(self, trip):
        """Test updating a missing id leaves the list as it was."""
        ghost = LuggageItem(id="ghost", name="Ghost", added_by=BOB.id)
        updated = reduce_trip(trip, UpdateLuggage(item=ghost))
        assert updated.luggage == trip.luggage


class TestExpenseActions:
    """Tests for expense actions."""

    def test_add_expense_appends(self, trip):
        """Test AddExpense keeps insertion order."""
        expense = make_expense("exp_2", "45", paid_by=BOB.id)
        updated = reduce_trip(trip, AddExpense(expense=expense))
        assert [e.id for e in updated.expenses] == ["exp_1", "exp_2"]

    def test_update_expense_replaces_by_id(self, trip):
        """Test UpdateExpense swaps the record in place."""
        changed = trip.expenses[0].model_copy(update={"amount": Decimal("120")})
        updated = reduce_trip(trip, UpdateExpense(expense=changed))
        assert updated.expenses == (changed,)

    def test_remove_expense(self, trip):
        """Test RemoveExpense drops the record."""
        updated = reduce_trip(trip, RemoveExpense(expense_id="exp_1"))
        assert updated.expenses == ()


class TestAddContribution:
    """Tests for contribution merging."""

    def test_merges_into_existing_record(self, trip):
        """Test a second contribution sums into the member's record."""
        updated = reduce_trip(trip, AddContribution(member_id=ALICE.id, amount=Decimal("50")))
        assert len(updated.contributions) == 1
        assert updated.contributions[0].id == "contr_1"
        assert updated.contributions[0].amount == Decimal("550")

    def test_creates_record_for_new_contributor(self, trip):
        """Test a first contribution creates a record with the action's id."""
        action = AddContribution(member_id=BOB.id, amount=Decimal("80"), contribution_id="contr_bob")
        updated = reduce_trip(trip, action)
        assert len(updated.contributions) == 2
        created = updated.contributions[-1]
        assert created.id == "contr_bob"
        assert created.member_id == BOB.id
        assert created.amount == Decimal("80")

    def test_two_contributions_add_one_record(self, trip):
        """Test a+b lands in a single new record."""
        state = reduce_trip(trip, AddContribution(member_id=BOB.id, amount=Decimal("30")))
        state = reduce_trip(state, AddContribution(member_id=BOB.id, amount=Decimal("20")))
        bob_records = [c for c in state.contributions if c.member_id == BOB.id]
        assert len(bob_records) == 1
        assert bob_records[0].amount == Decimal("50")

    def test_reducer_is_deterministic(self, trip):
        """Test the same action applied twice gives equal results."""
        action = AddContribution(member_id=BOB.id, amount=Decimal("30"))
        assert reduce_trip(trip, action) == reduce_trip(trip, action)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
