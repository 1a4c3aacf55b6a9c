"""
Tests for TripSession flows and the component factory.

Gemini collaborators are replaced with small fakes.
"""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from tripmate.models.audit import AuditEventType
from tripmate.models.trip import ExpenseCategory, LuggageCategory
from tripmate.orchestrator import TripSession, create_app_components
from tripmate.services.ai import AIServiceError, ReceiptScanError, ReceiptSuggestion
from tripmate.services.trip_io import TripImportError
from tripmate.validation import InputValidationError

from conftest import ALICE, BOB


class FakeScanner:
    def __init__(self, result):
        self._result = result

    async def scan_receipt(self, image_bytes, mime_type=None):
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeAssistant:
    def __init__(self, answer):
        self._answer = answer
        self.prompts = []

    def select_model(self, prompt):
        return "fake-flash", 100

    async def ask(self, prompt, trip):
        self.prompts.append((prompt, trip.name))
        return self._answer


@pytest.fixture
def session(store, validator, audit_logger) -> TripSession:
    return TripSession(store, validator=validator, audit_logger=audit_logger)


def _event_types(audit_storage) -> list[AuditEventType]:
    return [event.event_type for event in audit_storage.events]


class TestMemberFlows:
    """Tests for adding and removing members."""

    def test_add_member(self, session):
        """Test a new member is added with a generated id."""
        result = session.add_member("  Carol ")
        assert result.issues == []
        carol = session.trip.members[-1]
        assert carol.name == "Carol"
        assert carol.id.startswith("member_")

    def test_duplicate_member_warns_and_is_ignored(self, session):
        """Test the warning is returned and the list is unchanged."""
        result = session.add_member("alice")
        assert result.warnings
        assert len(session.trip.members) == 2

    def test_blank_member_is_rejected_and_audited(self, session, trip_storage, audit_storage):
        """Test nothing is dispatched when validation fails."""
        with pytest.raises(InputValidationError):
            session.add_member("   ")
        assert trip_storage.save_count == 0
        assert AuditEventType.VALIDATION_FAILED in _event_types(audit_storage)

    def test_cannot_remove_last_member(self, session):
        """Test the last member is protected."""
        session.remove_member(BOB.id)
        with pytest.raises(InputValidationError, match="last member"):
            session.remove_member(ALICE.id)
        assert session.trip.members == (ALICE,)

    def test_rename_trip(self, session):
        """Test trip names are trimmed."""
        assert session.rename_trip(" Porto ").name == "Porto"


class TestLuggageFlows:
    """Tests for the packing list."""

    def test_add_and_toggle(self, session):
        """Test adding an item and flipping its packed flag."""
        item = session.add_luggage("Sunscreen", BOB.id, LuggageCategory.TOILETRIES)
        assert item.id.startswith("luggage_")

        toggled = session.toggle_packed(item.id)
        assert toggled.packed is True
        assert session.trip.luggage[-1].packed is True

        session.toggle_packed(item.id)
        assert session.trip.luggage[-1].packed is False

    def test_toggle_unknown_item(self, session):
        """Test toggling a missing id returns None."""
        assert session.toggle_packed("nope") is None

    def test_remove_luggage(self, session):
        """Test removal by id."""
        session.remove_luggage("lug_1")
        assert session.trip.luggage == ()


class TestMoneyFlows:
    """Tests for expenses and contributions."""

    def test_add_expense(self, session):
        """Test a valid expense is recorded."""
        expense = session.add_expense("Tram", Decimal("3.10"), BOB.id, ExpenseCategory.TRAVEL)
        assert expense.id.startswith("expense_")
        assert session.trip.expenses[-1] == expense
        assert session.aggregates().total_expenses == Decimal("303.10")

    def test_zero_expense_is_rejected(self, session):
        """Test amounts must be positive."""
        with pytest.raises(InputValidationError):
            session.add_expense("Free", Decimal("0"), BOB.id)
        assert len(session.trip.expenses) == 1

    def test_update_and_remove_expense(self, session):
        """Test editing then deleting an expense."""
        changed = session.trip.expenses[0].model_copy(update={"amount": Decimal("200")})
        session.update_expense(changed)
        assert session.aggregates().total_expenses == Decimal("200")
        session.remove_expense(changed.id)
        assert session.trip.expenses == ()

    def test_add_contribution_merges(self, session):
        """Test contributions sum per member."""
        session.add_contribution(ALICE.id, Decimal("100"))
        session.add_contribution(BOB.id, Decimal("50"))
        session.add_contribution(BOB.id, Decimal("25"))
        totals = session.aggregates().member_contributions
        assert totals == {ALICE.id: Decimal("600"), BOB.id: Decimal("75")}

    def test_add_contribution_with_int_amount(self, session):
        """Test a plain int amount is validated and stored as a Decimal."""
        session.add_contribution(BOB.id, 50)
        totals = session.aggregates().member_contributions
        assert totals[BOB.id] == Decimal("50")
        assert isinstance(totals[BOB.id], Decimal)

    def test_add_contribution_with_bad_text(self, session):
        """Test non-numeric text is rejected before dispatch."""
        with pytest.raises(InputValidationError):
            session.add_contribution(BOB.id, "fifty")
        assert BOB.id not in session.aggregates().member_contributions

    def test_contribution_for_unknown_member(self, session):
        """Test contributions must name a member."""
        with pytest.raises(InputValidationError):
            session.add_contribution("ghost", Decimal("10"))

    def test_settlements_and_report(self, session):
        """Test read flows reflect the current trip."""
        assert [(s.from_member, s.to_member) for s in session.settlements()] == [("Bob", "Alice")]
        assert session.report().title == "Trip Report: Lisbon"


class TestImportExport:
    """Tests for import and export flows."""

    def test_export_then_import_elsewhere(self, session, audit_storage):
        """Test an export replaces another session's trip."""
        exported = session.export_trip()
        session.rename_trip("Changed")

        imported = session.import_trip(exported)

        assert imported.name == "Lisbon"
        assert session.trip == imported
        types = _event_types(audit_storage)
        assert AuditEventType.TRIP_EXPORTED in types
        assert AuditEventType.TRIP_IMPORTED in types

    def test_failed_import_leaves_trip_untouched(self, session, audit_storage):
        """Test a bad file changes nothing."""
        before = session.trip
        with pytest.raises(TripImportError):
            session.import_trip(json.dumps({"name": "No id", "members": []}))
        assert session.trip is before
        assert AuditEventType.IMPORT_REJECTED in _event_types(audit_storage)


class TestGeminiFlows:
    """Tests for receipt scanning and the assistant."""

    def test_scan_then_commit(self, store, validator, audit_logger, audit_storage):
        """Test a suggestion only becomes an expense on commit."""
        suggestion = ReceiptSuggestion(title="Pastelaria", amount="8.40", date="2024-06-02")
        session = TripSession(
            store,
            validator=validator,
            receipt_scanner=FakeScanner(suggestion),
            audit_logger=audit_logger,
        )

        scanned = asyncio.run(session.scan_receipt(b"image"))
        assert scanned == suggestion
        assert len(session.trip.expenses) == 1
        assert AuditEventType.RECEIPT_SCANNED in _event_types(audit_storage)

        expense = session.commit_receipt(scanned, BOB.id, ExpenseCategory.FOOD)
        assert expense.amount == Decimal("8.40")
        assert expense.date.date() == date(2024, 6, 2)
        assert session.trip.expenses[-1] == expense

    def test_scan_failure_is_audited(self, store, audit_logger, audit_storage):
        """Test scanner errors propagate and are logged."""
        session = TripSession(
            store,
            receipt_scanner=FakeScanner(ReceiptScanError("blurry")),
            audit_logger=audit_logger,
        )
        with pytest.raises(ReceiptScanError):
            asyncio.run(session.scan_receipt(b"image"))
        assert AuditEventType.EXTERNAL_SERVICE_ERROR in _event_types(audit_storage)

    def test_scan_without_scanner(self, session):
        """Test a clear error when Gemini is not configured."""
        with pytest.raises(AIServiceError):
            asyncio.run(session.scan_receipt(b"image"))

    def test_ask_assistant(self, store, audit_logger, audit_storage):
        """Test the assistant sees the current trip."""
        assistant = FakeAssistant("Bring a jacket.")
        session = TripSession(store, assistant=assistant, audit_logger=audit_logger)

        answer = asyncio.run(session.ask_assistant("What to pack?"))

        assert answer == "Bring a jacket."
        assert assistant.prompts == [("What to pack?", "Lisbon")]
        assert AuditEventType.ASSISTANT_ANSWERED in _event_types(audit_storage)


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_creates_seeded_trip_on_disk(self, tmp_path):
        """Test a fresh data directory gets a seeded trip and an audit log."""
        session = create_app_components(data_dir=tmp_path, use_ai=False)
        assert session.trip.members[0].id == "user_1"
        assert (tmp_path / "tripData.json").exists()
        assert (tmp_path / "audit.jsonl").exists()

    def test_reopens_existing_trip(self, tmp_path):
        """Test a second factory call loads what the first saved."""
        first = create_app_components(data_dir=tmp_path, use_ai=False)
        first.rename_trip("Azores")
        second = create_app_components(data_dir=tmp_path, use_ai=False)
        assert second.trip.name == "Azores"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
