"""Tests for caller-side input validation."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tripmate.models.trip import LuggageItem, Trip
from tripmate.validation import InputValidationError

from conftest import ALICE, BOB, make_expense


def _issue_types(result) -> list[str]:
    return [issue.issue_type for issue in result.issues]


class TestNames:
    """Tests for trip and member names."""

    def test_blank_trip_name(self, validator):
        """Test an empty trip name is an error."""
        assert validator.validate_trip_name("   ").has_errors

    def test_valid_trip_name(self, validator):
        """Test a normal trip name passes."""
        assert validator.validate_trip_name("Porto").is_valid

    def test_blank_member_name(self, validator, trip):
        """Test an empty member name is an error."""
        result = validator.validate_new_member("", trip)
        assert result.has_errors
        assert _issue_types(result) == ["missing"]

    def test_duplicate_member_name_is_warning(self, validator, trip):
        """Test duplicates warn but do not block."""
        result = validator.validate_new_member(" ALICE ", trip)
        assert result.is_valid
        assert _issue_types(result) == ["duplicate"]


class TestMemberRemoval:
    """Tests for removing members."""

    def test_cannot_remove_last_member(self, validator):
        """Test the last member must stay."""
        trip = Trip(id="t", name="Solo", members=(ALICE,))
        result = validator.validate_member_removal(ALICE.id, trip)
        assert result.has_errors
        assert _issue_types(result) == ["last_member"]

    def test_unknown_member(self, validator, trip):
        """Test removing a missing id is an error."""
        result = validator.validate_member_removal("nobody", trip)
        assert _issue_types(result) == ["not_found"]

    def test_member_with_records_warns(self, validator, trip):
        """Test dangling references are reported as a warning."""
        result = validator.validate_member_removal(ALICE.id, trip)
        assert result.is_valid
        assert _issue_types(result) == ["dangling_references"]

    def test_member_without_records_is_clean(self, validator, trip):
        """Test a member with nothing recorded can go silently."""
        result = validator.validate_member_removal(BOB.id, trip)
        assert result.issues == []


class TestExpenses:
    """Tests for expense validation."""

    def test_valid_expense(self, validator, trip):
        """Test a normal expense passes."""
        assert validator.validate_expense(make_expense("e", "12.50"), trip).issues == []

    def test_blank_title(self, validator, trip):
        """Test a title is required."""
        expense = make_expense("e", "10", title="  ")
        assert "missing" in _issue_types(validator.validate_expense(expense, trip))

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amount(self, validator, trip, amount):
        """Test amounts must be greater than zero."""
        result = validator.validate_expense(make_expense("e", amount), trip)
        assert result.has_errors
        assert "invalid_value" in _issue_types(result)

    def test_huge_amount_warns(self, validator, trip):
        """Test very large amounts are flagged."""
        result = validator.validate_expense(make_expense("e", "250000"), trip)
        assert result.is_valid
        assert "suspicious_value" in _issue_types(result)

    def test_unknown_payer_warns(self, validator, trip):
        """Test a payer outside the member list is flagged."""
        result = validator.validate_expense(make_expense("e", "10", paid_by="ghost"), trip)
        assert result.is_valid
        assert "unknown_member" in _issue_types(result)

    def test_future_date_warns(self, validator, trip):
        """Test dates beyond the tolerance are flagged."""
        expense = make_expense("e", "10").model_copy(
            update={"date": datetime.now(timezone.utc) + timedelta(days=5)}
        )
        result = validator.validate_expense(expense, trip)
        assert result.is_valid
        assert "future_date" in _issue_types(result)


class TestLuggageAndContributions:
    """Tests for luggage items and contributions."""

    def test_blank_luggage_name(self, validator, trip):
        """Test an item name is required."""
        item = LuggageItem(id="l", name="", added_by=ALICE.id)
        assert validator.validate_luggage(item, trip).has_errors

    def test_luggage_unknown_owner_warns(self, validator, trip):
        """Test an unknown added_by is only a warning."""
        item = LuggageItem(id="l", name="Hat", added_by="ghost")
        result = validator.validate_luggage(item, trip)
        assert result.is_valid
        assert result.warnings

    def test_contribution_needs_member(self, validator, trip):
        """Test contributions must name a current member."""
        result = validator.validate_contribution("ghost", Decimal("10"), trip)
        assert _issue_types(result) == ["not_found"]

    def test_contribution_needs_amount(self, validator, trip):
        """Test a missing amount is an error."""
        result = validator.validate_contribution(ALICE.id, None, trip)
        assert _issue_types(result) == ["missing"]

    @pytest.mark.parametrize("amount", [50, "12.50", 7.25])
    def test_contribution_accepts_plain_numbers(self, validator, trip, amount):
        """Test ints, floats and numeric strings are checked like Decimals."""
        result = validator.validate_contribution(ALICE.id, amount, trip)
        assert result.issues == []

    def test_contribution_rejects_non_numbers(self, validator, trip):
        """Test text that is not a number is an error, not a crash."""
        result = validator.validate_contribution(ALICE.id, "lots", trip)
        assert _issue_types(result) == ["invalid_format"]

    def test_negative_int_contribution(self, validator, trip):
        """Test a negative int is rejected."""
        result = validator.validate_contribution(ALICE.id, -5, trip)
        assert _issue_types(result) == ["invalid_value"]


class TestImportPayload:
    """Tests for the import shape check."""

    def test_valid_shape(self, validator):
        """Test the minimum accepted shape."""
        result = validator.validate_import_payload({"id": "t", "name": "Trip", "members": []})
        assert result.is_valid

    def test_not_an_object(self, validator):
        """Test a JSON array is rejected."""
        result = validator.validate_import_payload([1, 2, 3])
        assert _issue_types(result) == ["invalid_format"]

    def test_missing_fields(self, validator):
        """Test id, name and members are all checked."""
        result = validator.validate_import_payload({"id": "", "members": "nope"})
        assert result.error_count == 3


class TestSummary:
    """Tests for user-facing summaries and the raised error."""

    def test_summary_lists_errors_and_warnings(self, validator, trip):
        """Test both sections appear."""
        expense = make_expense("e", "0", paid_by="ghost")
        summary = validator.get_user_friendly_summary(validator.validate_expense(expense, trip))
        assert "Please fix the following:" in summary
        assert "Please verify the following:" in summary

    def test_summary_when_clean(self, validator):
        """Test a clean result."""
        result = validator.validate_trip_name("Porto")
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_input_validation_error_message(self, validator):
        """Test the exception carries the result and error messages."""
        result = validator.validate_trip_name("")
        error = InputValidationError(result)
        assert error.result is result
        assert "Trip name cannot be empty" in str(error)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
