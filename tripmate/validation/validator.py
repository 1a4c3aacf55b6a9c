"""
Input Validation

DESIGN DECISION: The reducer accepts anything well-formed, so every
user-facing check lives here and runs BEFORE an action is dispatched:
- Names and titles must not be blank
- Amounts must be greater than zero
- The last remaining member cannot be removed
- Imported files must have the basic trip shape
- AI receipt suggestions get the same checks as manual entry

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the caller decides.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from tripmate.config import AppSettings, get_settings
from tripmate.models.trip import Expense, LuggageItem, Trip
from tripmate.models.validation import ValidationIssue, ValidationResult


class InputValidationError(Exception):
    """Raised by flows when validation found errors."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid {result.subject}: {messages}")


def _error(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
        suggested_fix=fix,
    )


def _warning(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="warning",
        suggested_fix=fix,
    )


class TripInputValidator:
    """
    Validates user input against the current trip.

    Every method returns a ValidationResult; none of them raise.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _check_amount(self, amount: Any, issues: list[ValidationIssue]) -> None:
        if amount is None:
            issues.append(_error("amount", "missing", "Amount is required"))
            return
        try:
            amount = Decimal(str(amount))
        except InvalidOperation:
            issues.append(_error("amount", "invalid_format", f"Amount is not a number: {amount!r}"))
            return

        if not amount.is_finite() or amount <= 0:
            issues.append(_error(
                "amount",
                "invalid_value",
                "Amount must be greater than zero",
                "Enter a positive amount",
            ))
        elif amount > self._settings.max_expense_amount:
            issues.append(_warning(
                "amount",
                "suspicious_value",
                f"Amount ({amount:,.2f}) seems unusually high",
                "Please verify this amount is correct",
            ))

    def validate_trip_name(self, name: str) -> ValidationResult:
        issues = []
        if not name or not name.strip():
            issues.append(_error("name", "missing", "Trip name cannot be empty"))
        return ValidationResult(subject="trip", issues=issues)

    def validate_new_member(self, name: str, trip: Trip) -> ValidationResult:
        """Check a member name before AddMember is dispatched."""
        issues = []
        if not name or not name.strip():
            issues.append(_error("name", "missing", "Member name cannot be empty"))
        elif trip.has_member_named(name.strip()):
            issues.append(_warning(
                "name",
                "duplicate",
                f"A member named '{name.strip()}' already exists and will not be added again",
            ))
        return ValidationResult(subject="member", issues=issues)

    def validate_member_removal(self, member_id: str, trip: Trip) -> ValidationResult:
        """
        Check a member can be removed.

        Removing a member keeps their expenses, luggage and contributions;
        that is reported as a warning, not an error.
        """
        issues = []
        member = trip.find_member(member_id)
        if member is None:
            issues.append(_error("member_id", "not_found", f"No member with id '{member_id}'"))
        elif len(trip.members) <= 1:
            issues.append(_error(
                "member_id",
                "last_member",
                "You can't remove the last member",
                "Add another member first",
            ))
        else:
            referenced = (
                any(e.paid_by == member_id for e in trip.expenses)
                or any(i.added_by == member_id for i in trip.luggage)
                or any(c.member_id == member_id for c in trip.contributions)
            )
            if referenced:
                issues.append(_warning(
                    "member_id",
                    "dangling_references",
                    f"{member.name} still has expenses, luggage or contributions; "
                    "they will stay on the trip and may affect settlements",
                ))
        return ValidationResult(subject="member", issues=issues)

    def validate_expense(self, expense: Expense, trip: Trip) -> ValidationResult:
        issues = []
        if not expense.title or not expense.title.strip():
            issues.append(_error("title", "missing", "Expense title cannot be empty"))

        self._check_amount(expense.amount, issues)

        if trip.find_member(expense.paid_by) is None:
            issues.append(_warning(
                "paid_by",
                "unknown_member",
                f"Payer '{expense.paid_by}' is not a member of this trip",
            ))

        latest = datetime.now(timezone.utc) + timedelta(
            days=self._settings.future_date_tolerance_days
        )
        expense_date = expense.date
        if expense_date.tzinfo is None:
            expense_date = expense_date.replace(tzinfo=timezone.utc)
        if expense_date > latest:
            issues.append(_warning(
                "date",
                "future_date",
                f"Expense date ({expense.date.date()}) is in the future",
                "Please verify the date is correct",
            ))
        return ValidationResult(subject="expense", issues=issues)

    def validate_luggage(self, item: LuggageItem, trip: Trip) -> ValidationResult:
        issues = []
        if not item.name or not item.name.strip():
            issues.append(_error("name", "missing", "Item name cannot be empty"))
        if trip.find_member(item.added_by) is None:
            issues.append(_warning(
                "added_by",
                "unknown_member",
                f"'{item.added_by}' is not a member of this trip",
            ))
        return ValidationResult(subject="luggage", issues=issues)

    def validate_contribution(
        self,
        member_id: str,
        amount: Any,
        trip: Trip,
    ) -> ValidationResult:
        issues = []
        if trip.find_member(member_id) is None:
            issues.append(_error("member_id", "not_found", f"No member with id '{member_id}'"))
        self._check_amount(amount, issues)
        return ValidationResult(subject="contribution", issues=issues)

    def validate_import_payload(self, payload: Any) -> ValidationResult:
        """
        Shape check for an imported trip, before full model validation.

        Requires a non-empty ``id`` and ``name`` and a ``members`` list.
        """
        issues = []
        if not isinstance(payload, dict):
            issues.append(_error("trip", "invalid_format", "Trip data must be a JSON object"))
            return ValidationResult(subject="import", issues=issues)

        for field in ("id", "name"):
            value = payload.get(field)
            if not isinstance(value, str) or not value.strip():
                issues.append(_error(field, "missing", f"Trip '{field}' is missing or empty"))

        if not isinstance(payload.get("members"), list):
            issues.append(_error("members", "invalid_format", "Trip 'members' must be a list"))

        return ValidationResult(subject="import", issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        errors = [issue for issue in result.issues if issue.severity == "error"]
        if errors:
            lines.append("Please fix the following:")
            for issue in errors:
                lines.append(f"   - {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     ({issue.suggested_fix})")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        return "\n".join(lines)
