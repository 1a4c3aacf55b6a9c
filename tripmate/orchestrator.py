"""
Main Orchestrator for Tripmate

This module ties together all the components and defines the
end-to-end flows for:
1. Manual edits (input → validate → dispatch → persist)
2. Import / export (file → validate → ReplaceState)
3. Receipt scan (photo → Gemini suggestion → validate → confirm → dispatch)
4. Assistant chat (question + read-only trip summary → answer)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is dispatched until validation has no errors
- AI output is a suggestion; only commit_receipt adds an expense
- A failed import leaves the current trip untouched
- Every step is audited
"""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Optional
from uuid import UUID

import structlog

from tripmate.aggregates import TripAggregates
from tripmate.audit import AuditLogger, configure_logging, create_correlation_id
from tripmate.config import get_settings
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
from tripmate.models.trip import (
    Expense,
    ExpenseCategory,
    LuggageCategory,
    LuggageItem,
    Member,
    Settlement,
    Trip,
    new_id,
)
from tripmate.models.validation import ValidationResult
from tripmate.reports import TripReport, build_trip_report
from tripmate.services.ai import (
    AIServiceError,
    ReceiptScanner,
    ReceiptSuggestion,
    TripAssistant,
)
from tripmate.services.storage import JsonLinesAuditStorage, LocalFileTripStorage
from tripmate.services.trip_io import TripImportError, export_trip, parse_trip_import
from tripmate.state import TripStore
from tripmate.validation import InputValidationError, TripInputValidator

logger = structlog.get_logger("tripmate.orchestrator")


class TripSession:
    """
    User-facing operations on one trip.

    Every write goes through TripInputValidator first. Warnings are
    returned to the caller; errors raise InputValidationError and
    nothing is dispatched.
    """

    def __init__(
        self,
        store: TripStore,
        validator: Optional[TripInputValidator] = None,
        receipt_scanner: Optional[ReceiptScanner] = None,
        assistant: Optional[TripAssistant] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or TripInputValidator()
        self._receipt_scanner = receipt_scanner
        self._assistant = assistant
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def store(self) -> TripStore:
        return self._store

    @property
    def trip(self) -> Trip:
        return self._store.state

    def _require_valid(
        self,
        result: ValidationResult,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        if result.has_errors:
            issues = [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
            ]
            self._audit_logger.log_validation_failed(result.subject, issues, correlation_id)
            raise InputValidationError(result)
        return result

    # -------------------------------------------------------------------------
    # Trip and members
    # -------------------------------------------------------------------------

    def rename_trip(self, name: str) -> Trip:
        self._require_valid(self._validator.validate_trip_name(name))
        return self._store.dispatch(RenameTrip(name=name.strip()))

    def add_member(self, name: str) -> ValidationResult:
        """
        Add a member by name.

        A duplicate name is a warning; the reducer ignores the add.
        """
        result = self._require_valid(self._validator.validate_new_member(name, self.trip))
        self._store.dispatch(AddMember(member=Member(id=new_id("member"), name=name.strip())))
        return result

    def remove_member(self, member_id: str) -> ValidationResult:
        result = self._require_valid(
            self._validator.validate_member_removal(member_id, self.trip)
        )
        self._store.dispatch(RemoveMember(member_id=member_id))
        return result

    # -------------------------------------------------------------------------
    # Luggage
    # -------------------------------------------------------------------------

    def add_luggage(
        self,
        name: str,
        added_by: str,
        category: LuggageCategory = LuggageCategory.MISC,
    ) -> LuggageItem:
        item = LuggageItem(
            id=new_id("luggage"),
            name=name.strip(),
            category=category,
            added_by=added_by,
        )
        self._require_valid(self._validator.validate_luggage(item, self.trip))
        self._store.dispatch(AddLuggage(item=item))
        return item

    def update_luggage(self, item: LuggageItem) -> LuggageItem:
        self._require_valid(self._validator.validate_luggage(item, self.trip))
        self._store.dispatch(UpdateLuggage(item=item))
        return item

    def toggle_packed(self, item_id: str) -> Optional[LuggageItem]:
        """Flip an item's packed flag. Returns None for an unknown id."""
        for item in self.trip.luggage:
            if item.id == item_id:
                updated = item.model_copy(update={"packed": not item.packed})
                self._store.dispatch(UpdateLuggage(item=updated))
                return updated
        return None

    def remove_luggage(self, item_id: str) -> Trip:
        return self._store.dispatch(RemoveLuggage(item_id=item_id))

    # -------------------------------------------------------------------------
    # Expenses and contributions
    # -------------------------------------------------------------------------

    def add_expense(
        self,
        title: str,
        amount: Decimal,
        paid_by: str,
        category: ExpenseCategory = ExpenseCategory.MISC,
        date: Optional[datetime] = None,
        notes: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        expense = Expense(
            id=new_id("expense"),
            title=title.strip(),
            amount=amount,
            category=category,
            date=date or datetime.now(timezone.utc),
            notes=notes or None,
            paid_by=paid_by,
        )
        self._require_valid(self._validator.validate_expense(expense, self.trip), correlation_id)
        self._store.dispatch(AddExpense(expense=expense))
        return expense

    def update_expense(self, expense: Expense) -> Expense:
        self._require_valid(self._validator.validate_expense(expense, self.trip))
        self._store.dispatch(UpdateExpense(expense=expense))
        return expense

    def remove_expense(self, expense_id: str) -> Trip:
        return self._store.dispatch(RemoveExpense(expense_id=expense_id))

    def add_contribution(self, member_id: str, amount: Decimal | int | float | str) -> Trip:
        self._require_valid(self._validator.validate_contribution(member_id, amount, self.trip))
        action = AddContribution(member_id=member_id, amount=Decimal(str(amount)))
        return self._store.dispatch(action)

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def import_trip(self, text: str | bytes) -> Trip:
        """
        Replace the current trip with an exported one.

        Raises:
            TripImportError: the file is not a valid trip; nothing changed
        """
        correlation_id = create_correlation_id()
        try:
            trip = parse_trip_import(text, self._validator)
        except TripImportError as e:
            self._audit_logger.log_import_rejected(str(e), correlation_id)
            raise

        self._store.dispatch(ReplaceState(trip=trip))
        self._audit_logger.log_trip_imported(
            trip_id=trip.id,
            member_count=len(trip.members),
            expense_count=len(trip.expenses),
            correlation_id=correlation_id,
        )
        return trip

    def export_trip(self, indent: Optional[int] = 2) -> str:
        trip = self.trip
        self._audit_logger.log_trip_exported(trip.id)
        return export_trip(trip, indent=indent)

    # -------------------------------------------------------------------------
    # Gemini flows
    # -------------------------------------------------------------------------

    async def scan_receipt(
        self,
        image_bytes: bytes,
        mime_type: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ReceiptSuggestion:
        """
        Ask Gemini to read a receipt.

        Returns a suggestion only. Call commit_receipt to add it.
        """
        if self._receipt_scanner is None:
            raise AIServiceError("Receipt scanning is not configured")

        correlation_id = correlation_id or create_correlation_id()
        try:
            suggestion = await self._receipt_scanner.scan_receipt(image_bytes, mime_type)
        except AIServiceError as e:
            self._audit_logger.log_external_service_error(
                service="gemini",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_receipt_scanned(
            title=suggestion.title,
            amount=str(suggestion.amount),
            correlation_id=correlation_id,
        )
        return suggestion

    def commit_receipt(
        self,
        suggestion: ReceiptSuggestion,
        paid_by: str,
        category: ExpenseCategory = ExpenseCategory.MISC,
        notes: Optional[str] = None,
    ) -> Expense:
        """Add a (possibly user-edited) receipt suggestion as an expense."""
        expense_date = datetime(
            suggestion.date.year,
            suggestion.date.month,
            suggestion.date.day,
            tzinfo=timezone.utc,
        )
        return self.add_expense(
            title=suggestion.title,
            amount=suggestion.amount,
            paid_by=paid_by,
            category=category,
            date=expense_date,
            notes=notes,
        )

    async def ask_assistant(self, prompt: str) -> str:
        if self._assistant is None:
            raise AIServiceError("The trip assistant is not configured")

        try:
            answer = await self._assistant.ask(prompt, self.trip)
        except AIServiceError as e:
            self._audit_logger.log_external_service_error(
                service="gemini",
                error_message=str(e),
            )
            raise

        model_name, _ = self._assistant.select_model(prompt)
        self._audit_logger.log_assistant_answered(model_name, len(prompt))
        return answer

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def aggregates(self) -> TripAggregates:
        return self._store.aggregates()

    def settlements(self) -> list[Settlement]:
        return self._store.settlements()

    def report(self) -> TripReport:
        return build_trip_report(self.trip)


def create_app_components(
    data_dir: Optional[str | Path] = None,
    use_ai: bool = True,
) -> TripSession:
    """
    Factory function to create all application components.

    Args:
        data_dir: Where the trip and audit log live. Defaults to settings.
        use_ai: Whether to set up the Gemini services.
                Set to False for running without an API key.

    Returns:
        A TripSession over the persisted (or freshly seeded) trip
    """
    settings = get_settings()
    configure_logging(settings.app.debug_mode)

    storage_settings = settings.storage
    root = Path(data_dir if data_dir is not None else storage_settings.data_dir)

    trip_storage = LocalFileTripStorage(root, storage_settings.trip_key)
    audit_logger = AuditLogger(JsonLinesAuditStorage(root / storage_settings.audit_log_name))
    store = TripStore.from_storage(trip_storage, audit_logger)

    receipt_scanner = None
    assistant = None
    if use_ai:
        try:
            receipt_scanner = ReceiptScanner()
            assistant = TripAssistant()
        except Exception as e:
            # Gemini not configured - continue without it
            logger.warning("gemini_not_configured", error=str(e))
            receipt_scanner = None
            assistant = None

    return TripSession(
        store,
        receipt_scanner=receipt_scanner,
        assistant=assistant,
        audit_logger=audit_logger,
    )
