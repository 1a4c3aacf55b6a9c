"""
Data Models Package

This package contains all Pydantic models used in Tripmate.
All trip data flowing through the system must conform to these schemas.
"""

from tripmate.models.trip import (
    Contribution,
    Expense,
    ExpenseCategory,
    LuggageCategory,
    LuggageItem,
    Member,
    Settlement,
    Trip,
    UNKNOWN_MEMBER_NAME,
    create_initial_trip,
    new_id,
)
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
    TripAction,
    UpdateExpense,
    UpdateLuggage,
    parse_action,
)
from tripmate.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from tripmate.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Trip models
    "Contribution",
    "Expense",
    "ExpenseCategory",
    "LuggageCategory",
    "LuggageItem",
    "Member",
    "Settlement",
    "Trip",
    "UNKNOWN_MEMBER_NAME",
    "create_initial_trip",
    "new_id",
    # Actions
    "AddContribution",
    "AddExpense",
    "AddLuggage",
    "AddMember",
    "RemoveExpense",
    "RemoveLuggage",
    "RemoveMember",
    "RenameTrip",
    "ReplaceState",
    "TripAction",
    "UpdateExpense",
    "UpdateLuggage",
    "parse_action",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
