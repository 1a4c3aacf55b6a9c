"""
Audit Models for Tripmate

Every significant action in the system is logged for audit purposes.
This provides:
1. Complete traceability of every trip mutation
2. Debugging information when things go wrong
3. Ability to reconstruct how a trip reached its current state

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Store
    ACTION_APPLIED = "action_applied"
    ACTION_IGNORED = "action_ignored"
    EXTERNAL_UPDATE_APPLIED = "external_update_applied"

    # Persistence
    TRIP_LOADED = "trip_loaded"
    TRIP_SAVED = "trip_saved"
    SAVE_FAILED = "save_failed"

    # Import / export
    TRIP_IMPORTED = "trip_imported"
    IMPORT_REJECTED = "import_rejected"
    TRIP_EXPORTED = "trip_exported"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # AI collaborator
    RECEIPT_SCANNED = "receipt_scanned"
    ASSISTANT_ANSWERED = "assistant_answered"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'trip', 'expense', 'receipt')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., scan then commit of one receipt)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of the append-only JSON-lines audit log."""
        return self.model_dump_json()


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.action_applied("AddExpense", trip_id)
        event = AuditEventBuilder.import_rejected(reason, correlation_id)
    """

    @staticmethod
    def action_applied(
        action_type: str,
        trip_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACTION_APPLIED,
            entity_type="trip",
            entity_id=trip_id,
            correlation_id=correlation_id,
            description=f"Action applied: {action_type}",
            details={"action_type": action_type},
            is_user_action=True,
        )

    @staticmethod
    def action_ignored(
        action_type: str,
        trip_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACTION_IGNORED,
            severity=AuditSeverity.DEBUG,
            entity_type="trip",
            entity_id=trip_id,
            correlation_id=correlation_id,
            description=f"Action left the trip unchanged: {action_type}",
            details={"action_type": action_type},
        )

    @staticmethod
    def external_update_applied(trip_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_UPDATE_APPLIED,
            severity=AuditSeverity.WARNING,
            entity_type="trip",
            entity_id=trip_id,
            description="Trip replaced by a newer copy found in storage",
        )

    @staticmethod
    def trip_loaded(trip_id: str, from_storage: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_LOADED,
            entity_type="trip",
            entity_id=trip_id,
            description=(
                "Trip loaded from storage" if from_storage
                else "No stored trip found, started a new one"
            ),
            details={"from_storage": from_storage},
        )

    @staticmethod
    def trip_saved(trip_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="trip",
            entity_id=trip_id,
            description="Trip snapshot saved",
        )

    @staticmethod
    def save_failed(trip_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="trip",
            entity_id=trip_id,
            description="Trip snapshot could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def trip_imported(
        trip_id: str,
        member_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_IMPORTED,
            entity_type="trip",
            entity_id=trip_id,
            correlation_id=correlation_id,
            description=f"Trip imported with {member_count} members and {expense_count} expenses",
            details={
                "member_count": member_count,
                "expense_count": expense_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="import",
            correlation_id=correlation_id,
            description="Trip import rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def trip_exported(trip_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRIP_EXPORTED,
            entity_type="trip",
            entity_id=trip_id,
            description="Trip exported",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        subject: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=subject,
            correlation_id=correlation_id,
            description=f"{subject.capitalize()} validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def receipt_scanned(
        title: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCANNED,
            entity_type="receipt",
            correlation_id=correlation_id,
            description=f"Receipt scanned: {title} - {amount}",
            details={"title": title, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def assistant_answered(model_name: str, prompt_length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSISTANT_ANSWERED,
            entity_type="assistant",
            description=f"Assistant answered using {model_name}",
            details={"model_name": model_name, "prompt_length": prompt_length},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
