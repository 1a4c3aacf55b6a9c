"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of trip mutations
2. Debugging capability
3. A history of imports, scans and saves the user can look back on

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from tripmate.models.audit import AuditEvent, AuditEventBuilder
from tripmate.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Set the level of every tripmate.* logger; DEBUG when debugging."""
    logging.getLogger("tripmate").setLevel(logging.DEBUG if debug else logging.INFO)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("tripmate.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        severity = event.severity.value
        if severity in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_action_applied(
        self,
        action_type: str,
        trip_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.action_applied(action_type, trip_id, correlation_id))

    def log_action_ignored(
        self,
        action_type: str,
        trip_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.action_ignored(action_type, trip_id, correlation_id))

    def log_external_update(self, trip_id: str) -> None:
        self.log(AuditEventBuilder.external_update_applied(trip_id))

    def log_trip_loaded(self, trip_id: str, from_storage: bool) -> None:
        self.log(AuditEventBuilder.trip_loaded(trip_id, from_storage))

    def log_trip_saved(self, trip_id: str) -> None:
        self.log(AuditEventBuilder.trip_saved(trip_id))

    def log_save_failed(self, trip_id: str, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(trip_id, error_message))

    def log_trip_imported(
        self,
        trip_id: str,
        member_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful import."""
        self.log(AuditEventBuilder.trip_imported(
            trip_id=trip_id,
            member_count=member_count,
            expense_count=expense_count,
            correlation_id=correlation_id,
        ))

    def log_import_rejected(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.import_rejected(reason, correlation_id))

    def log_trip_exported(self, trip_id: str) -> None:
        self.log(AuditEventBuilder.trip_exported(trip_id))

    def log_validation_failed(
        self,
        subject: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log validation failure."""
        self.log(AuditEventBuilder.validation_failed(subject, issues, correlation_id))

    def log_receipt_scanned(
        self,
        title: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.receipt_scanned(title, amount, correlation_id))

    def log_assistant_answered(self, model_name: str, prompt_length: int) -> None:
        self.log(AuditEventBuilder.assistant_answered(model_name, prompt_length))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a receipt scan).
    Pass it through all subsequent operations.
    """
    return uuid4()
