"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the local JSON file for another key-value backend later
2. Use in-memory storage for testing
3. Keep the trip store decoupled from storage implementation

The trip interface is a single key-value cell holding one serialized Trip.
The whole snapshot is written every time; there is no partial update.
"""

from abc import ABC, abstractmethod
from typing import Optional

from tripmate.models.audit import AuditEvent
from tripmate.models.trip import Trip


class TripStorageInterface(ABC):
    """
    Abstract interface for trip persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[Trip]:
        """
        Load the stored trip.

        Returns:
            The stored trip, or None if nothing has been stored yet

        Raises:
            CorruptDataError: If the stored blob is not a valid trip
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, trip: Trip) -> None:
        """
        Replace the stored trip with this snapshot.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def has_external_update(self) -> bool:
        """
        Check whether someone else wrote the stored trip.

        Returns True when the stored copy changed since this instance
        last loaded or saved it (e.g. another process writing the same key).
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but is not a valid trip."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
