"""
In-Memory Storage Implementation

Used by tests and by callers that do not want anything written to disk.
The trip is kept as its serialized JSON blob, so it goes through exactly
the same encode/decode path as the file backend.
"""

from typing import Optional

from pydantic import ValidationError

from tripmate.models.audit import AuditEvent
from tripmate.models.trip import Trip
from tripmate.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    TripStorageInterface,
)


class InMemoryTripStorage(TripStorageInterface):
    """Key-value cell held in memory, with a version counter for change detection."""

    def __init__(self, initial: Optional[Trip] = None):
        self._blob: Optional[str] = None
        self._version = 0
        self._known_version = 0
        self.save_count = 0
        if initial is not None:
            self._blob = initial.model_dump_json(by_alias=True)
            self._version = 1

    @property
    def blob(self) -> Optional[str]:
        """The raw stored JSON."""
        return self._blob

    def load(self) -> Optional[Trip]:
        if self._blob is None:
            return None
        try:
            trip = Trip.model_validate_json(self._blob)
        except ValidationError as e:
            raise CorruptDataError(f"Stored trip is not valid: {e}") from e
        self._known_version = self._version
        return trip

    def save(self, trip: Trip) -> None:
        self._blob = trip.model_dump_json(by_alias=True)
        self._version += 1
        self._known_version = self._version
        self.save_count += 1

    def has_external_update(self) -> bool:
        return self._version != self._known_version

    def write_external(self, blob: str | Trip) -> None:
        """Simulate another process writing the same key."""
        if isinstance(blob, Trip):
            blob = blob.model_dump_json(by_alias=True)
        self._blob = blob
        self._version += 1


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit events kept in a list, oldest first."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
