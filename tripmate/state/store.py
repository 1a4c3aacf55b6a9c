"""
Trip State Store

The single owner of the current Trip snapshot.

RESPONSIBILITIES:
- Apply actions through the reducer, one at a time
- Persist every new snapshot (whole-snapshot writes)
- Notify subscribers after each change
- Pick up out-of-band storage writes (last writer wins)

DESIGN DECISION: There is no module-level store. A TripStore is built
explicitly (usually with ``TripStore.from_storage``) and passed to whoever
needs it. Closing it flushes the current snapshot.

Reads never see a half-applied update because snapshots are immutable and
swapped in one assignment. A dispatch issued from inside a subscriber
callback is queued and applied after the current one finishes.
"""

from collections import deque
from typing import Any, Callable, Optional

from tripmate.aggregates import TripAggregates, compute_aggregates
from tripmate.audit import AuditLogger
from tripmate.config import AppSettings, get_settings
from tripmate.models.actions import ReplaceState
from tripmate.models.trip import Settlement, Trip, create_initial_trip
from tripmate.services.storage import StorageError, TripStorageInterface
from tripmate.settlement import calculate_settlements
from tripmate.state.reducer import reduce_trip

Listener = Callable[[Trip], None]


def _action_name(action: Any) -> str:
    return getattr(action, "type", type(action).__name__)


class TripStore:
    """
    Single-writer container for the current trip.

    Usage:
        with TripStore.from_storage(storage) as store:
            store.dispatch(AddMember(member=Member(id="m1", name="Ana")))
            store.settlements()
    """

    def __init__(
        self,
        storage: TripStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        initial_trip: Optional[Trip] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._state = initial_trip or create_initial_trip()
        self._listeners: list[Listener] = []
        self._pending: deque[tuple[Any, bool]] = deque()
        self._dispatching = False
        self._closed = False

    @classmethod
    def from_storage(
        cls,
        storage: TripStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ) -> "TripStore":
        """
        Build a store from whatever is persisted.

        Falls back to a freshly seeded trip when storage is empty.
        A corrupt stored trip raises CorruptDataError rather than being
        silently replaced.
        """
        audit_logger = audit_logger or AuditLogger()
        stored = storage.load()
        if stored is not None:
            audit_logger.log_trip_loaded(stored.id, from_storage=True)
            return cls(storage, audit_logger, initial_trip=stored)

        settings = settings or get_settings().app
        trip = create_initial_trip(
            name=settings.default_trip_name,
            seed_member_name=settings.seed_member_name,
            seed_contribution=settings.seed_contribution,
        )
        audit_logger.log_trip_loaded(trip.id, from_storage=False)
        store = cls(storage, audit_logger, initial_trip=trip)
        store.flush()
        return store

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def state(self) -> Trip:
        """The current snapshot."""
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def aggregates(self) -> TripAggregates:
        return compute_aggregates(self._state)

    def settlements(self) -> list[Settlement]:
        trip = self._state
        aggregates = compute_aggregates(trip)
        return calculate_settlements(
            trip,
            aggregates.total_expenses,
            aggregates.member_contributions,
            aggregates.member_expenses,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with every new snapshot.

        Returns a function that removes the callback.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Any) -> Trip:
        """
        Apply an action and return the resulting snapshot.

        Actions dispatched after close() are ignored and audited.

        Raises:
            StorageError: a snapshot could not be persisted. The in-memory
                trip still holds the new snapshot and queued actions still
                run; the first error is raised once the queue is empty.
        """
        if self._closed:
            self._audit_logger.log_action_ignored(_action_name(action), self._state.id)
            return self._state
        return self._enqueue(action, persist=True)

    def sync_from_storage(self) -> bool:
        """
        Replace the in-memory trip if storage was written by someone else.

        Returns True when the trip was replaced.
        """
        if self._closed or not self._storage.has_external_update():
            return False

        trip = self._storage.load()
        if trip is None:
            return False

        self._audit_logger.log_external_update(trip.id)
        self._enqueue(ReplaceState(trip=trip), persist=False)
        return True

    def flush(self) -> None:
        """Write the current snapshot to storage."""
        self._save(self._state)

    def close(self) -> None:
        """Flush and stop accepting work. Safe to call twice."""
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._closed = True
            self._listeners.clear()

    def __enter__(self) -> "TripStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _enqueue(self, action: Any, persist: bool) -> Trip:
        self._pending.append((action, persist))
        if self._dispatching:
            return self._state

        self._dispatching = True
        first_error: Optional[StorageError] = None
        try:
            while self._pending:
                queued_action, queued_persist = self._pending.popleft()
                try:
                    self._apply(queued_action, queued_persist)
                except StorageError as e:
                    if first_error is None:
                        first_error = e
        finally:
            self._dispatching = False
            # a listener raised; whatever it queued is dropped
            while self._pending:
                dropped, _ = self._pending.popleft()
                self._audit_logger.log_action_ignored(_action_name(dropped), self._state.id)

        if first_error is not None:
            raise first_error
        return self._state

    def _apply(self, action: Any, persist: bool) -> None:
        previous = self._state
        next_state = reduce_trip(previous, action)
        action_name = _action_name(action)

        if next_state is previous:
            self._audit_logger.log_action_ignored(action_name, previous.id)
            return

        self._state = next_state
        self._audit_logger.log_action_applied(action_name, next_state.id)

        save_error: Optional[StorageError] = None
        if persist:
            try:
                self._save(next_state)
            except StorageError as e:
                save_error = e

        for listener in list(self._listeners):
            listener(next_state)

        if save_error is not None:
            raise save_error

    def _save(self, trip: Trip) -> None:
        try:
            self._storage.save(trip)
        except StorageError as e:
            self._audit_logger.log_save_failed(trip.id, str(e))
            raise
        self._audit_logger.log_trip_saved(trip.id)
