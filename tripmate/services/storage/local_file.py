"""
Local File Storage Implementation

DESIGN DECISION: A JSON file per key is used as the storage backend because:
1. The trip is small (personal-trip scale) and is always written whole
2. No database setup required
3. The stored file IS the export format, so users can inspect or copy it

TRADEOFFS:
- Last writer wins; two processes editing the same key do not merge
- Out-of-band writes are only noticed when has_external_update() is polled

Writes go to a temporary file first and are moved into place, so a reader
never sees a half-written trip.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tripmate.config import get_settings
from tripmate.models.audit import AuditEvent
from tripmate.models.trip import Trip
from tripmate.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    StorageConnectionError,
    StorageError,
    TripStorageInterface,
)


class LocalFileTripStorage(TripStorageInterface):
    """
    Stores the trip as ``<data_dir>/<key>.json``.

    Remembers the file stamp (mtime + size) of its own last read or write,
    which is how external updates are detected.
    """

    def __init__(
        self,
        data_dir: Optional[str | Path] = None,
        key: Optional[str] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir if data_dir is not None else settings.data_dir)
        self._key = key or settings.trip_key
        self._known_stamp: Optional[tuple[int, int]] = None

    @property
    def path(self) -> Path:
        return self._data_dir / f"{self._key}.json"

    def _stamp(self) -> Optional[tuple[int, int]]:
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def load(self) -> Optional[Trip]:
        """Load the trip from disk, or None if the file does not exist."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self._known_stamp = None
            return None
        except UnicodeDecodeError as e:
            raise CorruptDataError(f"Stored trip at {self.path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        try:
            trip = Trip.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptDataError(f"Stored trip at {self.path} is not valid: {e}") from e

        self._known_stamp = self._stamp()
        return trip

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_atomic(self, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self._data_dir,
            prefix=f".{self._key}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def save(self, trip: Trip) -> None:
        """Write the whole trip snapshot to disk."""
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(
                f"Cannot create data directory {self._data_dir}: {e}"
            ) from e

        payload = trip.model_dump_json(by_alias=True, indent=2)
        try:
            self._write_atomic(payload)
        except OSError as e:
            raise StorageError(f"Failed to save trip to {self.path}: {e}") from e

        self._known_stamp = self._stamp()

    def has_external_update(self) -> bool:
        stamp = self._stamp()
        return stamp is not None and stamp != self._known_stamp


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.
    """

    def __init__(self, path: Optional[str | Path] = None):
        if path is None:
            settings = get_settings().storage
            path = Path(settings.data_dir) / settings.audit_log_name
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(event.to_json_line() + "\n")
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}") from e
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}") from e

        events = []
        for line in reversed(lines):
            if len(events) >= limit:
                break
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError:
                # torn line
                continue
        return events
