"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a local JSON file backend and an in-memory backend.
"""

from tripmate.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    StorageConnectionError,
    StorageError,
    TripStorageInterface,
)
from tripmate.services.storage.local_file import (
    JsonLinesAuditStorage,
    LocalFileTripStorage,
)
from tripmate.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTripStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TripStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageConnectionError",
    "StorageError",
    # Local file implementation
    "JsonLinesAuditStorage",
    "LocalFileTripStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryTripStorage",
]
