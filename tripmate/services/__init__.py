"""Services package."""

from tripmate.services.ai import (
    AIServiceError,
    AssistantError,
    ReceiptScanError,
    ReceiptScanner,
    ReceiptSuggestion,
    TripAssistant,
)
from tripmate.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryAuditStorage,
    InMemoryTripStorage,
    JsonLinesAuditStorage,
    LocalFileTripStorage,
    StorageConnectionError,
    StorageError,
    TripStorageInterface,
)
from tripmate.services.trip_io import (
    TripImportError,
    export_trip,
    parse_trip_import,
)

__all__ = [
    # Gemini services
    "AIServiceError",
    "AssistantError",
    "ReceiptScanError",
    "ReceiptScanner",
    "ReceiptSuggestion",
    "TripAssistant",
    # Storage services
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryAuditStorage",
    "InMemoryTripStorage",
    "JsonLinesAuditStorage",
    "LocalFileTripStorage",
    "StorageConnectionError",
    "StorageError",
    "TripStorageInterface",
    # Import / export
    "TripImportError",
    "export_trip",
    "parse_trip_import",
]
