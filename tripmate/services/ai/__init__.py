"""Gemini collaborators: receipt scanning and the trip assistant."""

from tripmate.services.ai.gemini_service import (
    AIServiceError,
    AssistantError,
    ReceiptScanError,
    ReceiptScanner,
    ReceiptSuggestion,
    TripAssistant,
    build_trip_context,
)

__all__ = [
    "AIServiceError",
    "AssistantError",
    "ReceiptScanError",
    "ReceiptScanner",
    "ReceiptSuggestion",
    "TripAssistant",
    "build_trip_context",
]
