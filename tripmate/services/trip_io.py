"""
Trip Import / Export

The export format is the same JSON the storage layer writes: camelCase
keys, enum tokens as strings, money as strings.

CRITICAL: An import is checked in full before anything is dispatched.
If it fails, the caller's trip is untouched.
"""

import json
from typing import Optional

from pydantic import ValidationError

from tripmate.models.trip import Trip
from tripmate.models.validation import ValidationResult
from tripmate.validation import TripInputValidator


class TripImportError(Exception):
    """The imported data is not a usable trip."""

    def __init__(self, message: str, result: Optional[ValidationResult] = None):
        self.result = result
        super().__init__(message)


def export_trip(trip: Trip, indent: Optional[int] = None) -> str:
    """Serialize a trip to the interchange JSON format."""
    return trip.model_dump_json(by_alias=True, indent=indent)


def parse_trip_import(
    text: str | bytes,
    validator: Optional[TripInputValidator] = None,
) -> Trip:
    """
    Parse and validate an exported trip.

    Raises:
        TripImportError: not JSON, wrong top-level shape, or invalid records
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TripImportError(f"Trip file is not valid JSON: {e}") from e

    validator = validator or TripInputValidator()
    result = validator.validate_import_payload(payload)
    if result.has_errors:
        messages = "; ".join(issue.message for issue in result.issues)
        raise TripImportError(f"Invalid trip data file: {messages}", result)

    try:
        return Trip.model_validate(payload)
    except ValidationError as e:
        raise TripImportError(f"Invalid trip data file: {e.error_count()} invalid fields") from e
