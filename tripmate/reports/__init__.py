"""Read-only trip reports."""

from tripmate.reports.trip_report import (
    SETTLED_UP_TEXT,
    TripReport,
    build_trip_report,
    format_currency,
    report_file_name,
    settlement_share_text,
)

__all__ = [
    "SETTLED_UP_TEXT",
    "TripReport",
    "build_trip_report",
    "format_currency",
    "report_file_name",
    "settlement_share_text",
]
