"""Input validation package."""

from tripmate.validation.validator import InputValidationError, TripInputValidator

__all__ = ["InputValidationError", "TripInputValidator"]
