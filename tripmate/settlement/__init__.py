"""Settlement engine package."""

from tripmate.settlement.engine import calculate_settlements, settle_trip

__all__ = ["calculate_settlements", "settle_trip"]
