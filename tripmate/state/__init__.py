"""Trip state package: the pure reducer and the store that owns the snapshot."""

from tripmate.state.reducer import reduce_trip
from tripmate.state.store import TripStore

__all__ = ["TripStore", "reduce_trip"]
