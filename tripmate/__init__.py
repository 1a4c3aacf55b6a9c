"""
Tripmate - Source Package

Trip management for a group travelling together: members, a shared
packing list, expenses, contributions to the kitty, and who owes whom
at the end.

DESIGN PRINCIPLES:
1. One immutable Trip snapshot, changed only through actions
2. Validate before dispatch; the reducer never raises
3. AI suggests → Human confirms → System records
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Tripmate Team"
