"""Rules constants for negotiation encounters.

Counter bounds are fixed by the rules; starting values are only defaults
and can be overridden through configuration or per negotiation.
"""

from __future__ import annotations

# =============================================================================
# Interest
# =============================================================================

MIN_INTEREST = 0
"""Lowest Interest an NPC can have."""

MAX_INTEREST = 5
"""Highest Interest an NPC can have."""

DEFAULT_INTEREST = 2
"""Interest a new negotiation starts at."""

# =============================================================================
# Patience
# =============================================================================

MIN_PATIENCE = 0
"""Patience at which the NPC walks away."""

DEFAULT_PATIENCE = 5
"""Patience a new negotiation starts at."""

DEFAULT_PATIENCE_CAP = 5
"""Upper bound for Patience unless a negotiation sets its own."""

# =============================================================================
# Arguments
# =============================================================================

MIN_TIER = 1
MAX_TIER = 3

RECENT_ARGUMENTS_IN_PROMPT = 5
"""Number of ledger entries shown to the argument suggester."""


__all__ = [
    "MIN_INTEREST",
    "MAX_INTEREST",
    "DEFAULT_INTEREST",
    "MIN_PATIENCE",
    "DEFAULT_PATIENCE",
    "DEFAULT_PATIENCE_CAP",
    "MIN_TIER",
    "MAX_TIER",
    "RECENT_ARGUMENTS_IN_PROMPT",
]
