"""Outcome resolver: final Interest to negotiation outcome.

A pure function with a fixed table. The session state machine calls it
exactly once, at the moment of completion.
"""

from __future__ import annotations

from negotiation_engine.core.constants import MAX_INTEREST, MIN_INTEREST
from negotiation_engine.core.exceptions import ValidationError
from negotiation_engine.models.enums import NegotiationOutcome


OUTCOME_BY_INTEREST: dict[int, NegotiationOutcome] = {
    0: NegotiationOutcome.FAILURE,
    1: NegotiationOutcome.FAILURE,
    2: NegotiationOutcome.MINOR_FAVOR,
    3: NegotiationOutcome.MAJOR_FAVOR,
    4: NegotiationOutcome.MAJOR_FAVOR,
    5: NegotiationOutcome.ALLIANCE,
}


def resolve_outcome(interest: int) -> NegotiationOutcome:
    """Map a terminal Interest value to its outcome.

    Args:
        interest: Final Interest (0-5).

    Returns:
        failure for 0-1, minor_favor for 2, major_favor for 3-4, alliance for 5.

    Raises:
        ValidationError: If interest is outside 0-5.
    """
    try:
        return OUTCOME_BY_INTEREST[interest]
    except KeyError:
        raise ValidationError(
            f"Interest must be between {MIN_INTEREST} and {MAX_INTEREST}",
            field_name="interest",
            invalid_value=interest,
        ) from None


__all__ = [
    "OUTCOME_BY_INTEREST",
    "resolve_outcome",
]
