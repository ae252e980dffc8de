"""Counter tracker for Interest and Patience.

Deltas saturate at the bounds instead of erroring, so argument effects
can be tuned without knowing the current counter values.
"""

from __future__ import annotations

from dataclasses import dataclass

from negotiation_engine.core.constants import MAX_INTEREST, MIN_INTEREST, MIN_PATIENCE
from negotiation_engine.core.exceptions import ValidationError


def clamp(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class CounterUpdate:
    """Counters after a delta was applied.

    Attributes:
        interest: Interest after clamping.
        patience: Patience after clamping.
        patience_exhausted: Whether Patience reached zero.
    """

    interest: int
    patience: int
    patience_exhausted: bool


class CounterTracker:
    """Holds Interest (0-5) and Patience (0 to a per-session cap)."""

    def __init__(self, interest: int, patience: int, patience_cap: int) -> None:
        """Initialize the tracker.

        Args:
            interest: Current Interest.
            patience: Current Patience.
            patience_cap: Upper bound for Patience.

        Raises:
            ValidationError: If a starting value is outside its bounds.
        """
        if patience_cap < 1:
            raise ValidationError(
                "patience_cap must be at least 1",
                field_name="patience_cap",
                invalid_value=patience_cap,
            )
        if not MIN_INTEREST <= interest <= MAX_INTEREST:
            raise ValidationError("Interest out of bounds", field_name="interest", invalid_value=interest)
        if not MIN_PATIENCE <= patience <= patience_cap:
            raise ValidationError("Patience out of bounds", field_name="patience", invalid_value=patience)

        self._interest = interest
        self._patience = patience
        self._patience_cap = patience_cap

    @property
    def interest(self) -> int:
        return self._interest

    @property
    def patience(self) -> int:
        return self._patience

    @property
    def patience_cap(self) -> int:
        return self._patience_cap

    @property
    def patience_exhausted(self) -> bool:
        return self._patience == MIN_PATIENCE

    def preview(self, interest_delta: int, patience_delta: int) -> CounterUpdate:
        """Compute the result of a delta without applying it."""
        interest = clamp(self._interest + interest_delta, MIN_INTEREST, MAX_INTEREST)
        patience = clamp(self._patience + patience_delta, MIN_PATIENCE, self._patience_cap)
        return CounterUpdate(
            interest=interest,
            patience=patience,
            patience_exhausted=patience == MIN_PATIENCE,
        )

    def apply_delta(self, interest_delta: int, patience_delta: int) -> CounterUpdate:
        """Apply signed deltas under saturating clamps.

        Args:
            interest_delta: Change to Interest.
            patience_delta: Change to Patience.

        Returns:
            The new counters and whether Patience is exhausted.
        """
        update = self.preview(interest_delta, patience_delta)
        self._interest = update.interest
        self._patience = update.patience
        return update


__all__ = [
    "clamp",
    "CounterUpdate",
    "CounterTracker",
]
