"""Enumeration types for negotiation encounters.

Every closed set in the negotiation rules is an enum here: session
status and its transition table, NPC motivation tags, argument types
and tiers, and the four outcomes.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class NegotiationStatus(StrEnum):
    """Lifecycle status of a negotiation.

    Transitions only move forward: preparing -> active -> completed.
    """

    PREPARING = "preparing"
    ACTIVE = "active"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self is NegotiationStatus.COMPLETED

    def can_transition_to(self, target: NegotiationStatus) -> bool:
        """Check a transition against the lifecycle table.

        Args:
            target: Status the session would move to.

        Returns:
            True if ``self -> target`` is a legal transition.
        """
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[NegotiationStatus, frozenset[NegotiationStatus]] = {
    NegotiationStatus.PREPARING: frozenset({NegotiationStatus.ACTIVE}),
    NegotiationStatus.ACTIVE: frozenset({NegotiationStatus.COMPLETED}),
    NegotiationStatus.COMPLETED: frozenset(),
}


class MotivationType(StrEnum):
    """Core drives an NPC can be appealed to through."""

    BENEVOLENCE = "benevolence"
    DISCOVERY = "discovery"
    FREEDOM = "freedom"
    GREED = "greed"
    HIGHER_AUTHORITY = "higher_authority"
    JUSTICE = "justice"
    LEGACY = "legacy"
    PEACE = "peace"
    POWER = "power"
    PROTECTION = "protection"
    REPUTATION = "reputation"
    REVELRY = "revelry"
    VENGEANCE = "vengeance"
    WEALTH = "wealth"

    @property
    def display_name(self) -> str:
        """Get human-readable motivation name.

        Returns:
            Formatted name (e.g., 'Higher Authority').
        """
        return self.value.replace("_", " ").title()


class ArgumentType(StrEnum):
    """What an argument leans on.

    Types:
        MOTIVATION: Appeals to one of the NPC's motivations.
        NO_MOTIVATION: Appeals to none of them.
        PITFALL: Trips one of the NPC's pitfalls.
    """

    MOTIVATION = "motivation"
    NO_MOTIVATION = "no_motivation"
    PITFALL = "pitfall"


class NegotiationTier(IntEnum):
    """Result tier of the skill test behind an argument."""

    TIER_1 = 1
    TIER_2 = 2
    TIER_3 = 3


class NegotiationOutcome(StrEnum):
    """Final result of a completed negotiation, fixed by final Interest.

    Outcomes:
        FAILURE: Interest 0-1, no agreement.
        MINOR_FAVOR: Interest 2, limited success.
        MAJOR_FAVOR: Interest 3-4, strong agreement.
        ALLIANCE: Interest 5, best possible outcome.
    """

    FAILURE = "failure"
    MINOR_FAVOR = "minor_favor"
    MAJOR_FAVOR = "major_favor"
    ALLIANCE = "alliance"

    @property
    def rank(self) -> int:
        """Position in the desirability order (0 = worst).

        Returns:
            Integer rank from 0 (failure) to 3 (alliance).
        """
        return list(NegotiationOutcome).index(self)

    @property
    def display_name(self) -> str:
        """Get human-readable outcome name."""
        return self.value.replace("_", " ").title()


__all__ = [
    "NegotiationStatus",
    "MotivationType",
    "ArgumentType",
    "NegotiationTier",
    "NegotiationOutcome",
]
