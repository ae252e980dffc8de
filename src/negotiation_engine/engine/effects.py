"""Argument effect policies: argument type and tier to counter deltas.

The engine applies whatever deltas an argument carries. A policy only
fills in the deltas a caller left out, which keeps the tier-to-magnitude
table swappable per table or per campaign.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from negotiation_engine.core.exceptions import ConfigurationError, ValidationError
from negotiation_engine.models.enums import ArgumentType, NegotiationTier


@dataclass(frozen=True)
class EffectDelta:
    """Signed change to Interest and Patience."""

    interest_change: int
    patience_change: int


@runtime_checkable
class EffectPolicy(Protocol):
    """Resolves the default deltas for an argument."""

    name: str

    def resolve(self, argument_type: ArgumentType, tier: NegotiationTier) -> EffectDelta:
        """Return the deltas an argument of this type and tier carries."""
        ...


class DrawSteelEffects:
    """Draw Steel negotiation table.

    Appealing to a motivation never costs Interest; a tier 3 appeal also
    costs no Patience. Arguments without a motivation always cost
    Patience. Tripping a pitfall costs one of each regardless of tier.
    """

    name = "draw_steel"

    TABLE: dict[ArgumentType, dict[NegotiationTier, EffectDelta]] = {
        ArgumentType.MOTIVATION: {
            NegotiationTier.TIER_1: EffectDelta(0, -1),
            NegotiationTier.TIER_2: EffectDelta(1, -1),
            NegotiationTier.TIER_3: EffectDelta(1, 0),
        },
        ArgumentType.NO_MOTIVATION: {
            NegotiationTier.TIER_1: EffectDelta(-1, -1),
            NegotiationTier.TIER_2: EffectDelta(0, -1),
            NegotiationTier.TIER_3: EffectDelta(1, -1),
        },
        ArgumentType.PITFALL: {
            NegotiationTier.TIER_1: EffectDelta(-1, -1),
            NegotiationTier.TIER_2: EffectDelta(-1, -1),
            NegotiationTier.TIER_3: EffectDelta(-1, -1),
        },
    }

    def resolve(self, argument_type: ArgumentType, tier: NegotiationTier) -> EffectDelta:
        return self.TABLE[argument_type][tier]


class ManualEffects:
    """Policy for tables that always enter deltas by hand."""

    name = "manual"

    def resolve(self, argument_type: ArgumentType, tier: NegotiationTier) -> EffectDelta:
        raise ValidationError(
            "Argument deltas are required when effects are entered manually",
            field_name="interest_change",
            details={"argument_type": argument_type.value, "tier": int(tier)},
        )


_POLICIES: dict[str, type[DrawSteelEffects] | type[ManualEffects]] = {
    DrawSteelEffects.name: DrawSteelEffects,
    ManualEffects.name: ManualEffects,
}


def get_effect_policy(name: str | None = None) -> EffectPolicy:
    """Build an effect policy by name.

    Args:
        name: Policy name. Defaults to the configured ``rules.effect_policy``.

    Returns:
        The policy instance.

    Raises:
        ConfigurationError: If no policy has that name.
    """
    if name is None:
        from negotiation_engine.core.config import get_settings

        name = get_settings().rules.effect_policy

    try:
        return _POLICIES[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown effect policy: {name}",
            config_key="effect_policy",
            details={"available": sorted(_POLICIES)},
        ) from None


__all__ = [
    "EffectDelta",
    "EffectPolicy",
    "DrawSteelEffects",
    "ManualEffects",
    "get_effect_policy",
]
