"""Pydantic V2 schemas for negotiation encounters.

Submodules:
    enums: Closed enumerations (status, motivation tags, argument types, tiers, outcomes)
    negotiation: The session aggregate, its traits and arguments, and input models
    narrative: Campaign history entries written when a negotiation concludes

Example:
    >>> from negotiation_engine.models import (
    ...     CreateNegotiationInput, MotivationInput, MotivationType, create_negotiation
    ... )
    >>> session = create_negotiation(CreateNegotiationInput(
    ...     name="Audience with the Baron",
    ...     npc_name="Baron Valk",
    ...     motivations=[MotivationInput(type=MotivationType.LEGACY)],
    ... ))
    >>> session.status
    <NegotiationStatus.PREPARING: 'preparing'>
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from negotiation_engine.models.enums import (
    ArgumentType,
    MotivationType,
    NegotiationOutcome,
    NegotiationStatus,
    NegotiationTier,
)

# =============================================================================
# Negotiation Aggregate
# =============================================================================
from negotiation_engine.models.negotiation import (
    Argument,
    ArgumentInput,
    CreateNegotiationInput,
    Motivation,
    MotivationInput,
    NegotiationSession,
    NegotiationSummary,
    Pitfall,
    PitfallInput,
    create_negotiation,
    session_from_dict,
)

# =============================================================================
# Campaign History
# =============================================================================
from negotiation_engine.models.narrative import NarrativeEvent


__all__ = [
    # === Enumerations ===
    "NegotiationStatus",
    "MotivationType",
    "ArgumentType",
    "NegotiationTier",
    "NegotiationOutcome",
    # === Aggregate ===
    "Motivation",
    "Pitfall",
    "Argument",
    "NegotiationSession",
    "NegotiationSummary",
    # === Inputs ===
    "ArgumentInput",
    "MotivationInput",
    "PitfallInput",
    "CreateNegotiationInput",
    "create_negotiation",
    "session_from_dict",
    # === History ===
    "NarrativeEvent",
]
