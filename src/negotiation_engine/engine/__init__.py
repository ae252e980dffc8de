"""Negotiation engine: the rules that move a session through its lifecycle.

Submodules:
    traits: Motivation and pitfall registry with one-way concealment
    counters: Saturating Interest and Patience tracker
    outcome: Interest to outcome mapping
    effects: Pluggable argument type and tier to delta policies
    ledger: Append-only argument ledger
    session: NegotiationEngine, the session state machine

Example:
    >>> from negotiation_engine.engine import NegotiationEngine
    >>> engine = NegotiationEngine(session)
    >>> engine.start()
    >>> engine.apply_argument(ArgumentInput(tier=3, description="A fair trade"))
"""

from __future__ import annotations

from negotiation_engine.engine.counters import CounterTracker, CounterUpdate, clamp
from negotiation_engine.engine.effects import (
    DrawSteelEffects,
    EffectDelta,
    EffectPolicy,
    ManualEffects,
    get_effect_policy,
)
from negotiation_engine.engine.ledger import ArgumentLedger, LedgerEntryResult
from negotiation_engine.engine.outcome import OUTCOME_BY_INTEREST, resolve_outcome
from negotiation_engine.engine.session import ArgumentResult, NegotiationEngine
from negotiation_engine.engine.traits import TraitPartition, TraitRegistry


__all__ = [
    # Traits
    "TraitPartition",
    "TraitRegistry",
    # Counters
    "CounterTracker",
    "CounterUpdate",
    "clamp",
    # Outcome
    "OUTCOME_BY_INTEREST",
    "resolve_outcome",
    # Effects
    "EffectDelta",
    "EffectPolicy",
    "DrawSteelEffects",
    "ManualEffects",
    "get_effect_policy",
    # Ledger
    "ArgumentLedger",
    "LedgerEntryResult",
    # State machine
    "ArgumentResult",
    "NegotiationEngine",
]
