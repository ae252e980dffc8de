"""Negotiation Engine - NPC negotiation encounters for tabletop RPGs.

Runs the negotiation subsystem of a campaign manager: the party argues
with an NPC whose hidden motivations and pitfalls they uncover as they
go, Interest and Patience move with every argument, and the final
Interest decides the outcome.

STATE OWNERSHIP:
- The engine owns TRUTH (counters, concealment, ledger, outcome)
- Storage and narrative history only ever see snapshots
- LLM suggestions are advisory; they enter the engine like any other argument

Example:
    >>> from negotiation_engine import (
    ...     ArgumentInput, CreateNegotiationInput, MotivationInput, MotivationType,
    ...     NegotiationEngine, create_negotiation,
    ... )
    >>>
    >>> session = create_negotiation(CreateNegotiationInput(
    ...     name="Audience with the Baron",
    ...     npc_name="Baron Valk",
    ...     motivations=[MotivationInput(type=MotivationType.LEGACY)],
    ... ))
    >>> engine = NegotiationEngine(session)
    >>> engine.start()
    >>> engine.reveal_motivation(MotivationType.LEGACY)
    >>> engine.apply_argument(ArgumentInput(
    ...     tier=3, description="Your house will be remembered", motivation_type="legacy",
    ... ))
    >>> engine.complete().outcome
    <NegotiationOutcome.MAJOR_FAVOR: 'major_favor'>

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for sessions, arguments and history.
    engine: Trait registry, counters, ledger, and the session state machine.
    storage: SQLite persistence.
    services: Stored-session lifecycle and narrative history.
    authoring: LLM argument suggestions.
"""

from __future__ import annotations

# Core
from negotiation_engine.core.config import Settings, get_settings
from negotiation_engine.core.exceptions import (
    InvalidStateError,
    NegotiationEngineError,
    NotFoundError,
    ValidationError,
)
from negotiation_engine.core.logging import configure_logging, get_logger

# Models
from negotiation_engine.models import (
    Argument,
    ArgumentInput,
    ArgumentType,
    CreateNegotiationInput,
    Motivation,
    MotivationInput,
    MotivationType,
    NarrativeEvent,
    NegotiationOutcome,
    NegotiationSession,
    NegotiationStatus,
    NegotiationTier,
    Pitfall,
    PitfallInput,
    create_negotiation,
)

# Engine (the source of truth)
from negotiation_engine.engine import (
    ArgumentResult,
    DrawSteelEffects,
    ManualEffects,
    NegotiationEngine,
    resolve_outcome,
)

# Persistence and services
from negotiation_engine.storage import Database, get_database
from negotiation_engine.services import (
    DatabaseNarrativeHistory,
    NarrativeHistory,
    NegotiationService,
)

# Authoring
from negotiation_engine.authoring import ArgumentProposal, ArgumentSuggester


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "NegotiationEngineError",
    "ValidationError",
    "InvalidStateError",
    "NotFoundError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Argument",
    "ArgumentInput",
    "ArgumentType",
    "CreateNegotiationInput",
    "Motivation",
    "MotivationInput",
    "MotivationType",
    "NarrativeEvent",
    "NegotiationOutcome",
    "NegotiationSession",
    "NegotiationStatus",
    "NegotiationTier",
    "Pitfall",
    "PitfallInput",
    "create_negotiation",
    # Engine
    "ArgumentResult",
    "DrawSteelEffects",
    "ManualEffects",
    "NegotiationEngine",
    "resolve_outcome",
    # Persistence and services
    "Database",
    "get_database",
    "NegotiationService",
    "NarrativeHistory",
    "DatabaseNarrativeHistory",
    # Authoring
    "ArgumentProposal",
    "ArgumentSuggester",
]
