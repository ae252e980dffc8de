"""Application services built on the negotiation engine.

Submodules:
    negotiation: NegotiationService, lifecycle operations over stored sessions
    narrative: Narrative history written when a negotiation concludes
"""

from negotiation_engine.services.narrative import (
    DatabaseNarrativeHistory,
    NarrativeEvent,
    NarrativeHistory,
    create_from_negotiation,
)
from negotiation_engine.services.negotiation import NegotiationService

__all__ = [
    "NegotiationService",
    "NarrativeEvent",
    "NarrativeHistory",
    "DatabaseNarrativeHistory",
    "create_from_negotiation",
]
