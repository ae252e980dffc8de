"""Campaign history entries produced when a negotiation concludes."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from negotiation_engine.models.enums import NegotiationOutcome


class NarrativeEvent(BaseModel):
    """One entry in the campaign's narrative history.

    Attributes:
        id: Unique event identifier.
        event_type: Kind of event that produced the entry.
        source_id: ID of the negotiation the event came from.
        name: Encounter name.
        description: Encounter description, empty when there was none.
        outcome: How the negotiation ended.
        created_at: When the event was recorded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique event ID")
    event_type: Literal["negotiation"] = Field(default="negotiation", description="Event kind")
    source_id: UUID = Field(description="Originating negotiation ID")
    name: str = Field(min_length=1, max_length=200, description="Encounter name")
    description: str = Field(default="", max_length=5000, description="Encounter description")
    outcome: NegotiationOutcome = Field(description="Negotiation outcome")
    created_at: datetime = Field(default_factory=datetime.now, description="When recorded")


__all__ = ["NarrativeEvent"]
