"""Narrative history: turning concluded negotiations into campaign events.

The history only reads a negotiation's summary projection (id, name,
description, outcome). It is notified after the final snapshot has been
saved and has no path back into the session.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from negotiation_engine.core.exceptions import InvalidStateError
from negotiation_engine.core.logging import get_logger
from negotiation_engine.models.enums import NegotiationStatus
from negotiation_engine.models.narrative import NarrativeEvent
from negotiation_engine.models.negotiation import NegotiationSession
from negotiation_engine.storage.database import Database, get_database


logger = get_logger(__name__)


def create_from_negotiation(session: NegotiationSession) -> NarrativeEvent:
    """Build the narrative event for a completed negotiation.

    Args:
        session: A completed negotiation.

    Returns:
        The event describing how it ended.

    Raises:
        InvalidStateError: If the negotiation has not completed.
    """
    if session.status is not NegotiationStatus.COMPLETED:
        raise InvalidStateError(
            "Only completed negotiations enter the narrative history",
            current_state=session.status.value,
            expected_states=[NegotiationStatus.COMPLETED.value],
        )

    summary = session.summary()
    return NarrativeEvent(
        source_id=summary.id,
        name=summary.name,
        description=summary.description or "",
        outcome=summary.outcome,
    )


@runtime_checkable
class NarrativeHistory(Protocol):
    """Sink for narrative events."""

    def record(self, event: NarrativeEvent) -> None:
        """Store one event."""
        ...


class DatabaseNarrativeHistory:
    """Narrative history kept in the SQLite database."""

    def __init__(self, database: Database | None = None) -> None:
        self._database = database

    @property
    def database(self) -> Database:
        if self._database is None:
            self._database = get_database()
        return self._database

    def record(self, event: NarrativeEvent) -> None:
        self.database.add_narrative_event(event)

    def events(self, source_id: UUID | str | None = None) -> list[NarrativeEvent]:
        """Stored events, oldest first, optionally for one negotiation."""
        return self.database.get_narrative_events(source_id)


__all__ = [
    "NarrativeEvent",
    "NarrativeHistory",
    "DatabaseNarrativeHistory",
    "create_from_negotiation",
]
