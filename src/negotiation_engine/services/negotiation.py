"""Negotiation service: lifecycle operations over stored sessions.

Each mutating call loads the stored session, runs exactly one engine
operation, and saves the resulting snapshot. When that operation
concluded the negotiation, one narrative event is recorded after the
save. History is best effort: a failed write is logged and the
completion stands.

Example:
    >>> service = NegotiationService(database=Database("data/table.db"))
    >>> session = service.create(CreateNegotiationInput(name="Toll", npc_name="Ferryman"))
    >>> service.start(session.id)
    >>> service.record_argument(session.id, ArgumentInput(tier=2, description="Fair coin"))
    >>> service.complete(session.id).outcome
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, TypeVar
from uuid import UUID

from negotiation_engine.core.exceptions import NotFoundError
from negotiation_engine.core.logging import get_logger, negotiation_context
from negotiation_engine.engine.effects import EffectPolicy
from negotiation_engine.engine.session import ArgumentResult, NegotiationEngine
from negotiation_engine.models.enums import MotivationType, NegotiationStatus
from negotiation_engine.models.negotiation import (
    ArgumentInput,
    CreateNegotiationInput,
    NegotiationSession,
    create_negotiation,
)
from negotiation_engine.services.narrative import (
    DatabaseNarrativeHistory,
    NarrativeHistory,
    create_from_negotiation,
)
from negotiation_engine.storage.database import Database, get_database


if TYPE_CHECKING:
    from negotiation_engine.core.config import NegotiationRules


logger = get_logger(__name__)

T = TypeVar("T")


class NegotiationService:
    """Stored-session front end to the negotiation engine.

    Attributes:
        database: Where sessions are stored.
        history: Where narrative events go on completion.
        effects: Effect policy handed to every engine. None uses the configured one.
    """

    def __init__(
        self,
        *,
        database: Database | None = None,
        history: NarrativeHistory | None = None,
        effects: EffectPolicy | None = None,
        rules: NegotiationRules | None = None,
    ) -> None:
        self.database = database if database is not None else get_database()
        self.history = history if history is not None else DatabaseNarrativeHistory(self.database)
        self.effects = effects
        self.rules = rules

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, data: CreateNegotiationInput) -> NegotiationSession:
        """Create and store a negotiation in the preparing state."""
        session = create_negotiation(data, rules=self.rules)
        self.database.save_negotiation(session)
        logger.info(
            "Negotiation created",
            negotiation_id=str(session.id),
            npc=session.npc_name,
            motivations=len(session.motivations),
            pitfalls=len(session.pitfalls),
        )
        return session

    def get(self, negotiation_id: UUID | str) -> NegotiationSession:
        """Load a negotiation.

        Raises:
            NotFoundError: If no negotiation has that ID.
        """
        session = self.database.get_negotiation(negotiation_id)
        if session is None:
            raise NotFoundError(
                "Negotiation not found",
                resource="negotiation",
                key=str(negotiation_id),
            )
        return session

    def list(self, status: NegotiationStatus | None = None) -> list[NegotiationSession]:
        """Stored negotiations, most recently updated first."""
        return self.database.list_negotiations(status)

    def delete(self, negotiation_id: UUID | str) -> bool:
        """Delete a negotiation. Returns False if it did not exist."""
        return self.database.delete_negotiation(negotiation_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self, negotiation_id: UUID | str) -> NegotiationSession:
        return self._run(negotiation_id, lambda engine: engine.start())

    def reveal_motivation(
        self,
        negotiation_id: UUID | str,
        motivation_type: MotivationType | str,
    ) -> NegotiationSession:
        return self._run(negotiation_id, lambda engine: engine.reveal_motivation(motivation_type))

    def reveal_pitfall(self, negotiation_id: UUID | str, key: int | str) -> NegotiationSession:
        return self._run(negotiation_id, lambda engine: engine.reveal_pitfall(key))

    def record_argument(self, negotiation_id: UUID | str, data: ArgumentInput) -> ArgumentResult:
        """Apply an argument to a stored negotiation.

        Returns:
            The engine's result. If Patience ran out, the stored session is
            completed as a failure and the history has been notified.
        """
        return self._run(negotiation_id, lambda engine: engine.apply_argument(data))

    def complete(self, negotiation_id: UUID | str) -> NegotiationSession:
        return self._run(negotiation_id, lambda engine: engine.complete())

    # =========================================================================
    # Internals
    # =========================================================================

    def _run(self, negotiation_id: UUID | str, operation: Callable[[NegotiationEngine], T]) -> T:
        session = self.get(negotiation_id)
        was_completed = session.status is NegotiationStatus.COMPLETED

        with negotiation_context(session.id):
            engine = NegotiationEngine(session, effects=self.effects)
            result = operation(engine)

            snapshot = engine.session
            self.database.save_negotiation(snapshot)

            if not was_completed and snapshot.status is NegotiationStatus.COMPLETED:
                self._record_history(snapshot)
        return result

    def _record_history(self, session: NegotiationSession) -> None:
        try:
            self.history.record(create_from_negotiation(session))
        except Exception as exc:
            logger.error(
                "Failed to record narrative event",
                negotiation_id=str(session.id),
                outcome=session.outcome.value if session.outcome else None,
                error=str(exc),
            )


__all__ = ["NegotiationService"]
