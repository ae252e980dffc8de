"""Session state machine for negotiation encounters.

NegotiationEngine owns one NegotiationSession and is the only way to
change it. It drives the lifecycle (preparing -> active -> completed),
rejects operations that the current status does not allow, and fixes
the outcome exactly once.

Every operation runs against a deep copy of the session. The copy is
re-validated through the session model and swapped in only if the whole
operation succeeded, so a rejected operation leaves no trace. Callers
only ever receive snapshots.

Example:
    >>> engine = NegotiationEngine(session)
    >>> engine.start()
    >>> engine.reveal_motivation(MotivationType.LEGACY)
    >>> result = engine.apply_argument(ArgumentInput(
    ...     tier=2, description="Your name will outlive us all", motivation_type="legacy"
    ... ))
    >>> final = engine.complete()
    >>> final.outcome
    <NegotiationOutcome.MAJOR_FAVOR: 'major_favor'>
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from negotiation_engine.core.exceptions import InvalidStateError, ValidationError
from negotiation_engine.core.logging import get_logger
from negotiation_engine.engine.counters import CounterTracker, CounterUpdate
from negotiation_engine.engine.effects import EffectPolicy, get_effect_policy
from negotiation_engine.engine.ledger import ArgumentLedger
from negotiation_engine.engine.outcome import resolve_outcome
from negotiation_engine.engine.traits import TraitPartition, TraitRegistry
from negotiation_engine.models.enums import (
    MotivationType,
    NegotiationOutcome,
    NegotiationStatus,
)
from negotiation_engine.models.negotiation import (
    Argument,
    ArgumentInput,
    NegotiationSession,
)


logger = get_logger(__name__)


@dataclass(frozen=True)
class ArgumentResult:
    """What applying one argument did.

    Attributes:
        argument: The argument as recorded in the ledger.
        interest: Interest afterwards.
        patience: Patience afterwards.
        patience_exhausted: Whether Patience ran out.
        completed: Whether the argument ended the negotiation.
        session: Snapshot of the session afterwards.
    """

    argument: Argument
    interest: int
    patience: int
    patience_exhausted: bool
    completed: bool
    session: NegotiationSession


class NegotiationEngine:
    """State machine over a single negotiation session.

    Attributes:
        effects: Policy used to fill in argument deltas a caller left out.
    """

    def __init__(
        self,
        session: NegotiationSession,
        *,
        effects: EffectPolicy | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            session: The session to drive. The engine keeps its own copy.
            effects: Effect policy. Defaults to the configured policy.
        """
        self._session = session.model_copy(deep=True)
        self.effects = effects if effects is not None else get_effect_policy()

    # =========================================================================
    # Read Accessors
    # =========================================================================

    @property
    def session(self) -> NegotiationSession:
        """Snapshot of the current session."""
        return self._session.model_copy(deep=True)

    @property
    def status(self) -> NegotiationStatus:
        return self._session.status

    @property
    def interest(self) -> int:
        return self._session.interest

    @property
    def patience(self) -> int:
        return self._session.patience

    @property
    def outcome(self) -> NegotiationOutcome | None:
        return self._session.outcome

    @property
    def arguments(self) -> tuple[Argument, ...]:
        """The argument ledger in application order."""
        return tuple(self._session.arguments)

    def list_known(self) -> TraitPartition:
        """Motivations and pitfalls the party has uncovered."""
        return self._traits(self.session).list_known()

    def list_concealed(self) -> TraitPartition:
        """Motivations and pitfalls still hidden from the party."""
        return self._traits(self.session).list_concealed()

    def replay_counters(self) -> CounterUpdate:
        """Re-derive the counters by replaying the ledger from the start."""
        working = self.session
        ledger = ArgumentLedger(
            working.arguments,
            traits=self._traits(working),
            counters=self._counters(working),
            effects=self.effects,
        )
        return ledger.replay_counters(
            working.starting_interest,
            working.starting_patience,
            working.patience_cap,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> NegotiationSession:
        """Open the negotiation (preparing -> active).

        Returns:
            Snapshot of the active session.

        Raises:
            InvalidStateError: If the negotiation is not preparing.
        """
        self._require_transition("start", NegotiationStatus.ACTIVE)
        snapshot = self._commit(self._session.model_copy(deep=True), status=NegotiationStatus.ACTIVE)
        logger.info(
            "Negotiation started",
            negotiation_id=str(snapshot.id),
            npc=snapshot.npc_name,
            interest=snapshot.interest,
            patience=snapshot.patience,
        )
        return snapshot

    def complete(self) -> NegotiationSession:
        """Conclude the negotiation voluntarily.

        The outcome is resolved from the current Interest and frozen.

        Returns:
            Snapshot of the completed session.

        Raises:
            InvalidStateError: If the negotiation is not active, or if its
                Patience is already exhausted.
        """
        self._require_transition("complete", NegotiationStatus.COMPLETED)
        if self._session.patience == 0:
            raise InvalidStateError(
                "Negotiation patience is exhausted; it ends in failure automatically",
                current_state=self._session.status.value,
            )

        outcome = resolve_outcome(self._session.interest)
        snapshot = self._commit(
            self._session.model_copy(deep=True),
            **self._completion(outcome),
        )
        logger.info(
            "Negotiation completed",
            negotiation_id=str(snapshot.id),
            outcome=outcome.value,
            interest=snapshot.interest,
        )
        return snapshot

    # =========================================================================
    # Traits
    # =========================================================================

    def reveal_motivation(self, motivation_type: MotivationType | str) -> NegotiationSession:
        """Reveal one of the NPC's motivations to the party.

        Revealing an already-known motivation is a no-op.

        Raises:
            InvalidStateError: If the negotiation is not active.
            NotFoundError: If the NPC has no such motivation.
        """
        self._require_status("reveal a motivation in", NegotiationStatus.ACTIVE)
        working = self._session.model_copy(deep=True)
        if not self._traits(working).reveal_motivation(motivation_type):
            return self.session
        logger.info(
            "Motivation revealed",
            negotiation_id=str(working.id),
            motivation=str(motivation_type),
        )
        return self._commit(working)

    def reveal_pitfall(self, key: int | str) -> NegotiationSession:
        """Reveal one of the NPC's pitfalls to the party.

        Args:
            key: Pitfall index, or the pitfall's description.

        Raises:
            InvalidStateError: If the negotiation is not active.
            NotFoundError: If no pitfall matches the key.
        """
        self._require_status("reveal a pitfall in", NegotiationStatus.ACTIVE)
        working = self._session.model_copy(deep=True)
        if not self._traits(working).reveal_pitfall(key):
            return self.session
        logger.info("Pitfall revealed", negotiation_id=str(working.id), pitfall=key)
        return self._commit(working)

    # =========================================================================
    # Arguments
    # =========================================================================

    def apply_argument(self, data: ArgumentInput) -> ArgumentResult:
        """Apply an argument and record it in the ledger.

        If the argument exhausts the NPC's Patience, the negotiation
        completes immediately as a failure, whatever the Interest.

        Args:
            data: The argument request.

        Returns:
            The recorded argument, the new counters, and a session snapshot.

        Raises:
            InvalidStateError: If the negotiation is not active.
            ValidationError: If the argument is malformed.
        """
        self._require_status("apply an argument to", NegotiationStatus.ACTIVE)

        working = self._session.model_copy(deep=True)
        ledger = ArgumentLedger(
            working.arguments,
            traits=self._traits(working),
            counters=self._counters(working),
            effects=self.effects,
        )
        entry = ledger.apply_argument(data, status=working.status)
        update = entry.update

        changes: dict[str, Any] = {
            "interest": update.interest,
            "patience": update.patience,
        }
        if update.patience_exhausted:
            changes.update(self._completion(NegotiationOutcome.FAILURE))

        snapshot = self._commit(working, **changes)
        logger.info(
            "Argument applied",
            negotiation_id=str(snapshot.id),
            tier=int(entry.argument.tier),
            argument_type=entry.argument.argument_type.value,
            interest=update.interest,
            patience=update.patience,
        )
        if update.patience_exhausted:
            logger.info(
                "Negotiation patience exhausted",
                negotiation_id=str(snapshot.id),
                outcome=NegotiationOutcome.FAILURE.value,
            )

        return ArgumentResult(
            argument=entry.argument,
            interest=update.interest,
            patience=update.patience,
            patience_exhausted=update.patience_exhausted,
            completed=snapshot.status is NegotiationStatus.COMPLETED,
            session=snapshot.model_copy(deep=True),
        )

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _traits(working: NegotiationSession) -> TraitRegistry:
        return TraitRegistry(working.motivations, working.pitfalls)

    @staticmethod
    def _counters(working: NegotiationSession) -> CounterTracker:
        return CounterTracker(working.interest, working.patience, working.patience_cap)

    @staticmethod
    def _completion(outcome: NegotiationOutcome) -> dict[str, Any]:
        return {
            "status": NegotiationStatus.COMPLETED,
            "outcome": outcome,
            "completed_at": datetime.now(),
        }

    def _reject(self, message: str, expected: NegotiationStatus) -> InvalidStateError:
        current = self._session.status
        logger.warning(
            "Negotiation operation rejected",
            negotiation_id=str(self._session.id),
            status=current.value,
            reason=message,
        )
        return InvalidStateError(
            message,
            current_state=current.value,
            expected_states=[expected.value],
        )

    def _require_status(self, action: str, expected: NegotiationStatus) -> None:
        if self._session.status is not expected:
            raise self._reject(
                f"Cannot {action} a {self._session.status.value} negotiation",
                expected,
            )

    def _require_transition(self, action: str, target: NegotiationStatus) -> None:
        current = self._session.status
        if not current.can_transition_to(target):
            expected = next(s for s in NegotiationStatus if s.can_transition_to(target))
            raise self._reject(f"Cannot {action} a {current.value} negotiation", expected)

    def _commit(self, working: NegotiationSession, **changes: Any) -> NegotiationSession:
        """Validate a candidate session and make it current.

        Returns:
            Snapshot of the committed session.
        """
        data = working.model_dump()
        data.update(changes)
        data["updated_at"] = datetime.now()
        try:
            candidate = NegotiationSession.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(
                "Operation would leave the negotiation in an invalid state",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

        self._session = candidate
        return candidate.model_copy(deep=True)


__all__ = [
    "ArgumentResult",
    "NegotiationEngine",
]
