"""Argument ledger: validation and append-only record of arguments.

The ledger is the audit trail of a negotiation. Entries are appended in
application order and never edited, reordered, or removed. Interest and
Patience are kept as running totals by the counter tracker; the ledger
can replay its entries to re-derive them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from negotiation_engine.core.constants import MAX_TIER, MIN_TIER
from negotiation_engine.core.exceptions import InvalidStateError, ValidationError
from negotiation_engine.core.logging import get_logger
from negotiation_engine.engine.counters import CounterTracker, CounterUpdate
from negotiation_engine.engine.effects import DrawSteelEffects, EffectPolicy
from negotiation_engine.models.enums import ArgumentType, NegotiationStatus, NegotiationTier
from negotiation_engine.models.negotiation import Argument, ArgumentInput


if TYPE_CHECKING:
    from negotiation_engine.engine.traits import TraitRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerEntryResult:
    """Result of appending one argument.

    Attributes:
        argument: The recorded argument.
        update: Counters after the argument's deltas were applied.
    """

    argument: Argument
    update: CounterUpdate


class ArgumentLedger:
    """Validates arguments, applies their effects, and records them.

    Attributes:
        effects: Policy used to fill in deltas a caller left out.
    """

    def __init__(
        self,
        entries: list[Argument],
        *,
        traits: TraitRegistry,
        counters: CounterTracker,
        effects: EffectPolicy | None = None,
    ) -> None:
        """Initialize the ledger over an existing entry list.

        Args:
            entries: Recorded arguments; new entries are appended in place.
            traits: Registry used to check motivation references and count usage.
            counters: Tracker that receives each argument's deltas.
            effects: Policy for omitted deltas. Defaults to DrawSteelEffects.
        """
        self._entries = entries
        self._traits = traits
        self._counters = counters
        self.effects = effects or DrawSteelEffects()

    @property
    def entries(self) -> tuple[Argument, ...]:
        """Recorded arguments in application order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def build_argument(self, data: ArgumentInput) -> Argument:
        """Validate an argument request and resolve its deltas.

        Nothing is mutated; the returned record is what ``apply_argument``
        would append.

        Args:
            data: The argument request.

        Returns:
            The argument record, with a fresh id and timestamp.

        Raises:
            ValidationError: If the tier, description, type, or motivation
                reference is invalid, or a delta is missing under a manual policy.
        """
        if not MIN_TIER <= data.tier <= MAX_TIER:
            raise ValidationError(
                f"Argument tier must be between {MIN_TIER} and {MAX_TIER}",
                field_name="tier",
                invalid_value=data.tier,
            )
        tier = NegotiationTier(data.tier)

        description = data.description.strip()
        if not description:
            raise ValidationError("Argument description must not be empty", field_name="description")

        argument_type = data.argument_type
        if argument_type is None:
            argument_type = (
                ArgumentType.MOTIVATION if data.motivation_type is not None else ArgumentType.NO_MOTIVATION
            )

        if argument_type is ArgumentType.MOTIVATION and data.motivation_type is None:
            raise ValidationError(
                "A motivation argument must name the motivation it appeals to",
                field_name="motivation_type",
            )
        if argument_type is ArgumentType.PITFALL and data.motivation_type is not None:
            raise ValidationError(
                "A pitfall argument cannot appeal to a motivation",
                field_name="motivation_type",
                invalid_value=data.motivation_type.value,
            )
        if data.motivation_type is not None and self._traits.find_motivation(data.motivation_type) is None:
            raise ValidationError(
                "Argument references a motivation the NPC does not have",
                field_name="motivation_type",
                invalid_value=data.motivation_type.value,
            )

        interest_change = data.interest_change
        patience_change = data.patience_change
        if interest_change is None or patience_change is None:
            resolved = self.effects.resolve(argument_type, tier)
            if interest_change is None:
                interest_change = resolved.interest_change
            if patience_change is None:
                patience_change = resolved.patience_change

        try:
            return Argument(
                argument_type=argument_type,
                tier=tier,
                description=description,
                motivation_type=data.motivation_type,
                interest_change=interest_change,
                patience_change=patience_change,
                player_name=data.player_name,
                notes=data.notes,
                created_at=datetime.now(),
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid argument",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    def apply_argument(self, data: ArgumentInput, *, status: NegotiationStatus) -> LedgerEntryResult:
        """Apply an argument's effects and append it to the ledger.

        Appeals to a concealed motivation apply their full deltas but do
        not count towards that motivation's usage.

        Args:
            data: The argument request.
            status: Current status of the owning session.

        Returns:
            The recorded argument and the updated counters.

        Raises:
            InvalidStateError: If the session is not active.
            ValidationError: If the argument is malformed.
        """
        if status is not NegotiationStatus.ACTIVE:
            raise InvalidStateError(
                "Arguments can only be applied to an active negotiation",
                current_state=status.value,
                expected_states=[NegotiationStatus.ACTIVE.value],
            )

        argument = self.build_argument(data)

        update = self._counters.apply_delta(argument.interest_change, argument.patience_change)
        if argument.motivation_type is not None:
            self._traits.record_usage(argument.motivation_type)
        self._entries.append(argument)

        logger.debug(
            "Argument recorded",
            argument_type=argument.argument_type.value,
            tier=int(argument.tier),
            interest=update.interest,
            patience=update.patience,
        )

        return LedgerEntryResult(argument=argument, update=update)

    def replay_counters(
        self,
        starting_interest: int,
        starting_patience: int,
        patience_cap: int,
    ) -> CounterUpdate:
        """Re-derive the counters from the recorded deltas.

        Args:
            starting_interest: Interest before the first argument.
            starting_patience: Patience before the first argument.
            patience_cap: Upper bound for Patience.

        Returns:
            The counters after replaying every entry in order.
        """
        tracker = CounterTracker(starting_interest, starting_patience, patience_cap)
        update = CounterUpdate(
            interest=tracker.interest,
            patience=tracker.patience,
            patience_exhausted=tracker.patience_exhausted,
        )
        for argument in self._entries:
            update = tracker.apply_delta(argument.interest_change, argument.patience_change)
        return update


__all__ = [
    "LedgerEntryResult",
    "ArgumentLedger",
]
