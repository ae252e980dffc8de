"""Pydantic V2 schemas for negotiation sessions.

This module defines the negotiation aggregate (NegotiationSession) and
its parts, the input models callers build requests from, and the
``create_negotiation`` factory that produces a fresh session in the
preparing state.

The session model validates its own invariants (counter bounds, unique
motivation types, outcome and completion time present exactly when the
session is completed), so any snapshot that passes ``model_validate`` is
a legal state.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator
from pydantic import ValidationError as PydanticValidationError

from negotiation_engine.core.constants import (
    MAX_INTEREST,
    MIN_INTEREST,
    MIN_PATIENCE,
)
from negotiation_engine.core.exceptions import ValidationError
from negotiation_engine.models.enums import (
    ArgumentType,
    MotivationType,
    NegotiationOutcome,
    NegotiationStatus,
    NegotiationTier,
)


if TYPE_CHECKING:
    from negotiation_engine.core.config import NegotiationRules


# =============================================================================
# NPC Traits
# =============================================================================


class Motivation(BaseModel):
    """An NPC motivation the party can appeal to.

    Attributes:
        type: Motivation tag.
        description: Why this matters to the NPC.
        is_known: Whether the party has uncovered it. Never goes back to False.
        times_used: Arguments that leaned on it while it was known.
    """

    model_config = ConfigDict(extra="forbid")

    type: MotivationType = Field(description="Motivation tag")
    description: str = Field(default="", max_length=2000, description="Motivation details")
    is_known: bool = Field(default=False, description="Revealed to the party?")
    times_used: Annotated[int, Field(ge=0, description="Known-use counter")] = 0

    @property
    def used(self) -> bool:
        """Whether the party has leaned on this motivation at least once."""
        return self.times_used > 0


class Pitfall(BaseModel):
    """A topic that turns the NPC against the party.

    Attributes:
        description: What sets the NPC off.
        is_known: Whether the party has uncovered it.
    """

    model_config = ConfigDict(extra="forbid")

    description: str = Field(min_length=1, max_length=2000, description="Pitfall details")
    is_known: bool = Field(default=False, description="Revealed to the party?")


# =============================================================================
# Arguments
# =============================================================================


class Argument(BaseModel):
    """A recorded argument in the negotiation ledger.

    The deltas are the values the argument resolved to before clamping,
    so the ledger can be replayed against the starting counters.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique argument ID")
    argument_type: ArgumentType = Field(description="What the argument leans on")
    tier: NegotiationTier = Field(description="Test result tier")
    description: str = Field(min_length=1, max_length=2000, description="What was argued")
    motivation_type: MotivationType | None = Field(default=None, description="Motivation appealed to")
    interest_change: int = Field(description="Signed Interest delta")
    patience_change: int = Field(description="Signed Patience delta")
    player_name: str | None = Field(default=None, max_length=100, description="Who argued")
    notes: str | None = Field(default=None, max_length=2000, description="Director notes")
    created_at: datetime = Field(default_factory=datetime.now, description="When recorded")


class ArgumentInput(BaseModel):
    """Request to apply an argument.

    ``tier`` is a strict int with no range check, so an out-of-range tier
    reaches the engine and is reported as a ValidationError there. Omitted
    deltas are filled from the engine's effect policy.
    """

    model_config = ConfigDict(extra="forbid")

    tier: StrictInt
    description: str
    argument_type: ArgumentType | None = None
    motivation_type: MotivationType | None = None
    interest_change: int | None = None
    patience_change: int | None = None
    player_name: str | None = None
    notes: str | None = None


# =============================================================================
# Session Aggregate
# =============================================================================


class NegotiationSession(BaseModel):
    """Complete state of one negotiation between the party and an NPC.

    Attributes:
        id: Unique negotiation identifier.
        name: Display name of the encounter.
        description: Optional encounter description.
        npc_name: The NPC being negotiated with.
        status: Lifecycle status.
        interest: Current Interest (0-5).
        patience: Current Patience (0 to patience_cap).
        patience_cap: Upper bound for Patience, fixed at creation.
        starting_interest: Interest at creation, the seed for ledger replay.
        starting_patience: Patience at creation, the seed for ledger replay.
        motivations: NPC motivations in display order.
        pitfalls: NPC pitfalls in display order.
        arguments: Append-only argument ledger in application order.
        outcome: Final outcome, set once at completion.
        created_at: When the negotiation was created.
        updated_at: When the negotiation last changed.
        completed_at: When the negotiation completed.
    """

    model_config = ConfigDict(extra="forbid")

    id: UUID = Field(default_factory=uuid4, description="Unique negotiation ID")
    name: str = Field(min_length=1, max_length=200, description="Encounter name")
    description: str | None = Field(default=None, max_length=5000, description="Encounter description")
    npc_name: str = Field(min_length=1, max_length=200, description="NPC name")
    status: NegotiationStatus = Field(default=NegotiationStatus.PREPARING, description="Status")
    interest: int = Field(ge=MIN_INTEREST, le=MAX_INTEREST, description="Current Interest")
    patience: int = Field(ge=MIN_PATIENCE, description="Current Patience")
    patience_cap: int = Field(ge=1, description="Maximum Patience")
    starting_interest: int | None = Field(default=None, ge=MIN_INTEREST, le=MAX_INTEREST)
    starting_patience: int | None = Field(default=None, ge=MIN_PATIENCE)
    motivations: list[Motivation] = Field(default_factory=list, description="NPC motivations")
    pitfalls: list[Pitfall] = Field(default_factory=list, description="NPC pitfalls")
    arguments: list[Argument] = Field(default_factory=list, description="Argument ledger")
    outcome: NegotiationOutcome | None = Field(default=None, description="Final outcome")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation time")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last update time")
    completed_at: datetime | None = Field(default=None, description="Completion time")

    @model_validator(mode="after")
    def check_invariants(self) -> "NegotiationSession":
        """Reject snapshots that break the session invariants."""
        if self.patience > self.patience_cap:
            raise ValueError(
                f"patience ({self.patience}) exceeds patience_cap ({self.patience_cap})"
            )
        if self.starting_interest is None:
            self.starting_interest = self.interest
        if self.starting_patience is None:
            self.starting_patience = self.patience
        if self.starting_patience > self.patience_cap:
            raise ValueError("starting_patience exceeds patience_cap")

        completed = self.status is NegotiationStatus.COMPLETED
        if completed != (self.outcome is not None):
            raise ValueError("outcome must be set exactly when the negotiation is completed")
        if completed != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when the negotiation is completed")

        types = [m.type for m in self.motivations]
        if len(types) != len(set(types)):
            raise ValueError("motivation types must be unique within a negotiation")
        return self

    @property
    def interest_percent(self) -> float:
        """Interest as a percentage of its maximum (0-100)."""
        return self.interest / MAX_INTEREST * 100

    @property
    def patience_percent(self) -> float:
        """Patience as a percentage of its cap (0-100)."""
        return self.patience / self.patience_cap * 100

    def unused_motivations(self) -> list[Motivation]:
        """Motivations the party has not leaned on yet."""
        return [m for m in self.motivations if not m.used]

    def summary(self) -> NegotiationSummary:
        """Project the fields the narrative history may read.

        Returns:
            Frozen summary of id, name, description and outcome.
        """
        return NegotiationSummary(
            id=self.id,
            name=self.name,
            description=self.description,
            outcome=self.outcome,
        )


class NegotiationSummary(BaseModel):
    """Read-only projection of a negotiation for campaign history."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    name: str
    description: str | None = None
    outcome: NegotiationOutcome | None = None


# =============================================================================
# Creation
# =============================================================================


class MotivationInput(BaseModel):
    """Motivation as entered during setup."""

    model_config = ConfigDict(extra="forbid")

    type: MotivationType
    description: str = ""
    is_known: bool = False


class PitfallInput(BaseModel):
    """Pitfall as entered during setup."""

    model_config = ConfigDict(extra="forbid")

    description: str
    is_known: bool = False


class CreateNegotiationInput(BaseModel):
    """Input for creating a new negotiation.

    Counter fields left as None fall back to the configured rules.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    npc_name: str
    description: str | None = None
    motivations: list[MotivationInput] = Field(default_factory=list)
    pitfalls: list[PitfallInput] = Field(default_factory=list)
    interest: int | None = None
    patience: int | None = None
    patience_cap: int | None = None


def create_negotiation(
    data: CreateNegotiationInput,
    *,
    rules: NegotiationRules | None = None,
) -> NegotiationSession:
    """Create a negotiation in the preparing state.

    Args:
        data: Setup entered by the director.
        rules: Rules supplying default counters. Defaults to configured rules.

    Returns:
        A new NegotiationSession.

    Raises:
        ValidationError: If the setup would break a session invariant.
    """
    if rules is None:
        from negotiation_engine.core.config import get_settings

        rules = get_settings().rules

    for field_name in ("name", "npc_name"):
        if not getattr(data, field_name).strip():
            raise ValidationError(f"{field_name} must not be empty", field_name=field_name)

    patience_cap = data.patience_cap if data.patience_cap is not None else rules.patience_cap
    interest = data.interest if data.interest is not None else rules.default_interest
    patience = data.patience if data.patience is not None else min(rules.default_patience, patience_cap)

    if patience_cap < 1:
        raise ValidationError(
            "patience_cap must be at least 1",
            field_name="patience_cap",
            invalid_value=patience_cap,
        )
    if not MIN_INTEREST <= interest <= MAX_INTEREST:
        raise ValidationError(
            f"interest must be between {MIN_INTEREST} and {MAX_INTEREST}",
            field_name="interest",
            invalid_value=interest,
        )
    if not 1 <= patience <= patience_cap:
        raise ValidationError(
            f"patience must be between 1 and {patience_cap}",
            field_name="patience",
            invalid_value=patience,
        )

    seen: set[MotivationType] = set()
    for motivation in data.motivations:
        if motivation.type in seen:
            raise ValidationError(
                "Duplicate motivation type",
                field_name="motivations",
                invalid_value=motivation.type.value,
            )
        seen.add(motivation.type)

    for index, pitfall in enumerate(data.pitfalls):
        if not pitfall.description.strip():
            raise ValidationError(
                "Pitfall description must not be empty",
                field_name="pitfalls",
                invalid_value=index,
            )

    now = datetime.now()
    try:
        return NegotiationSession(
            name=data.name.strip(),
            description=data.description,
            npc_name=data.npc_name.strip(),
            interest=interest,
            patience=patience,
            patience_cap=patience_cap,
            starting_interest=interest,
            starting_patience=patience,
            motivations=[
                Motivation(type=m.type, description=m.description, is_known=m.is_known)
                for m in data.motivations
            ],
            pitfalls=[
                Pitfall(description=p.description.strip(), is_known=p.is_known)
                for p in data.pitfalls
            ],
            created_at=now,
            updated_at=now,
        )
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid negotiation setup",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


def session_from_dict(data: dict[str, Any]) -> NegotiationSession:
    """Rebuild a session from a serialized snapshot.

    Args:
        data: Output of ``NegotiationSession.model_dump``.

    Returns:
        The validated session.

    Raises:
        ValidationError: If the snapshot breaks a session invariant.
    """
    try:
        return NegotiationSession.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid negotiation snapshot",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


__all__ = [
    "Motivation",
    "Pitfall",
    "Argument",
    "ArgumentInput",
    "NegotiationSession",
    "NegotiationSummary",
    "MotivationInput",
    "PitfallInput",
    "CreateNegotiationInput",
    "create_negotiation",
    "session_from_dict",
]
