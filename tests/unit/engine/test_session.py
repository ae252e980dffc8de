"""Tests for the negotiation session state machine."""

from __future__ import annotations

import random

import pytest

from negotiation_engine.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from negotiation_engine.engine import DrawSteelEffects, NegotiationEngine
from negotiation_engine.models import (
    ArgumentInput,
    CreateNegotiationInput,
    MotivationInput,
    MotivationType,
    NegotiationOutcome,
    NegotiationSession,
    NegotiationStatus,
    create_negotiation,
)


def make_engine(interest: int = 2, patience: int = 5, patience_cap: int = 5) -> NegotiationEngine:
    """Build an active engine with given counters."""
    session = create_negotiation(
        CreateNegotiationInput(
            name="Toll",
            npc_name="Ferryman",
            motivations=[MotivationInput(type=MotivationType.GREED)],
            interest=interest,
            patience=patience,
            patience_cap=patience_cap,
        )
    )
    engine = NegotiationEngine(session, effects=DrawSteelEffects())
    engine.start()
    return engine


def neutral(description: str = "x", **deltas: int) -> ArgumentInput:
    return ArgumentInput(
        tier=2,
        description=description,
        interest_change=deltas.get("interest", 0),
        patience_change=deltas.get("patience", 0),
    )


class TestLifecycle:
    """Tests for status transitions."""

    def test_start(self, engine: NegotiationEngine) -> None:
        """Test start moves preparing to active."""
        snapshot = engine.start()

        assert snapshot.status is NegotiationStatus.ACTIVE
        assert engine.status is NegotiationStatus.ACTIVE

    def test_start_twice(self, active_engine: NegotiationEngine) -> None:
        """Test starting an active negotiation fails."""
        with pytest.raises(InvalidStateError) as exc_info:
            active_engine.start()

        assert exc_info.value.details["current_state"] == "active"
        assert exc_info.value.details["expected_states"] == ["preparing"]

    def test_complete_resolves_outcome(self) -> None:
        """Test complete freezes the outcome for the current Interest."""
        engine = make_engine(interest=4)

        snapshot = engine.complete()

        assert snapshot.status is NegotiationStatus.COMPLETED
        assert snapshot.outcome is NegotiationOutcome.MAJOR_FAVOR
        assert snapshot.completed_at is not None

    def test_complete_from_preparing(self, engine: NegotiationEngine) -> None:
        """Test a negotiation must be active to complete."""
        with pytest.raises(InvalidStateError):
            engine.complete()

    def test_complete_twice(self) -> None:
        """Test the outcome is write-once."""
        engine = make_engine(interest=5)
        first = engine.complete()

        with pytest.raises(InvalidStateError):
            engine.complete()

        assert engine.outcome is NegotiationOutcome.ALLIANCE
        assert engine.session.completed_at == first.completed_at

    def test_start_after_completion(self) -> None:
        """Test there is no way back from completed."""
        engine = make_engine()
        engine.complete()

        with pytest.raises(InvalidStateError):
            engine.start()

    def test_extremes_do_not_autocomplete(self) -> None:
        """Test reaching Interest 0 or 5 leaves the negotiation active."""
        engine = make_engine(interest=4)
        engine.apply_argument(neutral(interest=3))

        assert engine.interest == 5
        assert engine.status is NegotiationStatus.ACTIVE

        engine.apply_argument(neutral(interest=-9))
        assert engine.interest == 0
        assert engine.status is NegotiationStatus.ACTIVE


class TestForcedTermination:
    """Tests for completion by exhausted Patience."""

    def test_patience_exhaustion_fails(self) -> None:
        """Test the last Patience point ends the negotiation as a failure."""
        engine = make_engine(interest=5, patience=1)

        result = engine.apply_argument(neutral(patience=-1))

        assert result.patience_exhausted is True
        assert result.completed is True
        assert result.session.status is NegotiationStatus.COMPLETED
        assert result.session.outcome is NegotiationOutcome.FAILURE
        assert result.session.completed_at is not None

    def test_complete_after_exhaustion(self) -> None:
        """Test the forced path cannot be followed by complete."""
        engine = make_engine(patience=1)
        engine.apply_argument(neutral(patience=-1))

        with pytest.raises(InvalidStateError):
            engine.complete()

        assert engine.outcome is NegotiationOutcome.FAILURE

    def test_exhaustion_argument_recorded(self) -> None:
        """Test the argument that exhausted Patience is in the ledger."""
        engine = make_engine(patience=1)
        engine.apply_argument(neutral("last straw", patience=-1))

        assert [a.description for a in engine.arguments] == ["last straw"]


class TestIllegalOperations:
    """Tests for operations rejected by status."""

    @pytest.mark.parametrize("finish", [False, True])
    def test_argument_outside_active(self, engine: NegotiationEngine, finish: bool) -> None:
        """Test arguments on preparing or completed sessions leave state untouched."""
        if finish:
            engine.start()
            engine.complete()
        before = engine.session

        with pytest.raises(InvalidStateError):
            engine.apply_argument(neutral(interest=1))

        after = engine.session
        assert (after.interest, after.patience) == (before.interest, before.patience)
        assert after.arguments == before.arguments

    def test_reveal_outside_active(self, engine: NegotiationEngine) -> None:
        """Test reveals require an active negotiation."""
        with pytest.raises(InvalidStateError):
            engine.reveal_motivation(MotivationType.LEGACY)
        with pytest.raises(InvalidStateError):
            engine.reveal_pitfall(0)

    def test_invalid_argument_no_partial_state(self, active_engine: NegotiationEngine) -> None:
        """Test a malformed argument changes nothing."""
        before = active_engine.session

        with pytest.raises(ValidationError):
            active_engine.apply_argument(ArgumentInput(tier=4, description="x"))
        with pytest.raises(ValidationError):
            active_engine.apply_argument(
                ArgumentInput(tier=2, description="x", motivation_type=MotivationType.VENGEANCE)
            )

        assert active_engine.session == before

    def test_oversized_description_no_partial_state(self, active_engine: NegotiationEngine) -> None:
        """Test an over-long description is a ValidationError that leaves the session alone."""
        before = active_engine.session

        with pytest.raises(ValidationError):
            active_engine.apply_argument(ArgumentInput(tier=2, description="x" * 2001))

        assert active_engine.session == before
        assert active_engine.arguments == ()
        assert (active_engine.interest, active_engine.patience) == (before.interest, before.patience)


class TestConcealment:
    """Tests for revealing traits through the engine."""

    def test_reveal_motivation(self, active_engine: NegotiationEngine) -> None:
        """Test a revealed motivation is listed as known."""
        active_engine.reveal_motivation(MotivationType.LEGACY)

        known = active_engine.list_known()
        assert [m.type for m in known.motivations] == [MotivationType.LEGACY]
        assert len(active_engine.list_concealed().motivations) == 2

    def test_reveal_twice_is_idempotent(self, active_engine: NegotiationEngine) -> None:
        """Test revealing a known motivation again has no observable effect."""
        once = active_engine.reveal_motivation(MotivationType.WEALTH)
        twice = active_engine.reveal_motivation(MotivationType.WEALTH)

        assert twice == once

    def test_reveal_missing_trait(self, active_engine: NegotiationEngine) -> None:
        """Test revealing traits the NPC lacks raises NotFoundError."""
        with pytest.raises(NotFoundError):
            active_engine.reveal_motivation(MotivationType.VENGEANCE)
        with pytest.raises(NotFoundError):
            active_engine.reveal_pitfall(7)

    def test_reveal_pitfall_by_description(self, active_engine: NegotiationEngine) -> None:
        """Test pitfalls can be revealed by description."""
        snapshot = active_engine.reveal_pitfall("Questioning his courage")

        assert [p.is_known for p in snapshot.pitfalls] == [False, True]

    def test_reveal_does_not_touch_counters(self, active_engine: NegotiationEngine) -> None:
        """Test revealing is narratively free."""
        active_engine.reveal_motivation(MotivationType.LEGACY)
        active_engine.reveal_pitfall(0)

        assert (active_engine.interest, active_engine.patience) == (2, 5)

    def test_concealment_is_monotonic(self, active_engine: NegotiationEngine) -> None:
        """Test a revealed motivation stays known through later operations."""
        active_engine.reveal_motivation(MotivationType.LEGACY)
        for tier in (1, 2, 3):
            active_engine.apply_argument(
                ArgumentInput(tier=tier, description="x", motivation_type=MotivationType.LEGACY)
            )
        active_engine.complete()

        legacy = next(m for m in active_engine.session.motivations if m.type is MotivationType.LEGACY)
        assert legacy.is_known is True
        assert legacy.times_used == 3


class TestArguments:
    """Tests for applying arguments."""

    def test_draw_steel_effects(self, active_engine: NegotiationEngine) -> None:
        """Test omitted deltas come from the effect table."""
        active_engine.reveal_motivation(MotivationType.WEALTH)

        result = active_engine.apply_argument(
            ArgumentInput(tier=3, description="A share of the tolls", motivation_type="wealth")
        )

        assert (result.interest, result.patience) == (3, 5)
        assert result.completed is False

    def test_ledger_is_append_only(self, active_engine: NegotiationEngine) -> None:
        """Test earlier entries never change and the length grows by one."""
        first = active_engine.apply_argument(neutral("one", interest=1)).argument
        active_engine.apply_argument(neutral("two", interest=-1))

        arguments = active_engine.arguments
        assert len(arguments) == 2
        assert arguments[0] == first

    def test_snapshots_are_isolated(self, active_engine: NegotiationEngine) -> None:
        """Test mutating a snapshot does not reach the engine."""
        snapshot = active_engine.session
        snapshot.motivations[0].is_known = True
        snapshot.interest = 5

        assert active_engine.session.motivations[0].is_known is False
        assert active_engine.interest == 2

    def test_engine_copies_input_session(self, sample_session: NegotiationSession) -> None:
        """Test the engine does not mutate the session it was given."""
        engine = NegotiationEngine(sample_session)
        engine.start()

        assert sample_session.status is NegotiationStatus.PREPARING


class TestProperties:
    """Randomized checks over argument sequences."""

    @pytest.mark.parametrize("seed", range(10))
    def test_bounds_and_ledger(self, seed: int) -> None:
        """Test counters stay in bounds and the ledger counts successful arguments."""
        rng = random.Random(seed)
        engine = make_engine(interest=rng.randint(0, 5), patience=5, patience_cap=5)
        applied = 0

        while engine.status is NegotiationStatus.ACTIVE:
            engine.apply_argument(
                neutral(interest=rng.randint(-3, 3), patience=rng.randint(-2, 1))
            )
            applied += 1

            assert 0 <= engine.interest <= 5
            assert 0 <= engine.patience <= 5
            assert len(engine.arguments) == applied

        assert engine.outcome is NegotiationOutcome.FAILURE

    @pytest.mark.parametrize("seed", range(5))
    def test_replay_matches(self, seed: int) -> None:
        """Test replaying the ledger gives the running counters."""
        rng = random.Random(seed)
        engine = make_engine(patience=5, patience_cap=5)

        for _ in range(4):
            engine.apply_argument(neutral(interest=rng.randint(-2, 2), patience=rng.randint(-1, 1)))
            if engine.status is not NegotiationStatus.ACTIVE:
                break

        replayed = engine.replay_counters()
        assert (replayed.interest, replayed.patience) == (engine.interest, engine.patience)
