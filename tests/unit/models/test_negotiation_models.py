"""Tests for negotiation session models and the creation factory."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from negotiation_engine.core.config import NegotiationRules
from negotiation_engine.core.exceptions import ValidationError
from negotiation_engine.models import (
    CreateNegotiationInput,
    Motivation,
    MotivationInput,
    MotivationType,
    NegotiationOutcome,
    NegotiationSession,
    NegotiationStatus,
    PitfallInput,
    create_negotiation,
    session_from_dict,
)


class TestCreateNegotiation:
    """Tests for the create_negotiation factory."""

    def test_defaults(self, sample_session: NegotiationSession) -> None:
        """Test a new negotiation starts preparing with default counters."""
        assert sample_session.status is NegotiationStatus.PREPARING
        assert sample_session.interest == 2
        assert sample_session.patience == 5
        assert sample_session.patience_cap == 5
        assert sample_session.starting_interest == 2
        assert sample_session.starting_patience == 5
        assert sample_session.arguments == []
        assert sample_session.outcome is None
        assert sample_session.completed_at is None

    def test_traits_start_concealed(self, sample_session: NegotiationSession) -> None:
        """Test traits default to concealed with zero usage."""
        assert all(not m.is_known for m in sample_session.motivations)
        assert all(m.times_used == 0 for m in sample_session.motivations)
        assert all(not p.is_known for p in sample_session.pitfalls)

    def test_preserves_trait_order(self, sample_session: NegotiationSession) -> None:
        """Test motivations keep their setup order."""
        assert [m.type for m in sample_session.motivations] == [
            MotivationType.LEGACY,
            MotivationType.WEALTH,
            MotivationType.PROTECTION,
        ]

    def test_custom_counters(self) -> None:
        """Test explicit counters override the rules."""
        session = create_negotiation(
            CreateNegotiationInput(name="Toll", npc_name="Ferryman", interest=4, patience=2, patience_cap=3)
        )

        assert session.interest == 4
        assert session.patience == 2
        assert session.patience_cap == 3

    def test_rules_supply_defaults(self) -> None:
        """Test injected rules are used for omitted counters."""
        rules = NegotiationRules(default_interest=1, default_patience=3, patience_cap=4)

        session = create_negotiation(CreateNegotiationInput(name="Toll", npc_name="Ferryman"), rules=rules)

        assert (session.interest, session.patience, session.patience_cap) == (1, 3, 4)

    def test_initially_known_traits(self) -> None:
        """Test traits can be entered as already known."""
        session = create_negotiation(
            CreateNegotiationInput(
                name="Toll",
                npc_name="Ferryman",
                motivations=[MotivationInput(type=MotivationType.GREED, is_known=True)],
                pitfalls=[PitfallInput(description="The drowned", is_known=True)],
            )
        )

        assert session.motivations[0].is_known is True
        assert session.pitfalls[0].is_known is True

    @pytest.mark.parametrize(
        ("overrides", "field_name"),
        [
            ({"name": "  "}, "name"),
            ({"npc_name": ""}, "npc_name"),
            ({"interest": 6}, "interest"),
            ({"interest": -1}, "interest"),
            ({"patience": 0}, "patience"),
            ({"patience": 6}, "patience"),
            ({"patience_cap": 0}, "patience_cap"),
        ],
    )
    def test_invalid_setup(self, overrides: dict[str, Any], field_name: str) -> None:
        """Test setups that would break an invariant are rejected."""
        data = {"name": "Toll", "npc_name": "Ferryman", **overrides}

        with pytest.raises(ValidationError) as exc_info:
            create_negotiation(CreateNegotiationInput(**data))

        assert exc_info.value.details["field_name"] == field_name

    def test_duplicate_motivation_rejected(self) -> None:
        """Test a motivation type may appear only once."""
        data = CreateNegotiationInput(
            name="Toll",
            npc_name="Ferryman",
            motivations=[
                MotivationInput(type=MotivationType.GREED),
                MotivationInput(type=MotivationType.GREED),
            ],
        )

        with pytest.raises(ValidationError):
            create_negotiation(data)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": "n" * 201},
            {"npc_name": "v" * 201},
            {"description": "d" * 5001},
            {"motivations": [MotivationInput(type=MotivationType.GREED, description="g" * 2001)]},
        ],
    )
    def test_oversized_text_rejected(self, overrides: dict[str, Any]) -> None:
        """Test text over the session limits raises the package ValidationError."""
        data = CreateNegotiationInput(**{"name": "Toll", "npc_name": "Ferryman", **overrides})

        with pytest.raises(ValidationError) as exc_info:
            create_negotiation(data)

        assert exc_info.value.details["errors"]

    def test_empty_pitfall_rejected(self) -> None:
        """Test pitfalls need a description."""
        data = CreateNegotiationInput(
            name="Toll",
            npc_name="Ferryman",
            pitfalls=[PitfallInput(description=" ")],
        )

        with pytest.raises(ValidationError):
            create_negotiation(data)


class TestNegotiationSession:
    """Tests for NegotiationSession invariants and helpers."""

    def test_patience_above_cap_invalid(self, sample_session: NegotiationSession) -> None:
        """Test patience cannot exceed its cap."""
        data = sample_session.model_dump()
        data["patience"] = 6

        with pytest.raises(ValidationError):
            session_from_dict(data)

    def test_outcome_requires_completion(self, sample_session: NegotiationSession) -> None:
        """Test an outcome on a non-completed session is invalid."""
        data = sample_session.model_dump()
        data["outcome"] = NegotiationOutcome.ALLIANCE

        with pytest.raises(ValidationError):
            session_from_dict(data)

    def test_completed_requires_outcome(self, sample_session: NegotiationSession) -> None:
        """Test a completed session must carry outcome and completion time."""
        data = sample_session.model_dump()
        data["status"] = NegotiationStatus.COMPLETED
        data["completed_at"] = datetime.now()

        with pytest.raises(ValidationError):
            session_from_dict(data)

    def test_round_trip(self, sample_session: NegotiationSession) -> None:
        """Test a dumped session validates back to an equal session."""
        restored = session_from_dict(sample_session.model_dump(mode="json"))

        assert restored == sample_session

    def test_percentages(self, sample_session: NegotiationSession) -> None:
        """Test counter percentages for display."""
        assert sample_session.interest_percent == pytest.approx(40.0)
        assert sample_session.patience_percent == pytest.approx(100.0)

    def test_summary_projection(self, sample_session: NegotiationSession) -> None:
        """Test the summary exposes only id, name, description and outcome."""
        summary = sample_session.summary()

        assert summary.id == sample_session.id
        assert summary.name == sample_session.name
        assert summary.outcome is None
        assert set(type(summary).model_fields) == {"id", "name", "description", "outcome"}

    def test_motivation_used_flag(self) -> None:
        """Test a motivation counts as used once times_used is positive."""
        motivation = Motivation(type=MotivationType.PEACE, is_known=True, times_used=1)

        assert motivation.used is True
        assert Motivation(type=MotivationType.FREEDOM).used is False

    def test_unused_motivations(self, sample_session: NegotiationSession) -> None:
        """Test a fresh session has every motivation unused."""
        assert sample_session.unused_motivations() == sample_session.motivations
