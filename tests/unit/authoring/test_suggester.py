"""Tests for the LLM argument suggester."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any

import httpx
import pytest
from openai import APIConnectionError, RateLimitError

from negotiation_engine.authoring import (
    ArgumentProposal,
    ArgumentSuggester,
    build_user_prompt,
    parse_proposals,
)
from negotiation_engine.core.exceptions import (
    AIConnectionError,
    AIRateLimitError,
    AIResponseError,
    ConfigurationError,
    InvalidStateError,
)
from negotiation_engine.engine import NegotiationEngine
from negotiation_engine.models import ArgumentType, MotivationType


class FakeCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, replies: list[Any]) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    """Minimal OpenAI-compatible client."""

    def __init__(self, *replies: Any) -> None:
        self.completions = FakeCompletions(list(replies))
        self.chat = SimpleNamespace(completions=self.completions)


def proposals_json(*items: dict[str, Any]) -> str:
    return json.dumps({"proposals": list(items)})


GREED_PROPOSAL = {
    "tier": 2,
    "argument_type": "motivation",
    "motivation_type": "legacy",
    "description": "Your name on the bridge",
    "rationale": "He wants to be remembered",
}


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    """Skip retry back-off waits."""
    monkeypatch.setattr("time.sleep", lambda seconds: None)


class TestParseProposals:
    """Tests for parsing model replies."""

    def test_object_reply(self) -> None:
        """Test the documented object form."""
        proposals = parse_proposals(proposals_json(GREED_PROPOSAL))

        assert len(proposals) == 1
        assert proposals[0].motivation_type is MotivationType.LEGACY

    def test_fenced_list_reply(self) -> None:
        """Test a bare list inside a markdown fence."""
        text = "```json\n" + json.dumps([GREED_PROPOSAL]) + "\n```"

        assert parse_proposals(text)[0].tier == 2

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            '{"suggestions": []}',
            proposals_json({**GREED_PROPOSAL, "tier": 7}),
            proposals_json({**GREED_PROPOSAL, "argument_type": "bribe"}),
        ],
    )
    def test_malformed(self, text: str) -> None:
        """Test malformed replies raise AIResponseError."""
        with pytest.raises(AIResponseError):
            parse_proposals(text)


class TestArgumentProposal:
    """Tests for turning proposals into engine input."""

    def test_to_input(self) -> None:
        """Test the proposal maps onto ArgumentInput."""
        proposal = ArgumentProposal.model_validate(GREED_PROPOSAL)

        data = proposal.to_input(player_name="Ilsa")

        assert data.tier == 2
        assert data.argument_type is ArgumentType.MOTIVATION
        assert data.player_name == "Ilsa"
        assert data.notes == "He wants to be remembered"
        assert data.interest_change is None

    def test_engine_accepts_proposal(self, active_engine: NegotiationEngine) -> None:
        """Test an accepted proposal applies like any other argument."""
        active_engine.reveal_motivation(MotivationType.LEGACY)
        proposal = ArgumentProposal.model_validate(GREED_PROPOSAL)

        result = active_engine.apply_argument(proposal.to_input())

        assert (result.interest, result.patience) == (3, 4)


class TestPrompt:
    """Tests for the negotiation prompt."""

    def test_hides_concealed_traits(self, active_engine: NegotiationEngine) -> None:
        """Test concealed trait details never reach the prompt."""
        active_engine.reveal_motivation(MotivationType.LEGACY)

        prompt = build_user_prompt(active_engine.session, count=3)

        assert "Wants his house remembered" in prompt
        assert "bridge tolls" not in prompt
        assert "late brother" not in prompt
        assert "2 motivation(s) the party has not uncovered" in prompt
        assert "2 pitfall(s) the party has not uncovered" in prompt
        assert "Interest: 2/5" in prompt

    def test_lists_recent_arguments(self, active_engine: NegotiationEngine) -> None:
        """Test recent ledger entries are included."""
        from negotiation_engine.models import ArgumentInput

        active_engine.apply_argument(ArgumentInput(tier=3, description="We come in peace"))

        prompt = build_user_prompt(active_engine.session, count=1)

        assert "We come in peace" in prompt
        assert "interest +1" in prompt


class TestArgumentSuggester:
    """Tests for ArgumentSuggester."""

    def test_suggest(self, active_engine: NegotiationEngine) -> None:
        """Test proposals come back from the injected client."""
        active_engine.reveal_motivation(MotivationType.LEGACY)
        client = FakeClient(proposals_json(GREED_PROPOSAL))
        suggester = ArgumentSuggester(client=client, model="test-model")

        proposals = suggester.suggest(active_engine.session, count=2)

        assert [p.description for p in proposals] == ["Your name on the bridge"]
        call = client.completions.calls[0]
        assert call["model"] == "test-model"
        assert call["messages"][0]["role"] == "system"

    def test_drops_unknown_motivation(self, active_engine: NegotiationEngine) -> None:
        """Test proposals for motivations the party has not uncovered are dropped."""
        client = FakeClient(proposals_json(GREED_PROPOSAL))

        proposals = ArgumentSuggester(client=client).suggest(active_engine.session)

        assert proposals == []

    def test_limits_count(self, active_engine: NegotiationEngine) -> None:
        """Test at most count proposals are returned."""
        plain = {"tier": 1, "argument_type": "no_motivation", "description": "Please"}
        client = FakeClient(proposals_json(plain, plain, plain))

        proposals = ArgumentSuggester(client=client).suggest(active_engine.session, count=2)

        assert len(proposals) == 2

    def test_completed_session_rejected(self, active_engine: NegotiationEngine) -> None:
        """Test suggestions are refused once the negotiation is over."""
        session = active_engine.complete()

        with pytest.raises(InvalidStateError):
            ArgumentSuggester(client=FakeClient()).suggest(session)

    def test_retries_connection_errors(self, active_engine: NegotiationEngine) -> None:
        """Test a transient connection failure is retried."""
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        client = FakeClient(APIConnectionError(request=request), proposals_json())

        proposals = ArgumentSuggester(client=client, max_retries=2).suggest(active_engine.session)

        assert proposals == []
        assert len(client.completions.calls) == 2

    def test_connection_error_after_retries(self, active_engine: NegotiationEngine) -> None:
        """Test persistent connection failures raise AIConnectionError."""
        client = FakeClient(ConnectionError("down"), ConnectionError("down"))

        with pytest.raises(AIConnectionError):
            ArgumentSuggester(client=client, max_retries=2).suggest(active_engine.session)

    def test_rate_limit(self, active_engine: NegotiationEngine) -> None:
        """Test rate limits surface with the retry-after hint."""
        request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
        response = httpx.Response(429, headers={"retry-after": "7"}, request=request)
        client = FakeClient(RateLimitError("slow down", response=response, body=None))

        with pytest.raises(AIRateLimitError) as exc_info:
            ArgumentSuggester(client=client).suggest(active_engine.session)

        assert exc_info.value.details["retry_after_seconds"] == 7.0

    def test_empty_reply(self, active_engine: NegotiationEngine) -> None:
        """Test an empty completion is a response error."""
        with pytest.raises(AIResponseError):
            ArgumentSuggester(client=FakeClient("")).suggest(active_engine.session)

    def test_missing_api_key(self, active_engine: NegotiationEngine, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the lazily built client needs a configured key."""
        monkeypatch.delenv("NEGOTIATION_ENGINE_OPENROUTER_API_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            ArgumentSuggester().suggest(active_engine.session)
