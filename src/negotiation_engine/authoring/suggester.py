"""LLM-backed argument suggestions for the game director.

The suggester reads a negotiation the way the party sees it and asks an
OpenAI-compatible chat model (OpenRouter by default) for candidate
arguments. Proposals are advisory: one is applied only when the director
turns it into an ArgumentInput and hands it to the engine, exactly like
an argument typed in by hand.
"""

from __future__ import annotations

import json
from typing import Any

from openai import APIConnectionError, APIStatusError, OpenAI, RateLimitError
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from negotiation_engine.authoring.prompts import build_system_prompt, build_user_prompt
from negotiation_engine.core.config import get_settings
from negotiation_engine.core.constants import MAX_TIER, MIN_TIER
from negotiation_engine.core.exceptions import (
    AIConnectionError,
    AIControlError,
    AIRateLimitError,
    AIResponseError,
    ConfigurationError,
    InvalidStateError,
)
from negotiation_engine.core.logging import get_logger
from negotiation_engine.models.enums import ArgumentType, MotivationType, NegotiationStatus
from negotiation_engine.models.negotiation import ArgumentInput, NegotiationSession


logger = get_logger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


# =============================================================================
# Proposals
# =============================================================================


class ArgumentProposal(BaseModel):
    """A suggested argument, not yet applied.

    Attributes:
        tier: Tier the director expects the test to land on.
        argument_type: What the argument leans on.
        motivation_type: Motivation appealed to, for motivation arguments.
        description: What the character says.
        interest_change: Explicit Interest delta, if the director wants one.
        patience_change: Explicit Patience delta, if the director wants one.
        rationale: Why the model thinks it could work.
    """

    model_config = ConfigDict(extra="ignore")

    tier: int = Field(ge=MIN_TIER, le=MAX_TIER)
    argument_type: ArgumentType
    motivation_type: MotivationType | None = None
    description: str = Field(min_length=1, max_length=2000)
    interest_change: int | None = None
    patience_change: int | None = None
    rationale: str = ""

    def to_input(self, player_name: str | None = None) -> ArgumentInput:
        """Turn the proposal into an engine request.

        Args:
            player_name: Character making the argument.

        Returns:
            ArgumentInput ready for ``NegotiationEngine.apply_argument``.
        """
        return ArgumentInput(
            tier=self.tier,
            description=self.description,
            argument_type=self.argument_type,
            motivation_type=self.motivation_type,
            interest_change=self.interest_change,
            patience_change=self.patience_change,
            player_name=player_name,
            notes=self.rationale or None,
        )


def parse_proposals(text: str) -> list[ArgumentProposal]:
    """Parse a model reply into proposals.

    Accepts ``{"proposals": [...]}`` or a bare list, optionally wrapped in
    a markdown code fence.

    Raises:
        AIResponseError: If the reply is not valid proposal JSON.
    """
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AIResponseError(
            f"Failed to parse JSON from model response: {exc}",
            details={"response_preview": text[:500]},
        ) from exc

    if isinstance(payload, dict):
        payload = payload.get("proposals")
    if not isinstance(payload, list):
        raise AIResponseError(
            "Model response has no proposal list",
            details={"response_preview": text[:500]},
        )

    try:
        return [ArgumentProposal.model_validate(item) for item in payload]
    except PydanticValidationError as exc:
        raise AIResponseError(
            "Model proposed a malformed argument",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


# =============================================================================
# Suggester
# =============================================================================


class ArgumentSuggester:
    """Asks a chat model for arguments the party could make.

    Attributes:
        model: Chat model identifier.
        temperature: Sampling temperature.
        max_retries: Attempts on transient connection failures.
        provider: "openrouter" or "openai".
    """

    def __init__(
        self,
        *,
        client: Any = None,
        model: str | None = None,
        temperature: float | None = None,
        max_retries: int | None = None,
        provider: str | None = None,
    ) -> None:
        """Initialize the suggester.

        Args:
            client: OpenAI-compatible client. Created lazily from settings if None.
            model: Model identifier. Defaults to settings.
            temperature: Sampling temperature. Defaults to settings.
            max_retries: Attempts on connection failures. Defaults to settings.
            provider: Provider name. Defaults to settings.
        """
        ai = get_settings().ai
        self.model = model or ai.model
        self.temperature = temperature if temperature is not None else ai.temperature
        self.max_retries = max_retries if max_retries is not None else ai.max_retries
        self.provider = provider or ai.default_provider
        self._client = client

    def _get_client(self) -> Any:
        """Get or create the OpenAI client."""
        if self._client is None:
            ai = get_settings().ai

            if self.provider == "openrouter":
                api_key = ai.openrouter_api_key
                if not api_key:
                    raise ConfigurationError(
                        "OpenRouter API key is not configured",
                        config_key="openrouter_api_key",
                    )
                self._client = OpenAI(
                    api_key=api_key.get_secret_value(),
                    base_url=OPENROUTER_BASE_URL,
                    timeout=ai.timeout_seconds,
                    default_headers={
                        "HTTP-Referer": "https://github.com/negotiation-engine",
                        "X-Title": "Negotiation Engine",
                    },
                )
            else:
                api_key = ai.openai_api_key
                if not api_key:
                    raise ConfigurationError(
                        "OpenAI API key is not configured",
                        config_key="openai_api_key",
                    )
                self._client = OpenAI(api_key=api_key.get_secret_value(), timeout=ai.timeout_seconds)

        return self._client

    def _complete(self, system_prompt: str, user_message: str) -> str:
        """Call the chat API, retrying transient connection failures."""
        client = self._get_client()
        retrying = Retrying(
            retry=retry_if_exception_type((APIConnectionError, ConnectionError, TimeoutError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=2, max=10),
        )

        try:
            for attempt in retrying:
                with attempt:
                    response = client.chat.completions.create(
                        model=self.model,
                        messages=[
                            {"role": "system", "content": system_prompt},
                            {"role": "user", "content": user_message},
                        ],
                        temperature=self.temperature,
                        max_tokens=1024,
                    )
        except RetryError as exc:
            cause = exc.last_attempt.exception()
            raise AIConnectionError(
                f"Failed to connect to AI provider: {cause}",
                model=self.model,
                provider=self.provider,
                details={"attempts": self.max_retries},
            ) from cause
        except RateLimitError as exc:
            retry_after = exc.response.headers.get("retry-after") if exc.response is not None else None
            raise AIRateLimitError(
                "AI provider rate limit exceeded",
                retry_after_seconds=float(retry_after) if retry_after else None,
                model=self.model,
                provider=self.provider,
            ) from exc
        except APIStatusError as exc:
            raise AIControlError(
                f"AI API error: {exc}",
                model=self.model,
                provider=self.provider,
                details={"status_code": exc.status_code},
            ) from exc

        content = response.choices[0].message.content
        if not content:
            raise AIResponseError("Model returned an empty response", model=self.model, provider=self.provider)
        return content

    def suggest(self, session: NegotiationSession, *, count: int = 3) -> list[ArgumentProposal]:
        """Propose arguments for the party's next move.

        Proposals that appeal to a motivation the party does not know are
        dropped.

        Args:
            session: The negotiation, preparing or active.
            count: Number of proposals to ask for.

        Returns:
            Proposals, at most ``count``.

        Raises:
            InvalidStateError: If the negotiation is completed.
            AIConnectionError: If the provider cannot be reached.
            AIRateLimitError: If the provider rate-limits the request.
            AIResponseError: If the reply cannot be parsed.
        """
        if session.status is NegotiationStatus.COMPLETED:
            raise InvalidStateError(
                "Cannot suggest arguments for a completed negotiation",
                current_state=session.status.value,
                expected_states=[NegotiationStatus.PREPARING.value, NegotiationStatus.ACTIVE.value],
            )

        logger.debug("Requesting argument suggestions", negotiation_id=str(session.id), model=self.model)
        reply = self._complete(build_system_prompt(), build_user_prompt(session, count))

        known = {m.type for m in session.motivations if m.is_known}
        proposals: list[ArgumentProposal] = []
        for proposal in parse_proposals(reply):
            if proposal.motivation_type is not None and proposal.motivation_type not in known:
                logger.warning(
                    "Dropping proposal for an unknown motivation",
                    motivation=proposal.motivation_type.value,
                )
                continue
            proposals.append(proposal)

        logger.info(
            "Argument suggestions received",
            negotiation_id=str(session.id),
            proposals=len(proposals),
        )
        return proposals[:count]


__all__ = [
    "OPENROUTER_BASE_URL",
    "ArgumentProposal",
    "ArgumentSuggester",
    "parse_proposals",
]
