"""Exception hierarchy for the negotiation engine.

Everything the package raises derives from NegotiationEngineError. The
keyword context each subclass accepts (the offending tier, the session
status, the missing pitfall key) is folded into ``details`` and shown in
``str(exc)``, so a log line or a UI toast carries it without extra work.

Engine errors describe a request the caller must correct. The engine
never retries them and never applies part of an operation before raising.

Example:
    >>> raise InvalidStateError(
    ...     "Cannot apply an argument",
    ...     current_state="preparing",
    ...     expected_states=["active"],
    ... )
"""

from __future__ import annotations

from typing import Any


def _with_context(details: dict[str, Any] | None, **context: Any) -> dict[str, Any]:
    """Merge keyword context into a details dict, skipping unset values."""
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value is not None})
    return merged


class NegotiationEngineError(Exception):
    """Base class for every error raised by the package.

    Attributes:
        message: Human-readable description.
        details: Structured context about the failure.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{context}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Engine errors
# =============================================================================


class ValidationError(NegotiationEngineError):
    """Malformed input to an engine operation.

    A tier outside 1..3, an argument naming a motivation the NPC does not
    have, a missing delta under the manual effect policy, or a session
    setup that would break the counter bounds.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Create a validation error.

        Args:
            message: Human-readable description.
            field_name: Input field that was rejected.
            invalid_value: The rejected value. Falsy values such as 0 are kept.
            details: Extra context.
        """
        super().__init__(
            message,
            details=_with_context(details, field_name=field_name, invalid_value=invalid_value),
        )


class InvalidStateError(NegotiationEngineError):
    """Operation attempted in a session status that forbids it.

    Any write to a completed negotiation lands here, which is what keeps
    its outcome and completion time write-once.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            details=_with_context(details, current_state=current_state, expected_states=expected_states),
        )


class NotFoundError(NegotiationEngineError):
    """A motivation, pitfall or stored negotiation that does not exist."""

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        key: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, resource=resource, key=key))


# =============================================================================
# Infrastructure errors
# =============================================================================


class ConfigurationError(NegotiationEngineError):
    """Settings that cannot be loaded or do not fit together."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, config_key=config_key))


class StorageError(NegotiationEngineError):
    """The SQLite store failed to read or write."""

    def __init__(
        self,
        message: str,
        *,
        db_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, db_path=db_path))


# =============================================================================
# LLM provider errors
# =============================================================================


class AIControlError(NegotiationEngineError):
    """Failure talking to the chat model behind the argument suggester.

    The engine never raises these. A suggestion that failed leaves every
    negotiation exactly as it was.
    """

    def __init__(
        self,
        message: str,
        *,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=_with_context(details, model=model, provider=provider))


class AIConnectionError(AIControlError):
    """The provider could not be reached after retrying."""


class AIResponseError(AIControlError):
    """The model replied with something that is not a proposal list."""


class AIRateLimitError(AIControlError):
    """The provider asked us to slow down.

    ``details["retry_after_seconds"]`` holds the provider's hint when it
    sent one.
    """

    def __init__(
        self,
        message: str,
        *,
        retry_after_seconds: float | None = None,
        model: str | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            model=model,
            provider=provider,
            details=_with_context(details, retry_after_seconds=retry_after_seconds),
        )


__all__ = [
    "NegotiationEngineError",
    "ValidationError",
    "InvalidStateError",
    "NotFoundError",
    "ConfigurationError",
    "StorageError",
    "AIControlError",
    "AIConnectionError",
    "AIResponseError",
    "AIRateLimitError",
]
