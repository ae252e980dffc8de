"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        NegotiationEngineError: Base exception for all package errors.
        ValidationError: Malformed input to an engine operation.
        InvalidStateError: Operation attempted in the wrong session status.
        NotFoundError: Lookup of a trait or negotiation that does not exist.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        configure_from_settings: Configure logging from Settings.
        negotiation_context: Tag log entries with a negotiation ID.
"""

from __future__ import annotations

from negotiation_engine.core.config import (
    AIProviderSettings,
    NegotiationRules,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from negotiation_engine.core.exceptions import (
    AIConnectionError,
    AIControlError,
    AIRateLimitError,
    AIResponseError,
    ConfigurationError,
    InvalidStateError,
    NegotiationEngineError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from negotiation_engine.core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    negotiation_context,
)


__all__ = [
    # Base exception
    "NegotiationEngineError",
    # Engine exceptions
    "ValidationError",
    "InvalidStateError",
    "NotFoundError",
    # Infrastructure exceptions
    "ConfigurationError",
    "StorageError",
    # AI control exceptions
    "AIControlError",
    "AIConnectionError",
    "AIResponseError",
    "AIRateLimitError",
    # Configuration
    "Settings",
    "NegotiationRules",
    "StorageSettings",
    "AIProviderSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "configure_from_settings",
    "negotiation_context",
]
