"""Configuration management for the negotiation engine.

Centralized configuration using pydantic-settings, supporting environment
variables, .env files, and runtime overrides. API keys are held as
SecretStr so they never appear in logs or reprs.

Example:
    >>> from negotiation_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rules.default_interest
    2

Environment Variables:
    NEGOTIATION_ENGINE_OPENROUTER_API_KEY: OpenRouter API key
    NEGOTIATION_ENGINE_OPENAI_API_KEY: OpenAI API key
    NEGOTIATION_ENGINE_DATABASE_PATH: Path to the SQLite database
    NEGOTIATION_ENGINE_RULES_DEFAULT_PATIENCE: Starting Patience for new negotiations
    NEGOTIATION_ENGINE_RULES_EFFECT_POLICY: 'draw_steel' or 'manual'
    NEGOTIATION_ENGINE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from negotiation_engine.core.constants import (
    DEFAULT_INTEREST,
    DEFAULT_PATIENCE,
    DEFAULT_PATIENCE_CAP,
    MAX_INTEREST,
    MIN_INTEREST,
)
from negotiation_engine.core.exceptions import ConfigurationError


class NegotiationRules(BaseSettings):
    """Tunable rules for new negotiations.

    Attributes:
        default_interest: Interest a new negotiation starts at.
        default_patience: Patience a new negotiation starts at.
        patience_cap: Upper bound for Patience.
        effect_policy: How omitted argument deltas are filled in.
    """

    model_config = SettingsConfigDict(
        env_prefix="NEGOTIATION_ENGINE_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_interest: int = Field(
        default=DEFAULT_INTEREST,
        ge=MIN_INTEREST,
        le=MAX_INTEREST,
        description="Starting Interest",
    )
    default_patience: int = Field(
        default=DEFAULT_PATIENCE,
        description="Starting Patience",
    )
    patience_cap: int = Field(
        default=DEFAULT_PATIENCE_CAP,
        ge=1,
        le=20,
        description="Maximum Patience",
    )
    effect_policy: Literal["draw_steel", "manual"] = Field(
        default="draw_steel",
        description="Resolution of omitted argument deltas",
    )

    @model_validator(mode="after")
    def validate_default_patience(self) -> "NegotiationRules":
        """Ensure the starting Patience fits under the cap.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If default_patience is outside 1..patience_cap.
        """
        if not 1 <= self.default_patience <= self.patience_cap:
            raise ConfigurationError(
                f"default_patience ({self.default_patience}) must be between 1 "
                f"and patience_cap ({self.patience_cap})",
                config_key="default_patience",
            )
        return self


class StorageSettings(BaseSettings):
    """Configuration for the SQLite persistence layer.

    Attributes:
        database_path: Path to the SQLite database file.
    """

    model_config = SettingsConfigDict(
        env_prefix="NEGOTIATION_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/negotiations.db"),
        description="Path to SQLite database",
    )


class AIProviderSettings(BaseSettings):
    """Configuration for the argument suggester's LLM provider.

    Attributes:
        openrouter_api_key: OpenRouter API key (primary).
        openai_api_key: OpenAI API key for direct access.
        default_provider: Which provider the suggester talks to.
        model: Model identifier passed to the chat completions API.
        temperature: Sampling temperature for suggestions.
        max_retries: Maximum attempts on transient connection failures.
        timeout_seconds: API request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="NEGOTIATION_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openrouter_api_key: SecretStr | None = Field(
        default=None,
        description="OpenRouter API key (primary)",
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key",
    )
    default_provider: Literal["openrouter", "openai"] = Field(
        default="openrouter",
        description="Default AI provider to use",
    )
    model: str = Field(
        default="google/gemini-2.0-flash-001",
        description="Chat model for argument suggestions",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum API attempts",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=300,
        description="API request timeout",
    )

    @model_validator(mode="after")
    def validate_api_key_for_provider(self) -> "AIProviderSettings":
        """Ensure a directly selected OpenAI provider has a key.

        OpenRouter without a key is allowed so the engine can run offline;
        the suggester reports the missing key when it is first used.

        Raises:
            ConfigurationError: If OpenAI is selected but no key is configured.
        """
        if self.default_provider == "openai" and not self.openai_api_key:
            raise ConfigurationError(
                "OpenAI is set as default provider but OPENAI_API_KEY is not configured",
                config_key="openai_api_key",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        rules: Negotiation rules.
        storage: Persistence settings.
        ai: LLM provider settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="NEGOTIATION_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Negotiation Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    rules: NegotiationRules = Field(default_factory=NegotiationRules)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    ai: AIProviderSettings = Field(default_factory=AIProviderSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "NegotiationRules",
    "StorageSettings",
    "AIProviderSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
