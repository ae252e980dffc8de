"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Negotiation Engine test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[None, None, None]:
    """Reset cached settings and the database singleton around each test.

    Tests run from a temporary directory so that no local .env file or
    default database is picked up.
    """
    from negotiation_engine.core.config import clear_settings_cache
    from negotiation_engine.storage.database import reset_database

    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    reset_database()
    yield
    clear_settings_cache()
    reset_database()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "NEGOTIATION_ENGINE_OPENROUTER_API_KEY": "test-openrouter-key",
        "NEGOTIATION_ENGINE_DEBUG": "true",
        "NEGOTIATION_ENGINE_LOG_LEVEL": "DEBUG",
        "NEGOTIATION_ENGINE_RULES_PATIENCE_CAP": "6",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_negotiation_data() -> dict[str, Any]:
    """Provide sample negotiation setup data.

    Returns:
        Dictionary accepted by CreateNegotiationInput.
    """
    return {
        "name": "Audience with the Baron",
        "npc_name": "Baron Valk",
        "description": "The baron controls the only bridge over the Thornwater.",
        "motivations": [
            {"type": "legacy", "description": "Wants his house remembered"},
            {"type": "wealth", "description": "The bridge tolls are failing"},
            {"type": "protection", "description": "Fears the river raiders"},
        ],
        "pitfalls": [
            {"description": "Mentioning his late brother"},
            {"description": "Questioning his courage"},
        ],
    }


@pytest.fixture
def sample_input(sample_negotiation_data: dict[str, Any]) -> Any:
    """Create a CreateNegotiationInput.

    Args:
        sample_negotiation_data: Setup data dictionary.

    Returns:
        CreateNegotiationInput instance.
    """
    from negotiation_engine.models import CreateNegotiationInput

    return CreateNegotiationInput.model_validate(sample_negotiation_data)


@pytest.fixture
def sample_session(sample_input: Any) -> Any:
    """Create a negotiation in the preparing state with default counters.

    Returns:
        NegotiationSession with interest 2, patience 5, cap 5.
    """
    from negotiation_engine.models import create_negotiation

    return create_negotiation(sample_input)


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def engine(sample_session: Any) -> Any:
    """Create a NegotiationEngine over the sample session, not yet started.

    Returns:
        NegotiationEngine using the Draw Steel effect table.
    """
    from negotiation_engine.engine import DrawSteelEffects, NegotiationEngine

    return NegotiationEngine(sample_session, effects=DrawSteelEffects())


@pytest.fixture
def active_engine(engine: Any) -> Any:
    """Create a started NegotiationEngine.

    Returns:
        NegotiationEngine in the active state.
    """
    engine.start()
    return engine


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def database(tmp_path: Path) -> Any:
    """Create a Database in a temporary directory.

    Returns:
        Database instance.
    """
    from negotiation_engine.storage import Database

    return Database(tmp_path / "data" / "negotiations.db")


@pytest.fixture
def service(database: Any) -> Any:
    """Create a NegotiationService over the temporary database.

    Returns:
        NegotiationService recording history to the same database.
    """
    from negotiation_engine.engine import DrawSteelEffects
    from negotiation_engine.services import NegotiationService

    return NegotiationService(database=database, effects=DrawSteelEffects())
