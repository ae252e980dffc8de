"""Content authoring helpers for the game director.

Submodules:
    prompts: Prompt templates describing a negotiation as the party sees it
    suggester: ArgumentSuggester and the ArgumentProposal it returns
"""

from negotiation_engine.authoring.prompts import build_system_prompt, build_user_prompt
from negotiation_engine.authoring.suggester import (
    ArgumentProposal,
    ArgumentSuggester,
    parse_proposals,
)

__all__ = [
    "ArgumentProposal",
    "ArgumentSuggester",
    "parse_proposals",
    "build_system_prompt",
    "build_user_prompt",
]
