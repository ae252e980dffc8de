"""Prompts for the argument suggester."""

from __future__ import annotations

from negotiation_engine.core.constants import MAX_INTEREST, RECENT_ARGUMENTS_IN_PROMPT
from negotiation_engine.models.enums import MotivationType
from negotiation_engine.models.negotiation import NegotiationSession


# =============================================================================
# System Prompt
# =============================================================================


SUGGESTER_SYSTEM_PROMPT = """You help a game director prepare arguments for a negotiation with an NPC.

## HOW NEGOTIATIONS WORK

- The NPC has **Interest** (0-{max_interest}) and **Patience**. Every argument costs or earns them.
- Appealing to one of the NPC's **motivations** is the strongest move. Arguing without one
  usually costs Patience. Touching a **pitfall** always costs Interest and Patience.
- When Patience runs out, the negotiation fails.
- Each argument is resolved with a test. Tier 1 is a poor result, tier 3 an excellent one.

## INFORMATION SECRECY (CRITICAL!)

- You only know what the party knows. Hidden motivations and pitfalls are listed as counts.
- NEVER guess at hidden traits by name. NEVER propose an appeal to a motivation that is not listed.

## OUTPUT FORMAT

Reply with JSON only, no commentary:

{{"proposals": [
  {{
    "tier": 2,
    "argument_type": "motivation" | "no_motivation" | "pitfall",
    "motivation_type": "<one of the listed motivations, or null>",
    "description": "What the character says, in one or two sentences",
    "rationale": "Why this could work on this NPC"
  }}
]}}

Allowed motivation values: {motivation_values}
"""


def build_system_prompt() -> str:
    """Render the system prompt."""
    return SUGGESTER_SYSTEM_PROMPT.format(
        max_interest=MAX_INTEREST,
        motivation_values=", ".join(m.value for m in MotivationType),
    )


# =============================================================================
# Negotiation Context
# =============================================================================


def build_user_prompt(session: NegotiationSession, count: int) -> str:
    """Describe the negotiation as the party currently sees it.

    Concealed traits are reported only as counts.

    Args:
        session: The negotiation to describe.
        count: Number of proposals to ask for.

    Returns:
        The user message.
    """
    lines = [
        f"# Negotiation: {session.name}",
        f"NPC: {session.npc_name}",
    ]
    if session.description:
        lines.append(f"Situation: {session.description}")

    lines += [
        "",
        f"Interest: {session.interest}/{MAX_INTEREST}",
        f"Patience: {session.patience}/{session.patience_cap}",
        "",
        "## Known motivations",
    ]

    known_motivations = [m for m in session.motivations if m.is_known]
    hidden_motivations = len(session.motivations) - len(known_motivations)
    if known_motivations:
        for motivation in known_motivations:
            used = f" (used {motivation.times_used}x)" if motivation.used else ""
            detail = f": {motivation.description}" if motivation.description else ""
            lines.append(f"- {motivation.type.value}{detail}{used}")
    else:
        lines.append("- none yet")
    if hidden_motivations:
        lines.append(f"- plus {hidden_motivations} motivation(s) the party has not uncovered")

    lines += ["", "## Known pitfalls"]
    known_pitfalls = [p for p in session.pitfalls if p.is_known]
    hidden_pitfalls = len(session.pitfalls) - len(known_pitfalls)
    if known_pitfalls:
        lines += [f"- {p.description}" for p in known_pitfalls]
    else:
        lines.append("- none yet")
    if hidden_pitfalls:
        lines.append(f"- plus {hidden_pitfalls} pitfall(s) the party has not uncovered")

    recent = session.arguments[-RECENT_ARGUMENTS_IN_PROMPT:]
    if recent:
        lines += ["", "## Recent arguments"]
        for argument in recent:
            lines.append(
                f"- tier {int(argument.tier)} {argument.argument_type.value}: "
                f"{argument.description} "
                f"(interest {argument.interest_change:+d}, patience {argument.patience_change:+d})"
            )

    lines += ["", f"Propose {count} argument(s) the party could make next."]
    return "\n".join(lines)


__all__ = [
    "SUGGESTER_SYSTEM_PROMPT",
    "build_system_prompt",
    "build_user_prompt",
]
