"""Trait registry: NPC motivations and pitfalls and their concealment.

Concealment only ever lifts. A revealed trait stays revealed, and
revealing it again changes nothing. Revealing is narratively free: it
never touches Interest or Patience.
"""

from __future__ import annotations

from dataclasses import dataclass

from negotiation_engine.core.exceptions import NotFoundError, ValidationError
from negotiation_engine.core.logging import get_logger
from negotiation_engine.models.enums import MotivationType
from negotiation_engine.models.negotiation import Motivation, Pitfall


logger = get_logger(__name__)


@dataclass(frozen=True)
class TraitPartition:
    """One side of the known/concealed split, for display.

    Attributes:
        motivations: Motivations on this side, in display order.
        pitfalls: Pitfalls on this side, in display order.
    """

    motivations: tuple[Motivation, ...]
    pitfalls: tuple[Pitfall, ...]

    def __len__(self) -> int:
        return len(self.motivations) + len(self.pitfalls)


class TraitRegistry:
    """Holds an NPC's motivations and pitfalls.

    The registry works on the lists it is given, so the owning session
    sees every reveal and usage update.
    """

    def __init__(self, motivations: list[Motivation], pitfalls: list[Pitfall]) -> None:
        self._motivations = motivations
        self._pitfalls = pitfalls

    @property
    def motivations(self) -> tuple[Motivation, ...]:
        return tuple(self._motivations)

    @property
    def pitfalls(self) -> tuple[Pitfall, ...]:
        return tuple(self._pitfalls)

    def find_motivation(self, motivation_type: MotivationType | str) -> Motivation | None:
        """Look up a motivation by tag.

        Args:
            motivation_type: Motivation tag or its string value.

        Returns:
            The matching motivation, or None if the NPC lacks it.
        """
        try:
            wanted = MotivationType(motivation_type)
        except ValueError:
            return None
        for motivation in self._motivations:
            if motivation.type is wanted:
                return motivation
        return None

    def get_motivation(self, motivation_type: MotivationType | str) -> Motivation:
        """Look up a motivation by tag, failing if absent.

        Raises:
            NotFoundError: If the NPC has no motivation of that type.
        """
        motivation = self.find_motivation(motivation_type)
        if motivation is None:
            raise NotFoundError(
                "Motivation not found in negotiation",
                resource="motivation",
                key=str(motivation_type),
            )
        return motivation

    def get_pitfall(self, key: int | str) -> Pitfall:
        """Look up a pitfall by position or by description.

        Args:
            key: Index into the pitfall list, or the pitfall's description
                (compared after trimming whitespace).

        Returns:
            The matching pitfall.

        Raises:
            ValidationError: If the key is neither an int nor a str.
            NotFoundError: If no pitfall matches.
        """
        if isinstance(key, bool) or not isinstance(key, int | str):
            raise ValidationError(
                "Pitfall key must be an index or a description",
                field_name="pitfall",
                invalid_value=repr(key),
            )

        if isinstance(key, int):
            if 0 <= key < len(self._pitfalls):
                return self._pitfalls[key]
        else:
            wanted = key.strip()
            for pitfall in self._pitfalls:
                if pitfall.description.strip() == wanted:
                    return pitfall

        raise NotFoundError("Pitfall not found in negotiation", resource="pitfall", key=key)

    def reveal_motivation(self, motivation_type: MotivationType | str) -> bool:
        """Mark a motivation as known.

        Returns:
            True if the motivation was concealed before this call.

        Raises:
            NotFoundError: If the NPC has no motivation of that type.
        """
        motivation = self.get_motivation(motivation_type)
        if motivation.is_known:
            return False
        motivation.is_known = True
        logger.debug("Motivation revealed", motivation=motivation.type.value)
        return True

    def reveal_pitfall(self, key: int | str) -> bool:
        """Mark a pitfall as known.

        Returns:
            True if the pitfall was concealed before this call.
        """
        pitfall = self.get_pitfall(key)
        if pitfall.is_known:
            return False
        pitfall.is_known = True
        logger.debug("Pitfall revealed", pitfall=pitfall.description)
        return True

    def record_usage(self, motivation_type: MotivationType) -> bool:
        """Count an argument that leaned on a motivation.

        Usage only counts once the motivation is known; appeals to a
        concealed motivation leave the counter alone.

        Returns:
            True if the counter was incremented.
        """
        motivation = self.get_motivation(motivation_type)
        if not motivation.is_known:
            return False
        motivation.times_used += 1
        return True

    def list_known(self) -> TraitPartition:
        """Traits the party has uncovered."""
        return TraitPartition(
            motivations=tuple(m for m in self._motivations if m.is_known),
            pitfalls=tuple(p for p in self._pitfalls if p.is_known),
        )

    def list_concealed(self) -> TraitPartition:
        """Traits still hidden from the party."""
        return TraitPartition(
            motivations=tuple(m for m in self._motivations if not m.is_known),
            pitfalls=tuple(p for p in self._pitfalls if not p.is_known),
        )


__all__ = [
    "TraitPartition",
    "TraitRegistry",
]
