"""Target validation under faction and lane rules.

This module answers "may this skill, cast by this caster, hit this
candidate?" and expands a skill into the concrete characters it affects
at execution time. It also holds the pending-target state used while a
player picks a target.

Lane rule for melee: while the opposing faction has a living member in
the front lane, melee may only hit that lane. Once the front lane is
empty, melee may only hit the back lane.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from skirmish.core.constants import BACK_LANE, FRONT_LANE, UNRESTRICTED_LANE
from skirmish.core.exceptions import TargetingError
from skirmish.core.logging import get_logger
from skirmish.models.enums import Faction, SkillType, TargetType


if TYPE_CHECKING:
    from skirmish.engine.registry import CharacterRegistry
    from skirmish.models.character import CharacterState
    from skirmish.models.skill import Skill

logger = get_logger(__name__)


class TargetResolver:
    """Pure validity checks over the current board.

    Attributes:
        registry: The board being queried.
    """

    def __init__(self, registry: CharacterRegistry) -> None:
        """Initialize the resolver.

        Args:
            registry: Characters on the board.
        """
        self.registry = registry

    def is_valid(
        self,
        skill: Skill | None,
        candidate: CharacterState | None,
        caster: CharacterState | None = None,
    ) -> bool:
        """Check whether a candidate is a legal target.

        Without a caster, relations are judged from the player side and the
        melee lane rule is not applied.

        Args:
            skill: The skill being aimed.
            candidate: The proposed target.
            caster: The character using the skill, if known.

        Returns:
            True if the candidate may be targeted.
        """
        if skill is None or candidate is None or candidate.is_dead:
            return False

        if not self._relation_holds(skill.target_type, candidate, caster):
            return False

        if skill.allowed_lane != UNRESTRICTED_LANE and candidate.lane_index != skill.allowed_lane:
            return False

        if skill.skill_type is SkillType.MELEE and caster is not None:
            return candidate.lane_index == self.melee_lane(caster.faction.opposite)

        return True

    def melee_lane(self, defending: Faction) -> int:
        """Get the only lane melee may currently hit for a defending faction.

        Args:
            defending: Faction being attacked.

        Returns:
            The front lane while it holds a living defender, else the back lane.
        """
        return FRONT_LANE if self.registry.lane_occupied(defending, FRONT_LANE) else BACK_LANE

    def valid_targets(self, skill: Skill, caster: CharacterState) -> list[CharacterState]:
        """List every living character the caster may aim the skill at.

        Args:
            skill: The skill being aimed.
            caster: The character using it.

        Returns:
            Valid candidates in spawn order.
        """
        return [c for c in self.registry if self.is_valid(skill, c, caster)]

    def execution_targets(
        self,
        skill: Skill,
        caster: CharacterState,
        target: CharacterState | None,
    ) -> list[CharacterState]:
        """Expand a skill into the characters it affects right now.

        Area skills hit every living member of the relative faction at the
        moment of execution. Self skills hit the caster. A single-target
        skill whose target is missing or dead affects nobody.

        Args:
            skill: The skill being executed.
            caster: The character using it.
            target: Chosen target for single-target skills.

        Returns:
            Characters to apply effects to, in spawn order.
        """
        target_type = skill.target_type
        if target_type is TargetType.SELF:
            return [caster]
        if target_type is TargetType.ALL_ENEMIES:
            return self.registry.members(caster.faction.opposite)
        if target_type is TargetType.ALL_ALLIES:
            return self.registry.members(caster.faction)
        if target is None or target.is_dead:
            logger.debug(
                "Single-target skill has no living target",
                caster=caster.character_id,
                skill=skill.skill_id,
            )
            return []
        return [target]

    @staticmethod
    def _relation_holds(
        target_type: TargetType,
        candidate: CharacterState,
        caster: CharacterState | None,
    ) -> bool:
        if target_type is TargetType.SELF:
            return caster is None or candidate.character_id == caster.character_id

        own = caster.faction if caster is not None else Faction.PLAYER
        if target_type in (TargetType.ENEMY, TargetType.ALL_ENEMIES):
            return candidate.faction is own.opposite
        if target_type in (TargetType.ALLY, TargetType.ALL_ALLIES):
            return candidate.faction is own
        return False


@dataclass
class PendingTarget:
    """A player skill waiting for a target click."""

    caster_id: str
    skill: Skill


class TargetingState:
    """Tracks whether the host is currently asking the player for a target."""

    def __init__(self) -> None:
        """Initialize with no pending selection."""
        self._pending: PendingTarget | None = None

    @property
    def is_active(self) -> bool:
        return self._pending is not None

    @property
    def pending(self) -> PendingTarget:
        """Get the pending selection.

        Returns:
            The pending caster and skill.

        Raises:
            TargetingError: If no selection is pending.
        """
        if self._pending is None:
            raise TargetingError("No target selection in progress")
        return self._pending

    def begin(self, caster_id: str, skill: Skill) -> PendingTarget:
        """Start waiting for a target, replacing any earlier selection.

        Args:
            caster_id: Caster of the skill.
            skill: Skill that needs a target.

        Returns:
            The new pending selection.
        """
        self._pending = PendingTarget(caster_id=caster_id, skill=skill)
        return self._pending

    def finish(self) -> PendingTarget | None:
        """End the selection.

        Returns:
            The selection that was pending, if any.
        """
        pending, self._pending = self._pending, None
        return pending


__all__ = [
    "TargetResolver",
    "PendingTarget",
    "TargetingState",
]
