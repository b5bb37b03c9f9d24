"""Enemy decision making.

At the start of every player turn each living enemy picks one skill by
weighted random choice and, for single-target skills, a random valid
target. The resulting PlannedMove is visible to the player (as intent
text) before the enemy turn, and may be cancelled or redirected by player
skills in the meantime.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from skirmish.core.constants import (
    INTENT_ARROW,
    MIN_AI_WEIGHT,
    NO_SKILLS_INTENT,
    UNIFORM_FALLBACK_THRESHOLD,
)
from skirmish.core.logging import get_logger
from skirmish.models.enums import TargetType
from skirmish.models.events import PlannedMoveChanged
from skirmish.models.planning import PlannedMove


if TYPE_CHECKING:
    from collections.abc import Sequence

    from skirmish.engine.events import EventBus
    from skirmish.engine.registry import CharacterRegistry
    from skirmish.engine.targeting import TargetResolver
    from skirmish.models.character import CharacterState
    from skirmish.models.skill import Skill

logger = get_logger(__name__)


class EnemyPlanner:
    """Chooses, stores and describes enemy planned moves.

    Attributes:
        registry: Characters on the board.
        resolver: Target validity checks.
        rng: Random source for skill and target choice.
        min_weight: Floor applied to every skill weight.
        fallback_threshold: Total weight at or below which choice is uniform.
    """

    def __init__(
        self,
        registry: CharacterRegistry,
        resolver: TargetResolver,
        *,
        events: EventBus | None = None,
        rng: random.Random | None = None,
        min_weight: float = MIN_AI_WEIGHT,
        fallback_threshold: float = UNIFORM_FALLBACK_THRESHOLD,
    ) -> None:
        """Initialize the planner.

        Args:
            registry: Characters on the board.
            resolver: Target validity checks.
            events: Bus receiving PlannedMoveChanged events.
            rng: Random source. A fresh unseeded Random is used if omitted.
            min_weight: Floor applied to every skill weight.
            fallback_threshold: Total weight at or below which choice is uniform.
        """
        self.registry = registry
        self.resolver = resolver
        self.events = events
        self.rng = rng or random.Random()
        self.min_weight = min_weight
        self.fallback_threshold = fallback_threshold

    # =========================================================================
    # Planning
    # =========================================================================

    def plan(self, enemy: CharacterState) -> PlannedMove | None:
        """Choose and store a move for one enemy.

        Args:
            enemy: The planning enemy.

        Returns:
            The stored move, or None if the enemy has no skills or is dead.
        """
        if enemy.is_dead:
            self.clear_planned_move(enemy)
            return None

        if not enemy.skills:
            enemy.planned_move = None
            enemy.intent = NO_SKILLS_INTENT
            self._announce(enemy)
            return None

        skill = self.choose_skill(enemy.skills)
        target = self.choose_target(skill, enemy) if skill.requires_target else None

        move = PlannedMove(skill=skill, target_id=target.character_id if target else None)
        enemy.planned_move = move
        enemy.intent = self.describe(enemy)
        logger.info(
            "Enemy planned move",
            enemy=enemy.character_id,
            skill=skill.skill_id,
            target=move.target_id,
            intent=enemy.intent,
        )
        self._announce(enemy)
        return move

    def choose_skill(self, skills: Sequence[Skill]) -> Skill:
        """Pick a skill with probability proportional to its floored weight.

        Args:
            skills: Non-empty list of candidate skills.

        Returns:
            The chosen skill.

        Raises:
            ValueError: If skills is empty.
        """
        if not skills:
            raise ValueError("Cannot choose from an empty skill list")

        weights = [max(skill.ai_weight, self.min_weight) for skill in skills]
        total = sum(weights)
        if total <= self.fallback_threshold:
            return self.rng.choice(list(skills))

        draw = self.rng.random() * total
        cumulative = 0.0
        for skill, weight in zip(skills, weights):
            cumulative += weight
            if draw <= cumulative:
                return skill
        return skills[-1]

    def choose_target(self, skill: Skill, enemy: CharacterState) -> CharacterState | None:
        """Pick a random valid target for a single-target skill.

        Only the opposing faction is considered, so an ally skill planned
        by an enemy ends up without a target.

        Args:
            skill: The chosen skill.
            enemy: The caster.

        Returns:
            A valid living target, or None when no candidate qualifies.
        """
        candidates = [
            c
            for c in self.registry.members(enemy.faction.opposite)
            if self.resolver.is_valid(skill, c, enemy)
        ]
        if not candidates:
            logger.warning(
                "No valid target for planned skill",
                enemy=enemy.character_id,
                skill=skill.skill_id,
            )
            return None
        return self.rng.choice(candidates)

    # =========================================================================
    # Plan Mutation
    # =========================================================================

    def change_target(self, enemy: CharacterState, new_target: CharacterState | None) -> bool:
        """Redirect an existing planned move.

        Args:
            enemy: Enemy whose move is redirected.
            new_target: The new target.

        Returns:
            True if the move's target changed.
        """
        move = enemy.planned_move
        if move is None:
            logger.debug("No planned move to redirect", enemy=enemy.character_id)
            return False

        new_id = new_target.character_id if new_target else None
        if move.target_id == new_id:
            return False

        enemy.planned_move = move.retargeted(new_id)
        enemy.intent = self.describe(enemy)
        logger.info("Planned move redirected", enemy=enemy.character_id, target=new_id)
        self._announce(enemy)
        return True

    def clear_planned_move(self, enemy: CharacterState) -> None:
        """Remove an enemy's planned move. Idempotent."""
        if enemy.planned_move is None and not enemy.intent:
            return
        enemy.planned_move = None
        enemy.intent = ""
        self._announce(enemy)

    def refresh_intent(self, enemy: CharacterState) -> None:
        """Re-render the intent after the enemy's own stats changed."""
        if enemy.planned_move is None:
            return
        intent = self.describe(enemy)
        if intent != enemy.intent:
            enemy.intent = intent
            self._announce(enemy)

    # =========================================================================
    # Intent Text
    # =========================================================================

    def describe(self, enemy: CharacterState) -> str:
        """Render an enemy's planned move as display text.

        Damage is shown after the enemy's current damage reduction.

        Args:
            enemy: The planning enemy.

        Returns:
            Intent text such as "Slash → Warrior (8 dmg)".
        """
        move = enemy.planned_move
        if move is None:
            return NO_SKILLS_INTENT if not enemy.skills else ""

        skill = move.skill
        target = self.registry.get(move.target_id)
        if target is not None:
            effects = _format_effects(skill, enemy.damage_reduction, include_self=True)
            return f"{skill.name} {INTENT_ARROW} {target.name}{effects}"
        if skill.target_type is TargetType.SELF:
            return f"{skill.name} (Self){_format_self_effects(skill)}"
        if skill.target_type.is_area:
            return f"{skill.name} (All){_format_effects(skill, enemy.damage_reduction)}"
        return f"{skill.name}{_format_effects(skill, enemy.damage_reduction)}"

    def _announce(self, enemy: CharacterState) -> None:
        if self.events is None:
            return
        move = enemy.planned_move
        self.events.emit(
            PlannedMoveChanged(
                enemy_id=enemy.character_id,
                skill_id=move.skill.skill_id if move else None,
                target_id=move.target_id if move else None,
                intent=enemy.intent,
            )
        )


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def _format_effects(skill: Skill, damage_reduction: int, *, include_self: bool = False) -> str:
    parts: list[str] = []
    if skill.target_damage > 0:
        parts.append(f" ({max(0, skill.target_damage - damage_reduction)} dmg)")
    elif skill.target_damage < 0:
        parts.append(f" (+{abs(skill.target_damage)} heal)")
    if skill.target_armor:
        parts.append(f" ({_signed(skill.target_armor)} armor)")

    if include_self:
        if skill.self_damage > 0:
            parts.append(f" (self: {skill.self_damage} dmg)")
        elif skill.self_damage < 0:
            parts.append(f" (self: +{abs(skill.self_damage)} heal)")
        if skill.self_armor:
            parts.append(f" (self: {_signed(skill.self_armor)} armor)")
    return "".join(parts)


def _format_self_effects(skill: Skill) -> str:
    parts: list[str] = []
    if skill.self_damage > 0:
        parts.append(f" ({skill.self_damage} self dmg)")
    elif skill.self_damage < 0:
        parts.append(f" (+{abs(skill.self_damage)} self heal)")
    if skill.self_armor:
        parts.append(f" ({_signed(skill.self_armor)} self armor)")
    return "".join(parts)


__all__ = ["EnemyPlanner"]
