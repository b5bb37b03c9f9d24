"""Skill effect application.

The resolver interprets a skill's fields against one caster and one
target: damage or healing, armor changes, damage reduction, and the two
cross-character effects that rewrite enemy plans (cancel and intercept).
Area skills are applied by calling ``apply`` once per affected target.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from skirmish.core.logging import get_logger
from skirmish.models.events import CharacterDied


if TYPE_CHECKING:
    from skirmish.engine.events import EventBus
    from skirmish.engine.planner import EnemyPlanner
    from skirmish.engine.registry import CharacterRegistry
    from skirmish.models.character import CharacterState
    from skirmish.models.skill import Skill

logger = get_logger(__name__)


class EffectResolver:
    """Applies skill effects and handles the resulting deaths.

    Attributes:
        registry: Characters on the board.
        planner: Planner owning enemy planned moves.
        events: Bus receiving CharacterDied events.
    """

    def __init__(
        self,
        registry: CharacterRegistry,
        planner: EnemyPlanner,
        *,
        events: EventBus | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            registry: Characters on the board.
            planner: Planner owning enemy planned moves.
            events: Bus receiving CharacterDied events.
        """
        self.registry = registry
        self.planner = planner
        self.events = events

    def apply(
        self,
        skill: Skill,
        caster: CharacterState,
        target: CharacterState | None = None,
    ) -> list[CharacterState]:
        """Apply a skill's effects to one target and to the caster.

        Target damage is lowered by the caster's damage reduction; self
        damage is not. Self effects are applied on every call, so an area
        skill with self effects applies them once per target.

        Args:
            skill: The skill being resolved.
            caster: The character using the skill.
            target: The affected character, or None for self effects only.

        Returns:
            Characters killed by this application.
        """
        killed: list[CharacterState] = []

        if target is not None:
            self._apply_to_target(skill, caster, target, killed)

        self._apply_to_caster(skill, caster, killed)

        if target is not None and skill.cancels_action:
            self._cancel(skill, target)

        if skill.intercepts_attack:
            self._intercept(skill, caster, target)

        return killed

    # =========================================================================
    # Target and Self Effects
    # =========================================================================

    def _apply_to_target(
        self,
        skill: Skill,
        caster: CharacterState,
        target: CharacterState,
        killed: list[CharacterState],
    ) -> None:
        if skill.target_damage > 0:
            final_damage = max(0, skill.target_damage - caster.damage_reduction)
            if target.deal_damage(
                final_damage,
                ignores_armor=skill.ignores_armor,
                armor_only=skill.armor_only,
            ):
                self._on_death(target, killed)
            logger.debug(
                "Damage applied",
                skill=skill.skill_id,
                caster=caster.character_id,
                target=target.character_id,
                damage=final_damage,
                health=target.health,
                armor=target.armor,
            )
        elif skill.target_damage < 0:
            healed = target.heal(-skill.target_damage)
            logger.debug("Healed", target=target.character_id, amount=healed)

        if skill.target_armor:
            target.change_armor(skill.target_armor)

        if skill.damage_reduction_grant > 0:
            target.grant_damage_reduction(skill.damage_reduction_grant)
            if target.is_enemy:
                self.planner.refresh_intent(target)

    def _apply_to_caster(
        self,
        skill: Skill,
        caster: CharacterState,
        killed: list[CharacterState],
    ) -> None:
        if skill.self_damage > 0:
            if caster.deal_damage(skill.self_damage):
                self._on_death(caster, killed)
        elif skill.self_damage < 0:
            caster.heal(-skill.self_damage)

        if skill.self_armor:
            caster.change_armor(skill.self_armor)

    # =========================================================================
    # Plan-Rewriting Effects
    # =========================================================================

    def _cancel(self, skill: Skill, target: CharacterState) -> None:
        if target.is_enemy and target.is_alive and target.planned_move is not None:
            self.planner.clear_planned_move(target)
            logger.info("Planned move cancelled", skill=skill.skill_id, enemy=target.character_id)

    def _intercept(
        self,
        skill: Skill,
        caster: CharacterState,
        target: CharacterState | None,
    ) -> None:
        if skill.target_type.is_area and skill.target_type.is_offensive:
            affected = self.registry.members(caster.faction.opposite)
        elif target is not None and target.faction is caster.faction.opposite:
            affected = [target]
        else:
            return

        for enemy in affected:
            move = enemy.planned_move
            if move is None or not move.skill.target_type.is_offensive:
                continue
            if self.planner.change_target(enemy, caster):
                logger.info(
                    "Attack intercepted",
                    skill=skill.skill_id,
                    enemy=enemy.character_id,
                    interceptor=caster.character_id,
                )

    def _on_death(self, character: CharacterState, killed: list[CharacterState]) -> None:
        killed.append(character)
        self.planner.clear_planned_move(character)
        logger.info(
            "Character died",
            character=character.character_id,
            faction=character.faction.value,
        )
        if self.events is not None:
            self.events.emit(
                CharacterDied(character_id=character.character_id, faction=character.faction)
            )


__all__ = ["EffectResolver"]
