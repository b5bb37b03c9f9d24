"""Pydantic V2 schema for skill definitions.

A skill is an immutable rule definition. Every gameplay effect an action
can have (damage, healing, armor, damage reduction, cancel, intercept) is
expressed as a field on this model and interpreted by the effect resolver.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

from skirmish.core.constants import (
    DEFAULT_AI_WEIGHT,
    DEFAULT_STAMINA_REQUIREMENT,
    UNRESTRICTED_LANE,
)
from skirmish.models.enums import SkillType, TargetType


class Skill(BaseModel):
    """Immutable skill definition.

    Damage values are signed: a negative damage value heals. Armor values
    are signed deltas applied to the current armor.

    Attributes:
        skill_id: Stable identifier, used to key stamina.
        name: Display name.
        description: Flavor text shown by the host.
        target_type: Who the skill affects relative to the caster.
        skill_type: Delivery type; MELEE is subject to the lane rule.
        target_damage: Damage dealt to each target (negative heals).
        target_armor: Armor added to each target (negative strips armor).
        self_damage: Damage dealt to the caster (negative heals).
        self_armor: Armor added to the caster.
        stamina_requirement: Stamina needed before the skill can be used.
        ignores_armor: Damage bypasses armor entirely.
        armor_only: Damage can reduce armor but never health.
        cancels_action: Clears the target enemy's planned move.
        intercepts_attack: Redirects offensive enemy plans onto the caster.
        damage_reduction_grant: Flat damage reduction granted to the target.
        allowed_lane: Lane the target must occupy (0 for any lane).
        ai_weight: Relative likelihood of an enemy choosing this skill.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    skill_id: str = Field(min_length=1, max_length=64, description="Stable skill identifier")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    description: str = Field(default="", max_length=500, description="Flavor text")
    target_type: TargetType = Field(default=TargetType.ENEMY, description="Targeting relation")
    skill_type: SkillType = Field(default=SkillType.MELEE, description="Delivery type")

    target_damage: int = Field(default=0, description="Damage to target (negative heals)")
    target_armor: int = Field(default=0, description="Armor delta for target")
    self_damage: int = Field(default=0, description="Damage to caster (negative heals)")
    self_armor: int = Field(default=0, description="Armor delta for caster")

    stamina_requirement: Annotated[int, Field(ge=0)] = DEFAULT_STAMINA_REQUIREMENT

    ignores_armor: bool = False
    armor_only: bool = False
    cancels_action: bool = False
    intercepts_attack: bool = False
    damage_reduction_grant: Annotated[int, Field(ge=0)] = 0

    allowed_lane: Annotated[int, Field(ge=0, le=2)] = UNRESTRICTED_LANE
    ai_weight: Annotated[float, Field(ge=0)] = DEFAULT_AI_WEIGHT

    @computed_field  # type: ignore[prop-decorator]
    @property
    def requires_target(self) -> bool:
        """Check whether the caster must pick an explicit target.

        Returns:
            True if the target type is ALLY or ENEMY.
        """
        return self.target_type.requires_target

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_self_effects(self) -> bool:
        """Check whether the skill changes the caster's own health or armor.

        Returns:
            True if self_damage or self_armor is non-zero.
        """
        return self.self_damage != 0 or self.self_armor != 0

    def __str__(self) -> str:
        """Return the display name."""
        return self.name


__all__ = ["Skill"]
