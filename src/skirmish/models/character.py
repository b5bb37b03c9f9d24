"""Pydantic V2 schemas for characters.

This module defines the reusable CharacterDefinition template and the
mutable CharacterState record that lives on the board for the duration
of an encounter.

Example:
    >>> from skirmish.models.character import CharacterDefinition
    >>> goblin = CharacterDefinition(definition_id="goblin", name="Goblin", max_health=20)
    >>> state = goblin.instantiate("goblin_1", lane_index=1)
    >>> state.health
    20
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic import ValidationError as PydanticValidationError

from skirmish.core.constants import FRONT_LANE
from skirmish.core.exceptions import ValidationError
from skirmish.models.enums import Faction
from skirmish.models.planning import PlannedMove
from skirmish.models.skill import Skill


class CharacterDefinition(BaseModel):
    """Template a character is spawned from.

    Attributes:
        definition_id: Identifier used by encounters to spawn this kind.
        name: Display name.
        faction: Side the spawned character fights for.
        max_health: Health at spawn.
        skills: Equipped skills, in loadout order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    definition_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=100)
    faction: Faction = Faction.ENEMY
    max_health: Annotated[int, Field(ge=1)]
    skills: tuple[Skill, ...] = ()

    def instantiate(
        self,
        character_id: str,
        *,
        lane_index: int = FRONT_LANE,
        spawn_index: int = 0,
    ) -> CharacterState:
        """Create a fresh board character from this definition.

        The character starts at full health with no armor and every
        equipped skill's stamina full.

        Args:
            character_id: Unique identifier on the board.
            lane_index: Formation lane (1 front, 2 back).
            spawn_index: Order in which the character was spawned.

        Returns:
            A new CharacterState.

        Raises:
            ValidationError: If the board id or lane is invalid.
        """
        try:
            return CharacterState(
                character_id=character_id,
                name=self.name,
                definition_id=self.definition_id,
                faction=self.faction,
                max_health=self.max_health,
                health=self.max_health,
                lane_index=lane_index,
                spawn_index=spawn_index,
                skills=list(self.skills),
                stamina_by_skill={s.skill_id: s.stamina_requirement for s in self.skills},
            )
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            raise ValidationError(
                f"Cannot spawn '{character_id}' from '{self.definition_id}'",
                field_name=".".join(str(part) for part in error["loc"]),
                invalid_value=error.get("input"),
                details={"definition_id": self.definition_id},
            ) from exc


class CharacterState(BaseModel):
    """Mutable record of a character on the board.

    Health, armor and damage reduction never go negative. Death is the
    moment health reaches zero; a dead character is never revived.

    Attributes:
        character_id: Unique identifier on the board.
        name: Display name.
        definition_id: Definition the character was spawned from.
        faction: Side the character fights for.
        max_health: Health ceiling.
        health: Current health.
        armor: Armor absorbing damage before health.
        damage_reduction: Flat reduction applied to this character's
            outgoing target damage until the next player turn starts.
        lane_index: Formation lane (1 front, 2 back).
        has_acted_this_turn: Whether a player character has acted.
        skills: Equipped skills.
        stamina_by_skill: Stamina per equipped skill id.
        planned_move: Enemy-only planned move for the coming enemy turn.
        intent: Human-readable rendering of the planned move.
        spawn_index: Order of spawning within the encounter.
        formation_height: Vertical slot height within the lane.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    character_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=100)
    definition_id: str | None = None
    faction: Faction
    max_health: Annotated[int, Field(ge=1)]
    health: Annotated[int, Field(ge=0)]
    armor: Annotated[int, Field(ge=0)] = 0
    damage_reduction: Annotated[int, Field(ge=0)] = 0
    lane_index: Annotated[int, Field(ge=1, le=2)] = FRONT_LANE
    has_acted_this_turn: bool = False
    skills: list[Skill] = Field(default_factory=list)
    stamina_by_skill: dict[str, int] = Field(default_factory=dict)
    planned_move: PlannedMove | None = None
    intent: str = ""
    spawn_index: Annotated[int, Field(ge=0)] = 0
    formation_height: float = 0.0

    @model_validator(mode="after")
    def validate_health(self) -> CharacterState:
        """Ensure health does not exceed max health.

        Returns:
            Self if validation passes.

        Raises:
            ValueError: If health is above max_health.
        """
        if self.health > self.max_health:
            raise ValueError(
                f"health ({self.health}) cannot exceed max_health ({self.max_health})"
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_dead(self) -> bool:
        """Check if the character is dead.

        Returns:
            True if health is zero.
        """
        return self.health == 0

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def is_player(self) -> bool:
        return self.faction is Faction.PLAYER

    @property
    def is_enemy(self) -> bool:
        return self.faction is Faction.ENEMY

    def equipped_skill(self, skill_id: str) -> Skill | None:
        """Look up an equipped skill by id.

        Args:
            skill_id: The skill identifier.

        Returns:
            The Skill, or None if it is not equipped.
        """
        for skill in self.skills:
            if skill.skill_id == skill_id:
                return skill
        return None

    # =========================================================================
    # Health and Armor
    # =========================================================================

    def deal_damage(
        self,
        amount: int,
        *,
        ignores_armor: bool = False,
        armor_only: bool = False,
    ) -> bool:
        """Apply incoming damage.

        Armor absorbs damage first unless ignores_armor is set. Armor-only
        damage can strip armor but never touches health.

        Args:
            amount: Damage to deal. Non-positive amounts do nothing.
            ignores_armor: Subtract the full amount from health.
            armor_only: Subtract only from armor.

        Returns:
            True if this hit killed the character.
        """
        if amount <= 0 or self.is_dead:
            return False

        if armor_only:
            self.armor -= min(amount, self.armor)
            return False

        if ignores_armor:
            remaining = amount
        else:
            absorbed = min(amount, self.armor)
            self.armor -= absorbed
            remaining = amount - absorbed

        self.health = max(0, self.health - remaining)
        return self.health == 0

    def heal(self, amount: int) -> int:
        """Restore health up to max health.

        Args:
            amount: Health to restore.

        Returns:
            Health actually restored. Dead characters cannot be healed.
        """
        if amount <= 0 or self.is_dead:
            return 0
        before = self.health
        self.health = min(self.max_health, self.health + amount)
        return self.health - before

    def change_armor(self, delta: int) -> None:
        """Add (or remove, for negative deltas) armor, flooring at zero."""
        self.armor = max(0, self.armor + delta)

    def grant_damage_reduction(self, amount: int) -> None:
        if amount > 0:
            self.damage_reduction += amount

    def __str__(self) -> str:
        """Return the display name."""
        return self.name


__all__ = [
    "CharacterDefinition",
    "CharacterState",
]
