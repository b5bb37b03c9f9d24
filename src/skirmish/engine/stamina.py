"""Per-skill stamina economy.

Each equipped skill holds its own stamina, keyed by skill id on the
owning character. A skill is ready when its stamina reaches its
requirement, drops to zero when used, and refills from a pool of points
scattered at random across the character's depleted skills after the
character acts.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from skirmish.core.constants import DEFAULT_STAMINA_PER_ACTION
from skirmish.core.logging import get_logger


if TYPE_CHECKING:
    from skirmish.models.character import CharacterState
    from skirmish.models.skill import Skill

logger = get_logger(__name__)


class StaminaLedger:
    """Reads and writes stamina on characters.

    Attributes:
        rng: Random source used for distribution.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        """Initialize the ledger.

        Args:
            rng: Random source. A fresh unseeded Random is used if omitted.
        """
        self.rng = rng or random.Random()

    def initialize(self, character: CharacterState) -> None:
        """Fill every equipped skill's stamina to its requirement."""
        character.stamina_by_skill = {
            skill.skill_id: skill.stamina_requirement for skill in character.skills
        }

    def stamina(self, character: CharacterState, skill: Skill) -> int:
        return character.stamina_by_skill.get(skill.skill_id, 0)

    def has_enough(self, character: CharacterState, skill: Skill) -> bool:
        """Check whether a skill is ready to use.

        Args:
            character: Skill owner.
            skill: The skill.

        Returns:
            True if the stored stamina meets the requirement.
        """
        return self.stamina(character, skill) >= skill.stamina_requirement

    def consume(self, character: CharacterState, skill: Skill) -> None:
        """Spend a skill's stamina, leaving it at zero."""
        character.stamina_by_skill[skill.skill_id] = 0
        logger.debug(
            "Stamina consumed",
            character=character.character_id,
            skill=skill.skill_id,
        )

    def distribute(
        self,
        character: CharacterState,
        total_points: int = DEFAULT_STAMINA_PER_ACTION,
    ) -> dict[str, int]:
        """Scatter stamina points one at a time across depleted skills.

        Each point goes to a skill picked uniformly from those still below
        their requirement. A skill leaves the pool once full. Distribution
        stops when the points run out or every skill is full.

        Args:
            character: Character whose skills regenerate.
            total_points: Points available.

        Returns:
            Points given per skill id. Their sum never exceeds total_points.
        """
        stamina = character.stamina_by_skill
        needy = [
            skill
            for skill in character.skills
            if stamina.get(skill.skill_id, 0) < skill.stamina_requirement
        ]
        given: dict[str, int] = {}
        points = total_points

        while points > 0 and needy:
            skill = self.rng.choice(needy)
            current = stamina.get(skill.skill_id, 0)
            stamina[skill.skill_id] = min(current + 1, skill.stamina_requirement)
            given[skill.skill_id] = given.get(skill.skill_id, 0) + 1
            points -= 1
            if stamina[skill.skill_id] >= skill.stamina_requirement:
                needy.remove(skill)

        logger.debug(
            "Stamina distributed",
            character=character.character_id,
            distributed=sum(given.values()),
            requested=total_points,
        )
        return given


__all__ = ["StaminaLedger"]
