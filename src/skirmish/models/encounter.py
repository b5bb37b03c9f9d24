"""Pydantic V2 schemas for encounter definitions.

An encounter is a named group of enemy spawn requests with an inclusive
window of sequence steps in which it may be selected.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skirmish.core.constants import FRONT_LANE, VALID_LANES
from skirmish.core.logging import get_logger


logger = get_logger(__name__)


class EnemySpawnRequest(BaseModel):
    """Spawn `count` characters of one kind into a lane.

    Attributes:
        kind: Character definition id to spawn.
        count: How many to spawn.
        lane_index: Lane to spawn into. Values other than 1 or 2 fall back
            to the front lane.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: str = Field(min_length=1, max_length=64)
    count: Annotated[int, Field(ge=0)] = 1
    lane_index: int = FRONT_LANE

    @field_validator("lane_index")
    @classmethod
    def validate_lane_index(cls, v: int) -> int:
        """Coerce an out-of-range lane to the front lane.

        Args:
            v: The lane index value.

        Returns:
            The lane index, or the front lane if it was invalid.
        """
        if v not in VALID_LANES:
            logger.warning("Invalid spawn lane, using front lane", lane_index=v)
            return FRONT_LANE
        return v


class EncounterDefinition(BaseModel):
    """A selectable encounter.

    Attributes:
        name: Display name.
        first_encounter: First 1-based step at which this encounter may appear.
        last_encounter: Last 1-based step at which it may appear, 0 for no limit.
        spawns: Enemy groups to spawn.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    first_encounter: Annotated[int, Field(ge=1)] = 1
    last_encounter: Annotated[int, Field(ge=0)] = 0
    spawns: tuple[EnemySpawnRequest, ...] = ()

    def is_available_at(self, step_index: int) -> bool:
        """Check whether this encounter can be picked at a sequence step.

        Args:
            step_index: Zero-based sequence step.

        Returns:
            True if the 1-based step falls inside the encounter window.
        """
        step_number = step_index + 1
        if step_number < self.first_encounter:
            return False
        return self.last_encounter == 0 or step_number <= self.last_encounter

    @property
    def enemy_count(self) -> int:
        return sum(spawn.count for spawn in self.spawns)


__all__ = [
    "EnemySpawnRequest",
    "EncounterDefinition",
]
