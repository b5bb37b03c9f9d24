"""Pydantic V2 schemas for planned moves and action records.

This module defines the transient enemy PlannedMove, the append-only
combat log entry, and the outcome value returned by every player-facing
request.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from skirmish.models.enums import ActionStatus, RejectionReason, TurnState
from skirmish.models.skill import Skill


class PlannedMove(BaseModel):
    """An enemy's chosen skill and target for the coming enemy turn.

    Attributes:
        skill: The skill the enemy will use.
        target_id: Character the move is aimed at. None for Self and
            area skills, which resolve against the board at execution time,
            and for single-target skills that found no valid target.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    skill: Skill
    target_id: str | None = None

    def retargeted(self, target_id: str | None) -> PlannedMove:
        """Return a copy of this move aimed at a different character.

        Args:
            target_id: The new target.

        Returns:
            A new PlannedMove with the same skill.
        """
        return self.model_copy(update={"target_id": target_id})


class ActionRecord(BaseModel):
    """A resolved skill use in the combat log."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    turn_number: int = Field(ge=1)
    phase: TurnState
    caster_id: str
    skill_id: str
    target_ids: tuple[str, ...] = ()


class ActionOutcome(BaseModel):
    """Result of a player request (skill use, target confirmation, cancel).

    Requests never raise during normal play. A rejected request leaves
    every piece of combat state untouched.

    Attributes:
        status: What happened to the request.
        reason: Why it was rejected, for REJECTED outcomes.
        caster_id: Caster the request referred to, when known.
        skill_id: Skill the request referred to, when known.
        valid_target_ids: Candidates the host may offer while targeting.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: ActionStatus
    reason: RejectionReason | None = None
    caster_id: str | None = None
    skill_id: str | None = None
    valid_target_ids: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def accepted(self) -> bool:
        """Check whether the request changed anything.

        Returns:
            True unless the request was rejected.
        """
        return self.status is not ActionStatus.REJECTED

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        *,
        caster_id: str | None = None,
        skill_id: str | None = None,
    ) -> ActionOutcome:
        """Build a rejection outcome.

        Args:
            reason: Why the request was dropped.
            caster_id: Caster the request referred to.
            skill_id: Skill the request referred to.

        Returns:
            An ActionOutcome with status REJECTED.
        """
        return cls(
            status=ActionStatus.REJECTED,
            reason=reason,
            caster_id=caster_id,
            skill_id=skill_id,
        )


__all__ = [
    "PlannedMove",
    "ActionRecord",
    "ActionOutcome",
]
