"""Event payloads published by the combat engine.

Hosts (renderers, UI layers, tests) subscribe to these through the
session's EventBus. Every event is an immutable pydantic model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from skirmish.models.enums import Faction, RejectionReason, TurnState


class GameEvent(BaseModel):
    """Base class for engine events."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Turn Events
# =============================================================================


class TurnChanged(GameEvent):
    """The coordinator entered a new turn state."""

    state: TurnState
    turn_number: int


class PlannedMoveChanged(GameEvent):
    """An enemy's planned move was set, retargeted or cleared.

    Attributes:
        enemy_id: The planning enemy.
        skill_id: Planned skill, None once the move is cleared.
        target_id: Planned target, if any.
        intent: Display text for the plan.
    """

    enemy_id: str
    skill_id: str | None = None
    target_id: str | None = None
    intent: str = ""


class SkillResolved(GameEvent):
    """A skill's effects were applied."""

    caster_id: str
    skill_id: str
    target_ids: tuple[str, ...] = ()
    phase: TurnState


class CharacterDied(GameEvent):
    """A character's health reached zero."""

    character_id: str
    faction: Faction


class TargetingCancelled(GameEvent):
    """Pending target selection was abandoned without effect."""

    caster_id: str
    skill_id: str
    reason: str


class RequestRejected(GameEvent):
    """A player request was dropped. Purely diagnostic."""

    request: str
    reason: RejectionReason
    caster_id: str | None = None
    skill_id: str | None = None


class PartyDefeated(GameEvent):
    """Every player character is dead."""

    turn_number: int


# =============================================================================
# Encounter Events
# =============================================================================


class EncounterStarting(GameEvent):
    """An encounter was selected and is about to spawn."""

    encounter_name: str
    step_number: int


class EncounterComplete(GameEvent):
    """Every enemy in the current encounter is dead."""

    encounter_name: str
    step_number: int


class InterludeStarted(GameEvent):
    """The between-encounter skill-selection interlude began."""

    next_step_number: int


class AllEncountersComplete(GameEvent):
    """No encounter is available for the next step."""

    encounters_cleared: int


__all__ = [
    "GameEvent",
    "TurnChanged",
    "PlannedMoveChanged",
    "SkillResolved",
    "CharacterDied",
    "TargetingCancelled",
    "RequestRejected",
    "PartyDefeated",
    "EncounterStarting",
    "EncounterComplete",
    "InterludeStarted",
    "AllEncountersComplete",
]
