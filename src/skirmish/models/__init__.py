"""Pydantic V2 schemas for the Skirmish combat engine.

Submodules:
    enums: Enumeration types (Faction, TargetType, SkillType, TurnState, ...)
    skill: Immutable skill definitions
    character: Character templates and mutable board state
    planning: Planned enemy moves, combat log records, request outcomes
    encounter: Encounter definitions and spawn requests
    events: Event payloads published by the engine

Example:
    >>> from skirmish.models import Skill, TargetType, CharacterDefinition
    >>> slash = Skill(skill_id="slash", name="Slash", target_damage=8)
    >>> goblin = CharacterDefinition(
    ...     definition_id="goblin", name="Goblin", max_health=20, skills=(slash,)
    ... )
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from skirmish.models.enums import (
    ActionStatus,
    Faction,
    RejectionReason,
    SkillType,
    TargetType,
    TurnState,
)

# =============================================================================
# Definitions and State
# =============================================================================
from skirmish.models.skill import Skill
from skirmish.models.planning import ActionOutcome, ActionRecord, PlannedMove
from skirmish.models.character import CharacterDefinition, CharacterState
from skirmish.models.encounter import EncounterDefinition, EnemySpawnRequest

# =============================================================================
# Events
# =============================================================================
from skirmish.models.events import (
    AllEncountersComplete,
    CharacterDied,
    EncounterComplete,
    EncounterStarting,
    GameEvent,
    InterludeStarted,
    PartyDefeated,
    PlannedMoveChanged,
    RequestRejected,
    SkillResolved,
    TargetingCancelled,
    TurnChanged,
)


__all__ = [
    # Enums
    "ActionStatus",
    "Faction",
    "RejectionReason",
    "SkillType",
    "TargetType",
    "TurnState",
    # Definitions and state
    "Skill",
    "PlannedMove",
    "ActionRecord",
    "ActionOutcome",
    "CharacterDefinition",
    "CharacterState",
    "EncounterDefinition",
    "EnemySpawnRequest",
    # Events
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
