"""Enumeration types for the Skirmish combat engine.

This module defines the enumerations shared by every model: factions,
skill targeting and delivery types, the turn state machine, and the
status values returned to callers of the player-facing request API.
"""

from __future__ import annotations

from enum import StrEnum


class Faction(StrEnum):
    """Side a character fights for."""

    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opposite(self) -> Faction:
        """Get the opposing faction.

        Returns:
            ENEMY for PLAYER and PLAYER for ENEMY.
        """
        return Faction.ENEMY if self is Faction.PLAYER else Faction.PLAYER


class TargetType(StrEnum):
    """Who a skill affects, relative to the caster's faction."""

    SELF = "self"
    ALLY = "ally"
    ENEMY = "enemy"
    ALL_ALLIES = "all_allies"
    ALL_ENEMIES = "all_enemies"

    @property
    def requires_target(self) -> bool:
        """Check whether the caster must pick one explicit target.

        Returns:
            True for ALLY and ENEMY.
        """
        return self in (TargetType.ALLY, TargetType.ENEMY)

    @property
    def is_offensive(self) -> bool:
        """Check whether the skill is aimed at the opposing faction.

        Returns:
            True for ENEMY and ALL_ENEMIES.
        """
        return self in (TargetType.ENEMY, TargetType.ALL_ENEMIES)

    @property
    def is_area(self) -> bool:
        """Check whether the skill hits a whole faction.

        Returns:
            True for ALL_ALLIES and ALL_ENEMIES.
        """
        return self in (TargetType.ALL_ALLIES, TargetType.ALL_ENEMIES)


class SkillType(StrEnum):
    """How a skill is delivered. Only MELEE is subject to the lane rule."""

    MELEE = "melee"
    RANGED = "ranged"
    BUFF = "buff"


class TurnState(StrEnum):
    """Turn coordinator state."""

    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"


class ActionStatus(StrEnum):
    """Result of a player-facing request."""

    EXECUTED = "executed"
    TARGETING = "targeting"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class RejectionReason(StrEnum):
    """Why a player-facing request was dropped."""

    SESSION_OVER = "session_over"
    NOT_PLAYER_TURN = "not_player_turn"
    SKILL_IN_PROGRESS = "skill_in_progress"
    UNKNOWN_CASTER = "unknown_caster"
    NOT_PLAYER_CHARACTER = "not_player_character"
    CASTER_DEAD = "caster_dead"
    ALREADY_ACTED = "already_acted"
    SKILL_NOT_EQUIPPED = "skill_not_equipped"
    INSUFFICIENT_STAMINA = "insufficient_stamina"
    NOT_TARGETING = "not_targeting"
    INVALID_TARGET = "invalid_target"


__all__ = [
    "Faction",
    "TargetType",
    "SkillType",
    "TurnState",
    "ActionStatus",
    "RejectionReason",
]
