"""Engine-wide constants for the Skirmish combat engine.

This module defines the rule constants shared by the models and engine:
lane numbering, formation slot heights, scheduler delays and the default
values of skill definitions.
"""

from __future__ import annotations

# =============================================================================
# Lanes
# =============================================================================

UNRESTRICTED_LANE = 0
"""Sentinel for a skill that may target any lane."""

FRONT_LANE = 1
"""Front rank. Melee attacks must hit this lane while it holds a living member."""

BACK_LANE = 2
"""Back rank. Reachable by melee only once the front rank is empty."""

VALID_LANES = (FRONT_LANE, BACK_LANE)

# =============================================================================
# Formation Slots
# =============================================================================

SLOT_HEIGHT_TOP = 1.5
SLOT_HEIGHT_MIDDLE = 0.0
SLOT_HEIGHT_BOTTOM = -1.5

# Slot heights used for a lane holding 1, 2 or 3+ members, top to bottom.
FORMATION_LAYOUTS: dict[int, tuple[float, ...]] = {
    1: (SLOT_HEIGHT_BOTTOM,),
    2: (SLOT_HEIGHT_TOP, SLOT_HEIGHT_BOTTOM),
    3: (SLOT_HEIGHT_TOP, SLOT_HEIGHT_MIDDLE, SLOT_HEIGHT_BOTTOM),
}

# =============================================================================
# Timing (seconds)
# =============================================================================

DEFAULT_ENEMY_MOVE_DELAY = 0.3
DEFAULT_ENEMY_TURN_END_DELAY = 0.5
DEFAULT_SKILL_RESOLUTION_DELAY = 0.2
DEFAULT_ENCOUNTER_COMPLETE_DELAY = 1.0

# =============================================================================
# Rules
# =============================================================================

DEFAULT_STAMINA_PER_ACTION = 100
"""Stamina points distributed across a player's skills after acting."""

DEFAULT_STAMINA_REQUIREMENT = 100
DEFAULT_AI_WEIGHT = 1.0

MIN_AI_WEIGHT = 0.1
"""Floor applied to every skill weight so each skill keeps a chance."""

UNIFORM_FALLBACK_THRESHOLD = 0.01
"""Total weight at or below which enemy skill selection becomes uniform."""

# =============================================================================
# Intent Text
# =============================================================================

NO_SKILLS_INTENT = "No skills"
INTENT_ARROW = "→"
