"""Combat engine for the Skirmish tactical combat core.

Submodules:
    scheduler: Timed step queue advanced by an external clock
    events: Event bus for host subscriptions
    registry: Characters on the board
    formation: Lane slot layout and enemy execution order
    targeting: Target validity under faction and lane rules
    stamina: Per-skill stamina economy
    effects: Skill effect application (damage, armor, cancel, intercept)
    planner: Enemy move planning and intent text
    turns: Player/enemy turn state machine
    encounters: Encounter selection, spawning and interludes
    session: Context object wiring everything together

Example:
    >>> from skirmish.engine import CombatSession
    >>> session = CombatSession(encounters, roster)
    >>> session.add_player(warrior_definition, lane_index=1)
    >>> session.start()
"""

from __future__ import annotations

# =============================================================================
# Infrastructure
# =============================================================================
from skirmish.engine.events import EventBus
from skirmish.engine.registry import CharacterRegistry
from skirmish.engine.scheduler import StepScheduler

# =============================================================================
# Rules
# =============================================================================
from skirmish.engine.effects import EffectResolver
from skirmish.engine.formation import arrange_formation, execution_order, slot_heights
from skirmish.engine.planner import EnemyPlanner
from skirmish.engine.stamina import StaminaLedger
from skirmish.engine.targeting import TargetingState, TargetResolver

# =============================================================================
# Orchestration
# =============================================================================
from skirmish.engine.encounters import EncounterSequencer, InterludeRequest
from skirmish.engine.session import CombatSession
from skirmish.engine.turns import TurnCoordinator


__all__ = [
    # Infrastructure
    "EventBus",
    "CharacterRegistry",
    "StepScheduler",
    # Rules
    "EffectResolver",
    "EnemyPlanner",
    "StaminaLedger",
    "TargetResolver",
    "TargetingState",
    "arrange_formation",
    "execution_order",
    "slot_heights",
    # Orchestration
    "TurnCoordinator",
    "EncounterSequencer",
    "InterludeRequest",
    "CombatSession",
]
