"""Turn coordination for lane-formation combat.

This module provides the TurnCoordinator state machine. A round is a
player turn, in which each living player character acts once in any
order, followed by an enemy turn, in which every living enemy executes
the move it planned at the start of the player turn, one at a time in
formation order.

All waiting (the pause before each enemy move, the pause before control
returns to the players, the settle time after a player skill) is queued
on the StepScheduler, never slept.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Callable

from skirmish.core.config import TimingSettings
from skirmish.core.constants import DEFAULT_STAMINA_PER_ACTION
from skirmish.core.logging import get_logger
from skirmish.engine.formation import arrange_formation, execution_order
from skirmish.engine.targeting import TargetingState
from skirmish.models.enums import ActionStatus, Faction, RejectionReason, TurnState
from skirmish.models.events import (
    GameEvent,
    PartyDefeated,
    RequestRejected,
    SkillResolved,
    TargetingCancelled,
    TurnChanged,
)
from skirmish.models.planning import ActionOutcome, ActionRecord


if TYPE_CHECKING:
    from skirmish.engine.effects import EffectResolver
    from skirmish.engine.events import EventBus
    from skirmish.engine.planner import EnemyPlanner
    from skirmish.engine.registry import CharacterRegistry
    from skirmish.engine.scheduler import StepScheduler
    from skirmish.engine.stamina import StaminaLedger
    from skirmish.engine.targeting import PendingTarget, TargetResolver
    from skirmish.models.character import CharacterState
    from skirmish.models.skill import Skill

logger = get_logger(__name__)


class TurnCoordinator:
    """Player/enemy turn state machine.

    Attributes:
        registry: Characters on the board.
        planner: Enemy move planning.
        resolver: Target validity checks.
        effects: Skill effect application.
        stamina: Per-skill stamina economy.
        scheduler: Queue for timed steps.
        events: Bus receiving turn events.
        timing: Scheduler delays.
        stamina_per_action: Points distributed after a player acts.
        targeting: Pending player target selection.
        on_encounter_cleared: Called once when every enemy is dead.
    """

    def __init__(
        self,
        registry: CharacterRegistry,
        planner: EnemyPlanner,
        resolver: TargetResolver,
        effects: EffectResolver,
        stamina: StaminaLedger,
        scheduler: StepScheduler,
        *,
        events: EventBus | None = None,
        timing: TimingSettings | None = None,
        stamina_per_action: int = DEFAULT_STAMINA_PER_ACTION,
    ) -> None:
        """Initialize the coordinator in the player turn.

        Args:
            registry: Characters on the board.
            planner: Enemy move planning.
            resolver: Target validity checks.
            effects: Skill effect application.
            stamina: Per-skill stamina economy.
            scheduler: Queue for timed steps.
            events: Bus receiving turn events.
            timing: Scheduler delays. Defaults are used if omitted.
            stamina_per_action: Points distributed after a player acts.
        """
        self.registry = registry
        self.planner = planner
        self.resolver = resolver
        self.effects = effects
        self.stamina = stamina
        self.scheduler = scheduler
        self.events = events
        self.timing = timing or TimingSettings()
        self.stamina_per_action = stamina_per_action

        self.targeting = TargetingState()
        self.on_encounter_cleared: Callable[[], None] | None = None

        self._state = TurnState.PLAYER_TURN
        self._turn_number = 0
        self._is_executing_skill = False
        self._halted = False
        self._party_defeated = False
        self._active_character_id: str | None = None
        self._execution_order: list[str] = []
        self._enemy_queue: deque[str] = deque()
        self._action_log: list[ActionRecord] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def turn_number(self) -> int:
        """Get the current round number.

        Returns:
            Number of player turns started so far.
        """
        return self._turn_number

    @property
    def is_executing_skill(self) -> bool:
        """Check whether a skill is being resolved.

        Returns:
            True from the moment a skill is committed until it fully settles.
        """
        return self._is_executing_skill

    @property
    def is_halted(self) -> bool:
        return self._halted or self._party_defeated

    @property
    def party_defeated(self) -> bool:
        return self._party_defeated

    @property
    def execution_order(self) -> list[str]:
        """Get the enemy acting order captured for the current encounter.

        Returns:
            Enemy ids, first actor first.
        """
        return list(self._execution_order)

    @property
    def action_log(self) -> list[ActionRecord]:
        """Get every resolved skill use, oldest first.

        Returns:
            Copy of the combat log.
        """
        return list(self._action_log)

    @property
    def active_character(self) -> CharacterState | None:
        return self.registry.get(self._active_character_id)

    def all_players_acted(self) -> bool:
        """Check whether every living player character has acted this turn.

        Returns:
            True if no living player character is still waiting to act.
        """
        return all(p.has_acted_this_turn for p in self.registry.players(living_only=True))

    # =========================================================================
    # Encounter Setup
    # =========================================================================

    def rebuild_execution_order(self) -> list[str]:
        """Lay out the enemy formation and freeze the acting order.

        The order is captured once per encounter and is not re-derived
        when enemies die.

        Returns:
            Enemy ids in acting order.
        """
        enemies = self.registry.enemies()
        arrange_formation(enemies)
        arrange_formation(self.registry.players())
        self._execution_order = execution_order(enemies)
        logger.debug("Enemy execution order captured", order=self._execution_order)
        return self.execution_order

    def reset(self) -> None:
        """Abort anything in flight and return to an idle player turn."""
        self.scheduler.clear()
        self.targeting.finish()
        self._enemy_queue.clear()
        self._is_executing_skill = False
        self._halted = False
        self._state = TurnState.PLAYER_TURN

    # =========================================================================
    # Turn Transitions
    # =========================================================================

    def start_player_turn(self) -> None:
        """Begin a new round.

        Clears the acted flag of every living player character, clears
        damage reduction on everyone, and has every living enemy plan its
        next move.
        """
        if self._party_defeated:
            logger.debug("Player turn not started, party defeated")
            return

        self._state = TurnState.PLAYER_TURN
        self._halted = False
        self._turn_number += 1

        for player in self.registry.players(living_only=True):
            player.has_acted_this_turn = False
        for character in self.registry:
            character.damage_reduction = 0

        for enemy in self.registry.enemies():
            if enemy.is_dead:
                self.planner.clear_planned_move(enemy)
            else:
                self.planner.plan(enemy)

        self._active_character_id = None
        self._select_next_active()

        logger.info("Player turn started", turn=self._turn_number)
        self._emit(TurnChanged(state=TurnState.PLAYER_TURN, turn_number=self._turn_number))

    def mark_acted(self, character: CharacterState) -> bool:
        """Record that a player character has used its action.

        The first call per turn distributes stamina to the character's
        skills. Later calls, and calls for enemies or dead characters,
        change nothing.

        Args:
            character: The character that acted.

        Returns:
            True if every living player character has now acted.
        """
        if character.is_player and character.is_alive and not character.has_acted_this_turn:
            character.has_acted_this_turn = True
            self.stamina.distribute(character, self.stamina_per_action)
            logger.debug("Player acted", character=character.character_id)
        return self.all_players_acted()

    def end_player_turn(self) -> bool:
        """Hand control to the enemies.

        Cancels any pending target selection, then queues the enemy moves.

        Returns:
            True if the enemy turn began. False outside the player turn or
            while a skill is resolving.
        """
        if self._state is not TurnState.PLAYER_TURN or self.is_halted:
            logger.debug("End turn ignored", state=self._state.value, halted=self.is_halted)
            return False
        if self._is_executing_skill:
            logger.debug("End turn ignored, skill in progress")
            return False

        self._state = TurnState.ENEMY_TURN
        logger.info("Enemy turn started", turn=self._turn_number)
        self._emit(TurnChanged(state=TurnState.ENEMY_TURN, turn_number=self._turn_number))
        self._cancel_pending_targeting("turn_ended")

        self._enemy_queue = deque(self._execution_order)
        self._advance_enemy_queue()
        self.scheduler.kick()
        return True

    # =========================================================================
    # Enemy Turn
    # =========================================================================

    def _advance_enemy_queue(self) -> None:
        while self._enemy_queue:
            enemy = self.registry.get(self._enemy_queue.popleft())
            if enemy is None:
                continue
            if enemy.is_dead:
                self.planner.clear_planned_move(enemy)
                continue
            if enemy.planned_move is None:
                logger.debug("Enemy has no move", enemy=enemy.character_id)
                continue

            self.scheduler.wait(self.timing.enemy_move_delay, label="enemy_move_delay").then(
                lambda enemy=enemy: self._execute_enemy_move(enemy),
                label=f"enemy_move:{enemy.character_id}",
            )
            return

        self.scheduler.wait(self.timing.enemy_turn_end_delay, label="enemy_turn_end_delay").then(
            self.start_player_turn,
            label="start_player_turn",
        )

    def _execute_enemy_move(self, enemy: CharacterState) -> None:
        move = enemy.planned_move
        if enemy.is_dead or move is None:
            self.planner.clear_planned_move(enemy)
            self._advance_enemy_queue()
            return

        target = self.registry.get(move.target_id)
        self._is_executing_skill = True
        try:
            self._resolve(enemy, move.skill, target)
        finally:
            self._is_executing_skill = False
        self.planner.clear_planned_move(enemy)

        if self._check_combat_over():
            return
        self._advance_enemy_queue()

    # =========================================================================
    # Player Requests
    # =========================================================================

    def request_skill_use(self, caster_id: str, skill_id: str) -> ActionOutcome:
        """Ask to use a skill.

        Skills aimed at a single ally or enemy enter target selection;
        everything else executes immediately.

        Args:
            caster_id: The acting player character.
            skill_id: The equipped skill to use.

        Returns:
            TARGETING, EXECUTED, or REJECTED with a reason.
        """
        reason = self._turn_gate()
        caster = self.registry.get(caster_id)
        skill = caster.equipped_skill(skill_id) if caster is not None else None
        if reason is None:
            reason = self._caster_gate(caster, skill)
        if reason is not None or caster is None or skill is None:
            return self._reject(
                "request_skill_use",
                reason or RejectionReason.UNKNOWN_CASTER,
                caster_id,
                skill_id,
            )

        self._active_character_id = caster.character_id
        if skill.requires_target:
            self.targeting.begin(caster.character_id, skill)
            valid = tuple(c.character_id for c in self.resolver.valid_targets(skill, caster))
            logger.debug(
                "Awaiting target",
                caster=caster_id,
                skill=skill_id,
                valid_targets=len(valid),
            )
            return ActionOutcome(
                status=ActionStatus.TARGETING,
                caster_id=caster_id,
                skill_id=skill_id,
                valid_target_ids=valid,
            )

        self._cancel_pending_targeting("replaced")
        self._execute_player_skill(caster, skill, None)
        return ActionOutcome(status=ActionStatus.EXECUTED, caster_id=caster_id, skill_id=skill_id)

    def confirm_target(self, target_id: str) -> ActionOutcome:
        """Confirm the target for the pending skill.

        An invalid target cancels the selection without changing anything.

        Args:
            target_id: The chosen character.

        Returns:
            EXECUTED, or REJECTED with a reason.
        """
        if not self.targeting.is_active:
            return self._reject("confirm_target", RejectionReason.NOT_TARGETING)
        if self._is_executing_skill:
            return self._reject("confirm_target", RejectionReason.SKILL_IN_PROGRESS)

        pending = self.targeting.pending
        caster = self.registry.get(pending.caster_id)
        skill = pending.skill
        reason = self._turn_gate() or self._caster_gate(caster, skill)
        target = self.registry.get(target_id)
        if reason is None and not self.resolver.is_valid(skill, target, caster):
            reason = RejectionReason.INVALID_TARGET
        if reason is not None or caster is None:
            reason = reason or RejectionReason.UNKNOWN_CASTER
            self._cancel_pending_targeting(reason.value)
            return self._reject("confirm_target", reason, pending.caster_id, skill.skill_id)

        self.targeting.finish()
        self._execute_player_skill(caster, skill, target)
        return ActionOutcome(
            status=ActionStatus.EXECUTED,
            caster_id=caster.character_id,
            skill_id=skill.skill_id,
        )

    def cancel_targeting(self) -> ActionOutcome:
        """Abandon the pending target selection.

        Returns:
            CANCELLED, or REJECTED if nothing was pending.
        """
        pending = self._cancel_pending_targeting("cancelled")
        if pending is None:
            return self._reject("cancel_targeting", RejectionReason.NOT_TARGETING)
        return ActionOutcome(
            status=ActionStatus.CANCELLED,
            caster_id=pending.caster_id,
            skill_id=pending.skill.skill_id,
        )

    def select_character(self, character_id: str) -> bool:
        """Make a player character the active one.

        Selecting cancels any pending target selection.

        Args:
            character_id: The character to activate.

        Returns:
            True if the character is a living player that has not yet acted.
        """
        character = self.registry.get(character_id)
        if (
            self._turn_gate() is not None
            or character is None
            or not character.is_player
            or character.is_dead
            or character.has_acted_this_turn
        ):
            return False
        self._cancel_pending_targeting("character_selected")
        self._active_character_id = character_id
        return True

    # =========================================================================
    # Execution
    # =========================================================================

    def _execute_player_skill(
        self,
        caster: CharacterState,
        skill: Skill,
        target: CharacterState | None,
    ) -> None:
        self._is_executing_skill = True
        try:
            self._resolve(caster, skill, target)
        except Exception:
            self._is_executing_skill = False
            raise

        self.scheduler.wait(self.timing.skill_resolution_delay, label="skill_resolution_delay").then(
            lambda: self._finish_player_action(caster),
            label=f"finish_action:{caster.character_id}",
        )
        self.scheduler.kick()

    def _finish_player_action(self, caster: CharacterState) -> None:
        everyone_acted = self.mark_acted(caster)
        self._is_executing_skill = False

        if self._check_combat_over():
            return
        if everyone_acted:
            self.end_player_turn()
        else:
            self._select_next_active()

    def _resolve(
        self,
        caster: CharacterState,
        skill: Skill,
        target: CharacterState | None,
    ) -> list[CharacterState]:
        self.stamina.consume(caster, skill)
        targets = self.resolver.execution_targets(skill, caster, target)
        for affected in targets:
            self.effects.apply(skill, caster, affected)
        if not targets:
            # Self effects still land when nothing is left to hit.
            self.effects.apply(skill, caster, None)

        target_ids = tuple(t.character_id for t in targets)
        self._action_log.append(
            ActionRecord(
                turn_number=max(self._turn_number, 1),
                phase=self._state,
                caster_id=caster.character_id,
                skill_id=skill.skill_id,
                target_ids=target_ids,
            )
        )
        logger.info(
            "Skill resolved",
            caster=caster.character_id,
            skill=skill.skill_id,
            targets=list(target_ids),
            phase=self._state.value,
        )
        self._emit(
            SkillResolved(
                caster_id=caster.character_id,
                skill_id=skill.skill_id,
                target_ids=target_ids,
                phase=self._state,
            )
        )
        return targets

    def _check_combat_over(self) -> bool:
        if self.registry.faction_defeated(Faction.PLAYER):
            self._party_defeated = True
            self._halt()
            logger.warning("Party defeated", turn=self._turn_number)
            self._emit(PartyDefeated(turn_number=self._turn_number))
            return True

        if self.registry.faction_defeated(Faction.ENEMY):
            self._halted = True
            self._halt()
            logger.info("Encounter cleared", turn=self._turn_number)
            if self.on_encounter_cleared is not None:
                self.on_encounter_cleared()
            return True
        return False

    def _halt(self) -> None:
        self.scheduler.clear()
        self._enemy_queue.clear()
        self._is_executing_skill = False
        self._cancel_pending_targeting("combat_over")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _select_next_active(self) -> None:
        players = self.registry.players()
        if not players:
            self._active_character_id = None
            return
        ids = [p.character_id for p in players]
        start = ids.index(self._active_character_id) + 1 if self._active_character_id in ids else 0
        for offset in range(len(players)):
            candidate = players[(start + offset) % len(players)]
            if candidate.is_alive and not candidate.has_acted_this_turn:
                self._active_character_id = candidate.character_id
                return
        self._active_character_id = None

    def _turn_gate(self) -> RejectionReason | None:
        if self._party_defeated:
            return RejectionReason.SESSION_OVER
        if self._is_executing_skill:
            return RejectionReason.SKILL_IN_PROGRESS
        if self._state is not TurnState.PLAYER_TURN or self._halted:
            return RejectionReason.NOT_PLAYER_TURN
        return None

    def _caster_gate(
        self,
        caster: CharacterState | None,
        skill: Skill | None,
    ) -> RejectionReason | None:
        if caster is None:
            return RejectionReason.UNKNOWN_CASTER
        if not caster.is_player:
            return RejectionReason.NOT_PLAYER_CHARACTER
        if caster.is_dead:
            return RejectionReason.CASTER_DEAD
        if caster.has_acted_this_turn:
            return RejectionReason.ALREADY_ACTED
        if skill is None:
            return RejectionReason.SKILL_NOT_EQUIPPED
        if not self.stamina.has_enough(caster, skill):
            return RejectionReason.INSUFFICIENT_STAMINA
        return None

    def _cancel_pending_targeting(self, reason: str) -> PendingTarget | None:
        pending = self.targeting.finish()
        if pending is not None:
            logger.debug("Targeting cancelled", caster=pending.caster_id, reason=reason)
            self._emit(
                TargetingCancelled(
                    caster_id=pending.caster_id,
                    skill_id=pending.skill.skill_id,
                    reason=reason,
                )
            )
        return pending

    def _reject(
        self,
        request: str,
        reason: RejectionReason,
        caster_id: str | None = None,
        skill_id: str | None = None,
    ) -> ActionOutcome:
        logger.debug("Request rejected", request=request, reason=reason.value, caster=caster_id)
        self._emit(
            RequestRejected(request=request, reason=reason, caster_id=caster_id, skill_id=skill_id)
        )
        return ActionOutcome.rejected(reason, caster_id=caster_id, skill_id=skill_id)

    def _emit(self, event: GameEvent) -> None:
        if self.events is not None:
            self.events.emit(event)


__all__ = ["TurnCoordinator"]
