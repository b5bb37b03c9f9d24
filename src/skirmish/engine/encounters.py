"""Encounter sequencing.

The sequencer walks a run of encounters. At each step it picks one
encounter at random among those whose window contains the step, spawns
its enemies, and hands control to the turn coordinator. When every enemy
is dead it pauses, strips the party's armor, lets the host run a
skill-selection interlude, and moves on to the next step. The run ends
when no encounter is available for a step.
"""

from __future__ import annotations

import random
from collections import Counter
from typing import TYPE_CHECKING, Callable

from skirmish.core.config import TimingSettings
from skirmish.core.exceptions import EncounterError
from skirmish.core.logging import get_logger
from skirmish.models.enums import Faction
from skirmish.models.events import (
    AllEncountersComplete,
    EncounterComplete,
    EncounterStarting,
    GameEvent,
    InterludeStarted,
)


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from skirmish.engine.events import EventBus
    from skirmish.engine.registry import CharacterRegistry
    from skirmish.engine.scheduler import StepScheduler
    from skirmish.engine.stamina import StaminaLedger
    from skirmish.engine.turns import TurnCoordinator
    from skirmish.models.character import CharacterDefinition, CharacterState
    from skirmish.models.encounter import EncounterDefinition
    from skirmish.models.skill import Skill

logger = get_logger(__name__)


class InterludeRequest:
    """Between-encounter pause handed to the host.

    The host may change the party's loadout, then must call ``complete()``
    (immediately or later) for the run to continue.

    Attributes:
        next_step_number: 1-based number of the encounter that follows.
        players: Living player characters.
        completed: Whether the host has finished the interlude.
    """

    def __init__(
        self,
        next_step_number: int,
        players: list[CharacterState],
        *,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the request.

        Args:
            next_step_number: 1-based number of the next encounter.
            players: Living player characters.
            on_complete: Called once when the interlude completes.
        """
        self.next_step_number = next_step_number
        self.players = players
        self.completed = False
        self._on_complete = on_complete

    def equip_skill(
        self,
        character: CharacterState,
        skill: Skill,
        *,
        replacing: str | None = None,
    ) -> None:
        """Add a skill to a character's loadout with full stamina.

        Args:
            character: Character receiving the skill.
            skill: The new skill.
            replacing: Id of an equipped skill to swap out, if any.
        """
        skills = [s for s in character.skills if s.skill_id != replacing]
        skills.append(skill)
        character.skills = skills
        if replacing is not None:
            character.stamina_by_skill.pop(replacing, None)
        character.stamina_by_skill[skill.skill_id] = skill.stamina_requirement
        logger.info(
            "Skill equipped",
            character=character.character_id,
            skill=skill.skill_id,
            replacing=replacing,
        )

    def complete(self) -> None:
        """Finish the interlude. Later calls do nothing."""
        if self.completed:
            return
        self.completed = True
        if self._on_complete is not None:
            self._on_complete()


InterludeHandler = Callable[[InterludeRequest], None]


class EncounterSequencer:
    """Selects, spawns and advances through encounters.

    Attributes:
        encounters: Every encounter definition in the run.
        roster: Character definitions by id, used to spawn enemies.
        current_index: Zero-based step of the current encounter.
        current_encounter: Encounter being fought, if any.
        encounters_cleared: Number of encounters won.
        is_complete: Whether the run has ended.
        interlude_handler: Host callback for the skill-selection interlude.
    """

    def __init__(
        self,
        encounters: Sequence[EncounterDefinition],
        roster: Mapping[str, CharacterDefinition],
        registry: CharacterRegistry,
        coordinator: TurnCoordinator,
        stamina: StaminaLedger,
        scheduler: StepScheduler,
        *,
        events: EventBus | None = None,
        timing: TimingSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the sequencer and subscribe to encounter completion.

        Args:
            encounters: Every encounter definition in the run.
            roster: Character definitions by id.
            registry: Characters on the board.
            coordinator: Turn coordinator to hand control to.
            stamina: Stamina ledger for spawned characters.
            scheduler: Queue for timed steps.
            events: Bus receiving encounter events.
            timing: Scheduler delays. Defaults are used if omitted.
            rng: Random source for encounter choice.
        """
        self.encounters = list(encounters)
        self.roster = dict(roster)
        self.registry = registry
        self.coordinator = coordinator
        self.stamina = stamina
        self.scheduler = scheduler
        self.events = events
        self.timing = timing or TimingSettings()
        self.rng = rng or random.Random()

        self.current_index = 0
        self.current_encounter: EncounterDefinition | None = None
        self.encounters_cleared = 0
        self.is_complete = False
        self.interlude_handler: InterludeHandler | None = None
        self._interlude: InterludeRequest | None = None

        coordinator.on_encounter_cleared = self.on_encounter_complete

    @property
    def interlude(self) -> InterludeRequest | None:
        """Get the interlude awaiting completion, if any.

        Returns:
            The pending InterludeRequest, or None.
        """
        if self._interlude is not None and not self._interlude.completed:
            return self._interlude
        return None

    # =========================================================================
    # Selection
    # =========================================================================

    def candidates(self, step_index: int) -> list[EncounterDefinition]:
        """List the encounters available at a step.

        Args:
            step_index: Zero-based sequence step.

        Returns:
            Encounters whose window contains the step, in definition order.
        """
        return [e for e in self.encounters if e.is_available_at(step_index)]

    def advance(self, step_index: int) -> EncounterDefinition | None:
        """Start the encounter for a step.

        Args:
            step_index: Zero-based sequence step.

        Returns:
            The chosen encounter, or None if the run is over.
        """
        available = self.candidates(step_index)
        if not available:
            self.is_complete = True
            logger.info(
                "All encounters complete",
                step=step_index + 1,
                cleared=self.encounters_cleared,
            )
            self._emit(AllEncountersComplete(encounters_cleared=self.encounters_cleared))
            return None

        encounter = self.rng.choice(available)
        self.current_index = step_index
        self.current_encounter = encounter
        logger.info(
            "Encounter starting",
            encounter=encounter.name,
            step=step_index + 1,
            candidates=len(available),
        )
        self._emit(EncounterStarting(encounter_name=encounter.name, step_number=step_index + 1))

        self.coordinator.reset()
        self.registry.clear_faction(Faction.ENEMY)
        self.spawn(encounter)
        self.coordinator.rebuild_execution_order()
        self.coordinator.start_player_turn()
        return encounter

    def spawn(self, encounter: EncounterDefinition) -> list[CharacterState]:
        """Instantiate an encounter's enemies onto the board.

        Ids are ``{kind}_{n}`` with n counted per kind from 1.

        Args:
            encounter: The encounter to spawn.

        Returns:
            The spawned characters in spawn order.

        Raises:
            EncounterError: If a spawn request names an unknown kind.
        """
        spawned: list[CharacterState] = []
        per_kind: Counter[str] = Counter()

        for request in encounter.spawns:
            definition = self.roster.get(request.kind)
            if definition is None:
                raise EncounterError(
                    f"Unknown enemy kind '{request.kind}'",
                    encounter_name=encounter.name,
                    step_index=self.current_index,
                )
            for _ in range(request.count):
                per_kind[request.kind] += 1
                character = definition.instantiate(
                    f"{request.kind}_{per_kind[request.kind]}",
                    lane_index=request.lane_index,
                    spawn_index=len(spawned),
                )
                character.faction = Faction.ENEMY
                self.stamina.initialize(character)
                self.registry.add(character)
                spawned.append(character)

        logger.debug("Encounter spawned", encounter=encounter.name, enemies=len(spawned))
        return spawned

    # =========================================================================
    # Completion
    # =========================================================================

    def on_encounter_complete(self) -> None:
        """React to every enemy being dead.

        Queues the post-encounter pause, after which the party's armor is
        reset and the interlude (if another encounter follows) runs.
        """
        name = self.current_encounter.name if self.current_encounter else ""
        self.encounters_cleared += 1
        logger.info("Encounter complete", encounter=name, step=self.current_index + 1)
        self._emit(EncounterComplete(encounter_name=name, step_number=self.current_index + 1))

        self.scheduler.wait(
            self.timing.encounter_complete_delay, label="encounter_complete_delay"
        ).then(self._begin_interlude, label="interlude")

    def _begin_interlude(self) -> None:
        for player in self.registry.players(living_only=True):
            player.armor = 0

        next_index = self.current_index + 1
        if not self.candidates(next_index):
            self.advance(next_index)
            return

        request = InterludeRequest(
            next_step_number=next_index + 1,
            players=self.registry.players(living_only=True),
            on_complete=self.scheduler.kick,
        )
        self._interlude = request
        logger.info("Interlude started", next_step=next_index + 1)
        self._emit(InterludeStarted(next_step_number=next_index + 1))

        self.scheduler.wait_until(lambda: request.completed, label="await_interlude").then(
            lambda: self.advance(next_index),
            label="advance_encounter",
        )
        if self.interlude_handler is None:
            request.complete()
        else:
            self.interlude_handler(request)

    def _emit(self, event: GameEvent) -> None:
        if self.events is not None:
            self.events.emit(event)


__all__ = [
    "InterludeRequest",
    "InterludeHandler",
    "EncounterSequencer",
]
