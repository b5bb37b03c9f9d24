"""Combat session: the single owner of all combat state.

A CombatSession wires the registry, scheduler, event bus and every engine
component together and exposes the host-facing API: start the run, pass
player requests through, and advance the clock.

Example:
    >>> from skirmish.content import ContentCatalog
    >>> from skirmish.engine import CombatSession
    >>> catalog = ContentCatalog.from_json_file("content.json")
    >>> session = CombatSession.from_catalog(catalog)
    >>> session.start()
    >>> outcome = session.request_skill_use("warrior", "slash")
    >>> session.confirm_target("goblin_1")
    >>> session.tick(0.016)
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Callable, TypeVar
from uuid import uuid4

from skirmish.core.config import Settings, get_settings
from skirmish.core.exceptions import GameEngineError, InvalidGameStateError
from skirmish.core.logging import bind_context, get_logger, unbind_context
from skirmish.engine.effects import EffectResolver
from skirmish.engine.encounters import EncounterSequencer, InterludeHandler, InterludeRequest
from skirmish.engine.events import EventBus
from skirmish.engine.planner import EnemyPlanner
from skirmish.engine.registry import CharacterRegistry
from skirmish.engine.scheduler import StepScheduler
from skirmish.engine.stamina import StaminaLedger
from skirmish.engine.targeting import TargetResolver
from skirmish.engine.turns import TurnCoordinator
from skirmish.models.enums import Faction, TurnState
from skirmish.models.events import AllEncountersComplete, PartyDefeated


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from skirmish.content.catalog import ContentCatalog
    from skirmish.models.character import CharacterDefinition, CharacterState
    from skirmish.models.encounter import EncounterDefinition
    from skirmish.models.events import GameEvent
    from skirmish.models.planning import ActionOutcome, ActionRecord

logger = get_logger(__name__)

E = TypeVar("E", bound="GameEvent")


class CombatSession:
    """Explicit context object owning one run of encounters.

    Attributes:
        session_id: Identifier bound into every log line.
        settings: Engine settings in effect.
        rng: Random source shared by every random decision.
        events: Event bus for host subscriptions.
        registry: Characters on the board.
        scheduler: Timed step queue advanced by ``tick``.
        coordinator: Turn state machine.
        sequencer: Encounter sequencing.
    """

    def __init__(
        self,
        encounters: Sequence[EncounterDefinition],
        roster: Mapping[str, CharacterDefinition],
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize the session and all engine components.

        Args:
            encounters: Encounter definitions for the run.
            roster: Character definitions by id, used to spawn enemies.
            settings: Engine settings. Loaded from the environment if omitted.
            rng: Random source. Seeded from settings.rules.rng_seed if omitted.
            session_id: Identifier for logs. Generated if omitted.
        """
        self.settings = settings or get_settings()
        self.session_id = session_id or uuid4().hex[:12]
        self.rng = rng or random.Random(self.settings.rules.rng_seed)

        self.events = EventBus()
        self.registry = CharacterRegistry()
        self.scheduler = StepScheduler()

        rules = self.settings.rules
        timing = self.settings.timing
        self.resolver = TargetResolver(self.registry)
        self.stamina = StaminaLedger(self.rng)
        self.planner = EnemyPlanner(
            self.registry,
            self.resolver,
            events=self.events,
            rng=self.rng,
            min_weight=rules.min_ai_weight,
            fallback_threshold=rules.uniform_fallback_threshold,
        )
        self.effects = EffectResolver(self.registry, self.planner, events=self.events)
        self.coordinator = TurnCoordinator(
            self.registry,
            self.planner,
            self.resolver,
            self.effects,
            self.stamina,
            self.scheduler,
            events=self.events,
            timing=timing,
            stamina_per_action=rules.stamina_per_action,
        )
        self.sequencer = EncounterSequencer(
            encounters,
            roster,
            self.registry,
            self.coordinator,
            self.stamina,
            self.scheduler,
            events=self.events,
            timing=timing,
            rng=self.rng,
        )
        self._started = False
        self.events.on(AllEncountersComplete, self._on_run_over)
        self.events.on(PartyDefeated, self._on_run_over)

    @classmethod
    def from_catalog(
        cls,
        catalog: ContentCatalog,
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        session_id: str | None = None,
    ) -> CombatSession:
        """Create a session from loaded content, including its party.

        Args:
            catalog: Resolved content catalog.
            settings: Engine settings.
            rng: Random source.
            session_id: Identifier for logs.

        Returns:
            A session with the catalog's party on the board.
        """
        session = cls(
            catalog.encounters,
            catalog.characters,
            settings=settings,
            rng=rng,
            session_id=session_id,
        )
        for slot in catalog.party:
            session.add_player(
                catalog.character(slot.definition_id),
                lane_index=slot.lane_index,
                character_id=slot.character_id,
            )
        return session

    # =========================================================================
    # Setup
    # =========================================================================

    def add_player(
        self,
        definition: CharacterDefinition,
        *,
        lane_index: int = 1,
        character_id: str | None = None,
    ) -> CharacterState:
        """Put a player character on the board.

        Args:
            definition: Template to spawn from.
            lane_index: Formation lane.
            character_id: Board id. Defaults to the definition id.

        Returns:
            The new player character.

        Raises:
            GameEngineError: If the id is already taken.
            ValidationError: If the spawn fails validation, such as a bad lane.
        """
        character = definition.instantiate(
            character_id or definition.definition_id,
            lane_index=lane_index,
            spawn_index=len(self.registry.players()),
        )
        character.faction = Faction.PLAYER
        self.stamina.initialize(character)
        return self.registry.add(character)

    def start(self) -> EncounterDefinition | None:
        """Start the run with the first encounter.

        Returns:
            The first encounter, or None if none is available.

        Raises:
            InvalidGameStateError: If the session was already started.
            GameEngineError: If there is no player character.
        """
        if self._started:
            raise InvalidGameStateError(
                "Session already started",
                current_state=self.coordinator.state.value,
            )
        if not self.registry.players():
            raise GameEngineError("Cannot start a session without player characters")

        self._started = True
        bind_context(session_id=self.session_id)
        logger.info(
            "Session started",
            players=len(self.registry.players()),
            encounters=len(self.sequencer.encounters),
        )
        encounter = self.sequencer.advance(0)
        self.scheduler.kick()
        return encounter

    def _on_run_over(self, event: GameEvent) -> None:
        logger.info("Session ended", outcome=type(event).__name__)
        unbind_context("session_id")

    # =========================================================================
    # Host API
    # =========================================================================

    def request_skill_use(self, caster_id: str, skill_id: str) -> ActionOutcome:
        return self.coordinator.request_skill_use(caster_id, skill_id)

    def confirm_target(self, target_id: str) -> ActionOutcome:
        return self.coordinator.confirm_target(target_id)

    def cancel_targeting(self) -> ActionOutcome:
        return self.coordinator.cancel_targeting()

    def select_character(self, character_id: str) -> bool:
        return self.coordinator.select_character(character_id)

    def end_player_turn(self) -> bool:
        return self.coordinator.end_player_turn()

    def tick(self, dt: float) -> None:
        """Advance the clock by dt seconds."""
        self.scheduler.tick(dt)

    def run_until_idle(self, step: float = 0.1) -> None:
        """Advance the clock until nothing is pending or the host must act."""
        self.scheduler.run_until_idle(step)

    def on(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        self.events.on(event_type, handler)

    def set_interlude_handler(self, handler: InterludeHandler | None) -> None:
        """Install the host's between-encounter skill-selection handler."""
        self.sequencer.interlude_handler = handler

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def state(self) -> TurnState:
        return self.coordinator.state

    @property
    def turn_number(self) -> int:
        return self.coordinator.turn_number

    @property
    def is_over(self) -> bool:
        """Check whether the run has ended.

        Returns:
            True once the party is defeated or no encounter remains.
        """
        return self.coordinator.party_defeated or self.sequencer.is_complete

    @property
    def is_busy(self) -> bool:
        """Check whether the engine is resolving or waiting on a timed step.

        Returns:
            True while a skill resolves or the scheduler has pending steps.
        """
        return self.coordinator.is_executing_skill or not self.scheduler.is_idle

    @property
    def is_targeting(self) -> bool:
        return self.coordinator.targeting.is_active

    @property
    def interlude(self) -> InterludeRequest | None:
        return self.sequencer.interlude

    @property
    def action_log(self) -> list[ActionRecord]:
        return self.coordinator.action_log

    @property
    def active_character(self) -> CharacterState | None:
        return self.coordinator.active_character

    def character(self, character_id: str) -> CharacterState:
        """Look up a character on the board.

        Raises:
            CombatError: If the id is unknown.
        """
        return self.registry.require(character_id)

    def players(self) -> list[CharacterState]:
        return self.registry.players()

    def enemies(self) -> list[CharacterState]:
        return self.registry.enemies()


__all__ = ["CombatSession"]
