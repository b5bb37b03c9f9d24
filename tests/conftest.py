"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Skirmish combat engine test suite.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

import pytest

from skirmish.core.config import RulesSettings, Settings, TimingSettings
from skirmish.engine.effects import EffectResolver
from skirmish.engine.events import EventBus
from skirmish.engine.planner import EnemyPlanner
from skirmish.engine.registry import CharacterRegistry
from skirmish.engine.scheduler import StepScheduler
from skirmish.engine.stamina import StaminaLedger
from skirmish.engine.targeting import TargetResolver
from skirmish.engine.turns import TurnCoordinator
from skirmish.models.character import CharacterState
from skirmish.models.enums import Faction, SkillType, TargetType
from skirmish.models.skill import Skill


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from skirmish.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "SKIRMISH_DEBUG": "true",
        "SKIRMISH_LOG_LEVEL": "DEBUG",
        "SKIRMISH_TIMING_ENEMY_MOVE_DELAY": "0.75",
        "SKIRMISH_RULES_STAMINA_PER_ACTION": "60",
        "SKIRMISH_RULES_RNG_SEED": "99",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def zero_timing() -> TimingSettings:
    """Provide timing settings with every delay at zero.

    Returns:
        TimingSettings that make the scheduler run synchronously.
    """
    return TimingSettings(
        enemy_move_delay=0.0,
        enemy_turn_end_delay=0.0,
        skill_resolution_delay=0.0,
        encounter_complete_delay=0.0,
    )


@pytest.fixture
def instant_settings(zero_timing: TimingSettings) -> Settings:
    """Provide seeded settings with zero delays.

    Args:
        zero_timing: Zero-delay timing settings.

    Returns:
        Settings instance.
    """
    return Settings(timing=zero_timing, rules=RulesSettings(rng_seed=7))


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source for reproducible tests."""
    return random.Random(1234)


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def make_skill() -> Callable[..., Skill]:
    """Provide a skill factory.

    Returns:
        Function building a Skill from keyword overrides.
    """

    def _make(skill_id: str = "strike", **overrides: Any) -> Skill:
        data: dict[str, Any] = {
            "skill_id": skill_id,
            "name": skill_id.replace("_", " ").title(),
            "target_type": TargetType.ENEMY,
            "skill_type": SkillType.RANGED,
        }
        data.update(overrides)
        return Skill(**data)

    return _make


@pytest.fixture
def make_character() -> Callable[..., CharacterState]:
    """Provide a character factory.

    Returns:
        Function building a full-health CharacterState with full stamina.
    """

    def _make(
        character_id: str,
        faction: Faction = Faction.ENEMY,
        *,
        max_health: int = 30,
        lane_index: int = 1,
        skills: tuple[Skill, ...] | list[Skill] = (),
        spawn_index: int = 0,
        **overrides: Any,
    ) -> CharacterState:
        data: dict[str, Any] = {
            "character_id": character_id,
            "name": character_id.replace("_", " ").title(),
            "faction": faction,
            "max_health": max_health,
            "health": max_health,
            "lane_index": lane_index,
            "spawn_index": spawn_index,
            "skills": list(skills),
            "stamina_by_skill": {s.skill_id: s.stamina_requirement for s in skills},
        }
        data.update(overrides)
        return CharacterState(**data)

    return _make


@pytest.fixture
def slash(make_skill: Callable[..., Skill]) -> Skill:
    """Melee single-target attack."""
    return make_skill("slash", skill_type=SkillType.MELEE, target_damage=8)


@pytest.fixture
def arrow(make_skill: Callable[..., Skill]) -> Skill:
    """Ranged single-target attack with a low stamina cost."""
    return make_skill("arrow", target_damage=5, stamina_requirement=50)


@pytest.fixture
def guard(make_skill: Callable[..., Skill]) -> Skill:
    """Self buff."""
    return make_skill(
        "guard",
        target_type=TargetType.SELF,
        skill_type=SkillType.BUFF,
        self_armor=5,
        stamina_requirement=0,
    )


@pytest.fixture
def volley(make_skill: Callable[..., Skill]) -> Skill:
    """Ranged attack on every opponent."""
    return make_skill("volley", target_type=TargetType.ALL_ENEMIES, target_damage=4)


# =============================================================================
# Engine Fixtures
# =============================================================================


@dataclass
class Board:
    """Engine components wired around one registry, without a sequencer."""

    registry: CharacterRegistry
    events: EventBus
    scheduler: StepScheduler
    resolver: TargetResolver
    stamina: StaminaLedger
    planner: EnemyPlanner
    effects: EffectResolver
    coordinator: TurnCoordinator

    def add(self, *characters: CharacterState) -> None:
        for character in characters:
            self.registry.add(character)


@pytest.fixture
def board(rng: random.Random, zero_timing: TimingSettings) -> Board:
    """Create a zero-delay engine with event recording enabled.

    Returns:
        Board with every component wired together.
    """
    registry = CharacterRegistry()
    events = EventBus()
    events.record()
    scheduler = StepScheduler()
    resolver = TargetResolver(registry)
    stamina = StaminaLedger(rng)
    planner = EnemyPlanner(registry, resolver, events=events, rng=rng)
    effects = EffectResolver(registry, planner, events=events)
    coordinator = TurnCoordinator(
        registry,
        planner,
        resolver,
        effects,
        stamina,
        scheduler,
        events=events,
        timing=zero_timing,
    )
    return Board(
        registry=registry,
        events=events,
        scheduler=scheduler,
        resolver=resolver,
        stamina=stamina,
        planner=planner,
        effects=effects,
        coordinator=coordinator,
    )


# =============================================================================
# Content Fixtures
# =============================================================================


@pytest.fixture
def sample_catalog_data() -> dict[str, Any]:
    """Provide a small but complete catalog document.

    Returns:
        Dictionary in the catalog JSON layout.
    """
    return {
        "skills": [
            {"skill_id": "slash", "name": "Slash", "skill_type": "melee", "target_damage": 12},
            {
                "skill_id": "shield_wall",
                "name": "Shield Wall",
                "target_type": "self",
                "skill_type": "buff",
                "self_armor": 6,
                "stamina_requirement": 0,
            },
            {
                "skill_id": "bite",
                "name": "Bite",
                "skill_type": "melee",
                "target_damage": 3,
                "stamina_requirement": 0,
            },
        ],
        "characters": [
            {
                "definition_id": "warrior",
                "name": "Warrior",
                "faction": "player",
                "max_health": 40,
                "skills": ["slash", "shield_wall"],
            },
            {"definition_id": "rat", "name": "Rat", "max_health": 10, "skills": ["bite"]},
        ],
        "encounters": [
            {
                "name": "Cellar",
                "first_encounter": 1,
                "last_encounter": 1,
                "spawns": [{"kind": "rat", "count": 2, "lane_index": 1}],
            },
            {
                "name": "Sewer",
                "first_encounter": 2,
                "last_encounter": 2,
                "spawns": [{"kind": "rat", "count": 1, "lane_index": 2}],
            },
        ],
        "party": [{"definition_id": "warrior", "lane_index": 1}],
    }
