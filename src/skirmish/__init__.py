"""Skirmish - turn-based lane-formation combat engine.

The rules core of a lane-formation skirmish game: it sequences player and
enemy turns, plans and executes enemy actions, validates targets under
lane constraints, resolves skill effects, manages a per-skill stamina
economy, and advances a scripted run of encounters.

Rendering, input and animation live in the host. The host drives the
engine through CombatSession requests and ``tick(dt)``, and observes it
through events.

Example:
    >>> from skirmish import CombatSession, ContentCatalog, configure_logging_from_settings
    >>>
    >>> configure_logging_from_settings()
    >>> catalog = ContentCatalog.from_json_file("content.json")
    >>> session = CombatSession.from_catalog(catalog)
    >>> session.start()
    >>> session.request_skill_use("warrior", "slash")
    >>> session.confirm_target("goblin_1")

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas (skills, characters, encounters, events).
    engine: Targeting, effects, planning, turns, encounters, session.
    content: JSON content catalog.
"""

from __future__ import annotations

# Core
from skirmish.core.config import Settings, get_settings
from skirmish.core.exceptions import SkirmishError
from skirmish.core.logging import configure_logging, configure_logging_from_settings, get_logger

# Content
from skirmish.content.catalog import ContentCatalog

# Engine
from skirmish.engine.session import CombatSession

# Models
from skirmish.models.character import CharacterDefinition, CharacterState
from skirmish.models.encounter import EncounterDefinition, EnemySpawnRequest
from skirmish.models.enums import Faction, SkillType, TargetType, TurnState
from skirmish.models.skill import Skill


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "SkirmishError",
    "Settings",
    "get_settings",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    # Content
    "ContentCatalog",
    # Engine
    "CombatSession",
    # Models
    "Skill",
    "CharacterDefinition",
    "CharacterState",
    "EncounterDefinition",
    "EnemySpawnRequest",
    "Faction",
    "SkillType",
    "TargetType",
    "TurnState",
]
