"""Static content loading.

Skills, character definitions, encounters and the starting party can be
declared in one JSON document. Characters reference skills by id and
encounters reference characters by id; every reference is resolved and
checked at load time.

Example document::

    {
      "skills": [{"skill_id": "slash", "name": "Slash", "target_damage": 8}],
      "characters": [
        {"definition_id": "warrior", "name": "Warrior", "faction": "player",
         "max_health": 40, "skills": ["slash"]},
        {"definition_id": "goblin", "name": "Goblin", "max_health": 20,
         "skills": ["slash"]}
      ],
      "encounters": [
        {"name": "Ambush", "spawns": [{"kind": "goblin", "count": 2}]}
      ],
      "party": [{"definition_id": "warrior", "lane_index": 1}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from skirmish.core.constants import FRONT_LANE
from skirmish.core.exceptions import CatalogLoadError
from skirmish.core.logging import get_logger
from skirmish.models.character import CharacterDefinition
from skirmish.models.encounter import EncounterDefinition
from skirmish.models.enums import Faction
from skirmish.models.skill import Skill


logger = get_logger(__name__)


# =============================================================================
# Raw Document Schema
# =============================================================================


class CharacterEntry(BaseModel):
    """Character definition as written in a catalog, skills by id."""

    model_config = ConfigDict(extra="forbid")

    definition_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=100)
    faction: Faction = Faction.ENEMY
    max_health: int = Field(ge=1)
    skills: list[str] = Field(default_factory=list)


class PartySlot(BaseModel):
    """A starting party member."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    definition_id: str = Field(min_length=1, max_length=64)
    lane_index: int = Field(default=FRONT_LANE, ge=1, le=2)
    character_id: str | None = None


class CatalogDocument(BaseModel):
    """Top-level catalog document."""

    model_config = ConfigDict(extra="forbid")

    skills: list[Skill] = Field(default_factory=list)
    characters: list[CharacterEntry] = Field(default_factory=list)
    encounters: list[EncounterDefinition] = Field(default_factory=list)
    party: list[PartySlot] = Field(default_factory=list)


# =============================================================================
# Resolved Catalog
# =============================================================================


class ContentCatalog:
    """Resolved, cross-checked game content.

    Attributes:
        skills: Skills by id.
        characters: Character definitions by id.
        encounters: Encounter definitions in document order.
        party: Starting party slots.
        source_file: File the catalog was loaded from, if any.
    """

    def __init__(
        self,
        skills: dict[str, Skill],
        characters: dict[str, CharacterDefinition],
        encounters: list[EncounterDefinition],
        party: list[PartySlot] | None = None,
        *,
        source_file: str | None = None,
    ) -> None:
        """Initialize a catalog from already-resolved content.

        Args:
            skills: Skills by id.
            characters: Character definitions by id.
            encounters: Encounter definitions.
            party: Starting party slots.
            source_file: File the catalog was loaded from.
        """
        self.skills = skills
        self.characters = characters
        self.encounters = encounters
        self.party = party or []
        self.source_file = source_file

    @classmethod
    def from_json_file(cls, path: Path | str) -> ContentCatalog:
        """Load a catalog from a JSON file.

        Args:
            path: Path to the JSON document.

        Returns:
            The resolved catalog.

        Raises:
            CatalogLoadError: If the file is missing, not JSON, or invalid.
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise CatalogLoadError(
                f"Cannot read catalog: {exc}",
                source_file=str(path),
            ) from exc
        except json.JSONDecodeError as exc:
            raise CatalogLoadError(
                f"Catalog is not valid JSON: {exc.msg}",
                source_file=str(path),
                details={"line": exc.lineno},
            ) from exc

        return cls.from_dict(data, source_file=str(path))

    @classmethod
    def from_dict(cls, data: Any, *, source_file: str | None = None) -> ContentCatalog:
        """Build a catalog from a parsed document.

        Args:
            data: Parsed JSON document.
            source_file: File the data came from, for error messages.

        Returns:
            The resolved catalog.

        Raises:
            CatalogLoadError: If the document fails validation or contains
                duplicate ids or dangling references.
        """
        try:
            document = CatalogDocument.model_validate(data)
        except PydanticValidationError as exc:
            raise CatalogLoadError(
                f"Catalog failed validation with {exc.error_count()} error(s)",
                source_file=source_file,
                details={"errors": [e["msg"] for e in exc.errors()]},
            ) from exc

        skills = _index_unique(document.skills, "skill_id", "skill", source_file)
        entries = _index_unique(document.characters, "definition_id", "character", source_file)

        characters: dict[str, CharacterDefinition] = {}
        for definition_id, entry in entries.items():
            missing = [s for s in entry.skills if s not in skills]
            if missing:
                raise CatalogLoadError(
                    f"Character '{definition_id}' references unknown skills",
                    source_file=source_file,
                    details={"missing": missing},
                )
            characters[definition_id] = CharacterDefinition(
                definition_id=definition_id,
                name=entry.name,
                faction=entry.faction,
                max_health=entry.max_health,
                skills=tuple(skills[s] for s in entry.skills),
            )

        for encounter in document.encounters:
            unknown = sorted({s.kind for s in encounter.spawns if s.kind not in characters})
            if unknown:
                raise CatalogLoadError(
                    f"Encounter '{encounter.name}' spawns unknown kinds",
                    source_file=source_file,
                    details={"unknown": unknown},
                )

        for slot in document.party:
            if slot.definition_id not in characters:
                raise CatalogLoadError(
                    f"Party references unknown character '{slot.definition_id}'",
                    source_file=source_file,
                )

        logger.info(
            "Catalog loaded",
            source_file=source_file,
            skills=len(skills),
            characters=len(characters),
            encounters=len(document.encounters),
        )
        return cls(
            skills=skills,
            characters=characters,
            encounters=list(document.encounters),
            party=list(document.party),
            source_file=source_file,
        )

    def skill(self, skill_id: str) -> Skill:
        """Look up a skill.

        Raises:
            CatalogLoadError: If the id is unknown.
        """
        try:
            return self.skills[skill_id]
        except KeyError:
            raise CatalogLoadError(
                f"Unknown skill '{skill_id}'", source_file=self.source_file
            ) from None

    def character(self, definition_id: str) -> CharacterDefinition:
        """Look up a character definition.

        Raises:
            CatalogLoadError: If the id is unknown.
        """
        try:
            return self.characters[definition_id]
        except KeyError:
            raise CatalogLoadError(
                f"Unknown character '{definition_id}'", source_file=self.source_file
            ) from None


def _index_unique(items: list[Any], key: str, label: str, source_file: str | None) -> dict[str, Any]:
    indexed: dict[str, Any] = {}
    for item in items:
        item_id = getattr(item, key)
        if item_id in indexed:
            raise CatalogLoadError(
                f"Duplicate {label} id '{item_id}'",
                source_file=source_file,
            )
        indexed[item_id] = item
    return indexed


__all__ = [
    "CharacterEntry",
    "PartySlot",
    "CatalogDocument",
    "ContentCatalog",
]
