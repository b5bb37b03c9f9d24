"""Registry of characters on the board.

Every collaborator queries the board through one CharacterRegistry owned
by the session instead of scanning for characters. Insertion order is
preserved and is the spawn order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from skirmish.core.exceptions import CombatError, GameEngineError
from skirmish.core.logging import get_logger
from skirmish.models.enums import Faction


if TYPE_CHECKING:
    from collections.abc import Iterator

    from skirmish.models.character import CharacterState

logger = get_logger(__name__)


class CharacterRegistry:
    """Characters currently on the board, keyed by id."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._characters: dict[str, CharacterState] = {}

    def __contains__(self, character_id: object) -> bool:
        return character_id in self._characters

    def __len__(self) -> int:
        return len(self._characters)

    def __iter__(self) -> Iterator[CharacterState]:
        return iter(list(self._characters.values()))

    # =========================================================================
    # Registration
    # =========================================================================

    def add(self, character: CharacterState) -> CharacterState:
        """Register a character.

        Args:
            character: The character to add.

        Returns:
            The registered character.

        Raises:
            GameEngineError: If the id is already registered.
        """
        if character.character_id in self._characters:
            raise GameEngineError(
                "Character id already registered",
                details={"character_id": character.character_id},
            )
        self._characters[character.character_id] = character
        logger.debug(
            "Character registered",
            character_id=character.character_id,
            faction=character.faction.value,
            lane=character.lane_index,
        )
        return character

    def remove(self, character_id: str) -> CharacterState | None:
        return self._characters.pop(character_id, None)

    def clear_faction(self, faction: Faction) -> list[str]:
        """Remove every character of one faction.

        Args:
            faction: Faction to remove.

        Returns:
            Ids of the removed characters.
        """
        removed = [c.character_id for c in self._characters.values() if c.faction is faction]
        for character_id in removed:
            del self._characters[character_id]
        return removed

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, character_id: str | None) -> CharacterState | None:
        if character_id is None:
            return None
        return self._characters.get(character_id)

    def require(self, character_id: str) -> CharacterState:
        """Look up a character that must exist.

        Args:
            character_id: The character identifier.

        Returns:
            The registered character.

        Raises:
            CombatError: If the id is unknown.
        """
        character = self._characters.get(character_id)
        if character is None:
            raise CombatError("Unknown character", character_id=character_id)
        return character

    def members(self, faction: Faction, *, living_only: bool = True) -> list[CharacterState]:
        """Get a faction's characters in spawn order.

        Args:
            faction: Faction to list.
            living_only: Exclude dead characters.

        Returns:
            Matching characters.
        """
        return [
            c
            for c in self._characters.values()
            if c.faction is faction and (c.is_alive or not living_only)
        ]

    def players(self, *, living_only: bool = False) -> list[CharacterState]:
        return self.members(Faction.PLAYER, living_only=living_only)

    def enemies(self, *, living_only: bool = False) -> list[CharacterState]:
        return self.members(Faction.ENEMY, living_only=living_only)

    def lane_occupied(self, faction: Faction, lane_index: int) -> bool:
        """Check whether a lane holds at least one living member of a faction.

        Args:
            faction: Faction to inspect.
            lane_index: Lane to inspect.

        Returns:
            True if a living member of the faction occupies the lane.
        """
        return any(c.lane_index == lane_index for c in self.members(faction))

    def faction_defeated(self, faction: Faction) -> bool:
        """Check whether every member of a faction is dead.

        An empty faction does not count as defeated.

        Returns:
            True if the faction has members and none are alive.
        """
        everyone = self.members(faction, living_only=False)
        return bool(everyone) and not any(c.is_alive for c in everyone)


__all__ = ["CharacterRegistry"]
