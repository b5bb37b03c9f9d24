"""Tests for the character registry and formation layout."""

from __future__ import annotations

from typing import Callable

import pytest

from skirmish.core.constants import SLOT_HEIGHT_BOTTOM, SLOT_HEIGHT_MIDDLE, SLOT_HEIGHT_TOP
from skirmish.core.exceptions import CombatError, GameEngineError
from skirmish.engine.formation import arrange_formation, execution_order, slot_heights
from skirmish.engine.registry import CharacterRegistry
from skirmish.models.character import CharacterState
from skirmish.models.enums import Faction


class TestCharacterRegistry:
    """Tests for CharacterRegistry."""

    def test_add_and_lookup(self, make_character: Callable[..., CharacterState]) -> None:
        """Test registering and finding characters."""
        registry = CharacterRegistry()
        hero = registry.add(make_character("hero", Faction.PLAYER))

        assert "hero" in registry
        assert registry.get("hero") is hero
        assert registry.get(None) is None
        assert registry.require("hero") is hero
        assert len(registry) == 1

    def test_duplicate_id_rejected(self, make_character: Callable[..., CharacterState]) -> None:
        """Test ids are unique on the board."""
        registry = CharacterRegistry()
        registry.add(make_character("goblin_1"))

        with pytest.raises(GameEngineError):
            registry.add(make_character("goblin_1"))

    def test_require_unknown(self) -> None:
        """Test require raises for unknown ids."""
        with pytest.raises(CombatError) as exc_info:
            CharacterRegistry().require("nobody")

        assert exc_info.value.details["character_id"] == "nobody"

    def test_members_and_living_filter(self, make_character: Callable[..., CharacterState]) -> None:
        """Test faction listings in spawn order."""
        registry = CharacterRegistry()
        registry.add(make_character("hero", Faction.PLAYER))
        registry.add(make_character("goblin_1"))
        registry.add(make_character("goblin_2", health=0))

        assert [c.character_id for c in registry.members(Faction.ENEMY)] == ["goblin_1"]
        assert [c.character_id for c in registry.enemies()] == ["goblin_1", "goblin_2"]
        assert [c.character_id for c in registry.players()] == ["hero"]

    def test_lane_occupied_ignores_dead(self, make_character: Callable[..., CharacterState]) -> None:
        """Test a dead front-liner does not hold the lane."""
        registry = CharacterRegistry()
        registry.add(make_character("goblin_1", lane_index=1, health=0))
        registry.add(make_character("archer_1", lane_index=2))

        assert registry.lane_occupied(Faction.ENEMY, 1) is False
        assert registry.lane_occupied(Faction.ENEMY, 2) is True

    def test_faction_defeated(self, make_character: Callable[..., CharacterState]) -> None:
        """Test defeat requires members, all dead."""
        registry = CharacterRegistry()
        assert registry.faction_defeated(Faction.ENEMY) is False

        goblin = registry.add(make_character("goblin_1"))
        assert registry.faction_defeated(Faction.ENEMY) is False

        goblin.health = 0
        assert registry.faction_defeated(Faction.ENEMY) is True

    def test_clear_faction(self, make_character: Callable[..., CharacterState]) -> None:
        """Test removing one side of the board."""
        registry = CharacterRegistry()
        registry.add(make_character("hero", Faction.PLAYER))
        registry.add(make_character("goblin_1"))
        registry.add(make_character("goblin_2"))

        removed = registry.clear_faction(Faction.ENEMY)

        assert removed == ["goblin_1", "goblin_2"]
        assert [c.character_id for c in registry] == ["hero"]


class TestSlotHeights:
    """Tests for lane slot layout."""

    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, []),
            (1, [SLOT_HEIGHT_BOTTOM]),
            (2, [SLOT_HEIGHT_TOP, SLOT_HEIGHT_BOTTOM]),
            (3, [SLOT_HEIGHT_TOP, SLOT_HEIGHT_MIDDLE, SLOT_HEIGHT_BOTTOM]),
            (4, [SLOT_HEIGHT_TOP, SLOT_HEIGHT_MIDDLE, SLOT_HEIGHT_BOTTOM, SLOT_HEIGHT_BOTTOM]),
        ],
    )
    def test_layouts(self, count: int, expected: list[float]) -> None:
        """Test slot heights per lane size."""
        assert slot_heights(count) == expected


class TestExecutionOrder:
    """Tests for formation-derived acting order."""

    def test_top_slot_first_then_lane(self, make_character: Callable[..., CharacterState]) -> None:
        """Test ordering by height, then lane, then spawn order."""
        enemies = [
            make_character("goblin_1", lane_index=1, spawn_index=0),
            make_character("goblin_2", lane_index=1, spawn_index=1),
            make_character("archer_1", lane_index=2, spawn_index=2),
        ]

        arrange_formation(enemies)

        assert enemies[0].formation_height == SLOT_HEIGHT_TOP
        assert enemies[1].formation_height == SLOT_HEIGHT_BOTTOM
        assert enemies[2].formation_height == SLOT_HEIGHT_BOTTOM
        assert execution_order(enemies) == ["goblin_1", "goblin_2", "archer_1"]

    def test_lone_front_liner_acts_after_back_pair(
        self,
        make_character: Callable[..., CharacterState],
    ) -> None:
        """Test a single member in the bottom slot acts after a top slot in another lane."""
        enemies = [
            make_character("brute_1", lane_index=1, spawn_index=0),
            make_character("archer_1", lane_index=2, spawn_index=1),
            make_character("archer_2", lane_index=2, spawn_index=2),
        ]

        arrange_formation(enemies)

        assert execution_order(enemies) == ["archer_1", "brute_1", "archer_2"]

    def test_order_independent_of_input_order(
        self,
        make_character: Callable[..., CharacterState],
    ) -> None:
        """Test the order depends only on layout."""
        enemies = [
            make_character("c", lane_index=1, spawn_index=2),
            make_character("a", lane_index=1, spawn_index=0),
            make_character("b", lane_index=1, spawn_index=1),
        ]

        arrange_formation(enemies)

        assert execution_order(enemies) == ["a", "b", "c"]
        assert execution_order(list(reversed(enemies))) == ["a", "b", "c"]
