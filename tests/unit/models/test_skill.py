"""Tests for skill, planning and enum models."""

from __future__ import annotations

from typing import Callable

import pytest
from pydantic import ValidationError

from skirmish.models import (
    ActionOutcome,
    ActionStatus,
    Faction,
    PlannedMove,
    RejectionReason,
    Skill,
    SkillType,
    TargetType,
)


class TestTargetType:
    """Tests for TargetType helpers."""

    @pytest.mark.parametrize(
        "target_type,requires,offensive,area",
        [
            (TargetType.SELF, False, False, False),
            (TargetType.ALLY, True, False, False),
            (TargetType.ENEMY, True, True, False),
            (TargetType.ALL_ALLIES, False, False, True),
            (TargetType.ALL_ENEMIES, False, True, True),
        ],
    )
    def test_flags(
        self,
        target_type: TargetType,
        requires: bool,
        offensive: bool,
        area: bool,
    ) -> None:
        """Test the derived targeting flags."""
        assert target_type.requires_target is requires
        assert target_type.is_offensive is offensive
        assert target_type.is_area is area

    def test_faction_opposite(self) -> None:
        """Test faction inversion."""
        assert Faction.PLAYER.opposite is Faction.ENEMY
        assert Faction.ENEMY.opposite is Faction.PLAYER


class TestSkill:
    """Tests for the Skill model."""

    def test_defaults(self) -> None:
        """Test default skill values."""
        skill = Skill(skill_id="jab", name="Jab")

        assert skill.target_type is TargetType.ENEMY
        assert skill.skill_type is SkillType.MELEE
        assert skill.stamina_requirement == 100
        assert skill.allowed_lane == 0
        assert skill.ai_weight == 1.0
        assert skill.requires_target is True
        assert skill.has_self_effects is False
        assert str(skill) == "Jab"

    def test_is_frozen(self, make_skill: Callable[..., Skill]) -> None:
        """Test skills cannot be mutated."""
        skill = make_skill()

        with pytest.raises(ValidationError):
            skill.target_damage = 99

    def test_has_self_effects(self, make_skill: Callable[..., Skill]) -> None:
        """Test self effect detection."""
        assert make_skill(self_damage=3).has_self_effects
        assert make_skill(self_armor=-1).has_self_effects

    def test_from_json_values(self) -> None:
        """Test skills validate from plain JSON values."""
        skill = Skill.model_validate(
            {
                "skill_id": "volley",
                "name": "Volley",
                "target_type": "all_enemies",
                "skill_type": "ranged",
                "target_damage": 4,
            }
        )

        assert skill.target_type is TargetType.ALL_ENEMIES
        assert skill.requires_target is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("allowed_lane", 3),
            ("allowed_lane", -1),
            ("stamina_requirement", -5),
            ("ai_weight", -0.5),
            ("damage_reduction_grant", -1),
        ],
    )
    def test_invalid_values(self, field: str, value: float) -> None:
        """Test out-of-range fields are rejected."""
        with pytest.raises(ValidationError):
            Skill(skill_id="bad", name="Bad", **{field: value})

    def test_unknown_field_rejected(self) -> None:
        """Test extra fields are forbidden."""
        with pytest.raises(ValidationError):
            Skill(skill_id="bad", name="Bad", mana_cost=3)  # type: ignore[call-arg]


class TestPlanning:
    """Tests for PlannedMove and ActionOutcome."""

    def test_retargeted_returns_copy(self, make_skill: Callable[..., Skill]) -> None:
        """Test redirecting produces a new move with the same skill."""
        move = PlannedMove(skill=make_skill(), target_id="hero")

        moved = move.retargeted("knight")

        assert moved.target_id == "knight"
        assert moved.skill is move.skill
        assert move.target_id == "hero"

    def test_rejected_outcome(self) -> None:
        """Test rejection outcomes are not accepted."""
        outcome = ActionOutcome.rejected(
            RejectionReason.ALREADY_ACTED,
            caster_id="hero",
            skill_id="slash",
        )

        assert outcome.status is ActionStatus.REJECTED
        assert outcome.reason is RejectionReason.ALREADY_ACTED
        assert outcome.accepted is False

    def test_accepted_outcome(self) -> None:
        """Test non-rejected outcomes are accepted."""
        outcome = ActionOutcome(status=ActionStatus.TARGETING, valid_target_ids=("goblin_1",))

        assert outcome.accepted is True
        assert outcome.reason is None
