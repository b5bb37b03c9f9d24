"""Tests for the turn coordinator."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from skirmish.core.config import TimingSettings
from skirmish.models.character import CharacterState
from skirmish.models.enums import (
    ActionStatus,
    Faction,
    RejectionReason,
    SkillType,
    TargetType,
    TurnState,
)
from skirmish.models.events import (
    PartyDefeated,
    RequestRejected,
    SkillResolved,
    TargetingCancelled,
    TurnChanged,
)
from skirmish.models.planning import PlannedMove
from skirmish.models.skill import Skill


@pytest.fixture
def bite(make_skill: Callable[..., Skill]) -> Skill:
    """Cheap enemy melee attack."""
    return make_skill("bite", skill_type=SkillType.MELEE, target_damage=3, stamina_requirement=0)


@pytest.fixture
def arena(
    board: Any,
    make_character: Callable[..., CharacterState],
    slash: Skill,
    guard: Skill,
    arrow: Skill,
    volley: Skill,
    bite: Skill,
) -> dict[str, CharacterState]:
    """Two player characters against two biting enemies, first turn started."""
    characters = {
        "knight": make_character("knight", Faction.PLAYER, max_health=40, skills=[slash, guard]),
        "mage": make_character(
            "mage",
            Faction.PLAYER,
            lane_index=2,
            spawn_index=1,
            skills=[arrow, volley],
        ),
        "goblin": make_character("goblin_1", skills=[bite]),
        "archer": make_character("archer_1", lane_index=2, spawn_index=1, skills=[bite]),
    }
    board.add(*characters.values())
    board.coordinator.rebuild_execution_order()
    board.coordinator.start_player_turn()
    return characters


class TestPlayerTurnStart:
    """Tests for starting a round."""

    def test_first_turn(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test the first round plans enemies and selects a player."""
        coordinator = board.coordinator

        assert coordinator.state is TurnState.PLAYER_TURN
        assert coordinator.turn_number == 1
        assert coordinator.active_character is arena["knight"]
        assert arena["goblin"].planned_move.target_id == "knight"
        assert arena["archer"].planned_move.target_id == "knight"
        turn_events = board.events.emitted(TurnChanged)
        assert [(e.state, e.turn_number) for e in turn_events] == [(TurnState.PLAYER_TURN, 1)]

    def test_resets_flags_and_damage_reduction(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test acted flags and damage reduction clear at the start of a round."""
        arena["knight"].has_acted_this_turn = True
        arena["goblin"].damage_reduction = 4
        arena["mage"].damage_reduction = 2

        board.coordinator.start_player_turn()

        assert arena["knight"].has_acted_this_turn is False
        assert arena["goblin"].damage_reduction == 0
        assert arena["mage"].damage_reduction == 0
        assert board.coordinator.turn_number == 2

    def test_execution_order_frozen(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test the enemy order is captured from the formation."""
        assert board.coordinator.execution_order == ["goblin_1", "archer_1"]

        arena["goblin"].health = 0
        assert board.coordinator.execution_order == ["goblin_1", "archer_1"]


class TestMarkActed:
    """Tests for recording player actions."""

    def test_first_call_distributes_stamina(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test acting refills depleted skills once per turn."""
        knight = arena["knight"]
        knight.stamina_by_skill["slash"] = 0

        everyone = board.coordinator.mark_acted(knight)

        assert everyone is False
        assert knight.has_acted_this_turn
        assert knight.stamina_by_skill["slash"] == 100

    def test_second_call_is_noop(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test repeated marking does not distribute again."""
        knight = arena["knight"]
        board.coordinator.mark_acted(knight)
        knight.stamina_by_skill["slash"] = 0

        board.coordinator.mark_acted(knight)

        assert knight.stamina_by_skill["slash"] == 0

    def test_enemies_ignored(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test marking an enemy changes nothing."""
        board.coordinator.mark_acted(arena["goblin"])

        assert arena["goblin"].has_acted_this_turn is False

    def test_reports_all_acted(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test the return value once the last living player acts."""
        arena["mage"].health = 0

        assert board.coordinator.mark_acted(arena["knight"]) is True


class TestSkillRequests:
    """Tests for request_skill_use."""

    def test_untargeted_skill_executes(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test a self skill resolves immediately and passes control on."""
        outcome = board.coordinator.request_skill_use("knight", "guard")

        assert outcome.status is ActionStatus.EXECUTED
        assert arena["knight"].armor == 5
        assert arena["knight"].has_acted_this_turn
        assert board.coordinator.active_character is arena["mage"]

    def test_targeted_skill_enters_targeting(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test single-target skills wait for a target."""
        outcome = board.coordinator.request_skill_use("knight", "slash")

        assert outcome.status is ActionStatus.TARGETING
        assert outcome.valid_target_ids == ("goblin_1",)
        assert board.coordinator.targeting.is_active
        assert arena["knight"].stamina_by_skill["slash"] == 100

    @pytest.mark.parametrize(
        "caster_id,skill_id,expected",
        [
            ("nobody", "guard", RejectionReason.UNKNOWN_CASTER),
            ("goblin_1", "bite", RejectionReason.NOT_PLAYER_CHARACTER),
            ("knight", "fireball", RejectionReason.SKILL_NOT_EQUIPPED),
        ],
    )
    def test_rejections(
        self,
        board: Any,
        arena: dict[str, CharacterState],
        caster_id: str,
        skill_id: str,
        expected: RejectionReason,
    ) -> None:
        """Test invalid requests are rejected with a reason."""
        outcome = board.coordinator.request_skill_use(caster_id, skill_id)

        assert outcome.status is ActionStatus.REJECTED
        assert outcome.reason is expected
        assert board.events.emitted(RequestRejected)[-1].reason is expected

    def test_dead_caster(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test dead characters cannot act."""
        arena["mage"].health = 0

        outcome = board.coordinator.request_skill_use("mage", "arrow")

        assert outcome.reason is RejectionReason.CASTER_DEAD

    def test_already_acted(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test a character acts only once per turn."""
        board.coordinator.request_skill_use("knight", "guard")

        outcome = board.coordinator.request_skill_use("knight", "guard")

        assert outcome.reason is RejectionReason.ALREADY_ACTED
        assert arena["knight"].armor == 5

    def test_insufficient_stamina(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test depleted skills cannot be used."""
        arena["mage"].stamina_by_skill["volley"] = 99

        outcome = board.coordinator.request_skill_use("mage", "volley")

        assert outcome.reason is RejectionReason.INSUFFICIENT_STAMINA
        assert arena["goblin"].health == 30

    def test_new_request_replaces_targeting(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test an untargeted request cancels a pending selection."""
        board.coordinator.request_skill_use("mage", "arrow")

        board.coordinator.request_skill_use("knight", "guard")

        assert not board.coordinator.targeting.is_active
        assert board.events.emitted(TargetingCancelled)[-1].reason == "replaced"
        assert arena["mage"].stamina_by_skill["arrow"] == 50


class TestTargetConfirmation:
    """Tests for confirm_target and cancel_targeting."""

    def test_confirm_executes(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test confirming a valid target resolves the skill."""
        board.coordinator.request_skill_use("mage", "arrow")

        outcome = board.coordinator.confirm_target("archer_1")

        assert outcome.status is ActionStatus.EXECUTED
        assert arena["archer"].health == 25
        assert arena["mage"].has_acted_this_turn
        assert not board.coordinator.targeting.is_active
        record = board.coordinator.action_log[-1]
        assert (record.caster_id, record.skill_id, record.target_ids) == (
            "mage",
            "arrow",
            ("archer_1",),
        )
        assert record.phase is TurnState.PLAYER_TURN

    def test_invalid_target_cancels(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test an invalid confirm cancels without changing state."""
        board.coordinator.request_skill_use("knight", "slash")

        outcome = board.coordinator.confirm_target("archer_1")

        assert outcome.status is ActionStatus.REJECTED
        assert outcome.reason is RejectionReason.INVALID_TARGET
        assert not board.coordinator.targeting.is_active
        assert board.events.emitted(TargetingCancelled)[-1].reason == "invalid_target"
        assert arena["archer"].health == 30
        assert arena["knight"].stamina_by_skill["slash"] == 100
        assert not arena["knight"].has_acted_this_turn
        assert board.coordinator.action_log == []

    def test_confirm_own_side_with_enemy_skill(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test friendly characters are not valid for offensive skills."""
        board.coordinator.request_skill_use("mage", "arrow")

        outcome = board.coordinator.confirm_target("knight")

        assert outcome.reason is RejectionReason.INVALID_TARGET
        assert arena["knight"].health == 40

    def test_confirm_without_targeting(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test confirming with nothing pending is rejected."""
        outcome = board.coordinator.confirm_target("goblin_1")

        assert outcome.reason is RejectionReason.NOT_TARGETING

    def test_cancel(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test cancelling returns to idle without side effects."""
        board.coordinator.request_skill_use("mage", "arrow")

        outcome = board.coordinator.cancel_targeting()
        again = board.coordinator.cancel_targeting()

        assert outcome.status is ActionStatus.CANCELLED
        assert outcome.skill_id == "arrow"
        assert again.reason is RejectionReason.NOT_TARGETING
        assert arena["mage"].stamina_by_skill["arrow"] == 50

    def test_select_character_cancels_targeting(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test switching characters abandons the pending selection."""
        board.coordinator.request_skill_use("mage", "arrow")

        assert board.coordinator.select_character("knight") is True
        assert not board.coordinator.targeting.is_active
        assert board.coordinator.active_character is arena["knight"]
        assert board.events.emitted(TargetingCancelled)[-1].reason == "character_selected"

    def test_select_rejects_enemies_and_acted(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test only living players that have not acted can be selected."""
        board.coordinator.request_skill_use("knight", "guard")

        assert board.coordinator.select_character("goblin_1") is False
        assert board.coordinator.select_character("knight") is False
        assert board.coordinator.select_character("ghost") is False


class TestEnemyTurn:
    """Tests for the enemy turn."""

    def test_enemies_act_then_players_resume(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test ending the turn runs every enemy move in order."""
        assert board.coordinator.end_player_turn() is True

        assert arena["knight"].health == 34
        assert board.coordinator.state is TurnState.PLAYER_TURN
        assert board.coordinator.turn_number == 2
        enemy_moves = [
            e.caster_id
            for e in board.events.emitted(SkillResolved)
            if e.phase is TurnState.ENEMY_TURN
        ]
        assert enemy_moves == ["goblin_1", "archer_1"]

    def test_all_players_acting_ends_turn(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test the enemy turn starts once every player has acted."""
        board.coordinator.request_skill_use("knight", "guard")
        board.coordinator.request_skill_use("mage", "volley")

        assert board.coordinator.turn_number == 2
        assert arena["goblin"].health == 26
        assert arena["archer"].health == 26
        assert arena["knight"].armor == 0
        assert arena["knight"].health == 39
        assert not arena["knight"].has_acted_this_turn
        log = [(r.caster_id, r.phase) for r in board.coordinator.action_log]
        assert log == [
            ("knight", TurnState.PLAYER_TURN),
            ("mage", TurnState.PLAYER_TURN),
            ("goblin_1", TurnState.ENEMY_TURN),
            ("archer_1", TurnState.ENEMY_TURN),
        ]

    def test_cancelled_enemy_skips(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test an enemy without a plan does nothing."""
        board.planner.clear_planned_move(arena["goblin"])

        board.coordinator.end_player_turn()

        assert arena["knight"].health == 37

    def test_dead_enemy_skips(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test enemies that died before their slot do not act."""
        arena["goblin"].health = 0

        board.coordinator.end_player_turn()

        assert arena["knight"].health == 37
        assert arena["goblin"].planned_move is None

    def test_dead_target_still_applies_self_effects(
        self,
        board: Any,
        arena: dict[str, CharacterState],
        make_skill: Callable[..., Skill],
    ) -> None:
        """Test a move whose target died still applies its caster effects."""
        reckless = make_skill("reckless", target_damage=5, self_armor=4, stamina_requirement=0)
        goblin = arena["goblin"]
        goblin.planned_move = PlannedMove(skill=reckless, target_id="mage")
        arena["mage"].health = 0

        board.coordinator.end_player_turn()

        assert goblin.armor == 4
        record = board.coordinator.action_log[0]
        assert (record.caster_id, record.skill_id, record.target_ids) == (
            "goblin_1",
            "reckless",
            (),
        )

    def test_area_skill_without_targets_applies_self_effects(
        self,
        board: Any,
        make_character: Callable[..., CharacterState],
        make_skill: Callable[..., Skill],
    ) -> None:
        """Test an area skill with nobody left to hit still affects the caster."""
        nova = make_skill(
            "nova",
            target_type=TargetType.ALL_ENEMIES,
            target_damage=6,
            self_armor=2,
            stamina_requirement=0,
        )
        knight = make_character("knight", Faction.PLAYER, skills=[nova])
        board.add(knight, make_character("goblin_1", health=0))
        board.coordinator.rebuild_execution_order()
        board.coordinator.start_player_turn()

        outcome = board.coordinator.request_skill_use("knight", "nova")

        assert outcome.status is ActionStatus.EXECUTED
        assert knight.armor == 2

    def test_end_turn_cancels_targeting(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test ending the turn abandons a pending selection."""
        board.coordinator.request_skill_use("mage", "arrow")

        board.coordinator.end_player_turn()

        assert not board.coordinator.targeting.is_active
        reasons = [e.reason for e in board.events.emitted(TargetingCancelled)]
        assert reasons == ["turn_ended"]

    def test_timed_enemy_turn(self, board: Any, arena: dict[str, CharacterState]) -> None:
        """Test enemy moves wait for their delays."""
        board.coordinator.timing = TimingSettings(
            enemy_move_delay=0.3,
            enemy_turn_end_delay=0.5,
            skill_resolution_delay=0.2,
            encounter_complete_delay=1.0,
        )
        coordinator = board.coordinator

        coordinator.end_player_turn()
        assert coordinator.state is TurnState.ENEMY_TURN
        assert arena["knight"].health == 40

        board.scheduler.tick(0.35)
        assert arena["knight"].health == 37

        assert coordinator.request_skill_use("knight", "guard").reason is (
            RejectionReason.NOT_PLAYER_TURN
        )
        assert coordinator.end_player_turn() is False

        board.scheduler.tick(0.35)
        assert arena["knight"].health == 34
        assert coordinator.state is TurnState.ENEMY_TURN

        board.scheduler.tick(0.6)
        assert coordinator.state is TurnState.PLAYER_TURN
        assert coordinator.turn_number == 2


class TestSkillInProgress:
    """Tests for the execution guard."""

    def test_requests_blocked_while_resolving(
        self,
        board: Any,
        arena: dict[str, CharacterState],
    ) -> None:
        """Test nothing else happens until the settle time elapses."""
        board.coordinator.timing = TimingSettings(
            enemy_move_delay=0.0,
            enemy_turn_end_delay=0.0,
            skill_resolution_delay=0.5,
            encounter_complete_delay=0.0,
        )
        coordinator = board.coordinator

        assert coordinator.request_skill_use("knight", "guard").accepted
        assert coordinator.is_executing_skill
        assert arena["knight"].armor == 5
        assert not arena["knight"].has_acted_this_turn

        blocked = coordinator.request_skill_use("mage", "arrow")
        assert blocked.reason is RejectionReason.SKILL_IN_PROGRESS
        assert coordinator.end_player_turn() is False

        board.scheduler.tick(0.5)
        assert not coordinator.is_executing_skill
        assert arena["knight"].has_acted_this_turn
        assert coordinator.request_skill_use("mage", "arrow").status is ActionStatus.TARGETING


class TestCombatOver:
    """Tests for encounter clear and party defeat."""

    def test_encounter_cleared(
        self,
        board: Any,
        make_character: Callable[..., CharacterState],
        make_skill: Callable[..., Skill],
        bite: Skill,
    ) -> None:
        """Test killing the last enemy halts combat and notifies once."""
        execute = make_skill("execute", skill_type=SkillType.MELEE, target_damage=99)
        board.add(
            make_character("knight", Faction.PLAYER, skills=[execute]),
            make_character("squire", Faction.PLAYER, skills=[execute], spawn_index=1),
            make_character("goblin_1", skills=[bite]),
        )
        cleared: list[int] = []
        board.coordinator.on_encounter_cleared = lambda: cleared.append(1)
        board.coordinator.rebuild_execution_order()
        board.coordinator.start_player_turn()

        board.coordinator.request_skill_use("knight", "execute")
        board.coordinator.confirm_target("goblin_1")

        assert cleared == [1]
        assert board.coordinator.is_halted
        outcome = board.coordinator.request_skill_use("squire", "execute")
        assert outcome.reason is RejectionReason.NOT_PLAYER_TURN
        assert board.coordinator.end_player_turn() is False

    def test_party_defeated(
        self,
        board: Any,
        make_character: Callable[..., CharacterState],
        guard: Skill,
        bite: Skill,
    ) -> None:
        """Test losing every player ends the session."""
        board.add(
            make_character("knight", Faction.PLAYER, max_health=3, skills=[guard]),
            make_character("goblin_1", skills=[bite]),
            make_character("goblin_2", skills=[bite], spawn_index=1),
        )
        board.coordinator.rebuild_execution_order()
        board.coordinator.start_player_turn()

        board.coordinator.end_player_turn()

        assert board.coordinator.party_defeated
        assert [e.turn_number for e in board.events.emitted(PartyDefeated)] == [1]
        assert board.coordinator.turn_number == 1
        resolved = [e.caster_id for e in board.events.emitted(SkillResolved)]
        assert resolved == ["goblin_1"]
        outcome = board.coordinator.request_skill_use("knight", "guard")
        assert outcome.reason is RejectionReason.SESSION_OVER

        board.coordinator.start_player_turn()
        assert board.coordinator.turn_number == 1
