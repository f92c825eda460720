"""Tests for the run lifecycle in engine.main_loop."""

import pytest

from engine.action_handler import Intent
from engine.main_loop import FreezeReason, RunState, SimulationConfig, build_summary
from game.constants import EnemyType
from game.entities.components import BoneData, EnemyData, Position
from game.events import GameOver, HealthChanged, LevelUpOptionsReady, TimeElapsed


def place_bone(gs, value=20):
    gs.bones.append(BoneData(gs.next_id(), Position(0.0, 0.0, 0.2), value, 0.0))


def place_enemy(gs, x, z):
    enemy = EnemyData(gs.next_id(), EnemyType.ZOMBIE, Position(x, z), 100, 100, 2.5)
    gs.enemies[enemy.id] = enemy
    return enemy


def record(bus, event_type):
    seen = []
    bus.subscribe(event_type, seen.append)
    return seen


class TestLifecycle:
    def test_start_spawns_first_wave(self, make_loop):
        loop, _ = make_loop()
        assert loop.state is RunState.INITIALIZING
        assert not loop.tick()
        loop.start()
        assert loop.is_running
        enemies = list(loop.game_state.enemies.values())
        assert len(enemies) == 3
        assert all(e.type is EnemyType.ZOMBIE for e in enemies)

    def test_start_publishes_status(self, make_loop):
        loop, _ = make_loop()
        health = record(loop.game_state.bus, HealthChanged)
        loop.start()
        assert health == [HealthChanged(health=100, max_health=100)]
        assert loop.game_state.bus.pending == 0

    def test_status_only_republished_on_change(self, make_loop):
        loop, clock = make_loop()
        health = record(loop.game_state.bus, HealthChanged)
        loop.start()
        clock.advance(16)
        loop.tick()
        assert len(health) == 1
        loop.game_state.health = 90
        clock.advance(16)
        loop.tick()
        assert health[-1].health == 90

    def test_time_elapsed_once_per_second(self, make_loop):
        loop, clock = make_loop()
        seconds = record(loop.game_state.bus, TimeElapsed)
        loop.start()
        clock.advance(999)
        loop.tick()
        assert seconds == []
        clock.advance(1501)
        loop.tick()
        clock.advance(500)
        loop.tick()
        assert [e.seconds for e in seconds] == [1, 2, 3]


class TestFreeze:
    def test_pause_stops_ticks(self, make_loop):
        loop, clock = make_loop()
        loop.start()
        loop.pause()
        assert loop.state is RunState.FROZEN
        clock.advance(100)
        assert not loop.tick()
        loop.resume()
        assert loop.tick()

    def test_resume_shifts_spawn_timer(self, make_loop):
        loop, clock = make_loop()
        gs = loop.game_state
        loop.start()
        clock.advance(1000)
        loop.tick()
        loop.pause()
        clock.advance(5000)
        loop.resume()
        assert gs.last_spawn_time == 5000
        assert gs.game_start_time == 5000
        assert gs.survived_seconds(clock()) == 1

        clock.advance(3000)
        loop.tick()
        assert len(gs.enemies) == 3
        clock.advance(1001)
        loop.tick()
        assert len(gs.enemies) == 4

    @pytest.mark.parametrize("policy,expected_shift", [("shift", 5000), ("exempt", 0)])
    def test_reload_pause_policy(self, make_loop, policy, expected_shift):
        loop, clock = make_loop(config=SimulationConfig(reload_pause_policy=policy))
        gs = loop.game_state
        loop.start()
        gs.ammo = 5
        assert loop.request_reload()
        done_at = gs.reload_done_at
        loop.pause()
        clock.advance(5000)
        loop.resume()
        assert gs.reload_done_at == done_at + expected_shift

    def test_pause_during_level_up_keeps_frozen(self, make_loop):
        loop, clock = make_loop()
        gs = loop.game_state
        loop.start()
        gs.current_exp = 90
        place_bone(gs)
        loop.tick()
        loop.pause()
        assert loop.freeze_reasons == {FreezeReason.PAUSE, FreezeReason.LEVEL_UP}
        loop.resume()
        assert loop.state is RunState.FROZEN


class TestLevelUp:
    def test_bone_pickup_freezes_with_options(self, make_loop):
        loop, clock = make_loop()
        gs = loop.game_state
        offers = record(gs.bus, LevelUpOptionsReady)
        loop.start()
        gs.current_exp = 90
        place_bone(gs)
        clock.advance(16)
        assert loop.tick()
        assert loop.state is RunState.FROZEN
        assert gs.level == 2
        assert gs.current_exp == 10
        assert len(offers) == 1
        assert offers[0].options == gs.pending_perks
        assert not loop.tick()

    def test_select_perk_resumes(self, make_loop):
        loop, clock = make_loop()
        gs = loop.game_state
        loop.start()
        gs.current_exp = 90
        place_bone(gs)
        loop.tick()
        options = gs.pending_perks
        clock.advance(2000)
        assert loop.select_perk(options[0])
        assert loop.is_running
        assert gs.pending_perks == ()
        assert gs.weapon_level == 2
        assert gs.last_spawn_time == 2000

    def test_unknown_perk_is_rejected(self, make_loop):
        loop, _ = make_loop()
        gs = loop.game_state
        loop.start()
        gs.current_exp = 90
        place_bone(gs)
        loop.tick()
        with pytest.raises(ValueError):
            loop.select_perk("not-a-perk")
        assert loop.state is RunState.FROZEN

    def test_select_perk_without_level_up(self, make_loop):
        loop, _ = make_loop()
        loop.start()
        assert not loop.select_perk("speed")

    def test_leftover_exp_chains_level_ups(self, make_loop):
        loop, _ = make_loop()
        gs = loop.game_state
        offers = record(gs.bus, LevelUpOptionsReady)
        loop.start()
        gs.current_exp = 400
        place_bone(gs)
        loop.tick()
        assert gs.level == 2
        assert gs.current_exp == 320

        loop.select_perk(gs.pending_perks[0].id)
        assert loop.state is RunState.FROZEN
        assert gs.level == 3
        assert gs.current_exp == 91
        assert len(offers) == 2

        loop.select_perk(gs.pending_perks[0].id)
        assert loop.is_running


class TestGameOver:
    def test_death_terminates_run(self, make_loop):
        loop, clock = make_loop()
        gs = loop.game_state
        results = record(gs.bus, GameOver)
        loop.start()
        gs.health = 10
        place_enemy(gs, 0.5, 0.0)
        clock.advance(3500)
        assert loop.tick()
        assert loop.is_terminated
        assert results == [loop.result]
        assert loop.result.to_dict() == {
            "enemiesKilled": 0,
            "moneyEarned": 0,
            "moneySpent": 0,
            "timeSurvived": 3,
            "levelReached": 1,
        }
        assert not loop.tick()
        loop.pause()
        assert loop.is_terminated

    def test_run_stats_carry_into_result(self, make_loop):
        loop, clock = make_loop()
        gs = loop.game_state
        loop.start()
        gs.stats.enemies_killed = 4
        gs.stats.money_earned = 40
        gs.stats.money_spent = 25
        gs.health = 10
        place_enemy(gs, 0.5, 0.0)
        clock.advance(3500)
        loop.tick()
        assert loop.is_terminated
        assert loop.result.money_spent == 25
        assert loop.result.money_earned == 40
        assert loop.result.to_dict()["moneySpent"] == 25

    def test_summary(self, make_loop):
        loop, _ = make_loop()
        loop.start()
        summary = build_summary(loop)
        assert summary["state"] == "RUNNING"
        assert summary["enemies"] == 3
        assert summary["result"] is None


class TestInput:
    def test_pull_trigger_fires_immediately(self, make_loop):
        loop, _ = make_loop()
        loop.start()
        loop.pull_trigger((5.0, 0.0))
        assert loop.game_state.ammo == 11
        assert len(loop.game_state.projectiles) == 1

    def test_automatic_weapon_keeps_firing(self, make_loop):
        loop, clock = make_loop(character_id="QUADRINITY")
        gs = loop.game_state
        loop.start()
        loop.pull_trigger((5.0, 0.0))
        fired = gs.weapon.max_ammo - gs.ammo
        for _ in range(3):
            clock.advance(gs.combat_stats.fire_interval)
            loop.tick()
        assert gs.weapon.max_ammo - gs.ammo == fired + 3
        loop.release_trigger()
        clock.advance(gs.combat_stats.fire_interval)
        loop.tick()
        assert gs.weapon.max_ammo - gs.ammo == fired + 3

    def test_intent_moves_player(self, make_loop):
        loop, clock = make_loop()
        loop.start()
        clock.advance(16)
        loop.tick(0.5, Intent(forward=True))
        player = loop.game_state.player
        assert player.x < 0 and player.z < 0


class TestSimulationConfig:
    def test_defaults(self):
        config = SimulationConfig()
        assert config.reload_pause_policy == "shift"
        assert config.sprint_multiplier == 1.0
        assert config.frame_delta == pytest.approx(1 / 60)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"reload_pause_policy": "later"},
            {"sprint_multiplier": 0},
            {"frame_rate": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    def test_from_dict_ignores_unknown_keys(self):
        config = SimulationConfig.from_dict({"reload_pause_policy": "exempt", "bogus": 1})
        assert config.reload_pause_policy == "exempt"

    def test_load(self, tmp_path):
        path = tmp_path / "gameplay.yaml"
        path.write_text("sprint_multiplier: 1.5\nframe_rate: 30\n", encoding="utf-8")
        config = SimulationConfig.load(path)
        assert config.sprint_multiplier == 1.5
        assert config.frame_delta == pytest.approx(1 / 30)
