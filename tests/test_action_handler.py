import math

import pytest

from engine.action_handler import IDLE, Intent, intent_from_action, process_intent


def test_move_action_sets_flags():
    intent = intent_from_action({"type": "move", "dirs": ["up", "left", "sideways"], "sprint": True})
    assert intent.forward and intent.left and intent.sprint
    assert not intent.backward and not intent.right
    assert intent.axes == (1.0, -1.0)


def test_reload_and_wait_actions():
    assert intent_from_action({"type": "reload"}).reload
    assert intent_from_action({"type": "wait", "aim": (1.0, 2.0)}).aim == (1.0, 2.0)
    assert intent_from_action({}) == IDLE


def test_unknown_action_is_idle():
    assert intent_from_action({"type": "dance"}) is IDLE


def test_opposite_keys_cancel():
    assert not Intent(forward=True, backward=True).is_moving


def test_idle_intent_does_nothing(make_gs):
    gs = make_gs()
    assert not process_intent(IDLE, gs, 0.5, 0.0)
    assert (gs.player.x, gs.player.z) == (0.0, 0.0)


def test_forward_moves_at_player_speed(make_gs):
    gs = make_gs()
    assert process_intent(Intent(forward=True), gs, 1.0, 0.0)
    assert math.hypot(gs.player.x, gs.player.z) == pytest.approx(5.0)


def test_sprint_multiplier(make_gs):
    gs = make_gs()
    process_intent(Intent(forward=True, sprint=True), gs, 1.0, 0.0, sprint_multiplier=1.5)
    assert math.hypot(gs.player.x, gs.player.z) == pytest.approx(7.5)

    walker = make_gs()
    process_intent(Intent(forward=True), walker, 1.0, 0.0, sprint_multiplier=1.5)
    assert math.hypot(walker.player.x, walker.player.z) == pytest.approx(5.0)


def test_reload_intent(make_gs):
    gs = make_gs()
    gs.ammo = 3
    process_intent(Intent(reload=True), gs, 0.016, 100.0)
    assert gs.is_reloading
    assert gs.reload_done_at == 1300.0


def test_dead_player_ignores_input(make_gs):
    gs = make_gs()
    gs.health = 0
    assert not process_intent(Intent(forward=True), gs, 1.0, 0.0)
