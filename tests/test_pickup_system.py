from game.entities.components import BoneData, Position, PowerUpData
from game.systems.pickup_system import collect_bones, collect_pickups, collect_power_ups


def add_power_up(gs, x, z, value=50):
    gs.power_ups.append(PowerUpData(gs.next_id(), Position(x, z, 0.5), value))


def add_bone(gs, x, z, value=20):
    gs.bones.append(BoneData(gs.next_id(), Position(x, z, 0.2), value, 0.0))


def test_power_up_ignored_at_full_health(make_gs):
    gs = make_gs()
    add_power_up(gs, 0.2, 0.0)
    assert collect_power_ups(gs) == 0
    assert len(gs.power_ups) == 1


def test_power_up_heals_up_to_max(make_gs):
    gs = make_gs()
    gs.health = 70
    add_power_up(gs, 0.2, 0.0)
    add_power_up(gs, 5.0, 0.0)
    assert collect_power_ups(gs) == 1
    assert gs.health == 100
    assert len(gs.power_ups) == 1


def test_bones_out_of_reach_stay(make_gs):
    gs = make_gs()
    add_bone(gs, 0.9, 0.0)
    assert not collect_bones(gs)
    assert len(gs.bones) == 1
    assert gs.current_exp == 0


def test_bones_grant_exp(make_gs):
    gs = make_gs()
    add_bone(gs, 0.5, 0.0)
    add_bone(gs, 0.0, -0.5)
    assert not collect_bones(gs)
    assert gs.bones == []
    assert gs.current_exp == 40


def test_bones_trigger_level_up(make_gs):
    gs = make_gs()
    gs.current_exp = 85
    gs.health = 50
    add_power_up(gs, 0.0, 0.0)
    add_bone(gs, 0.0, 0.0)
    assert collect_pickups(gs)
    assert gs.level == 2
    assert gs.current_exp == 5
    assert gs.health == 100
    assert len(gs.pending_perks) == 3
