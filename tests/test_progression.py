import pytest

from game.constants import PerkType, Rarity
from game.economy import PlayerStats
from game.entities.components import RunModifiers
from game.items.registry import PERKS, WEAPONS, get_character, resolve_weapon
from game.systems.progression import (
    WEAPON_UPGRADE_ID,
    add_experience,
    apply_perk,
    derive_combat_stats,
    exp_requirement,
    generate_perk_options,
)

BASE_STATS = PlayerStats(max_health=100, movement_speed=5, damage=35, fire_rate=250)


def perk(perk_type):
    return next(p for p in PERKS if p.type is perk_type)


def test_exp_requirement_curve():
    assert exp_requirement(1) == 100
    assert exp_requirement(2) == 229
    assert exp_requirement(3) == 373


class TestDerivedStats:
    def test_pistol_baseline(self):
        stats = derive_combat_stats(BASE_STATS, WEAPONS["PISTOL"], RunModifiers())
        assert stats.max_health == 100
        assert stats.speed == 5
        assert stats.damage == pytest.approx(35)
        assert stats.fire_interval == pytest.approx(250)

    def test_ratios_carry_to_other_weapons(self):
        stats = derive_combat_stats(BASE_STATS, WEAPONS["SHOTGUN"], RunModifiers())
        assert stats.damage == pytest.approx(22 * 35 / 40)
        assert stats.fire_interval == pytest.approx(900)

        faster = PlayerStats(max_health=100, movement_speed=5, damage=35, fire_rate=125)
        stats = derive_combat_stats(faster, WEAPONS["UZI"], RunModifiers())
        assert stats.fire_interval == pytest.approx(25)

    def test_modifiers_apply(self):
        mods = RunModifiers(speed=1.1, damage=1.15, fire_rate=1.1, max_hp=1.2)
        stats = derive_combat_stats(BASE_STATS, WEAPONS["PISTOL"], mods)
        assert stats.max_health == 120
        assert stats.speed == pytest.approx(5.5)
        assert stats.damage == pytest.approx(35 * 1.15)
        assert stats.fire_interval == pytest.approx(250 / 1.1)


class TestExperience:
    def test_exact_requirement_levels_with_zero_overflow(self, make_gs):
        gs = make_gs()
        assert add_experience(gs, 100)
        assert gs.level == 2
        assert gs.current_exp == 0
        assert gs.exp_to_next_level == 229
        assert len(gs.pending_perks) == 3

    def test_overflow_carries(self, make_gs):
        gs = make_gs()
        gs.current_exp = 90
        assert add_experience(gs, 20)
        assert gs.level == 2
        assert gs.current_exp == 10

    def test_below_requirement_accumulates(self, make_gs):
        gs = make_gs()
        assert not add_experience(gs, 60)
        assert gs.level == 1
        assert gs.current_exp == 60


class TestPerkOptions:
    def test_weapon_upgrade_forced_while_available(self, make_gs):
        gs = make_gs()
        options = generate_perk_options(gs)
        assert len(options) == 3
        upgrade = options[0]
        assert upgrade.id == WEAPON_UPGRADE_ID
        assert upgrade.type is PerkType.WEAPON_UPGRADE
        assert upgrade.rarity is Rarity.EPIC
        assert upgrade.label == "Silver Enforcer MK II"
        assert "Ammo: 20" in upgrade.description
        assert all(o.type is not PerkType.WEAPON_UPGRADE for o in options[1:])

    def test_maxed_weapon_offers_three_distinct_perks(self, make_gs):
        gs = make_gs()
        gs.weapon_level = gs.max_weapon_level
        options = generate_perk_options(gs)
        assert len(options) == 3
        assert len({o.type for o in options}) == 3
        assert all(o.type is not PerkType.WEAPON_UPGRADE for o in options)
        assert len({o.id for o in options}) == 3

    def test_options_follow_run_seed(self, make_gs):
        a = [o.type for o in generate_perk_options(make_gs(rng_seed=3))]
        b = [o.type for o in generate_perk_options(make_gs(rng_seed=3))]
        assert a == b


class TestApplyPerk:
    def test_weapon_upgrade_refills_to_new_capacity(self, make_gs):
        gs = make_gs()
        gs.ammo = 1
        upgrade = generate_perk_options(gs)[0]
        apply_perk(gs, upgrade)
        assert gs.weapon_level == 2
        assert gs.ammo == 20
        assert gs.weapon == resolve_weapon("PISTOL", 2)

    def test_max_hp_raises_cap_and_health(self, make_gs):
        gs = make_gs()
        apply_perk(gs, perk(PerkType.MAX_HP))
        assert gs.combat_stats.max_health == 120
        assert gs.health == pytest.approx(120)

    def test_heal_is_capped(self, make_gs):
        gs = make_gs()
        gs.health = 30
        apply_perk(gs, perk(PerkType.HEAL))
        assert gs.health == 80
        apply_perk(gs, perk(PerkType.HEAL))
        assert gs.health == 100

    def test_stat_perks_add_to_modifiers(self, make_gs):
        gs = make_gs()
        apply_perk(gs, perk(PerkType.SPEED))
        apply_perk(gs, perk(PerkType.DAMAGE))
        apply_perk(gs, perk(PerkType.FIRE_RATE))
        assert gs.modifiers.speed == pytest.approx(1.1)
        assert gs.modifiers.damage == pytest.approx(1.15)
        assert gs.modifiers.fire_rate == pytest.approx(1.1)


def test_unknown_character_falls_back():
    assert get_character("NOBODY").id == "TOM"
