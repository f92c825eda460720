# game/systems/progression.py
"""In-run leveling, perk offers and derived combat stats."""
from __future__ import annotations

import math
from dataclasses import replace
from typing import TYPE_CHECKING, List, Tuple

import structlog

from game.constants import BASE_EXP_REQ, EXP_EXPONENT, PERK_CHOICES, PerkType, Rarity
from game.entities.components import CombatStats, RunModifiers
from game.items.registry import (
    BASE_WEAPON,
    WEAPONS,
    PerkOption,
    WeaponStats,
    perk_pool,
    weapon_tier,
)

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from game.economy import PlayerStats
    from game.game_state import GameState

log = structlog.get_logger(__name__)

WEAPON_UPGRADE_ID = "weapon-upgrade"


def exp_requirement(level: int) -> int:
    """Experience needed to go from ``level`` to ``level + 1``."""
    return math.floor(BASE_EXP_REQ * level**EXP_EXPONENT)


def derive_combat_stats(
    player_stats: "PlayerStats", weapon: WeaponStats, modifiers: RunModifiers
) -> CombatStats:
    """Combine shop stats, the equipped weapon tier and run perks.

    Damage and fire rate scale by the shop value's ratio to the base pistol,
    so an upgrade keeps the same relative weight whichever gun is carried.
    """
    base_weapon = WEAPONS[BASE_WEAPON]
    max_health = math.floor(player_stats.max_health * modifiers.max_hp)
    speed = player_stats.movement_speed * modifiers.speed

    damage_multiplier = player_stats.damage / base_weapon.damage
    damage = weapon.damage * damage_multiplier * modifiers.damage

    fire_rate_ratio = base_weapon.fire_rate / player_stats.fire_rate
    fire_interval = (weapon.fire_rate / fire_rate_ratio) / modifiers.fire_rate

    return CombatStats(
        max_health=max_health,
        speed=speed,
        damage=damage,
        fire_interval=fire_interval,
    )


def generate_perk_options(gs: "GameState") -> Tuple[PerkOption, ...]:
    """Three perk choices; the next weapon tier always takes a slot while one exists."""
    shuffled = perk_pool()
    gs.rng.shuffle(shuffled)
    options: List[PerkOption] = []

    next_level = gs.weapon_level + 1
    tier = weapon_tier(gs.weapon_key, next_level)
    if gs.weapon_level < gs.max_weapon_level and tier is not None:
        options.append(
            PerkOption(
                id=WEAPON_UPGRADE_ID,
                type=PerkType.WEAPON_UPGRADE,
                label=f"{gs.weapon.name} MK {'I' * next_level}",
                description=(
                    f"Upgrade to Level {next_level}.\n"
                    f"Ammo: {tier.max_ammo}, Dmg: {tier.damage:g}, "
                    f"Reload: {tier.reload_time:g}ms"
                ),
                rarity=Rarity.EPIC,
                value=1,
            )
        )

    for base in shuffled:
        if len(options) >= PERK_CHOICES:
            break
        options.append(replace(base, id=f"{base.id}-{gs.next_id()}"))
    return tuple(options)


def trigger_level_up(gs: "GameState", overflow: float) -> None:
    gs.level += 1
    gs.current_exp = overflow
    gs.exp_to_next_level = exp_requirement(gs.level)
    gs.pending_perks = generate_perk_options(gs)
    log.info(
        "Level up",
        level=gs.level,
        overflow=overflow,
        next_requirement=gs.exp_to_next_level,
        options=[p.type.value for p in gs.pending_perks],
    )


def add_experience(gs: "GameState", amount: float) -> bool:
    """Accumulate experience; returns True when a level-up was triggered.

    Only one level is gained per call; any overflow is carried and checked
    again once the pending perk has been chosen.
    """
    if amount <= 0:
        return False
    total = gs.current_exp + amount
    if total >= gs.exp_to_next_level:
        trigger_level_up(gs, total - gs.exp_to_next_level)
        return True
    gs.current_exp = total
    return False


def apply_perk(gs: "GameState", perk: PerkOption) -> None:
    """Apply a chosen perk to the run."""
    max_health_before = gs.combat_stats.max_health
    if perk.type is PerkType.WEAPON_UPGRADE:
        if gs.weapon_level >= gs.max_weapon_level:
            log.warning("Weapon already at max tier", weapon=gs.weapon_key)
        else:
            gs.weapon_level += 1
            gs.ammo = gs.weapon.max_ammo
    elif perk.type is PerkType.SPEED:
        gs.modifiers.speed += perk.value
    elif perk.type is PerkType.DAMAGE:
        gs.modifiers.damage += perk.value
    elif perk.type is PerkType.FIRE_RATE:
        gs.modifiers.fire_rate += perk.value
    elif perk.type is PerkType.MAX_HP:
        gs.modifiers.max_hp += perk.value
        gs.health += max_health_before * perk.value
    elif perk.type is PerkType.HEAL:
        gs.health = min(max_health_before, gs.health + max_health_before * perk.value)
    log.debug("Perk applied", perk=perk.type.value, value=perk.value, level=gs.level)
