# game/items/registry.py
"""Static weapon, character and perk tables.

Weapon tiers are discrete: ``WEAPON_LEVEL_STATS[key][level - 1]`` overrides the
base weapon's ammo/damage/reload for that tier, and a weapon cannot be raised
past the last row of its table.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Final, List, Tuple

import structlog

from game.constants import PerkType, Rarity, WeaponStance

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WeaponStats:
    name: str
    stance: WeaponStance
    max_ammo: int
    damage: float
    fire_rate: float  # ms between shots
    reload_time: float  # ms
    projectile_speed: float
    pellet_count: int = 1
    spread: float = 0.0  # radians of total spray
    automatic: bool = False


@dataclass(frozen=True)
class WeaponTier:
    max_ammo: int
    damage: float
    reload_time: float


@dataclass(frozen=True)
class CharacterConfig:
    id: str
    name: str
    description: str
    weapon: str


@dataclass(frozen=True)
class PerkOption:
    id: str
    type: PerkType
    label: str
    description: str
    rarity: Rarity
    value: float


BASE_WEAPON: Final[str] = "PISTOL"

WEAPONS: Final[Dict[str, WeaponStats]] = {
    "PISTOL": WeaponStats(
        name="Silver Enforcer",
        stance=WeaponStance.ONE_HANDED,
        max_ammo=12,
        damage=40,
        fire_rate=250,
        reload_time=1200,
        projectile_speed=20,
    ),
    "UZI": WeaponStats(
        name="Micro Silencer",
        stance=WeaponStance.ONE_HANDED,
        max_ammo=20,
        damage=26,
        fire_rate=50,
        reload_time=900,
        projectile_speed=24,
        spread=0.1,
        automatic=True,
    ),
    "SHOTGUN": WeaponStats(
        name="Demon Breaker",
        stance=WeaponStance.TWO_HANDED,
        max_ammo=6,
        damage=22,  # per pellet
        fire_rate=900,
        reload_time=2200,
        projectile_speed=18,
        pellet_count=5,
        spread=0.3,
    ),
}

WEAPON_LEVEL_STATS: Final[Dict[str, Tuple[WeaponTier, ...]]] = {
    "PISTOL": (
        WeaponTier(max_ammo=12, damage=40, reload_time=1200),
        WeaponTier(max_ammo=20, damage=60, reload_time=1000),
        WeaponTier(max_ammo=32, damage=85, reload_time=800),
    ),
    "UZI": (
        WeaponTier(max_ammo=20, damage=26, reload_time=900),
        WeaponTier(max_ammo=32, damage=34, reload_time=800),
        WeaponTier(max_ammo=50, damage=42, reload_time=700),
    ),
    "SHOTGUN": (
        WeaponTier(max_ammo=6, damage=22, reload_time=2200),
        WeaponTier(max_ammo=10, damage=32, reload_time=1900),
        WeaponTier(max_ammo=16, damage=45, reload_time=1500),
    ),
}

CHARACTERS: Final[Dict[str, CharacterConfig]] = {
    "TOM": CharacterConfig(
        id="TOM",
        name="Survivor Tom",
        description="Just trying to make it to dawn.",
        weapon="PISTOL",
    ),
    "HANK": CharacterConfig(
        id="HANK",
        name="Exorcist Hank",
        description="Here to clean up the town.",
        weapon="SHOTGUN",
    ),
    "QUADRINITY": CharacterConfig(
        id="QUADRINITY",
        name="Quadrinity",
        description="She needs guns. Lots of guns.",
        weapon="UZI",
    ),
}
DEFAULT_CHARACTER: Final[str] = "TOM"

PERKS: Final[Tuple[PerkOption, ...]] = (
    PerkOption("p1", PerkType.HEAL, "First Aid", "Heal 50% HP", Rarity.COMMON, 0.5),
    PerkOption("p2", PerkType.SPEED, "Adrenaline", "+10% Speed", Rarity.COMMON, 0.1),
    PerkOption("p3", PerkType.DAMAGE, "Silver Bullets", "+15% Damage", Rarity.RARE, 0.15),
    PerkOption("p4", PerkType.FIRE_RATE, "Fast Hands", "+10% Fire Rate", Rarity.RARE, 0.1),
    PerkOption("p5", PerkType.MAX_HP, "Thick Skin", "+20% Max HP", Rarity.EPIC, 0.2),
)


def get_character(character_id: str) -> CharacterConfig:
    """Look up a character, falling back to the default survivor."""
    character = CHARACTERS.get(character_id)
    if character is None:
        log.warning("Unknown character id, using default", character_id=character_id)
        return CHARACTERS[DEFAULT_CHARACTER]
    return character


def max_weapon_level(weapon_key: str) -> int:
    tiers = WEAPON_LEVEL_STATS.get(weapon_key)
    return len(tiers) if tiers else 1


def resolve_weapon(weapon_key: str, level: int) -> WeaponStats:
    """Base weapon stats with the 1-based tier ``level`` applied on top."""
    base = WEAPONS.get(weapon_key, WEAPONS[BASE_WEAPON])
    tiers = WEAPON_LEVEL_STATS.get(weapon_key)
    if not tiers or not 1 <= level <= len(tiers):
        return base
    tier = tiers[level - 1]
    return replace(
        base,
        max_ammo=tier.max_ammo,
        damage=tier.damage,
        reload_time=tier.reload_time,
    )


def weapon_tier(weapon_key: str, level: int) -> WeaponTier | None:
    tiers = WEAPON_LEVEL_STATS.get(weapon_key)
    if not tiers or not 1 <= level <= len(tiers):
        return None
    return tiers[level - 1]


def perk_pool() -> List[PerkOption]:
    return list(PERKS)
