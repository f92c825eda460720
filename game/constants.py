"""Gameplay enums and tuning values shared across the world and run systems.

Times are in milliseconds of simulation clock, distances in world units.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Final, Tuple


class BuildingVariant(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    RUINED = "ruined"


class TreeVariant(str, Enum):
    DEAD = "dead"
    BURNT = "burnt"
    TWISTED = "twisted"


class ObstacleType(str, Enum):
    CAR = "car"
    DEBRIS = "debris"
    BARRICADE = "barricade"
    DUMPSTER = "dumpster"
    BARREL = "barrel"


class EnemyType(str, Enum):
    ZOMBIE = "ZOMBIE"
    DEMON = "DEMON"
    CROW = "CROW"


class PerkType(str, Enum):
    HEAL = "HEAL"
    SPEED = "SPEED"
    DAMAGE = "DAMAGE"
    FIRE_RATE = "FIRE_RATE"
    MAX_HP = "MAX_HP"
    WEAPON_UPGRADE = "WEAPON_UPGRADE"


class Rarity(str, Enum):
    COMMON = "COMMON"
    RARE = "RARE"
    EPIC = "EPIC"


class WeaponStance(str, Enum):
    ONE_HANDED = "ONE_HANDED"
    TWO_HANDED = "TWO_HANDED"


# --- Map generation ---
# Ordering of these tuples is part of the generated output: the RNG picks by index.
BUILDING_VARIANTS: Final[Tuple[BuildingVariant, ...]] = (
    BuildingVariant.SMALL,
    BuildingVariant.MEDIUM,
    BuildingVariant.LARGE,
    BuildingVariant.RUINED,
)
TREE_VARIANTS: Final[Tuple[TreeVariant, ...]] = (
    TreeVariant.DEAD,
    TreeVariant.BURNT,
    TreeVariant.TWISTED,
)
OBSTACLE_TYPES: Final[Tuple[ObstacleType, ...]] = (
    ObstacleType.CAR,
    ObstacleType.DEBRIS,
    ObstacleType.BARRICADE,
    ObstacleType.DUMPSTER,
    ObstacleType.BARREL,
)

# (width, height, depth) ranges per variant
BUILDING_SIZE_RANGES: Final[
    Dict[BuildingVariant, Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]]
] = {
    BuildingVariant.SMALL: ((3, 5), (2, 4), (3, 5)),
    BuildingVariant.MEDIUM: ((5, 8), (4, 7), (5, 8)),
    BuildingVariant.LARGE: ((8, 12), (6, 10), (8, 12)),
    BuildingVariant.RUINED: ((4, 8), (1, 3), (4, 8)),  # collapsed, so short
}

BUILDING_COLORS: Final[Tuple[str, ...]] = (
    "#262626",
    "#1f1f1f",
    "#2d2d2d",
    "#1a1a1a",
    "#333333",
    "#2a2520",
    "#252530",
)
BUILDING_ROTATIONS: Final[Tuple[float, ...]] = (0.0, math.pi / 2, math.pi, -math.pi / 2)

MAX_PLOT_FILL: Final[float] = 0.8
TREE_MIN_DIST: Final[float] = 4.0
TREE_STREET_BUFFER: Final[float] = 2.0
TREE_BUILDING_CLEARANCE: Final[float] = 2.0
OBSTACLE_MIN_DIST: Final[float] = 6.0
OBSTACLE_STREET_BUFFER: Final[float] = 1.0
LAMP_PLACEMENT_CHANCE: Final[float] = 0.7
LAMP_WORKING_CHANCE: Final[float] = 0.3
LAMP_STREET_OFFSET: Final[float] = 0.5
STREET_SURFACE_HEIGHT: Final[float] = 0.01
POISSON_MAX_POINTS: Final[int] = 500
POISSON_MAX_ATTEMPTS: Final[int] = 30

# --- Player ---
MOVEMENT_SPEED: Final[float] = 5.0
MAX_HEALTH: Final[int] = 100
PLAYER_RADIUS: Final[float] = 0.3
MUZZLE_HEIGHT: Final[float] = 1.2
UNLIMITED_CASH_AMOUNT: Final[int] = 9_999_999

# --- Enemies ---
ENEMY_RADIUS: Final[float] = 0.35
ENEMY_DAMAGE: Final[int] = 15
INVULNERABILITY_TIME: Final[float] = 1000.0
ENEMY_ATTACK_RANGE_BUFFER: Final[float] = 0.4
ENEMY_STOP_DIST_SQ: Final[float] = 0.5
ENEMY_HIT_RADIUS: Final[float] = ENEMY_RADIUS + 0.1
MONEY_PER_KILL: Final[int] = 10


@dataclass(frozen=True)
class EnemyProfile:
    base_speed: float
    max_health: int
    speed_per_minute: float = 0.0


ENEMY_PROFILES: Final[Dict[EnemyType, EnemyProfile]] = {
    EnemyType.ZOMBIE: EnemyProfile(base_speed=2.5, max_health=100),
    EnemyType.DEMON: EnemyProfile(base_speed=4.5, max_health=80, speed_per_minute=0.2),
    EnemyType.CROW: EnemyProfile(base_speed=6.0, max_health=30),
}

# Difficulty breakpoints: roll above threshold OR survived past the minute mark.
DEMON_ROLL_THRESHOLD: Final[float] = 0.8
DEMON_MINUTE_MARK: Final[float] = 2.0
CROW_ROLL_THRESHOLD: Final[float] = 0.9
CROW_MINUTE_MARK: Final[float] = 4.0

# --- Spawning ---
INITIAL_ENEMY_COUNT: Final[int] = 3
MAX_ENEMIES_CAP: Final[int] = 40
SPAWN_INTERVAL: Final[float] = 4000.0
MAX_SPAWN_BATCH: Final[int] = 6
POWERUP_INTERVAL: Final[float] = 30000.0
HEAL_AMOUNT: Final[int] = 50
SPAWN_RANGE: Final[float] = 45.0
SPAWN_SAFE_RADIUS: Final[float] = 12.0
SPAWN_BUILDING_MARGIN: Final[float] = 1.0
SPAWN_MAX_TRIES: Final[int] = 50
SPAWN_FALLBACK: Final[Tuple[float, float]] = (20.0, 20.0)
POWERUP_HEIGHT: Final[float] = 0.5

# --- Projectiles ---
PROJECTILE_TTL: Final[float] = 2000.0

# --- Collision ---
TREE_COLLISION_RADIUS: Final[float] = 0.3
PROJECTILE_TREE_RADIUS: Final[float] = 0.5
CAR_COLLISION_RADIUS: Final[float] = 1.2
OBSTACLE_COLLISION_RADIUS: Final[float] = 0.5
POWERUP_RADIUS: Final[float] = 0.5

# --- Leveling ---
BONE_RADIUS: Final[float] = 0.5
BONE_EXP_VALUE: Final[int] = 20
BONE_HEIGHT: Final[float] = 0.2
BASE_EXP_REQ: Final[int] = 100
EXP_EXPONENT: Final[float] = 1.2
PERK_CHOICES: Final[int] = 3

