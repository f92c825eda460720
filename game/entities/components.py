from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from game.constants import EnemyType


@dataclass
class Position:
    """Point on the ground plane (y is height and only cosmetic here)."""

    x: float
    z: float
    y: float = 0.0

    def __iter__(self):
        yield self.x
        yield self.z

    def dist_sq(self, x: float, z: float) -> float:
        return (self.x - x) ** 2 + (self.z - z) ** 2


@dataclass
class EnemyData:
    id: int
    type: EnemyType
    position: Position
    max_health: float
    current_health: float
    speed: float

    @property
    def alive(self) -> bool:
        return self.current_health > 0


@dataclass
class ProjectileData:
    id: int
    position: Position
    direction: Tuple[float, float]  # unit vector on the x/z plane
    speed: float
    damage: float
    created_at: float


@dataclass
class PowerUpData:
    id: int
    position: Position
    value: float
    type: str = "HEALTH"


@dataclass
class BoneData:
    """Experience pickup dropped where an enemy died."""

    id: int
    position: Position
    value: int
    created_at: float


@dataclass
class RunModifiers:
    """Run-scoped multipliers collected from perks; all start at 1.0."""

    speed: float = 1.0
    damage: float = 1.0
    fire_rate: float = 1.0
    max_hp: float = 1.0


@dataclass
class CombatStats:
    """Effective stats after shop upgrades, weapon tier and perks."""

    max_health: int
    speed: float
    damage: float
    fire_interval: float


@dataclass
class RunStats:
    enemies_killed: int = 0
    money_earned: int = 0
    money_spent: int = 0
