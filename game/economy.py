# game/economy.py
"""Cross-run progression: cash, shop upgrades and the stats they grant.

Everything here is a pure function over immutable records.  Callers own I/O;
see :mod:`utils.save_store` for the JSON round trip.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Final, Mapping

import structlog

log = structlog.get_logger(__name__)


class UpgradeType(str, Enum):
    HEALTH = "healthLevel"
    SPEED = "speedLevel"
    DAMAGE = "damageLevel"
    FIRE_RATE = "fireRateLevel"


@dataclass(frozen=True)
class UpgradeRule:
    name: str
    base: float
    per_level: float
    base_cost: int
    cost_mult: float
    minimum: float | None = None

    def value_at(self, level: int) -> float:
        value = self.base + (level - 1) * self.per_level
        if self.minimum is not None:
            value = max(self.minimum, value)
        return value


UPGRADE_CONFIG: Final[Dict[UpgradeType, UpgradeRule]] = {
    UpgradeType.HEALTH: UpgradeRule("Max Health", 100, 25, 100, 1.5),
    UpgradeType.SPEED: UpgradeRule("Move Speed", 5, 0.5, 150, 1.5),
    UpgradeType.DAMAGE: UpgradeRule("Damage", 35, 10, 200, 1.6),
    # Lower is better: milliseconds between shots
    UpgradeType.FIRE_RATE: UpgradeRule("Fire Rate", 250, -20, 250, 1.7, minimum=50),
}


@dataclass(frozen=True)
class UpgradeState:
    health_level: int = 1
    speed_level: int = 1
    damage_level: int = 1
    fire_rate_level: int = 1

    def level(self, upgrade: UpgradeType) -> int:
        return getattr(self, _FIELD_FOR[upgrade])

    def with_level(self, upgrade: UpgradeType, level: int) -> "UpgradeState":
        return replace(self, **{_FIELD_FOR[upgrade]: level})


_FIELD_FOR: Final[Dict[UpgradeType, str]] = {
    UpgradeType.HEALTH: "health_level",
    UpgradeType.SPEED: "speed_level",
    UpgradeType.DAMAGE: "damage_level",
    UpgradeType.FIRE_RATE: "fire_rate_level",
}


@dataclass(frozen=True)
class PersistentData:
    total_cash: int = 0
    upgrades: UpgradeState = UpgradeState()

    def __post_init__(self) -> None:
        if self.total_cash < 0:
            raise ValueError("total_cash can never be negative")

    def to_dict(self) -> Dict[str, Any]:
        """Save-blob shape: ``{totalCash, upgrades: {healthLevel, ...}}``."""
        return {
            "totalCash": self.total_cash,
            "upgrades": {u.value: self.upgrades.level(u) for u in UpgradeType},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PersistentData":
        raw_upgrades = data.get("upgrades") or {}
        upgrades = UpgradeState()
        for upgrade in UpgradeType:
            level = int(raw_upgrades.get(upgrade.value, 1))
            upgrades = upgrades.with_level(upgrade, max(1, level))
        return cls(total_cash=max(0, int(data.get("totalCash", 0))), upgrades=upgrades)


DEFAULT_SAVE_DATA: Final[PersistentData] = PersistentData()


@dataclass(frozen=True)
class PlayerStats:
    """Base stats bought in the shop, before weapon and perk scaling."""

    max_health: float
    movement_speed: float
    damage: float
    fire_rate: float


def get_upgrade_cost(base_cost: float, current_level: int, multiplier: float) -> int:
    """Geometric price for buying the next level; levels are 1-based."""
    return math.floor(base_cost * multiplier ** (current_level - 1))


def upgrade_cost(data: PersistentData, upgrade: UpgradeType) -> int:
    rule = UPGRADE_CONFIG[upgrade]
    return get_upgrade_cost(rule.base_cost, data.upgrades.level(upgrade), rule.cost_mult)


def apply_upgrade(data: PersistentData, upgrade: UpgradeType) -> PersistentData:
    """Buy one level of ``upgrade``.

    Atomic: either cash is deducted and the level incremented together, or the
    same ``data`` object is returned untouched when it cannot be afforded.
    """
    upgrade = UpgradeType(upgrade)
    cost = upgrade_cost(data, upgrade)
    current = data.upgrades.level(upgrade)
    if data.total_cash < cost:
        log.info(
            "Upgrade declined: insufficient cash",
            upgrade=upgrade.value,
            cost=cost,
            cash=data.total_cash,
        )
        return data
    updated = PersistentData(
        total_cash=data.total_cash - cost,
        upgrades=data.upgrades.with_level(upgrade, current + 1),
    )
    log.info("Upgrade purchased", upgrade=upgrade.value, level=current + 1, cost=cost)
    return updated


def deposit_earnings(data: PersistentData, amount: int) -> PersistentData:
    if amount <= 0:
        return data
    return replace(data, total_cash=data.total_cash + int(amount))


def compute_player_stats(data: PersistentData) -> PlayerStats:
    u = data.upgrades
    return PlayerStats(
        max_health=UPGRADE_CONFIG[UpgradeType.HEALTH].value_at(u.health_level),
        movement_speed=UPGRADE_CONFIG[UpgradeType.SPEED].value_at(u.speed_level),
        damage=UPGRADE_CONFIG[UpgradeType.DAMAGE].value_at(u.damage_level),
        fire_rate=UPGRADE_CONFIG[UpgradeType.FIRE_RATE].value_at(u.fire_rate_level),
    )
