# game/systems/spawn_system.py
"""Enemy and power-up scheduling plus the difficulty curve."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, List

import structlog

from game.constants import (
    CROW_MINUTE_MARK,
    CROW_ROLL_THRESHOLD,
    DEMON_MINUTE_MARK,
    DEMON_ROLL_THRESHOLD,
    ENEMY_PROFILES,
    HEAL_AMOUNT,
    INITIAL_ENEMY_COUNT,
    MAX_ENEMIES_CAP,
    MAX_SPAWN_BATCH,
    POWERUP_HEIGHT,
    POWERUP_INTERVAL,
    SPAWN_INTERVAL,
    EnemyType,
)
from game.entities.components import EnemyData, Position, PowerUpData

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from game.game_state import GameState

log = structlog.get_logger(__name__)


def classify_enemy(rand: float, minutes: float) -> EnemyType:
    """Pick an enemy type from a uniform roll and survival time.

    Breakpoints:
      * ZOMBIE by default.
      * DEMON when ``rand > 0.8`` or more than 2 minutes have passed.
      * CROW when ``rand > 0.9`` or more than 4 minutes have passed.

    The later rule wins, so after four minutes every spawn is a CROW.
    """
    enemy_type = EnemyType.ZOMBIE
    if rand > DEMON_ROLL_THRESHOLD or minutes > DEMON_MINUTE_MARK:
        enemy_type = EnemyType.DEMON
    if rand > CROW_ROLL_THRESHOLD or minutes > CROW_MINUTE_MARK:
        enemy_type = EnemyType.CROW
    return enemy_type


def spawn_batch_size(minutes: float) -> int:
    return min(MAX_SPAWN_BATCH, math.floor(1 + minutes * 2))


def enemy_base_speed(enemy_type: EnemyType, minutes: float) -> float:
    profile = ENEMY_PROFILES[enemy_type]
    return profile.base_speed + minutes * profile.speed_per_minute


def create_enemy(
    gs: "GameState", now: float, forced_type: EnemyType | None = None
) -> EnemyData:
    """Roll a new enemy at a valid spawn point.

    RNG draws happen in a fixed order: spawn position, type roll, speed jitter.
    The type roll is drawn even when ``forced_type`` is given.
    """
    x, z = gs.collision.find_valid_spawn(gs.rng)
    minutes = gs.elapsed_minutes(now)
    rolled = classify_enemy(gs.rng.next(), minutes)
    enemy_type = forced_type if forced_type is not None else rolled
    profile = ENEMY_PROFILES[enemy_type]
    speed = enemy_base_speed(enemy_type, minutes) + gs.rng.next()
    return EnemyData(
        id=gs.next_id(),
        type=enemy_type,
        position=Position(x, z),
        max_health=profile.max_health,
        current_health=profile.max_health,
        speed=speed,
    )


def spawn_initial_wave(gs: "GameState", now: float) -> List[EnemyData]:
    spawned = [
        create_enemy(gs, now, forced_type=EnemyType.ZOMBIE)
        for _ in range(INITIAL_ENEMY_COUNT)
    ]
    for enemy in spawned:
        gs.enemies[enemy.id] = enemy
    log.info("Initial wave spawned", count=len(spawned))
    return spawned


def spawn_enemies(gs: "GameState", now: float) -> List[EnemyData]:
    """Spawn one batch, never exceeding the live enemy cap."""
    if len(gs.enemies) >= MAX_ENEMIES_CAP:
        return []
    spawned: List[EnemyData] = []
    for _ in range(spawn_batch_size(gs.elapsed_minutes(now))):
        if len(gs.enemies) >= MAX_ENEMIES_CAP:
            break
        enemy = create_enemy(gs, now)
        gs.enemies[enemy.id] = enemy
        spawned.append(enemy)
    return spawned


def spawn_power_up(gs: "GameState") -> PowerUpData:
    x, z = gs.collision.find_valid_spawn(gs.rng)
    power_up = PowerUpData(
        id=gs.next_id(),
        position=Position(x, z, POWERUP_HEIGHT),
        value=HEAL_AMOUNT,
    )
    gs.power_ups.append(power_up)
    return power_up


def update_spawning(gs: "GameState", now: float) -> None:
    """Run the enemy and power-up schedules for this tick."""
    if now - gs.last_spawn_time > SPAWN_INTERVAL:
        spawned = spawn_enemies(gs, now)
        gs.last_spawn_time = now
        if spawned:
            log.debug(
                "Enemy batch spawned",
                count=len(spawned),
                types=[e.type.value for e in spawned],
                alive=len(gs.enemies),
            )

    if now - gs.last_powerup_time > POWERUP_INTERVAL:
        power_up = spawn_power_up(gs)
        gs.last_powerup_time = now
        log.debug("Power-up spawned", x=power_up.position.x, z=power_up.position.z)
