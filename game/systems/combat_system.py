# game/systems/combat_system.py
"""
Handles shooting, reloading, projectile travel and contact damage.

Hits are resolved against the enemy positions captured at the start of the
projectile pass, and damage from every projectile landing on the same enemy
in one tick is summed before it is applied.  An enemy therefore dies at most
once per tick: one bone, one kill, one payout.
"""
from __future__ import annotations

import math
from collections import defaultdict
from typing import TYPE_CHECKING, Dict, List, Tuple

import structlog

from game.constants import (
    BONE_EXP_VALUE,
    BONE_HEIGHT,
    ENEMY_ATTACK_RANGE_BUFFER,
    ENEMY_DAMAGE,
    ENEMY_HIT_RADIUS,
    ENEMY_RADIUS,
    ENEMY_STOP_DIST_SQ,
    INVULNERABILITY_TIME,
    MONEY_PER_KILL,
    MUZZLE_HEIGHT,
    PROJECTILE_TTL,
    WeaponStance,
)
from game.entities.components import BoneData, EnemyData, Position, ProjectileData
from game.events import EnemyHit, EnemyKilled, PlayerHit, ShotFired

if TYPE_CHECKING:
    from game.game_state import GameState

log = structlog.get_logger(__name__)

HitMap = Dict[int, List[float]]


# ---------------------------------------------------------------------------
# Weapon handling
# ---------------------------------------------------------------------------


def reload(gs: "GameState", now: float) -> bool:
    """Start a reload. Ignored while already reloading or with a full magazine."""
    weapon = gs.weapon
    if gs.is_reloading or gs.ammo >= weapon.max_ammo:
        return False
    gs.is_reloading = True
    gs.reload_done_at = now + weapon.reload_time
    log.debug("Reload started", weapon=gs.weapon_key, done_at=gs.reload_done_at)
    return True


def update_reload(gs: "GameState", now: float) -> bool:
    """Finish a pending reload once its deadline has passed."""
    if not gs.is_reloading or gs.reload_done_at is None:
        return False
    if now < gs.reload_done_at:
        return False
    gs.ammo = gs.weapon.max_ammo
    gs.is_reloading = False
    gs.reload_done_at = None
    log.debug("Reload finished", ammo=gs.ammo)
    return True


def shoot(gs: "GameState", now: float, aim: Tuple[float, float]) -> List[ProjectileData]:
    """
    Fire the equipped weapon toward ``aim`` (a ground-plane point).
    Returns the projectiles created, which is empty when the shot was refused.
    An empty magazine starts a reload instead of firing.
    """
    if gs.is_dead or gs.is_reloading:
        return []
    stats = gs.combat_stats
    if now - gs.last_shot_time < stats.fire_interval:
        return []
    if gs.ammo <= 0:
        reload(gs, now)
        return []

    weapon = gs.weapon
    gs.last_shot_time = now
    gs.ammo -= 1

    origin_x, origin_z = gs.player.x, gs.player.z
    angle = math.atan2(aim[1] - origin_z, aim[0] - origin_x)
    pellets = weapon.pellet_count or 1
    spread = weapon.spread or 0.0

    fired: List[ProjectileData] = []
    for _ in range(pellets):
        final_angle = angle + (gs.rng.next() - 0.5) * spread
        fired.append(
            ProjectileData(
                id=gs.next_id(),
                position=Position(origin_x, origin_z, MUZZLE_HEIGHT),
                direction=(math.cos(final_angle), math.sin(final_angle)),
                speed=weapon.projectile_speed,
                damage=stats.damage,
                created_at=now,
            )
        )
    gs.projectiles.extend(fired)
    gs.bus.emit(
        ShotFired(two_handed=weapon.stance is WeaponStance.TWO_HANDED, pellets=pellets)
    )
    return fired


# ---------------------------------------------------------------------------
# Projectiles
# ---------------------------------------------------------------------------


def _find_hit(gs: "GameState", x: float, z: float) -> int | None:
    reach_sq = ENEMY_HIT_RADIUS * ENEMY_HIT_RADIUS
    for enemy_id, (ex, ez) in gs.enemy_positions.items():
        if (x - ex) ** 2 + (z - ez) ** 2 < reach_sq:
            return enemy_id
    return None


def advance_projectiles(gs: "GameState", delta: float, now: float) -> HitMap:
    """
    Age, move and collide every projectile for one tick.
    Returns the damage dealt per enemy id; apply it with :func:`apply_hits`.
    """
    hits: HitMap = defaultdict(list)
    survivors: List[ProjectileData] = []
    for projectile in gs.projectiles:
        if now - projectile.created_at > PROJECTILE_TTL:
            continue

        step = projectile.speed * delta
        projectile.position.x += projectile.direction[0] * step
        projectile.position.z += projectile.direction[1] * step
        x, z = projectile.position.x, projectile.position.z

        if gs.collision.blocks_projectile(x, z):
            continue

        enemy_id = _find_hit(gs, x, z)
        if enemy_id is not None:
            hits[enemy_id].append(projectile.damage)
            continue

        survivors.append(projectile)
    gs.projectiles = survivors
    return hits


def _drop_bone(gs: "GameState", x: float, z: float, now: float) -> BoneData:
    bone = BoneData(
        id=gs.next_id(),
        position=Position(x, z, BONE_HEIGHT),
        value=BONE_EXP_VALUE,
        created_at=now,
    )
    gs.bones.append(bone)
    return bone


def kill_enemy(gs: "GameState", enemy: EnemyData, now: float) -> None:
    gs.enemies.pop(enemy.id, None)
    x, z = gs.enemy_positions.pop(enemy.id, (enemy.position.x, enemy.position.z))
    _drop_bone(gs, x, z, now)
    gs.stats.enemies_killed += 1
    gs.stats.money_earned += MONEY_PER_KILL
    gs.money += MONEY_PER_KILL
    gs.bus.emit(EnemyKilled(enemy_id=enemy.id, enemy_type=enemy.type, position=(x, z)))
    log.debug(
        "Enemy killed",
        enemy_id=enemy.id,
        enemy_type=enemy.type.value,
        kills=gs.stats.enemies_killed,
    )


def apply_hits(gs: "GameState", hits: HitMap, now: float) -> int:
    """Apply summed projectile damage. Returns the number of enemies killed."""
    killed = 0
    for enemy_id, damages in hits.items():
        enemy = gs.enemies.get(enemy_id)
        if enemy is None:
            continue
        enemy.current_health -= sum(damages)
        if enemy.alive:
            gs.bus.emit(
                EnemyHit(
                    enemy_id=enemy.id,
                    enemy_type=enemy.type,
                    remaining_health=enemy.current_health,
                )
            )
            continue
        kill_enemy(gs, enemy, now)
        killed += 1
    return killed


# ---------------------------------------------------------------------------
# Enemies
# ---------------------------------------------------------------------------


def damage_player(gs: "GameState", now: float, amount: float = ENEMY_DAMAGE) -> bool:
    """Apply contact damage unless the player is still invulnerable."""
    if gs.is_dead:
        return False
    if now - gs.last_hit_time < INVULNERABILITY_TIME:
        return False
    gs.last_hit_time = now
    gs.health = max(0, gs.health - amount)
    gs.bus.emit(PlayerHit(damage=amount, health=gs.health))
    log.debug("Player hit", damage=amount, health=gs.health)
    return True


def update_enemies(gs: "GameState", delta: float, now: float) -> None:
    """Contact check, then a straight-line step toward the player."""
    attack_range = gs.player_radius + ENEMY_RADIUS + ENEMY_ATTACK_RANGE_BUFFER
    attack_range_sq = attack_range * attack_range
    px, pz = gs.player.x, gs.player.z
    for enemy in list(gs.enemies.values()):
        dx = px - enemy.position.x
        dz = pz - enemy.position.z
        dist_sq = dx * dx + dz * dz

        if dist_sq < attack_range_sq:
            damage_player(gs, now)
            if gs.is_dead:
                return

        if dist_sq > ENEMY_STOP_DIST_SQ:
            dist = math.sqrt(dist_sq)
            step = enemy.speed * delta
            enemy.position.x += dx / dist * step
            enemy.position.z += dz / dist * step
