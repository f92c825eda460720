# game/systems/pickup_system.py
"""Player pickups: health power-ups and experience bones."""
from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from game.constants import BONE_RADIUS, POWERUP_RADIUS
from game.systems.progression import add_experience

if TYPE_CHECKING:
    from game.game_state import GameState

log = structlog.get_logger(__name__)


def collect_power_ups(gs: "GameState") -> int:
    """Heal from overlapping power-ups. Full-health players leave them lying."""
    if not gs.power_ups:
        return 0
    reach = gs.player_radius + POWERUP_RADIUS
    max_health = gs.combat_stats.max_health
    collected = 0
    remaining = []
    for power_up in gs.power_ups:
        in_reach = gs.player.dist_sq(power_up.position.x, power_up.position.z) < reach * reach
        if in_reach and gs.health < max_health:
            gs.health = min(max_health, gs.health + power_up.value)
            collected += 1
            continue
        remaining.append(power_up)
    if collected:
        gs.power_ups = remaining
        log.debug("Power-up collected", count=collected, health=gs.health)
    return collected


def collect_bones(gs: "GameState") -> bool:
    """Pick up overlapping bones. Returns True if a level-up was triggered."""
    if not gs.bones:
        return False
    reach = gs.player_radius + BONE_RADIUS
    exp_gain = 0
    remaining = []
    for bone in gs.bones:
        if gs.player.dist_sq(bone.position.x, bone.position.z) < reach * reach:
            exp_gain += bone.value
        else:
            remaining.append(bone)
    if exp_gain <= 0:
        return False
    gs.bones = remaining
    return add_experience(gs, exp_gain)


def collect_pickups(gs: "GameState") -> bool:
    """Resolve both pickup kinds; returns True when the run should freeze for a level-up."""
    collect_power_ups(gs)
    return collect_bones(gs)
