"""Static collision queries over a generated town.

The map never changes during a run, so building boxes, tree circles and
obstacle circles are packed once into numpy arrays and every query is a
vectorised comparison against all of them.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import structlog

from game.constants import (
    CAR_COLLISION_RADIUS,
    OBSTACLE_COLLISION_RADIUS,
    ObstacleType,
    PLAYER_RADIUS,
    PROJECTILE_TREE_RADIUS,
    SPAWN_BUILDING_MARGIN,
    SPAWN_FALLBACK,
    SPAWN_MAX_TRIES,
    SPAWN_RANGE,
    SPAWN_SAFE_RADIUS,
    TREE_COLLISION_RADIUS,
)
from game.world.game_map import GeneratedMap
from game_rng import SeededRandom

log = structlog.get_logger(__name__)


class CollisionIndex:
    """Answers "is this point blocked?" for one :class:`GeneratedMap`."""

    def __init__(self, game_map: GeneratedMap):
        self.game_map = game_map

        # Buildings: centre x/z and half extents (axis aligned, rotation ignored)
        b = game_map.buildings
        self.b_x = np.array([bd.position[0] for bd in b], dtype=np.float64)
        self.b_z = np.array([bd.position[2] for bd in b], dtype=np.float64)
        self.b_hw = np.array([bd.size[0] / 2 for bd in b], dtype=np.float64)
        self.b_hd = np.array([bd.size[2] / 2 for bd in b], dtype=np.float64)

        # Trees: one fixed trunk radius regardless of the drawn scale
        t = game_map.trees
        self.t_x = np.array([tr.position[0] for tr in t], dtype=np.float64)
        self.t_z = np.array([tr.position[2] for tr in t], dtype=np.float64)

        o = game_map.obstacles
        self.o_x = np.array([ob.position[0] for ob in o], dtype=np.float64)
        self.o_z = np.array([ob.position[2] for ob in o], dtype=np.float64)
        self.o_r = np.array(
            [
                CAR_COLLISION_RADIUS if ob.type is ObstacleType.CAR else OBSTACLE_COLLISION_RADIUS
                for ob in o
            ],
            dtype=np.float64,
        )

        log.debug(
            "Collision index built",
            buildings=len(b),
            trees=len(t),
            obstacles=len(o),
        )

    # ------------------------------------------------------------------
    # point queries
    # ------------------------------------------------------------------
    def in_building(self, x: float, z: float, margin: float = 0.0) -> bool:
        if self.b_x.size == 0:
            return False
        hit = (
            (x > self.b_x - self.b_hw - margin)
            & (x < self.b_x + self.b_hw + margin)
            & (z > self.b_z - self.b_hd - margin)
            & (z < self.b_z + self.b_hd + margin)
        )
        return bool(hit.any())

    def near_tree(self, x: float, z: float, radius: float) -> bool:
        if self.t_x.size == 0:
            return False
        reach = TREE_COLLISION_RADIUS + radius
        dist_sq = (x - self.t_x) ** 2 + (z - self.t_z) ** 2
        return bool((dist_sq < reach * reach).any())

    def near_obstacle(self, x: float, z: float, radius: float) -> bool:
        if self.o_x.size == 0:
            return False
        reach = self.o_r + radius
        dist_sq = (x - self.o_x) ** 2 + (z - self.o_z) ** 2
        return bool((dist_sq < reach * reach).any())

    def is_blocked(self, x: float, z: float, radius: float = PLAYER_RADIUS) -> bool:
        """True if an actor of ``radius`` centred at ``(x, z)`` overlaps scenery."""
        return (
            self.in_building(x, z, radius)
            or self.near_tree(x, z, radius)
            or self.near_obstacle(x, z, radius)
        )

    def blocks_projectile(self, x: float, z: float) -> bool:
        """Bullets stop inside a building footprint or near a tree trunk."""
        if self.in_building(x, z):
            return True
        if self.t_x.size == 0:
            return False
        dist_sq = (x - self.t_x) ** 2 + (z - self.t_z) ** 2
        return bool((dist_sq < PROJECTILE_TREE_RADIUS * PROJECTILE_TREE_RADIUS).any())

    # ------------------------------------------------------------------
    # spawning
    # ------------------------------------------------------------------
    def is_valid_spawn(self, x: float, z: float) -> bool:
        if self.in_building(x, z, SPAWN_BUILDING_MARGIN):
            return False
        if self.near_tree(x, z, 0.0) or self.near_obstacle(x, z, 0.0):
            return False
        return x * x + z * z > SPAWN_SAFE_RADIUS * SPAWN_SAFE_RADIUS

    def find_valid_spawn(self, rng: SeededRandom) -> Tuple[float, float]:
        """Random open point away from the player start, or the fixed fallback."""
        spawn_range = min(SPAWN_RANGE, self.game_map.config.world_size)
        for _ in range(SPAWN_MAX_TRIES):
            x = (rng.next() - 0.5) * spawn_range
            z = (rng.next() - 0.5) * spawn_range
            if self.is_valid_spawn(x, z):
                return x, z
        log.debug("No valid spawn found, using fallback", fallback=SPAWN_FALLBACK)
        return SPAWN_FALLBACK
