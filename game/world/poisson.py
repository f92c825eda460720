"""Poisson-disk style dart throwing over a rectangle.

Points are grown outward from a single random seed point.  Each accepted point
keeps every other point at least ``min_dist`` away, which scatters trees and
wrecks organically without the clumping of plain uniform placement.

A background grid with cells of ``min_dist / sqrt(2)`` holds at most one point
per cell, so a candidate only needs to look at the surrounding 5x5 cells.
"""

from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np
import structlog

from game.constants import POISSON_MAX_ATTEMPTS, POISSON_MAX_POINTS
from game_rng import SeededRandom

log = structlog.get_logger(__name__)

EMPTY_CELL = -1


def poisson_disk_sample(
    rng: SeededRandom,
    width: float,
    height: float,
    min_dist: float,
    max_attempts: int = POISSON_MAX_ATTEMPTS,
    max_points: int = POISSON_MAX_POINTS,
) -> List[Tuple[float, float]]:
    """Return ``[(x, z), ...]`` inside ``[0, width) x [0, height)``.

    The draw order from ``rng`` is fixed: seed point (x then z), then per
    iteration one active-list index followed by ``(angle, distance)`` pairs.
    Map generation depends on this order for reproducibility.
    """
    if min_dist <= 0:
        raise ValueError("min_dist must be positive")

    cell_size = min_dist / math.sqrt(2)
    grid_w = math.ceil(width / cell_size)
    grid_h = math.ceil(height / cell_size)
    grid = np.full((grid_w, grid_h), EMPTY_CELL, dtype=np.int32)
    min_dist_sq = min_dist * min_dist

    points: List[Tuple[float, float]] = []
    active: List[Tuple[float, float]] = []

    start = (rng.get_float(0, width), rng.get_float(0, height))
    points.append(start)
    active.append(start)
    gx, gz = math.floor(start[0] / cell_size), math.floor(start[1] / cell_size)
    if 0 <= gx < grid_w and 0 <= gz < grid_h:
        grid[gx, gz] = 0

    while active and len(points) < max_points:
        idx = math.floor(rng.next() * len(active))
        px, pz = active[idx]
        found = False

        for _ in range(max_attempts):
            angle = rng.next() * math.pi * 2
            dist = rng.get_float(min_dist, min_dist * 2)
            nx = px + math.cos(angle) * dist
            nz = pz + math.sin(angle) * dist

            if nx < 0 or nx >= width or nz < 0 or nz >= height:
                continue

            ngx = math.floor(nx / cell_size)
            ngz = math.floor(nz / cell_size)
            if _is_clear(grid, points, nx, nz, ngx, ngz, min_dist_sq):
                points.append((nx, nz))
                active.append((nx, nz))
                if 0 <= ngx < grid_w and 0 <= ngz < grid_h:
                    grid[ngx, ngz] = len(points) - 1
                found = True
                break

        if not found:
            active.pop(idx)

    log.debug(
        "Poisson sampling complete",
        points=len(points),
        min_dist=min_dist,
        capped=len(points) >= max_points,
    )
    return points


def _is_clear(
    grid: np.ndarray,
    points: List[Tuple[float, float]],
    x: float,
    z: float,
    gx: int,
    gz: int,
    min_dist_sq: float,
) -> bool:
    grid_w, grid_h = grid.shape
    x0, x1 = max(gx - 2, 0), min(gx + 3, grid_w)
    z0, z1 = max(gz - 2, 0), min(gz + 3, grid_h)
    for neighbor_idx in grid[x0:x1, z0:z1].ravel():
        if neighbor_idx == EMPTY_CELL:
            continue
        qx, qz = points[neighbor_idx]
        if (x - qx) ** 2 + (z - qz) ** 2 < min_dist_sq:
            return False
    return True
