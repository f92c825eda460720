# game/world/procgen.py
"""Seeded town generator.

``generate_map`` is a pure function of its :class:`MapConfig`.  All random
draws come from one :class:`SeededRandom` in a fixed order (streets, buildings
block by block, trees, obstacles, lamps), so reordering any step changes every
map produced after it.
"""
from __future__ import annotations

import math
from typing import List

import structlog

from game.constants import (
    BUILDING_COLORS,
    BUILDING_ROTATIONS,
    BUILDING_SIZE_RANGES,
    BUILDING_VARIANTS,
    LAMP_PLACEMENT_CHANCE,
    LAMP_STREET_OFFSET,
    LAMP_WORKING_CHANCE,
    MAX_PLOT_FILL,
    OBSTACLE_MIN_DIST,
    OBSTACLE_STREET_BUFFER,
    OBSTACLE_TYPES,
    STREET_SURFACE_HEIGHT,
    TREE_BUILDING_CLEARANCE,
    TREE_MIN_DIST,
    TREE_STREET_BUFFER,
    TREE_VARIANTS,
)
from game.world.game_map import (
    GeneratedBuilding,
    GeneratedMap,
    GeneratedObstacle,
    GeneratedStreetLamp,
    GeneratedTree,
    MapConfig,
    StreetSegment,
)
from game.world.poisson import poisson_disk_sample
from game_rng import SeededRandom

log = structlog.get_logger()


def is_on_street(
    x: float, z: float, block_size: float, street_width: float, world_size: float
) -> bool:
    """True if ``(x, z)`` lies in the street strip along either axis.

    Coordinates are shifted into the ``[0, world_size]`` frame first; a point
    is on a street when its offset into the block is below ``street_width``.
    """
    half_world = world_size / 2
    mod_x = math.fmod(x + half_world, block_size)
    mod_z = math.fmod(z + half_world, block_size)
    return mod_x < street_width or mod_z < street_width


def _generate_streets(config: MapConfig) -> List[StreetSegment]:
    streets: List[StreetSegment] = []
    half_world = config.half_world
    for i in range(config.num_blocks + 1):
        pos = -half_world + i * config.block_size
        # Horizontal, then vertical
        streets.append(
            StreetSegment(
                position=(0.0, STREET_SURFACE_HEIGHT, pos + config.street_width / 2),
                size=(config.world_size, config.street_width),
            )
        )
        streets.append(
            StreetSegment(
                position=(pos + config.street_width / 2, STREET_SURFACE_HEIGHT, 0.0),
                size=(config.street_width, config.world_size),
            )
        )
    return streets


def _generate_buildings(config: MapConfig, rng: SeededRandom) -> List[GeneratedBuilding]:
    buildings: List[GeneratedBuilding] = []
    half_world = config.half_world
    block_inner_size = config.block_size - config.street_width

    for bx in range(config.num_blocks):
        for bz in range(config.num_blocks):
            block_start_x = -half_world + bx * config.block_size + config.street_width
            block_start_z = -half_world + bz * config.block_size + config.street_width

            plots_per_side = rng.get_int(1, 3)
            plot_size = block_inner_size / plots_per_side

            for px in range(plots_per_side):
                for pz in range(plots_per_side):
                    if not rng.chance(config.building_density):
                        continue

                    center_x = block_start_x + px * plot_size + plot_size / 2
                    center_z = block_start_z + pz * plot_size + plot_size / 2

                    variant = rng.pick(BUILDING_VARIANTS)
                    (w_lo, w_hi), (h_lo, h_hi), (d_lo, d_hi) = BUILDING_SIZE_RANGES[variant]
                    width = rng.get_float(w_lo, w_hi)
                    height = rng.get_float(h_lo, h_hi)
                    depth = rng.get_float(d_lo, d_hi)

                    # Clamp after sampling so oversized variants shrink to the plot
                    max_dim = plot_size * MAX_PLOT_FILL
                    width = min(width, max_dim)
                    depth = min(depth, max_dim)

                    buildings.append(
                        GeneratedBuilding(
                            position=(center_x, 0.0, center_z),
                            size=(width, height, depth),
                            color=rng.pick(BUILDING_COLORS),
                            variant=variant,
                            rotation=rng.pick(BUILDING_ROTATIONS),
                        )
                    )
    return buildings


def _too_close_to_building(x: float, z: float, buildings: List[GeneratedBuilding]) -> bool:
    # Planar distance to the centre; building rotation is ignored.
    for b in buildings:
        dist = math.hypot(x - b.position[0], z - b.position[2])
        if dist < b.footprint_radius + TREE_BUILDING_CLEARANCE:
            return True
    return False


def _generate_trees(
    config: MapConfig, rng: SeededRandom, buildings: List[GeneratedBuilding]
) -> List[GeneratedTree]:
    trees: List[GeneratedTree] = []
    half_world = config.half_world
    candidates = poisson_disk_sample(rng, config.world_size, config.world_size, TREE_MIN_DIST)
    for px, pz in candidates:
        x = px - half_world
        z = pz - half_world
        if is_on_street(
            x, z, config.block_size, config.street_width + TREE_STREET_BUFFER, config.world_size
        ):
            continue
        if not rng.chance(config.tree_density):
            continue
        if _too_close_to_building(x, z, buildings):
            continue
        trees.append(
            GeneratedTree(
                position=(x, 0.0, z),
                scale=rng.get_float(0.6, 1.4),
                variant=rng.pick(TREE_VARIANTS),
            )
        )
    return trees


def _generate_obstacles(config: MapConfig, rng: SeededRandom) -> List[GeneratedObstacle]:
    obstacles: List[GeneratedObstacle] = []
    half_world = config.half_world
    candidates = poisson_disk_sample(
        rng, config.world_size, config.world_size, OBSTACLE_MIN_DIST
    )
    for px, pz in candidates:
        x = px - half_world
        z = pz - half_world
        if not is_on_street(
            x,
            z,
            config.block_size,
            config.street_width + OBSTACLE_STREET_BUFFER,
            config.world_size,
        ):
            continue
        if not rng.chance(config.obstacle_density):
            continue
        obstacles.append(
            GeneratedObstacle(
                position=(x, 0.0, z),
                type=rng.pick(OBSTACLE_TYPES),
                rotation=rng.get_float(0, math.pi * 2),
                scale=rng.get_float(0.8, 1.2),
            )
        )
    return obstacles


def _generate_lamps(config: MapConfig, rng: SeededRandom) -> List[GeneratedStreetLamp]:
    lamps: List[GeneratedStreetLamp] = []
    half_world = config.half_world
    num_blocks = config.num_blocks
    for i in range(num_blocks + 1):
        street_pos = -half_world + i * config.block_size
        for j in range(1, num_blocks):
            lamp_z = -half_world + j * config.block_size - config.block_size / 2
            # Right side, then left; each lamp rolls its own "working" flag.
            if rng.chance(LAMP_PLACEMENT_CHANCE):
                lamps.append(
                    GeneratedStreetLamp(
                        position=(street_pos + config.street_width + LAMP_STREET_OFFSET, 0.0, lamp_z),
                        rotation=-math.pi / 2,
                        working=rng.chance(LAMP_WORKING_CHANCE),
                    )
                )
            if rng.chance(LAMP_PLACEMENT_CHANCE):
                lamps.append(
                    GeneratedStreetLamp(
                        position=(street_pos - LAMP_STREET_OFFSET, 0.0, lamp_z),
                        rotation=math.pi / 2,
                        working=rng.chance(LAMP_WORKING_CHANCE),
                    )
                )
    return lamps


def generate_map(config: MapConfig) -> GeneratedMap:
    """Build the full town for ``config``."""
    log.info(
        "Generating map",
        seed=config.seed,
        world_size=config.world_size,
        block_size=config.block_size,
        street_width=config.street_width,
    )
    rng = SeededRandom(config.seed)

    streets = _generate_streets(config)
    buildings = _generate_buildings(config, rng)
    trees = _generate_trees(config, rng, buildings)
    obstacles = _generate_obstacles(config, rng)
    lamps = _generate_lamps(config, rng)

    generated = GeneratedMap(
        config=config,
        streets=tuple(streets),
        buildings=tuple(buildings),
        trees=tuple(trees),
        obstacles=tuple(obstacles),
        street_lamps=tuple(lamps),
    )
    log.info("Map generation complete", seed=config.seed, **generated.summary())
    return generated
