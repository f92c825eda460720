# game/world/presets.py
"""Named map presets.

The simulation only ever sees a resolved :class:`MapConfig`; names are turned
into configs here, with unknown names falling back to the default town.
"""
from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Tuple

import structlog

from game.world.game_map import MapConfig
from utils.config import load_yaml_config

log = structlog.get_logger(__name__)

APOCALYPSE_TOWN: Final[MapConfig] = MapConfig(
    seed=12345,
    world_size=100,
    block_size=25,
    street_width=6,
    building_density=0.7,
    tree_density=0.4,
    obstacle_density=0.3,
)

# More buildings, less open space
DENSE_CITY: Final[MapConfig] = MapConfig(
    seed=54321,
    world_size=100,
    block_size=20,
    street_width=5,
    building_density=0.85,
    tree_density=0.2,
    obstacle_density=0.4,
)

# Larger blocks, more trees
SUBURBAN_WASTELAND: Final[MapConfig] = MapConfig(
    seed=99999,
    world_size=120,
    block_size=35,
    street_width=7,
    building_density=0.5,
    tree_density=0.6,
    obstacle_density=0.25,
)

# Large buildings, few trees
INDUSTRIAL_ZONE: Final[MapConfig] = MapConfig(
    seed=77777,
    world_size=100,
    block_size=30,
    street_width=8,
    building_density=0.6,
    tree_density=0.15,
    obstacle_density=0.5,
)

# Compact, for intense action
ARENA: Final[MapConfig] = MapConfig(
    seed=11111,
    world_size=60,
    block_size=20,
    street_width=6,
    building_density=0.4,
    tree_density=0.3,
    obstacle_density=0.35,
)

MAP_PRESETS: Dict[str, MapConfig] = {
    "apocalypse_town": APOCALYPSE_TOWN,
    "dense_city": DENSE_CITY,
    "suburban_wasteland": SUBURBAN_WASTELAND,
    "industrial_zone": INDUSTRIAL_ZONE,
    "arena": ARENA,
}

DEFAULT_MAP: str = "apocalypse_town"


def get_map_config(
    map_name: str,
    presets: Mapping[str, MapConfig] | None = None,
    default: str = DEFAULT_MAP,
) -> MapConfig:
    """Resolve ``map_name``; unknown names silently become the default town."""
    table = MAP_PRESETS if presets is None else presets
    config = table.get(map_name)
    if config is None:
        log.warning("Unknown map preset, using default", requested=map_name, default=default)
        return table.get(default, APOCALYPSE_TOWN)
    return config


def get_random_seed() -> int:
    return random.randrange(1_000_000)


def create_map_with_seed(base_name: str, seed: int) -> MapConfig:
    return get_map_config(base_name).with_seed(seed)


def parse_preset(name: str, raw: Mapping[str, Any]) -> MapConfig:
    try:
        return MapConfig(
            seed=int(raw["seed"]),
            world_size=float(raw["world_size"]),
            block_size=float(raw["block_size"]),
            street_width=float(raw["street_width"]),
            building_density=float(raw["building_density"]),
            tree_density=float(raw["tree_density"]),
            obstacle_density=float(raw["obstacle_density"]),
        )
    except KeyError as e:
        log.error("Map preset missing field", preset=name, field=str(e))
        raise ValueError(f"Map preset '{name}' is missing field {e}") from e


def load_map_presets(config_path: Path) -> Tuple[Dict[str, MapConfig], str]:
    """Built-in presets with the YAML file's ``presets`` merged on top.

    Returns the merged table and the default preset name (the file's
    ``default`` key when it names a known preset, else :data:`DEFAULT_MAP`).
    """
    data = load_yaml_config(config_path, "Map presets")
    merged = dict(MAP_PRESETS)
    for name, raw in (data.get("presets") or {}).items():
        merged[name] = parse_preset(name, raw)
        log.debug("Map preset registered", preset=name, seed=merged[name].seed)

    default_name = data.get("default") or DEFAULT_MAP
    if default_name not in merged:
        log.warning("Configured default map is unknown", default=default_name)
        default_name = DEFAULT_MAP
    return merged, default_name
