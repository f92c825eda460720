# game/world/game_map.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

import structlog

from game.constants import BuildingVariant, ObstacleType, TreeVariant

log = structlog.get_logger()

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class MapConfig:
    """Everything needed to reproduce a town. Equal configs give equal maps."""

    seed: int
    world_size: float
    block_size: float
    street_width: float
    building_density: float
    tree_density: float
    obstacle_density: float

    def __post_init__(self) -> None:
        if self.world_size <= 0 or self.block_size <= 0:
            log.error(
                "Invalid map dimensions",
                world_size=self.world_size,
                block_size=self.block_size,
            )
            raise ValueError("world_size and block_size must be positive.")
        if not 0 <= self.street_width < self.block_size:
            raise ValueError("street_width must be in [0, block_size).")
        for name in ("building_density", "tree_density", "obstacle_density"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

    @property
    def half_world(self) -> float:
        return self.world_size / 2

    @property
    def num_blocks(self) -> int:
        return int(self.world_size // self.block_size)

    def with_seed(self, seed: int) -> "MapConfig":
        data = asdict(self)
        data["seed"] = seed
        return MapConfig(**data)


@dataclass(frozen=True)
class StreetSegment:
    position: Vec3
    size: Tuple[float, float]  # (x extent, z extent)
    rotation: float = 0.0


@dataclass(frozen=True)
class GeneratedBuilding:
    position: Vec3
    size: Vec3  # width, height, depth
    color: str
    variant: BuildingVariant
    rotation: float

    @property
    def footprint_radius(self) -> float:
        return max(self.size[0], self.size[2]) / 2


@dataclass(frozen=True)
class GeneratedTree:
    position: Vec3
    scale: float
    variant: TreeVariant


@dataclass(frozen=True)
class GeneratedObstacle:
    position: Vec3
    type: ObstacleType
    rotation: float
    scale: float


@dataclass(frozen=True)
class GeneratedStreetLamp:
    position: Vec3
    rotation: float
    working: bool


@dataclass(frozen=True)
class GeneratedMap:
    """Static layout of a town, built once per run and never mutated."""

    config: MapConfig
    streets: Tuple[StreetSegment, ...] = field(default_factory=tuple)
    buildings: Tuple[GeneratedBuilding, ...] = field(default_factory=tuple)
    trees: Tuple[GeneratedTree, ...] = field(default_factory=tuple)
    obstacles: Tuple[GeneratedObstacle, ...] = field(default_factory=tuple)
    street_lamps: Tuple[GeneratedStreetLamp, ...] = field(default_factory=tuple)

    def summary(self) -> Dict[str, int]:
        return {
            "streets": len(self.streets),
            "buildings": len(self.buildings),
            "trees": len(self.trees),
            "obstacles": len(self.obstacles),
            "street_lamps": len(self.street_lamps),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain, JSON-serialisable view (enum variants become their values)."""

        def _plain(value: Any) -> Any:
            if isinstance(value, dict):
                return {k: _plain(v) for k, v in value.items()}
            if isinstance(value, (list, tuple)):
                return [_plain(v) for v in value]
            if isinstance(value, (BuildingVariant, TreeVariant, ObstacleType)):
                return value.value
            return value

        return _plain(asdict(self))
