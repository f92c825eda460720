import pytest

from engine.main_loop import MainLoop, ManualClock, SimulationConfig
from game.economy import DEFAULT_SAVE_DATA, compute_player_stats
from game.game_state import GameState
from game.world.game_map import GeneratedMap, MapConfig

OPEN_CONFIG = MapConfig(
    seed=7,
    world_size=100,
    block_size=25,
    street_width=6,
    building_density=0.0,
    tree_density=0.0,
    obstacle_density=0.0,
)


def build_map(buildings=(), trees=(), obstacles=(), config=OPEN_CONFIG):
    """Hand-placed map with no streets or lamps."""
    return GeneratedMap(
        config=config,
        buildings=tuple(buildings),
        trees=tuple(trees),
        obstacles=tuple(obstacles),
    )


def create_game_state(game_map=None, start_time=0.0, **kwargs):
    return GameState(
        game_map or build_map(),
        compute_player_stats(DEFAULT_SAVE_DATA),
        start_time=start_time,
        **kwargs,
    )


@pytest.fixture
def make_gs():
    return create_game_state


@pytest.fixture
def make_loop():
    def _make(game_map=None, config=None, start=0.0, **kwargs):
        clock = ManualClock(start)
        gs = create_game_state(game_map, start_time=clock(), **kwargs)
        loop = MainLoop(gs, clock=clock, config=config or SimulationConfig())
        return loop, clock

    return _make
