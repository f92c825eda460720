# main.py
"""Blocky Town command line.

    python main.py map --preset dense_city --seed 7
    python main.py run --seconds 90 --character HANK
"""
import argparse
import json
import math
import sys
from pathlib import Path
from typing import Any, Dict, Tuple

import structlog

from engine.action_handler import Intent
from engine.main_loop import (
    FreezeReason,
    MainLoop,
    ManualClock,
    RUN_SECTION,
    SimulationConfig,
    build_summary,
)
from game.economy import compute_player_stats, deposit_earnings
from game.game_state import GameState
from game.items.registry import DEFAULT_CHARACTER
from game.systems.sound import SoundManager
from game.world.game_map import GeneratedMap, MapConfig
from game.world.presets import get_map_config, get_random_seed, load_map_presets
from game.world.procgen import generate_map
from utils.config import (
    GAMEPLAY_CONFIG_FILE,
    MAPS_CONFIG_FILE,
    load_yaml_config,
)
from utils.logging_utils import setup_logging
from utils.save_store import SaveStore, load_persistent_data, save_persistent_data

log = structlog.get_logger()

# Relative, so progress lands in the directory the game is started from
DEFAULT_SAVE_FILE = Path("save.json")


# --- Config Loading Helpers ---
def load_gameplay_settings(path: Path) -> Tuple[SimulationConfig, Dict[str, Any]]:
    """Split gameplay.yaml into the simulation tunables and the run selection."""
    raw = load_yaml_config(path, "Gameplay")
    selection = raw.pop(RUN_SECTION, None) or {}
    if not isinstance(selection, dict):
        raise ValueError(f"Gameplay '{RUN_SECTION}' section must be a mapping: {path}")
    return SimulationConfig.from_dict(raw), selection


def resolve_map_config(
    preset: str | None, seed: int | None, random_seed: bool = False
) -> MapConfig:
    presets, default_name = load_map_presets(MAPS_CONFIG_FILE)
    config = get_map_config(preset or default_name, presets, default_name)
    if random_seed:
        seed = get_random_seed()
        log.info("Using random map seed", seed=seed)
    if seed is not None:
        config = config.with_seed(seed)
    return config


# --- Headless pilot ---
def nearest_enemy(gs: GameState) -> Tuple[float, float] | None:
    best = None
    best_dist = math.inf
    for enemy in gs.enemies.values():
        dist = gs.player.dist_sq(enemy.position.x, enemy.position.z)
        if dist < best_dist:
            best, best_dist = (enemy.position.x, enemy.position.z), dist
    return best


def play_headless(loop: MainLoop, clock: ManualClock, seconds: float) -> None:
    """Stand at the start point and shoot the closest enemy until time runs out.

    Level-up offers are answered with the first option.
    """
    gs = loop.game_state
    frame_ms = loop.config.frame_delta * 1000.0
    frames = int(seconds * loop.config.frame_rate)
    for _ in range(frames):
        clock.advance(frame_ms)
        if loop.is_terminated:
            break
        if FreezeReason.LEVEL_UP in loop.freeze_reasons and gs.pending_perks:
            loop.select_perk(gs.pending_perks[0])
            continue

        target = nearest_enemy(gs)
        if target is not None:
            loop.pull_trigger(target)
        elif gs.ammo < gs.weapon.max_ammo:
            loop.request_reload()
        loop.tick(intent=Intent(aim=target))
        if not gs.weapon.automatic:
            loop.release_trigger()


# --- Commands ---
def cmd_map(args: argparse.Namespace) -> int:
    config = resolve_map_config(args.preset, args.seed, args.random_seed)
    game_map: GeneratedMap = generate_map(config)
    if args.json:
        print(json.dumps(game_map.to_dict(), indent=2))
    else:
        print(json.dumps({"seed": config.seed, **game_map.summary()}, indent=2))
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    sim_config, selection = load_gameplay_settings(GAMEPLAY_CONFIG_FILE)
    map_config = resolve_map_config(
        args.preset or selection.get("map"), args.seed, args.random_seed
    )
    character = args.character or selection.get("character", DEFAULT_CHARACTER)

    store = SaveStore(args.save)
    save_data = load_persistent_data(store)

    clock = ManualClock()
    game_state = GameState(
        generate_map(map_config),
        compute_player_stats(save_data),
        start_time=clock(),
        character_id=character,
        unlimited_cash=args.unlimited_cash,
    )
    loop = MainLoop(game_state, clock=clock, config=sim_config)
    sound = SoundManager()
    sound.attach(game_state.bus)
    try:
        loop.start()
        play_headless(loop, clock, args.seconds)
    finally:
        sound.detach(game_state.bus)

    summary = build_summary(loop)
    if loop.result is not None:
        save_data = deposit_earnings(save_data, loop.result.money_earned)
        save_persistent_data(store, save_data)
        summary["total_cash"] = save_data.total_cash
    print(json.dumps(summary, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Blocky Town - procedural town generator and survival simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit logs as JSON lines instead of console text"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    map_parser = sub.add_parser("map", help="Generate a town and print a summary")
    map_parser.add_argument("--preset", default=None, help="Map preset name")
    map_parser.add_argument("--seed", type=int, default=None, help="Override the preset seed")
    map_parser.add_argument("--random-seed", action="store_true", help="Use a fresh random seed")
    map_parser.add_argument("--json", action="store_true", help="Print the full generated map")
    map_parser.set_defaults(func=cmd_map)

    run_parser = sub.add_parser("run", help="Play a scripted headless run")
    run_parser.add_argument("--preset", default=None, help="Map preset name")
    run_parser.add_argument("--seed", type=int, default=None, help="Override the preset seed")
    run_parser.add_argument("--random-seed", action="store_true", help="Use a fresh random seed")
    run_parser.add_argument("--character", default=None, help="TOM, HANK or QUADRINITY")
    run_parser.add_argument(
        "--seconds", type=float, default=60.0, help="Simulated seconds to play (default: 60)"
    )
    run_parser.add_argument(
        "--save", type=Path, default=DEFAULT_SAVE_FILE, help="Save file for cross-run progress"
    )
    run_parser.add_argument(
        "--unlimited-cash", action="store_true", help="Start the run with unlimited money"
    )
    run_parser.set_defaults(func=cmd_run)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, json_output=args.json_logs)
    log.info("Application starting...", command=args.command)
    try:
        return args.func(args)
    except FileNotFoundError as e:
        log.critical("Required file not found", error=str(e), exc_info=True)
        sys.exit(f"Startup failed: File not found - {e}")
    except ValueError as e:
        log.critical("Invalid configuration", error=str(e), exc_info=True)
        sys.exit(f"Configuration failed: {e}")


if __name__ == "__main__":
    sys.exit(main())
