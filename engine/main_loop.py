# engine/main_loop.py
"""
Run lifecycle and the fixed per-tick update order.

State machine::

    INITIALIZING -> RUNNING <-> FROZEN -> TERMINATED

A run is FROZEN while at least one freeze reason (pause, level-up) is active.
When the last reason clears, every time-relative timer is pushed forward by
the frozen duration so nothing expires during a pause.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Self, Set, Tuple

import structlog

from game.events import GameOver, LevelUpOptionsReady, TimeElapsed
from game.game_state import GameState
from game.items.registry import PerkOption
from game.systems import combat_system, pickup_system, progression, spawn_system
from utils.config import load_yaml_config

from . import action_handler
from .action_handler import IDLE, Intent

log = structlog.get_logger()

Clock = Callable[[], float]

RELOAD_POLICIES = ("shift", "exempt")
# gameplay.yaml section read by the launcher, not by the simulation
RUN_SECTION = "run"


class RunState(str, Enum):
    INITIALIZING = "INITIALIZING"
    RUNNING = "RUNNING"
    FROZEN = "FROZEN"
    TERMINATED = "TERMINATED"


class FreezeReason(str, Enum):
    PAUSE = "PAUSE"
    LEVEL_UP = "LEVEL_UP"


@dataclass(frozen=True)
class SimulationConfig:
    """Tunables read from ``config/gameplay.yaml``.

    ``reload_pause_policy`` decides whether a reload in progress is shifted
    with the other timers on resume ("shift") or keeps running through a
    pause ("exempt").
    """

    reload_pause_policy: str = "shift"
    sprint_multiplier: float = 1.0
    frame_rate: int = 60

    def __post_init__(self) -> None:
        if self.reload_pause_policy not in RELOAD_POLICIES:
            raise ValueError(
                f"reload_pause_policy must be one of {RELOAD_POLICIES}, "
                f"got {self.reload_pause_policy!r}"
            )
        if self.sprint_multiplier <= 0:
            raise ValueError("sprint_multiplier must be positive.")
        if self.frame_rate <= 0:
            raise ValueError("frame_rate must be positive.")

    @property
    def frame_delta(self) -> float:
        return 1.0 / self.frame_rate

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known - {RUN_SECTION})
        if unknown:
            log.warning("Ignoring unknown gameplay settings", keys=unknown)
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, path: Path) -> "SimulationConfig":
        return cls.from_dict(load_yaml_config(path, "gameplay"))


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class MainLoop:
    """
    Owns one run's :class:`GameState` and advances it tick by tick.
    All simulation mutation goes through this object; events queued during a
    tick are delivered after it completes.
    """

    def __init__(
        self: Self,
        game_state: GameState,
        clock: Clock = monotonic_ms,
        config: SimulationConfig | None = None,
    ):
        self.game_state: GameState = game_state
        self.clock: Clock = clock
        self.config: SimulationConfig = config or SimulationConfig()
        self.state: RunState = RunState.INITIALIZING
        self.freeze_reasons: Set[FreezeReason] = set()
        self.frozen_since: float | None = None
        self.result: GameOver | None = None
        self.tick_count: int = 0
        self._aim: Tuple[float, float] = (0.0, 0.0)
        self._last_status: Tuple[Any, ...] | None = None
        log.info("MainLoop initialized", config=self.config)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def start(self: Self) -> None:
        if self.state is not RunState.INITIALIZING:
            log.warning("Run already started", state=self.state.value)
            return
        now = self.clock()
        spawn_system.spawn_initial_wave(self.game_state, now)
        self.state = RunState.RUNNING
        self._publish_status()
        self.game_state.bus.drain()
        log.info("Run started", enemies=len(self.game_state.enemies))

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    @property
    def is_terminated(self) -> bool:
        return self.state is RunState.TERMINATED

    def freeze(self: Self, reason: FreezeReason) -> None:
        if self.state in (RunState.INITIALIZING, RunState.TERMINATED):
            return
        self.freeze_reasons.add(reason)
        if self.state is RunState.RUNNING:
            self.state = RunState.FROZEN
            self.frozen_since = self.clock()
            log.debug("Run frozen", reason=reason.value)

    def unfreeze(self: Self, reason: FreezeReason) -> None:
        if self.state is not RunState.FROZEN:
            return
        self.freeze_reasons.discard(reason)
        if self.freeze_reasons:
            return
        now = self.clock()
        frozen_for = now - (self.frozen_since if self.frozen_since is not None else now)
        self.game_state.shift_timers(
            frozen_for,
            include_reload=self.config.reload_pause_policy == "shift",
        )
        self.frozen_since = None
        self.state = RunState.RUNNING
        log.debug("Run resumed", reason=reason.value, frozen_for=frozen_for)

    def pause(self: Self) -> None:
        self.freeze(FreezeReason.PAUSE)

    def resume(self: Self) -> None:
        self.unfreeze(FreezeReason.PAUSE)

    # ------------------------------------------------------------------
    # input
    # ------------------------------------------------------------------
    def pull_trigger(self: Self, aim: Tuple[float, float] | None = None) -> None:
        """Press the fire button. Fires at once; automatic weapons keep firing each tick."""
        gs = self.game_state
        if aim is not None:
            self._aim = aim
        gs.trigger_held = True
        if self.is_running:
            combat_system.shoot(gs, self.clock(), self._aim)
            self._after_input()

    def release_trigger(self: Self) -> None:
        self.game_state.trigger_held = False

    def request_reload(self: Self) -> bool:
        if not self.is_running:
            return False
        started = combat_system.reload(self.game_state, self.clock())
        self._after_input()
        return started

    def select_perk(self: Self, perk: PerkOption | str) -> bool:
        """Apply one of the pending level-up choices and resume if nothing else is pending."""
        gs = self.game_state
        if FreezeReason.LEVEL_UP not in self.freeze_reasons or not gs.pending_perks:
            log.warning("No level-up choice pending")
            return False
        perk_id = perk if isinstance(perk, str) else perk.id
        chosen = next((p for p in gs.pending_perks if p.id == perk_id), None)
        if chosen is None:
            log.error("Perk is not among the offered options", perk_id=perk_id)
            raise ValueError(f"Perk {perk_id!r} was not offered")

        progression.apply_perk(gs, chosen)
        gs.pending_perks = ()
        if gs.current_exp >= gs.exp_to_next_level:
            progression.trigger_level_up(gs, gs.current_exp - gs.exp_to_next_level)
            gs.bus.emit(LevelUpOptionsReady(options=gs.pending_perks))
        else:
            self.unfreeze(FreezeReason.LEVEL_UP)
        self._after_input()
        return True

    # ------------------------------------------------------------------
    # simulation
    # ------------------------------------------------------------------
    def tick(self: Self, delta: float | None = None, intent: Intent = IDLE) -> bool:
        """
        Advances the run by ``delta`` seconds (one frame by default).
        Returns False without touching state unless the run is RUNNING.
        """
        if not self.is_running:
            return False
        gs = self.game_state
        now = self.clock()
        delta = self.config.frame_delta if delta is None else delta
        if intent.aim is not None:
            self._aim = intent.aim

        try:
            combat_system.update_reload(gs, now)
            action_handler.process_intent(
                intent, gs, delta, now, self.config.sprint_multiplier
            )
            if gs.trigger_held and gs.weapon.automatic:
                combat_system.shoot(gs, now, self._aim)

            spawn_system.update_spawning(gs, now)
            leveled_up = pickup_system.collect_pickups(gs)

            gs.snapshot_enemy_positions()
            hits = combat_system.advance_projectiles(gs, delta, now)
            combat_system.apply_hits(gs, hits, now)
            combat_system.update_enemies(gs, delta, now)
        except Exception as e:
            log.error("Exception during tick", tick=self.tick_count, error=str(e), exc_info=True)
            raise

        self.tick_count += 1
        self._report_time(now)

        if gs.is_dead:
            self._game_over(now)
        elif leveled_up:
            gs.bus.emit(LevelUpOptionsReady(options=gs.pending_perks))
            self.freeze(FreezeReason.LEVEL_UP)
        self._after_input()
        return True

    def _report_time(self: Self, now: float) -> None:
        gs = self.game_state
        seconds = gs.survived_seconds(now)
        while gs.last_reported_second < seconds:
            gs.last_reported_second += 1
            gs.bus.emit(TimeElapsed(seconds=gs.last_reported_second))

    def _game_over(self: Self, now: float) -> None:
        gs = self.game_state
        self.result = GameOver(
            enemies_killed=gs.stats.enemies_killed,
            money_earned=gs.stats.money_earned,
            money_spent=gs.stats.money_spent,
            time_survived=gs.survived_seconds(now),
            level_reached=gs.level,
        )
        self.state = RunState.TERMINATED
        self.freeze_reasons.clear()
        gs.trigger_held = False
        gs.bus.emit(self.result)
        log.info("Game over", **self.result.to_dict())

    def _status(self: Self) -> Tuple[Any, ...]:
        gs = self.game_state
        return (
            gs.ammo,
            gs.weapon.max_ammo,
            gs.is_reloading,
            gs.health,
            gs.combat_stats.max_health,
            len(gs.enemies),
            gs.money,
            gs.current_exp,
            gs.exp_to_next_level,
            gs.level,
        )

    def _publish_status(self: Self) -> None:
        status = self._status()
        if status != self._last_status:
            self._last_status = status
            self.game_state.publish_status()

    def _after_input(self: Self) -> None:
        self._publish_status()
        self.game_state.bus.drain()


class ManualClock:
    """Millisecond clock that only moves when told to; used for headless runs."""

    def __init__(self, start: float = 0.0):
        self.now: float = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


def build_summary(loop: MainLoop) -> Dict[str, Any]:
    gs = loop.game_state
    return {
        "state": loop.state.value,
        "ticks": loop.tick_count,
        "health": gs.health,
        "level": gs.level,
        "enemies": len(gs.enemies),
        "kills": gs.stats.enemies_killed,
        "money": gs.money,
        "result": loop.result.to_dict() if loop.result else None,
    }
