"""Run-scoped event channel between the simulation and its presentation.

The simulation emits plain dataclass notifications while it mutates state;
the main loop drains the queue once the tick has finished, so subscribers
only ever observe completed updates.  Subscribers never write back.

    bus = EventBus()
    bus.subscribe(HealthChanged, hud.on_health)
    bus.emit(HealthChanged(health=85, max_health=100))
    bus.drain()
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple, Type

import structlog

from game.constants import EnemyType
from game.items.registry import PerkOption

log = structlog.get_logger(__name__)

Handler = Callable[[Any], None]


# ---------------------------------------------------------------------------
# Event definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AmmoChanged:
    current: int
    max: int


@dataclass(frozen=True)
class ReloadStateChanged:
    is_reloading: bool


@dataclass(frozen=True)
class HealthChanged:
    health: float
    max_health: float


@dataclass(frozen=True)
class WaveChanged:
    """Number of enemies currently alive."""

    wave: int


@dataclass(frozen=True)
class MoneyChanged:
    money: int


@dataclass(frozen=True)
class ExpChanged:
    current: float
    max: int
    level: int


@dataclass(frozen=True)
class LevelUpOptionsReady:
    options: Tuple[PerkOption, ...]


@dataclass(frozen=True)
class TimeElapsed:
    seconds: int


@dataclass(frozen=True)
class ShotFired:
    two_handed: bool
    pellets: int


@dataclass(frozen=True)
class EnemyHit:
    enemy_id: int
    enemy_type: EnemyType
    remaining_health: float


@dataclass(frozen=True)
class EnemyKilled:
    enemy_id: int
    enemy_type: EnemyType
    position: Tuple[float, float]


@dataclass(frozen=True)
class PlayerHit:
    damage: float
    health: float


@dataclass(frozen=True)
class GameOver:
    enemies_killed: int
    money_earned: int
    money_spent: int
    time_survived: int
    level_reached: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "enemiesKilled": self.enemies_killed,
            "moneyEarned": self.money_earned,
            "moneySpent": self.money_spent,
            "timeSurvived": self.time_survived,
            "levelReached": self.level_reached,
        }


# ---------------------------------------------------------------------------
# Event bus
# ---------------------------------------------------------------------------


@dataclass
class EventBus:
    """Fire-and-forget queue with per-type subscribers."""

    _queue: List[Any] = field(default_factory=list)
    _subs: Dict[Type[Any], List[Handler]] = field(default_factory=lambda: defaultdict(list))
    stats: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def emit(self, event: Any) -> None:
        self._queue.append(event)

    def subscribe(self, event_type: Type[Any], handler: Handler) -> None:
        self._subs[event_type].append(handler)

    def unsubscribe(self, event_type: Type[Any], handler: Handler) -> None:
        handlers = self._subs.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def drain(self) -> int:
        """Deliver queued events in FIFO order. Returns how many were delivered.

        Handler failures are logged and do not stop delivery of the rest.
        """
        batch = self._queue[:]
        self._queue.clear()
        for event in batch:
            event_type = type(event)
            self.stats[event_type.__name__] += 1
            for handler in list(self._subs.get(event_type, [])):
                try:
                    handler(event)
                except Exception as exc:
                    log.error(
                        "Event handler failed",
                        event=event_type.__name__,
                        error=str(exc),
                        exc_info=True,
                    )
        return len(batch)
