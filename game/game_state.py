# game/game_state.py
from __future__ import annotations

import math
from typing import Dict, List, Tuple

import structlog

from game.constants import (
    BASE_EXP_REQ,
    PLAYER_RADIUS,
    UNLIMITED_CASH_AMOUNT,
)
from game.economy import PlayerStats
from game.entities.components import (
    BoneData,
    CombatStats,
    EnemyData,
    Position,
    PowerUpData,
    ProjectileData,
    RunModifiers,
    RunStats,
)
from game.events import (
    AmmoChanged,
    EventBus,
    ExpChanged,
    HealthChanged,
    MoneyChanged,
    ReloadStateChanged,
    WaveChanged,
)
from game.items.registry import (
    CharacterConfig,
    PerkOption,
    WeaponStats,
    get_character,
    max_weapon_level,
    resolve_weapon,
)
from game.systems.progression import derive_combat_stats
from game.world.collision import CollisionIndex
from game.world.game_map import GeneratedMap
from game_rng import SeededRandom

log = structlog.get_logger()

NEVER = float("-inf")


class GameState:
    """Central container for the mutable data of one run.

    Systems in :mod:`game.systems` read and write these fields; only the
    :class:`engine.main_loop.MainLoop` calls them, one tick at a time.  All
    timestamps are milliseconds on the loop's monotonic clock.
    """

    def __init__(
        self,
        game_map: GeneratedMap,
        player_stats: PlayerStats,
        start_time: float,
        character_id: str = "TOM",
        rng_seed: int | None = None,
        bus: EventBus | None = None,
        unlimited_cash: bool = False,
    ):
        self.game_map: GeneratedMap = game_map
        self.collision: CollisionIndex = CollisionIndex(game_map)
        seed = game_map.config.seed if rng_seed is None else rng_seed
        self.rng: SeededRandom = SeededRandom(seed)
        self.bus: EventBus = bus if bus is not None else EventBus()

        self.player_stats: PlayerStats = player_stats
        self.character: CharacterConfig = get_character(character_id)
        self.weapon_key: str = self.character.weapon
        self.weapon_level: int = 1
        self.modifiers: RunModifiers = RunModifiers()

        self.player: Position = Position(0.0, 0.0)
        self.player_radius: float = PLAYER_RADIUS
        self.health: float = self.combat_stats.max_health
        self.ammo: int = self.weapon.max_ammo
        self.is_reloading: bool = False
        self.reload_done_at: float | None = None
        self.trigger_held: bool = False

        self.money: int = UNLIMITED_CASH_AMOUNT if unlimited_cash else 0
        self.stats: RunStats = RunStats(money_earned=self.money)

        self.level: int = 1
        self.current_exp: float = 0
        self.exp_to_next_level: int = BASE_EXP_REQ
        self.pending_perks: Tuple[PerkOption, ...] = ()

        self.enemies: Dict[int, EnemyData] = {}
        # Last known enemy positions, refreshed once per tick before projectiles move
        self.enemy_positions: Dict[int, Tuple[float, float]] = {}
        self.projectiles: List[ProjectileData] = []
        self.power_ups: List[PowerUpData] = []
        self.bones: List[BoneData] = []
        self._next_entity_id: int = 1

        # Timers
        self.game_start_time: float = start_time
        self.last_spawn_time: float = start_time
        self.last_powerup_time: float = start_time
        self.last_hit_time: float = NEVER
        self.last_shot_time: float = NEVER
        self.last_reported_second: int = 0

        log.info(
            "Game state initialized",
            seed=seed,
            character=self.character.id,
            weapon=self.weapon_key,
            max_health=self.combat_stats.max_health,
        )

    # ------------------------------------------------------------------
    # derived values
    # ------------------------------------------------------------------
    @property
    def weapon(self) -> WeaponStats:
        return resolve_weapon(self.weapon_key, self.weapon_level)

    @property
    def max_weapon_level(self) -> int:
        return max_weapon_level(self.weapon_key)

    @property
    def combat_stats(self) -> CombatStats:
        return derive_combat_stats(self.player_stats, self.weapon, self.modifiers)

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    def next_id(self) -> int:
        entity_id = self._next_entity_id
        self._next_entity_id += 1
        return entity_id

    def elapsed_ms(self, now: float) -> float:
        return now - self.game_start_time

    def elapsed_minutes(self, now: float) -> float:
        return self.elapsed_ms(now) / 60000

    def survived_seconds(self, now: float) -> int:
        return math.floor(self.elapsed_ms(now) / 1000)

    # ------------------------------------------------------------------
    # bookkeeping
    # ------------------------------------------------------------------
    def shift_timers(self, duration: float, include_reload: bool = True) -> None:
        """Move every future-relative timestamp forward by ``duration``."""
        self.game_start_time += duration
        self.last_spawn_time += duration
        self.last_powerup_time += duration
        self.last_hit_time += duration
        self.last_shot_time += duration
        for projectile in self.projectiles:
            projectile.created_at += duration
        for bone in self.bones:
            bone.created_at += duration
        if include_reload and self.reload_done_at is not None:
            self.reload_done_at += duration
        log.debug("Timers shifted", duration=duration, include_reload=include_reload)

    def snapshot_enemy_positions(self) -> None:
        self.enemy_positions = {
            enemy_id: (enemy.position.x, enemy.position.z)
            for enemy_id, enemy in self.enemies.items()
        }

    def publish_status(self) -> None:
        """Queue the full HUD status (ammo, health, wave, money, exp)."""
        stats = self.combat_stats
        self.bus.emit(AmmoChanged(current=self.ammo, max=self.weapon.max_ammo))
        self.bus.emit(ReloadStateChanged(is_reloading=self.is_reloading))
        self.bus.emit(HealthChanged(health=self.health, max_health=stats.max_health))
        self.bus.emit(WaveChanged(wave=len(self.enemies)))
        self.bus.emit(MoneyChanged(money=self.money))
        self.bus.emit(
            ExpChanged(current=self.current_exp, max=self.exp_to_next_level, level=self.level)
        )
