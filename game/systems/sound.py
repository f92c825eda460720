"""Sound cues for Blocky Town.

The simulation never plays audio itself.  :class:`SoundManager` subscribes to
the run's :class:`~game.events.EventBus` and turns drained events into cue
playback on an injected backend:

- ``ShotFired``   -> pistol or shotgun fire (by weapon stance)
- ``EnemyHit``    -> enemy hit
- ``EnemyKilled`` -> enemy death
- ``PlayerHit``   -> one of three player hurt sounds, chosen at random

Cue files are listed in ``config/sounds.yaml``.  A cue whose file is missing
or fails to load is logged once and then silently skipped; audio problems
never reach the simulation.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import structlog

from game.events import EnemyHit, EnemyKilled, EventBus, PlayerHit, ShotFired
from utils.config import CONFIG_DIR, load_yaml_config

log = structlog.get_logger(__name__)

SOUNDS_CONFIG_FILE = CONFIG_DIR / "sounds.yaml"

SHOOT = "SHOOT"
SHOTGUN = "SHOTGUN"
HIT = "HIT"
DEAD = "DEAD"
PLAYER_HIT_CUES = ("PLAYER_HIT_1", "PLAYER_HIT_2", "PLAYER_HIT_3")
BGM = "BGM"

DEFAULT_CUES: Dict[str, str] = {
    BGM: "bgm1.mp3",
    SHOOT: "pistol_fire.wav",
    SHOTGUN: "shotgun_fire.wav",
    HIT: "enemy_hit.wav",
    DEAD: "enemy_dead.wav",
    "PLAYER_HIT_1": "player_hit1.wav",
    "PLAYER_HIT_2": "player_hit2.wav",
    "PLAYER_HIT_3": "player_hit3.wav",
}

# Per-cue volume scale applied on top of the SFX volume
CUE_VOLUME: Dict[str, float] = {
    SHOOT: 0.4,
    SHOTGUN: 0.4,
    HIT: 0.4,
    DEAD: 0.5,
    "PLAYER_HIT_1": 0.8,
    "PLAYER_HIT_2": 0.8,
    "PLAYER_HIT_3": 0.8,
}


class AudioBackend(Protocol):
    """What the manager needs from an audio library."""

    def load(self, path: Path) -> Any: ...

    def play(self, handle: Any, volume: float, loop: bool = False) -> Any: ...

    def stop(self, playing: Any) -> None: ...


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class SoundManager:
    """Maps gameplay events to sound cues."""

    def __init__(
        self,
        backend: Optional[AudioBackend] = None,
        config_path: Optional[Path] = None,
        rng: Optional[random.Random] = None,
    ):
        self.backend = backend
        self.enabled = backend is not None
        self.muted = False
        self.sfx_volume = 0.5
        self.music_volume = 0.3
        self.base_path: Path = CONFIG_DIR / "sounds"
        self.cues: Dict[str, str] = dict(DEFAULT_CUES)
        self.rng = rng or random.Random()

        self._buffers: Dict[str, Any] = {}
        self._unavailable: set[str] = set()
        self._music: Any = None

        if config_path is None:
            config_path = SOUNDS_CONFIG_FILE
        if config_path.exists():
            self._load_config(config_path)
        else:
            log.warning("Sound config file not found, using defaults", path=str(config_path))

        if not self.enabled:
            log.info("No audio backend configured - sound cues disabled")

    def _load_config(self, config_path: Path) -> None:
        config = load_yaml_config(config_path, "sounds")
        audio_config = config.get("audio", {})
        self.enabled = self.enabled and bool(audio_config.get("enabled", True))
        self.sfx_volume = _clamp(audio_config.get("sfx_volume", self.sfx_volume))
        self.music_volume = _clamp(audio_config.get("music_volume", self.music_volume))
        self.muted = bool(audio_config.get("muted", False))
        base_dir = audio_config.get("base_dir")
        if base_dir:
            self.base_path = (config_path.parent / base_dir).resolve()
        self.cues.update(config.get("cues", {}) or {})
        log.info("Loaded sound config", cues=len(self.cues), enabled=self.enabled)

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    def _buffer(self, cue: str) -> Any:
        if cue in self._buffers:
            return self._buffers[cue]
        if cue in self._unavailable or self.backend is None:
            return None
        filename = self.cues.get(cue)
        if filename is None:
            log.warning("Unknown sound cue", cue=cue)
            self._unavailable.add(cue)
            return None
        path = self.base_path / filename
        try:
            handle = self.backend.load(path)
        except Exception as e:
            log.warning("Failed to load sound", cue=cue, path=str(path), error=str(e))
            self._unavailable.add(cue)
            return None
        self._buffers[cue] = handle
        return handle

    def preload(self) -> List[str]:
        """Load every configured cue. Returns the cues that loaded."""
        if not self.enabled:
            return []
        return [cue for cue in self.cues if self._buffer(cue) is not None]

    # ------------------------------------------------------------------
    # playback
    # ------------------------------------------------------------------
    def play_cue(self, cue: str, volume_scale: float | None = None) -> bool:
        if not self.enabled or self.muted:
            return False
        handle = self._buffer(cue)
        if handle is None:
            return False
        scale = CUE_VOLUME.get(cue, 1.0) if volume_scale is None else volume_scale
        try:
            self.backend.play(handle, self.sfx_volume * scale)
        except Exception as e:
            log.warning("Sound playback failed", cue=cue, error=str(e))
            return False
        return True

    def play_music(self) -> bool:
        if not self.enabled or self._music is not None:
            return False
        handle = self._buffer(BGM)
        if handle is None:
            return False
        volume = 0.0 if self.muted else self.music_volume
        try:
            self._music = self.backend.play(handle, volume, loop=True)
        except Exception as e:
            log.warning("Music playback failed", error=str(e))
            return False
        return True

    def stop_music(self) -> None:
        if self._music is None or self.backend is None:
            return
        try:
            self.backend.stop(self._music)
        except Exception as e:
            log.debug("Stopping music failed", error=str(e))
        self._music = None

    def set_sfx_volume(self, volume: float) -> None:
        self.sfx_volume = _clamp(volume)

    def set_music_volume(self, volume: float) -> None:
        self.music_volume = _clamp(volume)

    def set_muted(self, muted: bool) -> None:
        self.muted = muted

    # ------------------------------------------------------------------
    # event wiring
    # ------------------------------------------------------------------
    def attach(self, bus: EventBus) -> None:
        bus.subscribe(ShotFired, self.on_shot_fired)
        bus.subscribe(EnemyHit, self.on_enemy_hit)
        bus.subscribe(EnemyKilled, self.on_enemy_killed)
        bus.subscribe(PlayerHit, self.on_player_hit)

    def detach(self, bus: EventBus) -> None:
        bus.unsubscribe(ShotFired, self.on_shot_fired)
        bus.unsubscribe(EnemyHit, self.on_enemy_hit)
        bus.unsubscribe(EnemyKilled, self.on_enemy_killed)
        bus.unsubscribe(PlayerHit, self.on_player_hit)

    def on_shot_fired(self, event: ShotFired) -> None:
        self.play_cue(SHOTGUN if event.two_handed else SHOOT)

    def on_enemy_hit(self, event: EnemyHit) -> None:
        self.play_cue(HIT)

    def on_enemy_killed(self, event: EnemyKilled) -> None:
        self.play_cue(DEAD)

    def on_player_hit(self, event: PlayerHit) -> None:
        self.play_cue(self.rng.choice(PLAYER_HIT_CUES))
