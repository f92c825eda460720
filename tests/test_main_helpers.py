import json
from pathlib import Path

import pytest

from engine.main_loop import MainLoop, ManualClock, SimulationConfig
from game.events import ShotFired
from game.systems.sound import DEAD, HIT, PLAYER_HIT_CUES, SHOOT, SHOTGUN, SoundManager
from game.systems.spawn_system import spawn_initial_wave
from main import (
    build_parser,
    load_gameplay_settings,
    main,
    nearest_enemy,
    play_headless,
    resolve_map_config,
)
from utils.config import GAMEPLAY_CONFIG_FILE
from utils.save_store import SaveStore, load_persistent_data


def test_load_gameplay_settings():
    config, selection = load_gameplay_settings(GAMEPLAY_CONFIG_FILE)
    assert config.reload_pause_policy in ("shift", "exempt")
    assert selection["character"] == "TOM"
    assert selection["map"] == "apocalypse_town"


def test_resolve_map_config():
    assert resolve_map_config(None, None).seed == 12345
    assert resolve_map_config("arena", 8).seed == 8
    assert resolve_map_config("night_market", None).world_size == 80


def test_nearest_enemy(make_gs):
    gs = make_gs()
    assert nearest_enemy(gs) is None
    spawned = spawn_initial_wave(gs, 0.0)
    closest = min(spawned, key=lambda e: e.position.x ** 2 + e.position.z ** 2)
    assert nearest_enemy(gs) == (closest.position.x, closest.position.z)


def test_headless_pilot_fires(make_gs):
    clock = ManualClock()
    loop = MainLoop(make_gs(), clock=clock)
    loop.start()
    play_headless(loop, clock, 1.0)
    assert loop.tick_count == 60
    assert clock() == pytest.approx(1000.0)
    assert loop.game_state.ammo < loop.game_state.weapon.max_ammo


def test_map_command(capsys):
    assert main(["map", "--preset", "arena", "--seed", "3"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["seed"] == 3
    assert set(out) >= {"streets", "buildings", "trees", "obstacles", "street_lamps"}


def test_run_command(tmp_path, capsys):
    save = tmp_path / "save.json"
    assert main(["run", "--seconds", "1", "--save", str(save), "--character", "HANK"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["state"] == "RUNNING"
    assert out["ticks"] > 0
    assert out["result"] is None
    assert load_persistent_data(SaveStore(save)).total_cash == 0


def test_bad_seed_is_rejected():
    with pytest.raises(SystemExit):
        main(["map", "--seed", "many"])


def test_random_seed_overrides_preset():
    config = resolve_map_config("arena", 8, random_seed=True)
    assert 0 <= config.seed < 1_000_000
    assert config.world_size == 60


class WarningRecorder:
    def __init__(self):
        self.warnings = []

    def warning(self, event, **kw):
        self.warnings.append((event, kw))

    def __getattr__(self, name):
        return lambda *args, **kw: None


def test_bundled_gameplay_file_has_no_unknown_keys(monkeypatch):
    recorder = WarningRecorder()
    monkeypatch.setattr("engine.main_loop.log", recorder)
    load_gameplay_settings(GAMEPLAY_CONFIG_FILE)
    SimulationConfig.load(GAMEPLAY_CONFIG_FILE)
    assert recorder.warnings == []

    SimulationConfig.from_dict({"frame_rate": 30, "bogus": 1})
    assert recorder.warnings == [("Ignoring unknown gameplay settings", {"keys": ["bogus"]})]


def test_run_section_is_optional(tmp_path):
    path = tmp_path / "gameplay.yaml"
    path.write_text("frame_rate: 30\n", encoding="utf-8")
    config, selection = load_gameplay_settings(path)
    assert config.frame_rate == 30
    assert selection == {}


def test_run_section_must_be_mapping(tmp_path):
    path = tmp_path / "gameplay.yaml"
    path.write_text("run: TOM\n", encoding="utf-8")
    with pytest.raises(ValueError, match="run"):
        load_gameplay_settings(path)


def test_default_save_file_is_in_working_directory():
    args = build_parser().parse_args(["run"])
    assert args.save == Path("save.json")
    assert not args.save.is_absolute()


class RecordingSound(SoundManager):
    instances = []

    def __init__(self):
        super().__init__()
        self.played = []
        self.bus = None
        RecordingSound.instances.append(self)

    def attach(self, bus):
        super().attach(bus)
        self.bus = bus

    def play_cue(self, cue, volume_scale=None):
        self.played.append(cue)
        return False


def test_run_command_routes_events_to_sound(tmp_path, capsys, monkeypatch):
    RecordingSound.instances.clear()
    monkeypatch.setattr("main.SoundManager", RecordingSound)
    assert main(["run", "--seconds", "1", "--save", str(tmp_path / "save.json")]) == 0
    capsys.readouterr()

    (sound,) = RecordingSound.instances
    assert sound.played
    assert set(sound.played) <= {SHOOT, SHOTGUN, HIT, DEAD, *PLAYER_HIT_CUES}

    # Unsubscribed once the run is over.
    heard = len(sound.played)
    sound.bus.emit(ShotFired(two_handed=False, pellets=1))
    sound.bus.drain()
    assert len(sound.played) == heard
