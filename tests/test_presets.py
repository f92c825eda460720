import pytest

from game.world.presets import (
    APOCALYPSE_TOWN,
    ARENA,
    MAP_PRESETS,
    create_map_with_seed,
    get_map_config,
    get_random_seed,
    load_map_presets,
)
from utils.config import (
    CONFIG_DIR_ENV,
    MAPS_CONFIG_FILE,
    SCRIPT_DIR,
    load_yaml_config,
    resolve_config_dir,
)


def test_known_preset():
    assert get_map_config("arena") is ARENA
    assert len(MAP_PRESETS) == 5


def test_unknown_preset_falls_back_to_default():
    assert get_map_config("atlantis") is APOCALYPSE_TOWN


def test_seed_override_keeps_other_fields():
    config = create_map_with_seed("dense_city", 5)
    assert config.seed == 5
    assert config.block_size == 20
    assert MAP_PRESETS["dense_city"].seed == 54321


def test_bundled_presets_file_loads():
    presets, default = load_map_presets(MAPS_CONFIG_FILE)
    assert default in presets
    assert set(MAP_PRESETS) <= set(presets)


def test_yaml_presets_merge_over_builtins(tmp_path):
    path = tmp_path / "maps.yaml"
    path.write_text(
        "default: tiny\n"
        "presets:\n"
        "  tiny:\n"
        "    seed: 3\n"
        "    world_size: 40\n"
        "    block_size: 20\n"
        "    street_width: 4\n"
        "    building_density: 0.5\n"
        "    tree_density: 0.1\n"
        "    obstacle_density: 0.1\n",
        encoding="utf-8",
    )
    presets, default = load_map_presets(path)
    assert default == "tiny"
    assert presets["tiny"].world_size == 40
    assert presets["arena"] is ARENA
    assert get_map_config("nowhere", presets, default).seed == 3


def test_unknown_default_is_replaced(tmp_path):
    path = tmp_path / "maps.yaml"
    path.write_text("default: nowhere\n", encoding="utf-8")
    _, default = load_map_presets(path)
    assert default == "apocalypse_town"


def test_preset_missing_field(tmp_path):
    path = tmp_path / "maps.yaml"
    path.write_text("presets:\n  broken:\n    seed: 1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="broken"):
        load_map_presets(path)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(tmp_path / "absent.yaml", "Missing")


def test_empty_config_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_yaml_config(path, "Empty") == {}


def test_random_seed_range():
    seeds = {get_random_seed() for _ in range(20)}
    assert all(0 <= s < 1_000_000 for s in seeds)


def test_config_dir_env_override(tmp_path):
    env = {CONFIG_DIR_ENV: str(tmp_path / "elsewhere")}
    assert resolve_config_dir(env, cwd=tmp_path) == tmp_path / "elsewhere"


def test_config_dir_prefers_working_directory(tmp_path):
    (tmp_path / "config").mkdir()
    assert resolve_config_dir({}, cwd=tmp_path) == tmp_path / "config"


def test_config_dir_falls_back_to_checkout(tmp_path):
    assert resolve_config_dir({}, cwd=tmp_path) == SCRIPT_DIR / "config"
