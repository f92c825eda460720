# utils/config.py
import os
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import structlog
import yaml

log = structlog.get_logger(__name__)

SCRIPT_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR_ENV = "BLOCKY_TOWN_CONFIG_DIR"
# Where a non-editable install places the bundled YAML (see pyproject data-files)
INSTALLED_CONFIG_DIR = Path(sys.prefix) / "share" / "blocky-town" / "config"


def resolve_config_dir(
    env: Optional[Mapping[str, str]] = None, cwd: Optional[Path] = None
) -> Path:
    """Pick the directory holding maps.yaml, gameplay.yaml and sounds.yaml.

    Order: the ``BLOCKY_TOWN_CONFIG_DIR`` variable, then a ``config/`` folder in
    the working directory, then the source checkout, then the installed copy.
    """
    env = os.environ if env is None else env
    override = env.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    cwd = Path.cwd() if cwd is None else cwd
    for candidate in (cwd / "config", SCRIPT_DIR / "config", INSTALLED_CONFIG_DIR):
        if candidate.is_dir():
            return candidate
    log.warning("No config directory found", cwd=str(cwd))
    return cwd / "config"


CONFIG_DIR = resolve_config_dir()
MAPS_CONFIG_FILE = CONFIG_DIR / "maps.yaml"
GAMEPLAY_CONFIG_FILE = CONFIG_DIR / "gameplay.yaml"


def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads a YAML configuration file.

    A missing file raises ``FileNotFoundError``; parse errors are logged and
    re-raised.  An empty file yields an empty dict.
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(
            f"{config_name} configuration file not found: {config_path}"
        )
    try:
        with config_path.open("r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
            exc_info=True,
        )
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    if not isinstance(config_data, dict):
        log.error(f"{config_name} config must be a mapping", path=str(config_path))
        raise ValueError(f"{config_name} config must be a mapping: {config_path}")
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data
