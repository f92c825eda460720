# utils/save_store.py
"""JSON-file key/value store for the cross-run save blob."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import structlog

from game.economy import DEFAULT_SAVE_DATA, PersistentData

log = structlog.get_logger(__name__)

STORAGE_KEY = "blocky_town_save_v1"


class SaveStore:
    """String values under string keys, persisted to one JSON file.

    Every ``set`` rewrites the whole file; the store is tiny.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Save file unreadable, starting empty", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            log.warning("Save file is not a mapping, starting empty", path=str(self.path))
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        tmp_path.replace(self.path)


def load_persistent_data(store: SaveStore, key: str = STORAGE_KEY) -> PersistentData:
    """Read the save blob, falling back to a fresh save on missing or bad data."""
    raw = store.get(key)
    if raw is None:
        return DEFAULT_SAVE_DATA
    try:
        payload: Any = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("save blob is not an object")
        return PersistentData.from_dict(payload)
    except (ValueError, TypeError, AttributeError) as e:
        log.warning("Malformed save data, using defaults", key=key, error=str(e))
        return DEFAULT_SAVE_DATA


def save_persistent_data(
    store: SaveStore, data: PersistentData, key: str = STORAGE_KEY
) -> None:
    store.set(key, json.dumps(data.to_dict()))
    log.debug("Progress saved", key=key, total_cash=data.total_cash)
