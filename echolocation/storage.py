"""
Key-value persistence for progress and cheat flags.

The game core only ever talks to a KeyValueStore. Loads are best effort:
a missing key returns the default, and storage failures are logged and
never propagated to the game.

Usage:
    store = JsonFileStore('~/.local/share/echolocation/state.json')
    store.set(STATS_KEY, {...})
    stats = store.get(STATS_KEY, {})

    # Tests and throwaway sessions
    store = MemoryStore()
"""

import copy
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from echolocation.logging import get_logger

log = get_logger('storage')

# Fixed keys used by the game core
STATS_KEY = 'echo_chapter_stats'
CHAPTER_PROGRESS_KEY = 'echo_chapter_progress'
SAVE_POINTER_KEY = 'echo_classic_progress'
SEEN_INTROS_KEY = 'echo_seen_chapter_intros'
ACTIVE_BOONS_KEY = 'echo_active_boons'
CUSTOM_CONFIG_KEY = 'echo_custom_config'
CUSTOM_PRESETS_KEY = 'echo_custom_presets'
CUSTOM_STATS_KEY = 'echo_custom_stats'
CHEAT_KEY_PREFIX = 'echo_cheat_'


class KeyValueStore(ABC):
    """Minimal get/set/delete store keyed by fixed string identifiers."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or default when missing."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""

    def __contains__(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel


class MemoryStore(KeyValueStore):
    """In-process store. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of everything stored."""
        return copy.deepcopy(self._data)


class JsonFileStore(MemoryStore):
    """Store backed by a single JSON file.

    The file is read once on construction and rewritten on every change.
    If the file cannot be read or written the store keeps working from
    memory and logs the failure.

    Args:
        path: Location of the JSON file (created on first write)
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path).expanduser()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, 'r') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Could not read %s, starting empty: %s", self.path, e)
            return

        if not isinstance(loaded, dict):
            log.warning("Ignoring %s: expected a JSON object", self.path)
            return
        self._data = loaded
        log.debug("Loaded %d keys from %s", len(loaded), self.path)

    def _save(self) -> None:
        # Replace the file only once the temp copy is fully written
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w') as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError) as e:
            log.error("Could not write %s: %s", self.path, e)

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self._save()

    def delete(self, key: str) -> None:
        if key in self._data:
            super().delete(key)
            self._save()
