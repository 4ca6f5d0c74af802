"""
Store Storage - Saves the game store on local disk.

The storage:
- Writes one JSON document per store
- Never fails to load: missing or broken files give a default store
- Migrates legacy record shapes on load (see coercion.py)
- Writes atomically (temp file, then replace)

There is no networked persistence.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any
import json
import logging
import os

from ..engine_core.state import DEFAULT_SIZE
from .manager import GameStore


logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path.home() / ".superttt" / "store.json"


class InMemoryStorage:
    """
    Keeps the last saved record in memory.

    Used by tests and by the API when no store path is configured.
    """

    def __init__(self, record: Any = None, default_size=DEFAULT_SIZE):
        self._record = record
        self.default_size = default_size

    def load(self) -> GameStore:
        return GameStore.from_record(self._record, self.default_size)

    def save(self, store: GameStore):
        self._record = store.to_record()

    @property
    def record(self) -> Any:
        return self._record


class JsonFileStorage:
    """
    File-based storage for the game store.

    Usage:
        storage = JsonFileStorage("~/.superttt/store.json")
        store = storage.load()
        store.play(0, 4)
        storage.save(store)
    """

    def __init__(self, path: str | Path | None = None, default_size=DEFAULT_SIZE):
        if path is None:
            path = os.getenv("SUPERTTT_STORE_PATH") or DEFAULT_STORE_PATH
        self.path = Path(path).expanduser()
        self.default_size = default_size

    def load(self) -> GameStore:
        """
        Load the store.

        Returns a default store when the file is missing or unreadable.
        """
        if not self.path.exists():
            return GameStore.create_default(self.default_size)

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read store %s, starting fresh: %s", self.path, e)
            return GameStore.create_default(self.default_size)

        return GameStore.from_record(raw, self.default_size)

    def save(self, store: GameStore):
        """Write the store, creating the parent directory if needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(store.to_record(), f, indent=2)
        os.replace(tmp_path, self.path)

    def clear(self):
        """Delete the saved store."""
        self.path.unlink(missing_ok=True)
