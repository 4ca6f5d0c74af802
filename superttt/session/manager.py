"""
Game Store - Holds the player's open games.

A store is what a renderer shows as tabs:
- Several games, each with its own board size
- One active game
- Player preferences (sound, last requested size)

The store is the only mutable object in the system. It swaps
whole GameState snapshots in and out; it never edits one.
Persistence lives in storage.py; this module only knows records.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping
import logging
import time
import uuid

from ..engine_core.state import DEFAULT_SIZE, GameState, create_initial_game_state, normalize_size
from ..engine_core.action import MoveResult
from ..engine_core.reducer import apply_move
from .coercion import (
    STORAGE_VERSION,
    coerce_game_state,
    game_state_to_record,
    is_positive_number,
    migrate_store_record,
)


logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


def _new_id() -> str:
    return str(uuid.uuid4())


class GameNotFoundError(KeyError):
    """Raised when a game id is not in the store."""

    def __init__(self, game_id: str):
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Game {self.game_id} not found"


@dataclass
class GameEntry:
    """One open game (a tab)."""
    game_id: str
    name: str
    created_at: float
    updated_at: float
    state: GameState

    @classmethod
    def create(cls, size, game_number: int) -> GameEntry:
        now = _now_ms()
        return cls(
            game_id=_new_id(),
            name=f"Game {game_number}",
            created_at=now,
            updated_at=now,
            state=create_initial_game_state(size),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.game_id,
            "name": self.name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "state": game_state_to_record(self.state),
        }


@dataclass
class GameStore:
    """
    The set of open games plus preferences.

    Invariants:
    - There is always at least one game
    - active_game_id always names a game in the store
    """
    games: list[GameEntry] = field(default_factory=list)
    active_game_id: str | None = None
    sound_enabled: bool = True
    size_input: str = str(DEFAULT_SIZE)

    @classmethod
    def create_default(cls, size=DEFAULT_SIZE) -> GameStore:
        """A store with a single fresh game."""
        first = GameEntry.create(size, 1)
        return cls(
            games=[first],
            active_game_id=first.game_id,
            size_input=str(first.state.size),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_game(self, game_id: str) -> GameEntry:
        for entry in self.games:
            if entry.game_id == game_id:
                return entry
        raise GameNotFoundError(game_id)

    def has_game(self, game_id: str) -> bool:
        return any(entry.game_id == game_id for entry in self.games)

    @property
    def active_game(self) -> GameEntry:
        if self.active_game_id is not None and self.has_game(self.active_game_id):
            return self.get_game(self.active_game_id)
        return self.games[0]

    def _resolve(self, game_id: str | None) -> GameEntry:
        return self.active_game if game_id is None else self.get_game(game_id)

    # =========================================================================
    # Mutations
    # =========================================================================

    def create_game(self, size=None) -> GameEntry:
        """Open a new game and make it active."""
        if size is None:
            size = self.size_input
        entry = GameEntry.create(normalize_size(size), len(self.games) + 1)
        self.games.append(entry)
        self.active_game_id = entry.game_id
        self.size_input = str(entry.state.size)
        logger.info("Created %s (%s, size %d)", entry.name, entry.game_id, entry.state.size)
        return entry

    def select_game(self, game_id: str) -> GameEntry:
        entry = self.get_game(game_id)
        self.active_game_id = entry.game_id
        return entry

    def remove_game(self, game_id: str) -> None:
        """Close a game; closing the last one opens a fresh game."""
        entry = self.get_game(game_id)
        self.games.remove(entry)
        if not self.games:
            self.games.append(GameEntry.create(entry.state.size, 1))
        if self.active_game_id == game_id or not self.has_game(self.active_game_id or ""):
            self.active_game_id = self.games[0].game_id

    def play(self, board_index: int, cell_index: int, game_id: str | None = None) -> MoveResult:
        """
        Apply a move to a game (the active one by default).

        The entry is only touched when the move is applied.
        """
        entry = self._resolve(game_id)
        result = apply_move(entry.state, board_index, cell_index)
        if result.applied:
            entry.state = result.state
            entry.updated_at = _now_ms()
        else:
            logger.debug(
                "Rejected move (%s, %s) in %s: %s",
                board_index, cell_index, entry.game_id, result.reason.value,
            )
        return result

    def reset_game(self, game_id: str | None = None, size=None) -> GameEntry:
        """Replace a game with a fresh one of the same or a new size."""
        entry = self._resolve(game_id)
        new_size = entry.state.size if size is None else normalize_size(size)
        entry.state = create_initial_game_state(new_size)
        entry.updated_at = _now_ms()
        logger.info("Reset %s to size %d", entry.game_id, new_size)
        return entry

    def toggle_sound(self) -> bool:
        self.sound_enabled = not self.sound_enabled
        return self.sound_enabled

    # =========================================================================
    # Records
    # =========================================================================

    def to_record(self) -> dict[str, Any]:
        return {
            "version": STORAGE_VERSION,
            "active_game_id": self.active_game.game_id,
            "sound_enabled": self.sound_enabled,
            "size_input": self.size_input,
            "games": [entry.to_record() for entry in self.games],
        }

    @classmethod
    def from_record(cls, raw: Any, default_size=DEFAULT_SIZE) -> GameStore:
        """
        Hydrate a store from any known record shape.

        Never raises; unusable records give a default store.
        """
        record = migrate_store_record(raw)
        if record is None:
            return cls.create_default(default_size)

        games = _hydrate_games(record.get("games"))
        if not games:
            return cls.create_default(default_size)

        active_id = record.get("active_game_id")
        if not isinstance(active_id, str) or not any(g.game_id == active_id for g in games):
            active_id = games[0].game_id
        active = next(g for g in games if g.game_id == active_id)

        size_input = record.get("size_input")
        if size_input is None:
            size_input = active.state.size

        return cls(
            games=games,
            active_game_id=active_id,
            sound_enabled=record.get("sound_enabled") is not False,
            size_input=str(normalize_size(size_input)),
        )


def _hydrate_games(raw_games: Any) -> list[GameEntry]:
    if not isinstance(raw_games, list):
        return []

    seen_ids: set[str] = set()
    games = []
    for index, raw in enumerate(raw_games):
        raw = raw if isinstance(raw, Mapping) else {}

        candidate = raw.get("id").strip() if isinstance(raw.get("id"), str) else ""
        game_id = candidate if candidate and candidate not in seen_ids else _new_id()
        seen_ids.add(game_id)

        name = raw.get("name")
        name = name.strip() if isinstance(name, str) and name.strip() else f"Game {index + 1}"

        now = _now_ms()
        created_at = raw.get("created_at")
        if not is_positive_number(created_at):
            created_at = now
        updated_at = raw.get("updated_at")
        if not is_positive_number(updated_at):
            updated_at = created_at

        games.append(GameEntry(
            game_id=game_id,
            name=name,
            created_at=float(created_at),
            updated_at=float(updated_at),
            state=coerce_game_state(raw.get("state")),
        ))
    return games

