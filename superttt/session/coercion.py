"""
Record Coercion - Flat records to valid GameState, and back.

Saved games come from older versions and hand-edited files, so
loading is total: any input produces a valid GameState.

Coercion rules:
- Unusable input (not a mapping) -> fresh game of default size
- Size is normalized; missing boards and cells become empty
- Non-marker cell values become empty
- Out-of-range or non-integer indexes become None
- Missing or inconsistent move counts are recounted from the cells
- A winner always takes precedence over a draw flag

Schema versions:
- 1: multi-game store with camelCase keys (nextBoardIndex, gameState)
- "focused": single-game session {"game": ..., "soundEnabled": ...}
- 2: current snake_case store
"""

from __future__ import annotations
from typing import Any, Mapping
import math
import time

from ..engine_core.state import (
    DEFAULT_SIZE,
    GameState,
    LastMove,
    LocalBoard,
    Marker,
    create_initial_game_state,
    normalize_size,
)
from ..engine_core.lines import get_line_winner


STORAGE_VERSION = 2

_LEGACY_STATE_KEYS = {
    "currentPlayer": "current_player",
    "nextBoardIndex": "forced_board_index",
    "forcedBoardIndex": "forced_board_index",
    "isDraw": "is_draw",
    "moveCount": "move_count",
    "lastMove": "last_move",
}

_LEGACY_BOARD_KEYS = {"isDraw": "is_draw"}

_LEGACY_LAST_MOVE_KEYS = {
    "boardIndex": "board_index",
    "cellIndex": "cell_index",
    "moveNumber": "move_number",
}


# =============================================================================
# Scalar helpers
# =============================================================================

def coerce_marker(value: Any) -> Marker | None:
    """X/O (or a Marker) to Marker; anything else is empty."""
    if isinstance(value, Marker):
        return value
    if value == "X":
        return Marker.X
    if value == "O":
        return Marker.O
    return None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _index_or_none(value: Any, limit: int) -> int | None:
    if _is_int(value) and 0 <= value < limit:
        return value
    return None


def is_positive_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


def _rename_keys(raw: Mapping[str, Any], renames: Mapping[str, str]) -> dict[str, Any]:
    """Copy raw with legacy keys renamed; current keys win on conflict."""
    result = {}
    for key, value in raw.items():
        new_key = renames.get(key, key)
        if new_key != key and new_key in raw:
            continue
        result[new_key] = value
    return result


# =============================================================================
# GameState <-> record
# =============================================================================

def game_state_to_record(state: GameState) -> dict[str, Any]:
    """Flatten a GameState into a JSON-ready dict."""
    last_move = None
    if state.last_move is not None:
        lm = state.last_move
        last_move = {
            "board_index": lm.board_index,
            "cell_index": lm.cell_index,
            "player": lm.player.value,
            "move_number": lm.move_number,
            "timestamp": lm.timestamp,
        }

    return {
        "size": state.size,
        "boards": [
            {
                "cells": [cell.value if cell else None for cell in board.cells],
                "winner": board.winner.value if board.winner else None,
                "is_draw": board.is_draw,
            }
            for board in state.boards
        ],
        "current_player": state.current_player.value,
        "forced_board_index": state.forced_board_index,
        "winner": state.winner.value if state.winner else None,
        "is_draw": state.is_draw,
        "move_count": state.move_count,
        "last_move": last_move,
    }


def migrate_legacy_state(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Rename camelCase state keys (v1 and focused saves) to the current names."""
    migrated = _rename_keys(raw, _LEGACY_STATE_KEYS)
    boards = migrated.get("boards")
    if isinstance(boards, list):
        migrated["boards"] = [
            _rename_keys(b, _LEGACY_BOARD_KEYS) if isinstance(b, Mapping) else b
            for b in boards
        ]
    last_move = migrated.get("last_move")
    if isinstance(last_move, Mapping):
        migrated["last_move"] = _rename_keys(last_move, _LEGACY_LAST_MOVE_KEYS)
    return migrated


def _coerce_board(raw_board: Any, size: int) -> LocalBoard:
    cell_count = size * size
    raw_cells = []
    if isinstance(raw_board, Mapping) and isinstance(raw_board.get("cells"), list):
        raw_cells = raw_board["cells"]

    cells = tuple(
        coerce_marker(raw_cells[i]) if i < len(raw_cells) else None
        for i in range(cell_count)
    )

    stored_draw = False
    winner = None
    if isinstance(raw_board, Mapping):
        winner = coerce_marker(raw_board.get("winner"))
        stored_draw = bool(raw_board.get("is_draw"))
    if winner is None:
        winner = get_line_winner(cells, size)

    is_draw = winner is None and (stored_draw or all(c is not None for c in cells))
    return LocalBoard(cells=cells, winner=winner, is_draw=is_draw)


def _coerce_last_move(raw: Any, cell_count: int, move_count: int) -> LastMove | None:
    if not isinstance(raw, Mapping):
        return None
    board_index = _index_or_none(raw.get("board_index"), cell_count)
    cell_index = _index_or_none(raw.get("cell_index"), cell_count)
    player = coerce_marker(raw.get("player"))
    if board_index is None or cell_index is None or player is None:
        return None

    move_number = raw.get("move_number")
    if not _is_int(move_number) or move_number < 0:
        move_number = move_count
    timestamp = raw.get("timestamp")
    if not is_positive_number(timestamp):
        timestamp = time.time() * 1000

    return LastMove(
        board_index=board_index,
        cell_index=cell_index,
        player=player,
        move_number=move_number,
        timestamp=float(timestamp),
    )


def coerce_game_state(raw: Any) -> GameState:
    """
    Build a valid GameState from any record.

    Accepts current and camelCase legacy keys. Never raises.
    """
    if isinstance(raw, GameState):
        return raw
    if not isinstance(raw, Mapping):
        return create_initial_game_state(DEFAULT_SIZE)

    raw = migrate_legacy_state(raw)
    size = normalize_size(raw.get("size", DEFAULT_SIZE))
    cell_count = size * size

    raw_boards = raw.get("boards") if isinstance(raw.get("boards"), list) else []
    boards = tuple(
        _coerce_board(raw_boards[i] if i < len(raw_boards) else None, size)
        for i in range(cell_count)
    )

    winner = coerce_marker(raw.get("winner"))
    if winner is None:
        winner = get_line_winner(tuple(b.winner for b in boards), size)
    all_resolved = all(b.is_resolved for b in boards)
    is_draw = winner is None and (bool(raw.get("is_draw")) or all_resolved)
    game_over = winner is not None or is_draw

    occupied = sum(b.occupied_count for b in boards)
    move_count = raw.get("move_count")
    if not _is_int(move_count) or move_count != occupied:
        move_count = occupied

    forced = _index_or_none(raw.get("forced_board_index"), cell_count)
    if forced is not None and (game_over or boards[forced].is_resolved):
        forced = None

    current_player = Marker.O if coerce_marker(raw.get("current_player")) is Marker.O else Marker.X

    return GameState(
        size=size,
        boards=boards,
        current_player=current_player,
        forced_board_index=forced,
        winner=winner,
        is_draw=is_draw,
        move_count=move_count,
        last_move=_coerce_last_move(raw.get("last_move"), cell_count, move_count),
    )


# =============================================================================
# Store record migrations
# =============================================================================

def detect_store_version(raw: Mapping[str, Any]) -> int | str | None:
    """
    Identify the shape of a persisted store record.

    Returns 2, 1, "focused", or None for unrecognized input.
    """
    if "game" in raw and "games" not in raw:
        return "focused"
    version = raw.get("version")
    if version == STORAGE_VERSION:
        return STORAGE_VERSION
    if version == 1 or "activeGameId" in raw:
        return 1
    if "games" in raw:
        return STORAGE_VERSION
    return None


def migrate_v1_store(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Version 1 multi-game store -> current store record."""
    games = raw.get("games") if isinstance(raw.get("games"), list) else []
    return {
        "version": STORAGE_VERSION,
        "active_game_id": raw.get("activeGameId"),
        "sound_enabled": raw.get("soundEnabled") is not False,
        "size_input": raw.get("sizeInput"),
        "games": [
            {
                "id": g.get("id"),
                "name": g.get("name"),
                "created_at": g.get("createdAt"),
                "updated_at": g.get("updatedAt"),
                "state": migrate_legacy_state(g["gameState"])
                if isinstance(g.get("gameState"), Mapping) else None,
            }
            if isinstance(g, Mapping) else None
            for g in games
        ],
    }


def migrate_focused_session(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Single-game session {"game", "soundEnabled"} -> current store record."""
    game = raw.get("game")
    return {
        "version": STORAGE_VERSION,
        "active_game_id": None,
        "sound_enabled": raw.get("soundEnabled") is not False,
        "size_input": None,
        "games": [
            {
                "id": None,
                "name": None,
                "created_at": None,
                "updated_at": None,
                "state": migrate_legacy_state(game) if isinstance(game, Mapping) else None,
            }
        ],
    }


def migrate_store_record(raw: Any) -> dict[str, Any] | None:
    """
    Bring any known store shape up to the current version.

    Returns None when the record is unusable; callers fall back
    to a default store.
    """
    if not isinstance(raw, Mapping):
        return None
    version = detect_store_version(raw)
    if version == "focused":
        return migrate_focused_session(raw)
    if version == 1:
        return migrate_v1_store(raw)
    if version == STORAGE_VERSION:
        return dict(raw)
    return None
