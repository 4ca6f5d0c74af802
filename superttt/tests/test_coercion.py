"""
Tests for record coercion and store migrations.

Validates that:
- Saved states round-trip through the coercion path
- Corrupt fields are repaired, never rejected
- Legacy camelCase states and store shapes are migrated
"""

import json
import random

import pytest

from ..engine_core.state import DEFAULT_SIZE, Marker, create_initial_game_state
from ..engine_core.action_generator import legal_moves
from ..engine_core.reducer import make_move
from ..session.coercion import (
    STORAGE_VERSION,
    coerce_game_state,
    coerce_marker,
    detect_store_version,
    game_state_to_record,
    migrate_store_record,
)


def _play_random(size: int, seed: int, max_moves: int) -> object:
    rng = random.Random(seed)
    state = create_initial_game_state(size)
    for _ in range(max_moves):
        moves = legal_moves(state)
        if not moves:
            break
        state = make_move(state, *rng.choice(moves))
    return state


class TestRoundTrip:
    """Serializing then loading keeps the game."""

    @pytest.mark.parametrize("size, seed, moves", [(3, 11, 25), (3, 12, 200), (4, 13, 40), (2, 14, 200)])
    def test_json_round_trip(self, size, seed, moves):
        state = _play_random(size, seed, moves)

        text = json.dumps(game_state_to_record(state))
        loaded = coerce_game_state(json.loads(text))

        assert loaded.size == state.size
        assert loaded.boards == state.boards
        assert loaded.current_player == state.current_player
        assert loaded.forced_board_index == state.forced_board_index
        assert loaded.winner == state.winner
        assert loaded.is_draw == state.is_draw
        assert loaded.move_count == state.move_count
        assert loaded.last_move == state.last_move
        assert loaded == state

    def test_fresh_state_round_trip(self, fresh_state):
        assert coerce_game_state(game_state_to_record(fresh_state)) == fresh_state

    def test_record_is_flat_json(self, fresh_state):
        record = game_state_to_record(make_move(fresh_state, 0, 4))

        assert record["size"] == 3
        assert record["boards"][0]["cells"][4] == "X"
        assert record["current_player"] == "O"
        assert record["forced_board_index"] == 4
        assert record["move_count"] == 1
        assert record["last_move"]["player"] == "X"


class TestCoercion:
    """Repairing damaged records."""

    @pytest.mark.parametrize("raw", [None, 42, "state", [], [1, 2, 3]])
    def test_unusable_record_gives_fresh_default(self, raw):
        state = coerce_game_state(raw)
        assert state == create_initial_game_state(DEFAULT_SIZE)

    def test_game_state_passes_through(self, fresh_state):
        assert coerce_game_state(fresh_state) is fresh_state

    def test_size_is_normalized(self):
        state = coerce_game_state({"size": "5"})
        assert state.size == 5
        assert len(state.boards) == 25
        assert all(len(b.cells) == 25 for b in state.boards)

        assert coerce_game_state({"size": 1}).size == DEFAULT_SIZE

    def test_non_marker_cells_become_empty(self):
        raw = {"size": 3, "boards": [{"cells": ["X", "Z", 1, None, "O", "x", True]}]}
        cells = coerce_game_state(raw).boards[0].cells

        assert cells == (Marker.X, None, None, None, Marker.O, None, None, None, None)

    def test_missing_boards_are_empty(self):
        state = coerce_game_state({"size": 3, "boards": [{"cells": ["X"]}]})
        assert len(state.boards) == 9
        assert state.boards[8].occupied_count == 0

    def test_move_count_recounted(self):
        raw = {"boards": [{"cells": ["X", "O", "X"]}, {"cells": ["O"]}]}
        assert coerce_game_state(raw).move_count == 4

        raw["move_count"] = "four"
        assert coerce_game_state(raw).move_count == 4

        raw["move_count"] = 17
        assert coerce_game_state(raw).move_count == 4

    @pytest.mark.parametrize("index", [-1, 9, 3.0, "4", True])
    def test_bad_forced_index_cleared(self, index):
        state = coerce_game_state({"forced_board_index": index})
        assert state.forced_board_index is None

    def test_forced_index_on_resolved_board_cleared(self):
        raw = {
            "boards": [{"cells": ["X", "X", "X"], "winner": "X"}],
            "forced_board_index": 0,
        }
        state = coerce_game_state(raw)
        assert state.boards[0].winner is Marker.X
        assert state.forced_board_index is None

    def test_valid_forced_index_kept(self):
        assert coerce_game_state({"forced_board_index": 4}).forced_board_index == 4

    def test_winner_beats_draw_flag(self):
        state = coerce_game_state({"winner": "O", "is_draw": True})
        assert state.winner is Marker.O
        assert not state.is_draw
        assert state.forced_board_index is None

    def test_local_winner_recovered_from_cells(self):
        raw = {"boards": [{"cells": ["O", None, None, "O", None, None, "O"]}]}
        assert coerce_game_state(raw).boards[0].winner is Marker.O

    def test_board_draw_flag_without_winner(self):
        raw = {"boards": [{"cells": list("XOXXOOOXX"), "winner": "draw", "is_draw": True}]}
        board = coerce_game_state(raw).boards[0]
        assert board.winner is None
        assert board.is_draw

    def test_current_player_defaults_to_x(self):
        assert coerce_game_state({"current_player": "o"}).current_player is Marker.X
        assert coerce_game_state({"current_player": "O"}).current_player is Marker.O

    def test_last_move_validation(self):
        raw = {
            "boards": [{"cells": ["X"]}],
            "last_move": {"board_index": 0, "cell_index": 0, "player": "X"},
        }
        last = coerce_game_state(raw).last_move
        assert last.move_number == 1
        assert last.timestamp > 0

        raw["last_move"] = {"board_index": 12, "cell_index": 0, "player": "X"}
        assert coerce_game_state(raw).last_move is None

        raw["last_move"] = {"board_index": 0, "cell_index": 0, "player": "Q"}
        assert coerce_game_state(raw).last_move is None

    def test_coerce_marker(self):
        assert coerce_marker("X") is Marker.X
        assert coerce_marker(Marker.O) is Marker.O
        assert coerce_marker("") is None
        assert coerce_marker(["X"]) is None


class TestLegacyState:
    """camelCase states from older saves."""

    def test_camel_case_state(self):
        raw = {
            "size": 3,
            "currentPlayer": "O",
            "nextBoardIndex": 4,
            "winner": None,
            "isDraw": False,
            "moveCount": 1,
            "boards": [{"cells": [None, None, None, None, "X"], "winner": None, "isDraw": False}],
            "lastMove": {
                "boardIndex": 0,
                "cellIndex": 4,
                "player": "X",
                "moveNumber": 1,
                "timestamp": 1_690_000_000_000,
            },
        }
        state = coerce_game_state(raw)

        assert state.current_player is Marker.O
        assert state.forced_board_index == 4
        assert state.move_count == 1
        assert state.boards[0].cells[4] is Marker.X
        assert state.last_move.cell_index == 4
        assert state.last_move.timestamp == 1_690_000_000_000

    def test_current_key_wins_over_legacy(self):
        state = coerce_game_state({"forced_board_index": 2, "nextBoardIndex": 5})
        assert state.forced_board_index == 2


class TestStoreMigrations:
    """Versioned store record shapes."""

    def test_detect_versions(self):
        assert detect_store_version({"version": 2, "games": []}) == 2
        assert detect_store_version({"version": 1, "games": []}) == 1
        assert detect_store_version({"activeGameId": "a", "games": []}) == 1
        assert detect_store_version({"game": {}, "soundEnabled": False}) == "focused"
        assert detect_store_version({"something": "else"}) is None

    def test_v1_store(self):
        raw = {
            "version": 1,
            "activeGameId": "g2",
            "soundEnabled": False,
            "sizeInput": "4",
            "games": [
                {"id": "g1", "name": "Game 1", "createdAt": 1, "updatedAt": 2,
                 "gameState": {"size": 3, "nextBoardIndex": 4}},
                {"id": "g2", "name": "Game 2", "createdAt": 3, "updatedAt": 4,
                 "gameState": {"size": 4}},
            ],
        }
        record = migrate_store_record(raw)

        assert record["version"] == STORAGE_VERSION
        assert record["active_game_id"] == "g2"
        assert record["sound_enabled"] is False
        assert record["size_input"] == "4"
        assert record["games"][0]["state"]["forced_board_index"] == 4
        assert record["games"][1]["created_at"] == 3

    def test_focused_session(self):
        raw = {"game": {"size": 3, "currentPlayer": "O"}, "soundEnabled": True}
        record = migrate_store_record(raw)

        assert record["sound_enabled"] is True
        assert len(record["games"]) == 1
        assert record["games"][0]["state"]["current_player"] == "O"

    @pytest.mark.parametrize("raw", [None, "text", 3, {"unrelated": True}])
    def test_unusable_store(self, raw):
        assert migrate_store_record(raw) is None

    def test_current_store_passes_through(self):
        raw = {"version": 2, "games": [], "sound_enabled": True}
        assert migrate_store_record(raw) == raw
