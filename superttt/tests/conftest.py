"""
Pytest fixtures for SuperTTT tests.
"""

import pytest

from ..engine_core.state import GameState, LocalBoard, Marker, create_initial_game_state
from ..engine_core.reducer import Reducer, make_move


_MARKERS = {"X": Marker.X, "O": Marker.O}

# Full 3x3 board with no line for either marker
DRAWN_CELLS = "XOXXOOOXX"


def board_from(pattern: str, winner: str | None = None, is_draw: bool = False) -> LocalBoard:
    """Build a LocalBoard from a row-major pattern like "XO.X.....". """
    return LocalBoard(
        cells=tuple(_MARKERS.get(ch) for ch in pattern),
        winner=_MARKERS.get(winner) if winner else None,
        is_draw=is_draw,
    )


def state_from(boards: list[LocalBoard], size: int = 3, **kwargs) -> GameState:
    """Build a GameState with a move count that matches the boards."""
    state = GameState(size=size, boards=tuple(boards), **kwargs)
    return state._copy_with(move_count=state.occupied_cell_count())


@pytest.fixture
def fresh_state() -> GameState:
    """A fresh 3x3 game."""
    return create_initial_game_state(3)


@pytest.fixture
def fixed_reducer() -> Reducer:
    """Reducer with a frozen clock so last_move timestamps are predictable."""
    return Reducer(clock=lambda: 1_700_000_000_000.0)


@pytest.fixture
def play_moves():
    """Apply (board, cell) moves in order, failing if any is rejected."""
    def _play(state: GameState, moves: list[tuple[int, int]]) -> GameState:
        for board_index, cell_index in moves:
            next_state = make_move(state, board_index, cell_index)
            assert next_state is not state, f"move ({board_index}, {cell_index}) was rejected"
            state = next_state
        return state
    return _play


@pytest.fixture
def board_zero_won_by_x(play_moves, fresh_state) -> GameState:
    """X takes the top row of board 0 through legal alternating play."""
    return play_moves(fresh_state, [
        (0, 1),  # X -> O sent to board 1
        (1, 0),  # O -> X sent to board 0
        (0, 2),  # X -> O sent to board 2
        (2, 0),  # O -> X sent to board 0
        (0, 0),  # X completes the top row
    ])


@pytest.fixture
def one_move_from_meta_win() -> GameState:
    """X owns boards 0 and 1 and needs cell 2 of board 2 for the top meta row."""
    empty = "." * 9
    boards = [
        board_from("XXX......", winner="X"),
        board_from("X...X...X", winner="X"),
        board_from("XX.OO...."),
    ] + [board_from(empty) for _ in range(6)]
    return state_from(boards, current_player=Marker.X)


@pytest.fixture
def one_move_from_meta_draw() -> GameState:
    """Every board drawn except board 8, which one X move will draw too."""
    drawn = board_from(DRAWN_CELLS, is_draw=True)
    boards = [drawn] * 8 + [board_from("XOXXOOOX.")]
    return state_from(boards, current_player=Marker.X, forced_board_index=8)
