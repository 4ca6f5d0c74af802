"""
Move Queries - Which boards and cells are legal right now.

Used by:
1. Renderers to highlight playable boards
2. Status messaging (one forced board vs. play anywhere)
3. The reducer's legality check
"""

from __future__ import annotations

from .state import GameState, LocalBoard


def is_board_resolved(board: LocalBoard) -> bool:
    """True iff the board has a winner or is a draw."""
    return board.is_resolved


def _playable_forced_board(state: GameState) -> int | None:
    """The forced board index, or None when absent or no longer playable."""
    if state.forced_board_index is None:
        return None
    board = state.board(state.forced_board_index)
    if board is None or is_board_resolved(board):
        return None
    return state.forced_board_index


def can_play_in_board(state: GameState, board_index: int) -> bool:
    """Check whether the current player may place a marker in this board."""
    if state.is_over:
        return False

    board = state.board(board_index)
    if board is None or is_board_resolved(board):
        return False

    forced = _playable_forced_board(state)
    if forced is None:
        return True
    return forced == board_index


def get_allowed_board_indexes(state: GameState) -> list[int]:
    """All playable board indexes, ascending."""
    return [i for i in range(len(state.boards)) if can_play_in_board(state, i)]


def legal_moves(state: GameState) -> list[tuple[int, int]]:
    """Every (board_index, cell_index) the current player may play."""
    moves = []
    for board_index in get_allowed_board_indexes(state):
        board = state.boards[board_index]
        for cell_index, cell in enumerate(board.cells):
            if cell is None:
                moves.append((board_index, cell_index))
    return moves
