"""
Engine Core - Deterministic Super Tic-Tac-Toe state transitions.

The engine:
1. Normalizes the board size
2. Creates fresh GameState values
3. Answers which boards and cells are playable
4. Applies moves via the reducer
5. Detects local and meta wins and draws

No I/O, no mutation, no exceptions for bad moves.
"""

from .state import (
    DEFAULT_SIZE,
    MAX_PLAYABLE_SIZE,
    GameState,
    LocalBoard,
    LastMove,
    Marker,
    normalize_size,
    is_playable_size,
    create_initial_game_state,
    index_to_coords,
)
from .lines import get_line_winner, winning_line, winning_lines
from .action import Move, MoveResult, RejectionReason
from .action_generator import (
    is_board_resolved,
    can_play_in_board,
    get_allowed_board_indexes,
    legal_moves,
)
from .reducer import Reducer, apply_move, make_move

__all__ = [
    "DEFAULT_SIZE",
    "MAX_PLAYABLE_SIZE",
    "GameState",
    "LocalBoard",
    "LastMove",
    "Marker",
    "normalize_size",
    "is_playable_size",
    "create_initial_game_state",
    "index_to_coords",
    "get_line_winner",
    "winning_line",
    "winning_lines",
    "Move",
    "MoveResult",
    "RejectionReason",
    "is_board_resolved",
    "can_play_in_board",
    "get_allowed_board_indexes",
    "legal_moves",
    "Reducer",
    "apply_move",
    "make_move",
]
