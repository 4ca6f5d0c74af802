"""
Reducer - Applies moves to game state.

The reducer is the single point of state transition.
All moves go through apply_move() (or make_move(), its
identity-returning form).

Design principles:
- Pure function: (state, move) -> new state
- Validates before applying; a move fully applies or fully no-ops
- Never raises for bad input; rejection is a result, not an error
- Unaffected local boards are shared with the previous state
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import time

from .state import GameState, LocalBoard, LastMove
from .lines import get_line_winner
from .action import Move, MoveResult, RejectionReason
from .action_generator import can_play_in_board, is_board_resolved


def _now_ms() -> float:
    return time.time() * 1000


def _cell_in_range(state: GameState, cell_index) -> bool:
    if not isinstance(cell_index, int) or isinstance(cell_index, bool):
        return False
    return 0 <= cell_index < state.cell_count


@dataclass
class Reducer:
    """
    Reducer applies moves to game state.

    Stateless - all state is in GameState. The clock only
    stamps last_move and can be swapped out in tests.
    """
    clock: Callable[[], float] = field(default=_now_ms)

    def apply(self, state: GameState, move: Move) -> MoveResult:
        """Apply a Move object."""
        return self.apply_at(state, move.board_index, move.cell_index)

    def apply_at(self, state: GameState, board_index: int, cell_index: int) -> MoveResult:
        """
        Apply a move at (board_index, cell_index) for the current player.

        Returns MoveResult with the new state, or with the unchanged
        input state and a rejection reason.
        """
        rejection = self._validate_move(state, board_index, cell_index)
        if rejection is not None:
            return MoveResult.failure(state, rejection)
        return MoveResult.success(self._place(state, board_index, cell_index))

    def _validate_move(self, state: GameState, board_index, cell_index) -> RejectionReason | None:
        """
        Check legality in order: game over, board, cell range, occupancy.

        Returns the rejection reason, or None if the move is legal.
        """
        if state.is_over:
            return RejectionReason.GAME_OVER
        if not can_play_in_board(state, board_index):
            return RejectionReason.BOARD_NOT_PLAYABLE
        if not _cell_in_range(state, cell_index):
            return RejectionReason.CELL_OUT_OF_RANGE
        if state.boards[board_index].cells[cell_index] is not None:
            return RejectionReason.CELL_OCCUPIED
        return None

    def _place(self, state: GameState, board_index: int, cell_index: int) -> GameState:
        player = state.current_player
        size = state.size

        # Local board status
        placed = state.boards[board_index].with_marker(cell_index, player)
        local_winner = get_line_winner(placed.cells, size)
        local_draw = local_winner is None and placed.is_full
        new_board = LocalBoard(cells=placed.cells, winner=local_winner, is_draw=local_draw)

        boards = list(state.boards)
        boards[board_index] = new_board
        boards = tuple(boards)

        # Meta board status; drawn boards count as empty cells
        winner = get_line_winner(tuple(b.winner for b in boards), size)
        is_draw = winner is None and all(is_board_resolved(b) for b in boards)
        game_over = winner is not None or is_draw

        # Send the opponent to the board matching the cell just played
        forced_board_index = None
        if not game_over and not is_board_resolved(boards[cell_index]):
            forced_board_index = cell_index

        move_count = state.move_count + 1
        return state._copy_with(
            boards=boards,
            current_player=player if game_over else player.opponent,
            forced_board_index=forced_board_index,
            winner=winner,
            is_draw=is_draw,
            move_count=move_count,
            last_move=LastMove(
                board_index=board_index,
                cell_index=cell_index,
                player=player,
                move_number=move_count,
                timestamp=self.clock(),
            ),
        )


_default_reducer = Reducer()


def apply_move(state: GameState, board_index: int, cell_index: int) -> MoveResult:
    """Convenience function to apply a move with the default reducer."""
    return _default_reducer.apply_at(state, board_index, cell_index)


def make_move(state: GameState, board_index: int, cell_index: int) -> GameState:
    """
    Apply a move and return the resulting state.

    An illegal move returns the very same state object, so callers
    can detect rejection with `next_state is state`.
    """
    return apply_move(state, board_index, cell_index).state
