"""
Move System - Moves and move results.

A move names a local board and a cell inside it; the player is
always the state's current player. Results make the outcome
explicit instead of relying on object identity alone.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import GameState


class RejectionReason(str, Enum):
    """Why a move was not applied."""
    GAME_OVER = "game_over"
    BOARD_NOT_PLAYABLE = "board_not_playable"
    CELL_OUT_OF_RANGE = "cell_out_of_range"
    CELL_OCCUPIED = "cell_occupied"


@dataclass(frozen=True)
class Move:
    """A (board, cell) intent, forwarded verbatim from the renderer."""
    board_index: int
    cell_index: int


@dataclass(frozen=True)
class MoveResult:
    """
    Result of applying a move.

    On rejection, state is the unchanged input state (same object).
    """
    state: GameState
    reason: RejectionReason | None = None

    @property
    def applied(self) -> bool:
        return self.reason is None

    @property
    def rejected(self) -> bool:
        return self.reason is not None

    @classmethod
    def success(cls, state: GameState) -> MoveResult:
        return cls(state=state)

    @classmethod
    def failure(cls, state: GameState, reason: RejectionReason) -> MoveResult:
        return cls(state=state, reason=reason)
