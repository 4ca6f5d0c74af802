"""
Game State - Immutable snapshot of a Super Tic-Tac-Toe game.

Design principles:
- Frozen values: every transition builds a new GameState
- Structural equality: two states with the same content compare equal
- Untouched local boards are shared between snapshots
- Size is fixed for the lifetime of a game
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import re


DEFAULT_SIZE = 3
MIN_SIZE = 2

# Largest size the HTTP and CLI surfaces accept. The engine has no upper bound.
MAX_PLAYABLE_SIZE = 9

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Marker(str, Enum):
    """A player's marker. Empty cells are None."""
    X = "X"
    O = "O"

    @property
    def opponent(self) -> Marker:
        return Marker.O if self is Marker.X else Marker.X


def normalize_size(raw_value) -> int:
    """
    Parse a board size, falling back to DEFAULT_SIZE.

    Reads a leading integer the way a lenient form field would:
    "4" -> 4, " 5x5" -> 5, 4.7 -> 4. Anything unparseable or
    smaller than MIN_SIZE yields DEFAULT_SIZE. Never raises.
    """
    if isinstance(raw_value, bool) or raw_value is None:
        return DEFAULT_SIZE
    match = _LEADING_INT.match(str(raw_value))
    if not match:
        return DEFAULT_SIZE
    parsed = int(match.group(1))
    if parsed < MIN_SIZE:
        return DEFAULT_SIZE
    return parsed


def is_playable_size(raw_value) -> bool:
    """True iff the normalized size is within MAX_PLAYABLE_SIZE."""
    return normalize_size(raw_value) <= MAX_PLAYABLE_SIZE


def index_to_coords(index: int, size: int) -> tuple[int, int]:
    """Convert a row-major index to (row, col)."""
    return index // size, index % size


@dataclass(frozen=True)
class LocalBoard:
    """
    One of the N² inner boards where markers are placed.

    cells is row-major (index = row * size + col).
    Once winner or is_draw is set the board is resolved.
    """
    cells: tuple[Marker | None, ...]
    winner: Marker | None = None
    is_draw: bool = False

    @classmethod
    def empty(cls, size: int) -> LocalBoard:
        return cls(cells=(None,) * (size * size))

    @property
    def is_resolved(self) -> bool:
        return self.winner is not None or self.is_draw

    @property
    def is_full(self) -> bool:
        return all(cell is not None for cell in self.cells)

    @property
    def occupied_count(self) -> int:
        return sum(1 for cell in self.cells if cell is not None)

    def with_marker(self, cell_index: int, marker: Marker) -> LocalBoard:
        """Return a new board with marker placed; status is not recomputed."""
        cells = list(self.cells)
        cells[cell_index] = marker
        return LocalBoard(cells=tuple(cells), winner=self.winner, is_draw=self.is_draw)


@dataclass(frozen=True)
class LastMove:
    """
    The most recently applied move.

    Carries no engine semantics; renderers and feedback use it
    to highlight and announce the move.
    """
    board_index: int
    cell_index: int
    player: Marker
    move_number: int
    timestamp: float  # epoch milliseconds


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    Replaced wholesale by the reducer on every applied move.
    forced_board_index is the only board the current player may use,
    or None when any unresolved board is eligible.
    """
    size: int
    boards: tuple[LocalBoard, ...]
    current_player: Marker = Marker.X
    forced_board_index: int | None = None
    winner: Marker | None = None
    is_draw: bool = False
    move_count: int = 0
    last_move: LastMove | None = field(default=None, compare=False)

    @property
    def cell_count(self) -> int:
        """Cells per board (N²); also the number of boards."""
        return self.size * self.size

    @property
    def is_over(self) -> bool:
        return self.winner is not None or self.is_draw

    def board(self, index: int) -> LocalBoard | None:
        """Get a local board by index, None when out of range."""
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if index < 0 or index >= len(self.boards):
            return None
        return self.boards[index]

    def occupied_cell_count(self) -> int:
        """Total markers on all local boards."""
        return sum(b.occupied_count for b in self.boards)

    def meta_cells(self) -> tuple[Marker | None, ...]:
        """Local board winners as meta-board cells (drawn boards are empty)."""
        return tuple(b.winner for b in self.boards)

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def create_initial_game_state(size=DEFAULT_SIZE) -> GameState:
    """
    Create a fresh game.

    The size is normalized first, so any input yields a playable board.
    """
    n = normalize_size(size)
    empty = LocalBoard.empty(n)
    return GameState(size=n, boards=(empty,) * (n * n))
