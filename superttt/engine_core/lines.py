"""
Win Lines - Generalized N×N line detection.

A line is a full row, a full column, the main diagonal
(top-left to bottom-right) or the anti-diagonal (top-right to
bottom-left). The same check runs over local board cells and over
the meta-board, where each cell is a local board's winner.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Sequence

from .state import Marker


# Fixed tie-break order. Only one marker can complete a line per move,
# so the order matters only for hypothetical positions.
CHECK_ORDER = (Marker.X, Marker.O)


@lru_cache(maxsize=None)
def winning_lines(size: int) -> tuple[tuple[int, ...], ...]:
    """All index lines for an N×N board: rows, columns, then both diagonals."""
    rows = tuple(
        tuple(row * size + col for col in range(size))
        for row in range(size)
    )
    cols = tuple(
        tuple(row * size + col for row in range(size))
        for col in range(size)
    )
    main_diagonal = tuple(i * size + i for i in range(size))
    anti_diagonal = tuple(i * size + (size - 1 - i) for i in range(size))
    return rows + cols + (main_diagonal, anti_diagonal)


def winning_line(
    cells: Sequence[Marker | None], size: int
) -> tuple[Marker | None, tuple[int, ...] | None]:
    """
    Find the first completed line.

    Returns (marker, line indexes) or (None, None).
    """
    lines = winning_lines(size)
    for player in CHECK_ORDER:
        for line in lines:
            if all(cells[i] == player for i in line):
                return player, line
    return None, None


def get_line_winner(cells: Sequence[Marker | None], size: int) -> Marker | None:
    """Return the marker owning a full row, column or diagonal, else None."""
    winner, _ = winning_line(cells, size)
    return winner
