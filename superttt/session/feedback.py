"""
Feedback - Classifies transitions and phrases game status.

The engine emits no events. Collaborators compare the previous and
next GameState to decide what happened, then pick audio/visual cues
and status text from that.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from ..engine_core.state import GameState, Marker, index_to_coords
from ..engine_core.action_generator import get_allowed_board_indexes


class TransitionKind(Enum):
    """What a single move attempt did."""
    REJECTED = "rejected"
    MOVE = "move"
    LOCAL_BOARD_CAPTURED = "local_board_captured"
    GAME_WON = "game_won"
    GAME_DRAWN = "game_drawn"


class FeedbackCue(Enum):
    """Cues a feedback layer can play or show."""
    INVALID = "invalid"
    X_MOVE = "x_move"
    O_MOVE = "o_move"
    LOCAL_WIN = "local_win"
    SUPER_WIN = "super_win"
    DRAW = "draw"
    INTER_TURN = "inter_turn"


def _captured_local_board(previous: GameState, next_state: GameState) -> bool:
    if len(previous.boards) != len(next_state.boards):
        return False
    return any(
        before.winner is None and after.winner is not None
        for before, after in zip(previous.boards, next_state.boards)
    )


def classify_transition(previous: GameState, next_state: GameState) -> TransitionKind:
    """
    Classify a move attempt by diffing states.

    Identity means the move was rejected. Game-level outcomes win
    over a local capture made by the same move.
    """
    if next_state is previous:
        return TransitionKind.REJECTED
    if previous.winner is None and next_state.winner is not None:
        return TransitionKind.GAME_WON
    if not previous.is_draw and next_state.is_draw:
        return TransitionKind.GAME_DRAWN
    if _captured_local_board(previous, next_state):
        return TransitionKind.LOCAL_BOARD_CAPTURED
    return TransitionKind.MOVE


def feedback_cues(
    previous: GameState,
    next_state: GameState,
    sound_enabled: bool = True,
) -> list[FeedbackCue]:
    """
    Ordered cues for a move attempt.

    Order: invalid, or the mover's cue, then at most one outcome
    cue, then the turn-change cue while the game goes on.
    """
    if not sound_enabled:
        return []

    kind = classify_transition(previous, next_state)
    if kind is TransitionKind.REJECTED:
        return [FeedbackCue.INVALID]

    mover = next_state.last_move.player if next_state.last_move else previous.current_player
    cues = [FeedbackCue.X_MOVE if mover is Marker.X else FeedbackCue.O_MOVE]

    if kind is TransitionKind.GAME_WON:
        cues.append(FeedbackCue.SUPER_WIN)
    elif kind is TransitionKind.GAME_DRAWN:
        cues.append(FeedbackCue.DRAW)
    elif kind is TransitionKind.LOCAL_BOARD_CAPTURED:
        cues.append(FeedbackCue.LOCAL_WIN)

    if not next_state.is_over:
        cues.append(FeedbackCue.INTER_TURN)
    return cues


# =============================================================================
# Status text
# =============================================================================

@dataclass(frozen=True)
class GameStatus:
    """Short status for tab labels: kind is won, draw or active."""
    kind: str
    label: str


def describe_game_status(state: GameState) -> GameStatus:
    if state.winner is not None:
        return GameStatus(kind="won", label=f"Winner: {state.winner.value}")
    if state.is_draw:
        return GameStatus(kind="draw", label="Draw")
    return GameStatus(kind="active", label=f"Turn: {state.current_player.value}")


def board_label(board_index: int, size: int) -> str:
    """1-based (row, col) label for a local board."""
    row, col = index_to_coords(board_index, size)
    return f"({row + 1}, {col + 1})"


def turn_prompt(state: GameState) -> str:
    """Full status line for the player to move."""
    if state.winner is not None:
        return f"Player {state.winner.value} wins!"
    if state.is_draw:
        return "Draw game."

    player = state.current_player.value
    allowed = get_allowed_board_indexes(state)
    if len(allowed) == 1:
        return f"Player {player} must play board {board_label(allowed[0], state.size)}."
    return f"Player {player}: play in any open board."
