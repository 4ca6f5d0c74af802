"""
API Service - Business logic layer between API and engine.

The service:
1. Translates requests to store and engine calls
2. Saves the store after every change
3. Formats states for renderers (allowed boards, win lines, status)

This layer is framework-agnostic (can be used with FastAPI, a CLI, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import os
import threading

from ..engine_core.state import GameState, normalize_size
from ..engine_core.lines import winning_line
from ..engine_core.action_generator import get_allowed_board_indexes, legal_moves
from ..session.manager import GameEntry, GameStore
from ..session.storage import InMemoryStorage, JsonFileStorage
from ..session.feedback import (
    classify_transition,
    describe_game_status,
    feedback_cues,
    turn_prompt,
)
from .schemas import (
    DeleteGameResponse,
    GameListResponse,
    GameResponse,
    GameStateInfo,
    GameStatusKind,
    GameSummary,
    LastMoveInfo,
    LegalMovesResponse,
    LocalBoardInfo,
    MoveResponse,
    SoundResponse,
)


logger = logging.getLogger(__name__)


def storage_from_env() -> Any:
    """
    Pick storage from the environment.

    SUPERTTT_STORE_PATH set -> JSON file; otherwise in memory.
    SUPERTTT_DEFAULT_SIZE sets the size of a fresh store.
    """
    default_size = normalize_size(os.getenv("SUPERTTT_DEFAULT_SIZE"))
    path = os.getenv("SUPERTTT_STORE_PATH")
    if path:
        return JsonFileStorage(path, default_size=default_size)
    return InMemoryStorage(default_size=default_size)


def state_to_info(state: GameState) -> GameStateInfo:
    """Render-ready view of a GameState."""
    boards = []
    for board in state.boards:
        win_line = None
        if board.winner is not None:
            _, line = winning_line(board.cells, state.size)
            win_line = list(line) if line else None
        boards.append(LocalBoardInfo(
            cells=[cell.value if cell else None for cell in board.cells],
            winner=board.winner.value if board.winner else None,
            is_draw=board.is_draw,
            win_line=win_line,
        ))

    meta_win_line = None
    if state.winner is not None:
        _, line = winning_line(state.meta_cells(), state.size)
        meta_win_line = list(line) if line else None

    last_move = None
    if state.last_move is not None:
        lm = state.last_move
        last_move = LastMoveInfo(
            board_index=lm.board_index,
            cell_index=lm.cell_index,
            player=lm.player.value,
            move_number=lm.move_number,
            timestamp=lm.timestamp,
        )

    return GameStateInfo(
        size=state.size,
        boards=boards,
        current_player=state.current_player.value,
        forced_board_index=state.forced_board_index,
        winner=state.winner.value if state.winner else None,
        is_draw=state.is_draw,
        move_count=state.move_count,
        last_move=last_move,
        allowed_boards=get_allowed_board_indexes(state),
        meta_win_line=meta_win_line,
        status_text=turn_prompt(state),
    )


@dataclass
class APIService:
    """
    Main API service for renderers.

    Usage:
        service = APIService()

        # Open a game
        game = service.create_game(size=3)

        # Play
        response = service.play_move(game.game_id, 0, 4)
        if not response.applied:
            ...
    """
    storage: Any = field(default_factory=storage_from_env)
    store: GameStore | None = None

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        if self.store is None:
            self.store = self.storage.load()

    def _save(self):
        self.storage.save(self.store)

    # =========================================================================
    # Formatting
    # =========================================================================

    def _game_response(self, entry: GameEntry) -> GameResponse:
        return GameResponse(
            game_id=entry.game_id,
            name=entry.name,
            is_active=entry.game_id == self.store.active_game.game_id,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
            state=state_to_info(entry.state),
        )

    def _summary(self, entry: GameEntry) -> GameSummary:
        status = describe_game_status(entry.state)
        return GameSummary(
            game_id=entry.game_id,
            name=entry.name,
            size=entry.state.size,
            status=GameStatusKind(status.kind),
            status_label=status.label,
            is_active=entry.game_id == self.store.active_game.game_id,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    # =========================================================================
    # Games
    # =========================================================================

    def list_games(self) -> GameListResponse:
        with self._lock:
            return GameListResponse(
                games=[self._summary(entry) for entry in self.store.games],
                active_game_id=self.store.active_game.game_id,
                sound_enabled=self.store.sound_enabled,
                size_input=self.store.size_input,
                count=len(self.store.games),
            )

    def create_game(self, size=None) -> GameResponse:
        with self._lock:
            entry = self.store.create_game(size)
            self._save()
            return self._game_response(entry)

    def get_game(self, game_id: str) -> GameResponse:
        """Raises GameNotFoundError for unknown ids."""
        with self._lock:
            return self._game_response(self.store.get_game(game_id))

    def select_game(self, game_id: str) -> GameResponse:
        with self._lock:
            entry = self.store.select_game(game_id)
            self._save()
            return self._game_response(entry)

    def delete_game(self, game_id: str) -> DeleteGameResponse:
        with self._lock:
            self.store.remove_game(game_id)
            self._save()
            return DeleteGameResponse(
                success=True,
                game_id=game_id,
                active_game_id=self.store.active_game.game_id,
            )

    def reset_game(self, game_id: str, size=None) -> GameResponse:
        with self._lock:
            entry = self.store.reset_game(game_id, size)
            self._save()
            return self._game_response(entry)

    # =========================================================================
    # Moves
    # =========================================================================

    def play_move(self, game_id: str, board_index: int, cell_index: int) -> MoveResponse:
        """
        Apply a move to a game.

        Rejected moves are reported in the response, not raised.
        """
        with self._lock:
            entry = self.store.get_game(game_id)
            previous = entry.state
            result = self.store.play(board_index, cell_index, game_id)
            if result.applied:
                self._save()

            transition = classify_transition(previous, result.state)
            cues = feedback_cues(previous, result.state, self.store.sound_enabled)
            return MoveResponse(
                applied=result.applied,
                reason=result.reason.value if result.reason else None,
                transition=transition.value,
                cues=[cue.value for cue in cues],
                game=self._game_response(entry),
            )

    def legal_moves(self, game_id: str) -> LegalMovesResponse:
        with self._lock:
            state = self.store.get_game(game_id).state
            return LegalMovesResponse(
                game_id=game_id,
                allowed_boards=get_allowed_board_indexes(state),
                moves=legal_moves(state),
            )

    # =========================================================================
    # Settings
    # =========================================================================

    def toggle_sound(self) -> SoundResponse:
        with self._lock:
            enabled = self.store.toggle_sound()
            self._save()
            logger.info("Sound %s", "enabled" if enabled else "disabled")
            return SoundResponse(sound_enabled=enabled)
