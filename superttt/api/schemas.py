"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a renderer and the engine.
A renderer reads GameStateInfo, highlights allowed_boards, and posts
(board_index, cell_index) intents back.

Error Codes:
- GAME_NOT_FOUND: Game id does not exist in the store
- MOVE_REJECTED: The move was illegal; the state is unchanged
- VALIDATION_ERROR: Request body could not be parsed, or size is too large
- INTERNAL_ERROR: Unexpected server failure
"""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator

from ..engine_core.state import MAX_PLAYABLE_SIZE, is_playable_size


API_VERSION = "v1"


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    MOVE_REJECTED = "MOVE_REJECTED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class GameStatusKind(str, Enum):
    WON = "won"
    DRAW = "draw"
    ACTIVE = "active"


# =============================================================================
# Shared Models
# =============================================================================

class LocalBoardInfo(BaseModel):
    """One local board for display."""
    cells: list[Optional[str]] = Field(description="Row-major markers; null is empty")
    winner: Optional[str] = None
    is_draw: bool = False
    win_line: Optional[list[int]] = Field(None, description="Cell indexes of the winning line")


class LastMoveInfo(BaseModel):
    """The move a renderer should highlight."""
    board_index: int
    cell_index: int
    player: str
    move_number: int
    timestamp: float


class GameStateInfo(BaseModel):
    """Full game state plus derived fields for rendering."""
    size: int
    boards: list[LocalBoardInfo]
    current_player: str
    forced_board_index: Optional[int] = None
    winner: Optional[str] = None
    is_draw: bool = False
    move_count: int = 0
    last_move: Optional[LastMoveInfo] = None

    # Derived
    allowed_boards: list[int] = Field(default_factory=list)
    meta_win_line: Optional[list[int]] = None
    status_text: str = ""


class GameSummary(BaseModel):
    """A game as shown in a tab strip."""
    game_id: str
    name: str
    size: int
    status: GameStatusKind
    status_label: str
    is_active: bool = False
    created_at: float
    updated_at: float


# =============================================================================
# Requests
# =============================================================================

class SizedRequest(BaseModel):
    """
    Base for requests carrying a board size.

    Size is normalized later; bad values give the default. Sizes above
    MAX_PLAYABLE_SIZE are rejected here.
    """
    size: Optional[Union[int, str]] = None

    @field_validator("size")
    @classmethod
    def check_playable_size(cls, value):
        if value is not None and not is_playable_size(value):
            raise ValueError(f"size must be at most {MAX_PLAYABLE_SIZE}")
        return value


class CreateGameRequest(SizedRequest):
    """Open a new game."""


class ResetGameRequest(SizedRequest):
    """Restart a game, optionally with a new size."""


class MoveRequest(BaseModel):
    """A cell-click intent, forwarded verbatim to the engine."""
    board_index: int
    cell_index: int


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None
    api_version: str = Field(API_VERSION, description="API version")


class GameResponse(BaseModel):
    game_id: str
    name: str
    is_active: bool = False
    created_at: float
    updated_at: float
    state: GameStateInfo
    api_version: str = API_VERSION


class GameListResponse(BaseModel):
    games: list[GameSummary]
    active_game_id: str
    sound_enabled: bool
    size_input: str
    count: int
    api_version: str = API_VERSION


class MoveResponse(BaseModel):
    """
    Outcome of a move attempt.

    transition is one of rejected, move, local_board_captured,
    game_won, game_drawn. cues is empty when sound is off.
    """
    applied: bool
    reason: Optional[str] = None
    transition: str
    cues: list[str] = Field(default_factory=list)
    game: GameResponse
    api_version: str = API_VERSION


class LegalMovesResponse(BaseModel):
    game_id: str
    allowed_boards: list[int]
    moves: list[tuple[int, int]]
    api_version: str = API_VERSION


class SoundResponse(BaseModel):
    sound_enabled: bool
    api_version: str = API_VERSION


class DeleteGameResponse(BaseModel):
    success: bool
    game_id: str
    active_game_id: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    api_version: str = API_VERSION
