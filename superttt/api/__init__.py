"""
API Module - Renderer interface.

Exposes the engine via a local REST API. A renderer:
1. Lists and opens games
2. Reads state and highlights the allowed boards
3. Posts cell clicks as moves
4. Uses the returned transition and cues for feedback

State lives in the game store; no accounts, no multiplayer.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    ResetGameRequest,
    MoveRequest,
    # Responses
    GameResponse,
    GameListResponse,
    MoveResponse,
    LegalMovesResponse,
    SoundResponse,
    ErrorResponse,
    # Shared
    GameStateInfo,
    LocalBoardInfo,
    LastMoveInfo,
    GameSummary,
    ErrorCode,
)
from .service import APIService, state_to_info
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "ResetGameRequest",
    "MoveRequest",
    # Responses
    "GameResponse",
    "GameListResponse",
    "MoveResponse",
    "LegalMovesResponse",
    "SoundResponse",
    "ErrorResponse",
    # Shared
    "GameStateInfo",
    "LocalBoardInfo",
    "LastMoveInfo",
    "GameSummary",
    "ErrorCode",
    # Service
    "APIService",
    "state_to_info",
    "create_app",
]
