"""
FastAPI Application - Local REST bridge for a renderer.

Endpoints:
    GET    /api/v1/health                      Health check
    GET    /api/v1/games                       List open games (tabs)
    POST   /api/v1/games                       Open a new game
    GET    /api/v1/games/{id}                  Get a game
    DELETE /api/v1/games/{id}                  Close a game
    POST   /api/v1/games/{id}/moves            Play a move
    POST   /api/v1/games/{id}/reset            Restart a game
    POST   /api/v1/games/{id}/select           Make a game active
    GET    /api/v1/games/{id}/legal-moves      Allowed boards and cells
    POST   /api/v1/settings/sound              Toggle sound cues

This is a single-player local bridge, not a multiplayer server.
All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional
import logging
import os

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..session.manager import GameNotFoundError
from .service import APIService
from .schemas import (
    CreateGameRequest,
    DeleteGameResponse,
    ErrorCode,
    ErrorResponse,
    GameListResponse,
    GameResponse,
    HealthResponse,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    ResetGameRequest,
    SoundResponse,
)


logger = logging.getLogger(__name__)

# Environment configuration
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def make_error_response(
    error_code: ErrorCode,
    message: str,
    status_code: int = 400,
    details: Optional[dict] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=message,
            error_code=error_code,
            details=details,
        ).model_dump(mode="json"),
    )


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="SuperTTT Engine API",
        description="""
Super Tic-Tac-Toe engine - an N×N board of N×N boards.

## Move Flow

1. `GET /games/{id}` and highlight `state.allowed_boards`
2. On a cell click, `POST /games/{id}/moves` with `board_index` and `cell_index`
3. `applied=false` (HTTP 409) means the move was illegal and nothing changed
4. Use `transition` and `cues` for sound and animation

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist |
| `MOVE_REJECTED` | Illegal move, state unchanged |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    @app.exception_handler(GameNotFoundError)
    async def game_not_found_handler(request: Request, exc: GameNotFoundError):
        return make_error_response(
            ErrorCode.GAME_NOT_FOUND,
            str(exc),
            status_code=404,
            details={"game_id": exc.game_id},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug("Invalid request to %s: %s", request.url.path, exc.errors())
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request",
            status_code=422,
            details={"errors": [
                {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
                for err in exc.errors()
            ]},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List open games",
    )
    async def list_games() -> GameListResponse:
        return api_service.list_games()

    @app.post(
        "/api/v1/games",
        response_model=GameResponse,
        status_code=201,
        tags=["Games"],
        summary="Open a new game",
    )
    async def create_game(body: Optional[CreateGameRequest] = Body(None)) -> GameResponse:
        """
        Open a new game and make it the active one.

        `size` is normalized: anything unparseable or below 2 gives 3.
        """
        size = body.size if body else None
        return api_service.create_game(size)

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get a game",
    )
    async def get_game(game_id: str) -> GameResponse:
        return api_service.get_game(game_id)

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=DeleteGameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Close a game",
    )
    async def delete_game(game_id: str) -> DeleteGameResponse:
        """Close a game. Closing the last game opens a fresh one."""
        return api_service.delete_game(game_id)

    @app.post(
        "/api/v1/games/{game_id}/select",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Make a game active",
    )
    async def select_game(game_id: str) -> GameResponse:
        return api_service.select_game(game_id)

    @app.post(
        "/api/v1/games/{game_id}/reset",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Restart a game",
    )
    async def reset_game(
        game_id: str,
        body: Optional[ResetGameRequest] = Body(None),
    ) -> GameResponse:
        """Replace the game with a fresh one of the same size, or of `size`."""
        size = body.size if body else None
        return api_service.reset_game(game_id, size)

    # =========================================================================
    # Move Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/moves",
        response_model=MoveResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Game not found"},
            409: {"model": ErrorResponse, "description": "Move rejected"},
        },
        tags=["Moves"],
        summary="Play a move",
    )
    async def play_move(game_id: str, body: MoveRequest):
        """
        Place the current player's marker.

        A rejected move returns 409 with the reason in `details`;
        the game is unchanged.
        """
        response = api_service.play_move(game_id, body.board_index, body.cell_index)
        if not response.applied:
            return make_error_response(
                ErrorCode.MOVE_REJECTED,
                f"Move ({body.board_index}, {body.cell_index}) rejected: {response.reason}",
                status_code=409,
                details={"reason": response.reason, "cues": response.cues},
            )
        return response

    @app.get(
        "/api/v1/games/{game_id}/legal-moves",
        response_model=LegalMovesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Moves"],
        summary="Allowed boards and cells",
    )
    async def get_legal_moves(game_id: str) -> LegalMovesResponse:
        return api_service.legal_moves(game_id)

    # =========================================================================
    # Settings
    # =========================================================================

    @app.post(
        "/api/v1/settings/sound",
        response_model=SoundResponse,
        tags=["Settings"],
        summary="Toggle sound cues",
    )
    async def toggle_sound() -> SoundResponse:
        return api_service.toggle_sound()

    return app


# For running directly: uvicorn superttt.api.app:app
app = create_app()
