"""HTTP routes. The frontend (board rendering, clicks, highlighting) lives elsewhere and talks to these."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalTargetsRequest,
    LegalTargetsResponse,
    MoveBody,
    MoveRequest,
)
from src.core.exceptions import (
    ChessError,
    GameStateError,
    IllegalMoveError,
    InvalidFENError,
    InvalidRequestError,
    MissingKingError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.settings import get_settings
from src.db.database import get_db, init_db
from src.db.sql_repository import SQLGameRepository
from src.services.chess_service import ChessService

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[ChessError], int] = {
    IllegalMoveError: status.HTTP_400_BAD_REQUEST,
    RepositoryError: status.HTTP_404_NOT_FOUND,
    NotYourTurnError: status.HTTP_409_CONFLICT,
    GameStateError: status.HTTP_409_CONFLICT,
    InvalidRequestError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidFENError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MissingKingError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_service(db: Session = Depends(get_db)) -> ChessService:
    settings = get_settings()
    return ChessService(
        SQLGameRepository(db),
        search_config=settings.search_config(),
        thinking_delay_s=settings.thinking_delay_s,
    )


async def chess_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(
        (
            ERROR_STATUS_CODES[cls]
            for cls in type(exc).__mro__
            if cls in ERROR_STATUS_CODES
        ),
        status.HTTP_400_BAD_REQUEST,
    )
    if status_code >= 500:
        logger.error("Unrecoverable error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": type(exc).__name__, "message": str(exc)}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_db()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Chess against the computer", version="0.1.0", lifespan=lifespan)
    app.add_exception_handler(ChessError, chess_error_handler)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/games", response_model=GameResponse)
    async def create_game(
        request: CreateGameRequest, service: ChessService = Depends(get_service)
    ) -> GameResponse:
        return await service.start_game(request)

    # Routes without a computer turn are plain functions, so FastAPI runs their database work in its threadpool
    @app.get("/games/{game_id}", response_model=GameResponse)
    def get_game(
        game_id: UUID, service: ChessService = Depends(get_service)
    ) -> GameResponse:
        return service.get_game_state(GetGameRequest(game_id=game_id))

    @app.get(
        "/games/{game_id}/squares/{square}/targets",
        response_model=LegalTargetsResponse,
    )
    def legal_targets(
        game_id: UUID, square: str, service: ChessService = Depends(get_service)
    ) -> LegalTargetsResponse:
        return service.legal_targets(LegalTargetsRequest(game_id=game_id, square=square))

    @app.post("/games/{game_id}/moves", response_model=GameResponse)
    async def make_move(
        game_id: UUID, body: MoveBody, service: ChessService = Depends(get_service)
    ) -> GameResponse:
        request = MoveRequest(game_id=game_id, **body.model_dump())
        return await service.make_move_and_reply(request)

    @app.post("/games/{game_id}/computer-move", response_model=GameResponse)
    async def computer_move(
        game_id: UUID, service: ChessService = Depends(get_service)
    ) -> GameResponse:
        """Retry the computer's turn (ex. when the reply got lost after the human's move)"""
        return await service.play_computer_move(game_id)

    @app.delete("/games/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_game(
        game_id: UUID, service: ChessService = Depends(get_service)
    ) -> None:
        service.delete_game(DeleteGameRequest(game_id=game_id))

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn"""
    uvicorn.run(create_app(), host="127.0.0.1", port=8000)
