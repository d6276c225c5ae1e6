"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import asyncio
import logging
from uuid import UUID

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    LegalTargetsRequest,
    LegalTargetsResponse,
    MoveRequest,
)
from src.chess.game import Game
from src.chess.pieces import Color as DomainColor
from src.chess.square import Square
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color, Status
from src.core.shared_types import TurnState as SharedTurnState
from src.db.repository import GameRepository
from src.engine.config import SearchConfig
from src.engine.search import find_best_move

logger = logging.getLogger(__name__)


class ChessService:
    """Orchestration of layers for a game against the computer."""

    def __init__(
        self,
        repository: GameRepository,
        search_config: SearchConfig = SearchConfig(),
        thinking_delay_s: float = 0.0,
    ) -> None:
        self.repo = repository
        self.search_config = search_config
        self.thinking_delay_s = thinking_delay_s

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Human requested a new game, playing the requested color."""

        # Use info in CreateGameRequest to create a new Game, and convert into GameModel
        new_game = Game.new_game(human_color=DomainColor[request.human_color.name])
        created_game_data = new_game.to_model()

        # Store the GameModel in the repository
        _, game_id = self.repo.create_game(created_game_data)
        logger.info("Created game %s", game_id)

        # Return a GameResponse
        return self._create_game_response(game_id, new_game)

    async def start_game(self, request: CreateGameRequest) -> GameResponse:
        """Create a new game. If the human plays black, the computer opens right away."""
        response = await asyncio.to_thread(self.create_new_game, request)
        if response.turn_state == SharedTurnState.COMPUTER_THINKING:
            return await self.play_computer_move(response.game_id)
        return response

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the human's turn for instance.
        """
        game = Game.from_model(self._fetch_game(request.game_id))
        return self._create_game_response(request.game_id, game)

    def legal_targets(self, request: LegalTargetsRequest) -> LegalTargetsResponse:
        """Squares the piece on the requested square can move to (for highlighting them in the frontend)"""
        game = Game.from_model(self._fetch_game(request.game_id))
        targets = game.legal_targets(Square.from_algebraic(request.square))
        return LegalTargetsResponse(
            game_id=request.game_id,
            square=request.square,
            targets=[square.to_algebraic() for square in targets],
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt for the human."""

        # Create a new Game instance from the retrieved GameModel
        stored = self._fetch_game(request.game_id)
        game = Game.from_model(stored)

        # Attempt the move
        game.make_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
        )

        # Capture updated state in GameModel and store in repository (unless someone else stored a move first)
        return self._store_and_respond(request.game_id, game, stored.moves_uci)

    async def play_computer_move(self, game_id: UUID) -> GameResponse:
        """
        Let the computer play its turn
        ----

        1. the game hands out a copy of the position (and stays in its 'computer thinking' state)
        2. short, artificial pause so the turn change is observable
        3. search in a worker thread, so the event loop is not blocked
        4. apply the result through the game's regular move path
        5. store it, but only if the game still has the moves it was loaded with.
           A retry or a human move that landed during steps 2-3 wins, and this turn fails with GameStateError.
        """
        stored = await asyncio.to_thread(self._fetch_game, game_id)
        game = await asyncio.to_thread(Game.from_model, stored)
        turn = game.start_computer_turn()

        await asyncio.sleep(self.thinking_delay_s)
        move = await asyncio.to_thread(
            find_best_move,
            turn.board,
            turn.side_to_move,
            self.search_config,
            turn.castling_rights,
        )

        game.complete_computer_turn(move)
        return await asyncio.to_thread(self._store_and_respond, game_id, game, stored.moves_uci)

    async def make_move_and_reply(self, request: MoveRequest) -> GameResponse:
        """The human's move, followed by the computer's answer (unless the game ended)."""
        response = await asyncio.to_thread(self.make_move, request)
        if response.turn_state == SharedTurnState.COMPUTER_THINKING:
            return await self.play_computer_move(request.game_id)
        return response

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with game_id={request.game_id} not found.")
        logger.info("Deleted game %s", request.game_id)

    # -- Internal helpers --
    def _store_and_respond(self, game_id: UUID, game: Game, loaded_moves: list[str]) -> GameResponse:
        if self.repo.update_game(game_id, game.to_model(), expected_moves=loaded_moves) is None:
            raise RepositoryError(f"Game with {game_id=} not found (deleted while the move was in progress).")
        return self._create_game_response(game_id, game)

    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        """Convert the Game into a GameResponse (for game with given ID.)"""
        model = game.to_model()
        return GameResponse(
            game_id=game_id,
            board_fen=model.board_fen,
            side_to_move=Color(model.side_to_move),
            human_color=Color(model.human_color),
            turn_state=SharedTurnState[game.turn_state.name],
            status=Status(model.status),
            winner=(
                Color(game.winner.name.lower())
                if game.winner != DomainColor.NONE
                else None
            ),
            move_history=model.moves_uci,
            last_move=model.moves_uci[-1] if model.moves_uci else None,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
