"""
The Game class will be the entrypoint into the domain layer for the service layer.
It owns the authoritative state of a game between a human and the computer: the board, whose turn it is, the castling
flags and the move / position histories. Nothing else mutates them.

Turns follow a small state machine:

    AWAITING_HUMAN --(human move)--> COMPUTER_THINKING --(computer move)--> AWAITING_HUMAN
    any state --(end condition reached)--> GAME_OVER
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Self

from src.chess.board import Board, initialize_board
from src.chess.castling import CastlingRights
from src.chess.moves import Move, apply_move, parse_uci, update_castling_rights
from src.chess.pieces import AVAILABLE_COLOR_NAMES, Color
from src.chess.position import PositionSignature
from src.chess.rules import is_legal_move, legal_targets
from src.chess.square import Square
from src.chess.termination import EndReason, GameResult, check_game_end
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
)
from src.core.models import GameModel
from src.core.shared_types import TurnState as SharedTurnState
from src.engine.config import SearchConfig
from src.engine.search import find_best_move

logger = logging.getLogger(__name__)

IN_PROGRESS = "in progress"


class TurnState(Enum):
    AWAITING_HUMAN = auto()
    COMPUTER_THINKING = auto()
    GAME_OVER = auto()


@dataclass(frozen=True)
class ComputerTurn:
    """Everything the search needs, as copies: the search never sees the Game's own board."""

    board: Board
    side_to_move: Color
    castling_rights: CastlingRights


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    side_to_move: Color
    castling_rights: CastlingRights
    move_history: list[Move]
    position_history: list[PositionSignature]
    human_color: Color
    result: GameResult
    turn_state: TurnState

    @classmethod
    def new_game(
        cls,
        human_color: Color = Color.WHITE,
        board: Optional[Board] = None,
        side_to_move: Color = Color.WHITE,
        castling_rights: Optional[CastlingRights] = None,
    ) -> Self:
        """
        To start a new game with the human playing the indicated color.

        Without a board, the game starts from the standard starting position.
        """
        if human_color == Color.NONE:
            raise GameStateError(
                f"Cannot create new game. Pick a color from {','.join([c.lower() for c in AVAILABLE_COLOR_NAMES])}."
            )
        board = board if board is not None else initialize_board()
        game = cls(
            board=board,
            side_to_move=side_to_move,
            castling_rights=castling_rights or CastlingRights(),
            move_history=[],
            position_history=[PositionSignature.capture(board, side_to_move)],
            human_color=human_color,
            result=GameResult.ongoing(),
            turn_state=TurnState.AWAITING_HUMAN,
        )
        game._update_game_status()
        logger.info(
            "New game: human plays %s, %s to move",
            human_color.name.lower(),
            side_to_move.name.lower(),
        )
        return game

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has.

        The recorded moves are replayed from the starting position, which rebuilds both histories and the
        castling flags exactly as they were.
        """
        color_name = model.human_color.upper()
        if color_name not in AVAILABLE_COLOR_NAMES:
            raise GameStateError(f"Invalid color for the human player: {model.human_color!r}")

        game = cls.new_game(human_color=Color[color_name])
        for move_uci in model.moves_uci:
            from_square, to_square = parse_uci(move_uci)
            game.replay_move(from_square, to_square)

        if game.board.to_fen() != model.board_fen:
            raise GameStateError(
                f"Stored position {model.board_fen!r} does not match the recorded moves (got {game.board.to_fen()!r})."
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            board_fen=self.board.to_fen(),
            side_to_move=self.side_to_move.name.lower(),
            moves_uci=[move.to_uci() for move in self.move_history],
            human_color=self.human_color.name.lower(),
            status=self.status,
            turn_state=SharedTurnState[self.turn_state.name].value,
        )

    @property
    def computer_color(self) -> Color:
        return self.human_color.opponent

    @property
    def winner(self) -> Color:
        """Color.NONE while the game is running, and for draws."""
        return self.result.winner

    @property
    def status(self) -> str:
        reason = self.result.reason
        return reason.value if reason is not None else IN_PROGRESS

    def is_legal_move(self, from_square: Square, to_square: Square) -> bool:
        """Can the side to move play this move right now?"""
        return is_legal_move(
            self.board, from_square, to_square, self.side_to_move, self.castling_rights
        )

    def legal_targets(self, from_square: Square) -> list[Square]:
        """Where the piece on `from_square` can go (empty if it does not belong to the side to move)"""
        if not from_square.is_within_bounds():
            return []
        return legal_targets(
            self.board, from_square, self.side_to_move, self.castling_rights
        )

    def make_move(self, from_square: Square, to_square: Square) -> Move:
        """
        Attempt a move by the human
        -----

        1. make sure the game is (still) in progress and the computer is not thinking
        2. make sure it is the human's turn
        3. check if the move is legal (nothing changes if it is not)
        4. update board, castling flags, histories, side to move and game status
        """
        self._assert_not_over()
        if self.turn_state == TurnState.COMPUTER_THINKING:
            raise GameStateError("The computer is thinking. Wait for its move first.")
        if self.side_to_move != self.human_color:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {self.side_to_move.name.lower()} to move first."
            )

        move = self._validated_move(from_square, to_square)
        self._apply_confirmed_move(move)
        return move

    def replay_move(self, from_square: Square, to_square: Square) -> Move:
        """Apply a recorded move, whichever side made it. Still validated like any other move."""
        self._assert_not_over()
        move = self._validated_move(from_square, to_square)
        self._apply_confirmed_move(move)
        return move

    # -- COMPUTER TURN ---
    def start_computer_turn(self) -> ComputerTurn:
        """Hand out copies of the position for the search. The game stays in COMPUTER_THINKING until completed."""
        self._assert_not_over()
        if self.turn_state != TurnState.COMPUTER_THINKING:
            raise NotYourTurnError("It is not the computer's turn.")
        return ComputerTurn(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling_rights=self.castling_rights,
        )

    def complete_computer_turn(self, move: Optional[Move]) -> Optional[Move]:
        """
        Apply the move found by the search through the same path as the human's moves.

        No move means the computer had nothing to play: the game is over.
        """
        self._assert_not_over()
        if self.turn_state != TurnState.COMPUTER_THINKING:
            raise NotYourTurnError("It is not the computer's turn.")

        if move is None:
            self._end_without_computer_move()
            return None

        confirmed = self._validated_move(move.from_square, move.to_square)
        self._apply_confirmed_move(confirmed)
        return confirmed

    def play_computer_move(self, config: SearchConfig = SearchConfig()) -> Optional[Move]:
        """Start, search and complete the computer's turn in one (blocking) call."""
        turn = self.start_computer_turn()
        move = find_best_move(
            turn.board, turn.side_to_move, config, turn.castling_rights
        )
        return self.complete_computer_turn(move)

    # -- PRIVATE HELPERS ---
    def _assert_not_over(self) -> None:
        if self.turn_state == TurnState.GAME_OVER:
            raise GameStateError(f"Game is over. status: {self.status}")

    def _validated_move(self, from_square: Square, to_square: Square) -> Move:
        if not self.is_legal_move(from_square, to_square):
            raise IllegalMoveError(
                f"Move not allowed: {from_square.to_algebraic()}{to_square.to_algebraic()}"
                if from_square.is_within_bounds() and to_square.is_within_bounds()
                else f"Move not allowed: {from_square} -> {to_square}"
            )
        return Move.from_squares(self.board, from_square, to_square)

    def _apply_confirmed_move(self, move: Move) -> None:
        """
        The one place where the authoritative state changes
        -----

        1. update the board (NOTE: if castling, the rook moves as well)
        2. update the castling flags
        3. update the (history of) moves
        4. hand the turn to the other side, and record the new position
        5. update game status (if needed)
        """
        self.board = apply_move(self.board, move)
        self.castling_rights = update_castling_rights(self.castling_rights, move)
        self.move_history.append(move)
        self.side_to_move = self.side_to_move.opponent
        self.position_history.append(
            PositionSignature.capture(self.board, self.side_to_move)
        )
        logger.info(
            "%s played %s", move.piece.color.name.lower(), move.to_uci()
        )
        self._update_game_status()

    def _update_game_status(self) -> None:
        """Consult the end conditions, then decide who is up next."""
        self.result = check_game_end(
            self.board, self.move_history, self.position_history, self.castling_rights
        )
        if self.result.is_terminal:
            self._change_turn_state(TurnState.GAME_OVER)
            logger.info(
                "Game over: %s (winner: %s)",
                self.status,
                self.winner.name.lower(),
            )
        elif self.side_to_move == self.human_color:
            self._change_turn_state(TurnState.AWAITING_HUMAN)
        else:
            self._change_turn_state(TurnState.COMPUTER_THINKING)

    def _end_without_computer_move(self) -> None:
        """The search found nothing to play: an end condition the regular check should already know about."""
        self.result = check_game_end(
            self.board, self.move_history, self.position_history, self.castling_rights
        )
        if not self.result.is_terminal:
            logger.warning("Computer has no move, but no end condition applies. Calling it a stalemate.")
            self.result = GameResult.draw(EndReason.STALEMATE)
        self._change_turn_state(TurnState.GAME_OVER)

    def _change_turn_state(self, new_state: TurnState) -> None:
        self.turn_state = new_state
