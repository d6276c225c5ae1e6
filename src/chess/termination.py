"""
Checks for ending the game.

`check_game_end()` runs the end conditions in a fixed order. The first one that applies decides the result,
so an earlier condition masks all later ones.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import CastlingRights
from src.chess.moves import Move
from src.chess.pieces import Color, PieceType
from src.chess.position import PositionSignature, count_occurrences
from src.chess.rules import has_valid_moves, is_in_check

FIFTY_MOVE_LIMIT = 50
REPETITION_LIMIT = 3
MINOR_PIECES = (PieceType.BISHOP, PieceType.KNIGHT)
PLAYING_COLORS = (Color.WHITE, Color.BLACK)


class EndReason(Enum):
    """Values are shared with the API layer (see src/core/shared_types.py::Status)"""

    KING_CAPTURED = "king captured"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient material"
    THREEFOLD_REPETITION = "threefold repetition"
    FIFTY_MOVE_RULE = "fifty-move rule"


@dataclass(frozen=True)
class GameResult:
    is_terminal: bool
    winner: Color = Color.NONE
    reason: Optional[EndReason] = None

    @classmethod
    def ongoing(cls) -> Self:
        return cls(is_terminal=False)

    @classmethod
    def win(cls, winner: Color, reason: EndReason) -> Self:
        return cls(is_terminal=True, winner=winner, reason=reason)

    @classmethod
    def draw(cls, reason: EndReason) -> Self:
        return cls(is_terminal=True, winner=Color.NONE, reason=reason)


def check_game_end(
    board: Board,
    move_history: list[Move],
    position_history: list[PositionSignature],
    castling_rights: Optional[CastlingRights] = None,
) -> GameResult:
    """
    Performs checks to see if game has ended, in this order:
    ----

    1. a king is gone (it got captured) --> the other color wins
    2. checkmate: in check without any move left --> the other color wins
    3. stalemate: not in check, but without any move left --> draw
    4. insufficient material --> draw
    5. threefold repetition --> draw
    6. fifty-move rule --> draw
    """
    for color in PLAYING_COLORS:
        if board.locate_king(color) is None:
            return GameResult.win(color.opponent, EndReason.KING_CAPTURED)

    in_check = {color: is_in_check(board, color, castling_rights) for color in PLAYING_COLORS}
    can_move = {
        color: has_valid_moves(board, color, castling_rights) for color in PLAYING_COLORS
    }

    for color in PLAYING_COLORS:
        if in_check[color] and not can_move[color]:
            return GameResult.win(color.opponent, EndReason.CHECKMATE)

    for color in PLAYING_COLORS:
        if not in_check[color] and not can_move[color]:
            return GameResult.draw(EndReason.STALEMATE)

    if is_insufficient_material(board):
        return GameResult.draw(EndReason.INSUFFICIENT_MATERIAL)

    if is_threefold_repetition(position_history):
        return GameResult.draw(EndReason.THREEFOLD_REPETITION)

    if is_fifty_move_rule(move_history):
        return GameResult.draw(EndReason.FIFTY_MOVE_RULE)

    return GameResult.ongoing()


def is_insufficient_material(board: Board) -> bool:
    """
    Only two pieces left, or three of which (at least) one is a bishop or knight.

    NOTE: it is not verified that the remaining pieces include the kings.
    """
    remaining = [board.piece(square) for square in board.occupied_squares()]
    if len(remaining) == 2:
        return True
    if len(remaining) == 3:
        return any(piece.type in MINOR_PIECES for piece in remaining)
    return False


def is_threefold_repetition(position_history: list[PositionSignature]) -> bool:
    """The current position (the latest one recorded) occurs at least 3 times in the history"""
    if len(position_history) < REPETITION_LIMIT:
        return False
    current = position_history[-1]
    return count_occurrences(current, position_history) >= REPETITION_LIMIT


def is_fifty_move_rule(move_history: list[Move]) -> bool:
    """
    The last 50 moves contain no pawn move and no capture.

    NOTE these are 50 half-moves (a move by either side counts), not 50 moves by each side.
    """
    if len(move_history) < FIFTY_MOVE_LIMIT:
        return False
    recent_moves = move_history[-FIFTY_MOVE_LIMIT:]
    return all(not move.is_pawn_move and not move.is_capture for move in recent_moves)
