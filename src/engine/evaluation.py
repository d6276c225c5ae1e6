"""
Scoring used by the search.

* `evaluate_board()`: static evaluation at the leaves. Pure material count.
* `score_move()`: cheap guess of how promising a move is, used to order moves before searching them.
"""

from src.chess.board import Board
from src.chess.moves import Move
from src.chess.pieces import Color, Piece, PieceType
from src.chess.rules import PROMOTION_ROW
from src.chess.square import Square

CENTER_SQUARES: frozenset[Square] = frozenset(
    Square.from_algebraic(name) for name in ("d4", "e4", "d5", "e5")
)
CENTER_BONUS = 10
PAWN_ADVANCE_BONUS = 2
KNIGHT_BONUS = 5
CAPTURE_WEIGHT = 2


def evaluate_board(board: Board, maximizing_color: Color) -> int:
    """
    Zero-sum material score: the maximizing color's pieces count positive, the opponent's negative.

    pawn 10, knight/bishop 30, rook 50, queen 90, king 900
    """
    score = 0
    for piece in board.position.values():
        if piece.color == maximizing_color:
            score += piece.value
        elif piece.color == maximizing_color.opponent:
            score -= piece.value
    return score


def positional_bonus(piece: Piece, to_square: Square) -> int:
    """
    Bonus for where the piece lands
    ---

    * +10 on one of the four center squares
    * pawns: +2 for every row closer to the promotion row
    * knights: small fixed bonus
    """
    bonus = CENTER_BONUS if to_square in CENTER_SQUARES else 0

    if piece.type == PieceType.PAWN:
        rows_to_go = abs(PROMOTION_ROW[piece.color] - to_square.row)
        bonus += PAWN_ADVANCE_BONUS * (7 - rows_to_go)
    elif piece.type == PieceType.KNIGHT:
        bonus += KNIGHT_BONUS

    return bonus


def score_move(move: Move) -> int:
    """Captures first (weighted by the value of what gets taken), then positional gains."""
    return CAPTURE_WEIGHT * move.captured.value + positional_bonus(
        move.piece, move.to_square
    )


def order_moves(moves: list[Move]) -> list[Move]:
    """Most promising first. The sort is stable, so equally scored moves keep their generation order."""
    return sorted(moves, key=score_move, reverse=True)
