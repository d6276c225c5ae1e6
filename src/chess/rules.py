"""
Geometry/Base movement rules and attack detection

Key idea: Use strategy pattern to define the movement rule for each piece type.
Every rule answers the same question: "May the piece on `from_square` go to `to_square` on this board?"

NOTE: a move is legal here as soon as the piece geometry allows it. Moves that leave your own king attacked are
NOT filtered out, and kings can be captured like any other piece.
"""

from typing import Callable, Iterator, Optional

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingRights, CastlingSide, castling_side
from src.chess.moves import Move
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import ALL_SQUARES, Square
from src.core.exceptions import MissingKingError

Vector = tuple[int, int]

KNIGHT_DELTAS: frozenset[Vector] = frozenset(
    [(2, 1), (2, -1), (-2, 1), (-2, -1), (1, 2), (1, -2), (-1, 2), (-1, -2)]
)

# White moves UP the board (towards row 0), black moves DOWN (towards row 7)
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}
PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 6, Color.BLACK: 1}
PROMOTION_ROW: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 7}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


# --- PATH CLEARANCE ---
def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares strictly in between two squares on the same rank, file or diagonal.

    Returns an empty list for squares that do not share a line (and for neighbours).
    """
    d_row = to_square.row - from_square.row
    d_col = to_square.col - from_square.col
    if not (d_row == 0 or d_col == 0 or abs(d_row) == abs(d_col)):
        return []

    step = (_sign(d_row), _sign(d_col))
    squares_found: list[Square] = []
    square = from_square.offset(*step)
    while square != to_square:
        squares_found.append(square)
        square = square.offset(*step)
    return squares_found


def is_path_clear(board: Board, from_square: Square, to_square: Square) -> bool:
    """Every square strictly between `from` and `to` must be empty"""
    return all(board.is_empty(square) for square in squares_between(from_square, to_square))


# --- MOVEMENT RULES ---
def pawn_rule(
    board: Board,
    from_square: Square,
    to_square: Square,
    castling_rights: Optional[CastlingRights],
) -> bool:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty.
    - takes diagonally (one square), but only if there is an opponent's piece to take.

    NOTE: no en passant, and no promotion when reaching the final rank.
    """
    color = board.piece(from_square).color
    direction = PAWN_DIRECTION[color]
    d_row = to_square.row - from_square.row
    d_col = to_square.col - from_square.col
    target = board.piece(to_square)

    # single push
    if d_col == 0 and d_row == direction:
        return target.is_empty

    # double push from the starting rank
    if d_col == 0 and d_row == 2 * direction and from_square.row == PAWN_START_ROW[color]:
        intermediate = from_square.offset(direction, 0)
        return board.is_empty(intermediate) and target.is_empty

    # diagonal capture
    if abs(d_col) == 1 and d_row == direction:
        return target.color == color.opponent

    return False


def knight_rule(
    board: Board,
    from_square: Square,
    to_square: Square,
    castling_rights: Optional[CastlingRights],
) -> bool:
    """Knights jump: |delta_row| + |delta_col| = 3, and never along a line. Whatever stands in between does not matter."""
    delta = (to_square.row - from_square.row, to_square.col - from_square.col)
    return delta in KNIGHT_DELTAS


def bishop_rule(
    board: Board,
    from_square: Square,
    to_square: Square,
    castling_rights: Optional[CastlingRights],
) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    d_row = to_square.row - from_square.row
    d_col = to_square.col - from_square.col
    if d_row == 0 or abs(d_row) != abs(d_col):
        return False
    return is_path_clear(board, from_square, to_square)


def rook_rule(
    board: Board,
    from_square: Square,
    to_square: Square,
    castling_rights: Optional[CastlingRights],
) -> bool:
    """Rooks move either horizontally or vertically"""
    same_row = from_square.row == to_square.row
    same_col = from_square.col == to_square.col
    if same_row == same_col:
        # either both (not a move at all) or neither (not a straight line)
        return False
    return is_path_clear(board, from_square, to_square)


def queen_rule(
    board: Board,
    from_square: Square,
    to_square: Square,
    castling_rights: Optional[CastlingRights],
) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return rook_rule(board, from_square, to_square, castling_rights) or bishop_rule(
        board, from_square, to_square, castling_rights
    )


def king_rule(
    board: Board,
    from_square: Square,
    to_square: Square,
    castling_rights: Optional[CastlingRights],
) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a king move of two columns along its own rank.
    """
    d_row = abs(to_square.row - from_square.row)
    d_col = abs(to_square.col - from_square.col)
    if max(d_row, d_col) == 1:
        return True

    side = castling_side(from_square, to_square)
    if side is None or castling_rights is None:
        return False
    color = board.piece(from_square).color
    return (
        from_square == CASTLING_RULES[(color, side)].king_from
        and can_castle(board, color, side, castling_rights)
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
MovementRuleFn = Callable[[Board, Square, Square, Optional[CastlingRights]], bool]
MOVEMENT_RULES: dict[PieceType, MovementRuleFn] = {
    PieceType.PAWN: pawn_rule,
    PieceType.KNIGHT: knight_rule,
    PieceType.BISHOP: bishop_rule,
    PieceType.ROOK: rook_rule,
    PieceType.QUEEN: queen_rule,
    PieceType.KING: king_rule,
}


# -- CASTLING ---
def can_castle(
    board: Board, color: Color, side: CastlingSide, castling_rights: CastlingRights
) -> bool:
    """
    **you are allowed to castle if**

    * Neither your king nor the rook on that side has moved (ever).
    * All squares between the king and the rook are empty.
    * Your rook is actually standing in the corner.

    NOTE: being in check, or passing over / landing on an attacked square does NOT stop you from castling.
    """
    if not castling_rights.is_available(color, side):
        return False

    squares = CASTLING_RULES[(color, side)]
    if not is_path_clear(board, squares.king_from, squares.rook_from):
        return False

    return board.piece(squares.rook_from) == Piece(PieceType.ROOK, color)


# --- LEGALITY ---
def is_legal_move(
    board: Board,
    from_square: Square,
    to_square: Square,
    side_to_move: Color,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """
    Can the piece on `from_square` go to `to_square`?
    ----

    1. Both squares on the board, and there is a piece of the side to move on `from_square`.
    2. You cannot land on your own piece.
    3. The movement rule of the piece type has the final say.

    Without castling rights, castling is never legal.
    """
    if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
        return False

    piece = board.piece(from_square)
    if piece.is_empty or piece.color != side_to_move:
        return False

    if board.piece(to_square).color == piece.color:
        return False

    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(board, from_square, to_square, castling_rights)


def legal_targets(
    board: Board,
    from_square: Square,
    side_to_move: Color,
    castling_rights: Optional[CastlingRights] = None,
) -> list[Square]:
    """All squares the piece on `from_square` may move to."""
    return [
        to_square
        for to_square in ALL_SQUARES
        if is_legal_move(board, from_square, to_square, side_to_move, castling_rights)
    ]


def pseudo_legal_moves(
    board: Board, color: Color, castling_rights: Optional[CastlingRights] = None
) -> Iterator[Move]:
    """
    Every move the rules allow for `color`: all pieces of that color, tried against all 64 target squares.

    Lazy, so callers only interested in "is there any move at all?" can stop at the first one.
    """
    for from_square in board.locate_color(color):
        for to_square in ALL_SQUARES:
            if is_legal_move(board, from_square, to_square, color, castling_rights):
                yield Move.from_squares(board, from_square, to_square)


def has_valid_moves(
    board: Board, color: Color, castling_rights: Optional[CastlingRights] = None
) -> bool:
    """Short-circuits on the first legal move found"""
    return next(pseudo_legal_moves(board, color, castling_rights), None) is not None


# --- ATTACKS ---
def is_square_attacked(
    board: Board,
    square: Square,
    defending_color: Color,
    castling_rights: Optional[CastlingRights] = None,
) -> bool:
    """
    Is the square in the line-of-sight of any of the opponent's pieces?
    ----

    Simply ask every opponent piece whether it could legally move onto the square.
    """
    attacking_color = defending_color.opponent
    return any(
        is_legal_move(board, from_square, square, attacking_color, castling_rights)
        for from_square in board.locate_color(attacking_color)
    )


def is_in_check(
    board: Board, color: Color, castling_rights: Optional[CastlingRights] = None
) -> bool:
    """The king of `color` is attacked. The king is expected on the board: its absence is a corrupt board."""
    king_square = board.locate_king(color)
    if king_square is None:
        raise MissingKingError(f"No {color.name.lower()} king found on the board.")
    return is_square_attacked(board, king_square, color, castling_rights)
