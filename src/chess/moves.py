"""
Moves and how they change the board.

Key idea: applying a move never touches the board it is given. It always hands back a new Board (and new castling
rights), so the search can explore scratch copies while the game keeps the authoritative one.

Legality is checked before, by the rules engine (src/chess/rules.py).
"""

from dataclasses import dataclass
from typing import Self

from src.chess.board import Board
from src.chess.castling import (
    CastlingRights,
    CastlingSide,
    castling_side,
    rook_home_side,
)
from src.chess.pieces import EMPTY, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidRequestError


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    piece: Piece
    from_square: Square
    to_square: Square
    captured: Piece = EMPTY

    @classmethod
    def from_squares(cls, board: Board, from_square: Square, to_square: Square) -> Self:
        """Snapshot of the moving piece and whatever stands on the target square, before the move is made."""
        return cls(
            piece=board.piece(from_square),
            from_square=from_square,
            to_square=to_square,
            captured=board.piece(to_square),
        )

    @property
    def is_capture(self) -> bool:
        return not self.captured.is_empty

    @property
    def is_pawn_move(self) -> bool:
        return self.piece.type == PieceType.PAWN

    @property
    def is_castling(self) -> bool:
        """Castling is not stored separately: it is the king moving two columns."""
        return (
            self.piece.type == PieceType.KING
            and castling_side(self.from_square, self.to_square) is not None
        )

    def to_uci(self) -> str:
        """Convert into UCI notation: <from_square><to_square>, ex. 'e2e4'"""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


def parse_uci(uci: str) -> tuple[Square, Square]:
    """
    Universal Chess Interface:
    ---
    One of the standard chess notations for moves: "e2e4" means "move the piece that is on e2 to e4".

    NOTE: Only the squares are parsed. What piece moves (and what gets captured) depends on the board,
    see `Move.from_squares()`.
    """
    if len(uci) != 4 or not (uci[1].isdigit() and uci[3].isdigit()):
        raise InvalidRequestError(f"Cannot interpret {uci!r} as a move in UCI notation.")
    from_square = Square.from_algebraic(uci[:2])
    to_square = Square.from_algebraic(uci[2:4])
    if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
        raise InvalidRequestError(f"Move {uci!r} points outside of the board.")
    return from_square, to_square


# --- BOARD TRANSITION ---
def apply_move(board: Board, move: Move) -> Board:
    """
    Pure board transition
    ---

    Relocate the piece (whatever stood on the target square is gone), on a fresh copy of the board.
    A king moving two columns also drags its rook along to the other side of it.

    NOTE castling is NOT validated again here. The caller already confirmed it was legal.
    """
    new_board = board.copy()
    moving_piece = new_board.piece(move.from_square)
    new_board.remove_piece(move.from_square)
    new_board.place_piece(moving_piece, move.to_square)

    if move.is_castling:
        _move_castling_rook(new_board, move)
    return new_board


def _move_castling_rook(board: Board, king_move: Move) -> None:
    """The rook jumps from the corner to the square the king passed over."""
    row = king_move.from_square.row
    side = castling_side(king_move.from_square, king_move.to_square)
    if side == CastlingSide.KING_SIDE:
        rook_from = Square(row, BOARD_DIMENSIONS[1] - 1)
        rook_to = Square(row, king_move.from_square.col + 1)
    else:
        rook_from = Square(row, 0)
        rook_to = Square(row, king_move.from_square.col - 1)

    rook = board.piece(rook_from)
    board.remove_piece(rook_from)
    board.place_piece(rook, rook_to)


# --- CASTLING RIGHTS TRANSITION ---
def update_castling_rights(rights: CastlingRights, move: Move) -> CastlingRights:
    """
    Checks which flags should be set
    ----

    1. The king moves (castling included) --> king moved, for good.
    2. A rook leaves its home corner --> that side's rook moved, for good.

    NOTE capturing the opponent's rook does not touch their flags. Castling later also requires the rook to be there.
    """
    color = move.piece.color
    if move.piece.type == PieceType.KING:
        return rights.with_king_moved(color)

    if move.piece.type == PieceType.ROOK:
        side = rook_home_side(color, move.from_square)
        if side is not None:
            return rights.with_rook_moved(color, side)

    return rights


def apply_move_with_rights(
    board: Board, move: Move, rights: CastlingRights
) -> tuple[Board, CastlingRights]:
    """Both transitions at once: the new board and the castling rights that hold on it."""
    return apply_move(board, move), update_castling_rights(rights, move)
