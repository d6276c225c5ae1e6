"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Optional, Self

from src.chess.pieces import Color
from src.chess.square import Square


class CastlingSide(Enum):
    KING_SIDE = auto()
    QUEEN_SIDE = auto()


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If neither piece has moved yet, we already know the king / rook are still at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (Color.WHITE, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    (Color.WHITE, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    (Color.BLACK, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    (Color.BLACK, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_side(king_from: Square, king_to: Square) -> Optional[CastlingSide]:
    """A king move along its rank by two columns is a castling move. Anything else is not."""
    if king_from.row != king_to.row:
        return None
    col_delta = king_to.col - king_from.col
    if col_delta == 2:
        return CastlingSide.KING_SIDE
    if col_delta == -2:
        return CastlingSide.QUEEN_SIDE
    return None


def rook_home_side(color: Color, square: Square) -> Optional[CastlingSide]:
    """Which castling side (if any) has its rook starting on this square, for the given color."""
    for side in CastlingSide:
        if CASTLING_RULES[(color, side)].rook_from == square:
            return side
    return None


@dataclass(frozen=True)
class CastlingFlags:
    """
    Has the king / either rook of a single color moved?

    Flags only ever go from False to True. They track moves off the home squares, not the identity of the piece
    standing there later on.
    """

    king_moved: bool = False
    king_side_rook_moved: bool = False
    queen_side_rook_moved: bool = False

    def rook_moved(self, side: CastlingSide) -> bool:
        if side == CastlingSide.KING_SIDE:
            return self.king_side_rook_moved
        return self.queen_side_rook_moved


@dataclass(frozen=True)
class CastlingRights:
    white: CastlingFlags = field(default_factory=CastlingFlags)
    black: CastlingFlags = field(default_factory=CastlingFlags)

    @classmethod
    def revoked(cls) -> Self:
        """Nobody can castle anymore (ex. for a position set up halfway through a game)."""
        all_moved = CastlingFlags(True, True, True)
        return cls(white=all_moved, black=all_moved)

    def flags(self, color: Color) -> CastlingFlags:
        return self.white if color == Color.WHITE else self.black

    def is_available(self, color: Color, side: CastlingSide) -> bool:
        """Neither the king nor the rook of that side has moved yet"""
        flags = self.flags(color)
        return not flags.king_moved and not flags.rook_moved(side)

    def with_king_moved(self, color: Color) -> Self:
        return self._with_flags(color, replace(self.flags(color), king_moved=True))

    def with_rook_moved(self, color: Color, side: CastlingSide) -> Self:
        flag_name = (
            "king_side_rook_moved"
            if side == CastlingSide.KING_SIDE
            else "queen_side_rook_moved"
        )
        return self._with_flags(color, replace(self.flags(color), **{flag_name: True}))

    def _with_flags(self, color: Color, flags: CastlingFlags) -> Self:
        if color == Color.WHITE:
            return replace(self, white=flags)
        return replace(self, black=flags)
