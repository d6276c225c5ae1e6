"""The Game board: an 8x8 grid mapping every square to a piece (or the empty piece)"""

from dataclasses import dataclass
from typing import Optional, Self

from src.chess.pieces import EMPTY, Color, Piece, PieceType
from src.chess.square import ALL_SQUARES, BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidFENError

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass
class Board:
    position: dict[Square, Piece]

    @classmethod
    def empty(cls) -> Self:
        return cls({square: EMPTY for square in ALL_SQUARES})

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), read from the a-file to the h-file
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) holds the white pieces.
        """
        fen_by_ranks = fen_str.split("/")
        if len(fen_by_ranks) != BOARD_DIMENSIONS[0]:
            raise InvalidFENError(
                f"Expected {BOARD_DIMENSIONS[0]} ranks separated by '/', got {len(fen_by_ranks)}: {fen_str!r}"
            )

        position: dict[Square, Piece] = {}
        # FEN string is read from the top rank (8th) down, which is exactly our row order.
        for row, fen_one_rank in enumerate(fen_by_ranks):
            col = 0
            for character in fen_one_rank:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    for _ in range(int(character)):
                        position[Square(row, col)] = EMPTY
                        col += 1
                elif character.lower() in "pnbrqk":
                    position[Square(row, col)] = Piece.from_fen(character)
                    col += 1
                else:
                    raise InvalidFENError(
                        f"Unknown character {character!r} in FEN rank {fen_one_rank!r}"
                    )
            if col != BOARD_DIMENSIONS[1]:
                raise InvalidFENError(
                    f"FEN rank {fen_one_rank!r} does not describe exactly {BOARD_DIMENSIONS[1]} squares"
                )
        return cls(position)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._row_to_fen(row) for row in range(BOARD_DIMENSIONS[0]))

    def _row_to_fen(self, row: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_DIMENSIONS[1]):
            piece = self.piece(Square(row, col))

            if not piece.is_empty:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def copy(self) -> Self:
        """Independent board. Pieces are immutable, so a shallow copy of the mapping is enough."""
        return type(self)(dict(self.position))

    def piece(self, square: Square) -> Piece:
        return self.position[square]

    def is_empty(self, square: Square) -> bool:
        return self.position[square].is_empty

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> None:
        self.position[square] = EMPTY

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.position.items() if piece.color == color
        ]

    def locate_king(self, color: Color) -> Optional[Square]:
        """None if the king of that color is no longer on the board."""
        king = Piece(PieceType.KING, color)
        return next(
            (square for square, piece in self.position.items() if piece == king), None
        )

    def occupied_squares(self) -> list[Square]:
        return [square for square, piece in self.position.items() if not piece.is_empty]


def initialize_board() -> Board:
    """Standard starting position"""
    return Board.starting_position()
