"""
Representation of a single position in the game: the board plus whose turn it is.

Used to recognise a position that has occurred before (threefold repetition).
"""

from dataclasses import dataclass
from typing import Self

from src.chess.board import Board
from src.chess.pieces import Color


@dataclass(frozen=True)
class PositionSignature:
    """
    Snapshot of (board, side to move).

    Two signatures are the same position if every cell of the board holds the same piece and the same side is to move.
    """

    board: Board
    side_to_move: Color

    @classmethod
    def capture(cls, board: Board, side_to_move: Color) -> Self:
        """Take a snapshot: later changes to `board` do not leak into the signature."""
        return cls(board.copy(), side_to_move)


def count_occurrences(
    signature: PositionSignature, history: list[PositionSignature]
) -> int:
    return sum(1 for previous in history if previous == signature)
