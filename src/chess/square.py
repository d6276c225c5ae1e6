"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8: (rows, columns)
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True)
class Square:
    """
    Zero-based (row, col) coordinate.

    Row 0 is black's back rank (the 8th rank), row 7 is white's back rank (the 1st rank).
    Column 0 is the a-file.
    """

    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' gets converted to (0,0), 'h1' to (7,7)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(sq[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_DIMENSIONS[0] - self.row}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )

    def offset(self, d_row: int, d_col: int) -> Square:
        """The square displaced by the given vector. Might fall off the board, check with `is_within_bounds()`."""
        return Square(self.row + d_row, self.col + d_col)


# Every square, in reading order (a8 ... h8, a7 ... h1)
ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(row, col)
    for row in range(BOARD_DIMENSIONS[0])
    for col in range(BOARD_DIMENSIONS[1])
)
