"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    KING_CAPTURED = "king captured"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW_INSUFFICIENT_MATERIAL = "insufficient material"
    DRAW_REPETITION = "threefold repetition"
    DRAW_FIFTY_MOVE_RULE = "fifty-move rule"


# --- NOTE the domain layer (src/chess) has its own Color/PieceType enums that also cover the empty square.
# --- These string versions are the ones that travel over the API boundary.


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class TurnState(StrEnum):
    AWAITING_HUMAN = "awaiting human"
    COMPUTER_THINKING = "computer thinking"
    GAME_OVER = "game over"
