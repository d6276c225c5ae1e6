"""
Custom exceptions shared by all layers.

Everything the domain raises on purpose derives from ChessError, so the API layer can map the whole family to responses.
"""


class ChessError(Exception):
    """Top-level exception for anything raised on purpose by this application."""


class InvalidFENError(ChessError):
    """A FEN (piece placement) string could not be parsed into an 8x8 board."""


class InvalidRequestError(ChessError):
    """Request data that passed type checking but makes no sense for chess (ex. square 'z9')."""


class IllegalMoveError(ChessError):
    """The requested move fails validation. Nothing on the board has been changed."""


class NotYourTurnError(ChessError):
    """A move was requested for the side that is not to move."""


class GameStateError(ChessError):
    """The game is not in a state that accepts the request (finished, or the computer is thinking)."""


class MissingKingError(ChessError):
    """
    A king was expected on the board but is not there.

    Outside of the 'king captured' end condition this means the board is corrupt, so it is never retried.
    """


class RepositoryError(ChessError):
    """Persistence layer could not find / store the requested record."""
