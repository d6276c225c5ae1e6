"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, Status, TurnState

FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"


def _is_algebraic_notation(value: str) -> bool:
    """'a1' through 'h8'"""
    if len(value) != 2:
        return False
    return value[0] in FILE_NAMES and value[1] in RANK_NAMES


def validate_square_name(value: str) -> str:
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    human_color: Color = Color.WHITE


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class MoveBody(BaseModel):
    """The move itself, as sent by the client in the request body."""

    from_square: str
    to_square: str

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


class MoveRequest(MoveBody):
    game_id: UUID


class LegalTargetsRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return validate_square_name(value)


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    board_fen: str
    side_to_move: Color
    human_color: Color
    turn_state: TurnState
    status: Status
    winner: Optional[Color]
    move_history: list[str]
    last_move: Optional[str]


class LegalTargetsResponse(BaseModel):
    game_id: UUID
    square: str
    targets: list[str]
