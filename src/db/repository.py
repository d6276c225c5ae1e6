"""Protocol repository: what the service needs from whatever stores the games (SQLAlchemy, or a dict in tests)."""

from typing import Optional, Protocol
from uuid import UUID

from src.core.models import GameModel


class GameRepository(Protocol):
    """Persistence of games against the computer, keyed by game ID"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store a freshly started game and return the stored data + newly created game ID."""
        ...

    def update_game(
        self,
        game_id: UUID,
        game: GameModel,
        expected_moves: Optional[list[str]] = None,
    ) -> GameModel | None:
        """
        Overwrite the record after a move. None if there is no such record.

        With `expected_moves`, the write only goes through if the stored move list is still exactly that one
        (the moves the caller loaded the game with). Otherwise a GameStateError is raised and nothing is written.
        """
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record, returning what was stored (if anything)."""
        ...
