"""SQLAlchemy implementation of the GameRepository protocol (see src/db/repository.py)"""

from dataclasses import asdict, fields
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.exceptions import GameStateError
from src.core.models import GameModel
from src.db.schema import DBGame

# GameModel fields map one-to-one onto columns of the games table
STORED_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(GameModel))


class SQLGameRepository:
    """One row per game. Every change to a game is committed right away."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        row = self._fetch_row(game_id)
        return self._to_model(row) if row is not None else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        game_id = uuid4()
        row = DBGame(id=game_id, **self._column_values(game))
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_model(row), game_id

    def update_game(
        self,
        game_id: UUID,
        game: GameModel,
        expected_moves: Optional[list[str]] = None,
    ) -> GameModel | None:
        row = self._fetch_row(game_id, for_update=expected_moves is not None)
        if row is None:
            return None
        if expected_moves is not None and list(row.moves_uci) != list(expected_moves):
            self.db.rollback()
            raise GameStateError(
                f"Game {game_id} changed in the meantime ({len(row.moves_uci)} moves stored, "
                f"expected {len(expected_moves)}). Reload it and try again."
            )
        for column, value in self._column_values(game).items():
            setattr(row, column, value)
        self.db.commit()
        self.db.refresh(row)
        return self._to_model(row)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        row = self._fetch_row(game_id)
        if row is None:
            return None
        removed = self._to_model(row)
        self.db.delete(row)
        self.db.commit()
        return removed

    def _fetch_row(self, game_id: UUID, for_update: bool = False) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        if for_update:
            # fresh values (not whatever the session loaded earlier), and a row lock on backends that have one
            query = query.with_for_update().execution_options(populate_existing=True)
        return self.db.scalar(query)

    @staticmethod
    def _column_values(game: GameModel) -> dict[str, object]:
        """
        NOTE `asdict` copies the move list. A JSON column does not notice in-place changes to a list it already holds,
        so it always gets a new one.
        """
        return asdict(game)

    @staticmethod
    def _to_model(row: DBGame) -> GameModel:
        values = {name: getattr(row, name) for name in STORED_FIELDS}
        values["moves_uci"] = list(values["moves_uci"])
        return GameModel(**values)
