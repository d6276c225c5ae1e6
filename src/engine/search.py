"""
Move selection for the computer-controlled side.

Iterative deepening over a minimax search with alpha-beta pruning:

* depth 1, 2, ... up to the configured depth. Every iteration re-orders the root moves and searches only the
  `root_breadth` most promising ones.
* The wall-clock deadline is checked before every iteration and before every root move, never deeper in the tree.
  Running out of time aborts the iteration in progress; the answer of the last completed iteration is kept.
* The search only ever works on copies of the board it was given.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from src.chess.board import Board
from src.chess.castling import CastlingRights
from src.chess.moves import Move, apply_move, update_castling_rights
from src.chess.pieces import Color
from src.chess.rules import pseudo_legal_moves
from src.engine.config import SearchConfig
from src.engine.evaluation import evaluate_board, order_moves

logger = logging.getLogger(__name__)


class SearchTimeout(Exception):
    """The time budget ran out halfway through an iteration. Caught by the iterative deepening loop."""


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[float]
    # deepest iteration that ran to completion (0: none did)
    depth: int
    nodes: int
    time_ms: int
    timed_out: bool


@dataclass
class _SearchState:
    maximizing_color: Color
    deadline: float
    nodes: int = 0

    def check_time(self) -> None:
        if time.monotonic() > self.deadline:
            raise SearchTimeout

    def color_to_move(self, maximizing: bool) -> Color:
        return self.maximizing_color if maximizing else self.maximizing_color.opponent


def find_best_move(
    board: Board,
    side_to_move: Color = Color.BLACK,
    config: SearchConfig = SearchConfig(),
    castling_rights: Optional[CastlingRights] = None,
) -> Optional[Move]:
    """None only if `side_to_move` has no move at all (the caller should treat that as the end of the game)."""
    return search(board, side_to_move, config, castling_rights).best_move


def search(
    board: Board,
    side_to_move: Color,
    config: SearchConfig = SearchConfig(),
    castling_rights: Optional[CastlingRights] = None,
) -> SearchResult:
    """
    Iterative deepening
    ----

    The side to move is the maximizing side for the whole search.
    If not even the first iteration finishes in time, fall back to the best-ordered root move.
    """
    start = time.monotonic()
    state = _SearchState(
        maximizing_color=side_to_move, deadline=start + config.time_limit_s
    )

    root_moves = _ordered_moves(board, side_to_move, castling_rights)
    if not root_moves:
        logger.info("No moves available for %s", side_to_move.name.lower())
        return SearchResult(None, None, 0, 0, _elapsed_ms(start), timed_out=False)

    best_move: Optional[Move] = None
    best_score: Optional[float] = None
    completed_depth = 0
    timed_out = False

    for depth in range(1, config.depth + 1):
        if time.monotonic() > state.deadline:
            timed_out = True
            break
        try:
            move, score = _search_root(board, castling_rights, depth, config, state)
        except SearchTimeout:
            timed_out = True
            logger.debug("Iteration at depth %d aborted: out of time", depth)
            break

        best_move, best_score, completed_depth = move, score, depth
        logger.debug(
            "depth %d: best %s score %s nodes %d",
            depth,
            move.to_uci() if move else None,
            score,
            state.nodes,
        )

    if best_move is None:
        logger.warning(
            "No iteration completed within %d ms. Playing the best-ordered move instead.",
            config.time_limit_ms,
        )
        best_move = root_moves[0]

    result = SearchResult(
        best_move=best_move,
        score=best_score,
        depth=completed_depth,
        nodes=state.nodes,
        time_ms=_elapsed_ms(start),
        timed_out=timed_out,
    )
    logger.info(
        "Search for %s picked %s (depth %d, %d nodes, %d ms)",
        side_to_move.name.lower(),
        best_move.to_uci(),
        result.depth,
        result.nodes,
        result.time_ms,
    )
    return result


def _search_root(
    board: Board,
    castling_rights: Optional[CastlingRights],
    depth: int,
    config: SearchConfig,
    state: _SearchState,
) -> tuple[Optional[Move], float]:
    """One iteration: only the `root_breadth` most promising moves get a full search."""
    candidates = _ordered_moves(board, state.maximizing_color, castling_rights)[
        : config.root_breadth
    ]

    best_move: Optional[Move] = None
    best_score = -math.inf
    for move in candidates:
        state.check_time()
        child_board, child_rights = _play(board, move, castling_rights)
        score = _minimax(
            child_board, child_rights, depth - 1, False, -math.inf, math.inf, state
        )
        if score > best_score:
            best_score = score
            best_move = move
    return best_move, best_score


def _minimax(
    board: Board,
    castling_rights: Optional[CastlingRights],
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
    state: _SearchState,
) -> float:
    """
    Minimax with alpha-beta pruning
    ----

    alpha: the score the maximizer is already guaranteed, beta: the score the minimizer is already guaranteed.
    As soon as beta <= alpha the remaining siblings cannot change the outcome.
    """
    state.nodes += 1
    if depth == 0:
        return evaluate_board(board, state.maximizing_color)

    moves = _ordered_moves(board, state.color_to_move(maximizing), castling_rights)
    if not moves:
        return evaluate_board(board, state.maximizing_color)

    if maximizing:
        value = -math.inf
        for move in moves:
            child_board, child_rights = _play(board, move, castling_rights)
            value = max(
                value,
                _minimax(child_board, child_rights, depth - 1, False, alpha, beta, state),
            )
            alpha = max(alpha, value)
            if beta <= alpha:
                break
        return value

    value = math.inf
    for move in moves:
        child_board, child_rights = _play(board, move, castling_rights)
        value = min(
            value,
            _minimax(child_board, child_rights, depth - 1, True, alpha, beta, state),
        )
        beta = min(beta, value)
        if beta <= alpha:
            break
    return value


def _ordered_moves(
    board: Board, color: Color, castling_rights: Optional[CastlingRights]
) -> list[Move]:
    return order_moves(list(pseudo_legal_moves(board, color, castling_rights)))


def _play(
    board: Board, move: Move, castling_rights: Optional[CastlingRights]
) -> tuple[Board, Optional[CastlingRights]]:
    """Scratch copy of the board after the move (castling rights follow along, when tracked)."""
    new_board = apply_move(board, move)
    if castling_rights is None:
        return new_board, None
    return new_board, update_castling_rights(castling_rights, move)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
