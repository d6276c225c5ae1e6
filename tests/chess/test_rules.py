"""Unit tests for /src/chess/rules.py"""

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingRights, CastlingSide
from src.chess.pieces import Color, Piece, PieceType
from src.chess.rules import (
    KNIGHT_DELTAS,
    MOVEMENT_RULES,
    can_castle,
    has_valid_moves,
    is_in_check,
    is_legal_move,
    is_square_attacked,
    legal_targets,
    pseudo_legal_moves,
    squares_between,
)
from src.chess.square import Square
from src.core.exceptions import MissingKingError

CASTLING_FEN = "r3k2r/8/8/8/8/8/8/R3K2R"


def sq(name: str) -> Square:
    """Shorthand to keep test cases readable"""
    return Square.from_algebraic(name)


@pytest.fixture
def castling_board() -> Board:
    """Only the Kings and the Rooks, ready to castle on both sides."""
    return Board.from_fen(CASTLING_FEN)


def test_every_piece_type_has_a_rule() -> None:
    assert set(MOVEMENT_RULES) == {
        piece_type for piece_type in PieceType if piece_type != PieceType.EMPTY
    }


# --- GENERAL ---
def test_never_land_on_own_piece(starting_board: Board) -> None:
    """Whatever the piece, a square held by the same color is never a legal destination"""
    for color in (Color.WHITE, Color.BLACK):
        own_squares = starting_board.locate_color(color)
        for from_square in own_squares:
            for to_square in own_squares:
                assert not is_legal_move(
                    starting_board, from_square, to_square, color, CastlingRights()
                )


def test_only_the_side_to_move_can_move(starting_board: Board) -> None:
    assert is_legal_move(starting_board, sq("e2"), sq("e4"), Color.WHITE)
    assert not is_legal_move(starting_board, sq("e2"), sq("e4"), Color.BLACK)
    assert not is_legal_move(starting_board, sq("e7"), sq("e5"), Color.WHITE)


def test_empty_square_cannot_move(starting_board: Board) -> None:
    assert not is_legal_move(starting_board, sq("e4"), sq("e5"), Color.WHITE)


def test_out_of_bounds(starting_board: Board) -> None:
    assert not is_legal_move(starting_board, sq("e2"), Square(-1, 4), Color.WHITE)
    assert not is_legal_move(starting_board, Square(8, 4), sq("e4"), Color.WHITE)


# --- PATH CLEARANCE ---
@pytest.mark.parametrize(
    "from_name, to_name, between",
    [
        ("a1", "a4", ["a2", "a3"]),
        ("a1", "d4", ["b2", "c3"]),
        ("h8", "e8", ["g8", "f8"]),
        ("a1", "a2", []),
        ("a1", "b3", []),
    ],
)
def test_squares_between(from_name: str, to_name: str, between: list[str]) -> None:
    assert squares_between(sq(from_name), sq(to_name)) == [sq(name) for name in between]


@pytest.mark.parametrize("distance", range(2, 8))
@pytest.mark.parametrize(
    "piece_type, direction",
    [
        (PieceType.ROOK, (-1, 0)),
        (PieceType.BISHOP, (-1, 1)),
        (PieceType.QUEEN, (-1, 0)),
        (PieceType.QUEEN, (-1, 1)),
    ],
)
def test_sliding_pieces_are_blocked(
    empty_board: Board, piece_type: PieceType, direction: tuple[int, int], distance: int
) -> None:
    """A blocker right in front stops every slide of length 2 or more. Without it, the slide is fine."""
    from_square = sq("a1")
    to_square = from_square.offset(direction[0] * distance, direction[1] * distance)
    empty_board.place_piece(Piece(piece_type, Color.WHITE), from_square)
    assert is_legal_move(empty_board, from_square, to_square, Color.WHITE)

    blocker = from_square.offset(*direction)
    empty_board.place_piece(Piece(PieceType.PAWN, Color.BLACK), blocker)
    assert not is_legal_move(empty_board, from_square, to_square, Color.WHITE)
    # ...but the blocker itself can be taken
    assert is_legal_move(empty_board, from_square, blocker, Color.WHITE)


# --- PIECE GEOMETRY ---
def test_knight_targets(empty_board: Board) -> None:
    """Exactly the eight (1, 2) / (2, 1) offsets"""
    d4 = sq("d4")
    empty_board.place_piece(Piece(PieceType.KNIGHT, Color.WHITE), d4)
    targets = legal_targets(empty_board, d4, Color.WHITE)
    assert {(t.row - d4.row, t.col - d4.col) for t in targets} == KNIGHT_DELTAS
    assert len(targets) == 8


def test_knight_jumps_over_pieces(starting_board: Board) -> None:
    assert set(legal_targets(starting_board, sq("b1"), Color.WHITE)) == {sq("a3"), sq("c3")}


def test_knight_in_the_corner(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.KNIGHT, Color.BLACK), sq("h8"))
    assert set(legal_targets(empty_board, sq("h8"), Color.BLACK)) == {sq("g6"), sq("f7")}


def test_rook_geometry(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.ROOK, Color.WHITE), sq("d4"))
    targets = legal_targets(empty_board, sq("d4"), Color.WHITE)
    assert len(targets) == 14
    assert all(t.row == sq("d4").row or t.col == sq("d4").col for t in targets)


def test_bishop_geometry(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.BISHOP, Color.WHITE), sq("d4"))
    targets = legal_targets(empty_board, sq("d4"), Color.WHITE)
    assert len(targets) == 13
    assert all(abs(t.row - sq("d4").row) == abs(t.col - sq("d4").col) for t in targets)


def test_queen_geometry(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.QUEEN, Color.WHITE), sq("d4"))
    assert len(legal_targets(empty_board, sq("d4"), Color.WHITE)) == 27


def test_king_geometry(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.KING, Color.WHITE), sq("d4"))
    targets = legal_targets(empty_board, sq("d4"), Color.WHITE)
    assert len(targets) == 8
    assert not is_legal_move(empty_board, sq("d4"), sq("d6"), Color.WHITE)


# --- PAWNS ---
@pytest.mark.parametrize(
    "from_name, to_name, color, expected",
    [
        ("e2", "e3", Color.WHITE, True),
        ("e2", "e4", Color.WHITE, True),
        ("e2", "e5", Color.WHITE, False),
        ("e2", "e1", Color.WHITE, False),
        ("e2", "d3", Color.WHITE, False),
        ("e2", "f2", Color.WHITE, False),
        ("e7", "e6", Color.BLACK, True),
        ("e7", "e5", Color.BLACK, True),
        ("e7", "e8", Color.BLACK, False),
        ("e7", "e4", Color.BLACK, False),
    ],
)
def test_pawn_pushes(
    starting_board: Board, from_name: str, to_name: str, color: Color, expected: bool
) -> None:
    """White pawns go up the board (towards rank 8), black pawns go down"""
    assert is_legal_move(starting_board, sq(from_name), sq(to_name), color) == expected


def test_pawn_double_push_only_from_start(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.PAWN, Color.WHITE), sq("e3"))
    assert is_legal_move(empty_board, sq("e3"), sq("e4"), Color.WHITE)
    assert not is_legal_move(empty_board, sq("e3"), sq("e5"), Color.WHITE)


def test_pawn_blocked(starting_board: Board) -> None:
    # a piece right in front blocks both the single and the double push
    starting_board.place_piece(Piece(PieceType.KNIGHT, Color.BLACK), sq("e3"))
    assert not is_legal_move(starting_board, sq("e2"), sq("e3"), Color.WHITE)
    assert not is_legal_move(starting_board, sq("e2"), sq("e4"), Color.WHITE)

    # a piece on the landing square of the double push only blocks that one
    starting_board.place_piece(Piece(PieceType.KNIGHT, Color.BLACK), sq("d4"))
    assert is_legal_move(starting_board, sq("d2"), sq("d3"), Color.WHITE)
    assert not is_legal_move(starting_board, sq("d2"), sq("d4"), Color.WHITE)


def test_pawn_captures_diagonally(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.PAWN, Color.WHITE), sq("d4"))
    empty_board.place_piece(Piece(PieceType.ROOK, Color.BLACK), sq("e5"))
    empty_board.place_piece(Piece(PieceType.ROOK, Color.BLACK), sq("d5"))

    assert is_legal_move(empty_board, sq("d4"), sq("e5"), Color.WHITE)
    # nothing to take on c5, and pawns cannot take straight ahead
    assert not is_legal_move(empty_board, sq("d4"), sq("c5"), Color.WHITE)
    assert not is_legal_move(empty_board, sq("d4"), sq("d5"), Color.WHITE)
    # never backwards, not even to capture
    empty_board.place_piece(Piece(PieceType.ROOK, Color.BLACK), sq("c3"))
    assert not is_legal_move(empty_board, sq("d4"), sq("c3"), Color.WHITE)


# --- CASTLING ---
@pytest.mark.parametrize(
    "color, king_to",
    [
        (Color.WHITE, "g1"),
        (Color.WHITE, "c1"),
        (Color.BLACK, "g8"),
        (Color.BLACK, "c8"),
    ],
)
def test_castling_allowed(castling_board: Board, color: Color, king_to: str) -> None:
    king_from = "e1" if color == Color.WHITE else "e8"
    assert is_legal_move(
        castling_board, sq(king_from), sq(king_to), color, CastlingRights()
    )


def test_castling_never_legal_without_rights(castling_board: Board) -> None:
    assert not is_legal_move(castling_board, sq("e1"), sq("g1"), Color.WHITE)
    assert not is_legal_move(castling_board, sq("e1"), sq("g1"), Color.WHITE, None)


def test_castling_after_king_or_rook_moved(castling_board: Board) -> None:
    king_moved = CastlingRights().with_king_moved(Color.WHITE)
    assert not is_legal_move(castling_board, sq("e1"), sq("g1"), Color.WHITE, king_moved)
    assert not is_legal_move(castling_board, sq("e1"), sq("c1"), Color.WHITE, king_moved)

    rook_moved = CastlingRights().with_rook_moved(Color.WHITE, CastlingSide.KING_SIDE)
    assert not is_legal_move(castling_board, sq("e1"), sq("g1"), Color.WHITE, rook_moved)
    assert is_legal_move(castling_board, sq("e1"), sq("c1"), Color.WHITE, rook_moved)


def test_castling_path_must_be_empty(castling_board: Board) -> None:
    """All squares between king and rook count, including b1 for the queen side"""
    castling_board.place_piece(Piece(PieceType.KNIGHT, Color.WHITE), sq("b1"))
    assert not can_castle(castling_board, Color.WHITE, CastlingSide.QUEEN_SIDE, CastlingRights())
    assert can_castle(castling_board, Color.WHITE, CastlingSide.KING_SIDE, CastlingRights())

    castling_board.place_piece(Piece(PieceType.BISHOP, Color.BLACK), sq("f1"))
    assert not can_castle(castling_board, Color.WHITE, CastlingSide.KING_SIDE, CastlingRights())


def test_castling_requires_rook_in_corner(castling_board: Board) -> None:
    castling_board.remove_piece(sq("h8"))
    assert not can_castle(castling_board, Color.BLACK, CastlingSide.KING_SIDE, CastlingRights())

    castling_board.place_piece(Piece(PieceType.ROOK, Color.WHITE), sq("h8"))
    assert not can_castle(castling_board, Color.BLACK, CastlingSide.KING_SIDE, CastlingRights())


def test_castling_ignores_attacks(castling_board: Board) -> None:
    """Being in check, or passing over an attacked square, does not stop castling"""
    # black rook attacking f1, the square the king passes over
    castling_board.place_piece(Piece(PieceType.ROOK, Color.BLACK), sq("f5"))
    # black queen giving check along the e-file
    castling_board.place_piece(Piece(PieceType.QUEEN, Color.BLACK), sq("e4"))
    assert is_in_check(castling_board, Color.WHITE)
    assert is_square_attacked(castling_board, sq("f1"), Color.WHITE)
    assert is_legal_move(castling_board, sq("e1"), sq("g1"), Color.WHITE, CastlingRights())


def test_castling_requires_king_on_home_square(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.KING, Color.WHITE), sq("d1"))
    empty_board.place_piece(Piece(PieceType.ROOK, Color.WHITE), sq("h1"))
    assert not is_legal_move(empty_board, sq("d1"), sq("f1"), Color.WHITE, CastlingRights())


# --- MOVE GENERATION ---
def test_moves_from_starting_position(starting_board: Board) -> None:
    """16 pawn moves and 4 knight moves for either side"""
    for color in (Color.WHITE, Color.BLACK):
        moves = list(pseudo_legal_moves(starting_board, color, CastlingRights()))
        assert len(moves) == 20
        assert all(move.piece.color == color for move in moves)
        assert has_valid_moves(starting_board, color)


def test_no_moves_on_empty_side(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.KING, Color.WHITE), sq("e1"))
    assert list(pseudo_legal_moves(empty_board, Color.BLACK)) == []
    assert not has_valid_moves(empty_board, Color.BLACK)
    assert has_valid_moves(empty_board, Color.WHITE)


def test_legal_targets_of_opponent_piece(starting_board: Board) -> None:
    assert legal_targets(starting_board, sq("e7"), Color.WHITE) == []


def test_generated_moves_are_legal(castling_board: Board) -> None:
    rights = CastlingRights()
    for move in pseudo_legal_moves(castling_board, Color.WHITE, rights):
        assert is_legal_move(castling_board, move.from_square, move.to_square, Color.WHITE, rights)
    king_moves = {
        move.to_square
        for move in pseudo_legal_moves(castling_board, Color.WHITE, rights)
        if move.piece.type == PieceType.KING
    }
    assert {sq("g1"), sq("c1")} <= king_moves


# --- ATTACKS ---
def test_square_attacked(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.ROOK, Color.WHITE), sq("a1"))
    assert is_square_attacked(empty_board, sq("a8"), Color.BLACK)
    assert is_square_attacked(empty_board, sq("h1"), Color.BLACK)
    assert not is_square_attacked(empty_board, sq("b2"), Color.BLACK)

    # a piece in between shields the square
    empty_board.place_piece(Piece(PieceType.PAWN, Color.BLACK), sq("a5"))
    assert not is_square_attacked(empty_board, sq("a8"), Color.BLACK)


def test_pawn_attacks_occupied_square(empty_board: Board) -> None:
    empty_board.place_piece(Piece(PieceType.PAWN, Color.WHITE), sq("d7"))
    empty_board.place_piece(Piece(PieceType.KING, Color.BLACK), sq("e8"))
    assert is_square_attacked(empty_board, sq("e8"), Color.BLACK)
    assert is_in_check(empty_board, Color.BLACK)


def test_not_in_check_at_start(starting_board: Board) -> None:
    assert not is_in_check(starting_board, Color.WHITE)
    assert not is_in_check(starting_board, Color.BLACK)


def test_in_check_without_king(empty_board: Board) -> None:
    with pytest.raises(MissingKingError):
        is_in_check(empty_board, Color.WHITE)
