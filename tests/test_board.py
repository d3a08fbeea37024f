import pytest

from endgamekit.bitboard import (
    BISHOP,
    BLACK,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    RANK_1_BB,
    RANK_2_BB,
    RANK_7_BB,
    RANK_8_BB,
    ROOK,
    WHITE,
    Square,
    popcount,
)
from endgamekit.board import (
    BISHOP_VALUE_MG,
    KNIGHT_VALUE_MG,
    QUEEN_VALUE_MG,
    ROOK_VALUE_MG,
    Board,
    Piece,
)

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@pytest.fixture
def start():
    return Board.from_fen(START)


def test_start_position_pawns_and_occupancy(start):
    assert start.pieces(WHITE, PAWN) == RANK_2_BB
    assert start.pieces(BLACK, PAWN) == RANK_7_BB
    assert start.occupied() == RANK_1_BB | RANK_2_BB | RANK_7_BB | RANK_8_BB
    assert start.pieces_of_color(WHITE) == RANK_1_BB | RANK_2_BB
    assert start.pieces_of_type(PAWN) == RANK_2_BB | RANK_7_BB


def test_start_position_kings_and_pieces(start):
    assert start.square_of(WHITE, KING) == Square.E1
    assert start.square_of(BLACK, KING) == Square.E8
    assert start.piece_on(Square.D1) == Piece(WHITE, QUEEN)
    assert start.piece_on(Square.G8) == Piece(BLACK, KNIGHT)
    assert start.piece_on(Square.E4) is None
    assert start.side_to_move == WHITE


def test_start_position_material(start):
    expected = 2 * KNIGHT_VALUE_MG + 2 * BISHOP_VALUE_MG + 2 * ROOK_VALUE_MG + QUEEN_VALUE_MG
    assert start.non_pawn_material(WHITE) == expected
    assert start.non_pawn_material(BLACK) == expected
    assert start.piece_count(WHITE, BISHOP) == start.piece_count(BLACK, BISHOP)


def test_piece_counts_match_bitboards(start):
    for color in (WHITE, BLACK):
        total = sum(start.piece_count(color, pt) for pt in (PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING))
        assert total == popcount(start.pieces_of_color(color))


def test_material_signature_uses_endgame_codes():
    board = Board.from_fen("8/8/8/4k3/8/4P3/8/R3K2r w - - 0 1")
    assert board.material_signature(WHITE) == "KRPkr"
    assert board.material_signature(BLACK) == "KRkrp"


def test_passed_pawn():
    board = Board.from_fen("4k3/8/8/3p4/8/8/2P4P/4K3 w - - 0 1")
    assert board.is_passed_pawn(WHITE, Square.H2)
    assert not board.is_passed_pawn(WHITE, Square.C2)
    assert not board.is_passed_pawn(BLACK, Square.D5)


def test_is_attacked_by_sliders_and_pawns():
    board = Board.from_fen("4k3/8/8/8/8/8/3p4/R3K3 w - - 0 1")
    assert board.is_attacked(Square.A8, WHITE)
    assert board.is_attacked(Square.E1, BLACK)
    assert not board.is_attacked(Square.H8, WHITE)


def test_stalemated_king_has_no_move():
    board = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert not board.has_legal_king_move(BLACK)
    assert board.has_legal_king_move(WHITE)
    assert board.side_to_move == BLACK


def test_fen_without_side_defaults_to_white():
    assert Board.from_fen("4k3/8/8/8/8/8/8/4K3").side_to_move == WHITE


def test_boards_with_same_fen_are_equal(start):
    assert Board.from_fen(START) == start
    assert Board.from_fen(START.replace(" w ", " b ")) != start


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "8/8/8/8/8/8/8 w",
        "4k3/8/8/8/8/8/8/4K2 w",
        "4k3/8/8/8/8/8/8/4K3X w",
        "8/8/8/8/8/8/8/4K3 w",
        "4k3/8/8/8/8/8/8/4K3 x",
        "P3k3/8/8/8/8/8/8/4K3 w",
        "4k3/8/8/8/8/8/8/4K4 w",
    ],
)
def test_bad_fen_raises(fen):
    with pytest.raises(ValueError):
        Board.from_fen(fen)


def test_square_of_missing_piece_raises(start):
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    with pytest.raises(ValueError):
        board.square_of(WHITE, QUEEN)
    assert start.square_of(WHITE, QUEEN) == Square.D1