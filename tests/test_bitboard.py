import random

import pytest

from endgamekit import bitboard as bb
from endgamekit.bitboard import (
    BISHOP,
    BISHOP_DIRECTIONS,
    BLACK,
    KING,
    KNIGHT,
    MASK64,
    PAWN,
    QUEEN,
    ROOK,
    ROOK_DIRECTIONS,
    WHITE,
    Square,
)


def _flip(b):
    """Mirror a bitboard vertically."""
    result = 0
    for s in bb.iter_squares(b):
        result |= 1 << (s ^ 56)
    return result


def _random_boards(n, seed=7):
    rng = random.Random(seed)
    return [rng.getrandbits(64) & rng.getrandbits(64) for _ in range(n)]


def test_square_roundtrip():
    for s in range(64):
        assert bb.make_square(bb.file_of(s), bb.rank_of(s)) == s


def test_square_enum_names():
    assert Square.A1 == 0
    assert Square.H8 == 63
    assert bb.file_of(Square.E4) == bb.FILE_E
    assert bb.rank_of(Square.E4) == bb.RANK_4


def test_sq_bb_out_of_range():
    with pytest.raises(ValueError):
        bb.sq_bb(64)
    with pytest.raises(ValueError):
        bb.sq_bb(-1)


def test_relative_square_and_rank():
    for s in range(64):
        assert bb.relative_square(WHITE, s) == s
        assert bb.relative_square(BLACK, bb.relative_square(BLACK, s)) == s
        assert bb.relative_rank(WHITE, s) == bb.rank_of(s)
        assert bb.relative_rank(BLACK, s) == 7 - bb.rank_of(s)


def test_opposite_colors_matches_dark_squares():
    for s1 in range(64):
        for s2 in range(64):
            same = bool(bb.DARK_SQUARES >> s1 & 1) == bool(bb.DARK_SQUARES >> s2 & 1)
            assert bb.opposite_colors(s1, s2) == (not same)
    assert not bb.opposite_colors(Square.A1, Square.H8)


def test_color_opponent():
    assert WHITE.opponent == BLACK
    assert BLACK.opponent == WHITE
    assert bb.relative_rank(WHITE.opponent, Square.A1) == 7
    assert bb.relative_square(BLACK.opponent, Square.C2) == Square.C2


def test_lsb_msb_single_bits():
    for s in range(64):
        assert bb.lsb(bb.sq_bb(s)) == s
        assert bb.msb(bb.sq_bb(s)) == s


def test_lsb_msb_empty_raise():
    with pytest.raises(ValueError):
        bb.lsb(0)
    with pytest.raises(ValueError):
        bb.msb(0)


def test_iter_squares_roundtrip():
    for b in _random_boards(50):
        squares = list(bb.iter_squares(b))
        assert squares == sorted(squares)
        assert len(squares) == bb.popcount(b)
        rebuilt = 0
        for s in squares:
            rebuilt |= bb.sq_bb(s)
        assert rebuilt == b
        if b:
            assert squares[0] == bb.lsb(b)
            assert squares[-1] == bb.msb(b)


def test_more_than_one():
    assert not bb.more_than_one(0)
    assert not bb.more_than_one(bb.sq_bb(Square.D4))
    assert bb.more_than_one(bb.sq_bb(Square.D4) | bb.sq_bb(Square.H8))


def test_frontmost_backmost():
    b = bb.sq_bb(Square.B2) | bb.sq_bb(Square.G6)
    assert bb.frontmost_sq(WHITE, b) == Square.G6
    assert bb.frontmost_sq(BLACK, b) == Square.B2
    assert bb.backmost_sq(WHITE, b) == Square.B2
    assert bb.backmost_sq(BLACK, b) == Square.G6


def test_pext_invariants():
    for mask in _random_boards(30, seed=3):
        n = bb.popcount(mask)
        assert bb.pext(mask, mask) == (1 << n) - 1
        assert bb.pext(0, mask) == 0
        assert bb.pext(MASK64, mask) == (1 << n) - 1


def test_shift_bb_edges():
    assert bb.shift_bb(bb.NORTH, bb.RANK_8_BB) == 0
    assert bb.shift_bb(bb.SOUTH, bb.RANK_1_BB) == 0
    assert bb.shift_bb(bb.EAST, bb.FILE_H_BB) == 0
    assert bb.shift_bb(bb.WEST, bb.FILE_A_BB) == 0
    assert bb.shift_bb(bb.EAST, bb.FILE_A_BB) == bb.FILE_B_BB
    assert bb.shift_bb(bb.NORTH, bb.RANK_1_BB) == bb.RANK_2_BB
    assert bb.shift_bb(bb.NORTH + bb.NORTH, bb.RANK_2_BB) == bb.RANK_4_BB


def test_shift_bb_unknown_direction():
    assert bb.shift_bb(3, bb.ALL_SQUARES) == 0


def test_shift_roundtrip_interior():
    for b in _random_boards(20, seed=11):
        inner = b & ~(bb.FILE_A_BB | bb.FILE_H_BB | bb.RANK_1_BB | bb.RANK_8_BB)
        for d in (bb.NORTH_EAST, bb.NORTH_WEST, bb.EAST, bb.NORTH):
            assert bb.shift_bb(-d, bb.shift_bb(d, inner)) == inner


def test_pawn_attacks_table_matches_bulk():
    for c in (WHITE, BLACK):
        for s in range(64):
            assert bb.pawn_attacks(c, s) == bb.pawn_attacks_bb(bb.sq_bb(s), c)


def test_pawn_attacks_mirror():
    for s in range(64):
        assert bb.pawn_attacks(BLACK, s ^ 56) == _flip(bb.pawn_attacks(WHITE, s))


def test_pawn_double_attacks_subset():
    for b in _random_boards(20, seed=5):
        for c in (WHITE, BLACK):
            assert bb.pawn_double_attacks_bb(b, c) & ~bb.pawn_attacks_bb(b, c) == 0


def test_file_and_rank_partition():
    files = 0
    ranks = 0
    for i in range(8):
        assert files & bb.file_bb(i) == 0
        assert ranks & bb.rank_bb(i) == 0
        files |= bb.file_bb(i)
        ranks |= bb.rank_bb(i)
    assert files == MASK64
    assert ranks == MASK64


def test_adjacent_files():
    assert bb.adjacent_files_bb(bb.FILE_A) == bb.FILE_B_BB
    assert bb.adjacent_files_bb(bb.FILE_H) == bb.FILE_G_BB
    assert bb.adjacent_files_bb(bb.FILE_D) == bb.FILE_C_BB | bb.FILE_E_BB


def test_forward_ranks_documented_example():
    assert bb.forward_ranks_bb(BLACK, bb.RANK_3) == bb.RANK_1_BB | bb.RANK_2_BB


def test_forward_ranks_partition():
    for r in range(8):
        w = bb.forward_ranks_bb(WHITE, r)
        b = bb.forward_ranks_bb(BLACK, r)
        assert w & b == 0
        assert (w | b | bb.rank_bb(r)) == MASK64


def test_spans_consistent():
    for c in (WHITE, BLACK):
        for s in range(64):
            ff = bb.forward_file_bb(c, s)
            assert ff == bb.forward_ranks_bb(c, bb.rank_of(s)) & bb.file_bb(bb.file_of(s))
            assert bb.passed_pawn_span(c, s) == ff | bb.pawn_attack_span(c, s)
            assert bb.pawn_attack_span(c, s) & bb.file_bb(bb.file_of(s)) == 0


def test_distance_properties():
    for s1 in range(64):
        assert bb.distance(s1, s1) == 0
        for s2 in range(64):
            assert bb.distance(s1, s2) == bb.distance(s2, s1)
            assert bb.distance(s1, s2) == max(
                bb.distance_file(s1, s2), bb.distance_rank(s1, s2)
            )


def test_rook_attacks_empty_board_are_file_and_rank():
    for s in range(64):
        expected = (bb.file_bb(bb.file_of(s)) | bb.rank_bb(bb.rank_of(s))) ^ bb.sq_bb(s)
        assert bb.rook_attacks(s, 0) == expected
        assert bb.pseudo_attacks(ROOK, s) == expected


def test_rook_attacks_stop_at_blocker():
    occ = bb.sq_bb(Square.A3)
    att = bb.rook_attacks(Square.A1, occ)
    expected = (
        bb.sq_bb(Square.A2)
        | bb.sq_bb(Square.A3)
        | (bb.RANK_1_BB & ~bb.sq_bb(Square.A1))
    )
    assert att == expected
    assert att & bb.sq_bb(Square.A4) == 0


def test_slider_tables_match_sliding_attack():
    rng = random.Random(42)
    for _ in range(300):
        s = rng.randrange(64)
        occ = rng.getrandbits(64) & rng.getrandbits(64)
        assert bb.rook_attacks(s, occ) == bb.sliding_attack(ROOK_DIRECTIONS, s, occ)
        assert bb.bishop_attacks(s, occ) == bb.sliding_attack(BISHOP_DIRECTIONS, s, occ)
        assert bb.queen_attacks(s, occ) == bb.rook_attacks(s, occ) | bb.bishop_attacks(s, occ)


def test_attacks_bb_dispatch():
    occ = bb.sq_bb(Square.D6) | bb.sq_bb(Square.F4)
    s = Square.D4
    assert bb.attacks_bb(BISHOP, s, occ) == bb.bishop_attacks(s, occ)
    assert bb.attacks_bb(ROOK, s, occ) == bb.rook_attacks(s, occ)
    assert bb.attacks_bb(QUEEN, s, occ) == bb.queen_attacks(s, occ)
    assert bb.attacks_bb(KNIGHT, s, occ) == bb.pseudo_attacks(KNIGHT, s)
    assert bb.attacks_bb(KING, s, occ) == bb.pseudo_attacks(KING, s)


def test_attacks_bb_rejects_pawn():
    with pytest.raises(ValueError):
        bb.attacks_bb(PAWN, Square.E2, 0)


def test_king_attacks_are_distance_one():
    for s in range(64):
        expected = 0
        for t in range(64):
            if bb.distance(s, t) == 1:
                expected |= bb.sq_bb(t)
        assert bb.pseudo_attacks(KING, s) == expected


def test_knight_attacks_symmetric_and_color_flip():
    for s1 in range(64):
        assert bb.sq_bb(s1) & bb.pseudo_attacks(KNIGHT, s1) == 0
        for s2 in bb.iter_squares(bb.pseudo_attacks(KNIGHT, s1)):
            assert bb.pseudo_attacks(KNIGHT, s2) & bb.sq_bb(s1)
            assert not bb.opposite_colors(s1, s2) is False


def test_between_documented_example():
    assert bb.between_bb(Square.C4, Square.F7) == (
        bb.sq_bb(Square.D5) | bb.sq_bb(Square.E6) | bb.sq_bb(Square.F7)
    )


def test_between_not_aligned_is_target_only():
    assert bb.between_bb(Square.A1, Square.B3) == bb.sq_bb(Square.B3)
    assert bb.line_bb(Square.A1, Square.B3) == 0


def test_line_properties():
    for s1 in range(64):
        for s2 in range(64):
            line = bb.line_bb(s1, s2)
            assert line == bb.line_bb(s2, s1)
            if line:
                assert line & bb.sq_bb(s1)
                assert line & bb.sq_bb(s2)
                assert bb.between_bb(s1, s2) & ~line == 0
                assert bb.queen_attacks(s1, 0) & bb.sq_bb(s2)


def test_line_of_diagonal():
    diag = 0
    for i in range(8):
        diag |= bb.sq_bb(bb.make_square(i, i))
    assert bb.line_bb(Square.B2, Square.G7) == diag


def test_pretty_layout():
    b = bb.sq_bb(Square.A1) | bb.sq_bb(Square.H8)
    text = bb.pretty(b)
    lines = text.splitlines()
    assert lines[0] == "+---+---+---+---+---+---+---+---+"
    assert lines[-1] == "  a   b   c   d   e   f   g   h"
    assert text.count("X") == bb.popcount(b)
    assert lines[1].endswith("| X | 8")
    assert lines[15].startswith("| X |")
    assert lines[15].endswith("| 1")


def test_light_and_dark_cover_board():
    assert bb.LIGHT_SQUARES & bb.DARK_SQUARES == 0
    assert bb.LIGHT_SQUARES | bb.DARK_SQUARES == bb.ALL_SQUARES
    assert bb.popcount(bb.DARK_SQUARES) == 32
    assert bb.popcount(bb.LIGHT_SQUARES) == 32
    assert bb.DARK_SQUARES & bb.sq_bb(Square.A1) == bb.sq_bb(Square.A1)
    assert bb.LIGHT_SQUARES & bb.sq_bb(Square.A1) == 0