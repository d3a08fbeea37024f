import pytest

from endgamekit.bitbase import MAX_INDEX, bitbase_index, build_table, probe
from endgamekit.bitboard import BLACK, WHITE, Square


def test_index_of_a7_pawn_with_kings_on_a1_is_zero():
    assert bitbase_index(WHITE, Square.A1, Square.A1, Square.A7) == 0


@pytest.mark.parametrize(
    "us,bksq,wksq,psq",
    [
        (WHITE, Square.E8, Square.E1, Square.D2),
        (BLACK, Square.H8, Square.A1, Square.A7),
        (BLACK, Square.C3, Square.G6, Square.B4),
    ],
)
def test_index_fields_decode(us, bksq, wksq, psq):
    idx = bitbase_index(us, bksq, wksq, psq)
    assert idx & 0x3F == wksq
    assert (idx >> 6) & 0x3F == bksq
    assert (idx >> 12) & 1 == us
    assert (idx >> 13) & 0x3 == psq % 8
    assert 0 <= idx < MAX_INDEX


def test_indices_are_distinct_over_pawn_squares():
    pawn_squares = [f + 8 * r for r in range(1, 7) for f in range(4)]
    seen = {
        bitbase_index(us, Square.H8, Square.A1, p) for us in (WHITE, BLACK) for p in pawn_squares
    }
    assert len(seen) == 2 * len(pawn_squares)


def test_table_holds_one_bit_per_index():
    assert len(build_table()) * 8 == MAX_INDEX


def test_immediate_promotion_wins():
    assert probe(Square.H1, Square.D7, Square.A1, WHITE)


def test_king_in_front_on_sixth_rank_wins_either_side_to_move():
    assert probe(Square.D6, Square.D5, Square.D8, WHITE)
    assert probe(Square.D6, Square.D5, Square.D8, BLACK)


def test_undefended_pawn_is_captured():
    assert not probe(Square.H1, Square.D2, Square.D3, WHITE)
    assert not probe(Square.H1, Square.D2, Square.D3, BLACK)


def test_rook_pawn_with_defender_in_corner_draws():
    assert not probe(Square.C1, Square.A2, Square.A8, WHITE)
    assert not probe(Square.C1, Square.A2, Square.A8, BLACK)


def test_invalid_position_is_not_a_win():
    # Kings adjacent: impossible position.
    assert not probe(Square.D4, Square.B2, Square.D5, WHITE)


@pytest.mark.parametrize(
    "wksq,wpsq,bksq",
    [
        (Square.A1, Square.E4, Square.H8),
        (Square.A1, Square.B1, Square.H8),
        (Square.A1, Square.C8, Square.H8),
        (64, Square.C4, Square.H8),
    ],
)
def test_probe_rejects_bad_squares(wksq, wpsq, bksq):
    with pytest.raises(ValueError):
        probe(wksq, wpsq, bksq, WHITE)