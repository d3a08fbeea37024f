"""KP vs K bitbase: the win/draw result of every king-and-pawn against king position.

Positions are normalised so that the pawn is white and stands on files A-D.
The table is built once, on first use, by retrograde classification.
"""

from __future__ import annotations

from functools import lru_cache

from .bitboard import (
    FILE_D,
    KING,
    NORTH,
    RANK_2,
    RANK_7,
    WHITE,
    distance,
    file_of,
    iter_squares,
    make_square,
    pawn_attacks,
    pseudo_attacks,
    rank_of,
)

# 24 pawn squares (files A-D, ranks 2-7), two sides to move, two kings.
MAX_INDEX = 2 * 24 * 64 * 64

_INVALID = 0
_UNKNOWN = 1
_DRAW = 2
_WIN = 4

_BLACK_TO_MOVE = 1 << 12
_PAWN_RANK_STEP = 1 << 15
_KING_AND_SIDE_BITS = (1 << 13) - 1


def bitbase_index(us: int, bksq: int, wksq: int, psq: int) -> int:
    """Index of a position in the bitbase.

    Bits 0-5 hold the white king square, 6-11 the black king square, 12 the
    side to move, 13-14 the pawn file and 15-17 the pawn's distance from rank 7.
    """
    return (
        wksq
        | (bksq << 6)
        | (us << 12)
        | (file_of(psq) << 13)
        | ((RANK_7 - rank_of(psq)) << 15)
    )


def _decode(idx: int) -> tuple[int, int, int, int]:
    wksq = idx & 0x3F
    bksq = (idx >> 6) & 0x3F
    us = (idx >> 12) & 0x01
    psq = make_square((idx >> 13) & 0x03, RANK_7 - ((idx >> 15) & 0x07))
    return wksq, bksq, us, psq


def _initial(idx: int) -> int:
    wksq, bksq, us, psq = _decode(idx)

    # Two pieces on one square, or a king that could be captured.
    if (
        distance(wksq, bksq) <= 1
        or wksq == psq
        or bksq == psq
        or (us == WHITE and pawn_attacks(WHITE, psq) >> bksq & 1)
    ):
        return _INVALID

    push = psq + NORTH
    # The pawn promotes without being captured.
    if (
        us == WHITE
        and rank_of(psq) == RANK_7
        and wksq != push
        and (distance(bksq, push) > 1 or pseudo_attacks(KING, wksq) >> push & 1)
    ):
        return _WIN

    # Stalemate, or the black king takes an undefended pawn.
    if us != WHITE:
        black_moves = pseudo_attacks(KING, bksq)
        white_cover = pseudo_attacks(KING, wksq)
        if not black_moves & ~(white_cover | pawn_attacks(WHITE, psq)) or (
            black_moves & (1 << psq) & ~white_cover
        ):
            return _DRAW

    return _UNKNOWN


def _resolve(db: bytearray) -> None:
    """Classify unknown positions until no more of them can be decided."""
    king_moves = [tuple(iter_squares(pseudo_attacks(KING, s))) for s in range(64)]
    pending = [idx for idx, result in enumerate(db) if result == _UNKNOWN]
    changed = True
    while changed:
        changed = False
        still_unknown = []
        for idx in pending:
            wksq = idx & 0x3F
            bksq = (idx >> 6) & 0x3F
            pawn_bits = idx & ~_KING_AND_SIDE_BITS
            r = 0
            if idx & _BLACK_TO_MOVE:
                base = pawn_bits | wksq
                for to in king_moves[bksq]:
                    r |= db[base | (to << 6)]
                result = _DRAW if r & _DRAW else _UNKNOWN if r & _UNKNOWN else _WIN
            else:
                base = pawn_bits | _BLACK_TO_MOVE | (bksq << 6)
                for to in king_moves[wksq]:
                    r |= db[base | to]
                after_king = base | wksq
                rank = RANK_7 - (idx >> 15)
                if rank < RANK_7:
                    r |= db[after_king - _PAWN_RANK_STEP]
                if rank == RANK_2:
                    push = make_square((idx >> 13) & 0x03, rank) + NORTH
                    if push != wksq and push != bksq:
                        r |= db[after_king - 2 * _PAWN_RANK_STEP]
                result = _WIN if r & _WIN else _UNKNOWN if r & _UNKNOWN else _DRAW
            if result == _UNKNOWN:
                still_unknown.append(idx)
            else:
                db[idx] = result
                changed = True
        pending = still_unknown


@lru_cache(maxsize=None)
def build_table() -> bytes:
    """Build the bitbase: one bit per index, set where white wins."""
    db = bytearray(_initial(idx) for idx in range(MAX_INDEX))
    _resolve(db)
    table = bytearray(MAX_INDEX // 8)
    for idx, result in enumerate(db):
        if result == _WIN:
            table[idx >> 3] |= 1 << (idx & 7)
    return bytes(table)


def probe(wksq: int, wpsq: int, bksq: int, us: int) -> bool:
    """True if the normalised KP vs K position is a win for white.

    ``us`` is the side to move. The pawn must be on files A-D and ranks 2-7.
    """
    for square in (wksq, wpsq, bksq):
        if not 0 <= square < 64:
            raise ValueError(f"square out of range: {square}")
    if file_of(wpsq) > FILE_D:
        raise ValueError("pawn must stand on files A-D")
    if not RANK_2 <= rank_of(wpsq) <= RANK_7:
        raise ValueError("pawn must stand on ranks 2-7")
    if us not in (0, 1):
        raise ValueError(f"invalid side to move: {us}")
    idx = bitbase_index(us, bksq, wksq, wpsq)
    return bool(build_table()[idx >> 3] >> (idx & 7) & 1)