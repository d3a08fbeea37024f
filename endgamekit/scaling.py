"""Scaling functions for endgames where the plain evaluation is too optimistic.

Each function takes a board and the side with the stronger material. It
returns a scale factor for that side's endgame score: ``SCALE_FACTOR_DRAW``
for a dead draw, a smaller or larger factor for drawish or winning
positions, or ``SCALE_FACTOR_NONE`` when no specific knowledge applies.
"""

from __future__ import annotations

from typing import Callable

from .bitbase import probe as bitbase_probe
from .bitboard import (
    BISHOP,
    BLACK,
    FILE_A,
    FILE_A_BB,
    FILE_B,
    FILE_G,
    FILE_H,
    FILE_H_BB,
    KING,
    NORTH,
    PAWN,
    RANK_1,
    RANK_2,
    RANK_3,
    RANK_4,
    RANK_5,
    RANK_6,
    RANK_7,
    RANK_8,
    ROOK,
    SOUTH,
    WHITE,
    Color,
    Square,
    backmost_sq,
    bishop_attacks,
    distance,
    distance_file,
    file_bb,
    file_of,
    lsb,
    make_square,
    msb,
    opposite_colors,
    passed_pawn_span,
    pawn_attacks,
    pseudo_attacks,
    rank_of,
    relative_rank,
    relative_square,
)
from .board import BISHOP_VALUE_MG, KNIGHT_VALUE_MG, QUEEN_VALUE_MG, ROOK_VALUE_MG, Board
from .endgame import normalize

SCALE_FACTOR_DRAW = 0
SCALE_FACTOR_NORMAL = 64
SCALE_FACTOR_MAX = 128
SCALE_FACTOR_NONE = 255

ScalingFunction = Callable[[Board, int], int]


def _require_material(board: Board, color: int, npm: int, pawns: int) -> None:
    if board.non_pawn_material(color) != npm or board.piece_count(color, PAWN) != pawns:
        raise ValueError(
            f"material of {Color(color).name} does not fit this endgame: "
            f"{board.material_signature(color)}"
        )


def _pawn_push(color: int) -> int:
    return NORTH if color == WHITE else SOUTH


def scale_kbpsk(board: Board, strong_side: int) -> int:
    """Bishop and pawns against king: draws with a wrong-coloured bishop."""
    weak_side = Color(strong_side).opponent
    if board.non_pawn_material(strong_side) != BISHOP_VALUE_MG:
        raise ValueError("the strong side must have exactly a bishop besides pawns")
    pawns = board.pieces(strong_side, PAWN)
    if not pawns:
        raise ValueError("the strong side must have pawns")

    pawns_file = file_of(lsb(pawns))

    # All pawns on a single rook file?
    if pawns_file in (FILE_A, FILE_H) and not pawns & ~file_bb(pawns_file):
        bishop_sq = board.square_of(strong_side, BISHOP)
        queening_sq = relative_square(strong_side, make_square(pawns_file, RANK_8))
        king_sq = board.square_of(weak_side, KING)
        if opposite_colors(queening_sq, bishop_sq) and distance(queening_sq, king_sq) <= 1:
            return SCALE_FACTOR_DRAW

    # All pawns on the same B or G file: potentially a draw.
    if (
        pawns_file in (FILE_B, FILE_G)
        and not board.pieces_of_type(PAWN) & ~file_bb(pawns_file)
        and board.non_pawn_material(weak_side) == 0
        and board.piece_count(weak_side, PAWN)
    ):
        weak_pawn_sq = backmost_sq(weak_side, board.pieces(weak_side, PAWN))
        strong_king_sq = board.square_of(strong_side, KING)
        weak_king_sq = board.square_of(weak_side, KING)
        bishop_sq = board.square_of(strong_side, BISHOP)

        if (
            relative_rank(strong_side, weak_pawn_sq) == RANK_7
            and pawns >> (weak_pawn_sq + _pawn_push(weak_side)) & 1
            and (
                opposite_colors(bishop_sq, weak_pawn_sq)
                or board.piece_count(strong_side, PAWN) == 1
            )
        ):
            strong_king_dist = distance(weak_pawn_sq, strong_king_sq)
            weak_king_dist = distance(weak_pawn_sq, weak_king_sq)
            if (
                relative_rank(strong_side, weak_king_sq) >= RANK_7
                and weak_king_dist <= 2
                and weak_king_dist <= strong_king_dist
            ):
                return SCALE_FACTOR_DRAW

    return SCALE_FACTOR_NONE


def scale_kqkrps(board: Board, strong_side: int) -> int:
    """Queen against rook and pawns: fortress with the rook on its third rank."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, QUEEN_VALUE_MG, 0)
    if board.piece_count(weak_side, ROOK) != 1:
        raise ValueError("the weak side must have exactly one rook")
    if not board.pieces(weak_side, PAWN):
        raise ValueError("the weak side must have pawns")

    king_sq = board.square_of(weak_side, KING)
    rsq = lsb(board.pieces_of_type(ROOK))

    if (
        relative_rank(weak_side, king_sq) <= RANK_2
        and relative_rank(weak_side, board.square_of(strong_side, KING)) >= RANK_4
        and relative_rank(weak_side, rsq) == RANK_3
        and board.pieces_of_type(PAWN)
        & pseudo_attacks(KING, king_sq)
        & pawn_attacks(strong_side, rsq)
    ):
        return SCALE_FACTOR_DRAW

    return SCALE_FACTOR_NONE


def scale_krpkr(board: Board, strong_side: int) -> int:
    """Rook and pawn against rook: the best known classes of drawn positions."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, ROOK_VALUE_MG, 1)
    _require_material(board, weak_side, ROOK_VALUE_MG, 0)

    wksq = normalize(board, strong_side, board.square_of(strong_side, KING))
    bksq = normalize(board, strong_side, board.square_of(weak_side, KING))
    wrsq = normalize(board, strong_side, board.square_of(strong_side, ROOK))
    wpsq = normalize(board, strong_side, lsb(board.pieces_of_type(PAWN)))
    brsq = normalize(board, strong_side, board.square_of(weak_side, ROOK))

    f = file_of(wpsq)
    r = rank_of(wpsq)
    queening_sq = make_square(f, RANK_8)
    tempo = int(board.side_to_move == strong_side)

    # Third-rank defence while the pawn is not too far advanced.
    if (
        r <= RANK_5
        and distance(bksq, queening_sq) <= 1
        and wksq <= Square.H5
        and (rank_of(brsq) == RANK_6 or (r <= RANK_3 and rank_of(wrsq) != RANK_6))
    ):
        return SCALE_FACTOR_DRAW

    # Checking from behind with the pawn on the sixth rank.
    if (
        r == RANK_6
        and distance(bksq, queening_sq) <= 1
        and rank_of(wksq) + tempo <= RANK_6
        and (rank_of(brsq) == RANK_1 or (not tempo and distance_file(brsq, wpsq) >= 3))
    ):
        return SCALE_FACTOR_DRAW

    if (
        r >= RANK_6
        and bksq == queening_sq
        and rank_of(brsq) == RANK_1
        and (not tempo or distance(wksq, wpsq) >= 2)
    ):
        return SCALE_FACTOR_DRAW

    # Pawn a7, rook a8, defending king on g7/h7 and rook behind the pawn.
    if (
        wpsq == Square.A7
        and wrsq == Square.A8
        and bksq in (Square.H7, Square.G7)
        and file_of(brsq) == FILE_A
        and (rank_of(brsq) <= RANK_3 or file_of(wksq) >= 3 or rank_of(wksq) <= RANK_5)
    ):
        return SCALE_FACTOR_DRAW

    # Defending king blocks the pawn and the attacking king is too far away.
    if (
        r <= RANK_5
        and bksq == wpsq + NORTH
        and distance(wksq, wpsq) - tempo >= 2
        and distance(wksq, brsq) - tempo >= 2
    ):
        return SCALE_FACTOR_DRAW

    # Seventh-rank pawn supported by the rook from behind.
    if (
        r == RANK_7
        and f != FILE_A
        and file_of(wrsq) == f
        and wrsq != queening_sq
        and distance(wksq, queening_sq) < distance(bksq, queening_sq) - 2 + tempo
        and distance(wksq, queening_sq) < distance(bksq, wrsq) + tempo
    ):
        return SCALE_FACTOR_MAX - 2 * distance(wksq, queening_sq)

    # The same with the pawn further back.
    if (
        f != FILE_A
        and file_of(wrsq) == f
        and wrsq < wpsq
        and distance(wksq, queening_sq) < distance(bksq, queening_sq) - 2 + tempo
        and distance(wksq, wpsq + NORTH) < distance(bksq, wpsq + NORTH) - 2 + tempo
        and (
            distance(bksq, wrsq) + tempo >= 3
            or (
                distance(wksq, queening_sq) < distance(bksq, wrsq) + tempo
                and distance(wksq, wpsq + NORTH) < distance(bksq, wrsq) + tempo
            )
        )
    ):
        return (
            SCALE_FACTOR_MAX
            - 8 * distance(wpsq, queening_sq)
            - 2 * distance(wksq, queening_sq)
        )

    # Pawn not far advanced with the defending king in its path.
    if r <= RANK_4 and bksq > wpsq:
        if file_of(bksq) == file_of(wpsq):
            return 10
        if distance_file(bksq, wpsq) == 1 and distance(wksq, bksq) > 2:
            return 24 - 2 * distance(wksq, bksq)

    return SCALE_FACTOR_NONE


def scale_krpkb(board: Board, strong_side: int) -> int:
    """Rook and pawn against bishop: fortress chances with a rook pawn."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, ROOK_VALUE_MG, 1)
    _require_material(board, weak_side, BISHOP_VALUE_MG, 0)

    if board.pieces_of_type(PAWN) & (FILE_A_BB | FILE_H_BB):
        ksq = board.square_of(weak_side, KING)
        bsq = lsb(board.pieces_of_type(BISHOP))
        psq = lsb(board.pieces_of_type(PAWN))
        rk = relative_rank(strong_side, psq)
        push = _pawn_push(strong_side)

        # Fifth-rank pawn on the bishop's colour: a possible fortress.
        if rk == RANK_5 and not opposite_colors(bsq, psq):
            d = distance(psq + 3 * push, ksq)
            if d <= 2 and not (d == 0 and ksq == board.square_of(strong_side, KING) + 2 * push):
                return 24
            return 48

        # Sixth-rank pawn, bishop controlling the square in front from afar.
        if (
            rk == RANK_6
            and distance(psq + 2 * push, ksq) <= 1
            and pseudo_attacks(BISHOP, bsq) >> (psq + push) & 1
            and distance_file(bsq, psq) >= 2
        ):
            return 8

    return SCALE_FACTOR_NONE


def scale_krppkrp(board: Board, strong_side: int) -> int:
    """Rook and two pawns against rook and pawn: drawish without a passed pawn."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, ROOK_VALUE_MG, 2)
    _require_material(board, weak_side, ROOK_VALUE_MG, 1)

    strong_pawns = board.pieces(strong_side, PAWN)
    wpsq1 = lsb(strong_pawns)
    wpsq2 = msb(strong_pawns)
    bksq = board.square_of(weak_side, KING)

    if board.is_passed_pawn(strong_side, wpsq1) or board.is_passed_pawn(strong_side, wpsq2):
        return SCALE_FACTOR_NONE

    r = max(relative_rank(strong_side, wpsq1), relative_rank(strong_side, wpsq2))

    if (
        distance_file(bksq, wpsq1) <= 1
        and distance_file(bksq, wpsq2) <= 1
        and relative_rank(strong_side, bksq) > r
    ):
        return 7 * r

    return SCALE_FACTOR_NONE


def scale_kpsk(board: Board, strong_side: int) -> int:
    """Pawns against king: a draw if all sit on one rook file ahead of the king."""
    weak_side = Color(strong_side).opponent
    if board.non_pawn_material(strong_side) != 0:
        raise ValueError("the strong side must have only pawns")
    if board.piece_count(strong_side, PAWN) < 2:
        raise ValueError("the strong side must have at least two pawns")
    _require_material(board, weak_side, 0, 0)

    ksq = board.square_of(weak_side, KING)
    pawns = board.pieces(strong_side, PAWN)

    if not pawns & ~(FILE_A_BB | FILE_H_BB) and not pawns & ~passed_pawn_span(weak_side, ksq):
        return SCALE_FACTOR_DRAW

    return SCALE_FACTOR_NONE


def scale_kbpkb(board: Board, strong_side: int) -> int:
    """Bishop and pawn against bishop: blockade or opposite-coloured bishops."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, BISHOP_VALUE_MG, 1)
    _require_material(board, weak_side, BISHOP_VALUE_MG, 0)

    pawn_sq = lsb(board.pieces_of_type(PAWN))
    strong_bishop_sq = board.square_of(strong_side, BISHOP)
    weak_bishop_sq = board.square_of(weak_side, BISHOP)
    weak_king_sq = board.square_of(weak_side, KING)

    # The defending king blocks the pawn and cannot be driven away.
    if (
        file_of(weak_king_sq) == file_of(pawn_sq)
        and relative_rank(strong_side, pawn_sq) < relative_rank(strong_side, weak_king_sq)
        and (
            opposite_colors(weak_king_sq, strong_bishop_sq)
            or relative_rank(strong_side, weak_king_sq) <= RANK_6
        )
    ):
        return SCALE_FACTOR_DRAW

    if opposite_colors(strong_bishop_sq, weak_bishop_sq):
        return SCALE_FACTOR_DRAW

    return SCALE_FACTOR_NONE


def scale_kbppkb(board: Board, strong_side: int) -> int:
    """Bishop and two pawns against bishop: draws with opposite-coloured bishops."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, BISHOP_VALUE_MG, 2)
    _require_material(board, weak_side, BISHOP_VALUE_MG, 0)

    wbsq = board.square_of(strong_side, BISHOP)
    bbsq = board.square_of(weak_side, BISHOP)

    if not opposite_colors(wbsq, bbsq):
        return SCALE_FACTOR_NONE

    ksq = board.square_of(weak_side, KING)
    strong_pawns = board.pieces(strong_side, PAWN)
    psq1 = lsb(strong_pawns)
    psq2 = msb(strong_pawns)
    r1 = rank_of(psq1)
    r2 = rank_of(psq2)

    if relative_rank(strong_side, psq1) > relative_rank(strong_side, psq2):
        block_sq1 = psq1 + _pawn_push(strong_side)
        block_sq2 = make_square(file_of(psq2), rank_of(psq1))
    else:
        block_sq1 = psq2 + _pawn_push(strong_side)
        block_sq2 = make_square(file_of(psq1), rank_of(psq2))

    weak_bishops = board.pieces(weak_side, BISHOP)
    occupied = board.occupied()
    file_gap = distance_file(psq1, psq2)

    if file_gap == 0:
        # Same file: a draw if the defender firmly holds the path.
        if (
            file_of(ksq) == file_of(block_sq1)
            and relative_rank(strong_side, ksq) >= relative_rank(strong_side, block_sq1)
            and opposite_colors(ksq, wbsq)
        ):
            return SCALE_FACTOR_DRAW
        return SCALE_FACTOR_NONE

    if file_gap == 1:
        # Adjacent files: the defender must hold both blocking squares.
        if (
            ksq == block_sq1
            and opposite_colors(ksq, wbsq)
            and (
                bbsq == block_sq2
                or bishop_attacks(block_sq2, occupied) & weak_bishops
                or abs(r1 - r2) >= 2
            )
        ):
            return SCALE_FACTOR_DRAW
        if (
            ksq == block_sq2
            and opposite_colors(ksq, wbsq)
            and (bbsq == block_sq1 or bishop_attacks(block_sq1, occupied) & weak_bishops)
        ):
            return SCALE_FACTOR_DRAW
        return SCALE_FACTOR_NONE

    return SCALE_FACTOR_NONE


def scale_kbpkn(board: Board, strong_side: int) -> int:
    """Bishop and pawn against knight: a draw if the king blocks the pawn."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, BISHOP_VALUE_MG, 1)
    _require_material(board, weak_side, KNIGHT_VALUE_MG, 0)

    pawn_sq = lsb(board.pieces_of_type(PAWN))
    strong_bishop_sq = lsb(board.pieces_of_type(BISHOP))
    weak_king_sq = board.square_of(weak_side, KING)

    if (
        file_of(weak_king_sq) == file_of(pawn_sq)
        and relative_rank(strong_side, pawn_sq) < relative_rank(strong_side, weak_king_sq)
        and (
            opposite_colors(weak_king_sq, strong_bishop_sq)
            or relative_rank(strong_side, weak_king_sq) <= RANK_6
        )
    ):
        return SCALE_FACTOR_DRAW

    return SCALE_FACTOR_NONE


def scale_kpkp(board: Board, strong_side: int) -> int:
    """Pawn against pawn: probe the KP vs K bitbase without the weak side's pawn."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, 0, 1)
    _require_material(board, weak_side, 0, 1)

    wksq = normalize(board, strong_side, board.square_of(strong_side, KING))
    bksq = normalize(board, strong_side, board.square_of(weak_side, KING))
    psq = normalize(board, strong_side, board.square_of(strong_side, PAWN))

    us = WHITE if board.side_to_move == strong_side else BLACK

    # An advanced non-rook pawn is too dangerous to call a draw.
    if rank_of(psq) >= RANK_5 and file_of(psq) != FILE_A:
        return SCALE_FACTOR_NONE

    return SCALE_FACTOR_NONE if bitbase_probe(wksq, psq, bksq, us) else SCALE_FACTOR_DRAW


# Scaling functions bound to one exact material configuration, by code.
SCALING_CODES: dict[str, ScalingFunction] = {
    "KRPkr": scale_krpkr,
    "KRPkb": scale_krpkb,
    "KBPkb": scale_kbpkb,
    "KBPkn": scale_kbpkn,
    "KBPPkb": scale_kbppkb,
    "KRPPkrp": scale_krppkrp,
}