"""Material configuration analysis.

This covers the phase of the game, the material imbalance, the specialised
evaluation function and the scaling functions for a given set of pieces.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional, Sequence

from .bitboard import BISHOP, BLACK, KNIGHT, PAWN, QUEEN, ROOK, WHITE, Color
from .board import BISHOP_VALUE_MG, KNIGHT_VALUE_MG, QUEEN_VALUE_MG, ROOK_VALUE_MG, Board
from .endgame import (
    evaluate_kbnk,
    evaluate_knnk,
    evaluate_knnkp,
    evaluate_kpk,
    evaluate_kqkp,
    evaluate_kqkr,
    evaluate_krkb,
    evaluate_krkn,
    evaluate_krkp,
    evaluate_kxk,
)
from .scaling import (
    SCALE_FACTOR_DRAW,
    SCALE_FACTOR_NONE,
    SCALE_FACTOR_NORMAL,
    SCALING_CODES,
    scale_kbpsk,
    scale_kpkp,
    scale_kpsk,
    scale_kqkrps,
)

MIDGAME_LIMIT = 15258
ENDGAME_LIMIT = 3915
PHASE_MIDGAME = 128

EvalFunction = Callable[[Board, int], int]
ScaleFunction = Callable[[Board, int], int]
Score = tuple[int, int]

# Evaluation functions bound to one exact material configuration, by code.
EVALUATION_CODES: dict[str, EvalFunction] = {
    "KPk": evaluate_kpk,
    "KNNk": evaluate_knnk,
    "KNNkp": evaluate_knnkp,
    "KBNk": evaluate_kbnk,
    "KRkp": evaluate_krkp,
    "KRkb": evaluate_krkb,
    "KRkn": evaluate_krkn,
    "KQkp": evaluate_kqkp,
    "KQkr": evaluate_kqkr,
}

# Polynomial material imbalance parameters, indexed by the "extended" piece
# type: 0 is the bishop pair, then pawn, knight, bishop, rook and queen.
_QUADRATIC_OURS: tuple[tuple[Score, ...], ...] = (
    ((1419, 1455),),
    ((101, 28), (37, 39)),
    ((57, 64), (249, 187), (-49, -62)),
    ((0, 0), (118, 137), (10, 27), (0, 0)),
    ((-63, -68), (-5, 3), (100, 81), (132, 118), (-246, -244)),
    ((-210, -211), (37, 14), (147, 141), (161, 105), (-158, -174), (-9, -31)),
)

_QUADRATIC_THEIRS: tuple[tuple[Score, ...], ...] = (
    ((0, 0),),
    ((33, 30), (0, 0)),
    ((46, 18), (106, 84), (0, 0)),
    ((75, 35), (59, 44), (60, 15), (0, 0)),
    ((26, 35), (6, 22), (38, 39), (-12, -2), (0, 0)),
    ((97, 93), (100, 163), (-58, -91), (112, 192), (276, 225), (0, 0)),
)

_COUNTED_TYPES = (PAWN, KNIGHT, BISHOP, ROOK, QUEEN)
_SIGNATURE_LETTERS = (("Q", 4), ("R", 3), ("B", 2), ("N", 1), ("P", 0))

# Per colour: counts of pawns, knights, bishops, rooks and queens.
MaterialKey = tuple[tuple[int, int, int, int, int], tuple[int, int, int, int, int]]


def _div_trunc(a: int, b: int) -> int:
    q = abs(a) // b
    return q if a >= 0 else -q


def imbalance(us: int, piece_counts: Sequence[Sequence[int]]) -> Score:
    """Second-degree polynomial imbalance bonus for ``us``.

    ``piece_counts[color]`` lists the bishop pair flag and the counts of pawns,
    knights, bishops, rooks and queens.
    """
    ours = piece_counts[us]
    theirs = piece_counts[us ^ 1]
    mg = eg = 0
    for pt1, count1 in enumerate(ours[:QUEEN + 1]):
        if not count1:
            continue
        v_mg = v_eg = 0
        for pt2 in range(pt1 + 1):
            o_mg, o_eg = _QUADRATIC_OURS[pt1][pt2]
            t_mg, t_eg = _QUADRATIC_THEIRS[pt1][pt2]
            v_mg += o_mg * ours[pt2] + t_mg * theirs[pt2]
            v_eg += o_eg * ours[pt2] + t_eg * theirs[pt2]
        mg += count1 * v_mg
        eg += count1 * v_eg
    return mg, eg


@dataclass(frozen=True)
class MaterialEntry:
    """What is known about one material configuration."""

    key: MaterialKey
    game_phase: int
    score: Score
    eval_func: Optional[EvalFunction] = None
    eval_func_side: Color = WHITE
    scaling_funcs: tuple[Optional[ScaleFunction], Optional[ScaleFunction]] = (None, None)
    factors: tuple[int, int] = (SCALE_FACTOR_NORMAL, SCALE_FACTOR_NORMAL)

    def has_specialized_eval(self) -> bool:
        return self.eval_func is not None

    def evaluate(self, board: Board) -> int:
        """Run the specialised evaluation function on ``board``."""
        if self.eval_func is None:
            raise ValueError("no specialised evaluation for this material")
        return self.eval_func(board, self.eval_func_side)

    def scale_factor(self, board: Board, color: int) -> int:
        """Scale factor for ``color``, from its scaling function if that applies."""
        func = self.scaling_funcs[color]
        sf = func(board, color) if func is not None else SCALE_FACTOR_NONE
        return sf if sf != SCALE_FACTOR_NONE else self.factors[color]


def _material_key(board: Board) -> MaterialKey:
    white, black = (
        tuple(board.piece_count(c, pt) for pt in _COUNTED_TYPES) for c in (WHITE, BLACK)
    )
    return white, black  # type: ignore[return-value]


def _npm(counts: Sequence[int]) -> int:
    _, n, b, r, q = counts
    return n * KNIGHT_VALUE_MG + b * BISHOP_VALUE_MG + r * ROOK_VALUE_MG + q * QUEEN_VALUE_MG


def _signature(key: MaterialKey, color: int) -> str:
    ours, theirs = key[color], key[color ^ 1]
    strong = "K" + "".join(letter * ours[i] for letter, i in _SIGNATURE_LETTERS)
    weak = "k" + "".join(letter.lower() * theirs[i] for letter, i in _SIGNATURE_LETTERS)
    return strong + weak


def _build(key: MaterialKey) -> MaterialEntry:
    npm = (_npm(key[WHITE]), _npm(key[BLACK]))
    pawns = (key[WHITE][0], key[BLACK][0])
    total = min(max(npm[WHITE] + npm[BLACK], ENDGAME_LIMIT), MIDGAME_LIMIT)
    game_phase = (total - ENDGAME_LIMIT) * PHASE_MIDGAME // (MIDGAME_LIMIT - ENDGAME_LIMIT)

    signatures = (_signature(key, WHITE), _signature(key, BLACK))

    def entry(**kwargs: object) -> MaterialEntry:
        return MaterialEntry(key=key, game_phase=game_phase, score=(0, 0), **kwargs)  # type: ignore[arg-type]

    for code, func in EVALUATION_CODES.items():
        for c in (WHITE, BLACK):
            if signatures[c] == code:
                return entry(eval_func=func, eval_func_side=c)

    for c in (WHITE, BLACK):
        # A lone enemy king against at least a rook's worth of material.
        if not any(key[c ^ 1]) and npm[c] >= ROOK_VALUE_MG:
            return entry(eval_func=evaluate_kxk, eval_func_side=c)

    for code, func in SCALING_CODES.items():
        for c in (WHITE, BLACK):
            if signatures[c] == code:
                funcs = [None, None]
                funcs[c] = func
                return entry(scaling_funcs=tuple(funcs))

    scaling: list[Optional[ScaleFunction]] = [None, None]
    for c in (WHITE, BLACK):
        them = c ^ 1
        if npm[c] == BISHOP_VALUE_MG and pawns[c]:
            scaling[c] = scale_kbpsk
        elif (
            not pawns[c]
            and npm[c] == QUEEN_VALUE_MG
            and key[them][3] == 1
            and pawns[them]
        ):
            scaling[c] = scale_kqkrps

    if npm[WHITE] + npm[BLACK] == 0 and pawns[WHITE] + pawns[BLACK]:
        if not pawns[BLACK]:
            scaling[WHITE] = scale_kpsk
        elif not pawns[WHITE]:
            scaling[BLACK] = scale_kpsk
        elif pawns[WHITE] + pawns[BLACK] == 2:
            scaling[WHITE] = scale_kpkp
            scaling[BLACK] = scale_kpkp

    factors = [SCALE_FACTOR_NORMAL, SCALE_FACTOR_NORMAL]
    for c in (WHITE, BLACK):
        them = c ^ 1
        if not pawns[c] and npm[c] - npm[them] <= BISHOP_VALUE_MG:
            if npm[c] < ROOK_VALUE_MG:
                factors[c] = SCALE_FACTOR_DRAW
            elif npm[them] <= BISHOP_VALUE_MG:
                factors[c] = 4
            else:
                factors[c] = 14

    counts = tuple(
        (int(key[c][2] > 1), key[c][0], key[c][1], key[c][2], key[c][3], key[c][4])
        for c in (WHITE, BLACK)
    )
    w_mg, w_eg = imbalance(WHITE, counts)
    b_mg, b_eg = imbalance(BLACK, counts)
    score = (_div_trunc(w_mg - b_mg, 16), _div_trunc(w_eg - b_eg, 16))

    return MaterialEntry(
        key=key,
        game_phase=game_phase,
        score=score,
        scaling_funcs=(scaling[WHITE], scaling[BLACK]),
        factors=(factors[WHITE], factors[BLACK]),
    )


_cached_build = lru_cache(maxsize=8192)(_build)


def material_entry(board: Board) -> MaterialEntry:
    """Compute a fresh entry for the material on ``board``."""
    return _build(_material_key(board))


def probe(board: Board) -> MaterialEntry:
    """Entry for the material on ``board``, reused for equal material."""
    return _cached_build(_material_key(board))