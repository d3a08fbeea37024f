"""Evaluation functions for endgames whose material is known exactly.

Every function takes a board and the side with the stronger material. It
returns a score from the point of view of the side to move.
"""

from __future__ import annotations

from .bitbase import probe as bitbase_probe
from .bitboard import (
    BISHOP,
    BLACK,
    FILE_B_BB,
    FILE_D_BB,
    FILE_E,
    FILE_E_BB,
    FILE_G_BB,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    RANK_1,
    RANK_3,
    RANK_4,
    RANK_7,
    ROOK,
    SOUTH,
    WHITE,
    DARK_SQUARES,
    LIGHT_SQUARES,
    Color,
    Square,
    distance,
    file_of,
    forward_file_bb,
    lsb,
    make_square,
    opposite_colors,
    rank_of,
    relative_rank,
    relative_square,
)
from .board import (
    BISHOP_VALUE_MG,
    KNIGHT_VALUE_MG,
    PAWN_VALUE_EG,
    QUEEN_VALUE_EG,
    QUEEN_VALUE_MG,
    ROOK_VALUE_EG,
    ROOK_VALUE_MG,
    Board,
)

VALUE_DRAW = 0
VALUE_KNOWN_WIN = 10000
VALUE_MATE = 32000
MAX_PLY = 246
VALUE_MATE_IN_MAX_PLY = VALUE_MATE - MAX_PLY
VALUE_TB_WIN_IN_MAX_PLY = VALUE_MATE_IN_MAX_PLY - MAX_PLY

# Drive a piece towards or away from another one, indexed by distance.
PUSH_CLOSE = (140, 120, 100, 80, 60, 40, 20, 0)
PUSH_AWAY = (-20, 0, 20, 40, 60, 80, 100, 120)


def _edge_bonus(square: int) -> int:
    f, r = file_of(square), rank_of(square)
    fd, rd = min(f, 7 - f), min(r, 7 - r)
    return 90 - (7 * fd * fd // 2 + 7 * rd * rd // 2)


_PUSH_TO_EDGES = tuple(_edge_bonus(s) for s in range(64))
_PUSH_TO_CORNERS = tuple(420 * abs(7 - rank_of(s) - file_of(s)) for s in range(64))


def push_to_edges(square: int) -> int:
    """Bonus for driving a king on ``square`` towards the board edge."""
    return _PUSH_TO_EDGES[square]


def push_to_corners(square: int) -> int:
    """Bonus for driving a king on ``square`` towards the A1 or H8 corner."""
    return _PUSH_TO_CORNERS[square]


def _require_material(board: Board, color: int, npm: int, pawns: int) -> None:
    if board.non_pawn_material(color) != npm or board.piece_count(color, PAWN) != pawns:
        raise ValueError(
            f"material of {Color(color).name} does not fit this endgame: "
            f"{board.material_signature(color)}"
        )


def _from_side_to_move(board: Board, strong_side: int, result: int) -> int:
    return result if board.side_to_move == strong_side else -result


def normalize(board: Board, strong_side: int, square: int) -> int:
    """Map ``square`` as if ``strong_side`` were white with its pawn on files A-D."""
    if board.piece_count(strong_side, PAWN) != 1:
        raise ValueError("the strong side must have exactly one pawn")
    if file_of(board.square_of(strong_side, PAWN)) >= FILE_E:
        square ^= 0x07
    if strong_side == BLACK:
        square ^= 0x38
    return square


def evaluate_kxk(board: Board, strong_side: int) -> int:
    """King and plenty of material against a lone king."""
    weak_side = Color(strong_side).opponent
    _require_material(board, weak_side, 0, 0)

    # Stalemate: the lone king has no move and nothing else can move.
    if board.side_to_move == weak_side and not board.has_legal_king_move(weak_side):
        return VALUE_DRAW

    winner_ksq = board.square_of(strong_side, KING)
    loser_ksq = board.square_of(weak_side, KING)

    result = (
        board.non_pawn_material(strong_side)
        + board.piece_count(strong_side, PAWN) * PAWN_VALUE_EG
        + push_to_edges(loser_ksq)
        + PUSH_CLOSE[distance(winner_ksq, loser_ksq)]
    )

    bishops = board.pieces_of_type(BISHOP)
    if (
        board.pieces_of_type(QUEEN) | board.pieces_of_type(ROOK)
        or (bishops and board.pieces_of_type(KNIGHT))
        or (bishops & DARK_SQUARES and bishops & LIGHT_SQUARES)
    ):
        result = min(result + VALUE_KNOWN_WIN, VALUE_TB_WIN_IN_MAX_PLY - 1)

    return _from_side_to_move(board, strong_side, result)


def evaluate_kbnk(board: Board, strong_side: int) -> int:
    """King, bishop and knight against king: drive the king to the right corner."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, KNIGHT_VALUE_MG + BISHOP_VALUE_MG, 0)
    _require_material(board, weak_side, 0, 0)

    winner_ksq = board.square_of(strong_side, KING)
    loser_ksq = board.square_of(weak_side, KING)
    bishop_sq = lsb(board.pieces_of_type(BISHOP))

    # A bishop that cannot reach A1/H8 mates in the A8/H1 corners instead.
    if opposite_colors(bishop_sq, Square.A1):
        winner_ksq ^= 0x38
        loser_ksq ^= 0x38

    result = (
        VALUE_KNOWN_WIN
        + 3520
        + PUSH_CLOSE[distance(winner_ksq, loser_ksq)]
        + push_to_corners(loser_ksq)
    )
    return _from_side_to_move(board, strong_side, result)


def evaluate_kpk(board: Board, strong_side: int) -> int:
    """King and pawn against king, decided by the bitbase."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, 0, 1)
    _require_material(board, weak_side, 0, 0)

    wksq = normalize(board, strong_side, board.square_of(strong_side, KING))
    bksq = normalize(board, strong_side, board.square_of(weak_side, KING))
    psq = normalize(board, strong_side, lsb(board.pieces_of_type(PAWN)))

    us = WHITE if board.side_to_move == strong_side else BLACK
    if not bitbase_probe(wksq, psq, bksq, us):
        return VALUE_DRAW

    result = VALUE_KNOWN_WIN + PAWN_VALUE_EG + rank_of(psq)
    return _from_side_to_move(board, strong_side, result)


def evaluate_krkp(board: Board, strong_side: int) -> int:
    """Rook against pawn: drawish when the pawn is far advanced and supported."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, ROOK_VALUE_MG, 0)
    _require_material(board, weak_side, 0, 1)

    wksq = relative_square(strong_side, board.square_of(strong_side, KING))
    bksq = relative_square(strong_side, board.square_of(weak_side, KING))
    rsq = relative_square(strong_side, lsb(board.pieces_of_type(ROOK)))
    psq = relative_square(strong_side, lsb(board.pieces_of_type(PAWN)))

    queening_sq = make_square(file_of(psq), RANK_1)
    weak_to_move = board.side_to_move == weak_side
    strong_to_move = board.side_to_move == strong_side

    if forward_file_bb(WHITE, wksq) >> psq & 1:
        # The strong king stands in front of the pawn.
        result = ROOK_VALUE_EG - distance(wksq, psq)
    elif distance(bksq, psq) >= 3 + weak_to_move and distance(bksq, rsq) >= 3:
        # The weak king is too far from both pawn and rook.
        result = ROOK_VALUE_EG - distance(wksq, psq)
    elif (
        rank_of(bksq) <= RANK_3
        and distance(bksq, psq) == 1
        and rank_of(wksq) >= RANK_4
        and distance(wksq, psq) > 2 + strong_to_move
    ):
        # Far advanced pawn supported by its king.
        result = 80 - 8 * distance(wksq, psq)
    else:
        result = 200 - 8 * (
            distance(wksq, psq + SOUTH)
            - distance(bksq, psq + SOUTH)
            - distance(psq, queening_sq)
        )

    return _from_side_to_move(board, strong_side, result)


def evaluate_krkb(board: Board, strong_side: int) -> int:
    """Rook against bishop: drawish, a little better with the king near the edge."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, ROOK_VALUE_MG, 0)
    _require_material(board, weak_side, BISHOP_VALUE_MG, 0)

    result = push_to_edges(board.square_of(weak_side, KING))
    return _from_side_to_move(board, strong_side, result)


def evaluate_krkn(board: Board, strong_side: int) -> int:
    """Rook against knight: better when king and knight stand far apart."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, ROOK_VALUE_MG, 0)
    _require_material(board, weak_side, KNIGHT_VALUE_MG, 0)

    bksq = board.square_of(weak_side, KING)
    bnsq = lsb(board.pieces_of_type(KNIGHT))
    result = push_to_edges(bksq) + PUSH_AWAY[distance(bksq, bnsq)]
    return _from_side_to_move(board, strong_side, result)


def evaluate_kqkp(board: Board, strong_side: int) -> int:
    """Queen against pawn: a win except for some seventh-rank pawns."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, QUEEN_VALUE_MG, 0)
    _require_material(board, weak_side, 0, 1)

    winner_ksq = board.square_of(strong_side, KING)
    loser_ksq = board.square_of(weak_side, KING)
    pawn_sq = lsb(board.pieces_of_type(PAWN))

    result = PUSH_CLOSE[distance(winner_ksq, loser_ksq)]

    if (
        relative_rank(weak_side, pawn_sq) != RANK_7
        or distance(loser_ksq, pawn_sq) != 1
        or (FILE_B_BB | FILE_D_BB | FILE_E_BB | FILE_G_BB) >> pawn_sq & 1
    ):
        result += QUEEN_VALUE_EG - PAWN_VALUE_EG

    return _from_side_to_move(board, strong_side, result)


def evaluate_kqkr(board: Board, strong_side: int) -> int:
    """Queen against rook: bring the kings together and push to the edge."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, QUEEN_VALUE_MG, 0)
    _require_material(board, weak_side, ROOK_VALUE_MG, 0)

    winner_ksq = board.square_of(strong_side, KING)
    loser_ksq = board.square_of(weak_side, KING)

    result = (
        QUEEN_VALUE_EG
        - ROOK_VALUE_EG
        + push_to_edges(loser_ksq)
        + PUSH_CLOSE[distance(winner_ksq, loser_ksq)]
    )
    return _from_side_to_move(board, strong_side, result)


def evaluate_knnkp(board: Board, strong_side: int) -> int:
    """Two knights against pawn: push the defending king to the edge."""
    weak_side = Color(strong_side).opponent
    _require_material(board, strong_side, 2 * KNIGHT_VALUE_MG, 0)
    _require_material(board, weak_side, 0, 1)

    result = (
        PAWN_VALUE_EG
        + 2 * push_to_edges(board.square_of(weak_side, KING))
        - 10 * relative_rank(weak_side, board.square_of(weak_side, PAWN))
    )
    return _from_side_to_move(board, strong_side, result)


def evaluate_knnk(board: Board, strong_side: int) -> int:
    """Two knights against a lone king: a draw."""
    return VALUE_DRAW