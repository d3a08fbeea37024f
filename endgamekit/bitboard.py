"""Bitboard primitives: squares, masks, distances and piece attack sets.

A bitboard is a plain ``int`` in the range ``0 .. 2**64 - 1``; bit ``n`` stands
for square ``n`` with A1 = 0, B1 = 1, ..., H8 = 63.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, Iterator

MASK64 = (1 << 64) - 1


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> "Color":
        return Color(self ^ 1)


class PieceType(IntEnum):
    ALL_PIECES = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


class Direction(IntEnum):
    NORTH = 8
    EAST = 1
    SOUTH = -8
    WEST = -1
    NORTH_EAST = 9
    SOUTH_EAST = -7
    SOUTH_WEST = -9
    NORTH_WEST = 7


WHITE, BLACK = Color.WHITE, Color.BLACK
PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = (
    PieceType.PAWN,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
    PieceType.KING,
)
NORTH, EAST, SOUTH, WEST = Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST
NORTH_EAST, SOUTH_EAST = Direction.NORTH_EAST, Direction.SOUTH_EAST
SOUTH_WEST, NORTH_WEST = Direction.SOUTH_WEST, Direction.NORTH_WEST

FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = range(8)
RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = range(8)

Square = IntEnum(
    "Square",
    [(f"{'ABCDEFGH'[s & 7]}{(s >> 3) + 1}", s) for s in range(64)],
)

ROOK_DIRECTIONS = (NORTH, EAST, SOUTH, WEST)
BISHOP_DIRECTIONS = (NORTH_EAST, SOUTH_EAST, SOUTH_WEST, NORTH_WEST)

ALL_SQUARES = MASK64
DARK_SQUARES = 0xAA55AA55AA55AA55
LIGHT_SQUARES = ~DARK_SQUARES & MASK64

FILE_A_BB = 0x0101010101010101
FILE_B_BB = FILE_A_BB << 1
FILE_C_BB = FILE_A_BB << 2
FILE_D_BB = FILE_A_BB << 3
FILE_E_BB = FILE_A_BB << 4
FILE_F_BB = FILE_A_BB << 5
FILE_G_BB = FILE_A_BB << 6
FILE_H_BB = FILE_A_BB << 7

RANK_1_BB = 0xFF
RANK_2_BB = RANK_1_BB << 8
RANK_3_BB = RANK_1_BB << 16
RANK_4_BB = RANK_1_BB << 24
RANK_5_BB = RANK_1_BB << 32
RANK_6_BB = RANK_1_BB << 40
RANK_7_BB = RANK_1_BB << 48
RANK_8_BB = RANK_1_BB << 56

QUEEN_SIDE = FILE_A_BB | FILE_B_BB | FILE_C_BB | FILE_D_BB
CENTER_FILES = FILE_C_BB | FILE_D_BB | FILE_E_BB | FILE_F_BB
KING_SIDE = FILE_E_BB | FILE_F_BB | FILE_G_BB | FILE_H_BB
CENTER = (FILE_D_BB | FILE_E_BB) & (RANK_4_BB | RANK_5_BB)

_FILE_BB = tuple(FILE_A_BB << f for f in range(8))
_RANK_BB = tuple(RANK_1_BB << (8 * r) for r in range(8))


# --- squares -----------------------------------------------------------------

def make_square(file: int, rank: int) -> int:
    """Square index of the given file and rank."""
    return (rank << 3) + file


def file_of(square: int) -> int:
    return square & 7


def rank_of(square: int) -> int:
    return square >> 3


def sq_bb(square: int) -> int:
    """Bitboard with only the given square set."""
    if not 0 <= square < 64:
        raise ValueError(f"square out of range: {square}")
    return 1 << square


def relative_square(color: int, square: int) -> int:
    """The square seen from the given side (flipped vertically for black)."""
    return square ^ (color * 56)


def relative_rank(color: int, square: int) -> int:
    return rank_of(square) ^ (color * 7)


def opposite_colors(s1: int, s2: int) -> bool:
    """True if the two squares have different colours."""
    s = s1 ^ s2
    return bool(((s >> 3) ^ s) & 1)


# --- bit operations ----------------------------------------------------------

def more_than_one(b: int) -> bool:
    return bool(b & (b - 1))


def popcount(b: int) -> int:
    return bin(b & MASK64).count("1")


def lsb(b: int) -> int:
    """Index of the least significant set bit of a non-empty bitboard."""
    if not b:
        raise ValueError("lsb of an empty bitboard")
    return (b & -b).bit_length() - 1


def msb(b: int) -> int:
    """Index of the most significant set bit of a non-empty bitboard."""
    if not b:
        raise ValueError("msb of an empty bitboard")
    return b.bit_length() - 1


def iter_squares(b: int) -> Iterator[int]:
    """Yield the set squares of a bitboard from lowest to highest."""
    while b:
        yield lsb(b)
        b &= b - 1


def frontmost_sq(color: int, b: int) -> int:
    """The most advanced square of ``b`` from the point of view of ``color``."""
    return msb(b) if color == WHITE else lsb(b)


def backmost_sq(color: int, b: int) -> int:
    """The least advanced square of ``b`` from the point of view of ``color``."""
    return lsb(b) if color == WHITE else msb(b)


def pext(b: int, mask: int) -> int:
    """Gather the bits of ``b`` selected by ``mask`` into the low bits."""
    result = 0
    for i, sq in enumerate(iter_squares(mask)):
        if b >> sq & 1:
            result |= 1 << i
    return result


# --- shifts and masks --------------------------------------------------------

def shift_bb(direction: int, b: int) -> int:
    """Move every bit of ``b`` one step in ``direction``; unknown steps give 0."""
    if direction == NORTH:
        r = b << 8
    elif direction == SOUTH:
        r = b >> 8
    elif direction == NORTH + NORTH:
        r = b << 16
    elif direction == SOUTH + SOUTH:
        r = b >> 16
    elif direction == EAST:
        r = (b & ~FILE_H_BB) << 1
    elif direction == WEST:
        r = (b & ~FILE_A_BB) >> 1
    elif direction == NORTH_EAST:
        r = (b & ~FILE_H_BB) << 9
    elif direction == SOUTH_EAST:
        r = (b & ~FILE_H_BB) >> 7
    elif direction == NORTH_WEST:
        r = (b & ~FILE_A_BB) << 7
    elif direction == SOUTH_WEST:
        r = (b & ~FILE_A_BB) >> 9
    else:
        r = 0
    return r & MASK64


def pawn_attacks_bb(b: int, color: int) -> int:
    """Squares attacked by pawns of ``color`` standing on ``b``."""
    if color == WHITE:
        return shift_bb(NORTH_WEST, b) | shift_bb(NORTH_EAST, b)
    return shift_bb(SOUTH_WEST, b) | shift_bb(SOUTH_EAST, b)


def pawn_double_attacks_bb(b: int, color: int) -> int:
    """Squares attacked twice by pawns of ``color`` standing on ``b``."""
    if color == WHITE:
        return shift_bb(NORTH_WEST, b) & shift_bb(NORTH_EAST, b)
    return shift_bb(SOUTH_WEST, b) & shift_bb(SOUTH_EAST, b)


def file_bb(file: int) -> int:
    return _FILE_BB[file]


def rank_bb(rank: int) -> int:
    return _RANK_BB[rank]


def adjacent_files_bb(file: int) -> int:
    return shift_bb(EAST, _FILE_BB[file]) | shift_bb(WEST, _FILE_BB[file])


# --- precomputed tables ------------------------------------------------------

_SQUARE_DISTANCE = tuple(
    tuple(
        max(abs(file_of(a) - file_of(b)), abs(rank_of(a) - rank_of(b)))
        for b in range(64)
    )
    for a in range(64)
)


def _build_forward_ranks() -> tuple[tuple[int, ...], tuple[int, ...]]:
    white = [0] * 8
    black = [0] * 8
    for r in range(7):
        black[r + 1] = black[r] | _RANK_BB[r]
        white[r] = ~black[r + 1] & MASK64
    return tuple(white), tuple(black)


_FORWARD_RANKS = _build_forward_ranks()
_FORWARD_FILE = tuple(
    tuple(_FORWARD_RANKS[c][rank_of(s)] & _FILE_BB[file_of(s)] for s in range(64))
    for c in range(2)
)
_PAWN_ATTACK_SPAN = tuple(
    tuple(_FORWARD_RANKS[c][rank_of(s)] & adjacent_files_bb(file_of(s)) for s in range(64))
    for c in range(2)
)
_PASSED_PAWN_SPAN = tuple(
    tuple(_FORWARD_FILE[c][s] | _PAWN_ATTACK_SPAN[c][s] for s in range(64))
    for c in range(2)
)


def forward_ranks_bb(color: int, rank: int) -> int:
    """All squares on the ranks in front of ``rank`` as seen by ``color``."""
    return _FORWARD_RANKS[color][rank]


def forward_file_bb(color: int, square: int) -> int:
    """Squares on the file of ``square`` that lie in front of it for ``color``."""
    return _FORWARD_FILE[color][square]


def pawn_attack_span(color: int, square: int) -> int:
    """Squares a pawn of ``color`` could attack while advancing from ``square``."""
    return _PAWN_ATTACK_SPAN[color][square]


def passed_pawn_span(color: int, square: int) -> int:
    """Mask that must be free of enemy pawns for a pawn on ``square`` to be passed."""
    return _PASSED_PAWN_SPAN[color][square]


def distance(s1: int, s2: int) -> int:
    """King steps between two squares."""
    return _SQUARE_DISTANCE[s1][s2]


def distance_file(s1: int, s2: int) -> int:
    return abs(file_of(s1) - file_of(s2))


def distance_rank(s1: int, s2: int) -> int:
    return abs(rank_of(s1) - rank_of(s2))


def sliding_attack(directions: Iterable[int], square: int, occupied: int) -> int:
    """Squares reached from ``square`` along ``directions``, stopping at blockers."""
    attack = 0
    for d in directions:
        s = square + d
        while 0 <= s < 64 and _SQUARE_DISTANCE[s][s - d] == 1:
            attack |= 1 << s
            if occupied >> s & 1:
                break
            s += d
    return attack


def _edges(square: int) -> int:
    return (
        ((RANK_1_BB | RANK_8_BB) & ~_RANK_BB[rank_of(square)])
        | ((FILE_A_BB | FILE_H_BB) & ~_FILE_BB[file_of(square)])
    ) & MASK64


class _SliderTable:
    """Attack sets of a slider, indexed by the extracted relevant occupancy."""

    def __init__(self, directions: tuple[int, ...]) -> None:
        self._directions = directions
        self.masks = tuple(
            sliding_attack(directions, s, 0) & ~_edges(s) & MASK64 for s in range(64)
        )
        self._attacks: list[list[int] | None] = [None] * 64

    def _fill(self, square: int) -> list[int]:
        mask = self.masks[square]
        table = [0] * (1 << popcount(mask))
        b = 0
        while True:
            table[pext(b, mask)] = sliding_attack(self._directions, square, b)
            b = (b - mask) & mask
            if not b:
                break
        self._attacks[square] = table
        return table

    def attacks(self, square: int, occupied: int) -> int:
        table = self._attacks[square]
        if table is None:
            table = self._fill(square)
        return table[pext(occupied, self.masks[square])]


_ROOK_TABLE = _SliderTable(ROOK_DIRECTIONS)
_BISHOP_TABLE = _SliderTable(BISHOP_DIRECTIONS)


def _build_step_attacks() -> tuple[list[list[int]], list[list[int]]]:
    steps = {PAWN: (7, 9), KNIGHT: (6, 10, 15, 17), KING: (1, 7, 8, 9)}
    pawn = [[0] * 64 for _ in range(2)]
    pseudo = [[0] * 64 for _ in range(8)]
    for c in (WHITE, BLACK):
        for pt, deltas in steps.items():
            for s in range(64):
                for step in deltas:
                    to = s + (step if c == WHITE else -step)
                    if 0 <= to < 64 and _SQUARE_DISTANCE[s][to] < 3:
                        if pt == PAWN:
                            pawn[c][s] |= 1 << to
                        else:
                            pseudo[pt][s] |= 1 << to
    for s in range(64):
        pseudo[BISHOP][s] = sliding_attack(BISHOP_DIRECTIONS, s, 0)
        pseudo[ROOK][s] = sliding_attack(ROOK_DIRECTIONS, s, 0)
        pseudo[QUEEN][s] = pseudo[BISHOP][s] | pseudo[ROOK][s]
    return pawn, pseudo


_PAWN_ATTACKS_LIST, _PSEUDO_LIST = _build_step_attacks()
_PAWN_ATTACKS = tuple(tuple(row) for row in _PAWN_ATTACKS_LIST)
_PSEUDO_ATTACKS = tuple(tuple(row) for row in _PSEUDO_LIST)


def _build_lines() -> tuple[tuple[tuple[int, ...], ...], tuple[tuple[int, ...], ...]]:
    between = [[0] * 64 for _ in range(64)]
    line = [[0] * 64 for _ in range(64)]
    sliders = ((BISHOP, BISHOP_DIRECTIONS), (ROOK, ROOK_DIRECTIONS))
    for s1 in range(64):
        for s2 in range(64):
            between[s1][s2] = 1 << s2
            for pt, dirs in sliders:
                if not _PSEUDO_ATTACKS[pt][s1] >> s2 & 1:
                    continue
                line[s1][s2] = (
                    (_PSEUDO_ATTACKS[pt][s1] & _PSEUDO_ATTACKS[pt][s2])
                    | (1 << s1)
                    | (1 << s2)
                )
                between[s1][s2] |= sliding_attack(dirs, s1, 1 << s2) & sliding_attack(
                    dirs, s2, 1 << s1
                )
    return tuple(map(tuple, between)), tuple(map(tuple, line))


_BETWEEN, _LINE = _build_lines()


def between_bb(s1: int, s2: int) -> int:
    """Squares strictly between two aligned squares plus ``s2`` itself.

    For squares not on a common line only ``s2`` is set.
    """
    return _BETWEEN[s1][s2]


def line_bb(s1: int, s2: int) -> int:
    """The whole line through two aligned squares, or 0 if they are not aligned."""
    return _LINE[s1][s2]


# --- attacks -----------------------------------------------------------------

def bishop_attacks(square: int, occupied: int) -> int:
    return _BISHOP_TABLE.attacks(square, occupied)


def rook_attacks(square: int, occupied: int) -> int:
    return _ROOK_TABLE.attacks(square, occupied)


def queen_attacks(square: int, occupied: int) -> int:
    return bishop_attacks(square, occupied) | rook_attacks(square, occupied)


def pawn_attacks(color: int, square: int) -> int:
    """Squares attacked by a pawn of ``color`` on ``square``."""
    return _PAWN_ATTACKS[color][square]


def pseudo_attacks(piece_type: int, square: int) -> int:
    """Attacks of a piece on an empty board (0 for pawns)."""
    return _PSEUDO_ATTACKS[piece_type][square]


def attacks_bb(piece_type: int, square: int, occupied: int) -> int:
    """Attacks of a non-pawn piece on ``square`` given the occupancy."""
    if piece_type == PAWN:
        raise ValueError("pawn attacks depend on colour; use pawn_attacks()")
    if piece_type == BISHOP:
        return bishop_attacks(square, occupied)
    if piece_type == ROOK:
        return rook_attacks(square, occupied)
    if piece_type == QUEEN:
        return queen_attacks(square, occupied)
    return _PSEUDO_ATTACKS[piece_type][square]


def pretty(b: int) -> str:
    """ASCII diagram of a bitboard, rank 8 at the top."""
    border = "+---+---+---+---+---+---+---+---+\n"
    parts = [border]
    for r in range(7, -1, -1):
        parts.extend("| X " if b >> (8 * r + f) & 1 else "|   " for f in range(8))
        parts.append(f"| {r + 1}\n{border}")
    parts.append("  a   b   c   d   e   f   g   h\n")
    return "".join(parts)