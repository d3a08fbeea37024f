"""A chess position with the queries endgame evaluation needs."""

from __future__ import annotations

from typing import Iterator, Mapping, NamedTuple

from .bitboard import (
    BISHOP,
    BLACK,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    RANK_1,
    RANK_8,
    ROOK,
    WHITE,
    Color,
    PieceType,
    bishop_attacks,
    iter_squares,
    lsb,
    make_square,
    more_than_one,
    passed_pawn_span,
    pawn_attacks,
    popcount,
    pseudo_attacks,
    rank_of,
    rook_attacks,
)

PAWN_VALUE_MG, PAWN_VALUE_EG = 126, 208
KNIGHT_VALUE_MG, KNIGHT_VALUE_EG = 781, 854
BISHOP_VALUE_MG, BISHOP_VALUE_EG = 825, 915
ROOK_VALUE_MG, ROOK_VALUE_EG = 1276, 1380
QUEEN_VALUE_MG, QUEEN_VALUE_EG = 2538, 2682

PIECE_VALUE_MG = {
    PAWN: PAWN_VALUE_MG,
    KNIGHT: KNIGHT_VALUE_MG,
    BISHOP: BISHOP_VALUE_MG,
    ROOK: ROOK_VALUE_MG,
    QUEEN: QUEEN_VALUE_MG,
    KING: 0,
}

_SYMBOL_TO_TYPE = {
    "P": PAWN,
    "N": KNIGHT,
    "B": BISHOP,
    "R": ROOK,
    "Q": QUEEN,
    "K": KING,
}
_TYPE_TO_SYMBOL = {pt: sym for sym, pt in _SYMBOL_TO_TYPE.items()}
# Order of pieces in a material signature, strongest first.
_SIGNATURE_ORDER = (QUEEN, ROOK, BISHOP, KNIGHT, PAWN)


class Piece(NamedTuple):
    color: Color
    piece_type: PieceType

    @property
    def symbol(self) -> str:
        sym = _TYPE_TO_SYMBOL[self.piece_type]
        return sym if self.color == WHITE else sym.lower()


class Board:
    """Piece placement plus the side to move."""

    __slots__ = ("_squares", "_bb", "side_to_move")

    def __init__(self, placement: Mapping[int, Piece], side_to_move: int = WHITE) -> None:
        squares: list[Piece | None] = [None] * 64
        bb = {(c, pt): 0 for c in (WHITE, BLACK) for pt in _SYMBOL_TO_TYPE.values()}
        for square, piece in placement.items():
            if not 0 <= square < 64:
                raise ValueError(f"square out of range: {square}")
            piece = Piece(Color(piece[0]), PieceType(piece[1]))
            if piece.piece_type not in _TYPE_TO_SYMBOL:
                raise ValueError(f"invalid piece type: {piece.piece_type}")
            if piece.piece_type == PAWN and rank_of(square) in (RANK_1, RANK_8):
                raise ValueError("pawn on the first or last rank")
            squares[square] = piece
            bb[piece.color, piece.piece_type] |= 1 << square
        for color in (WHITE, BLACK):
            if popcount(bb[color, KING]) != 1:
                raise ValueError("each side needs exactly one king")
        if side_to_move not in (WHITE, BLACK):
            raise ValueError(f"invalid side to move: {side_to_move}")
        self._squares = tuple(squares)
        self._bb = bb
        self.side_to_move = Color(side_to_move)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Read piece placement and side to move; later fields are ignored."""
        fields = fen.split()
        if not fields:
            raise ValueError("empty FEN")
        rows = fields[0].split("/")
        if len(rows) != 8:
            raise ValueError("FEN placement needs 8 ranks")
        placement: dict[int, Piece] = {}
        for rank, row in zip(range(7, -1, -1), rows):
            file = 0
            for ch in row:
                if ch.isdigit() and ch != "0":
                    file += int(ch)
                elif ch.upper() in _SYMBOL_TO_TYPE:
                    if file > 7:
                        raise ValueError(f"rank {rank + 1} is too long")
                    color = WHITE if ch.isupper() else BLACK
                    placement[make_square(file, rank)] = Piece(color, _SYMBOL_TO_TYPE[ch.upper()])
                    file += 1
                else:
                    raise ValueError(f"unexpected character in FEN: {ch!r}")
            if file != 8:
                raise ValueError(f"rank {rank + 1} does not have 8 files")
        side = fields[1] if len(fields) > 1 else "w"
        if side not in ("w", "b"):
            raise ValueError(f"invalid side to move: {side!r}")
        return cls(placement, WHITE if side == "w" else BLACK)

    def __repr__(self) -> str:
        return f"Board({self._placement_text()!r}, side_to_move={self.side_to_move.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares and self.side_to_move == other.side_to_move

    def __hash__(self) -> int:
        return hash((self._squares, self.side_to_move))

    def _placement_text(self) -> str:
        rows = []
        for rank in range(7, -1, -1):
            row, empty = "", 0
            for file in range(8):
                piece = self._squares[make_square(file, rank)]
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += piece.symbol
            rows.append(row + (str(empty) if empty else ""))
        return "/".join(rows)

    # --- bitboards -----------------------------------------------------------

    def pieces(self, color: int, piece_type: int) -> int:
        return self._bb[color, piece_type]

    def pieces_of_type(self, piece_type: int) -> int:
        return self._bb[WHITE, piece_type] | self._bb[BLACK, piece_type]

    def pieces_of_color(self, color: int) -> int:
        result = 0
        for pt in _TYPE_TO_SYMBOL:
            result |= self._bb[color, pt]
        return result

    def occupied(self) -> int:
        return self.pieces_of_color(WHITE) | self.pieces_of_color(BLACK)

    # --- pieces --------------------------------------------------------------

    def piece_on(self, square: int) -> Piece | None:
        return self._squares[square]

    def square_of(self, color: int, piece_type: int) -> int:
        """Square of the lowest piece of this kind; raises if there is none."""
        b = self._bb[color, piece_type]
        if not b:
            raise ValueError(f"no {PieceType(piece_type).name} of {Color(color).name}")
        return lsb(b)

    def piece_count(self, color: int, piece_type: int) -> int:
        return popcount(self._bb[color, piece_type])

    def non_pawn_material(self, color: int) -> int:
        """Middle-game value of the knights, bishops, rooks and queens of ``color``."""
        return sum(
            PIECE_VALUE_MG[pt] * self.piece_count(color, pt)
            for pt in (KNIGHT, BISHOP, ROOK, QUEEN)
        )

    def is_passed_pawn(self, color: int, square: int) -> bool:
        """True if no enemy pawn can stop or capture a pawn of ``color`` on ``square``."""
        return not self._bb[Color(color).opponent, PAWN] & passed_pawn_span(color, square)

    # --- attacks -------------------------------------------------------------

    def _attackers_to(self, square: int, occupied: int) -> int:
        return (
            (pawn_attacks(BLACK, square) & self._bb[WHITE, PAWN])
            | (pawn_attacks(WHITE, square) & self._bb[BLACK, PAWN])
            | (pseudo_attacks(KNIGHT, square) & self.pieces_of_type(KNIGHT))
            | (pseudo_attacks(KING, square) & self.pieces_of_type(KING))
            | (
                bishop_attacks(square, occupied)
                & (self.pieces_of_type(BISHOP) | self.pieces_of_type(QUEEN))
            )
            | (
                rook_attacks(square, occupied)
                & (self.pieces_of_type(ROOK) | self.pieces_of_type(QUEEN))
            )
        )

    def is_attacked(self, square: int, by_color: int) -> bool:
        return bool(self._attackers_to(square, self.occupied()) & self.pieces_of_color(by_color))

    def _king_targets(self, color: int) -> Iterator[int]:
        ksq = self.square_of(color, KING)
        occupied = self.occupied() ^ (1 << ksq)
        enemies = self.pieces_of_color(Color(color).opponent)
        for to in iter_squares(pseudo_attacks(KING, ksq) & ~self.pieces_of_color(color)):
            if not self._attackers_to(to, occupied) & enemies:
                yield to

    def has_legal_king_move(self, color: int) -> bool:
        """True if the king of ``color`` can step to a square that is not attacked."""
        return any(True for _ in self._king_targets(color))

    def material_signature(self, color: int) -> str:
        """Material as a code such as ``KRPkr``: ``color``'s pieces upper case first."""
        them = Color(color).opponent
        ours = "K" + "".join(
            _TYPE_TO_SYMBOL[pt] * self.piece_count(color, pt) for pt in _SIGNATURE_ORDER
        )
        theirs = "k" + "".join(
            _TYPE_TO_SYMBOL[pt].lower() * self.piece_count(them, pt) for pt in _SIGNATURE_ORDER
        )
        return ours + theirs

    def has_more_than_one(self, color: int) -> bool:
        """True if ``color`` has any piece besides its king."""
        return more_than_one(self.pieces_of_color(color))