# endgamekit

Chess endgame knowledge in pure Python. The package provides 64-bit
bitboards with sliding-piece attacks and a king-and-pawn versus king
bitbase. It has specialised evaluation and scaling functions for common
endgames. It also has a material table that gives each set of pieces a game
phase, an imbalance score and scale factors.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Bitboards (`endgamekit.bitboard`)

A bitboard is a plain `int`. Squares are integers from 0 (a1) to 63 (h8).
Colours are `Color.WHITE` (0) and `Color.BLACK` (1). Piece types are
`PieceType.PAWN` through `PieceType.KING`. `Square.E4` and its siblings name
the squares.

```python
from endgamekit import bitboard as bb

e4 = bb.make_square(4, 3)
attacks = bb.rook_attacks(e4, bb.sq_bb(bb.Square.E7))
print(bb.popcount(attacks))
print(bb.pretty(attacks))
print(list(bb.iter_squares(bb.between_bb(0, 63))))
```

The module also has these functions:

- Squares: `file_of`, `rank_of`, `relative_square`, `relative_rank`, `opposite_colors`.
- Bit operations: `lsb`, `msb`, `frontmost_sq`, `backmost_sq`, `more_than_one`, `pext`.
- Masks: `shift_bb`, `file_bb`, `rank_bb`, `adjacent_files_bb`, `forward_ranks_bb`, `forward_file_bb`, `pawn_attack_span`, `passed_pawn_span`, `line_bb`.
- Distances: `distance`, `distance_file`, `distance_rank`.
- Attacks: `bishop_attacks`, `queen_attacks`, `pawn_attacks`, `pawn_attacks_bb`, `pawn_double_attacks_bb`, `pseudo_attacks`, `attacks_bb`, `sliding_attack`.

`lsb` and `msb` raise `ValueError` on an empty bitboard. `attacks_bb`
refuses pawns.

## KPK bitbase (`endgamekit.bitbase`)

```python
from endgamekit import bitbase

# white king, white pawn (files a-d, ranks 2-7), black king, side to move
is_win = bitbase.probe(0, 11, 63, 0)
```

`probe` returns `True` where white wins. It raises `ValueError` for squares
out of range, a pawn outside files a-d or ranks 2-7, or a bad side to move.
The table comes from `build_table()`. It is built once, on first use, and
building it takes a while. `bitbase_index` gives the position's index in the
table.

## Boards (`endgamekit.board`)

`Board.from_fen` reads the piece placement and the side to move. The
remaining FEN fields are ignored. A `Board` can also be built from a mapping
of squares to `Piece(color, piece_type)`. Each side needs exactly one king,
and no pawn may stand on the first or last rank.

A board answers these queries:

- Pieces: `pieces`, `pieces_of_type`, `pieces_of_color`, `occupied`, `piece_on`, `square_of`, `piece_count`.
- Material: `non_pawn_material`, `material_signature`. A signature is a code such as `KRPkr`.
- Pawns: `is_passed_pawn`.
- Attacks and king moves: `is_attacked`, `has_legal_king_move`.

## Endgames, scaling and material

```python
from endgamekit.board import Board
from endgamekit import endgame, scaling, material

board = Board.from_fen("8/8/8/4k3/8/8/4P3/4K3 w - - 0 1")
print(endgame.evaluate_kpk(board, 0))

entry = material.probe(board)
if entry.has_specialized_eval():
    print(entry.evaluate(board))
else:
    print(entry.scale_factor(board, 0))
```

Each module covers these endgames:

- `endgame`: `evaluate_kxk`, `evaluate_kbnk`, `evaluate_kpk`, `evaluate_krkp`, `evaluate_krkb`, `evaluate_krkn`, `evaluate_kqkp`, `evaluate_kqkr`, `evaluate_knnkp` and `evaluate_knnk`. Scores are from the side to move's point of view.
- `scaling`: `scale_kbpsk`, `scale_kqkrps`, `scale_krpkr`, `scale_krpkb`, `scale_krppkrp`, `scale_kpsk`, `scale_kbpkb`, `scale_kbppkb`, `scale_kbpkn` and `scale_kpkp`. Each returns a scale factor. `SCALE_FACTOR_DRAW` is 0. `SCALE_FACTOR_NONE` means no specific knowledge applies.

Every function takes the board and the stronger side. It raises
`ValueError` when the material does not fit its endgame.

`material.probe` returns a `MaterialEntry` for the material on a board and
caches it by piece counts. `material.material_entry` always computes a fresh
one. An entry carries:

- `game_phase`: from 0 to 128.
- `score`: the imbalance as `(midgame, endgame)`.
- Any specialised evaluation or scaling functions.
- `factors`: the fallback scale factors.

`material.imbalance` computes the polynomial imbalance on its own.

## What the package does not do

The package has no move generation beyond king moves, no search and no
full-position evaluation. It has no command-line program or engine protocol.
It evaluates and scales only the endgame material configurations listed
above.