"""Bitboards, a KPK bitbase, a board model, and endgame evaluation, scaling and material tables."""

__version__ = "0.1.0"

__all__ = ["bitboard", "bitbase", "board", "endgame", "scaling", "material"]