"""Zobrist keys for incremental position hashing.

Keys are drawn once, at import time, from a fixed-seed generator so that
hashes are stable across runs (transposition-table tests rely on this).
"""

from __future__ import annotations

import random
from typing import Final

from schach.core.enums import CastlingRights, Color, PieceType
from schach.core.piece import Piece
from schach.core.types import Square

_SEED: Final = 0x5C4AC4


def _draw_keys() -> tuple[
    dict[Piece, tuple[int, ...]], int, tuple[int, ...], tuple[int, ...]
]:
    rng = random.Random(_SEED)
    pieces = {
        Piece(color, kind): tuple(rng.getrandbits(64) for _ in range(64))
        for color in Color
        for kind in PieceType
    }
    side = rng.getrandbits(64)
    castling = tuple(rng.getrandbits(64) for _ in range(16))
    en_passant = tuple(rng.getrandbits(64) for _ in range(64))
    return pieces, side, castling, en_passant


_PIECE_KEYS, _SIDE_KEY, _CASTLING_KEYS, _EN_PASSANT_KEYS = _draw_keys()


def piece_key(piece: Piece, sq: Square) -> int:
    return _PIECE_KEYS[piece][sq]


def side_to_move_key() -> int:
    """Toggled in whenever black is to move."""
    return _SIDE_KEY


def castling_key(castling: CastlingRights) -> int:
    return _CASTLING_KEYS[int(castling) & 0xF]


def en_passant_key(ep_square: Square) -> int:
    return _EN_PASSANT_KEYS[ep_square]
