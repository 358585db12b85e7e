"""Notation package: FEN and SAN parsing and serialization."""

from schach.core.notation.fen import (
    STARTING_FEN,
    placement_to_fen,
    position_from_fen,
    position_key_fen,
    position_to_fen,
)
from schach.core.notation.san import move_to_san, parse_san

__all__ = [
    "STARTING_FEN",
    "move_to_san",
    "parse_san",
    "placement_to_fen",
    "position_from_fen",
    "position_key_fen",
    "position_to_fen",
]
