"""Core domain layer: pure chess rules with no external dependencies.

Quick start::

    from schach.core import MoveGenerator, Rules, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    for move in MoveGenerator(pos).generate_legal_moves():
        print(move)
    print(Rules.status(pos))
"""

from schach.core.board import Board
from schach.core.enums import (
    CastlingRights,
    CastlingSide,
    Color,
    GameStatus,
    MoveFlag,
    PieceType,
)
from schach.core.errors import (
    ChessError,
    IllegalMoveError,
    NoLegalMoveError,
    ParseError,
)
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.notation import (
    STARTING_FEN,
    move_to_san,
    parse_san,
    position_from_fen,
    position_key_fen,
    position_to_fen,
)
from schach.core.piece import Piece
from schach.core.position import Position
from schach.core.rules import Rules
from schach.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "CastlingSide",
    "Color",
    "GameStatus",
    "MoveFlag",
    "PieceType",
    # Errors
    "ChessError",
    "IllegalMoveError",
    "NoLegalMoveError",
    "ParseError",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "Move",
    "MoveGenerator",
    "Piece",
    "Position",
    "Rules",
    # Notation
    "STARTING_FEN",
    "move_to_san",
    "parse_san",
    "position_from_fen",
    "position_key_fen",
    "position_to_fen",
]
