"""Standard Algebraic Notation (SAN)."""

from __future__ import annotations

import re

from schach.core.enums import MoveFlag, PieceType
from schach.core.errors import IllegalMoveError, ParseError
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.position import Position
from schach.core.types import FILE_NAMES, file_of, parse_square, rank_of, square_name

_LETTERS: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_KINDS: dict[str, PieceType] = {v: k for k, v in _LETTERS.items()}

_SAN_RE = re.compile(
    r"^(?P<piece>[NBRQK])?"
    r"(?P<file>[a-h])?(?P<rank>[1-8])?"
    r"(?P<capture>x)?"
    r"(?P<to>[a-h][1-8])"
    r"(?:=?(?P<promotion>[NBRQ]))?$"
)


def _disambiguation(position: Position, move: Move, kind: PieceType) -> str:
    board = position.board
    rivals = [
        m.from_sq
        for m in MoveGenerator(position).generate_legal_moves()
        if m.to_sq == move.to_sq
        and m.from_sq != move.from_sq
        and board[m.from_sq] is not None
        and board[m.from_sq].piece_type == kind  # type: ignore[union-attr]
    ]
    if not rivals:
        return ""
    if all(file_of(sq) != file_of(move.from_sq) for sq in rivals):
        return FILE_NAMES[file_of(move.from_sq)]
    if all(rank_of(sq) != rank_of(move.from_sq) for sq in rivals):
        return str(rank_of(move.from_sq) + 1)
    return square_name(move.from_sq)


def move_to_san(position: Position, move: Move) -> str:
    """SAN for a legal *move* in *position* (the position before the move)."""
    piece = position.board[move.from_sq]
    if piece is None:
        raise IllegalMoveError(f"No piece on {square_name(move.from_sq)}")

    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        san = "O-O"
    elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
        san = "O-O-O"
    else:
        capture = (
            position.board[move.to_sq] is not None or move.flag == MoveFlag.EN_PASSANT
        )
        if piece.piece_type == PieceType.PAWN:
            san = FILE_NAMES[file_of(move.from_sq)] if capture else ""
        else:
            san = _LETTERS[piece.piece_type] + _disambiguation(
                position, move, piece.piece_type
            )
        if capture:
            san += "x"
        san += square_name(move.to_sq)
        if move.promotion is not None:
            san += "=" + _LETTERS[move.promotion]

    position.make_move(move)
    try:
        gen = MoveGenerator(position)
        if gen.is_in_check(position.side_to_move):
            san += "+" if gen.generate_legal_moves() else "#"
    finally:
        position.unmake_move(move)
    return san


def parse_san(position: Position, san: str) -> Move:
    """Resolve *san* to the matching legal move in *position*.

    Raises :class:`ParseError` for text that is not SAN at all and
    :class:`IllegalMoveError` when no (or more than one) legal move matches.
    """
    legal = MoveGenerator(position).generate_legal_moves()
    text = san.rstrip("+#!?")

    if text in ("O-O", "0-0", "O-O-O", "0-0-0"):
        flag = MoveFlag.CASTLE_KINGSIDE if len(text) == 3 else MoveFlag.CASTLE_QUEENSIDE
        for move in legal:
            if move.flag == flag:
                return move
        raise IllegalMoveError(f"Illegal move: {san}")

    match = _SAN_RE.match(text)
    if match is None:
        raise ParseError(f"Not a SAN move: {san!r}")

    kind = _KINDS[match["piece"]] if match["piece"] else PieceType.PAWN
    to_sq = parse_square(match["to"])
    promotion = _KINDS[match["promotion"]] if match["promotion"] else None
    from_file = FILE_NAMES.index(match["file"]) if match["file"] else None
    from_rank = int(match["rank"]) - 1 if match["rank"] else None

    board = position.board
    candidates = [
        m
        for m in legal
        if m.to_sq == to_sq
        and m.promotion == promotion
        and board[m.from_sq] is not None
        and board[m.from_sq].piece_type == kind  # type: ignore[union-attr]
        and (from_file is None or file_of(m.from_sq) == from_file)
        and (from_rank is None or rank_of(m.from_sq) == from_rank)
    ]
    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise IllegalMoveError(f"Illegal move: {san}")
    raise IllegalMoveError(f"Ambiguous move: {san} -> {candidates}")
