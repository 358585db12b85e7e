"""FEN parsing and serialization."""

from __future__ import annotations

from schach.core.board import Board
from schach.core.enums import CastlingRights, Color, PieceType
from schach.core.errors import ParseError
from schach.core.piece import Piece
from schach.core.position import Position
from schach.core.types import Square, make_square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_LETTERS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)
_SIDES = {"w": Color.WHITE, "b": Color.BLACK}


def _parse_placement(placement: str, fen: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ParseError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for index, text in enumerate(ranks):
        rank = 7 - index
        file = 0
        for ch in text:
            if ch.isdigit():
                if not "1" <= ch <= "8":
                    raise ParseError(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += int(ch)
            else:
                if file >= 8:
                    raise ParseError(f"Invalid FEN rank width: {fen!r}")
                try:
                    piece = Piece.from_char(ch)
                except ValueError as exc:
                    raise ParseError(f"{exc} in FEN {fen!r}") from None
                if piece.piece_type == PieceType.PAWN and rank in (0, 7):
                    raise ParseError(f"Pawn on back rank in FEN: {fen!r}")
                board[make_square(file, rank)] = piece
                file += 1
            if file > 8:
                raise ParseError(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise ParseError(f"Invalid FEN rank width: {fen!r}")

    for color in Color:
        if board.count(color, PieceType.KING) != 1:
            raise ParseError(f"FEN must contain exactly one {color} king: {fen!r}")
    return board


def _parse_castling(text: str) -> CastlingRights:
    """Rights from a ``KQkq`` subset; letters must keep that order."""
    if text == "-":
        return CastlingRights.NONE
    rights = CastlingRights.NONE
    remaining = iter(_CASTLING_LETTERS)
    for ch in text:
        right = next((r for letter, r in remaining if letter == ch), None)
        if right is None:
            raise ParseError(f"Invalid FEN castling field: {text!r}")
        rights |= right
    return rights


def _parse_en_passant(text: str, side: Color) -> Square | None:
    if text == "-":
        return None
    try:
        sq = parse_square(text)
    except ValueError:
        raise ParseError(f"Invalid FEN en-passant square: {text!r}") from None
    expected_rank = 5 if side == Color.WHITE else 2
    if rank_of(sq) != expected_rank:
        raise ParseError(f"Invalid FEN en-passant square for side to move: {text!r}")
    return sq


def _parse_counter(text: str, name: str, minimum: int) -> int:
    if not text.isdigit():
        raise ParseError(f"Invalid FEN {name}: {text!r}")
    value = int(text)
    if value < minimum:
        raise ParseError(f"Invalid FEN {name}: {text!r}")
    return value


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`.

    The two clock fields are optional and default to ``0 1``.  Anything
    malformed raises :class:`~schach.core.errors.ParseError`; nothing is
    silently defaulted.
    """
    parts = fen.split()
    if not 4 <= len(parts) <= 6:
        raise ParseError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    board = _parse_placement(parts[0], fen)
    side = _SIDES.get(parts[1])
    if side is None:
        raise ParseError(f"Invalid FEN side-to-move field: {parts[1]!r}")
    castling = _parse_castling(parts[2])
    en_passant = _parse_en_passant(parts[3], side)
    halfmove = _parse_counter(parts[4], "halfmove clock", 0) if len(parts) > 4 else 0
    fullmove = _parse_counter(parts[5], "fullmove number", 1) if len(parts) > 5 else 1

    return Position(board, side, castling, en_passant, halfmove, fullmove)


def placement_to_fen(board: Board) -> str:
    rows: list[str] = []
    for rank in range(7, -1, -1):
        row = ""
        empty = 0
        for file in range(8):
            piece = board[make_square(file, rank)]
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)
    return "/".join(rows)


def position_key_fen(pos: Position) -> str:
    """First four FEN fields: placement, side, castling, en passant."""
    side = "w" if pos.side_to_move == Color.WHITE else "b"
    castling = "".join(ch for ch, right in _CASTLING_LETTERS if pos.castling & right)
    ep = square_name(pos.en_passant) if pos.en_passant is not None else "-"
    return f"{placement_to_fen(pos.board)} {side} {castling or '-'} {ep}"


def position_to_fen(pos: Position) -> str:
    """Serialize a :class:`Position` to a full six-field FEN."""
    return f"{position_key_fen(pos)} {pos.halfmove_clock} {pos.fullmove_number}"
