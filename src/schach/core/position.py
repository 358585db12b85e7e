"""Position: board plus side to move, castling, en passant and clocks."""

from __future__ import annotations

from dataclasses import dataclass

from schach.core import zobrist
from schach.core.board import Board
from schach.core.enums import CastlingRights, Color, MoveFlag, PieceType
from schach.core.move import Move
from schach.core.piece import Piece
from schach.core.types import A1, A8, H1, H8, Square, file_of, make_square, rank_of

# Castling flag -> (rook from file, rook to file)
_ROOK_SHIFTS: dict[MoveFlag, tuple[int, int]] = {
    MoveFlag.CASTLE_KINGSIDE: (7, 5),
    MoveFlag.CASTLE_QUEENSIDE: (0, 3),
}

# Rights lost when anything moves from or onto a square.
_RIGHTS_LOST: dict[Square, CastlingRights] = {
    A1: CastlingRights.WHITE_QUEENSIDE,
    H1: CastlingRights.WHITE_KINGSIDE,
    A8: CastlingRights.BLACK_QUEENSIDE,
    H8: CastlingRights.BLACK_KINGSIDE,
    make_square(4, 0): CastlingRights.WHITE_BOTH,
    make_square(4, 7): CastlingRights.BLACK_BOTH,
}


@dataclass(slots=True)
class _Undo:
    """Everything :meth:`Position.unmake_move` cannot recompute."""

    castling: CastlingRights
    en_passant: Square | None
    halfmove_clock: int
    captured: Piece | None
    key: int


def en_passant_victim(move: Move) -> Square:
    """Square of the pawn removed by an en-passant capture."""
    return make_square(file_of(move.to_sq), rank_of(move.from_sq))


class Position:
    """A complete chess position.

    :meth:`make_move` and :meth:`unmake_move` form a strict pair: every
    ``make_move`` pushes an undo record that the matching ``unmake_move`` pops,
    restoring captured piece, castling rights, en-passant target, clocks and
    hash exactly.  Code that must not disturb a position it does not own
    should work on :meth:`copy` instead.

    The position also remembers the hash of every position reached since it
    was created (or copied from), which is what repetition detection uses.
    """

    __slots__ = (
        "board",
        "side_to_move",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
        "_key",
        "_undo_stack",
        "_seen",
        "_seen_counts",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.side_to_move = side_to_move
        self.castling = castling
        self.en_passant = en_passant
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self._key = self._full_hash()
        self._undo_stack: list[_Undo] = []
        self._seen: list[int] = [self._key]
        self._seen_counts: dict[int, int] = {self._key: 1}

    # ── Make / unmake ────────────────────────────────────────────────────

    def make_move(self, move: Move) -> None:
        """Apply *move* (assumed pseudo-legal) and push its undo record."""
        board = self.board
        mover = board[move.from_sq]
        if mover is None:
            raise ValueError(f"No piece on square {move.from_sq}")

        capture_sq = (
            en_passant_victim(move) if move.flag == MoveFlag.EN_PASSANT else move.to_sq
        )
        captured = board[capture_sq]
        self._undo_stack.append(
            _Undo(
                self.castling,
                self.en_passant,
                self.halfmove_clock,
                captured,
                self._key,
            )
        )

        key = self._key
        if captured is not None:
            key ^= zobrist.piece_key(captured, capture_sq)
            board[capture_sq] = None

        landed = mover
        if move.flag == MoveFlag.PROMOTION and move.promotion is not None:
            landed = Piece(mover.color, move.promotion)
        key ^= zobrist.piece_key(mover, move.from_sq)
        key ^= zobrist.piece_key(landed, move.to_sq)
        board[move.from_sq] = None
        board[move.to_sq] = landed

        shift = _ROOK_SHIFTS.get(move.flag)
        if shift is not None:
            rank = rank_of(move.from_sq)
            rook_from = make_square(shift[0], rank)
            rook_to = make_square(shift[1], rank)
            rook = board[rook_from]
            if rook is None:
                raise ValueError("Castling without a rook in the corner")
            key ^= zobrist.piece_key(rook, rook_from) ^ zobrist.piece_key(rook, rook_to)
            board[rook_from] = None
            board[rook_to] = rook

        if self.en_passant is not None:
            key ^= zobrist.en_passant_key(self.en_passant)
        self.en_passant = None
        if move.flag == MoveFlag.DOUBLE_PAWN:
            self.en_passant = (move.from_sq + move.to_sq) // 2
            key ^= zobrist.en_passant_key(self.en_passant)

        rights = self.castling
        rights &= ~_RIGHTS_LOST.get(move.from_sq, CastlingRights.NONE)
        rights &= ~_RIGHTS_LOST.get(move.to_sq, CastlingRights.NONE)
        if rights != self.castling:
            key ^= zobrist.castling_key(self.castling) ^ zobrist.castling_key(rights)
            self.castling = rights

        if mover.piece_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if mover.color == Color.BLACK:
            self.fullmove_number += 1

        self.side_to_move = mover.color.opposite
        self._key = key ^ zobrist.side_to_move_key()
        self._remember(self._key)

    def unmake_move(self, move: Move) -> None:
        """Revert the most recent :meth:`make_move`, which must be *move*."""
        undo = self._undo_stack.pop()
        self._forget(self._key)

        board = self.board
        landed = board[move.to_sq]
        if landed is None:
            raise ValueError(f"unmake_move({move}) does not match the last move")
        mover = landed
        if move.flag == MoveFlag.PROMOTION:
            mover = Piece(landed.color, PieceType.PAWN)

        board[move.to_sq] = None
        board[move.from_sq] = mover
        if undo.captured is not None:
            capture_sq = (
                en_passant_victim(move)
                if move.flag == MoveFlag.EN_PASSANT
                else move.to_sq
            )
            board[capture_sq] = undo.captured

        shift = _ROOK_SHIFTS.get(move.flag)
        if shift is not None:
            rank = rank_of(move.from_sq)
            rook_to = make_square(shift[1], rank)
            board[make_square(shift[0], rank)] = board[rook_to]
            board[rook_to] = None

        self.side_to_move = mover.color
        if mover.color == Color.BLACK:
            self.fullmove_number -= 1
        self.castling = undo.castling
        self.en_passant = undo.en_passant
        self.halfmove_clock = undo.halfmove_clock
        self._key = undo.key

    def make_null_move(self) -> None:
        """Pass the turn without moving (search heuristics only)."""
        self._undo_stack.append(
            _Undo(self.castling, self.en_passant, self.halfmove_clock, None, self._key)
        )
        key = self._key
        if self.en_passant is not None:
            key ^= zobrist.en_passant_key(self.en_passant)
            self.en_passant = None
        self.halfmove_clock += 1
        if self.side_to_move == Color.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.side_to_move.opposite
        self._key = key ^ zobrist.side_to_move_key()
        self._remember(self._key)

    def unmake_null_move(self) -> None:
        undo = self._undo_stack.pop()
        self._forget(self._key)
        self.side_to_move = self.side_to_move.opposite
        if self.side_to_move == Color.BLACK:
            self.fullmove_number -= 1
        self.en_passant = undo.en_passant
        self.halfmove_clock = undo.halfmove_clock
        self._key = undo.key

    # ── Repetition bookkeeping ───────────────────────────────────────────

    def _remember(self, key: int) -> None:
        self._seen.append(key)
        self._seen_counts[key] = self._seen_counts.get(key, 0) + 1

    def _forget(self, key: int) -> None:
        self._seen.pop()
        remaining = self._seen_counts[key] - 1
        if remaining:
            self._seen_counts[key] = remaining
        else:
            del self._seen_counts[key]

    def repetition_count(self) -> int:
        """How often the current position has occurred, including now."""
        return self._seen_counts.get(self._key, 0)

    # ── Hashing / copying ────────────────────────────────────────────────

    @property
    def zobrist_hash(self) -> int:
        """Key over placement, side to move, castling rights and en passant."""
        return self._key

    def _full_hash(self) -> int:
        key = zobrist.castling_key(self.castling)
        if self.side_to_move == Color.BLACK:
            key ^= zobrist.side_to_move_key()
        if self.en_passant is not None:
            key ^= zobrist.en_passant_key(self.en_passant)
        for sq, piece in self.board:
            key ^= zobrist.piece_key(piece, sq)
        return key

    def copy(self) -> Position:
        """Independent clone, keeping repetition history but no undo records."""
        clone = Position.__new__(Position)
        clone.board = self.board.copy()
        clone.side_to_move = self.side_to_move
        clone.castling = self.castling
        clone.en_passant = self.en_passant
        clone.halfmove_clock = self.halfmove_clock
        clone.fullmove_number = self.fullmove_number
        clone._key = self._key
        clone._undo_stack = []
        clone._seen = self._seen.copy()
        clone._seen_counts = self._seen_counts.copy()
        return clone

    def __repr__(self) -> str:
        from schach.core.notation.fen import position_to_fen

        return f"Position({position_to_fen(self)!r})"
