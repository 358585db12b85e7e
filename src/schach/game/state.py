"""Game state machine: applies moves, tracks history and reports status."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from schach.core.enums import Color, GameStatus, PieceType
from schach.core.errors import IllegalMoveError
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.notation import (
    STARTING_FEN,
    move_to_san,
    position_from_fen,
    position_to_fen,
)
from schach.core.piece import Piece
from schach.core.position import Position, en_passant_victim
from schach.core.rules import Rules
from schach.core.types import Square, square_name
from schach.game.interfaces import DrawOffer, GamePhase

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single entry in the move history."""

    move: Move
    piece: Piece
    san: str
    fen_after: str
    captured: Piece | None = None
    was_check: bool = False

    @property
    def color(self) -> Color:
        return self.piece.color

    @property
    def was_capture(self) -> bool:
        return self.captured is not None

    def as_dict(self) -> dict[str, Any]:
        """Flat payload for persistence or transport."""
        move = self.move
        side = move.castling_side
        return {
            "color": str(self.piece.color),
            "from": square_name(move.from_sq),
            "to": square_name(move.to_sq),
            "piece": str(self.piece.piece_type),
            "captured": str(self.captured.piece_type) if self.captured else None,
            "promotion": str(move.promotion) if move.promotion is not None else None,
            "castling": side.value if side is not None else None,
            "en_passant": move.is_en_passant,
            "check": self.was_check,
            "notation": self.san,
            "fen": self.fen_after,
        }


@dataclass(frozen=True, slots=True)
class StatusReport:
    in_check: bool
    status: GameStatus


@dataclass
class GameState:
    """Owns the canonical position of one game and everything that happened.

    Pure data/logic: no threading, no UI.  Moves are validated against the
    legal-move list before anything is touched, so a rejected move leaves the
    state exactly as it was.
    """

    position: Position = field(init=False)
    phase: GamePhase = field(default=GamePhase.NOT_STARTED, init=False)
    status: GameStatus = field(default=GameStatus.ONGOING, init=False)
    winner: Color | None = field(default=None, init=False)
    draw_offer: DrawOffer = field(default=DrawOffer.NONE, init=False)
    draw_offer_by: Color | None = field(default=None, init=False)
    move_history: list[MoveRecord] = field(default_factory=list, init=False)
    start_fen: str = field(default=STARTING_FEN, init=False)
    _redo_stack: list[MoveRecord] = field(default_factory=list, init=False)
    _captured: dict[Color, list[Piece]] = field(init=False)

    def __post_init__(self) -> None:
        self.position = position_from_fen(STARTING_FEN)
        self._captured = {Color.WHITE: [], Color.BLACK: []}

    # ── Initialisation ───────────────────────────────────────────────────

    def setup(self, fen: str | None = None) -> None:
        """Initialise (or reset) the game; a bad *fen* raises ``ParseError``."""
        start_fen = STARTING_FEN if fen is None else fen
        position = position_from_fen(start_fen)
        self.start_fen = start_fen
        self.position = position
        self.phase = GamePhase.AWAITING_MOVE
        self.winner = None
        self.draw_offer = DrawOffer.NONE
        self.draw_offer_by = None
        self.move_history.clear()
        self._redo_stack.clear()
        self._captured = {Color.WHITE: [], Color.BLACK: []}
        self._refresh_status()

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    @property
    def fen(self) -> str:
        return position_to_fen(self.position)

    @property
    def is_game_over(self) -> bool:
        return self.status.is_terminal

    @property
    def ply_count(self) -> int:
        """Number of half-moves played."""
        return len(self.move_history)

    @property
    def fullmove_display(self) -> int:
        """Current full-move number for display."""
        return (self.ply_count // 2) + 1

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def legal_moves(self, square: Square | None = None) -> list[Move]:
        """Legal moves, optionally only those of the piece on *square*.

        Empty once the game is over.
        """
        if self.is_game_over:
            return []
        gen = MoveGenerator(self.position)
        if square is None:
            return gen.generate_legal_moves()
        return gen.generate_legal_moves_from(square)

    def game_status(self) -> StatusReport:
        return StatusReport(Rules.is_in_check(self.position), self.status)

    def captured_pieces(self, color: Color) -> list[Piece]:
        """Pieces of *color* that have been captured, in capture order."""
        return list(self._captured[color])

    # ── Move application ─────────────────────────────────────────────────

    def apply_move(
        self,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> MoveRecord:
        """Play the legal move *from_sq* -> *to_sq*.

        A promotion without an explicit choice becomes a queen.  Raises
        :class:`IllegalMoveError` and changes nothing if the move is not legal.
        """
        self._ensure_playable()
        piece = self.position.board[from_sq]
        if piece is None:
            raise IllegalMoveError(f"No piece on {square_name(from_sq)}")
        if piece.color != self.side_to_move:
            raise IllegalMoveError(
                f"Piece on {square_name(from_sq)} belongs to {piece.color}, "
                f"but it is {self.side_to_move}'s turn"
            )

        wanted = promotion
        candidates = [
            m
            for m in MoveGenerator(self.position).generate_legal_moves_from(from_sq)
            if m.to_sq == to_sq
        ]
        if any(m.promotion is not None for m in candidates) and wanted is None:
            wanted = PieceType.QUEEN
        for move in candidates:
            if move.promotion == wanted:
                return self._apply(move)
        raise IllegalMoveError(
            f"Illegal move: {square_name(from_sq)}{square_name(to_sq)}"
        )

    def push(self, move: Move) -> MoveRecord:
        """Play *move* if it is in the legal set (matched by value)."""
        self._ensure_playable()
        for legal in MoveGenerator(self.position).generate_legal_moves():
            if legal == move:
                return self._apply(legal)
        raise IllegalMoveError(f"Illegal move: {move}")

    def undo(self) -> MoveRecord | None:
        """Take back the last move; it can be replayed with :meth:`redo`."""
        if not self.move_history:
            return None
        record = self.move_history.pop()
        self.position.unmake_move(record.move)
        if record.captured is not None:
            self._captured[record.captured.color].pop()
        self._redo_stack.append(record)
        self.winner = None
        self.draw_offer = DrawOffer.NONE
        self.draw_offer_by = None
        self._refresh_status()
        return record

    def redo(self) -> MoveRecord | None:
        """Replay the most recently undone move, if any."""
        if not self._redo_stack or self.is_game_over:
            return None
        record = self._redo_stack.pop()
        return self._apply(record.move, clear_redo=False)

    # ── Resignation / draw ───────────────────────────────────────────────

    def resign(self, color: Color) -> None:
        if self.is_game_over:
            return
        self.status = GameStatus.RESIGNED
        self.winner = color.opposite
        self.phase = GamePhase.GAME_OVER
        self._log_game_over()

    def agree_draw(self) -> None:
        if self.is_game_over:
            return
        self.status = GameStatus.DRAW_AGREEMENT
        self.winner = None
        self.draw_offer = DrawOffer.ACCEPTED
        self.draw_offer_by = None
        self.phase = GamePhase.GAME_OVER
        self._log_game_over()

    # ── Internal ─────────────────────────────────────────────────────────

    def _ensure_playable(self) -> None:
        if self.is_game_over:
            raise IllegalMoveError(f"Game is over ({self.status})")

    def _apply(self, move: Move, *, clear_redo: bool = True) -> MoveRecord:
        position = self.position
        piece = position.board[move.from_sq]
        assert piece is not None
        capture_sq = en_passant_victim(move) if move.is_en_passant else move.to_sq
        captured = position.board[capture_sq]

        san = move_to_san(position, move)
        position.make_move(move)
        record = MoveRecord(
            move=move,
            piece=piece,
            san=san,
            fen_after=position_to_fen(position),
            captured=captured,
            was_check=Rules.is_in_check(position),
        )
        self.move_history.append(record)
        if captured is not None:
            self._captured[captured.color].append(captured)
        if clear_redo:
            self._redo_stack.clear()
        # Any move cancels a pending offer.
        self.draw_offer = DrawOffer.NONE
        self.draw_offer_by = None

        self._refresh_status()
        if self.is_game_over:
            self._log_game_over()
        return record

    def _refresh_status(self) -> None:
        self.status = Rules.status(self.position)
        self.winner = Rules.winner(self.position, self.status)
        if self.status.is_terminal:
            self.phase = GamePhase.GAME_OVER
        elif self.phase == GamePhase.GAME_OVER:
            self.phase = GamePhase.AWAITING_MOVE

    def _log_game_over(self) -> None:
        _LOGGER.info(
            "Game over after %d plies: %s (winner: %s)",
            self.ply_count,
            self.status,
            self.winner or "none",
        )
