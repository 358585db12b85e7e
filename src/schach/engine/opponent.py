"""Computer opponent: opening book first, then alpha-beta search."""

from __future__ import annotations

import logging
import random

from schach.core.enums import Color, PieceType
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.piece import Piece
from schach.core.position import Position
from schach.engine.alphabeta import AlphaBetaEngine
from schach.engine.book import DEFAULT_BOOK, OpeningBook
from schach.engine.evaluation import PIECE_VALUES
from schach.engine.search import CancelCheck, DifficultyProfile, IEngine, SearchResult

_LOGGER = logging.getLogger(__name__)

# Values used to judge whether a moved piece is left hanging.
_HANG_VALUES: dict[PieceType, int] = {**PIECE_VALUES, PieceType.KING: 20_000}
_HANG_MARGIN = 50


def _value(piece: Piece | None) -> int:
    return _HANG_VALUES[piece.piece_type] if piece is not None else 0


def _resolve(difficulty: DifficultyProfile | str) -> DifficultyProfile:
    if isinstance(difficulty, DifficultyProfile):
        return difficulty
    return DifficultyProfile.from_name(difficulty)


def safe_moves(position: Position, moves: list[Move]) -> list[Move]:
    """The subset of *moves* that do not leave the moved piece en prise.

    A move is unsafe when an opponent reply captures the moved piece, the
    piece is worth clearly more than what the move captured, and it is either
    undefended or worth clearly more than the capturing piece.
    """
    board = position.board
    mover = position.side_to_move
    safe: list[Move] = []
    for move in moves:
        if board[move.from_sq] is None:
            continue
        captured_value = _value(board[move.to_sq])

        position.make_move(move)
        try:
            moved_value = _value(position.board[move.to_sq])
            gen = MoveGenerator(position)
            defended = gen.is_square_attacked(move.to_sq, mover)
            is_safe = True
            if moved_value > captured_value + _HANG_MARGIN:
                for reply in gen.generate_legal_moves():
                    if reply.to_sq != move.to_sq:
                        continue
                    attacker_value = _value(position.board[reply.from_sq])
                    if not defended or moved_value > attacker_value + _HANG_MARGIN:
                        is_safe = False
                        break
        finally:
            position.unmake_move(move)

        if is_safe:
            safe.append(move)
    return safe


class AIOpponent:
    """One computer player for one game session.

    Owns its engine, its seedable random source and whether the opening book
    is still in play.  The book is abandoned for the rest of the session the
    first time a position is not found in it.
    """

    __slots__ = ("_engine", "_book", "_book_active", "_rng", "_seed")

    def __init__(
        self,
        engine: IEngine | None = None,
        book: OpeningBook | None = DEFAULT_BOOK,
        seed: int | None = None,
    ) -> None:
        self._engine: IEngine = engine or AlphaBetaEngine()
        self._book = book
        self._seed = seed
        self._rng = random.Random(seed)
        self._book_active = book is not None

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def book_active(self) -> bool:
        return self._book_active

    def reset(self, seed: int | None = None) -> None:
        """Start a new game: re-seed and bring the book back into play."""
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)
        self._book_active = self._book is not None

    def search(
        self,
        position: Position,
        difficulty: DifficultyProfile | str = "medium",
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        """Full result for the side to move, book hits included."""
        profile = _resolve(difficulty)
        if self._book_active and self._book is not None:
            book_move = self._book.probe(position, self._rng)
            if book_move is not None:
                return SearchResult(book_move, 0, 0, 0, from_book=True)
            _LOGGER.debug("left the opening book at %r", position)
            self._book_active = False
        return self._engine.search(
            position, profile, rng=self._rng, is_cancelled=is_cancelled
        )

    def choose_move(
        self,
        position: Position,
        color: Color,
        difficulty: DifficultyProfile | str = "medium",
        is_cancelled: CancelCheck | None = None,
    ) -> Move | None:
        """Move for *color* in *position*; ``None`` if it has no legal move."""
        if color != position.side_to_move:
            raise ValueError(f"It is not {color}'s turn to move")
        return self.search(position, difficulty, is_cancelled).best_move

    def hint(
        self,
        position: Position,
        is_cancelled: CancelCheck | None = None,
    ) -> Move | None:
        """Suggestion for the side to move, preferring moves that hang nothing.

        Book moves still count; otherwise the hint profile searches without
        any deliberate mistakes.  Neither the session's book state nor its
        random stream is touched: book hints draw from a generator seeded by
        the session seed and the position.
        """
        if self._book is not None:
            hint_rng = random.Random(f"hint:{self._seed}:{position.zobrist_hash}")
            book_move = self._book.probe(position, hint_rng)
            if book_move is not None:
                return book_move

        work = position.copy()
        legal = MoveGenerator(work).generate_legal_moves()
        if not legal:
            return None
        candidates = safe_moves(work, legal) or legal
        result = self._engine.search(
            position,
            DifficultyProfile.hint(),
            is_cancelled=is_cancelled,
            root_moves=candidates,
        )
        return result.best_move
