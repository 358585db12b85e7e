"""Rule checks derived from a position: check, mate, stalemate, draws."""

from __future__ import annotations

from typing import TYPE_CHECKING

from schach.core.enums import Color, GameStatus, PieceType
from schach.core.move_generator import MoveGenerator
from schach.core.types import is_light_square

if TYPE_CHECKING:
    from schach.core.position import Position

FIFTY_MOVE_HALFMOVES = 100
REPETITION_LIMIT = 3


class Rules:
    """Stateless rule checker operating on a :class:`Position`.

    Draw policy: fifty-move, threefold repetition and insufficient material
    all end the game immediately (no claim needed).
    """

    @staticmethod
    def is_in_check(position: Position) -> bool:
        return MoveGenerator(position).is_in_check(position.side_to_move)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return gen.is_in_check(position.side_to_move) and not gen.generate_legal_moves()

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        gen = MoveGenerator(position)
        if gen.is_in_check(position.side_to_move):
            return False
        return not gen.generate_legal_moves()

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """K v K, K+minor v K, and K+B v K+B with bishops on one square color."""
        board = position.board
        total = board.piece_count()
        if total == 2:
            return True

        minors = [
            (color, kind)
            for color in Color
            for kind in (PieceType.KNIGHT, PieceType.BISHOP)
            if board.has_piece(color, kind)
        ]
        if total == 3:
            return len(minors) == 1

        if total == 4:
            white_bishops = board.squares_of(Color.WHITE, PieceType.BISHOP)
            black_bishops = board.squares_of(Color.BLACK, PieceType.BISHOP)
            if len(white_bishops) == 1 and len(black_bishops) == 1:
                return is_light_square(white_bishops[0]) == is_light_square(
                    black_bishops[0]
                )
        return False

    @staticmethod
    def is_fifty_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= FIFTY_MOVE_HALFMOVES

    @staticmethod
    def is_threefold_repetition(position: Position) -> bool:
        return position.repetition_count() >= REPETITION_LIMIT

    @staticmethod
    def draw_status(position: Position) -> GameStatus | None:
        """The rule-based draw that applies, ignoring stalemate."""
        if Rules.is_insufficient_material(position):
            return GameStatus.DRAW_INSUFFICIENT_MATERIAL
        if Rules.is_fifty_move_rule(position):
            return GameStatus.DRAW_FIFTY_MOVE
        if Rules.is_threefold_repetition(position):
            return GameStatus.DRAW_REPETITION
        return None

    @staticmethod
    def status(position: Position) -> GameStatus:
        """Full status; mate and stalemate take precedence over draw rules."""
        gen = MoveGenerator(position)
        in_check = gen.is_in_check(position.side_to_move)
        if not gen.generate_legal_moves():
            return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
        draw = Rules.draw_status(position)
        if draw is not None:
            return draw
        return GameStatus.CHECK if in_check else GameStatus.ONGOING

    @staticmethod
    def winner(position: Position, status: GameStatus) -> Color | None:
        """Winning color for a decisive *status* reached in *position*."""
        if status is GameStatus.CHECKMATE:
            return position.side_to_move.opposite
        return None
