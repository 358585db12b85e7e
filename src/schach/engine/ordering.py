"""Move ordering for the alpha-beta search.

Hash move first, then promotions and captures by MVV-LVA, then quiet moves
ranked by the killer and history tables.  A small piece-square delta breaks
ties among otherwise equal moves.
"""

from __future__ import annotations

from schach.core.enums import Color, MoveFlag, PieceType
from schach.core.move import Move
from schach.core.position import Position
from schach.engine.evaluation import PIECE_VALUES, piece_square_bonus

# MVV-LVA treats the king as the most valuable attacker.
_ORDER_VALUES: dict[PieceType, int] = {**PIECE_VALUES, PieceType.KING: 20_000}

HASH_MOVE_BONUS = 100_000
PROMOTION_BONUS = 20_000
CAPTURE_BONUS = 10_000
CASTLING_BONUS = 120
KILLER_BONUSES = (9_000, 8_000)
HISTORY_FACTOR = 32
HISTORY_CAP = 8_000

_UNORDERED = -1_000_000


def is_quiet(position: Position, move: Move) -> bool:
    """Neither a capture nor a promotion."""
    if move.flag in (MoveFlag.PROMOTION, MoveFlag.EN_PASSANT):
        return False
    return position.board[move.to_sq] is None


def victim_type(position: Position, move: Move) -> PieceType | None:
    if move.flag == MoveFlag.EN_PASSANT:
        return PieceType.PAWN
    target = position.board[move.to_sq]
    return target.piece_type if target is not None else None


class MoveOrderer:
    """Killer moves per ply and a history score per ``(side, from, to)``.

    Both tables only ever learn from quiet moves that caused a beta cutoff.
    """

    __slots__ = ("_killers", "_history")

    def __init__(self) -> None:
        self._killers: dict[int, tuple[Move, ...]] = {}
        self._history: dict[tuple[Color, int, int], int] = {}

    def reset(self) -> None:
        self._killers.clear()
        self._history.clear()

    # ── Learning ─────────────────────────────────────────────────────────

    def add_killer(self, move: Move, ply: int) -> None:
        killers = self._killers.get(ply, ())
        if killers and killers[0] == move:
            return
        self._killers[ply] = (move, *killers[: len(KILLER_BONUSES) - 1])

    def add_history(self, side: Color, move: Move, depth: int) -> None:
        key = (side, move.from_sq, move.to_sq)
        step = max(depth, 1) ** 2 * HISTORY_FACTOR
        self._history[key] = min(HISTORY_CAP, self._history.get(key, 0) + step)

    def record_cutoff(self, side: Color, move: Move, ply: int, depth: int) -> None:
        self.add_killer(move, ply)
        self.add_history(side, move, depth)

    # ── Scoring ──────────────────────────────────────────────────────────

    def killer_bonus(self, move: Move, ply: int) -> int:
        for slot, killer in enumerate(self._killers.get(ply, ())):
            if killer == move:
                return KILLER_BONUSES[slot]
        return 0

    def history_bonus(self, side: Color, move: Move) -> int:
        return self._history.get((side, move.from_sq, move.to_sq), 0)

    def score(
        self,
        position: Position,
        move: Move,
        hash_move: Move | None = None,
        ply: int = 0,
    ) -> int:
        piece = position.board[move.from_sq]
        if piece is None:
            return _UNORDERED

        total = HASH_MOVE_BONUS if hash_move is not None and move == hash_move else 0
        if move.promotion is not None:
            total += PROMOTION_BONUS + _ORDER_VALUES[move.promotion]

        victim = victim_type(position, move)
        if victim is not None:
            total += (
                CAPTURE_BONUS
                + 10 * _ORDER_VALUES[victim]
                - _ORDER_VALUES[piece.piece_type]
            )
        elif move.promotion is None:
            total += self.killer_bonus(move, ply)
            total += self.history_bonus(piece.color, move)

        if move.castling_side is not None:
            total += CASTLING_BONUS
        total += piece_square_bonus(piece.piece_type, piece.color, move.to_sq)
        total -= piece_square_bonus(piece.piece_type, piece.color, move.from_sq)
        return total

    def sort(
        self,
        position: Position,
        moves: list[Move],
        hash_move: Move | None = None,
        ply: int = 0,
    ) -> list[Move]:
        """*moves* best-first; the input list is left as is."""
        return sorted(
            moves,
            key=lambda move: self.score(position, move, hash_move, ply),
            reverse=True,
        )
