"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass, field

from schach.core.enums import CastlingSide, MoveFlag, PieceType
from schach.core.types import Square, parse_square, square_name

_PROMOTION_LETTERS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}
_PROMOTION_BY_LETTER = {v: k for k, v in _PROMOTION_LETTERS.items()}

_CASTLING_SIDES: dict[MoveFlag, CastlingSide] = {
    MoveFlag.CASTLE_KINGSIDE: CastlingSide.KINGSIDE,
    MoveFlag.CASTLE_QUEENSIDE: CastlingSide.QUEENSIDE,
}


@dataclass(frozen=True, slots=True)
class Move:
    """A move request.

    Identity is ``(from_sq, to_sq, flag, promotion)``.  The moving and
    captured piece kinds are filled in by the move generator for convenience
    (ordering, notation, persistence) and do not take part in equality, so a
    bare ``Move(E2, E4, MoveFlag.DOUBLE_PAWN)`` matches the generated one.
    """

    from_sq: Square
    to_sq: Square
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None
    piece: PieceType | None = field(default=None, compare=False)
    captured: PieceType | None = field(default=None, compare=False)

    @property
    def castling_side(self) -> CastlingSide | None:
        return _CASTLING_SIDES.get(self.flag)

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    @property
    def is_capture(self) -> bool:
        return self.captured is not None or self.flag == MoveFlag.EN_PASSANT

    @property
    def uci(self) -> str:
        """Long algebraic form, e.g. ``e7e8q``."""
        text = square_name(self.from_sq) + square_name(self.to_sq)
        if self.promotion is not None:
            text += _PROMOTION_LETTERS[self.promotion]
        return text

    def __str__(self) -> str:
        return self.uci

    @classmethod
    def from_uci(cls, text: str) -> Move:
        """Parse a bare ``e2e4`` / ``e7e8q`` request (no special flags).

        The result is only useful for matching against generated moves by
        squares and promotion; use :meth:`GameState.apply_move` for that.
        """
        if len(text) not in (4, 5):
            raise ValueError(f"Invalid UCI move: {text!r}")
        promotion = None
        if len(text) == 5:
            promotion = _PROMOTION_BY_LETTER.get(text[4])
            if promotion is None:
                raise ValueError(f"Invalid promotion piece in {text!r}")
        return cls(
            parse_square(text[:2]),
            parse_square(text[2:4]),
            MoveFlag.PROMOTION if promotion is not None else MoveFlag.NORMAL,
            promotion,
        )
