"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from schach.core.enums import Color, PieceType

_KIND_LETTERS = " pnbrqk"  # indexed by PieceType value

_SYMBOLS: dict[Color, str] = {
    Color.WHITE: " ♙♘♗♖♕♔",
    Color.BLACK: " ♟♞♝♜♛♚",
}


@dataclass(frozen=True, slots=True)
class Piece:
    """A colored piece. Hashable, so it can key lookup tables."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        letter = _KIND_LETTERS[self.piece_type]
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """E.g. ``'N'`` -> white knight, ``'q'`` -> black queen."""
        index = _KIND_LETTERS.find(char.lower()) if len(char) == 1 else -1
        if index <= 0:
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, PieceType(index))

    @property
    def symbol(self) -> str:
        """Unicode figurine, e.g. ♞."""
        return _SYMBOLS[self.color][self.piece_type]
