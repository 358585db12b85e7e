"""Board: piece placement on the 64 squares."""

from __future__ import annotations

from collections.abc import Iterator

from schach.core.enums import Color, PieceType
from schach.core.piece import Piece
from schach.core.types import Square, make_square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def iter_bits(mask: int) -> Iterator[Square]:
    """Yield the square index of every set bit, lowest first."""
    while mask:
        low = mask & -mask
        yield low.bit_length() - 1
        mask ^= low


class Board:
    """Mailbox array kept in sync with one occupancy mask per colored piece.

    The masks make "where are the white knights" and material counting cheap;
    the mailbox makes "what stands on e4" cheap.
    """

    __slots__ = ("_cells", "_masks")

    def __init__(self) -> None:
        self._cells: list[Piece | None] = [None] * 64
        # index: color * 6 + (piece_type - 1)
        self._masks: list[int] = [0] * 12

    @staticmethod
    def _slot(color: Color, piece_type: PieceType) -> int:
        return int(color) * 6 + int(piece_type) - 1

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._cells[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        previous = self._cells[sq]
        if previous is piece or previous == piece:
            return
        bit = 1 << sq
        if previous is not None:
            self._masks[self._slot(previous.color, previous.piece_type)] &= ~bit
        self._cells[sq] = piece
        if piece is not None:
            self._masks[self._slot(piece.color, piece.piece_type)] |= bit

    def is_empty(self, sq: Square) -> bool:
        return self._cells[sq] is None

    def __iter__(self) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares with their pieces, a1 first."""
        for sq, piece in enumerate(self._cells):
            if piece is not None:
                yield sq, piece

    # -- Queries ------------------------------------------------------------

    def mask(self, color: Color, piece_type: PieceType) -> int:
        """Occupancy mask of *color*'s pieces of *piece_type*."""
        return self._masks[self._slot(color, piece_type)]

    def occupancy(self, color: Color) -> int:
        base = int(color) * 6
        masks = self._masks
        return (
            masks[base]
            | masks[base + 1]
            | masks[base + 2]
            | masks[base + 3]
            | masks[base + 4]
            | masks[base + 5]
        )

    def squares_of(self, color: Color, piece_type: PieceType) -> list[Square]:
        return list(iter_bits(self.mask(color, piece_type)))

    def count(self, color: Color, piece_type: PieceType) -> int:
        return self.mask(color, piece_type).bit_count()

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        return self.mask(color, piece_type) != 0

    def king_square(self, color: Color) -> Square:
        kings = self.mask(color, PieceType.KING)
        if not kings:
            raise ValueError(f"No {color} king on board")
        return (kings & -kings).bit_length() - 1

    def piece_count(self) -> int:
        return sum(mask.bit_count() for mask in self._masks)

    # -- Copying / factories -----------------------------------------------

    def copy(self) -> Board:
        clone = Board.__new__(Board)
        clone._cells = self._cells.copy()
        clone._masks = self._masks.copy()
        return clone

    @classmethod
    def initial(cls) -> Board:
        """Standard starting arrangement."""
        board = cls()
        for file, kind in enumerate(_BACK_RANK):
            board[make_square(file, 0)] = Piece(Color.WHITE, kind)
            board[make_square(file, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            board[make_square(file, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            board[make_square(file, 7)] = Piece(Color.BLACK, kind)
        return board

    # -- Dunders ------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        lines: list[str] = []
        for rank in range(7, -1, -1):
            cells = (self._cells[make_square(file, rank)] for file in range(8))
            row = " ".join(str(p) if p is not None else "." for p in cells)
            lines.append(f"{rank + 1} {row}")
        lines.append("  a b c d e f g h")
        return "\n".join(lines)
