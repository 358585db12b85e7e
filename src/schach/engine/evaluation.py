"""Static position evaluation in centipawns."""

from __future__ import annotations

from dataclasses import dataclass

from schach.core.board import Board, iter_bits
from schach.core.enums import Color, PieceType
from schach.core.move_generator import MoveGenerator
from schach.core.position import Position
from schach.core.types import Square, file_of, rank_of

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 0,
}


@dataclass(slots=True, frozen=True)
class EvalWeights:
    """Tunable terms of :class:`Evaluator`; all values are centipawns."""

    mobility: int = 10
    doubled_pawn: int = -20
    isolated_pawn: int = -15
    passed_pawn: int = 20
    passed_pawn_per_rank: int = 10
    pawn_shield: int = 15
    king_in_centre: int = -30
    king_open_file: int = -10
    bishop_pair: int = 50
    rook_open_file: int = 25
    rook_semi_open_file: int = 15
    rook_seventh_rank: int = 30
    # Non-king material below which the king switches to its endgame table.
    endgame_material: int = 3000


# ── Piece-square tables ─────────────────────────────────────────────────
# Laid out as seen from White: first row is rank 8, last row is rank 1.
# A white piece on ``sq`` reads ``table[sq ^ 56]``, a black one ``table[sq]``.

_PAWN_TABLE = (
    0, 0, 0, 0, 0, 0, 0, 0,
    50, 50, 50, 50, 50, 50, 50, 50,
    10, 10, 20, 30, 30, 20, 10, 10,
    5, 5, 10, 25, 25, 10, 5, 5,
    0, 0, 0, 20, 20, 0, 0, 0,
    5, -5, -10, 0, 0, -10, -5, 5,
    5, 10, 10, -20, -20, 10, 10, 5,
    0, 0, 0, 0, 0, 0, 0, 0,
)  # fmt: skip

_KNIGHT_TABLE = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20, 0, 0, 0, 0, -20, -40,
    -30, 0, 10, 15, 15, 10, 0, -30,
    -30, 5, 15, 20, 20, 15, 5, -30,
    -30, 0, 15, 20, 20, 15, 0, -30,
    -30, 5, 10, 15, 15, 10, 5, -30,
    -40, -20, 0, 5, 5, 0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)  # fmt: skip

_BISHOP_TABLE = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -10, 0, 5, 10, 10, 5, 0, -10,
    -10, 5, 5, 10, 10, 5, 5, -10,
    -10, 0, 10, 10, 10, 10, 0, -10,
    -10, 10, 10, 10, 10, 10, 10, -10,
    -10, 5, 0, 0, 0, 0, 5, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)  # fmt: skip

_ROOK_TABLE = (
    0, 0, 0, 0, 0, 0, 0, 0,
    5, 10, 10, 10, 10, 10, 10, 5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    0, 0, 0, 5, 5, 0, 0, 0,
)  # fmt: skip

_QUEEN_TABLE = (
    -20, -10, -10, -5, -5, -10, -10, -20,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -10, 0, 5, 5, 5, 5, 0, -10,
    -5, 0, 5, 5, 5, 5, 0, -5,
    0, 0, 5, 5, 5, 5, 0, -5,
    -10, 5, 5, 5, 5, 5, 0, -10,
    -10, 0, 5, 0, 0, 0, 0, -10,
    -20, -10, -10, -5, -5, -10, -10, -20,
)  # fmt: skip

_KING_MIDDLEGAME_TABLE = (
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    20, 20, 0, 0, 0, 0, 20, 20,
    20, 30, 10, 0, 0, 10, 30, 20,
)  # fmt: skip

_KING_ENDGAME_TABLE = (
    -50, -40, -30, -20, -20, -30, -40, -50,
    -30, -20, -10, 0, 0, -10, -20, -30,
    -30, -10, 20, 30, 30, 20, -10, -30,
    -30, -10, 30, 40, 40, 30, -10, -30,
    -30, -10, 30, 40, 40, 30, -10, -30,
    -30, -10, 20, 30, 30, 20, -10, -30,
    -30, -30, 0, 0, 0, 0, -30, -30,
    -50, -30, -30, -30, -30, -30, -30, -50,
)  # fmt: skip

_PIECE_TABLES: dict[PieceType, tuple[int, ...]] = {
    PieceType.PAWN: _PAWN_TABLE,
    PieceType.KNIGHT: _KNIGHT_TABLE,
    PieceType.BISHOP: _BISHOP_TABLE,
    PieceType.ROOK: _ROOK_TABLE,
    PieceType.QUEEN: _QUEEN_TABLE,
}


def piece_square_bonus(
    piece_type: PieceType, color: Color, sq: Square, endgame: bool = False
) -> int:
    """Positional bonus for *color*'s *piece_type* standing on *sq*."""
    if piece_type == PieceType.KING:
        table = _KING_ENDGAME_TABLE if endgame else _KING_MIDDLEGAME_TABLE
    else:
        table = _PIECE_TABLES[piece_type]
    return table[sq ^ 56] if color == Color.WHITE else table[sq]


# ── File / span masks ───────────────────────────────────────────────────

_FILE_A = 0x0101010101010101
FILE_MASKS: tuple[int, ...] = tuple(_FILE_A << f for f in range(8))
_ADJACENT_FILES: tuple[int, ...] = tuple(
    (FILE_MASKS[f - 1] if f > 0 else 0) | (FILE_MASKS[f + 1] if f < 7 else 0)
    for f in range(8)
)


def _passed_span(color: Color, sq: Square) -> int:
    """Squares in front of *sq* on its own and adjacent files."""
    files = FILE_MASKS[file_of(sq)] | _ADJACENT_FILES[file_of(sq)]
    rank = rank_of(sq)
    if color == Color.WHITE:
        ahead = ~((1 << ((rank + 1) * 8)) - 1) & 0xFFFFFFFFFFFFFFFF
    else:
        ahead = (1 << (rank * 8)) - 1
    return files & ahead


_PASSED_SPANS: dict[Color, tuple[int, ...]] = {
    color: tuple(_passed_span(color, sq) for sq in range(64)) for color in Color
}


class Evaluator:
    """Scores a position from the side to move's point of view.

    The score is a linear sum of material, piece-square tables, mobility,
    king safety, pawn structure, bishop pair and rook placement.  Mate and
    stalemate are left to the search.
    """

    __slots__ = ("weights",)

    def __init__(self, weights: EvalWeights | None = None) -> None:
        self.weights = weights or EvalWeights()

    def evaluate(self, position: Position) -> int:
        board = position.board
        endgame = self.non_king_material(board) < self.weights.endgame_material

        white = self._side_score(position, Color.WHITE, endgame)
        black = self._side_score(position, Color.BLACK, endgame)
        gen = MoveGenerator(position)
        white_moves = gen.count_pseudo_legal_moves(Color.WHITE)
        mobility = white_moves - gen.count_pseudo_legal_moves(Color.BLACK)

        score = white - black + mobility * self.weights.mobility
        return score if position.side_to_move == Color.WHITE else -score

    @staticmethod
    def non_king_material(board: Board) -> int:
        return sum(
            board.count(color, kind) * PIECE_VALUES[kind]
            for color in Color
            for kind in PIECE_VALUES
        )

    # -- Per-side terms -----------------------------------------------------

    def _side_score(self, position: Position, color: Color, endgame: bool) -> int:
        board = position.board
        score = 0
        for kind in PieceType:
            for sq in iter_bits(board.mask(color, kind)):
                score += PIECE_VALUES[kind]
                score += piece_square_bonus(kind, color, sq, endgame)

        score += self._pawn_structure(board, color)
        score += self._king_safety(board, color, endgame)
        score += self._rooks(board, color)
        if board.count(color, PieceType.BISHOP) >= 2:
            score += self.weights.bishop_pair
        return score

    def _pawn_structure(self, board: Board, color: Color) -> int:
        w = self.weights
        pawns = board.mask(color, PieceType.PAWN)
        enemy_pawns = board.mask(color.opposite, PieceType.PAWN)
        score = 0
        for file_mask in FILE_MASKS:
            on_file = (pawns & file_mask).bit_count()
            if on_file > 1:
                score += w.doubled_pawn * (on_file - 1)

        spans = _PASSED_SPANS[color]
        for sq in iter_bits(pawns):
            if not pawns & _ADJACENT_FILES[file_of(sq)]:
                score += w.isolated_pawn
            if not enemy_pawns & spans[sq]:
                advancement = rank_of(sq) if color == Color.WHITE else 7 - rank_of(sq)
                score += w.passed_pawn + advancement * w.passed_pawn_per_rank
        return score

    def _king_safety(self, board: Board, color: Color, endgame: bool) -> int:
        w = self.weights
        king_sq = board.king_square(color)
        king_file = file_of(king_sq)
        pawns = board.mask(color, PieceType.PAWN)
        score = 0

        shield_rank = 1 if color == Color.WHITE else 6
        if king_file >= 5:
            shield_files = range(5, 8)
        elif king_file <= 2:
            shield_files = range(0, 3)
        else:
            shield_files = range(0)
        for file in shield_files:
            if pawns & (1 << (shield_rank * 8 + file)):
                score += w.pawn_shield

        if 2 <= king_file <= 5 and rank_of(king_sq) == color.home_rank:
            score += w.king_in_centre

        if not endgame:
            for file in range(max(king_file - 1, 0), min(king_file + 1, 7) + 1):
                if not pawns & FILE_MASKS[file]:
                    score += w.king_open_file
        return score

    def _rooks(self, board: Board, color: Color) -> int:
        w = self.weights
        own_pawns = board.mask(color, PieceType.PAWN)
        all_pawns = own_pawns | board.mask(color.opposite, PieceType.PAWN)
        seventh = 6 if color == Color.WHITE else 1
        score = 0
        for sq in iter_bits(board.mask(color, PieceType.ROOK)):
            file_mask = FILE_MASKS[file_of(sq)]
            if not all_pawns & file_mask:
                score += w.rook_open_file
            elif not own_pawns & file_mask:
                score += w.rook_semi_open_file
            if rank_of(sq) == seventh:
                score += w.rook_seventh_rank
        return score
