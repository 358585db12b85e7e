"""Pseudo-legal and legal move generation plus attack detection."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from schach.core.board import iter_bits
from schach.core.enums import CastlingRights, CastlingSide, Color, MoveFlag, PieceType
from schach.core.move import Move
from schach.core.types import Square, file_of, make_square, on_board, rank_of

if TYPE_CHECKING:
    from schach.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
)
KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
    (-1, 0),
    (-1, 1),
)
DIAGONALS: tuple[tuple[int, int], ...] = ((1, 1), (1, -1), (-1, -1), (-1, 1))
ORTHOGONALS: tuple[tuple[int, int], ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))

PROMOTION_CHOICES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


# -- Precomputed geometry ----------------------------------------------------


def _leaper_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    table = []
    for sq in range(64):
        f, r = file_of(sq), rank_of(sq)
        table.append(
            tuple(
                make_square(f + df, r + dr)
                for df, dr in offsets
                if on_board(f + df, r + dr)
            )
        )
    return tuple(table)


def _slider_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    table = []
    for sq in range(64):
        rays = []
        for df, dr in directions:
            f, r = file_of(sq) + df, rank_of(sq) + dr
            ray = []
            while on_board(f, r):
                ray.append(make_square(f, r))
                f += df
                r += dr
            rays.append(tuple(ray))
        table.append(tuple(rays))
    return tuple(table)


def _as_masks(targets: tuple[tuple[Square, ...], ...]) -> tuple[int, ...]:
    return tuple(sum(1 << t for t in squares) for squares in targets)


def _pawn_attack_sources(color: Color) -> tuple[int, ...]:
    """Per square: mask of squares a *color* pawn would attack it from."""
    masks = []
    for sq in range(64):
        f, r = file_of(sq), rank_of(sq) - color.forward
        mask = 0
        for df in (-1, 1):
            if on_board(f + df, r):
                mask |= 1 << make_square(f + df, r)
        masks.append(mask)
    return tuple(masks)


KNIGHT_TARGETS = _leaper_targets(KNIGHT_OFFSETS)
KING_TARGETS = _leaper_targets(KING_OFFSETS)
_KNIGHT_MASKS = _as_masks(KNIGHT_TARGETS)
_KING_MASKS = _as_masks(KING_TARGETS)
_PAWN_SOURCES = {color: _pawn_attack_sources(color) for color in Color}

BISHOP_RAYS = _slider_rays(DIAGONALS)
ROOK_RAYS = _slider_rays(ORTHOGONALS)
QUEEN_RAYS = tuple(b + r for b, r in zip(BISHOP_RAYS, ROOK_RAYS))

# side -> (king destination, squares that must be empty, squares the king
# crosses that must not be attacked, rook corner)
_CastlePath = tuple[Square, tuple[Square, ...], tuple[Square, ...], Square]


def _castling_paths(color: Color) -> dict[CastlingSide, _CastlePath]:
    rank = color.home_rank
    b, c, d, f, g = (make_square(file, rank) for file in (1, 2, 3, 5, 6))
    return {
        CastlingSide.KINGSIDE: (g, (f, g), (f, g), make_square(7, rank)),
        CastlingSide.QUEENSIDE: (c, (b, c, d), (d, c), make_square(0, rank)),
    }


_CASTLING_PATHS = {color: _castling_paths(color) for color in Color}
_CASTLE_FLAGS = {
    CastlingSide.KINGSIDE: MoveFlag.CASTLE_KINGSIDE,
    CastlingSide.QUEENSIDE: MoveFlag.CASTLE_QUEENSIDE,
}


class MoveGenerator:
    """Move generation for the side to move of a :class:`Position`.

    Legality filtering applies each candidate with ``make_move`` and reverts
    it with the paired ``unmake_move``, so the position is left exactly as it
    was found.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    # -- Public API ---------------------------------------------------------

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the side to move."""
        return self._filter_legal(self.generate_pseudo_legal_moves())

    def generate_legal_moves_from(self, sq: Square) -> list[Move]:
        """Legal moves of the piece on *sq*; empty if it is not the mover's."""
        piece = self._board[sq]
        color = self._pos.side_to_move
        if piece is None or piece.color != color:
            return []
        moves: list[Move] = []
        _GENERATORS[piece.piece_type](self, sq, color, moves)
        return self._filter_legal(moves)

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """Moves obeying piece movement rules; may leave the king in check."""
        color = self._pos.side_to_move
        board = self._board
        moves: list[Move] = []
        for kind, generate in _GENERATORS.items():
            for sq in iter_bits(board.mask(color, kind)):
                generate(self, sq, color, moves)
        return moves

    def count_pseudo_legal_moves(self, color: Color) -> int:
        """Mobility count for *color*, regardless of whose turn it is.

        Castling and en passant are ignored; they barely matter for mobility
        and would need the side to move.
        """
        board = self._board
        own = board.occupancy(color)
        total = 0
        for sq in iter_bits(board.mask(color, PieceType.KNIGHT)):
            total += (_KNIGHT_MASKS[sq] & ~own).bit_count()
        for sq in iter_bits(board.mask(color, PieceType.KING)):
            total += (_KING_MASKS[sq] & ~own).bit_count()
        for kind, rays in (
            (PieceType.BISHOP, BISHOP_RAYS),
            (PieceType.ROOK, ROOK_RAYS),
            (PieceType.QUEEN, QUEEN_RAYS),
        ):
            for sq in iter_bits(board.mask(color, kind)):
                for ray in rays[sq]:
                    for to_sq in ray:
                        target = board[to_sq]
                        if target is None:
                            total += 1
                            continue
                        if target.color != color:
                            total += 1
                        break
        step = 8 * color.forward
        for sq in iter_bits(board.mask(color, PieceType.PAWN)):
            ahead = sq + step
            if 0 <= ahead < 64 and board[ahead] is None:
                total += 1
        return total

    # -- Attack detection ---------------------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked?"""
        return self.is_square_attacked(
            self._board.king_square(color), color.opposite
        )

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?

        Pure geometry over the current placement; castling is never
        considered, so this is safe to call while generating castling moves.
        """
        board = self._board
        if board.mask(by_color, PieceType.PAWN) & _PAWN_SOURCES[by_color][sq]:
            return True
        if board.mask(by_color, PieceType.KNIGHT) & _KNIGHT_MASKS[sq]:
            return True
        if board.mask(by_color, PieceType.KING) & _KING_MASKS[sq]:
            return True

        queens = board.mask(by_color, PieceType.QUEEN)
        for rays, kind in (
            (BISHOP_RAYS, PieceType.BISHOP),
            (ROOK_RAYS, PieceType.ROOK),
        ):
            if not (queens | board.mask(by_color, kind)):
                continue
            for ray in rays[sq]:
                for to_sq in ray:
                    piece = board[to_sq]
                    if piece is None:
                        continue
                    if piece.color == by_color and piece.piece_type in (
                        kind,
                        PieceType.QUEEN,
                    ):
                        return True
                    break
        return False

    # -- Legality filter ----------------------------------------------------

    def _filter_legal(self, candidates: list[Move]) -> list[Move]:
        pos = self._pos
        mover = pos.side_to_move
        legal: list[Move] = []
        for move in candidates:
            pos.make_move(move)
            if not self.is_in_check(mover):
                legal.append(move)
            pos.unmake_move(move)
        return legal

    # -- Per piece-kind generators -----------------------------------------

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        forward = color.forward
        rank = rank_of(sq)
        file = file_of(sq)
        promotes = rank + forward in (0, 7)
        start_rank = 1 if color == Color.WHITE else 6

        one = sq + 8 * forward
        if board[one] is None:
            if promotes:
                self._add_promotions(sq, one, None, moves)
            else:
                moves.append(Move(sq, one, piece=PieceType.PAWN))
                two = one + 8 * forward
                if rank == start_rank and board[two] is None:
                    moves.append(
                        Move(sq, two, MoveFlag.DOUBLE_PAWN, piece=PieceType.PAWN)
                    )

        for df in (-1, 1):
            if not 0 <= file + df < 8:
                continue
            target_sq = one + df
            target = board[target_sq]
            if target is not None:
                if target.color == color:
                    continue
                if promotes:
                    self._add_promotions(sq, target_sq, target.piece_type, moves)
                else:
                    moves.append(
                        Move(
                            sq,
                            target_sq,
                            piece=PieceType.PAWN,
                            captured=target.piece_type,
                        )
                    )
            elif target_sq == self._pos.en_passant:
                moves.append(
                    Move(
                        sq,
                        target_sq,
                        MoveFlag.EN_PASSANT,
                        piece=PieceType.PAWN,
                        captured=PieceType.PAWN,
                    )
                )

    @staticmethod
    def _add_promotions(
        from_sq: Square,
        to_sq: Square,
        captured: PieceType | None,
        moves: list[Move],
    ) -> None:
        for kind in PROMOTION_CHOICES:
            moves.append(
                Move(
                    from_sq,
                    to_sq,
                    MoveFlag.PROMOTION,
                    kind,
                    piece=PieceType.PAWN,
                    captured=captured,
                )
            )

    def _gen_leaper(
        self,
        sq: Square,
        color: Color,
        targets: tuple[Square, ...],
        kind: PieceType,
        moves: list[Move],
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq, piece=kind))
            elif target.color != color:
                moves.append(Move(sq, to_sq, piece=kind, captured=target.piece_type))

    def _gen_slider(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        kind: PieceType,
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq, piece=kind))
                    continue
                if target.color != color:
                    moves.append(
                        Move(sq, to_sq, piece=kind, captured=target.piece_type)
                    )
                break

    def _gen_knight(self, sq: Square, color: Color, moves: list[Move]) -> None:
        self._gen_leaper(sq, color, KNIGHT_TARGETS[sq], PieceType.KNIGHT, moves)

    def _gen_bishop(self, sq: Square, color: Color, moves: list[Move]) -> None:
        self._gen_slider(sq, color, BISHOP_RAYS[sq], PieceType.BISHOP, moves)

    def _gen_rook(self, sq: Square, color: Color, moves: list[Move]) -> None:
        self._gen_slider(sq, color, ROOK_RAYS[sq], PieceType.ROOK, moves)

    def _gen_queen(self, sq: Square, color: Color, moves: list[Move]) -> None:
        self._gen_slider(sq, color, QUEEN_RAYS[sq], PieceType.QUEEN, moves)

    def _gen_king(self, sq: Square, color: Color, moves: list[Move]) -> None:
        self._gen_leaper(sq, color, KING_TARGETS[sq], PieceType.KING, moves)
        if self._pos.castling & CastlingRights.for_color(color):
            self._gen_castling(sq, color, moves)

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        if king_sq != make_square(4, color.home_rank):
            return
        opponent = color.opposite
        in_check: bool | None = None
        for side, path in _CASTLING_PATHS[color].items():
            king_to, between, crossed, corner = path
            if not self._pos.castling & CastlingRights.for_side(color, side):
                continue
            rook = board[corner]
            if rook is None or rook.color != color or rook.piece_type != PieceType.ROOK:
                continue
            if any(board[s] is not None for s in between):
                continue
            if in_check is None:
                in_check = self.is_square_attacked(king_sq, opponent)
            if in_check:
                return
            if any(self.is_square_attacked(s, opponent) for s in crossed):
                continue
            moves.append(
                Move(king_sq, king_to, _CASTLE_FLAGS[side], piece=PieceType.KING)
            )


_Generator = Callable[[MoveGenerator, Square, Color, list[Move]], None]

# Piece kind -> generator: the single place that dispatches on piece kind.
_GENERATORS: dict[PieceType, _Generator] = {
    PieceType.PAWN: MoveGenerator._gen_pawn,
    PieceType.KNIGHT: MoveGenerator._gen_knight,
    PieceType.BISHOP: MoveGenerator._gen_bishop,
    PieceType.ROOK: MoveGenerator._gen_rook,
    PieceType.QUEEN: MoveGenerator._gen_queen,
    PieceType.KING: MoveGenerator._gen_king,
}
