"""Weighted opening book keyed by the first four FEN fields."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from schach.core.enums import MoveFlag
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.notation.fen import position_key_fen
from schach.core.position import Position
from schach.core.types import Square, parse_square

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BookMove:
    from_sq: Square
    to_sq: Square
    weight: int

    @classmethod
    def of(cls, from_name: str, to_name: str, weight: int) -> BookMove:
        return cls(parse_square(from_name), parse_square(to_name), weight)


def book_key(position: Position, legal: Sequence[Move] | None = None) -> str:
    """Placement, side, castling and en-passant fields of *position*.

    The en-passant field only counts when an en-passant capture is actually
    available, so ``1.e4`` maps to the same key whether or not the FEN
    recorded ``e3``.
    """
    fields = position_key_fen(position).split(" ")
    if position.en_passant is not None:
        if legal is None:
            legal = MoveGenerator(position).generate_legal_moves()
        if not any(m.flag == MoveFlag.EN_PASSANT for m in legal):
            fields[3] = "-"
    return " ".join(fields)


class OpeningBook:
    """Candidate moves with relative weights for known early positions."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Sequence[BookMove]]) -> None:
        self._entries = {key: tuple(moves) for key, moves in entries.items()}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, position: object) -> bool:
        return isinstance(position, Position) and book_key(position) in self._entries

    def candidates(self, position: Position) -> tuple[BookMove, ...]:
        return self._entries.get(book_key(position), ())

    def probe(self, position: Position, rng: random.Random) -> Move | None:
        """Weighted random book move for *position*, or ``None``.

        Entries that are not legal in *position* are skipped.
        """
        legal = MoveGenerator(position).generate_legal_moves()
        entries = self._entries.get(book_key(position, legal))
        if not entries:
            return None

        playable: list[Move] = []
        weights: list[int] = []
        for entry in entries:
            move = next(
                (
                    m
                    for m in legal
                    if m.from_sq == entry.from_sq and m.to_sq == entry.to_sq
                ),
                None,
            )
            if move is not None and entry.weight > 0:
                playable.append(move)
                weights.append(entry.weight)
        if not playable:
            return None

        move = rng.choices(playable, weights=weights)[0]
        _LOGGER.debug("book hit: %s out of %d candidates", move, len(playable))
        return move


_B = BookMove.of

DEFAULT_BOOK = OpeningBook(
    {
        # Starting position
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -": (
            _B("e2", "e4", 40),  # King's pawn
            _B("d2", "d4", 35),  # Queen's pawn
            _B("c2", "c4", 15),  # English
            _B("g1", "f3", 10),  # Reti
        ),
        # 1. e4
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq -": (
            _B("e7", "e5", 35),  # Open game
            _B("c7", "c5", 30),  # Sicilian
            _B("e7", "e6", 20),  # French
            _B("c7", "c6", 15),  # Caro-Kann
        ),
        # 1. e4 e5
        "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq -": (
            _B("g1", "f3", 60),
            _B("f1", "c4", 25),  # Bishop's opening
            _B("f2", "f4", 15),  # King's gambit
        ),
        # 1. e4 e5 2. Nf3
        "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq -": (
            _B("b8", "c6", 70),
            _B("g8", "f6", 20),  # Petrov
            _B("d7", "d6", 10),  # Philidor
        ),
        # 1. e4 e5 2. Nf3 Nc6
        "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq -": (
            _B("f1", "c4", 50),  # Italian
            _B("f1", "b5", 40),  # Ruy Lopez
            _B("d2", "d4", 10),  # Scotch
        ),
        # 1. d4
        "rnbqkbnr/pppppppp/8/8/3P4/8/PPP1PPPP/RNBQKBNR b KQkq -": (
            _B("d7", "d5", 40),
            _B("g8", "f6", 35),  # Indian defences
            _B("e7", "e6", 15),
            _B("f7", "f5", 10),  # Dutch
        ),
        # 1. d4 d5
        "rnbqkbnr/ppp1pppp/8/3p4/3P4/8/PPP1PPPP/RNBQKBNR w KQkq -": (
            _B("c2", "c4", 60),  # Queen's gambit
            _B("g1", "f3", 25),
            _B("c1", "f4", 15),  # London
        ),
        # 1. d4 Nf6
        "rnbqkb1r/pppppppp/5n2/8/3P4/8/PPP1PPPP/RNBQKBNR w KQkq -": (
            _B("c2", "c4", 50),
            _B("g1", "f3", 30),
            _B("c1", "f4", 20),  # London
        ),
        # 1. e4 c5
        "rnbqkbnr/pp1ppppp/8/2p5/4P3/8/PPPP1PPP/RNBQKBNR w KQkq -": (
            _B("g1", "f3", 50),  # Open Sicilian
            _B("b1", "c3", 25),  # Closed Sicilian
            _B("c2", "c3", 25),  # Alapin
        ),
    }
)
