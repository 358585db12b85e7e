"""Transposition table keyed by the position's incremental zobrist hash."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from schach.core.move import Move

DEFAULT_CAPACITY = 200_000


class Bound(IntEnum):
    """How a stored score relates to the true value of the node."""

    EXACT = 0
    LOWER = 1  # failed high: true score >= stored
    UPPER = 2  # failed low: true score <= stored

    @classmethod
    def classify(cls, score: int, alpha: int, beta: int) -> Bound:
        """Bound of *score* against the window the node was entered with."""
        if score <= alpha:
            return cls.UPPER
        if score >= beta:
            return cls.LOWER
        return cls.EXACT


@dataclass(slots=True)
class TTEntry:
    depth: int
    score: int
    bound: Bound
    best_move: Move | None

    def narrow(self, alpha: int, beta: int) -> tuple[int, int] | None:
        """Tighten ``(alpha, beta)`` with this entry.

        Returns ``None`` when the entry alone settles the node, in which case
        :attr:`score` is the value to return.
        """
        if self.bound is Bound.EXACT:
            return None
        if self.bound is Bound.LOWER:
            alpha = max(alpha, self.score)
        else:
            beta = min(beta, self.score)
        if alpha >= beta:
            return None
        return alpha, beta


class TranspositionTable:
    """Depth-preferred table of search results.

    A deeper entry is never replaced by a shallower one.  Once *capacity*
    distinct keys are stored the table starts over empty.
    """

    __slots__ = ("_entries", "_capacity")

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("Transposition table capacity must be positive")
        self._entries: dict[int, TTEntry] = {}
        self._capacity = capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def probe(self, key: int) -> TTEntry | None:
        return self._entries.get(key)

    def store(
        self,
        key: int,
        depth: int,
        score: int,
        bound: Bound,
        best_move: Move | None,
    ) -> None:
        current = self._entries.get(key)
        if current is None:
            if len(self._entries) >= self._capacity:
                self._entries.clear()
        elif current.depth > depth:
            return
        self._entries[key] = TTEntry(depth, score, bound, best_move)

    def clear(self) -> None:
        self._entries.clear()
