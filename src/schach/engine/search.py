"""Shared engine search models and protocol."""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from schach.core.move import Move
    from schach.core.position import Position

CancelCheck = Callable[[], bool]


@dataclass(slots=True, frozen=True)
class SearchOptions:
    """Switches for the search refinements layered on plain alpha-beta.

    Turning everything off leaves a textbook fail-hard alpha-beta whose root
    score equals an unpruned minimax at the same depth.
    """

    quiescence: bool = True
    null_move: bool = True
    late_move_reduction: bool = True
    tt_cutoffs: bool = True

    @classmethod
    def plain(cls) -> SearchOptions:
        return cls(
            quiescence=False,
            null_move=False,
            late_move_reduction=False,
            tt_cutoffs=False,
        )


@dataclass(slots=True, frozen=True)
class DifficultyProfile:
    """Search constraints for one named playing strength."""

    name: str
    max_depth: int = 3
    time_limit_ms: int | None = 3000
    blunder_chance: float = 0.0
    options: SearchOptions = field(default_factory=SearchOptions)

    @classmethod
    def easy(cls) -> DifficultyProfile:
        return cls("easy", max_depth=2, time_limit_ms=1000, blunder_chance=0.3)

    @classmethod
    def medium(cls) -> DifficultyProfile:
        return cls("medium", max_depth=3, time_limit_ms=3000)

    @classmethod
    def hard(cls) -> DifficultyProfile:
        return cls("hard", max_depth=4, time_limit_ms=5000)

    @classmethod
    def hint(cls) -> DifficultyProfile:
        return cls("hint", max_depth=4, time_limit_ms=3000)

    @classmethod
    def from_name(cls, name: str) -> DifficultyProfile:
        """Resolve ``easy``/``medium``/``hard``/``hint`` (case-insensitive)."""
        factory = _PRESETS.get(name.strip().lower())
        if factory is None:
            raise ValueError(f"Unknown difficulty: {name!r}")
        return factory()


_PRESETS: dict[str, Callable[[], DifficultyProfile]] = {
    "easy": DifficultyProfile.easy,
    "medium": DifficultyProfile.medium,
    "hard": DifficultyProfile.hard,
    "hint": DifficultyProfile.hint,
}

DIFFICULTY_NAMES: tuple[str, ...] = ("easy", "medium", "hard")


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search."""

    best_move: Move | None
    score_cp: int
    depth: int
    nodes: int
    from_book: bool = False


class IEngine(Protocol):
    """Protocol for chess engines used by the opponent and the Qt worker."""

    def search(
        self,
        position: Position,
        profile: DifficultyProfile,
        rng: random.Random | None = None,
        is_cancelled: CancelCheck | None = None,
        root_moves: Sequence[Move] | None = None,
    ) -> SearchResult: ...
