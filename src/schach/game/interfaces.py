"""Contracts between the game controller and what it drives.

``GameController`` only ever talks to an :class:`IPlayer`, so a human seat,
a synchronous engine and an engine running on a worker thread are
interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from schach.core.enums import Color

if TYPE_CHECKING:
    from schach.core.move import Move
    from schach.core.position import Position


# ── Controller state ─────────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Where the controller is in the life of one game."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    THINKING = auto()  # a computer seat has been asked for a move
    GAME_OVER = auto()

    @property
    def accepts_moves(self) -> bool:
        return self in (GamePhase.AWAITING_MOVE, GamePhase.THINKING)


class DrawOffer(IntEnum):
    NONE = 0
    OFFERED = auto()
    ACCEPTED = auto()
    DECLINED = auto()


# ── Seats ────────────────────────────────────────────────────────────────────


class IPlayer(ABC):
    """One side of the board.

    Subclasses decide how a move is produced once :meth:`request_move` is
    called; the move itself always reaches the game through
    ``GameController.submit_move``.
    """

    __slots__ = ("_color", "_name")

    def __init__(self, color: Color, name: str) -> None:
        self._color = color
        self._name = name

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    @abstractmethod
    def is_human(self) -> bool: ...

    @abstractmethod
    def request_move(self, position: Position) -> None:
        """It is this seat's turn in *position* (a copy it may keep)."""

    def cancel(self) -> None:
        """Abandon a move that is still being worked out."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._color}, {self._name!r})"


class IGameController(ABC):
    """Operations a UI or a script drives a game with."""

    @abstractmethod
    def new_game(self, white: IPlayer, black: IPlayer, fen: str | None = None) -> None:
        """Seat *white* and *black* and start from *fen* (default: initial)."""

    @abstractmethod
    def submit_move(self, move: Move) -> bool:
        """Play *move* for the side to move; ``False`` if it was refused."""

    @abstractmethod
    def request_ai_move(self) -> Move | None:
        """Have the computer seat to move pick and play its move now."""

    @abstractmethod
    def resign(self, color: Color) -> None: ...

    @abstractmethod
    def offer_draw(self, color: Color) -> None: ...

    @abstractmethod
    def accept_draw(self, color: Color) -> None: ...

    @abstractmethod
    def decline_draw(self) -> None: ...

    @abstractmethod
    def undo_move(self) -> bool:
        """Take back one ply; ``False`` when there is nothing to take back."""

    @abstractmethod
    def redo_move(self) -> bool:
        """Replay the last undone ply; ``False`` when there is none."""
