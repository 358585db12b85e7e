"""Human and computer seats."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from schach.core.enums import Color
from schach.engine.opponent import AIOpponent
from schach.engine.search import DifficultyProfile
from schach.game.interfaces import IPlayer

if TYPE_CHECKING:
    from schach.core.move import Move
    from schach.core.position import Position

RequestHook = Callable[["Position"], None]
CancelHook = Callable[[], None]


class HumanPlayer(IPlayer):
    """A seat whose moves come in through ``GameController.submit_move``."""

    __slots__ = ()

    def __init__(self, color: Color, name: str = "") -> None:
        super().__init__(color, name or f"Player ({color})")

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, position: Position) -> None:
        return None


class AIPlayer(IPlayer):
    """A computer seat backed by its own :class:`AIOpponent`.

    The move can be pulled synchronously with :meth:`choose_move`
    (``GameController.request_ai_move`` does this), or pushed: when
    *on_request_move* is given the controller calls it on every turn of this
    seat, and a GUI typically forwards the position to an ``EngineWorker``
    living on a ``QThread``.  *on_cancel* should stop that worker.
    """

    __slots__ = ("_profile", "_opponent", "_on_request_move", "_on_cancel")

    def __init__(
        self,
        color: Color,
        name: str = "Engine",
        difficulty: DifficultyProfile | str = "medium",
        opponent: AIOpponent | None = None,
        on_request_move: RequestHook | None = None,
        on_cancel: CancelHook | None = None,
    ) -> None:
        super().__init__(color, name)
        self._profile = (
            difficulty
            if isinstance(difficulty, DifficultyProfile)
            else DifficultyProfile.from_name(difficulty)
        )
        self._opponent = opponent if opponent is not None else AIOpponent()
        self._on_request_move = on_request_move
        self._on_cancel = on_cancel

    @property
    def is_human(self) -> bool:
        return False

    @property
    def profile(self) -> DifficultyProfile:
        return self._profile

    @property
    def opponent(self) -> AIOpponent:
        return self._opponent

    def choose_move(self, position: Position) -> Move | None:
        """Engine move for this seat; ``ValueError`` if it is not its turn."""
        return self._opponent.choose_move(position, self.color, self._profile)

    def request_move(self, position: Position) -> None:
        if self._on_request_move is not None:
            self._on_request_move(position)

    def cancel(self) -> None:
        if self._on_cancel is not None:
            self._on_cancel()
