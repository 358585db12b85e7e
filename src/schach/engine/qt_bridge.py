"""Qt side of the computer opponent.

:class:`EngineWorker` is meant to live on a ``QThread``.  The GUI sends it a
position plus a request id through a queued connection and gets exactly one
of four signals back for that id.  Results for stale ids are the receiver's
business to drop.
"""

from __future__ import annotations

import logging
import threading

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from schach.core.position import Position
from schach.engine.opponent import AIOpponent
from schach.engine.search import DifficultyProfile, SearchResult

_LOGGER = logging.getLogger(__name__)

# request_id used for errors that do not belong to a search
NO_REQUEST = -1


class EngineWorker(QObject):
    """Runs :meth:`AIOpponent.search` on a private copy of each position."""

    # request_id, move, score_cp, depth, nodes
    best_move_ready = pyqtSignal(int, object, int, int, int)
    search_cancelled = pyqtSignal(int)
    search_no_move = pyqtSignal(int)
    search_error = pyqtSignal(int, str)

    __slots__ = ("_stop", "_opponent", "_profile")

    def __init__(
        self,
        opponent: AIOpponent | None = None,
        *,
        difficulty: DifficultyProfile | str = "medium",
    ) -> None:
        super().__init__()
        self._opponent = opponent if opponent is not None else AIOpponent()
        self._profile = (
            difficulty
            if isinstance(difficulty, DifficultyProfile)
            else DifficultyProfile.from_name(difficulty)
        )
        self._stop = threading.Event()

    @property
    def profile(self) -> DifficultyProfile:
        return self._profile

    @pyqtSlot(object, int)
    def request_move(self, position_obj: object, request_id: int) -> None:
        if not isinstance(position_obj, Position):
            self.search_error.emit(
                request_id, f"Expected a Position, got {type(position_obj).__name__}"
            )
            return

        self._stop.clear()
        try:
            result = self._opponent.search(
                position_obj.copy(), self._profile, is_cancelled=self._stop.is_set
            )
        except Exception as exc:  # reported to the GUI thread instead
            _LOGGER.exception("search %d failed", request_id)
            self.search_error.emit(request_id, str(exc))
            return
        self._publish(request_id, result)

    @pyqtSlot()
    def cancel(self) -> None:
        """Ask the running search to stop; it reports ``search_cancelled``.

        Thread-safe: may be called directly from the GUI thread.
        """
        self._stop.set()

    @pyqtSlot(str)
    def set_difficulty(self, name: str) -> None:
        """Use the named profile from the next request on."""
        try:
            self._profile = DifficultyProfile.from_name(name)
        except ValueError as exc:
            self.search_error.emit(NO_REQUEST, str(exc))

    def _publish(self, request_id: int, result: SearchResult) -> None:
        if self._stop.is_set():
            self.search_cancelled.emit(request_id)
        elif result.best_move is None:
            self.search_no_move.emit(request_id)
        else:
            _LOGGER.debug(
                "request %d: %s (%d cp, depth %d, %d nodes)",
                request_id,
                result.best_move,
                result.score_cp,
                result.depth,
                result.nodes,
            )
            self.best_move_ready.emit(
                request_id,
                result.best_move,
                result.score_cp,
                result.depth,
                result.nodes,
            )
