"""GameController: drives one game between two seats.

The controller owns the :class:`GameState`, asks whichever seat is to move
for a move and publishes what happened through :class:`GameEvents`.
Everything runs on the caller's thread; an ``EngineWorker`` on a ``QThread``
hands its result back through :meth:`GameController.submit_move`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from schach.core.enums import Color, GameStatus
from schach.core.errors import IllegalMoveError, NoLegalMoveError
from schach.core.move import Move
from schach.game.interfaces import DrawOffer, GamePhase, IGameController, IPlayer
from schach.game.player import AIPlayer
from schach.game.state import GameState, MoveRecord, StatusReport

_LOGGER = logging.getLogger(__name__)

# ── Events ───────────────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, GameState], None]
GameOverCallback = Callable[[GameStatus, Color | None], None]  # status, winner
StatusCallback = Callable[[StatusReport], None]
PhaseCallback = Callable[[GamePhase], None]


def _notify(handlers: Iterable[Callable[..., None]], *args: Any) -> None:
    for handler in list(handlers):
        handler(*args)


@dataclass
class GameEvents:
    """Subscriber lists; append a callable to listen."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_status_changed: list[StatusCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    __slots__ = ("_state", "_seats", "events")

    def __init__(self) -> None:
        self._state = GameState()
        self._seats: dict[Color, IPlayer] = {}
        self.events = GameEvents()

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def current_player(self) -> IPlayer | None:
        return self._seats.get(self._state.side_to_move)

    def player(self, color: Color) -> IPlayer | None:
        return self._seats.get(color)

    # ── Game lifecycle ───────────────────────────────────────────────────

    def new_game(self, white: IPlayer, black: IPlayer, fen: str | None = None) -> None:
        """Start over; a malformed *fen* raises ``ParseError`` and changes nothing."""
        state = GameState()
        state.setup(fen)

        self._seats = {Color.WHITE: white, Color.BLACK: black}
        self._state = state
        for seat in (white, black):
            if isinstance(seat, AIPlayer):
                seat.opponent.reset()
        _LOGGER.debug("new game: %r vs %r from %s", white, black, state.start_fen)

        self._publish_status()
        self._advance()

    def submit_move(self, move: Move) -> bool:
        if not self._state.phase.accepts_moves:
            return False
        try:
            record = self._state.push(move)
        except IllegalMoveError as exc:
            _LOGGER.debug("refused %s: %s", move, exc)
            return False
        self._moved(record)
        return True

    def request_ai_move(self) -> Move | None:
        """Let the computer seat to move pick and play a move synchronously.

        Raises :class:`NoLegalMoveError` once the game is over and
        ``TypeError`` when the side to move is not an :class:`AIPlayer`.
        """
        state = self._state
        if state.is_game_over:
            raise NoLegalMoveError(f"Game is over ({state.status})")
        seat = self.current_player
        if not isinstance(seat, AIPlayer):
            raise TypeError(f"{state.side_to_move} is not played by the computer")

        move = seat.choose_move(state.position)
        if move is None:
            raise NoLegalMoveError(f"{state.side_to_move} has no legal move")
        self.submit_move(move)
        return move

    # ── Resignation and draws ────────────────────────────────────────────

    def resign(self, color: Color) -> None:
        if not self._state.is_game_over:
            self._conclude(lambda: self._state.resign(color))

    def offer_draw(self, color: Color) -> None:
        state = self._state
        if state.is_game_over or state.draw_offer == DrawOffer.OFFERED:
            return
        state.draw_offer, state.draw_offer_by = DrawOffer.OFFERED, color

    def accept_draw(self, color: Color) -> None:
        state = self._state
        offered_by = state.draw_offer_by
        if state.draw_offer != DrawOffer.OFFERED or offered_by in (None, color):
            return
        self._conclude(state.agree_draw)

    def decline_draw(self) -> None:
        self._state.draw_offer, self._state.draw_offer_by = DrawOffer.DECLINED, None

    # ── Takebacks ────────────────────────────────────────────────────────

    def undo_move(self) -> bool:
        """Take back one ply.  Finished games stay finished."""
        state = self._state
        if state.is_game_over or state.ply_count == 0:
            return False
        self._interrupt()
        state.undo()
        self._publish_status()
        self._advance()
        return True

    def redo_move(self) -> bool:
        state = self._state
        if state.is_game_over or not state.can_redo:
            return False
        self._interrupt()
        record = state.redo()
        if record is None:
            return False
        self._moved(record)
        return True

    # ── Internals ────────────────────────────────────────────────────────

    def _moved(self, record: MoveRecord) -> None:
        _notify(self.events.on_move, record, self._state)
        self._publish_status()
        self._advance()

    def _conclude(self, ending: Callable[[], None]) -> None:
        self._interrupt()
        ending()
        self._publish_status()
        self._advance()

    def _advance(self) -> None:
        """Move the phase on: game over, or hand the turn to the next seat."""
        state = self._state
        if state.is_game_over:
            self._enter(GamePhase.GAME_OVER)
            _notify(self.events.on_game_over, state.status, state.winner)
            return

        seat = self.current_player
        if seat is None:
            return
        if seat.is_human:
            self._enter(GamePhase.AWAITING_MOVE)
        else:
            self._enter(GamePhase.THINKING)
            seat.request_move(state.position.copy())

    def _interrupt(self) -> None:
        seat = self.current_player
        if seat is not None and not seat.is_human:
            seat.cancel()

    def _enter(self, phase: GamePhase) -> None:
        self._state.phase = phase
        _notify(self.events.on_phase_changed, phase)

    def _publish_status(self) -> None:
        _notify(self.events.on_status_changed, self._state.game_status())
