"""Game management layer: state machine, players and controller.

Quick start::

    from schach.core import Color
    from schach.game import AIPlayer, GameController, HumanPlayer

    ctrl = GameController()
    ctrl.new_game(
        white=HumanPlayer(Color.WHITE, "Alice"),
        black=AIPlayer(Color.BLACK, difficulty="easy"),
    )
"""

from schach.game.controller import GameController, GameEvents
from schach.game.interfaces import DrawOffer, GamePhase, IGameController, IPlayer
from schach.game.player import AIPlayer, HumanPlayer
from schach.game.state import GameState, MoveRecord, StatusReport

__all__ = [
    # Interfaces
    "DrawOffer",
    "GamePhase",
    "IGameController",
    "IPlayer",
    # Concrete
    "AIPlayer",
    "GameController",
    "GameEvents",
    "GameState",
    "HumanPlayer",
    "MoveRecord",
    "StatusReport",
]
