"""Exception taxonomy raised at the rules-engine boundary.

Terminal game states (checkmate, stalemate, draws) are *not* errors; they are
reported through :class:`~schach.core.enums.GameStatus`.
"""

from __future__ import annotations


class ChessError(Exception):
    """Base class for all errors raised by :mod:`schach`."""


class ParseError(ChessError, ValueError):
    """A serialized position (FEN) or move string could not be parsed."""


class IllegalMoveError(ChessError, ValueError):
    """The requested move is not in the current legal-move set."""


class NoLegalMoveError(ChessError):
    """A move was requested for a position where the game is already over."""
