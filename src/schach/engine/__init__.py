"""Chess engine package: evaluation, search, opening book and Qt worker."""

from schach.engine.alphabeta import MATE_SCORE, AlphaBetaEngine
from schach.engine.book import DEFAULT_BOOK, BookMove, OpeningBook
from schach.engine.evaluation import PIECE_VALUES, Evaluator, EvalWeights
from schach.engine.opponent import AIOpponent, safe_moves
from schach.engine.ordering import MoveOrderer
from schach.engine.qt_bridge import EngineWorker
from schach.engine.search import (
    DIFFICULTY_NAMES,
    CancelCheck,
    DifficultyProfile,
    IEngine,
    SearchOptions,
    SearchResult,
)
from schach.engine.transposition import Bound, TranspositionTable

__all__ = [
    "AIOpponent",
    "AlphaBetaEngine",
    "BookMove",
    "Bound",
    "CancelCheck",
    "DEFAULT_BOOK",
    "DIFFICULTY_NAMES",
    "DifficultyProfile",
    "EngineWorker",
    "EvalWeights",
    "Evaluator",
    "IEngine",
    "MATE_SCORE",
    "MoveOrderer",
    "OpeningBook",
    "PIECE_VALUES",
    "SearchOptions",
    "SearchResult",
    "TranspositionTable",
    "safe_moves",
]
