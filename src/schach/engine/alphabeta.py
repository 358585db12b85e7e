"""Negamax alpha-beta search with iterative deepening."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import replace
from time import perf_counter, sleep

from schach.core.enums import PieceType
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.position import Position
from schach.core.rules import Rules
from schach.engine.evaluation import Evaluator
from schach.engine.ordering import MoveOrderer, is_quiet
from schach.engine.search import (
    CancelCheck,
    DifficultyProfile,
    IEngine,
    SearchOptions,
    SearchResult,
)
from schach.engine.transposition import Bound, TranspositionTable

_LOGGER = logging.getLogger(__name__)

MATE_SCORE = 100_000
_INF_SCORE = 1_000_000
_NULL_MOVE_MIN_DEPTH = 3
_NULL_MOVE_REDUCTION = 2
_LMR_MIN_DEPTH = 3
_LMR_MIN_MOVE_INDEX = 4
_QUIESCENCE_MAX_DEPTH = 8
_YIELD_EVERY_NODES = 4096
# Scores beyond this are mates; the table keeps them relative to the node.
_MATE_THRESHOLD = MATE_SCORE - 1_000

_MINOR_AND_MAJOR = (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN)


def _never_cancelled() -> bool:
    return False


def _terminal_score(gen: MoveGenerator, position: Position, ply: int) -> int:
    """Score of a node without legal moves: mated at *ply* or stalemate."""
    if gen.is_in_check(position.side_to_move):
        return -MATE_SCORE + ply
    return 0


def _to_table(score: int, ply: int) -> int:
    """Mate distance counted from the node at *ply* instead of the root."""
    if score >= _MATE_THRESHOLD:
        return score + ply
    if score <= -_MATE_THRESHOLD:
        return score - ply
    return score


def _from_table(score: int, ply: int) -> int:
    if score >= _MATE_THRESHOLD:
        return score - ply
    if score <= -_MATE_THRESHOLD:
        return score + ply
    return score


class AlphaBetaEngine(IEngine):
    """Classical searcher: iterative deepening, quiescence, TT and heuristics.

    The engine only ever searches a private copy of the position it is given.
    The transposition table and move-ordering tables belong to one instance
    and are reset at the start of every search.
    """

    __slots__ = (
        "_cancel_check",
        "_deadline",
        "_evaluator",
        "_next_yield",
        "_nodes",
        "_options",
        "_ordering",
        "_tt",
    )

    def __init__(self, evaluator: Evaluator | None = None) -> None:
        self._evaluator = evaluator or Evaluator()
        self._options = SearchOptions()
        self._ordering = MoveOrderer()
        self._tt = TranspositionTable()
        self._nodes = 0
        self._next_yield = _YIELD_EVERY_NODES
        self._deadline: float | None = None
        self._cancel_check: CancelCheck = _never_cancelled

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    @property
    def ordering(self) -> MoveOrderer:
        return self._ordering

    # ── Public API ───────────────────────────────────────────────────────

    def search(
        self,
        position: Position,
        profile: DifficultyProfile,
        rng: random.Random | None = None,
        is_cancelled: CancelCheck | None = None,
        root_moves: Sequence[Move] | None = None,
    ) -> SearchResult:
        """Pick a move for the side to move in *position*.

        *root_moves* narrows the candidates at the root (ignored when none of
        them is legal).  When *rng* is given and the profile has a
        ``blunder_chance``, the searched move may be swapped for a uniformly
        random legal one.
        """
        if profile.max_depth <= 0:
            raise ValueError("Search depth must be >= 1")

        position = position.copy()
        self._begin(profile, is_cancelled)

        gen = MoveGenerator(position)
        legal = gen.generate_legal_moves()
        if not legal:
            return SearchResult(None, _terminal_score(gen, position, 0), 0, self._nodes)

        pool = legal
        if root_moves is not None:
            pool = [m for m in legal if m in root_moves] or legal
        pool = self._ordering.sort(position, pool)

        result = SearchResult(pool[0], self._evaluator.evaluate(position), 0, 0)
        for depth in range(1, profile.max_depth + 1):
            if self._should_stop():
                break
            score, move = self._search_root(position, pool, depth)
            if move is None or self._should_stop():
                break
            result = SearchResult(move, score, depth, self._nodes)
            _LOGGER.debug(
                "depth %d: best=%s score=%d nodes=%d", depth, move, score, self._nodes
            )
            # Principal variation move first in the next iteration.
            pool.remove(move)
            pool.insert(0, move)

        best_move = result.best_move
        blunders = rng is not None and profile.blunder_chance > 0.0
        if blunders and rng.random() < profile.blunder_chance:
            best_move = rng.choice(legal)
            _LOGGER.debug("%s profile picked random move %s", profile.name, best_move)

        return SearchResult(best_move, result.score_cp, result.depth, self._nodes)

    def minimax(self, position: Position, depth: int) -> int:
        """Unpruned negamax score of *position* at *depth*, no quiescence.

        A reference for the pruned search: same leaves, same terminal scores.
        """
        if depth <= 0:
            raise ValueError("Search depth must be >= 1")
        self._begin(DifficultyProfile("minimax", depth, None), None)
        return self._minimax(position.copy(), depth, 0)

    # ── Search internals ─────────────────────────────────────────────────

    def _begin(
        self, profile: DifficultyProfile, is_cancelled: CancelCheck | None
    ) -> None:
        self._options = profile.options
        self._nodes = 0
        self._next_yield = _YIELD_EVERY_NODES
        self._tt.clear()
        self._ordering.reset()
        self._cancel_check = is_cancelled or _never_cancelled
        self._deadline = None
        if profile.time_limit_ms is not None:
            self._deadline = perf_counter() + max(profile.time_limit_ms, 1) / 1000.0

    def _search_root(
        self, position: Position, moves: list[Move], depth: int
    ) -> tuple[int, Move | None]:
        alpha = -_INF_SCORE
        best: tuple[int, Move | None] = (-_INF_SCORE, None)
        for move in moves:
            if self._should_stop():
                break
            score = self._child(position, move, depth, alpha, _INF_SCORE, 0)
            if score > best[0]:
                best = (score, move)
            alpha = max(alpha, score)
        return best

    def _child(
        self,
        position: Position,
        move: Move,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
        reduction: int = 0,
    ) -> int:
        """Score of *move* from the mover's point of view.

        With a *reduction* the move first gets a null-window probe at reduced
        depth; only a probe that beats *alpha* earns the full search.  Moves
        that give check are never reduced.
        """
        position.make_move(move)
        try:
            if reduction and not Rules.is_in_check(position):
                reduced = max(0, depth - 1 - reduction)
                score = -self._negamax(position, reduced, -alpha - 1, -alpha, ply + 1)
                if score <= alpha:
                    return score
            return -self._negamax(position, depth - 1, -beta, -alpha, ply + 1)
        finally:
            position.unmake_move(move)

    def _minimax(self, position: Position, depth: int, ply: int) -> int:
        self._nodes += 1
        if ply > 0 and self._is_draw(position):
            return 0
        if depth <= 0:
            return self._leaf(position, ply)

        gen = MoveGenerator(position)
        legal = gen.generate_legal_moves()
        if not legal:
            return _terminal_score(gen, position, ply)

        best = -_INF_SCORE
        for move in legal:
            position.make_move(move)
            try:
                best = max(best, -self._minimax(position, depth - 1, ply + 1))
            finally:
                position.unmake_move(move)
        return best

    def _negamax(
        self,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        ply: int,
        allow_null: bool = True,
    ) -> int:
        if self._should_stop():
            return self._evaluator.evaluate(position)
        self._nodes += 1

        window = (alpha, beta)
        key = position.zobrist_hash
        entry = self._tt.probe(key)
        hash_move = entry.best_move if entry is not None else None
        if entry is not None and self._options.tt_cutoffs and entry.depth >= depth:
            entry = replace(entry, score=_from_table(entry.score, ply))
            narrowed = entry.narrow(alpha, beta)
            if narrowed is None:
                return entry.score
            alpha, beta = narrowed

        if self._is_draw(position):
            return 0
        if depth <= 0:
            if self._options.quiescence:
                return self._quiescence(position, alpha, beta, ply)
            return self._leaf(position, ply)

        gen = MoveGenerator(position)
        in_check = gen.is_in_check(position.side_to_move)
        if allow_null and self._can_apply_null_move(position, depth, in_check):
            if self._null_move_fails_high(position, depth, beta, ply):
                return beta
            if self._should_stop():
                return self._evaluator.evaluate(position)

        legal = gen.generate_legal_moves()
        if not legal:
            return _terminal_score(gen, position, ply)
        if hash_move not in legal:
            hash_move = None

        side = position.side_to_move
        best_score, best_move = -_INF_SCORE, None
        ordered = self._ordering.sort(position, legal, hash_move, ply)
        for index, move in enumerate(ordered):
            quiet = is_quiet(position, move)
            reduction = self._late_move_reduction(
                depth,
                index,
                in_check=in_check,
                quiet=quiet,
                hash_move=move == hash_move,
            )
            score = self._child(position, move, depth, alpha, beta, ply, reduction)
            if score > best_score:
                best_score, best_move = score, move
            alpha = max(alpha, score)
            if alpha >= beta:
                if quiet:
                    self._ordering.record_cutoff(side, move, ply, depth)
                break
            if self._should_stop():
                break

        bound = Bound.classify(best_score, *window)
        self._tt.store(key, depth, _to_table(best_score, ply), bound, best_move)
        return best_score

    def _quiescence(
        self,
        position: Position,
        alpha: int,
        beta: int,
        ply: int,
        q_depth: int = 0,
    ) -> int:
        if self._should_stop():
            return self._evaluator.evaluate(position)
        self._nodes += 1
        if self._is_draw(position):
            return 0

        gen = MoveGenerator(position)
        legal = gen.generate_legal_moves()
        if not legal:
            return _terminal_score(gen, position, ply)

        stand_pat = self._evaluator.evaluate(position)
        if gen.is_in_check(position.side_to_move):
            # Every evasion is searched, up to the capture-sequence cap.
            if q_depth >= _QUIESCENCE_MAX_DEPTH:
                return stand_pat
            moves = legal
        else:
            if stand_pat >= beta:
                return beta
            alpha = max(alpha, stand_pat)
            if q_depth >= _QUIESCENCE_MAX_DEPTH:
                return alpha
            moves = [m for m in legal if not is_quiet(position, m)]

        for move in self._ordering.sort(position, moves, ply=ply):
            position.make_move(move)
            try:
                score = -self._quiescence(position, -beta, -alpha, ply + 1, q_depth + 1)
            finally:
                position.unmake_move(move)
            if score >= beta:
                return beta
            alpha = max(alpha, score)
            if self._should_stop():
                break
        return alpha

    def _leaf(self, position: Position, ply: int) -> int:
        """Horizon score without quiescence; mate and stalemate still count."""
        gen = MoveGenerator(position)
        if not gen.generate_legal_moves():
            return _terminal_score(gen, position, ply)
        return self._evaluator.evaluate(position)

    def _is_draw(self, position: Position) -> bool:
        return Rules.draw_status(position) is not None

    def _should_stop(self) -> bool:
        if self._nodes >= self._next_yield:
            # Let a GUI thread breathe during long pure-Python searches.
            self._next_yield = self._nodes + _YIELD_EVERY_NODES
            sleep(0.001)
        if self._cancel_check():
            return True
        return self._deadline is not None and perf_counter() >= self._deadline

    # ── Pruning ──────────────────────────────────────────────────────────

    def _can_apply_null_move(
        self, position: Position, depth: int, in_check: bool
    ) -> bool:
        """Null move needs depth, no check and a piece besides king and pawns.

        The last condition keeps zugzwang-prone pawn endings exact.
        """
        if not self._options.null_move or in_check or depth < _NULL_MOVE_MIN_DEPTH:
            return False
        side = position.side_to_move
        return any(position.board.has_piece(side, kind) for kind in _MINOR_AND_MAJOR)

    def _null_move_fails_high(
        self, position: Position, depth: int, beta: int, ply: int
    ) -> bool:
        null_depth = max(0, depth - 1 - _NULL_MOVE_REDUCTION - depth // 4)
        position.make_null_move()
        try:
            score = -self._negamax(
                position, null_depth, -beta, -beta + 1, ply + 1, allow_null=False
            )
        finally:
            position.unmake_null_move()
        return not self._should_stop() and score >= beta

    def _late_move_reduction(
        self,
        depth: int,
        move_index: int,
        *,
        in_check: bool,
        quiet: bool,
        hash_move: bool,
    ) -> int:
        """Plies to take off a late quiet move; 0 means a full-depth search."""
        if not self._options.late_move_reduction or in_check:
            return 0
        if not quiet or hash_move:
            return 0
        if depth < _LMR_MIN_DEPTH or move_index < _LMR_MIN_MOVE_INDEX:
            return 0
        return 2 if depth >= 8 and move_index >= 8 else 1
