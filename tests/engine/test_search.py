"""Tests for the alpha-beta search engine."""

import random

import pytest

from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.notation import STARTING_FEN, position_from_fen, position_to_fen
from schach.core.position import Position
from schach.core.types import parse_square
from schach.engine import (
    MATE_SCORE,
    AlphaBetaEngine,
    DifficultyProfile,
    SearchOptions,
)
from schach.engine.alphabeta import _from_table, _to_table


def _profile(depth: int, **kwargs) -> DifficultyProfile:
    return DifficultyProfile("test", max_depth=depth, time_limit_ms=None, **kwargs)


class _NullTrackingEngine(AlphaBetaEngine):
    def __init__(self) -> None:
        super().__init__()
        self.null_move_calls = 0

    def _can_apply_null_move(
        self, position: Position, depth: int, in_check: bool
    ) -> bool:
        allowed = super()._can_apply_null_move(position, depth, in_check)
        if allowed:
            self.null_move_calls += 1
        return allowed


class _LmrTrackingEngine(AlphaBetaEngine):
    def __init__(self) -> None:
        super().__init__()
        self.lmr_calls = 0

    def _late_move_reduction(self, depth: int, move_index: int, **kwargs) -> int:
        reduction = super()._late_move_reduction(depth, move_index, **kwargs)
        if reduction:
            self.lmr_calls += 1
        return reduction


class TestAlphaBetaEngine:
    def test_returns_legal_move_from_start(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        engine = AlphaBetaEngine()

        result = engine.search(pos, _profile(2))
        legal = MoveGenerator(pos).generate_legal_moves()

        assert result.best_move in legal
        assert result.depth == 2
        assert result.nodes > 0
        assert not result.from_book

    def test_finds_mate_in_one(self) -> None:
        pos = position_from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
        engine = AlphaBetaEngine()

        result = engine.search(pos, _profile(3))

        assert result.best_move is not None
        assert result.best_move.uci == "a1a8"
        assert result.score_cp == MATE_SCORE - 1

    def test_returns_none_for_checkmated_side(self) -> None:
        pos = position_from_fen(
            "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
        )
        result = AlphaBetaEngine().search(pos, _profile(2))

        assert result.best_move is None
        assert result.score_cp == -MATE_SCORE
        assert result.depth == 0

    def test_returns_none_with_zero_score_when_stalemated(self) -> None:
        pos = position_from_fen("k7/8/1Q6/8/8/8/8/7K b - - 0 1")
        result = AlphaBetaEngine().search(pos, _profile(2))

        assert result.best_move is None
        assert result.score_cp == 0

    def test_rejects_non_positive_depth(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        with pytest.raises(ValueError):
            AlphaBetaEngine().search(pos, _profile(0))

    def test_honors_cancel_callback(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        engine = AlphaBetaEngine()

        result = engine.search(pos, _profile(5), is_cancelled=lambda: True)
        legal = MoveGenerator(pos).generate_legal_moves()

        assert result.depth == 0
        assert result.best_move in legal

    def test_tiny_time_limit_still_yields_a_move(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        profile = DifficultyProfile("blitz", max_depth=6, time_limit_ms=1)

        result = AlphaBetaEngine().search(pos, profile)

        assert result.best_move in MoveGenerator(pos).generate_legal_moves()

    def test_callers_position_is_untouched(self) -> None:
        pos = position_from_fen(
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
        )
        fen = position_to_fen(pos)
        key = pos.zobrist_hash

        AlphaBetaEngine().search(pos, _profile(2))

        assert position_to_fen(pos) == fen
        assert pos.zobrist_hash == key
        assert pos.repetition_count() == 1

    def test_populates_transposition_table(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        engine = AlphaBetaEngine()

        engine.search(pos, _profile(3))

        assert len(engine._tt) > 0

    def test_avoids_losing_the_queen(self) -> None:
        # The black queen on d4 is attacked by the e3 pawn.
        pos = position_from_fen("4k3/8/8/8/3q4/4P3/8/4K3 b - - 0 1")
        result = AlphaBetaEngine().search(pos, _profile(2))

        assert result.best_move is not None
        assert result.best_move.from_sq == parse_square("d4")


class TestSearchEquivalence:
    @pytest.mark.parametrize(
        "fen",
        [
            "4k3/8/8/8/8/8/8/R3K3 w - - 0 1",
            "8/8/8/4k3/8/8/3PK3/8 w - - 0 1",
            "6k1/5ppp/8/8/8/8/5PPP/R5K1 b - - 0 1",
        ],
    )
    def test_plain_alpha_beta_matches_minimax(self, fen: str) -> None:
        pos = position_from_fen(fen)
        engine = AlphaBetaEngine()

        pruned = engine.search(pos, _profile(3, options=SearchOptions.plain()))
        reference = AlphaBetaEngine().minimax(pos, 3)

        assert pruned.depth == 3
        assert pruned.score_cp == reference

    def test_minimax_rejects_non_positive_depth(self) -> None:
        with pytest.raises(ValueError):
            AlphaBetaEngine().minimax(position_from_fen(STARTING_FEN), 0)


class TestMateScoresInTable:
    def test_mate_distance_moves_with_the_reading_ply(self) -> None:
        # mated 4 plies from the root, found at a node on ply 3
        stored = _to_table(-MATE_SCORE + 4, 3)

        assert stored == -MATE_SCORE + 1
        assert _from_table(stored, 3) == -MATE_SCORE + 4
        assert _from_table(stored, 5) == -MATE_SCORE + 6
        assert _from_table(_to_table(MATE_SCORE - 3, 1), 7) == MATE_SCORE - 9

    @pytest.mark.parametrize("score", [0, 250, -980, MATE_SCORE // 2])
    def test_ordinary_scores_are_stored_as_is(self, score: int) -> None:
        assert _to_table(score, 6) == score
        assert _from_table(score, 6) == score

    @pytest.mark.parametrize("depth", [3, 4, 5])
    def test_deeper_search_keeps_shortest_mate(self, depth: int) -> None:
        pos = position_from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")

        result = AlphaBetaEngine().search(pos, _profile(depth))

        assert result.best_move is not None
        assert result.best_move.uci == "a1a8"
        assert result.score_cp == MATE_SCORE - 1

    def test_forced_mate_against_side_to_move(self) -> None:
        pos = position_from_fen("7k/8/6K1/8/8/8/8/R7 b - - 0 1")

        result = AlphaBetaEngine().search(pos, _profile(4))

        assert result.best_move is not None
        assert result.best_move.uci == "h8g8"
        assert result.score_cp == -MATE_SCORE + 2


class TestPruning:
    def test_uses_null_move_pruning_with_pieces(self) -> None:
        pos = position_from_fen("r3k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        engine = _NullTrackingEngine()

        engine.search(pos, _profile(4))

        assert engine.null_move_calls > 0

    def test_skips_null_move_pruning_in_pawn_only_endgame(self) -> None:
        pos = position_from_fen("8/3k4/8/8/8/4K3/3P4/8 w - - 0 1")
        engine = _NullTrackingEngine()

        engine.search(pos, _profile(4))

        assert engine.null_move_calls == 0

    def test_null_move_can_be_switched_off(self) -> None:
        pos = position_from_fen("r3k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        engine = _NullTrackingEngine()

        engine.search(pos, _profile(4, options=SearchOptions(null_move=False)))

        assert engine.null_move_calls == 0

    def test_uses_lmr_on_late_quiet_moves(self) -> None:
        pos = position_from_fen("r3k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        engine = _LmrTrackingEngine()

        engine.search(pos, _profile(4, options=SearchOptions(null_move=False)))

        assert engine.lmr_calls > 0

    def test_plain_options_disable_lmr(self) -> None:
        pos = position_from_fen("r3k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        engine = _LmrTrackingEngine()

        engine.search(pos, _profile(4, options=SearchOptions.plain()))

        assert engine.lmr_calls == 0

    def test_lmr_conditions_and_reduction_schedule(self) -> None:
        engine = AlphaBetaEngine()
        late = {"in_check": False, "quiet": True, "hash_move": False}

        assert engine._late_move_reduction(2, 6, **late) == 0
        assert engine._late_move_reduction(5, 2, **late) == 0
        assert engine._late_move_reduction(5, 6, **{**late, "in_check": True}) == 0
        assert engine._late_move_reduction(5, 6, **{**late, "quiet": False}) == 0
        assert engine._late_move_reduction(5, 6, **{**late, "hash_move": True}) == 0
        assert engine._late_move_reduction(5, 4, **late) == 1
        assert engine._late_move_reduction(8, 8, **late) == 2

    def test_automatic_draw_is_terminal_for_search(self) -> None:
        engine = AlphaBetaEngine()
        assert engine._is_draw(position_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1"))
        assert engine._is_draw(position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 100 1"))
        assert not engine._is_draw(position_from_fen(STARTING_FEN))


class TestRootMovesAndBlunders:
    def test_root_moves_restrict_the_choice(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        only = Move(parse_square("a2"), parse_square("a3"))

        result = AlphaBetaEngine().search(pos, _profile(2), root_moves=[only])

        assert result.best_move == only

    def test_illegal_root_moves_fall_back_to_all_moves(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        bogus = Move(parse_square("a2"), parse_square("a5"))

        result = AlphaBetaEngine().search(pos, _profile(1), root_moves=[bogus])

        assert result.best_move in MoveGenerator(pos).generate_legal_moves()

    def test_blunder_uses_supplied_rng(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        profile = _profile(1, blunder_chance=1.0)

        result = AlphaBetaEngine().search(pos, profile, rng=random.Random(7))

        expected_rng = random.Random(7)
        expected_rng.random()
        legal = MoveGenerator(pos).generate_legal_moves()
        assert result.best_move == expected_rng.choice(legal)

    def test_blunder_is_reproducible(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        profile = _profile(1, blunder_chance=0.5)

        first = [
            AlphaBetaEngine().search(pos, profile, rng=random.Random(3)).best_move
            for _ in range(3)
        ]
        second = [
            AlphaBetaEngine().search(pos, profile, rng=random.Random(3)).best_move
            for _ in range(3)
        ]
        assert first == second

    def test_no_rng_means_no_blunder(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        careless = _profile(2, blunder_chance=1.0)

        expected = AlphaBetaEngine().search(pos, _profile(2)).best_move
        assert AlphaBetaEngine().search(pos, careless).best_move == expected
