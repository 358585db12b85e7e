"""Tests for move ordering and the transposition table."""

import pytest

from schach.core.enums import Color
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.notation import STARTING_FEN, position_from_fen
from schach.core.types import parse_square
from schach.engine.ordering import (
    HISTORY_CAP,
    KILLER_BONUSES,
    MoveOrderer,
    is_quiet,
)
from schach.engine.transposition import Bound, TranspositionTable, TTEntry


def _move(uci: str) -> Move:
    return Move(parse_square(uci[:2]), parse_square(uci[2:4]))


class TestMoveOrderer:
    def test_killer_move_is_prioritized_among_quiet_moves(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        orderer = MoveOrderer()
        killer, other = _move("g1f3"), _move("b1c3")

        orderer.add_killer(killer, ply=2)

        assert orderer.sort(pos, [other, killer], ply=2)[0] == killer
        # Killers are remembered per ply.
        assert orderer.killer_bonus(killer, ply=3) == 0

    def test_two_killer_slots_per_ply(self) -> None:
        orderer = MoveOrderer()
        first, second, third = _move("g1f3"), _move("b1c3"), _move("e2e4")

        orderer.add_killer(first, ply=1)
        orderer.add_killer(second, ply=1)
        orderer.add_killer(second, ply=1)

        assert orderer.killer_bonus(second, 1) == KILLER_BONUSES[0]
        assert orderer.killer_bonus(first, 1) == KILLER_BONUSES[1]

        orderer.add_killer(third, ply=1)
        assert orderer.killer_bonus(first, 1) == 0

    def test_history_heuristic_prioritizes_quiet_move(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        orderer = MoveOrderer()
        favored, other = _move("d2d4"), _move("e2e4")

        for _ in range(3):
            orderer.add_history(pos.side_to_move, favored, depth=6)

        assert orderer.sort(pos, [other, favored], ply=1)[0] == favored

    def test_history_is_capped_and_per_side(self) -> None:
        orderer = MoveOrderer()
        move = _move("d2d4")

        for _ in range(20):
            orderer.add_history(Color.WHITE, move, depth=10)

        assert orderer.history_bonus(Color.WHITE, move) == HISTORY_CAP
        assert orderer.history_bonus(Color.BLACK, move) == 0

    def test_reset_forgets_everything(self) -> None:
        orderer = MoveOrderer()
        move = _move("g1f3")
        orderer.record_cutoff(Color.WHITE, move, ply=0, depth=3)

        orderer.reset()

        assert orderer.killer_bonus(move, 0) == 0
        assert orderer.history_bonus(Color.WHITE, move) == 0

    def test_captures_before_quiet_moves(self) -> None:
        pos = position_from_fen(
            "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
        )
        legal = MoveGenerator(pos).generate_legal_moves()

        assert MoveOrderer().sort(pos, legal)[0].uci == "e4d5"

    def test_hash_move_comes_first(self) -> None:
        pos = position_from_fen(
            "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
        )
        legal = MoveGenerator(pos).generate_legal_moves()
        hash_move = next(m for m in legal if m.uci == "a2a3")

        assert MoveOrderer().sort(pos, legal, hash_move)[0] == hash_move

    def test_cheaper_attacker_first_for_same_victim(self) -> None:
        # Both the pawn and the queen can take the knight on d5.
        pos = position_from_fen("4k3/8/8/3n4/4P3/8/8/3QK3 w - - 0 1")
        legal = MoveGenerator(pos).generate_legal_moves()

        ordered = MoveOrderer().sort(pos, legal)

        assert [m.uci for m in ordered[:2]] == ["e4d5", "d1d5"]

    def test_is_quiet(self) -> None:
        pos = position_from_fen("4k3/1P6/8/3n4/4P3/8/8/4K3 w - - 0 1")
        legal = {m.uci: m for m in MoveGenerator(pos).generate_legal_moves()}

        assert is_quiet(pos, legal["e4e5"])
        assert not is_quiet(pos, legal["e4d5"])
        assert not is_quiet(pos, legal["b7b8q"])


class TestTranspositionTable:
    def test_store_and_probe(self) -> None:
        table = TranspositionTable()
        move = _move("e2e4")

        table.store(42, depth=3, score=15, bound=Bound.EXACT, best_move=move)

        entry = table.probe(42)
        assert entry is not None
        assert (entry.depth, entry.score, entry.best_move) == (3, 15, move)
        assert 42 in table
        assert table.probe(7) is None

    def test_deeper_entry_is_kept(self) -> None:
        table = TranspositionTable()
        table.store(1, depth=5, score=10, bound=Bound.EXACT, best_move=None)
        table.store(1, depth=2, score=99, bound=Bound.EXACT, best_move=None)

        assert table.probe(1).score == 10

        table.store(1, depth=5, score=20, bound=Bound.LOWER, best_move=None)
        assert table.probe(1).score == 20

    def test_starts_over_when_full(self) -> None:
        table = TranspositionTable(capacity=2)
        table.store(1, 1, 0, Bound.EXACT, None)
        table.store(2, 1, 0, Bound.EXACT, None)
        table.store(2, 1, 5, Bound.EXACT, None)
        assert len(table) == 2

        table.store(3, 1, 0, Bound.EXACT, None)

        assert len(table) == 1
        assert 3 in table

    def test_rejects_non_positive_capacity(self) -> None:
        with pytest.raises(ValueError):
            TranspositionTable(capacity=0)

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(-10, Bound.UPPER), (0, Bound.UPPER), (50, Bound.EXACT), (100, Bound.LOWER)],
    )
    def test_bound_classification(self, score: int, expected: Bound) -> None:
        assert Bound.classify(score, alpha=0, beta=100) is expected

    def test_entry_narrows_window(self) -> None:
        lower = TTEntry(depth=3, score=40, bound=Bound.LOWER, best_move=None)
        upper = TTEntry(depth=3, score=40, bound=Bound.UPPER, best_move=None)
        exact = TTEntry(depth=3, score=40, bound=Bound.EXACT, best_move=None)

        assert lower.narrow(0, 100) == (40, 100)
        assert upper.narrow(0, 100) == (0, 40)
        assert lower.narrow(0, 30) is None
        assert upper.narrow(50, 100) is None
        assert exact.narrow(0, 100) is None
