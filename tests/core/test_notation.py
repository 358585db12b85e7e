"""Tests for FEN and SAN notation."""

import pytest

from schach.core.enums import CastlingRights, Color, MoveFlag, PieceType
from schach.core.errors import IllegalMoveError, ParseError
from schach.core.move import Move
from schach.core.move_generator import MoveGenerator
from schach.core.notation import (
    STARTING_FEN,
    move_to_san,
    parse_san,
    position_from_fen,
    position_key_fen,
    position_to_fen,
)
from schach.core.piece import Piece
from schach.core.types import A1, D4, E1, E2, E4, E8, G1, H8


# ── FEN ──────────────────────────────────────────────────────────────────────


class TestFenParsing:
    def test_starting_position(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.side_to_move == Color.WHITE
        assert pos.castling == CastlingRights.ALL
        assert pos.en_passant is None
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1
        assert pos.board[E1] == Piece(Color.WHITE, PieceType.KING)
        assert pos.board[E8] == Piece(Color.BLACK, PieceType.KING)

    def test_custom_fields(self) -> None:
        pos = position_from_fen("4k2r/8/8/8/3P4/8/8/R3K3 b Qk d3 3 27")
        assert pos.side_to_move == Color.BLACK
        assert pos.castling == (
            CastlingRights.WHITE_QUEENSIDE | CastlingRights.BLACK_KINGSIDE
        )
        assert pos.en_passant == D4 - 8
        assert pos.halfmove_clock == 3
        assert pos.fullmove_number == 27
        assert pos.board[A1] == Piece(Color.WHITE, PieceType.ROOK)
        assert pos.board[H8] == Piece(Color.BLACK, PieceType.ROOK)

    def test_clock_fields_are_optional(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4K3 w - -")
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1

    @pytest.mark.parametrize(
        "fen",
        [
            "",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP w KQkq - 0 1",
            "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNRR w KQkq - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkz - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w QKqk - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KKq - 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e4 0 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - -1 1",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 0",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQXBNR w KQkq - 0 1",
            "rnbq1bnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQ - 0 1",
            "Pnbqkbnr/pppppppp/8/8/8/8/1PPPPPPP/RNBQKBNR w KQkq - 0 1",
        ],
    )
    def test_malformed_fen_raises(self, fen: str) -> None:
        with pytest.raises(ParseError):
            position_from_fen(fen)

    def test_parse_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            position_from_fen("not a fen")


class TestFenSerialization:
    @pytest.mark.parametrize(
        "fen",
        [
            STARTING_FEN,
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
            "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
            "rnbqkbnr/ppp1pppp/8/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3",
            "4k3/8/8/8/8/8/8/4K3 b - - 57 112",
        ],
    )
    def test_round_trip(self, fen: str) -> None:
        assert position_to_fen(position_from_fen(fen)) == fen

    def test_fen_after_moves(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        pos.make_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        assert position_to_fen(pos) == (
            "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
        )

    def test_key_fen_drops_clocks(self) -> None:
        a = position_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
        b = position_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 42 80")
        assert position_key_fen(a) == position_key_fen(b) == "4k3/8/8/8/8/8/8/4K3 w - -"


# ── SAN ──────────────────────────────────────────────────────────────────────


def _san_of(fen: str, uci: str) -> str:
    pos = position_from_fen(fen)
    wanted = Move.from_uci(uci)
    for move in MoveGenerator(pos).generate_legal_moves():
        if move.from_sq == wanted.from_sq and move.to_sq == wanted.to_sq:
            if move.promotion == wanted.promotion:
                return move_to_san(pos, move)
    raise AssertionError(f"{uci} is not legal in {fen}")


class TestMoveToSan:
    def test_pawn_push(self) -> None:
        assert _san_of(STARTING_FEN, "e2e4") == "e4"

    def test_knight_move(self) -> None:
        assert _san_of(STARTING_FEN, "g1f3") == "Nf3"

    def test_pawn_capture(self) -> None:
        fen = "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
        assert _san_of(fen, "e4d5") == "exd5"

    def test_en_passant_capture(self) -> None:
        fen = "rnbqkbnr/ppp1pppp/8/3pP3/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3"
        assert _san_of(fen, "e5d6") == "exd6"

    def test_castling(self) -> None:
        fen = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
        assert _san_of(fen, "e1g1") == "O-O"
        assert _san_of(fen, "e1c1") == "O-O-O"

    def test_promotion(self) -> None:
        assert _san_of("8/P7/8/8/8/8/8/k6K w - - 0 1", "a7a8n") == "a8=N"

    def test_check_suffix(self) -> None:
        assert _san_of("4k3/8/8/8/8/8/8/R3K3 w - - 0 1", "a1a8") == "Ra8+"

    def test_mate_suffix(self) -> None:
        assert _san_of("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1", "a1a8") == "Ra8#"

    def test_file_disambiguation(self) -> None:
        assert _san_of("4k3/8/8/8/8/8/4K3/R6R w - - 0 1", "a1d1") == "Rad1"

    def test_rank_disambiguation(self) -> None:
        assert _san_of("R7/8/8/8/7k/8/4K3/R7 w - - 0 1", "a1a3") == "R1a3"

    def test_square_disambiguation(self) -> None:
        fen = "4k3/8/8/8/8/8/Q1Q5/Q3K3 w - - 0 1"
        assert _san_of(fen, "a2b2") == "Qa2b2"

    def test_empty_square_raises(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        with pytest.raises(IllegalMoveError):
            move_to_san(pos, Move(E4, E4 + 8))

    def test_position_left_untouched(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        move = Move(G1, G1 + 15)
        move_to_san(pos, move)
        assert position_to_fen(pos) == STARTING_FEN


class TestParseSan:
    def test_pawn_push(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert parse_san(pos, "e4") == Move(E2, E4, MoveFlag.DOUBLE_PAWN)

    def test_piece_move_with_check_suffix(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        assert parse_san(pos, "Ra8+").uci == "a1a8"

    def test_castling_variants(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        assert parse_san(pos, "O-O").flag == MoveFlag.CASTLE_KINGSIDE
        assert parse_san(pos, "0-0-0").flag == MoveFlag.CASTLE_QUEENSIDE

    def test_disambiguated(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/4K3/R6R w - - 0 1")
        assert parse_san(pos, "Rhf1").uci == "h1f1"

    def test_promotion(self) -> None:
        pos = position_from_fen("8/P7/8/8/8/8/8/k6K w - - 0 1")
        assert parse_san(pos, "a8=Q").promotion == PieceType.QUEEN
        assert parse_san(pos, "a8R").promotion == PieceType.ROOK

    def test_san_round_trip_over_legal_moves(self) -> None:
        pos = position_from_fen(
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
        )
        for move in MoveGenerator(pos).generate_legal_moves():
            assert parse_san(pos, move_to_san(pos, move)) == move

    def test_garbage_raises_parse_error(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        with pytest.raises(ParseError):
            parse_san(pos, "hello")

    def test_illegal_move_raises(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        with pytest.raises(IllegalMoveError, match="Illegal move"):
            parse_san(pos, "e5")
        with pytest.raises(IllegalMoveError):
            parse_san(pos, "O-O")

    def test_ambiguous_move_raises(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/4K3/R6R w - - 0 1")
        with pytest.raises(IllegalMoveError, match="Ambiguous"):
            parse_san(pos, "Rd1")
