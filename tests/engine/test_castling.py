from __future__ import annotations

import pytest

from chess_rules.engine.errors import IllegalMoveError
from chess_rules.engine.game import Game
from chess_rules.engine.types import CastlingKind


@pytest.mark.parametrize(
    "fen,san,expected",
    [
        (
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPP2P/RNBQK2R w KQkq - 0 1",
            "O-O",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPP2P/RNBQ1RK1 b kq - 1 1",
        ),
        (
            "rnb1kbnr/pp2pppp/8/1q6/8/8/P3PPPP/R3K1NR w KQkq - 0 1",
            "O-O-O",
            "rnb1kbnr/pp2pppp/8/1q6/8/8/P3PPPP/2KR2NR b kq - 1 1",
        ),
        (
            "rnbqk2r/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1",
            "O-O",
            "rnbq1rk1/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQ - 1 2",
        ),
        (
            "r3kbnr/p3pppp/8/8/1Q6/8/PPPPPPPP/RNBQKBNR b KQkq - 0 1",
            "O-O-O",
            "2kr1bnr/p3pppp/8/8/1Q6/8/PPPPPPPP/RNBQKBNR w KQ - 1 2",
        ),
        (
            "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
            "0-0",
            "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1",
        ),
    ],
)
def test_castling_moves_king_and_rook(fen: str, san: str, expected: str) -> None:
    g = Game.from_fen(fen)
    rec = g.apply(san)
    assert g.to_fen() == expected
    assert rec.castling in (CastlingKind.KING_SIDE, CastlingKind.QUEEN_SIDE)
    assert rec.to_dict()["castling"] == san.replace("0", "O")


def test_king_move_onto_castling_square_castles() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    rec = g.apply("Kg1")
    assert rec.castling == CastlingKind.KING_SIDE
    assert g.to_fen() == "r3k2r/8/8/8/8/8/8/R4RK1 b kq - 1 1"


def test_castling_listed_as_legal_san() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    moves = g.legal_moves()
    assert "O-O" in moves
    assert "O-O-O" in moves
    assert "Kg1" not in moves


def test_castling_through_attacked_square_is_illegal() -> None:
    fen = "r3k2r/8/8/8/8/8/5r2/R3K2R w KQkq - 0 1"
    g = Game.from_fen(fen)
    with pytest.raises(IllegalMoveError):
        g.apply("O-O")
    assert g.to_fen() == fen
    g.apply("O-O-O")
    assert g.to_fen() == "r3k2r/8/8/8/8/8/5r2/2KR3R b kq - 1 1"


def test_castling_out_of_check_is_illegal() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/4r3/R3K2R w KQkq - 0 1")
    assert "O-O" not in g.legal_moves()
    with pytest.raises(IllegalMoveError):
        g.apply("O-O-O")


def test_castling_without_right_is_illegal() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w Qkq - 0 1")
    with pytest.raises(IllegalMoveError):
        g.apply("O-O")
    # Without the right, Kg1 is just an unreachable king move
    with pytest.raises(IllegalMoveError):
        g.apply("Kg1")


def test_queen_side_castling_with_b_file_attacked() -> None:
    g = Game.from_fen("1r2k2r/8/8/8/8/8/8/R3K2R w KQk - 0 1")
    g.apply("O-O-O")
    assert g.to_fen() == "1r2k2r/8/8/8/8/8/8/2KR3R b k - 1 1"


def test_king_move_revokes_both_rights() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    g.apply("Kd1")
    assert g.to_fen() == "r3k2r/8/8/8/8/8/8/R2K3R b kq - 1 1"
    g.apply("Kf7")
    assert g.to_fen() == "r6r/5k2/8/8/8/8/8/R2K3R w - - 2 2"


def test_rook_move_revokes_its_own_right() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    g.apply("Rh2")
    assert g.to_fen() == "r3k2r/8/8/8/8/8/7R/R3K3 b Qkq - 1 1"
    g.apply("Rb8")
    assert g.to_fen() == "1r2k2r/8/8/8/8/8/7R/R3K3 w Qk - 2 2"


def test_capturing_rook_on_corner_revokes_opponent_right() -> None:
    g = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    g.apply("Rxa8+")
    assert g.to_fen() == "R3k2r/8/8/8/8/8/8/4K2R b Kk - 0 1"
    assert g.in_check()
