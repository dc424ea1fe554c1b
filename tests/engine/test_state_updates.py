from __future__ import annotations

from chess_rules.engine.fen import encode_placement
from chess_rules.engine.game import Game
from chess_rules.engine.position import STARTPOS_FEN

KNIGHT_SHUFFLE = ["Nf3", "Nf6", "Ng1", "Ng8"]


def test_halfmove_clock_counts_and_resets() -> None:
    g = Game.new()
    g.apply("Nf3")
    g.apply("Nc6")
    assert g.to_fen().split()[4] == "2"
    g.apply("e4")  # pawn move resets
    assert g.to_fen().split()[4] == "0"
    g.apply("Nb4")
    g.apply("Bc4")
    assert g.to_fen().split()[4] == "2"
    g.apply("Nxc2+")  # capture resets
    assert g.to_fen().split()[4] == "0"


def test_fullmove_number_increments_after_black() -> None:
    g = Game.new()
    g.apply("e4")
    assert g.to_fen().split()[5] == "1"
    g.apply("e5")
    assert g.to_fen().split()[5] == "2"


def test_side_to_move_flips() -> None:
    g = Game.new()
    assert g.position.side_to_move == "w"
    g.apply("d4")
    assert g.position.side_to_move == "b"


def test_fifty_move_rule_threshold() -> None:
    g = Game.from_fen("4k3/8/8/8/8/8/8/4K1N1 w - - 98 80")
    assert not g.is_fifty_moves()
    g.apply("Nf3")
    assert not g.is_fifty_moves()
    g.apply("Kd7")
    assert g.is_fifty_moves()
    assert g.is_draw()


def test_fifty_move_clock_reset_by_pawn_move() -> None:
    g = Game.from_fen("4k3/8/8/8/8/8/4P3/4K3 w - - 99 80")
    assert not g.is_fifty_moves()
    g.apply("e3")
    assert g.to_fen() == "4k3/8/8/8/8/4P3/8/4K3 b - - 0 80"
    assert not g.is_fifty_moves()


def test_threefold_repetition_only_on_third_occurrence() -> None:
    g = Game.new()
    for san in KNIGHT_SHUFFLE:
        g.apply(san)
        assert not g.is_threefold_repetition()
    for san in KNIGHT_SHUFFLE[:-1]:
        g.apply(san)
        assert not g.is_threefold_repetition()
    g.apply("Ng8")
    assert g.is_threefold_repetition()
    assert g.is_draw()
    assert g.to_fen() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 8 5"


def test_repetition_counts_keyed_by_placement() -> None:
    g = Game.new()
    start = STARTPOS_FEN.split()[0]
    assert g.position.repetition_counts == {start: 1}
    for san in KNIGHT_SHUFFLE:
        g.apply(san)
    assert g.position.repetition_counts[start] == 2
    assert all(" " not in key for key in g.position.repetition_counts)
    assert encode_placement(g.position) == start


def test_en_passant_square_cleared_by_next_move() -> None:
    g = Game.new()
    g.apply("e4")
    assert g.to_fen().split()[3] == "e3"
    g.apply("Nf6")
    assert g.to_fen().split()[3] == "-"
