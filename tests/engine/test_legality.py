from __future__ import annotations

from chess_rules.engine.bitboard import square_bb, str_to_square
from chess_rules.engine.fen import decode
from chess_rules.engine.game import Game
from chess_rules.engine.legality import attack_mask, filter_legal, is_in_check
from chess_rules.engine.movegen import generate


def sq(name: str) -> int:
    return str_to_square(name)


def squares(*names: str) -> int:
    mask = 0
    for n in names:
        mask |= square_bb(sq(n))
    return mask


def table_for(fen: str):
    p = decode(fen)
    return filter_legal(p, generate(p))


def test_pinned_knight_cannot_move() -> None:
    table = table_for("4k3/4r3/8/8/8/8/4N3/4K3 w - - 0 1")
    assert table[sq("e2")] == 0


def test_pinned_rook_slides_along_pin_ray() -> None:
    table = table_for("4k3/4r3/8/8/8/8/4R3/4K3 w - - 0 1")
    assert table[sq("e2")] == squares("e3", "e4", "e5", "e6", "e7")


def test_king_cannot_step_back_along_checking_ray() -> None:
    table = table_for("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
    assert table[sq("e1")] == squares("d2", "e2", "f2")


def test_king_captures_unprotected_checker_but_not_protected_piece() -> None:
    table = table_for("4k3/8/8/8/8/8/3q4/4K3 w - - 0 1")
    assert table[sq("e1")] == squares("d2", "f1")

    table = table_for("4k3/8/8/8/8/2b5/3q4/4K3 w - - 0 1")
    assert table[sq("e1")] == squares("f1")


def test_capturing_checking_knight_resolves_check() -> None:
    table = table_for("4k3/8/8/8/8/3n4/8/4KB2 w - - 0 1")
    # The bishop may only take the checker; blocking a knight is impossible
    assert table[sq("f1")] == squares("d3")


def test_en_passant_that_exposes_king_on_rank_is_illegal() -> None:
    table = table_for("8/8/8/KPp4r/8/8/8/4k3 w - c6 0 2")
    assert table[sq("b5")] == squares("b6")


def test_en_passant_removes_checking_pawn() -> None:
    # d7-d5 gave check to the king on e4; taking en passant is the only pawn answer
    table = table_for("4k3/8/8/3pP3/4K3/8/8/8 w - d6 0 2")
    assert table[sq("e5")] == squares("d6")


def test_castling_blocked_through_and_out_of_check() -> None:
    table = table_for("r3k2r/8/8/8/8/8/5r2/R3K2R w KQkq - 0 1")
    assert not table[sq("e1")] & squares("g1")
    assert table[sq("e1")] & squares("c1")

    table = table_for("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert table[sq("e1")] & squares("g1", "c1") == squares("g1", "c1")

    # In check: neither side may castle
    table = table_for("r3k2r/8/8/8/8/8/4r3/R3K2R w KQkq - 0 1")
    assert not table[sq("e1")] & squares("g1", "c1")


def test_queen_side_castling_allowed_when_only_b_file_attacked() -> None:
    table = table_for("1r2k2r/8/8/8/8/8/8/R3K2R w KQk - 0 1")
    assert table[sq("e1")] & squares("c1")


def test_attack_mask_recomputes_sliders_on_hypothetical_occupancy() -> None:
    p = decode("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
    pseudo = generate(p)
    # With the king lifted off e1 the rook sees through to h1
    occ = p.occupancy & ~squares("e1")
    assert attack_mask(p, pseudo, "b", occ) & squares("f1", "h1")
    assert not attack_mask(p, pseudo, "b", p.occupancy) & squares("f1")
    # A captured rook attacks nothing
    assert not attack_mask(p, pseudo, "b", occ, removed=squares("a1")) & squares("f1")


def test_check_detection() -> None:
    p = decode("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
    pseudo = generate(p)
    assert is_in_check(p, pseudo)
    assert not is_in_check(p, pseudo, "b")


def test_scholars_mate_position_is_mate_with_empty_table() -> None:
    fen = "r1bqkbnr/pppp1Qpp/8/4p3/1nB1P3/8/PPPP1PPP/RNB1K1NR b KQkq - 0 4"
    g = Game.from_fen(fen)
    assert g.in_check()
    assert g.is_mate()
    assert not g.is_stalemate()
    assert all(m == 0 for m in g.legal_move_table())
    assert g.legal_moves() == []


def test_stalemate() -> None:
    g = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert not g.in_check()
    assert g.is_stalemate()
    assert not g.is_mate()
    assert g.is_draw()
