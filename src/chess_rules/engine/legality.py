from __future__ import annotations

from typing import List, Optional

from .bitboard import Bitboard, iter_squares, slider_attacks, square_bb
from .movegen import CASTLING_GEOMETRY, PseudoLegalMoves, castling_kind_for, ep_target_for
from .position import Position
from .types import WHITE, Piece, opponent


def attack_mask(
    position: Position,
    pseudo: PseudoLegalMoves,
    color: str,
    occupancy: Bitboard,
    removed: Bitboard = 0,
) -> Bitboard:
    """Return every square ``color`` attacks on a hypothetical ``occupancy``.

    Non-sliding attacks come from the generator's static masks; sliding
    attacks are recomputed against ``occupancy``. Pieces standing on
    ``removed`` (a hypothetical capture) contribute nothing.
    """
    sources = pseudo.static_sources[color]
    if removed & sources:
        mask = 0
        for sq in iter_squares(sources & ~removed):
            mask |= pseudo.static_attacks[sq]
    else:
        mask = pseudo.static_masks[color]

    color_bb = position.color_bb(color)
    for sq in pseudo.slider_squares:
        bit = square_bb(sq)
        if not bit & color_bb or bit & removed:
            continue
        mask |= slider_attacks(position.piece_at(sq), sq, occupancy)
    return mask


def is_in_check(position: Position, pseudo: PseudoLegalMoves, color: Optional[str] = None) -> bool:
    """Return True if ``color``'s king (default: side to move) is attacked."""
    color = color or position.side_to_move
    king = position.king_bb(color)
    if not king:
        return False
    return bool(attack_mask(position, pseudo, opponent(color), position.occupancy) & king)


def _is_safe(
    position: Position,
    pseudo: PseudoLegalMoves,
    from_sq: int,
    to_sq: int,
    piece: Piece,
    color: str,
) -> bool:
    origin = square_bb(from_sq)
    dest = square_bb(to_sq)
    them = opponent(color)

    captured = dest & position.color_bb(them)
    if piece == Piece.PAWN and not captured and to_sq == ep_target_for(position, color):
        captured = square_bb(to_sq - 8 if color == WHITE else to_sq + 8)

    occupancy = (position.occupancy & ~origin & ~captured) | dest
    attacked = attack_mask(position, pseudo, them, occupancy, captured)

    if piece == Piece.KING:
        needed = dest
        kind = castling_kind_for(color, from_sq, to_sq)
        if kind is not None:
            needed |= origin | square_bb(CASTLING_GEOMETRY[color][kind].passes)
        return not attacked & needed

    return not attacked & position.king_bb(color)


def filter_legal(position: Position, pseudo: PseudoLegalMoves) -> List[Bitboard]:
    """Reduce pseudo-legal destinations to those that keep the mover's king safe.

    Returns:
        List[Bitboard]: The 64-entry legal-move table. Entries for squares not
            holding a piece of the side to move are 0.
    """
    table: List[Bitboard] = [0] * 64
    color = position.side_to_move
    for from_sq in iter_squares(position.color_bb(color)):
        piece = position.piece_at(from_sq)
        legal = 0
        for to_sq in iter_squares(pseudo.moves[from_sq]):
            if _is_safe(position, pseudo, from_sq, to_sq, piece, color):
                legal |= square_bb(to_sq)
        table[from_sq] = legal
    return table
