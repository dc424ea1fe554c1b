from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .bitboard import (
    KING_ATTACKS,
    KNIGHT_ATTACKS,
    PAWN_ATTACKS,
    RANK_2,
    RANK_7,
    SLIDERS,
    Bitboard,
    iter_squares,
    shift,
    slider_attacks,
    square_bb,
)
from .position import Position
from .types import BLACK, WHITE, CastlingKind, Piece, castling_index


@dataclass(frozen=True)
class CastlingGeometry:
    king_from: int
    king_to: int
    rook_from: int
    rook_to: int
    between: Bitboard  # squares strictly between king and rook, must be empty
    passes: int  # square the king crosses, must not be attacked


CASTLING_GEOMETRY: Dict[str, Dict[CastlingKind, CastlingGeometry]] = {
    WHITE: {
        CastlingKind.KING_SIDE: CastlingGeometry(4, 6, 7, 5, (1 << 5) | (1 << 6), 5),
        CastlingKind.QUEEN_SIDE: CastlingGeometry(
            4, 2, 0, 3, (1 << 1) | (1 << 2) | (1 << 3), 3
        ),
    },
    BLACK: {
        CastlingKind.KING_SIDE: CastlingGeometry(60, 62, 63, 61, (1 << 61) | (1 << 62), 61),
        CastlingKind.QUEEN_SIDE: CastlingGeometry(
            60, 58, 56, 59, (1 << 57) | (1 << 58) | (1 << 59), 59
        ),
    },
}


def castling_kind_for(color: str, from_sq: int, to_sq: int) -> Optional[CastlingKind]:
    """Return the castling kind when a king move ``from_sq -> to_sq`` is a castle."""
    for kind, geo in CASTLING_GEOMETRY[color].items():
        if geo.king_from == from_sq and geo.king_to == to_sq:
            return kind
    return None


@dataclass
class PseudoLegalMoves:
    """Pseudo-legal destinations plus the attack data collected while generating them.

    Attributes:
        moves (List[Bitboard]): 64 entries, indexed by origin square.
        static_attacks (List[Bitboard]): 64 entries; attack set of the pawn,
            knight or king on that square (0 for sliders and empty squares).
        static_masks (Dict[str, Bitboard]): Union of ``static_attacks`` per color.
        static_sources (Dict[str, Bitboard]): Squares holding non-sliding pieces per color.
        slider_squares (List[int]): Ascending squares holding bishops, rooks or queens.
    """

    moves: List[Bitboard] = field(default_factory=lambda: [0] * 64)
    static_attacks: List[Bitboard] = field(default_factory=lambda: [0] * 64)
    static_masks: Dict[str, Bitboard] = field(default_factory=lambda: {WHITE: 0, BLACK: 0})
    static_sources: Dict[str, Bitboard] = field(default_factory=lambda: {WHITE: 0, BLACK: 0})
    slider_squares: List[int] = field(default_factory=list)


def ep_target_for(position: Position, color: str) -> Optional[int]:
    """Return the en passant target usable by ``color``, if any.

    Only the side to move may capture en passant, and only onto rank 6
    (white) or rank 3 (black).
    """
    ep = position.ep_square
    if ep is None or color != position.side_to_move:
        return None
    if ep // 8 != (5 if color == WHITE else 2):
        return None
    return ep


def pawn_moves(position: Position, sq: int, color: str) -> Bitboard:
    """Pushes onto empty squares plus captures onto enemy pieces or the en passant target."""
    origin = square_bb(sq)
    occ = position.occupancy
    if color == WHITE:
        enemy = position.black
        step, start_rank = 8, RANK_2
    else:
        enemy = position.white
        step, start_rank = -8, RANK_7

    mask = 0
    one = shift(origin, step)
    if one and not one & occ:
        mask |= one
        if origin & start_rank:
            two = shift(one, step)
            if not two & occ:
                mask |= two

    targets = enemy
    if ep_target_for(position, color) is not None:
        targets |= square_bb(position.ep_square)
    mask |= PAWN_ATTACKS[color][sq] & targets
    return mask


def castling_moves(position: Position, sq: int, color: str) -> Bitboard:
    """Castling destinations whose right is held and whose path is empty.

    Attack safety of the path is left to the legality filter.
    """
    mask = 0
    own_rooks = position.pieces[Piece.ROOK] & position.color_bb(color)
    for kind, geo in CASTLING_GEOMETRY[color].items():
        if sq != geo.king_from or not position.castling_rights[castling_index(color, kind)]:
            continue
        if not own_rooks & square_bb(geo.rook_from):
            continue
        if position.occupancy & geo.between:
            continue
        mask |= square_bb(geo.king_to)
    return mask


def generate(position: Position) -> PseudoLegalMoves:
    """Compute pseudo-legal destinations for every occupied square.

    Own-color squares are masked out of every destination set. Castling
    candidates are only produced for the side to move.
    """
    result = PseudoLegalMoves()
    occ = position.occupancy

    for sq in iter_squares(occ):
        color = WHITE if (position.white >> sq) & 1 else BLACK
        own = position.color_bb(color)
        piece = position.piece_at(sq)

        if piece in SLIDERS:
            result.slider_squares.append(sq)
            result.moves[sq] = slider_attacks(piece, sq, occ) & ~own
            continue

        if piece == Piece.PAWN:
            attacks = PAWN_ATTACKS[color][sq]
            mask = pawn_moves(position, sq, color)
        elif piece == Piece.KNIGHT:
            attacks = KNIGHT_ATTACKS[sq]
            mask = attacks & ~own
        else:
            attacks = KING_ATTACKS[sq]
            mask = attacks & ~own
            if color == position.side_to_move:
                mask |= castling_moves(position, sq, color)

        result.static_attacks[sq] = attacks
        result.static_masks[color] |= attacks
        result.static_sources[color] |= square_bb(sq)
        result.moves[sq] = mask

    return result
