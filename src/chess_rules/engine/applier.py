from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from . import fen as fen_codec
from .bitboard import FILE_A, FILE_H, RANK_1, RANK_8, Bitboard, shift, square_bb, square_to_str
from .config import DEFAULT_CONFIG, RulesConfig
from .errors import IllegalMoveError
from .move import MoveDescriptor, MoveRecord
from .movegen import CASTLING_GEOMETRY, castling_kind_for
from .position import Position
from .types import BLACK, WHITE, CastlingKind, Piece, castling_index, opponent


logger = logging.getLogger(__name__)

# Rook home corner -> castling right it guards
_CORNER_RIGHTS = {
    geo.rook_from: castling_index(color, kind)
    for color, kinds in CASTLING_GEOMETRY.items()
    for kind, geo in kinds.items()
}


def _castling_target(position: Position, desc: MoveDescriptor) -> Optional[CastlingKind]:
    """Return the castling kind a descriptor asks for, if any.

    Explicit ``O-O``/``O-O-O`` always counts; a king move onto a castling
    destination counts while the matching right is held and the king is home.
    """
    if desc.castling is not None:
        return desc.castling
    if desc.piece != Piece.KING or desc.to_sq is None:
        return None
    color = position.side_to_move
    king = position.king_bb(color)
    for kind, geo in CASTLING_GEOMETRY[color].items():
        if (
            desc.to_sq == geo.king_to
            and king & square_bb(geo.king_from)
            and position.castling_rights[castling_index(color, kind)]
        ):
            return kind
    return None


def resolve(
    position: Position,
    table: List[Bitboard],
    desc: MoveDescriptor,
    config: RulesConfig = DEFAULT_CONFIG,
) -> Tuple[int, int, Optional[Piece]]:
    """Match a parsed SAN descriptor against the legal-move table.

    Returns:
        Tuple[int, int, Optional[Piece]]: ``(from_sq, to_sq, promotion)``.

    Raises:
        IllegalMoveError: If no legal origin/destination pair matches, or
            several do and ``config.reject_ambiguous`` is set.
    """
    color = position.side_to_move

    kind = _castling_target(position, desc)
    if kind is not None:
        geo = CASTLING_GEOMETRY[color][kind]
        if not (table[geo.king_from] >> geo.king_to) & 1:
            raise IllegalMoveError("castling is not legal", desc.san)
        return geo.king_from, geo.king_to, None

    if desc.to_sq is None:
        raise IllegalMoveError("missing destination square", desc.san)
    to_sq = desc.to_sq
    candidates = position.pieces[desc.piece] & position.color_bb(color)
    if desc.from_mask:
        candidates &= desc.from_mask

    matches = [sq for sq in range(64) if (candidates >> sq) & 1 and (table[sq] >> to_sq) & 1]
    if not matches:
        raise IllegalMoveError("no legal move matches", desc.san)
    if len(matches) > 1 and config.reject_ambiguous:
        origins = ", ".join(square_to_str(sq) for sq in matches)
        raise IllegalMoveError(f"ambiguous move (candidates {origins})", desc.san)
    from_sq = matches[0]

    last_rank = bool(square_bb(to_sq) & (RANK_1 | RANK_8))
    if desc.piece == Piece.PAWN:
        if desc.promotion is not None and not last_rank:
            raise IllegalMoveError("promotion off the last rank", desc.san)
        if last_rank and desc.promotion is None:
            raise IllegalMoveError("missing promotion piece", desc.san)
    return from_sq, to_sq, desc.promotion


def _revoke_rights(position: Position, piece: Piece, color: str, from_sq: int, to_sq: int) -> None:
    rights = position.castling_rights
    if piece == Piece.KING:
        rights[castling_index(color, CastlingKind.KING_SIDE)] = False
        rights[castling_index(color, CastlingKind.QUEEN_SIDE)] = False
    elif piece == Piece.ROOK and from_sq in _CORNER_RIGHTS:
        idx = _CORNER_RIGHTS[from_sq]
        # Only the mover's own corners guard the mover's rights
        if (idx < 2) == (color == WHITE):
            rights[idx] = False
    # Anything landing on an enemy corner removes (or has removed) that rook
    if to_sq in _CORNER_RIGHTS:
        idx = _CORNER_RIGHTS[to_sq]
        if (idx < 2) != (color == WHITE):
            rights[idx] = False


def _next_ep_square(
    position: Position, color: str, from_sq: int, to_sq: int, config: RulesConfig
) -> Optional[int]:
    if abs(to_sq - from_sq) != 16:
        return None
    skipped = (from_sq + to_sq) // 2
    if config.ep_policy == "always":
        return skipped
    landing = square_bb(to_sq)
    enemy_pawns = position.pieces[Piece.PAWN] & position.color_bb(opponent(color))
    neighbours = 0
    if not landing & FILE_A:
        neighbours |= shift(landing, -1)
    if not landing & FILE_H:
        neighbours |= shift(landing, 1)
    return skipped if neighbours & enemy_pawns else None


def play(
    position: Position,
    from_sq: int,
    to_sq: int,
    promotion: Optional[Piece] = None,
    *,
    san: str = "",
    config: RulesConfig = DEFAULT_CONFIG,
    record: bool = True,
) -> Optional[MoveRecord]:
    """Mutate ``position`` by a move already known to be legal.

    Handles captures, en passant, castling rook motion, promotion,
    castling-right revocation, en passant target, clocks, repetition counts,
    history and the side to move.

    Returns:
        Optional[MoveRecord]: The appended history record, or ``None`` when
            ``record`` is False (bookkeeping skipped, as perft does).
    """
    color = position.side_to_move
    them = opponent(color)
    piece = position.piece_at(from_sq)
    if piece is None or position.color_at(from_sq) != color:
        raise IllegalMoveError(f"no {color} piece on {square_to_str(from_sq)}", san or None)

    before = fen_codec.encode(position) if record else ""
    ep_before = position.ep_square
    position.ep_square = None

    castling = castling_kind_for(color, from_sq, to_sq) if piece == Piece.KING else None

    captured: Optional[Piece] = None
    if position.color_at(to_sq) == them:
        captured = position.remove_piece(to_sq)
    elif piece == Piece.PAWN and to_sq == ep_before and from_sq % 8 != to_sq % 8:
        behind = to_sq - 8 if color == WHITE else to_sq + 8
        if position.color_at(behind) == them and position.piece_at(behind) == Piece.PAWN:
            captured = position.remove_piece(behind)

    position.remove_piece(from_sq)
    position.put_piece(to_sq, promotion if promotion is not None else piece, color)

    if castling is not None:
        geo = CASTLING_GEOMETRY[color][castling]
        position.remove_piece(geo.rook_from)
        position.put_piece(geo.rook_to, Piece.ROOK, color)

    _revoke_rights(position, piece, color, from_sq, to_sq)

    if piece == Piece.PAWN:
        position.ep_square = _next_ep_square(position, color, from_sq, to_sq, config)

    if piece == Piece.PAWN or captured is not None:
        position.halfmove_clock = 0
    else:
        position.halfmove_clock += 1
    if color == BLACK:
        position.fullmove_number += 1
    position.side_to_move = them

    if not record:
        return None

    placement = fen_codec.encode_placement(position)
    position.repetition_counts[placement] = position.repetition_counts.get(placement, 0) + 1
    entry = MoveRecord(
        color=color,
        before=before,
        after=fen_codec.encode(position),
        from_sq=from_sq,
        to_sq=to_sq,
        piece=piece,
        captured=captured,
        promotion=promotion,
        san=san,
        castling=castling,
    )
    position.move_history.append(entry)
    return entry


def resolve_and_apply(
    position: Position,
    table: List[Bitboard],
    desc: MoveDescriptor,
    config: RulesConfig = DEFAULT_CONFIG,
) -> MoveRecord:
    """Resolve ``desc`` against ``table`` and apply it to ``position``.

    Resolution happens before any field is touched, so a rejected move
    leaves ``position`` unchanged.
    """
    from_sq, to_sq, promotion = resolve(position, table, desc, config)
    entry = play(position, from_sq, to_sq, promotion, san=desc.san, config=config)
    if entry is None:
        raise IllegalMoveError("move was not recorded", desc.san)
    logger.debug("applied %s (%s)", desc.san, entry.to_uci())
    return entry
