from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .bitboard import Bitboard, square_to_str
from .errors import ChessError
from .types import CastlingKind, Piece


@dataclass(frozen=True)
class MoveDescriptor:
    """Structured SAN move produced by the SAN parser.

    Attributes:
        san (str): The text the descriptor was parsed from.
        piece (Piece): Moving piece kind; ``PAWN`` when SAN has no piece letter.
        to_sq (Optional[int]): Destination square, ``None`` for castling.
        from_mask (Bitboard): Origin disambiguation (0 = unconstrained, else a
            file, rank or single-square mask).
        promotion (Optional[Piece]): Promotion piece kind, if any.
        castling (Optional[CastlingKind]): Castling kind, if any.
    """

    san: str
    piece: Piece = Piece.PAWN
    to_sq: Optional[int] = None
    from_mask: Bitboard = 0
    promotion: Optional[Piece] = None
    castling: Optional[CastlingKind] = None


@dataclass(frozen=True)
class MoveRecord:
    """One applied move, as stored in a game's history."""

    color: str
    before: str
    after: str
    from_sq: int
    to_sq: int
    piece: Piece
    captured: Optional[Piece]
    promotion: Optional[Piece]
    san: str
    castling: Optional[CastlingKind]

    def to_uci(self) -> str:
        return to_uci(self.from_sq, self.to_sq, self.promotion)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": self.color,
            "before": self.before,
            "after": self.after,
            "from": square_to_str(self.from_sq),
            "to": square_to_str(self.to_sq),
            "piece": self.piece.name.lower(),
            "captured": self.captured.name.lower() if self.captured is not None else None,
            "promotion": self.promotion.name.lower() if self.promotion is not None else None,
            "san": self.san,
            "castling": self.castling.value if self.castling is not None else None,
        }


@dataclass(frozen=True)
class MoveResult:
    """Outcome of ``Game.try_apply``: either a record or the error that rejected the move."""

    ok: bool
    record: Optional[MoveRecord] = None
    error: Optional[ChessError] = None

    def __bool__(self) -> bool:
        return self.ok


def to_uci(from_sq: int, to_sq: int, promotion: Optional[Piece] = None) -> str:
    """Encode a move in long algebraic form such as ``"e2e4"`` or ``"e7e8q"``."""
    suffix = promotion.letter.lower() if promotion is not None else ""
    return square_to_str(from_sq) + square_to_str(to_sq) + suffix
