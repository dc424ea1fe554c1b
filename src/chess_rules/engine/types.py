from __future__ import annotations

from enum import Enum, IntEnum


class Piece(IntEnum):
    """Piece kinds; the value indexes ``Position.pieces``."""

    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    @property
    def letter(self) -> str:
        """Uppercase SAN/FEN letter (``"P"`` for pawns)."""
        return "PNBRQK"[self]

    @classmethod
    def from_letter(cls, ch: str) -> "Piece":
        idx = "PNBRQK".find(ch.upper()) if len(ch) == 1 else -1
        if idx < 0:
            raise ValueError(f"invalid piece letter: {ch!r}")
        return cls(idx)


class CastlingKind(Enum):
    KING_SIDE = "O-O"
    QUEEN_SIDE = "O-O-O"


WHITE = "w"
BLACK = "b"
COLORS = (WHITE, BLACK)

# Indices into Position.castling_rights
WHITE_KING_SIDE = 0
WHITE_QUEEN_SIDE = 1
BLACK_KING_SIDE = 2
BLACK_QUEEN_SIDE = 3
CASTLING_LETTERS = "KQkq"


def opponent(color: str) -> str:
    return BLACK if color == WHITE else WHITE


def castling_index(color: str, kind: CastlingKind) -> int:
    base = WHITE_KING_SIDE if color == WHITE else BLACK_KING_SIDE
    return base if kind is CastlingKind.KING_SIDE else base + 1
