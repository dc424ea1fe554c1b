from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .bitboard import Bitboard, square_bb
from .move import MoveRecord
from .types import CASTLING_LETTERS, WHITE, Piece


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


@dataclass
class Position:
    """Packed board state.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``white`` and ``black`` are disjoint; their union equals the union of
      the six ``pieces`` boards, which never overlap.
    - ``repetition_counts`` is keyed by the FEN piece-placement field only.
    """

    white: Bitboard
    black: Bitboard
    pieces: List[Bitboard]
    side_to_move: str  # 'w' or 'b'
    castling_rights: List[bool]  # K, Q, k, q
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int
    repetition_counts: Dict[str, int] = field(default_factory=dict, compare=False)
    move_history: List[MoveRecord] = field(default_factory=list, compare=False)

    @property
    def occupancy(self) -> Bitboard:
        return self.white | self.black

    def color_bb(self, color: str) -> Bitboard:
        return self.white if color == WHITE else self.black

    def piece_at(self, sq: int) -> Optional[Piece]:
        bit = square_bb(sq)
        if not self.occupancy & bit:
            return None
        for piece in Piece:
            if self.pieces[piece] & bit:
                return piece
        return None

    def color_at(self, sq: int) -> Optional[str]:
        bit = square_bb(sq)
        if self.white & bit:
            return "w"
        if self.black & bit:
            return "b"
        return None

    def king_bb(self, color: str) -> Bitboard:
        return self.pieces[Piece.KING] & self.color_bb(color)

    def castling_string(self) -> str:
        return "".join(ch for ch, held in zip(CASTLING_LETTERS, self.castling_rights) if held)

    # --- Mutation primitives used by the move applier ---
    def remove_piece(self, sq: int) -> Optional[Piece]:
        piece = self.piece_at(sq)
        if piece is None:
            return None
        mask = ~square_bb(sq)
        self.pieces[piece] &= mask
        self.white &= mask
        self.black &= mask
        return piece

    def put_piece(self, sq: int, piece: Piece, color: str) -> None:
        bit = square_bb(sq)
        self.pieces[piece] |= bit
        if color == WHITE:
            self.white |= bit
        else:
            self.black |= bit

    def copy(self) -> "Position":
        return Position(
            white=self.white,
            black=self.black,
            pieces=list(self.pieces),
            side_to_move=self.side_to_move,
            castling_rights=list(self.castling_rights),
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            repetition_counts=dict(self.repetition_counts),
            move_history=list(self.move_history),
        )
