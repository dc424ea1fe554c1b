from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .bitboard import (
    FILE_NAMES,
    FILES,
    RANK_1,
    RANK_8,
    RANKS,
    Bitboard,
    file_of,
    iter_squares,
    rank_of,
    square_bb,
    square_to_str,
)
from .errors import SanParseError
from .move import MoveDescriptor
from .movegen import castling_kind_for, ep_target_for
from .position import Position
from .types import CastlingKind, Piece


PIECE_LETTERS = {
    "N": Piece.KNIGHT,
    "B": Piece.BISHOP,
    "R": Piece.ROOK,
    "Q": Piece.QUEEN,
    "K": Piece.KING,
}
PROMOTION_LETTERS = {k: v for k, v in PIECE_LETTERS.items() if v != Piece.KING}
PROMOTION_ORDER = (Piece.QUEEN, Piece.ROOK, Piece.BISHOP, Piece.KNIGHT)
DECORATIONS = frozenset("x+#!? ")


class _SanScanner:
    """Single left-to-right pass over a SAN string.

    Token classes, tried in order at each offset: decorations, the ``e.p.``
    annotation, castling, promotion, file letter (square or file
    disambiguation), rank digit, piece letter.
    """

    def __init__(self, san: str) -> None:
        self.san = san
        self.i = 0
        self.piece: Optional[Piece] = None
        self.to_sq: Optional[int] = None
        self.from_mask: Bitboard = 0
        self.promotion: Optional[Piece] = None
        self.castling: Optional[CastlingKind] = None

    def fail(self, reason: str, token: str) -> SanParseError:
        return SanParseError(reason, self.san, token, self.i)

    def peek(self, offset: int = 1) -> str:
        return self.san[self.i + offset : self.i + offset + 1]

    def run(self) -> MoveDescriptor:
        while self.i < len(self.san):
            c = self.san[self.i]
            if c in DECORATIONS:
                self.i += 1
            elif c == "e" and self.peek() == ".":
                self._scan_en_passant_note()
            elif c in "O0":
                self._scan_castling(c)
            elif c == "=":
                self._scan_promotion()
            elif "a" <= c <= "h":
                self._scan_file(c)
            elif "1" <= c <= "8":
                self.from_mask = RANKS[int(c) - 1]
                self.i += 1
            elif c in PIECE_LETTERS:
                self.piece = PIECE_LETTERS[c]
                self.i += 1
            else:
                raise self.fail("invalid character", c)
        return self._finish()

    def _scan_en_passant_note(self) -> None:
        # "e.p." / "e.p" annotation; informational only
        self.i += 2
        if self.san[self.i : self.i + 1] == "p":
            self.i += 1
            if self.san[self.i : self.i + 1] == ".":
                self.i += 1

    def _scan_castling(self, target: str) -> None:
        start = self.i
        if self.castling is not None:
            raise self.fail("invalid castling move", target)
        self.i += 1
        groups = 0
        while self.san[self.i : self.i + 1] == "-":
            if self.peek() != target or groups == 2:
                raise self.fail("invalid castling move", self.san[start : self.i + 2])
            groups += 1
            self.i += 2
        if groups == 0:
            raise SanParseError("invalid castling move", self.san, self.san[start : self.i], start)
        self.castling = CastlingKind.KING_SIDE if groups == 1 else CastlingKind.QUEEN_SIDE
        if self.piece is None:
            self.piece = Piece.KING

    def _scan_promotion(self) -> None:
        letter = self.peek()
        if self.piece not in (None, Piece.PAWN) or self.to_sq is None:
            raise self.fail("invalid promotion piece", "=" + letter)
        if letter not in PROMOTION_LETTERS:
            raise self.fail("invalid promotion piece", "=" + letter)
        self.piece = Piece.PAWN
        self.promotion = PROMOTION_LETTERS[letter]
        self.i += 2

    def _scan_file(self, c: str) -> None:
        file_idx = FILE_NAMES.index(c)
        nxt = self.peek()
        if nxt and "0" <= nxt <= "9":
            rank_idx = int(nxt) - 1
            if not 0 <= rank_idx <= 7:
                raise self.fail("invalid rank", c + nxt)
            if self.to_sq is not None:
                # A second square: the first one was the origin (e.g. "Qh4e1").
                if self.from_mask:
                    raise self.fail("unexpected square", c + nxt)
                self.from_mask = square_bb(self.to_sq)
            self.to_sq = rank_idx * 8 + file_idx
            self.i += 2
            return
        self.from_mask = FILES[file_idx]
        self.i += 1

    def _finish(self) -> MoveDescriptor:
        """Validate the scanned tokens and build the descriptor.

        A move that names only a file or rank and no square (``Nf``, ``exf``)
        is rejected with "missing destination square". The lone file or rank
        is never promoted to a destination, since it does not name one square.
        """
        piece = self.piece if self.piece is not None else Piece.PAWN
        if self.castling is not None:
            if self.to_sq is not None or piece != Piece.KING:
                raise SanParseError("invalid castling move", self.san)
            return MoveDescriptor(san=self.san, piece=piece, castling=self.castling)
        if self.to_sq is None:
            raise SanParseError("missing destination square", self.san)
        promotion = self.promotion
        if promotion is not None and piece != Piece.PAWN:
            raise SanParseError("invalid promotion piece", self.san)
        if piece == Piece.PAWN and promotion is None and square_bb(self.to_sq) & (RANK_1 | RANK_8):
            promotion = Piece.QUEEN
        return MoveDescriptor(
            san=self.san,
            piece=piece,
            to_sq=self.to_sq,
            from_mask=self.from_mask,
            promotion=promotion,
        )


def parse_san(san: str) -> MoveDescriptor:
    """Parse a SAN move such as ``"Nf3"``, ``"exd6 e.p."``, ``"e8=N+"`` or ``"O-O-O"``.

    Raises:
        SanParseError: On an invalid character, castling continuation,
            promotion letter or rank, or when no destination is given.
    """
    if not isinstance(san, str) or not san.strip():
        raise SanParseError("empty move", str(san))
    return _SanScanner(san).run()


# --- Rendering -------------------------------------------------------------


def iter_legal(position: Position, table: List[Bitboard]) -> Iterator[Tuple[int, int, Optional[Piece]]]:
    """Yield ``(from_sq, to_sq, promotion)`` for every legal move in ascending order.

    Promotions are expanded to one entry per promotion piece (Q, R, B, N).
    """
    pawns = position.pieces[Piece.PAWN]
    for from_sq in range(64):
        for to_sq in iter_squares(table[from_sq]):
            if (pawns >> from_sq) & 1 and square_bb(to_sq) & (RANK_1 | RANK_8):
                for promo in PROMOTION_ORDER:
                    yield from_sq, to_sq, promo
            else:
                yield from_sq, to_sq, None


def _disambiguation(position: Position, table: List[Bitboard], piece: Piece, from_sq: int, to_sq: int) -> str:
    own = position.color_bb(position.side_to_move) & position.pieces[piece]
    rivals = [
        sq for sq in iter_squares(own) if sq != from_sq and (table[sq] >> to_sq) & 1
    ]
    if not rivals:
        return ""
    if all(file_of(sq) != file_of(from_sq) for sq in rivals):
        return FILE_NAMES[file_of(from_sq)]
    if all(rank_of(sq) != rank_of(from_sq) for sq in rivals):
        return str(rank_of(from_sq) + 1)
    return square_to_str(from_sq)


def move_to_san(
    position: Position,
    table: List[Bitboard],
    from_sq: int,
    to_sq: int,
    promotion: Optional[Piece] = None,
) -> str:
    """Render a legal move as SAN without check or mate suffixes."""
    color = position.side_to_move
    piece = position.piece_at(from_sq)
    if piece is None:
        raise ValueError(f"no piece on {square_to_str(from_sq)}")

    if piece == Piece.KING:
        kind = castling_kind_for(color, from_sq, to_sq)
        if kind is not None:
            return kind.value

    dest = square_to_str(to_sq)
    enemy = position.color_bb("b" if color == "w" else "w")
    capture = bool(enemy & square_bb(to_sq))

    if piece == Piece.PAWN:
        capture = capture or to_sq == ep_target_for(position, color)
        san = f"{FILE_NAMES[file_of(from_sq)]}x{dest}" if capture else dest
        if promotion is not None:
            san += "=" + promotion.letter
        return san

    disamb = _disambiguation(position, table, piece, from_sq, to_sq)
    return f"{piece.letter}{disamb}{'x' if capture else ''}{dest}"


def legal_san_moves(position: Position, table: List[Bitboard]) -> List[str]:
    return [move_to_san(position, table, f, t, p) for f, t, p in iter_legal(position, table)]
