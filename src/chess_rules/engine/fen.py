from __future__ import annotations

from typing import List, Optional

from .bitboard import square_to_str, str_to_square
from .errors import FenParseError
from .position import Position
from .types import CASTLING_LETTERS, WHITE, Piece


def decode(fen: str) -> Position:
    """Create a position from a Forsyth–Edwards Notation (FEN) string.

    Args:
        fen (str): Six-field FEN string.

    Returns:
        Position: Decoded position; its repetition table is seeded with the
            placement field.

    Raises:
        FenParseError: If ``fen`` is empty, has the wrong number of fields, or
            contains invalid piece placement, side to move, castling rights,
            en passant square, or move counters.

    Notes:
        Only the canonical spelling of each field is accepted (castling letters
        in ``KQkq`` order, no adjacent digits in a rank) so that encoding a
        decoded string reproduces it exactly.
    """
    if not fen or not isinstance(fen, str):
        raise FenParseError("FEN must be a non-empty string", fen)
    parts = fen.strip().split()
    if len(parts) != 6:
        raise FenParseError(f"FEN must have 6 space-separated fields, got {len(parts)}", fen)
    placement, stm, castling, ep, halfmove, fullmove = parts

    # Piece placement, rank 8 first
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise FenParseError("FEN board must have 8 ranks", fen)
    white = black = 0
    pieces = [0] * 6
    for rank_idx, rank in enumerate(ranks):
        file_idx = 0
        prev_digit = False
        for ch in rank:
            if "0" <= ch <= "9":
                n = int(ch)
                if n < 1 or n > 8 or prev_digit:
                    raise FenParseError(f"invalid empty count in FEN rank {rank!r}", fen)
                file_idx += n
                prev_digit = True
                continue
            prev_digit = False
            try:
                piece = Piece.from_letter(ch)
            except ValueError as e:
                raise FenParseError(f"invalid piece in FEN: {ch!r}", fen) from e
            if file_idx >= 8:
                raise FenParseError(f"too many squares in FEN rank {rank!r}", fen)
            sq = 56 - rank_idx * 8 + file_idx
            pieces[piece] |= 1 << sq
            if ch.isupper():
                white |= 1 << sq
            else:
                black |= 1 << sq
            file_idx += 1
        if file_idx != 8:
            raise FenParseError(f"FEN rank {rank!r} does not cover 8 squares", fen)

    if stm not in ("w", "b"):
        raise FenParseError(f"side to move must be 'w' or 'b', got {stm!r}", fen)

    rights = [False] * 4
    if castling != "-":
        expected = "".join(c for c in CASTLING_LETTERS if c in castling)
        if not castling or castling != expected:
            raise FenParseError(f"invalid castling rights: {castling!r}", fen)
        for i, ch in enumerate(CASTLING_LETTERS):
            rights[i] = ch in castling

    ep_square: Optional[int]
    if ep == "-":
        ep_square = None
    else:
        try:
            ep_square = str_to_square(ep)
        except ValueError as e:
            raise FenParseError(f"invalid en passant square: {ep!r}", fen) from e
        if ep_square // 8 not in (2, 5):
            raise FenParseError(f"en passant square off rank 3/6: {ep!r}", fen)

    halfmove_clock = _parse_counter(halfmove, "half-move clock", fen, minimum=0)
    fullmove_number = _parse_counter(fullmove, "full-move number", fen, minimum=1)

    return Position(
        white=white,
        black=black,
        pieces=pieces,
        side_to_move=stm,
        castling_rights=rights,
        ep_square=ep_square,
        halfmove_clock=halfmove_clock,
        fullmove_number=fullmove_number,
        repetition_counts={placement: 1},
    )


def _parse_counter(text: str, name: str, fen: str, *, minimum: int) -> int:
    if not (text.isascii() and text.isdigit()) or (len(text) > 1 and text[0] == "0"):
        raise FenParseError(f"invalid {name}: {text!r}", fen)
    value = int(text)
    if value < minimum:
        raise FenParseError(f"invalid {name}: {text!r}", fen)
    return value


def encode_placement(position: Position) -> str:
    """Serialize only the piece-placement field."""
    ranks: List[str] = []
    for rank_idx in range(7, -1, -1):
        run = 0
        row: List[str] = []
        for file_idx in range(8):
            sq = rank_idx * 8 + file_idx
            piece = position.piece_at(sq)
            if piece is None:
                run += 1
                continue
            if run:
                row.append(str(run))
                run = 0
            ch = piece.letter
            row.append(ch if (position.white >> sq) & 1 else ch.lower())
        if run:
            row.append(str(run))
        ranks.append("".join(row))
    return "/".join(ranks)


def encode(position: Position) -> str:
    """Serialize a position into its six-field FEN string."""
    castling = position.castling_string() or "-"
    ep = square_to_str(position.ep_square) if position.ep_square is not None else "-"
    stm = "w" if position.side_to_move == WHITE else "b"
    return (
        f"{encode_placement(position)} {stm} {castling} {ep} "
        f"{position.halfmove_clock} {position.fullmove_number}"
    )
