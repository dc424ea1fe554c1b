from __future__ import annotations

from typing import Iterator, List, Tuple

from .types import Piece


# A bitboard is a plain int restricted to 64 bits: bit i <=> square i (a1=0 .. h8=63).
Bitboard = int

FULL_MASK: Bitboard = 0xFFFFFFFFFFFFFFFF
EMPTY: Bitboard = 0

FILE_A: Bitboard = 0x0101010101010101
FILE_B: Bitboard = FILE_A << 1
FILE_C: Bitboard = FILE_A << 2
FILE_D: Bitboard = FILE_A << 3
FILE_E: Bitboard = FILE_A << 4
FILE_F: Bitboard = FILE_A << 5
FILE_G: Bitboard = FILE_A << 6
FILE_H: Bitboard = FILE_A << 7

RANK_1: Bitboard = 0xFF
RANK_2: Bitboard = RANK_1 << 8
RANK_3: Bitboard = RANK_1 << 16
RANK_4: Bitboard = RANK_1 << 24
RANK_5: Bitboard = RANK_1 << 32
RANK_6: Bitboard = RANK_1 << 40
RANK_7: Bitboard = RANK_1 << 48
RANK_8: Bitboard = RANK_1 << 56

FILES: Tuple[Bitboard, ...] = (FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H)
RANKS: Tuple[Bitboard, ...] = (RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8)

FILE_NAMES = "abcdefgh"

# (shift, edge): a step by `shift` is only taken from squares outside `edge`.
NORTH = (8, RANK_8)
SOUTH = (-8, RANK_1)
EAST = (1, FILE_H)
WEST = (-1, FILE_A)
NORTH_EAST = (9, RANK_8 | FILE_H)
NORTH_WEST = (7, RANK_8 | FILE_A)
SOUTH_EAST = (-7, RANK_1 | FILE_H)
SOUTH_WEST = (-9, RANK_1 | FILE_A)

ORTHOGONALS = (NORTH, SOUTH, EAST, WEST)
DIAGONALS = (NORTH_EAST, NORTH_WEST, SOUTH_EAST, SOUTH_WEST)
ALL_DIRECTIONS = ORTHOGONALS + DIAGONALS

KNIGHT_STEPS = (
    (17, FILE_H | RANK_7 | RANK_8),  # 2 up, 1 right
    (15, FILE_A | RANK_7 | RANK_8),  # 2 up, 1 left
    (10, FILE_G | FILE_H | RANK_8),  # 1 up, 2 right
    (6, FILE_A | FILE_B | RANK_8),  # 1 up, 2 left
    (-6, FILE_G | FILE_H | RANK_1),  # 1 down, 2 right
    (-10, FILE_A | FILE_B | RANK_1),  # 1 down, 2 left
    (-15, FILE_H | RANK_1 | RANK_2),  # 2 down, 1 right
    (-17, FILE_A | RANK_1 | RANK_2),  # 2 down, 1 left
)


def square_bb(sq: int) -> Bitboard:
    """Return the single-bit mask for square index ``sq``."""
    return 1 << sq


def bb_square(bb: Bitboard) -> int:
    """Return the square index of a single-bit mask.

    Raises:
        ValueError: If ``bb`` does not have exactly one bit set.
    """
    if bb <= 0 or bb & (bb - 1):
        raise ValueError(f"not a single-square bitboard: {bb:#x}")
    return bb.bit_length() - 1


def iter_squares(bb: Bitboard) -> Iterator[int]:
    """Yield the set squares of ``bb`` in ascending order."""
    while bb:
        lsb = bb & -bb
        yield lsb.bit_length() - 1
        bb ^= lsb


def popcount(bb: Bitboard) -> int:
    return bin(bb).count("1")


def shift(bb: Bitboard, delta: int) -> Bitboard:
    """Shift ``bb`` towards higher squares for positive ``delta``, lower otherwise."""
    if delta >= 0:
        return (bb << delta) & FULL_MASK
    return bb >> -delta


def file_of(sq: int) -> int:
    return sq % 8


def rank_of(sq: int) -> int:
    return sq // 8


def str_to_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = int(s[1]) - 1
    return rank * 8 + file


def square_to_str(idx: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``idx`` is outside the valid square range.
    """
    if idx < 0 or idx > 63:
        raise ValueError(f"invalid square index: {idx}")
    return FILE_NAMES[idx % 8] + str(idx // 8 + 1)


def _step_table(steps) -> List[Bitboard]:
    table: List[Bitboard] = []
    for sq in range(64):
        origin = square_bb(sq)
        mask = EMPTY
        for delta, edge in steps:
            if not origin & edge:
                mask |= shift(origin, delta)
        table.append(mask)
    return table


KNIGHT_ATTACKS: List[Bitboard] = _step_table(KNIGHT_STEPS)
KING_ATTACKS: List[Bitboard] = _step_table(ALL_DIRECTIONS)
PAWN_ATTACKS = {
    "w": _step_table((NORTH_WEST, NORTH_EAST)),
    "b": _step_table((SOUTH_WEST, SOUTH_EAST)),
}


def ray_attacks(sq: int, directions, occupancy: Bitboard) -> Bitboard:
    """Walk rays from ``sq``, stopping at (and including) the first occupied square."""
    mask = EMPTY
    origin = square_bb(sq)
    for delta, edge in directions:
        cur = origin
        while not cur & edge:
            cur = shift(cur, delta)
            mask |= cur
            if cur & occupancy:
                break
    return mask


_SLIDER_DIRECTIONS = {
    Piece.BISHOP: DIAGONALS,
    Piece.ROOK: ORTHOGONALS,
    Piece.QUEEN: ALL_DIRECTIONS,
}

SLIDERS = frozenset(_SLIDER_DIRECTIONS)


def slider_attacks(piece: Piece, sq: int, occupancy: Bitboard) -> Bitboard:
    """Return the attack set of a bishop, rook or queen on ``sq``."""
    return ray_attacks(sq, _SLIDER_DIRECTIONS[piece], occupancy)
