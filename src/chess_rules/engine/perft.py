from __future__ import annotations

from typing import Dict, Optional

from .applier import play
from .config import DEFAULT_CONFIG, RulesConfig
from .legality import filter_legal
from .move import to_uci
from .movegen import generate
from .position import Position
from .san import iter_legal


def perft(position: Position, depth: int, config: Optional[RulesConfig] = None) -> int:
    """Compute perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Each child is a copy of ``position``; the input is never mutated.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    config = config or DEFAULT_CONFIG
    table = filter_legal(position, generate(position))
    if depth == 1:
        return sum(1 for _ in iter_legal(position, table))

    nodes = 0
    for from_sq, to_sq, promo in iter_legal(position, table):
        child = position.copy()
        play(child, from_sq, to_sq, promo, config=config, record=False)
        nodes += perft(child, depth - 1, config)
    return nodes


def divide(position: Position, depth: int, config: Optional[RulesConfig] = None) -> Dict[str, int]:
    """Return per-root-move perft counts keyed by long algebraic move."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    config = config or DEFAULT_CONFIG
    table = filter_legal(position, generate(position))
    counts: Dict[str, int] = {}
    for from_sq, to_sq, promo in iter_legal(position, table):
        child = position.copy()
        play(child, from_sq, to_sq, promo, config=config, record=False)
        counts[to_uci(from_sq, to_sq, promo)] = perft(child, depth - 1, config)
    return counts
