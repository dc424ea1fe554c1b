#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo's `src/` to sys.path.
SRC_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from chess_rules.engine.config import EP_POLICIES, RulesConfig
from chess_rules.engine.fen import decode
from chess_rules.engine.perft import divide, perft
from chess_rules.engine.position import STARTPOS_FEN


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument(
        "--divide", action="store_true", help="print per-move node counts before the total"
    )
    parser.add_argument("--ep-policy", choices=EP_POLICIES, default="always")
    args = parser.parse_args()

    config = RulesConfig(ep_policy=args.ep_policy)
    position = decode(args.fen)
    start = time.perf_counter()
    if args.divide and args.depth >= 1:
        counts = divide(position, args.depth, config)
        for move in sorted(counts):
            print(f"{move}: {counts[move]}")
        nodes = sum(counts.values())
    else:
        nodes = perft(position, args.depth, config)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
