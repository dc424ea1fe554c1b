from __future__ import annotations

import argparse
from typing import Optional, Sequence

import uvicorn

from ..engine.config import EP_POLICIES, RulesConfig
from ..protocol.http.app import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chess-rules-server",
        description="Serve the chess rules engine over HTTP",
    )
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
    )
    parser.add_argument(
        "--ep-policy",
        default="always",
        choices=EP_POLICIES,
        help="when a double pawn push records an en passant square",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    app = create_app(RulesConfig(ep_policy=args.ep_policy))
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
