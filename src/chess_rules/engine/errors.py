from __future__ import annotations

from typing import Optional


class ChessError(ValueError):
    """Base class for every error the rules engine reports to callers."""


class FenParseError(ChessError):
    """Raised when a FEN string cannot be decoded."""

    def __init__(self, message: str, fen: Optional[str] = None) -> None:
        super().__init__(message)
        self.fen = fen


class SanParseError(ChessError):
    """Raised when a SAN token stream cannot be parsed.

    Attributes:
        san (str): The full input text.
        token (str): The offending token.
        index (int): Offset of the offending token within ``san``.
    """

    def __init__(self, message: str, san: str, token: str = "", index: int = -1) -> None:
        super().__init__(f"{message}: {token!r} in {san!r}" if token else f"{message}: {san!r}")
        self.reason = message
        self.san = san
        self.token = token
        self.index = index


class IllegalMoveError(ChessError):
    """Raised when a parsed move matches no legal origin/destination pair."""

    def __init__(self, message: str, san: Optional[str] = None) -> None:
        super().__init__(f"{message}: {san!r}" if san else message)
        self.reason = message
        self.san = san
