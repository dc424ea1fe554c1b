"""Chess rules engine: bitboard move generation, SAN/FEN codecs and a game facade."""

from .engine.config import DEFAULT_CONFIG, RulesConfig
from .engine.errors import ChessError, FenParseError, IllegalMoveError, SanParseError
from .engine.fen import decode as decode_fen
from .engine.fen import encode as encode_fen
from .engine.game import Game
from .engine.move import MoveRecord, MoveResult
from .engine.perft import divide, perft
from .engine.position import STARTPOS_FEN, Position
from .engine.san import parse_san

__all__ = [
    "ChessError",
    "DEFAULT_CONFIG",
    "FenParseError",
    "Game",
    "IllegalMoveError",
    "MoveRecord",
    "MoveResult",
    "Position",
    "RulesConfig",
    "STARTPOS_FEN",
    "SanParseError",
    "decode_fen",
    "divide",
    "encode_fen",
    "parse_san",
    "perft",
]

__version__ = "0.1.0"
