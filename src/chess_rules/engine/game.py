from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from . import fen as fen_codec
from .applier import resolve_and_apply
from .bitboard import Bitboard
from .config import DEFAULT_CONFIG, RulesConfig
from .errors import ChessError, IllegalMoveError
from .legality import filter_legal, is_in_check
from .move import MoveRecord, MoveResult
from .movegen import PseudoLegalMoves, generate
from .position import STARTPOS_FEN, Position
from .san import legal_san_moves, parse_san


logger = logging.getLogger(__name__)


class Game:
    """Rules-engine facade around a mutable position.

    Responsibility: hold the position and its legal-move table, apply SAN
    moves atomically, and answer check/mate/draw queries. The table is fully
    regenerated after every change.
    """

    def __init__(self, position: Position, config: Optional[RulesConfig] = None) -> None:
        self.position = position
        self.config = config or DEFAULT_CONFIG
        self._pseudo: PseudoLegalMoves = PseudoLegalMoves()
        self._table: List[Bitboard] = [0] * 64
        self._refresh()

    @classmethod
    def new(cls, config: Optional[RulesConfig] = None) -> "Game":
        return cls.from_fen(STARTPOS_FEN, config)

    @classmethod
    def from_fen(cls, fen: str, config: Optional[RulesConfig] = None) -> "Game":
        return cls(fen_codec.decode(fen), config)

    def _refresh(self) -> None:
        self._pseudo = generate(self.position)
        self._table = filter_legal(self.position, self._pseudo)

    # --- Moves ---
    def apply(self, san: str) -> MoveRecord:
        """Apply a SAN move.

        Raises:
            SanParseError: If ``san`` is malformed.
            IllegalMoveError: If it matches no legal move. The game is unchanged.
        """
        try:
            desc = parse_san(san)
            record = resolve_and_apply(self.position, self._table, desc, self.config)
        except ChessError as e:
            logger.debug("rejected %r: %s", san, e)
            raise
        self._refresh()
        return record

    def try_apply(self, san: str) -> MoveResult:
        """Like :meth:`apply` but reports failure as a result instead of raising."""
        try:
            return MoveResult(ok=True, record=self.apply(san))
        except ChessError as e:
            return MoveResult(ok=False, error=e)

    def undo(self) -> MoveRecord:
        """Take back the last applied move."""
        history = self.position.move_history
        if not history:
            raise IllegalMoveError("no moves to undo")
        last = history[-1]
        counts = dict(self.position.repetition_counts)
        placement = fen_codec.encode_placement(self.position)
        counts[placement] = counts.get(placement, 0) - 1
        if counts[placement] <= 0:
            del counts[placement]

        restored = fen_codec.decode(last.before)
        restored.repetition_counts = counts
        restored.move_history = history[:-1]
        self.position = restored
        self._refresh()
        return last

    # --- Queries ---
    def to_fen(self) -> str:
        return fen_codec.encode(self.position)

    def legal_moves(self) -> List[str]:
        """Return every legal move as SAN, ordered by origin then destination."""
        return legal_san_moves(self.position, self._table)

    def legal_move_table(self) -> List[Bitboard]:
        return list(self._table)

    @property
    def history(self) -> Tuple[MoveRecord, ...]:
        return tuple(self.position.move_history)

    def has_legal_moves(self) -> bool:
        return any(self._table)

    def in_check(self) -> bool:
        return is_in_check(self.position, self._pseudo)

    def is_mate(self) -> bool:
        return self.in_check() and not self.has_legal_moves()

    def is_stalemate(self) -> bool:
        return not self.in_check() and not self.has_legal_moves()

    def is_fifty_moves(self) -> bool:
        return self.position.halfmove_clock >= 100

    def is_threefold_repetition(self) -> bool:
        placement = fen_codec.encode_placement(self.position)
        return self.position.repetition_counts.get(placement, 0) >= 3

    def is_draw(self) -> bool:
        return self.is_stalemate() or self.is_fifty_moves() or self.is_threefold_repetition()

    def __repr__(self) -> str:
        return f"Game({self.to_fen()!r})"
