from __future__ import annotations

import threading
import uuid
from typing import Callable, Dict, Optional, TypeVar

from ...engine.game import Game


T = TypeVar("T")


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Retrieve existing sessions by `game_id`
    - Replace session state (e.g. after loading a FEN)
    - Run a callable against a session under the store lock
    - Delete sessions

    A ``Game`` is not itself thread-safe; mutations go through :meth:`run`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            self._games[gid] = game
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def set(self, game_id: str, game: Game) -> None:
        with self._lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def run(self, game_id: str, fn: Callable[[Game], T]) -> T:
        """Call ``fn`` with the session's game while holding the store lock."""
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                raise KeyError(game_id)
            return fn(game)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
