from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    chess_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import GameRequestLoggingMiddleware
from ...engine.config import DEFAULT_CONFIG, RulesConfig
from ...engine.errors import ChessError
from ...engine.fen import decode as decode_fen
from ...engine.game import Game
from ...engine.move import MoveRecord
from ...engine.perft import perft as perft_nodes
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)

MAX_PERFT_DEPTH = 4


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(default=None, description="Starting FEN; standard start if omitted")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    san: str = Field(..., description="SAN move string, e.g., Nf3 or O-O")


class PerftRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class PerftResponse(BaseModel):
    nodes: int
    depth: int


class MoveRecordModel(BaseModel):
    color: str
    san: str
    uci: str
    piece: str
    captured: Optional[str]
    promotion: Optional[str]
    castling: Optional[str]
    before: str
    after: str


class GameState(BaseModel):
    game_id: str
    fen: str
    legal_moves: List[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    fifty_moves: bool
    threefold_repetition: bool
    draw: bool
    last_move: Optional[str]
    move_history: List[str]


def create_app(config: Optional[RulesConfig] = None) -> FastAPI:
    rules = config or DEFAULT_CONFIG
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(GameRequestLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, chess_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    # In-memory session store for games
    store = InMemorySessionStore()
    app.state.store = store
    app.state.rules = rules

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        if req is not None and req.fen:
            game = Game.from_fen(req.fen, rules)
        else:
            game = Game.new(rules)
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _run(store, game_id, lambda g: _game_state(game_id, g))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(store, game_id)
        game = Game.from_fen(req.fen, rules)
        try:
            store.set(game_id, game)
        except KeyError:
            raise HTTPException(status_code=404, detail="game not found")
        return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        def apply(game: Game) -> GameState:
            game.apply(req.san)
            return _game_state(game_id, game)

        return _run(store, game_id, apply)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        def take_back(game: Game) -> GameState:
            game.undo()
            return _game_state(game_id, game)

        return _run(store, game_id, take_back)

    @app.get("/api/games/{game_id}/history", response_model=List[MoveRecordModel])
    async def history(game_id: str) -> List[MoveRecordModel]:
        records = _run(store, game_id, lambda g: g.history)
        return [_record_model(r) for r in records]

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.post("/api/perft", response_model=PerftResponse)
    async def perft(req: PerftRequest) -> PerftResponse:
        position = decode_fen(req.fen)
        nodes = perft_nodes(position, req.depth, rules)
        return PerftResponse(nodes=nodes, depth=req.depth)

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _run(store: InMemorySessionStore, game_id: str, fn):
    try:
        return store.run(game_id, fn)
    except KeyError:
        raise HTTPException(status_code=404, detail="game not found")


def _game_state(game_id: str, game: Game) -> GameState:
    history = [r.san for r in game.history]
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        legal_moves=game.legal_moves(),
        in_check=game.in_check(),
        checkmate=game.is_mate(),
        stalemate=game.is_stalemate(),
        fifty_moves=game.is_fifty_moves(),
        threefold_repetition=game.is_threefold_repetition(),
        draw=game.is_draw(),
        last_move=history[-1] if history else None,
        move_history=history,
    )


def _record_model(record: MoveRecord) -> MoveRecordModel:
    data = record.to_dict()
    return MoveRecordModel(
        color=data["color"],
        san=data["san"],
        uci=record.to_uci(),
        piece=data["piece"],
        captured=data["captured"],
        promotion=data["promotion"],
        castling=data["castling"],
        before=data["before"],
        after=data["after"],
    )


# Default app for non-factory servers
app = create_app()
