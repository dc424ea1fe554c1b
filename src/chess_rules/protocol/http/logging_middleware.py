from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any, Callable, Dict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

# Routing has not run yet when dispatch starts, so path params are not bound.
_GAME_PATH = re.compile(r"^/api/games/(?P<game_id>[^/]+)")


def game_id_from_path(path: str) -> str | None:
    match = _GAME_PATH.match(path)
    return match.group("game_id") if match else None


class GameRequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each API call against the game session it touches.

    Every request gets an id (a caller-supplied ``x-request-id`` is reused)
    that is echoed on the response. Log lines carry ``game_id`` for session
    routes. When the rules engine rejects a FEN or a move, the error handler
    leaves the error kind on ``request.state`` and the response is logged as
    a warning with ``error_kind`` set (``fen_parse_error``,
    ``san_parse_error`` or ``illegal_move``).
    """

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        fields: Dict[str, Any] = {"request_id": request_id}
        game_id = game_id_from_path(request.url.path)
        if game_id is not None:
            fields["game_id"] = game_id
        logger.info("%s %s", request.method, request.url.path, extra=fields)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        outcome = dict(fields)
        outcome["status_code"] = response.status_code
        outcome["duration_ms"] = int((time.perf_counter() - started) * 1000)
        error_kind = getattr(request.state, "error_kind", None)
        if error_kind is not None and 400 <= response.status_code < 500:
            outcome["error_kind"] = error_kind
            logger.warning(
                "%s %s rejected: %s", request.method, request.url.path, error_kind, extra=outcome
            )
        else:
            logger.info(
                "%s %s -> %d", request.method, request.url.path, response.status_code, extra=outcome
            )
        return response
