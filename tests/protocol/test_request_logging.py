from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from chess_rules.protocol.http.app import create_app
from chess_rules.protocol.http.logging_middleware import game_id_from_path

LOGGER = "chess_rules.protocol.http.logging_middleware"


def _response_records(caplog: pytest.LogCaptureFixture) -> list:
    return [r for r in caplog.records if r.name == LOGGER and hasattr(r, "status_code")]


def test_illegal_move_is_logged_with_game_and_error_kind(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    with caplog.at_level(logging.INFO, logger=LOGGER):
        r = client.post(f"/api/games/{game_id}/move", json={"san": "e5"})
    assert r.status_code == 400
    record = _response_records(caplog)[-1]
    assert record.levelno == logging.WARNING
    assert record.game_id == game_id
    assert record.error_kind == "illegal_move"
    assert record.status_code == 400
    assert record.request_id == r.headers["x-request-id"]


def test_bad_fen_on_perft_is_logged_without_game(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(create_app())
    with caplog.at_level(logging.INFO, logger=LOGGER):
        r = client.post("/api/perft", json={"fen": "8/8/8 w - - 0 1", "depth": 1})
    assert r.status_code == 400
    record = _response_records(caplog)[-1]
    assert record.error_kind == "fen_parse_error"
    assert not hasattr(record, "game_id")


def test_accepted_move_is_logged_at_info(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(create_app())
    game_id = client.post("/api/games").json()["game_id"]
    with caplog.at_level(logging.INFO, logger=LOGGER):
        r = client.post(f"/api/games/{game_id}/move", json={"san": "e4"})
    assert r.status_code == 200
    records = [r for r in caplog.records if r.name == LOGGER]
    assert all(rec.game_id == game_id for rec in records)
    record = _response_records(caplog)[-1]
    assert record.levelno == logging.INFO
    assert not hasattr(record, "error_kind")


def test_unknown_game_is_not_tagged_as_engine_error(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(create_app())
    with caplog.at_level(logging.INFO, logger=LOGGER):
        r = client.get("/api/games/missing/state")
    assert r.status_code == 404
    record = _response_records(caplog)[-1]
    assert record.game_id == "missing"
    assert not hasattr(record, "error_kind")


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/games/abc", "abc"),
        ("/api/games/abc/move", "abc"),
        ("/api/games", None),
        ("/api/perft", None),
        ("/healthz", None),
    ],
)
def test_game_id_from_path(path: str, expected: str | None) -> None:
    assert game_id_from_path(path) == expected
