from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_perft_defaults_to_start_position() -> None:
    r = _client().post("/api/perft", json={"depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}


def test_perft_with_fen() -> None:
    r = _client().post(
        "/api/perft", json={"fen": "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1", "depth": 1}
    )
    assert r.status_code == 200
    assert r.json()["nodes"] == 26


def test_perft_invalid_fen_400() -> None:
    r = _client().post("/api/perft", json={"fen": "garbage", "depth": 1})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "invalid FEN"


def test_perft_depth_out_of_range_422() -> None:
    r = _client().post("/api/perft", json={"depth": 9})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "unprocessable_entity"
