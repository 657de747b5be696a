from __future__ import annotations

import logging
import random
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .error import (
    exception_handler,
    http_exception_handler,
    invalid_notation_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...engine.game import Game
from ...engine.move import InvalidNotation, parse_move
from ...engine.perft import perft as perft_nodes
from ...engine.policy import RandomPolicy
from ...engine.state import STARTPOS_FEN


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move text, e.g. e2-e4 or a7-a8=q")


class PolicyMoveRequest(BaseModel):
    seed: Optional[int] = Field(default=None, description="Seed for reproducible picks")


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN, description="FEN string")
    depth: int = Field(default=1, ge=0, le=4)


class PerftResponse(BaseModel):
    nodes: int


class StateResponse(BaseModel):
    game_id: str
    fen: str
    position: str
    side_to_move: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: list[str]


class PolicyMoveResponse(BaseModel):
    move: Optional[str]
    state: StateResponse


def create_app(log_level: str = "INFO") -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    logging.basicConfig(level=log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(InvalidNotation, invalid_notation_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = store.create(Game.new())
        game = _require_game(store, game_id)
        logger.info("created game %s", game_id)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=StateResponse)
    async def get_state(game_id: str) -> StateResponse:
        return _state_response(game_id, _require_game(store, game_id))

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        logger.info("deleted game %s", game_id)
        return Response(status_code=204)

    @app.post("/api/games/{game_id}/position", response_model=StateResponse)
    async def set_position(game_id: str, req: SetPositionRequest) -> StateResponse:
        _require_game(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        store.set(game_id, game)
        return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=StateResponse)
    async def make_move(game_id: str, req: MoveRequest) -> StateResponse:
        game = _require_game(store, game_id)
        # InvalidNotation propagates to its own handler
        move = parse_move(req.move)
        try:
            game.apply_move(move)
        except ValueError:
            raise HTTPException(status_code=400, detail="illegal move")
        return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=StateResponse)
    async def undo(game_id: str) -> StateResponse:
        game = _require_game(store, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/policy-move", response_model=PolicyMoveResponse)
    async def policy_move(game_id: str, req: PolicyMoveRequest) -> PolicyMoveResponse:
        game = _require_game(store, game_id)
        rng = random.Random(req.seed) if req.seed is not None else None
        move = RandomPolicy(rng).choose(game.state)
        if move is not None:
            game.apply_move(move)
        return PolicyMoveResponse(
            move=move.to_str() if move is not None else None,
            state=_state_response(game_id, game),
        )

    @app.post("/api/perft", response_model=PerftResponse)
    async def perft(req: PerftRequest) -> PerftResponse:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return PerftResponse(nodes=perft_nodes(game.state, req.depth))

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state_response(game_id: str, game: Game) -> StateResponse:
    history = game.move_history()
    return StateResponse(
        game_id=game_id,
        fen=game.to_fen(),
        position=game.state.position_string(),
        side_to_move=game.state.side_to_move.value,
        legal_moves=[m.to_str() for m in game.legal_moves()],
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        last_move=history[-1] if history else None,
        move_history=history,
    )
