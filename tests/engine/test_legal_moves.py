from __future__ import annotations

import random

from chessrules.engine.move import Move, parse_move
from chessrules.engine.policy import RandomPolicy
from chessrules.engine.state import GameState


def _play(game: GameState, *moves: str) -> None:
    for text in moves:
        game.make_move(parse_move(text))


def test_starting_position_has_twenty_moves() -> None:
    game = GameState.new()
    legal = game.legal_moves()
    assert len(legal) == 20
    pawn_moves = [m for m in legal if m.from_sq[0] == 1]
    knight_moves = [m for m in legal if m.from_sq[0] == 0]
    assert len(pawn_moves) == 16
    assert len(knight_moves) == 4


def test_move_is_legal_basics() -> None:
    game = GameState.new()
    assert game.move_is_legal(parse_move("g1-f3"))
    assert game.move_is_legal(parse_move("a2-a3"))
    assert game.move_is_legal(parse_move("e2-e4"))
    assert game.move_is_legal(parse_move("h2-h4"))
    _play(game, "d2-d4", "g8-f6")
    assert game.move_is_legal(parse_move("c1-f4"))
    assert not game.move_is_legal(parse_move("f1-c4"))
    assert game.move_is_legal(parse_move("d1-d3"))
    assert not game.move_is_legal(parse_move("d1-d5"))
    assert not game.move_is_legal(parse_move("d1-h5"))
    _play(game, "a2-a4", "g7-g6")
    assert game.move_is_legal(parse_move("a1-a3"))
    assert not game.move_is_legal(parse_move("a1-a4"))
    assert game.move_is_legal(parse_move("e1-d2"))
    assert not game.move_is_legal(parse_move("e1-d1"))


def test_illegal_moves_from_start() -> None:
    game = GameState.new()
    for text in ("g1-g3", "g1-e2", "a2-b3", "e2-e2", "e2-e5", "e7-e5", "e4-e5"):
        assert not game.move_is_legal(parse_move(text)), text


def test_double_push_blocked_by_knight() -> None:
    game = GameState.new()
    _play(game, "g1-f3", "g8-f6")
    assert game.move_is_legal(parse_move("e2-e4"))
    assert not game.move_is_legal(parse_move("f2-f4"))


def test_pseudo_legal_generator_sliders() -> None:
    game = GameState.new()
    possible = game.possible_moves()
    for text in ("a2-a3", "a2-a4", "g1-h3", "g1-f3"):
        assert parse_move(text) in possible
    _play(game, "e2-e4", "e7-e5")
    possible = game.possible_moves()
    assert parse_move("f1-a6") in possible
    assert parse_move("d1-g4") in possible
    assert parse_move("f1-h3") not in possible
    assert parse_move("f1-g2") not in possible
    assert parse_move("d1-d2") not in possible


def test_possible_moves_from_empty_square_is_empty() -> None:
    assert GameState.new().possible_moves_from((3, 3)) == []


def test_sliding_stops_at_first_piece() -> None:
    # Rook on d4, own pawn on d6, enemy knight on f4
    game = GameState.from_fen("4k3/8/3P4/8/3R1n2/8/8/4K3 w - - 0 1")
    targets = {m.to_str() for m in game.possible_moves_from((3, 3))}
    assert "d4-d5" in targets and "d4-d6" not in targets
    assert "d4-f4" in targets and "d4-g4" not in targets
    assert {"d4-d1", "d4-a4"} <= targets


def test_legal_moves_never_leave_mover_in_check() -> None:
    policy = RandomPolicy(random.Random(11))
    for _ in range(2):
        game = GameState.new()
        for _ in range(40):
            for m in game.legal_moves():
                child = game.make_move_on_copy(m)
                assert not child.is_in_check(game.side_to_move), m.to_str()
            move = policy.choose(game)
            if move is None:
                break
            game.make_move(move)


def test_move_is_legal_rejects_off_board_coordinates() -> None:
    game = GameState.new()
    assert not game.move_is_legal(Move((1, 4), (8, 4)))
