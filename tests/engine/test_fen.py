from __future__ import annotations

import pytest

from chessrules.engine.piece import Side
from chessrules.engine.state import STARTPOS_FEN, CastlingAvailability, GameState


def test_startpos_round_trip() -> None:
    game = GameState.from_fen(STARTPOS_FEN)
    assert game.to_fen() == STARTPOS_FEN
    assert GameState.new().to_fen() == STARTPOS_FEN


@pytest.mark.parametrize(
    "fen",
    [
        # Mixed pieces and empty squares, some castling rights
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ - 2 3",
        # No castling rights, ep target present on rank 3 or 6
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b - e3 0 1",
        # All castling rights
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    assert GameState.from_fen(fen).to_fen() == fen


def test_four_field_fen_defaults_counters() -> None:
    game = GameState.from_fen("4k3/8/8/8/8/8/8/4K3 b - -")
    assert game.side_to_move is Side.BLACK
    assert game.to_fen() == "4k3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_castling_field_is_normalized() -> None:
    game = GameState.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w qkQK - 0 1")
    assert game.castling_availability == CastlingAvailability.all()
    assert " KQkq " in game.to_fen()


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "4k3/8/8/8/8/8/4K3 w - - 0 1",  # not enough ranks
        "4k3/8/8/8/8/8/8/4K3 w - - 0",  # five fields
        "4k3/8/8/8/8/8/8/4K3 x - - 0 1",  # bad side to move
        "4k3/8/8/8/8/8/8/4K3 w A - 0 1",  # bad castling
        "4k3/8/8/8/8/8/8/4K3 w - z9 0 1",  # bad ep square
        "4k3/8/8/8/8/8/8/4K3 w - e4 0 1",  # ep square on wrong rank
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq e3 0 1",  # ep rank of the mover
        "4k3/8/8/3P4/8/8/8/4K3 w - d6 0 1",  # no black pawn in front of ep square
        "4k3/8/8/8/4N3/8/8/4K3 b - e3 0 1",  # piece in front of ep square is not a pawn
        "4k3/8/8/8/4P3/4n3/8/4K3 b - e3 0 1",  # ep square occupied
        "4k3/8/8/8/8/8/8/4K3 w - - -1 1",  # bad halfmove
        "4k3/8/8/8/8/8/8/4K3 w - - 0 0",  # bad fullmove
        "4k3/8/8/8/8/8/8/4K3 w - - x 1",  # non-numeric counter
        "9/4k3/8/8/8/8/8/4K3 w - - 0 1",  # too many squares
        "4k3/8/8/8/8/8/8/4K2 w - - 0 1",  # too few squares
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",  # bad piece
        "8/8/8/8/8/8/8/8 w - - 0 1",  # no kings
        "4k3/8/8/8/8/8/8/3KK3 w - - 0 1",  # two white kings
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(ValueError):
        GameState.from_fen(fen)


def test_position_string() -> None:
    empty = " " * 8
    rows = ["rnbqkbnr", "pppppppp", empty, empty, empty, empty, "PPPPPPPP", "RNBQKBNR"]
    assert GameState.new().position_string() == "/".join(rows) + " w KQkq -"


def test_position_string_tracks_ep_and_rights() -> None:
    game = GameState.from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b Kq e3 0 1")
    assert game.position_string().endswith(" b Kq e3")
    assert GameState.blank().position_string().endswith(" w - -")


@pytest.mark.parametrize(
    "fen",
    [
        "4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1",
        "4k3/8/8/8/3pP3/8/8/4K3 b - e3 0 1",
    ],
)
def test_ep_square_behind_double_pushed_pawn_accepted(fen: str) -> None:
    game = GameState.from_fen(fen)
    assert game.to_fen() == fen
    assert game.legal_moves()
