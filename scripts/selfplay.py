#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import os
import random
import sys

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessrules.engine.policy import RandomPolicy, play_out
from chessrules.engine.state import GameState


logger = logging.getLogger("selfplay")


def _outcome(state: GameState) -> str:
    if state.is_in_checkmate(state.side_to_move):
        winner = state.side_to_move.other()
        return f"checkmate, {winner.name.lower()} wins"
    if state.is_in_stalemate():
        return "stalemate"
    return "unfinished"


def main() -> None:
    parser = argparse.ArgumentParser(description="Play random games against the rules engine")
    parser.add_argument("--games", type=int, default=1, help="Number of games (default: 1)")
    parser.add_argument("--max-plies", type=int, default=200, help="Ply cap per game (default: 200)")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible games")
    parser.add_argument("--show-board", action="store_true", help="Print the final board")
    parser.add_argument("--verbose", action="store_true", help="Log every chosen move")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    policy = RandomPolicy(random.Random(args.seed))

    for idx in range(args.games):
        state = GameState.new()
        played = play_out(state, policy, args.max_plies)
        logger.info("game %d: %d plies, %s", idx + 1, len(played), _outcome(state))
        print(" ".join(m.to_str() for m in played))
        if args.show_board:
            print(state.board.to_grid())
            print(state.position_string())


if __name__ == "__main__":
    main()
