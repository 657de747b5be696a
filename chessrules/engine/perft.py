from __future__ import annotations

from .state import GameState


def perft(state: GameState, depth: int) -> int:
    """Count leaf positions reachable from `state` in exactly `depth` plies.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are built with copy-then-apply, so `state` is never mutated.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = state.legal_moves()
    if depth == 1:
        return len(moves)
    return sum(perft(state.make_move_on_copy(m), depth - 1) for m in moves)
