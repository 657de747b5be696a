"""Move-selection policies.

A policy only talks to the rules engine through ``GameState.legal_moves()``
and ``GameState.make_move()``; the engine never calls back into a policy.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Protocol

from .move import Move
from .state import GameState


logger = logging.getLogger(__name__)


class MovePolicy(Protocol):
    def choose(self, state: GameState) -> Optional[Move]:
        """Return one of ``state.legal_moves()``, or ``None`` if there are none."""
        ...


class RandomPolicy:
    """Uniform choice over the legal moves."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()

    def choose(self, state: GameState) -> Optional[Move]:
        legal = state.legal_moves()
        if not legal:
            return None
        move = self._rng.choice(legal)
        logger.debug("random policy picked %s from %d moves", move.to_str(), len(legal))
        return move


def play_out(state: GameState, policy: MovePolicy, max_plies: int) -> List[Move]:
    """Let ``policy`` move for both sides until it passes or ``max_plies`` is reached.

    Mutates ``state`` and returns the moves played in order.
    """
    played: List[Move] = []
    for _ in range(max_plies):
        move = policy.choose(state)
        if move is None:
            break
        state.make_move(move)
        played.append(move)
    return played
