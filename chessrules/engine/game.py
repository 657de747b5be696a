from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .move import Move
from .state import GameState


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a state with history and undo.

    Responsibility: validate and apply moves, remember prior states, expose
    termination flags for protocol adapters.
    """

    state: GameState
    move_stack: List[Move] = field(default_factory=list)
    # snapshots taken before each applied move; restoring one is the undo
    _snapshots: List[GameState] = field(default_factory=list, repr=False)

    @classmethod
    def new(cls) -> "Game":
        return cls(state=GameState.new())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(state=GameState.from_fen(fen))

    def to_fen(self) -> str:
        return self.state.to_fen()

    def legal_moves(self) -> List[Move]:
        return self.state.legal_moves()

    def apply_move(self, move: Move) -> None:
        if not self.state.move_is_legal(move):
            raise ValueError("illegal move")
        self._snapshots.append(self.state.copy())
        self.state.make_move(move)
        self.move_stack.append(move)
        logger.debug("applied %s, fen=%s", move.to_str(), self.state.to_fen())

    def undo_move(self) -> None:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        last = self.move_stack.pop()
        self.state = self._snapshots.pop()
        logger.debug("undid %s", last.to_str())

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.state.is_in_check(self.state.side_to_move)

    def checkmate(self) -> bool:
        return self.state.is_in_checkmate(self.state.side_to_move)

    def stalemate(self) -> bool:
        return self.state.is_in_stalemate()

    def move_history(self) -> List[str]:
        return [m.to_str() for m in self.move_stack]
