from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Side(Enum):
    WHITE = "w"
    BLACK = "b"

    def other(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @classmethod
    def from_char(cls, ch: str) -> "PieceKind":
        """Look up a kind by its lowercase letter.

        Raises:
            ValueError: If ``ch`` is not one of ``pnbrqk``.
        """
        try:
            return cls(ch)
        except ValueError:
            raise ValueError(f"invalid piece letter: {ch!r}") from None


@dataclass(frozen=True)
class Piece:
    """Immutable (side, kind) pair.

    Rendered as one character: uppercase for White, lowercase for Black.
    """

    side: Side
    kind: PieceKind

    def to_char(self) -> str:
        ch = self.kind.value
        return ch.upper() if self.side is Side.WHITE else ch

    @classmethod
    def from_char(cls, ch: str) -> "Piece":
        kind = PieceKind.from_char(ch.lower())
        side = Side.WHITE if ch.isupper() else Side.BLACK
        return cls(side, kind)

    def __str__(self) -> str:
        return self.to_char()
