from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .piece import PieceKind


# (rank, file), both 0-based; a1 == (0, 0), h8 == (7, 7)
Coordinate = Tuple[int, int]

NO_SQUARE: Coordinate = (-1, -1)


class InvalidNotation(ValueError):
    """Raised when square or move text cannot be parsed."""


def within_bounds(coord: Coordinate) -> bool:
    return 0 <= coord[0] < 8 and 0 <= coord[1] < 8


def coordinates_from_name(name: str) -> Coordinate:
    """Convert a square name into a (rank, file) pair.

    Args:
        name (str): Square name such as ``"e4"``.

    Returns:
        Coordinate: Zero-based ``(rank, file)``.

    Raises:
        InvalidNotation: If ``name`` is not a valid square.
    """
    if len(name) != 2 or name[0] < "a" or name[0] > "h" or name[1] < "1" or name[1] > "8":
        raise InvalidNotation(f"invalid square: {name!r}")
    return (int(name[1]) - 1, ord(name[0]) - ord("a"))


def name_from_coordinates(coord: Coordinate) -> str:
    """Convert a (rank, file) pair into its square name.

    Raises:
        ValueError: If ``coord`` lies off the board.
    """
    if not within_bounds(coord):
        raise ValueError(f"coordinate out of bounds: {coord}")
    rank, file = coord
    return chr(ord("a") + file) + str(rank + 1)


@dataclass(frozen=True)
class Move:
    """Origin, destination and optional promotion kind.

    Attributes:
        from_sq (Coordinate): Origin square.
        to_sq (Coordinate): Destination square.
        promotion (Optional[PieceKind]): Replacement kind when a pawn reaches
            the far rank.
    """

    from_sq: Coordinate
    to_sq: Coordinate
    promotion: Optional[PieceKind] = None

    @classmethod
    def between(cls, from_name: str, to_name: str, promotion: Optional[PieceKind] = None) -> "Move":
        return cls(coordinates_from_name(from_name), coordinates_from_name(to_name), promotion)

    def to_str(self) -> str:
        """Serialize as ``"e2-e4"`` or ``"e7-e8=q"``."""
        text = name_from_coordinates(self.from_sq) + "-" + name_from_coordinates(self.to_sq)
        if self.promotion is not None:
            text += "=" + self.promotion.value
        return text

    def __str__(self) -> str:
        return self.to_str()


def parse_move(text: str) -> Move:
    """Parse the textual move form produced by :meth:`Move.to_str`.

    Args:
        text (str): Move like ``"g1-f3"`` or ``"a7-a8=q"``.

    Returns:
        Move: Parsed move, including the promotion kind when present.

    Raises:
        InvalidNotation: If either square or the promotion letter is invalid.
    """
    body, sep, promo_text = text.partition("=")
    parts = body.split("-")
    if len(parts) != 2:
        raise InvalidNotation(f"invalid move: {text!r}")
    promotion: Optional[PieceKind] = None
    if sep:
        if len(promo_text) != 1:
            raise InvalidNotation(f"invalid promotion piece: {promo_text!r}")
        try:
            promotion = PieceKind.from_char(promo_text.lower())
        except ValueError as e:
            raise InvalidNotation(str(e)) from e
    return Move(coordinates_from_name(parts[0]), coordinates_from_name(parts[1]), promotion)
