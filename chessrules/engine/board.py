from __future__ import annotations

from typing import Dict, List, Optional, Set

from .move import NO_SQUARE, Coordinate, Move, coordinates_from_name, within_bounds
from .piece import Piece, PieceKind, Side


BACK_RANK = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)


class Board:
    """8x8 grid of optional pieces with a per-side occupancy index.

    Notes:
    - ``squares[rank][file]`` is the source of truth; rank 0 is White's back rank.
    - ``sides`` and the king cache are derived and only ever updated through
      :meth:`place` and :meth:`remove`.
    - The board knows nothing about legality.
    """

    def __init__(self) -> None:
        self.squares: List[List[Optional[Piece]]] = [[None] * 8 for _ in range(8)]
        self.sides: Dict[Side, Set[Coordinate]] = {Side.WHITE: set(), Side.BLACK: set()}
        self._kings: Dict[Side, Coordinate] = {Side.WHITE: NO_SQUARE, Side.BLACK: NO_SQUARE}

    @classmethod
    def blank(cls) -> "Board":
        return cls()

    @classmethod
    def standard(cls) -> "Board":
        """Create a board holding the standard starting position."""
        board = cls()
        for file, kind in enumerate(BACK_RANK):
            board.place(Piece(Side.WHITE, kind), (0, file))
            board.place(Piece(Side.WHITE, PieceKind.PAWN), (1, file))
            board.place(Piece(Side.BLACK, PieceKind.PAWN), (6, file))
            board.place(Piece(Side.BLACK, kind), (7, file))
        return board

    def copy(self) -> "Board":
        new = Board()
        new.squares = [row[:] for row in self.squares]
        new.sides = {side: set(squares) for side, squares in self.sides.items()}
        new._kings = dict(self._kings)
        return new

    # --- Queries ---
    def piece_at(self, coord: Coordinate) -> Optional[Piece]:
        if not within_bounds(coord):
            raise ValueError(f"coordinate out of bounds: {coord}")
        return self.squares[coord[0]][coord[1]]

    def piece_at_square_name(self, name: str) -> Optional[Piece]:
        return self.piece_at(coordinates_from_name(name))

    def king_location(self, side: Side) -> Coordinate:
        return self._kings[side]

    def occupied(self, side: Side) -> List[Coordinate]:
        """Snapshot of the squares held by ``side``, safe to iterate while mutating."""
        return sorted(self.sides[side])

    # --- Mutation ---
    def place(self, piece: Piece, coord: Coordinate) -> None:
        """Put ``piece`` on ``coord``.

        Overwrites the square without touching the other side's index; remove
        an opposing piece first.
        """
        if not within_bounds(coord):
            raise ValueError(f"coordinate out of bounds: {coord}")
        self.sides[piece.side].add(coord)
        self.squares[coord[0]][coord[1]] = piece
        if piece.kind is PieceKind.KING:
            self._kings[piece.side] = coord

    def place_on_square(self, piece: Piece, name: str) -> None:
        self.place(piece, coordinates_from_name(name))

    def remove(self, coord: Coordinate) -> None:
        if not within_bounds(coord):
            raise ValueError(f"coordinate out of bounds: {coord}")
        for roster in self.sides.values():
            roster.discard(coord)
        self.squares[coord[0]][coord[1]] = None

    def remove_from_square(self, name: str) -> None:
        self.remove(coordinates_from_name(name))

    def move_piece(self, move: Move) -> None:
        """Move the piece on ``move.from_sq``, capturing and promoting as needed.

        Order matters: clear the destination, place the mover, clear the origin.
        """
        piece = self.piece_at(move.from_sq)
        if piece is None:
            raise ValueError(f"no piece to move on {move.from_sq}")
        self.remove(move.to_sq)
        if move.promotion is not None:
            self.place(Piece(piece.side, move.promotion), move.to_sq)
        else:
            self.place(piece, move.to_sq)
        self.remove(move.from_sq)

    # --- Export ---
    def _rows(self) -> List[str]:
        # Rank 8 first, as seen from White's side of the board
        return [
            "".join(p.to_char() if p is not None else " " for p in self.squares[rank])
            for rank in range(7, -1, -1)
        ]

    def to_grid(self) -> str:
        return "".join(row + "\n" for row in self._rows())

    def to_compact(self) -> str:
        return "/".join(self._rows())

    def __str__(self) -> str:
        return self.to_grid()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.squares == other.squares
