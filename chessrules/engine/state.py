from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Tuple

from .board import Board
from .move import (
    InvalidNotation,
    Coordinate,
    Move,
    coordinates_from_name,
    name_from_coordinates,
    within_bounds,
)
from .piece import Piece, PieceKind, Side


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

Direction = Tuple[int, int]

KNIGHT_OFFSETS: Tuple[Direction, ...] = (
    (2, 1),
    (2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
    (-2, 1),
    (-2, -1),
)
DIAGONALS: Tuple[Direction, ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
ORTHOGONALS: Tuple[Direction, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
ALL_DIRECTIONS: Tuple[Direction, ...] = DIAGONALS + ORTHOGONALS

# kind -> (directions, max steps along each); pawns are handled separately
STEP_TABLE: Dict[PieceKind, Tuple[Tuple[Direction, ...], int]] = {
    PieceKind.KNIGHT: (KNIGHT_OFFSETS, 1),
    PieceKind.BISHOP: (DIAGONALS, 7),
    PieceKind.ROOK: (ORTHOGONALS, 7),
    PieceKind.QUEEN: (ALL_DIRECTIONS, 7),
    PieceKind.KING: (ALL_DIRECTIONS, 1),
}

PROMOTION_KINDS = (PieceKind.KNIGHT, PieceKind.BISHOP, PieceKind.ROOK, PieceKind.QUEEN)

# Corner squares whose rook (or the king square) gates each right
_WHITE_KINGSIDE_SQUARES = ((0, 7), (0, 4))
_WHITE_QUEENSIDE_SQUARES = ((0, 0), (0, 4))
_BLACK_KINGSIDE_SQUARES = ((7, 7), (7, 4))
_BLACK_QUEENSIDE_SQUARES = ((7, 0), (7, 4))


@dataclass
class CastlingAvailability:
    """Per-side, per-wing castling rights.

    Rights are only ever revoked; nothing in the engine sets one back to True.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def all(cls) -> "CastlingAvailability":
        return cls()

    @classmethod
    def none(cls) -> "CastlingAvailability":
        return cls(False, False, False, False)

    @classmethod
    def from_str(cls, text: str) -> "CastlingAvailability":
        """Parse a ``KQkq`` subset or ``-``.

        Raises:
            ValueError: On any other character.
        """
        if text == "-":
            return cls.none()
        if not text or any(ch not in "KQkq" for ch in text):
            raise ValueError("invalid castling rights")
        return cls("K" in text, "Q" in text, "k" in text, "q" in text)

    def kingside(self, side: Side) -> bool:
        return self.white_kingside if side is Side.WHITE else self.black_kingside

    def queenside(self, side: Side) -> bool:
        return self.white_queenside if side is Side.WHITE else self.black_queenside

    def to_str(self) -> str:
        text = ""
        if self.white_kingside:
            text += "K"
        if self.white_queenside:
            text += "Q"
        if self.black_kingside:
            text += "k"
        if self.black_queenside:
            text += "q"
        return text or "-"

    def __str__(self) -> str:
        return self.to_str()


@dataclass
class GameState:
    """Board plus side to move, castling rights and en-passant target.

    All rule decisions live here. The board only stores pieces.

    Notes:
    - ``en_passant_square`` is the square skipped by the previous ply's double
      pawn push, or ``None``.
    - Legality is tested by copying the state and applying the candidate move,
      never by apply/undo on ``self``.
    - ``halfmove_clock`` and ``fullmove_number`` are carried for FEN output only.
    """

    board: Board
    side_to_move: Side = Side.WHITE
    castling_availability: CastlingAvailability = field(default_factory=CastlingAvailability.all)
    en_passant_square: Optional[Coordinate] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1

    @classmethod
    def new(cls) -> "GameState":
        """Standard starting position, White to move, all rights available."""
        return cls(board=Board.standard())

    @classmethod
    def blank(cls, side_to_move: Side = Side.WHITE) -> "GameState":
        """Empty board without castling rights, for building test positions."""
        return cls(
            board=Board.blank(),
            side_to_move=side_to_move,
            castling_availability=CastlingAvailability.none(),
        )

    def copy(self) -> "GameState":
        return replace(
            self,
            board=self.board.copy(),
            castling_availability=replace(self.castling_availability),
        )

    # --- FEN I/O ---
    @classmethod
    def from_fen(cls, fen: str) -> "GameState":
        """Create a state from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): Six-field FEN. Four fields are accepted too; the move
                counters then default to ``0 1``.

        Returns:
            GameState: State described by ``fen``.

        Raises:
            ValueError: If any field is malformed or a side has no king or
                more than one.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) == 4:
            parts += ["0", "1"]
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        board = Board.blank()
        kings = {Side.WHITE: 0, Side.BLACK: 0}
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    file_idx += n
                    continue
                try:
                    piece = Piece.from_char(ch)
                except ValueError as e:
                    raise ValueError(f"invalid piece in FEN: {ch!r}") from e
                if file_idx >= 8:
                    raise ValueError("too many squares in FEN rank")
                board.place(piece, (rank_idx, file_idx))
                if piece.kind is PieceKind.KING:
                    kings[piece.side] += 1
                file_idx += 1
            if file_idx != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
        if kings[Side.WHITE] != 1 or kings[Side.BLACK] != 1:
            raise ValueError("FEN must contain exactly one king per side")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        availability = CastlingAvailability.from_str(castling)

        en_passant_square: Optional[Coordinate]
        if ep == "-":
            en_passant_square = None
        else:
            try:
                en_passant_square = coordinates_from_name(ep)
            except InvalidNotation as e:
                raise ValueError("invalid en passant square") from e
            mover = Side(stm)
            if en_passant_square[0] != (5 if mover is Side.WHITE else 2):
                raise ValueError("invalid en passant square rank")
            # the pawn that just double-pushed stands one rank past the target
            pawn_rank = en_passant_square[0] + (-1 if mover is Side.WHITE else 1)
            pushed = board.piece_at((pawn_rank, en_passant_square[1]))
            if board.piece_at(en_passant_square) is not None or pushed != Piece(
                mover.other(), PieceKind.PAWN
            ):
                raise ValueError("en passant square without a double-pushed pawn")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(
            board=board,
            side_to_move=Side(stm),
            castling_availability=availability,
            en_passant_square=en_passant_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def to_fen(self) -> str:
        """Serialize the position as a six-field FEN string."""
        ranks_str: List[str] = []
        for rank_idx in range(7, -1, -1):
            run = 0
            row = []
            for piece in self.board.squares[rank_idx]:
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(piece.to_char())
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)
        return (
            f"{placement} {self.side_to_move.value} {self.castling_availability.to_str()} "
            f"{self._en_passant_name()} {self.halfmove_clock} {self.fullmove_number}"
        )

    def position_string(self) -> str:
        """Compact grid followed by side to move, castling rights and en-passant square."""
        return (
            f"{self.board.to_compact()} {self.side_to_move.value} "
            f"{self.castling_availability.to_str()} {self._en_passant_name()}"
        )

    def _en_passant_name(self) -> str:
        if self.en_passant_square is None:
            return "-"
        return name_from_coordinates(self.en_passant_square)

    # --- Move application ---
    def make_move(self, move: Move) -> None:
        """Apply ``move`` in place without checking legality.

        Raises:
            ValueError: If ``move.from_sq`` is empty.
        """
        piece = self.board.piece_at(move.from_sq)
        if piece is None:
            raise ValueError(f"no piece to move from {name_from_coordinates(move.from_sq)}")
        is_capture = self.board.piece_at(move.to_sq) is not None

        # En passant: the captured pawn sits beside the mover, not on to_sq
        if (
            piece.kind is PieceKind.PAWN
            and move.to_sq == self.en_passant_square
            and move.from_sq[1] != move.to_sq[1]
            and self._en_passant_victim(move.from_sq, move.to_sq, piece.side)
        ):
            self.board.remove((move.from_sq[0], move.to_sq[1]))
            is_capture = True

        self.en_passant_square = None
        if piece.kind is PieceKind.PAWN and abs(move.to_sq[0] - move.from_sq[0]) == 2:
            self.en_passant_square = ((move.from_sq[0] + move.to_sq[0]) // 2, move.from_sq[1])

        if piece.kind is PieceKind.KING:
            rank = move.from_sq[0]
            if move.to_sq[1] - move.from_sq[1] == 2:  # kingside: h-rook to f
                self.board.move_piece(Move((rank, 7), (rank, 5)))
            elif move.to_sq[1] - move.from_sq[1] == -2:  # queenside: a-rook to d
                self.board.move_piece(Move((rank, 0), (rank, 3)))

        self._update_castling_rights_on_move(move)

        if piece.kind is PieceKind.PAWN or is_capture:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

        self.board.move_piece(move)

        if self.side_to_move is Side.BLACK:
            self.fullmove_number += 1
        self.side_to_move = self.side_to_move.other()

    def make_move_on_copy(self, move: Move) -> "GameState":
        child = self.copy()
        child.make_move(move)
        return child

    def _update_castling_rights_on_move(self, move: Move) -> None:
        """Revoke rights when a move leaves or lands on a king or rook home square."""
        touched = (move.from_sq, move.to_sq)
        rights = self.castling_availability
        if any(sq in _WHITE_QUEENSIDE_SQUARES for sq in touched):
            rights.white_queenside = False
        if any(sq in _WHITE_KINGSIDE_SQUARES for sq in touched):
            rights.white_kingside = False
        if any(sq in _BLACK_QUEENSIDE_SQUARES for sq in touched):
            rights.black_queenside = False
        if any(sq in _BLACK_KINGSIDE_SQUARES for sq in touched):
            rights.black_kingside = False

    # --- Check detection ---
    def is_in_check(self, side: Side) -> bool:
        """True if any pseudo-legal move of the other side lands on ``side``'s king."""
        king = self.board.king_location(side)
        if not within_bounds(king):
            return False
        for square in self.board.occupied(side.other()):
            for m in self._iter_moves_from(square):
                if m.to_sq == king:
                    return True
        return False

    def is_in_checkmate(self, side: Side) -> bool:
        return self.side_to_move is side and self.is_in_check(side) and not self.has_legal_moves()

    def is_in_stalemate(self) -> bool:
        return not self.is_in_check(self.side_to_move) and not self.has_legal_moves()

    def move_would_put_self_in_check(self, move: Move) -> bool:
        piece = self.board.piece_at(move.from_sq)
        if piece is None:
            raise ValueError(f"no piece to move from {name_from_coordinates(move.from_sq)}")
        return self.make_move_on_copy(move).is_in_check(piece.side)

    # --- Legal move generation ---
    def legal_moves(self) -> List[Move]:
        """Pseudo-legal moves that keep the mover out of check, plus castling."""
        moves = [m for m in self.possible_moves() if not self.move_would_put_self_in_check(m)]
        moves.extend(self.castling_moves())
        return moves

    def has_legal_moves(self) -> bool:
        for m in self.possible_moves():
            if not self.move_would_put_self_in_check(m):
                return True
        return bool(self.castling_moves())

    def move_is_legal(self, candidate: Move) -> bool:
        """Boolean legality check for externally supplied moves."""
        if not (within_bounds(candidate.from_sq) and within_bounds(candidate.to_sq)):
            return False
        piece = self.board.piece_at(candidate.from_sq)
        if piece is None or piece.side is not self.side_to_move:
            return False
        if candidate in self.possible_moves_from(candidate.from_sq):
            return not self.move_would_put_self_in_check(candidate)
        if piece.kind is PieceKind.KING:
            return candidate in self.castling_moves()
        return False

    def castling_moves(self) -> List[Move]:
        """Castling moves available to the side to move.

        Kingside needs f and g empty and the king safe on each; queenside needs
        b, c and d empty and the king safe on d and c. The king may not castle
        out of check, and the partner rook must still be on its corner.
        """
        side = self.side_to_move
        rights = self.castling_availability
        if not (rights.kingside(side) or rights.queenside(side)):
            return []
        back = 0 if side is Side.WHITE else 7
        king_sq = (back, 4)
        if self.board.piece_at(king_sq) != Piece(side, PieceKind.KING):
            return []
        if self.is_in_check(side):
            return []
        rook = Piece(side, PieceKind.ROOK)
        moves: List[Move] = []
        if rights.kingside(side) and self.board.piece_at((back, 7)) == rook:
            if self._castling_path_ok(king_sq, empty_files=(5, 6), king_files=(5, 6)):
                moves.append(Move(king_sq, (back, 6)))
        if rights.queenside(side) and self.board.piece_at((back, 0)) == rook:
            if self._castling_path_ok(king_sq, empty_files=(1, 2, 3), king_files=(3, 2)):
                moves.append(Move(king_sq, (back, 2)))
        return moves

    def _castling_path_ok(
        self,
        king_sq: Coordinate,
        *,
        empty_files: Tuple[int, ...],
        king_files: Tuple[int, ...],
    ) -> bool:
        rank = king_sq[0]
        if any(self.board.piece_at((rank, f)) is not None for f in empty_files):
            return False
        return not any(
            self.move_would_put_self_in_check(Move(king_sq, (rank, f))) for f in king_files
        )

    # --- Pseudo-legal move generation ---
    def possible_moves(self) -> List[Move]:
        moves: List[Move] = []
        for origin in self.board.occupied(self.side_to_move):
            moves.extend(self._iter_moves_from(origin))
        return moves

    def possible_moves_from(self, square: Coordinate) -> List[Move]:
        """Pseudo-legal moves of whatever piece stands on ``square`` (empty list if none)."""
        return list(self._iter_moves_from(square))

    def _iter_moves_from(self, square: Coordinate) -> Iterator[Move]:
        piece = self.board.piece_at(square)
        if piece is None:
            return
        if piece.kind is PieceKind.PAWN:
            yield from self._pawn_moves(square, piece.side)
            return
        directions, max_steps = STEP_TABLE[piece.kind]
        for direction in directions:
            yield from self._slide(square, piece.side, direction, max_steps)

    def _slide(
        self, origin: Coordinate, side: Side, direction: Direction, max_steps: int
    ) -> Iterator[Move]:
        rank, file = origin
        dr, df = direction
        for step in range(1, max_steps + 1):
            dest = (rank + dr * step, file + df * step)
            if not within_bounds(dest):
                return
            other = self.board.piece_at(dest)
            if other is None:
                yield Move(origin, dest)
                continue
            if other.side is not side:
                yield Move(origin, dest)
            return

    def _pawn_moves(self, origin: Coordinate, side: Side) -> Iterator[Move]:
        rank, file = origin
        forward = 1 if side is Side.WHITE else -1
        start_rank = 1 if side is Side.WHITE else 6
        last_rank = 7 if side is Side.WHITE else 0

        one_ahead = (rank + forward, file)
        if not within_bounds(one_ahead):
            return
        promotes = one_ahead[0] == last_rank

        if self.board.piece_at(one_ahead) is None:
            if promotes:
                for kind in PROMOTION_KINDS:
                    yield Move(origin, one_ahead, kind)
            else:
                yield Move(origin, one_ahead)
                two_ahead = (rank + 2 * forward, file)
                if rank == start_rank and self.board.piece_at(two_ahead) is None:
                    yield Move(origin, two_ahead)

        for df in (-1, 1):
            target = (rank + forward, file + df)
            if not within_bounds(target):
                continue
            other = self.board.piece_at(target)
            if other is None:
                if target == self.en_passant_square and self._en_passant_victim(origin, target, side):
                    yield Move(origin, target)
            elif other.side is not side:
                if promotes:
                    for kind in PROMOTION_KINDS:
                        yield Move(origin, target, kind)
                else:
                    yield Move(origin, target)

    def _en_passant_victim(self, origin: Coordinate, target: Coordinate, side: Side) -> bool:
        victim = self.board.piece_at((origin[0], target[1]))
        return victim == Piece(side.other(), PieceKind.PAWN)
