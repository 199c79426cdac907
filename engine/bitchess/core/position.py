"""
Position representation for chess.

A Position holds twelve per-piece bitboards (side x kind) and two derived
per-side union bitboards. The unions are only guaranteed to match the
per-piece boards after resync_sides(); the mutators on Position resync
for you, raw edits of bb_pieces do not.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from enum import IntEnum
from typing import Iterator, Optional

import numpy as np

from .bitboard import (
    ROWS, COLS, RANK_MASKS,
    A1, B1, C1, D1, E1, F1, G1, H1,
    A8, B8, C8, D8, E8, F8, G8, H8,
    BitMask, RenderConfig, bit, iter_bits, render_grid,
    sq_to_algebraic,
)

logger = logging.getLogger(__name__)


class Side(IntEnum):
    WHITE = 0
    BLACK = 1


class PieceKind(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5


NUM_SIDES = len(Side)
NUM_KINDS = len(PieceKind)

PIECE_LETTERS = "PNBRQK"

# Back rank order from file a to file h
BACK_RANK = (
    PieceKind.ROOK, PieceKind.KNIGHT, PieceKind.BISHOP, PieceKind.QUEEN,
    PieceKind.KING, PieceKind.BISHOP, PieceKind.KNIGHT, PieceKind.ROOK,
)
WHITE_BACK_RANK = (A1, B1, C1, D1, E1, F1, G1, H1)
BLACK_BACK_RANK = (A8, B8, C8, D8, E8, F8, G8, H8)


class SquareOccupiedError(ValueError):
    """Raised when placing a piece on a square another piece already holds."""


def piece_symbol(side: Side, kind: PieceKind) -> str:
    """Letter for a piece: uppercase for White, lowercase for Black."""
    letter = PIECE_LETTERS[kind]
    return letter if side == Side.WHITE else letter.lower()


class Position:
    """
    Bitboard snapshot of a chess board.

    Attributes:
        bb_pieces: bb_pieces[side][kind] -> squares holding that piece
        bb_sides: bb_sides[side] -> union of that side's six piece boards
    """

    def __init__(self):
        self.bb_pieces: list[list[BitMask]] = [
            [BitMask.empty() for _ in range(NUM_KINDS)] for _ in range(NUM_SIDES)
        ]
        self.bb_sides: list[BitMask] = [BitMask.empty() for _ in range(NUM_SIDES)]

    @classmethod
    def new(cls) -> Position:
        """Create an empty position."""
        return cls()

    @classmethod
    def standard(cls) -> Position:
        """Create a position with the standard starting placement."""
        pos = cls()
        with pos.edit() as bb_pieces:
            for kind, w_sq, b_sq in zip(BACK_RANK, WHITE_BACK_RANK, BLACK_BACK_RANK):
                bb_pieces[Side.WHITE][kind].set(w_sq)
                bb_pieces[Side.BLACK][kind].set(b_sq)
            bb_pieces[Side.WHITE][PieceKind.PAWN] |= RANK_MASKS[1]
            bb_pieces[Side.BLACK][PieceKind.PAWN] |= RANK_MASKS[6]
        return pos

    def resync_sides(self) -> None:
        """Recompute both side unions from the piece boards, from scratch."""
        for side in Side:
            self.bb_sides[side] = BitMask(self._side_union(side))
        logger.debug(
            "Resynced sides: white=0x%016x black=0x%016x",
            self.bb_sides[Side.WHITE].value, self.bb_sides[Side.BLACK].value,
        )

    def _side_union(self, side: Side) -> int:
        union = 0
        for bb in self.bb_pieces[side]:
            union |= bb.value
        return union

    @contextmanager
    def edit(self) -> Iterator[list[list[BitMask]]]:
        """
        Batch raw edits to bb_pieces; sides are resynced when the block exits.

        The resync also runs if the block raises, so the position never stays
        stale. Disjointness is not checked here (see overlaps()).
        """
        try:
            yield self.bb_pieces
        finally:
            self.resync_sides()

    def place_piece(self, side: Side, kind: PieceKind, sq: int) -> None:
        """Put a piece on an empty square. Placing the same piece twice is a no-op."""
        current = self.piece_at(sq)
        if current is not None and current != (side, kind):
            logger.debug(
                "Rejected %s on %s: occupied by %s",
                piece_symbol(side, kind), sq_to_algebraic(sq), piece_symbol(*current),
            )
            raise SquareOccupiedError(
                f"{sq_to_algebraic(sq)} already holds {piece_symbol(*current)}"
            )
        self.bb_pieces[side][kind].set(sq)
        self.resync_sides()

    def remove_piece(self, side: Side, kind: PieceKind, sq: int) -> bool:
        """Remove a piece from a square. Returns False if it was not there."""
        bb = self.bb_pieces[side][kind]
        if not bb.is_set(sq):
            return False
        bb.clear(sq)
        self.resync_sides()
        return True

    def clear_square(self, sq: int) -> Optional[tuple[Side, PieceKind]]:
        """Remove whatever stands on sq and return it (None if empty)."""
        current = self.piece_at(sq)
        if current is None:
            return None
        self.remove_piece(current[0], current[1], sq)
        return current

    def pieces(self, side: Side, kind: PieceKind) -> BitMask:
        return self.bb_pieces[side][kind]

    @property
    def occupied(self) -> BitMask:
        """Bitboard of all occupied squares."""
        return self.bb_sides[Side.WHITE] | self.bb_sides[Side.BLACK]

    @property
    def empty_squares(self) -> BitMask:
        """Bitboard of all empty squares."""
        return ~self.occupied

    def piece_at(self, sq: int) -> Optional[tuple[Side, PieceKind]]:
        """Return (side, kind) of the piece on sq, or None."""
        mask = bit(sq)
        for side in Side:
            for kind in PieceKind:
                if self.bb_pieces[side][kind].value & mask:
                    return side, kind
        return None

    def is_synchronized(self) -> bool:
        """True if bb_sides matches a fresh recomputation."""
        for side in Side:
            if self.bb_sides[side].value != self._side_union(side):
                return False
        return True

    def overlaps(self) -> BitMask:
        """Squares claimed by more than one (side, kind) board."""
        seen = 0
        clashes = 0
        for side in Side:
            for bb in self.bb_pieces[side]:
                clashes |= seen & bb.value
                seen |= bb.value
        return BitMask(clashes)

    def copy(self) -> Position:
        """Independent copy; no mask is shared with the original."""
        pos = Position()
        pos.bb_pieces = [[bb.copy() for bb in row] for row in self.bb_pieces]
        pos.bb_sides = [bb.copy() for bb in self.bb_sides]
        return pos

    def to_tensor(self) -> np.ndarray:
        """
        Convert position to a (12, 8, 8) float32 array.

        Plane side * 6 + kind holds that piece's squares, indexed
        [plane, rank, file] with rank 0 = rank 1.
        """
        planes = np.zeros((NUM_SIDES * NUM_KINDS, ROWS, COLS), dtype=np.float32)
        for side in Side:
            for kind in PieceKind:
                plane = side * NUM_KINDS + kind
                for sq in iter_bits(self.bb_pieces[side][kind].value):
                    planes[plane, sq // COLS, sq % COLS] = 1.0
        return planes

    def render(self, config: RenderConfig | None = None) -> str:
        symbols = {}
        for side in Side:
            for kind in PieceKind:
                for sq in self.bb_pieces[side][kind]:
                    symbols[sq] = piece_symbol(side, kind)
        return render_grid(symbols.get, config)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self.bb_pieces == other.bb_pieces and
            self.bb_sides == other.bb_sides
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return self.render()
