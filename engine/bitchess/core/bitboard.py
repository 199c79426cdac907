"""
Bitboard utilities for chess.

Board layout (8 ranks x 8 files = 64 squares, one 64-bit word):

  8 | 56 57 58 59 60 61 62 63
  7 | 48 49 50 51 52 53 54 55
  6 | 40 41 42 43 44 45 46 47
  5 | 32 33 34 35 36 37 38 39
  4 | 24 25 26 27 28 29 30 31
  3 | 16 17 18 19 20 21 22 23
  2 |  8  9 10 11 12 13 14 15
  1 |  0  1  2  3  4  5  6  7
    +------------------------
       a  b  c  d  e  f  g  h

Square index = rank * 8 + file (rank 0 = rank 1, file 0 = file a).
This mapping is fixed; every other module goes through the helpers below.
"""

from __future__ import annotations
import operator
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

# Board dimensions
ROWS = 8
COLS = 8
NUM_SQUARES = ROWS * COLS  # 64

# All 64 bits set
FULL_MASK = (1 << NUM_SQUARES) - 1

FILE_NAMES = "abcdefgh"

# Named squares
(
    A1, B1, C1, D1, E1, F1, G1, H1,
    A2, B2, C2, D2, E2, F2, G2, H2,
    A3, B3, C3, D3, E3, F3, G3, H3,
    A4, B4, C4, D4, E4, F4, G4, H4,
    A5, B5, C5, D5, E5, F5, G5, H5,
    A6, B6, C6, D6, E6, F6, G6, H6,
    A7, B7, C7, D7, E7, F7, G7, H7,
    A8, B8, C8, D8, E8, F8, G8, H8,
) = range(NUM_SQUARES)

# Rank 1 and file a, shifted to build the rest
RANK_1_MASK = 0xFF
FILE_A_MASK = 0x0101010101010101

RANK_MASKS = [RANK_1_MASK << (8 * r) for r in range(ROWS)]
FILE_MASKS = [FILE_A_MASK << f for f in range(COLS)]


class SquareOutOfRangeError(IndexError):
    """Raised when a square index falls outside 0..63."""

    def __init__(self, sq: int):
        super().__init__(f"square {sq!r} out of range 0..{NUM_SQUARES - 1}")
        self.square = sq


def check_square(sq: int) -> int:
    """Return sq as a plain int, or raise SquareOutOfRangeError."""
    sq = operator.index(sq)  # numpy ints shift with overflow
    if not 0 <= sq < NUM_SQUARES:
        raise SquareOutOfRangeError(sq)
    return sq


def sq_to_rankfile(sq: int) -> tuple[int, int]:
    """Convert square index to (rank, file)."""
    sq = check_square(sq)
    return sq >> 3, sq & 7


def rankfile_to_sq(rank: int, file: int) -> int:
    """Convert (rank, file) to square index."""
    rank, file = operator.index(rank), operator.index(file)
    if not (0 <= rank < ROWS and 0 <= file < COLS):
        raise SquareOutOfRangeError(rank * COLS + file)
    return rank * COLS + file


def sq_to_algebraic(sq: int) -> str:
    """Convert square index to algebraic notation (e.g., 'e4')."""
    rank, file = sq_to_rankfile(sq)
    return FILE_NAMES[file] + str(rank + 1)


def algebraic_to_sq(s: str) -> int:
    """Convert algebraic notation to square index."""
    if len(s) != 2 or s[0].lower() not in FILE_NAMES or s[1] not in "12345678":
        raise ValueError(f"Invalid square name: {s!r}")
    return rankfile_to_sq(int(s[1]) - 1, FILE_NAMES.index(s[0].lower()))


def bit(sq: int) -> int:
    """Return bitboard with single bit set at square."""
    return 1 << check_square(sq)


def popcount(bb: int) -> int:
    """Count number of set bits."""
    return int(bb).bit_count()


def lsb(bb: int) -> int:
    """Return index of least significant bit (or -1 if empty)."""
    bb = int(bb)  # Handle numpy uint64
    if bb == 0:
        return -1
    return (bb & -bb).bit_length() - 1


def iter_bits(bb: int) -> Iterator[int]:
    """Iterate over indices of set bits, lowest first."""
    bb = int(bb)
    while bb:
        yield lsb(bb)
        bb &= bb - 1  # Clear LSB


def bb_to_squares(bb: int) -> list[int]:
    """Convert bitboard to list of square indices."""
    return list(iter_bits(bb))


@dataclass
class RenderConfig:
    """Configuration for ASCII board rendering."""
    empty_symbol: str = "."
    set_symbol: str = "1"  # Used by BitMask.render only
    show_coordinates: bool = True


def render_grid(symbol_at, config: RenderConfig | None = None) -> str:
    """Render an 8x8 grid, rank 8 on top. symbol_at(sq) returns a char or None."""
    config = config or RenderConfig()
    lines = []
    for rank in range(ROWS - 1, -1, -1):
        cells = []
        for file in range(COLS):
            symbol = symbol_at(rank * COLS + file)
            cells.append(symbol if symbol is not None else config.empty_symbol)
        if config.show_coordinates:
            lines.append(f"{rank + 1} | " + " ".join(cells))
        else:
            lines.append(" ".join(cells))
    if config.show_coordinates:
        lines.append("  +" + "-" * (COLS * 2))
        lines.append("    " + " ".join(FILE_NAMES))
    return "\n".join(lines)


MaskLike = Union["BitMask", int]


def _raw(other: MaskLike) -> int:
    if isinstance(other, BitMask):
        return other.value
    return int(other) & FULL_MASK


class BitMask:
    """
    A set of squares stored in a single 64-bit word.

    Set operations (|, &, ^, ~, -) are one word operation each; only
    iteration costs O(popcount). Square arguments outside 0..63 raise
    SquareOutOfRangeError.
    """

    __slots__ = ("value",)

    def __init__(self, value: int = 0):
        self.value = int(value) & FULL_MASK

    @classmethod
    def empty(cls) -> BitMask:
        return cls(0)

    @classmethod
    def from_index(cls, sq: int) -> BitMask:
        """Mask with exactly one square set."""
        return cls(bit(sq))

    @classmethod
    def from_squares(cls, squares: Iterable[int]) -> BitMask:
        value = 0
        for sq in squares:
            value |= bit(sq)
        return cls(value)

    def set(self, sq: int) -> None:
        self.value = (self.value | bit(sq)) & FULL_MASK

    def clear(self, sq: int) -> None:
        self.value &= ~bit(sq) & FULL_MASK

    def is_set(self, sq: int) -> bool:
        return (self.value >> check_square(sq)) & 1 == 1

    def count(self) -> int:
        return popcount(self.value)

    def lsb(self) -> int:
        return lsb(self.value)

    def iterate(self) -> Iterator[int]:
        """
        Yield set squares in ascending order.

        Works on a private copy of the word, so the mask itself is never
        modified and each call starts a fresh traversal.
        """
        return iter_bits(self.value)

    def copy(self) -> BitMask:
        return BitMask(self.value)

    def render(self, config: RenderConfig | None = None) -> str:
        config = config or RenderConfig()
        return render_grid(
            lambda sq: config.set_symbol if (self.value >> sq) & 1 else None,
            config,
        )

    # Word-level set operations

    def __or__(self, other: MaskLike) -> BitMask:
        return BitMask(self.value | _raw(other))

    def __and__(self, other: MaskLike) -> BitMask:
        return BitMask(self.value & _raw(other))

    def __xor__(self, other: MaskLike) -> BitMask:
        return BitMask(self.value ^ _raw(other))

    def __sub__(self, other: MaskLike) -> BitMask:
        return BitMask(self.value & ~_raw(other))

    __ror__ = __or__
    __rand__ = __and__
    __rxor__ = __xor__

    def __ior__(self, other: MaskLike) -> BitMask:
        self.value = (self.value | _raw(other)) & FULL_MASK
        return self

    def __iand__(self, other: MaskLike) -> BitMask:
        self.value &= _raw(other)
        return self

    def __ixor__(self, other: MaskLike) -> BitMask:
        self.value ^= _raw(other)
        return self

    def __isub__(self, other: MaskLike) -> BitMask:
        self.value &= ~_raw(other) & FULL_MASK
        return self

    def __invert__(self) -> BitMask:
        return BitMask(~self.value & FULL_MASK)

    # Container protocol

    def __iter__(self) -> Iterator[int]:
        return self.iterate()

    def __contains__(self, sq: int) -> bool:
        return self.is_set(sq)

    def __len__(self) -> int:
        return self.count()

    def __bool__(self) -> bool:
        return self.value != 0

    def __int__(self) -> int:
        return self.value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BitMask):
            return self.value == other.value
        if isinstance(other, int):
            return self.value == other
        return NotImplemented

    # Mutable, so not hashable
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"BitMask(0x{self.value:016x})"
