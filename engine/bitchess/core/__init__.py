"""Core game model: bitboards and positions."""

from .bitboard import *
from .position import (
    Side, PieceKind, Position, SquareOccupiedError, piece_symbol,
)
