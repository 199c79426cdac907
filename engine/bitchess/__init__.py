"""Bitboard chess position model."""

from .core import (
    BitMask, RenderConfig, SquareOutOfRangeError,
    Side, PieceKind, Position, SquareOccupiedError,
)

__version__ = "0.1.0"
