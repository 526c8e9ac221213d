"""Quantity conversion between pieces, area and cartons, pivoting through pieces."""
from __future__ import annotations

from .units import UnitKind


def to_pieces(value: float, unit: UnitKind, sqm_per_piece: float, pieces_per_carton: float) -> float:
    if unit is UnitKind.AREA:
        return value / sqm_per_piece if sqm_per_piece > 0 else value
    if unit is UnitKind.CARTON:
        return value * pieces_per_carton if pieces_per_carton > 0 else value
    return value


def from_pieces(pieces: float, unit: UnitKind, sqm_per_piece: float, pieces_per_carton: float) -> float:
    if unit is UnitKind.AREA:
        return pieces * sqm_per_piece if sqm_per_piece > 0 else pieces
    if unit is UnitKind.CARTON:
        return pieces / pieces_per_carton if pieces_per_carton > 0 else pieces
    return pieces


def convert(
    value: float,
    from_unit: UnitKind | str,
    to_unit: UnitKind | str,
    sqm_per_piece: float,
    pieces_per_carton: float,
) -> float:
    """
    Convert `value` from one unit to another. A zero ratio makes its leg an
    identity pass-through. The result is not rounded.
    """
    src = UnitKind.parse(from_unit)
    dst = UnitKind.parse(to_unit)
    if src is dst:
        return value
    pieces = to_pieces(value, src, sqm_per_piece, pieces_per_carton)
    return from_pieces(pieces, dst, sqm_per_piece, pieces_per_carton)
