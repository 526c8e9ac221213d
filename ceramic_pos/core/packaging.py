"""
Canonical packaging ratios for a product line.

The catalog's pieces-per-carton field is overloaded: for some tile formats
legacy records hold the area of a carton (1.44 for four 60x60 tiles) instead
of a piece count. `normalize` detects that reading and derives the real
piece count once, so the rest of the engine only ever sees pieces.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ..constants import AREA_REINTERPRET_TOLERANCE, INTEGRAL_TOLERANCE
from .dimensions import parse_sqm_per_piece

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedPackaging:
    pieces_per_carton: float
    sqm_per_piece: float
    normalized: bool = False


@dataclass(frozen=True)
class ProductPackaging:
    sqm_per_piece: float = 0.0
    pieces_per_carton: float = 0.0
    cartons_per_palette: float = 0.0
    # the raw ratio was read as area per carton and converted to pieces
    normalized: bool = False
    # a ratio was filled by a heuristic default, not by catalog data
    estimated: bool = False

    @property
    def sqm_per_carton(self) -> float:
        return self.sqm_per_piece * self.pieces_per_carton

    @property
    def is_tiled(self) -> bool:
        return self.sqm_per_piece > 0


def _is_integral(value: float) -> bool:
    return abs(value - round(value)) < INTEGRAL_TOLERANCE


def normalize(name: str | None, raw_pieces_per_carton: float, sqm_per_piece: float) -> NormalizedPackaging:
    """
    Resolve the pieces-per-carton / area-per-carton ambiguity.

    A non-integral raw value on a tiled product is tried as area per carton:
    if it is within tolerance of a whole number of pieces, that number wins and
    the per-piece area is recomputed from the stored carton area, which is the
    more precise of the two (1.42 / 7 = 0.20286 rather than 45x45 = 0.2025).
    Otherwise the raw value is kept as a genuine fractional convention.
    """
    raw = float(raw_pieces_per_carton or 0)
    sqm = float(sqm_per_piece or 0)

    if sqm <= 0 or raw <= 0 or _is_integral(raw):
        return NormalizedPackaging(raw, sqm)

    # ties go up: 2.5 pieces reads as 3
    candidate = math.floor(raw / sqm + 0.5)
    if candidate > 0 and abs(candidate * sqm - raw) < AREA_REINTERPRET_TOLERANCE:
        corrected = raw / candidate
        _log.debug(
            "packaging normalized for %r: %s -> %d pcs/ctn, sqm/pc %.4f",
            name, raw, candidate, corrected,
        )
        return NormalizedPackaging(float(candidate), corrected, True)

    return NormalizedPackaging(raw, sqm)


def build_packaging(
    name: str | None,
    raw_pieces_per_carton: float,
    cartons_per_palette: float,
    *,
    fallback_carton_factor: float | None = None,
    default_cartons_per_palette: float | None = None,
) -> ProductPackaging:
    """
    Parse the tile size from the name, normalize the carton ratio and, when the
    caller asks for it, fill missing ratios with heuristic defaults. Lines built
    from defaults carry estimated=True.
    """
    norm = normalize(name, raw_pieces_per_carton, parse_sqm_per_piece(name))
    pieces = norm.pieces_per_carton
    sqm = norm.sqm_per_piece
    cpp = float(cartons_per_palette or 0)
    estimated = False

    if pieces <= 0 and sqm > 0 and fallback_carton_factor:
        # TODO: replace with per-format packaging once the catalog records it
        pieces = sqm * fallback_carton_factor
        estimated = True
        _log.warning("no packaging for %r, estimating %.4g per carton", name, pieces)

    if cpp <= 0 and default_cartons_per_palette:
        cpp = float(default_cartons_per_palette)
        estimated = True
        _log.warning("no pallet packaging for %r, assuming %g cartons", name, cpp)

    return ProductPackaging(
        sqm_per_piece=sqm,
        pieces_per_carton=pieces,
        cartons_per_palette=cpp,
        normalized=norm.normalized,
        estimated=estimated,
    )
