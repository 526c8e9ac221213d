"""
Tile size extraction from free-text product names.

Names carry the format in centimetres ("ARCILLA GRIS 33/33", "Marble 60x60",
"Parquet 20 X 120"); the area of one piece follows from it. Technical-sheet
items ("Fiche ...") are single units and never tiled area.
"""
from __future__ import annotations

import re

_DIMENSION_RX = re.compile(r"(\d+)\s*[x/×]\s*(\d+)", re.IGNORECASE)


def is_fiche(name: str | None) -> bool:
    return (name or "").strip().lower().startswith("fiche")


def tile_format(name: str | None) -> tuple[int, int] | None:
    """First `<w>x<h>` token of the name in centimetres, or None."""
    m = _DIMENSION_RX.search(name or "")
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def has_tile_dimensions(name: str | None) -> bool:
    return tile_format(name) is not None


def parse_sqm_per_piece(name: str | None) -> float:
    """
    Area of one piece in m², or 0 when the product is not a tiled product.

    >>> round(parse_sqm_per_piece("ARCILLA GRIS 33/33"), 4)
    0.1089
    >>> parse_sqm_per_piece("Fiche 33x33")
    0
    """
    if is_fiche(name):
        return 0
    fmt = tile_format(name)
    if fmt is None:
        return 0
    width, height = fmt
    return (width / 100) * (height / 100)
