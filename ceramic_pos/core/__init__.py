"""
Pure packaging/pricing engine. No I/O, no shared state: safe to call from any
thread. Price lookups are the only collaborator calls and go through
PriceResolver.
"""
from .units import UnitKind
from .dimensions import parse_sqm_per_piece, is_fiche, has_tile_dimensions, tile_format
from .packaging import ProductPackaging, NormalizedPackaging, normalize, build_packaging
from .conversion import convert, to_pieces, from_pieces
from .pricing import (
    Channel,
    MarginSetting,
    MarginSettings,
    MarginType,
    PriceQuote,
    PriceResolver,
    PriceSource,
    ResolvedPrice,
    apply_margin,
    manual_price,
)
from .line_items import (
    CartonPolicy,
    EditField,
    LineItem,
    apply_edit,
    default_unit,
    is_below_cost,
    new_line,
    reprice,
    set_unit_price,
)

__all__ = [
    "UnitKind",
    "parse_sqm_per_piece",
    "is_fiche",
    "has_tile_dimensions",
    "tile_format",
    "ProductPackaging",
    "NormalizedPackaging",
    "normalize",
    "build_packaging",
    "convert",
    "to_pieces",
    "from_pieces",
    "Channel",
    "MarginSetting",
    "MarginSettings",
    "MarginType",
    "PriceQuote",
    "PriceResolver",
    "PriceSource",
    "ResolvedPrice",
    "apply_margin",
    "manual_price",
    "CartonPolicy",
    "EditField",
    "LineItem",
    "apply_edit",
    "default_unit",
    "is_below_cost",
    "new_line",
    "reprice",
    "set_unit_price",
]
