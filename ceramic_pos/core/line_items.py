"""
Line-item consistency engine.

A sale/purchase line shows the same amount four ways: pallets, cartons, a
quantity in the selected unit, and the unit itself. Whichever one the operator
edits becomes the source of the update and the other fields are derived from
it alone, never from each other, so rounding does not compound across edits.

Every function here takes a LineItem and returns a new one; nothing is mutated.
Numeric edits must be finite and >= 0, the caller validates before calling.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from ..constants import INTEGRAL_TOLERANCE, PIECE_PRICED_FORMATS
from ..utils.helpers import floor_units, round2
from .conversion import convert, from_pieces, to_pieces
from .dimensions import has_tile_dimensions, is_fiche, tile_format
from .packaging import ProductPackaging
from .pricing import PriceSource, ResolvedPrice
from .units import UnitKind


class EditField(str, Enum):
    PALLETS = "pallets"
    CARTONS = "cartons"
    QUANTITY = "quantity"
    UNIT = "unit"


class CartonPolicy(str, Enum):
    """How derived carton/pallet counts are settled."""
    EXACT = "EXACT"  # half-even at 2 decimals
    FLOOR = "FLOOR"  # complete cartons/pallets only (returns)


@dataclass(frozen=True)
class LineItem:
    product_id: int | None
    name: str
    packaging: ProductPackaging = ProductPackaging()
    unit: UnitKind = UnitKind.PIECE
    quantity: float = 0.0
    cartons: float = 0.0
    pallets: float = 0.0
    unit_price: float = 0.0
    price_source: PriceSource = PriceSource.MANUAL
    line_total: float = 0.0
    code: str = ""
    brand: str = ""
    purchase_price: float = 0.0

    @property
    def pieces(self) -> float:
        p = self.packaging
        return to_pieces(self.quantity, self.unit, p.sqm_per_piece, p.pieces_per_carton)

    @property
    def area(self) -> float:
        """Square metres on the line; 0 for products without a tile size."""
        p = self.packaging
        if p.sqm_per_piece <= 0:
            return 0.0
        return from_pieces(self.pieces, UnitKind.AREA, p.sqm_per_piece, p.pieces_per_carton)


# ---------------------------- derivations ----------------------------

def _settle(value: float, policy: CartonPolicy) -> float:
    return floor_units(value) if policy is CartonPolicy.FLOOR else round2(value)


def _pallets_from(cartons: float, pack: ProductPackaging, prior: float, policy: CartonPolicy) -> float:
    if pack.cartons_per_palette <= 0:
        return prior
    return _settle(cartons / pack.cartons_per_palette, policy)


def _packaging_from_quantity(item: LineItem, quantity: float, unit: UnitKind, policy: CartonPolicy):
    """(cartons, pallets) for a quantity expressed in `unit`."""
    pack = item.packaging
    if unit is UnitKind.CARTON:
        cartons = _settle(quantity, policy)
    elif pack.pieces_per_carton > 0:
        pieces = to_pieces(quantity, unit, pack.sqm_per_piece, pack.pieces_per_carton)
        cartons = _settle(pieces / pack.pieces_per_carton, policy)
    else:
        return item.cartons, item.pallets
    return cartons, _pallets_from(cartons, pack, item.pallets, policy)


def _quantity_from_cartons(item: LineItem, cartons: float) -> float:
    pack = item.packaging
    if item.unit is UnitKind.CARTON:
        return round2(cartons)
    if pack.pieces_per_carton <= 0:
        return item.quantity
    pieces = cartons * pack.pieces_per_carton
    return round2(from_pieces(pieces, item.unit, pack.sqm_per_piece, pack.pieces_per_carton))


def _with_total(item: LineItem) -> LineItem:
    return replace(item, line_total=round2(item.quantity * item.unit_price))


# ---------------------------- public API ----------------------------

def apply_edit(
    item: LineItem,
    field: EditField | str,
    value,
    policy: CartonPolicy = CartonPolicy.EXACT,
) -> LineItem:
    """
    Apply one operator edit and return the settled line.

    - unit: the quantity is converted to the new unit (2 decimals), then
      cartons/pallets are re-derived from it; the unit price is kept.
    - quantity: cartons and pallets follow from the quantity in the current unit.
    - cartons: quantity and pallets follow from the cartons.
    - pallets: cartons follow from the pallets, quantity from the cartons.

    A missing ratio (0) leaves the field that would need it at its prior value.
    The line total is recomputed after every edit.
    """
    field = EditField(field)
    pack = item.packaging

    if field is EditField.UNIT:
        new_unit = UnitKind.parse(value)
        quantity = round2(convert(
            item.quantity, item.unit, new_unit, pack.sqm_per_piece, pack.pieces_per_carton
        ))
        cartons, pallets = _packaging_from_quantity(item, quantity, new_unit, policy)
        return _with_total(replace(
            item, unit=new_unit, quantity=quantity, cartons=cartons, pallets=pallets
        ))

    v = float(value)

    if field is EditField.QUANTITY:
        cartons, pallets = _packaging_from_quantity(item, v, item.unit, policy)
        return _with_total(replace(item, quantity=v, cartons=cartons, pallets=pallets))

    if field is EditField.CARTONS:
        return _with_total(replace(
            item,
            cartons=v,
            quantity=_quantity_from_cartons(item, v),
            pallets=_pallets_from(v, pack, item.pallets, policy),
        ))

    # pallets
    if pack.cartons_per_palette <= 0:
        return _with_total(replace(item, pallets=v))
    cartons = _settle(v * pack.cartons_per_palette, policy)
    return _with_total(replace(
        item, pallets=v, cartons=cartons, quantity=_quantity_from_cartons(item, cartons)
    ))


def new_line(
    product_id: int | None,
    name: str,
    packaging: ProductPackaging,
    *,
    unit: UnitKind = UnitKind.PIECE,
    unit_price: float = 0.0,
    price_source: PriceSource = PriceSource.MANUAL,
    quantity: float = 1,
    code: str = "",
    brand: str = "",
    purchase_price: float = 0.0,
    policy: CartonPolicy = CartonPolicy.EXACT,
) -> LineItem:
    """A fresh line with `quantity` in `unit` and consistent cartons/pallets."""
    seed = LineItem(
        product_id=product_id,
        name=name,
        packaging=packaging,
        unit=UnitKind.parse(unit),
        unit_price=float(unit_price or 0),
        price_source=price_source,
        code=code or "",
        brand=brand or "",
        purchase_price=float(purchase_price or 0),
    )
    return apply_edit(seed, EditField.QUANTITY, quantity, policy)


def set_unit_price(item: LineItem, price: float) -> LineItem:
    """Operator price override. The provenance tag is kept."""
    return _with_total(replace(item, unit_price=float(price)))


def reprice(item: LineItem, resolved: ResolvedPrice) -> LineItem:
    """Apply a freshly resolved price after the product/customer context changed."""
    return _with_total(replace(item, unit_price=resolved.unit_price, price_source=resolved.price_source))


def is_below_cost(item: LineItem) -> bool:
    return item.purchase_price > 0 and item.unit_price < item.purchase_price


def default_unit(
    name: str,
    raw_pieces_per_carton: float,
    cartons_per_palette: float,
    *,
    piece_formats=PIECE_PRICED_FORMATS,
) -> UnitKind:
    """
    Unit a new line starts in. Tiles whose catalog packaging is fractional are
    sold by area; everything else (accessories, fiches, single-item packs and
    the piece-priced formats) by the piece.
    """
    if not has_tile_dimensions(name) or is_fiche(name):
        return UnitKind.PIECE
    raw = float(raw_pieces_per_carton or 0)
    if raw == 1 and float(cartons_per_palette or 0) == 1:
        return UnitKind.PIECE
    fmt = tile_format(name)
    if fmt in {tile_format(f) for f in piece_formats}:
        return UnitKind.PIECE
    if abs(raw - round(raw)) >= INTEGRAL_TOLERANCE:
        return UnitKind.AREA
    return UnitKind.PIECE
