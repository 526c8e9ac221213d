import pytest

from ceramic_pos.core.line_items import (
    CartonPolicy,
    EditField,
    apply_edit,
    default_unit,
    is_below_cost,
    new_line,
    reprice,
    set_unit_price,
)
from ceramic_pos.core.packaging import ProductPackaging, build_packaging
from ceramic_pos.core.pricing import PriceSource, ResolvedPrice
from ceramic_pos.core.units import UnitKind


@pytest.fixture()
def marble():
    """60x60, 4 pcs (1.44 m²) per carton, 36 cartons per pallet, sold by m²."""
    pack = build_packaging("Marble 60x60", 1.44, 36)
    return new_line(
        1, "Marble 60x60", pack,
        unit=UnitKind.AREA, unit_price=10, price_source=PriceSource.BASE,
        quantity=0, purchase_price=8,
    )


def test_pallets_cascade_to_cartons_and_area(marble):
    ln = apply_edit(marble, "pallets", 2)
    assert ln.cartons == 72
    assert ln.quantity == 103.68
    assert ln.line_total == 1036.8


def test_quantity_drives_cartons_and_pallets(marble):
    ln = apply_edit(marble, EditField.QUANTITY, 14.4)
    assert ln.quantity == 14.4
    assert ln.cartons == 10
    assert ln.pallets == 0.28
    assert ln.pieces == pytest.approx(40)
    assert ln.area == pytest.approx(14.4)


def test_cartons_drive_quantity(marble):
    ln = apply_edit(marble, "cartons", 10)
    assert ln.quantity == 14.4
    assert ln.pallets == 0.28
    assert ln.line_total == 144.0


@pytest.mark.parametrize("field, value", [("pallets", 1.5), ("cartons", 7), ("quantity", 20.16)])
def test_same_edit_twice_is_stable(marble, field, value):
    once = apply_edit(marble, field, value)
    assert apply_edit(once, field, value) == once


def test_unit_change_converts_quantity(marble):
    ln = apply_edit(marble, "quantity", 14.4)
    pcs = apply_edit(ln, "unit", "PCS")
    assert pcs.unit is UnitKind.PIECE
    assert pcs.quantity == 40
    assert pcs.cartons == 10
    assert pcs.unit_price == ln.unit_price

    ctn = apply_edit(pcs, EditField.UNIT, UnitKind.CARTON)
    assert ctn.quantity == 10
    assert ctn.cartons == 10


def test_carton_unit_quantity_is_cartons(marble):
    ln = apply_edit(apply_edit(marble, "unit", "CTN"), "quantity", 5)
    assert ln.cartons == 5
    assert ln.pallets == 0.14


def test_missing_ratios_keep_prior_values():
    ln = new_line(9, "Tile Glue 25kg", ProductPackaging(), quantity=5, unit_price=650)
    assert (ln.cartons, ln.pallets) == (0, 0)

    ln = apply_edit(ln, "cartons", 3)
    assert ln.cartons == 3
    assert ln.quantity == 5
    assert ln.pallets == 0

    ln = apply_edit(ln, "pallets", 2)
    assert ln.pallets == 2
    assert ln.cartons == 3
    assert ln.quantity == 5


def test_floor_policy_counts_complete_cartons(marble):
    ln = apply_edit(marble, "quantity", 14.5, CartonPolicy.FLOOR)
    assert ln.quantity == 14.5
    assert ln.cartons == 10
    assert ln.pallets == 0


def test_unknown_field_is_rejected(marble):
    with pytest.raises(ValueError):
        apply_edit(marble, "discount", 1)


def test_price_override_keeps_source(marble):
    ln = set_unit_price(apply_edit(marble, "cartons", 10), 7.5)
    assert ln.unit_price == 7.5
    assert ln.price_source is PriceSource.BASE
    assert ln.line_total == 108.0
    assert is_below_cost(ln)


def test_reprice_replaces_price_and_source(marble):
    ln = reprice(apply_edit(marble, "cartons", 10), ResolvedPrice(12.0, PriceSource.CUSTOM))
    assert ln.price_source is PriceSource.CUSTOM
    assert ln.line_total == 172.8
    assert not is_below_cost(ln)


@pytest.mark.parametrize(
    "name, raw, cpp, expected",
    [
        ("Marble 60x60", 1.44, 36, UnitKind.AREA),
        ("Marble 60x60", 4, 36, UnitKind.PIECE),
        ("Porcelain 120x60", 1.44, 24, UnitKind.PIECE),
        ("Fiche 60x60", 1.44, 36, UnitKind.PIECE),
        ("Mosaic 30x30", 1, 1, UnitKind.PIECE),
        ("Tile Glue 25kg", 0.5, 0, UnitKind.PIECE),
    ],
)
def test_default_unit(name, raw, cpp, expected):
    assert default_unit(name, raw, cpp) is expected
