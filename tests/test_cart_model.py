import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush

from ceramic_pos.core.line_items import CartonPolicy, new_line
from ceramic_pos.core.packaging import ProductPackaging, build_packaging
from ceramic_pos.core.pricing import PriceSource
from ceramic_pos.core.units import UnitKind
from ceramic_pos.modules.cart.model import (
    COL_CARTONS,
    COL_PALLETS,
    COL_PRICE,
    COL_QTY,
    COL_SOURCE,
    COL_UNIT,
    CartItemsModel,
)


def _marble(**kw):
    return new_line(
        1, "Marble 60x60", build_packaging("Marble 60x60", 1.44, 36),
        unit=UnitKind.AREA, unit_price=10, price_source=PriceSource.BASE,
        quantity=kw.pop("quantity", 14.4), code="MB60", purchase_price=8, **kw,
    )


@pytest.fixture()
def model(qapp):
    return CartItemsModel([
        _marble(),
        new_line(None, "Delivery", ProductPackaging(), unit_price=150, quantity=1),
    ])


def test_model_is_consistent(qtmodeltester, model):
    qtmodeltester.check(model)


def test_display_and_edit_roles(model):
    idx = model.index(0, COL_QTY)
    assert model.data(idx, Qt.DisplayRole) == "14.4"
    assert model.data(idx, Qt.EditRole) == 14.4
    assert model.data(model.index(0, COL_UNIT), Qt.DisplayRole) == "m²"
    assert model.data(model.index(0, COL_SOURCE)) == "BASE"
    assert model.headerData(COL_PALLETS, Qt.Horizontal) == "Pallets"


def test_editable_columns(model):
    assert model.flags(model.index(0, COL_CARTONS)) & Qt.ItemIsEditable
    assert not model.flags(model.index(0, COL_SOURCE)) & Qt.ItemIsEditable


def test_pallet_edit_cascades(qtbot, model):
    with qtbot.waitSignal(model.dataChanged):
        assert model.setData(model.index(0, COL_PALLETS), "2")
    ln = model.at(0)
    assert ln.cartons == 72
    assert ln.quantity == 103.68


def test_decimal_comma_accepted(model):
    assert model.setData(model.index(0, COL_QTY), "28,8")
    assert model.at(0).cartons == 20


@pytest.mark.parametrize("value", ["abc", "-1", "inf", "nan"])
def test_invalid_input_leaves_row(model, value):
    before = model.at(0)
    assert not model.setData(model.index(0, COL_CARTONS), value)
    assert model.at(0) == before


def test_unit_edit(model):
    assert model.setData(model.index(0, COL_UNIT), "pcs")
    assert model.at(0).unit is UnitKind.PIECE
    assert model.at(0).quantity == 40
    assert not model.setData(model.index(0, COL_UNIT), "kg")


def test_price_edit_and_below_cost_colour(model):
    idx = model.index(0, COL_PRICE)
    assert model.data(idx, Qt.ForegroundRole) is None
    assert model.setData(idx, "7.5")
    assert model.at(0).line_total == 108.0
    assert isinstance(model.data(idx, Qt.ForegroundRole), QBrush)
    assert "Below purchase cost" in model.data(idx, Qt.ToolTipRole)


def test_floor_policy_is_used(model):
    model.policy = CartonPolicy.FLOOR
    model.setData(model.index(0, COL_QTY), "14.5")
    assert model.at(0).cartons == 10


def test_append_remove(qtbot, model):
    with qtbot.waitSignal(model.rowsInserted):
        row = model.append(_marble(quantity=1))
    assert row == 2 and model.rowCount() == 3
    assert model.index_of(1) == 0
    assert model.index_of(None) is None
    model.remove(0)
    assert model.rowCount() == 2
    assert model.at(0).name == "Delivery"
    model.remove(10)
    assert model.rowCount() == 2
