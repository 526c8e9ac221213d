from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QBrush, QColor

from ...core.line_items import (
    CartonPolicy,
    EditField,
    LineItem,
    apply_edit,
    is_below_cost,
    set_unit_price,
)
from ...core.units import UnitKind
from ...utils.helpers import fmt_money, fmt_qty
from ...utils.validators import parse_edit_value

COL_NO, COL_CODE, COL_NAME, COL_PALLETS, COL_CARTONS, COL_QTY, COL_UNIT, COL_PRICE, COL_SOURCE, COL_TOTAL = range(10)

_EDIT_FIELDS = {
    COL_PALLETS: EditField.PALLETS,
    COL_CARTONS: EditField.CARTONS,
    COL_QTY: EditField.QUANTITY,
    COL_UNIT: EditField.UNIT,
}
_EDITABLE = set(_EDIT_FIELDS) | {COL_PRICE}

_BELOW_COST = QColor("#c62828")


class CartItemsModel(QAbstractTableModel):
    HEADERS = ["#", "Code", "Product", "Pallets", "Cartons", "Qty", "Unit", "Unit Price", "Source", "Line Total"]

    def __init__(self, lines: list[LineItem] | None = None, policy: CartonPolicy = CartonPolicy.EXACT):
        super().__init__()
        self._lines: list[LineItem] = list(lines or [])
        self.policy = policy

    def rowCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._lines)

    def columnCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        ln = self._lines[index.row()]
        c = index.column()

        if role == Qt.DisplayRole:
            m = [
                index.row() + 1,
                ln.code,
                ln.name,
                fmt_qty(ln.pallets),
                fmt_qty(ln.cartons),
                fmt_qty(ln.quantity),
                ln.unit.label,
                fmt_money(ln.unit_price),
                ln.price_source.value,
                fmt_money(ln.line_total),
            ]
            return m[c]

        if role == Qt.EditRole:
            m = [
                index.row() + 1,
                ln.code,
                ln.name,
                ln.pallets,
                ln.cartons,
                ln.quantity,
                ln.unit.value,
                ln.unit_price,
                ln.price_source.value,
                ln.line_total,
            ]
            return m[c]

        if role == Qt.ForegroundRole and c == COL_PRICE and is_below_cost(ln):
            return QBrush(_BELOW_COST)

        if role == Qt.ToolTipRole:
            if c == COL_PRICE and is_below_cost(ln):
                return f"Below purchase cost ({fmt_money(ln.purchase_price)})"
            if c in (COL_PALLETS, COL_CARTONS) and ln.packaging.estimated:
                return "Packaging estimated, not from the catalog"
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section] if section < len(self.HEADERS) else None
        return super().headerData(section, orientation, role)

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        f = Qt.ItemIsEnabled | Qt.ItemIsSelectable
        if index.column() in _EDITABLE:
            f |= Qt.ItemIsEditable
        return f

    def setData(self, index, value, role=Qt.EditRole):
        """
        Route a cell edit through the line engine. Invalid input (not a number,
        negative, unknown unit) returns False and leaves the row untouched.
        """
        if role != Qt.EditRole or not index.isValid() or index.column() not in _EDITABLE:
            return False
        row, c = index.row(), index.column()
        ln = self._lines[row]

        if c == COL_UNIT:
            try:
                unit = UnitKind.parse(value)
            except ValueError:
                return False
            new = apply_edit(ln, EditField.UNIT, unit, self.policy)
        else:
            v = parse_edit_value(value)
            if v is None:
                return False
            if c == COL_PRICE:
                new = set_unit_price(ln, v)
            else:
                new = apply_edit(ln, _EDIT_FIELDS[c], v, self.policy)

        self.set_line(row, new)
        return True

    # ---------------------------- line access ----------------------------

    def lines(self) -> list[LineItem]:
        return list(self._lines)

    def at(self, row: int) -> LineItem:
        return self._lines[row]

    def index_of(self, product_id) -> int | None:
        if product_id is None:
            return None
        for i, ln in enumerate(self._lines):
            if ln.product_id == product_id:
                return i
        return None

    def set_line(self, row: int, line: LineItem):
        self._lines[row] = line
        self.dataChanged.emit(self.index(row, 0), self.index(row, len(self.HEADERS) - 1))

    def append(self, line: LineItem) -> int:
        row = len(self._lines)
        self.beginInsertRows(QModelIndex(), row, row)
        self._lines.append(line)
        self.endInsertRows()
        return row

    def remove(self, row: int):
        if not 0 <= row < len(self._lines):
            return
        self.beginRemoveRows(QModelIndex(), row, row)
        del self._lines[row]
        self.endRemoveRows()
        # row numbers below shift
        if row < len(self._lines):
            self.dataChanged.emit(self.index(row, COL_NO), self.index(len(self._lines) - 1, COL_NO))

    def replace(self, lines: list[LineItem]):
        self.beginResetModel()
        self._lines = list(lines)
        self.endResetModel()
