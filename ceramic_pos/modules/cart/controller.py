from __future__ import annotations

import logging
import sqlite3

from PySide6.QtCore import QObject, Signal

from ...config import FALLBACK_FACTOR, PRICE_TIMEOUT
from ...constants import PURCHASE_CARTONS_PER_PALETTE
from ...core.line_items import CartonPolicy, default_unit, new_line, reprice
from ...core.packaging import build_packaging
from ...core.pricing import PriceResolver, PriceSource, ResolvedPrice, manual_price
from ...core.units import UnitKind
from ...database.repositories.customers_repo import CustomersRepo
from ...database.repositories.pricing_repo import PricingRepo
from ...database.repositories.products_repo import DomainError, ProductsRepo
from ...database.repositories.settings_repo import SettingsRepo
from ...utils.loggers import get_logger
from ...utils.validators import non_empty, parse_edit_value
from .model import CartItemsModel
from .totals import CartTotals, summarize

_log = logging.getLogger(__name__)

DOC_KINDS = ("sale", "purchase", "return")


class CartController(QObject):
    """
    Owns one cart session: the line model, the price resolver and the margin
    settings (read once when the session starts).

    doc_kind:
      - sale:     prices through the waterfall, exact cartons
      - return:   as sale, but only complete cartons/pallets
      - purchase: lines priced at purchase cost, pallets default to 36 cartons
    """

    totals_changed = Signal(object)  # CartTotals

    def __init__(
        self,
        products: ProductsRepo,
        customers: CustomersRepo,
        pricing: PricingRepo,
        settings: SettingsRepo,
        *,
        doc_kind: str = "sale",
        timeout: float | None = PRICE_TIMEOUT,
        fallback_factor: float | None = FALLBACK_FACTOR,
    ):
        super().__init__()
        get_logger()
        doc_kind = (doc_kind or "sale").lower()
        if doc_kind not in DOC_KINDS:
            raise ValueError(f"doc_kind must be one of {DOC_KINDS}, got {doc_kind!r}")
        self.doc_kind = doc_kind
        self.products = products
        self.customers = customers
        self.fallback_factor = fallback_factor
        self.customer = None

        self.policy = CartonPolicy.FLOOR if doc_kind == "return" else CartonPolicy.EXACT
        self.margins = settings.get_margin_settings()
        self.resolver = PriceResolver(pricing, self.margins, timeout=timeout)
        self.model = CartItemsModel(policy=self.policy)

        self.model.dataChanged.connect(self._emit_totals)
        self.model.rowsInserted.connect(self._emit_totals)
        self.model.rowsRemoved.connect(self._emit_totals)
        self.model.modelReset.connect(self._emit_totals)

    @classmethod
    def from_connection(cls, conn: sqlite3.Connection, **kwargs) -> "CartController":
        return cls(
            ProductsRepo(conn),
            CustomersRepo(conn),
            PricingRepo(conn),
            SettingsRepo(conn),
            **kwargs,
        )

    def close(self):
        self.resolver.close()

    # ---------------------------- pricing ----------------------------

    def _price_for(self, product) -> ResolvedPrice:
        if self.doc_kind == "purchase":
            return ResolvedPrice(float(product.purchase_price or 0), PriceSource.BASE, "purchase cost")
        return self.resolver.resolve(product, self.customer)

    # ---------------------------- lines ----------------------------

    def add_product(self, product_id: int, quantity: float = 1) -> int | None:
        """
        Add a catalog product. The price is resolved before the row is
        inserted. Returns the new row, or None when the product is already
        in the cart.
        """
        if self.model.index_of(product_id) is not None:
            _log.info("product %s already in cart, ignored", product_id)
            return None
        product = self.products.get(product_id)
        if product is None:
            raise DomainError(f"Product {product_id} not found.")

        pack = build_packaging(
            product.name,
            product.pieces_per_carton,
            product.cartons_per_palette,
            fallback_carton_factor=self.fallback_factor,
            default_cartons_per_palette=PURCHASE_CARTONS_PER_PALETTE if self.doc_kind == "purchase" else None,
        )
        unit = default_unit(product.name, product.pieces_per_carton, product.cartons_per_palette)
        price = self._price_for(product)

        line = new_line(
            product.product_id,
            product.name,
            pack,
            unit=unit,
            unit_price=price.unit_price,
            price_source=price.price_source,
            quantity=quantity,
            code=product.code or "",
            brand=product.brand or "",
            purchase_price=product.purchase_price,
            policy=self.policy,
        )
        _log.debug(
            "added %s (%s) at %.2f %s",
            product.name, unit.value, line.unit_price, line.price_source.value,
        )
        return self.model.append(line)

    def add_manual_line(self, name: str, unit_price, unit: str | UnitKind = UnitKind.PIECE, quantity=1) -> int:
        """A line typed at the counter, with no catalog product behind it."""
        if not non_empty(name):
            raise DomainError("Line description cannot be empty.")
        price = parse_edit_value(unit_price)
        if price is None:
            raise DomainError("Unit price must be a number, zero or more.")
        qty = parse_edit_value(quantity)
        if qty is None:
            raise DomainError("Quantity must be a number, zero or more.")
        try:
            unit = UnitKind.parse(unit)
        except ValueError as e:
            raise DomainError(str(e)) from e

        resolved = manual_price(price)
        line = new_line(
            None,
            name.strip(),
            build_packaging(name, 0, 0),
            unit=unit,
            unit_price=resolved.unit_price,
            price_source=resolved.price_source,
            quantity=qty,
            policy=self.policy,
        )
        return self.model.append(line)

    def set_customer(self, customer_id: int | None) -> None:
        """
        Switch the cart's customer and re-price every catalog line for it.
        Lookups for all lines run together; manual lines keep their price.
        """
        if customer_id is None:
            self.customer = None
        else:
            customer = self.customers.get(customer_id)
            if customer is None:
                raise DomainError(f"Customer {customer_id} not found.")
            self.customer = customer

        if self.doc_kind == "purchase":
            return

        rows, requests = [], []
        for row, ln in enumerate(self.model.lines()):
            if ln.product_id is None or ln.price_source is PriceSource.MANUAL:
                continue
            product = self.products.get(ln.product_id)
            if product is None:
                _log.warning("product %s vanished from catalog, price kept", ln.product_id)
                continue
            rows.append(row)
            requests.append((product, self.customer))

        for row, resolved in zip(rows, self.resolver.resolve_many(requests)):
            self.model.set_line(row, reprice(self.model.at(row), resolved))
        _log.info("cart re-priced for customer %s (%d lines)", customer_id, len(rows))

    def remove(self, row: int) -> None:
        self.model.remove(row)

    def totals(self) -> CartTotals:
        return summarize(self.model.lines())

    def _emit_totals(self, *args):
        self.totals_changed.emit(self.totals())
