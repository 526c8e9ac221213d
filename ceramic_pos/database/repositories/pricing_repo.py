from __future__ import annotations
import sqlite3
import threading

from ...core.pricing import PriceQuote, PriceSource
from ...utils.helpers import today_str
from .products_repo import DomainError


class PricingRepo:
    """
    Customer-specific price lookup backed by the sales history and the
    customer pricing tables.

    get_customer_product_price() answers, strongest first:
      - HISTORY:   unit price of the latest confirmed/delivered sale of this
                   product to this customer
      - CUSTOM:    customer_product_prices row still in effect
      - CONTRACT:  customer_brand_rules row for the product's brand + size
      - PRICELIST: item of the price list attached to the customer
    and None when nothing applies (the resolver then falls back to margin or
    base price). A source priced 0 is passed over for the next one.

    The connection is shared with the resolver's lookup threads, so reads and
    writes made here hold one lock. The other repositories only write from
    the UI thread.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        # lookups arrive from the resolver pool; one query at a time on the shared connection
        self._lock = threading.Lock()

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def last_sale(self, customer_id: int, product_id: int) -> dict | None:
        row = self.conn.execute(
            """
            SELECT CAST(si.unit_price AS REAL) AS unit_price,
                   CAST(si.quantity AS REAL)   AS quantity,
                   s.date
            FROM sale_items si
            JOIN sales s ON s.sale_id = si.sale_id
            WHERE s.customer_id = ?
              AND si.product_id = ?
              AND s.status NOT IN ('CANCELLED', 'DRAFT')
            ORDER BY DATE(s.date) DESC, si.item_id DESC
            LIMIT 1
            """,
            (customer_id, product_id),
        ).fetchone()
        return dict(row) if row else None

    def custom_price(self, customer_id: int, product_id: int) -> float | None:
        row = self.conn.execute(
            """
            SELECT CAST(specific_price AS REAL) AS p
            FROM customer_product_prices
            WHERE customer_id = ? AND product_id = ?
              AND (effective_to IS NULL OR DATE(effective_to) >= DATE(?))
            """,
            (customer_id, product_id, today_str()),
        ).fetchone()
        return float(row["p"]) if row else None

    def brand_rule_price(self, customer_id: int, product_id: int) -> float | None:
        row = self.conn.execute(
            """
            SELECT CAST(r.specific_price AS REAL) AS p
            FROM customer_brand_rules r
            JOIN products p ON p.brand = r.brand AND p.size = r.size
            WHERE r.customer_id = ? AND p.product_id = ?
            """,
            (customer_id, product_id),
        ).fetchone()
        return float(row["p"]) if row else None

    def price_list_price(self, customer_id: int, product_id: int) -> float | None:
        row = self.conn.execute(
            """
            SELECT CAST(pli.price AS REAL) AS p
            FROM price_list_items pli
            JOIN customers c ON c.price_list_id = pli.price_list_id
            WHERE c.customer_id = ? AND pli.product_id = ?
            """,
            (customer_id, product_id),
        ).fetchone()
        return float(row["p"]) if row else None

    def get_customer_product_price(self, customer_id: int, product_id: int) -> PriceQuote | None:
        with self._lock:
            return self._lookup(customer_id, product_id)

    def _lookup(self, customer_id: int, product_id: int) -> PriceQuote | None:
        # a source priced 0 (free sample, placeholder row) does not stop the search
        last = self.last_sale(customer_id, product_id)
        custom = self.custom_price(customer_id, product_id)
        history = dict(
            last_sale_price=last["unit_price"] if last else None,
            last_sale_date=last["date"] if last else None,
            custom_price=custom,
        )

        if last is not None and last["unit_price"] > 0:
            return PriceQuote(price=last["unit_price"], source=PriceSource.HISTORY, **history)
        if custom is not None and custom > 0:
            return PriceQuote(price=custom, source=PriceSource.CUSTOM, **history)

        rule = self.brand_rule_price(customer_id, product_id)
        if rule is not None and rule > 0:
            return PriceQuote(price=rule, source=PriceSource.CONTRACT, **history)

        listed = self.price_list_price(customer_id, product_id)
        if listed is not None and listed > 0:
            return PriceQuote(price=listed, source=PriceSource.PRICELIST, **history)
        return None

    def list_custom_prices(self, customer_id: int) -> list[dict]:
        rows = self.conn.execute(
            """
            SELECT cpp.product_id, p.code, p.name,
                   CAST(cpp.specific_price AS REAL) AS specific_price,
                   p.base_price, cpp.effective_to, cpp.notes
            FROM customer_product_prices cpp
            JOIN products p ON p.product_id = cpp.product_id
            WHERE cpp.customer_id = ?
            ORDER BY p.name
            """,
            (customer_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def set_custom_price(
        self,
        customer_id: int,
        product_id: int,
        specific_price: float,
        notes: str | None = None,
        effective_to: str | None = None,
    ) -> None:
        if specific_price is None or specific_price < 0:
            raise DomainError("Custom price must be zero or more.")
        with self._lock:
            self.conn.execute(
                """
                INSERT INTO customer_product_prices(customer_id, product_id, specific_price, notes, effective_to)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(customer_id, product_id)
                DO UPDATE SET specific_price=excluded.specific_price,
                              notes=excluded.notes,
                              effective_to=excluded.effective_to
                """,
                (customer_id, product_id, specific_price, notes, effective_to),
            )
            self.conn.commit()

    def delete_custom_price(self, customer_id: int, product_id: int) -> None:
        with self._lock:
            self.conn.execute(
                "DELETE FROM customer_product_prices WHERE customer_id=? AND product_id=?",
                (customer_id, product_id),
            )
            self.conn.commit()
