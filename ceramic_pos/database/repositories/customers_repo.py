from __future__ import annotations
from dataclasses import dataclass
import sqlite3

from ...constants import CUSTOMER_TYPES
from ...core.pricing import Channel
from .products_repo import DomainError


@dataclass
class Customer:
    customer_id: int | None
    name: str
    customer_type: str
    price_list_id: int | None

    @property
    def channel(self) -> Channel:
        return Channel.WHOLESALE if self.customer_type == "WHOLESALE" else Channel.RETAIL


class CustomersRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(
            "SELECT customer_id, name, customer_type, price_list_id "
            "FROM customers WHERE customer_id=?",
            (customer_id,),
        ).fetchone()
        return Customer(**r) if r else None

    def list_customers(self, active_only: bool = True) -> list[Customer]:
        sql = "SELECT customer_id, name, customer_type, price_list_id FROM customers"
        if active_only:
            sql += " WHERE is_active = 1"
        return [Customer(**r) for r in self.conn.execute(sql + " ORDER BY name").fetchall()]

    def create(self, name: str, customer_type: str = "RETAIL", price_list_id: int | None = None) -> int:
        name = (name or "").strip()
        if not name:
            raise DomainError("Customer name cannot be empty.")
        customer_type = (customer_type or "").strip().upper()
        if customer_type not in CUSTOMER_TYPES:
            raise DomainError(f"Customer type must be one of {', '.join(CUSTOMER_TYPES)}.")
        cur = self.conn.execute(
            "INSERT INTO customers(name, customer_type, price_list_id) VALUES (?, ?, ?)",
            (name, customer_type, price_list_id),
        )
        self.conn.commit()
        return int(cur.lastrowid)
