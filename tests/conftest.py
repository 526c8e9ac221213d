# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own temp-file SQLite DB built by get_connection(),
#   so schema, PRAGMAs and the settings seed match production
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (set by get_connection)
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import sqlite3
from types import SimpleNamespace

import pytest

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from ceramic_pos.core.pricing import Channel
from ceramic_pos.database import get_connection
from ceramic_pos.database.repositories.customers_repo import CustomersRepo
from ceramic_pos.database.repositories.pricing_repo import PricingRepo
from ceramic_pos.database.repositories.products_repo import ProductsRepo
from ceramic_pos.database.repositories.settings_repo import SettingsRepo


@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Per-test database ----------
@pytest.fixture()
def conn(tmp_path):
    c = get_connection(tmp_path / "ceramic_pos_test.db")
    try:
        yield c
    finally:
        c.close()


@pytest.fixture()
def products(conn) -> ProductsRepo:
    return ProductsRepo(conn)


@pytest.fixture()
def customers(conn) -> CustomersRepo:
    return CustomersRepo(conn)


@pytest.fixture()
def pricing(conn) -> PricingRepo:
    return PricingRepo(conn)


@pytest.fixture()
def settings(conn) -> SettingsRepo:
    return SettingsRepo(conn)


# ---------- Catalog used throughout ----------
@pytest.fixture()
def ids(products: ProductsRepo, customers: CustomersRepo) -> dict:
    """
    marble:    60x60 with legacy area-per-carton packaging (1.44 m² = 4 pcs)
    porcelain: 120x60, sold by the piece
    glue:      accessory, no tile size and no packaging
    nopallet:  30x30 with a piece count but no pallet ratio
    """
    return {
        "marble": products.create(
            "Marble Blanco 60x60", code="MB60", brand="Acme", size="60x60",
            pieces_per_carton=1.44, cartons_per_palette=36,
            base_price=1000, purchase_price=800,
        ),
        "porcelain": products.create(
            "Porcelain Grey 120x60", code="PG126", brand="Acme", size="120x60",
            pieces_per_carton=2, cartons_per_palette=24,
            base_price=2500, purchase_price=2000,
        ),
        "glue": products.create(
            "Tile Glue 25kg", code="GL25", base_price=650, purchase_price=500,
        ),
        "nopallet": products.create(
            "Wall 30x30", code="W30", brand="Nord", size="30x30",
            pieces_per_carton=11, cartons_per_palette=0,
            base_price=300, purchase_price=200,
        ),
        "retail": customers.create("Atlas Renovation", "RETAIL"),
        "wholesale": customers.create("Batiplus Depot", "WHOLESALE"),
    }


@pytest.fixture()
def record_sale(conn: sqlite3.Connection):
    """Insert a sale with one line; returns the sale_id."""
    def _record(customer_id, product_id, unit_price, date="2024-01-10", status="CONFIRMED", quantity=1):
        cur = conn.execute(
            "INSERT INTO sales(customer_id, date, status) VALUES (?, ?, ?)",
            (customer_id, date, status),
        )
        sale_id = cur.lastrowid
        conn.execute(
            "INSERT INTO sale_items(sale_id, product_id, quantity, unit_price) VALUES (?, ?, ?, ?)",
            (sale_id, product_id, quantity, unit_price),
        )
        conn.commit()
        return sale_id
    return _record


# ---------- In-memory stand-ins for the resolver tests ----------
@pytest.fixture()
def make_product():
    def _make(product_id=1, base_price=1000.0, purchase_price=0.0):
        return SimpleNamespace(product_id=product_id, base_price=base_price, purchase_price=purchase_price)
    return _make


@pytest.fixture()
def retail_customer():
    return SimpleNamespace(customer_id=7, channel=Channel.RETAIL)


@pytest.fixture()
def wholesale_customer():
    return SimpleNamespace(customer_id=8, channel=Channel.WHOLESALE)
