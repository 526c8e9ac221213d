from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CATALOG ======================== */

CREATE TABLE IF NOT EXISTS products (
    product_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    code                TEXT,
    name                TEXT NOT NULL,
    brand               TEXT,
    size                TEXT,
    /* overloaded upstream: pieces per carton, or m² per carton on legacy rows */
    pieces_per_carton   REAL NOT NULL DEFAULT 0 CHECK (pieces_per_carton >= 0),
    cartons_per_palette REAL NOT NULL DEFAULT 0 CHECK (cartons_per_palette >= 0),
    base_price          REAL CHECK (base_price IS NULL OR base_price >= 0),
    purchase_price      REAL NOT NULL DEFAULT 0 CHECK (purchase_price >= 0),
    is_active           INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1))
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_products_code ON products(code) WHERE code IS NOT NULL;

/* ======================== PARTIES ======================== */

CREATE TABLE IF NOT EXISTS price_lists (
    price_list_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name          TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS price_list_items (
    price_list_id INTEGER NOT NULL,
    product_id    INTEGER NOT NULL,
    price         REAL NOT NULL CHECK (price >= 0),
    PRIMARY KEY (price_list_id, product_id),
    FOREIGN KEY (price_list_id) REFERENCES price_lists(price_list_id) ON DELETE CASCADE,
    FOREIGN KEY (product_id)    REFERENCES products(product_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS customers (
    customer_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name          TEXT NOT NULL,
    customer_type TEXT NOT NULL DEFAULT 'RETAIL' CHECK (customer_type IN ('RETAIL','WHOLESALE')),
    price_list_id INTEGER,
    is_active     INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    FOREIGN KEY (price_list_id) REFERENCES price_lists(price_list_id) ON DELETE SET NULL
);

/* -------- customer pricing -------- */
CREATE TABLE IF NOT EXISTS customer_product_prices (
    customer_id    INTEGER NOT NULL,
    product_id     INTEGER NOT NULL,
    specific_price REAL NOT NULL CHECK (specific_price >= 0),
    notes          TEXT,
    effective_to   DATE,
    PRIMARY KEY (customer_id, product_id),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id) ON DELETE CASCADE,
    FOREIGN KEY (product_id)  REFERENCES products(product_id) ON DELETE CASCADE
);

/* negotiated price for every product of a brand in a given size */
CREATE TABLE IF NOT EXISTS customer_brand_rules (
    customer_id    INTEGER NOT NULL,
    brand          TEXT NOT NULL,
    size           TEXT NOT NULL,
    specific_price REAL NOT NULL CHECK (specific_price >= 0),
    PRIMARY KEY (customer_id, brand, size),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id) ON DELETE CASCADE
);

/* ======================== SALES HISTORY ======================== */

CREATE TABLE IF NOT EXISTS sales (
    sale_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id INTEGER NOT NULL,
    date        TEXT NOT NULL,
    status      TEXT NOT NULL DEFAULT 'CONFIRMED'
                CHECK (status IN ('DRAFT','CONFIRMED','DELIVERED','CANCELLED')),
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
);
CREATE INDEX IF NOT EXISTS idx_sales_customer_date ON sales(customer_id, date);

CREATE TABLE IF NOT EXISTS sale_items (
    item_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id    INTEGER NOT NULL,
    product_id INTEGER NOT NULL,
    quantity   REAL NOT NULL CHECK (quantity > 0),
    unit_code  TEXT NOT NULL DEFAULT 'PCS',
    unit_price REAL NOT NULL CHECK (unit_price >= 0),
    FOREIGN KEY (sale_id)    REFERENCES sales(sale_id) ON DELETE CASCADE,
    FOREIGN KEY (product_id) REFERENCES products(product_id)
);
CREATE INDEX IF NOT EXISTS idx_sale_items_product ON sale_items(product_id);

/* ======================== SETTINGS ======================== */

CREATE TABLE IF NOT EXISTS app_settings (
    id                    INTEGER PRIMARY KEY CHECK (id = 1),
    retail_margin         REAL NOT NULL DEFAULT 0 CHECK (retail_margin >= 0),
    retail_margin_type    TEXT NOT NULL DEFAULT 'PERCENT' CHECK (retail_margin_type IN ('PERCENT','AMOUNT')),
    wholesale_margin      REAL NOT NULL DEFAULT 0 CHECK (wholesale_margin >= 0),
    wholesale_margin_type TEXT NOT NULL DEFAULT 'PERCENT' CHECK (wholesale_margin_type IN ('PERCENT','AMOUNT'))
);
"""


def init_schema(db_path: Path | str) -> None:
    """Create missing tables on `db_path` (parent folders included). Safe to re-run."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SQL)
    finally:
        conn.close()
    _log.debug("schema applied to %s", path)


if __name__ == "__main__":
    from ..config import DB_PATH

    target = sys.argv[1] if len(sys.argv) > 1 else DB_PATH
    init_schema(target)
    print(f"✓ DB applied to {target}")
