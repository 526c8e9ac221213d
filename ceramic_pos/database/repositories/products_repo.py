# ceramic_pos/database/repositories/products_repo.py
from contextlib import contextmanager
from dataclasses import dataclass
import sqlite3


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


@dataclass
class Product:
    product_id: int | None
    code: str | None
    name: str
    brand: str | None
    size: str | None
    pieces_per_carton: float
    cartons_per_palette: float
    base_price: float | None
    purchase_price: float


_COLS = (
    "product_id, code, name, brand, size, "
    "CAST(pieces_per_carton AS REAL) AS pieces_per_carton, "
    "CAST(cartons_per_palette AS REAL) AS cartons_per_palette, "
    "base_price, CAST(purchase_price AS REAL) AS purchase_price"
)


class ProductsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def _immediate_tx(self):
        """
        Start an IMMEDIATE transaction, commit on success, rollback on error.
        Joins the caller's transaction when one is already open.
        """
        if self.conn.in_transaction:
            yield
            return
        cur = self.conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cur.close()

    @staticmethod
    def _validate(name: str, pieces_per_carton: float, cartons_per_palette: float,
                  base_price: float | None, purchase_price: float) -> None:
        if not name or not name.strip():
            raise DomainError("Product name cannot be empty.")
        if pieces_per_carton < 0 or cartons_per_palette < 0:
            raise DomainError("Packaging ratios cannot be negative.")
        if (base_price is not None and base_price < 0) or purchase_price < 0:
            raise DomainError("Prices cannot be negative.")

    # ---------------------------- Products ----------------------------

    def list_products(self, active_only: bool = True) -> list[Product]:
        sql = f"SELECT {_COLS} FROM products"
        if active_only:
            sql += " WHERE is_active = 1"
        rows = self.conn.execute(sql + " ORDER BY name").fetchall()
        return [Product(**r) for r in rows]

    def get(self, product_id: int) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return Product(**r) if r else None

    def search(self, text: str, limit: int = 50) -> list[Product]:
        """Name, code or brand contains `text` (case-insensitive)."""
        like = f"%{(text or '').strip()}%"
        rows = self.conn.execute(
            f"SELECT {_COLS} FROM products "
            "WHERE is_active = 1 AND (name LIKE ? OR code LIKE ? OR brand LIKE ?) "
            "ORDER BY name LIMIT ?",
            (like, like, like, limit),
        ).fetchall()
        return [Product(**r) for r in rows]

    def create(
        self,
        name: str,
        *,
        code: str | None = None,
        brand: str | None = None,
        size: str | None = None,
        pieces_per_carton: float = 0,
        cartons_per_palette: float = 0,
        base_price: float | None = None,
        purchase_price: float = 0,
    ) -> int:
        self._validate(name, pieces_per_carton, cartons_per_palette, base_price, purchase_price)
        with self._immediate_tx():
            try:
                cur = self.conn.execute(
                    "INSERT INTO products(code, name, brand, size, pieces_per_carton, "
                    "cartons_per_palette, base_price, purchase_price) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (code, name.strip(), brand, size, pieces_per_carton,
                     cartons_per_palette, base_price, purchase_price),
                )
            except sqlite3.IntegrityError as e:
                raise DomainError(f"Product code {code!r} already exists.") from e
            return int(cur.lastrowid)

    def set_packaging(self, product_id: int, pieces_per_carton: float, cartons_per_palette: float) -> None:
        if pieces_per_carton < 0 or cartons_per_palette < 0:
            raise DomainError("Packaging ratios cannot be negative.")
        with self._immediate_tx():
            self.conn.execute(
                "UPDATE products SET pieces_per_carton=?, cartons_per_palette=? WHERE product_id=?",
                (pieces_per_carton, cartons_per_palette, product_id),
            )

    def deactivate(self, product_id: int) -> None:
        with self._immediate_tx():
            self.conn.execute("UPDATE products SET is_active=0 WHERE product_id=?", (product_id,))
