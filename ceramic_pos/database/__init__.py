# database/__init__.py
from __future__ import annotations

import logging
from pathlib import Path
import sqlite3

from ..config import DB_PATH
from ..constants import TABLE_SCHEMA_VERSION, SCHEMA_VERSION
from . import schema as schema_module
from .seeders.default_data import seed as seed_default_data

_log = logging.getLogger(__name__)


def _check_schema_version(conn: sqlite3.Connection) -> str:
    """Record the schema version on a fresh file; report the stored one otherwise."""
    conn.execute(
        f"CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}("
        "id INTEGER PRIMARY KEY CHECK (id=1), version TEXT NOT NULL)"
    )
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1").fetchone()
    if row is None:
        conn.execute(f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?)", (SCHEMA_VERSION,))
        return SCHEMA_VERSION
    if row[0] != SCHEMA_VERSION:
        _log.warning("database schema is version %s, code expects %s", row[0], SCHEMA_VERSION)
    return row[0]


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Open the POS database (DB_PATH unless `db_path` is given), creating the
    tables and the settings row on first use.

    The connection has foreign keys on, WAL journaling, sqlite3.Row rows,
    and is not tied to the opening thread: price lookups run on the
    resolver's worker threads.
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    schema_module.init_schema(path)

    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    version = _check_schema_version(conn)
    seed_default_data(conn)
    conn.commit()
    _log.debug("opened %s (schema %s)", path, version)
    return conn


__all__ = [
    "get_connection",
]
