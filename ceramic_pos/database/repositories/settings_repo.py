from __future__ import annotations
import sqlite3

from ...constants import MARGIN_TYPES
from ...core.pricing import MarginSetting, MarginSettings, MarginType
from .products_repo import DomainError


class SettingsRepo:
    """Margin configuration (single app_settings row, seeded by get_connection)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def get_margin_settings(self) -> MarginSettings:
        row = self.conn.execute(
            """
            SELECT CAST(retail_margin AS REAL) AS retail_margin, retail_margin_type,
                   CAST(wholesale_margin AS REAL) AS wholesale_margin, wholesale_margin_type
            FROM app_settings WHERE id = 1
            """
        ).fetchone()
        if row is None:
            return MarginSettings()
        return MarginSettings(
            retail=MarginSetting(row["retail_margin"], MarginType(row["retail_margin_type"])),
            wholesale=MarginSetting(row["wholesale_margin"], MarginType(row["wholesale_margin_type"])),
        )

    @staticmethod
    def _checked(setting: MarginSetting) -> tuple[float, str]:
        kind = str(getattr(setting.type, "value", setting.type)).upper()
        if kind not in MARGIN_TYPES:
            raise DomainError(f"Margin type must be one of {', '.join(MARGIN_TYPES)}.")
        if setting.value is None or setting.value < 0:
            raise DomainError("Margin cannot be negative.")
        return float(setting.value), kind

    def update_margins(
        self,
        *,
        retail: MarginSetting | None = None,
        wholesale: MarginSetting | None = None,
    ) -> None:
        """Update one or both channels; omitted channels keep their values."""
        updates = []
        if retail is not None:
            updates.append(("retail", self._checked(retail)))
        if wholesale is not None:
            updates.append(("wholesale", self._checked(wholesale)))

        self.conn.execute("INSERT OR IGNORE INTO app_settings(id) VALUES (1)")
        for channel, (value, kind) in updates:
            self.conn.execute(
                f"UPDATE app_settings SET {channel}_margin=?, {channel}_margin_type=? WHERE id=1",
                (value, kind),
            )
        self.conn.commit()
