from __future__ import annotations

from enum import Enum

from ..constants import UNIT_ALIASES


class UnitKind(str, Enum):
    """Selling unit of a line. Cartons also stand in for generic boxes."""

    PIECE = "PIECE"
    AREA = "AREA"
    CARTON = "CARTON"

    @classmethod
    def parse(cls, code: "str | UnitKind") -> "UnitKind":
        """
        Map a unit code as stored upstream (PCS, SQM, M2, CRT, ...) to a UnitKind.
        Raises ValueError for codes that are not a known alias.
        """
        if isinstance(code, UnitKind):
            return code
        key = str(code or "").strip().upper()
        for kind, aliases in UNIT_ALIASES.items():
            if key in aliases:
                return cls(kind)
        raise ValueError(f"Unknown unit code {code!r}")

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    UnitKind.PIECE: "pcs",
    UnitKind.AREA: "m²",
    UnitKind.CARTON: "ctn",
}
