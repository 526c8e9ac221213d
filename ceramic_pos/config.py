import os
from pathlib import Path

from .constants import (
    DATA_DIR,
    DB_FILE_NAME,
    FALLBACK_CARTON_FACTOR,
    PRICE_LOOKUP_TIMEOUT,
)

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = BASE_DIR.parent / DATA_DIR
DB_PATH = Path(os.environ.get("CERAMIC_POS_DB") or DATA_PATH / DB_FILE_NAME)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


PRICE_TIMEOUT = _env_float("CERAMIC_POS_PRICE_TIMEOUT", PRICE_LOOKUP_TIMEOUT)

# 0 (or negative) turns the missing-packaging estimate off
_factor = _env_float("CERAMIC_POS_FALLBACK_CARTON_FACTOR", FALLBACK_CARTON_FACTOR)
FALLBACK_FACTOR = _factor if _factor > 0 else None

LOG_LEVEL = (os.environ.get("CERAMIC_POS_LOG_LEVEL") or "INFO").strip().upper()
