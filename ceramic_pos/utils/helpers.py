# utils/helpers.py
import logging
import math
from datetime import date
from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation
from typing import Union

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def round2(v: float) -> float:
    """
    Round half-to-even at 2 decimals.

    Goes through the decimal repr of the float so that 0.125 rounds to 0.12
    and 0.135 to 0.14 the way the printed value suggests, not the binary one.
    """
    try:
        d = Decimal(repr(float(v)))
    except (InvalidOperation, ValueError):
        return float(v)
    if not d.is_finite():
        return float(v)
    return float(d.quantize(_CENT, rounding=ROUND_HALF_EVEN))


def floor_units(v: float) -> float:
    """Whole units only (complete cartons / pallets). Float noise below 1e-6 is ignored."""
    return float(math.floor(round(float(v), 6)))


def fmt_qty(v: NumberLike, places: int = 2) -> str:
    """Quantity for display: fixed decimals with trailing zeros trimmed (72.00 -> 72)."""
    try:
        x = float(v)
    except (TypeError, ValueError):
        return str(v)
    text = f"{x:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def fmt_money(v: NumberLike, places: int = 2) -> str:
    """Amount with thousands separators (1,036.80); unparseable input is shown as is."""
    try:
        x = float(v)
    except (TypeError, ValueError):
        _log.debug("fmt_money: not a number: %r", v)
        return str(v)
    return f"{x:,.{places}f}"


def today_str() -> str:
    """YYYY-MM-DD, the format dates are stored in."""
    return date.today().isoformat()
