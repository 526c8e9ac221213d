# utils/validators.py
import math


def non_empty(text) -> bool:
    return bool(text and str(text).strip())


def try_parse_float(x):
    """
    Lenient number parse for values typed at the counter: surrounding blanks
    are ignored and a decimal comma ("1,44") is read as a point.

    Returns (ok, value); value is None when ok is False.
    """
    if isinstance(x, str):
        x = x.strip().replace(",", ".")
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def is_non_negative_number(x) -> bool:
    """True iff x parses to a finite number >= 0 (rejects nan/inf)."""
    ok, val = try_parse_float(x)
    return ok and math.isfinite(val) and val >= 0


def parse_edit_value(x) -> float | None:
    """
    Value for a pallets/cartons/quantity/price cell, or None when it is not a
    finite number >= 0. A blank cell counts as 0.
    """
    if x is None or (isinstance(x, str) and not x.strip()):
        return 0.0
    if not is_non_negative_number(x):
        return None
    return try_parse_float(x)[1]
