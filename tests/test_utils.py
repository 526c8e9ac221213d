import pytest

from ceramic_pos.utils.helpers import floor_units, fmt_money, fmt_qty, round2
from ceramic_pos.utils.validators import parse_edit_value, try_parse_float


@pytest.mark.parametrize(
    "value, expected",
    [(0.125, 0.12), (0.135, 0.14), (103.67999999999999, 103.68), (2.675, 2.68), (-1.005, -1.0)],
)
def test_round2_half_even_on_printed_value(value, expected):
    assert round2(value) == expected


def test_floor_units_ignores_float_noise():
    assert floor_units(9.999999999) == 10
    assert floor_units(10.069) == 10
    assert floor_units(0.2777) == 0


def test_display_formats():
    assert fmt_qty(72.0) == "72"
    assert fmt_qty(0.28) == "0.28"
    assert fmt_qty(-0.001) == "0"
    assert fmt_money(1036.8) == "1,036.80"
    assert fmt_money("n/a") == "n/a"


@pytest.mark.parametrize(
    "raw, expected",
    [("1,44", 1.44), (" 2 ", 2.0), ("", 0.0), (None, 0.0), (3, 3.0)],
)
def test_edit_values_accepted(raw, expected):
    assert parse_edit_value(raw) == expected


@pytest.mark.parametrize("raw", ["-0.5", "abc", "nan", "inf", "1.2.3"])
def test_edit_values_rejected(raw):
    assert parse_edit_value(raw) is None


def test_try_parse_float_reports_failure():
    assert try_parse_float(object()) == (False, None)
