import pytest

from models.enums import CurrencyPosition, ThousandsSeparator
from utils.currency import format_currency, get_currency_symbol


def test_format_currency_defaults_to_rupiah():
    assert format_currency(105000) == "Rp105,000"


def test_format_currency_rounds_to_whole_units():
    assert format_currency(11550.4) == "Rp11,550"


@pytest.mark.parametrize(
    "position, expected",
    [
        (CurrencyPosition.BEFORE, "$1,234.50"),
        (CurrencyPosition.BEFORE_SPACE, "$ 1,234.50"),
        (CurrencyPosition.AFTER, "1,234.50$"),
        (CurrencyPosition.AFTER_SPACE, "1,234.50 $"),
    ],
)
def test_format_currency_symbol_position(position, expected):
    assert format_currency(1234.5, "USD", position, 2) == expected


def test_format_currency_dot_grouping_uses_comma_decimal_mark():
    result = format_currency(
        1234567.891, "EUR", CurrencyPosition.AFTER_SPACE, 2, ThousandsSeparator.DOT
    )
    assert result == "1.234.567,89 €"


def test_format_currency_without_grouping():
    assert format_currency(95000, thousands_separator=ThousandsSeparator.NONE) == "Rp95000"


def test_format_currency_space_grouping():
    assert format_currency(95000, thousands_separator=ThousandsSeparator.SPACE) == "Rp95 000"


def test_format_currency_negative_amount():
    assert format_currency(-5000) == "-Rp5,000"


def test_unknown_currency_falls_back_to_code():
    assert get_currency_symbol("xyz") == "xyz"
    assert get_currency_symbol("idr") == "Rp"
