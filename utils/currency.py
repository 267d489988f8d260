"""
Money formatting for receipts and operator-facing messages.
"""

from models.enums import CurrencyPosition, ThousandsSeparator

CURRENCY_SYMBOLS: dict[str, str] = {
    "IDR": "Rp",
    "USD": "$",
    "EUR": "€",
    "SGD": "S$",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "MYR": "RM",
    "THB": "฿",
    "PHP": "₱",
    "INR": "₹",
}

_SEPARATORS = {
    ThousandsSeparator.COMMA: ",",
    ThousandsSeparator.DOT: ".",
    ThousandsSeparator.SPACE: " ",
    ThousandsSeparator.NONE: "",
}


def get_currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency.upper(), currency)


def format_currency(
    amount: float,
    currency: str = "IDR",
    position: CurrencyPosition = CurrencyPosition.BEFORE,
    decimal_places: int = 0,
    thousands_separator: ThousandsSeparator = ThousandsSeparator.COMMA,
) -> str:
    """
    Format an amount with the currency symbol, e.g. ``Rp105,000``.

    The decimal mark is whichever of "." and "," is not used for grouping.
    """
    separator = _SEPARATORS[ThousandsSeparator(thousands_separator)]
    decimal_mark = "," if separator == "." else "."
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.{decimal_places}f}"
    whole, _, fraction = grouped.partition(".")
    number = whole.replace(",", separator)
    if fraction:
        number = f"{number}{decimal_mark}{fraction}"

    symbol = get_currency_symbol(currency)
    position = CurrencyPosition(position)
    if position == CurrencyPosition.BEFORE:
        return f"{sign}{symbol}{number}"
    if position == CurrencyPosition.BEFORE_SPACE:
        return f"{sign}{symbol} {number}"
    if position == CurrencyPosition.AFTER:
        return f"{sign}{number}{symbol}"
    return f"{sign}{number} {symbol}"
