"""
Centralized Enum definitions for the project.
"""

from enum import Enum


class PaymentMethod(str, Enum):
    """Tender types accepted at the till"""

    CASH = "cash"
    CARD = "card"
    QRIS = "qris"


class CartState(str, Enum):
    """Lifecycle states of an in-progress cart"""

    EMPTY = "empty"  # No lines yet
    BUILDING = "building"  # At least one line
    SETTLED = "settled"  # Handed off to checkout, terminal
    ABANDONED = "abandoned"  # Discarded without settlement, terminal


class OrderType(str, Enum):
    """How the order is served"""

    DINE_IN = "dine-in"
    TAKE_AWAY = "take-away"


class CurrencyPosition(str, Enum):
    """Where the currency symbol goes relative to the amount"""

    BEFORE = "before"
    AFTER = "after"
    BEFORE_SPACE = "before-space"
    AFTER_SPACE = "after-space"


class ThousandsSeparator(str, Enum):
    """Digit grouping character used when formatting money"""

    COMMA = "comma"
    DOT = "dot"
    SPACE = "space"
    NONE = "none"
