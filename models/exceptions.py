"""
Exception types raised by the cart, ranking and checkout engines.

Every error is locally recoverable: the operation that raised it left the cart
and the data store exactly as they were.
"""


class PosError(Exception):
    """Base class for point-of-sale domain errors."""


class StockExceededError(PosError):
    """A cart mutation would push a product's cart quantity past its stock."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Requested {requested} of {product_id} but only {available} in stock"
        )


class InsufficientPaymentError(PosError):
    """Cash tendered is less than the order total."""

    def __init__(self, total: float, tendered: float | None):
        self.total = total
        self.tendered = tendered
        super().__init__(f"Cash tendered {tendered} is less than total {total}")


class InvalidQuantityError(PosError, ValueError):
    """A requested line quantity is zero or negative."""

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(f"Quantity must be at least 1, got {quantity}")


class InvalidPriceError(PosError, ValueError):
    """A manual line was given a non-positive unit price."""


class ProductNotFoundError(PosError, KeyError):
    """A catalog-backed line references a product the store does not know."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(product_id)

    def __str__(self) -> str:
        return f"Product {self.product_id} not found"


class EmptyCartError(PosError):
    """Settlement was attempted on a cart with no lines."""


class CartLineNotFoundError(PosError, IndexError):
    """A line index does not point at an existing cart line."""


class CartClosedError(PosError):
    """The cart was already settled or abandoned."""


class SettlementError(PosError):
    """The data store refused to commit a settlement."""

    def __init__(self, message: str, order_id: str | None = None):
        self.order_id = order_id
        super().__init__(message)
