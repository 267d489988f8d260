"""
Checkout settlement: turns a cart into an immutable Order.

Totals are computed from the prices captured on the cart lines. The data
store commits the order and the matching stock decrement as one unit; the
cart is only marked settled once that commit has succeeded.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from config.config import BusinessSettings
from connectors.data_store import DataStore
from models.cart import CartLine
from models.enums import PaymentMethod
from models.exceptions import (
    CartClosedError,
    EmptyCartError,
    InsufficientPaymentError,
    PosError,
    ProductNotFoundError,
    SettlementError,
)
from models.sales import Order, OrderLine

if TYPE_CHECKING:
    from .cart import Cart

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    cost: float
    tax_rate: float
    tax: float
    total: float
    profit: float  # Tax is passed through, never profit


def _money(amount: float) -> float:
    return round(amount, 2)


def compute_totals(
    lines: Iterable[CartLine | OrderLine], tax_rate_percent: float
) -> OrderTotals:
    """
    subtotal = sum(price * qty), cost = sum(cost * qty),
    tax = subtotal * rate / 100, total = subtotal + tax, profit = subtotal - cost.
    """
    if tax_rate_percent < 0:
        raise ValueError(f"Tax rate must not be negative, got {tax_rate_percent}")
    subtotal = 0.0
    cost = 0.0
    for line in lines:
        subtotal += line.price * line.quantity
        cost += line.cost * line.quantity
    tax = subtotal * tax_rate_percent / 100
    return OrderTotals(
        subtotal=_money(subtotal),
        cost=_money(cost),
        tax_rate=float(tax_rate_percent),
        tax=_money(tax),
        total=_money(subtotal + tax),
        profit=_money(subtotal - cost),
    )


def build_order(
    cart: "Cart",
    method: PaymentMethod | str,
    tax_rate_percent: float,
    tendered: float | None = None,
    *,
    now: datetime | None = None,
    order_id: str | None = None,
) -> Order:
    """
    Validate payment and snapshot the cart into an Order without committing it.

    Raises:
        CartClosedError: the cart was already settled or abandoned.
        EmptyCartError: the cart has no lines.
        InsufficientPaymentError: cash tendered is missing or below the total.
    """
    if not cart.is_open:
        raise CartClosedError(f"Cart is {cart.state.value}")
    if len(cart) == 0:
        raise EmptyCartError("Cannot settle an empty cart")
    method = PaymentMethod(method)
    totals = cart.totals(tax_rate_percent)

    recorded_tendered = None
    change = 0.0
    if method == PaymentMethod.CASH:
        if tendered is None or tendered < totals.total:
            logger.warning(f"Cash payment of {tendered} short of total {totals.total}")
            raise InsufficientPaymentError(totals.total, tendered)
        recorded_tendered = float(tendered)
        change = _money(tendered - totals.total)

    fields = {}
    if order_id is not None:
        fields["order_id"] = order_id
    return Order(
        timestamp=now or datetime.now(),
        lines=tuple(OrderLine.from_cart_line(line) for line in cart.lines),
        subtotal=totals.subtotal,
        cost=totals.cost,
        tax_rate=totals.tax_rate,
        tax=totals.tax,
        total=totals.total,
        profit=totals.profit,
        payment_method=method,
        tendered=recorded_tendered,
        change=change,
        customer_id=cart.customer_id,
        customer_name=cart.customer_name,
        table_number=cart.table_number,
        order_type=cart.order_type,
        **fields,
    )


def settle(
    cart: "Cart",
    method: PaymentMethod | str,
    tax_rate_percent: float,
    tendered: float | None = None,
    *,
    store: DataStore,
    now: datetime | None = None,
) -> Order:
    """
    Finalize the cart: build the order, commit it through the data store
    (ledger append plus stock decrement, atomically) and close the cart.

    On any failure nothing is committed and the cart stays open. A line whose
    product has left the catalog raises ProductNotFoundError; other store
    refusals surface as SettlementError.
    """
    order = build_order(cart, method, tax_rate_percent, tendered, now=now)
    try:
        store.commit_settlement(order)
    except (SettlementError, ProductNotFoundError):
        raise
    except PosError as e:
        logger.error(f"Data store rejected order {order.order_id}: {e}")
        raise SettlementError(str(e), order.order_id) from e
    cart.mark_settled(order.order_id)
    logger.info(
        f"Order {order.order_id} settled by {order.payment_method.value}: "
        f"total {order.total}, change {order.change}"
    )
    return order


class CheckoutSettlement:
    """Settlement bound to one data store and the business tax settings."""

    def __init__(self, store: DataStore, settings: BusinessSettings | None = None):
        self.store = store
        self.settings = settings or BusinessSettings()

    def settle(
        self,
        cart: "Cart",
        method: PaymentMethod | str,
        tax_rate_percent: float | None = None,
        tendered: float | None = None,
        *,
        now: datetime | None = None,
    ) -> Order:
        """Settle with the configured tax rate unless one is given."""
        rate = self.settings.tax_rate if tax_rate_percent is None else tax_rate_percent
        return settle(cart, method, rate, tendered, store=self.store, now=now)
