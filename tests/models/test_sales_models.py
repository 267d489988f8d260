import pytest
from pydantic import ValidationError

from models.cart import CartLine, LinePatch, PromoSnapshot
from models.enums import OrderType, PaymentMethod
from models.exceptions import (
    CartLineNotFoundError,
    InvalidQuantityError,
    PosError,
    ProductNotFoundError,
    StockExceededError,
)
from models.sales import OrderLine
from tests.factories import make_order


def test_order_line_snapshot_is_independent_of_cart_line():
    line = CartLine(
        product_id="P1",
        name="Espresso",
        quantity=2,
        price=25000,
        cost=8000,
        modifiers=["less sugar"],
        promo=PromoSnapshot(original_price=30000, promo_price=25000, label="Happy hour"),
    )
    order_line = OrderLine.from_cart_line(line)

    line.quantity = 5
    line.modifiers.append("extra ice")

    assert order_line.quantity == 2
    assert order_line.modifiers == ("less sugar",)
    assert order_line.line_total == 50000
    assert order_line.promo.label == "Happy hour"


def test_order_is_immutable():
    order = make_order([("P1", 1, 1000)])
    with pytest.raises(ValidationError):
        order.total = 0


def test_order_defaults():
    order = make_order([("P1", 2, 1000), ("P2", 3, 500)])
    assert order.order_id.startswith("T")
    assert len(order.order_id) == 13
    assert order.item_count == 5
    assert order.order_type == OrderType.TAKE_AWAY
    assert order.payment_method == PaymentMethod.CARD


def test_order_ids_are_unique():
    ids = {make_order([("P1", 1, 1000)]).order_id for _ in range(50)}
    assert len(ids) == 50


def test_order_line_quantity_must_be_positive():
    with pytest.raises(ValidationError):
        OrderLine(product_id="P1", name="Espresso", quantity=0, price=1, cost=1)


def test_cart_line_is_plain():
    line = CartLine(product_id="P1", name="Espresso", quantity=1, price=1, cost=1)
    assert line.is_plain
    line.note = "hot"
    assert not line.is_plain


def test_line_patch_is_empty():
    assert LinePatch().is_empty()
    assert not LinePatch(note="").is_empty()


def test_exception_hierarchy():
    """Domain errors share a base and keep their builtin counterparts."""
    assert issubclass(InvalidQuantityError, ValueError)
    assert issubclass(ProductNotFoundError, KeyError)
    assert issubclass(CartLineNotFoundError, IndexError)
    assert issubclass(StockExceededError, PosError)


def test_exception_messages():
    error = StockExceededError("P2", 6, 5)
    assert (error.product_id, error.requested, error.available) == ("P2", 6, 5)
    assert str(error) == "Requested 6 of P2 but only 5 in stock"
    assert str(ProductNotFoundError("P9")) == "Product P9 not found"
