from datetime import timedelta

import pytest
from pydantic import ValidationError

from tests.factories import NOW, make_product


def test_product_defaults():
    product = make_product()
    assert product.unit == "pcs"
    assert product.is_promo is False
    assert product.best_seller_rank is None
    assert product.is_best_seller is False


def test_promo_price_must_be_below_price():
    with pytest.raises(ValidationError):
        make_product(price=30000, is_promo=True, promo_price=30000)


def test_negative_stock_rejected_on_assignment():
    product = make_product()
    with pytest.raises(ValidationError):
        product.stock = -1


def test_promo_active_and_effective_price():
    product = make_product(price=40000, is_promo=True, promo_price=30000)
    assert product.is_promo_active(NOW)
    assert product.effective_price(NOW) == 30000
    assert product.discount_percent(NOW) == pytest.approx(25.0)


def test_promo_without_price_is_inactive():
    product = make_product(is_promo=True)
    assert not product.is_promo_active(NOW)
    assert product.effective_price(NOW) == product.price
    assert product.discount_percent(NOW) == 0.0


def test_promo_outside_its_dates_is_inactive():
    product = make_product(
        price=40000,
        is_promo=True,
        promo_price=30000,
        promo_start=NOW - timedelta(days=7),
        promo_end=NOW - timedelta(days=1),
    )
    assert not product.is_promo_active(NOW)
    assert product.is_promo_active(NOW - timedelta(days=3))
    assert product.effective_price(NOW) == 40000


def test_promo_not_yet_started():
    product = make_product(
        price=40000, is_promo=True, promo_price=30000, promo_start=NOW + timedelta(hours=1)
    )
    assert not product.is_promo_active(NOW)


def test_promotional_flag_ignores_promo_dates():
    product = make_product(
        price=40000, is_promo=True, promo_price=30000, promo_end=NOW - timedelta(days=1)
    )
    assert product.is_promotional
    assert product.promo_discount_percent == pytest.approx(25.0)
    assert product.discount_percent(NOW) == 0.0
    assert not make_product(is_promo=True).is_promotional
    assert make_product(is_promo=True).promo_discount_percent == 0.0


@pytest.mark.parametrize(
    "stock, min_stock, low, out",
    [
        (0, 5, False, True),
        (3, 5, True, False),
        (5, 5, True, False),
        (6, 5, False, False),
    ],
)
def test_stock_flags(stock, min_stock, low, out):
    product = make_product(stock=stock, min_stock=min_stock)
    assert product.is_low_stock is low
    assert product.is_out_of_stock is out
