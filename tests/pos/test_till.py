from datetime import timedelta

import pytest

from config.config import BestSellerConfig, BusinessSettings
from connectors.in_memory_store import InMemoryDataStore
from models.enums import CartState, PaymentMethod
from models.exceptions import InsufficientPaymentError
from pos.till import TillSession
from tests.factories import NOW, make_order, make_product


@pytest.fixture
def store():
    history = [
        make_order([("P2", 4, 25000)], timestamp=NOW - timedelta(days=1)),
        make_order([("P3", 9, 20000)], timestamp=NOW - timedelta(days=6)),
    ]
    return InMemoryDataStore(
        [
            make_product("P1", name="Caffe Latte", stock=5),
            make_product("P2", name="Espresso", price=25000, cost=8000, stock=40),
            make_product("P3", name="Flat White", price=20000, cost=7000, stock=40),
        ],
        history,
    )


@pytest.fixture
def session(store):
    return TillSession(store, settings=BusinessSettings(tax_rate=0), best_seller=BestSellerConfig())


def test_ranking_uses_session_window(session):
    assert [entry.product_id for entry in session.ranking(now=NOW)] == ["P2"]
    session.set_window(7)
    assert [entry.product_id for entry in session.ranking(now=NOW)] == ["P3", "P2"]


def test_ranking_is_cached_until_a_sale(session):
    session.ranking(now=NOW)
    session.ranking(now=NOW)
    assert session.ranking_cache.hits == 1

    session.add_product("P1", now=NOW)
    session.checkout(PaymentMethod.CARD, now=NOW)
    ranking = session.ranking(now=NOW)
    assert session.ranking_cache.misses == 2
    assert {entry.product_id for entry in ranking} == {"P1", "P2"}


def test_set_window_accepts_any_positive_days(session):
    session.set_window(5)
    assert session.best_seller.window_days == 5
    with pytest.raises(ValueError):
        session.set_window(0)
    assert session.best_seller.window_days == 5


def test_add_product_tags_best_sellers(session):
    session.add_product("P2", now=NOW)
    session.add_product("P1", now=NOW)
    flags = {line.product_id: line.from_best_seller for line in session.cart.lines}
    assert flags == {"P2": True, "P1": False}


def test_catalog_view(session):
    view = session.catalog(now=NOW)
    assert view.products[0].product_id == "P2"
    assert [p.product_id for p in view.top_best_sellers] == ["P2"]
    assert session.catalog("latte", now=NOW).products[0].name == "Caffe Latte"


def test_checkout_starts_new_cart(session, store):
    session.add_product("P1", now=NOW)
    settled_cart = session.cart

    order = session.checkout(PaymentMethod.CASH, tendered=50000, now=NOW)

    assert settled_cart.state == CartState.SETTLED
    assert session.cart is not settled_cart
    assert session.cart.state == CartState.EMPTY
    assert session.last_order is order
    assert order.change == 15000
    assert store.get_product("P1").stock == 4


def test_failed_checkout_keeps_cart(session):
    session.add_product("P1", now=NOW)
    cart = session.cart
    with pytest.raises(InsufficientPaymentError):
        session.checkout(PaymentMethod.CASH, tendered=100, now=NOW)
    assert session.cart is cart
    assert cart.state == CartState.BUILDING
    assert session.last_order is None


def test_new_cart_abandons_open_lines(session):
    session.add_product("P1", now=NOW)
    old = session.cart
    session.new_cart()
    assert old.state == CartState.ABANDONED
    assert len(session.cart) == 0


def test_abandon_cart(session):
    old = session.cart
    session.abandon_cart()
    assert old.state == CartState.ABANDONED
    assert session.cart.is_open


def test_receipt_needs_an_order(session):
    with pytest.raises(ValueError):
        session.receipt()
    session.add_product("P1", now=NOW)
    order = session.checkout(PaymentMethod.CARD, now=NOW)
    assert order.order_id in session.receipt()
