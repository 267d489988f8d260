from datetime import timedelta

import pytest

from config.config import LedgerConfig
from connectors.data_store import DataStore
from connectors.in_memory_store import InMemoryDataStore
from models.exceptions import (
    InvalidQuantityError,
    ProductNotFoundError,
    SettlementError,
    StockExceededError,
)
from tests.factories import NOW, make_order, make_product


@pytest.fixture
def store():
    return InMemoryDataStore([make_product("P1", stock=5), make_product("P2", stock=1)])


class FailingAppendStore(InMemoryDataStore):
    """Ledger write fails after stock has been decremented."""

    def append_order(self, order):
        raise SettlementError("ledger unavailable", order.order_id)


def test_store_satisfies_protocol(store):
    assert isinstance(store, DataStore)


# --- Catalog --- #


def test_store_built_with_products():
    store = InMemoryDataStore([make_product("P1", stock=5), make_product("P2")])
    assert store.catalog_version == 2
    assert store.history_version == 0
    assert [p.product_id for p in store.get_products()] == ["P1", "P2"]
    assert store.get_product("P1").stock == 5


def test_add_duplicate_product(store):
    with pytest.raises(ValueError):
        store.add_product(make_product("P1"))


def test_update_and_remove_product(store):
    store.update_product(make_product("P1", name="Renamed"))
    assert store.get_product("P1").name == "Renamed"
    store.remove_product("P1")
    assert store.get_product("P1") is None
    with pytest.raises(ProductNotFoundError):
        store.remove_product("P1")
    with pytest.raises(ProductNotFoundError):
        store.update_product(make_product("P9"))


def test_catalog_version_tracks_changes(store):
    version = store.catalog_version
    store.update_product(make_product("P2"))
    assert store.catalog_version == version + 1


def test_decrement_stock(store):
    store.decrement_stock("P1", 2)
    assert store.get_product("P1").stock == 3
    with pytest.raises(StockExceededError):
        store.decrement_stock("P1", 4)
    with pytest.raises(InvalidQuantityError):
        store.decrement_stock("P1", 0)
    with pytest.raises(ProductNotFoundError):
        store.decrement_stock("P9", 1)
    assert store.get_product("P1").stock == 3


# --- Ledger --- #


def test_history_is_newest_first():
    old = make_order([("P1", 1, 1000)], timestamp=NOW - timedelta(days=2), order_id="OLD")
    new = make_order([("P1", 1, 1000)], timestamp=NOW, order_id="NEW")
    store = InMemoryDataStore(orders=[old, new])
    assert [o.order_id for o in store.get_order_history()] == ["NEW", "OLD"]

    store.append_order(make_order([("P1", 1, 1000)], order_id="NEWEST"))
    assert store.get_order_history()[0].order_id == "NEWEST"
    assert store.get_order("OLD") is old
    assert store.get_order("MISSING") is None


def test_append_bumps_history_version(store):
    assert store.history_version == 0
    store.append_order(make_order([("P1", 1, 1000)]))
    assert store.history_version == 1


def test_append_rejects_duplicate_id(store):
    store.append_order(make_order([("P1", 1, 1000)], order_id="T1"))
    with pytest.raises(SettlementError):
        store.append_order(make_order([("P1", 1, 1000)], order_id="T1"))
    assert len(store.get_order_history()) == 1


def test_ledger_is_capped():
    store = InMemoryDataStore(config=LedgerConfig(max_orders=2))
    for index in range(3):
        store.append_order(make_order([("P1", 1, 1000)], order_id=f"T{index}"))
    assert [o.order_id for o in store.get_order_history()] == ["T2", "T1"]
    # A trimmed id may be reused
    store.append_order(make_order([("P1", 1, 1000)], order_id="T0"))


def test_history_copy_cannot_modify_ledger(store):
    store.get_order_history().append(make_order([("P1", 1, 1000)]))
    assert store.get_order_history() == []


# --- Settlement --- #


def test_commit_settlement_decrements_and_appends(store):
    order = make_order([("P1", 2, 1000), ("P1", 1, 1000), ("P2", 1, 1000)])
    store.commit_settlement(order)
    assert store.get_product("P1").stock == 2
    assert store.get_product("P2").stock == 0
    assert store.get_order_history() == [order]
    assert store.history_version == 1


def test_commit_settlement_checks_whole_order_first(store):
    order = make_order([("P1", 2, 1000), ("P2", 2, 1000)])
    with pytest.raises(SettlementError, match="only 1 in stock"):
        store.commit_settlement(order)
    assert store.get_product("P1").stock == 5
    assert store.get_order_history() == []
    assert store.history_version == 0


def test_commit_settlement_unknown_product(store):
    with pytest.raises(ProductNotFoundError):
        store.commit_settlement(make_order([("P1", 1, 1000), ("P9", 1, 1000)]))
    assert store.get_product("P1").stock == 5
    assert store.get_order_history() == []


def test_commit_settlement_duplicate_order(store):
    order = make_order([("P1", 1, 1000)])
    store.commit_settlement(order)
    with pytest.raises(SettlementError):
        store.commit_settlement(order)
    assert store.get_product("P1").stock == 4


def test_commit_settlement_rolls_back_stock_when_append_fails(caplog):
    store = FailingAppendStore([make_product("P1", stock=5)])
    with pytest.raises(SettlementError, match="ledger unavailable"):
        store.commit_settlement(make_order([("P1", 3, 1000)]))
    assert store.get_product("P1").stock == 5
    assert "rolled back" in caplog.text
