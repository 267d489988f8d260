"""
Module: connectors.in_memory_store

Provides an in-memory inventory and sales ledger implementing the DataStore
protocol, for tests, demos and single-till sessions without a database.
"""

import logging
from collections import defaultdict

from config.config import LedgerConfig
from models.catalog import Product
from models.exceptions import (
    InvalidQuantityError,
    PosError,
    ProductNotFoundError,
    SettlementError,
    StockExceededError,
)
from models.sales import Order

logger = logging.getLogger(__name__)


class InMemoryDataStore:
    """
    In-memory product catalog plus an append-only, newest-first order ledger.
    """

    def __init__(
        self,
        products: list[Product] | None = None,
        orders: list[Order] | None = None,
        config: LedgerConfig | None = None,
    ):
        self.config = config or LedgerConfig()
        self._products: dict[str, Product] = {}
        self._history_version = 0
        self.catalog_version = 0
        for product in products or []:
            self.add_product(product)
        # Newest first, like the till's history view
        self._orders: list[Order] = sorted(
            orders or [], key=lambda o: o.timestamp, reverse=True
        )[: self.config.max_orders]
        self._order_ids: set[str] = {o.order_id for o in self._orders}

    @property
    def history_version(self) -> int:
        return self._history_version

    # --- Catalog --- #

    def get_products(self) -> list[Product]:
        return list(self._products.values())

    def get_product(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def add_product(self, product: Product) -> None:
        if product.product_id in self._products:
            raise ValueError(f"Product {product.product_id} already exists")
        self._products[product.product_id] = product
        self.catalog_version += 1

    def update_product(self, product: Product) -> None:
        """Replace the stored product with the same id."""
        if product.product_id not in self._products:
            raise ProductNotFoundError(product.product_id)
        self._products[product.product_id] = product
        self.catalog_version += 1

    def remove_product(self, product_id: str) -> None:
        if self._products.pop(product_id, None) is None:
            raise ProductNotFoundError(product_id)
        self.catalog_version += 1

    def decrement_stock(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if product.stock < quantity:
            raise StockExceededError(product_id, quantity, product.stock)
        product.stock -= quantity
        logger.debug(f"Stock for {product_id} decremented by {quantity} to {product.stock}")

    # --- Ledger --- #

    def get_order_history(self) -> list[Order]:
        return list(self._orders)

    def get_order(self, order_id: str) -> Order | None:
        for order in self._orders:
            if order.order_id == order_id:
                return order
        return None

    def append_order(self, order: Order) -> None:
        if order.order_id in self._order_ids:
            raise SettlementError(
                f"Order {order.order_id} is already in the ledger", order.order_id
            )
        self._orders.insert(0, order)
        self._order_ids.add(order.order_id)
        if len(self._orders) > self.config.max_orders:
            dropped = self._orders[self.config.max_orders :]
            del self._orders[self.config.max_orders :]
            self._order_ids.difference_update(o.order_id for o in dropped)
            logger.info(f"Ledger trimmed {len(dropped)} oldest order(s)")
        self._history_version += 1

    def commit_settlement(self, order: Order) -> None:
        """
        Decrement stock for every catalog line and append the order, all or
        nothing. Stock is checked for the whole order before anything changes.
        """
        demand: dict[str, int] = defaultdict(int)
        for line in order.lines:
            if not line.is_manual:
                demand[line.product_id] += line.quantity

        if order.order_id in self._order_ids:
            raise SettlementError(
                f"Order {order.order_id} is already in the ledger", order.order_id
            )
        for product_id, quantity in demand.items():
            product = self._products.get(product_id)
            if product is None:
                logger.error(f"Order {order.order_id} references unknown product {product_id}")
                raise ProductNotFoundError(product_id)
            if product.stock < quantity:
                raise SettlementError(
                    f"Order {order.order_id} needs {quantity} of {product_id}, "
                    f"only {product.stock} in stock",
                    order.order_id,
                )

        applied: list[tuple[str, int]] = []
        try:
            for product_id, quantity in demand.items():
                self.decrement_stock(product_id, quantity)
                applied.append((product_id, quantity))
            self.append_order(order)
        except PosError as e:
            for product_id, quantity in applied:
                self._products[product_id].stock += quantity
            logger.error(f"Settlement of {order.order_id} rolled back: {e}")
            if isinstance(e, SettlementError):
                raise
            raise SettlementError(str(e), order.order_id) from e

        logger.info(
            f"Settled order {order.order_id}: {order.item_count} item(s), total {order.total}"
        )
