"""
Module: connectors.data_store

Interface the POS core expects from the inventory / sales-ledger side of the
store. The core never persists anything itself; it reads products and order
history through this protocol and hands finished orders back to it.
"""

from typing import Protocol, runtime_checkable

from models.catalog import Product
from models.sales import Order


@runtime_checkable
class DataStore(Protocol):
    """Inventory and sales-ledger collaborator."""

    @property
    def history_version(self) -> int:
        """Counter bumped on every ledger append; used as a cache key."""
        ...

    def get_products(self) -> list[Product]: ...

    def get_product(self, product_id: str) -> Product | None: ...

    def get_order_history(self) -> list[Order]: ...

    def decrement_stock(self, product_id: str, quantity: int) -> None: ...

    def append_order(self, order: Order) -> None: ...

    def commit_settlement(self, order: Order) -> None:
        """
        Append the order and decrement stock for each catalog line as one
        unit: either both are applied or neither is.
        """
        ...
