"""
Cart engine: the mutable, single-owner order being built at the till.

Every mutating call re-reads the product from the data store, so stock
changes made elsewhere since a line was added are always honoured. A call
either applies completely or raises and leaves the cart as it was.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime

from config.config import CartConfig
from connectors.data_store import DataStore
from models.cart import MANUAL_ID_PREFIX, CartLine, LinePatch, PromoSnapshot
from models.catalog import Product
from models.enums import CartState, OrderType
from models.exceptions import (
    CartClosedError,
    CartLineNotFoundError,
    InvalidPriceError,
    InvalidQuantityError,
    ProductNotFoundError,
    StockExceededError,
)

from .checkout import OrderTotals, compute_totals

logger = logging.getLogger(__name__)


class Cart:
    """
    In-progress order for one operator session.

    States: EMPTY (no lines) -> BUILDING (one or more lines) -> SETTLED or
    ABANDONED. Settled and abandoned carts reject further changes; the session
    starts a new cart instead.
    """

    def __init__(self, store: DataStore, config: CartConfig | None = None):
        self.store = store
        self.config = config or CartConfig()
        self._lines: list[CartLine] = []
        self._closed_as: CartState | None = None
        self.order_id: str | None = None
        self.customer_id: str | None = None
        self.customer_name: str | None = None
        self.table_number: str | None = None

    # --- State --- #

    @property
    def state(self) -> CartState:
        if self._closed_as is not None:
            return self._closed_as
        return CartState.BUILDING if self._lines else CartState.EMPTY

    @property
    def is_open(self) -> bool:
        return self._closed_as is None

    @property
    def lines(self) -> tuple[CartLine, ...]:
        """Copies of the current lines; editing them does not touch the cart."""
        return tuple(replace(line, modifiers=list(line.modifiers)) for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self._lines)

    @property
    def total_cost(self) -> float:
        return sum(line.line_cost for line in self._lines)

    def totals(self, tax_rate_percent: float) -> OrderTotals:
        """Preview of what settlement would charge at the given tax rate."""
        return compute_totals(self._lines, tax_rate_percent)

    @property
    def order_type(self) -> OrderType:
        return OrderType.DINE_IN if self.table_number else OrderType.TAKE_AWAY

    def quantity_of(self, product_id: str) -> int:
        """Units of a product across all of its lines."""
        return self._quantity_in_cart(product_id)

    # --- Lines --- #

    def add_catalog_product(
        self,
        product_id: str,
        *,
        from_best_seller: bool | None = None,
        now: datetime | None = None,
    ) -> int | None:
        """
        Add one unit of a catalog product.

        Merges into the product's plain line (no note, no modifiers) when one
        exists; otherwise opens a new line priced at the current promo or
        regular price. Products with no stock are ignored.

        Returns:
            int | None: index of the affected line, or None if nothing was added.
        """
        self._ensure_open()
        product = self._require_product(product_id)
        if product.stock <= 0:
            logger.info(f"Product {product_id} is out of stock, not added")
            return None

        requested = self._quantity_in_cart(product_id) + 1
        if requested > product.stock:
            logger.warning(
                f"Cannot add {product_id}: cart would hold {requested}, stock is {product.stock}"
            )
            raise StockExceededError(product_id, requested, product.stock)

        for index, line in enumerate(self._lines):
            if line.product_id == product_id and line.is_plain:
                line.quantity += 1
                logger.debug(f"Merged {product_id} into line {index}, quantity {line.quantity}")
                return index

        line = self._price_line(product, now)
        if from_best_seller is not None:
            line.from_best_seller = from_best_seller
        self._lines.append(line)
        logger.debug(f"Added {product_id} at {line.price} as line {len(self._lines) - 1}")
        return len(self._lines) - 1

    def add_manual_line(
        self, name: str, unit_price: float, description: str | None = None
    ) -> int:
        """
        Add an ad-hoc item that is not in the catalog.

        Manual lines are never stock checked. Their cost is estimated as a
        fixed share of the price since no real cost is known.
        """
        self._ensure_open()
        name = (name or "").strip()
        if not name:
            raise ValueError("Manual item needs a name")
        if unit_price is None or unit_price <= 0:
            raise InvalidPriceError(f"Manual item price must be positive, got {unit_price}")

        label = name[0].upper() + name[1:]
        note = label
        if description and description.strip():
            note = f"{label} - {description.strip()}"
        self._lines.append(
            CartLine(
                product_id=f"{MANUAL_ID_PREFIX}{uuid.uuid4().hex[:12]}",
                name=label,
                quantity=1,
                price=float(unit_price),
                cost=float(unit_price) * self.config.manual_cost_ratio,
                note=note,
                is_manual=True,
            )
        )
        return len(self._lines) - 1

    def set_quantity(self, index: int, quantity: int) -> None:
        self._ensure_open()
        line = self._line_at(index)
        self._validate_quantity(index, line, quantity)
        line.quantity = quantity

    def adjust_quantity(self, index: int, delta: int) -> None:
        self._ensure_open()
        line = self._line_at(index)
        self.set_quantity(index, line.quantity + delta)

    def remove_line(self, index: int) -> CartLine:
        self._ensure_open()
        self._line_at(index)
        return self._lines.pop(index)

    def update_line(self, index: int, patch: LinePatch | None = None, **changes) -> None:
        """
        Apply a partial edit (quantity, note, modifiers) to a line.
        Either pass a LinePatch or the same fields as keyword arguments.
        """
        self._ensure_open()
        if patch is None:
            patch = LinePatch(**changes)
        elif changes:
            raise TypeError("Pass either a LinePatch or keyword changes, not both")
        line = self._line_at(index)
        if patch.quantity is not None:
            self._validate_quantity(index, line, patch.quantity)

        if patch.quantity is not None:
            line.quantity = patch.quantity
        if patch.note is not None:
            line.note = patch.note.strip()
        if patch.modifiers is not None:
            # A bare string is one modifier, not a sequence of characters
            modifiers = patch.modifiers
            if isinstance(modifiers, str):
                modifiers = [modifiers]
            line.modifiers = list(modifiers)

    def reprice_line(self, index: int, *, now: datetime | None = None) -> None:
        """Re-capture price, cost and promo from the product as it is now."""
        self._ensure_open()
        line = self._line_at(index)
        if line.is_manual:
            raise InvalidPriceError("Manual lines have no catalog price to refresh")
        fresh = self._price_line(self._require_product(line.product_id), now)
        line.name = fresh.name
        line.price = fresh.price
        line.cost = fresh.cost
        line.promo = fresh.promo

    # --- Order details --- #

    def assign_customer(self, customer_id: str | None, customer_name: str | None = None) -> None:
        self._ensure_open()
        self.customer_id = customer_id
        self.customer_name = customer_name

    def set_table(self, table_number: str | None) -> None:
        self._ensure_open()
        self.table_number = (table_number or "").strip() or None

    # --- Lifecycle --- #

    def abandon(self) -> None:
        self._ensure_open()
        self._closed_as = CartState.ABANDONED
        logger.info(f"Cart abandoned with {len(self._lines)} line(s)")

    def mark_settled(self, order_id: str) -> None:
        """Close the cart after its order has been committed."""
        self._ensure_open()
        self._closed_as = CartState.SETTLED
        self.order_id = order_id

    # --- Helpers --- #

    def _ensure_open(self) -> None:
        if self._closed_as is not None:
            raise CartClosedError(f"Cart is {self._closed_as.value}")

    def _line_at(self, index: int) -> CartLine:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._lines):
            raise CartLineNotFoundError(f"No cart line at index {index!r}")
        return self._lines[index]

    def _require_product(self, product_id: str) -> Product:
        product = self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _quantity_in_cart(self, product_id: str, exclude_index: int | None = None) -> int:
        return sum(
            line.quantity
            for index, line in enumerate(self._lines)
            if line.product_id == product_id and index != exclude_index
        )

    def _validate_quantity(self, index: int, line: CartLine, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError(quantity)
        if line.is_manual:
            return
        product = self._require_product(line.product_id)
        requested = self._quantity_in_cart(line.product_id, exclude_index=index) + quantity
        if requested > product.stock:
            logger.warning(
                f"Quantity {quantity} for {line.product_id} rejected: cart would hold "
                f"{requested}, stock is {product.stock}"
            )
            raise StockExceededError(line.product_id, requested, product.stock)

    @staticmethod
    def _price_line(product: Product, now: datetime | None) -> CartLine:
        at = now or datetime.now()
        promo = None
        if product.is_promo_active(at):
            promo = PromoSnapshot(
                original_price=product.price,
                promo_price=product.promo_price,
                label=product.promo_label,
            )
        return CartLine(
            product_id=product.product_id,
            name=product.name,
            quantity=1,
            price=product.effective_price(at),
            cost=product.cost,
            promo=promo,
            from_best_seller=product.is_best_seller,
        )
