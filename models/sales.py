"""
Data models for finalized sales and the rankings derived from them.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .cart import CartLine, PromoSnapshot
from .enums import OrderType, PaymentMethod


class OrderLine(BaseModel):
    """Immutable copy of a cart line as it was sold."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    quantity: int = Field(ge=1)
    price: float
    cost: float
    note: str = ""
    modifiers: tuple[str, ...] = ()
    promo: PromoSnapshot | None = None
    is_manual: bool = False
    from_best_seller: bool = False

    @classmethod
    def from_cart_line(cls, line: CartLine) -> "OrderLine":
        return cls(
            product_id=line.product_id,
            name=line.name,
            quantity=line.quantity,
            price=line.price,
            cost=line.cost,
            note=line.note,
            modifiers=tuple(line.modifiers),
            promo=line.promo,
            is_manual=line.is_manual,
            from_best_seller=line.from_best_seller,
        )

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Order(BaseModel):
    """A finalized transaction. Created once by settlement, never mutated."""

    model_config = ConfigDict(frozen=True)

    order_id: str = Field(default_factory=lambda: f"T{uuid.uuid4().hex[:12].upper()}")
    timestamp: datetime
    lines: tuple[OrderLine, ...]
    subtotal: float
    cost: float
    tax_rate: float = 0.0
    tax: float = 0.0
    total: float
    profit: float
    payment_method: PaymentMethod
    tendered: float | None = None
    change: float = 0.0
    customer_id: str | None = None
    customer_name: str | None = None
    table_number: str | None = None
    order_type: OrderType = OrderType.TAKE_AWAY

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass(frozen=True)
class RankedProduct:
    """A product's position in a rolling-window sales ranking."""

    product_id: str
    name: str
    window_days: int
    quantity_sold: int
    revenue: float
    rank: int
