"""
Data models for the order currently being built at the till.
Includes PromoSnapshot, CartLine and LinePatch.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

MANUAL_ID_PREFIX = "manual-"


class PromoSnapshot(BaseModel):
    """Promo values copied into a line when it was priced."""

    model_config = ConfigDict(frozen=True)

    original_price: float
    promo_price: float
    label: str | None = None


@dataclass
class CartLine:
    """
    One row of the in-progress order.

    `price` and `cost` are values captured when the line was created (or
    explicitly repriced); they never follow later changes to the product.
    """

    product_id: str
    name: str
    quantity: int
    price: float
    cost: float
    note: str = ""
    modifiers: list[str] = field(default_factory=list)
    promo: PromoSnapshot | None = None
    is_manual: bool = False
    from_best_seller: bool = False

    @property
    def is_plain(self) -> bool:
        """A catalog line with no note and no modifiers; repeat adds merge into it."""
        return not self.is_manual and not self.note and not self.modifiers

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    @property
    def line_cost(self) -> float:
        return self.cost * self.quantity


@dataclass
class LinePatch:
    """Partial edit of a cart line. Fields left as None are not touched."""

    quantity: int | None = None
    note: str | None = None
    modifiers: list[str] | None = None

    def is_empty(self) -> bool:
        return self.quantity is None and self.note is None and self.modifiers is None
