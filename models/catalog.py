"""
Catalog data models for the point-of-sale core.
Includes the Product model shared by the ranking, catalog and cart engines.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Product(BaseModel):
    """
    A sellable catalog product with its live stock level.

    Products are owned by the inventory side of the store; the POS core reads
    them and only ever changes `stock`, through a settlement commit.
    """

    model_config = ConfigDict(validate_assignment=True)

    product_id: str
    name: str
    category: str
    price: float = Field(ge=0)
    cost: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    min_stock: int = Field(default=0, ge=0)
    unit: str = "pcs"
    description: str | None = None

    # Promotion
    is_promo: bool = False
    promo_price: float | None = None
    promo_label: str | None = None
    promo_start: datetime | None = None
    promo_end: datetime | None = None

    # Best-seller annotations, filled in by pos.ranking.apply_best_seller_status
    recent_sales_count: int = 0
    best_seller_rank: int | None = None
    best_seller_period: int | None = None

    @model_validator(mode="after")
    def _check_promo_price(self) -> "Product":
        if (
            self.is_promo
            and self.promo_price is not None
            and self.promo_price >= self.price
        ):
            raise ValueError(
                f"promo_price {self.promo_price} must be lower than price {self.price}"
            )
        return self

    @property
    def is_promotional(self) -> bool:
        """Flagged as promo with a promo price. Promo dates are not considered."""
        return self.is_promo and (self.promo_price or 0) > 0

    @property
    def promo_discount_percent(self) -> float:
        if not self.is_promotional or self.price <= 0:
            return 0.0
        return (self.price - self.promo_price) / self.price * 100

    def is_promo_active(self, at: datetime | None = None) -> bool:
        """Return True if the promo price applies at the given moment."""
        if not self.is_promo or not self.promo_price or self.promo_price <= 0:
            return False
        if self.promo_price >= self.price:
            return False
        if self.promo_start is None and self.promo_end is None:
            return True
        moment = at or datetime.now()
        if self.promo_start is not None and moment < self.promo_start:
            return False
        if self.promo_end is not None and moment > self.promo_end:
            return False
        return True

    def discount_percent(self, at: datetime | None = None) -> float:
        """Percentage off the regular price while the promo is active, else 0."""
        if not self.is_promo_active(at) or self.price <= 0:
            return 0.0
        return (self.price - self.promo_price) / self.price * 100

    def effective_price(self, at: datetime | None = None) -> float:
        if self.is_promo_active(at):
            return self.promo_price
        return self.price

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock == 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock <= self.min_stock

    @property
    def is_best_seller(self) -> bool:
        return self.best_seller_rank is not None
