"""
Till session: the explicit owner of the cart being built at one till.

The session wires the cart, the ranking cache, the catalog view and
settlement to one data store and one set of settings. Callers pass the
session around instead of reaching for shared global state.
"""

import logging
from dataclasses import replace
from datetime import datetime

from config.config import BestSellerConfig, BusinessSettings, CartConfig
from connectors.data_store import DataStore
from models.enums import PaymentMethod
from models.sales import Order, RankedProduct

from .cart import Cart
from .catalog import ALL_CATEGORIES, CatalogView, build_catalog_view
from .checkout import CheckoutSettlement
from .ranking import RankingCache
from .receipt import format_receipt

logger = logging.getLogger(__name__)


class TillSession:
    """One operator's checkout session against a data store."""

    def __init__(
        self,
        store: DataStore,
        settings: BusinessSettings | None = None,
        best_seller: BestSellerConfig | None = None,
        cart_config: CartConfig | None = None,
    ):
        self.store = store
        self.settings = settings or BusinessSettings()
        self.best_seller = best_seller or BestSellerConfig()
        self.cart_config = cart_config or CartConfig()
        self.checkout_desk = CheckoutSettlement(store, self.settings)
        self.ranking_cache = RankingCache()
        self.cart = Cart(store, self.cart_config)
        self.last_order: Order | None = None

    # --- Cart lifecycle --- #

    def new_cart(self) -> Cart:
        """Replace the current cart with an empty one, abandoning any open lines."""
        if self.cart.is_open and len(self.cart):
            logger.info(f"Abandoning open cart with {len(self.cart)} line(s)")
            self.cart.abandon()
        self.cart = Cart(self.store, self.cart_config)
        return self.cart

    def abandon_cart(self) -> Cart:
        if self.cart.is_open:
            self.cart.abandon()
        self.cart = Cart(self.store, self.cart_config)
        return self.cart

    # --- Ranking and catalog --- #

    def set_window(self, window_days: int) -> None:
        """Change the best-seller window; any positive number of days is accepted."""
        self.best_seller = replace(self.best_seller, window_days=window_days)
        logger.info(f"Best-seller window set to {window_days} day(s)")

    def ranking(
        self, window_days: int | None = None, *, now: datetime | None = None
    ) -> list[RankedProduct]:
        return self.ranking_cache.get(
            self.store.get_order_history(),
            window_days or self.best_seller.window_days,
            self.store.history_version,
            self.best_seller.top_n,
            self.best_seller.min_sales,
            now=now,
        )

    def catalog(
        self,
        search: str = "",
        category: str = ALL_CATEGORIES,
        *,
        now: datetime | None = None,
    ) -> CatalogView:
        return build_catalog_view(
            self.store.get_products(),
            [],
            search,
            category,
            self.best_seller,
            ranking=self.ranking(now=now),
            now=now,
        )

    def add_product(self, product_id: str, *, now: datetime | None = None) -> int | None:
        """Add a catalog product, tagging the line if it is a current best seller."""
        ranked = {entry.product_id for entry in self.ranking(now=now)}
        return self.cart.add_catalog_product(
            product_id, from_best_seller=product_id in ranked, now=now
        )

    # --- Checkout --- #

    def checkout(
        self,
        method: PaymentMethod | str,
        tendered: float | None = None,
        *,
        now: datetime | None = None,
    ) -> Order:
        """
        Settle the current cart at the configured tax rate and start a fresh
        empty cart. On failure the current cart is left open and unchanged.
        """
        order = self.checkout_desk.settle(self.cart, method, tendered=tendered, now=now)
        self.last_order = order
        self.cart = Cart(self.store, self.cart_config)
        return order

    def receipt(self, order: Order | None = None) -> str:
        order = order or self.last_order
        if order is None:
            raise ValueError("No order to print")
        return format_receipt(order, self.settings)
