"""
Catalog filtering and display ordering for the till's product grid.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from config.config import BestSellerConfig
from models.catalog import Product
from models.sales import Order, RankedProduct

from .ranking import apply_best_seller_status, rank, top_best_sellers

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


def filter_catalog(
    products: Iterable[Product],
    search: str = "",
    category: str = ALL_CATEGORIES,
) -> list[Product]:
    """Keep products whose name contains `search` (any case) and that match `category`."""
    needle = (search or "").casefold()
    return [
        product
        for product in products
        if needle in product.name.casefold()
        and (category == ALL_CATEGORIES or product.category == category)
    ]


def catalog_sort_key(product: Product, ranks: dict[str, int]) -> tuple:
    """
    Sort key, most significant first: in stock, on promo (bigger discount
    first), best seller (better rank first), low stock, then name and id.
    Promo placement follows the promo flag and price only, not the promo dates.
    """
    on_promo = product.is_promotional
    best_seller_rank = ranks.get(product.product_id)
    return (
        product.is_out_of_stock,
        not on_promo,
        -product.promo_discount_percent,
        best_seller_rank is None,
        best_seller_rank or 0,
        not product.is_low_stock,
        product.name.casefold(),
        product.name,
        product.product_id,
    )


def sort_catalog(
    products: Iterable[Product],
    ranking: Iterable[RankedProduct],
    search: str = "",
    category: str = ALL_CATEGORIES,
) -> list[Product]:
    """
    Filter the catalog and put it in display order.

    The key is a total order over distinct products, so re-sorting an
    already sorted list gives the same list.
    """
    ranks = {entry.product_id: entry.rank for entry in ranking}
    return sorted(
        filter_catalog(products, search, category),
        key=lambda product: catalog_sort_key(product, ranks),
    )


def list_categories(products: Iterable[Product]) -> list[str]:
    """Category pills: "All" first, then each category once, alphabetically."""
    return [ALL_CATEGORIES] + sorted({product.category for product in products})


@dataclass
class CatalogView:
    """Everything the product grid needs for one render."""

    products: list[Product]
    ranking: list[RankedProduct]
    top_best_sellers: list[Product] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    window_days: int = 3
    promo_count: int = 0
    best_seller_count: int = 0


def build_catalog_view(
    products: Iterable[Product],
    history: Iterable[Order],
    search: str = "",
    category: str = ALL_CATEGORIES,
    config: BestSellerConfig | None = None,
    *,
    ranking: list[RankedProduct] | None = None,
    now: datetime | None = None,
) -> CatalogView:
    """
    Rank, annotate, filter and sort the catalog in one pass.
    Pass `ranking` to reuse a cached result instead of ranking `history` again.
    """
    config = config or BestSellerConfig()
    at = now or datetime.now()
    products = list(products)
    if ranking is None:
        ranking = rank(history, config.window_days, config.top_n, config.min_sales, now=at)

    annotated = apply_best_seller_status(products, ranking, config.window_days)
    ordered = sort_catalog(annotated, ranking, search, category)
    view = CatalogView(
        products=ordered,
        ranking=list(ranking),
        top_best_sellers=top_best_sellers(annotated, ranking, config.banner_size),
        categories=list_categories(products),
        window_days=config.window_days,
        promo_count=sum(1 for product in ordered if product.is_promotional),
        best_seller_count=sum(1 for product in ordered if product.is_best_seller),
    )
    logger.debug(
        f"Catalog view: {len(ordered)} of {len(products)} product(s), "
        f"{view.promo_count} on promo, {view.best_seller_count} best seller(s)"
    )
    return view
