"""
Rolling-window best-seller ranking.

`rank` is a pure function of its arguments: it turns finalized order history
into a quantity-sold ranking over the trailing `window_days` calendar days
(local time, today included). Caching lives in `RankingCache`, a separate
wrapper keyed by the ledger's history version.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from models.catalog import Product
from models.sales import Order, RankedProduct

logger = logging.getLogger(__name__)


@dataclass
class _Tally:
    name: str
    quantity: int = 0
    revenue: float = 0.0
    last_sold: datetime | None = None


def _local_naive(moment: datetime) -> datetime:
    """Aware datetimes are converted to naive local time; naive ones pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def window_bounds(window_days: int, now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Return (cutoff, now) for a trailing window.
    The cutoff is midnight `window_days - 1` days before today, so a window of
    1 covers today only. A window longer than the calendar allows
    starts at datetime.min.
    """
    if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days <= 0:
        raise ValueError(f"window_days must be a positive integer, got {window_days!r}")
    current = _local_naive(now or datetime.now())
    start_of_today = current.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        cutoff = start_of_today - timedelta(days=window_days - 1)
    except OverflowError:
        # Window reaches past the earliest representable date
        cutoff = datetime.min
    return cutoff, current


def rank(
    history: Iterable[Order],
    window_days: int,
    limit: int | None = None,
    min_qty: int | None = None,
    *,
    now: datetime | None = None,
) -> list[RankedProduct]:
    """
    Rank catalog products by quantity sold inside the window.

    Ties on quantity are broken by revenue (descending), then by product name
    (case-insensitive, ascending) and finally product id, so the order is total.
    Entries selling fewer than `min_qty` units are dropped and the result is
    truncated to `limit` entries.

    Args:
        history: Finalized orders, in any order.
        window_days: Trailing window length in days; any positive integer.
        limit: Maximum number of entries to return.
        min_qty: Minimum units sold for a product to be listed.
        now: Reference moment; defaults to the current local time.

    Returns:
        list[RankedProduct]: 1-based ranks, best seller first.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")
    if min_qty is not None and min_qty < 0:
        raise ValueError(f"min_qty must not be negative, got {min_qty}")
    cutoff, _ = window_bounds(window_days, now)

    tallies: dict[str, _Tally] = {}
    for order in history:
        sold_at = _local_naive(order.timestamp)
        if sold_at < cutoff:
            continue
        for line in order.lines:
            if line.is_manual:
                continue
            tally = tallies.get(line.product_id)
            if tally is None:
                tally = tallies[line.product_id] = _Tally(name=line.name)
            tally.quantity += line.quantity
            tally.revenue += line.price * line.quantity
            # Name as it was on the most recent sale
            if tally.last_sold is None or sold_at >= tally.last_sold:
                tally.name = line.name
                tally.last_sold = sold_at

    ordered = sorted(
        tallies.items(),
        key=lambda item: (
            -item[1].quantity,
            -item[1].revenue,
            item[1].name.casefold(),
            item[1].name,
            item[0],
        ),
    )
    ranking = [
        RankedProduct(
            product_id=product_id,
            name=tally.name,
            window_days=window_days,
            quantity_sold=tally.quantity,
            revenue=tally.revenue,
            rank=position,
        )
        for position, (product_id, tally) in enumerate(ordered, start=1)
    ]
    if min_qty is not None:
        ranking = [entry for entry in ranking if entry.quantity_sold >= min_qty]
    if limit is not None:
        ranking = ranking[:limit]
    logger.debug(
        f"Ranked {len(ranking)} of {len(tallies)} product(s) over {window_days} day(s) since {cutoff:%Y-%m-%d}"
    )
    return ranking


class RankingCache:
    """
    Memoizes `rank` results per (window, limit, min_qty, history version, day).

    The day is part of the key because the window slides at midnight even
    when the ledger has not changed.
    """

    def __init__(self, max_entries: int = 32):
        self.max_entries = max_entries
        self._entries: dict[tuple, list[RankedProduct]] = {}
        self.hits = 0
        self.misses = 0

    def get(
        self,
        history: Iterable[Order],
        window_days: int,
        history_version: int,
        limit: int | None = None,
        min_qty: int | None = None,
        *,
        now: datetime | None = None,
    ) -> list[RankedProduct]:
        current = _local_naive(now or datetime.now())
        key = (window_days, limit, min_qty, history_version, current.date())
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return list(cached)

        self.misses += 1
        result = rank(history, window_days, limit, min_qty, now=current)
        if len(self._entries) >= self.max_entries:
            # Drop the oldest insertion
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = result
        return list(result)

    def invalidate(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def apply_best_seller_status(
    products: Iterable[Product],
    ranking: Iterable[RankedProduct],
    window_days: int,
) -> list[Product]:
    """Return copies of the products annotated with their best-seller standing."""
    by_id = {entry.product_id: entry for entry in ranking}
    annotated = []
    for product in products:
        entry = by_id.get(product.product_id)
        annotated.append(
            product.model_copy(
                update={
                    "recent_sales_count": entry.quantity_sold if entry else 0,
                    "best_seller_rank": entry.rank if entry else None,
                    "best_seller_period": window_days,
                }
            )
        )
    return annotated


def top_best_sellers(
    products: Iterable[Product],
    ranking: Iterable[RankedProduct],
    size: int = 3,
) -> list[Product]:
    """Catalog products for the best-seller banner, in rank order."""
    catalog = {product.product_id: product for product in products}
    banner = []
    for entry in ranking:
        product = catalog.get(entry.product_id)
        if product is None:
            logger.warning(f"Ranked product {entry.product_id} not found in catalog")
            continue
        banner.append(product)
        if len(banner) >= size:
            break
    return banner


def sales_day(moment: datetime) -> date:
    """Local calendar day an order belongs to."""
    return _local_naive(moment).date()
