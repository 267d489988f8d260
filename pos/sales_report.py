"""
Sales reports over the order ledger, built with pandas.

All reports read finalized orders only and never modify them.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from models.catalog import Product
from models.sales import Order

from .ranking import sales_day

logger = logging.getLogger(__name__)

MANUAL_CATEGORY = "Custom"
UNKNOWN_CATEGORY = "Uncategorized"

LINE_COLUMNS = [
    "order_id",
    "timestamp",
    "date",
    "payment_method",
    "product_id",
    "name",
    "category",
    "quantity",
    "price",
    "cost",
    "revenue",
    "line_cost",
    "profit",
    "is_manual",
    "is_promo",
]
ORDER_COLUMNS = ["order_id", "timestamp", "date", "payment_method", "total", "profit", "items"]
DAILY_COLUMNS = ["date", "revenue", "transactions", "profit", "avg_ticket"]
CATEGORY_COLUMNS = ["category", "revenue", "quantity", "profit"]
TOP_PRODUCT_COLUMNS = ["product_id", "name", "quantity", "revenue", "profit"]
PAYMENT_COLUMNS = ["payment_method", "orders", "total"]


def orders_to_frame(
    orders: Iterable[Order], products: Iterable[Product] | None = None
) -> pd.DataFrame:
    """
    One row per order line. Categories come from the current catalog; manual
    lines are filed under "Custom".
    """
    categories = {product.product_id: product.category for product in products or []}
    rows = []
    for order in orders:
        for line in order.lines:
            revenue = line.price * line.quantity
            line_cost = line.cost * line.quantity
            if line.is_manual:
                category = MANUAL_CATEGORY
            else:
                category = categories.get(line.product_id, UNKNOWN_CATEGORY)
            rows.append(
                {
                    "order_id": order.order_id,
                    "timestamp": order.timestamp,
                    "date": sales_day(order.timestamp),
                    "payment_method": order.payment_method.value,
                    "product_id": line.product_id,
                    "name": line.name,
                    "category": category,
                    "quantity": line.quantity,
                    "price": line.price,
                    "cost": line.cost,
                    "revenue": revenue,
                    "line_cost": line_cost,
                    "profit": revenue - line_cost,
                    "is_manual": line.is_manual,
                    "is_promo": line.promo is not None,
                }
            )
    return pd.DataFrame(rows, columns=LINE_COLUMNS)


def _order_frame(orders: Iterable[Order]) -> pd.DataFrame:
    rows = [
        {
            "order_id": order.order_id,
            "timestamp": order.timestamp,
            "date": sales_day(order.timestamp),
            "payment_method": order.payment_method.value,
            "total": order.total,
            "profit": order.profit,
            "items": order.item_count,
        }
        for order in orders
    ]
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


def daily_summary(orders: Iterable[Order]) -> pd.DataFrame:
    """Revenue (order totals), transaction count, profit and average ticket per day."""
    frame = _order_frame(orders)
    if frame.empty:
        return pd.DataFrame(columns=DAILY_COLUMNS)
    summary = frame.groupby("date", as_index=False).agg(
        revenue=("total", "sum"),
        transactions=("order_id", "count"),
        profit=("profit", "sum"),
    )
    summary["avg_ticket"] = summary["revenue"] / summary["transactions"]
    return summary.sort_values("date").reset_index(drop=True)[DAILY_COLUMNS]


def category_sales(
    orders: Iterable[Order], products: Iterable[Product] | None = None
) -> pd.DataFrame:
    """Line revenue, units and profit per category, highest revenue first."""
    lines = orders_to_frame(orders, products)
    if lines.empty:
        return pd.DataFrame(columns=CATEGORY_COLUMNS)
    summary = lines.groupby("category", as_index=False).agg(
        revenue=("revenue", "sum"),
        quantity=("quantity", "sum"),
        profit=("profit", "sum"),
    )
    return summary.sort_values(
        ["revenue", "category"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)[CATEGORY_COLUMNS]


def top_products(orders: Iterable[Order], limit: int = 5) -> pd.DataFrame:
    """All-time best sellers by units, then revenue. Manual lines are left out."""
    lines = orders_to_frame(orders)
    lines = lines[~lines["is_manual"].astype(bool)]
    if lines.empty:
        return pd.DataFrame(columns=TOP_PRODUCT_COLUMNS)
    lines = lines.sort_values("timestamp", kind="mergesort")
    summary = lines.groupby("product_id", as_index=False).agg(
        name=("name", "last"),
        quantity=("quantity", "sum"),
        revenue=("revenue", "sum"),
        profit=("profit", "sum"),
    )
    summary = summary.sort_values(
        ["quantity", "revenue", "product_id"],
        ascending=[False, False, True],
        kind="mergesort",
    )
    return summary.head(limit).reset_index(drop=True)[TOP_PRODUCT_COLUMNS]


def payment_breakdown(orders: Iterable[Order]) -> pd.DataFrame:
    """Order count and takings per payment method."""
    frame = _order_frame(orders)
    if frame.empty:
        return pd.DataFrame(columns=PAYMENT_COLUMNS)
    summary = frame.groupby("payment_method", as_index=False).agg(
        orders=("order_id", "count"),
        total=("total", "sum"),
    )
    logger.debug(f"Payment breakdown over {len(frame)} order(s)")
    return summary.sort_values("payment_method").reset_index(drop=True)[PAYMENT_COLUMNS]
