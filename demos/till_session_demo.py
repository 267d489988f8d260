"""
Demo script for a single-till checkout session.

Seeds an in-memory store with a small coffee-shop catalog and a few days of
sales, shows the best-seller ranking and sorted catalog, rings up an order
with a promo item and a manual item, settles it in cash and prints the
receipt and a daily summary.

Run with: python -m demos.till_session_demo
"""

from datetime import datetime, timedelta

from config.config import BestSellerConfig, BusinessSettings
from connectors.in_memory_store import InMemoryDataStore
from models.catalog import Product
from models.enums import PaymentMethod
from models.exceptions import StockExceededError
from models.sales import Order, OrderLine
from pos.sales_report import daily_summary
from pos.till import TillSession
from utils.logger import get_logger

logger = get_logger("till-demo")


def seed_products() -> list[Product]:
    return [
        Product(product_id="P1", name="Espresso", category="Coffee", price=25000, cost=8000, stock=40, min_stock=5),
        Product(product_id="P2", name="Caffe Latte", category="Coffee", price=35000, cost=12000, stock=5, min_stock=3),
        Product(
            product_id="P3",
            name="Matcha Latte",
            category="Tea",
            price=40000,
            cost=15000,
            stock=12,
            min_stock=4,
            is_promo=True,
            promo_price=30000,
            promo_label="Matcha Monday",
        ),
        Product(product_id="P4", name="Croissant", category="Pastry", price=22000, cost=9000, stock=0, min_stock=6),
        Product(product_id="P5", name="Earl Grey", category="Tea", price=28000, cost=7000, stock=20, min_stock=5),
    ]


def seed_history(now: datetime) -> list[Order]:
    """A handful of past orders spread over the last four days."""

    def order(order_id: str, days_ago: int, lines: list[tuple[str, str, int, float, float]]) -> Order:
        order_lines = tuple(
            OrderLine(product_id=pid, name=name, quantity=qty, price=price, cost=cost)
            for pid, name, qty, price, cost in lines
        )
        subtotal = sum(line.price * line.quantity for line in order_lines)
        cost = sum(line.cost * line.quantity for line in order_lines)
        return Order(
            order_id=order_id,
            timestamp=now - timedelta(days=days_ago),
            lines=order_lines,
            subtotal=subtotal,
            cost=cost,
            total=subtotal,
            profit=subtotal - cost,
            payment_method=PaymentMethod.CARD,
        )

    return [
        order("H1", 3, [("P5", "Earl Grey", 6, 28000, 7000)]),
        order("H2", 1, [("P1", "Espresso", 3, 25000, 8000), ("P2", "Caffe Latte", 1, 35000, 12000)]),
        order("H3", 0, [("P2", "Caffe Latte", 2, 35000, 12000)]),
    ]


def main() -> Order:
    now = datetime.now()
    store = InMemoryDataStore(seed_products(), seed_history(now))
    session = TillSession(
        store,
        settings=BusinessSettings(tax_rate=11.0),
        best_seller=BestSellerConfig(window_days=3),
    )

    for entry in session.ranking(now=now):
        logger.info(f"#{entry.rank} {entry.name}: {entry.quantity_sold} sold, revenue {entry.revenue:,.0f}")

    view = session.catalog(now=now)
    logger.info("Catalog order: " + ", ".join(p.name for p in view.products))

    session.add_product("P3", now=now)
    session.add_product("P2", now=now)
    session.add_product("P2", now=now)
    try:
        session.cart.set_quantity(1, 9)
    except StockExceededError as e:
        logger.warning(f"Rejected: {e}")
    session.cart.add_manual_line("extra shot", 5000, "oat milk")
    session.cart.set_table("7")

    totals = session.cart.totals(session.settings.tax_rate)
    logger.info(f"Cart total {totals.total:,.2f} for {session.cart.item_count} item(s)")
    order = session.checkout(PaymentMethod.CASH, tendered=200000, now=now)

    print(session.receipt(order))
    print()
    print(daily_summary(store.get_order_history()).to_string(index=False))
    return order


if __name__ == "__main__":
    main()
