"""
Plain-text receipt for a finalized order.
"""

from config.config import BusinessSettings
from models.enums import OrderType, PaymentMethod
from models.sales import Order
from utils.currency import format_currency

_ORDER_TYPE_LABELS = {
    OrderType.DINE_IN: "Dine In",
    OrderType.TAKE_AWAY: "Take Away",
}


def format_receipt(order: Order, settings: BusinessSettings | None = None) -> str:
    """Render the order as the text printed (or copied) at the till."""
    settings = settings or BusinessSettings()

    def money(amount: float) -> str:
        return format_currency(
            amount,
            settings.currency,
            settings.currency_position,
            settings.decimal_places,
            settings.thousands_separator,
        )

    rows = [
        "RECEIPT",
        settings.store_name,
        settings.address,
        "",
        f"ID: {order.order_id}",
        f"Date: {order.timestamp:%d %b %Y %H:%M}",
        f"Type: {_ORDER_TYPE_LABELS[order.order_type]}",
        f"Customer: {order.customer_name or 'Walk-in'}",
    ]
    if order.order_type == OrderType.DINE_IN and order.table_number:
        rows.append(f"Table: {order.table_number}")
    rows.append("")

    for line in order.lines:
        rows.append(f"{line.quantity}x {line.name} - {money(line.line_total)}")
        if line.promo is not None:
            label = line.promo.label or "Promo"
            rows.append(f"   {label} (was {money(line.promo.original_price)})")
        if line.note and line.note != line.name:
            rows.append(f"   Note: {line.note}")
        if line.modifiers:
            rows.append(f"   {', '.join(line.modifiers)}")

    rows += [
        "",
        f"Subtotal: {money(order.subtotal)}",
        f"Tax ({order.tax_rate:g}%): {money(order.tax)}",
        f"Total: {money(order.total)}",
        f"Payment: {order.payment_method.value.upper()}",
    ]
    if order.payment_method == PaymentMethod.CASH and order.tendered is not None:
        rows.append(f"Cash: {money(order.tendered)}")
        rows.append(f"Change: {money(order.change)}")
    if settings.receipt_footer:
        rows += ["", settings.receipt_footer]
    return "\n".join(rows)
