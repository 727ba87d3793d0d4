"""Order confirmation content."""

from datetime import UTC, datetime

_STATUS_LABELS = {
    "pending": "Pending",
    "confirmed": "Confirmed",
    "preparing": "Preparing",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}


def status_label(status: str) -> str:
    return _STATUS_LABELS.get(status, status)


def confirmation_subject(order) -> str:
    return f"Order confirmation {order.id}"


def confirmation_text(order, name: str) -> str:
    lines = [
        f"Hello {name or 'there'},",
        "",
        f"Thank you for your order {order.id} placed on {order.date}.",
        f"Status: {status_label(order.status)}",
        f"Payment method: {order.payment_method}",
    ]
    if order.delivery_address:
        lines.append(f"Delivery: {order.delivery_date or ''} {order.delivery_time_slot or ''} - {order.delivery_address}")
    lines.append("")
    lines.append("Items:")
    for line in order.lines:
        lines.append(f"  {line.quantity} x {line.name} @ {line.unit_price:.2f} = {line.subtotal:.2f}")
    lines.append("")
    lines.append(f"Subtotal: {order.wholesale_total:.2f}")
    if order.savings:
        lines.append(f"Savings: {order.savings:.2f}")
    lines.append(f"Total: {order.total:.2f}")
    return "\n".join(lines)


def template_params(order, email: str, name: str) -> dict:
    """Variables for a hosted email template."""
    return {
        "to_email": email,
        "user_name": name,
        "order_id": str(order.id),
        "order_date": order.date,
        "order_status": status_label(order.status),
        "payment_method": order.payment_method or "",
        "delivery_address": order.delivery_address or "",
        "delivery_slot": order.delivery_time_slot or "",
        "is_wholesale": "true" if order.is_wholesale else "",
        "subtotal": f"{order.wholesale_total:.2f}",
        "savings": f"{order.savings:.2f}",
        "total": f"{order.total:.2f}",
        "current_year": str(datetime.now(UTC).year),
        "subject": confirmation_subject(order),
        "text_content": confirmation_text(order, name),
    }
