"""Order draft — the cart snapshot handed to the order store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DraftLine:
    product_id: str
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    brand: str = ""
    weight: str | None = None


@dataclass(frozen=True)
class OrderDraft:
    user_id: str
    lines: tuple[DraftLine, ...]
    total: float
    wholesale_total: float
    savings: float
    payment_method: str
    is_wholesale: bool
    delivery_date: str | None = None
    delivery_time_slot: str | None = None
    delivery_address: str | None = None
    delivery_address_id: str | None = None
    delivery_notes: str | None = None

    @classmethod
    def from_cart(cls, cart, user_id: str, payment_method: str) -> "OrderDraft":
        """Copy lines, totals and delivery fields out of a validated cart.

        ``total`` is the final total including the delivery fee;
        ``wholesale_total`` is the line total alone.
        """
        summary = cart.summary()
        schedule = cart.delivery_schedule
        return cls(
            user_id=str(user_id),
            lines=tuple(
                DraftLine(
                    product_id=str(line.product_id),
                    name=line.name,
                    brand=line.brand or "",
                    weight=line.weight,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
                for line in cart.lines
            ),
            total=summary.final_total,
            wholesale_total=summary.total_price,
            savings=summary.wholesale_savings,
            payment_method=payment_method,
            is_wholesale=bool(cart.is_wholesale_mode),
            delivery_date=schedule.delivery_date if schedule else None,
            delivery_time_slot=schedule.time_slot if schedule else None,
            delivery_address=schedule.address if schedule else None,
            delivery_address_id=schedule.address_id if schedule else None,
            delivery_notes=schedule.notes if schedule else None,
        )
