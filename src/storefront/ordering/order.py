"""Order aggregate (CQRS) — immutable snapshot of a checked-out cart.

Identity comes from whichever backend stored the order first: a UUID from
the hosted backend or a local ``FL-YYYY-MMDD-NNN`` id. After creation only
the status changes.

Status lifecycle:
    pending → confirmed → preparing → shipped → delivered
    cancelled (from any state)

Transitions are not policed here; any known status may be set. Callers are
expected to move forward or cancel.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.ordering.events import OrderPlaced, OrderStatusChanged


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderOrigin(Enum):
    REMOTE = "remote"
    LOCAL = "local"


TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


@storefront.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    brand = String(max_length=100)
    weight = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    subtotal = Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    order_number = String(max_length=50)
    user_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    lines = HasMany(OrderLine)
    total = Float(required=True, min_value=0.0)
    wholesale_total = Float(default=0.0)
    savings = Float(default=0.0)
    delivery_date = String(max_length=10)
    delivery_time_slot = String(max_length=50)
    delivery_address = Text()
    delivery_address_id = String(max_length=64)
    delivery_notes = Text()
    payment_method = String(max_length=100)
    is_wholesale = Boolean(default=False)
    origin = String(choices=OrderOrigin, default=OrderOrigin.LOCAL.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def from_draft(cls, order_id, draft, origin: OrderOrigin, created_at=None, order_number=None, status=None):
        """Build an order from a draft without raising events (used for reads and caching)."""
        created_at = created_at or datetime.now(UTC)
        order = cls(
            id=order_id,
            order_number=order_number,
            user_id=draft.user_id,
            status=status or OrderStatus.PENDING.value,
            total=draft.total,
            wholesale_total=draft.wholesale_total,
            savings=draft.savings,
            delivery_date=draft.delivery_date,
            delivery_time_slot=draft.delivery_time_slot,
            delivery_address=draft.delivery_address,
            delivery_address_id=draft.delivery_address_id,
            delivery_notes=draft.delivery_notes,
            payment_method=draft.payment_method,
            is_wholesale=draft.is_wholesale,
            origin=origin.value,
            created_at=created_at,
            updated_at=created_at,
        )
        for line in draft.lines:
            order.add_lines(
                OrderLine(
                    product_id=line.product_id,
                    name=line.name,
                    brand=line.brand,
                    weight=line.weight,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
            )
        return order

    @classmethod
    def place(cls, order_id, draft, origin: OrderOrigin, created_at=None, order_number=None):
        order = cls.from_draft(order_id, draft, origin, created_at=created_at, order_number=order_number)
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(order.user_id),
                origin=order.origin,
                line_count=len(order.lines),
                total=order.total,
                savings=order.savings,
                is_wholesale=order.is_wholesale,
                placed_at=order.created_at,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def change_status(self, status) -> str:
        """Set a new status and return the previous one."""
        try:
            new_status = OrderStatus(status.value if isinstance(status, OrderStatus) else status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None

        previous = self.status
        now = datetime.now(UTC)
        self.status = new_status.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                user_id=str(self.user_id),
                previous_status=previous,
                new_status=new_status.value,
                changed_at=now,
            )
        )
        return previous

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    @property
    def date(self) -> str:
        return self.created_at.date().isoformat() if self.created_at else ""

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)
