"""Shopping Cart aggregate (CQRS) — one cart per user, converted to an Order at checkout.

Adding or changing a line only *checks* stock through the ``is_available``
callable handed in by the caller; nothing is reserved until checkout. Lines
keep a snapshot of the product so that pricing can be recomputed whenever
wholesale mode is toggled.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront import config
from storefront.cart.events import (
    CartCleared,
    CartLineAdded,
    CartLineQuantityUpdated,
    CartLineRemoved,
    DeliveryScheduled,
    WholesaleModeToggled,
)
from storefront.catalog.product import Product
from storefront.domain import storefront

AvailabilityCheck = Callable[[str, int], bool]


def _always_available(_product_id, _quantity):
    return True


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CartSummary:
    total_items: int
    total_price: float
    regular_total: float
    wholesale_total: float
    wholesale_savings: float
    delivery_fee: float
    final_total: float


@dataclass(frozen=True)
class CartValidation:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Value Objects and Entities
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="ShoppingCart")
class DeliverySchedule:
    schedule_id = String(required=True, max_length=64)
    delivery_date = String(required=True, max_length=10)  # YYYY-MM-DD
    time_slot = String(required=True, max_length=50)
    address = Text(required=True)
    address_id = String(max_length=64)
    notes = Text()


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    brand = String(max_length=100)
    category = String(max_length=100)
    weight = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    wholesale_price = Float(required=True, min_value=0.0)
    min_order_quantity = Integer(default=1, min_value=1)
    is_available = Boolean(default=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    subtotal = Float(required=True, min_value=0.0)

    def reprice(self, wholesale: bool):
        self.unit_price = self.wholesale_price if wholesale else self.price
        self.subtotal = self.quantity * self.unit_price

    def set_quantity(self, quantity: int):
        self.quantity = quantity
        self.subtotal = quantity * self.unit_price


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier(required=True, unique=True)
    is_wholesale_mode = Boolean(default=config.DEFAULT_WHOLESALE_MODE)
    lines = HasMany(CartLine)
    delivery_schedule = ValueObject(DeliverySchedule)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id, is_wholesale_mode=config.DEFAULT_WHOLESALE_MODE):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            is_wholesale_mode=is_wholesale_mode,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------
    def line_for(self, product_id) -> CartLine | None:
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def quantity_of(self, product_id) -> int:
        line = self.line_for(product_id)
        return line.quantity if line else 0

    def _floor(self, quantity: int, min_order_quantity: int) -> int:
        if self.is_wholesale_mode and quantity < min_order_quantity:
            return min_order_quantity
        return quantity

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product: Product, quantity: int = 1, is_available: AvailabilityCheck = _always_available) -> bool:
        """Add a product, merging into its existing line.

        In wholesale mode the quantity is raised to the product's minimum
        order quantity. Returns False, leaving the cart untouched, when
        stock cannot cover the resulting line quantity.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        quantity = self._floor(quantity, product.min_order_quantity)
        existing = self.line_for(product.id)
        line_quantity = quantity + (existing.quantity if existing else 0)

        if not is_available(product.id, line_quantity):
            return False

        unit_price = product.unit_price(self.is_wholesale_mode)
        if existing:
            existing.set_quantity(line_quantity)
        else:
            self.add_lines(
                CartLine(
                    product_id=product.id,
                    name=product.name,
                    brand=product.brand,
                    category=product.category,
                    weight=product.weight,
                    price=product.price,
                    wholesale_price=product.wholesale_price,
                    min_order_quantity=product.min_order_quantity,
                    is_available=product.is_available,
                    quantity=line_quantity,
                    unit_price=unit_price,
                    subtotal=line_quantity * unit_price,
                )
            )
        self._touch()

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product.id),
                quantity=quantity,
                line_quantity=line_quantity,
                unit_price=unit_price,
            )
        )
        return True

    def update_quantity(self, product_id, quantity: int, is_available: AvailabilityCheck = _always_available) -> bool:
        """Set a line's quantity. Zero or less removes the line.

        Returns False, leaving the cart untouched, when the product is not in
        the cart or stock cannot cover the new quantity.
        """
        line = self.line_for(product_id)
        if line is None:
            return False

        if quantity <= 0:
            self.remove_line(product_id)
            return True

        quantity = self._floor(quantity, line.min_order_quantity)
        if not is_available(str(product_id), quantity):
            return False

        previous_quantity = line.quantity
        line.set_quantity(quantity)
        self._touch()

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return True

    def remove_line(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            return

        self.remove_lines(line)
        self._touch()
        self.raise_(CartLineRemoved(cart_id=str(self.id), user_id=str(self.user_id), product_id=str(product_id)))

    # -------------------------------------------------------------------
    # Pricing mode
    # -------------------------------------------------------------------
    def toggle_wholesale_mode(self):
        """Flip pricing mode and reprice every line. Quantities stay as they are."""
        self.is_wholesale_mode = not self.is_wholesale_mode
        for line in self.lines:
            line.reprice(self.is_wholesale_mode)
        self._touch()

        self.raise_(
            WholesaleModeToggled(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                is_wholesale_mode=self.is_wholesale_mode,
            )
        )

    def set_wholesale_mode(self, enabled: bool):
        if bool(enabled) != bool(self.is_wholesale_mode):
            self.toggle_wholesale_mode()

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def schedule_delivery(self, delivery_date, time_slot, address, address_id=None, notes=None, schedule_id=None):
        schedule = DeliverySchedule(
            schedule_id=schedule_id or str(uuid4()),
            delivery_date=delivery_date,
            time_slot=time_slot,
            address=address,
            address_id=address_id,
            notes=notes,
        )
        self.delivery_schedule = schedule
        self._touch()

        self.raise_(
            DeliveryScheduled(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                schedule_id=schedule.schedule_id,
                delivery_date=schedule.delivery_date,
                time_slot=schedule.time_slot,
            )
        )

    def clear_delivery_schedule(self):
        self.delivery_schedule = None
        self._touch()

    def clear(self):
        """Drop every line and the delivery schedule."""
        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)
        self.delivery_schedule = None
        self._touch()

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), lines_removed=removed))

    # -------------------------------------------------------------------
    # Read models
    # -------------------------------------------------------------------
    def summary(self) -> CartSummary:
        total_items = sum(line.quantity for line in self.lines)
        total_price = sum(line.subtotal for line in self.lines)
        regular_total = sum(line.quantity * line.price for line in self.lines)
        wholesale_total = sum(line.quantity * line.wholesale_price for line in self.lines)
        delivery_fee = config.DELIVERY_FEE if self.delivery_schedule else 0.0

        return CartSummary(
            total_items=total_items,
            total_price=total_price,
            regular_total=regular_total,
            wholesale_total=wholesale_total,
            wholesale_savings=regular_total - wholesale_total,
            delivery_fee=delivery_fee,
            final_total=total_price + delivery_fee,
        )

    def validate(self) -> CartValidation:
        errors = []

        if not self.lines:
            errors.append("Cart is empty")

        for line in self.lines:
            if self.is_wholesale_mode and line.quantity < line.min_order_quantity:
                errors.append(f"{line.name}: minimum order quantity is {line.min_order_quantity}")
            if not line.is_available:
                errors.append(f"{line.name}: product is not available")

        if self.is_wholesale_mode and not self.delivery_schedule:
            errors.append("Wholesale orders require a scheduled delivery")

        return CartValidation(is_valid=not errors, errors=errors)
