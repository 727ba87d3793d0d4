"""StockItem aggregate (CQRS) — available quantity of one product.

Quantities never go negative. Units leave only through ``withdraw`` (after a
sufficiency check) and come back through ``restock``.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer

from storefront.domain import storefront
from storefront.inventory.events import StockCorrected, StockReleased, StockReserved, StockTracked


@storefront.aggregate
class StockItem:
    product_id = Identifier(identifier=True, required=True)
    quantity = Integer(default=0, min_value=0)
    updated_at = DateTime()

    @classmethod
    def track(cls, product_id, quantity):
        now = datetime.now(UTC)
        item = cls(product_id=product_id, quantity=max(0, int(quantity)), updated_at=now)
        item.raise_(StockTracked(product_id=str(product_id), quantity=item.quantity, tracked_at=now))
        return item

    def can_cover(self, quantity) -> bool:
        return self.quantity >= quantity

    def withdraw(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Reserved quantity must be positive"]})
        if not self.can_cover(quantity):
            raise ValidationError(
                {"quantity": [f"Insufficient stock: requested {quantity}, available {self.quantity}"]}
            )

        now = datetime.now(UTC)
        self.quantity -= quantity
        self.updated_at = now
        self.raise_(
            StockReserved(
                product_id=str(self.product_id),
                quantity=quantity,
                remaining=self.quantity,
                reserved_at=now,
            )
        )

    def restock(self, quantity):
        quantity = max(0, quantity)
        now = datetime.now(UTC)
        self.quantity += quantity
        self.updated_at = now
        self.raise_(
            StockReleased(
                product_id=str(self.product_id),
                quantity=quantity,
                available=self.quantity,
                released_at=now,
            )
        )

    def correct(self, quantity, source="manual"):
        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = max(0, int(quantity))
        self.updated_at = now
        self.raise_(
            StockCorrected(
                product_id=str(self.product_id),
                previous_quantity=previous,
                new_quantity=self.quantity,
                source=source,
                corrected_at=now,
            )
        )
