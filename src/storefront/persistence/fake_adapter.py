"""Fake remote backend — in-memory hosted service for testing and development.

Keeps order, item and product tables in dicts. The conditional stock
decrement runs without suspension points, so it is atomic within an event
loop like a row-level compare-and-swap on the real service.
"""

import time
from datetime import UTC, datetime
from random import randint
from uuid import uuid4

from storefront.persistence.port import BackendUnavailableError, RemoteBackend


class FakeBackend(RemoteBackend):
    """Fake backend that always succeeds by default."""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Backend unavailable"
        self.failing_operations: set[str] = set()
        self.orders: dict[str, dict] = {}
        self.items: dict[str, list[dict]] = {}
        self.products: dict[str, dict] = {}
        self.calls: list[str] = []

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Backend unavailable",
        failing_operations: set[str] | None = None,
    ):
        """Configure the fake backend behavior for testing.

        ``should_succeed=False`` fails every operation; ``failing_operations``
        fails only the named ones (e.g. ``{"insert_order"}``).
        """
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_operations = set(failing_operations or ())

    def seed_products(self, products: list[dict]):
        for product in products:
            self.products[str(product["id"])] = dict(product)

    def reset(self):
        self.__init__()

    def _guard(self, operation: str):
        self.calls.append(operation)
        if not self.should_succeed or operation in self.failing_operations:
            raise BackendUnavailableError(operation, self.failure_reason)

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    async def insert_order(self, order: dict, items: list[dict]) -> dict:
        self._guard("insert_order")
        order_id = str(uuid4())
        row = {
            **order,
            "id": order_id,
            "order_number": f"ORD-{int(time.time() * 1000)}-{randint(0, 999):03d}",
            "created_at": datetime.now(UTC).isoformat(),
        }
        self.orders[order_id] = row
        try:
            self._guard("insert_order_items")
        except BackendUnavailableError:
            del self.orders[order_id]
            raise
        self.items[order_id] = [{**item, "order_id": order_id} for item in items]
        return dict(row)

    async def update_order_status(self, order_id: str, status: str) -> None:
        self._guard("update_order_status")
        if order_id not in self.orders:
            raise BackendUnavailableError("update_order_status", f"Order {order_id} not found")
        self.orders[order_id]["status"] = status

    async def fetch_orders(self, user_id: str) -> list[dict]:
        self._guard("fetch_orders")
        rows = [self._with_items(row) for row in self.orders.values() if row.get("created_by") == user_id]
        return sorted(rows, key=lambda row: row["created_at"], reverse=True)

    async def fetch_order(self, order_id: str) -> dict | None:
        self._guard("fetch_order")
        row = self.orders.get(order_id)
        return self._with_items(row) if row else None

    def _with_items(self, row: dict) -> dict:
        return {**row, "order_items": [dict(item) for item in self.items.get(row["id"], [])]}

    # -------------------------------------------------------------------
    # Products and stock
    # -------------------------------------------------------------------
    async def fetch_products(self) -> list[dict]:
        self._guard("fetch_products")
        return [dict(product) for product in self.products.values()]

    async def fetch_stock(self, product_id: str) -> int | None:
        self._guard("fetch_stock")
        product = self.products.get(product_id)
        return product.get("stock", 0) if product else None

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        self._guard("decrement_stock")
        product = self.products.get(product_id)
        if product is None or product.get("stock", 0) < quantity:
            return False
        product["stock"] -= quantity
        return True

    async def increment_stock(self, product_id: str, quantity: int) -> None:
        self._guard("increment_stock")
        product = self.products.get(product_id)
        if product is None:
            raise BackendUnavailableError("increment_stock", f"Product {product_id} not found")
        product["stock"] = product.get("stock", 0) + quantity
