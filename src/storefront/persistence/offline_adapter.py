"""Offline backend — stands in when no hosted service is configured.

Every call fails with ``BackendUnavailableError`` so that all services take
their local path.
"""

from storefront.persistence.port import BackendUnavailableError, RemoteBackend


class OfflineBackend(RemoteBackend):
    def _unavailable(self, operation: str):
        return BackendUnavailableError(operation, "Remote backend is not configured")

    async def insert_order(self, order: dict, items: list[dict]) -> dict:
        raise self._unavailable("insert_order")

    async def update_order_status(self, order_id: str, status: str) -> None:
        raise self._unavailable("update_order_status")

    async def fetch_orders(self, user_id: str) -> list[dict]:
        raise self._unavailable("fetch_orders")

    async def fetch_order(self, order_id: str) -> dict | None:
        raise self._unavailable("fetch_order")

    async def fetch_products(self) -> list[dict]:
        raise self._unavailable("fetch_products")

    async def fetch_stock(self, product_id: str) -> int | None:
        raise self._unavailable("fetch_stock")

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        raise self._unavailable("decrement_stock")

    async def increment_stock(self, product_id: str, quantity: int) -> None:
        raise self._unavailable("increment_stock")
