"""REST backend adapter — PostgREST-style hosted database over HTTP.

Talks to the ``/rest/v1`` endpoint of the hosted service with httpx. Stock
changes use conditional PATCH requests (``stock=eq.<seen value>``) so that a
concurrent writer makes the update match zero rows instead of overwriting
its change; the adapter re-reads and retries a bounded number of times.
"""

from datetime import UTC, datetime
from random import randint

import httpx
import structlog

from storefront import config
from storefront.persistence.port import BackendUnavailableError, RemoteBackend

logger = structlog.get_logger(__name__)


class RestBackend(RemoteBackend):
    """Remote backend speaking the PostgREST dialect."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = config.BACKEND_TIMEOUT,
        cas_attempts: int = config.STOCK_CAS_ATTEMPTS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not url or not api_key:
            raise ValueError("RestBackend requires a backend URL and API key")
        self.cas_attempts = cas_attempts
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, operation: str, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BackendUnavailableError(
                operation, f"HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendUnavailableError(operation, str(exc) or exc.__class__.__name__) from exc
        return response

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    async def insert_order(self, order: dict, items: list[dict]) -> dict:
        row = {
            **order,
            "order_number": f"ORD-{int(datetime.now(UTC).timestamp() * 1000)}-{randint(0, 999):03d}",
        }
        response = await self._request(
            "insert_order",
            "POST",
            "/delivery_orders",
            json=row,
            headers={"Prefer": "return=representation"},
        )
        created = response.json()[0]

        try:
            await self._request(
                "insert_order_items",
                "POST",
                "/order_items",
                json=[{**item, "order_id": created["id"]} for item in items],
            )
        except BackendUnavailableError:
            logger.warning("order_items_insert_failed", order_id=created["id"])
            await self._request("delete_order", "DELETE", "/delivery_orders", params={"id": f"eq.{created['id']}"})
            raise

        return created

    async def update_order_status(self, order_id: str, status: str) -> None:
        await self._request(
            "update_order_status",
            "PATCH",
            "/delivery_orders",
            params={"id": f"eq.{order_id}"},
            json={"status": status, "updated_at": datetime.now(UTC).isoformat()},
        )

    async def fetch_orders(self, user_id: str) -> list[dict]:
        response = await self._request(
            "fetch_orders",
            "GET",
            "/delivery_orders",
            params={
                "select": "*,order_items(*)",
                "created_by": f"eq.{user_id}",
                "order": "created_at.desc",
            },
        )
        return response.json()

    async def fetch_order(self, order_id: str) -> dict | None:
        response = await self._request(
            "fetch_order",
            "GET",
            "/delivery_orders",
            params={"select": "*,order_items(*)", "id": f"eq.{order_id}"},
        )
        rows = response.json()
        return rows[0] if rows else None

    # -------------------------------------------------------------------
    # Products and stock
    # -------------------------------------------------------------------
    async def fetch_products(self) -> list[dict]:
        response = await self._request(
            "fetch_products",
            "GET",
            "/products",
            params={"select": "*", "is_active": "eq.true", "order": "name.asc"},
        )
        return response.json()

    async def fetch_stock(self, product_id: str) -> int | None:
        response = await self._request(
            "fetch_stock",
            "GET",
            "/products",
            params={"select": "stock", "id": f"eq.{product_id}"},
        )
        rows = response.json()
        if not rows:
            return None
        return rows[0].get("stock") or 0

    async def _swap_stock(self, operation: str, product_id: str, expected: int, new_value: int) -> bool:
        response = await self._request(
            operation,
            "PATCH",
            "/products",
            params={"id": f"eq.{product_id}", "stock": f"eq.{expected}"},
            json={"stock": new_value},
            headers={"Prefer": "return=representation"},
        )
        return bool(response.json())

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        for _ in range(self.cas_attempts):
            current = await self.fetch_stock(product_id)
            if current is None or current < quantity:
                return False
            if await self._swap_stock("decrement_stock", product_id, current, current - quantity):
                return True
            logger.debug("stock_cas_conflict", product_id=product_id, seen=current)

        # Persistent contention: another session keeps taking the units we saw.
        logger.warning("stock_cas_exhausted", product_id=product_id, attempts=self.cas_attempts)
        return False

    async def increment_stock(self, product_id: str, quantity: int) -> None:
        for _ in range(self.cas_attempts):
            current = await self.fetch_stock(product_id)
            if current is None:
                raise BackendUnavailableError("increment_stock", f"Product {product_id} not found")
            if await self._swap_stock("increment_stock", product_id, current, current + quantity):
                return
            logger.debug("stock_cas_conflict", product_id=product_id, seen=current)

        raise BackendUnavailableError("increment_stock", "Stock row kept changing")
