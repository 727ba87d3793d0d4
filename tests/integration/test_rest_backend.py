"""Integration tests for RestBackend against an in-process PostgREST double."""

import json

import httpx
import pytest

from storefront.persistence.port import BackendUnavailableError
from storefront.persistence.rest_adapter import RestBackend

pytestmark = pytest.mark.fast

PRODUCT = "7e6d5c4b-3a29-4180-9f7e-6d5c4b3a2918"


class PostgrestDouble:
    """Just enough of the PostgREST dialect for the adapter's requests."""

    def __init__(self):
        self.products = {PRODUCT: {"id": PRODUCT, "name": "Papas", "stock": 10, "is_active": True}}
        self.orders: dict[str, dict] = {}
        self.items: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.fail_paths: set[str] = set()
        # Number of conditional stock updates to lose to a concurrent writer
        self.lost_swaps = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/rest/v1")
        params = request.url.params
        if path in self.fail_paths:
            return httpx.Response(503, text="service unavailable")

        if path == "/products" and request.method == "GET":
            if "id" in params:
                row = self.products.get(params["id"].removeprefix("eq."))
                return httpx.Response(200, json=[{"stock": row["stock"]}] if row else [])
            return httpx.Response(200, json=list(self.products.values()))

        if path == "/products" and request.method == "PATCH":
            row = self.products.get(params["id"].removeprefix("eq."))
            expected = int(params["stock"].removeprefix("eq."))
            if self.lost_swaps:
                self.lost_swaps -= 1
                return httpx.Response(200, json=[])
            if row is None or row["stock"] != expected:
                return httpx.Response(200, json=[])
            row["stock"] = json.loads(request.content)["stock"]
            return httpx.Response(200, json=[row])

        if path == "/delivery_orders" and request.method == "POST":
            row = {**json.loads(request.content), "id": f"order-{len(self.orders) + 1}"}
            self.orders[row["id"]] = row
            return httpx.Response(201, json=[row])

        if path == "/delivery_orders" and request.method == "DELETE":
            self.orders.pop(params["id"].removeprefix("eq."), None)
            return httpx.Response(204)

        if path == "/delivery_orders" and request.method == "PATCH":
            self.orders[params["id"].removeprefix("eq.")].update(json.loads(request.content))
            return httpx.Response(204)

        if path == "/delivery_orders" and request.method == "GET":
            rows = [
                {**row, "order_items": [item for item in self.items if item["order_id"] == row["id"]]}
                for row in self.orders.values()
            ]
            return httpx.Response(200, json=rows)

        if path == "/order_items" and request.method == "POST":
            self.items.extend(json.loads(request.content))
            return httpx.Response(201)

        return httpx.Response(404)


@pytest.fixture()
def server():
    return PostgrestDouble()


@pytest.fixture()
def rest(server):
    return RestBackend("https://db.example.test", "anon-key", transport=httpx.MockTransport(server))


class TestConstruction:
    def test_requires_url_and_key(self):
        with pytest.raises(ValueError):
            RestBackend("", "anon-key")


class TestStock:
    @pytest.mark.asyncio
    async def test_fetch_stock(self, rest, server):
        assert await rest.fetch_stock(PRODUCT) == 10
        assert await rest.fetch_stock("missing") is None

        request = server.requests[0]
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_decrement_is_conditional(self, rest, server):
        assert await rest.decrement_stock(PRODUCT, 4) is True

        assert server.products[PRODUCT]["stock"] == 6
        patch = next(r for r in server.requests if r.method == "PATCH")
        assert patch.url.params["stock"] == "eq.10"

    @pytest.mark.asyncio
    async def test_decrement_refused_when_short(self, rest, server):
        assert await rest.decrement_stock(PRODUCT, 11) is False
        assert server.products[PRODUCT]["stock"] == 10

    @pytest.mark.asyncio
    async def test_decrement_retries_after_lost_swap(self, rest, server):
        server.lost_swaps = 1

        assert await rest.decrement_stock(PRODUCT, 4) is True
        assert server.products[PRODUCT]["stock"] == 6

    @pytest.mark.asyncio
    async def test_decrement_gives_up_under_contention(self, rest, server):
        server.lost_swaps = 10

        assert await rest.decrement_stock(PRODUCT, 4) is False
        assert server.products[PRODUCT]["stock"] == 10

    @pytest.mark.asyncio
    async def test_increment(self, rest, server):
        await rest.increment_stock(PRODUCT, 5)

        assert server.products[PRODUCT]["stock"] == 15

    @pytest.mark.asyncio
    async def test_increment_exhausted_raises(self, rest, server):
        server.lost_swaps = 10

        with pytest.raises(BackendUnavailableError):
            await rest.increment_stock(PRODUCT, 5)

    @pytest.mark.asyncio
    async def test_http_errors_become_unavailable(self, rest, server):
        server.fail_paths.add("/products")

        with pytest.raises(BackendUnavailableError) as exc_info:
            await rest.fetch_stock(PRODUCT)

        assert exc_info.value.operation == "fetch_stock"
        assert "503" in exc_info.value.reason


class TestOrders:
    @pytest.mark.asyncio
    async def test_insert_order_with_items(self, rest, server):
        created = await rest.insert_order({"created_by": "user-1", "total": 10.0}, [{"product_name": "Papas", "quantity": 2}])

        assert created["id"] == "order-1"
        assert created["order_number"].startswith("ORD-")
        assert server.items == [{"product_name": "Papas", "quantity": 2, "order_id": "order-1"}]

    @pytest.mark.asyncio
    async def test_item_failure_deletes_order(self, rest, server):
        server.fail_paths.add("/order_items")

        with pytest.raises(BackendUnavailableError):
            await rest.insert_order({"created_by": "user-1", "total": 10.0}, [{"product_name": "Papas", "quantity": 2}])

        assert server.orders == {}

    @pytest.mark.asyncio
    async def test_update_status_and_fetch(self, rest, server):
        created = await rest.insert_order({"created_by": "user-1", "total": 10.0}, [])

        await rest.update_order_status(created["id"], "confirmed")
        rows = await rest.fetch_orders("user-1")

        assert rows[0]["status"] == "confirmed"
        get = [r for r in server.requests if r.method == "GET"][-1]
        assert get.url.params["select"] == "*,order_items(*)"
        assert get.url.params["created_by"] == "eq.user-1"

    @pytest.mark.asyncio
    async def test_fetch_products(self, rest):
        products = await rest.fetch_products()

        assert [p["id"] for p in products] == [PRODUCT]
