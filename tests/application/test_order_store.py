"""Application tests for OrderStore: remote-first creation, local fallback, status and cancellation."""

import re
from datetime import datetime

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.ordering.draft import DraftLine, OrderDraft
from storefront.ordering.order import OrderOrigin, OrderStatus
from storefront.persistence.identity import is_server_identity

SHOPPER = "3f1c2a9e-8b7d-4c6e-9a5f-1b2c3d4e5f60"
GUEST = "guest-7"
REMOTE_PRODUCT = "9b2e7c41-5d3a-4f6b-8e1c-2a3b4c5d6e7f"


def _draft(user_id=GUEST, product_id="prod-B", quantity=3, unit_price=2.0, **overrides):
    subtotal = quantity * unit_price
    fields = {
        "user_id": user_id,
        "lines": (
            DraftLine(
                product_id=product_id,
                name="Papas Clasicas",
                brand="Lay's",
                quantity=quantity,
                unit_price=unit_price,
                subtotal=subtotal,
            ),
        ),
        "total": subtotal + 15.0,
        "wholesale_total": subtotal,
        "savings": 1.5,
        "payment_method": "cash",
        "is_wholesale": True,
        "delivery_date": "2026-10-21",
        "delivery_time_slot": "09:00 - 12:00",
        "delivery_address": "Av. Principal 123",
    }
    fields.update(overrides)
    return OrderDraft(**fields)


class TestCreate:
    @pytest.mark.asyncio
    async def test_guest_orders_get_local_ids(self, services, backend):
        order_id = await services.orders.create(_draft())

        assert re.fullmatch(r"FL-\d{4}-\d{4}-\d{3}", order_id)
        assert "insert_order" not in backend.calls
        order = await services.orders.get_by_id(order_id)
        assert order.origin == OrderOrigin.LOCAL.value
        assert order.status == OrderStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_shopper_orders_go_remote(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))

        assert is_server_identity(order_id)
        assert order_id in backend.orders
        assert backend.items[order_id][0]["product_code"] == "prod-B"
        assert backend.items[order_id][0]["product_id"] is None

    @pytest.mark.asyncio
    async def test_remote_orders_are_cached_locally(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))
        backend.configure(should_succeed=False)

        order = await services.orders.get_by_id(order_id)

        assert order is not None
        assert order.origin == OrderOrigin.REMOTE.value
        assert order.order_number.startswith("ORD-")

    @pytest.mark.asyncio
    async def test_remote_item_rows_reference_server_products(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER, product_id=REMOTE_PRODUCT))

        assert backend.items[order_id][0]["product_id"] == REMOTE_PRODUCT

    @pytest.mark.asyncio
    async def test_falls_back_to_local_when_remote_is_down(self, services, backend):
        backend.configure(should_succeed=False)

        order_id = await services.orders.create(_draft(user_id=SHOPPER))

        assert order_id.startswith("FL-")
        assert backend.orders == {}

    @pytest.mark.asyncio
    async def test_item_failure_removes_remote_order_and_falls_back(self, services, backend):
        backend.configure(failing_operations={"insert_order_items"})

        order_id = await services.orders.create(_draft(user_id=SHOPPER))

        assert order_id.startswith("FL-")
        assert backend.orders == {}
        assert backend.items == {}

    @pytest.mark.asyncio
    async def test_create_does_not_touch_stock(self, services, make_product):
        services.ledger.sync([make_product("prod-B", stock=3)])

        await services.orders.create(_draft(quantity=3))

        assert services.ledger.get_available("prod-B") == 3


class TestLocalIds:
    def test_format(self, services):
        order_id = services.orders.local.next_id(datetime(2026, 3, 7))

        assert re.fullmatch(r"FL-2026-0307-\d{3}", order_id)


class TestReads:
    @pytest.mark.asyncio
    async def test_list_by_user_newest_first(self, services):
        first = await services.orders.create(_draft())
        second = await services.orders.create(_draft())

        orders = await services.orders.list_by_user(GUEST)

        assert [str(order.id) for order in orders] == [second, first]

    @pytest.mark.asyncio
    async def test_list_is_per_user(self, services):
        await services.orders.create(_draft(user_id="guest-1"))
        await services.orders.create(_draft(user_id="guest-2"))

        assert len(await services.orders.list_by_user("guest-1")) == 1

    @pytest.mark.asyncio
    async def test_list_falls_back_to_local_when_remote_is_down(self, services, backend):
        backend.configure(should_succeed=False)
        await services.orders.create(_draft(user_id=SHOPPER))

        orders = await services.orders.list_by_user(SHOPPER)

        assert len(orders) == 1
        assert orders[0].origin == OrderOrigin.LOCAL.value

    @pytest.mark.asyncio
    async def test_get_by_id_reads_remote_when_not_cached(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))
        services.orders.clear()

        order = await services.orders.get_by_id(order_id)

        assert order is not None
        assert "fetch_order" in backend.calls

    @pytest.mark.asyncio
    async def test_get_unknown_order(self, services):
        assert await services.orders.get_by_id("FL-2026-0101-000") is None

    @pytest.mark.asyncio
    async def test_clear(self, services):
        await services.orders.create(_draft())
        await services.orders.create(_draft())

        assert services.orders.clear() == 2
        assert await services.orders.list_by_user(GUEST) == []


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_status_change(self, services):
        order_id = await services.orders.create(_draft())

        order = await services.orders.update_status(order_id, OrderStatus.CONFIRMED)

        assert order.status == "confirmed"

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, services):
        order_id = await services.orders.create(_draft())

        with pytest.raises(ValidationError):
            await services.orders.update_status(order_id, "lost")

    @pytest.mark.asyncio
    async def test_unknown_order(self, services):
        with pytest.raises(ObjectNotFoundError):
            await services.orders.update_status("FL-2026-0101-000", "confirmed")

    @pytest.mark.asyncio
    async def test_remote_status_is_written(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))

        await services.orders.update_status(order_id, "shipped")

        assert backend.orders[order_id]["status"] == "shipped"

    @pytest.mark.asyncio
    async def test_remote_status_failure_still_updates_locally(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))
        backend.configure(failing_operations={"update_order_status"})

        order = await services.orders.update_status(order_id, "confirmed")

        assert order.status == "confirmed"
        assert backend.orders[order_id]["status"] == "pending"


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_releases_stock(self, services, make_product):
        services.ledger.sync([make_product("prod-B", stock=3)])
        assert await services.ledger.reserve("prod-B", 3)
        order_id = await services.orders.create(_draft(quantity=3))

        await services.orders.update_status(order_id, "cancelled")

        assert services.ledger.get_available("prod-B") == 3

    @pytest.mark.asyncio
    async def test_cancelling_twice_releases_once(self, services, make_product):
        services.ledger.sync([make_product("prod-B", stock=3)])
        assert await services.ledger.reserve("prod-B", 3)
        order_id = await services.orders.create(_draft(quantity=3))

        await services.orders.update_status(order_id, "cancelled")
        await services.orders.update_status(order_id, "cancelled")

        assert services.ledger.get_available("prod-B") == 3

    @pytest.mark.asyncio
    async def test_cancel_reloads_metrics(self, services):
        keep = _draft()
        drop = _draft(quantity=6)
        for draft in (keep, drop):
            services.metrics.record_order(GUEST, draft.total, draft.savings, draft.lines)
        await services.orders.create(keep)
        dropped_id = await services.orders.create(drop)

        await services.orders.update_status(dropped_id, "cancelled")

        metrics = services.metrics.get(GUEST)
        assert metrics.total_orders == 1
        assert metrics.total_spent == pytest.approx(keep.total)

    @pytest.mark.asyncio
    async def test_cancel_releases_remote_stock(self, services, backend, make_product):
        backend.seed_products([{"id": REMOTE_PRODUCT, "stock": 5}])
        services.ledger.sync([make_product(REMOTE_PRODUCT, stock=5)])
        assert await services.ledger.reserve(REMOTE_PRODUCT, 2)
        order_id = await services.orders.create(_draft(user_id=SHOPPER, product_id=REMOTE_PRODUCT, quantity=2))

        await services.orders.update_status(order_id, "cancelled")

        assert services.ledger.get_available(REMOTE_PRODUCT) == 5
        assert backend.products[REMOTE_PRODUCT]["stock"] == 5


class TestLargeHistory:
    @pytest.mark.asyncio
    async def test_every_order_is_listed_reloaded_and_cleared(self, services):
        for _ in range(105):
            await services.orders.create(_draft())

        assert len(await services.orders.list_by_user(GUEST)) == 105

        metrics = await services.metrics.reload(GUEST)
        assert metrics.total_orders == 105

        assert services.orders.clear() == 105
        assert await services.orders.list_by_user(GUEST) == []


class TestRemoteChangesElsewhere:
    @pytest.mark.asyncio
    async def test_get_by_id_sees_remote_status(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))
        backend.orders[order_id]["status"] = "shipped"

        order = await services.orders.get_by_id(order_id)

        assert order.status == "shipped"

    @pytest.mark.asyncio
    async def test_list_refreshes_cached_status(self, services, backend):
        order_id = await services.orders.create(_draft(user_id=SHOPPER))
        backend.orders[order_id]["status"] = "confirmed"

        orders = await services.orders.list_by_user(SHOPPER)
        backend.configure(should_succeed=False)

        assert [order.status for order in orders] == ["confirmed"]
        assert (await services.orders.get_by_id(order_id)).status == "confirmed"

    @pytest.mark.asyncio
    async def test_cancel_after_remote_cancellation_releases_once(self, services, backend, make_product):
        backend.seed_products([{"id": REMOTE_PRODUCT, "stock": 10}])
        services.ledger.sync([make_product(REMOTE_PRODUCT, stock=10)])
        assert await services.ledger.reserve(REMOTE_PRODUCT, 2)
        order_id = await services.orders.create(_draft(user_id=SHOPPER, product_id=REMOTE_PRODUCT, quantity=2))
        # Another session cancels the order and returns its stock
        backend.orders[order_id]["status"] = "cancelled"
        backend.products[REMOTE_PRODUCT]["stock"] += 2

        order = await services.orders.update_status(order_id, "cancelled")

        assert order.status == "cancelled"
        assert backend.products[REMOTE_PRODUCT]["stock"] == 10
        assert services.ledger.get_available(REMOTE_PRODUCT) == 8

    @pytest.mark.asyncio
    async def test_local_cancellation_survives_stale_remote_status(self, services, backend, make_product):
        services.ledger.sync([make_product("prod-B", stock=10)])
        assert await services.ledger.reserve("prod-B", 3)
        order_id = await services.orders.create(_draft(user_id=SHOPPER, quantity=3))
        backend.configure(failing_operations={"update_order_status"})
        await services.orders.update_status(order_id, "cancelled")
        backend.configure()

        order = await services.orders.update_status(order_id, "cancelled")

        assert order.status == "cancelled"
        assert services.ledger.get_available("prod-B") == 10
