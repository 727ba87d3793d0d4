"""Application tests for MetricsAggregator."""

import pytest

from storefront.metrics.user_metrics import UserMetrics
from storefront.ordering.draft import DraftLine, OrderDraft

SHOPPER = "5a6b7c8d-1e2f-4a3b-9c4d-5e6f7a8b9c0d"


def _lines(*specs):
    return tuple(
        DraftLine(product_id=name.lower(), name=name, brand=brand, quantity=quantity, unit_price=1.0, subtotal=float(quantity))
        for name, brand, quantity in specs
    )


def _draft(user_id, total, lines):
    return OrderDraft(
        user_id=user_id,
        lines=lines,
        total=total,
        wholesale_total=total,
        savings=0.5,
        payment_method="cash",
        is_wholesale=False,
    )


class TestGet:
    def test_new_user_gets_zeroed_metrics_without_persisting(self, services):
        metrics = services.metrics.get("guest-new")

        assert metrics.total_orders == 0
        assert metrics.total_spent == 0.0
        assert metrics.top_products_list == []
        assert services.metrics._find("guest-new") is None


class TestRecordOrder:
    def test_records_and_persists(self, services):
        services.metrics.record_order("guest-1", 40.0, 2.0, _lines(("Chips", "Lay's", 12)))

        stored = services.metrics._find("guest-1")
        assert isinstance(stored, UserMetrics)
        assert stored.total_orders == 1
        assert stored.total_spent == 40.0
        assert stored.favorite_brand == "Lay's"

    def test_accumulates(self, services):
        services.metrics.record_order("guest-1", 40.0, 2.0, _lines(("Chips", "Lay's", 12)))
        services.metrics.record_order("guest-1", 20.0, 1.0, _lines(("Nachos", "Doritos", 24)))

        metrics = services.metrics.get("guest-1")
        assert metrics.total_orders == 2
        assert metrics.average_order_value == pytest.approx(30.0)
        assert metrics.favorite_brand == "Doritos"
        assert [entry["amount"] for entry in metrics.recent_activity_list] == [20.0, 40.0]


class TestReload:
    @pytest.mark.asyncio
    async def test_guest_reload_uses_local_history(self, services):
        await services.orders.create(_draft("guest-1", 30.0, _lines(("Chips", "Lay's", 12))))
        dropped = await services.orders.create(_draft("guest-1", 99.0, _lines(("Nachos", "Doritos", 12))))
        await services.orders.update_status(dropped, "cancelled")

        metrics = await services.metrics.reload("guest-1")

        assert metrics.total_orders == 1
        assert metrics.total_spent == pytest.approx(30.0)
        assert [p["name"] for p in metrics.top_products_list] == ["Chips"]
        assert services.metrics._find("guest-1") is not None

    @pytest.mark.asyncio
    async def test_shopper_reload_uses_remote_history(self, services, backend):
        await services.orders.create(_draft(SHOPPER, 30.0, _lines(("Chips", "Lay's", 12))))
        await services.orders.create(_draft(SHOPPER, 45.0, _lines(("Nachos", "Doritos", 12))))
        services.orders.clear()

        metrics = await services.metrics.reload(SHOPPER)

        assert "fetch_orders" in backend.calls
        assert metrics.total_orders == 2
        assert metrics.total_spent == pytest.approx(75.0)

    @pytest.mark.asyncio
    async def test_shopper_reload_includes_local_fallback_orders(self, services, backend):
        await services.orders.create(_draft(SHOPPER, 30.0, _lines(("Chips", "Lay's", 12))))
        backend.configure(failing_operations={"insert_order"})
        await services.orders.create(_draft(SHOPPER, 10.0, _lines(("Chips", "Lay's", 4))))
        backend.configure()

        metrics = await services.metrics.reload(SHOPPER)

        assert metrics.total_orders == 2
        assert metrics.total_spent == pytest.approx(40.0)

    @pytest.mark.asyncio
    async def test_local_cancellation_of_remote_order_is_excluded(self, services, backend):
        order_id = await services.orders.create(_draft(SHOPPER, 30.0, _lines(("Chips", "Lay's", 12))))
        backend.configure(failing_operations={"update_order_status"})
        await services.orders.update_status(order_id, "cancelled")
        backend.configure()

        metrics = await services.metrics.reload(SHOPPER)

        assert backend.orders[order_id]["status"] == "pending"
        assert metrics.total_orders == 0

    @pytest.mark.asyncio
    async def test_outage_keeps_current_metrics(self, services, backend):
        services.metrics.record_order(SHOPPER, 40.0, 2.0, _lines(("Chips", "Lay's", 12)))
        backend.configure(should_succeed=False)

        metrics = await services.metrics.reload(SHOPPER)

        assert metrics.total_orders == 1
        assert metrics.total_spent == 40.0


class TestReset:
    def test_reset_existing(self, services):
        services.metrics.record_order("guest-1", 40.0, 2.0, _lines(("Chips", "Lay's", 12)))

        assert services.metrics.reset("guest-1") is True
        assert services.metrics.get("guest-1").total_orders == 0

    def test_reset_missing(self, services):
        assert services.metrics.reset("guest-unknown") is False
