"""Order store — creates orders and moves them through their statuses.

Orders of shoppers with a server identity go to the hosted backend first and
are cached locally; any remote failure falls back to a local id and the
local store. Creating an order never touches stock: stock is reserved by
checkout before ``create`` is called, which keeps retried or fallen-back
creation free of double reservations.

Cancelling an order releases every line back to the stock ledger and then
recomputes the owner's metrics. These compensating steps run even when the
remote status write failed; status and compensation are best-effort
consistent, not transactional.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.inventory.ledger import StockLedger
from storefront.metrics.aggregator import MetricsAggregator
from storefront.ordering.draft import OrderDraft
from storefront.ordering.order import Order, OrderOrigin, OrderStatus
from storefront.persistence.identity import is_server_identity
from storefront.persistence.port import BackendUnavailableError, RemoteBackend
from storefront.persistence.strategy import LocalOrderPersistence, RemoteOrderPersistence, strategy_for

logger = structlog.get_logger(__name__)


class OrderPersistenceError(Exception):
    """Neither the remote nor the local store could record an order."""

    def __init__(self, user_id: str, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Could not persist order for {user_id}: {reason}")


class OrderStore:
    def __init__(self, backend: RemoteBackend, ledger: StockLedger, metrics: MetricsAggregator):
        self.ledger = ledger
        self.metrics = metrics
        self.remote = RemoteOrderPersistence(backend)
        self.local = LocalOrderPersistence()

    # -------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------
    async def create(self, draft: OrderDraft) -> str:
        """Persist a new order and return its id."""
        if strategy_for(draft.user_id, self.remote, self.local) is self.remote:
            order = await self._create_remote(draft)
            if order is not None:
                self.local.cache(order)
                logger.info("order_created", order_id=str(order.id), user_id=draft.user_id, origin="remote")
                return str(order.id)

        try:
            order = await self.local.save(draft)
        except Exception as exc:
            logger.error("order_local_persist_failed", user_id=draft.user_id, error=str(exc))
            raise OrderPersistenceError(draft.user_id, str(exc)) from exc

        logger.info("order_created", order_id=str(order.id), user_id=draft.user_id, origin="local")
        return str(order.id)

    async def _create_remote(self, draft: OrderDraft) -> Order | None:
        try:
            return await self.remote.save(draft)
        except BackendUnavailableError as exc:
            logger.warning("order_remote_create_failed", user_id=draft.user_id, reason=exc.reason)
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            # Unexpected response shape from the hosted tables.
            logger.warning("order_remote_create_failed", user_id=draft.user_id, reason=repr(exc))
        return None

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    async def update_status(self, order_id, status) -> Order:
        """Set an order's status; cancelling releases stock and reloads metrics."""
        status_value = status.value if isinstance(status, OrderStatus) else str(status)
        if status_value not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Unknown order status: {status_value}"]})

        order = await self.get_by_id(order_id)
        if order is None:
            raise ObjectNotFoundError(f"Order {order_id} not found")
        previous = order.status

        if order.origin == OrderOrigin.REMOTE.value:
            try:
                await self.remote.write_status(order, status_value)
            except BackendUnavailableError as exc:
                logger.warning("order_remote_status_failed", order_id=str(order_id), status=status_value, reason=exc.reason)

        await self.local.write_status(order, status_value)
        order = await self.local.fetch(order_id)
        logger.info("order_status_changed", order_id=str(order_id), previous=previous, status=status_value)

        if status_value == OrderStatus.CANCELLED.value and previous != OrderStatus.CANCELLED.value:
            await self._compensate_cancellation(order)

        return order

    async def _compensate_cancellation(self, order: Order):
        for line in order.lines:
            await self.ledger.release(line.product_id, line.quantity)

        try:
            await self.metrics.reload(order.user_id)
        except Exception as exc:
            logger.error("metrics_reload_after_cancel_failed", order_id=str(order.id), error=str(exc))

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    async def list_by_user(self, user_id) -> list[Order]:
        """The user's orders, newest first.

        For server identities the hosted history is read first and folded into
        the local store, so the result also carries orders that fell back to
        local storage. When the hosted store is down the local copies are used.
        """
        user_id = str(user_id)
        if is_server_identity(user_id):
            try:
                orders = await self.remote.list_for_user(user_id)
            except BackendUnavailableError as exc:
                logger.warning("order_remote_list_failed", user_id=user_id, reason=exc.reason)
                orders = []
            for order in orders:
                self.local.cache(order)

        return await self.local.list_for_user(user_id)

    async def get_by_id(self, order_id) -> Order | None:
        """An order by id. Remote orders are re-read so status changes made elsewhere show up."""
        if is_server_identity(order_id):
            try:
                order = await self.remote.fetch(str(order_id))
            except BackendUnavailableError as exc:
                logger.warning("order_remote_fetch_failed", order_id=str(order_id), reason=exc.reason)
                order = None
            if order is not None:
                self.local.cache(order)

        return await self.local.fetch(order_id)

    def clear(self) -> int:
        """Delete every locally stored order (debug/reset path)."""
        removed = self.local.clear()
        logger.warning("orders_cleared", removed=removed)
        return removed
