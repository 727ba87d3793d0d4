"""Metrics aggregator — reads and maintains UserMetrics.

Completed orders are pushed in incrementally with ``record_order``.
Cancellations call ``reload``, which replays the user's order history: the
hosted order tables for shoppers with a server identity (plus any orders
that fell back to the local store), the local store for guests.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.metrics.user_metrics import UserMetrics
from storefront.ordering.order import OrderOrigin
from storefront.persistence.identity import is_server_identity
from storefront.persistence.port import BackendUnavailableError, RemoteBackend
from storefront.persistence.strategy import LocalOrderPersistence, RemoteOrderPersistence

logger = structlog.get_logger(__name__)


class MetricsAggregator:
    def __init__(self, backend: RemoteBackend):
        self.remote = RemoteOrderPersistence(backend)
        self.local = LocalOrderPersistence()

    @property
    def _repo(self):
        return current_domain.repository_for(UserMetrics)

    def _find(self, user_id) -> UserMetrics | None:
        try:
            return self._repo.get(str(user_id))
        except ObjectNotFoundError:
            return None

    def get(self, user_id) -> UserMetrics:
        """The user's metrics; a zero-valued, unsaved record when none exist yet."""
        return self._find(user_id) or UserMetrics.blank(str(user_id))

    def record_order(self, user_id, total, savings, lines) -> UserMetrics:
        metrics = self.get(user_id)
        metrics.apply_order(total, savings, lines)
        self._repo.add(metrics)
        logger.debug("metrics_order_recorded", user_id=str(user_id), total=total, total_orders=metrics.total_orders)
        return metrics

    async def reload(self, user_id) -> UserMetrics:
        """Recompute metrics from the user's non-cancelled orders.

        When the hosted order history cannot be read the current metrics
        are kept as they are.
        """
        user_id = str(user_id)
        metrics = self.get(user_id)
        local_orders = await self.local.list_for_user(user_id)

        if is_server_identity(user_id):
            try:
                remote_orders = await self.remote.list_for_user(user_id)
            except BackendUnavailableError as exc:
                logger.warning("metrics_reload_failed", user_id=user_id, reason=exc.reason)
                return metrics

            # A cancellation may have reached only the local copy of a remote order.
            cancelled_locally = {str(order.id) for order in local_orders if order.is_cancelled}
            orders = [order for order in remote_orders if str(order.id) not in cancelled_locally]
            orders += [order for order in local_orders if order.origin == OrderOrigin.LOCAL.value]
        else:
            orders = local_orders

        metrics.rebuild_from_history(orders)
        self._repo.add(metrics)
        logger.info("metrics_reloaded", user_id=user_id, orders=metrics.total_orders)
        return metrics

    def reset(self, user_id) -> bool:
        metrics = self._find(user_id)
        if metrics is None:
            return False
        self._repo._dao.delete(metrics)
        return True
