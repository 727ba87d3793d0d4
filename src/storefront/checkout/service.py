"""Checkout orchestrator — turns a validated cart into an order.

Sequence:
    1. validate the cart (nothing is touched when it fails)
    2. reserve stock for every line; a shortfall releases whatever this
       attempt already reserved and aborts without an order
    3. create the order
    4. record the order in the shopper's metrics
    5. schedule the confirmation notification (failure is only logged)
    6. clear and save the cart

A failure in step 3 or 4 leaves the reserved stock taken. It is reported as
``CheckoutIncompleteError`` for an operator to reconcile.
"""

import asyncio

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.checkout.errors import CartValidationError, CheckoutIncompleteError, InsufficientStockError
from storefront.inventory.ledger import StockLedger
from storefront.metrics.aggregator import MetricsAggregator
from storefront.notifications.port import NotificationSender
from storefront.ordering.draft import OrderDraft
from storefront.ordering.store import OrderStore
from storefront.session import Shopper

logger = structlog.get_logger(__name__)


class CheckoutService:
    def __init__(
        self,
        ledger: StockLedger,
        orders: OrderStore,
        metrics: MetricsAggregator,
        notifier: NotificationSender,
    ):
        self.ledger = ledger
        self.orders = orders
        self.metrics = metrics
        self.notifier = notifier
        self._pending_notifications: set[asyncio.Task] = set()

    async def checkout(self, cart: ShoppingCart, shopper: Shopper, payment_method: str) -> str:
        """Check out ``cart`` for ``shopper`` and return the new order id."""
        log = logger.bind(user_id=shopper.id)

        validation = cart.validate()
        if not validation.is_valid:
            log.info("checkout_rejected", errors=validation.errors)
            raise CartValidationError(validation.errors)

        reservations = [(str(line.product_id), line.quantity) for line in cart.lines]
        failed_product = await self.ledger.reserve_all(reservations)
        if failed_product is not None:
            requested = dict(reservations)[failed_product]
            available = self.ledger.get_available(failed_product)
            log.info("checkout_out_of_stock", product_id=failed_product, requested=requested, available=available)
            raise InsufficientStockError(failed_product, requested, available)

        draft = OrderDraft.from_cart(cart, shopper.id, payment_method)

        try:
            order_id = await self.orders.create(draft)
        except Exception as exc:
            log.error("checkout_order_failed_after_reservation", reserved=reservations, error=str(exc))
            raise CheckoutIncompleteError("order", reservations, cause=str(exc)) from exc

        try:
            self.metrics.record_order(shopper.id, draft.total, draft.savings, draft.lines)
        except Exception as exc:
            log.error(
                "checkout_metrics_failed_after_reservation",
                order_id=order_id,
                reserved=reservations,
                error=str(exc),
            )
            raise CheckoutIncompleteError("metrics", reservations, order_id=order_id, cause=str(exc)) from exc

        await self._schedule_confirmation(order_id, shopper)

        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)

        log.info("checkout_completed", order_id=order_id, total=draft.total, lines=len(draft.lines))
        return order_id

    # -------------------------------------------------------------------
    # Confirmation
    # -------------------------------------------------------------------
    async def _schedule_confirmation(self, order_id: str, shopper: Shopper):
        if not shopper.email:
            return

        order = await self.orders.get_by_id(order_id)
        if order is None:
            logger.warning("confirmation_order_missing", order_id=order_id)
            return

        logger.debug("confirmation_scheduled", order_id=order_id, items=order.item_count)
        task = asyncio.create_task(self._send_confirmation(order, shopper))
        self._pending_notifications.add(task)
        task.add_done_callback(self._pending_notifications.discard)

    async def _send_confirmation(self, order, shopper: Shopper) -> bool:
        try:
            sent = await self.notifier.send(order, shopper.email, shopper.name)
        except Exception as exc:
            logger.warning("confirmation_failed", order_id=str(order.id), error=str(exc))
            return False

        if not sent:
            logger.warning("confirmation_not_sent", order_id=str(order.id))
        return sent

    async def drain_notifications(self):
        """Wait for scheduled confirmations to finish (shutdown and tests)."""
        if self._pending_notifications:
            await asyncio.gather(*list(self._pending_notifications), return_exceptions=True)
