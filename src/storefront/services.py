"""Service wiring — builds the storefront services around one backend."""

from dataclasses import dataclass

from storefront.catalog.provider import Catalog
from storefront.checkout.service import CheckoutService
from storefront.inventory.ledger import StockLedger
from storefront.metrics.aggregator import MetricsAggregator
from storefront.notifications import get_sender
from storefront.notifications.port import NotificationSender
from storefront.ordering.store import OrderStore
from storefront.persistence import get_backend
from storefront.persistence.port import RemoteBackend


@dataclass
class Services:
    backend: RemoteBackend
    catalog: Catalog
    ledger: StockLedger
    metrics: MetricsAggregator
    orders: OrderStore
    checkout: CheckoutService


def build_services(backend: RemoteBackend | None = None, notifier: NotificationSender | None = None) -> Services:
    backend = backend or get_backend()
    notifier = notifier or get_sender()

    ledger = StockLedger(backend)
    metrics = MetricsAggregator(backend)
    orders = OrderStore(backend, ledger, metrics)
    return Services(
        backend=backend,
        catalog=Catalog(backend),
        ledger=ledger,
        metrics=metrics,
        orders=orders,
        checkout=CheckoutService(ledger, orders, metrics, notifier),
    )


_services_instance = None


def get_services() -> Services:
    """Return the process-wide services (singleton)."""
    global _services_instance
    if _services_instance is None:
        _services_instance = build_services()
    return _services_instance


def reset_services():
    """Reset the services singleton (useful for testing)."""
    global _services_instance
    _services_instance = None
