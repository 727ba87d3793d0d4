import os
from pathlib import Path

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from storefront.catalog.product import Product
from storefront.notifications import reset_sender, set_sender
from storefront.notifications.fake_adapter import FakeNotificationSender
from storefront.persistence import reset_backend, set_backend
from storefront.persistence.fake_adapter import FakeBackend
from storefront.services import build_services, reset_services


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def backend():
    fake = FakeBackend()
    set_backend(fake)
    reset_services()
    yield fake
    reset_backend()
    reset_services()


@pytest.fixture(autouse=True)
def notifier():
    sender = FakeNotificationSender()
    set_sender(sender)
    yield sender
    reset_sender()


@pytest.fixture()
def services(backend, notifier):
    return build_services(backend, notifier)


@pytest.fixture()
def make_product():
    def _make(product_id="prod-A", **overrides):
        fields = {
            "id": product_id,
            "name": f"Product {product_id}",
            "brand": "Lay's",
            "category": "Papas",
            "price": 2.5,
            "wholesale_price": 2.0,
            "min_order_quantity": 12,
            "stock": 100,
        }
        fields.update(overrides)
        return Product(**fields)

    return _make
