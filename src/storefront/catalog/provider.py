"""Catalog provider — remote-preferred product listing with a local fallback."""

import structlog

from storefront.catalog.product import Product
from storefront.catalog.seed import SEED_PRODUCTS
from storefront.persistence.port import BackendUnavailableError, RemoteBackend

logger = structlog.get_logger(__name__)


class Catalog:
    def __init__(self, backend: RemoteBackend, fallback: list[dict] | None = None):
        self.backend = backend
        self.fallback = SEED_PRODUCTS if fallback is None else fallback

    async def list_products(self) -> list[Product]:
        try:
            records = await self.backend.fetch_products()
        except BackendUnavailableError as exc:
            logger.warning("catalog_fallback_to_local", reason=exc.reason)
            records = []

        if not records:
            records = self.fallback
        return [Product.from_record(record) for record in records]

    async def get_product(self, product_id: str) -> Product | None:
        return next((p for p in await self.list_products() if p.id == product_id), None)
