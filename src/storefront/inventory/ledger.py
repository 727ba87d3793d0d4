"""Stock ledger — product id to available quantity.

Stock is only *checked* while shoppers fill their carts and only *taken* at
checkout through ``reserve``. The local store is updated first and is
authoritative for this process; products with a server identity also have
every change pushed to the hosted catalog.

``reserve`` performs its local check and decrement without awaiting, so two
checkouts on the same event loop cannot both pass the check for the last
unit. Across processes the hosted catalog's conditional decrement is the
serialization point.
"""

from collections.abc import Iterable

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalog.product import Product
from storefront.inventory.stock import StockItem
from storefront.persistence.identity import is_server_identity
from storefront.persistence.port import BackendUnavailableError, RemoteBackend
from storefront.utils.query import fetch_all

logger = structlog.get_logger(__name__)


class StockLedger:
    def __init__(self, backend: RemoteBackend):
        self.backend = backend

    @property
    def _repo(self):
        return current_domain.repository_for(StockItem)

    def _find(self, product_id) -> StockItem | None:
        try:
            return self._repo.get(str(product_id))
        except ObjectNotFoundError:
            return None

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_available(self, product_id) -> int:
        item = self._find(product_id)
        return item.quantity if item else 0

    def is_available(self, product_id, quantity) -> bool:
        return self.get_available(product_id) >= quantity

    def snapshot(self) -> dict[str, int]:
        items = fetch_all(self._repo._dao.query)
        return {str(item.product_id): item.quantity for item in items}

    # -------------------------------------------------------------------
    # Reservation
    # -------------------------------------------------------------------
    async def reserve(self, product_id, quantity) -> bool:
        """Take ``quantity`` units of a product. Returns False if there are not enough."""
        reserved, _ = await self._reserve(product_id, quantity)
        return reserved

    async def _reserve(self, product_id, quantity) -> tuple[bool, bool]:
        """Reserve and report whether the hosted catalog was decremented too.

        Returns:
            (reserved, remote_applied)
        """
        product_id = str(product_id)
        item = self._find(product_id)
        if item is None or quantity < 1 or not item.can_cover(quantity):
            logger.info(
                "stock_reservation_rejected",
                product_id=product_id,
                requested=quantity,
                available=item.quantity if item else 0,
            )
            return False, False

        item.withdraw(quantity)
        self._repo.add(item)

        if not is_server_identity(product_id):
            return True, False

        try:
            accepted = await self.backend.decrement_stock(product_id, quantity)
        except BackendUnavailableError as exc:
            logger.warning(
                "remote_stock_decrement_failed",
                product_id=product_id,
                quantity=quantity,
                reason=exc.reason,
            )
            return True, False

        if not accepted:
            # Another session took the units on the hosted catalog first.
            item = self._find(product_id)
            item.restock(quantity)
            self._repo.add(item)
            logger.info("stock_reservation_lost_remote_race", product_id=product_id, requested=quantity)
            return False, False

        return True, True

    async def reserve_all(self, lines: Iterable[tuple[str, int]]) -> str | None:
        """Reserve several products as one unit.

        Lines reserved earlier in the same call are released again when a
        later line cannot be covered, so a failed call leaves stock as it
        found it.

        Returns:
            the product id that could not be reserved, or None on success
        """
        reserved: list[tuple[str, int, bool]] = []
        for product_id, quantity in lines:
            accepted, remote_applied = await self._reserve(product_id, quantity)
            if accepted:
                reserved.append((product_id, quantity, remote_applied))
                continue

            # Lines the hosted catalog never saw are only returned locally.
            for done_id, done_quantity, done_remote in reversed(reserved):
                await self._release(done_id, done_quantity, propagate=done_remote)
            if reserved:
                logger.info("stock_reservation_rolled_back", failed_product_id=product_id, released=len(reserved))
            return product_id

        return None

    async def release(self, product_id, quantity) -> None:
        """Return units to stock. The local increment is never rolled back."""
        await self._release(product_id, quantity)

    async def _release(self, product_id, quantity, propagate: bool = True) -> None:
        product_id = str(product_id)
        quantity = max(0, quantity)
        item = self._find(product_id)
        if item is None:
            item = StockItem.track(product_id, 0)
        item.restock(quantity)
        self._repo.add(item)

        if not propagate or not is_server_identity(product_id) or quantity == 0:
            return

        try:
            await self.backend.increment_stock(product_id, quantity)
        except BackendUnavailableError as exc:
            logger.warning(
                "remote_stock_increment_failed",
                product_id=product_id,
                quantity=quantity,
                reason=exc.reason,
            )

    # -------------------------------------------------------------------
    # Catalog reconciliation
    # -------------------------------------------------------------------
    def sync(self, products: Iterable[Product]) -> list[str]:
        """Start tracking catalog products the ledger does not know yet.

        Tracked quantities are left untouched so a catalog refresh never
        resets stock that has already been consumed.

        Returns:
            ids of the products added
        """
        added = []
        for product in products:
            if self._find(product.id) is None:
                self._repo.add(StockItem.track(product.id, product.stock))
                added.append(product.id)

        if added:
            logger.debug("stock_ledger_synced", added=added)
        return added

    def set_quantity(self, product_id, quantity) -> int:
        """Overwrite a product's available quantity (clamped at zero)."""
        item = self._find(product_id)
        if item is None:
            item = StockItem.track(str(product_id), quantity)
        else:
            item.correct(quantity)
        self._repo.add(item)
        return item.quantity

    async def refresh_from_remote(self, products: Iterable[Product]) -> dict[str, int]:
        """Pull hosted stock values for server-identity products.

        Remote values win over local ones; products that cannot be read are
        left as they are.
        """
        refreshed = {}
        for product in products:
            if not is_server_identity(product.id):
                continue
            try:
                remote = await self.backend.fetch_stock(product.id)
            except BackendUnavailableError as exc:
                logger.warning("remote_stock_refresh_failed", product_id=product.id, reason=exc.reason)
                continue
            if remote is None:
                continue

            item = self._find(product.id)
            if item is None:
                item = StockItem.track(product.id, remote)
            elif item.quantity != remote:
                item.correct(remote, source="remote")
            else:
                continue
            self._repo.add(item)
            refreshed[product.id] = item.quantity
        return refreshed
